"""
Service métier pour les portails.
Création par un opérateur, édition depuis l'admin, suppression logique uniquement.
"""

import logging
from datetime import date, datetime, timezone

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from portal_maintenance.errors import ConflictError, NotFoundError, ValidationError
from portal_maintenance.models.portal import Portal
from portal_maintenance.models.qr_code import STATUS_ASSOCIATED, QRCode
from portal_maintenance.schemas.portal import PortalCreate, PortalUpdate

logger = logging.getLogger(__name__)

# Champs texte modifiés seulement s'ils sont fournis et non vides
_UPDATABLE_FIELDS = (
    "name",
    "address_street",
    "address_zipcode",
    "address_city",
    "contractor_company",
    "contact_phone",
)


def parse_iso_date(value: str, message: str = "Format de date invalide (attendu : AAAA-MM-JJ).") -> date:
    """Convertit une chaîne YYYY-MM-DD en date, lève ValidationError sinon."""
    try:
        text = value.strip()
        parsed = datetime.strptime(text, "%Y-%m-%d").date()
    except (AttributeError, ValueError):
        raise ValidationError(message)
    # strptime accepte "2024-5-2" : on exige les zéros de remplissage
    if parsed.isoformat() != text:
        raise ValidationError(message)
    return parsed


def create_portal(db: Session, data: PortalCreate) -> Portal:
    portal = Portal(
        name=data.name,
        internal_id=data.internal_id or None,
        address_street=data.address_street,
        address_zipcode=data.address_zipcode,
        address_city=data.address_city,
        contractor_company=data.contractor_company,
        contact_phone=data.contact_phone,
        contact_email=data.contact_email or None,
        installation_date=data.installation_date,
    )
    db.add(portal)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError(f"Un portail avec l'identifiant interne '{data.internal_id}' existe déjà.")
    db.refresh(portal)

    logger.info("Portail créé : %s (%s)", portal.name, portal.id)
    return portal


def list_portals(db: Session) -> list[Portal]:
    """Retourne les portails non supprimés, triés par nom."""
    return db.execute(
        select(Portal)
        .where(Portal.deleted_at.is_(None))
        .order_by(Portal.name)
    ).scalars().all()


def get_portal(db: Session, portal_id: int) -> Portal:
    """Retourne un portail actif, ou lève NotFoundError."""
    portal = db.execute(
        select(Portal).where(Portal.id == portal_id, Portal.deleted_at.is_(None))
    ).scalar()
    if portal is None:
        raise NotFoundError(f"Portail {portal_id} introuvable.")
    return portal


def update_portal(db: Session, portal_id: int, data: PortalUpdate) -> Portal:
    """
    Met à jour un portail depuis le formulaire d'édition admin.

    Un champ texte vide n'écrase pas la valeur existante, sauf contact_email
    qui est toujours repris tel quel (vide = effacé).
    """
    portal = get_portal(db, portal_id)

    if data.installation_date:
        portal.installation_date = parse_iso_date(
            data.installation_date, "Format de date d'installation invalide (attendu : AAAA-MM-JJ)."
        )

    for field in _UPDATABLE_FIELDS:
        value = getattr(data, field)
        if value is not None and value.strip():
            setattr(portal, field, value.strip())

    portal.contact_email = (data.contact_email or "").strip() or None

    db.commit()
    db.refresh(portal)
    logger.info("Portail %s mis à jour", portal_id)
    return portal


def soft_delete_portal(db: Session, portal_id: int) -> None:
    """
    Retire un portail (deleted_at = NOW()).
    Refusé tant qu'un QR code y est associé : le sticker doit d'abord être dissocié.
    """
    portal = get_portal(db, portal_id)

    associated = db.execute(
        select(func.count())
        .select_from(QRCode)
        .where(
            QRCode.portal_id == portal_id,
            QRCode.status == STATUS_ASSOCIATED,
            QRCode.deleted_at.is_(None),
        )
    ).scalar() or 0
    if associated:
        raise ConflictError("Impossible de supprimer un portail auquel un QR code est associé.")

    portal.deleted_at = datetime.now(timezone.utc)
    db.commit()
    logger.info("Portail %s supprimé (logique)", portal_id)
