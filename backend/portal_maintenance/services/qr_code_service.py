"""
Service métier pour le cycle de vie des stickers QR code.

Règles :
- 1 portail = au plus 1 QR code associé
- seul un QR code AVAILABLE peut être associé
- la dissociation remet le sticker en AVAILABLE (réutilisable) ;
  la perte le passe en LOST. Ce sont deux opérations distinctes.

La vérification préalable ne suffit pas face à deux associations concurrentes :
l'UPDATE est conditionnel (WHERE status = 'available') et l'index unique partiel
uq_qr_codes_associated_portal refuse un second QR code associé au même portail.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from portal_maintenance.errors import ConflictError, NotFoundError, ValidationError
from portal_maintenance.models.portal import Portal
from portal_maintenance.models.qr_code import (
    STATUS_ASSOCIATED,
    STATUS_AVAILABLE,
    STATUS_DAMAGED,
    STATUS_LOST,
    QRCode,
)
from portal_maintenance.services.portal_service import get_portal

logger = logging.getLogger(__name__)

_UNAVAILABLE_REASONS = {
    STATUS_ASSOCIATED: "il est déjà associé à un portail",
    STATUS_DAMAGED: "il est déclaré endommagé",
    STATUS_LOST: "il est déclaré perdu",
}

RETIRED_STATUSES = (STATUS_DAMAGED, STATUS_LOST)


def get_qr_code(db: Session, qr_code_uuid: str) -> QRCode:
    """Retourne un QR code par son UUID, ou lève NotFoundError."""
    qr_code = db.execute(
        select(QRCode).where(QRCode.uuid == qr_code_uuid, QRCode.deleted_at.is_(None))
    ).scalar()
    if qr_code is None:
        raise NotFoundError(f"QR code {qr_code_uuid} introuvable.")
    return qr_code


def get_portal_qr_code(db: Session, portal_id: int) -> Optional[QRCode]:
    """Recherche souple : le QR code associé au portail, ou None s'il n'en a pas."""
    return db.execute(
        select(QRCode).where(
            QRCode.portal_id == portal_id,
            QRCode.status == STATUS_ASSOCIATED,
            QRCode.deleted_at.is_(None),
        )
    ).scalar()


def _portal_has_qr_code(db: Session, portal_id: int) -> bool:
    return get_portal_qr_code(db, portal_id) is not None


def associate_qr_code(db: Session, portal_id: int, qr_code_uuid: str) -> QRCode:
    """
    Associe un sticker disponible à un portail qui n'en a pas.

    Lève NotFoundError si le portail ou le QR code n'existe pas, ou si le QR code
    n'est pas AVAILABLE (le message donne la raison réelle).
    Lève ConflictError si le portail a déjà un QR code associé.
    """
    get_portal(db, portal_id)

    qr_code = get_qr_code(db, qr_code_uuid)
    if qr_code.status != STATUS_AVAILABLE:
        reason = _UNAVAILABLE_REASONS.get(qr_code.status, f"statut {qr_code.status}")
        raise NotFoundError(f"QR code {qr_code_uuid} non disponible : {reason}.")

    if _portal_has_qr_code(db, portal_id):
        raise ConflictError(f"Le portail {portal_id} a déjà un QR code associé.")

    try:
        result = db.execute(
            update(QRCode)
            .where(QRCode.id == qr_code.id, QRCode.status == STATUS_AVAILABLE)
            .values(
                portal_id=portal_id,
                status=STATUS_ASSOCIATED,
                associated_at=datetime.now(timezone.utc),
            )
        )
        if result.rowcount != 1:
            # Un autre appel a pris ce sticker entre la lecture et l'UPDATE
            db.rollback()
            raise NotFoundError(f"QR code {qr_code_uuid} non disponible : il vient d'être associé.")
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError(f"Le portail {portal_id} a déjà un QR code associé.")

    db.refresh(qr_code)
    logger.info("QR code %s associé au portail %s", qr_code_uuid, portal_id)
    return qr_code


def _detach_qr_code(db: Session, portal_id: int, new_status: str) -> QRCode:
    get_portal(db, portal_id)

    qr_code = get_portal_qr_code(db, portal_id)
    if qr_code is None:
        raise NotFoundError(f"Aucun QR code associé au portail {portal_id}.")

    qr_code.portal_id = None
    qr_code.associated_at = None
    qr_code.status = new_status
    db.commit()
    db.refresh(qr_code)
    return qr_code


def unassociate_qr_code(db: Session, portal_id: int) -> QRCode:
    """Dissocie le QR code du portail et le remet en AVAILABLE (sticker réutilisable)."""
    qr_code = _detach_qr_code(db, portal_id, STATUS_AVAILABLE)
    logger.info("QR code %s dissocié du portail %s", qr_code.uuid, portal_id)
    return qr_code


def mark_qr_code_lost(db: Session, portal_id: int) -> QRCode:
    """Dissocie le QR code du portail et le passe en LOST (sticker retiré du stock)."""
    qr_code = _detach_qr_code(db, portal_id, STATUS_LOST)
    logger.info("QR code %s du portail %s déclaré perdu", qr_code.uuid, portal_id)
    return qr_code


def retire_qr_code(db: Session, qr_code_uuid: str, status: str) -> QRCode:
    """
    Retrait administratif d'un sticker non associé : AVAILABLE → DAMAGED ou LOST.
    Un sticker associé doit passer par la fiche portail (dissociation ou perte).
    """
    if status not in RETIRED_STATUSES:
        raise ValidationError(f"Statut invalide. Valeurs acceptées : {', '.join(RETIRED_STATUSES)}")

    qr_code = get_qr_code(db, qr_code_uuid)
    if qr_code.status == STATUS_ASSOCIATED:
        raise ConflictError(
            f"Le QR code {qr_code_uuid} est associé au portail {qr_code.portal_id} : "
            "le dissocier depuis la fiche portail."
        )
    if qr_code.status != STATUS_AVAILABLE:
        raise ConflictError(f"Le QR code {qr_code_uuid} est déjà retiré (statut {qr_code.status}).")

    qr_code.status = status
    db.commit()
    db.refresh(qr_code)
    logger.info("QR code %s retiré (statut %s)", qr_code_uuid, status)
    return qr_code


def resolve_portal_from_qr_code(db: Session, qr_code_uuid: str) -> int:
    """
    Résout le portail d'un sticker scanné (lecture seule).
    Lève NotFoundError si le QR code n'existe pas, n'est pas associé,
    ou si son portail a été supprimé.
    """
    portal_id = db.execute(
        select(QRCode.portal_id)
        .join(Portal, Portal.id == QRCode.portal_id)
        .where(
            QRCode.uuid == qr_code_uuid,
            QRCode.status == STATUS_ASSOCIATED,
            Portal.deleted_at.is_(None),
        )
    ).scalar()
    if portal_id is None:
        raise NotFoundError(f"QR code {qr_code_uuid} introuvable ou non associé.")
    return portal_id
