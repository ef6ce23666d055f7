"""
Service métier pour les interventions de maintenance.

Une intervention et ses contrôles sont écrits dans une seule transaction :
si une insertion échoue, rien n'est visible (ni intervention, ni contrôle partiel).
Seuls les contrôles effectivement renseignés (True/False) produisent une ligne.
"""

import logging
from datetime import datetime, timezone
from typing import Mapping, Optional

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from portal_maintenance.errors import NotFoundError, TransportError, ValidationError
from portal_maintenance.models.intervention import ALL_CONTROL_TYPES, Control, Intervention
from portal_maintenance.models.user import User
from portal_maintenance.services.portal_service import get_portal, parse_iso_date

logger = logging.getLogger(__name__)


def _new_control(intervention_id: int, kind: str, result: bool) -> Control:
    return Control(kind=kind, result=result, intervention_id=intervention_id)


def record_intervention(
    db: Session,
    portal_id: int,
    user: User,
    date: str,
    summary: Optional[str] = None,
    controls: Optional[Mapping[str, Optional[bool]]] = None,
) -> Intervention:
    """
    Enregistre une intervention et ses contrôles.

    Validations :
    1. La date respecte le format AAAA-MM-JJ
    2. Chaque contrôle fourni fait partie de la liste fixe des types
    3. Le portail existe

    Le nom du technicien est figé dans user_name au moment de la création.
    Lève TransportError (après rollback complet) si une écriture échoue.
    """
    intervention_date = parse_iso_date(date)

    selections = dict(controls or {})
    unknown = sorted(set(selections) - set(ALL_CONTROL_TYPES))
    if unknown:
        raise ValidationError(f"Type(s) de contrôle inconnu(s) : {', '.join(unknown)}.")

    get_portal(db, portal_id)

    intervention = Intervention(
        date=intervention_date,
        summary=(summary or "").strip() or None,
        user_id=user.id,
        user_name=user.full_name,
        portal_id=portal_id,
    )

    try:
        db.add(intervention)
        db.flush()  # Obtenir l'ID avant d'insérer les contrôles

        # Ordre canonique (sécurité puis autres) ; None = non renseigné, aucune ligne
        created = 0
        for kind in ALL_CONTROL_TYPES:
            result = selections.get(kind)
            if result is None:
                continue
            db.add(_new_control(intervention.id, kind, result))
            created += 1

        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Échec de l'enregistrement de l'intervention sur le portail %s : %s", portal_id, exc)
        raise TransportError("Échec de l'enregistrement de l'intervention.") from exc

    db.refresh(intervention)
    logger.info(
        "Intervention %s enregistrée sur le portail %s par %s (%d contrôle(s))",
        intervention.id, portal_id, intervention.user_name, created,
    )
    return intervention


def get_intervention(db: Session, intervention_id: int) -> Intervention:
    """Retourne une intervention non supprimée (avec portail et contrôles), ou lève NotFoundError."""
    intervention = db.execute(
        select(Intervention).where(
            Intervention.id == intervention_id,
            Intervention.deleted_at.is_(None),
        )
    ).scalar()
    if intervention is None:
        raise NotFoundError(f"Intervention {intervention_id} introuvable.")
    return intervention


def list_portal_interventions(db: Session, portal_id: int) -> list[Intervention]:
    """Historique des interventions d'un portail, de la plus récente à la plus ancienne."""
    return db.execute(
        select(Intervention)
        .where(
            Intervention.portal_id == portal_id,
            Intervention.deleted_at.is_(None),
        )
        .order_by(Intervention.date.desc(), Intervention.id.desc())
    ).scalars().all()


def soft_delete_intervention(db: Session, intervention_id: int) -> None:
    """Suppression logique de l'intervention et de ses contrôles."""
    intervention = get_intervention(db, intervention_id)
    now = datetime.now(timezone.utc)

    intervention.deleted_at = now
    db.execute(
        update(Control)
        .where(Control.intervention_id == intervention_id, Control.deleted_at.is_(None))
        .values(deleted_at=now)
        .execution_options(synchronize_session=False)
    )
    db.commit()
    logger.info("Intervention %s supprimée (logique)", intervention_id)
