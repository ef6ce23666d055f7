"""
Router pour les portails : fiche admin, association des stickers QR code
et saisie des interventions.
"""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from portal_maintenance.database import get_db
from portal_maintenance.dependencies import get_current_user
from portal_maintenance.models.user import User
from portal_maintenance.schemas.intervention import InterventionCreate, InterventionResponse
from portal_maintenance.schemas.portal import PortalCreate, PortalDetail, PortalResponse, PortalUpdate
from portal_maintenance.schemas.qr_code import QRCodeAssociate, QRCodeResponse
from portal_maintenance.services import intervention_service, portal_service, qr_code_service

router = APIRouter(
    prefix="/api/v1/portals",
    tags=["Portails"],
    dependencies=[Depends(get_current_user)],
)


@router.get("", response_model=List[PortalResponse], summary="Lister les portails")
def list_portals(db: Session = Depends(get_db)):
    """Retourne les portails non supprimés, triés par nom."""
    return portal_service.list_portals(db)


@router.post("", response_model=PortalResponse, status_code=201, summary="Créer un portail")
def create_portal(data: PortalCreate, db: Session = Depends(get_db)):
    return portal_service.create_portal(db, data)


@router.get("/{portal_id}", response_model=PortalDetail, summary="Fiche d'un portail")
def get_portal(portal_id: int, db: Session = Depends(get_db)):
    """
    Fiche portail : informations, QR code associé (null si aucun)
    et historique des interventions (plus récente en premier).
    """
    portal = portal_service.get_portal(db, portal_id)
    qr_code = qr_code_service.get_portal_qr_code(db, portal_id)
    interventions = intervention_service.list_portal_interventions(db, portal_id)
    return PortalDetail(
        **PortalResponse.model_validate(portal).model_dump(),
        qr_code=QRCodeResponse.model_validate(qr_code) if qr_code else None,
        interventions=[InterventionResponse.model_validate(i) for i in interventions],
    )


@router.put("/{portal_id}", response_model=PortalResponse, summary="Modifier un portail")
def update_portal(portal_id: int, data: PortalUpdate, db: Session = Depends(get_db)):
    """Les champs vides ne sont pas modifiés, sauf contact_email (vide = effacé)."""
    return portal_service.update_portal(db, portal_id, data)


@router.delete("/{portal_id}", status_code=204, summary="Supprimer un portail")
def delete_portal(portal_id: int, db: Session = Depends(get_db)):
    """Suppression logique. Refusée (409) tant qu'un QR code est associé."""
    portal_service.soft_delete_portal(db, portal_id)


@router.post("/{portal_id}/qr-code/associate", response_model=QRCodeResponse,
             summary="Associer un sticker QR code au portail")
def associate_qr_code(portal_id: int, data: QRCodeAssociate, db: Session = Depends(get_db)):
    """
    Associe un sticker scanné au portail.

    - 404 : portail ou QR code introuvable, ou QR code non disponible
    - 409 : le portail a déjà un QR code associé
    """
    return qr_code_service.associate_qr_code(db, portal_id, data.qr_code_uuid)


@router.post("/{portal_id}/qr-code/remove", response_model=QRCodeResponse,
             summary="Dissocier le QR code du portail")
def remove_qr_code(portal_id: int, db: Session = Depends(get_db)):
    """Le sticker redevient disponible et peut être réassocié."""
    return qr_code_service.unassociate_qr_code(db, portal_id)


@router.post("/{portal_id}/qr-code/lost", response_model=QRCodeResponse,
             summary="Déclarer perdu le QR code du portail")
def mark_qr_code_lost(portal_id: int, db: Session = Depends(get_db)):
    """Le sticker est dissocié et retiré du stock (statut lost)."""
    return qr_code_service.mark_qr_code_lost(db, portal_id)


@router.post("/{portal_id}/interventions", response_model=InterventionResponse, status_code=201,
             summary="Enregistrer une intervention")
def create_intervention(
    portal_id: int,
    data: InterventionCreate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """
    Enregistre l'intervention du technicien connecté et ses contrôles,
    en une seule transaction.
    """
    return intervention_service.record_intervention(
        db, portal_id, user, data.date, summary=data.summary, controls=data.controls,
    )
