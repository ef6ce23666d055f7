"""
Router pour les stickers QR code : redirection publique après scan,
consultation et retrait administratif.
"""

from fastapi import APIRouter, Depends
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session

from portal_maintenance.database import get_db
from portal_maintenance.dependencies import get_current_user
from portal_maintenance.schemas.qr_code import QRCodeResponse, QRCodeRetire
from portal_maintenance.services import qr_code_service

# URL encodée dans les stickers imprimés : publique, sans authentification
public_router = APIRouter(tags=["Scan QR code"])

router = APIRouter(
    prefix="/api/v1/qr-codes",
    tags=["QR codes"],
    dependencies=[Depends(get_current_user)],
)


@public_router.get("/qr_codes/{qr_code_uuid}", summary="Ouvrir la fiche du portail d'un sticker scanné")
def scan_qr_code(qr_code_uuid: str, db: Session = Depends(get_db)):
    """Redirige (303) vers la fiche du portail associé, 404 si le sticker n'est pas associé."""
    portal_id = qr_code_service.resolve_portal_from_qr_code(db, qr_code_uuid.strip().lower())
    return RedirectResponse(url=f"/api/v1/portals/{portal_id}", status_code=303)


@router.get("/{qr_code_uuid}", response_model=QRCodeResponse, summary="Consulter un QR code")
def get_qr_code(qr_code_uuid: str, db: Session = Depends(get_db)):
    """Statut d'un sticker : utilisé avant association pour vérifier qu'il est disponible."""
    return qr_code_service.get_qr_code(db, qr_code_uuid.strip().lower())


@router.post("/{qr_code_uuid}/retire", response_model=QRCodeResponse,
             summary="Retirer un sticker du stock")
def retire_qr_code(qr_code_uuid: str, data: QRCodeRetire, db: Session = Depends(get_db)):
    """
    Retire un sticker disponible (statut damaged ou lost).
    - 400 : statut invalide
    - 409 : sticker associé ou déjà retiré
    """
    return qr_code_service.retire_qr_code(db, qr_code_uuid.strip().lower(), data.status)
