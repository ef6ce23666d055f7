"""
Schémas Pydantic pour les portails.

Note : on importe datetime en tant que module (dt) pour éviter le conflit de nommage
entre le champ `installation_date` et le type `datetime.date` dans Pydantic v2.
"""

import datetime as dt
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, field_validator

from portal_maintenance.schemas.intervention import InterventionResponse
from portal_maintenance.schemas.qr_code import QRCodeResponse


class PortalCreate(BaseModel):
    name: str
    address_street: str
    address_zipcode: str
    address_city: str
    contractor_company: str
    contact_phone: str
    contact_email: Optional[str] = None
    installation_date: dt.date
    internal_id: Optional[str] = None

    @field_validator(
        "name", "address_street", "address_zipcode", "address_city",
        "contractor_company", "contact_phone",
    )
    @classmethod
    def not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Ce champ ne peut pas être vide.")
        return v.strip()


class PortalUpdate(BaseModel):
    """
    Mise à jour partielle : un champ vide ou absent n'est pas modifié,
    sauf contact_email qui peut être effacé.
    installation_date reste une chaîne YYYY-MM-DD, validée par le service.
    """
    name: Optional[str] = None
    address_street: Optional[str] = None
    address_zipcode: Optional[str] = None
    address_city: Optional[str] = None
    contractor_company: Optional[str] = None
    contact_phone: Optional[str] = None
    contact_email: Optional[str] = None
    installation_date: Optional[str] = None


class PortalResponse(BaseModel):
    id: int
    uuid: str
    internal_id: Optional[str]
    name: str
    address_street: str
    address_zipcode: str
    address_city: str
    contractor_company: str
    contact_phone: str
    contact_email: Optional[str]
    installation_date: dt.date
    created_at: Optional[datetime]
    updated_at: Optional[datetime]

    model_config = {"from_attributes": True}


class PortalDetail(PortalResponse):
    """Fiche portail côté admin : QR code associé (ou null) et historique des interventions."""
    qr_code: Optional[QRCodeResponse] = None
    interventions: List[InterventionResponse] = []
