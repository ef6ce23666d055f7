"""
Schémas Pydantic pour les stickers QR code et leur association aux portails.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_validator


class QRCodeAssociate(BaseModel):
    """Corps de requête pour associer un sticker scanné à un portail."""
    qr_code_uuid: str

    @field_validator("qr_code_uuid")
    @classmethod
    def uuid_not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("L'UUID du QR code est obligatoire.")
        return v.strip().lower()


class QRCodeRetire(BaseModel):
    """Retrait administratif d'un sticker disponible (damaged ou lost)."""
    status: str


class QRCodeResponse(BaseModel):
    id: int
    uuid: str
    portal_id: Optional[int]
    status: str
    associated_at: Optional[datetime]
    generated_at: Optional[datetime]

    model_config = {"from_attributes": True}
