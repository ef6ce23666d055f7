"""
Modèle SQLAlchemy pour les portails (accès physiques sous contrat de maintenance).
Suppression logique uniquement : deleted_at renseigné = portail retiré.
Le QR code associé n'est pas stocké ici, il se déduit de qr_codes.portal_id.
"""

import uuid
from sqlalchemy import Column, Date, DateTime, Integer, String, func

from portal_maintenance.database import Base


def new_uuid() -> str:
    return str(uuid.uuid4())


class Portal(Base):
    __tablename__ = "portals"

    id = Column(Integer, primary_key=True, autoincrement=True)
    uuid = Column(String(36), unique=True, nullable=False, default=new_uuid)
    internal_id = Column(String(50), unique=True, nullable=True)
    name = Column(String(255), nullable=False)

    address_street = Column(String(255), nullable=False)
    address_zipcode = Column(String(10), nullable=False)
    address_city = Column(String(100), nullable=False)

    contractor_company = Column(String(255), nullable=False)
    contact_phone = Column(String(20), nullable=False)
    contact_email = Column(String(255), nullable=True)
    installation_date = Column(Date, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
    deleted_at = Column(DateTime(timezone=True), nullable=True, index=True)
