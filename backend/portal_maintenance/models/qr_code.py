"""
Modèle SQLAlchemy pour les stickers QR code imprimés.

Cycle de vie : AVAILABLE → ASSOCIATED → AVAILABLE (dissociation)
                                     → LOST      (sticker perdu)
               AVAILABLE → DAMAGED / LOST        (retrait administratif)

Les deux invariants sont portés par la base, pas seulement par le code :
- portal_id renseigné si et seulement si status = 'associated' (CHECK)
- au plus un QR code 'associated' par portail (index unique partiel)
"""

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Index, Integer, String, func, text

from portal_maintenance.database import Base
from portal_maintenance.models.portal import new_uuid

STATUS_AVAILABLE = "available"
STATUS_ASSOCIATED = "associated"
STATUS_DAMAGED = "damaged"
STATUS_LOST = "lost"

QR_CODE_STATUSES = (STATUS_AVAILABLE, STATUS_ASSOCIATED, STATUS_DAMAGED, STATUS_LOST)


class QRCode(Base):
    __tablename__ = "qr_codes"
    __table_args__ = (
        CheckConstraint(
            "status IN ('available', 'associated', 'damaged', 'lost')",
            name="ck_qr_codes_status",
        ),
        CheckConstraint(
            "(status = 'associated' AND portal_id IS NOT NULL) "
            "OR (status <> 'associated' AND portal_id IS NULL)",
            name="ck_qr_codes_portal_status",
        ),
        Index(
            "uq_qr_codes_associated_portal",
            "portal_id",
            unique=True,
            postgresql_where=text("status = 'associated'"),
            sqlite_where=text("status = 'associated'"),
        ),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    uuid = Column(String(36), unique=True, nullable=False, default=new_uuid)
    portal_id = Column(Integer, ForeignKey("portals.id"), nullable=True, index=True)
    status = Column(String(20), nullable=False, default=STATUS_AVAILABLE)
    associated_at = Column(DateTime(timezone=True), nullable=True)
    generated_at = Column(DateTime(timezone=True), server_default=func.now())

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
    deleted_at = Column(DateTime(timezone=True), nullable=True)
