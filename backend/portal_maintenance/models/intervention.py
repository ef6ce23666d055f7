"""
Modèles SQLAlchemy pour les interventions de maintenance et leurs contrôles.

Une intervention est créée en une seule transaction avec ses contrôles,
puis n'est plus modifiée (hors suppression logique).
user_name est une copie du nom du technicien au moment de la création :
elle n'est jamais resynchronisée avec la table users (trace d'audit).
"""

from sqlalchemy import Boolean, Column, Date, DateTime, ForeignKey, Integer, String, Text, func
from sqlalchemy.orm import relationship

from portal_maintenance.database import Base

CONTROL_CATEGORY_SECURITY = "security"
CONTROL_CATEGORY_OTHER = "other"

# Ordre canonique : sécurité puis autres (ordre d'insertion et d'affichage du rapport)
CONTROL_TYPES_BY_CATEGORY = {
    CONTROL_CATEGORY_SECURITY: (
        "warning_lights",
        "area_lighting",
        "safety_cells",
        "pressure_bar",
        "floor_loop",
        "force_limiter",
        "safety_springs",
        "floor_markings",
    ),
    CONTROL_CATEGORY_OTHER: (
        "apron_condition",
        "horizontal_rails",
        "vertical_rails",
        "roller_condition",
        "drive_system",
        "limit_switches",
        "control_devices",
        "control_panel",
        "manual_override",
    ),
}

ALL_CONTROL_TYPES = (
    CONTROL_TYPES_BY_CATEGORY[CONTROL_CATEGORY_SECURITY]
    + CONTROL_TYPES_BY_CATEGORY[CONTROL_CATEGORY_OTHER]
)


def control_category(kind: str) -> str:
    """Retourne la catégorie (security / other) d'un type de contrôle."""
    for category, kinds in CONTROL_TYPES_BY_CATEGORY.items():
        if kind in kinds:
            return category
    raise KeyError(kind)


class Intervention(Base):
    """Passage de maintenance sur un portail."""
    __tablename__ = "interventions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    date = Column(Date, nullable=False)
    summary = Column(Text, nullable=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    user_name = Column(String(255), nullable=False)  # Snapshot, jamais mis à jour
    portal_id = Column(Integer, ForeignKey("portals.id"), nullable=False, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
    deleted_at = Column(DateTime(timezone=True), nullable=True, index=True)

    portal = relationship("Portal", lazy="joined")
    user = relationship("User")
    controls = relationship(
        "Control",
        order_by="Control.id",
        primaryjoin="and_(Control.intervention_id == Intervention.id, Control.deleted_at.is_(None))",
        viewonly=True,
    )


class Control(Base):
    """Un point de la checklist : True = conforme, False = non conforme, None = non contrôlé."""
    __tablename__ = "controls"

    id = Column(Integer, primary_key=True, autoincrement=True)
    kind = Column(String(50), nullable=False)  # Un des ALL_CONTROL_TYPES
    result = Column(Boolean, nullable=True)
    intervention_id = Column(
        Integer, ForeignKey("interventions.id", ondelete="CASCADE"), nullable=False, index=True
    )

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
    deleted_at = Column(DateTime(timezone=True), nullable=True)

    @property
    def category(self) -> str:
        return control_category(self.kind)
