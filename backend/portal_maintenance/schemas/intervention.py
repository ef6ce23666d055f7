"""
Schémas Pydantic pour les interventions et leurs contrôles.

Note : on importe datetime en tant que module (dt) pour éviter le conflit de nommage
entre le champ `date` et le type `datetime.date` dans Pydantic v2.
"""

import datetime as dt
from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel


class InterventionCreate(BaseModel):
    """
    Saisie d'une intervention depuis le formulaire technicien.

    date : chaîne YYYY-MM-DD, validée par le service (erreur 400 si invalide).
    controls : type de contrôle → True (conforme), False (non conforme),
    None ou absent (non renseigné, aucune ligne créée).
    """
    date: str
    summary: Optional[str] = None
    controls: Dict[str, Optional[bool]] = {}


class ControlResponse(BaseModel):
    id: int
    kind: str
    category: str
    result: Optional[bool]

    model_config = {"from_attributes": True}


class InterventionResponse(BaseModel):
    id: int
    date: dt.date
    summary: Optional[str]
    user_id: int
    user_name: str
    portal_id: int
    created_at: Optional[datetime]
    controls: List[ControlResponse] = []

    model_config = {"from_attributes": True}


class ReportSendResult(BaseModel):
    """Rapport d'envoi du PDF d'intervention par email."""
    intervention_id: int
    recipients: List[str]
