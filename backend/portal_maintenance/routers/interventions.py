"""
Router pour les interventions : consultation, suppression et rapport (HTML, PDF, email).
"""

from fastapi import APIRouter, Depends
from fastapi.responses import HTMLResponse, Response
from sqlalchemy.orm import Session

from portal_maintenance.database import get_db
from portal_maintenance.dependencies import get_current_user
from portal_maintenance.schemas.intervention import InterventionResponse, ReportSendResult
from portal_maintenance.services import intervention_service, notification_service
from portal_maintenance.services.email_service import EmailService, get_email_service
from portal_maintenance.services.pdf_service import GotenbergClient, get_pdf_converter
from portal_maintenance.services.report_service import render_intervention_html

router = APIRouter(
    prefix="/api/v1/interventions",
    tags=["Interventions"],
    dependencies=[Depends(get_current_user)],
)


@router.get("/{intervention_id}", response_model=InterventionResponse, summary="Détail d'une intervention")
def get_intervention(intervention_id: int, db: Session = Depends(get_db)):
    return intervention_service.get_intervention(db, intervention_id)


@router.delete("/{intervention_id}", status_code=204, summary="Supprimer une intervention")
def delete_intervention(intervention_id: int, db: Session = Depends(get_db)):
    """Suppression logique de l'intervention et de ses contrôles."""
    intervention_service.soft_delete_intervention(db, intervention_id)


@router.get("/{intervention_id}/report", response_class=HTMLResponse, summary="Rapport HTML")
def get_report_html(intervention_id: int, db: Session = Depends(get_db)):
    """Rapport imprimable (même rendu que le PDF envoyé par email)."""
    intervention = intervention_service.get_intervention(db, intervention_id)
    return HTMLResponse(render_intervention_html(intervention))


@router.get("/{intervention_id}/report.pdf", summary="Télécharger le rapport PDF")
def get_report_pdf(
    intervention_id: int,
    db: Session = Depends(get_db),
    pdf_converter: GotenbergClient = Depends(get_pdf_converter),
):
    intervention = intervention_service.get_intervention(db, intervention_id)
    pdf_bytes = notification_service.generate_report_pdf(intervention, pdf_converter)
    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": f'inline; filename="intervention_{intervention_id}.pdf"'},
    )


@router.post("/{intervention_id}/send-report", response_model=ReportSendResult,
             summary="Envoyer le rapport PDF par email")
def send_report(
    intervention_id: int,
    db: Session = Depends(get_db),
    email_service: EmailService = Depends(get_email_service),
    pdf_converter: GotenbergClient = Depends(get_pdf_converter),
):
    """
    Génère le PDF et l'envoie au technicien et au contact du portail.
    - 404 : intervention introuvable
    - 502 : Gotenberg ou serveur SMTP indisponible (l'envoi peut être relancé)
    """
    recipients = notification_service.send_intervention_report(
        db, intervention_id, email_service, pdf_converter,
    )
    return ReportSendResult(intervention_id=intervention_id, recipients=recipients)
