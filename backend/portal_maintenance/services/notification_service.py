"""
Service d'orchestration pour l'envoi du rapport d'intervention par email.

Flux :
  1. Charger l'intervention (portail, contrôles, technicien)
  2. Rendre le rapport HTML puis le convertir en PDF (Gotenberg)
  3. Écrire le PDF dans un fichier temporaire
  4. L'envoyer au technicien et au contact du portail (s'il est renseigné)
  5. Supprimer le fichier temporaire, que l'envoi ait réussi ou non

Aucune transaction commune entre PDF et email : un échec d'envoi n'annule rien
et peut être relancé via POST /interventions/{id}/send-report.
"""

import logging
import os
import tempfile

from sqlalchemy.orm import Session

from portal_maintenance.errors import ValidationError
from portal_maintenance.models.intervention import Intervention
from portal_maintenance.services.email_service import EmailService
from portal_maintenance.services.intervention_service import get_intervention
from portal_maintenance.services.pdf_service import GotenbergClient
from portal_maintenance.services.report_service import render_intervention_html
from portal_maintenance.services.translation_service import translate

logger = logging.getLogger(__name__)


def report_recipients(intervention: Intervention) -> list[str]:
    """Technicien ayant réalisé l'intervention, puis contact du portail, sans doublon."""
    recipients = []
    for address in (
        intervention.user.email if intervention.user else None,
        intervention.portal.contact_email,
    ):
        if address and address not in recipients:
            recipients.append(address)
    return recipients


def build_email_body(intervention: Intervention) -> str:
    lines = [
        translate("email.greeting"),
        "",
        translate("email.intro"),
        "",
        f"{translate('report.portal')} : {intervention.portal.name}",
        f"{translate('report.intervention_id')} : {intervention.id}",
        f"{translate('report.date')} : {intervention.date.strftime('%Y-%m-%d')}",
        f"{translate('report.technician')} : {intervention.user_name}",
    ]
    if intervention.summary:
        lines.append(f"{translate('report.summary')} : {intervention.summary}")
    lines += ["", translate("email.signature")]
    return "\n".join(lines)


def generate_report_pdf(intervention: Intervention, pdf_converter: GotenbergClient) -> bytes:
    return pdf_converter.convert_html_string(render_intervention_html(intervention))


def send_intervention_report(
    db: Session,
    intervention_id: int,
    email_service: EmailService,
    pdf_converter: GotenbergClient,
) -> list[str]:
    """
    Génère le PDF d'une intervention et l'envoie par email.
    Retourne la liste des destinataires.
    Lève NotFoundError, TransportError (Gotenberg/SMTP) ou ValidationError (destinataires).
    """
    intervention = get_intervention(db, intervention_id)
    recipients = report_recipients(intervention)
    if not recipients:
        raise ValidationError(f"Aucun destinataire pour le rapport de l'intervention {intervention.id}.")

    pdf_bytes = generate_report_pdf(intervention, pdf_converter)

    fd, pdf_path = tempfile.mkstemp(prefix=f"intervention_report_{intervention.id}_", suffix=".pdf")
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(pdf_bytes)

        email_service.send(
            recipients=recipients,
            subject=translate("email.subject", id=intervention.id, portal=intervention.portal.name),
            body=build_email_body(intervention),
            attachments=[pdf_path],
        )
    finally:
        os.remove(pdf_path)

    logger.info("Rapport de l'intervention %s envoyé à %s", intervention.id, ", ".join(recipients))
    return recipients
