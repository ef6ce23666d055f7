"""
Service d'envoi d'emails : rapports d'intervention PDF en pièce jointe.

Le reste de l'application dépend uniquement de l'interface EmailService.
Variantes : SMTPEmailService (Gmail ou tout serveur SMTP avec STARTTLS)
et MockEmailService (enregistre les envois, utilisée en test et en développement).
Aucun retry : un échec SMTP remonte en TransportError.
"""

import logging
import mimetypes
import os
import smtplib
from abc import ABC, abstractmethod
from email.mime.application import MIMEApplication
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import parseaddr
from typing import List, Optional, Sequence

from portal_maintenance.config import settings
from portal_maintenance.errors import TransportError, ValidationError

logger = logging.getLogger(__name__)


def validate_message(recipients: Sequence[str], subject: str, attachments: Sequence[str]) -> None:
    """Vérifie destinataires, sujet et pièces jointes avant tout envoi."""
    if not recipients:
        raise ValidationError("Au moins un destinataire est requis.")

    for recipient in recipients:
        _, address = parseaddr(recipient or "")
        if not address or "@" not in address or address.startswith("@") or address.endswith("@"):
            raise ValidationError(f"Adresse email invalide : {recipient!r}")

    if not subject or not subject.strip():
        raise ValidationError("Le sujet de l'email ne peut pas être vide.")

    for path in attachments:
        clean_path = os.path.normpath(path)
        if ".." in clean_path.split(os.sep):
            raise ValidationError(f"Chemin de pièce jointe invalide : {path}")
        if not os.path.isfile(clean_path):
            raise ValidationError(f"Pièce jointe introuvable : {path}")


class EmailService(ABC):
    """Capacité d'envoi d'email utilisée par le service de notification."""

    @abstractmethod
    def send(
        self,
        recipients: Sequence[str],
        subject: str,
        body: str,
        attachments: Sequence[str] = (),
    ) -> None:
        """Envoie un email texte, avec les fichiers donnés en pièces jointes."""


class SMTPEmailService(EmailService):
    def __init__(
        self,
        host: str,
        port: int,
        username: str = "",
        password: str = "",
        sender: str = "",
        use_tls: bool = True,
        timeout: float = 30.0,
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.sender = sender or username  # Par défaut, l'expéditeur est le compte SMTP
        self.use_tls = use_tls
        self.timeout = timeout

    @classmethod
    def from_settings(cls) -> "SMTPEmailService":
        return cls(
            host=settings.SMTP_HOST,
            port=settings.SMTP_PORT,
            username=settings.SMTP_USERNAME,
            password=settings.SMTP_PASSWORD,
            sender=settings.SMTP_FROM,
            use_tls=settings.SMTP_USE_TLS,
            timeout=settings.SMTP_TIMEOUT,
        )

    def build_message(
        self,
        recipients: Sequence[str],
        subject: str,
        body: str,
        attachments: Sequence[str] = (),
    ) -> MIMEMultipart:
        msg = MIMEMultipart("mixed")
        msg["From"] = self.sender
        msg["To"] = ", ".join(recipients)
        msg["Subject"] = subject
        msg.attach(MIMEText(body, "plain", "utf-8"))

        for path in attachments:
            content_type, _ = mimetypes.guess_type(path)
            _, subtype = (content_type or "application/octet-stream").split("/", 1)
            with open(path, "rb") as f:
                part = MIMEApplication(f.read(), _subtype=subtype)
            part.add_header("Content-Disposition", "attachment", filename=os.path.basename(path))
            msg.attach(part)

        return msg

    def send(
        self,
        recipients: Sequence[str],
        subject: str,
        body: str,
        attachments: Sequence[str] = (),
    ) -> None:
        validate_message(recipients, subject, attachments)
        msg = self.build_message(recipients, subject, body, attachments)

        try:
            with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as server:
                if self.use_tls:
                    server.starttls()
                if self.username:
                    server.login(self.username, self.password)
                server.send_message(msg)
        except (smtplib.SMTPException, OSError) as exc:
            logger.error("Échec de l'envoi SMTP vers %s : %s", ", ".join(recipients), exc)
            raise TransportError("L'envoi de l'email a échoué.") from exc

        logger.info("Email « %s » envoyé à %s", subject, ", ".join(recipients))


class SentEmail:
    """Trace d'un envoi enregistré par MockEmailService."""

    def __init__(self, recipients: Sequence[str], subject: str, body: str, attachments: Sequence[str]):
        self.recipients = list(recipients)
        self.subject = subject
        self.body = body
        self.attachments = list(attachments)


class MockEmailService(EmailService):
    """Enregistre les envois au lieu de contacter un serveur ; peut simuler un échec."""

    def __init__(self, should_fail: bool = False, error: Optional[Exception] = None):
        self.should_fail = should_fail
        self.error = error
        self.sent: List[SentEmail] = []

    def send(
        self,
        recipients: Sequence[str],
        subject: str,
        body: str,
        attachments: Sequence[str] = (),
    ) -> None:
        validate_message(recipients, subject, attachments)
        self.sent.append(SentEmail(recipients, subject, body, attachments))

        if self.should_fail:
            raise self.error or TransportError("Échec d'envoi simulé.")

        logger.info("[mock] Email « %s » pour %s", subject, ", ".join(recipients))


def get_email_service() -> EmailService:
    """Dépendance FastAPI : transport choisi par EMAIL_BACKEND (smtp ou mock)."""
    if settings.EMAIL_BACKEND == "mock":
        return MockEmailService()
    return SMTPEmailService.from_settings()
