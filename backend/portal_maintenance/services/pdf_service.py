"""
Client Gotenberg : conversion HTML → PDF via Chromium headless.

Un seul appel HTTP par conversion (POST multipart), avec un timeout fixe.
Pas de retry : toute réponse non 200 ou erreur réseau lève TransportError.
"""

import logging
from typing import Mapping, Optional

import httpx

from portal_maintenance.config import settings
from portal_maintenance.errors import TransportError, ValidationError

logger = logging.getLogger(__name__)

CONVERT_HTML_PATH = "/forms/chromium/convert/html"

# A4, marges 0.4 pouce, arrière-plans imprimés
DEFAULT_PAGE_OPTIONS = {
    "paperWidth": "8.27",
    "paperHeight": "11.7",
    "marginTop": "0.4",
    "marginBottom": "0.4",
    "marginLeft": "0.4",
    "marginRight": "0.4",
    "printBackground": "true",
}


class GotenbergClient:
    """Convertisseur HTML → PDF adossé à un service Gotenberg."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport  # Injecté par les tests (httpx.MockTransport)

    def convert_html(
        self,
        files: Mapping[str, bytes],
        options: Optional[Mapping[str, str]] = None,
    ) -> bytes:
        """
        Envoie le document (index.html obligatoire) et ses ressources nommées,
        retourne les octets du PDF.
        """
        if "index.html" not in files:
            raise ValidationError("Le document principal index.html est obligatoire.")

        page_options = dict(DEFAULT_PAGE_OPTIONS)
        page_options.update(options or {})

        multipart = [
            ("files", (name, content, _content_type(name)))
            for name, content in files.items()
        ]

        try:
            with httpx.Client(timeout=self.timeout, transport=self._transport) as client:
                response = client.post(
                    f"{self.base_url}{CONVERT_HTML_PATH}",
                    data=page_options,
                    files=multipart,
                )
        except httpx.HTTPError as exc:
            logger.error("Gotenberg injoignable (%s) : %s", self.base_url, exc)
            raise TransportError("Le service de génération PDF est indisponible.") from exc

        if response.status_code != 200:
            logger.error("Gotenberg a répondu %s : %s", response.status_code, response.text[:200])
            raise TransportError(f"Échec de la génération PDF (statut {response.status_code}).")

        logger.info("PDF généré par Gotenberg (%d octets)", len(response.content))
        return response.content

    def convert_html_string(self, html: str, options: Optional[Mapping[str, str]] = None) -> bytes:
        return self.convert_html({"index.html": html.encode("utf-8")}, options)


def _content_type(filename: str) -> str:
    if filename.endswith(".html"):
        return "text/html"
    if filename.endswith(".css"):
        return "text/css"
    if filename.endswith(".png"):
        return "image/png"
    return "application/octet-stream"


def get_pdf_converter() -> GotenbergClient:
    """Dépendance FastAPI : convertisseur configuré depuis les settings (remplaçable en test)."""
    return GotenbergClient(settings.GOTENBERG_URL, timeout=settings.GOTENBERG_TIMEOUT)
