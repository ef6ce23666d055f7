"""
Génération des lots de stickers QR code à imprimer.

Chaque sticker encode l'URL publique {base_url}/qr_codes/{uuid} ; le scan mène
à la fiche du portail une fois le sticker associé.
Les images sont écrites avant l'insertion en base ; si l'insertion échoue,
les images du lot sont supprimées pour ne pas imprimer de stickers orphelins.
"""

import io
import logging
import os
import uuid

import qrcode
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from portal_maintenance.errors import TransportError, ValidationError
from portal_maintenance.models.qr_code import STATUS_AVAILABLE, QRCode

logger = logging.getLogger(__name__)

QR_BORDER = 4


def qr_code_url(base_url: str, qr_code_uuid: str) -> str:
    return f"{base_url.rstrip('/')}/qr_codes/{qr_code_uuid}"


def generate_qr_image(data: str, size: int = 256) -> bytes:
    """Génère une image PNG (environ size × size pixels) du QR code encodant data."""
    qr = qrcode.QRCode(error_correction=qrcode.constants.ERROR_CORRECT_M, border=QR_BORDER)
    qr.add_data(data)
    qr.make(fit=True)
    # Taille d'un module calculée une fois la version connue
    qr.box_size = max(1, size // (qr.modules_count + 2 * QR_BORDER))
    img = qr.make_image(fill_color="black", back_color="white")
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def generate_qr_codes(
    db: Session,
    count: int,
    base_url: str,
    output_dir: str,
    size: int = 256,
) -> list[QRCode]:
    """
    Crée un lot de `count` stickers AVAILABLE : une image qr_<uuid>.png par sticker
    dans output_dir, puis toutes les lignes qr_codes en une seule transaction.
    """
    if count <= 0:
        raise ValidationError("Le nombre de QR codes doit être supérieur à 0.")
    if size <= 0:
        raise ValidationError("La taille des images doit être supérieure à 0.")

    os.makedirs(output_dir, exist_ok=True)

    codes = []
    written = []
    for i in range(count):
        qr_uuid = str(uuid.uuid4())
        path = os.path.join(output_dir, f"qr_{qr_uuid}.png")
        with open(path, "wb") as f:
            f.write(generate_qr_image(qr_code_url(base_url, qr_uuid), size=size))
        written.append(path)
        codes.append(QRCode(uuid=qr_uuid, status=STATUS_AVAILABLE))

        if (i + 1) % 10 == 0 or i + 1 == count:
            logger.info("%d/%d QR codes générés", i + 1, count)

    try:
        db.add_all(codes)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        for path in written:
            os.remove(path)
        logger.error("Échec de l'enregistrement du lot de QR codes : %s", exc)
        raise TransportError("Échec de l'enregistrement des QR codes en base.") from exc

    logger.info("Lot de %d QR codes enregistré (images dans %s)", len(codes), output_dir)
    return codes
