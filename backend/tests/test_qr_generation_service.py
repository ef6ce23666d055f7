"""
Tests de la génération des lots de stickers QR code et de la commande portal-qr-generate.
"""

import os
from unittest.mock import MagicMock, patch

import pytest
from click.testing import CliRunner
from sqlalchemy.exc import OperationalError

from portal_maintenance.cli import generate_qr
from portal_maintenance.errors import TransportError, ValidationError
from portal_maintenance.models.qr_code import QRCode
from portal_maintenance.services.qr_generation_service import (
    generate_qr_codes,
    generate_qr_image,
    qr_code_url,
)


def test_url_encodee():
    assert qr_code_url("https://maintenance.example.com/", "abc") == "https://maintenance.example.com/qr_codes/abc"


def test_image_png():
    """La génération d'image QR doit retourner un PNG valide."""
    result = generate_qr_image("https://maintenance.example.com/qr_codes/abc")
    assert result[:8] == b"\x89PNG\r\n\x1a\n"


def test_lot_genere(db_session, tmp_path):
    output = tmp_path / "stickers"

    codes = generate_qr_codes(db_session, 3, "http://localhost:8080", str(output), size=128)

    assert len(codes) == 3
    assert {c.status for c in db_session.query(QRCode).all()} == {"available"}
    files = sorted(os.listdir(output))
    assert files == sorted(f"qr_{c.uuid}.png" for c in codes)


@pytest.mark.parametrize("count, size", [(0, 256), (-1, 256), (2, 0)])
def test_lot_parametres_invalides(db_session, tmp_path, count, size):
    with pytest.raises(ValidationError):
        generate_qr_codes(db_session, count, "http://localhost:8080", str(tmp_path), size=size)


def test_lot_echec_base_supprime_les_images(tmp_path):
    db = MagicMock()
    db.commit.side_effect = OperationalError("INSERT", {}, Exception("base indisponible"))

    with pytest.raises(TransportError):
        generate_qr_codes(db, 2, "http://localhost:8080", str(tmp_path))

    db.rollback.assert_called_once()
    assert os.listdir(tmp_path) == []


def test_commande_generation(tmp_path):
    with patch("portal_maintenance.database.SessionLocal") as mock_session, \
         patch("portal_maintenance.services.qr_generation_service.generate_qr_codes") as mock_generate:
        mock_generate.return_value = [QRCode(), QRCode()]
        result = CliRunner().invoke(generate_qr, [
            "--count", "2", "--url", "https://maintenance.example.com", "--output", str(tmp_path),
        ])

    assert result.exit_code == 0, result.output
    assert "2 QR code(s)" in result.output
    mock_generate.assert_called_once_with(
        mock_session.return_value, 2, "https://maintenance.example.com", str(tmp_path), size=256,
    )
    mock_session.return_value.close.assert_called_once()


def test_commande_generation_compte_invalide(tmp_path):
    with patch("portal_maintenance.database.SessionLocal"):
        result = CliRunner().invoke(generate_qr, ["--count", "0", "--output", str(tmp_path)])

    assert result.exit_code != 0
    assert "supérieur à 0" in result.output
