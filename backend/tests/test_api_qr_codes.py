"""
Tests d'intégration API pour les stickers QR code : scan public, consultation, retrait.
"""

from unittest.mock import patch

from portal_maintenance.errors import ConflictError, NotFoundError, ValidationError
from portal_maintenance.schemas.qr_code import QRCodeResponse

QR_UUID = "6f1c2b1e-2a53-4c1b-9d53-2f4f0a6b7c8d"


def make_qr_code(status="available", portal_id=None) -> QRCodeResponse:
    return QRCodeResponse(
        id=1,
        uuid=QR_UUID,
        portal_id=portal_id,
        status=status,
        associated_at=None,
        generated_at=None,
    )


# ============================================================
# GET /qr_codes/{uuid} : URL des stickers
# ============================================================

def test_scan_redirige_vers_portail(anon_client):
    """Le scan est public : pas de session requise, redirection 303 vers la fiche."""
    with patch("portal_maintenance.routers.qr_codes.qr_code_service.resolve_portal_from_qr_code") as mock:
        mock.return_value = 5
        response = anon_client.get(f"/qr_codes/{QR_UUID.upper()}", follow_redirects=False)

    assert response.status_code == 303
    assert response.headers["location"] == "/api/v1/portals/5"
    assert mock.call_args.args[1] == QR_UUID


def test_scan_qr_non_associe(anon_client):
    with patch("portal_maintenance.routers.qr_codes.qr_code_service.resolve_portal_from_qr_code") as mock:
        mock.side_effect = NotFoundError(f"QR code {QR_UUID} introuvable ou non associé.")
        response = anon_client.get(f"/qr_codes/{QR_UUID}", follow_redirects=False)

    assert response.status_code == 404
    assert "non associé" in response.json()["detail"]


# ============================================================
# /api/v1/qr-codes
# ============================================================

def test_consulter_qr(client):
    with patch("portal_maintenance.routers.qr_codes.qr_code_service.get_qr_code") as mock:
        mock.return_value = make_qr_code()
        response = client.get(f"/api/v1/qr-codes/{QR_UUID}")

    assert response.status_code == 200
    assert response.json()["status"] == "available"


def test_consulter_qr_sans_session(anon_client):
    response = anon_client.get(f"/api/v1/qr-codes/{QR_UUID}", follow_redirects=False)

    assert response.status_code == 303
    assert response.headers["location"] == "/login"


def test_retirer_qr(client):
    with patch("portal_maintenance.routers.qr_codes.qr_code_service.retire_qr_code") as mock:
        mock.return_value = make_qr_code(status="damaged")
        response = client.post(f"/api/v1/qr-codes/{QR_UUID}/retire", json={"status": "damaged"})

    assert response.status_code == 200
    assert response.json()["status"] == "damaged"


def test_retirer_qr_statut_invalide(client):
    with patch("portal_maintenance.routers.qr_codes.qr_code_service.retire_qr_code") as mock:
        mock.side_effect = ValidationError("Statut invalide. Valeurs acceptées : damaged, lost")
        response = client.post(f"/api/v1/qr-codes/{QR_UUID}/retire", json={"status": "broken"})

    assert response.status_code == 400


def test_retirer_qr_associe(client):
    with patch("portal_maintenance.routers.qr_codes.qr_code_service.retire_qr_code") as mock:
        mock.side_effect = ConflictError("Le QR code est associé au portail 1 : le dissocier depuis la fiche portail.")
        response = client.post(f"/api/v1/qr-codes/{QR_UUID}/retire", json={"status": "lost"})

    assert response.status_code == 409
