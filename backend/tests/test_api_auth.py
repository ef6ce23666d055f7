"""
Tests d'intégration API pour l'authentification (session par cookie signé)
et la traduction des erreurs en statut HTTP.
"""

from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from conftest import make_user
from portal_maintenance.database import get_db
from portal_maintenance.dependencies import get_current_user
from portal_maintenance.errors import ConflictError, ValidationError
from portal_maintenance.main import app


def test_inscription(anon_client):
    with patch("portal_maintenance.routers.auth.auth_service.register_user") as mock:
        mock.return_value = make_user()
        response = anon_client.post("/api/v1/auth/register", json={
            "email": "jean.dupont@example.com",
            "password": "motdepasse",
            "first_name": "Jean",
            "last_name": "Dupont",
        })

    assert response.status_code == 201
    assert response.json()["email"] == "jean.dupont@example.com"
    assert "password_hash" not in response.json()


def test_inscription_email_existant(anon_client):
    with patch("portal_maintenance.routers.auth.auth_service.register_user") as mock:
        mock.side_effect = ConflictError("Cet email est déjà utilisé.")
        response = anon_client.post("/api/v1/auth/register", json={"email": "jean.dupont@example.com"})

    assert response.status_code == 409
    assert response.json()["detail"] == "Cet email est déjà utilisé."


def test_inscription_mot_de_passe_court(anon_client):
    with patch("portal_maintenance.routers.auth.auth_service.register_user") as mock:
        mock.side_effect = ValidationError("Le mot de passe doit contenir au moins 8 caractères.")
        response = anon_client.post("/api/v1/auth/register", json={"password": "court"})

    assert response.status_code == 400


def test_connexion_identifiants_invalides(anon_client):
    with patch("portal_maintenance.routers.auth.auth_service.authenticate_user", return_value=None):
        response = anon_client.post("/api/v1/auth/login", json={"email": "x@example.com", "password": "faux"})

    assert response.status_code == 401


def test_session_connexion_puis_deconnexion(anon_client):
    """Connexion → cookie de session → /me accessible ; déconnexion → redirection vers /login."""
    user = make_user()
    with patch("portal_maintenance.routers.auth.auth_service.authenticate_user", return_value=user), \
         patch("portal_maintenance.dependencies.get_active_user", return_value=user) as mock_active:
        login = anon_client.post("/api/v1/auth/login", json={
            "email": "jean.dupont@example.com",
            "password": "motdepasse",
        })
        me = anon_client.get("/api/v1/auth/me")

        assert login.status_code == 200
        assert me.status_code == 200
        assert me.json()["id"] == 1
        assert mock_active.call_args.args[1] == 1

        logout = anon_client.post("/api/v1/auth/logout")
        after = anon_client.get("/api/v1/auth/me", follow_redirects=False)

    assert logout.status_code == 204
    assert after.status_code == 303
    assert after.headers["location"] == "/login"


def test_session_utilisateur_desactive(anon_client):
    """Un cookie valide dont l'utilisateur n'est plus actif ne donne plus accès."""
    user = make_user()
    with patch("portal_maintenance.routers.auth.auth_service.authenticate_user", return_value=user):
        anon_client.post("/api/v1/auth/login", json={"email": "jean.dupont@example.com", "password": "motdepasse"})

    with patch("portal_maintenance.dependencies.get_active_user", return_value=None):
        response = anon_client.get("/api/v1/portals", follow_redirects=False)

    assert response.status_code == 303
    assert response.headers["location"] == "/login"


@pytest.mark.parametrize("path", [
    "/api/v1/portals",
    "/api/v1/portals/1",
    "/api/v1/interventions/1",
    "/api/v1/auth/me",
])
def test_routes_protegees_redirigent(anon_client, path):
    response = anon_client.get(path, follow_redirects=False)

    assert response.status_code == 303
    assert response.headers["location"] == "/login"


def test_health_public(anon_client):
    response = anon_client.get("/api/health")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_erreur_inattendue_500(user):
    """Exception non prévue → 500 avec un message générique."""
    app.dependency_overrides[get_db] = lambda: None
    app.dependency_overrides[get_current_user] = lambda: user
    try:
        with patch("portal_maintenance.routers.portals.portal_service.list_portals") as mock:
            mock.side_effect = RuntimeError("boom")
            with TestClient(app, raise_server_exceptions=False) as c:
                response = c.get("/api/v1/portals")
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 500
    assert response.json()["detail"] == "Une erreur interne est survenue."
