"""
Tests du service d'authentification.
Couverture : hachage bcrypt, inscription, connexion.
"""

import pytest

from portal_maintenance.errors import ConflictError, ValidationError
from portal_maintenance.schemas.auth import UserRegister
from portal_maintenance.services.auth_service import (
    authenticate_user,
    get_active_user,
    hash_password,
    register_user,
    verify_password,
)


def make_register(**kwargs) -> UserRegister:
    data = {
        "email": "Marie.Curie@Example.com",
        "password": "motdepasse",
        "first_name": "Marie",
        "last_name": "Curie",
    }
    data.update(kwargs)
    return UserRegister(**data)


def test_hash_et_verification():
    hashed = hash_password("motdepasse")
    assert hashed != "motdepasse"
    assert verify_password("motdepasse", hashed)
    assert not verify_password("autre", hashed)
    assert not verify_password("motdepasse", "")


def test_inscription_email_normalise(db_session):
    user = register_user(db_session, make_register())

    assert user.email == "marie.curie@example.com"
    assert user.is_active is True
    assert user.full_name == "Marie Curie"


@pytest.mark.parametrize("field", ["email", "password", "first_name", "last_name"])
def test_inscription_champ_manquant(db_session, field):
    with pytest.raises(ValidationError, match="obligatoires"):
        register_user(db_session, make_register(**{field: ""}))


def test_inscription_mot_de_passe_trop_court(db_session):
    with pytest.raises(ValidationError, match="8 caractères"):
        register_user(db_session, make_register(password="court"))


def test_inscription_email_deja_utilise(db_session):
    register_user(db_session, make_register())
    with pytest.raises(ConflictError, match="déjà utilisé"):
        register_user(db_session, make_register(email="marie.curie@example.com"))


def test_connexion(db_session):
    user = register_user(db_session, make_register())

    assert authenticate_user(db_session, "MARIE.CURIE@example.com", "motdepasse").id == user.id
    assert authenticate_user(db_session, "marie.curie@example.com", "mauvais") is None
    assert authenticate_user(db_session, "", "") is None


def test_connexion_compte_desactive(db_session):
    user = register_user(db_session, make_register())
    user.is_active = False
    db_session.commit()

    assert authenticate_user(db_session, "marie.curie@example.com", "motdepasse") is None
    assert get_active_user(db_session, user.id) is None
