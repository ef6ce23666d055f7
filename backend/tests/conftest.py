"""
Configuration partagée pour tous les tests.

- client / anon_client : get_db remplacé par un MagicMock, aucune connexion à PostgreSQL
- db_session : vraie session SQLAlchemy sur SQLite en mémoire, pour les services
  dont le comportement dépend de la base (transactions, index unique partiel)
"""

import datetime as dt

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from unittest.mock import MagicMock

from portal_maintenance.database import Base, get_db
from portal_maintenance.dependencies import get_current_user
from portal_maintenance.main import app
from portal_maintenance.models.portal import Portal
from portal_maintenance.models.qr_code import QRCode
from portal_maintenance.models.user import User


def make_user(**kwargs) -> User:
    return User(
        id=kwargs.get("id", 1),
        email=kwargs.get("email", "jean.dupont@example.com"),
        password_hash=kwargs.get("password_hash", ""),
        first_name=kwargs.get("first_name", "Jean"),
        last_name=kwargs.get("last_name", "Dupont"),
        is_active=kwargs.get("is_active", True),
    )


@pytest.fixture
def user():
    return make_user()


@pytest.fixture
def client(user):
    """Client HTTP de test avec la BDD mockée et un technicien connecté."""
    mock_db = MagicMock()
    app.dependency_overrides[get_db] = lambda: mock_db
    app.dependency_overrides[get_current_user] = lambda: user
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def anon_client():
    """Client HTTP sans session : les routes protégées redirigent vers la connexion."""
    mock_db = MagicMock()
    app.dependency_overrides[get_db] = lambda: mock_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def db_session():
    """Session sur une base SQLite en mémoire, schéma créé depuis les modèles."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(engine)
        engine.dispose()


# --- Helpers d'insertion en base réelle ---

def add_user(db, email="jean.dupont@example.com", first_name="Jean", last_name="Dupont") -> User:
    u = User(email=email, password_hash="x", first_name=first_name, last_name=last_name, is_active=True)
    db.add(u)
    db.commit()
    return u


def add_portal(db, name="Portail Nord", **kwargs) -> Portal:
    portal = Portal(
        name=name,
        address_street=kwargs.get("address_street", "12 rue des Lilas"),
        address_zipcode=kwargs.get("address_zipcode", "75011"),
        address_city=kwargs.get("address_city", "Paris"),
        contractor_company=kwargs.get("contractor_company", "Portails & Co"),
        contact_phone=kwargs.get("contact_phone", "0102030405"),
        contact_email=kwargs.get("contact_email"),
        installation_date=kwargs.get("installation_date", dt.date(2020, 3, 15)),
    )
    db.add(portal)
    db.commit()
    return portal


def add_qr_code(db, status="available", portal_id=None) -> QRCode:
    qr = QRCode(status=status, portal_id=portal_id)
    db.add(qr)
    db.commit()
    return qr
