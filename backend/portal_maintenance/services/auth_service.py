"""
Service d'inscription et d'authentification des techniciens.
Mots de passe hachés avec bcrypt ; la session elle-même est gérée par le cookie signé
(SessionMiddleware) dans le router auth.
"""

import logging
from typing import Optional

import bcrypt
from sqlalchemy import select
from sqlalchemy.orm import Session

from portal_maintenance.errors import ConflictError, ValidationError
from portal_maintenance.models.user import User
from portal_maintenance.schemas.auth import UserRegister

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8


def hash_password(password: str) -> str:
    # bcrypt limite l'entrée à 72 octets
    password_bytes = password.encode("utf-8")[:72]
    return bcrypt.hashpw(password_bytes, bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    if not password_hash:
        return False
    return bcrypt.checkpw(password.encode("utf-8")[:72], password_hash.encode("utf-8"))


def register_user(db: Session, data: UserRegister) -> User:
    """
    Crée un compte technicien actif.
    Lève ValidationError si un champ manque ou si le mot de passe est trop court,
    ConflictError si l'email est déjà utilisé.
    """
    email = data.email.strip().lower()
    first_name = data.first_name.strip()
    last_name = data.last_name.strip()

    if not (email and data.password and first_name and last_name):
        raise ValidationError("Tous les champs sont obligatoires.")
    if len(data.password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Le mot de passe doit contenir au moins {MIN_PASSWORD_LENGTH} caractères.")

    existing = db.execute(select(User).where(User.email == email)).scalar()
    if existing:
        raise ConflictError("Cet email est déjà utilisé.")

    user = User(
        email=email,
        password_hash=hash_password(data.password),
        first_name=first_name,
        last_name=last_name,
        is_active=True,
    )
    db.add(user)
    db.commit()
    db.refresh(user)

    logger.info("Utilisateur inscrit : %s (%s)", user.email, user.id)
    return user


def authenticate_user(db: Session, email: str, password: str) -> Optional[User]:
    """Retourne l'utilisateur actif correspondant aux identifiants, ou None."""
    if not email or not password:
        return None

    user = db.execute(
        select(User).where(User.email == email.strip().lower(), User.is_active.is_(True))
    ).scalar()
    if user is None or not verify_password(password, user.password_hash):
        logger.info("Échec de connexion pour %s", email)
        return None
    return user


def get_active_user(db: Session, user_id: int) -> Optional[User]:
    return db.execute(
        select(User).where(User.id == user_id, User.is_active.is_(True))
    ).scalar()
