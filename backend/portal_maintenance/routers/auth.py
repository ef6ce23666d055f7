"""
Router d'authentification des techniciens (session par cookie signé).
"""

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from portal_maintenance.database import get_db
from portal_maintenance.dependencies import SESSION_USER_KEY, get_current_user
from portal_maintenance.models.user import User
from portal_maintenance.schemas.auth import UserLogin, UserRegister, UserResponse
from portal_maintenance.services import auth_service

router = APIRouter(prefix="/api/v1/auth", tags=["Authentification"])


@router.post("/register", response_model=UserResponse, status_code=201,
             summary="Créer un compte technicien")
def register(data: UserRegister, db: Session = Depends(get_db)):
    """Crée un compte actif. Email unique, mot de passe de 8 caractères minimum."""
    return auth_service.register_user(db, data)


@router.post("/login", response_model=UserResponse, summary="Se connecter")
def login(data: UserLogin, request: Request, db: Session = Depends(get_db)):
    """Vérifie les identifiants et ouvre la session (cookie signé)."""
    user = auth_service.authenticate_user(db, data.email, data.password)
    if user is None:
        raise HTTPException(status_code=401, detail="Email ou mot de passe invalide.")

    request.session.clear()
    request.session[SESSION_USER_KEY] = user.id
    request.session["user_email"] = user.email
    return user


@router.post("/logout", status_code=204, summary="Se déconnecter")
def logout(request: Request):
    request.session.clear()


@router.get("/me", response_model=UserResponse, summary="Technicien connecté")
def me(user: User = Depends(get_current_user)):
    return user
