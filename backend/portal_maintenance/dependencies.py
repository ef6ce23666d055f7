"""
Dépendances FastAPI partagées par les routers.
"""

from fastapi import Depends, HTTPException, Request
from sqlalchemy.orm import Session

from portal_maintenance.config import settings
from portal_maintenance.database import get_db
from portal_maintenance.models.user import User
from portal_maintenance.services.auth_service import get_active_user

SESSION_USER_KEY = "user_id"


def get_current_user(request: Request, db: Session = Depends(get_db)) -> User:
    """
    Technicien connecté, lu depuis le cookie de session signé.
    Sans session valide (absente, utilisateur supprimé ou désactivé),
    redirige vers la page de connexion.
    """
    user_id = request.session.get(SESSION_USER_KEY)
    user = get_active_user(db, user_id) if user_id else None
    if user is None:
        request.session.clear()
        raise HTTPException(status_code=303, headers={"Location": settings.LOGIN_URL})
    return user
