"""
Schémas Pydantic pour l'inscription et la connexion des techniciens.
Les règles (champs obligatoires, longueur du mot de passe) sont vérifiées
par auth_service pour renvoyer un message lisible plutôt qu'une erreur 422.
"""

from pydantic import BaseModel


class UserRegister(BaseModel):
    email: str = ""
    password: str = ""
    first_name: str = ""
    last_name: str = ""


class UserLogin(BaseModel):
    email: str = ""
    password: str = ""


class UserResponse(BaseModel):
    id: int
    email: str
    first_name: str
    last_name: str
    is_active: bool

    model_config = {"from_attributes": True}
