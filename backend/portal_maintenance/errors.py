"""
Taxonomie des erreurs métier levées par les services.

Les routers ne les interceptent pas un par un : main.py enregistre un handler
par type qui les traduit en statut HTTP (404, 409, 400, 502).
Toutes dérivent de ValueError, comme les erreurs métier historiques des services.
"""


class AppError(ValueError):
    """Erreur métier de base."""

    status_code = 400


class NotFoundError(AppError):
    """Entité absente, ou dans un état qui ne permet pas de la considérer présente."""

    status_code = 404


class ConflictError(AppError):
    """Violation d'un invariant (ex. portail déjà associé à un QR code)."""

    status_code = 409


class ValidationError(AppError):
    """Entrée mal formée (date invalide, champ obligatoire manquant...)."""

    status_code = 400


class TransportError(AppError):
    """Échec d'un appel aval : base de données, SMTP ou Gotenberg."""

    status_code = 502
