"""
Point d'entrée principal de l'API de maintenance des portails.
Démarrage : uvicorn portal_maintenance.main:app --reload
"""

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.sessions import SessionMiddleware

import portal_maintenance.models  # noqa: F401 : enregistre tous les modèles dans Base.metadata avant les routers
from portal_maintenance.config import settings
from portal_maintenance.errors import AppError, TransportError
from portal_maintenance.routers import auth, interventions, portals, qr_codes

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s : %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Portal Maintenance API",
    description="Suivi de maintenance des portails par stickers QR code",
    version="0.1.0",
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[],
    allow_origin_regex=r"https?://(localhost|127\.0\.0\.1)(:\d+)?",
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Accept"],
)

# Ajouté en dernier : enveloppe CORS, la session est donc lue avant les routers
app.add_middleware(
    SessionMiddleware,
    secret_key=settings.SECRET_KEY,
    session_cookie=settings.SESSION_COOKIE_NAME,
    max_age=settings.SESSION_MAX_AGE,
    same_site="lax",
    https_only=settings.SESSION_HTTPS_ONLY,
)


app.include_router(auth.router)
app.include_router(portals.router)
app.include_router(qr_codes.router)
app.include_router(qr_codes.public_router)
app.include_router(interventions.router)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Traduit les erreurs métier des services en statut HTTP (404, 409, 400, 502)."""
    if isinstance(exc, TransportError):
        # Le détail (hôte, statut amont) reste dans les logs
        logger.error("Erreur de service externe sur %s : %s", request.url.path, exc)
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": "Un service externe est indisponible. Réessayez plus tard."},
        )
    return JSONResponse(status_code=exc.status_code, content={"detail": str(exc)})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Intercepte toutes les exceptions non gérées pour garantir que la réponse 500
    passe bien par CORSMiddleware (qui injecte les headers CORS).
    """
    logger.error("Exception non gérée : %s", exc, exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"detail": "Une erreur interne est survenue."},
    )


@app.get("/api/health", tags=["Santé"])
def health_check():
    """Vérifie que l'API est opérationnelle."""
    return {"status": "ok", "service": "Portal Maintenance API", "version": "0.1.0"}
