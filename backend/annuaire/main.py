"""
Point d'entrée principal de l'API de l'annuaire des élèves.
Démarrage : uvicorn annuaire.main:app --reload
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from annuaire.config import settings
from annuaire.dependencies import create_controller, create_http_client
from annuaire.exceptions import LoadError
from annuaire.logging_config import setup_logging
from annuaire.routers import students

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Cycle de vie de l'application : ouvre le client HTTP, crée la liste
    des élèves et effectue le premier chargement (un échec n'empêche pas le démarrage).
    """
    setup_logging()
    async with create_http_client() as client:
        app.state.controller = create_controller(client)
        if settings.LOAD_ON_STARTUP:
            try:
                await app.state.controller.load()
            except LoadError as e:
                logger.warning("Premier chargement impossible, l'UI proposera de réessayer : %s", e.message)
        yield


app = FastAPI(
    title="Annuaire API",
    description="Gestion d'une liste d'élèves adossée à une API REST publique (mises à jour optimistes)",
    version="0.1.0",
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
    lifespan=lifespan,
)

# CORS : autorise tous les ports localhost en développement (à restreindre en production).
app.add_middleware(
    CORSMiddleware,
    allow_origins=[],
    allow_origin_regex=r"https?://(localhost|127\.0\.0\.1)(:\d+)?",
    allow_credentials=False,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Accept"],
)


app.include_router(students.router)


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
    return {"status": "ok", "service": "Annuaire API", "version": "0.1.0"}
