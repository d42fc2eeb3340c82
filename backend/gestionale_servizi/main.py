"""
Main Entry Point - FastAPI Application
Progetto: Gestionale Servizi (Servizi di Ingegneria e Preventivi)

Configura l'applicazione FastAPI con middleware, router, exception handler
e lifecycle.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from gestionale_servizi.api.v1 import api_v1_router
from gestionale_servizi.core.config import settings
from gestionale_servizi.core.database import close_db, init_db
from gestionale_servizi.core.exceptions import AppException, BusinessValidationError

# ------------------------------------------------------------
# Configurazione Logging
# ------------------------------------------------------------
logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


# ------------------------------------------------------------
# Lifespan Handler
# ------------------------------------------------------------
@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Gestisce il ciclo di vita dell'applicazione.

    - Startup: verifica la connessione al database
    - Shutdown: chiude le connessioni database
    """
    logger.info("Avvio %s v%s (%s)", settings.app_name, settings.app_version, settings.app_env)
    await init_db()
    logger.info("Applicazione avviata con successo")

    yield

    logger.info("Arresto applicazione in corso...")
    await close_db()
    logger.info("Applicazione arrestata")


# ------------------------------------------------------------
# FastAPI Application
# ------------------------------------------------------------
app = FastAPI(
    title=settings.app_name,
    description="Gestionale aziende, servizi di ingegneria e preventivi - Backend API",
    version=settings.app_version,
    lifespan=lifespan,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
)


# ------------------------------------------------------------
# Middleware CORS
# ------------------------------------------------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ------------------------------------------------------------
# Exception Handlers
# ------------------------------------------------------------
def _error_content(exc: AppException) -> dict:
    content = {"message": exc.detail, "errorCode": exc.error_code}
    if exc.extra:
        content.update(exc.extra)
    return content


@app.exception_handler(AppException)
async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """
    Gestore unico per tutte le eccezioni di dominio.

    Lo status HTTP e il codice errore sono definiti dalla classe
    dell'eccezione (vedi core/exceptions.py).
    """
    if exc.status_code >= 500:
        logger.error("%s %s -> %s: %s", request.method, request.url.path, exc.error_code, exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_content(exc),
    )


def _field_name(loc: tuple) -> str:
    parts = [str(p) for p in loc if p not in ("body", "query", "path")]
    return ".".join(parts) or "body"


@app.exception_handler(RequestValidationError)
async def request_validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """
    Gestore per gli errori di validazione dei payload.

    Converte gli errori Pydantic in HTTP 400 con la lista degli errori
    per campo, nello stesso formato di BusinessValidationError.
    """
    errors = []
    for error in exc.errors():
        message = str(error.get("msg", ""))
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        errors.append({"field": _field_name(tuple(error.get("loc", ()))), "message": message})

    validation_error = BusinessValidationError("Dati non validi", extra={"errors": errors})
    logger.info("Richiesta non valida %s %s: %s", request.method, request.url.path, errors)
    return JSONResponse(
        status_code=validation_error.status_code,
        content=_error_content(validation_error),
    )


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Gestore generico per tutte le eccezioni non catturate.

    Converte l'eccezione in risposta HTTP 500 e logga l'errore.
    """
    logger.error("Eccezione non gestita: %s", exc, exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"message": "Errore interno del server", "errorCode": "INTERNAL_SERVER_ERROR"},
    )


# ------------------------------------------------------------
# Endpoints
# ------------------------------------------------------------
@app.get(
    "/health",
    name="Health Check",
    summary="Controlla lo stato dell'applicazione",
    tags=["System"],
)
async def health_check() -> dict[str, str]:
    """
    Endpoint per il controllo dello stato di salute.

    Returns:
        dict: Stato dell'applicazione
    """
    return {
        "status": "healthy",
        "app": settings.app_name,
        "version": settings.app_version,
        "environment": settings.app_env,
    }


# ------------------------------------------------------------
# Router
# ------------------------------------------------------------
app.include_router(api_v1_router)
