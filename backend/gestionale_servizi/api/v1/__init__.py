"""
API v1 Routes
Progetto: Gestionale Servizi (Servizi di Ingegneria e Preventivi)

Router versione 1 dell'API.
"""

from fastapi import APIRouter

from gestionale_servizi.api.v1 import companies, dashboard, quotes, services
from gestionale_servizi.core.config import settings

# Router aggregato per v1
api_v1_router = APIRouter(prefix=settings.api_prefix)

# Includi i router dei moduli
api_v1_router.include_router(companies.router)
api_v1_router.include_router(services.router)
api_v1_router.include_router(quotes.router)
api_v1_router.include_router(dashboard.router)

# Esportazione
__all__ = ["api_v1_router"]
