"""
API Routes
Progetto: Gestionale Servizi (Servizi di Ingegneria e Preventivi)

Modulo per l'aggregazione dei router versionati.
"""

from gestionale_servizi.api.v1 import api_v1_router

# Esportazione router
__all__ = ["api_v1_router"]
