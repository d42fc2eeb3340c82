"""
Schemas Pydantic per la Dashboard
Progetto: Gestionale Servizi (Servizi di Ingegneria e Preventivi)
"""

from decimal import Decimal

from pydantic import Field

from gestionale_servizi.schemas.common import CamelModel


class DashboardStats(CamelModel):
    """Contatori mostrati nella dashboard."""

    total_companies: int = Field(..., ge=0, description="Numero di aziende")
    active_services: int = Field(..., ge=0, description="Servizi in corso")
    total_quotes: int = Field(..., ge=0, description="Numero di preventivi")
    total_revenue: Decimal = Field(..., ge=0, description="Fatturato dei servizi conclusi")
