"""
Service Layer per la Dashboard
Progetto: Gestionale Servizi (Servizi di Ingegneria e Preventivi)
"""

import logging
from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from gestionale_servizi.models import Company, Quote, Service
from gestionale_servizi.schemas.dashboard import DashboardStats
from gestionale_servizi.schemas.quote import to_cents
from gestionale_servizi.schemas.service import ServiceStatus

# Logger per questo modulo
logger = logging.getLogger(__name__)


class DashboardService:
    """Statistiche aggregate per la dashboard."""

    async def get_stats(self, db: AsyncSession) -> DashboardStats:
        """
        Calcola i contatori della dashboard.

        - total_companies: numero di aziende
        - active_services: servizi in corso
        - total_quotes: numero di preventivi
        - total_revenue: somma dei valori dei servizi conclusi (0 se nessuno)
        """
        total_companies = await db.scalar(select(func.count(Company.id))) or 0

        active_services = await db.scalar(
            select(func.count(Service.id))
            .where(Service.status == ServiceStatus.IN_PROGRESS.value)
        ) or 0

        total_quotes = await db.scalar(select(func.count(Quote.id))) or 0

        revenue = await db.scalar(
            select(func.coalesce(func.sum(Service.value), 0))
            .where(Service.status == ServiceStatus.COMPLETED.value)
        )
        total_revenue = to_cents(Decimal(str(revenue or 0)))

        logger.debug(
            "Statistiche dashboard: %s aziende, %s servizi attivi, %s preventivi, fatturato %s",
            total_companies, active_services, total_quotes, total_revenue
        )

        return DashboardStats(
            total_companies=total_companies,
            active_services=active_services,
            total_quotes=total_quotes,
            total_revenue=total_revenue,
        )
