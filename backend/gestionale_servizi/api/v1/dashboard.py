"""
Router FastAPI per la Dashboard
Progetto: Gestionale Servizi (Servizi di Ingegneria e Preventivi)
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from gestionale_servizi.core.database import get_db
from gestionale_servizi.schemas.dashboard import DashboardStats
from gestionale_servizi.services.dashboard_service import DashboardService

router = APIRouter(
    prefix="/dashboard",
    tags=["Dashboard"],
)


def get_dashboard_service() -> DashboardService:
    """Dependency per ottenere un'istanza del DashboardService."""
    return DashboardService()


@router.get(
    "/stats",
    name="dashboard_statistiche",
    summary="Statistiche dashboard",
    response_model=DashboardStats,
)
async def get_dashboard_stats(
    db: AsyncSession = Depends(get_db),
    service: DashboardService = Depends(get_dashboard_service),
) -> DashboardStats:
    return await service.get_stats(db=db)
