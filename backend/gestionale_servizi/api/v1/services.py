"""
Router FastAPI per i Servizi di ingegneria
Progetto: Gestionale Servizi (Servizi di Ingegneria e Preventivi)

Le rotte statiche (/all, /recent, /upcoming-deadlines) sono dichiarate
prima di /{service_id}.
"""

import logging
import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from gestionale_servizi.core.config import settings
from gestionale_servizi.core.database import get_db
from gestionale_servizi.schemas.service import (
    ServiceCreate,
    ServiceList,
    ServiceRead,
    ServiceStatusFilter,
    ServiceUpdate,
)
from gestionale_servizi.services.catalog_service import CatalogService

# Logger per questo modulo
logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/services",
    tags=["Servizi"],
)


def get_catalog_service() -> CatalogService:
    """Dependency per ottenere un'istanza del CatalogService."""
    return CatalogService()


@router.get(
    "",
    name="servizi_lista",
    summary="Lista servizi",
    response_model=ServiceList,
)
async def get_services(
    page: int = Query(1, ge=1, description="Numero pagina"),
    page_size: int = Query(
        settings.default_page_size,
        ge=1,
        le=settings.max_page_size,
        alias="pageSize",
        description="Elementi per pagina",
    ),
    search: Optional[str] = Query(None, description="Ricerca su ART, descrizione e azienda"),
    status_filter: ServiceStatusFilter = Query(
        ServiceStatusFilter.ALL,
        alias="status",
        description="Filtro stato (all per nessun filtro)",
    ),
    db: AsyncSession = Depends(get_db),
    service: CatalogService = Depends(get_catalog_service),
) -> ServiceList:
    """Lista paginata dei servizi con azienda, più recenti prima."""
    services, total = await service.get_all(
        db=db,
        page=page,
        page_size=page_size,
        search=search,
        status=status_filter.value,
    )
    return ServiceList(
        services=[ServiceRead.model_validate(s) for s in services],
        total_count=total,
        current_page=page,
        page_size=page_size,
    )


@router.get(
    "/all",
    name="servizi_tutti",
    summary="Tutti i servizi",
    response_model=list[ServiceRead],
)
async def get_all_services(
    db: AsyncSession = Depends(get_db),
    service: CatalogService = Depends(get_catalog_service),
) -> list[ServiceRead]:
    services = await service.get_all_unpaginated(db=db)
    return [ServiceRead.model_validate(s) for s in services]


@router.get(
    "/recent",
    name="servizi_recenti",
    summary="Servizi recenti",
    response_model=list[ServiceRead],
)
async def get_recent_services(
    limit: Optional[int] = Query(None, ge=1, le=50, description="Numero di servizi"),
    db: AsyncSession = Depends(get_db),
    service: CatalogService = Depends(get_catalog_service),
) -> list[ServiceRead]:
    """Ultimi servizi inseriti, per la dashboard."""
    services = await service.get_recent(db=db, limit=limit)
    return [ServiceRead.model_validate(s) for s in services]


@router.get(
    "/upcoming-deadlines",
    name="servizi_scadenze",
    summary="Scadenze imminenti",
    response_model=list[ServiceRead],
)
async def get_upcoming_deadlines(
    limit: Optional[int] = Query(None, ge=1, le=50, description="Numero di servizi"),
    db: AsyncSession = Depends(get_db),
    service: CatalogService = Depends(get_catalog_service),
) -> list[ServiceRead]:
    """Servizi in scadenza entro la finestra configurata, per la dashboard."""
    services = await service.get_upcoming_deadlines(db=db, limit=limit)
    return [ServiceRead.model_validate(s) for s in services]


@router.get(
    "/{service_id}",
    name="servizio_dettaglio",
    summary="Dettaglio servizio",
    response_model=ServiceRead,
)
async def get_service(
    service_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    service: CatalogService = Depends(get_catalog_service),
) -> ServiceRead:
    item = await service.get_by_id(db=db, service_id=service_id)
    return ServiceRead.model_validate(item)


@router.post(
    "",
    name="servizio_crea",
    summary="Crea servizio",
    response_model=ServiceRead,
    status_code=status.HTTP_201_CREATED,
)
async def create_service(
    service_data: ServiceCreate,
    db: AsyncSession = Depends(get_db),
    service: CatalogService = Depends(get_catalog_service),
) -> ServiceRead:
    """
    Crea un nuovo servizio.

    Raises:
        NotFoundError: Se l'azienda non esiste
    """
    item = await service.create(db=db, service_data=service_data)
    await db.commit()
    return ServiceRead.model_validate(item)


@router.put(
    "/{service_id}",
    name="servizio_aggiorna",
    summary="Aggiorna servizio",
    response_model=ServiceRead,
)
async def update_service(
    service_id: uuid.UUID,
    service_data: ServiceUpdate,
    db: AsyncSession = Depends(get_db),
    service: CatalogService = Depends(get_catalog_service),
) -> ServiceRead:
    item = await service.update(db=db, service_id=service_id, service_data=service_data)
    await db.commit()
    return ServiceRead.model_validate(item)


@router.delete(
    "/{service_id}",
    name="servizio_elimina",
    summary="Elimina servizio",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def delete_service(
    service_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    service: CatalogService = Depends(get_catalog_service),
) -> None:
    """
    Elimina un servizio non presente in alcun preventivo.

    Raises:
        NotFoundError: Se il servizio non esiste
        ReferentialConflictError: Se il servizio è referenziato da voci di preventivo
    """
    await service.delete(db=db, service_id=service_id)
    await db.commit()
