"""
Router FastAPI per l'entità Company
Progetto: Gestionale Servizi (Servizi di Ingegneria e Preventivi)

Definisce gli endpoint API per l'anagrafica aziende.
"""

import logging
import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from gestionale_servizi.core.config import settings
from gestionale_servizi.core.database import get_db
from gestionale_servizi.schemas.company import (
    CompanyCreate,
    CompanyList,
    CompanyRead,
    CompanyUpdate,
)
from gestionale_servizi.services.company_service import CompanyService

# Logger per questo modulo
logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/companies",
    tags=["Aziende"],
)


def get_company_service() -> CompanyService:
    """Dependency per ottenere un'istanza del CompanyService."""
    return CompanyService()


@router.get(
    "",
    name="aziende_lista",
    summary="Lista aziende",
    response_model=CompanyList,
)
async def get_companies(
    page: int = Query(1, ge=1, description="Numero pagina"),
    page_size: int = Query(
        settings.default_page_size,
        ge=1,
        le=settings.max_page_size,
        alias="pageSize",
        description="Elementi per pagina",
    ),
    search: Optional[str] = Query(None, description="Termine di ricerca"),
    db: AsyncSession = Depends(get_db),
    service: CompanyService = Depends(get_company_service),
) -> CompanyList:
    """Lista paginata delle aziende ordinate per ragione sociale."""
    companies, total = await service.get_all(
        db=db,
        page=page,
        page_size=page_size,
        search=search,
    )
    return CompanyList(
        companies=[CompanyRead.model_validate(c) for c in companies],
        total_count=total,
        current_page=page,
        page_size=page_size,
    )


@router.get(
    "/all",
    name="aziende_tutte",
    summary="Tutte le aziende",
    response_model=list[CompanyRead],
)
async def get_all_companies(
    db: AsyncSession = Depends(get_db),
    service: CompanyService = Depends(get_company_service),
) -> list[CompanyRead]:
    """Elenco completo non paginato, usato dalle select del frontend."""
    companies = await service.get_all_unpaginated(db=db)
    return [CompanyRead.model_validate(c) for c in companies]


@router.get(
    "/{company_id}",
    name="azienda_dettaglio",
    summary="Dettaglio azienda",
    response_model=CompanyRead,
)
async def get_company(
    company_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    service: CompanyService = Depends(get_company_service),
) -> CompanyRead:
    company = await service.get_by_id(db=db, company_id=company_id)
    return CompanyRead.model_validate(company)


@router.post(
    "",
    name="azienda_crea",
    summary="Crea azienda",
    response_model=CompanyRead,
    status_code=status.HTTP_201_CREATED,
)
async def create_company(
    company_data: CompanyCreate,
    db: AsyncSession = Depends(get_db),
    service: CompanyService = Depends(get_company_service),
) -> CompanyRead:
    """
    Crea una nuova azienda.

    Raises:
        DuplicateError: Se il codice fiscale è già registrato
    """
    company = await service.create(db=db, company_data=company_data)
    await db.commit()
    return CompanyRead.model_validate(company)


@router.put(
    "/{company_id}",
    name="azienda_aggiorna",
    summary="Aggiorna azienda",
    response_model=CompanyRead,
)
async def update_company(
    company_id: uuid.UUID,
    company_data: CompanyUpdate,
    db: AsyncSession = Depends(get_db),
    service: CompanyService = Depends(get_company_service),
) -> CompanyRead:
    """
    Aggiorna un'azienda esistente.

    Raises:
        NotFoundError: Se l'azienda non esiste
        DuplicateError: Se il codice fiscale è già in uso
    """
    company = await service.update(db=db, company_id=company_id, company_data=company_data)
    await db.commit()
    return CompanyRead.model_validate(company)


@router.delete(
    "/{company_id}",
    name="azienda_elimina",
    summary="Elimina azienda",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def delete_company(
    company_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    service: CompanyService = Depends(get_company_service),
) -> None:
    """
    Elimina un'azienda senza servizi né preventivi collegati.

    Raises:
        NotFoundError: Se l'azienda non esiste
        ReferentialConflictError: Se esistono servizi o preventivi collegati
    """
    await service.delete(db=db, company_id=company_id)
    await db.commit()
