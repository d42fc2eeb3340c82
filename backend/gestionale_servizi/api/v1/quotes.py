"""
Router FastAPI per i Preventivi
Progetto: Gestionale Servizi (Servizi di Ingegneria e Preventivi)

Definisce gli endpoint API per l'aggregato Preventivo (testata + voci).
"""

import logging
import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from gestionale_servizi.core.config import settings
from gestionale_servizi.core.database import get_db
from gestionale_servizi.schemas.common import ErrorResponse
from gestionale_servizi.schemas.quote import (
    QuoteCreateRequest,
    QuoteDeleteResponse,
    QuoteDetailRead,
    QuoteList,
    QuoteStatusFilter,
    QuoteUpdateRequest,
)
from gestionale_servizi.services.quote_service import QuoteService

# Logger per questo modulo
logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/quotes",
    tags=["Preventivi"],
    responses={
        400: {"model": ErrorResponse, "description": "Dati non validi"},
        404: {"model": ErrorResponse, "description": "Risorsa non trovata"},
    },
)


# -------------------------------------------------------------------
# Dependency Injection
# -------------------------------------------------------------------

def get_quote_service() -> QuoteService:
    """Dependency per ottenere un'istanza del QuoteService."""
    return QuoteService()


# -------------------------------------------------------------------
# Endpoints
# -------------------------------------------------------------------

@router.get(
    "",
    name="preventivi_lista",
    summary="Lista preventivi",
    description="Lista paginata dei preventivi con ricerca e filtro per stato.",
    response_model=QuoteList,
    status_code=status.HTTP_200_OK,
)
async def get_quotes(
    page: int = Query(1, ge=1, description="Numero pagina"),
    page_size: int = Query(
        settings.default_page_size,
        ge=1,
        le=settings.max_page_size,
        alias="pageSize",
        description="Elementi per pagina",
    ),
    search: Optional[str] = Query(None, description="Ricerca su numero, titolo e azienda"),
    status_filter: QuoteStatusFilter = Query(
        QuoteStatusFilter.ALL,
        alias="status",
        description="Filtro stato (all per nessun filtro)",
    ),
    db: AsyncSession = Depends(get_db),
    service: QuoteService = Depends(get_quote_service),
) -> QuoteList:
    """
    Recupera la lista paginata dei preventivi, più recenti prima.

    Returns:
        QuoteList: preventivi con azienda e metadati di paginazione
    """
    quotes, total = await service.get_all(
        db=db,
        page=page,
        page_size=page_size,
        search=search,
        status=status_filter.value,
    )

    return QuoteList(
        quotes=quotes,
        total_count=total,
        current_page=page,
        page_size=page_size,
    )


@router.get(
    "/{quote_id}",
    name="preventivo_dettaglio",
    summary="Dettaglio preventivo",
    description="Preventivo con azienda, voci e servizi collegati.",
    response_model=QuoteDetailRead,
    status_code=status.HTTP_200_OK,
)
async def get_quote(
    quote_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    service: QuoteService = Depends(get_quote_service),
) -> QuoteDetailRead:
    """
    Recupera il dettaglio di un preventivo.

    Raises:
        NotFoundError: Se il preventivo non esiste
    """
    quote = await service.get_by_id(db=db, quote_id=quote_id)
    return QuoteDetailRead.model_validate(quote)


@router.post(
    "",
    name="preventivo_crea",
    summary="Crea preventivo",
    description="Crea un preventivo con le sue voci in un'unica transazione.",
    response_model=QuoteDetailRead,
    status_code=status.HTTP_201_CREATED,
)
async def create_quote(
    payload: QuoteCreateRequest,
    db: AsyncSession = Depends(get_db),
    service: QuoteService = Depends(get_quote_service),
) -> QuoteDetailRead:
    """
    Crea un nuovo preventivo.

    Il numero preventivo è generato dal server.

    Raises:
        NotFoundError: Se l'azienda o un servizio referenziato non esiste
        TransientStoreError: Se non è stato possibile generare un numero univoco
    """
    quote = await service.create(db=db, payload=payload)
    return QuoteDetailRead.model_validate(quote)


@router.put(
    "/{quote_id}",
    name="preventivo_aggiorna",
    summary="Aggiorna preventivo",
    description=(
        "Aggiorna la testata del preventivo. Se 'items' è presente sostituisce "
        "integralmente le voci esistenti."
    ),
    response_model=QuoteDetailRead,
    status_code=status.HTTP_200_OK,
)
async def update_quote(
    quote_id: uuid.UUID,
    payload: QuoteUpdateRequest,
    db: AsyncSession = Depends(get_db),
    service: QuoteService = Depends(get_quote_service),
) -> QuoteDetailRead:
    """
    Aggiorna un preventivo esistente.

    Raises:
        NotFoundError: Se il preventivo non esiste
        BusinessValidationError: Se il totale non corrisponde alle voci
    """
    quote = await service.update(db=db, quote_id=quote_id, payload=payload)
    return QuoteDetailRead.model_validate(quote)


@router.delete(
    "/{quote_id}",
    name="preventivo_elimina",
    summary="Elimina preventivo",
    description="Elimina il preventivo e tutte le sue voci.",
    response_model=QuoteDeleteResponse,
    status_code=status.HTTP_200_OK,
)
async def delete_quote(
    quote_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    service: QuoteService = Depends(get_quote_service),
) -> QuoteDeleteResponse:
    """
    Elimina un preventivo.

    Returns:
        QuoteDeleteResponse: id e numero del preventivo eliminato

    Raises:
        NotFoundError: Se il preventivo non esiste
    """
    deleted_id, quote_number = await service.delete(db=db, quote_id=quote_id)
    return QuoteDeleteResponse(
        message="Preventivo eliminato con successo",
        id=deleted_id,
        quote_number=quote_number,
    )
