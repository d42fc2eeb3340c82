"""
Service Layer per i Preventivi
Progetto: Gestionale Servizi (Servizi di Ingegneria e Preventivi)

Persistenza e interrogazione dell'aggregato Preventivo (testata + voci).

Regole principali:
- Ogni scrittura che tocca più righe avviene in un'unica transazione:
  o tutte le righe sono persistite o nessuna
- Il numero preventivo è generato dal server; l'unicità è garantita dal
  vincolo uq_quotes_quote_number con un numero limitato di tentativi
- In aggiornamento le voci inviate sostituiscono integralmente le esistenti
- In eliminazione le voci vengono cancellate prima della testata
"""

import logging
import random
import time
import uuid
from decimal import Decimal
from typing import Iterable, Optional

from sqlalchemy import delete, func, insert, or_, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from gestionale_servizi.core.config import settings
from gestionale_servizi.core.database import atomic
from gestionale_servizi.core.exceptions import (
    AppException,
    BusinessValidationError,
    NotFoundError,
    TransientStoreError,
)
from gestionale_servizi.models import Company, Quote, QuoteItem, Service
from gestionale_servizi.models.mixins import utcnow
from gestionale_servizi.schemas.quote import (
    QuoteCreateRequest,
    QuoteItemCreate,
    QuoteSummaryRead,
    QuoteUpdateRequest,
    to_cents,
)
from gestionale_servizi.services.quote_mapper import group_quote_rows

# Logger per questo modulo
logger = logging.getLogger(__name__)


def generate_quote_number(prefix: Optional[str] = None) -> str:
    """
    Genera un numero preventivo provvisorio.

    Formato: <prefisso>-<ultime 6 cifre dei millisecondi epoch><2 cifre casuali>,
    es. ORC-48213907. Il numero non è garantito univoco: l'unicità è
    verificata dal vincolo del database al momento dell'insert.

    Args:
        prefix: Prefisso (default: settings.quote_number_prefix)

    Returns:
        Numero preventivo
    """
    prefix = prefix or settings.quote_number_prefix
    millis = str(int(time.time() * 1000))
    return f"{prefix}-{millis[-6:]}{random.randint(0, 99):02d}"


def _is_quote_number_collision(error: IntegrityError) -> bool:
    err_str = str(error.orig).lower()
    return "quote_number" in err_str


class QuoteService:
    """
    Service per la gestione dei preventivi.

    Fornisce metodi asincroni senza dipendenze da FastAPI. Le operazioni di
    scrittura eseguono il commit (o il rollback completo) al loro interno,
    perché l'aggregato deve essere scritto in un'unica transazione.

    Usage:
        service = QuoteService()
        quote = await service.create(db=db, payload=payload)
    """

    # ------------------------------------------------------------
    # Lettura
    # ------------------------------------------------------------

    async def get_all(
        self,
        db: AsyncSession,
        page: int = 1,
        page_size: int = 10,
        search: Optional[str] = None,
        status: Optional[str] = None,
    ) -> tuple[list[QuoteSummaryRead], int]:
        """
        Recupera la lista paginata dei preventivi con la relativa azienda.

        Args:
            db: Sessione database
            page: Numero pagina (da 1)
            page_size: Elementi per pagina
            search: Ricerca case-insensitive su numero, titolo e ragione sociale
            status: Filtro stato; None o "all" per nessun filtro

        Returns:
            Tuple di (lista preventivi, totale count con gli stessi filtri)

        Raises:
            BusinessValidationError: Se page o page_size non sono validi
        """
        if page < 1:
            raise BusinessValidationError("Il numero di pagina deve essere almeno 1")
        if page_size < 1 or page_size > settings.max_page_size:
            raise BusinessValidationError(
                f"La dimensione pagina deve essere compresa tra 1 e {settings.max_page_size}"
            )

        conditions = []

        if search:
            conditions.append(
                or_(
                    Quote.quote_number.icontains(search, autoescape=True),
                    Quote.title.icontains(search, autoescape=True),
                    Company.name.icontains(search, autoescape=True),
                )
            )

        if status and status != "all":
            conditions.append(Quote.status == status)

        query = (
            select(Quote, Company)
            .join(Company, Quote.company_id == Company.id)
            .order_by(Quote.created_at.desc())
        )
        if conditions:
            query = query.where(*conditions)

        offset = (page - 1) * page_size
        result = await db.execute(query.offset(offset).limit(page_size))
        quotes = group_quote_rows(result.all())

        count_query = (
            select(func.count(Quote.id))
            .select_from(Quote)
            .join(Company, Quote.company_id == Company.id)
        )
        if conditions:
            count_query = count_query.where(*conditions)

        count_result = await db.execute(count_query)
        total = count_result.scalar() or 0

        logger.info(
            "Recuperati %s preventivi su %s totali (pagina %s, stato=%s)",
            len(quotes), total, page, status or "all"
        )

        return quotes, total

    async def get_by_id(
        self,
        db: AsyncSession,
        quote_id: uuid.UUID,
    ) -> Quote:
        """
        Recupera un preventivo con azienda, voci e servizi collegati.

        Args:
            db: Sessione database
            quote_id: UUID del preventivo

        Returns:
            Oggetto Quote con company e items caricati

        Raises:
            NotFoundError: Se il preventivo non esiste
        """
        query = (
            select(Quote)
            .options(
                selectinload(Quote.company),
                selectinload(Quote.items).selectinload(QuoteItem.service),
            )
            .where(Quote.id == quote_id)
            .execution_options(populate_existing=True)
        )
        result = await db.execute(query)
        quote = result.scalar_one_or_none()

        if quote is None:
            logger.warning("Preventivo non trovato: %s", quote_id)
            raise NotFoundError(f"Preventivo con ID {quote_id} non trovato")

        return quote

    # ------------------------------------------------------------
    # Scrittura
    # ------------------------------------------------------------

    async def create(
        self,
        db: AsyncSession,
        payload: QuoteCreateRequest,
    ) -> Quote:
        """
        Crea un preventivo con le sue voci in un'unica transazione.

        Il numero preventivo è generato dal server. In caso di collisione
        sul numero la transazione viene annullata e ritentata con un nuovo
        numero, fino a settings.quote_number_max_attempts tentativi.

        Args:
            db: Sessione database
            payload: Testata e voci validate

        Returns:
            Preventivo creato, ricaricato con azienda e voci

        Raises:
            NotFoundError: Se l'azienda o un servizio referenziato non esiste
            TransientStoreError: Se i tentativi sono esauriti o il database fallisce
        """
        await self._ensure_company_exists(db, payload.quote.company_id)
        await self._ensure_services_exist(db, payload.items)

        quote_data = payload.quote.model_dump()
        max_attempts = settings.quote_number_max_attempts

        for attempt in range(1, max_attempts + 1):
            quote_id = uuid.uuid4()
            quote_number = generate_quote_number()

            try:
                async with atomic(db):
                    db.add(Quote(id=quote_id, quote_number=quote_number, **quote_data))
                    await db.flush()
                    await self._insert_items(db, quote_id, payload.items)

            except IntegrityError as e:
                if _is_quote_number_collision(e):
                    logger.warning(
                        "Numero preventivo %s già in uso (tentativo %s di %s)",
                        quote_number, attempt, max_attempts
                    )
                    continue
                raise self._map_integrity_error(e, "creazione") from e

            except SQLAlchemyError as e:
                logger.error("Errore SQLAlchemy creazione preventivo: %s - %s", e.__class__.__name__, e)
                raise TransientStoreError(
                    "Errore del database durante la creazione del preventivo"
                ) from e

            logger.info(
                "Creato preventivo: %s - %s (%s voci, totale %s)",
                quote_id, quote_number, len(payload.items), quote_data["total_value"]
            )
            return await self.get_by_id(db, quote_id)

        logger.error(
            "Impossibile generare un numero preventivo univoco dopo %s tentativi",
            max_attempts
        )
        raise TransientStoreError(
            "Impossibile generare un numero preventivo univoco, riprovare"
        )

    async def update(
        self,
        db: AsyncSession,
        quote_id: uuid.UUID,
        payload: QuoteUpdateRequest,
    ) -> Quote:
        """
        Aggiorna la testata e, se inviate, sostituisce tutte le voci.

        Una lista voci vuota elimina tutte le voci esistenti; una lista
        assente le lascia invariate.

        Args:
            db: Sessione database
            quote_id: UUID del preventivo
            payload: Campi della testata da aggiornare e voci opzionali

        Returns:
            Preventivo aggiornato, ricaricato con azienda e voci

        Raises:
            NotFoundError: Se il preventivo (o un'entità referenziata) non esiste
            BusinessValidationError: Se il nuovo totale non corrisponde alle voci
            TransientStoreError: Se il database fallisce
        """
        # I campi non nullable inviati come null vengono ignorati
        update_data = {
            field: value
            for field, value in payload.quote.model_dump(exclude_unset=True).items()
            if value is not None
        }

        if "company_id" in update_data:
            await self._ensure_company_exists(db, update_data["company_id"])

        if payload.items:
            await self._ensure_services_exist(db, payload.items)

        if payload.items is None and "total_value" in update_data:
            await self._check_total_against_stored_items(db, quote_id, update_data["total_value"])

        try:
            async with atomic(db):
                result = await db.execute(
                    update(Quote)
                    .where(Quote.id == quote_id)
                    .values(**update_data, updated_at=utcnow())
                )
                if result.rowcount == 0:
                    logger.warning("Preventivo da aggiornare non trovato: %s", quote_id)
                    raise NotFoundError(f"Preventivo con ID {quote_id} non trovato")

                if payload.items is not None:
                    await self._delete_items(db, quote_id)
                    await self._insert_items(db, quote_id, payload.items)

        except IntegrityError as e:
            raise self._map_integrity_error(e, "aggiornamento") from e

        except SQLAlchemyError as e:
            logger.error("Errore SQLAlchemy aggiornamento preventivo: %s - %s", e.__class__.__name__, e)
            raise TransientStoreError(
                "Errore del database durante l'aggiornamento del preventivo"
            ) from e

        logger.info(
            "Aggiornato preventivo: %s (campi: %s, voci sostituite: %s)",
            quote_id, ", ".join(update_data) or "-",
            len(payload.items) if payload.items is not None else "no"
        )
        return await self.get_by_id(db, quote_id)

    async def delete(
        self,
        db: AsyncSession,
        quote_id: uuid.UUID,
    ) -> tuple[uuid.UUID, str]:
        """
        Elimina un preventivo e tutte le sue voci.

        Le voci vengono eliminate prima della testata, nella stessa transazione.

        Args:
            db: Sessione database
            quote_id: UUID del preventivo

        Returns:
            Tuple di (id, numero) del preventivo eliminato

        Raises:
            NotFoundError: Se il preventivo non esiste
            TransientStoreError: Se il database fallisce
        """
        try:
            async with atomic(db):
                quote_number = await db.scalar(
                    select(Quote.quote_number).where(Quote.id == quote_id)
                )
                await self._delete_items(db, quote_id)
                result = await db.execute(delete(Quote).where(Quote.id == quote_id))
                if result.rowcount == 0:
                    logger.warning("Preventivo da eliminare non trovato: %s", quote_id)
                    raise NotFoundError(f"Preventivo con ID {quote_id} non trovato")

        except SQLAlchemyError as e:
            logger.error("Errore SQLAlchemy eliminazione preventivo: %s - %s", e.__class__.__name__, e)
            raise TransientStoreError(
                "Errore del database durante l'eliminazione del preventivo"
            ) from e

        logger.info("Eliminato preventivo: %s - %s", quote_id, quote_number)
        return quote_id, quote_number

    # ------------------------------------------------------------
    # Helper
    # ------------------------------------------------------------

    async def _insert_items(
        self,
        db: AsyncSession,
        quote_id: uuid.UUID,
        items: Iterable[QuoteItemCreate],
    ) -> None:
        """Inserisce in blocco le voci del preventivo con il totale riga calcolato."""
        rows = [
            {
                "id": uuid.uuid4(),
                "quote_id": quote_id,
                "service_id": item.service_id,
                "description": item.description,
                "quantity": item.quantity,
                "unit_value": item.unit_value,
                "line_total": item.line_total,
            }
            for item in items
        ]
        if rows:
            await db.execute(insert(QuoteItem), rows)

    async def _delete_items(self, db: AsyncSession, quote_id: uuid.UUID) -> None:
        """Elimina tutte le voci del preventivo."""
        await db.execute(delete(QuoteItem).where(QuoteItem.quote_id == quote_id))

    async def _ensure_company_exists(self, db: AsyncSession, company_id: uuid.UUID) -> None:
        exists = await db.scalar(select(Company.id).where(Company.id == company_id))
        if exists is None:
            logger.warning("Azienda referenziata non trovata: %s", company_id)
            raise NotFoundError(f"Azienda con ID {company_id} non trovata")

    async def _ensure_services_exist(
        self,
        db: AsyncSession,
        items: Iterable[QuoteItemCreate],
    ) -> None:
        service_ids = {item.service_id for item in items if item.service_id is not None}
        if not service_ids:
            return

        result = await db.execute(select(Service.id).where(Service.id.in_(service_ids)))
        missing = service_ids - set(result.scalars().all())
        if missing:
            missing_str = ", ".join(sorted(str(s) for s in missing))
            logger.warning("Servizi referenziati non trovati: %s", missing_str)
            raise NotFoundError(f"Servizi non trovati: {missing_str}")

    async def _check_total_against_stored_items(
        self,
        db: AsyncSession,
        quote_id: uuid.UUID,
        total_value: Decimal,
    ) -> None:
        """
        Verifica un nuovo totale rispetto alle voci già memorizzate.

        Se il preventivo non ha voci il totale è libero.
        """
        result = await db.execute(
            select(func.count(QuoteItem.id), func.sum(QuoteItem.line_total))
            .where(QuoteItem.quote_id == quote_id)
        )
        items_count, items_sum = result.one()
        if not items_count:
            return

        items_total = to_cents(Decimal(str(items_sum)))
        if to_cents(total_value) != items_total:
            raise BusinessValidationError(
                f"Il valore totale ({to_cents(total_value)}) non corrisponde "
                f"alla somma delle voci ({items_total})"
            )

    def _map_integrity_error(self, error: IntegrityError, operation: str) -> AppException:
        """
        Traduce un IntegrityError nell'eccezione di dominio corrispondente.

        Il testo del driver non viene mai esposto al client.
        """
        logger.error(
            "Errore IntegrityError %s preventivo: %s - %s",
            operation, error.__class__.__name__, error.orig
        )
        err_str = str(error.orig).lower()
        if "foreign key" in err_str:
            return NotFoundError("Azienda o servizio referenziato non trovato")
        if "check" in err_str:
            return BusinessValidationError("Dati del preventivo non validi")
        if _is_quote_number_collision(error):
            return TransientStoreError("Numero preventivo già in uso, riprovare")
        return TransientStoreError(f"Errore del database in {operation} del preventivo")
