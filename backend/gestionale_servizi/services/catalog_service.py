"""
Service Layer per i Servizi di ingegneria (catalogo ART)
Progetto: Gestionale Servizi (Servizi di Ingegneria e Preventivi)

CRUD dei servizi, ricerca, servizi recenti e scadenze imminenti.
"""

import datetime
import logging
import uuid
from typing import Optional

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from gestionale_servizi.core.config import settings
from gestionale_servizi.core.exceptions import (
    NotFoundError,
    ReferentialConflictError,
    TransientStoreError,
)
from gestionale_servizi.models import Company, QuoteItem, Service
from gestionale_servizi.schemas.service import ServiceCreate, ServiceUpdate

# Logger per questo modulo
logger = logging.getLogger(__name__)


class CatalogService:
    """
    Service per la gestione dei servizi di ingegneria.

    Ogni servizio viene restituito con l'azienda cliente già caricata.
    """

    async def get_all(
        self,
        db: AsyncSession,
        page: int = 1,
        page_size: int = 10,
        search: Optional[str] = None,
        status: Optional[str] = None,
    ) -> tuple[list[Service], int]:
        """
        Recupera la lista paginata dei servizi, più recenti prima.

        Args:
            db: Sessione database
            page: Numero pagina
            page_size: Elementi per pagina
            search: Ricerca su ART, descrizione e ragione sociale
            status: Filtro stato; None o "all" per nessun filtro

        Returns:
            Tuple di (lista servizi, totale count)
        """
        conditions = []

        if search:
            conditions.append(
                or_(
                    Service.art.icontains(search, autoescape=True),
                    Service.description.icontains(search, autoescape=True),
                    Company.name.icontains(search, autoescape=True),
                )
            )

        if status and status != "all":
            conditions.append(Service.status == status)

        query = (
            select(Service)
            .join(Company, Service.company_id == Company.id)
            .order_by(Service.created_at.desc())
        )
        if conditions:
            query = query.where(*conditions)

        offset = (page - 1) * page_size
        result = await db.execute(query.offset(offset).limit(page_size))
        services = list(result.scalars().all())

        count_query = (
            select(func.count(Service.id))
            .select_from(Service)
            .join(Company, Service.company_id == Company.id)
        )
        if conditions:
            count_query = count_query.where(*conditions)

        count_result = await db.execute(count_query)
        total = count_result.scalar() or 0

        logger.info(
            "Recuperati %s servizi su %s totali (pagina %s, stato=%s)",
            len(services), total, page, status or "all"
        )

        return services, total

    async def get_all_unpaginated(self, db: AsyncSession) -> list[Service]:
        """Tutti i servizi, più recenti prima."""
        result = await db.execute(select(Service).order_by(Service.created_at.desc()))
        return list(result.scalars().all())

    async def get_by_id(self, db: AsyncSession, service_id: uuid.UUID) -> Service:
        """
        Recupera un servizio con la sua azienda.

        Raises:
            NotFoundError: Se il servizio non esiste
        """
        result = await db.execute(select(Service).where(Service.id == service_id))
        service = result.scalar_one_or_none()

        if service is None:
            logger.warning("Servizio non trovato: %s", service_id)
            raise NotFoundError(f"Servizio con ID {service_id} non trovato")

        return service

    async def get_recent(
        self,
        db: AsyncSession,
        limit: Optional[int] = None,
    ) -> list[Service]:
        """Ultimi servizi inseriti (default settings.recent_services_limit)."""
        limit = limit or settings.recent_services_limit
        result = await db.execute(
            select(Service).order_by(Service.created_at.desc()).limit(limit)
        )
        return list(result.scalars().all())

    async def get_upcoming_deadlines(
        self,
        db: AsyncSession,
        limit: Optional[int] = None,
        days: Optional[int] = None,
        today: Optional[datetime.date] = None,
    ) -> list[Service]:
        """
        Servizi in scadenza nei prossimi giorni, ordinati per scadenza.

        Args:
            db: Sessione database
            limit: Numero massimo di risultati (default settings.upcoming_deadlines_limit)
            days: Ampiezza della finestra (default settings.upcoming_deadline_days)
            today: Data di riferimento (default: oggi)

        Returns:
            Servizi con today <= expiry_date < today + days
        """
        limit = limit or settings.upcoming_deadlines_limit
        days = days or settings.upcoming_deadline_days
        today = today or datetime.date.today()
        window_end = today + datetime.timedelta(days=days)

        result = await db.execute(
            select(Service)
            .where(Service.expiry_date >= today, Service.expiry_date < window_end)
            .order_by(Service.expiry_date.asc())
            .limit(limit)
        )
        return list(result.scalars().all())

    async def create(self, db: AsyncSession, service_data: ServiceCreate) -> Service:
        """
        Crea un nuovo servizio per un'azienda esistente.

        Raises:
            NotFoundError: Se l'azienda non esiste
            TransientStoreError: Se il database genera un errore imprevisto
        """
        await self._ensure_company_exists(db, service_data.company_id)

        service = Service(**service_data.model_dump())

        try:
            db.add(service)
            await db.flush()
            service_id = service.id

            logger.info("Creato servizio: %s - ART %s", service_id, service.art)

        except IntegrityError as e:
            logger.error("Errore IntegrityError creazione servizio: %s - %s", e.__class__.__name__, e.orig)
            await db.rollback()
            if "foreign key" in str(e.orig).lower():
                raise NotFoundError("Azienda referenziata non trovata") from e
            raise TransientStoreError("Errore durante la creazione del servizio") from e

        except SQLAlchemyError as e:
            logger.error("Errore SQLAlchemy creazione servizio: %s - %s", e.__class__.__name__, e)
            await db.rollback()
            raise TransientStoreError("Errore del database durante la creazione del servizio") from e

        return await self._reload(db, service_id)

    async def update(
        self,
        db: AsyncSession,
        service_id: uuid.UUID,
        service_data: ServiceUpdate,
    ) -> Service:
        """
        Aggiorna un servizio esistente (solo i campi inviati).

        Raises:
            NotFoundError: Se il servizio o la nuova azienda non esistono
            TransientStoreError: Se il database genera un errore imprevisto
        """
        service = await self.get_by_id(db, service_id)

        update_data = {
            field: value
            for field, value in service_data.model_dump(exclude_unset=True).items()
            if value is not None or field == "notes"
        }

        if "company_id" in update_data:
            await self._ensure_company_exists(db, update_data["company_id"])

        for field, value in update_data.items():
            setattr(service, field, value)

        try:
            await db.flush()
            logger.info("Aggiornato servizio: %s - ART %s", service_id, service.art)

        except IntegrityError as e:
            logger.error("Errore IntegrityError aggiornamento servizio: %s - %s", e.__class__.__name__, e.orig)
            await db.rollback()
            raise TransientStoreError("Errore durante l'aggiornamento del servizio") from e

        except SQLAlchemyError as e:
            logger.error("Errore SQLAlchemy aggiornamento servizio: %s - %s", e.__class__.__name__, e)
            await db.rollback()
            raise TransientStoreError("Errore del database durante l'aggiornamento del servizio") from e

        return await self._reload(db, service_id)

    async def delete(self, db: AsyncSession, service_id: uuid.UUID) -> None:
        """
        Elimina un servizio non referenziato da voci di preventivo.

        Raises:
            NotFoundError: Se il servizio non esiste
            ReferentialConflictError: Se il servizio è presente in uno o più preventivi
        """
        service = await self.get_by_id(db, service_id)

        items_count = await db.scalar(
            select(func.count(QuoteItem.id)).where(QuoteItem.service_id == service_id)
        ) or 0

        if items_count:
            logger.warning(
                "Eliminazione servizio %s rifiutata: %s voci di preventivo collegate",
                service_id, items_count
            )
            raise ReferentialConflictError(
                "Impossibile eliminare il servizio: è presente in uno o più preventivi",
                extra={"quoteItems": items_count},
            )

        try:
            await db.delete(service)
            await db.flush()
            logger.info("Eliminato servizio: %s - ART %s", service_id, service.art)

        except SQLAlchemyError as e:
            logger.error("Errore SQLAlchemy eliminazione servizio: %s - %s", e.__class__.__name__, e)
            await db.rollback()
            raise TransientStoreError("Errore del database durante l'eliminazione del servizio") from e

    # ------------------------------------------------------------
    # Helper
    # ------------------------------------------------------------

    async def _reload(self, db: AsyncSession, service_id: uuid.UUID) -> Service:
        """Ricarica il servizio con l'azienda aggiornata."""
        result = await db.execute(
            select(Service)
            .where(Service.id == service_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one()

    async def _ensure_company_exists(self, db: AsyncSession, company_id: uuid.UUID) -> None:
        exists = await db.scalar(select(Company.id).where(Company.id == company_id))
        if exists is None:
            logger.warning("Azienda referenziata non trovata: %s", company_id)
            raise NotFoundError(f"Azienda con ID {company_id} non trovata")
