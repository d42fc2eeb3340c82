"""
Service Layer per l'entità Company
Progetto: Gestionale Servizi (Servizi di Ingegneria e Preventivi)

Definisce la logica di business per l'anagrafica aziende:
- Validazione proattiva del codice fiscale (univoco)
- Blocco dell'eliminazione se esistono servizi o preventivi collegati
- Logging dettagliato
"""

import logging
import uuid
from typing import Optional

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from gestionale_servizi.core.exceptions import (
    DuplicateError,
    NotFoundError,
    ReferentialConflictError,
    TransientStoreError,
)
from gestionale_servizi.models import Company, Quote, Service
from gestionale_servizi.schemas.company import CompanyCreate, CompanyUpdate

# Logger per questo modulo
logger = logging.getLogger(__name__)


class CompanyService:
    """
    Service per la gestione delle operazioni CRUD sulle aziende.

    I metodi di scrittura eseguono flush ma non commit: il commit è
    responsabilità del router che ha aperto la richiesta.
    """

    async def get_all(
        self,
        db: AsyncSession,
        page: int = 1,
        page_size: int = 10,
        search: Optional[str] = None,
    ) -> tuple[list[Company], int]:
        """
        Recupera la lista paginata delle aziende ordinata per ragione sociale.

        Args:
            db: Sessione database
            page: Numero pagina (default 1)
            page_size: Elementi per pagina (default 10)
            search: Termine di ricerca su ragione sociale, codice fiscale,
                referente, email e città

        Returns:
            Tuple di (lista aziende, totale count)
        """
        conditions = []

        if search:
            conditions.append(
                or_(
                    Company.name.icontains(search, autoescape=True),
                    Company.tax_id.icontains(search, autoescape=True),
                    Company.contact_name.icontains(search, autoescape=True),
                    Company.email.icontains(search, autoescape=True),
                    Company.city.icontains(search, autoescape=True),
                )
            )

        query = select(Company).order_by(Company.name.desc())
        if conditions:
            query = query.where(*conditions)

        offset = (page - 1) * page_size
        result = await db.execute(query.offset(offset).limit(page_size))
        companies = list(result.scalars().all())

        count_query = select(func.count()).select_from(Company)
        if conditions:
            count_query = count_query.where(*conditions)

        count_result = await db.execute(count_query)
        total = count_result.scalar() or 0

        logger.info(
            "Recuperate %s aziende su %s totali (pagina %s)",
            len(companies), total, page
        )

        return companies, total

    async def get_all_unpaginated(self, db: AsyncSession) -> list[Company]:
        """Tutte le aziende ordinate per ragione sociale (per le select del frontend)."""
        result = await db.execute(select(Company).order_by(Company.name.desc()))
        return list(result.scalars().all())

    async def get_by_id(
        self,
        db: AsyncSession,
        company_id: uuid.UUID,
    ) -> Company:
        """
        Recupera un'azienda tramite ID.

        Raises:
            NotFoundError: Se l'azienda non esiste
        """
        result = await db.execute(select(Company).where(Company.id == company_id))
        company = result.scalar_one_or_none()

        if company is None:
            logger.warning("Azienda non trovata: %s", company_id)
            raise NotFoundError(f"Azienda con ID {company_id} non trovata")

        logger.debug("Recuperata azienda: %s - %s", company.id, company.name)
        return company

    async def create(
        self,
        db: AsyncSession,
        company_data: CompanyCreate,
    ) -> Company:
        """
        Crea una nuova azienda.

        Args:
            db: Sessione database
            company_data: Dati dell'azienda da creare

        Returns:
            Oggetto Company appena creato

        Raises:
            DuplicateError: Se il codice fiscale è già registrato
            TransientStoreError: Se il database genera un errore imprevisto
        """
        existing = await self._check_tax_id_exists(db, company_data.tax_id)
        if existing:
            logger.warning(
                "Tentativo di creare azienda con codice fiscale duplicato: %s (esistente: %s)",
                company_data.tax_id, existing.id
            )
            raise DuplicateError(
                f"Codice fiscale '{company_data.tax_id}' già registrato per un'altra azienda"
            )

        company = Company(**company_data.model_dump())

        try:
            db.add(company)
            await db.flush()
            await db.refresh(company)

            logger.info("Creata nuova azienda: %s - %s", company.id, company.name)
            return company

        except IntegrityError as e:
            logger.error("Errore IntegrityError creazione azienda: %s - %s", e.__class__.__name__, e.orig)
            await db.rollback()
            if "tax_id" in str(e.orig).lower():
                raise DuplicateError("Codice fiscale già registrato per un'altra azienda") from e
            raise TransientStoreError("Errore durante la creazione dell'azienda") from e

        except SQLAlchemyError as e:
            logger.error("Errore SQLAlchemy creazione azienda: %s - %s", e.__class__.__name__, e)
            await db.rollback()
            raise TransientStoreError("Errore del database durante la creazione dell'azienda") from e

    async def update(
        self,
        db: AsyncSession,
        company_id: uuid.UUID,
        company_data: CompanyUpdate,
    ) -> Company:
        """
        Aggiorna un'azienda esistente (solo i campi inviati).

        Raises:
            NotFoundError: Se l'azienda non esiste
            DuplicateError: Se il nuovo codice fiscale è già in uso
            TransientStoreError: Se il database genera un errore imprevisto
        """
        company = await self.get_by_id(db, company_id)

        update_data = {
            field: value
            for field, value in company_data.model_dump(exclude_unset=True).items()
            if value is not None or field == "notes"
        }

        new_tax_id = update_data.get("tax_id")
        if new_tax_id and new_tax_id != company.tax_id:
            existing = await self._check_tax_id_exists(db, new_tax_id, exclude_id=company_id)
            if existing:
                logger.warning(
                    "Tentativo di aggiornare azienda %s con codice fiscale duplicato: %s",
                    company_id, new_tax_id
                )
                raise DuplicateError(
                    f"Codice fiscale '{new_tax_id}' già registrato per un'altra azienda"
                )

        for field, value in update_data.items():
            setattr(company, field, value)

        try:
            await db.flush()
            await db.refresh(company)

            logger.info("Aggiornata azienda: %s - %s", company.id, company.name)
            return company

        except IntegrityError as e:
            logger.error("Errore IntegrityError aggiornamento azienda: %s - %s", e.__class__.__name__, e.orig)
            await db.rollback()
            if "tax_id" in str(e.orig).lower():
                raise DuplicateError("Codice fiscale già registrato per un'altra azienda") from e
            raise TransientStoreError("Errore durante l'aggiornamento dell'azienda") from e

        except SQLAlchemyError as e:
            logger.error("Errore SQLAlchemy aggiornamento azienda: %s - %s", e.__class__.__name__, e)
            await db.rollback()
            raise TransientStoreError("Errore del database durante l'aggiornamento dell'azienda") from e

    async def delete(
        self,
        db: AsyncSession,
        company_id: uuid.UUID,
    ) -> None:
        """
        Elimina un'azienda.

        L'eliminazione è rifiutata se esistono servizi o preventivi che
        la referenziano.

        Raises:
            NotFoundError: Se l'azienda non esiste
            ReferentialConflictError: Se esistono servizi o preventivi collegati
        """
        company = await self.get_by_id(db, company_id)

        services_count = await db.scalar(
            select(func.count(Service.id)).where(Service.company_id == company_id)
        ) or 0
        quotes_count = await db.scalar(
            select(func.count(Quote.id)).where(Quote.company_id == company_id)
        ) or 0

        if services_count or quotes_count:
            logger.warning(
                "Eliminazione azienda %s rifiutata: %s servizi, %s preventivi collegati",
                company_id, services_count, quotes_count
            )
            raise ReferentialConflictError(
                "Impossibile eliminare l'azienda: esistono servizi o preventivi collegati",
                extra={"services": services_count, "quotes": quotes_count},
            )

        try:
            await db.delete(company)
            await db.flush()
            logger.info("Eliminata azienda: %s - %s", company.id, company.name)

        except SQLAlchemyError as e:
            logger.error("Errore SQLAlchemy eliminazione azienda: %s - %s", e.__class__.__name__, e)
            await db.rollback()
            raise TransientStoreError("Errore del database durante l'eliminazione dell'azienda") from e

    # ------------------------------------------------------------
    # Helper
    # ------------------------------------------------------------

    async def _check_tax_id_exists(
        self,
        db: AsyncSession,
        tax_id: str,
        exclude_id: Optional[uuid.UUID] = None,
    ) -> Optional[Company]:
        query = select(Company).where(Company.tax_id == tax_id)
        if exclude_id:
            query = query.where(Company.id != exclude_id)

        result = await db.execute(query)
        return result.scalar_one_or_none()
