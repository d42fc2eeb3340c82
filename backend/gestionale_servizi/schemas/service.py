"""
Schemas Pydantic per i Servizi di ingegneria
Progetto: Gestionale Servizi (Servizi di Ingegneria e Preventivi)
"""

import datetime
import uuid
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import Field

from gestionale_servizi.schemas.common import CamelModel, PaginatedList
from gestionale_servizi.schemas.company import CompanyRead


class ServiceStatus(str, Enum):
    """Stati possibili di un servizio."""
    SCHEDULED   = "scheduled"    # Pianificato
    IN_PROGRESS = "in_progress"  # In corso
    COMPLETED   = "completed"    # Concluso
    CANCELED    = "canceled"     # Annullato


class ServiceStatusFilter(str, Enum):
    """Filtro stato per la lista servizi ("all" disattiva il filtro)."""
    ALL         = "all"
    SCHEDULED   = "scheduled"
    IN_PROGRESS = "in_progress"
    COMPLETED   = "completed"
    CANCELED    = "canceled"


class ServiceBase(CamelModel):
    """Campi comuni di un servizio."""

    art: str = Field(
        ...,
        min_length=2,
        max_length=50,
        description="Numero di registrazione ART",
        examples=["ART-2024-0042"],
    )

    description: str = Field(
        ...,
        min_length=5,
        description="Descrizione del servizio",
    )

    service_date: datetime.date = Field(..., description="Data di erogazione")
    expiry_date: datetime.date = Field(..., description="Data di scadenza")

    value: Decimal = Field(
        ...,
        gt=0,
        max_digits=10,
        decimal_places=2,
        description="Valore del servizio",
    )

    status: ServiceStatus = Field(
        default=ServiceStatus.SCHEDULED,
        description="Stato del servizio",
    )

    notes: Optional[str] = Field(None, description="Note aggiuntive")

    company_id: uuid.UUID = Field(..., description="UUID dell'azienda cliente")


class ServiceCreate(ServiceBase):
    """Schema per la creazione di un servizio."""


class ServiceUpdate(CamelModel):
    """Schema per l'aggiornamento parziale di un servizio."""

    art: Optional[str] = Field(None, min_length=2, max_length=50)
    description: Optional[str] = Field(None, min_length=5)
    service_date: Optional[datetime.date] = None
    expiry_date: Optional[datetime.date] = None
    value: Optional[Decimal] = Field(None, gt=0, max_digits=10, decimal_places=2)
    status: Optional[ServiceStatus] = None
    notes: Optional[str] = None
    company_id: Optional[uuid.UUID] = None


class ServiceBrief(CamelModel):
    """
    Vista ridotta del servizio, usata nelle voci di preventivo.
    """

    id: uuid.UUID
    art: str
    description: str
    service_date: datetime.date
    expiry_date: datetime.date
    value: Decimal
    status: ServiceStatus
    company_id: uuid.UUID


class ServiceRead(ServiceBase):
    """Servizio completo con l'azienda cliente incorporata."""

    id: uuid.UUID = Field(..., description="UUID del servizio")
    created_at: datetime.datetime
    updated_at: datetime.datetime
    company: Optional[CompanyRead] = Field(None, description="Azienda cliente")


class ServiceList(PaginatedList):
    """Lista paginata di servizi."""

    services: list[ServiceRead] = Field(
        default_factory=list,
        description="Lista dei servizi",
    )
