"""
Modello SQLAlchemy per l'entità Service
Progetto: Gestionale Servizi (Servizi di Ingegneria e Preventivi)

Rappresenta un servizio di ingegneria erogato a un'azienda, identificato
dal numero di registrazione ART.
"""


from __future__ import annotations
import uuid
from datetime import date
from decimal import Decimal
from typing import Optional, TYPE_CHECKING, List

from sqlalchemy import CheckConstraint, Date, ForeignKey, Index, Numeric, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from gestionale_servizi.models import Base
from gestionale_servizi.models.mixins import TimestampMixin, UUIDMixin

if TYPE_CHECKING:
    from gestionale_servizi.models.company import Company
    from gestionale_servizi.models.quote import QuoteItem


# Gli stati sono definiti in gestionale_servizi.schemas.service.ServiceStatus


class Service(Base, UUIDMixin, TimestampMixin):
    """
    Modello per i servizi di ingegneria.

    Attributes:
        id: UUID primary key
        art: Numero di registrazione ART
        description: Descrizione del servizio
        service_date: Data di erogazione
        expiry_date: Data di scadenza (usata per le scadenze imminenti)
        value: Valore economico del servizio
        status: scheduled, in_progress, completed, canceled
        notes: Note aggiuntive
        company_id: UUID dell'azienda cliente

    Relationships:
        company: Azienda cliente (caricata sempre in join)
        quote_items: Voci di preventivo che referenziano il servizio
    """

    __tablename__ = "services"

    art: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        index=True,
        doc="Numero di registrazione ART",
    )

    description: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        doc="Descrizione del servizio",
    )

    service_date: Mapped[date] = mapped_column(
        Date,
        nullable=False,
        doc="Data di erogazione del servizio",
    )

    expiry_date: Mapped[date] = mapped_column(
        Date,
        nullable=False,
        doc="Data di scadenza del servizio",
    )

    value: Mapped[Decimal] = mapped_column(
        Numeric(10, 2),
        nullable=False,
        doc="Valore del servizio",
    )

    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="scheduled",
        doc="Stato: scheduled, in_progress, completed, canceled",
    )

    notes: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
        doc="Note aggiuntive",
    )

    company_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("companies.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
        doc="UUID dell'azienda cliente",
    )

    # ------------------------------------------------------------
    # Relazioni
    # ------------------------------------------------------------
    company: Mapped["Company"] = relationship(
        "Company",
        back_populates="services",
        lazy="joined",
        doc="Azienda cliente",
    )

    quote_items: Mapped[List["QuoteItem"]] = relationship(
        "QuoteItem",
        back_populates="service",
        lazy="noload",
        doc="Voci di preventivo che referenziano il servizio",
    )

    __table_args__ = (
        Index("ix_services_status", "status"),
        Index("ix_services_expiry_date", "expiry_date"),
        CheckConstraint(
            "status IN ('scheduled', 'in_progress', 'completed', 'canceled')",
            name="ck_services_status",
        ),
        CheckConstraint("value > 0", name="ck_services_value_positive"),
    )

    def __repr__(self) -> str:
        return f"<Service(id={self.id}, art='{self.art}', status='{self.status}')>"
