"""
Modelli SQLAlchemy per i Preventivi
Progetto: Gestionale Servizi (Servizi di Ingegneria e Preventivi)

Contiene:
- Quote: Preventivo (radice dell'aggregato)
- QuoteItem: Voci del preventivo, possedute dal preventivo
"""


from __future__ import annotations
import uuid
from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import (
    CheckConstraint,
    Date,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from gestionale_servizi.models import Base
from gestionale_servizi.models.mixins import TimestampMixin, UUIDMixin

if TYPE_CHECKING:
    from gestionale_servizi.models.company import Company
    from gestionale_servizi.models.service import Service


# Gli stati sono definiti in gestionale_servizi.schemas.quote.QuoteStatus


class Quote(Base, UUIDMixin, TimestampMixin):
    """
    Modello per i preventivi.

    Il numero preventivo è generato dal server alla creazione e non viene
    mai modificato. Le voci vengono scritte e sostituite sempre in blocco,
    nella stessa transazione della riga del preventivo.

    Attributes:
        id: UUID primary key
        quote_number: Numero preventivo univoco (es. ORC-48213907)
        title: Titolo
        description: Descrizione
        issue_date: Data di emissione
        valid_until: Data di validità
        company_id: UUID dell'azienda destinataria
        total_value: Valore totale
        status: pending, approved, rejected

    Relationships:
        company: Azienda destinataria
        items: Voci del preventivo
    """

    __tablename__ = "quotes"

    quote_number: Mapped[str] = mapped_column(
        String(30),
        nullable=False,
        doc="Numero preventivo generato dal server",
    )

    title: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        doc="Titolo del preventivo",
    )

    description: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        doc="Descrizione del preventivo",
    )

    issue_date: Mapped[date] = mapped_column(
        Date,
        nullable=False,
        doc="Data di emissione",
    )

    valid_until: Mapped[date] = mapped_column(
        Date,
        nullable=False,
        doc="Data di fine validità",
    )

    company_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("companies.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
        doc="UUID dell'azienda destinataria",
    )

    total_value: Mapped[Decimal] = mapped_column(
        Numeric(10, 2),
        nullable=False,
        doc="Valore totale del preventivo",
    )

    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="pending",
        doc="Stato: pending, approved, rejected",
    )

    # ------------------------------------------------------------
    # Relazioni
    # ------------------------------------------------------------
    company: Mapped["Company"] = relationship(
        "Company",
        back_populates="quotes",
        lazy="noload",
        doc="Azienda destinataria",
    )

    items: Mapped[List["QuoteItem"]] = relationship(
        "QuoteItem",
        back_populates="quote",
        lazy="noload",
        order_by="QuoteItem.created_at",
        doc="Voci del preventivo",
    )

    __table_args__ = (
        UniqueConstraint("quote_number", name="uq_quotes_quote_number"),
        Index("ix_quotes_status_created", "status", "created_at"),
        CheckConstraint(
            "status IN ('pending', 'approved', 'rejected')",
            name="ck_quotes_status",
        ),
        CheckConstraint("total_value > 0", name="ck_quotes_total_value_positive"),
    )

    def __repr__(self) -> str:
        return f"<Quote(id={self.id}, number='{self.quote_number}', status='{self.status}')>"


class QuoteItem(Base, UUIDMixin, TimestampMixin):
    """
    Modello per le voci del preventivo.

    line_total è sempre calcolato dal server (quantity × unit_value,
    arrotondato al centesimo) e memorizzato per le interrogazioni.

    Attributes:
        id: UUID primary key
        quote_id: UUID del preventivo padre
        service_id: UUID del servizio collegato (opzionale)
        description: Descrizione della voce
        quantity: Quantità (intero positivo)
        unit_value: Valore unitario
        line_total: Totale riga
    """

    __tablename__ = "quote_items"

    quote_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("quotes.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
        doc="UUID del preventivo padre",
    )

    service_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid,
        ForeignKey("services.id", ondelete="RESTRICT"),
        nullable=True,
        index=True,
        doc="UUID del servizio collegato",
    )

    description: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        doc="Descrizione della voce",
    )

    quantity: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=1,
        doc="Quantità",
    )

    unit_value: Mapped[Decimal] = mapped_column(
        Numeric(10, 2),
        nullable=False,
        doc="Valore unitario",
    )

    line_total: Mapped[Decimal] = mapped_column(
        Numeric(10, 2),
        nullable=False,
        doc="Totale riga (quantity × unit_value)",
    )

    quote: Mapped["Quote"] = relationship(
        "Quote",
        back_populates="items",
        lazy="noload",
        doc="Preventivo padre",
    )

    service: Mapped[Optional["Service"]] = relationship(
        "Service",
        back_populates="quote_items",
        lazy="noload",
        doc="Servizio collegato",
    )

    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_quote_items_quantity_positive"),
        CheckConstraint("unit_value > 0", name="ck_quote_items_unit_value_positive"),
    )

    def __repr__(self) -> str:
        return f"<QuoteItem(id={self.id}, quote_id={self.quote_id}, line_total={self.line_total})>"
