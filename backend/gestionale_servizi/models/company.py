"""
Modello SQLAlchemy per l'entità Company
Progetto: Gestionale Servizi (Servizi di Ingegneria e Preventivi)

Rappresenta l'anagrafica delle aziende clienti.
"""


from __future__ import annotations
from typing import Optional, TYPE_CHECKING, List

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from gestionale_servizi.models import Base
from gestionale_servizi.models.mixins import TimestampMixin, UUIDMixin

# Import per type hinting relazioni (evita circular import)
if TYPE_CHECKING:
    from gestionale_servizi.models.service import Service
    from gestionale_servizi.models.quote import Quote


class Company(Base, UUIDMixin, TimestampMixin):
    """
    Modello per l'anagrafica aziende.

    Un'azienda può avere più servizi e più preventivi associati.
    L'eliminazione è rifiutata finché esistono servizi o preventivi collegati.

    Attributes:
        id: UUID primary key, generato automaticamente
        name: Ragione sociale
        tax_id: Codice fiscale / partita IVA (univoco)
        contact_name: Nome del referente
        email: Indirizzo email
        phone: Numero di telefono
        address: Indirizzo completo
        city: Città
        state: Provincia / stato
        notes: Note aggiuntive
        created_at: Data/ora creazione record
        updated_at: Data/ora ultimo aggiornamento

    Relationships:
        services: Servizi erogati all'azienda
        quotes: Preventivi emessi all'azienda
    """

    __tablename__ = "companies"

    # ------------------------------------------------------------
    # Colonne Dati Anagrafici
    # ------------------------------------------------------------
    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        index=True,
        doc="Ragione sociale",
    )

    tax_id: Mapped[str] = mapped_column(
        String(18),
        nullable=False,
        unique=True,
        doc="Codice fiscale / partita IVA, anche formattato (14-18 caratteri)",
    )

    contact_name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        doc="Nome del referente aziendale",
    )

    # ------------------------------------------------------------
    # Colonne Contatto
    # ------------------------------------------------------------
    email: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        doc="Indirizzo email",
    )

    phone: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        doc="Numero di telefono",
    )

    # ------------------------------------------------------------
    # Colonne Indirizzo
    # ------------------------------------------------------------
    address: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        doc="Indirizzo completo",
    )

    city: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        doc="Città",
    )

    state: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        doc="Provincia / stato",
    )

    notes: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
        doc="Note aggiuntive sull'azienda",
    )

    # ------------------------------------------------------------
    # Relazioni
    # ------------------------------------------------------------
    services: Mapped[List["Service"]] = relationship(
        "Service",
        back_populates="company",
        lazy="noload",
        doc="Servizi erogati all'azienda",
    )

    quotes: Mapped[List["Quote"]] = relationship(
        "Quote",
        back_populates="company",
        lazy="noload",
        doc="Preventivi emessi all'azienda",
    )

    def __repr__(self) -> str:
        return f"<Company(id={self.id}, name='{self.name}', tax_id='{self.tax_id}')>"
