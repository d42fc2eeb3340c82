"""
Schemas Pydantic per l'entità Company
Progetto: Gestionale Servizi (Servizi di Ingegneria e Preventivi)
"""
# Definisce gli schemi di validazione e serializzazione per l'API.

import datetime
import re
import uuid
from typing import Optional

from pydantic import EmailStr, Field, field_validator

from gestionale_servizi.schemas.common import CamelModel, PaginatedList


def normalize_phone(phone: Optional[str]) -> Optional[str]:
    """
    Normalizza il numero di telefono.

    Rimuove gli spazi esterni e accetta solo +, cifre, spazi, trattini
    e parentesi.

    Raises:
        ValueError: Se il formato non è valido
    """
    if phone is None:
        return None

    normalized = phone.strip()
    if not re.match(r"^\+?[\d\s().-]+$", normalized):
        raise ValueError("Numero di telefono non valido")

    return normalized


def _strip(value: Optional[str]) -> Optional[str]:
    return value.strip() if isinstance(value, str) else value


class CompanyBase(CamelModel):
    """
    Schema base per i dati anagrafici dell'azienda.
    """

    name: str = Field(
        ...,
        min_length=2,
        max_length=255,
        description="Ragione sociale",
        examples=["Studio Tecnico Rossi S.r.l."],
    )

    tax_id: str = Field(
        ...,
        min_length=14,
        max_length=18,
        description="Codice fiscale / partita IVA (anche formattato)",
        examples=["12.345.678/0001-90"],
    )

    contact_name: str = Field(
        ...,
        min_length=2,
        max_length=255,
        description="Nome del referente",
    )

    email: EmailStr = Field(
        ...,
        description="Indirizzo email",
    )

    phone: str = Field(
        ...,
        min_length=10,
        max_length=20,
        description="Numero di telefono",
    )

    address: str = Field(
        ...,
        min_length=5,
        max_length=255,
        description="Indirizzo completo",
    )

    city: str = Field(
        ...,
        min_length=2,
        max_length=100,
        description="Città",
    )

    state: str = Field(
        ...,
        min_length=1,
        max_length=50,
        description="Provincia / stato",
    )

    notes: Optional[str] = Field(
        None,
        description="Note aggiuntive",
    )

    @field_validator("name", "tax_id", "contact_name", "address", "city", "state", mode="before")
    @classmethod
    def strip_text(cls, v):
        return _strip(v)

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v: str) -> str:
        return normalize_phone(v)


class CompanyCreate(CompanyBase):
    """
    Schema per la creazione di una nuova azienda.
    """


class CompanyUpdate(CamelModel):
    """
    Schema per l'aggiornamento parziale di un'azienda.

    Tutti i campi sono opzionali; vengono applicati solo quelli inviati.
    """

    name: Optional[str] = Field(None, min_length=2, max_length=255)
    tax_id: Optional[str] = Field(None, min_length=14, max_length=18)
    contact_name: Optional[str] = Field(None, min_length=2, max_length=255)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, min_length=10, max_length=20)
    address: Optional[str] = Field(None, min_length=5, max_length=255)
    city: Optional[str] = Field(None, min_length=2, max_length=100)
    state: Optional[str] = Field(None, min_length=1, max_length=50)
    notes: Optional[str] = None

    @field_validator("name", "tax_id", "contact_name", "address", "city", "state", mode="before")
    @classmethod
    def strip_text(cls, v):
        return _strip(v)

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v: Optional[str]) -> Optional[str]:
        return normalize_phone(v)


class CompanyRead(CompanyBase):
    """
    Schema per la risposta API che include i campi di sistema.
    """

    # In lettura non si rivalida l'email già memorizzata
    email: str

    id: uuid.UUID = Field(..., description="UUID dell'azienda")
    created_at: datetime.datetime = Field(..., description="Data/ora creazione")
    updated_at: datetime.datetime = Field(..., description="Data/ora ultimo aggiornamento")


class CompanyList(PaginatedList):
    """Lista paginata di aziende."""

    companies: list[CompanyRead] = Field(
        default_factory=list,
        description="Lista delle aziende",
    )
