"""
Schemas Pydantic per i Preventivi
Progetto: Gestionale Servizi (Servizi di Ingegneria e Preventivi)

Definisce i payload di creazione/aggiornamento dell'aggregato Preventivo
(testata + voci) e le viste di lettura restituite dall'API.

Regole sui totali:
- il totale riga è sempre calcolato dal server (quantità × valore unitario)
- con voci presenti, un totale inviato deve coincidere con la somma delle
  righe; se omesso viene calcolato
- un preventivo senza voci deve indicare un totale positivo
"""

import datetime
import uuid
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Iterable, Optional

from pydantic import Field, model_validator

from gestionale_servizi.core.exceptions import BusinessValidationError
from gestionale_servizi.schemas.common import CamelModel, PaginatedList
from gestionale_servizi.schemas.company import CompanyRead
from gestionale_servizi.schemas.service import ServiceBrief

CENT = Decimal("0.01")


class QuoteStatus(str, Enum):
    """Stati possibili di un preventivo."""
    PENDING  = "pending"   # In attesa di risposta
    APPROVED = "approved"  # Approvato dal cliente
    REJECTED = "rejected"  # Rifiutato dal cliente


class QuoteStatusFilter(str, Enum):
    """Filtro stato per la lista preventivi ("all" disattiva il filtro)."""
    ALL      = "all"
    PENDING  = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


# -------------------------------------------------------------------
# Calcolo importi
# -------------------------------------------------------------------

def to_cents(value: Decimal) -> Decimal:
    """Arrotonda un importo al centesimo (half-up)."""
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def compute_line_total(quantity: int, unit_value: Decimal) -> Decimal:
    """
    Calcola il totale di una voce di preventivo.

    Args:
        quantity: Quantità (intero positivo)
        unit_value: Valore unitario

    Returns:
        quantity × unit_value arrotondato al centesimo
    """
    return to_cents(Decimal(quantity) * Decimal(unit_value))


def sum_line_totals(items: Iterable["QuoteItemCreate"]) -> Decimal:
    """Somma dei totali riga di una lista di voci."""
    total = Decimal("0")
    for item in items:
        total += compute_line_total(item.quantity, item.unit_value)
    return to_cents(total)


# -------------------------------------------------------------------
# Schemas di input
# -------------------------------------------------------------------

class QuoteItemCreate(CamelModel):
    """
    Voce di preventivo in input.

    line_total non è accettato dal client: viene calcolato dal server.
    """

    service_id: Optional[uuid.UUID] = Field(
        None,
        description="UUID del servizio collegato (opzionale)",
    )

    description: str = Field(
        ...,
        min_length=3,
        description="Descrizione della voce",
    )

    quantity: int = Field(
        default=1,
        gt=0,
        description="Quantità",
    )

    unit_value: Decimal = Field(
        ...,
        gt=0,
        max_digits=10,
        decimal_places=2,
        description="Valore unitario",
    )

    @property
    def line_total(self) -> Decimal:
        return compute_line_total(self.quantity, self.unit_value)


class QuoteCreate(CamelModel):
    """
    Testata del preventivo in creazione.

    Il numero preventivo non è accettato: viene generato dal server.
    """

    title: str = Field(..., min_length=3, max_length=255, description="Titolo")
    description: str = Field(..., min_length=5, description="Descrizione")
    issue_date: datetime.date = Field(..., description="Data di emissione")
    valid_until: datetime.date = Field(..., description="Data di fine validità")
    company_id: uuid.UUID = Field(..., description="UUID dell'azienda destinataria")

    status: QuoteStatus = Field(
        default=QuoteStatus.PENDING,
        description="Stato del preventivo",
    )

    total_value: Optional[Decimal] = Field(
        None,
        gt=0,
        max_digits=10,
        decimal_places=2,
        description="Valore totale (calcolato dalle voci se omesso)",
    )


class QuoteUpdate(CamelModel):
    """
    Testata del preventivo in aggiornamento (parziale).

    Vengono applicati solo i campi inviati.
    """

    title: Optional[str] = Field(None, min_length=3, max_length=255)
    description: Optional[str] = Field(None, min_length=5)
    issue_date: Optional[datetime.date] = None
    valid_until: Optional[datetime.date] = None
    company_id: Optional[uuid.UUID] = None
    status: Optional[QuoteStatus] = None
    total_value: Optional[Decimal] = Field(None, gt=0, max_digits=10, decimal_places=2)


def _reconcile_total(quote, items: list[QuoteItemCreate]) -> None:
    items_total = sum_line_totals(items)
    if quote.total_value is None:
        quote.total_value = items_total
    elif to_cents(quote.total_value) != items_total:
        raise BusinessValidationError(
            f"Il valore totale ({to_cents(quote.total_value)}) non corrisponde "
            f"alla somma delle voci ({items_total})"
        )


class QuoteCreateRequest(CamelModel):
    """
    Payload di creazione: testata + lista voci.

    Example:
        {"quote": {"title": "...", "companyId": "..."}, "items": [{"description": "...", "unitValue": "100.00"}]}
    """

    quote: QuoteCreate
    items: list[QuoteItemCreate] = Field(default_factory=list)

    @model_validator(mode="after")
    def validate_total(self) -> "QuoteCreateRequest":
        if self.items:
            _reconcile_total(self.quote, self.items)
        elif self.quote.total_value is None:
            raise BusinessValidationError(
                "Un preventivo senza voci deve indicare il valore totale"
            )
        return self


class QuoteUpdateRequest(CamelModel):
    """
    Payload di aggiornamento.

    Se `items` è presente (anche vuota) sostituisce integralmente le voci
    esistenti; se assente le voci non vengono toccate. Non è supportata la
    modifica parziale delle singole voci.
    """

    quote: QuoteUpdate = Field(default_factory=QuoteUpdate)
    items: Optional[list[QuoteItemCreate]] = None

    @model_validator(mode="after")
    def validate_total(self) -> "QuoteUpdateRequest":
        if self.items:
            _reconcile_total(self.quote, self.items)
        return self


# -------------------------------------------------------------------
# Schemas di output
# -------------------------------------------------------------------

class QuoteItemRead(CamelModel):
    """Voce di preventivo con l'eventuale servizio collegato."""

    id: uuid.UUID
    quote_id: uuid.UUID
    service_id: Optional[uuid.UUID] = None
    description: str
    quantity: int
    unit_value: Decimal
    line_total: Decimal
    service: Optional[ServiceBrief] = None


class QuoteRead(CamelModel):
    """Testata del preventivo."""

    id: uuid.UUID
    quote_number: str
    title: str
    description: str
    issue_date: datetime.date
    valid_until: datetime.date
    company_id: uuid.UUID
    total_value: Decimal
    status: QuoteStatus
    created_at: datetime.datetime
    updated_at: datetime.datetime


class QuoteSummaryRead(QuoteRead):
    """Preventivo in lista, con l'azienda destinataria incorporata."""

    company: Optional[CompanyRead] = None


class QuoteDetailRead(QuoteSummaryRead):
    """Preventivo completo: azienda, voci e servizi collegati."""

    items: list[QuoteItemRead] = Field(default_factory=list)


class QuoteList(PaginatedList):
    """Lista paginata di preventivi."""

    quotes: list[QuoteSummaryRead] = Field(
        default_factory=list,
        description="Lista dei preventivi",
    )


class QuoteDeleteResponse(CamelModel):
    """Esito dell'eliminazione di un preventivo."""

    message: str
    id: uuid.UUID
    quote_number: str
