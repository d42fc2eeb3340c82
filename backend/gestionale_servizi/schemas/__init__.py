"""
Schemas Pydantic per il progetto Gestionale Servizi

Questo modulo contiene tutti gli schemi Pydantic utilizzati per la validazione
e serializzazione delle richieste e risposte API (JSON camelCase).
"""

from gestionale_servizi.schemas.common import CamelModel, ErrorResponse, FieldError, PaginatedList
from gestionale_servizi.schemas.company import (
    CompanyCreate,
    CompanyList,
    CompanyRead,
    CompanyUpdate,
)
from gestionale_servizi.schemas.service import (
    ServiceBrief,
    ServiceCreate,
    ServiceList,
    ServiceRead,
    ServiceStatus,
    ServiceStatusFilter,
    ServiceUpdate,
)
from gestionale_servizi.schemas.quote import (
    QuoteCreate,
    QuoteCreateRequest,
    QuoteDeleteResponse,
    QuoteDetailRead,
    QuoteItemCreate,
    QuoteItemRead,
    QuoteList,
    QuoteRead,
    QuoteStatus,
    QuoteStatusFilter,
    QuoteSummaryRead,
    QuoteUpdate,
    QuoteUpdateRequest,
)
from gestionale_servizi.schemas.dashboard import DashboardStats

__all__ = [
    "CamelModel",
    "ErrorResponse",
    "FieldError",
    "PaginatedList",
    "CompanyCreate",
    "CompanyList",
    "CompanyRead",
    "CompanyUpdate",
    "ServiceBrief",
    "ServiceCreate",
    "ServiceList",
    "ServiceRead",
    "ServiceStatus",
    "ServiceStatusFilter",
    "ServiceUpdate",
    "QuoteCreate",
    "QuoteCreateRequest",
    "QuoteDeleteResponse",
    "QuoteDetailRead",
    "QuoteItemCreate",
    "QuoteItemRead",
    "QuoteList",
    "QuoteRead",
    "QuoteStatus",
    "QuoteStatusFilter",
    "QuoteSummaryRead",
    "QuoteUpdate",
    "QuoteUpdateRequest",
    "DashboardStats",
]
