"""
Schemi Pydantic condivisi
Progetto: Gestionale Servizi (Servizi di Ingegneria e Preventivi)

Base camelCase per tutti gli schemi API, metadati di paginazione e
formato delle risposte di errore.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """
    Schema base con nomi dei campi camelCase in JSON.

    Accetta in input sia il nome camelCase (companyId) sia quello
    Python (company_id); in output FastAPI serializza per alias.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
        use_enum_values=True,  # L'ORM riceve le stringhe, non gli oggetti Enum
        validate_default=True,  # anche i default Enum diventano stringhe
    )


class PaginatedList(CamelModel):
    """
    Metadati comuni delle risposte paginate.

    Le sottoclassi aggiungono la lista degli elementi con il nome della
    risorsa (quotes, companies, services).
    """

    total_count: int = Field(
        ...,
        ge=0,
        description="Numero totale di elementi che soddisfano i filtri",
    )

    current_page: int = Field(
        ...,
        ge=1,
        description="Numero pagina corrente",
    )

    page_size: int = Field(
        ...,
        ge=1,
        description="Numero elementi per pagina",
    )

    @computed_field(alias="totalPages")
    @property
    def total_pages(self) -> int:
        """
        Numero totale di pagine: ceil(total_count / page_size).

        Returns:
            Numero totale di pagine (0 se non ci sono elementi)
        """
        return (self.total_count + self.page_size - 1) // self.page_size


class FieldError(BaseModel):
    """Errore di validazione relativo a un singolo campo."""

    field: str
    message: str


class ErrorResponse(BaseModel):
    """
    Corpo JSON di tutte le risposte di errore.

    Usato per documentare le risposte in OpenAPI; il rendering effettivo
    avviene negli exception handler di main.py.
    """

    model_config = ConfigDict(populate_by_name=True)

    message: str
    error_code: str = Field(..., alias="errorCode")
    errors: Optional[list[FieldError]] = None
