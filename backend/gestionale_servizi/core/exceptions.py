"""
Eccezioni Custom per l'applicazione.
Progetto: Gestionale Servizi (Servizi di Ingegneria e Preventivi)

Definisce eccezioni specifiche del dominio per una gestione
centralizzata degli errori. Ogni eccezione porta con sé lo status HTTP
e un codice errore stabile per il frontend; il rendering JSON avviene
in un unico handler registrato in main.py.

NOTA: BusinessValidationError è volutamente distinta da pydantic.ValidationError.
- pydantic.ValidationError: errori di formato/tipo nei dati di input
- BusinessValidationError: violazioni delle regole di business logic
Entrambe vengono restituite al client come HTTP 400.
"""

from typing import Any, Dict, Optional

__all__ = [
    "AppException",
    "NotFoundError",
    "DuplicateError",
    "BusinessValidationError",
    "ReferentialConflictError",
    "TransientStoreError",
]


class AppException(Exception):
    """
    Base exception per l'applicazione.

    Tutte le eccezioni custom ereditano da questa classe base.

    Attributes:
        status_code: HTTP status code da restituire al client
        error_code: Identificativo univoco dell'errore per il frontend
        detail: Messaggio di errore leggibile per l'utente
        extra: Dizionario con dati aggiuntivi per il frontend
    """

    status_code: int = 500
    error_code: str = "INTERNAL_SERVER_ERROR"

    def __init__(
        self,
        detail: str,
        error_code: Optional[str] = None,
        extra: Optional[Dict[str, Any]] = None,
    ) -> None:
        """
        Inizializza l'eccezione.

        Args:
            detail: Messaggio di errore dettagliato
            error_code: Identificativo univoco (default: quello di classe)
            extra: Dati aggiuntivi da passare al frontend (default: None)
        """
        self.detail = detail
        self.error_code = error_code if error_code is not None else self.error_code
        self.extra = extra
        self.status_code = self.__class__.status_code
        super().__init__(detail)


class NotFoundError(AppException):
    """
    Eccezione sollevata quando una risorsa non viene trovata.

    Utilizzata quando un'entità cercata (o referenziata) non esiste nel database.
    """

    status_code: int = 404
    error_code: str = "RESOURCE_NOT_FOUND"

    def __init__(
        self,
        detail: str = "Risorsa non trovata",
        error_code: Optional[str] = None,
        extra: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(detail, error_code, extra)


class DuplicateError(AppException):
    """
    Eccezione sollevata quando si tenta di creare una risorsa duplicata.

    Utilizzata per violazioni di vincoli unique (es. codice fiscale azienda già registrato).
    """

    status_code: int = 409
    error_code: str = "DUPLICATE_RESOURCE"

    def __init__(
        self,
        detail: str = "Risorsa già esistente",
        error_code: Optional[str] = None,
        extra: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(detail, error_code, extra)


class BusinessValidationError(ValueError, AppException):
    """
    Eccezione sollevata per violazioni delle regole di business logic.

    Eredita da ValueError per essere catturata dai validatori Pydantic.

    Esempi di utilizzo:
        - "Il valore totale non corrisponde alla somma delle voci"
        - "Un preventivo senza voci deve indicare il valore totale"

    Se extra contiene la chiave "errors", l'handler la espone al client
    come lista di errori per campo.
    """

    status_code: int = 400
    error_code: str = "VALIDATION_ERROR"

    def __init__(
        self,
        detail: str = "Dati non validi",
        error_code: Optional[str] = None,
        extra: Optional[Dict[str, Any]] = None,
    ) -> None:
        # Chiama AppException.__init__ direttamente per evitare ValueError
        AppException.__init__(self, detail, error_code, extra)


class ReferentialConflictError(AppException):
    """
    Eccezione sollevata quando un'eliminazione lascerebbe righe orfane.

    Il controllo avviene a livello applicativo PRIMA di eseguire la DELETE,
    così il client riceve un messaggio leggibile e non l'errore del vincolo.

    Esempi di utilizzo:
        - "Impossibile eliminare l'azienda: esistono servizi o preventivi collegati"
        - "Impossibile eliminare il servizio: è presente in uno o più preventivi"
    """

    status_code: int = 400
    error_code: str = "REFERENTIAL_CONFLICT"

    def __init__(
        self,
        detail: str = "Risorsa referenziata da altri record",
        error_code: Optional[str] = None,
        extra: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(detail, error_code, extra)


class TransientStoreError(AppException):
    """
    Eccezione sollevata per errori del database non imputabili al client.

    Utilizzata quando i tentativi di generazione del numero preventivo sono
    esauriti o quando il driver segnala un errore imprevisto.
    """

    status_code: int = 500
    error_code: str = "TRANSIENT_STORE_ERROR"

    def __init__(
        self,
        detail: str = "Errore temporaneo del database, riprovare",
        error_code: Optional[str] = None,
        extra: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(detail, error_code, extra)
