"""
Mapping delle righe di join dei preventivi
Progetto: Gestionale Servizi (Servizi di Ingegneria e Preventivi)

La query di lista restituisce righe piatte (preventivo, azienda). Questo
modulo le trasforma nei record annidati dell'API, garantendo un solo
record per preventivo anche se il join dovesse moltiplicare le righe.
"""

import logging
from typing import Any, Iterable, Optional

from gestionale_servizi.schemas.company import CompanyRead
from gestionale_servizi.schemas.quote import QuoteSummaryRead

# Logger per questo modulo
logger = logging.getLogger(__name__)


def group_quote_rows(rows: Iterable[tuple[Any, Optional[Any]]]) -> list[QuoteSummaryRead]:
    """
    Raggruppa le righe (preventivo, azienda) per id del preventivo.

    L'ordine del risultato è quello di prima comparsa di ogni preventivo
    nelle righe in ingresso, quindi l'ordinamento della query è preservato.
    Le righe duplicate successive alla prima vengono scartate.

    Args:
        rows: Sequenza di tuple (quote, company); company può essere None

    Returns:
        Lista di QuoteSummaryRead, uno per preventivo
    """
    grouped: dict[Any, QuoteSummaryRead] = {}
    duplicates = 0

    for quote, company in rows:
        if quote.id in grouped:
            duplicates += 1
            continue

        summary = QuoteSummaryRead.model_validate(quote)
        summary.company = CompanyRead.model_validate(company) if company is not None else None
        grouped[quote.id] = summary

    if duplicates:
        logger.debug("Scartate %s righe duplicate nel join preventivi/aziende", duplicates)

    return list(grouped.values())
