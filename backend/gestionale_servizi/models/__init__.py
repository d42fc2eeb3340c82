"""
Modelli Database SQLAlchemy
Progetto: Gestionale Servizi (Servizi di Ingegneria e Preventivi)

Import centralizzato di tutti i modelli per create_all e usage generico.

Modelli:
- Company: Anagrafica aziende clienti
- Service: Servizi di ingegneria (identificati dal codice ART)
- Quote: Preventivi (radice dell'aggregato)
- QuoteItem: Voci del preventivo
"""

# SQLAlchemy 2.0 Base declarativa
# Importato qui per essere disponibile per tutti i modelli
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class per tutti i modelli SQLAlchemy."""
    pass


from gestionale_servizi.models.company import Company
from gestionale_servizi.models.service import Service
from gestionale_servizi.models.quote import Quote, QuoteItem

__all__ = [
    "Base",
    "Company",
    "Service",
    "Quote",
    "QuoteItem",
]
