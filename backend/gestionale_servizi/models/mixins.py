"""
Mixin SQLAlchemy per modelli
Progetto: Gestionale Servizi (Servizi di Ingegneria e Preventivi)

Mixin riutilizzabili per aggiungere funzionalità comuni ai modelli.
"""

import datetime
import uuid

from sqlalchemy import DateTime, Uuid
from sqlalchemy import event
from sqlalchemy.orm import Mapped, mapped_column, Session
from sqlalchemy.sql import func


def utcnow() -> datetime.datetime:
    """Data/ora corrente in UTC."""
    return datetime.datetime.now(datetime.timezone.utc)


class TimestampMixin:
    """
    Mixin per gestione automatica timestamp creazione e aggiornamento.

    Aggiunge i campi:
    - created_at: data/ora di creazione record (impostato automaticamente)
    - updated_at: data/ora ultimo aggiornamento (aggiornato automaticamente)

    Il default Python garantisce la risoluzione al microsecondo anche per
    gli insert massivi (usata per l'ordinamento "più recenti prima");
    il server_default copre gli insert eseguiti fuori dall'ORM.

    Usage:
        class MyModel(Base, TimestampMixin):
            __tablename__ = "my_table"
            ...
    """

    created_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        nullable=False,
        doc="Data/ora di creazione del record",
    )

    updated_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        nullable=False,
        doc="Data/ora ultimo aggiornamento del record",
    )


class UUIDMixin:
    """
    Mixin per ID UUID generato lato applicazione.

    Usage:
        class MyModel(Base, UUIDMixin):
            __tablename__ = "my_table"
            ...
    """

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
        doc="UUID primary key",
    )


# ------------------------------------------------------------
# Event Listeners
# ------------------------------------------------------------
@event.listens_for(Session, "before_flush")
def update_timestamp(session: Session, flush_context, instances) -> None:
    """
    Event listener per aggiornare automaticamente il campo updated_at.

    Eseguito prima di ogni flush ORM: aggiorna updated_at degli oggetti
    modificati. Gli UPDATE Core (usati per i preventivi) impostano
    updated_at esplicitamente perché non passano da questo evento.

    Args:
        session: Sessione SQLAlchemy
        flush_context: Contesto del flush
        instances: Oggetti instances (non usato)
    """
    now = utcnow()

    for obj in session.dirty:
        if hasattr(obj, "updated_at"):
            # Solo se l'oggetto è stato realmente modificato
            if session.is_modified(obj, include_collections=False):
                obj.updated_at = now
