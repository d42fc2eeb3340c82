"""
Pytest configuration and fixtures.

Fornisce:
- mock_db: AsyncSession finta per i test unitari puri
- db_session / session_factory: database SQLite in memoria con vincoli
  di foreign key attivi, schema creato dai modelli reali
- file_session_factory: database SQLite su file per sessioni concorrenti
- company_factory / service_factory / quote_payload: dati di prova
- api_client: client HTTP sull'app FastAPI con get_db sovrascritto
"""

import uuid
from datetime import date, timedelta
from decimal import Decimal
from typing import AsyncGenerator
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
import pytest_asyncio
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from gestionale_servizi.core.database import get_db
from gestionale_servizi.models import Base, Company, Service
from gestionale_servizi.schemas.quote import QuoteCreateRequest

TEST_DATABASE_URL = "sqlite+aiosqlite://"


# ============================================================
# Fixtures per AsyncSession Mock
# ============================================================


@pytest.fixture
def mock_db():
    """Crea un mock di AsyncSession."""
    db = AsyncMock(spec=AsyncSession)
    db.execute = AsyncMock()
    db.scalar = AsyncMock()
    db.add = MagicMock()
    db.commit = AsyncMock()
    db.rollback = AsyncMock()
    db.flush = AsyncMock()
    db.refresh = AsyncMock()
    db.delete = AsyncMock()
    return db


# ============================================================
# Fixtures per database SQLite in memoria
# ============================================================


@pytest_asyncio.fixture
async def test_engine():
    """Database SQLite in memoria con foreign key attive."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine.sync_engine, "connect")
    def _set_sqlite_pragma(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(test_engine):
    """Session factory con la stessa configurazione di produzione."""
    return async_sessionmaker(
        bind=test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest_asyncio.fixture
async def file_session_factory(tmp_path):
    """
    Session factory su un file SQLite, una connessione per sessione.

    Serve ai test con sessioni concorrenti: lo StaticPool in memoria
    condivide un'unica connessione tra tutte le sessioni.
    """
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'servizi.db'}",
        connect_args={"timeout": 30},
    )

    @event.listens_for(engine.sync_engine, "connect")
    def _set_sqlite_pragma(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Sessione database per un singolo test."""
    async with session_factory() as session:
        yield session


# ============================================================
# Fixtures per dati di prova
# ============================================================


@pytest_asyncio.fixture
async def company_factory(db_session):
    """Crea e salva aziende di prova."""
    counter = {"n": 0}

    async def _create(**overrides) -> Company:
        counter["n"] += 1
        n = counter["n"]
        data = {
            "name": f"Studio Tecnico {n}",
            "tax_id": f"12.345.678/0001-{n:02d}",
            "contact_name": "Mario Rossi",
            "email": f"studio{n}@ingegneria.it",
            "phone": "+39 02 1234567",
            "address": f"Via Roma {n}",
            "city": "Milano",
            "state": "MI",
        }
        data.update(overrides)
        company = Company(**data)
        db_session.add(company)
        await db_session.commit()
        return company

    return _create


@pytest_asyncio.fixture
async def service_factory(db_session):
    """Crea e salva servizi di prova per un'azienda."""

    async def _create(company: Company, **overrides) -> Service:
        data = {
            "art": "ART-2024-0001",
            "description": "Verifica impianto elettrico",
            "service_date": date.today(),
            "expiry_date": date.today() + timedelta(days=365),
            "value": Decimal("1500.00"),
            "status": "scheduled",
            "company_id": company.id,
        }
        data.update(overrides)
        service = Service(**data)
        db_session.add(service)
        await db_session.commit()
        return service

    return _create


@pytest.fixture
def quote_payload():
    """Costruisce un QuoteCreateRequest valido."""

    def _build(company_id: uuid.UUID, items=None, **quote_overrides) -> QuoteCreateRequest:
        quote = {
            "title": "Progetto impianto",
            "description": "Progettazione impianto elettrico capannone",
            "issue_date": date(2025, 1, 10),
            "valid_until": date(2025, 2, 10),
            "company_id": company_id,
            "status": "pending",
        }
        quote.update(quote_overrides)
        if items is None:
            items = [
                {"description": "Sopralluogo", "quantity": 1, "unit_value": Decimal("100.00")},
                {"description": "Relazione tecnica", "quantity": 2, "unit_value": Decimal("75.00")},
            ]
        return QuoteCreateRequest.model_validate({"quote": quote, "items": items})

    return _build


# ============================================================
# Fixture per client HTTP
# ============================================================


@pytest_asyncio.fixture
async def api_client(session_factory) -> AsyncGenerator[httpx.AsyncClient, None]:
    """
    Client HTTP sull'app FastAPI.

    Ogni richiesta riceve una nuova sessione sul database di test,
    come avviene in produzione con get_db.
    """
    from gestionale_servizi.main import app

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
