"""
Tests for QuoteService write path (create, update, delete).

I test girano su SQLite in memoria con le foreign key attive, usando i
modelli reali. Le verifiche di atomicità simulano un guasto a metà
transazione e controllano lo stato del database con una sessione nuova.
"""

import asyncio
import uuid
from decimal import Decimal

import pytest
from sqlalchemy import func, select

from gestionale_servizi.core.exceptions import (
    BusinessValidationError,
    NotFoundError,
    TransientStoreError,
)
from gestionale_servizi.models import Company, Quote, QuoteItem
from gestionale_servizi.schemas.quote import QuoteUpdateRequest
from gestionale_servizi.services import quote_service as quote_service_module
from gestionale_servizi.services.quote_service import QuoteService


async def _count(session, model, *conditions) -> int:
    query = select(func.count()).select_from(model)
    if conditions:
        query = query.where(*conditions)
    return await session.scalar(query)


# ============================================================
# Creazione
# ============================================================


class TestQuoteCreate:
    """Tests for quote creation."""

    @pytest.mark.asyncio
    async def test_create_persists_quote_and_items(self, db_session, company_factory, quote_payload):
        """Test crea testata e voci con totali calcolati dal server."""
        company = await company_factory()

        quote = await QuoteService().create(db=db_session, payload=quote_payload(company.id))

        assert quote.quote_number.startswith("ORC-")
        assert quote.company.id == company.id
        assert quote.total_value == Decimal("250.00")
        assert sorted(item.line_total for item in quote.items) == [Decimal("100.00"), Decimal("150.00")]
        assert await _count(db_session, QuoteItem, QuoteItem.quote_id == quote.id) == 2

    @pytest.mark.asyncio
    async def test_create_links_service_to_item(
        self, db_session, company_factory, service_factory, quote_payload
    ):
        """Test la voce collegata a un servizio lo restituisce nel dettaglio."""
        company = await company_factory()
        service = await service_factory(company, art="ART-9001")
        items = [
            {"description": "Servizio ART", "quantity": 1, "unit_value": "1500.00", "service_id": service.id},
        ]

        quote = await QuoteService().create(db=db_session, payload=quote_payload(company.id, items=items))

        assert quote.items[0].service is not None
        assert quote.items[0].service.art == "ART-9001"

    @pytest.mark.asyncio
    async def test_create_without_items_keeps_explicit_total(
        self, db_session, company_factory, quote_payload
    ):
        """Test preventivo senza voci con totale esplicito."""
        company = await company_factory()

        quote = await QuoteService().create(
            db=db_session,
            payload=quote_payload(company.id, items=[], total_value=Decimal("999.90")),
        )

        assert quote.items == []
        assert quote.total_value == Decimal("999.90")

    @pytest.mark.asyncio
    async def test_create_unknown_company_raises_not_found(self, db_session, quote_payload):
        """Test azienda inesistente: nessuna riga scritta."""
        with pytest.raises(NotFoundError):
            await QuoteService().create(db=db_session, payload=quote_payload(uuid.uuid4()))

        assert await _count(db_session, Quote) == 0

    @pytest.mark.asyncio
    async def test_create_unknown_service_raises_not_found(
        self, db_session, company_factory, quote_payload
    ):
        """Test servizio referenziato inesistente."""
        company = await company_factory()
        items = [{"description": "Voce orfana", "unit_value": "10.00", "service_id": str(uuid.uuid4())}]

        with pytest.raises(NotFoundError):
            await QuoteService().create(db=db_session, payload=quote_payload(company.id, items=items))

        assert await _count(db_session, Quote) == 0

    @pytest.mark.asyncio
    async def test_create_is_atomic_when_items_fail(
        self, db_session, session_factory, company_factory, quote_payload, monkeypatch
    ):
        """Test guasto durante l'insert delle voci: né testata né voci restano."""
        company = await company_factory()
        original_insert = QuoteService._insert_items

        async def failing_insert(self, db, quote_id, items):
            await original_insert(self, db, quote_id, items)
            raise RuntimeError("guasto simulato")

        monkeypatch.setattr(QuoteService, "_insert_items", failing_insert)

        with pytest.raises(RuntimeError):
            await QuoteService().create(db=db_session, payload=quote_payload(company.id))

        async with session_factory() as check:
            assert await _count(check, Quote) == 0
            assert await _count(check, QuoteItem) == 0


# ============================================================
# Numero preventivo
# ============================================================


class TestQuoteNumberRetry:
    """Tests for quote number collision handling."""

    @pytest.mark.asyncio
    async def test_collision_is_retried_with_new_number(
        self, db_session, company_factory, quote_payload, monkeypatch
    ):
        """Test una collisione viene risolta al secondo tentativo."""
        company = await company_factory()
        numbers = iter(["ORC-00000001", "ORC-00000001", "ORC-00000002"])
        monkeypatch.setattr(quote_service_module, "generate_quote_number", lambda: next(numbers))
        service = QuoteService()

        first = await service.create(db=db_session, payload=quote_payload(company.id))
        first_number = first.quote_number
        second = await service.create(db=db_session, payload=quote_payload(company.id))

        assert first_number == "ORC-00000001"
        assert second.quote_number == "ORC-00000002"
        assert await _count(db_session, Quote) == 2
        assert await _count(db_session, QuoteItem) == 4

    @pytest.mark.asyncio
    async def test_exhausted_attempts_raise_transient_error(
        self, db_session, company_factory, quote_payload, monkeypatch
    ):
        """Test tentativi esauriti: errore transitorio e nessuna scrittura parziale."""
        company = await company_factory()
        monkeypatch.setattr(quote_service_module, "generate_quote_number", lambda: "ORC-12345678")
        service = QuoteService()

        await service.create(db=db_session, payload=quote_payload(company.id))

        with pytest.raises(TransientStoreError):
            await service.create(db=db_session, payload=quote_payload(company.id))

        assert await _count(db_session, Quote) == 1
        assert await _count(db_session, QuoteItem) == 2

    @pytest.mark.asyncio
    async def test_numbers_are_unique(self, db_session, company_factory, quote_payload):
        """Test preventivi creati in sequenza hanno numeri distinti."""
        company = await company_factory()
        service = QuoteService()

        numbers = set()
        for _ in range(5):
            quote = await service.create(db=db_session, payload=quote_payload(company.id, items=[], total_value="10.00"))
            numbers.add(quote.quote_number)

        assert len(numbers) == 5

    @pytest.mark.asyncio
    async def test_parallel_creates_get_distinct_numbers(self, file_session_factory, quote_payload):
        """Test 20 creazioni concorrenti, ognuna con la propria sessione: 20 numeri distinti."""
        async with file_session_factory() as session:
            company = Company(
                name="Studio Parallelo",
                tax_id="98.765.432/0001-10",
                contact_name="Laura Verdi",
                email="laura.verdi@parallelo.it",
                phone="+39 02 7654321",
                address="Via Torino 10",
                city="Milano",
                state="MI",
            )
            session.add(company)
            await session.commit()
            company_id = company.id

        async def _create_one() -> str:
            async with file_session_factory() as session:
                quote = await QuoteService().create(db=session, payload=quote_payload(company_id))
                return quote.quote_number

        numbers = await asyncio.gather(*(_create_one() for _ in range(20)))

        assert len(set(numbers)) == 20
        assert all(n.startswith("ORC-") for n in numbers)

        async with file_session_factory() as session:
            assert await _count(session, Quote) == 20
            assert await _count(session, QuoteItem) == 40


# ============================================================
# Aggiornamento
# ============================================================


class TestQuoteUpdate:
    """Tests for quote update with item replacement."""

    @pytest.mark.asyncio
    async def test_update_replaces_all_items(self, db_session, company_factory, quote_payload):
        """Test le nuove voci sostituiscono integralmente le precedenti."""
        company = await company_factory()
        service = QuoteService()
        quote = await service.create(db=db_session, payload=quote_payload(company.id))
        quote_id = quote.id
        old_item_ids = {item.id for item in quote.items}

        payload = QuoteUpdateRequest.model_validate({
            "quote": {"title": "Progetto rivisto"},
            "items": [{"description": "Direzione lavori", "quantity": 3, "unitValue": "200.00"}],
        })
        updated = await service.update(db=db_session, quote_id=quote_id, payload=payload)

        assert updated.title == "Progetto rivisto"
        assert updated.total_value == Decimal("600.00")
        assert len(updated.items) == 1
        assert updated.items[0].line_total == Decimal("600.00")
        assert old_item_ids.isdisjoint({item.id for item in updated.items})
        assert await _count(db_session, QuoteItem, QuoteItem.id.in_(old_item_ids)) == 0

    @pytest.mark.asyncio
    async def test_update_without_items_keeps_items(self, db_session, company_factory, quote_payload):
        """Test senza lista voci le voci esistenti restano invariate."""
        company = await company_factory()
        service = QuoteService()
        quote = await service.create(db=db_session, payload=quote_payload(company.id))
        item_ids = {item.id for item in quote.items}

        payload = QuoteUpdateRequest.model_validate({"quote": {"status": "approved"}})
        updated = await service.update(db=db_session, quote_id=quote.id, payload=payload)

        assert updated.status == "approved"
        assert {item.id for item in updated.items} == item_ids

    @pytest.mark.asyncio
    async def test_update_with_empty_items_removes_all(self, db_session, company_factory, quote_payload):
        """Test una lista vuota elimina tutte le voci."""
        company = await company_factory()
        service = QuoteService()
        quote = await service.create(db=db_session, payload=quote_payload(company.id))

        payload = QuoteUpdateRequest.model_validate({"quote": {}, "items": []})
        updated = await service.update(db=db_session, quote_id=quote.id, payload=payload)

        assert updated.items == []
        assert await _count(db_session, QuoteItem, QuoteItem.quote_id == quote.id) == 0

    @pytest.mark.asyncio
    async def test_update_refreshes_updated_at(self, db_session, company_factory, quote_payload):
        """Test l'aggiornamento rinfresca updated_at."""
        company = await company_factory()
        service = QuoteService()
        quote = await service.create(db=db_session, payload=quote_payload(company.id))
        before = quote.updated_at

        payload = QuoteUpdateRequest.model_validate({"quote": {"title": "Nuovo titolo"}})
        updated = await service.update(db=db_session, quote_id=quote.id, payload=payload)

        assert updated.updated_at >= before
        assert updated.quote_number == quote.quote_number

    @pytest.mark.asyncio
    async def test_update_total_mismatch_with_stored_items(
        self, db_session, company_factory, quote_payload
    ):
        """Test un totale incoerente con le voci memorizzate viene rifiutato."""
        company = await company_factory()
        service = QuoteService()
        quote = await service.create(db=db_session, payload=quote_payload(company.id))

        payload = QuoteUpdateRequest.model_validate({"quote": {"totalValue": "300.00"}})
        with pytest.raises(BusinessValidationError):
            await service.update(db=db_session, quote_id=quote.id, payload=payload)

    @pytest.mark.asyncio
    async def test_update_unknown_quote_raises_not_found(self, db_session):
        """Test aggiornamento di un preventivo inesistente."""
        payload = QuoteUpdateRequest.model_validate({"quote": {"title": "Nessuno"}})

        with pytest.raises(NotFoundError):
            await QuoteService().update(db=db_session, quote_id=uuid.uuid4(), payload=payload)

    @pytest.mark.asyncio
    async def test_update_is_atomic_when_items_fail(
        self, db_session, session_factory, company_factory, quote_payload, monkeypatch
    ):
        """Test guasto dopo la cancellazione delle voci: testata e voci originali intatte."""
        company = await company_factory()
        service = QuoteService()
        quote = await service.create(db=db_session, payload=quote_payload(company.id))
        quote_id = quote.id
        item_ids = {item.id for item in quote.items}

        async def failing_insert(self, db, quote_id, items):
            raise RuntimeError("guasto simulato")

        monkeypatch.setattr(QuoteService, "_insert_items", failing_insert)

        payload = QuoteUpdateRequest.model_validate({
            "quote": {"title": "Mai salvato"},
            "items": [{"description": "Voce nuova", "unitValue": "10.00"}],
        })
        with pytest.raises(RuntimeError):
            await service.update(db=db_session, quote_id=quote_id, payload=payload)

        async with session_factory() as check:
            title = await check.scalar(select(Quote.title).where(Quote.id == quote_id))
            stored_ids = set(
                (await check.execute(select(QuoteItem.id).where(QuoteItem.quote_id == quote_id))).scalars()
            )

        assert title == "Progetto impianto"
        assert stored_ids == item_ids


# ============================================================
# Eliminazione
# ============================================================


class TestQuoteDelete:
    """Tests for quote deletion."""

    @pytest.mark.asyncio
    async def test_delete_removes_quote_and_items(self, db_session, company_factory, quote_payload):
        """Test eliminazione: nessuna voce orfana resta."""
        company = await company_factory()
        service = QuoteService()
        quote = await service.create(db=db_session, payload=quote_payload(company.id))
        quote_id, quote_number = quote.id, quote.quote_number

        deleted_id, deleted_number = await service.delete(db=db_session, quote_id=quote_id)

        assert deleted_id == quote_id
        assert deleted_number == quote_number
        assert await _count(db_session, Quote, Quote.id == quote_id) == 0
        assert await _count(db_session, QuoteItem, QuoteItem.quote_id == quote_id) == 0

    @pytest.mark.asyncio
    async def test_delete_unknown_quote_raises_not_found(self, db_session):
        """Test eliminazione di un preventivo inesistente."""
        with pytest.raises(NotFoundError):
            await QuoteService().delete(db=db_session, quote_id=uuid.uuid4())

    @pytest.mark.asyncio
    async def test_delete_is_atomic(
        self, db_session, session_factory, company_factory, quote_payload, monkeypatch
    ):
        """Test guasto durante l'eliminazione: preventivo e voci restano."""
        company = await company_factory()
        service = QuoteService()
        quote = await service.create(db=db_session, payload=quote_payload(company.id))
        quote_id = quote.id
        original_delete = QuoteService._delete_items

        async def failing_delete(self, db, quote_id):
            await original_delete(self, db, quote_id)
            raise RuntimeError("guasto simulato")

        monkeypatch.setattr(QuoteService, "_delete_items", failing_delete)

        with pytest.raises(RuntimeError):
            await service.delete(db=db_session, quote_id=quote_id)

        async with session_factory() as check:
            assert await _count(check, Quote, Quote.id == quote_id) == 1
            assert await _count(check, QuoteItem, QuoteItem.quote_id == quote_id) == 2
