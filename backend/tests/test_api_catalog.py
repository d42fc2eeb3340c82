"""
HTTP tests for companies, services and dashboard endpoints.
"""

import pytest

COMPANY_BODY = {
    "name": "Sigma Ingegneria",
    "taxId": "11.222.333/0001-44",
    "contactName": "Anna Neri",
    "email": "anna.neri@sigma-ingegneria.it",
    "phone": "+39 011 5551234",
    "address": "Corso Francia 5",
    "city": "Torino",
    "state": "TO",
}


class TestCompaniesApi:
    """Tests for /api/v1/companies."""

    @pytest.mark.asyncio
    async def test_create_and_list(self, api_client):
        """Test creazione e lista paginata."""
        response = await api_client.post("/api/v1/companies", json=COMPANY_BODY)
        assert response.status_code == 201
        assert response.json()["taxId"] == COMPANY_BODY["taxId"]

        body = (await api_client.get("/api/v1/companies")).json()
        assert body["totalCount"] == 1
        assert body["companies"][0]["contactName"] == "Anna Neri"

        all_companies = (await api_client.get("/api/v1/companies/all")).json()
        assert [c["name"] for c in all_companies] == ["Sigma Ingegneria"]

    @pytest.mark.asyncio
    async def test_duplicate_tax_id_returns_409(self, api_client):
        """Test codice fiscale duplicato: 409."""
        await api_client.post("/api/v1/companies", json=COMPANY_BODY)

        response = await api_client.post("/api/v1/companies", json={**COMPANY_BODY, "name": "Altra"})

        assert response.status_code == 409
        assert response.json()["errorCode"] == "DUPLICATE_RESOURCE"

    @pytest.mark.asyncio
    async def test_invalid_email_returns_400(self, api_client):
        """Test email non valida: 400 con campo indicato."""
        response = await api_client.post("/api/v1/companies", json={**COMPANY_BODY, "email": "non-una-email"})

        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "email"

    @pytest.mark.asyncio
    async def test_delete_referenced_company_returns_400(self, api_client, company_factory, service_factory):
        """Test eliminazione azienda con servizi: 400 REFERENTIAL_CONFLICT."""
        company = await company_factory()
        await service_factory(company)

        response = await api_client.delete(f"/api/v1/companies/{company.id}")

        assert response.status_code == 400
        assert response.json()["errorCode"] == "REFERENTIAL_CONFLICT"


class TestServicesApi:
    """Tests for /api/v1/services."""

    @pytest.mark.asyncio
    async def test_create_get_and_dashboard_lists(self, api_client, company_factory):
        """Test creazione servizio, dettaglio e liste dashboard."""
        company = await company_factory()

        response = await api_client.post(
            "/api/v1/services",
            json={
                "art": "ART-2025-0001",
                "description": "Perizia strutturale",
                "serviceDate": "2025-05-01",
                "expiryDate": "2099-05-01",
                "value": "1200.00",
                "status": "in_progress",
                "companyId": str(company.id),
            },
        )
        assert response.status_code == 201
        service_id = response.json()["id"]

        detail = (await api_client.get(f"/api/v1/services/{service_id}")).json()
        assert detail["company"]["id"] == str(company.id)

        recent = (await api_client.get("/api/v1/services/recent")).json()
        assert [s["id"] for s in recent] == [service_id]

        upcoming = (await api_client.get("/api/v1/services/upcoming-deadlines")).json()
        assert upcoming == []

        listing = (await api_client.get("/api/v1/services", params={"status": "in_progress"})).json()
        assert listing["totalCount"] == 1

    @pytest.mark.asyncio
    async def test_dashboard_stats(self, api_client, company_factory, service_factory):
        """Test statistiche dashboard in camelCase."""
        company = await company_factory()
        await service_factory(company, status="in_progress")

        body = (await api_client.get("/api/v1/dashboard/stats")).json()

        assert body["totalCompanies"] == 1
        assert body["activeServices"] == 1
        assert body["totalQuotes"] == 0

    @pytest.mark.asyncio
    async def test_health(self, api_client):
        """Test endpoint di health check."""
        response = await api_client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
