"""Tests for the quote HTTP API."""

import pytest
from fastapi.testclient import TestClient

from quote_engine.api.dependencies import get_date_converter
from quote_engine.main import create_app


@pytest.fixture
def client(converter):
    app = create_app()
    app.dependency_overrides[get_date_converter] = lambda: converter
    with TestClient(app) as test_client:
        yield test_client


def _draft_body(**overrides):
    draft = {
        "ages": {"lives0to18": 2, "lives29to33": 1},
        "location": {"stateId": "state-sp", "cityId": "city-sp"},
        "selectedProductIds": ["p1"],
    }
    draft.update(overrides)
    return draft


class TestHealth:
    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestConvertAges:
    """Test POST /api/v1/quotes/ages/convert."""

    def test_convert_valid_dates(self, client):
        response = client.post(
            "/api/v1/quotes/ages/convert", json={"text": "20/06/1977, 01/12/1990"}
        )
        assert response.status_code == 200
        body = response.json()
        assert body["validDates"] == ["20/06/1977", "01/12/1990"]
        assert body["invalidDates"] == []
        assert body["ages"] == {"lives44to48": 1, "lives29to33": 1}
        assert body["totalLives"] == 2
        assert body["canApply"] is True
        assert body["needsAgeWarning"] is False

    def test_convert_reports_invalid_dates(self, client):
        response = client.post(
            "/api/v1/quotes/ages/convert", json={"text": "31/02/2000\n15/13/2000"}
        )
        body = response.json()
        assert body["invalidDates"] == ["31/02/2000", "15/13/2000"]
        assert body["canApply"] is False


class TestPriceProduct:
    """Test POST /api/v1/quotes/products/price."""

    def test_fixed_discount_price(self, client, product_doc):
        document = product_doc(
            "p1", discount_type="FIXED", prices={"018": 100}, discounts={"018": 10}
        )
        response = client.post(
            "/api/v1/quotes/products/price",
            json={"product": document, "ages": {"lives0to18": 2}, "applyDiscount": True},
        )
        assert response.status_code == 200
        body = response.json()
        assert body["productId"] == "p1"
        assert body["formattedTotal"] == "R$ 180,00"
        assert body["lines"][0]["label"] == "0 a 18"
        assert body["lines"][0]["lives"] == 2

    def test_dental_quote_prices_at_youngest_band(self, client, product_doc):
        document = product_doc("d1", prices={"018": 25, "2933": 99})
        response = client.post(
            "/api/v1/quotes/products/price",
            json={
                "product": document,
                "ages": {"lives0to18": 1, "lives29to33": 3},
                "quoteType": "dental",
            },
        )
        assert response.json()["formattedTotal"] == "R$ 100,00"

    def test_product_without_id_is_rejected(self, client):
        response = client.post(
            "/api/v1/quotes/products/price", json={"product": {"name": "nameless"}}
        )
        assert response.status_code == 400


class TestAssembleQuote:
    """Test POST /api/v1/quotes/assemble."""

    def test_assemble_valid_draft(self, client, plan_a_document):
        response = client.post(
            "/api/v1/quotes/assemble",
            json={"draft": _draft_body(), "plans": [plan_a_document]},
        )
        assert response.status_code == 200
        body = response.json()
        assert body["payload"]["plans"] == ["plan-a"]
        assert body["payload"]["withoutEntity"] is True
        assert body["selectedProducts"] == 1

    def test_zero_lives_is_unprocessable(self, client, plan_a_document):
        response = client.post(
            "/api/v1/quotes/assemble",
            json={
                "draft": _draft_body(ages={}),
                "plans": [plan_a_document],
            },
        )
        assert response.status_code == 422
        detail = response.json()["detail"]
        assert detail["sectionToOpen"] == "lives"
        assert [issue["field"] for issue in detail["issues"]] == ["lives"]

    def test_malformed_draft_is_rejected(self, client):
        response = client.post(
            "/api/v1/quotes/assemble",
            json={"draft": _draft_body(ages={"lives0to18": -1})},
        )
        assert response.status_code == 422

    def test_camel_case_profile_fields(self, client, plan_a_document):
        body = _draft_body(
            filters={
                "clientType": "legal",
                "legalPersonTypeId": "lpt-1",
                "contractType": 1,
            },
            budget={"minPrice": 500, "maxPrice": 1500},
            clientName="Acme",
        )
        response = client.post(
            "/api/v1/quotes/assemble", json={"draft": body, "plans": [plan_a_document]}
        )
        assert response.status_code == 200
        payload = response.json()["payload"]
        assert payload["lptId"] == "lpt-1"
        assert payload["clientType"] == 1
        assert payload["client"] == "Acme"
        assert (payload["minPrice"], payload["maxPrice"]) == (500, 1500)

    def test_blank_product_id_is_unprocessable(self, client, plan_a_document):
        response = client.post(
            "/api/v1/quotes/assemble",
            json={
                "draft": _draft_body(selectedProductIds=["  "]),
                "plans": [plan_a_document],
            },
        )
        assert response.status_code == 422
        assert response.json()["detail"]["sectionToOpen"] == "products"
