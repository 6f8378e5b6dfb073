"""Tests for the catalog client and the plan details cache."""

import asyncio
import json

import httpx
import pytest

from quote_engine.core.config import Settings
from quote_engine.core.result_types import Err, Ok
from quote_engine.services.catalog_service import (
    CatalogClient,
    PlanDetailsCache,
    flatten_params,
)


@pytest.fixture
def settings() -> Settings:
    return Settings(catalog_base_url="https://catalog.test/api/")


def _client(handler, settings) -> CatalogClient:
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return CatalogClient(http_client, settings)


class TestFlattenParams:
    """Test bracket-notation query flattening."""

    def test_nested_and_list_values(self):
        flat = flatten_params(
            {
                "page": 1,
                "ages": {"lives0to18": 2, "lives19to23": None},
                "refnets": ["a", "b"],
                "withoutEntity": True,
                "lpt": None,
            }
        )
        assert flat == [
            ("page", "1"),
            ("ages[lives0to18]", "2"),
            ("refnets[]", "a"),
            ("refnets[]", "b"),
            ("withoutEntity", "true"),
        ]


class TestCatalogClient:
    """Test catalog HTTP calls against a mock transport."""

    async def test_fetch_plan_summaries(self, settings):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(
                200,
                json={"data": [{"id": "plan-a", "name": "Plan A"}, {"name": "no id"}]},
            )

        client = _client(handler, settings)
        result = await client.fetch_plan_summaries({"ages": {"lives0to18": 2}, "page": 1})

        assert result.is_ok()
        assert [summary.id for summary in result.unwrap()] == ["plan-a"]
        request = seen[0]
        assert request.url.path == "/api/plans/quote/summary"
        assert request.url.params.get("ages[lives0to18]") == "2"

    async def test_missing_data_envelope_is_empty(self, settings):
        client = _client(lambda request: httpx.Response(200, json={}), settings)
        result = await client.fetch_plan_summaries({})
        assert result == Ok([])

    @pytest.mark.parametrize("envelope", ["plan", "data", "planDetails"])
    async def test_fetch_plan_details_unwraps_envelopes(
        self, settings, plan_a_document, envelope
    ):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/api/plans/quote/plan-a"
            return httpx.Response(200, json={envelope: plan_a_document})

        result = await _client(handler, settings).fetch_plan_details("plan-a", {})
        assert result.is_ok()
        assert len(result.unwrap().tables) == 2

    async def test_http_error_becomes_err(self, settings):
        client = _client(lambda request: httpx.Response(503), settings)
        result = await client.fetch_plan_details("plan-a", {})
        assert result.is_err()
        assert "503" in result.unwrap_err()

    async def test_transport_error_becomes_err(self, settings):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        result = await _client(handler, settings).fetch_plan_summaries({})
        assert result.is_err()
        assert "Network error" in result.unwrap_err()

    async def test_invalid_json_becomes_err(self, settings):
        client = _client(lambda request: httpx.Response(200, content=b"<html>"), settings)
        result = await client.fetch_plan_details("plan-a", {})
        assert result.is_err()

    async def test_document_without_id_becomes_err(self, settings):
        body = json.dumps({"plan": {"name": "nameless"}}).encode()
        client = _client(lambda request: httpx.Response(200, content=body), settings)
        result = await client.fetch_plan_details("plan-a", {})
        assert result == Err("No details found for plan plan-a")


class TestPlanDetailsCache:
    """Test fetch-once caching."""

    async def test_concurrent_requests_share_one_fetch(self, plan_a):
        calls: list[str] = []
        release = asyncio.Event()

        async def fetcher(plan_id: str):
            calls.append(plan_id)
            await release.wait()
            return Ok(plan_a)

        cache = PlanDetailsCache(fetcher)
        first = asyncio.ensure_future(cache.ensure("plan-a"))
        second = asyncio.ensure_future(cache.ensure("plan-a"))
        await asyncio.sleep(0)
        release.set()

        results = await asyncio.gather(first, second)
        assert calls == ["plan-a"]
        assert all(result.unwrap() == plan_a for result in results)
        assert cache.get("plan-a") == plan_a

    async def test_cached_plan_is_not_fetched_again(self, plan_a):
        calls: list[str] = []

        async def fetcher(plan_id: str):
            calls.append(plan_id)
            return Ok(plan_a)

        cache = PlanDetailsCache(fetcher)
        await cache.ensure("plan-a")
        await cache.ensure("plan-a")
        assert calls == ["plan-a"]

    async def test_failed_fetch_is_retried(self, plan_a):
        outcomes = [Err("boom"), Ok(plan_a)]

        async def fetcher(plan_id: str):
            return outcomes.pop(0)

        cache = PlanDetailsCache(fetcher)
        assert (await cache.ensure("plan-a")).is_err()
        assert "plan-a" not in cache
        assert (await cache.ensure("plan-a")).is_ok()
        assert "plan-a" in cache

    async def test_abandoned_fetch_still_lands(self, plan_a):
        release = asyncio.Event()

        async def fetcher(plan_id: str):
            await release.wait()
            return Ok(plan_a)

        cache = PlanDetailsCache(fetcher)
        waiter = asyncio.ensure_future(cache.ensure("plan-a"))
        await asyncio.sleep(0)
        waiter.cancel()
        release.set()
        for _ in range(5):
            await asyncio.sleep(0)
        assert cache.get("plan-a") == plan_a

    async def test_seed_keeps_existing_entries(self, plan_a, plan_b):
        async def fetcher(plan_id: str):
            return Err("unused")

        cache = PlanDetailsCache(fetcher)
        cache.seed({"plan-a": plan_a})
        cache.seed({"plan-a": plan_b, "plan-b": plan_b})
        assert cache.get("plan-a") == plan_a
        assert list(cache.as_mapping()) == ["plan-a", "plan-b"]
        assert len(cache) == 2
        cache.clear()
        assert len(cache) == 0
