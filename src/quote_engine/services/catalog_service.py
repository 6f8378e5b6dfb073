# QuoteEngine - Health Plan Quote Construction Engine
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Plan catalog access and the per-plan details cache."""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Mapping
from typing import Any

import httpx
from beartype import beartype

from ..core.config import Settings, get_settings
from ..core.result_types import Err, Ok, Result
from ..models.catalog import PlanDetails, PlanSummary

logger = logging.getLogger(__name__)

_DETAILS_ENVELOPES = ("plan", "data", "planDetails")

PlanDetailsFetcher = Callable[[str], Awaitable[Result[PlanDetails, str]]]


@beartype
def flatten_params(params: Mapping[str, Any]) -> list[tuple[str, str]]:
    """Flatten nested query parameters with bracket notation.

    ``{"ages": {"lives0to18": 2}}`` becomes ``ages[lives0to18]=2`` and lists
    become repeated ``key[]`` entries. ``None`` values are dropped.
    """
    flat: list[tuple[str, str]] = []
    for key, value in params.items():
        if value is None:
            continue
        if isinstance(value, Mapping):
            for sub_key, sub_value in value.items():
                if sub_value is not None:
                    flat.append((f"{key}[{sub_key}]", _param_text(sub_value)))
        elif isinstance(value, (list, tuple)):
            flat.extend((f"{key}[]", _param_text(item)) for item in value if item is not None)
        else:
            flat.append((key, _param_text(value)))
    return flat


def _param_text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class CatalogClient:
    """Read-only client for the plan catalog endpoints."""

    def __init__(
        self, http_client: httpx.AsyncClient, settings: Settings | None = None
    ) -> None:
        """Initialize catalog client.

        Args:
            http_client: Shared async client; its lifecycle belongs to the caller.
            settings: Settings providing the base URL and timeout.
        """
        self._http = http_client
        self._settings = settings or get_settings()

    def _url(self, path: str) -> str:
        return f"{self._settings.catalog_base_url}{path}"

    async def _get_json(
        self, path: str, params: Mapping[str, Any]
    ) -> Result[Any, str]:
        try:
            response = await self._http.get(
                self._url(path),
                params=flatten_params(params),
                timeout=self._settings.catalog_timeout_seconds,
            )
            response.raise_for_status()
            return Ok(response.json())
        except httpx.TimeoutException:
            logger.warning("Catalog request to %s timed out", path)
            return Err(f"Catalog request to {path} timed out")
        except httpx.HTTPStatusError as e:
            logger.warning(
                "Catalog request to %s failed: HTTP %s", path, e.response.status_code
            )
            return Err(f"Catalog request failed: HTTP {e.response.status_code}")
        except httpx.HTTPError as e:
            logger.warning("Network error calling catalog %s: %s", path, e)
            return Err(f"Network error calling catalog: {e}")
        except ValueError as e:
            logger.warning("Catalog response from %s is not JSON: %s", path, e)
            return Err("Catalog response is not valid JSON")

    @beartype
    async def fetch_plan_summaries(
        self, params: Mapping[str, Any]
    ) -> Result[list[PlanSummary], str]:
        """List plans matching the simulation parameters."""
        result = await self._get_json("/plans/quote/summary", params)
        if result.is_err():
            return result

        body = result.unwrap()
        documents = body.get("data") if isinstance(body, Mapping) else None
        if not isinstance(documents, list):
            return Ok([])
        summaries = (
            PlanSummary.from_api(item) for item in documents if isinstance(item, Mapping)
        )
        return Ok([summary for summary in summaries if summary is not None])

    @beartype
    async def fetch_plan_details(
        self, plan_id: str, params: Mapping[str, Any]
    ) -> Result[PlanDetails, str]:
        """Tables and products of one plan, priced for the simulation parameters."""
        result = await self._get_json(f"/plans/quote/{plan_id}", params)
        if result.is_err():
            return result

        document = _unwrap_details(result.unwrap())
        details = PlanDetails.from_api(document) if document is not None else None
        if details is None:
            logger.warning("Catalog returned no usable details for plan %s", plan_id)
            return Err(f"No details found for plan {plan_id}")
        return Ok(details)


def _unwrap_details(body: Any) -> Mapping[str, Any] | None:
    if not isinstance(body, Mapping):
        return None
    for envelope in _DETAILS_ENVELOPES:
        inner = body.get(envelope)
        if isinstance(inner, Mapping):
            return inner
    return body


class PlanDetailsCache:
    """Fetch-once cache of plan details keyed by plan id.

    Concurrent ``ensure`` calls for the same plan share one in-flight fetch.
    Populated entries are never replaced, and a fetch that completes after
    the caller moved on still lands in the cache.
    """

    def __init__(self, fetcher: PlanDetailsFetcher) -> None:
        self._fetcher = fetcher
        self._entries: dict[str, PlanDetails] = {}
        self._in_flight: dict[str, asyncio.Task[Result[PlanDetails, str]]] = {}

    @beartype
    def get(self, plan_id: str) -> PlanDetails | None:
        """Cached details, without fetching."""
        return self._entries.get(plan_id)

    def __contains__(self, plan_id: object) -> bool:
        return plan_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    @beartype
    def seed(self, plans: Mapping[str, PlanDetails]) -> None:
        """Add already known plans, keeping any existing entry."""
        for plan_id, details in plans.items():
            self._entries.setdefault(plan_id, details)

    @beartype
    def as_mapping(self) -> dict[str, PlanDetails]:
        """Snapshot of every cached plan, in insertion order."""
        return dict(self._entries)

    def clear(self) -> None:
        """Forget every cached plan; in-flight fetches still complete."""
        self._entries.clear()

    async def _load(self, plan_id: str) -> Result[PlanDetails, str]:
        try:
            result = await self._fetcher(plan_id)
        finally:
            self._in_flight.pop(plan_id, None)
        if result.is_ok():
            self._entries.setdefault(plan_id, result.unwrap())
            logger.debug("Cached details for plan %s", plan_id)
        return result

    @beartype
    async def ensure(self, plan_id: str) -> Result[PlanDetails, str]:
        """Details for ``plan_id``, fetching them at most once at a time."""
        cached = self._entries.get(plan_id)
        if cached is not None:
            return Ok(cached)

        task = self._in_flight.get(plan_id)
        if task is None:
            task = asyncio.ensure_future(self._load(plan_id))
            self._in_flight[plan_id] = task
        result = await asyncio.shield(task)
        if result.is_ok():
            return Ok(self._entries.get(plan_id, result.unwrap()))
        return result
