"""Test configuration and shared fixtures for the quote engine.

Catalog fixtures are built from raw catalog documents so the parsing path
is exercised the same way the services see it.
"""

from collections.abc import Callable, Generator
from datetime import date
from typing import Any

import pytest

from quote_engine.core.config import clear_settings_cache
from quote_engine.models.age_band import AgeBand
from quote_engine.models.catalog import PlanDetails
from quote_engine.models.ledger import AgeBandLedger
from quote_engine.models.quote import Location, QuoteDraft
from quote_engine.models.selection import SelectionState
from quote_engine.services.date_converter import DateToAgeBandConverter

REFERENCE_DAY = date(2024, 6, 15)


def make_product_doc(
    product_id: str,
    *,
    includes_coparticipation: bool = False,
    prices: dict[str, Any] | None = None,
    discounts: dict[str, Any] | None = None,
    discount_type: str | None = None,
    tiers: list[dict[str, Any]] | None = None,
) -> dict[str, Any]:
    """Catalog product document with per-band fields keyed by band suffix."""
    document: dict[str, Any] = {
        "id": product_id,
        "name": f"Product {product_id}",
        "includesCoparticipation": includes_coparticipation,
        "discountType": discount_type,
    }
    for suffix, price in (prices or {}).items():
        document[f"priceAgeGroup{suffix}"] = price
    for suffix, discount in (discounts or {}).items():
        document[f"discountAgeGroup{suffix}"] = discount
    if tiers is not None:
        document["progressiveDiscountTiers"] = tiers
    return document


@pytest.fixture
def product_doc() -> Callable[..., dict[str, Any]]:
    """Factory for catalog product documents."""
    return make_product_doc


@pytest.fixture(autouse=True)
def reset_settings() -> Generator[None, None, None]:
    """Isolate settings between tests."""
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def reference_day() -> date:
    """Fixed "today" for age computations."""
    return REFERENCE_DAY


@pytest.fixture
def converter(reference_day: date) -> DateToAgeBandConverter:
    """Converter pinned to the reference day."""
    return DateToAgeBandConverter(today=lambda: reference_day)


@pytest.fixture
def plan_a_document() -> dict[str, Any]:
    """Plan with two tables; table-t mixes coparticipation variants."""
    return {
        "id": "plan-a",
        "name": "Plan A",
        "tables": [
            {
                "id": "table-t",
                "name": "Enfermaria",
                "products": [
                    make_product_doc("p1", prices={"018": 100, "2933": 200}),
                    make_product_doc("p2", prices={"018": 120, "2933": 240}),
                    make_product_doc(
                        "p3", includes_coparticipation=True, prices={"018": 80, "2933": 160}
                    ),
                ],
            },
            {
                "id": "table-u",
                "name": "Apartamento",
                "products": [make_product_doc("p4", prices={"018": 150})],
            },
        ],
    }


@pytest.fixture
def plan_b_document() -> dict[str, Any]:
    """Second plan with a single table."""
    return {
        "id": "plan-b",
        "name": "Plan B",
        "tables": [
            {
                "id": "table-v",
                "name": "Regional",
                "products": [make_product_doc("p5", prices={"018": 90})],
            }
        ],
    }


@pytest.fixture
def plan_a(plan_a_document: dict[str, Any]) -> PlanDetails:
    details = PlanDetails.from_api(plan_a_document)
    assert details is not None
    return details


@pytest.fixture
def plan_b(plan_b_document: dict[str, Any]) -> PlanDetails:
    details = PlanDetails.from_api(plan_b_document)
    assert details is not None
    return details


@pytest.fixture
def plans(plan_a: PlanDetails, plan_b: PlanDetails) -> dict[str, PlanDetails]:
    """Loaded plans in catalog order."""
    return {plan_a.id: plan_a, plan_b.id: plan_b}


@pytest.fixture
def family_ledger() -> AgeBandLedger:
    """Two children and one adult."""
    return AgeBandLedger(counts={AgeBand.LIVES_0_TO_18: 2, AgeBand.LIVES_29_TO_33: 1})


@pytest.fixture
def ready_draft(family_ledger: AgeBandLedger) -> QuoteDraft:
    """Physical-client draft that passes validation."""
    return QuoteDraft(
        ledger=family_ledger,
        location=Location(state_id="state-sp", city_id="city-sp", label="Sao Paulo - SP"),
        selection=SelectionState(selected_product_ids=("p1",)),
        client_name="Maria Silva",
    )
