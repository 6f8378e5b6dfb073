# QuoteEngine - Health Plan Quote Construction Engine
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Plan catalog models and their parsing from catalog API documents.

Catalog documents are partial by nature: any missing list parses as empty,
entries without an id are skipped, and per-band prices or discounts that are
absent, non-numeric or non-positive are treated as not offered.
"""

import logging
import math
from collections.abc import Mapping
from decimal import Decimal
from enum import Enum
from typing import Any

from beartype import beartype
from pydantic import Field, model_validator

from .age_band import AGE_BAND_SPECS, AgeBand
from .base import BaseModelConfig

logger = logging.getLogger(__name__)


class DiscountPolicy(str, Enum):
    """How a product discounts its per-band prices."""

    NONE = "NONE"
    FIXED = "FIXED"
    PROGRESSIVE = "PROGRESSIVE"


class CatalogRef(BaseModelConfig):
    """Reference to a catalog option such as an accommodation or segment."""

    id: str = Field(..., min_length=1)
    name: str = Field(default="")


class DiscountTier(BaseModelConfig):
    """Progressive discount keyed by the total number of lives."""

    first_unit: int = Field(..., ge=0, description="First total-lives count in the tier")
    last_unit: int = Field(..., ge=0, description="Last total-lives count in the tier")
    discount_percentage: Decimal = Field(..., ge=Decimal("0"), le=Decimal("100"))

    @model_validator(mode="after")
    def validate_unit_range(self) -> "DiscountTier":
        """Ensure the tier range is not inverted."""
        if self.last_unit < self.first_unit:
            raise ValueError(
                f"last_unit ({self.last_unit}) must be >= first_unit ({self.first_unit})"
            )
        return self

    @beartype
    def contains(self, total_lives: int) -> bool:
        """Inclusive range check."""
        return self.first_unit <= total_lives <= self.last_unit


class Product(BaseModelConfig):
    """Insurance product with per-band prices and its discount configuration."""

    id: str = Field(..., min_length=1)
    name: str = Field(default="")
    accommodation: CatalogRef | None = None
    coverage: CatalogRef | None = None
    segment: CatalogRef | None = None
    includes_coparticipation: bool = False
    discount_type: str | None = None
    prices: dict[AgeBand, Decimal] = Field(default_factory=dict)
    fixed_discounts: dict[AgeBand, Decimal] = Field(default_factory=dict)
    progressive_tiers: tuple[DiscountTier, ...] = ()

    @property
    def discount_policy(self) -> DiscountPolicy:
        """FIXED by declaration, PROGRESSIVE when tiers exist, otherwise NONE."""
        if self.discount_type == DiscountPolicy.FIXED.value:
            return DiscountPolicy.FIXED
        if self.progressive_tiers:
            return DiscountPolicy.PROGRESSIVE
        return DiscountPolicy.NONE

    @beartype
    def base_price(self, band: AgeBand) -> Decimal | None:
        """Price per life in ``band``; ``None`` when not offered."""
        return self.prices.get(band)

    @beartype
    def fixed_discount(self, band: AgeBand) -> Decimal | None:
        """FIXED discount percentage for ``band``, if any."""
        return self.fixed_discounts.get(band)

    @beartype
    def tier_for(self, total_lives: int) -> DiscountTier | None:
        """First progressive tier containing ``total_lives``."""
        for tier in self.progressive_tiers:
            if tier.contains(total_lives):
                return tier
        return None

    @classmethod
    def from_api(cls, payload: Mapping[str, Any]) -> "Product | None":
        """Build a product from a catalog document, or ``None`` without an id."""
        product_id = _as_id(payload.get("id"))
        if product_id is None:
            logger.warning("Skipping catalog product without id: %r", payload.get("name"))
            return None

        prices: dict[AgeBand, Decimal] = {}
        discounts: dict[AgeBand, Decimal] = {}
        for spec in AGE_BAND_SPECS:
            price = _as_positive_decimal(payload.get(spec.price_field))
            if price is not None:
                prices[spec.band] = price
            discount = _as_positive_decimal(payload.get(spec.discount_field))
            if discount is not None:
                discounts[spec.band] = discount

        discount_type = payload.get("discountType")
        return cls(
            id=product_id,
            name=str(payload.get("name") or ""),
            accommodation=_as_ref(payload.get("accommodation")),
            coverage=_as_ref(payload.get("coverage")),
            segment=_as_ref(payload.get("segment")),
            includes_coparticipation=bool(payload.get("includesCoparticipation")),
            discount_type=discount_type if isinstance(discount_type, str) else None,
            prices=prices,
            fixed_discounts=discounts,
            progressive_tiers=_parse_tiers(payload.get("progressiveDiscountTiers"), product_id),
        )


class PlanTable(BaseModelConfig):
    """Rate table within a plan, e.g. "Enfermaria - Regional"."""

    id: str = Field(..., min_length=1)
    name: str = Field(default="")
    products: tuple[Product, ...] = ()

    @classmethod
    def from_api(cls, payload: Mapping[str, Any]) -> "PlanTable | None":
        """Build a table from a catalog document, or ``None`` without an id."""
        table_id = _as_id(payload.get("id"))
        if table_id is None:
            logger.warning("Skipping plan table without id: %r", payload.get("name"))
            return None
        products = (Product.from_api(item) for item in _as_documents(payload.get("products")))
        return cls(
            id=table_id,
            name=str(payload.get("name") or ""),
            products=tuple(product for product in products if product is not None),
        )

    @beartype
    def product_ids(self) -> tuple[str, ...]:
        """Ids of every product in the table, in catalog order."""
        return tuple(product.id for product in self.products)


class PlanSummary(BaseModelConfig):
    """Plan as listed by the simulation summary endpoint."""

    id: str = Field(..., min_length=1)
    name: str = Field(default="")
    image: str | None = None
    manager_name: str | None = None
    manager_image: str | None = None
    quote_type: str | None = None

    @classmethod
    def from_api(cls, payload: Mapping[str, Any]) -> "PlanSummary | None":
        """Build a summary from a catalog document, or ``None`` without an id."""
        plan_id = _as_id(payload.get("id"))
        if plan_id is None:
            logger.warning("Skipping plan summary without id: %r", payload.get("name"))
            return None
        return cls(
            id=plan_id,
            name=str(payload.get("name") or ""),
            image=_as_optional_str(payload.get("image")),
            manager_name=_as_optional_str(payload.get("managerName")),
            manager_image=_as_optional_str(payload.get("managerImage")),
            quote_type=_as_optional_str(payload.get("quoteType")),
        )


class PlanDetails(BaseModelConfig):
    """Plan with its rate tables and products."""

    id: str = Field(..., min_length=1)
    name: str = Field(default="")
    tables: tuple[PlanTable, ...] = ()

    @classmethod
    def from_api(cls, payload: Mapping[str, Any]) -> "PlanDetails | None":
        """Build plan details from a catalog document, or ``None`` without an id."""
        plan_id = _as_id(payload.get("id"))
        if plan_id is None:
            logger.warning("Skipping plan details without id: %r", payload.get("name"))
            return None
        tables = (PlanTable.from_api(item) for item in _as_documents(payload.get("tables")))
        return cls(
            id=plan_id,
            name=str(payload.get("name") or ""),
            tables=tuple(table for table in tables if table is not None),
        )

    @beartype
    def products(self) -> tuple[Product, ...]:
        """Every product of every table, in catalog order."""
        return tuple(product for table in self.tables for product in table.products)

    @beartype
    def find_table(self, table_id: str) -> PlanTable | None:
        """Table with ``table_id``, if present."""
        for table in self.tables:
            if table.id == table_id:
                return table
        return None


def _as_id(value: Any) -> str | None:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (str, int)):
        text = str(value).strip()
        return text or None
    return None


def _as_optional_str(value: Any) -> str | None:
    return value if isinstance(value, str) and value else None


def _as_positive_decimal(value: Any) -> Decimal | None:
    if isinstance(value, bool) or not isinstance(value, (int, float, Decimal)):
        return None
    if isinstance(value, float) and not math.isfinite(value):
        return None
    amount = Decimal(str(value))
    if not amount.is_finite() or amount <= 0:
        return None
    return amount


def _as_ref(value: Any) -> CatalogRef | None:
    if not isinstance(value, Mapping):
        return None
    ref_id = _as_id(value.get("id"))
    if ref_id is None:
        return None
    return CatalogRef(id=ref_id, name=str(value.get("name") or ""))


def _as_documents(value: Any) -> list[Mapping[str, Any]]:
    if not isinstance(value, (list, tuple)):
        return []
    return [item for item in value if isinstance(item, Mapping)]


def _parse_tiers(value: Any, product_id: str) -> tuple[DiscountTier, ...]:
    tiers: list[DiscountTier] = []
    for item in _as_documents(value):
        first = item.get("firstUnit")
        last = item.get("lastUnit")
        percentage = item.get("discountPercentage")
        if not all(
            isinstance(raw, (int, float)) and not isinstance(raw, bool) and math.isfinite(raw)
            for raw in (first, last, percentage)
        ):
            logger.warning("Skipping malformed discount tier on product %s: %r", product_id, item)
            continue
        pct = Decimal(str(percentage))
        if not 0 <= pct <= 100 or last < first or first < 0:
            logger.warning("Skipping out-of-range discount tier on product %s: %r", product_id, item)
            continue
        tiers.append(
            DiscountTier(first_unit=int(first), last_unit=int(last), discount_percentage=pct)
        )
    return tuple(tiers)
