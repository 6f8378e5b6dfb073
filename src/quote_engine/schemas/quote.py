# QuoteEngine - Health Plan Quote Construction Engine
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Quote API schemas for request/response models."""

from decimal import Decimal
from typing import Any

from pydantic import Field

from ..models.age_band import AgeBand
from ..models.base import CamelModel
from ..models.ledger import AgeBandLedger, LifeCount
from ..models.quote import (
    BudgetRange,
    CrmLink,
    EditorSection,
    Location,
    QuoteDraft,
    QuoteFilters,
    QuoteType,
)
from ..models.selection import SelectionState

# Request schemas


class ConvertAgesRequest(CamelModel):
    """Birth dates typed or pasted by the broker."""

    text: str = Field(default="", max_length=50_000)


class PriceProductRequest(CamelModel):
    """Product document priced for a set of lives."""

    product: dict[str, Any]
    ages: dict[str, int] = Field(default_factory=dict)
    quote_type: QuoteType = QuoteType.HEALTH
    apply_discount: bool = False


class QuoteDraftRequest(CamelModel):
    """Quote draft as sent over the wire, lives keyed by band."""

    quote_type: QuoteType = QuoteType.HEALTH
    ages: dict[AgeBand, LifeCount] = Field(default_factory=dict)
    filters: QuoteFilters = Field(default_factory=QuoteFilters)
    budget: BudgetRange = Field(default_factory=BudgetRange)
    selected_product_ids: list[str] = Field(default_factory=list)
    client_name: str | None = None
    crm_link: CrmLink | None = None
    location: Location | None = None

    def to_draft(self) -> QuoteDraft:
        """Domain draft with the funnel closed."""
        return QuoteDraft(
            quote_type=self.quote_type,
            ledger=AgeBandLedger(counts=self.ages),
            filters=self.filters,
            budget=self.budget,
            selection=SelectionState(selected_product_ids=tuple(self.selected_product_ids)),
            client_name=self.client_name,
            crm_link=self.crm_link,
            location=self.location,
        )


class AssembleQuoteRequest(CamelModel):
    """Draft plus the plan details its selection refers to."""

    draft: QuoteDraftRequest
    plans: list[dict[str, Any]] = Field(default_factory=list)


# Response schemas


class ConvertAgesResponse(CamelModel):
    """Outcome of a birth date conversion."""

    valid_dates: list[str]
    invalid_dates: list[str]
    ages: dict[str, int]
    total_lives: int = Field(..., ge=0)
    can_apply: bool
    needs_age_warning: bool


class PriceLineResponse(CamelModel):
    """Priced contribution of one age band."""

    band: AgeBand
    label: str
    lives: int = Field(..., ge=0)
    unit_price: Decimal | None = None
    discount_percentage: Decimal | None = None
    subtotal: Decimal


class PriceProductResponse(CamelModel):
    """Product price for the requested lives."""

    product_id: str
    total: Decimal
    formatted_total: str
    lines: list[PriceLineResponse] = Field(default_factory=list)


class DraftIssueResponse(CamelModel):
    """Field-level issue blocking assembly."""

    field: str
    message: str
    section: EditorSection


class AssemblyErrorResponse(CamelModel):
    """Body of a rejected assembly."""

    message: str
    section_to_open: EditorSection | None = None
    issues: list[DraftIssueResponse] = Field(default_factory=list)


class AssembleQuoteResponse(CamelModel):
    """Assembled quote document, ready to be sent to the backend."""

    payload: dict[str, Any]
    selected_plans: int = Field(..., ge=0)
    selected_products: int = Field(..., ge=0)
