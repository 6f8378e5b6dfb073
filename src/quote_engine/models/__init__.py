# QuoteEngine - Health Plan Quote Construction Engine
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Domain models for quote construction."""

from .age_band import AGE_BAND_SPECS, MAX_LIVES, AgeBand, AgeBandSpec, band_for_age, band_spec
from .base import BaseModelConfig, CamelModel
from .catalog import (
    CatalogRef,
    DiscountPolicy,
    DiscountTier,
    PlanDetails,
    PlanSummary,
    PlanTable,
    Product,
)
from .ledger import AgeBandLedger
from .quote import (
    BUDGET_STEP,
    MAX_BUDGET,
    MIN_BUDGET,
    BudgetRange,
    ClientType,
    ContractType,
    Coparticipation,
    CrmLink,
    EditorSection,
    FrameworkType,
    Location,
    PlanCategory,
    ProductRef,
    QuoteDraft,
    QuoteFilters,
    QuotePayload,
    QuoteType,
)
from .selection import (
    ChoosingCoparticipation,
    ChoosingProducts,
    ChoosingTable,
    CoparticipationChoice,
    FunnelClosed,
    FunnelState,
    FunnelStep,
    SelectionState,
)

__all__ = [
    # Age bands
    "AGE_BAND_SPECS",
    "MAX_LIVES",
    "AgeBand",
    "AgeBandSpec",
    "AgeBandLedger",
    "band_for_age",
    "band_spec",
    # Base
    "BaseModelConfig",
    "CamelModel",
    # Catalog
    "CatalogRef",
    "DiscountPolicy",
    "DiscountTier",
    "PlanDetails",
    "PlanSummary",
    "PlanTable",
    "Product",
    # Quote
    "BUDGET_STEP",
    "MAX_BUDGET",
    "MIN_BUDGET",
    "BudgetRange",
    "ClientType",
    "ContractType",
    "Coparticipation",
    "CrmLink",
    "EditorSection",
    "FrameworkType",
    "Location",
    "PlanCategory",
    "ProductRef",
    "QuoteDraft",
    "QuoteFilters",
    "QuotePayload",
    "QuoteType",
    # Selection
    "ChoosingCoparticipation",
    "ChoosingProducts",
    "ChoosingTable",
    "CoparticipationChoice",
    "FunnelClosed",
    "FunnelState",
    "FunnelStep",
    "SelectionState",
]
