# QuoteEngine - Health Plan Quote Construction Engine
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Quote construction service layer."""

from ..core.result_types import Err, Ok, Result
from .budget_range import BudgetRangeModel
from .catalog_service import CatalogClient, PlanDetailsCache, flatten_params
from .date_converter import ConversionResult, DateToAgeBandConverter
from .pricing import BandPriceLine, PricingEngine, format_brl
from .quote_assembler import (
    AssemblyValidation,
    DraftIssue,
    QuoteDraftAssembler,
    SavedQuote,
    SelectedProductLine,
)
from .quote_editor import QuoteEditorService
from .selection_funnel import SelectionFunnel

__all__ = [
    "Result",
    "Ok",
    "Err",
    "AssemblyValidation",
    "BandPriceLine",
    "BudgetRangeModel",
    "CatalogClient",
    "ConversionResult",
    "DateToAgeBandConverter",
    "DraftIssue",
    "PlanDetailsCache",
    "PricingEngine",
    "QuoteDraftAssembler",
    "QuoteEditorService",
    "SavedQuote",
    "SelectedProductLine",
    "SelectionFunnel",
    "flatten_params",
    "format_brl",
]
