# QuoteEngine - Health Plan Quote Construction Engine
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""API request/response schemas."""

from .quote import (
    AssembleQuoteRequest,
    AssembleQuoteResponse,
    AssemblyErrorResponse,
    ConvertAgesRequest,
    ConvertAgesResponse,
    DraftIssueResponse,
    PriceLineResponse,
    PriceProductRequest,
    PriceProductResponse,
    QuoteDraftRequest,
)

__all__ = [
    "AssembleQuoteRequest",
    "AssembleQuoteResponse",
    "AssemblyErrorResponse",
    "ConvertAgesRequest",
    "ConvertAgesResponse",
    "DraftIssueResponse",
    "PriceLineResponse",
    "PriceProductRequest",
    "PriceProductResponse",
    "QuoteDraftRequest",
]
