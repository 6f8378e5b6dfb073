# QuoteEngine - Health Plan Quote Construction Engine
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Quote construction endpoints."""

import logging
from decimal import Decimal

from beartype import beartype
from fastapi import APIRouter, Depends, HTTPException

from ...models.age_band import band_spec
from ...models.catalog import PlanDetails, Product
from ...models.ledger import AgeBandLedger
from ...schemas.quote import (
    AssembleQuoteRequest,
    AssembleQuoteResponse,
    AssemblyErrorResponse,
    ConvertAgesRequest,
    ConvertAgesResponse,
    DraftIssueResponse,
    PriceLineResponse,
    PriceProductRequest,
    PriceProductResponse,
)
from ...services.date_converter import DateToAgeBandConverter
from ...services.pricing import PricingEngine, format_brl
from ...services.quote_assembler import QuoteDraftAssembler
from ..dependencies import get_date_converter

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/quotes", tags=["quotes"])


@router.post("/ages/convert", response_model=ConvertAgesResponse)
@beartype
async def convert_ages(
    request: ConvertAgesRequest,
    converter: DateToAgeBandConverter = Depends(get_date_converter),
) -> ConvertAgesResponse:
    """Preview the age bands described by a block of birth dates."""
    result = converter.convert(request.text)
    return ConvertAgesResponse(
        valid_dates=list(result.valid_dates),
        invalid_dates=list(result.invalid_dates),
        ages=result.ledger.as_payload(),
        total_lives=result.ledger.total(),
        can_apply=result.can_apply,
        needs_age_warning=result.ledger.needs_age_warning,
    )


@router.post("/products/price", response_model=PriceProductResponse)
@beartype
async def price_product(request: PriceProductRequest) -> PriceProductResponse:
    """Price one catalog product for the given lives."""
    product = Product.from_api(request.product)
    if product is None:
        raise HTTPException(status_code=400, detail="Product document has no id")

    ledger = AgeBandLedger.from_payload(request.ages)
    lines = PricingEngine.breakdown(
        product,
        PricingEngine.effective_lives(ledger, request.quote_type),
        ledger.total(),
        request.apply_discount,
    )
    total = sum((line.subtotal for line in lines), Decimal("0"))
    logger.debug("Priced product %s for %d lives: %s", product.id, ledger.total(), total)
    return PriceProductResponse(
        product_id=product.id,
        total=total,
        formatted_total=format_brl(total),
        lines=[
            PriceLineResponse(
                band=line.band,
                label=band_spec(line.band).label,
                lives=line.lives,
                unit_price=line.unit_price,
                discount_percentage=line.discount_percentage,
                subtotal=line.subtotal,
            )
            for line in lines
        ],
    )


@router.post(
    "/assemble",
    response_model=AssembleQuoteResponse,
    responses={422: {"model": AssemblyErrorResponse}},
)
@beartype
async def assemble_quote(request: AssembleQuoteRequest) -> AssembleQuoteResponse:
    """Validate a draft and build the quote document."""
    plans: dict[str, PlanDetails] = {}
    for document in request.plans:
        details = PlanDetails.from_api(document)
        if details is not None:
            plans[details.id] = details

    result = QuoteDraftAssembler.assemble(request.draft.to_draft(), plans)
    if result.is_err():
        validation = result.unwrap_err()
        error = AssemblyErrorResponse(
            message="Quote draft is incomplete",
            section_to_open=validation.section_to_open,
            issues=[
                DraftIssueResponse(
                    field=issue.field, message=issue.message, section=issue.section
                )
                for issue in validation.issues
            ],
        )
        raise HTTPException(
            status_code=422, detail=error.model_dump(mode="json", by_alias=True)
        )

    payload = result.unwrap()
    return AssembleQuoteResponse(
        payload=payload.to_wire(),
        selected_plans=len(payload.plans),
        selected_products=len(payload.products),
    )
