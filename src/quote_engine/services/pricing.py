# QuoteEngine - Health Plan Quote Construction Engine
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Product pricing for a population of lives.

Pricing never fails: a band without a usable price contributes zero and a
band without a usable discount is charged in full.
"""

from collections.abc import Mapping
from decimal import ROUND_HALF_UP, Decimal

from beartype import beartype
from pydantic import Field

from ..models.age_band import AgeBand
from ..models.base import BaseModelConfig
from ..models.catalog import DiscountPolicy, Product
from ..models.ledger import AgeBandLedger
from ..models.quote import QuoteType

_ZERO = Decimal("0")
_HUNDRED = Decimal("100")
_CENTS = Decimal("0.01")


class BandPriceLine(BaseModelConfig):
    """Priced contribution of one age band."""

    band: AgeBand
    lives: int = Field(..., ge=0)
    unit_price: Decimal | None = None
    discount_percentage: Decimal | None = None
    subtotal: Decimal = Field(default=_ZERO, ge=_ZERO)


class PricingEngine:
    """Aggregate product prices over age-band life counts."""

    @staticmethod
    @beartype
    def discount_for(
        product: Product, band: AgeBand, total_lives: int
    ) -> Decimal | None:
        """Discount percentage that applies to ``band`` under the product policy.

        FIXED reads the band percentage (ignored unless positive); PROGRESSIVE
        reads the tier containing ``total_lives``.
        """
        policy = product.discount_policy
        if policy is DiscountPolicy.FIXED:
            discount = product.fixed_discount(band)
            if discount is not None and discount > 0:
                return discount
            return None
        if policy is DiscountPolicy.PROGRESSIVE:
            tier = product.tier_for(total_lives)
            return tier.discount_percentage if tier is not None else None
        return None

    @staticmethod
    @beartype
    def breakdown(
        product: Product,
        lives: Mapping[AgeBand, int],
        total_lives: int,
        apply_discount: bool = False,
    ) -> tuple[BandPriceLine, ...]:
        """One priced line per band holding lives, in display order."""
        lines: list[BandPriceLine] = []
        for band in AgeBand:
            count = lives.get(band, 0)
            if count <= 0:
                continue
            base_price = product.base_price(band)
            if base_price is None or base_price <= 0:
                lines.append(BandPriceLine(band=band, lives=count))
                continue

            discount = (
                PricingEngine.discount_for(product, band, total_lives)
                if apply_discount
                else None
            )
            unit_price = base_price
            if discount is not None:
                unit_price = max(_ZERO, base_price - base_price * discount / _HUNDRED)
            lines.append(
                BandPriceLine(
                    band=band,
                    lives=count,
                    unit_price=unit_price,
                    discount_percentage=discount,
                    subtotal=unit_price * count,
                )
            )
        return tuple(lines)

    @staticmethod
    @beartype
    def price_lives(
        product: Product,
        lives: Mapping[AgeBand, int],
        total_lives: int,
        apply_discount: bool = False,
    ) -> Decimal:
        """Total price of ``product`` for an arbitrary band distribution."""
        lines = PricingEngine.breakdown(product, lives, total_lives, apply_discount)
        return sum((line.subtotal for line in lines), _ZERO)

    @staticmethod
    @beartype
    def price(
        product: Product,
        ledger: AgeBandLedger,
        total_lives: int,
        apply_discount: bool = False,
    ) -> Decimal:
        """Total price of ``product`` for the lives in ``ledger``."""
        return PricingEngine.price_lives(product, ledger.counts, total_lives, apply_discount)

    @staticmethod
    @beartype
    def effective_lives(ledger: AgeBandLedger, quote_type: QuoteType) -> dict[AgeBand, int]:
        """Band distribution used for pricing.

        Dental products are priced per life at the youngest band rate.
        """
        if quote_type is QuoteType.DENTAL:
            return {AgeBand.LIVES_0_TO_18: ledger.total()}
        return dict(ledger.counts)

    @staticmethod
    @beartype
    def price_for_quote(
        product: Product,
        ledger: AgeBandLedger,
        quote_type: QuoteType,
        apply_discount: bool = False,
    ) -> Decimal:
        """Price as displayed for a quote of ``quote_type``."""
        return PricingEngine.price_lives(
            product,
            PricingEngine.effective_lives(ledger, quote_type),
            ledger.total(),
            apply_discount,
        )


@beartype
def format_brl(amount: Decimal) -> str:
    """Format ``amount`` as Brazilian reais, e.g. ``R$ 1.234,56``."""
    rounded = amount.quantize(_CENTS, rounding=ROUND_HALF_UP)
    sign = "-" if rounded < 0 else ""
    integer, _, cents = f"{abs(rounded):.2f}".partition(".")
    grouped = f"{int(integer):,}".replace(",", ".")
    return f"{sign}R$ {grouped},{cents}"
