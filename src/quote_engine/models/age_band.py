# QuoteEngine - Health Plan Quote Construction Engine
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Age bands used to distribute insured lives.

The catalog names its per-band price and discount fields with irregular
suffixes (``priceAgeGroup018`` ... ``priceAgeGroup59Upper``). Those names are
declared here once, per band, and every lookup goes through this table.
"""

from enum import Enum
from typing import Final

from attrs import field, frozen
from beartype import beartype

MAX_LIVES: Final = 999


class AgeBand(str, Enum):
    """The ten fixed age bands, in display order.

    Values are the stable keys used in quote payloads.
    """

    LIVES_0_TO_18 = "lives0to18"
    LIVES_19_TO_23 = "lives19to23"
    LIVES_24_TO_28 = "lives24to28"
    LIVES_29_TO_33 = "lives29to33"
    LIVES_34_TO_38 = "lives34to38"
    LIVES_39_TO_43 = "lives39to43"
    LIVES_44_TO_48 = "lives44to48"
    LIVES_49_TO_53 = "lives49to53"
    LIVES_54_TO_58 = "lives54to58"
    LIVES_59_UPPER = "lives59upper"

    @property
    def label(self) -> str:
        """Human-readable band label."""
        return band_spec(self).label

    @property
    def max_age(self) -> int | None:
        """Inclusive upper age bound, ``None`` for the open-ended band."""
        return band_spec(self).max_age


@frozen
class AgeBandSpec:
    """Static description of one age band."""

    band: AgeBand = field()
    label: str = field()
    max_age: int | None = field()
    price_field: str = field()
    discount_field: str = field()


AGE_BAND_SPECS: Final[tuple[AgeBandSpec, ...]] = (
    AgeBandSpec(AgeBand.LIVES_0_TO_18, "0 a 18", 18, "priceAgeGroup018", "discountAgeGroup018"),
    AgeBandSpec(AgeBand.LIVES_19_TO_23, "19 a 23", 23, "priceAgeGroup1923", "discountAgeGroup1923"),
    AgeBandSpec(AgeBand.LIVES_24_TO_28, "24 a 28", 28, "priceAgeGroup2428", "discountAgeGroup2428"),
    AgeBandSpec(AgeBand.LIVES_29_TO_33, "29 a 33", 33, "priceAgeGroup2933", "discountAgeGroup2933"),
    AgeBandSpec(AgeBand.LIVES_34_TO_38, "34 a 38", 38, "priceAgeGroup3438", "discountAgeGroup3438"),
    AgeBandSpec(AgeBand.LIVES_39_TO_43, "39 a 43", 43, "priceAgeGroup3943", "discountAgeGroup3943"),
    AgeBandSpec(AgeBand.LIVES_44_TO_48, "44 a 48", 48, "priceAgeGroup4448", "discountAgeGroup4448"),
    AgeBandSpec(AgeBand.LIVES_49_TO_53, "49 a 53", 53, "priceAgeGroup4953", "discountAgeGroup4953"),
    AgeBandSpec(AgeBand.LIVES_54_TO_58, "54 a 58", 58, "priceAgeGroup5458", "discountAgeGroup5458"),
    AgeBandSpec(
        AgeBand.LIVES_59_UPPER, "59+", None, "priceAgeGroup59Upper", "discountAgeGroup59Upper"
    ),
)

_SPECS_BY_BAND: Final[dict[AgeBand, AgeBandSpec]] = {
    spec.band: spec for spec in AGE_BAND_SPECS
}


@beartype
def band_spec(band: AgeBand) -> AgeBandSpec:
    """Return the static description of ``band``."""
    return _SPECS_BY_BAND[band]


@beartype
def band_for_age(age: int) -> AgeBand:
    """Map an age in whole years to its band by inclusive upper bound."""
    for spec in AGE_BAND_SPECS:
        if spec.max_age is not None and age <= spec.max_age:
            return spec.band
    return AgeBand.LIVES_59_UPPER
