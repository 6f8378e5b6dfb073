# QuoteEngine - Health Plan Quote Construction Engine
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Count of insured lives per age band."""

from collections.abc import Mapping
from typing import Annotated, Any

from beartype import beartype
from pydantic import Field, field_validator

from .age_band import MAX_LIVES, AgeBand
from .base import BaseModelConfig

LifeCount = Annotated[int, Field(ge=0, le=MAX_LIVES)]


def _clamp_lives(value: int) -> int:
    return max(0, min(MAX_LIVES, value))


class AgeBandLedger(BaseModelConfig):
    """Immutable per-band life counts.

    Every band is always present. Mutating operations return a new ledger.
    """

    counts: dict[AgeBand, LifeCount] = Field(
        default_factory=dict, description="Lives per age band"
    )

    @field_validator("counts", mode="before")
    @classmethod
    def fill_missing_bands(cls, value: Any) -> dict[AgeBand, Any]:
        """Default absent bands to zero and reject unknown band keys."""
        known = {band.value for band in AgeBand}
        provided = {str(getattr(key, "value", key)): count for key, count in dict(value or {}).items()}
        unknown = [key for key in provided if key not in known]
        if unknown:
            raise ValueError(f"Unknown age bands: {unknown}")
        return {band: provided.get(band.value, 0) for band in AgeBand}

    @classmethod
    @beartype
    def empty(cls) -> "AgeBandLedger":
        """Ledger with zero lives in every band."""
        return cls()

    @classmethod
    @beartype
    def from_payload(cls, data: Mapping[str, Any]) -> "AgeBandLedger":
        """Read band counts stored under their stable keys.

        Missing, null or non-numeric entries count as zero.
        """
        counts: dict[AgeBand, int] = {}
        for band in AgeBand:
            raw = data.get(band.value)
            if isinstance(raw, bool) or raw is None:
                continue
            try:
                counts[band] = _clamp_lives(int(float(raw)))
            except (TypeError, ValueError, OverflowError):
                continue
        return cls(counts=counts)

    @beartype
    def count(self, band: AgeBand) -> int:
        """Lives in ``band``."""
        return self.counts[band]

    @beartype
    def total(self) -> int:
        """Total lives across all bands."""
        return sum(self.counts.values())

    @beartype
    def adjust(self, band: AgeBand, delta: int) -> "AgeBandLedger":
        """Shift one band by ``delta``, saturating at the bounds."""
        counts = dict(self.counts)
        counts[band] = _clamp_lives(counts[band] + delta)
        return AgeBandLedger(counts=counts)

    @beartype
    def increment(self, band: AgeBand) -> "AgeBandLedger":
        """Add one life to ``band``."""
        return self.adjust(band, 1)

    @beartype
    def decrement(self, band: AgeBand) -> "AgeBandLedger":
        """Remove one life from ``band``."""
        return self.adjust(band, -1)

    @beartype
    def replace(self, new_counts: Mapping[AgeBand, int]) -> "AgeBandLedger":
        """Swap the whole ledger; bands absent from ``new_counts`` become zero."""
        return AgeBandLedger(
            counts={band: _clamp_lives(count) for band, count in new_counts.items()}
        )

    @beartype
    def non_zero(self) -> dict[AgeBand, int]:
        """Bands holding at least one life, in display order."""
        return {band: count for band, count in self.counts.items() if count > 0}

    @beartype
    def as_payload(self) -> dict[str, int]:
        """Ages document for quote payloads, zero-count bands omitted."""
        return {band.value: count for band, count in self.non_zero().items()}

    @property
    def needs_age_warning(self) -> bool:
        """True when minors or seniors are present."""
        return bool(
            self.counts[AgeBand.LIVES_0_TO_18] or self.counts[AgeBand.LIVES_59_UPPER]
        )
