# QuoteEngine - Health Plan Quote Construction Engine
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Conversion of free-text birth dates into age-band counts."""

import logging
import re
from collections import Counter
from collections.abc import Callable
from datetime import date
from typing import Final

from beartype import beartype

from ..core.result_types import Err, Ok, Result
from ..models.age_band import AgeBand, band_for_age
from ..models.base import BaseModelConfig
from ..models.ledger import AgeBandLedger

logger = logging.getLogger(__name__)

_TOKEN_SEPARATOR: Final = re.compile(r"[\n,\s]+")
_DATE_PATTERN: Final = re.compile(r"^(\d{2})/(\d{2})/(\d{4})$")
MIN_BIRTH_YEAR: Final = 1900
MAX_BIRTH_YEAR: Final = 2100


class ConversionResult(BaseModelConfig):
    """Outcome of parsing a block of birth dates.

    ``ledger`` is only a proposal; committing it is gated by ``can_apply``.
    """

    valid_dates: tuple[str, ...] = ()
    invalid_dates: tuple[str, ...] = ()
    ledger: AgeBandLedger

    @property
    def is_empty(self) -> bool:
        """No token was found in the input."""
        return not self.valid_dates and not self.invalid_dates

    @property
    def can_apply(self) -> bool:
        """At least one valid date and no invalid ones."""
        return bool(self.valid_dates) and not self.invalid_dates


class DateToAgeBandConverter:
    """Parse ``dd/mm/yyyy`` birth dates and bucket them into age bands."""

    def __init__(self, today: Callable[[], date] | None = None) -> None:
        """Initialize converter.

        Args:
            today: Clock returning the reference date for age computation.
        """
        self._today = today or date.today

    @staticmethod
    @beartype
    def tokenize(text: str) -> list[str]:
        """Split on runs of commas, whitespace or newlines, dropping empties."""
        return [token for token in _TOKEN_SEPARATOR.split(text) if token]

    @staticmethod
    @beartype
    def parse_date(token: str) -> date | None:
        """Parse a ``dd/mm/yyyy`` token into a real calendar date."""
        match = _DATE_PATTERN.match(token)
        if not match:
            return None
        day, month, year = (int(group) for group in match.groups())
        if not 1 <= day <= 31 or not 1 <= month <= 12:
            return None
        if not MIN_BIRTH_YEAR <= year <= MAX_BIRTH_YEAR:
            return None
        try:
            parsed = date(year, month, day)
        except ValueError:
            return None
        if (parsed.day, parsed.month, parsed.year) != (day, month, year):
            return None
        return parsed

    @staticmethod
    @beartype
    def age_on(birth_date: date, today: date) -> int:
        """Age in whole years on ``today``, never negative."""
        age = today.year - birth_date.year
        if (today.month, today.day) < (birth_date.month, birth_date.day):
            age -= 1
        return max(age, 0)

    @beartype
    def band_for_birth_date(self, birth_date: date) -> AgeBand:
        """Age band of someone born on ``birth_date``."""
        return band_for_age(self.age_on(birth_date, self._today()))

    @beartype
    def convert(self, text: str, current: AgeBandLedger | None = None) -> ConversionResult:
        """Classify every token and build the ledger the valid ones describe.

        Empty input returns ``current`` (or an empty ledger) untouched.
        """
        current = current or AgeBandLedger.empty()
        tokens = self.tokenize(text)
        if not tokens:
            return ConversionResult(ledger=current)

        valid: list[str] = []
        invalid: list[str] = []
        bands: Counter[AgeBand] = Counter()
        for token in tokens:
            parsed = self.parse_date(token)
            if parsed is None:
                invalid.append(token)
                continue
            valid.append(token)
            bands[self.band_for_birth_date(parsed)] += 1

        return ConversionResult(
            valid_dates=tuple(valid),
            invalid_dates=tuple(invalid),
            ledger=current.replace(dict(bands)),
        )

    @beartype
    def apply(self, text: str, current: AgeBandLedger) -> Result[AgeBandLedger, str]:
        """Commit the converted ledger when the input is fully valid."""
        if not text.strip():
            return Err("Enter at least one date in the dd/mm/yyyy format.")

        result = self.convert(text, current)
        if result.invalid_dates:
            count = len(result.invalid_dates)
            noun = "dates are" if count > 1 else "date is"
            return Err(f"{count} {noun} invalid. Check the format (dd/mm/yyyy).")
        if not result.valid_dates:
            return Err("No valid date was found.")

        logger.info(
            "Converted %d birth dates into %d lives",
            len(result.valid_dates),
            result.ledger.total(),
        )
        return Ok(result.ledger)
