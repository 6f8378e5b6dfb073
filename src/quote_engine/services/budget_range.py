# QuoteEngine - Health Plan Quote Construction Engine
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Two-handle budget range arithmetic.

Every operation takes the current ``BudgetRange`` and returns a new one, so
``min_price <= max_price`` holds after any sequence of calls.
"""

import math
import re

from beartype import beartype

from ..models.quote import BUDGET_STEP, MAX_BUDGET, MIN_BUDGET, BudgetRange

_NON_DIGITS = re.compile(r"[^\d]")


class BudgetRangeModel:
    """Clamp, step and convert budget values for a linear slider track."""

    @staticmethod
    @beartype
    def sanitize(value: int | float) -> int:
        """Round to the nearest step (halves up) and clamp into the domain."""
        if not math.isfinite(value):
            return MIN_BUDGET if value < 0 else MAX_BUDGET
        stepped = math.floor(value / BUDGET_STEP + 0.5) * BUDGET_STEP
        return max(MIN_BUDGET, min(MAX_BUDGET, stepped))

    @staticmethod
    @beartype
    def set_min(budget: BudgetRange, value: int | float) -> BudgetRange:
        """Move the lower handle, never past the upper one."""
        next_min = min(BudgetRangeModel.sanitize(value), budget.max_price)
        return BudgetRange(min_price=next_min, max_price=budget.max_price)

    @staticmethod
    @beartype
    def set_max(budget: BudgetRange, value: int | float) -> BudgetRange:
        """Move the upper handle, never below the lower one."""
        next_max = max(BudgetRangeModel.sanitize(value), budget.min_price)
        return BudgetRange(min_price=budget.min_price, max_price=next_max)

    @staticmethod
    @beartype
    def value_to_position(value: int | float, track_length: int | float) -> float:
        """Offset of ``value`` along a track of ``track_length`` pixels."""
        if track_length <= 0:
            return 0.0
        return (value - MIN_BUDGET) / (MAX_BUDGET - MIN_BUDGET) * track_length

    @staticmethod
    @beartype
    def position_to_value(position: int | float, track_length: int | float) -> int:
        """Sanitized value at ``position`` along the track."""
        if track_length <= 0:
            return MIN_BUDGET
        raw = position / track_length * (MAX_BUDGET - MIN_BUDGET) + MIN_BUDGET
        return BudgetRangeModel.sanitize(raw)

    @staticmethod
    @beartype
    def drag_min(budget: BudgetRange, dx: int | float, track_length: int | float) -> BudgetRange:
        """Drag the lower handle by ``dx`` pixels, bounded by the track start and upper handle."""
        if track_length <= 0:
            return budget
        start = BudgetRangeModel.value_to_position(budget.min_price, track_length)
        upper = BudgetRangeModel.value_to_position(budget.max_price, track_length)
        position = max(0.0, min(upper, start + dx))
        return BudgetRangeModel.set_min(
            budget, BudgetRangeModel.position_to_value(position, track_length)
        )

    @staticmethod
    @beartype
    def drag_max(budget: BudgetRange, dx: int | float, track_length: int | float) -> BudgetRange:
        """Drag the upper handle by ``dx`` pixels, bounded by the lower handle and track end."""
        if track_length <= 0:
            return budget
        lower = BudgetRangeModel.value_to_position(budget.min_price, track_length)
        start = BudgetRangeModel.value_to_position(budget.max_price, track_length)
        position = max(lower, min(track_length, start + dx))
        return BudgetRangeModel.set_max(
            budget, BudgetRangeModel.position_to_value(position, track_length)
        )

    @staticmethod
    @beartype
    def digits_only(text: str) -> str:
        """Keep only the digits typed into a budget field."""
        return _NON_DIGITS.sub("", text)

    @staticmethod
    @beartype
    def commit_text(min_text: str, max_text: str) -> BudgetRange:
        """Commit both text fields at once.

        Empty fields fall back to the domain bounds; the two sanitized values
        are reordered rather than clamped against each other.
        """
        min_digits = BudgetRangeModel.digits_only(min_text)
        max_digits = BudgetRangeModel.digits_only(max_text)
        safe_min = BudgetRangeModel.sanitize(int(min_digits) if min_digits else MIN_BUDGET)
        safe_max = BudgetRangeModel.sanitize(int(max_digits) if max_digits else MAX_BUDGET)
        return BudgetRange(min_price=min(safe_min, safe_max), max_price=max(safe_min, safe_max))
