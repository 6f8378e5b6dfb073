# QuoteEngine - Health Plan Quote Construction Engine
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Product selection state and the steps of the selection funnel.

The funnel step is a discriminated union: each step carries exactly the data
that is known at that point, so a products step without a table or a
coparticipation choice cannot be built.
"""

from enum import Enum
from typing import Annotated, Literal

from beartype import beartype
from pydantic import Field, field_validator

from .base import BaseModelConfig
from .catalog import PlanTable


class FunnelStep(str, Enum):
    """Funnel step discriminators."""

    CLOSED = "closed"
    TABLES = "tables"
    COPARTICIPATION = "coparticipation"
    PRODUCTS = "products"


class CoparticipationChoice(str, Enum):
    """Coparticipation variant chosen inside the funnel."""

    WITH = "with"
    WITHOUT = "without"


class FunnelClosed(BaseModelConfig):
    """No funnel in progress."""

    step: Literal[FunnelStep.CLOSED] = FunnelStep.CLOSED


class ChoosingTable(BaseModelConfig):
    """A plan is open; the user picks one of its rate tables."""

    step: Literal[FunnelStep.TABLES] = FunnelStep.TABLES
    plan_id: str = Field(..., min_length=1)


class ChoosingCoparticipation(BaseModelConfig):
    """A table is chosen; the user picks with or without coparticipation."""

    step: Literal[FunnelStep.COPARTICIPATION] = FunnelStep.COPARTICIPATION
    plan_id: str = Field(..., min_length=1)
    table: PlanTable


class ChoosingProducts(BaseModelConfig):
    """The user multi-selects candidate products of the chosen table."""

    step: Literal[FunnelStep.PRODUCTS] = FunnelStep.PRODUCTS
    plan_id: str = Field(..., min_length=1)
    table: PlanTable
    coparticipation: CoparticipationChoice
    candidate_ids: tuple[str, ...] = ()


FunnelState = Annotated[
    FunnelClosed | ChoosingTable | ChoosingCoparticipation | ChoosingProducts,
    Field(discriminator="step"),
]


class SelectionState(BaseModelConfig):
    """Cross-plan product selection plus the funnel in progress."""

    selected_product_ids: tuple[str, ...] = ()
    funnel: FunnelState = Field(default_factory=FunnelClosed)

    @field_validator("selected_product_ids")
    @classmethod
    def deduplicate_ids(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        """Keep the first occurrence of each id and drop blank ones."""
        return tuple(dict.fromkeys(pid for pid in value if pid))

    @beartype
    def is_selected(self, product_id: str) -> bool:
        """Whether ``product_id`` is in the global selection."""
        return product_id in self.selected_product_ids

    @property
    def has_selection(self) -> bool:
        """At least one product is globally selected."""
        return bool(self.selected_product_ids)
