# QuoteEngine - Health Plan Quote Construction Engine
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Guided product selection: plan -> table -> coparticipation -> products.

Transitions are pure functions over ``SelectionState``. A transition attempted
from the wrong step returns ``Err`` and leaves the state alone.
"""

import logging

from beartype import beartype

from ..core.result_types import Err, Ok, Result
from ..models.catalog import PlanTable, Product
from ..models.selection import (
    ChoosingCoparticipation,
    ChoosingProducts,
    ChoosingTable,
    CoparticipationChoice,
    FunnelClosed,
    FunnelState,
    FunnelStep,
    SelectionState,
)

logger = logging.getLogger(__name__)


def _step_name(funnel: FunnelState) -> str:
    return FunnelStep(funnel.step).value


class SelectionFunnel:
    """State machine driving the multi-step product selection."""

    @staticmethod
    @beartype
    def visible_products(
        table: PlanTable, choice: CoparticipationChoice | None
    ) -> tuple[Product, ...]:
        """Products of ``table`` matching the coparticipation choice, if any."""
        if choice is None:
            return table.products
        wants_coparticipation = choice is CoparticipationChoice.WITH
        return tuple(
            product
            for product in table.products
            if product.includes_coparticipation == wants_coparticipation
        )

    @staticmethod
    @beartype
    def open_plan(state: SelectionState, plan_id: str) -> SelectionState:
        """Start (or restart) the funnel on ``plan_id`` at the table step."""
        logger.debug("Opening selection funnel for plan %s", plan_id)
        return state.model_copy(update={"funnel": ChoosingTable(plan_id=plan_id)})

    @staticmethod
    @beartype
    def choose_table(state: SelectionState, table: PlanTable) -> Result[SelectionState, str]:
        """Pick a rate table of the open plan."""
        funnel = state.funnel
        if not isinstance(funnel, ChoosingTable):
            return Err(f"Cannot choose a table during the {_step_name(funnel)} step")
        return Ok(
            state.model_copy(
                update={"funnel": ChoosingCoparticipation(plan_id=funnel.plan_id, table=table)}
            )
        )

    @staticmethod
    @beartype
    def choose_coparticipation(
        state: SelectionState, choice: CoparticipationChoice
    ) -> Result[SelectionState, str]:
        """Pick the coparticipation variant and pre-select already chosen products."""
        funnel = state.funnel
        if not isinstance(funnel, ChoosingCoparticipation):
            return Err(f"Cannot choose coparticipation during the {_step_name(funnel)} step")

        visible = SelectionFunnel.visible_products(funnel.table, choice)
        preselected = tuple(
            product.id for product in visible if state.is_selected(product.id)
        )
        return Ok(
            state.model_copy(
                update={
                    "funnel": ChoosingProducts(
                        plan_id=funnel.plan_id,
                        table=funnel.table,
                        coparticipation=choice,
                        candidate_ids=preselected,
                    )
                }
            )
        )

    @staticmethod
    @beartype
    def toggle_candidate(state: SelectionState, product_id: str) -> Result[SelectionState, str]:
        """Add or remove a visible product from the local multi-select."""
        funnel = state.funnel
        if not isinstance(funnel, ChoosingProducts):
            return Err(f"Cannot toggle products during the {_step_name(funnel)} step")

        visible_ids = {
            product.id
            for product in SelectionFunnel.visible_products(funnel.table, funnel.coparticipation)
        }
        if product_id not in visible_ids:
            return Err(f"Product {product_id} is not offered in this step")

        if product_id in funnel.candidate_ids:
            candidates = tuple(pid for pid in funnel.candidate_ids if pid != product_id)
        else:
            candidates = (*funnel.candidate_ids, product_id)
        return Ok(
            state.model_copy(
                update={"funnel": funnel.model_copy(update={"candidate_ids": candidates})}
            )
        )

    @staticmethod
    @beartype
    def can_confirm(state: SelectionState) -> bool:
        """Whether ``confirm`` would merge anything."""
        funnel = state.funnel
        return isinstance(funnel, ChoosingProducts) and bool(funnel.candidate_ids)

    @staticmethod
    @beartype
    def confirm(state: SelectionState) -> Result[SelectionState, str]:
        """Merge the candidates into the global selection and close the funnel.

        With no candidates this is a no-op and the funnel stays open.
        """
        funnel = state.funnel
        if not isinstance(funnel, ChoosingProducts):
            return Err(f"Cannot confirm during the {_step_name(funnel)} step")
        if not funnel.candidate_ids:
            logger.debug("Confirm ignored: no candidate products on plan %s", funnel.plan_id)
            return Ok(state)

        merged = tuple(dict.fromkeys((*state.selected_product_ids, *funnel.candidate_ids)))
        logger.info(
            "Confirmed %d products from plan %s table %s",
            len(funnel.candidate_ids),
            funnel.plan_id,
            funnel.table.id,
        )
        return Ok(SelectionState(selected_product_ids=merged, funnel=FunnelClosed()))

    @staticmethod
    @beartype
    def back(state: SelectionState) -> SelectionState:
        """Step back once, discarding what the current step held."""
        funnel = state.funnel
        if isinstance(funnel, ChoosingProducts):
            previous = ChoosingCoparticipation(plan_id=funnel.plan_id, table=funnel.table)
        elif isinstance(funnel, ChoosingCoparticipation):
            previous = ChoosingTable(plan_id=funnel.plan_id)
        else:
            previous = FunnelClosed()
        return state.model_copy(update={"funnel": previous})

    @staticmethod
    @beartype
    def close(state: SelectionState) -> SelectionState:
        """Abandon the funnel from any step."""
        return state.model_copy(update={"funnel": FunnelClosed()})

    @staticmethod
    @beartype
    def toggle_product(state: SelectionState, product_id: str) -> SelectionState:
        """Flip membership of ``product_id`` in the global selection.

        Blank ids are ignored.
        """
        if not product_id.strip():
            return state
        if state.is_selected(product_id):
            return SelectionFunnel.remove_product(state, product_id)
        return state.model_copy(
            update={"selected_product_ids": (*state.selected_product_ids, product_id)}
        )

    @staticmethod
    @beartype
    def remove_product(state: SelectionState, product_id: str) -> SelectionState:
        """Drop ``product_id`` from the global selection, whatever the funnel step."""
        return state.model_copy(
            update={
                "selected_product_ids": tuple(
                    pid for pid in state.selected_product_ids if pid != product_id
                )
            }
        )
