# QuoteEngine - Health Plan Quote Construction Engine
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Quote editor session: owns the current draft and the plan-details cache.

Every action runs a pure transition and swaps the draft reference; a failed
transition leaves the draft untouched and returns the error.
"""

import logging
from collections.abc import Mapping
from typing import Any

from beartype import beartype

from ..core.config import get_settings
from ..core.result_types import Err, Ok, Result
from ..models.age_band import AgeBand
from ..models.catalog import PlanDetails, PlanSummary
from ..models.quote import (
    ClientType,
    Coparticipation,
    CrmLink,
    FrameworkType,
    Location,
    QuoteDraft,
    QuotePayload,
    QuoteType,
)
from ..models.selection import CoparticipationChoice, SelectionState
from .budget_range import BudgetRangeModel
from .catalog_service import CatalogClient, PlanDetailsCache
from .date_converter import DateToAgeBandConverter
from .quote_assembler import AssemblyValidation, QuoteDraftAssembler
from .selection_funnel import SelectionFunnel

logger = logging.getLogger(__name__)


class QuoteEditorService:
    """Stateful facade over the quote construction transitions."""

    def __init__(
        self,
        cache: PlanDetailsCache,
        draft: QuoteDraft | None = None,
        converter: DateToAgeBandConverter | None = None,
        client: CatalogClient | None = None,
    ) -> None:
        """Initialize editor.

        Args:
            cache: Plan details cache used when a plan is opened.
            draft: Starting draft, e.g. one loaded from a saved quote.
            converter: Birth date converter; defaults to today's clock.
            client: Catalog client used to search plans.
        """
        self._cache = cache
        self._draft = draft or QuoteDraft()
        self._converter = converter or DateToAgeBandConverter()
        self._client = client

    @classmethod
    def from_saved_quote(
        cls,
        data: Mapping[str, Any],
        cache: PlanDetailsCache,
        converter: DateToAgeBandConverter | None = None,
    ) -> "QuoteEditorService":
        """Edit-mode session seeded from a saved quote document."""
        saved = QuoteDraftAssembler.load_saved_quote(data)
        cache.seed({plan.id: plan for plan in saved.plans})
        return cls(cache, saved.draft, converter)

    @classmethod
    def with_catalog(
        cls, client: CatalogClient, draft: QuoteDraft | None = None
    ) -> "QuoteEditorService":
        """Session whose plan details are fetched with the current simulation params."""
        editor: QuoteEditorService

        async def fetch(plan_id: str) -> Result[PlanDetails, str]:
            return await client.fetch_plan_details(plan_id, editor.simulation_params())

        editor = cls(PlanDetailsCache(fetch), draft, client=client)
        return editor

    @property
    def draft(self) -> QuoteDraft:
        """Current draft."""
        return self._draft

    @property
    def plans(self) -> dict[str, PlanDetails]:
        """Plan details loaded so far."""
        return self._cache.as_mapping()

    def _swap(self, **update: Any) -> QuoteDraft:
        self._draft = self._draft.model_copy(update=update)
        return self._draft

    def _swap_selection(self, selection: SelectionState) -> QuoteDraft:
        return self._swap(selection=selection)

    # Lives

    @beartype
    def adjust_lives(self, band: AgeBand, delta: int) -> QuoteDraft:
        """Increment or decrement one band."""
        return self._swap(ledger=self._draft.ledger.adjust(band, delta))

    @beartype
    def set_lives(self, counts: Mapping[AgeBand, int]) -> QuoteDraft:
        """Replace the whole ledger."""
        return self._swap(ledger=self._draft.ledger.replace(counts))

    @beartype
    def apply_birth_dates(self, text: str) -> Result[QuoteDraft, str]:
        """Replace the ledger with the bands of the typed birth dates."""
        result = self._converter.apply(text, self._draft.ledger)
        if result.is_err():
            return result
        return Ok(self._swap(ledger=result.unwrap()))

    # Budget

    @beartype
    def set_budget_min(self, value: int | float) -> QuoteDraft:
        """Move the lower budget handle."""
        return self._swap(budget=BudgetRangeModel.set_min(self._draft.budget, value))

    @beartype
    def set_budget_max(self, value: int | float) -> QuoteDraft:
        """Move the upper budget handle."""
        return self._swap(budget=BudgetRangeModel.set_max(self._draft.budget, value))

    @beartype
    def commit_budget_text(self, min_text: str, max_text: str) -> QuoteDraft:
        """Commit both typed budget fields."""
        return self._swap(budget=BudgetRangeModel.commit_text(min_text, max_text))

    # Profile

    @beartype
    def set_quote_type(self, quote_type: QuoteType) -> QuoteDraft:
        return self._swap(quote_type=quote_type)

    @beartype
    def set_location(self, location: Location | None) -> QuoteDraft:
        return self._swap(location=location)

    @beartype
    def set_crm_link(self, crm_link: CrmLink | None) -> QuoteDraft:
        return self._swap(crm_link=crm_link)

    @beartype
    def set_client_name(self, client_name: str | None) -> QuoteDraft:
        return self._swap(client_name=client_name or None)

    @beartype
    def set_client_type(self, client_type: ClientType) -> QuoteDraft:
        """Switch between physical and legal clients."""
        filters = self._draft.filters.model_copy(update={"client_type": client_type})
        return self._swap(filters=filters)

    @beartype
    def set_framework(
        self,
        framework_type: FrameworkType,
        professions: tuple[str, ...] = (),
        associations: tuple[str, ...] = (),
    ) -> QuoteDraft:
        """Choose the framework and its professions or associations."""
        filters = self._draft.filters.model_copy(
            update={
                "framework_type": framework_type,
                "professions": tuple(dict.fromkeys(professions)),
                "associations": tuple(dict.fromkeys(associations)),
            }
        )
        return self._swap(filters=filters)

    @beartype
    def set_legal_person_type(self, legal_person_type_id: str | None) -> QuoteDraft:
        filters = self._draft.filters.model_copy(
            update={"legal_person_type_id": legal_person_type_id or None}
        )
        return self._swap(filters=filters)

    @beartype
    def set_coparticipation(self, coparticipation: Coparticipation) -> QuoteDraft:
        filters = self._draft.filters.model_copy(update={"coparticipation": coparticipation})
        return self._swap(filters=filters)

    # Selection funnel

    @beartype
    async def open_plan(self, plan_id: str) -> Result[PlanDetails, str]:
        """Open the funnel on a plan, loading its details when needed."""
        self._swap_selection(SelectionFunnel.open_plan(self._draft.selection, plan_id))
        return await self._cache.ensure(plan_id)

    @beartype
    def choose_table(self, table_id: str) -> Result[QuoteDraft, str]:
        """Pick a table of the open plan by id."""
        funnel = self._draft.selection.funnel
        plan_id = getattr(funnel, "plan_id", None)
        details = self._cache.get(plan_id) if plan_id else None
        if details is None:
            return Err("Plan details are not loaded yet")
        table = details.find_table(table_id)
        if table is None:
            return Err(f"Table {table_id} does not belong to plan {plan_id}")
        result = SelectionFunnel.choose_table(self._draft.selection, table)
        if result.is_err():
            return result
        return Ok(self._swap_selection(result.unwrap()))

    @beartype
    def choose_coparticipation(self, choice: CoparticipationChoice) -> Result[QuoteDraft, str]:
        result = SelectionFunnel.choose_coparticipation(self._draft.selection, choice)
        if result.is_err():
            return result
        return Ok(self._swap_selection(result.unwrap()))

    @beartype
    def toggle_candidate(self, product_id: str) -> Result[QuoteDraft, str]:
        result = SelectionFunnel.toggle_candidate(self._draft.selection, product_id)
        if result.is_err():
            return result
        return Ok(self._swap_selection(result.unwrap()))

    @beartype
    def confirm_selection(self) -> Result[QuoteDraft, str]:
        """Merge the funnel candidates into the quote."""
        result = SelectionFunnel.confirm(self._draft.selection)
        if result.is_err():
            return result
        return Ok(self._swap_selection(result.unwrap()))

    @beartype
    def back(self) -> QuoteDraft:
        return self._swap_selection(SelectionFunnel.back(self._draft.selection))

    @beartype
    def close(self) -> QuoteDraft:
        return self._swap_selection(SelectionFunnel.close(self._draft.selection))

    @beartype
    def toggle_product(self, product_id: str) -> QuoteDraft:
        return self._swap_selection(
            SelectionFunnel.toggle_product(self._draft.selection, product_id)
        )

    @beartype
    def remove_product(self, product_id: str) -> QuoteDraft:
        return self._swap_selection(
            SelectionFunnel.remove_product(self._draft.selection, product_id)
        )

    # Submission

    @beartype
    def validate(self) -> AssemblyValidation:
        """Issues blocking submission, with the section to open."""
        return QuoteDraftAssembler.validate(self._draft)

    @beartype
    def simulation_params(self, page: int = 1, page_size: int | None = None) -> dict[str, Any]:
        """Catalog search parameters for the current draft."""
        return QuoteDraftAssembler.build_simulation_params(
            self._draft, page, page_size or get_settings().simulation_page_size
        )

    @beartype
    async def search_plans(
        self, preserve_selection: bool = False
    ) -> Result[list[PlanSummary], AssemblyValidation | str]:
        """Search the catalog for plans matching the current profile.

        Closes the funnel. Unless ``preserve_selection`` is set, loaded plan
        details and the global selection are discarded first.
        """
        validation = QuoteDraftAssembler.validate_profile(self._draft)
        if not validation.is_valid:
            return Err(validation)
        if self._client is None:
            return Err("No catalog client configured")

        if preserve_selection:
            self._swap_selection(SelectionFunnel.close(self._draft.selection))
        else:
            self._cache.clear()
            self._swap_selection(SelectionState())

        result = await self._client.fetch_plan_summaries(self.simulation_params())
        if result.is_ok():
            logger.info("Found %d plans for the current profile", len(result.unwrap()))
        return result

    @beartype
    def submit(self) -> Result[QuotePayload, AssemblyValidation]:
        """Assemble the outbound payload from the current draft."""
        result = QuoteDraftAssembler.assemble(self._draft, self._cache.as_mapping())
        if result.is_err():
            logger.info(
                "Quote submission blocked; opening %s", result.unwrap_err().section_to_open
            )
        return result
