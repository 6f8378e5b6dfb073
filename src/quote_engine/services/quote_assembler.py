# QuoteEngine - Health Plan Quote Construction Engine
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Validation of quote drafts and assembly of the documents sent to the backend."""

import logging
import math
from collections.abc import Mapping
from decimal import Decimal
from typing import Any

from beartype import beartype
from pydantic import Field

from ..core.result_types import Err, Ok, Result
from ..models.base import BaseModelConfig
from ..models.catalog import PlanDetails, Product
from ..models.ledger import AgeBandLedger
from ..models.quote import (
    ClientType,
    Coparticipation,
    CrmLink,
    EditorSection,
    FrameworkType,
    Location,
    ProductRef,
    QuoteDraft,
    QuoteFilters,
    QuotePayload,
)
from ..models.selection import SelectionState
from .budget_range import BudgetRangeModel
from .pricing import PricingEngine

logger = logging.getLogger(__name__)

_SECTION_PRIORITY = (EditorSection.PROFILE, EditorSection.LIVES, EditorSection.PRODUCTS)


class DraftIssue(BaseModelConfig):
    """Field-level problem blocking the draft."""

    field: str = Field(..., min_length=1)
    message: str = Field(..., min_length=1)
    section: EditorSection


class AssemblyValidation(BaseModelConfig):
    """All issues found on a draft."""

    issues: tuple[DraftIssue, ...] = ()

    @property
    def is_valid(self) -> bool:
        """No blocking issue."""
        return not self.issues

    @property
    def section_to_open(self) -> EditorSection | None:
        """Editor section the user should be sent to first."""
        sections = {issue.section for issue in self.issues}
        for section in _SECTION_PRIORITY:
            if section in sections:
                return section
        return None

    @beartype
    def messages(self) -> dict[str, str]:
        """Message per field."""
        return {issue.field: issue.message for issue in self.issues}


class SelectedProductLine(BaseModelConfig):
    """Selected product with its displayed price."""

    plan_id: str
    table_id: str
    product: Product
    total: Decimal


class SavedQuote(BaseModelConfig):
    """Draft rebuilt from a saved quote, with the plan details it embeds."""

    draft: QuoteDraft
    plans: tuple[PlanDetails, ...] = ()


class QuoteDraftAssembler:
    """Validate drafts and fold them into backend documents."""

    @staticmethod
    @beartype
    def profile_issues(draft: QuoteDraft) -> list[DraftIssue]:
        """Location, legal-person type and lives checks."""
        issues: list[DraftIssue] = []
        if draft.location is None:
            issues.append(
                DraftIssue(
                    field="location",
                    message="Select a location.",
                    section=EditorSection.PROFILE,
                )
            )
        if (
            draft.filters.client_type is ClientType.LEGAL
            and not draft.filters.legal_person_type_id
        ):
            issues.append(
                DraftIssue(
                    field="lpt",
                    message="Select the legal person type.",
                    section=EditorSection.PROFILE,
                )
            )
        if draft.total_lives == 0:
            issues.append(
                DraftIssue(
                    field="lives",
                    message="Enter at least one life.",
                    section=EditorSection.LIVES,
                )
            )
        return issues

    @staticmethod
    @beartype
    def validate_profile(draft: QuoteDraft) -> AssemblyValidation:
        """Gate run before plans are searched for the draft."""
        return AssemblyValidation(issues=tuple(QuoteDraftAssembler.profile_issues(draft)))

    @staticmethod
    @beartype
    def validate(draft: QuoteDraft) -> AssemblyValidation:
        """Every condition required to submit the draft."""
        issues = QuoteDraftAssembler.profile_issues(draft)
        if not draft.selection.has_selection:
            issues.append(
                DraftIssue(
                    field="products",
                    message="Select at least one product to create the quote.",
                    section=EditorSection.PRODUCTS,
                )
            )
        return AssemblyValidation(issues=tuple(issues))

    @staticmethod
    @beartype
    def ages_payload(ledger: AgeBandLedger) -> dict[str, int]:
        """Ages document with zero-count bands omitted."""
        return ledger.as_payload()

    @staticmethod
    @beartype
    def selected_plan_ids(
        selected_product_ids: tuple[str, ...], plans: Mapping[str, PlanDetails]
    ) -> tuple[str, ...]:
        """Plans holding at least one selected product, in catalog order."""
        selected = set(selected_product_ids)
        return tuple(
            plan_id
            for plan_id, details in plans.items()
            if any(product.id in selected for product in details.products())
        )

    @staticmethod
    @beartype
    def assemble(
        draft: QuoteDraft, plans: Mapping[str, PlanDetails]
    ) -> Result[QuotePayload, AssemblyValidation]:
        """Build the outbound quote payload, or report why it is blocked."""
        validation = QuoteDraftAssembler.validate(draft)
        if not validation.is_valid or draft.location is None:
            logger.info(
                "Quote assembly blocked on %s: %s",
                validation.section_to_open,
                ", ".join(issue.field for issue in validation.issues),
            )
            return Err(validation)

        filters = draft.filters
        crm = draft.crm_link
        payload: dict[str, Any] = {
            "state_id": draft.location.state_id,
            "city_id": draft.location.city_id,
            "lead_id": crm.id if crm is not None and crm.kind == "lead" else None,
            "contact_id": crm.id if crm is not None and crm.kind == "contact" else None,
            "client": draft.client_name or None,
            "client_type": filters.client_type.code,
            "coparticipation": int(filters.coparticipation),
            "plans": QuoteDraftAssembler.selected_plan_ids(
                draft.selection.selected_product_ids, plans
            ),
            "products": tuple(
                ProductRef(id=product_id) for product_id in draft.selection.selected_product_ids
            ),
            "ages": QuoteDraftAssembler.ages_payload(draft.ledger),
            "min_price": draft.budget.min_price,
            "max_price": draft.budget.max_price,
        }
        if filters.client_type is ClientType.PHYSICAL:
            chosen = filters.framework_selection
            payload["without_entity"] = not chosen
            if chosen:
                payload["entity_type"] = filters.framework_type.code
                if filters.framework_type is FrameworkType.PROFESSION:
                    payload["professions"] = chosen
                else:
                    payload["associations"] = chosen
        elif filters.legal_person_type_id:
            payload["lpt_id"] = filters.legal_person_type_id

        quote_payload = QuotePayload(**payload)
        logger.info(
            "Assembled quote payload: %d products across %d plans, %d lives",
            len(quote_payload.products),
            len(quote_payload.plans),
            draft.total_lives,
        )
        return Ok(quote_payload)

    @staticmethod
    @beartype
    def build_simulation_params(
        draft: QuoteDraft, page: int = 1, page_size: int = 20
    ) -> dict[str, Any]:
        """Query parameters for the plan catalog search."""
        filters = draft.filters
        params: dict[str, Any] = {
            "page": page,
            "pageSize": page_size,
            "state": draft.location.state_id if draft.location else None,
            "city": draft.location.city_id if draft.location else None,
            "clientType": filters.client_type.code,
            "coparticipation": int(filters.coparticipation),
            "quoteType": draft.quote_type.catalog_code,
            "ages": QuoteDraftAssembler.ages_payload(draft.ledger),
            "minPrice": draft.budget.min_price,
            "maxPrice": draft.budget.max_price,
        }

        if filters.client_type is ClientType.PHYSICAL:
            params["entityType"] = filters.framework_type.code
            params["withoutEntity"] = not filters.framework_selection
            if filters.framework_type is FrameworkType.PROFESSION and filters.professions:
                params["professions"] = list(filters.professions)
            if filters.framework_type is FrameworkType.ENTITY and filters.associations:
                params["associations"] = list(filters.associations)
            if filters.plan_type is not None:
                params["planType"] = int(filters.plan_type)
        else:
            if filters.legal_person_type_id:
                params["lpt"] = filters.legal_person_type_id
            if filters.contract_type is not None:
                params["contractType"] = int(filters.contract_type)

        if filters.accommodation_id:
            params["accommodationId"] = filters.accommodation_id
        if filters.coverage_id:
            params["coverageId"] = filters.coverage_id
        if filters.segment_id:
            params["segmentId"] = filters.segment_id
        if filters.can_be_refunded is not None:
            params["canBeRefunded"] = filters.can_be_refunded
        if filters.refnets:
            params["refnets"] = list(filters.refnets)
        return params

    @staticmethod
    @beartype
    def summarize_selection(
        draft: QuoteDraft,
        plans: Mapping[str, PlanDetails],
        apply_discount: bool = False,
    ) -> dict[str, tuple[SelectedProductLine, ...]]:
        """Selected products grouped by plan, priced for the draft's lives."""
        summary: dict[str, tuple[SelectedProductLine, ...]] = {}
        for plan_id, details in plans.items():
            lines = tuple(
                SelectedProductLine(
                    plan_id=plan_id,
                    table_id=table.id,
                    product=product,
                    total=PricingEngine.price_for_quote(
                        product, draft.ledger, draft.quote_type, apply_discount
                    ),
                )
                for table in details.tables
                for product in table.products
                if draft.selection.is_selected(product.id)
            )
            if lines:
                summary[plan_id] = lines
        return summary

    @staticmethod
    @beartype
    def load_saved_quote(data: Mapping[str, Any]) -> SavedQuote:
        """Rebuild a draft from a saved quote's detail document."""
        professions = _ids_of(data.get("professions"))
        associations = _ids_of(data.get("associations"))
        if professions:
            framework = FrameworkType.PROFESSION
        elif associations:
            framework = FrameworkType.ENTITY
        else:
            framework = FrameworkType.PROFESSION

        coparticipation = data.get("coparticipation")
        filters = QuoteFilters(
            client_type=ClientType.LEGAL if data.get("clientType") == 1 else ClientType.PHYSICAL,
            framework_type=framework,
            professions=professions,
            associations=associations,
            legal_person_type_id=_ref_id(data.get("lpt")),
            coparticipation=(
                Coparticipation(coparticipation)
                if not isinstance(coparticipation, bool)
                and coparticipation in {item.value for item in Coparticipation}
                else Coparticipation.ALL
            ),
        )

        plans = tuple(
            plan
            for plan in (PlanDetails.from_api(item) for item in _documents(data.get("plans")))
            if plan is not None
        )
        raw_ids = data.get("productsIds")
        if isinstance(raw_ids, list):
            product_ids = tuple(str(item) for item in raw_ids if item is not None)
        else:
            product_ids = tuple(product.id for plan in plans for product in plan.products())

        min_price = _as_number(data.get("minPrice"))
        max_price = _as_number(data.get("maxPrice"))
        budget = BudgetRangeModel.commit_text(
            str(int(min_price)) if min_price is not None else "",
            str(int(max_price)) if max_price is not None else "",
        )

        draft = QuoteDraft(
            ledger=AgeBandLedger.from_payload(data),
            filters=filters,
            budget=budget,
            selection=SelectionState(selected_product_ids=product_ids),
            client_name=str(data.get("client") or "") or None,
            crm_link=_crm_link(data),
            location=_location(data),
        )
        logger.info("Loaded saved quote with %d products", len(product_ids))
        return SavedQuote(draft=draft, plans=plans)


def _documents(value: Any) -> list[Mapping[str, Any]]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, Mapping)]


def _ref_id(value: Any) -> str | None:
    if isinstance(value, Mapping) and value.get("id") is not None:
        return str(value["id"])
    return None


def _ids_of(value: Any) -> tuple[str, ...]:
    return tuple(ref for ref in (_ref_id(item) for item in _documents(value)) if ref)


def _as_number(value: Any) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if not math.isfinite(value):
        return None
    return float(value) if value >= 0 else 0.0


def _crm_link(data: Mapping[str, Any]) -> CrmLink | None:
    for kind in ("lead", "contact"):
        ref = data.get(kind)
        ref_id = _ref_id(ref)
        if ref_id:
            return CrmLink(kind=kind, id=ref_id, name=str(ref.get("name") or ""))
    return None


def _location(data: Mapping[str, Any]) -> Location | None:
    state = data.get("state")
    city = data.get("city")
    state_id = _ref_id(state)
    city_id = _ref_id(city)
    if not state_id or not city_id:
        return None
    city_name = city.get("name") if isinstance(city, Mapping) else None
    state_name = (state.get("abbreviation") or state.get("name")) if isinstance(state, Mapping) else None
    label = f"{city_name} - {state_name}" if city_name and state_name else ""
    return Location(state_id=state_id, city_id=city_id, label=label)
