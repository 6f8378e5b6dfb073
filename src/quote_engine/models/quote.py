# QuoteEngine - Health Plan Quote Construction Engine
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Quote draft domain models and the outbound quote payload."""

from enum import Enum, IntEnum
from typing import Final, Literal

from pydantic import Field, model_validator

from .base import BaseModelConfig, CamelModel
from .ledger import AgeBandLedger
from .selection import SelectionState

MIN_BUDGET: Final = 0
MAX_BUDGET: Final = 10000
BUDGET_STEP: Final = 50


class QuoteType(str, Enum):
    """Line of business being quoted."""

    HEALTH = "health"
    DENTAL = "dental"

    @property
    def catalog_code(self) -> str:
        """Code used by the catalog API."""
        return "HEALTH" if self is QuoteType.HEALTH else "ODONTO"


class ClientType(str, Enum):
    """Physical person (CPF) or legal person (CNPJ) client."""

    PHYSICAL = "physical"
    LEGAL = "legal"

    @property
    def code(self) -> int:
        """Numeric code used on the wire."""
        return 0 if self is ClientType.PHYSICAL else 1


class FrameworkType(str, Enum):
    """How a physical client is framed into a plan: by profession or entity."""

    PROFESSION = "profession"
    ENTITY = "entity"

    @property
    def code(self) -> int:
        """Numeric ``entityType`` used on the wire."""
        return 0 if self is FrameworkType.PROFESSION else 1


class Coparticipation(IntEnum):
    """Coparticipation filter of the quote."""

    ALL = 0
    WITH = 1
    WITHOUT = 2
    PARTIAL = 3


class PlanCategory(IntEnum):
    """Plan type filter."""

    PHYSICAL_PERSON = 0
    LEGAL_PERSON = 1
    ADHESION = 2


class ContractType(IntEnum):
    """Contract type filter for legal clients."""

    COMPULSORY = 0
    VOLUNTARY = 1
    NOT_APPLICABLE = 2


class EditorSection(str, Enum):
    """Section of the quote editor a validation issue points to."""

    PROFILE = "profile"
    LIVES = "lives"
    PRODUCTS = "products"


class Location(CamelModel):
    """City and state the quote is priced for."""

    state_id: str = Field(..., min_length=1)
    city_id: str = Field(..., min_length=1)
    label: str = Field(default="")


class CrmLink(CamelModel):
    """CRM lead or contact the quote belongs to."""

    kind: Literal["lead", "contact"]
    id: str = Field(..., min_length=1)
    name: str = Field(default="")


class QuoteFilters(CamelModel):
    """Profile and catalog filters chosen in the editor."""

    client_type: ClientType = ClientType.PHYSICAL
    framework_type: FrameworkType = FrameworkType.PROFESSION
    professions: tuple[str, ...] = ()
    associations: tuple[str, ...] = ()
    legal_person_type_id: str | None = None
    coparticipation: Coparticipation = Coparticipation.ALL
    plan_type: PlanCategory | None = None
    contract_type: ContractType | None = None
    accommodation_id: str | None = None
    coverage_id: str | None = None
    segment_id: str | None = None
    can_be_refunded: bool | None = None
    refnets: tuple[str, ...] = ()

    @property
    def framework_selection(self) -> tuple[str, ...]:
        """Professions or associations, depending on the active framework."""
        if self.framework_type is FrameworkType.PROFESSION:
            return self.professions
        return self.associations


class BudgetRange(CamelModel):
    """Stepped monthly budget range."""

    min_price: int = Field(default=MIN_BUDGET, ge=MIN_BUDGET, le=MAX_BUDGET)
    max_price: int = Field(default=MAX_BUDGET, ge=MIN_BUDGET, le=MAX_BUDGET)

    @model_validator(mode="after")
    def validate_range(self) -> "BudgetRange":
        """Ensure both bounds are on the step grid and ordered."""
        for value in (self.min_price, self.max_price):
            if value % BUDGET_STEP:
                raise ValueError(f"Budget value {value} is not a multiple of {BUDGET_STEP}")
        if self.min_price > self.max_price:
            raise ValueError(
                f"min_price ({self.min_price}) must be <= max_price ({self.max_price})"
            )
        return self


class QuoteDraft(BaseModelConfig):
    """In-progress quote: every user choice not yet submitted."""

    quote_type: QuoteType = QuoteType.HEALTH
    ledger: AgeBandLedger = Field(default_factory=AgeBandLedger)
    filters: QuoteFilters = Field(default_factory=QuoteFilters)
    budget: BudgetRange = Field(default_factory=BudgetRange)
    selection: SelectionState = Field(default_factory=SelectionState)
    client_name: str | None = None
    crm_link: CrmLink | None = None
    location: Location | None = None

    @property
    def total_lives(self) -> int:
        """Total lives in the ledger."""
        return self.ledger.total()


class ProductRef(CamelModel):
    """Product entry of the quote payload."""

    id: str = Field(..., min_length=1)
    type: Literal["regular"] = "regular"


class QuotePayload(CamelModel):
    """Outbound quote document; serialize with ``to_wire``."""

    state_id: str
    city_id: str
    lead_id: str | None = None
    contact_id: str | None = None
    client: str | None = None
    client_type: int = Field(..., ge=0, le=1)
    coparticipation: int = Field(..., ge=0, le=3)
    plans: tuple[str, ...] = ()
    products: tuple[ProductRef, ...] = ()
    ages: dict[str, int] = Field(default_factory=dict)
    min_price: int
    max_price: int
    without_entity: bool | None = None
    entity_type: int | None = None
    professions: tuple[str, ...] | None = None
    associations: tuple[str, ...] | None = None
    lpt_id: str | None = None

    def to_wire(self) -> dict[str, object]:
        """camelCase document with absent optionals omitted."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
