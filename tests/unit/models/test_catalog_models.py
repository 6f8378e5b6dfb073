"""Tests for catalog document parsing."""

from decimal import Decimal

import pytest
from pydantic import ValidationError

from quote_engine.models.age_band import AgeBand
from quote_engine.models.catalog import DiscountPolicy, DiscountTier, PlanDetails, Product


class TestProductParsing:
    """Test Product.from_api."""

    def test_prices_are_mapped_per_band(self, product_doc):
        product = Product.from_api(
            product_doc("p1", prices={"018": 100, "59Upper": "450.5", "1923": 210.25})
        )
        assert product is not None
        assert product.base_price(AgeBand.LIVES_0_TO_18) == Decimal("100")
        assert product.base_price(AgeBand.LIVES_19_TO_23) == Decimal("210.25")
        # string prices are not numbers
        assert product.base_price(AgeBand.LIVES_59_UPPER) is None

    def test_non_positive_and_invalid_prices_are_absent(self, product_doc):
        product = Product.from_api(
            product_doc(
                "p1",
                prices={"018": 0, "1923": -5, "2428": float("nan"), "2933": True, "3438": None},
            )
        )
        assert product is not None
        assert product.prices == {}

    def test_product_without_id_is_skipped(self):
        assert Product.from_api({"name": "nameless"}) is None
        assert Product.from_api({"id": "   "}) is None

    def test_numeric_ids_become_strings(self):
        product = Product.from_api({"id": 42})
        assert product is not None
        assert product.id == "42"

    def test_catalog_refs(self, product_doc):
        document = product_doc("p1")
        document["accommodation"] = {"id": 7, "name": "Apartamento"}
        document["coverage"] = {"name": "missing id"}
        product = Product.from_api(document)
        assert product is not None
        assert product.accommodation is not None
        assert product.accommodation.id == "7"
        assert product.coverage is None

    def test_discount_policy(self, product_doc):
        fixed = Product.from_api(product_doc("p1", discount_type="FIXED"))
        progressive = Product.from_api(
            product_doc(
                "p2", tiers=[{"firstUnit": 1, "lastUnit": 10, "discountPercentage": 5}]
            )
        )
        plain = Product.from_api(product_doc("p3"))
        assert fixed.discount_policy is DiscountPolicy.FIXED
        assert progressive.discount_policy is DiscountPolicy.PROGRESSIVE
        assert plain.discount_policy is DiscountPolicy.NONE

    def test_malformed_tiers_are_skipped(self, product_doc):
        product = Product.from_api(
            product_doc(
                "p1",
                tiers=[
                    {"firstUnit": 1, "lastUnit": 10, "discountPercentage": 10},
                    {"firstUnit": "11", "lastUnit": 50, "discountPercentage": 20},
                    {"firstUnit": 20, "lastUnit": 5, "discountPercentage": 20},
                    {"firstUnit": 51, "lastUnit": 99, "discountPercentage": 150},
                    "not a tier",
                ],
            )
        )
        assert product is not None
        assert len(product.progressive_tiers) == 1
        assert product.tier_for(10).discount_percentage == Decimal("10")
        assert product.tier_for(11) is None


class TestDiscountTier:
    """Test tier range checks."""

    def test_bounds_are_inclusive(self):
        tier = DiscountTier(first_unit=1, last_unit=10, discount_percentage=Decimal("10"))
        assert tier.contains(1)
        assert tier.contains(10)
        assert not tier.contains(11)

    def test_inverted_range_is_rejected(self):
        with pytest.raises(ValidationError):
            DiscountTier(first_unit=10, last_unit=1, discount_percentage=Decimal("10"))


class TestPlanDetails:
    """Test plan and table parsing."""

    def test_tables_and_products_in_catalog_order(self, plan_a):
        assert [table.id for table in plan_a.tables] == ["table-t", "table-u"]
        assert [product.id for product in plan_a.products()] == ["p1", "p2", "p3", "p4"]
        assert plan_a.find_table("table-u").product_ids() == ("p4",)
        assert plan_a.find_table("missing") is None

    def test_missing_lists_parse_as_empty(self):
        details = PlanDetails.from_api({"id": "plan-x", "tables": None})
        assert details is not None
        assert details.tables == ()

    def test_partial_documents_are_tolerated(self):
        details = PlanDetails.from_api(
            {
                "id": "plan-x",
                "tables": [
                    {"name": "no id", "products": [{"id": "lost"}]},
                    {"id": "t1", "products": [{"name": "no id"}, {"id": "kept"}]},
                ],
            }
        )
        assert details is not None
        assert [product.id for product in details.products()] == ["kept"]
