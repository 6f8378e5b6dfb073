"""Tests for age bands and the life-count ledger."""

import pytest
from pydantic import ValidationError

from quote_engine.models.age_band import (
    AGE_BAND_SPECS,
    MAX_LIVES,
    AgeBand,
    band_for_age,
    band_spec,
)
from quote_engine.models.ledger import AgeBandLedger


class TestAgeBand:
    """Test the static band catalog."""

    def test_ten_bands_in_display_order(self):
        assert len(AgeBand) == 10
        assert [spec.band for spec in AGE_BAND_SPECS] == list(AgeBand)

    def test_payload_keys_are_stable(self):
        assert AgeBand.LIVES_0_TO_18.value == "lives0to18"
        assert AgeBand.LIVES_59_UPPER.value == "lives59upper"

    def test_open_ended_band_uses_upper_field_suffix(self):
        spec = band_spec(AgeBand.LIVES_59_UPPER)
        assert spec.price_field == "priceAgeGroup59Upper"
        assert spec.discount_field == "discountAgeGroup59Upper"
        assert spec.max_age is None
        assert AgeBand.LIVES_59_UPPER.label == "59+"

    @pytest.mark.parametrize(
        ("age", "band"),
        [
            (0, AgeBand.LIVES_0_TO_18),
            (18, AgeBand.LIVES_0_TO_18),
            (19, AgeBand.LIVES_19_TO_23),
            (33, AgeBand.LIVES_29_TO_33),
            (58, AgeBand.LIVES_54_TO_58),
            (59, AgeBand.LIVES_59_UPPER),
            (104, AgeBand.LIVES_59_UPPER),
        ],
    )
    def test_band_for_age_uses_inclusive_upper_bounds(self, age, band):
        assert band_for_age(age) is band


class TestAgeBandLedger:
    """Test ledger arithmetic and invariants."""

    def test_empty_ledger_has_every_band_at_zero(self):
        ledger = AgeBandLedger.empty()
        assert set(ledger.counts) == set(AgeBand)
        assert ledger.total() == 0

    def test_missing_bands_are_filled_with_zero(self):
        ledger = AgeBandLedger(counts={AgeBand.LIVES_19_TO_23: 3})
        assert ledger.count(AgeBand.LIVES_0_TO_18) == 0
        assert ledger.count(AgeBand.LIVES_19_TO_23) == 3

    def test_out_of_range_counts_are_rejected(self):
        with pytest.raises(ValidationError):
            AgeBandLedger(counts={AgeBand.LIVES_0_TO_18: -1})
        with pytest.raises(ValidationError):
            AgeBandLedger(counts={AgeBand.LIVES_0_TO_18: MAX_LIVES + 1})

    def test_unknown_band_keys_are_rejected(self):
        with pytest.raises(ValidationError):
            AgeBandLedger(counts={"lives60to70": 1})

    @pytest.mark.parametrize("band", list(AgeBand))
    def test_increment_then_decrement_restores_count(self, band):
        ledger = AgeBandLedger(counts={band: 5})
        assert ledger.adjust(band, 1).adjust(band, -1) == ledger

    def test_adjust_saturates_at_bounds(self):
        band = AgeBand.LIVES_34_TO_38
        empty = AgeBandLedger.empty()
        assert empty.decrement(band).count(band) == 0
        assert empty.decrement(band).decrement(band) == empty.decrement(band)

        full = AgeBandLedger(counts={band: MAX_LIVES})
        assert full.increment(band).count(band) == MAX_LIVES
        assert full.adjust(band, 50).count(band) == MAX_LIVES

    def test_adjust_returns_new_ledger(self, family_ledger):
        updated = family_ledger.increment(AgeBand.LIVES_0_TO_18)
        assert family_ledger.count(AgeBand.LIVES_0_TO_18) == 2
        assert updated.count(AgeBand.LIVES_0_TO_18) == 3

    def test_total_matches_sum_of_bands(self, family_ledger):
        assert family_ledger.total() == sum(family_ledger.counts.values()) == 3

    def test_moving_a_life_keeps_total(self, family_ledger):
        moved = family_ledger.decrement(AgeBand.LIVES_0_TO_18).increment(
            AgeBand.LIVES_59_UPPER
        )
        assert moved.total() == family_ledger.total()

    def test_replace_zeroes_absent_bands_and_clamps(self, family_ledger):
        replaced = family_ledger.replace({AgeBand.LIVES_44_TO_48: 2000})
        assert replaced.count(AgeBand.LIVES_0_TO_18) == 0
        assert replaced.count(AgeBand.LIVES_44_TO_48) == MAX_LIVES

    def test_payload_omits_zero_bands(self, family_ledger):
        assert family_ledger.as_payload() == {"lives0to18": 2, "lives29to33": 1}
        assert list(family_ledger.non_zero()) == [
            AgeBand.LIVES_0_TO_18,
            AgeBand.LIVES_29_TO_33,
        ]

    def test_from_payload_tolerates_bad_values(self):
        ledger = AgeBandLedger.from_payload(
            {
                "lives0to18": 2,
                "lives19to23": None,
                "lives24to28": "abc",
                "lives29to33": True,
                "lives34to38": "3",
                "lives59upper": 5000,
            }
        )
        assert ledger.as_payload() == {"lives0to18": 2, "lives34to38": 3, "lives59upper": MAX_LIVES}

    def test_age_warning_for_minors_or_seniors(self):
        assert AgeBandLedger(counts={AgeBand.LIVES_0_TO_18: 1}).needs_age_warning
        assert AgeBandLedger(counts={AgeBand.LIVES_59_UPPER: 1}).needs_age_warning
        assert not AgeBandLedger(counts={AgeBand.LIVES_24_TO_28: 4}).needs_age_warning
