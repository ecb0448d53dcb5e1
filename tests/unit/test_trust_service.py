"""Tests for trust_service and account_age."""

import math

import pytest

from inspector.models.verdict import AgeBand, TrustLevel
from inspector.services.account_age import (
    FIDS_PER_DAY,
    REFERENCE_DAYS,
    age_band,
    estimate_account_age,
    estimate_age_days,
)
from inspector.services.trust_service import calculate_trust_level, combined_score


def _fid_for_age(days: int) -> int:
    return (REFERENCE_DAYS - days) * FIDS_PER_DAY


# ---------- combined_score ----------


class TestCombinedScore:
    def test_engagement_only(self):
        # 0.5 * 100 * 0.6 = 30
        assert math.isclose(combined_score(0.5, None), 30.0, abs_tol=0.001)

    def test_builder_only(self):
        # 50 * 0.4 = 20
        assert math.isclose(combined_score(None, 50), 20.0, abs_tol=0.001)

    def test_both(self):
        # 0.8 * 100 * 0.6 + 60 * 0.4 = 48 + 24 = 72
        assert math.isclose(combined_score(0.8, 60), 72.0, abs_tol=0.001)

    def test_absent_inputs_are_zero(self):
        assert combined_score(None, None) == 0.0


# ---------- calculate_trust_level ----------


class TestTrustLevel:
    def test_badge_overrides_everything(self):
        assert calculate_trust_level(0.0, 0.0, True) == TrustLevel.HIGH

    def test_badge_overrides_absent_and_negative(self):
        assert calculate_trust_level(None, -50, True) == TrustLevel.HIGH
        assert calculate_trust_level(-1.0, None, True) == TrustLevel.HIGH

    def test_high_combined(self):
        assert calculate_trust_level(0.8, 60, False) == TrustLevel.HIGH

    def test_very_high_engagement_alone_is_high(self):
        # combined = 57, but engagement > 0.9
        assert calculate_trust_level(0.95, None, False) == TrustLevel.HIGH

    def test_medium_combined(self):
        # 30 + 36 = 66
        assert calculate_trust_level(0.5, 90, False) == TrustLevel.MEDIUM

    def test_engagement_above_medium_threshold(self):
        # combined = 39, engagement > 0.6
        assert calculate_trust_level(0.65, 0, False) == TrustLevel.MEDIUM

    def test_low(self):
        assert calculate_trust_level(0.1, 0, False) == TrustLevel.LOW

    def test_builder_only_low(self):
        assert calculate_trust_level(None, 30, False) == TrustLevel.LOW

    def test_unknown_when_all_zero(self):
        assert calculate_trust_level(0.0, 0.0, False) == TrustLevel.UNKNOWN

    def test_unknown_when_absent(self):
        assert calculate_trust_level(None, None, False) == TrustLevel.UNKNOWN


# ---------- estimate_account_age ----------


class TestAccountAge:
    @pytest.mark.parametrize(
        "days,band",
        [
            (800, AgeBand.OG),
            (400, AgeBand.VETERAN),
            (200, AgeBand.ESTABLISHED),
            (40, AgeBand.NEW),
            (10, AgeBand.VERY_NEW),
        ],
    )
    def test_band_spot_checks(self, days, band):
        age = estimate_account_age(_fid_for_age(days))
        assert age.days == days
        assert age.label == band

    def test_band_thresholds_are_exclusive(self):
        assert age_band(731) == AgeBand.OG
        assert age_band(730) == AgeBand.VETERAN
        assert age_band(365) == AgeBand.ESTABLISHED
        assert age_band(180) == AgeBand.NEW
        assert age_band(30) == AgeBand.VERY_NEW

    def test_early_fid_is_og(self):
        age = estimate_account_age(3)
        assert age.days == 1100
        assert age.label == AgeBand.OG

    def test_partial_day_is_floored(self):
        assert estimate_age_days(FIDS_PER_DAY - 1) == REFERENCE_DAYS
        assert estimate_age_days(FIDS_PER_DAY) == REFERENCE_DAYS - 1

    def test_implausible_fid_goes_negative(self):
        age = estimate_account_age(2_000_000)
        assert age.days == 1100 - 2_000_000 // 818
        assert age.days < 0
        assert age.label == AgeBand.VERY_NEW

    def test_monotonically_non_increasing(self):
        fids = range(1, 1_200_000, 7_919)
        days = [estimate_age_days(f) for f in fids]
        assert all(a >= b for a, b in zip(days, days[1:]))

    def test_label_serializes_to_text(self):
        age = estimate_account_age(_fid_for_age(800))
        assert age.model_dump(mode="json")["label"] == "OG (2+ years)"
