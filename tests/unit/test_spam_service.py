"""Tests for spam_service: rule table, clamping and label audit trail."""

from datetime import datetime, timedelta, timezone

import pytest

from inspector.models.profile import ActivitySignals, ExternalReputation, UserProfile
from inspector.services.spam_service import (
    LABEL_DEFAULT_PFP,
    LABEL_HIGH_FOLLOWING,
    LABEL_INACTIVE,
    LABEL_LOW_REPUTATION,
    LABEL_NEW_ACCOUNT,
    LABEL_NO_RECENT_CASTS,
    LABEL_NO_VERIFICATION,
    LABEL_SHORT_BIO,
    LABEL_SUSPICIOUS_RATIO,
    builder_score_delta,
    calculate_spam_score,
)

NOW = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)


def _healthy(**overrides) -> UserProfile:
    fields = dict(
        fid=1000,
        username="alice",
        display_name="Alice",
        pfp_url="https://i.imgur.com/alice.png",
        bio="Building things on Farcaster.",
        follower_count=5000,
        following_count=100,
        verified_address_count=2,
    )
    fields.update(overrides)
    return UserProfile(**fields)


def _spammy(**overrides) -> UserProfile:
    fields = dict(
        fid=900_000,
        username="claim_rewards_99",
        pfp_url="https://cdn.example.com/default-avatar.png",
        bio="",
        follower_count=5,
        following_count=2000,
        verified_address_count=0,
    )
    fields.update(overrides)
    return UserProfile(**fields)


# ---------- scenarios ----------


class TestScenarios:
    def test_spam_profile_maxes_out(self):
        result = calculate_spam_score(_spammy())
        # 25 + 20 + 15 + 40 + 10 = 110, clamped
        assert result.score == 100
        assert result.labels == [
            LABEL_DEFAULT_PFP,
            LABEL_SHORT_BIO,
            LABEL_NO_VERIFICATION,
            LABEL_SUSPICIOUS_RATIO,
            LABEL_NEW_ACCOUNT,
        ]

    def test_high_builder_score_reduces_baseline(self):
        result = calculate_spam_score(_spammy(), reputation=ExternalReputation(builder_score=80))
        assert result.score == 70
        assert LABEL_LOW_REPUTATION not in result.labels

    def test_complete_profile_scores_zero(self):
        result = calculate_spam_score(_healthy())
        assert result.score == 0
        assert result.labels == []


# ---------- individual rules ----------


class TestProfileRules:
    def test_missing_pfp(self):
        result = calculate_spam_score(_healthy(pfp_url=None))
        assert result.score == 25
        assert result.labels == [LABEL_DEFAULT_PFP]

    def test_empty_pfp_string(self):
        assert calculate_spam_score(_healthy(pfp_url="")).labels == [LABEL_DEFAULT_PFP]

    def test_default_placeholder_pfp(self):
        result = calculate_spam_score(_healthy(pfp_url="https://warpcast.com/default.png"))
        assert result.labels == [LABEL_DEFAULT_PFP]

    def test_no_bio(self):
        result = calculate_spam_score(_healthy(bio=None))
        assert result.score == 20
        assert result.labels == [LABEL_SHORT_BIO]

    def test_four_char_bio_is_short(self):
        assert calculate_spam_score(_healthy(bio="gm!!")).labels == [LABEL_SHORT_BIO]

    def test_five_char_bio_is_fine(self):
        assert calculate_spam_score(_healthy(bio="hello")).labels == []

    def test_no_verified_address(self):
        result = calculate_spam_score(_healthy(verified_address_count=0))
        assert result.score == 15
        assert result.labels == [LABEL_NO_VERIFICATION]


class TestGraphRules:
    def test_suspicious_ratio(self):
        result = calculate_spam_score(_healthy(following_count=1500, follower_count=19))
        assert result.score == 40
        assert result.labels == [LABEL_SUSPICIOUS_RATIO]

    def test_high_following_low_followers(self):
        result = calculate_spam_score(_healthy(following_count=600, follower_count=3))
        assert result.score == 30
        assert result.labels == [LABEL_HIGH_FOLLOWING]

    def test_ratio_rules_are_exclusive(self):
        result = calculate_spam_score(_healthy(following_count=2000, follower_count=3))
        assert result.score == 40
        assert LABEL_HIGH_FOLLOWING not in result.labels

    def test_boundaries_do_not_fire(self):
        assert calculate_spam_score(_healthy(following_count=1000, follower_count=0)).labels == [
            LABEL_HIGH_FOLLOWING
        ]
        assert calculate_spam_score(_healthy(following_count=500, follower_count=0)).labels == []

    def test_very_new_account(self):
        result = calculate_spam_score(_healthy(fid=850_001))
        assert result.score == 10
        assert result.labels == [LABEL_NEW_ACCOUNT]

    def test_fid_threshold_is_exclusive(self):
        assert calculate_spam_score(_healthy(fid=850_000)).labels == []


class TestBuilderScore:
    @pytest.mark.parametrize(
        "builder,delta,label",
        [
            (None, 0, None),
            (95, -30, None),
            (61, -30, None),
            (60, -10, None),
            (21, -10, None),
            (20, 0, None),
            (10, 0, None),
            (5, 0, None),
            (4.9, 15, LABEL_LOW_REPUTATION),
            (0, 15, LABEL_LOW_REPUTATION),
            (-1, 0, None),
        ],
    )
    def test_bands(self, builder, delta, label):
        assert builder_score_delta(builder) == (delta, label)

    def test_low_reputation_adds_label(self):
        result = calculate_spam_score(_healthy(), reputation=ExternalReputation(builder_score=2))
        assert result.score == 15
        assert result.labels == [LABEL_LOW_REPUTATION]

    def test_absent_builder_score_is_not_zero(self):
        result = calculate_spam_score(_healthy(), reputation=ExternalReputation(engagement_score=0.4))
        assert result.score == 0
        assert result.labels == []

    def test_offset_never_goes_below_zero(self):
        result = calculate_spam_score(_healthy(), reputation=ExternalReputation(builder_score=99))
        assert result.score == 0

    def test_mid_offset_on_partial_risk(self):
        result = calculate_spam_score(
            _healthy(bio=None, verified_address_count=0),
            reputation=ExternalReputation(builder_score=40),
        )
        # 20 + 15 - 10
        assert result.score == 25


class TestActivityRules:
    def test_no_sample_means_no_activity_rules(self):
        result = calculate_spam_score(_healthy(), activity=None, now=NOW)
        assert result.labels == []

    def test_empty_sample(self):
        activity = ActivitySignals(recent_cast_count=0, last_activity_timestamp=None)
        result = calculate_spam_score(_healthy(), activity=activity, now=NOW)
        # No casts observed: 999 days inactive
        assert result.score == 35
        assert result.labels == [LABEL_NO_RECENT_CASTS, LABEL_INACTIVE]

    def test_recent_activity(self):
        activity = ActivitySignals(recent_cast_count=10, last_activity_timestamp=NOW - timedelta(days=2))
        assert calculate_spam_score(_healthy(), activity=activity, now=NOW).labels == []

    def test_stale_activity(self):
        activity = ActivitySignals(recent_cast_count=3, last_activity_timestamp=NOW - timedelta(days=120))
        result = calculate_spam_score(_healthy(), activity=activity, now=NOW)
        assert result.score == 15
        assert result.labels == [LABEL_INACTIVE]

    def test_exactly_90_days_does_not_fire(self):
        activity = ActivitySignals(recent_cast_count=1, last_activity_timestamp=NOW - timedelta(days=90))
        assert calculate_spam_score(_healthy(), activity=activity, now=NOW).labels == []


# ---------- invariants ----------


class TestInvariants:
    def test_clamped_when_every_rule_fires(self):
        activity = ActivitySignals(recent_cast_count=0)
        result = calculate_spam_score(
            _spammy(), activity=activity, reputation=ExternalReputation(builder_score=1), now=NOW
        )
        assert result.score == 100
        assert len(result.labels) == len(set(result.labels)) == 8

    @pytest.mark.parametrize("builder", [None, -1000, 0, 3, 30, 1000])
    @pytest.mark.parametrize("profile_fn", [_healthy, _spammy])
    def test_score_always_in_range(self, builder, profile_fn):
        result = calculate_spam_score(
            profile_fn(),
            activity=ActivitySignals(recent_cast_count=0),
            reputation=ExternalReputation(builder_score=builder),
            now=NOW,
        )
        assert 0 <= result.score <= 100

    def test_deterministic(self):
        activity = ActivitySignals(recent_cast_count=0)
        reputation = ExternalReputation(builder_score=3)
        first = calculate_spam_score(_spammy(), activity, reputation, NOW)
        second = calculate_spam_score(_spammy(), activity, reputation, NOW)
        assert first == second
