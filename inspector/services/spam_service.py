"""Additive spam score over profile, graph, reputation and activity rules.

Each rule adds its delta (and at most one label) when its condition holds.
The follower-ratio rules are mutually exclusive, as are the builder score
bands. Risk evidence is capped at 100 first; the builder score adjustment
is then applied to that capped value and the result clamped to [0, 100].
A strong builder score therefore always lowers a maxed-out score.
"""

from datetime import datetime

from inspector.models.profile import ActivitySignals, ExternalReputation, UserProfile
from inspector.models.verdict import SpamScore
from inspector.services.inactivity_service import calculate_inactivity_days

MIN_SCORE = 0
MAX_SCORE = 100

MIN_BIO_LENGTH = 5
NEW_ACCOUNT_FID = 850_000
INACTIVE_DAYS_THRESHOLD = 90

DEFAULT_PFP_DELTA = 25
SHORT_BIO_DELTA = 20
NO_VERIFICATION_DELTA = 15
SUSPICIOUS_RATIO_DELTA = 40
HIGH_FOLLOWING_DELTA = 30
NEW_ACCOUNT_DELTA = 10
BUILDER_HIGH_DELTA = -30
BUILDER_MID_DELTA = -10
BUILDER_LOW_DELTA = 15
NO_RECENT_CASTS_DELTA = 20
INACTIVE_DELTA = 15

LABEL_DEFAULT_PFP = "No/Default PFP"
LABEL_SHORT_BIO = "Empty/Short Bio"
LABEL_NO_VERIFICATION = "No Verified Address"
LABEL_SUSPICIOUS_RATIO = "Suspicious Follower Ratio"
LABEL_HIGH_FOLLOWING = "High Following / Low Followers"
LABEL_NEW_ACCOUNT = "Very New Account"
LABEL_LOW_REPUTATION = "Low Reputation Score"
LABEL_NO_RECENT_CASTS = "No Recent Casts"
LABEL_INACTIVE = "Inactive 90+ Days"


def clamp_score(score: int) -> int:
    return max(MIN_SCORE, min(score, MAX_SCORE))


def builder_score_delta(builder_score: float | None) -> tuple[int, str | None]:
    """Score adjustment for an external builder score. Absent means no change."""
    if builder_score is None:
        return 0, None
    if builder_score > 60:
        return BUILDER_HIGH_DELTA, None
    if builder_score > 20:
        return BUILDER_MID_DELTA, None
    if 0 <= builder_score < 5:
        return BUILDER_LOW_DELTA, LABEL_LOW_REPUTATION
    return 0, None


def calculate_spam_score(
    profile: UserProfile,
    activity: ActivitySignals | None = None,
    reputation: ExternalReputation | None = None,
    now: datetime | None = None,
) -> SpamScore:
    score = 0
    reputation_delta = 0
    labels: list[str] = []

    # Profile completeness
    if profile.has_default_pfp:
        score += DEFAULT_PFP_DELTA
        labels.append(LABEL_DEFAULT_PFP)

    if not profile.bio or len(profile.bio) < MIN_BIO_LENGTH:
        score += SHORT_BIO_DELTA
        labels.append(LABEL_SHORT_BIO)

    if profile.verified_address_count == 0:
        score += NO_VERIFICATION_DELTA
        labels.append(LABEL_NO_VERIFICATION)

    # Graph shape
    if profile.following_count > 1000 and profile.follower_count < 20:
        score += SUSPICIOUS_RATIO_DELTA
        labels.append(LABEL_SUSPICIOUS_RATIO)
    elif profile.following_count > 500 and profile.follower_count < 5:
        score += HIGH_FOLLOWING_DELTA
        labels.append(LABEL_HIGH_FOLLOWING)

    if profile.fid > NEW_ACCOUNT_FID:
        score += NEW_ACCOUNT_DELTA
        labels.append(LABEL_NEW_ACCOUNT)

    if reputation is not None:
        reputation_delta, label = builder_score_delta(reputation.builder_score)
        if label:
            labels.append(label)

    # Activity, only when a sample was actually taken
    if activity is not None:
        if activity.recent_cast_count == 0:
            score += NO_RECENT_CASTS_DELTA
            labels.append(LABEL_NO_RECENT_CASTS)

        days = calculate_inactivity_days(activity.last_activity_timestamp, now)
        if days > INACTIVE_DAYS_THRESHOLD:
            score += INACTIVE_DELTA
            labels.append(LABEL_INACTIVE)

    return SpamScore(score=clamp_score(clamp_score(score) + reputation_delta), labels=labels)
