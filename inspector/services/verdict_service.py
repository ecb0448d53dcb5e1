"""Combine the individual scorers into one verdict per account."""

from datetime import datetime

from inspector.models.profile import ActivitySignals, ExternalReputation, UserProfile
from inspector.models.verdict import ReputationVerdict
from inspector.services.account_age import estimate_account_age
from inspector.services.inactivity_service import calculate_inactivity_days, inactivity_status
from inspector.services.spam_service import calculate_spam_score
from inspector.services.trust_service import calculate_trust_level

SPAM_THRESHOLD = 50
INACTIVE_STATUS_DAYS = 90

STATUS_SPAM = "Spam"
STATUS_INACTIVE = "Inactive"
STATUS_HEALTHY = "Healthy"


def status_label(spam_score: int, inactivity_days: int | None) -> str:
    if spam_score > SPAM_THRESHOLD:
        return STATUS_SPAM
    if inactivity_days is not None and inactivity_days > INACTIVE_STATUS_DAYS:
        return STATUS_INACTIVE
    return STATUS_HEALTHY


def build_verdict(
    profile: UserProfile,
    activity: ActivitySignals | None = None,
    reputation: ExternalReputation | None = None,
    now: datetime | None = None,
) -> ReputationVerdict:
    """Score one account. Missing activity or reputation narrows the rule set."""
    spam = calculate_spam_score(profile, activity, reputation, now)

    rep = reputation or ExternalReputation()
    trust = calculate_trust_level(rep.engagement_score, rep.builder_score, profile.power_badge)

    days = None
    status = None
    if activity is not None:
        days = calculate_inactivity_days(activity.last_activity_timestamp, now)
        status = inactivity_status(days)

    return ReputationVerdict(
        spam_score=spam.score,
        spam_labels=spam.labels,
        is_spam=spam.score > SPAM_THRESHOLD,
        status_label=status_label(spam.score, days),
        trust_level=trust,
        inactivity_days=days,
        inactivity_status=status,
        account_age=estimate_account_age(profile.fid),
    )
