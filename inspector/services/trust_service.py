"""Trust tier: engagement (60%) + builder score (40%), quality badge overrides."""

from inspector.models.verdict import TrustLevel

ENGAGEMENT_WEIGHT = 0.60
BUILDER_WEIGHT = 0.40
ENGAGEMENT_SCALE = 100.0

HIGH_COMBINED = 70.0
MEDIUM_COMBINED = 40.0
HIGH_ENGAGEMENT = 0.9
MEDIUM_ENGAGEMENT = 0.6


def combined_score(engagement_score: float | None, builder_score: float | None) -> float:
    """engagement*100*0.6 + builder*0.4. Absent inputs count as 0."""
    engagement = engagement_score or 0.0
    builder = builder_score or 0.0
    return engagement * ENGAGEMENT_SCALE * ENGAGEMENT_WEIGHT + builder * BUILDER_WEIGHT


def calculate_trust_level(
    engagement_score: float | None,
    builder_score: float | None,
    has_quality_badge: bool,
) -> TrustLevel:
    """Badge holders are always High. Otherwise a strong engagement score alone
    can lift the tier even without a builder score."""
    if has_quality_badge:
        return TrustLevel.HIGH

    engagement = engagement_score or 0.0
    combined = combined_score(engagement_score, builder_score)

    if combined > HIGH_COMBINED or engagement > HIGH_ENGAGEMENT:
        return TrustLevel.HIGH
    if combined > MEDIUM_COMBINED or engagement > MEDIUM_ENGAGEMENT:
        return TrustLevel.MEDIUM
    if combined > 0:
        return TrustLevel.LOW
    return TrustLevel.UNKNOWN
