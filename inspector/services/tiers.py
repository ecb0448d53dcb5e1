"""Display tiers for the graph reputation providers.

OpenRank scores are tiny (most users sit below 0.01), so they are scaled by
1000 before bucketing. Quotient scores are already in [0, 1].
"""

from dataclasses import dataclass

OPENRANK_DISPLAY_SCALE = 1000

# (minimum display score, tier, description), checked in order.
OPENRANK_TIERS = (
    (100, "Legendary", "Top 0.01% - Platform legends"),
    (50, "Elite", "Top 0.1% - High influence"),
    (20, "Influential", "Top 1% - Strong network"),
    (10, "Established", "Top 5% - Solid reputation"),
    (5, "Growing", "Top 20% - Building trust"),
    (1, "Active", "Active participant"),
)
OPENRANK_DEFAULT_TIER = ("New", "New or minimal activity")

QUOTIENT_TIERS = (
    (0.9, "Exceptional"),
    (0.8, "Elite"),
    (0.7, "Influential"),
    (0.6, "Active"),
    (0.5, "Casual"),
)
QUOTIENT_DEFAULT_TIER = "Inactive"


@dataclass(frozen=True)
class GraphTier:
    tier: str
    label: str


@dataclass(frozen=True)
class SpamSignal:
    is_spam: bool
    confidence: str
    reason: str


def openrank_display_score(score: float) -> float:
    return score * OPENRANK_DISPLAY_SCALE


def openrank_tier(score: float) -> GraphTier:
    display = openrank_display_score(score)
    for minimum, tier, label in OPENRANK_TIERS:
        if display >= minimum:
            return GraphTier(tier=tier, label=label)
    return GraphTier(*OPENRANK_DEFAULT_TIER)


def openrank_spam_signal(score: float) -> SpamSignal:
    """Low graph influence correlates with bot clusters and farms."""
    display = openrank_display_score(score)
    if display >= 5:
        return SpamSignal(False, "high", "Strong network trust")
    if display >= 1:
        return SpamSignal(False, "medium", "Active with some trust")
    if display >= 0.5:
        return SpamSignal(False, "low", "Limited network presence")
    return SpamSignal(True, "high", "Minimal graph influence - likely spam or inactive")


def quotient_tier(score: float) -> str:
    for minimum, tier in QUOTIENT_TIERS:
        if score >= minimum:
            return tier
    return QUOTIENT_DEFAULT_TIER
