from pydantic import BaseModel, Field

from .profile import ActivitySignals, ExternalReputation, UserProfile
from .verdict import ReputationVerdict


class ProviderStatus(BaseModel):
    """Outcome of one upstream provider call within a request."""

    provider: str
    ok: bool
    reason: str | None = None
    detail: str | None = None
    tier_restricted: bool = Field(default=False, serialization_alias="tierRestricted")
    # Worth retrying later; false for plan, auth and missing-key failures.
    transient: bool = False

    model_config = {"populate_by_name": True}


class InspectedUser(BaseModel):
    """Pass-through profile fields, external signals and the verdict."""

    fid: int
    username: str
    display_name: str = Field(serialization_alias="displayName")
    pfp_url: str | None = Field(default=None, serialization_alias="pfpUrl")
    bio: str | None = None
    follower_count: int = Field(serialization_alias="followerCount")
    following_count: int = Field(serialization_alias="followingCount")
    verified_address_count: int = Field(serialization_alias="verifiedAddressCount")
    power_badge: bool = Field(serialization_alias="powerBadge")
    reputation: ExternalReputation
    graph_tier: str | None = Field(default=None, serialization_alias="graphTier")
    quotient_tier: str | None = Field(default=None, serialization_alias="quotientTier")
    verdict: ReputationVerdict

    model_config = {"populate_by_name": True}


class InspectionReport(BaseModel):
    """API response for /api/inspect."""

    users: list[InspectedUser]
    missing: list[int] = Field(default_factory=list)
    providers: list[ProviderStatus] = Field(default_factory=list)
    batch: bool = False
    needs_manual_input: bool = Field(default=False, serialization_alias="needsManualInput")
    message: str | None = None

    model_config = {"populate_by_name": True}

    @property
    def degraded(self) -> bool:
        return any(not p.ok and p.reason != "not_configured" for p in self.providers)


class ManualInspectionRequest(BaseModel):
    """Profile supplied by the caller when upstream lookups are unavailable."""

    profile: UserProfile
    activity: ActivitySignals | None = None
    reputation: ExternalReputation | None = None


class FollowingStats(BaseModel):
    total: int = 0
    spam: int = 0
    suspicious: int = 0
    healthy: int = 0
    needs_review: int = Field(default=0, serialization_alias="needsReview")

    model_config = {"populate_by_name": True}


class FollowingReport(BaseModel):
    """API response for /api/following."""

    fid: int
    users: list[InspectedUser]
    stats: FollowingStats
    next_cursor: str | None = Field(default=None, serialization_alias="nextCursor")
    has_more: bool = Field(default=False, serialization_alias="hasMore")
    providers: list[ProviderStatus] = Field(default_factory=list)
    needs_manual_input: bool = Field(default=False, serialization_alias="needsManualInput")

    model_config = {"populate_by_name": True}


class GraphReputation(BaseModel):
    """Graph reputation scores with display tiers for /api/reputation."""

    fid: int
    openrank_score: float | None = Field(default=None, serialization_alias="openrankScore")
    openrank_display_score: str | None = Field(
        default=None, serialization_alias="openrankDisplayScore"
    )
    openrank_rank: int | None = Field(default=None, serialization_alias="openrankRank")
    openrank_tier: str | None = Field(default=None, serialization_alias="openrankTier")
    likely_spam: bool | None = Field(default=None, serialization_alias="likelySpam")
    spam_confidence: str | None = Field(default=None, serialization_alias="spamConfidence")
    quotient_score: float | None = Field(default=None, serialization_alias="quotientScore")
    quotient_tier: str | None = Field(default=None, serialization_alias="quotientTier")

    model_config = {"populate_by_name": True}


class ReputationReport(BaseModel):
    scores: list[GraphReputation]
    providers: list[ProviderStatus] = Field(default_factory=list)


class RankedAccount(BaseModel):
    """One row of an OpenRank leaderboard, with profile fields when known."""

    rank: int
    fid: int
    score: float
    display_score: str = Field(serialization_alias="displayScore")
    tier: str
    username: str | None = None
    display_name: str | None = Field(default=None, serialization_alias="displayName")
    pfp_url: str | None = Field(default=None, serialization_alias="pfpUrl")
    follower_count: int | None = Field(default=None, serialization_alias="followerCount")
    power_badge: bool | None = Field(default=None, serialization_alias="powerBadge")

    model_config = {"populate_by_name": True}


class RankingsReport(BaseModel):
    """API response for /api/reputation/rankings."""

    scope: str
    fid: int | None = None
    rankings: list[RankedAccount]
    providers: list[ProviderStatus] = Field(default_factory=list)
