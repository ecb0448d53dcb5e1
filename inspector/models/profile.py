from datetime import datetime

from pydantic import BaseModel, Field

DEFAULT_PFP_MARKER = "default"


class UserProfile(BaseModel):
    """Normalized Farcaster profile consumed by the scoring functions."""

    fid: int = Field(gt=0)
    username: str = ""
    display_name: str = Field(default="", alias="displayName")
    pfp_url: str | None = Field(default=None, alias="pfpUrl")
    bio: str | None = None
    follower_count: int = Field(default=0, ge=0, alias="followerCount")
    following_count: int = Field(default=0, ge=0, alias="followingCount")
    verified_address_count: int = Field(default=0, ge=0, alias="verifiedAddressCount")
    verified_addresses: list[str] = Field(default_factory=list, alias="verifiedAddresses")
    power_badge: bool = Field(default=False, alias="powerBadge")

    model_config = {"populate_by_name": True}

    @property
    def has_default_pfp(self) -> bool:
        return not self.pfp_url or DEFAULT_PFP_MARKER in self.pfp_url


class ActivitySignals(BaseModel):
    """Bounded sample of a user's most recent casts."""

    recent_cast_count: int = Field(default=0, ge=0, alias="recentCastCount")
    last_activity_timestamp: datetime | None = Field(default=None, alias="lastActivityTimestamp")

    model_config = {"populate_by_name": True}


class ExternalReputation(BaseModel):
    """Signals from third-party providers. None means the signal is unavailable."""

    engagement_score: float | None = Field(default=None, alias="engagementScore")
    builder_score: float | None = Field(default=None, alias="builderScore")
    graph_reputation_score: float | None = Field(default=None, alias="graphReputationScore")
    graph_rank: int | None = Field(default=None, alias="graphRank")
    quotient_score: float | None = Field(default=None, alias="quotientScore")
    wallet_labels: list[str] | None = Field(default=None, alias="walletLabels")

    model_config = {"populate_by_name": True}
