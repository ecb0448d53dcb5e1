from enum import Enum

from pydantic import BaseModel, Field


class TrustLevel(str, Enum):
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"
    UNKNOWN = "Unknown"


class AgeBand(str, Enum):
    OG = "OG (2+ years)"
    VETERAN = "Veteran (1+ year)"
    ESTABLISHED = "Established (6+ months)"
    NEW = "New (1-6 months)"
    VERY_NEW = "Very New (<1 month)"


class InactivityStatus(str, Enum):
    ACTIVE = "Active"
    STALE = "Stale"
    INACTIVE = "Inactive"
    GHOST = "Ghost"


class AccountAge(BaseModel):
    days: int
    label: AgeBand


class SpamScore(BaseModel):
    """Clamped risk score plus the labels of the rules that fired."""

    score: int = Field(ge=0, le=100)
    labels: list[str] = Field(default_factory=list)


class ReputationVerdict(BaseModel):
    """Composite assessment for a single account."""

    spam_score: int = Field(serialization_alias="spamScore")
    spam_labels: list[str] = Field(serialization_alias="spamLabels")
    is_spam: bool = Field(serialization_alias="isSpam")
    status_label: str = Field(serialization_alias="statusLabel")
    trust_level: TrustLevel = Field(serialization_alias="trustLevel")
    inactivity_days: int | None = Field(default=None, serialization_alias="inactivityDays")
    inactivity_status: InactivityStatus | None = Field(
        default=None, serialization_alias="inactivityStatus"
    )
    account_age: AccountAge = Field(serialization_alias="accountAge")

    model_config = {"populate_by_name": True}
