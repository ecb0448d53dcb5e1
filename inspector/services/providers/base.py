"""Typed outcomes and the base class shared by reputation providers.

A provider call either succeeds with a per-FID map or is Unavailable with a
reason. Upstream trouble is never raised to the caller: timeouts, auth
failures and plan restrictions all become Unavailable so a batch can
continue with whatever signals did arrive.
"""

from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Generic, TypeVar, Union

import httpx
import structlog

logger = structlog.get_logger()

T = TypeVar("T")

PAYMENT_REQUIRED_CODE = "PaymentRequired"


class UnavailableReason(str, Enum):
    NOT_CONFIGURED = "not_configured"
    PLAN_RESTRICTED = "plan_restricted"
    UNAUTHORIZED = "unauthorized"
    TIMEOUT = "timeout"
    NETWORK_ERROR = "network_error"
    UPSTREAM_ERROR = "upstream_error"
    BAD_RESPONSE = "bad_response"


# Failures tied to the account or plan rather than a flaky network.
TIER_REASONS = frozenset(
    [UnavailableReason.PLAN_RESTRICTED, UnavailableReason.UNAUTHORIZED]
)


@dataclass(frozen=True)
class Success(Generic[T]):
    data: T

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Unavailable:
    reason: UnavailableReason
    detail: str = ""

    @property
    def ok(self) -> bool:
        return False

    @property
    def is_tier_restricted(self) -> bool:
        return self.reason in TIER_REASONS

    @property
    def is_transient(self) -> bool:
        return self.reason not in TIER_REASONS and self.reason != UnavailableReason.NOT_CONFIGURED


ProviderOutcome = Union[Success[T], Unavailable]


def _payment_required_body(response: httpx.Response) -> bool:
    try:
        body = response.json()
    except ValueError:
        return False
    return isinstance(body, dict) and body.get("code") == PAYMENT_REQUIRED_CODE


def json_object(resp: httpx.Response) -> dict:
    """Decode a JSON object body. Anything else is a malformed reply."""
    body = resp.json()
    if not isinstance(body, dict):
        raise ValueError(f"expected a JSON object, got {type(body).__name__}")
    return body


def classify_error(exc: Exception) -> Unavailable:
    """Map an httpx or decoding error to an Unavailable outcome."""
    if isinstance(exc, httpx.TimeoutException):
        return Unavailable(UnavailableReason.TIMEOUT, str(exc))
    if isinstance(exc, httpx.HTTPStatusError):
        status = exc.response.status_code
        if status == 402 or _payment_required_body(exc.response):
            return Unavailable(UnavailableReason.PLAN_RESTRICTED, f"HTTP {status}")
        if status in (401, 403):
            return Unavailable(UnavailableReason.UNAUTHORIZED, f"HTTP {status}")
        return Unavailable(UnavailableReason.UPSTREAM_ERROR, f"HTTP {status}")
    if isinstance(exc, httpx.RequestError):
        return Unavailable(UnavailableReason.NETWORK_ERROR, str(exc))
    if isinstance(exc, (ValueError, KeyError, TypeError, AttributeError)):
        return Unavailable(UnavailableReason.BAD_RESPONSE, str(exc))
    raise exc


async def guarded(provider: str, coro) -> ProviderOutcome:
    """Await coro and wrap its result, classifying known upstream errors."""
    try:
        return Success(await coro)
    except (httpx.HTTPError, ValueError, KeyError, TypeError, AttributeError) as e:
        outcome = classify_error(e)
        logger.warning(
            "provider_unavailable",
            provider=provider,
            reason=outcome.reason.value,
            detail=outcome.detail[:200],
        )
        return outcome


class ScoreProvider(ABC):
    """A third-party reputation source, batched by FID.

    Success data maps each FID to a partial ExternalReputation update, e.g.
    {3: {"builder_score": 87.0}}. FIDs the provider knows nothing about are
    simply absent.
    """

    name: str = ""
    # Skipped in batch mode.
    expensive: bool = False

    def __init__(self, client: httpx.AsyncClient):
        self._client = client

    @property
    def configured(self) -> bool:
        return True

    async def fetch_scores(
        self,
        fids: Sequence[int],
        wallets: Mapping[int, Sequence[str]] | None = None,
    ) -> ProviderOutcome:
        """Fetch {fid: {field: value}} updates. Never raises for upstream failures."""
        if not self.configured:
            return Unavailable(UnavailableReason.NOT_CONFIGURED, f"{self.name} API key not set")
        if not fids:
            return Success({})
        return await guarded(self.name, self._fetch(list(fids), wallets or {}))

    @abstractmethod
    async def _fetch(
        self,
        fids: list[int],
        wallets: Mapping[int, Sequence[str]],
    ) -> dict[int, dict[str, Any]]:
        """Provider-specific request. May raise httpx errors."""


@dataclass
class PerFidResults:
    """Collects per-FID lookups where individual misses are tolerated."""

    values: dict[int, Any] = field(default_factory=dict)
    errors: list[Exception] = field(default_factory=list)

    def add(self, fid: int, result: Any) -> None:
        if isinstance(result, Exception):
            self.errors.append(result)
        elif result is not None:
            self.values[fid] = result

    def resolve(self) -> dict[int, Any]:
        """Return the values, or re-raise when every lookup failed."""
        if not self.values and self.errors:
            raise self.errors[0]
        return self.values
