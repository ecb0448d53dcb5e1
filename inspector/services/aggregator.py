"""Fan-out to the reputation providers and merge their signals per FID.

Every provider is called concurrently under its own timeout. A provider that
times out, is unconfigured or fails in any way contributes nothing; the
others are merged as usual and the batch always completes.
"""

import asyncio
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field

import structlog

from inspector.models.profile import ExternalReputation
from inspector.models.report import ProviderStatus
from inspector.routers.metrics import provider_outcomes
from inspector.services.providers.base import (
    ProviderOutcome,
    ScoreProvider,
    Unavailable,
    UnavailableReason,
)

logger = structlog.get_logger()

DEFAULT_TIMEOUT_SECONDS = 2.5


def provider_status(name: str, outcome: ProviderOutcome) -> ProviderStatus:
    if outcome.ok:
        return ProviderStatus(provider=name, ok=True)
    return ProviderStatus(
        provider=name,
        ok=False,
        reason=outcome.reason.value,
        detail=outcome.detail or None,
        tier_restricted=outcome.is_tier_restricted,
        transient=outcome.is_transient,
    )


def record_outcome(name: str, outcome: ProviderOutcome) -> None:
    label = "success" if outcome.ok else outcome.reason.value
    provider_outcomes.labels(provider=name, outcome=label).inc()


@dataclass
class AggregationResult:
    reputations: dict[int, ExternalReputation]
    outcomes: dict[str, ProviderOutcome] = field(default_factory=dict)

    def statuses(self) -> list[ProviderStatus]:
        return [provider_status(name, outcome) for name, outcome in self.outcomes.items()]

    def succeeded(self) -> list[str]:
        return [name for name, outcome in self.outcomes.items() if outcome.ok]


class ReputationAggregator:
    def __init__(
        self,
        providers: Sequence[ScoreProvider],
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ):
        self._providers = list(providers)
        self._timeout = timeout

    async def aggregate(
        self,
        fids: Sequence[int],
        base: Mapping[int, ExternalReputation] | None = None,
        wallets: Mapping[int, Sequence[str]] | None = None,
        include_expensive: bool = True,
    ) -> AggregationResult:
        """Merge provider signals onto base (or empty) reputations for fids.

        Args:
            fids: FIDs to enrich.
            base: Signals already known, e.g. from the profile payload.
            wallets: Verified addresses per FID, for wallet-based providers.
            include_expensive: False skips providers marked expensive.
        """
        base = base or {}
        reputations = {fid: base.get(fid) or ExternalReputation() for fid in fids}

        active = [p for p in self._providers if include_expensive or not p.expensive]
        outcomes = await asyncio.gather(*[self._call(p, fids, wallets) for p in active])

        result = AggregationResult(reputations=reputations)
        for provider, outcome in zip(active, outcomes):
            result.outcomes[provider.name] = outcome
            record_outcome(provider.name, outcome)
            if not outcome.ok:
                continue
            for fid, update in outcome.data.items():
                if fid in reputations and update:
                    reputations[fid] = reputations[fid].model_copy(update=update)

        logger.debug(
            "reputation_aggregated",
            fids=len(fids),
            providers=len(active),
            succeeded=result.succeeded(),
        )
        return result

    async def _call(
        self,
        provider: ScoreProvider,
        fids: Sequence[int],
        wallets: Mapping[int, Sequence[str]] | None,
    ) -> ProviderOutcome:
        try:
            return await asyncio.wait_for(
                provider.fetch_scores(fids, wallets), timeout=self._timeout
            )
        except asyncio.TimeoutError:
            logger.warning("provider_timeout", provider=provider.name, timeout=self._timeout)
            return Unavailable(
                UnavailableReason.TIMEOUT, f"no response within {self._timeout}s"
            )
        except Exception as e:
            logger.exception("provider_failed", provider=provider.name)
            return Unavailable(UnavailableReason.UPSTREAM_ERROR, str(e)[:200])
