"""Request orchestration: fetch profiles, enrich, score.

Batch mode is a caller policy: it skips the per-user cast sample and the
expensive providers, so the scorer simply receives fewer optional signals.
"""

import asyncio
import logging
from collections.abc import Sequence
from datetime import datetime, timezone

from pydantic import ValidationError

from inspector.models.profile import ActivitySignals, ExternalReputation, UserProfile
from inspector.models.report import (
    FollowingReport,
    FollowingStats,
    GraphReputation,
    InspectedUser,
    InspectionReport,
    ManualInspectionRequest,
    RankedAccount,
    RankingsReport,
    ReputationReport,
)
from inspector.models.verdict import ReputationVerdict
from inspector.routers.metrics import inspections_total, spam_scores
from inspector.services.aggregator import ReputationAggregator, provider_status, record_outcome
from inspector.services.providers.base import ProviderOutcome, Unavailable, UnavailableReason
from inspector.services.providers.neynar import (
    NAME as NEYNAR,
    NeynarClient,
    activity_from_casts,
    profile_from_neynar,
    reputation_from_neynar,
)
from inspector.services.providers.openrank import OpenRankProvider
from inspector.services.tiers import (
    openrank_display_score,
    openrank_spam_signal,
    openrank_tier,
    quotient_tier,
)
from inspector.services.verdict_service import build_verdict

logger = logging.getLogger(__name__)

DEFAULT_CAST_LIMIT = 25
DEFAULT_ACTIVITY_TIMEOUT = 2.5
SUSPICIOUS_THRESHOLD = 30

MANUAL_INPUT_MESSAGE = (
    "Neynar rejected the request for the configured API plan. "
    "Submit profiles manually via POST /api/inspect/manual."
)


def inspected_user(
    profile: UserProfile,
    activity: ActivitySignals | None,
    reputation: ExternalReputation,
    now: datetime | None = None,
) -> InspectedUser:
    verdict = build_verdict(profile, activity, reputation, now)
    spam_scores.observe(verdict.spam_score)

    graph_tier = None
    if reputation.graph_reputation_score is not None:
        graph_tier = openrank_tier(reputation.graph_reputation_score).tier
    q_tier = None
    if reputation.quotient_score is not None:
        q_tier = quotient_tier(reputation.quotient_score)

    return InspectedUser(
        fid=profile.fid,
        username=profile.username,
        display_name=profile.display_name,
        pfp_url=profile.pfp_url,
        bio=profile.bio,
        follower_count=profile.follower_count,
        following_count=profile.following_count,
        verified_address_count=profile.verified_address_count,
        power_badge=profile.power_badge,
        reputation=reputation,
        graph_tier=graph_tier,
        quotient_tier=q_tier,
        verdict=verdict,
    )


def following_stats(users: Sequence[InspectedUser]) -> FollowingStats:
    stats = FollowingStats(total=len(users))
    for user in users:
        score = user.verdict.spam_score
        if user.verdict.is_spam:
            stats.spam += 1
        elif score >= SUSPICIOUS_THRESHOLD:
            stats.suspicious += 1
        else:
            stats.healthy += 1
        if score >= SUSPICIOUS_THRESHOLD:
            stats.needs_review += 1
    return stats


def score_manual(request: ManualInspectionRequest, now: datetime | None = None) -> ReputationVerdict:
    """Score a caller-supplied profile without touching any upstream."""
    verdict = build_verdict(request.profile, request.activity, request.reputation, now)
    inspections_total.labels(mode="manual").inc()
    spam_scores.observe(verdict.spam_score)
    return verdict


def _parse_profiles(raw_users: Sequence[dict]) -> tuple[dict[int, UserProfile], dict[int, dict]]:
    """Coerce raw Neynar users, dropping malformed records."""
    profiles: dict[int, UserProfile] = {}
    by_fid: dict[int, dict] = {}
    for raw in raw_users:
        try:
            profile = profile_from_neynar(raw)
        except (KeyError, TypeError, ValueError, ValidationError):
            logger.warning("skipping malformed user record: %r", raw.get("fid"))
            continue
        profiles[profile.fid] = profile
        by_fid[profile.fid] = raw
    return profiles, by_fid


class InspectService:
    def __init__(
        self,
        neynar: NeynarClient,
        aggregator: ReputationAggregator,
        graph_aggregator: ReputationAggregator,
        cast_limit: int = DEFAULT_CAST_LIMIT,
        activity_timeout: float = DEFAULT_ACTIVITY_TIMEOUT,
        openrank: OpenRankProvider | None = None,
    ):
        self._neynar = neynar
        self._aggregator = aggregator
        self._graph_aggregator = graph_aggregator
        self._cast_limit = cast_limit
        self._activity_timeout = activity_timeout
        self._openrank = openrank

    @property
    def configured(self) -> bool:
        return self._neynar.configured

    async def inspect(self, fids: Sequence[int], batch: bool = False) -> InspectionReport:
        """Score each FID. Unknown FIDs are listed in `missing`."""
        outcome = await self._neynar.fetch_users(fids)
        record_outcome(NEYNAR, outcome)
        if not outcome.ok:
            return InspectionReport(
                users=[],
                missing=list(fids),
                providers=[provider_status(NEYNAR, outcome)],
                batch=batch,
                needs_manual_input=outcome.is_tier_restricted,
                message=MANUAL_INPUT_MESSAGE if outcome.is_tier_restricted else None,
            )

        profiles, raw = _parse_profiles(list(outcome.data.values()))
        resolved = [fid for fid in fids if fid in profiles]
        missing = [fid for fid in fids if fid not in profiles]

        activities = {} if batch else await self._fetch_activity(resolved)
        aggregation = await self._aggregator.aggregate(
            resolved,
            base={fid: reputation_from_neynar(raw[fid]) for fid in resolved},
            wallets={fid: profiles[fid].verified_addresses for fid in resolved},
            include_expensive=not batch,
        )

        now = datetime.now(timezone.utc)
        users = [
            inspected_user(profiles[fid], activities.get(fid), aggregation.reputations[fid], now)
            for fid in resolved
        ]
        inspections_total.labels(mode="batch" if batch else "full").inc(len(users))

        return InspectionReport(
            users=users,
            missing=missing,
            providers=[provider_status(NEYNAR, outcome)] + aggregation.statuses(),
            batch=batch,
        )

    async def following(
        self, fid: int, limit: int, cursor: str | None = None
    ) -> FollowingReport:
        """Score one page of the accounts fid follows, riskiest first."""
        outcome = await self._neynar.fetch_following(fid, limit, cursor)
        record_outcome(NEYNAR, outcome)
        if not outcome.ok:
            return FollowingReport(
                fid=fid,
                users=[],
                stats=FollowingStats(),
                providers=[provider_status(NEYNAR, outcome)],
                needs_manual_input=outcome.is_tier_restricted,
            )

        raw_users, next_cursor = outcome.data
        profiles, raw = _parse_profiles(raw_users)
        fids = list(profiles)

        aggregation = await self._aggregator.aggregate(
            fids,
            base={f: reputation_from_neynar(raw[f]) for f in fids},
            include_expensive=False,
        )

        now = datetime.now(timezone.utc)
        users = [inspected_user(profiles[f], None, aggregation.reputations[f], now) for f in fids]
        users.sort(key=lambda u: u.verdict.spam_score, reverse=True)
        inspections_total.labels(mode="following").inc(len(users))

        return FollowingReport(
            fid=fid,
            users=users,
            stats=following_stats(users),
            next_cursor=next_cursor,
            has_more=bool(next_cursor),
            providers=[provider_status(NEYNAR, outcome)] + aggregation.statuses(),
        )

    async def reputation(self, fids: Sequence[int]) -> ReputationReport:
        """Graph reputation scores with display tiers. Neynar is not needed."""
        aggregation = await self._graph_aggregator.aggregate(fids)
        scores = []
        for fid in fids:
            rep = aggregation.reputations[fid]
            entry = GraphReputation(fid=fid, quotient_score=rep.quotient_score)
            if rep.graph_reputation_score is not None:
                signal = openrank_spam_signal(rep.graph_reputation_score)
                entry.openrank_score = rep.graph_reputation_score
                entry.openrank_display_score = f"{openrank_display_score(rep.graph_reputation_score):.2f}"
                entry.openrank_rank = rep.graph_rank
                entry.openrank_tier = openrank_tier(rep.graph_reputation_score).tier
                entry.likely_spam = signal.is_spam
                entry.spam_confidence = signal.confidence
            if rep.quotient_score is not None:
                entry.quotient_tier = quotient_tier(rep.quotient_score)
            scores.append(entry)
        return ReputationReport(scores=scores, providers=aggregation.statuses())

    async def rankings(
        self, scope: str, fid: int | None = None, limit: int = 50
    ) -> RankingsReport:
        """OpenRank leaderboard for the network or around one account.

        Rows are labelled with Neynar profile fields when Neynar is
        configured; a failed profile lookup leaves them unlabelled.
        """
        if self._openrank is None:
            outcome: ProviderOutcome = Unavailable(
                UnavailableReason.NOT_CONFIGURED, "openrank provider not wired"
            )
        else:
            outcome = await self._openrank.fetch_rankings(scope, fid, limit)
        record_outcome("openrank", outcome)
        statuses = [provider_status("openrank", outcome)]
        if not outcome.ok:
            return RankingsReport(scope=scope, fid=fid, rankings=[], providers=statuses)

        entries = outcome.data
        users: dict[int, dict] = {}
        if entries and self._neynar.configured:
            lookup = await self._neynar.fetch_users([e["fid"] for e in entries])
            record_outcome(NEYNAR, lookup)
            statuses.append(provider_status(NEYNAR, lookup))
            if lookup.ok:
                users = lookup.data

        rankings = []
        for position, entry in enumerate(entries, start=1):
            user = users.get(entry["fid"]) or {}
            rankings.append(
                RankedAccount(
                    rank=entry["rank"] or position,
                    fid=entry["fid"],
                    score=entry["score"],
                    display_score=f"{openrank_display_score(entry['score']):.2f}",
                    tier=openrank_tier(entry["score"]).tier,
                    username=user.get("username"),
                    display_name=user.get("display_name"),
                    pfp_url=user.get("pfp_url"),
                    follower_count=user.get("follower_count"),
                    power_badge=user.get("power_badge"),
                )
            )
        return RankingsReport(scope=scope, fid=fid, rankings=rankings, providers=statuses)

    async def _fetch_activity(self, fids: Sequence[int]) -> dict[int, ActivitySignals]:
        """Recent-cast sample per FID. A failed sample means no activity signal."""
        outcomes = await asyncio.gather(*[self._cast_sample(fid) for fid in fids])
        activities = {}
        for fid, outcome in zip(fids, outcomes):
            if outcome is not None and outcome.ok:
                activities[fid] = activity_from_casts(outcome.data)
        return activities

    async def _cast_sample(self, fid: int) -> ProviderOutcome | None:
        try:
            return await asyncio.wait_for(
                self._neynar.fetch_recent_casts(fid, self._cast_limit),
                timeout=self._activity_timeout,
            )
        except asyncio.TimeoutError:
            logger.warning("cast sample timed out for fid %d", fid)
            return None
