"""Neynar client: profiles, recent casts and following lists.

Neynar is the primary source. Its user payload also carries the engagement
score and power badge, which seed each user's ExternalReputation. Raw JSON
is coerced into UserProfile/ActivitySignals here and nowhere else.
"""

from collections.abc import Sequence
from datetime import datetime
from typing import Any

import httpx

from inspector.models.profile import ActivitySignals, ExternalReputation, UserProfile
from inspector.services.providers.base import (
    ProviderOutcome,
    Unavailable,
    UnavailableReason,
    guarded,
    json_object,
)

NAME = "neynar"
MAX_BULK_FIDS = 100
MAX_PAGE_SIZE = 100


def _parse_timestamp(value: Any) -> datetime | None:
    if not value or not isinstance(value, str):
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


def _verified_addresses(user: dict) -> list[str]:
    verified = user.get("verified_addresses") or {}
    addresses = list(verified.get("eth_addresses") or []) + list(verified.get("sol_addresses") or [])
    if not addresses:
        addresses = list(user.get("verifications") or [])
    return addresses


def profile_from_neynar(user: dict) -> UserProfile:
    """Coerce a Neynar user object into a UserProfile."""
    bio = ((user.get("profile") or {}).get("bio") or {}).get("text")
    addresses = _verified_addresses(user)
    return UserProfile(
        fid=int(user["fid"]),
        username=user.get("username") or "",
        display_name=user.get("display_name") or "",
        pfp_url=user.get("pfp_url") or None,
        bio=bio,
        follower_count=int(user.get("follower_count") or 0),
        following_count=int(user.get("following_count") or 0),
        verified_address_count=len(addresses),
        verified_addresses=addresses,
        power_badge=bool(user.get("power_badge")),
    )


def engagement_from_neynar(user: dict) -> float | None:
    """Neynar user score, from the top level or the older experimental block."""
    score = user.get("score")
    if score is None:
        score = (user.get("experimental") or {}).get("neynar_user_score")
    return float(score) if score is not None else None


def reputation_from_neynar(user: dict) -> ExternalReputation:
    return ExternalReputation(engagement_score=engagement_from_neynar(user))


def activity_from_casts(casts: Sequence[dict]) -> ActivitySignals:
    """Summarize a recent-cast sample. Casts arrive newest first but the
    latest timestamp is taken explicitly."""
    timestamps = [ts for ts in (_parse_timestamp(c.get("timestamp")) for c in casts) if ts]
    return ActivitySignals(
        recent_cast_count=len(casts),
        last_activity_timestamp=max(timestamps) if timestamps else None,
    )


class NeynarClient:
    def __init__(self, client: httpx.AsyncClient, api_key: str, base_url: str):
        self._client = client
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")

    @property
    def configured(self) -> bool:
        return bool(self._api_key)

    def _headers(self) -> dict[str, str]:
        return {"accept": "application/json", "api_key": self._api_key}

    async def _get(self, path: str, params: dict) -> dict:
        resp = await self._client.get(
            f"{self._base_url}{path}", params=params, headers=self._headers()
        )
        resp.raise_for_status()
        return json_object(resp)

    def _not_configured(self) -> Unavailable:
        return Unavailable(UnavailableReason.NOT_CONFIGURED, "NEYNAR_API_KEY not set")

    async def fetch_users(self, fids: Sequence[int]) -> ProviderOutcome:
        """Bulk profile lookup. Success data is {fid: raw user dict}."""
        if not self.configured:
            return self._not_configured()

        async def _fetch() -> dict[int, dict]:
            body = await self._get(
                "/v2/farcaster/user/bulk",
                {"fids": ",".join(str(f) for f in fids[:MAX_BULK_FIDS])},
            )
            return {int(u["fid"]): u for u in body.get("users", [])}

        return await guarded(NAME, _fetch())

    async def fetch_recent_casts(self, fid: int, limit: int) -> ProviderOutcome:
        """Success data is the list of the user's most recent casts."""
        if not self.configured:
            return self._not_configured()

        async def _fetch() -> list[dict]:
            body = await self._get(
                "/v2/farcaster/feed/user/casts",
                {"fid": fid, "limit": limit, "include_replies": "true"},
            )
            return [c for c in body.get("casts") or [] if isinstance(c, dict)]

        return await guarded(NAME, _fetch())

    async def fetch_following(
        self, fid: int, limit: int, cursor: str | None = None
    ) -> ProviderOutcome:
        """One page of followed accounts. Success data is (users, next_cursor)."""
        if not self.configured:
            return self._not_configured()

        params: dict[str, Any] = {"fid": fid, "limit": min(limit, MAX_PAGE_SIZE)}
        if cursor:
            params["cursor"] = cursor

        async def _fetch() -> tuple[list[dict], str | None]:
            body = await self._get("/v2/farcaster/following", params)
            # Following entries wrap the user object: {"user": {...}}
            users = [item.get("user", item) for item in body.get("users", [])]
            next_cursor = (body.get("next") or {}).get("cursor")
            return users, next_cursor

        return await guarded(NAME, _fetch())
