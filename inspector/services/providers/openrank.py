"""OpenRank graph reputation. Public API, no key required."""

from collections.abc import Mapping, Sequence
from typing import Any

import httpx

from inspector.services.providers.base import (
    ProviderOutcome,
    ScoreProvider,
    Success,
    guarded,
    json_object,
)

RANKING_SCOPES = ("global", "followers", "following")
MAX_RANKINGS_LIMIT = 100


def _ranked_entries(body: dict) -> list[dict[str, Any]]:
    """Result entries with a usable score, in upstream order."""
    entries = []
    for entry in body.get("result") or []:
        if not isinstance(entry, dict) or entry.get("score") is None:
            continue
        entries.append(
            {
                "fid": int(entry["fid"]),
                "score": float(entry["score"]),
                "rank": int(entry["rank"]) if entry.get("rank") is not None else None,
            }
        )
    return entries


class OpenRankProvider(ScoreProvider):
    name = "openrank"

    def __init__(self, client: httpx.AsyncClient, base_url: str):
        super().__init__(client)
        self._base_url = base_url.rstrip("/")

    async def _fetch(
        self,
        fids: list[int],
        wallets: Mapping[int, Sequence[str]],
    ) -> dict[int, dict[str, Any]]:
        resp = await self._client.post(
            f"{self._base_url}/scores",
            json=fids,
            headers={"Content-Type": "application/json"},
        )
        resp.raise_for_status()

        updates: dict[int, dict[str, Any]] = {}
        for entry in _ranked_entries(json_object(resp)):
            update: dict[str, Any] = {"graph_reputation_score": entry["score"]}
            if entry["rank"] is not None:
                update["graph_rank"] = entry["rank"]
            updates[entry["fid"]] = update
        return updates

    async def fetch_rankings(
        self, scope: str, fid: int | None = None, limit: int = 50
    ) -> ProviderOutcome:
        """Top accounts by OpenRank score.

        scope "global" ranks the whole network; "followers" and "following"
        rank the accounts around fid. Success data is a list of
        {"fid", "score", "rank"} dicts, best first.
        """
        if scope not in RANKING_SCOPES:
            raise ValueError(f"unknown ranking scope {scope!r}")
        if scope != "global" and fid is None:
            raise ValueError(f"{scope} rankings need a fid")
        if limit <= 0:
            return Success([])

        path = "/rankings/global" if scope == "global" else f"/rankings/{scope}/{fid}"

        async def _fetch() -> list[dict[str, Any]]:
            resp = await self._client.get(
                f"{self._base_url}{path}",
                params={"limit": min(limit, MAX_RANKINGS_LIMIT)},
            )
            resp.raise_for_status()
            return _ranked_entries(json_object(resp))

        return await guarded(self.name, _fetch())
