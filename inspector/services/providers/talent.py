"""Talent Protocol builder score, one passport lookup per FID."""

import asyncio
from collections.abc import Mapping, Sequence

import httpx

from inspector.services.providers.base import PerFidResults, ScoreProvider, json_object


class TalentProvider(ScoreProvider):
    name = "talent"
    expensive = True

    def __init__(self, client: httpx.AsyncClient, api_key: str, base_url: str):
        super().__init__(client)
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")

    @property
    def configured(self) -> bool:
        return bool(self._api_key)

    async def _passport_score(self, fid: int) -> dict[str, float] | None:
        resp = await self._client.get(
            f"{self._base_url}/api/v2/passports/{fid}",
            headers={"X-API-KEY": self._api_key},
        )
        if resp.status_code == 404:
            return None
        resp.raise_for_status()
        passport = json_object(resp).get("passport")
        if not passport or passport.get("score") is None:
            return None
        return {"builder_score": float(passport["score"])}

    async def _fetch(
        self,
        fids: list[int],
        wallets: Mapping[int, Sequence[str]],
    ) -> dict[int, dict[str, float]]:
        results = await asyncio.gather(
            *[self._passport_score(fid) for fid in fids],
            return_exceptions=True,
        )
        collected = PerFidResults()
        for fid, result in zip(fids, results):
            collected.add(fid, result)
        return collected.resolve()
