"""Dune wallet labels ("Whale", "DEX Trader", ...) for a user's first
verified address, read from the latest results of a saved query."""

import asyncio
from collections.abc import Mapping, Sequence

import httpx

from inspector.services.providers.base import PerFidResults, ScoreProvider, json_object


class DuneLabelsProvider(ScoreProvider):
    name = "dune"
    expensive = True

    def __init__(self, client: httpx.AsyncClient, api_key: str, base_url: str, query_id: int):
        super().__init__(client)
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._query_id = query_id

    @property
    def configured(self) -> bool:
        return bool(self._api_key)

    async def _wallet_labels(self, wallet: str) -> dict[str, list[str]] | None:
        resp = await self._client.get(
            f"{self._base_url}/query/{self._query_id}/results",
            params={"wallet": wallet},
            headers={"X-Dune-Api-Key": self._api_key},
        )
        resp.raise_for_status()
        rows = (json_object(resp).get("result") or {}).get("rows") or []
        if not rows:
            return None
        return {"wallet_labels": [str(label) for label in rows[0].get("labels") or []]}

    async def _fetch(
        self,
        fids: list[int],
        wallets: Mapping[int, Sequence[str]],
    ) -> dict[int, dict[str, list[str]]]:
        targets = [(fid, wallets[fid][0]) for fid in fids if wallets.get(fid)]
        if not targets:
            return {}

        results = await asyncio.gather(
            *[self._wallet_labels(wallet) for _, wallet in targets],
            return_exceptions=True,
        )
        collected = PerFidResults()
        for (fid, _), result in zip(targets, results):
            collected.add(fid, result)
        return collected.resolve()
