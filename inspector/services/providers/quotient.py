"""Quotient reputation scores, up to 1000 FIDs per request."""

from collections.abc import Mapping, Sequence

import httpx

from inspector.services.providers.base import ScoreProvider, json_object

MAX_FIDS_PER_REQUEST = 1000


class QuotientProvider(ScoreProvider):
    name = "quotient"

    def __init__(self, client: httpx.AsyncClient, api_key: str, base_url: str):
        super().__init__(client)
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")

    @property
    def configured(self) -> bool:
        return bool(self._api_key)

    async def _fetch(
        self,
        fids: list[int],
        wallets: Mapping[int, Sequence[str]],
    ) -> dict[int, dict[str, float]]:
        resp = await self._client.post(
            f"{self._base_url}/v1/user-reputation",
            json={"fids": fids[:MAX_FIDS_PER_REQUEST], "api_key": self._api_key},
        )
        resp.raise_for_status()

        updates: dict[int, dict[str, float]] = {}
        for user in json_object(resp).get("users") or []:
            # Older responses name the field "score"
            score = user.get("quotient_score", user.get("score"))
            if score is None:
                continue
            updates[int(user["fid"])] = {"quotient_score": float(score)}
        return updates
