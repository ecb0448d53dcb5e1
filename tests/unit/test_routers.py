"""HTTP-level tests with the service and cache dependencies overridden."""

import pytest
from prometheus_client import REGISTRY
from fastapi.testclient import TestClient

from inspector.config import settings
from inspector.dependencies import get_cache, get_inspect_service
from inspector.main import app
from inspector.models.profile import ExternalReputation, UserProfile
from inspector.models.report import (
    FollowingReport,
    FollowingStats,
    GraphReputation,
    InspectionReport,
    ProviderStatus,
    RankedAccount,
    RankingsReport,
    ReputationReport,
)
from inspector.services.inspect_service import inspected_user


def _user(fid=3):
    profile = UserProfile(
        fid=fid,
        username="alice",
        pfp_url="https://i.imgur.com/a.png",
        bio="Building on Farcaster.",
        follower_count=900,
        following_count=200,
        verified_address_count=1,
    )
    return inspected_user(profile, None, ExternalReputation(engagement_score=0.7))


class StubService:
    def __init__(self, report=None, configured=True, error=None):
        self.configured = configured
        self._report = report
        self._error = error
        self.calls = []

    async def inspect(self, fids, batch=False):
        self.calls.append((list(fids), batch))
        if self._error is not None:
            raise self._error
        return self._report

    async def following(self, fid, limit, cursor=None):
        self.calls.append((fid, limit, cursor))
        return FollowingReport(fid=fid, users=[_user(9)], stats=FollowingStats(total=1, healthy=1))

    async def reputation(self, fids):
        return ReputationReport(scores=[GraphReputation(fid=f, quotient_score=0.7) for f in fids])

    async def rankings(self, scope, fid=None, limit=50):
        self.calls.append((scope, fid, limit))
        row = RankedAccount(rank=1, fid=3, score=0.0123, display_score="12.30", tier="Established")
        return RankingsReport(scope=scope, fid=fid, rankings=[row])


class StubCache:
    def __init__(self, cached=None):
        self._cached = cached
        self.stored = []

    async def get_report(self, fids, batch):
        return self._cached

    async def set_report(self, fids, batch, data):
        self.stored.append((list(fids), batch))


@pytest.fixture
def client():
    yield TestClient(app)
    app.dependency_overrides.clear()


def _override(service, cache=None):
    app.dependency_overrides[get_inspect_service] = lambda: service
    app.dependency_overrides[get_cache] = lambda: cache or StubCache()


class TestInspectEndpoint:
    def test_single_fid(self, client):
        cache = StubCache()
        service = StubService(InspectionReport(users=[_user()], providers=[ProviderStatus(provider="neynar", ok=True)]))
        _override(service, cache)

        resp = client.get("/api/inspect", params={"fid": "3"})

        assert resp.status_code == 200
        body = resp.json()
        user = body["users"][0]
        assert user["fid"] == 3
        assert user["verdict"]["spamScore"] == 0
        assert user["verdict"]["trustLevel"] == "Medium"
        assert body["needsManualInput"] is False
        assert service.calls == [([3], False)]
        assert cache.stored == [([3], False)]

    def test_batch_fids(self, client):
        service = StubService(InspectionReport(users=[_user(3), _user(5)], batch=True))
        _override(service)

        resp = client.get("/api/inspect", params={"fids": "3,5,3", "batch": "true"})

        assert resp.status_code == 200
        assert service.calls == [([3, 5], True)]

    def test_invalid_fid(self, client):
        _override(StubService())
        resp = client.get("/api/inspect", params={"fid": "abc"})
        assert resp.status_code == 400
        assert resp.json()["error"]["code"] == "INVALID_FIELD"

    def test_missing_fid(self, client):
        _override(StubService())
        resp = client.get("/api/inspect")
        assert resp.status_code == 400

    def test_not_configured(self, client):
        _override(StubService(configured=False))
        resp = client.get("/api/inspect", params={"fid": "3"})
        assert resp.status_code == 503
        assert resp.json()["error"]["code"] == "NOT_CONFIGURED"

    def test_cache_hit_skips_service(self, client):
        service = StubService()
        _override(service, StubCache(cached={"users": [], "cached": True}))

        resp = client.get("/api/inspect", params={"fid": "3"})

        assert resp.json() == {"users": [], "cached": True}
        assert service.calls == []

    def test_degraded_report_not_cached(self, client):
        cache = StubCache()
        report = InspectionReport(
            users=[_user()],
            providers=[
                ProviderStatus(provider="neynar", ok=True),
                ProviderStatus(provider="talent", ok=False, reason="timeout"),
            ],
        )
        _override(StubService(report), cache)

        resp = client.get("/api/inspect", params={"fid": "3"})

        assert resp.status_code == 200
        assert cache.stored == []

    def test_manual_input_flag(self, client):
        report = InspectionReport(users=[], missing=[3], needs_manual_input=True, message="use manual")
        _override(StubService(report))

        body = client.get("/api/inspect", params={"fid": "3"}).json()

        assert body["needsManualInput"] is True
        assert body["missing"] == [3]

    def test_unexpected_error(self, client):
        _override(StubService(error=RuntimeError("boom")))
        resp = client.get("/api/inspect", params={"fid": "3"})
        assert resp.status_code == 500
        assert resp.json()["error"]["code"] == "INTERNAL_ERROR"


class TestManualEndpoint:
    def test_scores_supplied_profile(self, client):
        payload = {
            "profile": {
                "fid": 900000,
                "pfpUrl": None,
                "bio": "",
                "followerCount": 5,
                "followingCount": 2000,
                "verifiedAddressCount": 0,
            },
            "reputation": {"builderScore": 80},
        }
        resp = client.post("/api/inspect/manual", json=payload)

        assert resp.status_code == 200
        body = resp.json()
        assert body["fid"] == 900000
        assert body["verdict"]["spamScore"] == 70
        assert body["verdict"]["isSpam"] is True

    def test_rejects_invalid_profile(self, client):
        resp = client.post("/api/inspect/manual", json={"profile": {"fid": 0}})
        assert resp.status_code == 422


class TestFollowingEndpoint:
    def test_page(self, client):
        service = StubService()
        _override(service)

        resp = client.get("/api/following", params={"fid": "3", "limit": "500", "cursor": "abc"})

        assert resp.status_code == 200
        assert resp.json()["stats"]["total"] == 1
        assert service.calls == [(3, 100, "abc")]

    def test_bad_cursor(self, client):
        _override(StubService())
        resp = client.get("/api/following", params={"fid": "3", "cursor": "a b;c"})
        assert resp.status_code == 400


class TestReputationEndpoint:
    def test_scores(self, client):
        _override(StubService())
        resp = client.get("/api/reputation", params={"fids": "3,4"})
        assert resp.status_code == 200
        assert [s["fid"] for s in resp.json()["scores"]] == [3, 4]
        assert resp.json()["scores"][0]["quotientScore"] == 0.7


class TestRankingsEndpoint:
    def test_global_by_default(self, client):
        service = StubService()
        _override(service)

        resp = client.get("/api/reputation/rankings")

        assert resp.status_code == 200
        body = resp.json()
        assert body["scope"] == "global"
        assert body["rankings"][0]["displayScore"] == "12.30"
        assert service.calls == [("global", None, 50)]

    def test_followers_of_fid(self, client):
        service = StubService()
        _override(service)

        resp = client.get("/api/reputation/rankings", params={"scope": "Followers", "fid": "3", "limit": "500"})

        assert resp.status_code == 200
        assert service.calls == [("followers", 3, 100)]

    def test_followers_need_fid(self, client):
        _override(StubService())
        resp = client.get("/api/reputation/rankings", params={"scope": "followers"})
        assert resp.status_code == 400
        assert resp.json()["error"]["code"] == "INVALID_FIELD"

    def test_unknown_scope(self, client):
        _override(StubService())
        resp = client.get("/api/reputation/rankings", params={"scope": "friends"})
        assert resp.status_code == 400


class TestHealth:
    def test_live(self, client):
        assert client.get("/health/live").json() == {"status": "ok"}

    def test_ready_without_neynar_key(self, client, monkeypatch):
        monkeypatch.setattr(settings, "neynar_api_key", "")
        resp = client.get("/health/ready")
        assert resp.status_code == 503
        assert resp.json()["checks"]["providers"]["neynar"] == "missing"

    def test_ready_with_neynar_key(self, client, monkeypatch):
        monkeypatch.setattr(settings, "neynar_api_key", "k")
        resp = client.get("/health/ready")
        assert resp.status_code == 200
        assert resp.json()["checks"]["redis"] == {"status": "disabled"}


class TestMetrics:
    def test_exposition(self, client):
        resp = client.get("/metrics")
        assert resp.status_code == 200
        assert "inspector_requests_in_flight" in resp.text
        assert "inspector_spam_score_bucket" in resp.text

    def test_unmatched_paths_share_one_label(self, client):
        labels = {"endpoint": "unmatched", "method": "GET", "status": "404"}
        before = REGISTRY.get_sample_value("inspector_api_request_duration_seconds_count", labels) or 0.0

        client.get("/api/nope-1")
        client.get("/api/nope-2")

        after = REGISTRY.get_sample_value("inspector_api_request_duration_seconds_count", labels)
        assert after == before + 2

    def test_labelled_by_route_template(self, client):
        client.get("/health/live")
        labels = {"endpoint": "/health/live", "method": "GET", "status": "200"}
        assert REGISTRY.get_sample_value("inspector_api_request_duration_seconds_count", labels) >= 1
