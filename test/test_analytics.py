from datetime import datetime, timedelta, timezone

import pytest
from conftest import FakeAnalyticsRepo, make_settings

from svc_teammate.domain.models import TrackVisitRequest
from svc_teammate.services.analytics_service import (
    MOCK_STATS,
    MOCK_STATS_NOTE,
    AnalyticsService,
    client_ip,
    day_bounds,
)
from svc_teammate.workers.session_sweeper import sweep_once


def _visit(visitor="v-1", session="s-1", when="2026-03-04T10:15:00Z", page="/"):
    return {"visitorId": visitor, "sessionId": session, "page": page, "timestamp": when, "userAgent": "pytest"}


def test_same_day_visits_are_deduplicated(harness):
    """Test a second visit on the same UTC day adds no visitor row"""
    r1 = harness.client.post("/api/analytics/track", json=_visit(when="2026-03-04T08:00:00Z"))
    r2 = harness.client.post("/api/analytics/track", json=_visit(when="2026-03-04T21:30:00Z", page="/create"))

    assert r1.status_code == 200
    assert r1.json() == {"success": True, "message": "Visit tracked successfully"}
    assert r2.status_code == 200
    assert len(harness.analytics.visits) == 1


def test_next_day_visit_adds_a_row(harness):
    harness.client.post("/api/analytics/track", json=_visit(when="2026-03-04T23:59:00Z"))
    harness.client.post("/api/analytics/track", json=_visit(when="2026-03-05T00:01:00Z"))

    assert len(harness.analytics.visits) == 2


def test_track_upserts_session_and_uses_forwarded_ip(harness):
    harness.client.post(
        "/api/analytics/track",
        json=_visit(when="2026-03-04T08:00:00Z"),
        headers={"x-forwarded-for": "203.0.113.7, 10.0.0.1"},
    )
    harness.client.post("/api/analytics/track", json=_visit(when="2026-03-04T08:03:00Z"))

    session = harness.analytics.sessions["s-1"]
    assert session["is_active"] is True
    assert session["last_activity"] == datetime(2026, 3, 4, 8, 3, tzinfo=timezone.utc)
    assert session["start_time"] == datetime(2026, 3, 4, 8, 0, tzinfo=timezone.utc)
    assert harness.analytics.visits[0]["ip_address"] == "203.0.113.7"


def test_track_rejects_incomplete_payload(harness):
    resp = harness.client.post("/api/analytics/track", json={"visitorId": "v-1"})
    assert resp.status_code == 400
    assert harness.analytics.visits == []


def test_track_failure_returns_500(make_harness):
    h = make_harness(analytics_broken=True)

    resp = h.client.post("/api/analytics/track", json=_visit())

    assert resp.status_code == 500
    assert resp.json() == {"success": False, "error": "Failed to track visitor"}


def test_stats_sweeps_idle_sessions(harness):
    """Test a session idle for 6 minutes is inactive after a stats read"""
    now = datetime.now(timezone.utc)
    harness.analytics.sessions["idle"] = {
        "session_id": "idle", "visitor_id": "v-9", "start_time": now - timedelta(minutes=30),
        "last_activity": now - timedelta(minutes=6), "ip_address": None, "user_agent": None, "is_active": True,
    }
    harness.analytics.sessions["live"] = {
        "session_id": "live", "visitor_id": "v-8", "start_time": now - timedelta(minutes=3),
        "last_activity": now - timedelta(minutes=1), "ip_address": None, "user_agent": None, "is_active": True,
    }

    resp = harness.client.get("/api/analytics/stats")

    assert resp.status_code == 200
    body = resp.json()
    assert body["activeUsers"] == 1
    assert "lastUpdated" in body
    assert "error" not in body
    assert harness.analytics.sessions["idle"]["is_active"] is False
    assert harness.analytics.sessions["live"]["is_active"] is True


def test_stats_counts(harness):
    today = datetime.now(timezone.utc).isoformat()
    harness.client.post("/api/analytics/track", json=_visit(visitor="a", session="sa", when="2020-01-01T00:00:00Z"))
    harness.client.post("/api/analytics/track", json=_visit(visitor="b", session="sb", when=today))
    harness.client.post("/api/images/generate", json={"prompt": "an analyst"})

    body = harness.client.get("/api/analytics/stats").json()

    assert body["totalVisitors"] == 2
    assert body["todayVisitors"] == 1
    assert body["totalImagesGenerated"] == 1
    assert body["totalTeammatesGenerated"] == 1


def test_stats_falls_back_to_mock_when_database_fails(make_harness):
    h = make_harness(analytics_broken=True)

    resp = h.client.get("/api/analytics/stats")

    assert resp.status_code == 200
    body = resp.json()
    assert body["error"] == MOCK_STATS_NOTE
    for key, value in MOCK_STATS.items():
        assert body[key] == value
    assert body["lastUpdated"]


def test_cleanup_action_deactivates_day_old_sessions(harness):
    now = datetime.now(timezone.utc)
    harness.analytics.sessions["old"] = {
        "session_id": "old", "visitor_id": "v", "start_time": now - timedelta(days=2),
        "last_activity": now - timedelta(hours=25), "ip_address": None, "user_agent": None, "is_active": True,
    }

    resp = harness.client.post("/api/analytics/stats", json={"action": "cleanup"})

    assert resp.status_code == 200
    assert resp.json()["success"] is True
    assert harness.analytics.sessions["old"]["is_active"] is False


def test_unknown_action_is_rejected(harness):
    resp = harness.client.post("/api/analytics/stats", json={"action": "explode"})

    assert resp.status_code == 400
    assert resp.json() == {"success": False, "error": "Unknown action"}


def test_recent_visits_listing(harness):
    harness.client.post("/api/analytics/track", json=_visit(visitor="a", when="2020-01-01T00:00:00Z"))
    harness.client.post("/api/analytics/track", json=_visit(visitor="b", when=datetime.now(timezone.utc).isoformat()))

    body = harness.client.get("/api/analytics/track", params={"days": 7}).json()

    assert body["success"] is True
    assert body["count"] == 1
    assert body["data"][0]["visitorId"] == "b"


def test_day_bounds_normalizes_to_utc():
    start, end = day_bounds(datetime(2026, 3, 4, 23, 30, tzinfo=timezone(timedelta(hours=-5))))
    assert start == datetime(2026, 3, 5, tzinfo=timezone.utc)
    assert end == datetime(2026, 3, 6, tzinfo=timezone.utc)


def test_client_ip_resolution():
    assert client_ip({"x-forwarded-for": "198.51.100.2, 10.0.0.1"}) == "198.51.100.2"
    assert client_ip({"x-real-ip": "198.51.100.3"}) == "198.51.100.3"
    assert client_ip({}) == "unknown"


@pytest.mark.asyncio
async def test_track_visit_reports_new_row():
    repo = FakeAnalyticsRepo()
    service = AnalyticsService(make_settings(), repo)
    req = TrackVisitRequest(visitor_id="v", session_id="s", page="/", timestamp=datetime(2026, 1, 1, 9, 0))

    assert await service.track_visit(req, ip_address="unknown") is True
    assert await service.track_visit(req, ip_address="unknown") is False
    # Naive timestamps are read as UTC.
    assert repo.visits[0]["visit_time"].tzinfo is not None


@pytest.mark.asyncio
async def test_sweep_once_uses_active_window():
    now = datetime(2026, 5, 1, 12, 0, tzinfo=timezone.utc)
    repo = FakeAnalyticsRepo()
    repo.sessions["s"] = {"session_id": "s", "last_activity": now - timedelta(seconds=301), "is_active": True}
    repo.sessions["t"] = {"session_id": "t", "last_activity": now - timedelta(seconds=299), "is_active": True}
    service = AnalyticsService(make_settings(), repo, clock=lambda: now)

    assert await sweep_once(service) == 1
    assert repo.sessions["s"]["is_active"] is False
    assert repo.sessions["t"]["is_active"] is True
