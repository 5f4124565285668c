from conftest import StubProvider, make_settings, stub_registry

from svc_teammate.domain.enums import ProviderName


def test_health_fully_configured(harness):
    resp = harness.client.get("/api/health")

    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "healthy"
    assert body["defaultProvider"] == "flux"
    assert body["configuration"]["isValid"] is True
    assert body["configuration"]["missingVars"] == []
    assert body["services"] == {
        "database": True, "flux": True, "ideogram": True, "imagen": True, "gemini": True, "qwen": True,
    }


def test_health_degraded_without_database(make_harness):
    h = make_harness(settings=make_settings(DATABASE_URL="", FAL_KEY=""))

    body = h.client.get("/api/health").json()

    assert body["status"] == "degraded"
    assert body["defaultProvider"] == "ideogram"
    assert body["services"]["database"] is False
    assert body["services"]["flux"] is False
    assert body["configuration"]["missingVars"] == ["DATABASE_URL"]


def test_request_id_is_echoed(harness):
    resp = harness.client.get("/api/health", headers={"X-Request-Id": "abc-123"})
    assert resp.headers["X-Request-Id"] == "abc-123"


def test_list_categories(harness):
    resp = harness.client.get("/api/categories")

    assert resp.status_code == 200
    data = resp.json()["data"]
    assert len(data) == 10
    business = next(c for c in data if c["id"] == "business")
    assert business["name"] == "Business & Entrepreneurship"
    assert "Marketing" in business["suggestedSkills"]
    assert business["commonGoals"]


def test_single_category(harness):
    resp = harness.client.get("/api/categories/academic")

    assert resp.status_code == 200
    assert resp.json()["data"]["id"] == "academic"


def test_unknown_category(harness):
    resp = harness.client.get("/api/categories/astrology")

    assert resp.status_code == 404
    assert resp.json() == {"success": False, "error": "Category not found"}


def test_health_reports_provider_adapters(make_harness):
    class Unhealthy(StubProvider):
        def health_check(self) -> bool:
            return False

    h = make_harness(registry=stub_registry(qwen=Unhealthy(ProviderName.qwen)))

    providers = h.client.get("/api/health").json()["providers"]

    assert providers["qwen"] is False
    assert providers["flux"] is True
    assert set(providers) == {p.value for p in ProviderName}


def test_health_without_registry_reports_no_adapters(harness):
    del harness.app.state.providers

    body = harness.client.get("/api/health").json()

    assert body["providers"] == {}
