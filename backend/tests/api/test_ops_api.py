import pytest

from clubhub.main import create_app
from clubhub.obs.middleware import ObservabilityMiddleware


@pytest.mark.asyncio
async def test_health_endpoints(api_client):
    resp = await api_client.get("/health/live")
    assert resp.json() == {"status": "ok"}
    resp = await api_client.get("/health/ready")
    assert resp.status_code == 200
    sync = resp.json()["checks"]["sync"]
    assert sync["loaded"] is True
    assert sync["source"] == "default"


@pytest.mark.asyncio
async def test_metrics_require_admin(api_client, admin_headers):
    resp = await api_client.get("/metrics")
    assert resp.status_code == 403
    await api_client.get("/health/live")
    resp = await api_client.get("/metrics", headers=admin_headers)
    assert resp.status_code == 200
    assert "clubhub_http_requests_total" in resp.text


def _has_observability(app) -> bool:
    return any(entry.cls is ObservabilityMiddleware for entry in app.user_middleware)


def test_observability_follows_app_settings(test_settings):
    disabled = create_app(test_settings.model_copy(update={"obs_enabled": False}))
    assert not _has_observability(disabled)
    enabled = create_app(test_settings.model_copy(update={"obs_enabled": True}))
    assert _has_observability(enabled)
