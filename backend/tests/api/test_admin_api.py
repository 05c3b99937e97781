import pytest

from clubhub.domain.registry import models


@pytest.mark.asyncio
async def test_admin_routes_require_token(api_client):
    resp = await api_client.get("/admin/teachers")
    assert resp.status_code == 403
    assert resp.json()["detail"] == "forbidden"
    resp = await api_client.get("/admin/teachers", headers={"X-Admin-Token": "wrong"})
    assert resp.status_code == 403
    resp = await api_client.get("/reports/class", params={"level": "ม.1", "room": "1"})
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_teacher_management(api_client, admin_headers):
    resp = await api_client.post(
        "/admin/teachers/bulk",
        json={
            "teachers": [
                {"id": "T001", "name": "Malee", "department": models.DEPARTMENTS[0]},
                {"id": "T001", "name": "Again", "department": models.DEPARTMENTS[0]},
            ]
        },
        headers=admin_headers,
    )
    assert resp.json()["inserted"] == ["T001"]
    assert resp.json()["skipped"] == ["T001"]

    resp = await api_client.post("/admin/teachers/bulk-text", json={"text": "bad line"}, headers=admin_headers)
    assert resp.status_code == 422
    assert resp.json()["detail"] == "bulk_import_invalid"
    assert resp.json()["errors"]

    resp = await api_client.put("/admin/teachers/T001", json={"id": "T100"}, headers=admin_headers)
    assert resp.json()["record"]["id"] == "T100"

    resp = await api_client.get("/admin/teachers", params={"department": models.DEPARTMENTS[0]}, headers=admin_headers)
    assert [row["teacher"]["id"] for row in resp.json()] == ["T100"]

    resp = await api_client.delete("/admin/teachers/T100", headers=admin_headers)
    assert resp.status_code == 200
    resp = await api_client.delete("/admin/teachers/T100", headers=admin_headers)
    assert resp.status_code == 200


@pytest.mark.asyncio
async def test_announcements_and_rules(api_client, admin_headers):
    resp = await api_client.post(
        "/admin/announcements",
        json={"title": "Exam week", "content": "No meetings"},
        headers=admin_headers,
    )
    assert resp.status_code == 201
    announcement_id = resp.json()["record"]["id"]

    public = (await api_client.get("/public/announcements")).json()
    # The welcome notice is pinned, so it stays ahead of the new one.
    assert [a["title"] for a in public][1] == "Exam week"

    await api_client.post(f"/admin/announcements/{announcement_id}/hide", headers=admin_headers)
    public = (await api_client.get("/public/announcements")).json()
    assert announcement_id not in [a["id"] for a in public]

    resp = await api_client.post("/admin/announcements/missing/pin", headers=admin_headers)
    assert resp.status_code == 404
    assert resp.json()["detail"] == "announcement_not_found"

    resp = await api_client.put("/admin/settings/rules", json={"rules": ["", "  "]}, headers=admin_headers)
    assert resp.status_code == 422
    assert resp.json()["detail"] == "rules_empty"
    resp = await api_client.put("/admin/settings/rules", json={"rules": ["Be kind"]}, headers=admin_headers)
    assert resp.status_code == 200
    rules = (await api_client.get("/public/rules")).json()
    assert rules["registrationRules"] == ["Be kind"]


@pytest.mark.asyncio
async def test_class_report(api_client, admin_headers):
    resp = await api_client.get("/reports/class", params={"level": "ม.1", "room": "3"}, headers=admin_headers)
    assert resp.status_code == 200
    assert resp.json()["students"] == []
    assert resp.json()["stats"]["total"] == 0


@pytest.mark.asyncio
async def test_force_sync_writes_cache(api_client, admin_headers, test_settings):
    resp = await api_client.post("/admin/sync", headers=admin_headers)
    assert resp.status_code == 200
    assert resp.json()["ok"] is True
    assert test_settings.local_cache_path.exists()
