import asyncio
import json

import pytest
from fastapi.testclient import TestClient

from vodcollect.database import Database
from vodcollect.main import create_app
from vodcollect.services import build_services

from conftest import FakeClient, add_binding, add_source, add_video, vod_item, vod_page

API = "http://api.test/provide/vod"


async def _yield_sleep(seconds):
    await asyncio.sleep(min(seconds, 0.01))


@pytest.fixture
def remote():
    return FakeClient()


@pytest.fixture
def api(remote, tmp_path):
    # Background tasks and requests overlap, so each needs its own connection
    database = Database(f"sqlite+aiosqlite:///{tmp_path / 'catalog.db'}")
    services = build_services(database, remote, sleep=_yield_sleep)
    app = create_app(services=services, create_schema=True)
    with TestClient(app) as client:
        client.services = services
        yield client


def _poll(client, path, key="progress"):
    for _ in range(200):
        body = client.get(path).json()
        if body[key]["status"] != "running":
            return body[key]
        client.portal.call(asyncio.sleep, 0.01)
    return body[key]


def test_health(api):
    response = api.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_collect_source_end_to_end(api, remote):
    db = api.services.database
    source = api.portal.call(add_source, db)
    api.portal.call(add_binding, db)
    remote.set(f"{API}?ac=detail&pg=1", vod_page([vod_item("A"), vod_item("B")]))

    response = api.post(f"/admin/collections/{source.id}/collect")
    assert response.status_code == 200
    task_id = response.json()["task_id"]

    progress = _poll(api, f"/admin/collect/progress/{task_id}")
    assert progress["status"] == "completed"
    assert progress["success"] == 2
    assert api.get("/admin/collect/running-tasks").json()["tasks"] == []


def test_collect_with_hours_body(api, remote):
    source = api.portal.call(add_source, api.services.database)
    remote.set(f"{API}?ac=detail&h=12&pg=1", vod_page([]))

    task_id = api.post(f"/admin/collections/{source.id}/collect", json={"hours": 12}).json()["task_id"]

    assert _poll(api, f"/admin/collect/progress/{task_id}")["status"] == "completed"
    assert f"{API}?ac=detail&h=12&pg=1" in remote.calls


def test_collect_missing_source_is_404(api):
    response = api.post("/admin/collections/999/collect")
    assert response.status_code == 404
    assert response.json()["success"] is False


def test_unknown_task_progress_and_stop(api):
    progress = api.get("/admin/collect/progress/nope").json()["progress"]
    assert progress["status"] == "not_found"
    assert api.post("/admin/collect/stop/nope").status_code == 404


def test_remote_categories(api, remote):
    remote.set(f"{API}?ac=list", json.dumps({
        "code": 1,
        "list": [],
        "class": [{"type_id": 1, "type_name": "Movies", "type_pid": 0}],
    }))

    body = api.get("/admin/collect/categories", params={"url": API}).json()

    assert body["success"] is True
    assert body["categories"] == [{"type_id": "1", "type_name": "Movies", "type_pid": "0"}]


def test_remote_videos_total_pages(api, remote):
    remote.default = vod_page([vod_item("A")], total=45)

    body = api.get("/admin/collect/videos", params={"url": API, "page": 2, "limit": 20}).json()

    assert body["success"] is True
    assert body["total"] == 45
    assert body["total_pages"] == 3
    assert [v["vod_name"] for v in body["videos"]] == ["A"]


def test_remote_browse_failure_reports_message(api):
    body = api.get("/admin/collect/categories", params={"url": API}).json()
    assert body["success"] is False
    assert "Failed to fetch categories" in body["message"]


def test_schedule_lifecycle(api):
    status = api.get("/admin/scheduled-task/status").json()["status"]
    assert status["enabled"] is False
    assert status["interval_hours"] == 12

    config = api.put("/admin/scheduled-task/config", json={"enabled": False, "interval_hours": 6}).json()["config"]
    assert config == {"enabled": False, "interval_hours": 6, "next_run": None}

    started = api.post("/admin/scheduled-task/start").json()
    assert started["success"] is True

    status = api.get("/admin/scheduled-task/status").json()["status"]
    assert status["enabled"] is True
    assert status["next_run"] is not None

    api.post("/admin/scheduled-task/stop")
    status = api.get("/admin/scheduled-task/status").json()["status"]
    assert status["enabled"] is False
    assert status["next_run"] is None


def test_schedule_rejects_bad_interval(api):
    response = api.put("/admin/scheduled-task/config", json={"enabled": True, "interval_hours": 0})
    assert response.status_code == 422


def test_schedule_logs_after_cycle(api, remote):
    api.portal.call(add_source, api.services.database)
    remote.set(f"{API}?ac=detail&h=24&pg=1", vod_page([]))

    api.post("/admin/scheduled-task/start")
    for _ in range(200):
        logs = api.get("/admin/scheduled-task/logs").json()["logs"]
        if logs and logs[0]["status"] != "running":
            break
        api.portal.call(asyncio.sleep, 0.01)

    assert len(logs) == 1
    assert logs[0]["collection_name"] == "src1"
    assert logs[0]["status"] == "completed"


def test_batch_delete_source(api):
    db = api.services.database
    api.portal.call(add_video, db, "A", [
        {"source_name": "bad", "urls": []},
        {"source_name": "good", "urls": []},
    ])
    api.portal.call(add_video, db, "B", [{"source_name": "good", "urls": []}])

    response = api.post("/admin/vods/batch-delete-source", json={"source_name": "bad"})
    assert response.status_code == 200
    task_id = response.json()["task_id"]

    progress = _poll(api, f"/admin/vods/batch-delete-progress/{task_id}")
    assert progress["status"] == "completed"
    assert progress["processed"] == 2
    assert progress["modified"] == 1
    assert api.get("/admin/vods/batch-delete-running").json()["tasks"] == []


def test_batch_delete_validation_and_unknown_stop(api):
    assert api.post("/admin/vods/batch-delete-source", json={"source_name": "  "}).status_code == 422
    assert api.post("/admin/vods/batch-delete-stop/nope").status_code == 404
    assert api.get("/admin/vods/batch-delete-progress/nope").json()["progress"]["status"] == "not_found"
