import asyncio
from pathlib import Path

import httpx
import pytest
from fastapi.testclient import TestClient

from projdash.api.app import create_app
from projdash.api.deps import get_project_store
from projdash.core.project_store import ProjectStore
from projdash.db.store import SQLiteStore
from projdash.models.project import ProjectType
from tests.support.repository_helpers import FakeRepository, make_project


def _client(store: ProjectStore) -> TestClient:
    app = create_app()
    app.dependency_overrides[get_project_store] = lambda: store
    return TestClient(app)


def test_project_crud(tmp_path: Path) -> None:
    client = _client(ProjectStore(SQLiteStore(tmp_path / "projdash.db")))

    create = client.post(
        "/api/v1/projects",
        json={"project_code": "0270", "name": "Bridge", "type": "ODO"},
    )
    assert create.status_code == 201
    project_id = create.json()["project"]["id"]

    listing = client.get("/api/v1/projects")
    assert listing.status_code == 200
    assert listing.json()["count"] == 1

    fetched = client.get(f"/api/v1/projects/{project_id}")
    assert fetched.status_code == 200
    assert fetched.json()["project"]["type"] == "ODO"

    edited = client.put(
        f"/api/v1/projects/{project_id}",
        json={"project_code": "0270", "name": "Bridge II", "type": "ETI"},
    )
    assert edited.status_code == 200
    assert edited.json()["project"]["name"] == "Bridge II"

    toggled = client.post(f"/api/v1/projects/{project_id}/toggle")
    assert toggled.status_code == 200
    assert toggled.json()["project"]["checked"] is True

    unconfirmed = client.delete(f"/api/v1/projects/{project_id}")
    assert unconfirmed.status_code == 428

    deleted = client.delete(f"/api/v1/projects/{project_id}", params={"confirm": "true"})
    assert deleted.status_code == 204
    assert client.get(f"/api/v1/projects/{project_id}").status_code == 404


def test_project_listing_filters() -> None:
    repository = FakeRepository(
        [
            make_project("a", "0270", name="Bridge"),
            make_project("b", "0300", name="Tunnel", project_type=ProjectType.ODO),
        ]
    )
    with _client(ProjectStore(repository)) as client:
        by_type = client.get("/api/v1/projects", params={"type": "ODO"})
        assert [item["id"] for item in by_type.json()["items"]] == ["b"]

        by_search = client.get("/api/v1/projects", params={"search": "brid"})
        assert [item["id"] for item in by_search.json()["items"]] == ["a"]

        invalid = client.get("/api/v1/projects", params={"type": "XYZ"})
        assert invalid.status_code == 422


def test_project_errors_map_to_status_codes() -> None:
    repository = FakeRepository([make_project("a", "0270")])
    store = ProjectStore(repository)
    client = _client(store)
    assert client.post("/api/v1/projects/sync").status_code == 200

    duplicate = client.post("/api/v1/projects", json={"project_code": "0270", "name": "Other"})
    assert duplicate.status_code == 409

    blank = client.post("/api/v1/projects", json={"project_code": " ", "name": "Other"})
    assert blank.status_code == 422

    repository.fail_on.add("update_project")
    failed = client.post("/api/v1/projects/a/toggle")
    assert failed.status_code == 502
    assert client.get("/api/v1/projects").json()["error"] == "Failed to update project"
    assert store.get("a").checked is False

    assert client.post("/api/v1/projects/missing/toggle").status_code == 404


def test_reset_checks_requires_confirmation() -> None:
    repository = FakeRepository(
        [make_project("a", "0100", checked=True), make_project("b", "0200", checked=True)]
    )
    client = _client(ProjectStore(repository))
    client.post("/api/v1/projects/sync")

    assert client.post("/api/v1/projects/reset-checks").status_code == 428
    assert repository.calls.count("update_all_projects") == 0

    reset = client.post("/api/v1/projects/reset-checks", params={"confirm": "true"})
    assert reset.status_code == 200
    assert all(item["checked"] is False for item in reset.json()["items"])


def test_last_update_routes() -> None:
    repository = FakeRepository()
    client = _client(ProjectStore(repository))

    assert client.get("/api/v1/updates/last").json()["last_update"] is None

    marked = client.post("/api/v1/updates")
    assert marked.status_code == 201
    assert marked.json()["entry"]["description"] == "Manual update"
    assert client.get("/api/v1/updates/last").json()["last_update"] is not None

    assert client.delete("/api/v1/updates").status_code == 204
    assert client.get("/api/v1/updates/last").json()["last_update"] is None


def test_startup_load_failure_is_not_fatal() -> None:
    repository = FakeRepository([make_project("a", "0100")])
    repository.fail_on.update({"list_projects", "list_update_logs"})

    with _client(ProjectStore(repository)) as client:
        listing = client.get("/api/v1/projects")

    assert listing.status_code == 200
    assert listing.json()["count"] == 0
    assert listing.json()["error"] == "Failed to load projects"


@pytest.mark.asyncio
async def test_concurrent_creates_admit_one_project_code() -> None:
    repository = FakeRepository()
    repository.delay = 0.01
    store = ProjectStore(repository)
    app = create_app()
    app.dependency_overrides[get_project_store] = lambda: store
    payload = {"project_code": "0270", "name": "A"}

    async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as client:
        first, second = await asyncio.gather(
            client.post("/api/v1/projects", json=payload),
            client.post("/api/v1/projects", json=payload),
        )
        listing = await client.get("/api/v1/projects")

    assert sorted([first.status_code, second.status_code]) == [201, 409]
    assert [item["project_code"] for item in listing.json()["items"]] == ["0270"]
    assert [project.project_code for project in repository.projects.values()] == ["0270"]
