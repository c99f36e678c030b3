import httpx
import pytest
from httpx import ASGITransport

from timemaster.interfaces.api import create_app
from timemaster.interfaces.commands import TaskCommands


@pytest.fixture()
def client(commands: TaskCommands) -> httpx.AsyncClient:
    app = create_app(commands)
    return httpx.AsyncClient(transport=ASGITransport(app=app), base_url="http://test")


async def make_task(c: httpx.AsyncClient, **fields) -> dict:
    r = await c.post("/api/tasks", json={"name": "Read", "kind": "once", "target": 2, **fields})
    assert r.status_code == 201, r.text
    return r.json()


@pytest.mark.asyncio
async def test_root_reports_name(client: httpx.AsyncClient) -> None:
    async with client as c:
        r = await c.get("/")
        assert r.status_code == 200
        assert r.json()["name"] == "timemaster"


@pytest.mark.asyncio
async def test_task_lifecycle_over_http(client: httpx.AsyncClient) -> None:
    async with client as c:
        task = await make_task(c)
        assert task["status"] == "active"
        assert task["progress"] == 0

        r = await c.post(f"/api/tasks/{task['id']}/progress")
        assert r.json()["progress"] == 1
        r = await c.post(f"/api/tasks/{task['id']}/progress")
        assert r.json()["status"] == "completed"

        r = await c.post(f"/api/tasks/{task['id']}/archive")
        assert r.json()["status"] == "archived"
        r = await c.post(f"/api/tasks/{task['id']}/reopen")
        assert r.json()["status"] == "active"
        assert r.json()["progress"] == 2

        r = await c.put(f"/api/tasks/{task['id']}", json={"name": "Read more"})
        assert r.status_code == 200
        assert r.json()["name"] == "Read more"

        r = await c.get(f"/api/tasks/{task['id']}")
        assert r.json()["name"] == "Read more"

        r = await c.delete(f"/api/tasks/{task['id']}")
        assert r.status_code == 204
        r = await c.get("/api/tasks")
        assert r.json() == []


@pytest.mark.asyncio
async def test_list_filters_and_orders(client: httpx.AsyncClient) -> None:
    async with client as c:
        first = await make_task(c, name="first")
        await make_task(c, name="second")
        await c.post(f"/api/tasks/{first['id']}/progress")

        r = await c.get("/api/tasks")
        assert [t["name"] for t in r.json()] == ["first", "second"]

        r = await c.get("/api/tasks", params={"status": "archived"})
        assert r.json() == []

        r = await c.get("/api/tasks", params={"status": "finished"})
        assert r.status_code == 422
        assert r.json()["error"] == "validation_error"


@pytest.mark.asyncio
async def test_front_end_spellings(client: httpx.AsyncClient) -> None:
    async with client as c:
        task = await make_task(
            c, kind=None, type="long_term", target=30, dateRange=["2025-01-01", "2025-06-30"]
        )
        assert task["kind"] == "long_term"
        assert (task["start_date"], task["end_date"]) == ("2025-01-01", "2025-06-30")

        cycle = await make_task(c, kind="cycle", repeat="weekly", target=1)
        assert cycle["repeat_rule"] == "weekly"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("method", "path", "body", "status", "error"),
    [
        ("post", "/api/tasks/missing/progress", None, 404, "not_found"),
        ("put", "/api/tasks/missing", {"name": "x"}, 404, "not_found"),
        ("delete", "/api/tasks/missing", None, 404, "not_found"),
        ("post", "/api/tasks", {"name": "", "kind": "once"}, 422, "validation_error"),
        ("post", "/api/tasks", {"name": "Gym", "kind": "cycle"}, 422, "validation_error"),
        ("post", "/api/tasks", {"name": "Read", "kind": "once", "target": "many"}, 422, "validation_error"),
    ],
)
async def test_error_bodies(client, method, path, body, status, error) -> None:
    async with client as c:
        kwargs = {"json": body} if body is not None else {}
        r = await c.request(method.upper(), path, **kwargs)
        assert r.status_code == status
        assert r.json()["error"] == error
        assert r.json()["detail"]


@pytest.mark.asyncio
async def test_conflicts_are_409(client: httpx.AsyncClient) -> None:
    async with client as c:
        task = await make_task(c)

        r = await c.put(f"/api/tasks/{task['id']}", json={"kind": "cycle", "repeat": "daily"})
        assert r.status_code == 409
        assert r.json()["error"] == "immutable_field"

        r = await c.post(f"/api/tasks/{task['id']}/reopen")
        assert r.status_code == 409
        assert r.json()["error"] == "illegal_transition"

        r = await c.put(f"/api/tasks/{task['id']}", json={"progress": 2})
        assert r.status_code == 422


@pytest.mark.asyncio
async def test_stats_and_import(client: httpx.AsyncClient) -> None:
    async with client as c:
        r = await c.post(
            "/api/tasks/import",
            json={
                "tasks": [
                    {"name": "A", "kind": "once", "target": 1, "progress": 1},
                    {"name": "B", "kind": "once"},
                    {"name": "C", "kind": "cycle"},
                ]
            },
        )
        assert r.status_code == 200
        report = r.json()
        assert len(report["created"]) == 2
        assert report["failed"][0]["index"] == 2

        r = await c.get("/api/tasks/stats")
        assert r.json() == {
            "active": 1,
            "completed": 1,
            "archived": 0,
            "total": 2,
            "completion_rate": 50,
        }
