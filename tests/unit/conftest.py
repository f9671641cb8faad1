"""Shared fixtures: an in-memory Incus API behind httpx.MockTransport."""

from __future__ import annotations

import json
import re

import httpx
import pytest

from incusdash.client import HypervisorClient

_PROJECT_PATH = re.compile(r"/1\.0/projects/(\d+)")


def sync_response(metadata, status_code: int = 200) -> httpx.Response:
    return httpx.Response(status_code, json={
        "type": "sync",
        "status": "Success",
        "status_code": status_code,
        "operation": "",
        "error_code": 0,
        "error": "",
        "metadata": metadata,
    })


def error_response(status_code: int, message: str) -> httpx.Response:
    return httpx.Response(status_code, json={
        "type": "error",
        "error": message,
        "error_code": status_code,
    })


class FakeIncus:
    """Just enough of the Incus API for projects and instances."""

    def __init__(self, projects: list[dict] | None = None, servers: list[dict] | None = None):
        self.projects = {p["id"]: dict(p) for p in projects or []}
        self.servers = list(servers or [])
        self.requests: list[httpx.Request] = []
        self.failures: dict[tuple[str, str], tuple[int, str]] = {}

    def fail(self, method: str, path: str, status: int = 500, message: str = "boom") -> None:
        self.failures[(method, path)] = (status, message)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        failure = self.failures.get((request.method, path))
        if failure:
            return error_response(*failure)

        if request.method == "GET" and path == "/1.0/instances":
            project = request.url.params.get("project")
            if request.url.params.get("recursion") == "2":
                records = [
                    s for s in self.servers
                    if project is None or str(s.get("project")) == project
                ]
            else:
                records = [
                    p for p in self.projects.values()
                    if project is None or str(p["id"]) == project
                ]
            return sync_response(records)

        m = _PROJECT_PATH.fullmatch(path)
        if m:
            pid = int(m.group(1))
            if pid not in self.projects:
                return error_response(404, "Project not found")
            body = json.loads(request.content) if request.content else {}
            if request.method == "POST":
                self.projects[pid]["title"] = body["name"]
            elif request.method == "PATCH":
                self.projects[pid]["description"] = body["description"]
            elif request.method == "DELETE":
                del self.projects[pid]
            return sync_response(None)

        return error_response(404, "not found")

    def client(self) -> HypervisorClient:
        return HypervisorClient("http://incus", transport=httpx.MockTransport(self.handler))

    def calls(self, method: str | None = None, path: str | None = None) -> list[httpx.Request]:
        return [
            r for r in self.requests
            if (method is None or r.method == method)
            and (path is None or r.url.path == path)
        ]

    def mutations(self) -> list[tuple[str, str]]:
        return [(r.method, r.url.path) for r in self.requests if r.method != "GET"]


@pytest.fixture
def fake_incus() -> FakeIncus:
    return FakeIncus(
        projects=[
            {"id": 1, "title": "A", "description": ""},
            {"id": 2, "title": "Busy", "description": "has servers"},
            {"id": 3, "title": "Empty", "description": "no servers"},
        ],
        servers=[
            {"name": "web-1", "project": 2, "status": "Running", "type": "container"},
            {"name": "web-2", "project": 2, "status": "Running", "type": "container"},
            {"name": "db-1", "project": 2, "status": "Stopped", "type": "virtual-machine"},
        ],
    )
