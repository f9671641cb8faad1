"""Unit tests for models, notifications and navigation."""

from __future__ import annotations

from incusdash.errors import ErrorKind, RemoteCallError
from incusdash.models import EditableProjectForm, Notification, OperationResult, Project, Server
from incusdash.notifications import Navigator, NotificationCenter


# ── Models ────────────────────────────────────────────────────────────────


class TestProject:
    def test_title_falls_back_to_name(self):
        p = Project.model_validate({"id": 3, "name": "web", "config": {}})
        assert p.title == "web"
        assert p.description == ""

    def test_title_wins_over_name(self):
        p = Project.model_validate({"id": 3, "name": "web", "title": "Web Stack"})
        assert p.title == "Web Stack"

    def test_null_description(self):
        p = Project.model_validate({"id": 1, "title": "A", "description": None})
        assert p.description == ""

    def test_numeric_string_id(self):
        assert Project.model_validate({"id": "12"}).id == 12


class TestServer:
    def test_keeps_extra_fields(self):
        s = Server.model_validate({"name": "c1", "project": "default", "architecture": "x86_64"})
        assert s.project == "default"
        assert s.model_dump()["architecture"] == "x86_64"


class TestEditableProjectForm:
    def test_from_project(self):
        form = EditableProjectForm.from_project(Project(id=1, title="A", description="d"))
        assert form.name == "A"
        assert form.description == "d"

    def test_is_empty(self):
        assert EditableProjectForm().is_empty()
        assert not EditableProjectForm(name="x").is_empty()
        assert not EditableProjectForm(description="x").is_empty()


class TestOperationResult:
    def test_ok(self):
        assert OperationResult(operation="save", status="success").ok
        assert not OperationResult(
            operation="save", status="failed", error_kind=ErrorKind.EMPTY_INPUT,
        ).ok


class TestRemoteCallError:
    def test_str_includes_status(self):
        assert str(RemoteCallError(404, "missing")) == "[404] missing"
        assert str(RemoteCallError(0, "refused")) == "refused"


# ── Notifications ─────────────────────────────────────────────────────────


class TestNotificationCenter:
    def test_order_and_listeners(self):
        center = NotificationCenter()
        seen: list[Notification] = []
        center.subscribe(seen.append)
        center.success("one", project_id=1)
        center.error("two", project_id=2)
        assert [n.message for n in center.all()] == ["one", "two"]
        assert [n.message for n in seen] == ["one", "two"]
        assert [n.message for n in center.all(project_id=2)] == ["two"]
        assert center.last().level == "error"

    def test_clear(self):
        center = NotificationCenter()
        center.success("x")
        center.clear()
        assert center.all() == []
        assert center.last() is None


class TestNavigator:
    def test_push_and_refresh(self):
        refreshed: list[bool] = []
        nav = Navigator(on_refresh=lambda: refreshed.append(True))
        assert nav.current is None
        nav.push("/dashboard")
        nav.refresh()
        assert nav.current == "/dashboard"
        assert nav.refresh_count == 1
        assert refreshed == [True]
