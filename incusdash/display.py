"""Console output for the incusdash CLI."""
from __future__ import annotations

import json
import sys
from datetime import datetime, timezone
from typing import Any

from incusdash.models import Notification, Project, Server
from incusdash.sidebar import ProjectListView

SEPARATOR = "=" * 63
THIN_SEP = "-" * 63


class Display:
    """Formats notifications, project lists and server tables."""

    def __init__(self, output_format: str = "text", file: Any = None):
        self._fmt = output_format  # "text" or "json"
        self._file = file or sys.stdout

    def _now(self) -> str:
        return datetime.now(timezone.utc).strftime("%H:%M:%S")

    def _print(self, text: str) -> None:
        try:
            print(text, file=self._file, flush=True)
        except UnicodeEncodeError:
            encoding = getattr(self._file, "encoding", None) or "utf-8"
            safe = text.encode(encoding, errors="replace").decode(encoding, errors="replace")
            print(safe, file=self._file, flush=True)

    def _json_line(self, **kwargs: Any) -> None:
        kwargs.setdefault("ts", datetime.now(timezone.utc).isoformat())
        print(json.dumps(kwargs, default=str), file=self._file, flush=True)

    # ── Toasts ────────────────────────────────────────────────────────

    def notification(self, notif: Notification) -> None:
        if self._fmt == "json":
            self._json_line(event="notification", **notif.model_dump(exclude={"created_at"}))
            return

        mark = "[OK]" if notif.level == "success" else "[FAIL]"
        self._print(f"[{self._now()}] {mark} {notif.message}")
        if notif.detail:
            self._print(f"{'':>11s}`-- {notif.detail}")

    # ── Sidebar ───────────────────────────────────────────────────────

    def project_list(self, view: ProjectListView) -> None:
        if self._fmt == "json":
            self._json_line(
                event="projects",
                entries=[
                    {"label": e.label, "href": e.href, "is_action": e.is_action}
                    for e in view.entries()
                ],
            )
            return
        self._print(view.render())

    # ── Servers ───────────────────────────────────────────────────────

    def server_table(self, servers: list[Server]) -> None:
        if self._fmt == "json":
            self._json_line(event="servers", servers=[s.model_dump() for s in servers])
            return

        if not servers:
            self._print("No servers found.")
            return
        self._print(f"{'NAME':<24s} {'TYPE':<16s} {'STATUS':<10s} {'PROJECT'}")
        for s in servers:
            project = "" if s.project is None else str(s.project)
            self._print(f"{s.name:<24s} {s.type:<16s} {s.status:<10s} {project}")

    # ── Project Details ───────────────────────────────────────────────

    def project_details(self, project: Project | None, server_count: int = 0) -> None:
        if project is None:
            if self._fmt == "json":
                self._json_line(event="project", found=False)
            else:
                self._print("Project not found")
            return

        if self._fmt == "json":
            self._json_line(
                event="project", found=True, id=project.id, title=project.title,
                description=project.description, server_count=server_count,
            )
            return

        self._print(SEPARATOR)
        self._print(f"  Project Settings: {project.title or '(untitled)'}")
        self._print(THIN_SEP)
        self._print(f"  ID:          {project.id}")
        self._print(f"  Name:        {project.title}")
        self._print(f"  Description: {project.description}")
        self._print(f"  Servers:     {server_count}")
        self._print(SEPARATOR)
