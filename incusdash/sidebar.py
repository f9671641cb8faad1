"""Sidebar project list."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from incusdash.models import Project

GROUP_LABEL = "Projects"
NEW_PROJECT_LABEL = "Create new project"


@dataclass(frozen=True)
class NavEntry:
    label: str
    href: str
    is_action: bool = False


class ProjectListView:
    """Navigation entries for known projects, in the order given."""

    def __init__(self, projects: Iterable[Project], dashboard_root: str = "/dashboard"):
        self.projects = list(projects)
        self.dashboard_root = dashboard_root.rstrip("/")

    def entries(self) -> list[NavEntry]:
        items = [
            NavEntry(label=p.title, href=f"{self.dashboard_root}/{p.id}")
            for p in self.projects
        ]
        items.append(NavEntry(
            label=NEW_PROJECT_LABEL,
            href=f"{self.dashboard_root}/projects/new",
            is_action=True,
        ))
        return items

    def render(self) -> str:
        lines = [GROUP_LABEL]
        for entry in self.entries():
            marker = "+" if entry.is_action else "-"
            lines.append(f"  {marker} {entry.label:<30s} {entry.href}")
        return "\n".join(lines)
