"""Project and server repository on top of the hypervisor client."""
from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from incusdash.client.base import HypervisorClient
from incusdash.models import Project, Server

logger = logging.getLogger("incusdash.client.projects")


class ProjectRepository:
    """Typed project/server calls. Every call is a fresh round trip."""

    def __init__(self, client: HypervisorClient):
        self.client = client

    async def list_servers(self, project_id: int | str | None = None) -> list[Server]:
        """Instances with nested detail, optionally scoped to a project."""
        data = await self.client.call(
            "/instances", query={"project": project_id, "recursion": 2},
        )
        return [Server.model_validate(item) for item in _records(data)]

    async def list_projects(self, project_id: int | str | None = None) -> list[Project]:
        """Project records at shallow detail.

        Note: this reads the ``/instances`` collection, not ``/projects``.
        Records without an integer ``id`` are skipped.
        """
        data = await self.client.call(
            "/instances", query={"project": project_id, "recursion": 1},
        )
        projects: list[Project] = []
        for item in _records(data):
            try:
                projects.append(Project.model_validate(item))
            except ValidationError:
                logger.debug("Skipping record that is not a project: %r", item)
        return projects

    async def get_project(self, project_id: int) -> Project | None:
        for project in await self.list_projects(project_id):
            if project.id == project_id:
                return project
        return None

    async def rename_project(self, project_id: int, name: str) -> None:
        await self.client.call(f"/projects/{project_id}", method="POST", body={"name": name})

    async def set_project_description(self, project_id: int, description: str) -> None:
        await self.client.call(
            f"/projects/{project_id}", method="PATCH", body={"description": description},
        )

    async def delete_project(self, project_id: int) -> None:
        await self.client.call(f"/projects/{project_id}", method="DELETE")


def _records(data: Any) -> list[Any]:
    """Normalise a collection payload into a list of records."""
    if data is None:
        return []
    if isinstance(data, list):
        return [item for item in data if isinstance(item, dict)]
    if isinstance(data, dict):
        return [data]
    return []
