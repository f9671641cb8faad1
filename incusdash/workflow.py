"""Project settings workflow -- rename, describe and delete a project."""
from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone

from incusdash.client.projects import ProjectRepository
from incusdash.errors import ErrorKind, RemoteCallError, WorkflowError
from incusdash.models import (
    EditableProjectForm,
    Notification,
    OperationResult,
    Project,
    Server,
    StateTransition,
    WorkflowState,
)
from incusdash.notifications import Navigator, Notifier

logger = logging.getLogger("incusdash.workflow")

EMPTY_INPUT_MESSAGE = "Insert a name or description to save changes."
SAVE_SUCCESS_MESSAGE = "Updated project successfully!"
SAVE_FAILED_MESSAGE = "Failed to save changes."
HAS_DEPENDENTS_MESSAGE = "Cannot delete project. Please delete all servers first."
DELETE_SUCCESS_MESSAGE = "Successfully deleted project."
DELETE_FAILED_MESSAGE = "An error occurred while deleting the project."


class ProjectSettingsWorkflow:
    """Drives the settings panel of one project.

    ``save`` and ``delete`` share a single in-progress gate: while one is in
    flight, further calls are suppressed without touching the network.  Each
    operation that runs emits exactly one notification, unless the view was
    closed before the response arrived, in which case the response is
    dropped.
    """

    def __init__(
        self,
        repository: ProjectRepository,
        notifier: Notifier,
        navigator: Navigator,
        *,
        dashboard_root: str = "/dashboard",
    ):
        self.repository = repository
        self.notifier = notifier
        self.navigator = navigator
        self.dashboard_root = dashboard_root

        self.project: Project | None = None
        self.servers: list[Server] = []
        self.form = EditableProjectForm()

        self.state = WorkflowState.IDLE
        self.transitions: list[StateTransition] = []
        self._in_progress = False
        self._closed = False

    # ── View lifecycle ────────────────────────────────────────────────

    @property
    def in_progress(self) -> bool:
        """True while a save or delete is waiting on the backend."""
        return self._in_progress

    @property
    def server_count(self) -> int:
        return len(self.servers)

    @property
    def closed(self) -> bool:
        return self._closed

    async def load(self, project_id: int) -> bool:
        """Fetch the project and its servers, and reset the form.

        Returns False when the backend has no such project.
        """
        project, servers = await self._fetch(project_id)
        self._closed = False
        self._apply(project, servers)
        logger.info(
            "Loaded project id=%s found=%s servers=%d",
            project_id, project is not None, self.server_count,
        )
        return project is not None

    async def _fetch(self, project_id: int) -> tuple[Project | None, list[Server]]:
        """Project and servers side by side; if one fails the other is cancelled."""
        tasks = [
            asyncio.ensure_future(self.repository.get_project(project_id)),
            asyncio.ensure_future(self.repository.list_servers(project_id)),
        ]
        try:
            project, servers = await asyncio.gather(*tasks)
        except BaseException:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise
        return project, servers

    def close(self) -> None:
        """The user navigated away. Late responses are ignored from now on."""
        self._closed = True
        self.form = EditableProjectForm()
        logger.debug("Settings view closed")

    def _apply(self, project: Project | None, servers: list[Server]) -> None:
        self.project = project
        self.servers = list(servers) if project is not None else []
        self.form = (
            EditableProjectForm.from_project(project) if project is not None
            else EditableProjectForm()
        )

    def _require_project(self) -> Project:
        if self.project is None:
            raise WorkflowError("No project loaded")
        return self.project

    def _set_state(self, new_state: WorkflowState) -> None:
        now = datetime.now(timezone.utc).isoformat()
        self.transitions.append(StateTransition(state=new_state.value, entered_at=now))
        self.state = new_state
        logger.debug("State -> %s", new_state.value)

    # ── Save ─────────────────────────────────────────────────────────

    async def save(self) -> OperationResult:
        """Rename then re-describe the project from the current form."""
        project = self._require_project()
        if self._in_progress:
            logger.debug("Save suppressed: operation in progress")
            return OperationResult(operation="save", status="suppressed")

        self._in_progress = True
        try:
            return await self._save(project)
        finally:
            self._in_progress = False
            self._set_state(WorkflowState.IDLE)

    async def _save(self, project: Project) -> OperationResult:
        self._set_state(WorkflowState.VALIDATING)
        form = self.form.model_copy()
        if form.is_empty():
            return self._fail("save", project, ErrorKind.EMPTY_INPUT, EMPTY_INPUT_MESSAGE)

        self._set_state(WorkflowState.SUBMITTING)
        logger.info("Saving project id=%s", project.id)
        step = "rename"
        try:
            await self.repository.rename_project(project.id, form.name)
            step = "describe"
            await self.repository.set_project_description(project.id, form.description)
        except RemoteCallError as exc:
            logger.warning(
                "Save failed project id=%s step=%s status=%s: %s",
                project.id, step, exc.status, exc.message,
            )
            if self._closed:
                return self._stale("save", project)
            return self._fail(
                "save", project, ErrorKind.REMOTE_CALL, SAVE_FAILED_MESSAGE,
                failed_step=step, detail=exc.message,
            )

        if self._closed:
            return self._stale("save", project)

        self._set_state(WorkflowState.SUCCESS)
        self._notify("success", SAVE_SUCCESS_MESSAGE, "save", project)
        await self._refresh(project.id)
        return OperationResult(operation="save", status="success", message=SAVE_SUCCESS_MESSAGE)

    async def _refresh(self, project_id: int) -> None:
        """Re-read the project after a write. The backend is authoritative."""
        try:
            project, servers = await self._fetch(project_id)
        except RemoteCallError as exc:
            logger.warning("Refresh after save failed project id=%s: %s", project_id, exc.message)
            return
        if self._closed:
            return
        self._apply(project, servers)
        self.navigator.refresh()

    # ── Delete ───────────────────────────────────────────────────────

    async def delete(self) -> OperationResult:
        """Delete the project if it has no servers, then leave its view."""
        project = self._require_project()
        if self._in_progress:
            logger.debug("Delete suppressed: operation in progress")
            return OperationResult(operation="delete", status="suppressed")

        self._in_progress = True
        try:
            return await self._delete(project)
        finally:
            self._in_progress = False
            self._set_state(WorkflowState.IDLE)

    async def _delete(self, project: Project) -> OperationResult:
        self._set_state(WorkflowState.VALIDATING)
        if self.servers:
            logger.info(
                "Refusing to delete project id=%s: %d servers attached",
                project.id, self.server_count,
            )
            return self._fail("delete", project, ErrorKind.HAS_DEPENDENTS, HAS_DEPENDENTS_MESSAGE)

        self._set_state(WorkflowState.DELETING)
        logger.info("Deleting project id=%s", project.id)
        try:
            await self.repository.delete_project(project.id)
        except RemoteCallError as exc:
            logger.warning(
                "Delete failed project id=%s status=%s: %s",
                project.id, exc.status, exc.message,
            )
            if self._closed:
                return self._stale("delete", project)
            return self._fail(
                "delete", project, ErrorKind.REMOTE_CALL, DELETE_FAILED_MESSAGE,
                failed_step="delete", detail=exc.message,
            )

        if self._closed:
            return self._stale("delete", project)

        self._set_state(WorkflowState.SUCCESS)
        self._notify("success", DELETE_SUCCESS_MESSAGE, "delete", project)
        self._apply(None, [])
        self.navigator.push(self.dashboard_root)
        self.navigator.refresh()
        return OperationResult(operation="delete", status="success", message=DELETE_SUCCESS_MESSAGE)

    # ── Outcomes ─────────────────────────────────────────────────────

    def _notify(self, level: str, message: str, operation: str, project: Project, detail: str = "") -> None:
        self.notifier.notify(Notification(
            level=level, message=message, detail=detail,
            operation=operation, project_id=project.id,
        ))

    def _fail(
        self,
        operation: str,
        project: Project,
        kind: ErrorKind,
        message: str,
        *,
        failed_step: str | None = None,
        detail: str = "",
    ) -> OperationResult:
        self._set_state(WorkflowState.FAILED)
        self._notify("error", message, operation, project, detail=detail)
        return OperationResult(
            operation=operation, status="failed", error_kind=kind,
            failed_step=failed_step, message=message,
        )

    def _stale(self, operation: str, project: Project) -> OperationResult:
        logger.info("Ignoring late %s response for project id=%s: view closed", operation, project.id)
        return OperationResult(operation=operation, status="stale")
