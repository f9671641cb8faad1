"""Pydantic models for projects, servers, workflow state and notifications."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from incusdash.errors import ErrorKind


# ── API Response Mirrors ──────────────────────────────────────────────

class Project(BaseModel):
    """A project as returned by the hypervisor. Read/edit copy only."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    id: int
    title: str = ""
    description: str = ""

    @model_validator(mode="before")
    @classmethod
    def _title_from_name(cls, data: Any) -> Any:
        if isinstance(data, dict) and data.get("title") is None and "name" in data:
            data = {**data, "title": data["name"]}
        if isinstance(data, dict) and data.get("description") is None:
            data = {**data, "description": ""}
        return data


class Server(BaseModel):
    """An instance (container or VM). Only its project association matters here."""

    model_config = ConfigDict(extra="allow")

    name: str = ""
    project: str | int | None = None
    status: str = ""
    type: str = ""


# ── Edit Session ─────────────────────────────────────────────────────

class EditableProjectForm(BaseModel):
    """Form fields for the settings panel. Lives for one edit session."""

    name: str = ""
    description: str = ""

    @classmethod
    def from_project(cls, project: Project) -> EditableProjectForm:
        return cls(name=project.title or "", description=project.description or "")

    def is_empty(self) -> bool:
        return not self.name and not self.description


# ── Workflow States ───────────────────────────────────────────────────

class WorkflowState(str, Enum):
    IDLE = "IDLE"
    VALIDATING = "VALIDATING"
    SUBMITTING = "SUBMITTING"
    DELETING = "DELETING"
    SUCCESS = "SUCCESS"
    FAILED = "FAILED"


class StateTransition(BaseModel):
    state: str
    entered_at: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())


# ── Outcomes ─────────────────────────────────────────────────────────

class OperationResult(BaseModel):
    """How a save or delete ended."""

    operation: str  # "save" or "delete"
    status: str  # "success", "failed", "suppressed", "stale"
    error_kind: ErrorKind | None = None
    failed_step: str | None = None  # "rename", "describe", "delete"
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.status == "success"


class Notification(BaseModel):
    """A toast-style message shown to the user once per operation."""

    level: str  # "success" or "error"
    message: str
    detail: str = ""
    operation: str = ""
    project_id: int | None = None
    created_at: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
