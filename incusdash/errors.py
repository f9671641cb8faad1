"""Error taxonomy for incusdash."""
from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    """User-facing failure categories reported by the settings workflow."""

    EMPTY_INPUT = "empty_input"
    HAS_DEPENDENTS = "has_dependents"
    REMOTE_CALL = "remote_call"


class IncusDashError(Exception):
    """Base class for incusdash errors."""


class RemoteCallError(IncusDashError):
    """A hypervisor API call failed.

    ``status`` is the HTTP (or Incus ``error_code``) status; transport
    failures such as refused connections and timeouts use ``0``.
    """

    def __init__(self, status: int, message: str):
        super().__init__(f"[{status}] {message}" if status else message)
        self.status = status
        self.message = message


class WorkflowError(IncusDashError):
    """The settings workflow was driven out of order (e.g. no project loaded)."""
