"""
Board reconciler: turns a drag-and-drop gesture into a validated backend
status update plus a view refresh.

The board never moves a card eagerly. On drop it fetches the authoritative
task, checks that every field the update endpoint requires is present,
sends the full record back with only the status changed, and asks the
caller to refresh. Column membership then follows from the refreshed
status.
"""

import logging
import threading
from dataclasses import dataclass
from typing import Callable

from sprintboard.board.fsm import DragFSM
from sprintboard.lib.api import BackendClient, NetworkFailure
from sprintboard.lib.history import ProjectHistory
from sprintboard.lib.status import (
    STATUS_LABELS,
    column_status,
    normalize_status,
    to_backend_status,
)
from sprintboard.lib.types import ProjectSnapshot
from sprintboard.notifications import Notifier

logger = logging.getLogger(__name__)

# Fields the update endpoint rejects the request without
REQUIRED_TASK_FIELDS = ("title", "description", "estimatedHours", "priority")

GENERIC_UPDATE_ERROR = "Could not update the task"


class ReconcileError(Exception):
    """Base for board mutation failures."""


class TaskNotFound(ReconcileError):
    def __init__(self, task_id: str):
        self.task_id = task_id
        super().__init__(f"Task {task_id} is not on this board")


class IncompleteRecord(ReconcileError):
    def __init__(self, task_id: str, missing: list[str]):
        self.task_id = task_id
        self.missing = missing
        super().__init__(
            f"Task {task_id} has incomplete data (missing: {', '.join(missing)})"
        )


class UnknownColumn(ReconcileError):
    def __init__(self, column_id: str):
        self.column_id = column_id
        super().__init__(f"Unknown board column '{column_id}'")


class Superseded(ReconcileError):
    """A newer drop on the same task replaced this one."""

    def __init__(self, task_id: str):
        self.task_id = task_id
        super().__init__(f"Status change for task {task_id} was superseded by a newer move")


@dataclass
class ReconcileResult:
    ok: bool
    task_id: str
    status: str | None = None      # canonical target status
    error: str | None = None


def missing_fields(record) -> list[str]:
    """Return required update fields that are absent or empty.

    A body that is not a JSON object is missing all of them.
    """
    if not isinstance(record, dict):
        return list(REQUIRED_TASK_FIELDS)
    missing = []
    for name in REQUIRED_TASK_FIELDS:
        value = record.get(name)
        if value is None or (isinstance(value, str) and not value.strip()):
            missing.append(name)
    return missing


def build_update_payload(task_id: str, record: dict, status: str) -> dict:
    """Full update body from a fetched record with only status overridden."""
    assigned = record.get("assignedTo")
    return {
        "id": task_id,
        "title": str(record["title"]).strip(),
        "description": str(record["description"]).strip(),
        "estimatedHours": record["estimatedHours"],
        "status": to_backend_status(status),
        "priority": str(record["priority"]),
        "assignedTo": str(assigned) if assigned not in (None, "") else None,
    }


class BoardReconciler:
    """Owns the drag interaction and the status-mutation side effect.

    The snapshot is read-only here; on_refresh is called after every
    successful mutation so the owner can re-fetch and hand in a new one.
    """

    def __init__(
        self,
        client: BackendClient,
        snapshot: ProjectSnapshot,
        notifier: Notifier,
        on_refresh: Callable[[], None] | None = None,
        history: ProjectHistory | None = None,
    ):
        self.client = client
        self.snapshot = snapshot
        self.notifier = notifier
        self.on_refresh = on_refresh
        self.history = history
        self.fsm = DragFSM()

        self._lock = threading.Lock()
        self._generations: dict[str, int] = {}

    def set_snapshot(self, snapshot: ProjectSnapshot) -> None:
        """Swap in freshly fetched project data."""
        self.snapshot = snapshot

    # Drag interaction

    def drag_enter(self, column_id: str) -> None:
        self.fsm.drag_enter(column_id=column_id)

    def drag_leave(self) -> None:
        if self.fsm.can("drag_leave"):
            self.fsm.drag_leave()

    def drop(self, task_id: str, column_id: str | None = None) -> ReconcileResult:
        """Handle a drop on the hovered column (or column_id if given).

        The state machine is back in idle afterwards whatever the outcome.
        """
        target = column_id or self.fsm.hover_column
        try:
            if not task_id or not target:
                return ReconcileResult(ok=False, task_id=task_id or "", error="Nothing to drop")
            return self.update_status(task_id, target)
        finally:
            if self.fsm.can("drop"):
                self.fsm.drop()
            else:
                self.fsm.reset()

    # Mutation

    def _begin(self, task_id: str) -> int:
        with self._lock:
            generation = self._generations.get(task_id, 0) + 1
            self._generations[task_id] = generation
            return generation

    def _is_current(self, task_id: str, generation: int) -> bool:
        with self._lock:
            return self._generations.get(task_id) == generation

    def update_status(self, task_id: str, column_id: str) -> ReconcileResult:
        """Move a task to the status of column_id. Never raises."""
        generation = self._begin(task_id)
        status = column_status(column_id)

        try:
            if status is None:
                raise UnknownColumn(column_id)

            task = self.snapshot.find_task(task_id)
            if task is None:
                raise TaskNotFound(task_id)

            record = self.client.get_task(task_id)
            missing = missing_fields(record)
            if missing:
                raise IncompleteRecord(task_id, missing)

            if not self._is_current(task_id, generation):
                raise Superseded(task_id)

            payload = build_update_payload(task_id, record, status)
            logger.info(f"[BOARD] Moving task {task_id} to {status}")
            self.client.update_task(task_id, payload)
        except Superseded as e:
            logger.info(f"[BOARD] {e}")
            return ReconcileResult(ok=False, task_id=task_id, status=status, error=str(e))
        except ReconcileError as e:
            logger.warning(f"[BOARD] {e}")
            self.notifier.error("Task not updated", str(e))
            return ReconcileResult(ok=False, task_id=task_id, status=status, error=str(e))
        except NetworkFailure as e:
            message = str(e) or GENERIC_UPDATE_ERROR
            logger.warning(f"[BOARD] Update of task {task_id} failed: {message}")
            self.notifier.error("Task not updated", message)
            return ReconcileResult(ok=False, task_id=task_id, status=status, error=message)

        self._record_history(task, record, status)
        self.notifier.success("Task updated", "The task status was updated")
        if self.on_refresh:
            self.on_refresh()
        return ReconcileResult(ok=True, task_id=task_id, status=status)

    def _record_history(self, task, record: dict, status: str) -> None:
        if not self.history:
            return
        old_status = normalize_status(record.get("status", task.status))
        title = record.get("title") or task.title
        self.history.log_change(
            "task_status_changed",
            "task",
            task.id,
            f"Task status changed: {title}",
            {
                "title": title,
                "oldValue": STATUS_LABELS[old_status],
                "newValue": STATUS_LABELS[status],
            },
        )
