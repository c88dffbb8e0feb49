"""
Task status vocabulary for the board.

The backend stores statuses in several spellings ("pending", "TODO",
"in-progress", "completed", ...). Everything shown on the board is folded
into one of three canonical states here, and nowhere else.
"""

from dataclasses import dataclass

TODO = "todo"
IN_PROGRESS = "in_progress"
DONE = "done"

CANONICAL_STATUSES = (TODO, IN_PROGRESS, DONE)

# Aliases per canonical state. Add new backend spellings here.
STATUS_ALIASES = {
    TODO: ("pending", "to_do", "todo"),
    IN_PROGRESS: ("in_progress", "in-progress", "active"),
    DONE: ("done", "completed", "finished"),
}

_ALIAS_LOOKUP = {
    alias: canonical
    for canonical, aliases in STATUS_ALIASES.items()
    for alias in aliases
}

# Wire values the task endpoints accept on update
BACKEND_STATUS = {
    TODO: "TODO",
    IN_PROGRESS: "IN_PROGRESS",
    DONE: "DONE",
}

STATUS_LABELS = {
    TODO: "To Do",
    IN_PROGRESS: "In Progress",
    DONE: "Done",
}


@dataclass(frozen=True)
class Column:
    """A board column and the canonical status it holds."""
    id: str
    title: str
    status: str


COLUMNS = (
    Column(id=TODO, title=STATUS_LABELS[TODO], status=TODO),
    Column(id=IN_PROGRESS, title=STATUS_LABELS[IN_PROGRESS], status=IN_PROGRESS),
    Column(id=DONE, title=STATUS_LABELS[DONE], status=DONE),
)


def normalize_status(raw) -> str:
    """Map a raw backend status to todo, in_progress or done.

    Unknown, empty and non-string values fall back to todo.
    """
    if not isinstance(raw, str):
        return TODO
    return _ALIAS_LOOKUP.get(raw.strip().lower(), TODO)


def column_status(column_id: str) -> str | None:
    """Return the canonical status for a column id, or None if unknown."""
    for column in COLUMNS:
        if column.id == column_id:
            return column.status
    return None


def to_backend_status(canonical: str) -> str:
    """Return the backend spelling for a canonical status."""
    return BACKEND_STATUS[canonical]


def status_label(raw) -> str:
    """Human label for any raw status."""
    return STATUS_LABELS[normalize_status(raw)]
