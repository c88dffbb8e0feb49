"""
Board view model and terminal rendering.

build_board_view() is a pure function of a snapshot and a sprint filter;
render_board() draws the result with rich.
"""

from dataclasses import dataclass, field

from rich.columns import Columns
from rich.console import Group
from rich.panel import Panel
from rich.text import Text

from sprintboard.board.grouping import UNASSIGNED, SprintGroupingIndex
from sprintboard.lib.status import COLUMNS, normalize_status
from sprintboard.lib.types import ProjectSnapshot, Task

FILTER_ALL = "all"
FILTER_UNASSIGNED = "unassigned"

UNASSIGNED_TITLE = "Unassigned"


@dataclass
class SprintSection:
    """Collapsible group of cards under a sprint header."""
    sprint_id: str | None
    title: str
    tasks: list[Task]
    collapsed: bool = False


@dataclass
class ColumnView:
    id: str
    title: str
    tasks: list[Task] = field(default_factory=list)
    sections: list[SprintSection] = field(default_factory=list)

    @property
    def nested(self) -> bool:
        return bool(self.sections)

    @property
    def count(self) -> int:
        return len(self.tasks)


def _bucket_for_filter(sprint_filter: str) -> str | None:
    return UNASSIGNED if sprint_filter == FILTER_UNASSIGNED else sprint_filter


def build_board_view(
    snapshot: ProjectSnapshot,
    sprint_filter: str = FILTER_ALL,
    collapsed: set | None = None,
) -> list[ColumnView]:
    """Lay out the three columns for a sprint filter.

    With filter "all" and at least one sprint, each column nests its cards
    under sprint headers (sprint list order, only sprints with cards in
    that column) followed by an unassigned header. Any other filter gives
    a flat list of that one bucket.
    """
    collapsed = collapsed or set()
    index = SprintGroupingIndex(snapshot.stories, snapshot.tasks, snapshot.sprints)

    if sprint_filter == FILTER_ALL:
        candidates = list(snapshot.tasks)
    else:
        candidates = index.tasks_for(_bucket_for_filter(sprint_filter))

    nest = sprint_filter == FILTER_ALL and bool(snapshot.sprints)

    views = []
    for column in COLUMNS:
        column_tasks = [t for t in candidates if normalize_status(t.status) == column.status]
        view = ColumnView(id=column.id, title=column.title, tasks=column_tasks)

        if nest:
            by_sprint: dict[str | None, list[Task]] = {}
            for task in column_tasks:
                by_sprint.setdefault(index.sprint_for(task), []).append(task)

            for sprint in snapshot.sprints:
                if by_sprint.get(sprint.id):
                    view.sections.append(SprintSection(
                        sprint_id=sprint.id,
                        title=sprint.title,
                        tasks=by_sprint[sprint.id],
                        collapsed=sprint.id in collapsed,
                    ))
            if by_sprint.get(UNASSIGNED):
                view.sections.append(SprintSection(
                    sprint_id=UNASSIGNED,
                    title=UNASSIGNED_TITLE,
                    tasks=by_sprint[UNASSIGNED],
                    collapsed=FILTER_UNASSIGNED in collapsed,
                ))

        views.append(view)
    return views


def _card(task: Task) -> Text:
    text = Text()
    text.append(f"{task.title}", style="bold")
    if task.ai_generated:
        text.append(" *", style="magenta")
    text.append(f"\n  {task.id} | {task.priority or '-'} | {task.estimated_hours}h", style="dim")
    if task.assigned_to:
        text.append(f" | @{task.assigned_to}", style="dim")
    return text


def render_column(view: ColumnView, hover: bool = False) -> Panel:
    """Render one column as a rich panel."""
    parts = []
    if view.nested:
        for section in view.sections:
            marker = "+" if section.collapsed else "-"
            parts.append(Text(f"{marker} {section.title} ({len(section.tasks)})", style="cyan"))
            if not section.collapsed:
                parts.extend(_card(t) for t in section.tasks)
    else:
        parts.extend(_card(t) for t in view.tasks)

    if not parts:
        parts.append(Text("No tasks", style="dim italic"))

    return Panel(
        Group(*parts),
        title=f"{view.title} ({view.count})",
        border_style="green" if hover else "white",
    )


def render_board(views: list[ColumnView], hover_column: str | None = None) -> Columns:
    """Render all columns side by side."""
    return Columns(
        [render_column(v, hover=(v.id == hover_column)) for v in views],
        equal=True,
        expand=True,
    )
