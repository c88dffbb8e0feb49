"""
sprintboard board / move - Show the board and move tasks between columns.
"""

from rich.console import Console

from sprintboard.board.reconciler import BoardReconciler
from sprintboard.board.view import build_board_view, render_board
from sprintboard.lib.api import BackendClient, NetworkFailure
from sprintboard.lib.config import DashboardConfig
from sprintboard.lib.history import ProjectHistory
from sprintboard.lib.snapshot import load_snapshot
from sprintboard.notifications import Notifier, console_sink


def make_client(config: DashboardConfig) -> BackendClient:
    return BackendClient(config.api_url, token=config.api_token, timeout=config.api_timeout)


def cmd_board(args, config: DashboardConfig) -> int:
    """Render the three status columns for a sprint filter."""
    console = Console()
    client = make_client(config)

    try:
        snapshot = load_snapshot(client, args.project)
    except NetworkFailure as e:
        print(f"ERROR: {e}")
        return 1

    if args.sprint not in ("all", "unassigned") and not any(
        s.id == args.sprint for s in snapshot.sprints
    ):
        print(f"ERROR: Sprint '{args.sprint}' not found in project {args.project}")
        return 1

    title = snapshot.name or f"Project {snapshot.project_id}"
    console.print(f"[bold]{title}[/bold]  (sprint: {args.sprint})")
    console.print(render_board(build_board_view(snapshot, args.sprint)))
    return 0


def cmd_move(args, config: DashboardConfig) -> int:
    """Move a task to another column, the same way a drag and drop does."""
    console = Console()
    client = make_client(config)

    try:
        snapshot = load_snapshot(client, args.project)
    except NetworkFailure as e:
        print(f"ERROR: {e}")
        return 1

    notifier = Notifier(sink=console_sink(console), desktop=config.desktop_notify)
    reconciler = BoardReconciler(
        client,
        snapshot,
        notifier,
        history=ProjectHistory(client, args.project, config.user_id),
    )

    reconciler.drag_enter(args.column)
    result = reconciler.drop(args.task_id)
    return 0 if result.ok else 1
