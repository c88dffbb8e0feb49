"""
Board module for sprintboard.

Status columns, sprint grouping, and the drag-and-drop reconciler.
"""

from sprintboard.board.fsm import DragFSM
from sprintboard.board.grouping import UNASSIGNED, SprintGroupingIndex
from sprintboard.board.reconciler import (
    BoardReconciler,
    IncompleteRecord,
    ReconcileResult,
    Superseded,
    TaskNotFound,
)
from sprintboard.board.view import build_board_view, render_board

__all__ = [
    "DragFSM",
    "UNASSIGNED",
    "SprintGroupingIndex",
    "BoardReconciler",
    "IncompleteRecord",
    "ReconcileResult",
    "Superseded",
    "TaskNotFound",
    "build_board_view",
    "render_board",
]
