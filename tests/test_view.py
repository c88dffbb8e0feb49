"""Tests for sprintboard.board.view module."""

from rich.console import Console

from sprintboard.board.view import (
    UNASSIGNED_TITLE,
    build_board_view,
    render_board,
)
from sprintboard.lib.types import ProjectSnapshot, Sprint, Task, UserStory


def make_snapshot(with_sprints=True):
    sprints = [Sprint(id="sp1", title="Sprint 1"), Sprint(id="sp2", title="Sprint 2")]
    stories = [
        UserStory(id="s1", title="Login", sprint_id="sp1"),
        UserStory(id="s2", title="Checkout", sprint_id="sp2"),
        UserStory(id="s3", title="Reports"),
    ]
    tasks = [
        Task(id="t1", title="Login form", status="TODO", user_story_id="s1"),
        Task(id="t2", title="Payment API", status="in-progress", user_story_id="s2"),
        Task(id="t3", title="Export CSV", status="pending", user_story_id="s3"),
        Task(id="t4", title="Cart page", status="TODO", user_story_id="s2"),
        Task(id="t5", title="Login tests", status="completed", user_story_id="s1"),
        Task(id="t6", title="Odd status", status="blocked"),
    ]
    return ProjectSnapshot(
        project_id="p1",
        tasks=tasks,
        stories=stories,
        sprints=sprints if with_sprints else [],
    )


def column(views, column_id):
    return next(v for v in views if v.id == column_id)


class TestBuildBoardView:
    def test_columns_by_normalized_status(self):
        views = build_board_view(make_snapshot())
        assert [v.id for v in views] == ["todo", "in_progress", "done"]
        assert [t.id for t in column(views, "todo").tasks] == ["t1", "t3", "t4", "t6"]
        assert [t.id for t in column(views, "in_progress").tasks] == ["t2"]
        assert [t.id for t in column(views, "done").tasks] == ["t5"]

    def test_all_filter_nests_by_sprint_then_unassigned(self):
        views = build_board_view(make_snapshot(), "all")
        todo = column(views, "todo")

        assert todo.nested
        assert [s.title for s in todo.sections] == ["Sprint 1", "Sprint 2", UNASSIGNED_TITLE]
        assert [t.id for t in todo.sections[0].tasks] == ["t1"]
        assert [t.id for t in todo.sections[1].tasks] == ["t4"]
        assert [t.id for t in todo.sections[2].tasks] == ["t3", "t6"]

    def test_sections_only_for_sprints_with_cards(self):
        views = build_board_view(make_snapshot(), "all")
        done = column(views, "done")
        assert [s.sprint_id for s in done.sections] == ["sp1"]

    def test_no_nesting_without_sprints(self):
        views = build_board_view(make_snapshot(with_sprints=False), "all")
        assert not any(v.nested for v in views)
        assert column(views, "todo").count == 4

    def test_sprint_filter_is_flat(self):
        views = build_board_view(make_snapshot(), "sp2")
        assert not any(v.nested for v in views)
        assert [t.id for t in column(views, "todo").tasks] == ["t4"]
        assert [t.id for t in column(views, "in_progress").tasks] == ["t2"]
        assert column(views, "done").tasks == []

    def test_unassigned_filter(self):
        views = build_board_view(make_snapshot(), "unassigned")
        assert [t.id for t in column(views, "todo").tasks] == ["t3", "t6"]

    def test_collapsed_sections(self):
        views = build_board_view(make_snapshot(), "all", collapsed={"sp1"})
        todo = column(views, "todo")
        assert todo.sections[0].collapsed
        assert not todo.sections[1].collapsed


class TestRenderBoard:
    def test_renders_titles_and_cards(self):
        console = Console(record=True, width=160)
        console.print(render_board(build_board_view(make_snapshot())))
        output = console.export_text()

        assert "To Do" in output
        assert "In Progress" in output
        assert "Sprint 1" in output
        assert "Payment API" in output

    def test_collapsed_section_hides_cards(self):
        console = Console(record=True, width=160)
        views = build_board_view(make_snapshot(), "all", collapsed={"sp2"})
        console.print(render_board(views))
        output = console.export_text()

        assert "Sprint 2" in output
        assert "Cart page" not in output
