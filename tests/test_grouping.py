"""Tests for sprintboard.board.grouping module."""

from sprintboard.board.grouping import UNASSIGNED, SprintGroupingIndex
from sprintboard.lib.types import Sprint, Task, UserStory


def make_task(task_id, story_id=None):
    return Task(id=task_id, title=f"Task {task_id}", user_story_id=story_id)


def make_story(story_id, sprint_id=None):
    return UserStory(id=story_id, title=f"Story {story_id}", sprint_id=sprint_id)


SPRINTS = [Sprint(id="sp1", title="Sprint 1"), Sprint(id="sp2", title="Sprint 2")]


class TestStoryToSprint:
    def test_maps_story_to_its_sprint(self):
        index = SprintGroupingIndex([make_story("s1", "sp1")], [], SPRINTS)
        assert index.story_to_sprint == {"s1": "sp1"}

    def test_unknown_sprint_becomes_unassigned(self):
        index = SprintGroupingIndex([make_story("s1", "sp-gone")], [], SPRINTS)
        assert index.story_to_sprint["s1"] is UNASSIGNED

    def test_sprint_not_checked_without_sprint_list(self):
        index = SprintGroupingIndex([make_story("s1", "sp-gone")], [])
        assert index.story_to_sprint["s1"] == "sp-gone"


class TestTasksFor:
    def test_task_follows_story_into_sprint(self):
        stories = [make_story("s1", "sp1"), make_story("s2", "sp2")]
        tasks = [make_task("t1", "s1"), make_task("t2", "s2"), make_task("t3", "s1")]
        index = SprintGroupingIndex(stories, tasks, SPRINTS)

        assert [t.id for t in index.tasks_for("sp1")] == ["t1", "t3"]
        assert [t.id for t in index.tasks_for("sp2")] == ["t2"]

    def test_unassigned_cases(self):
        """No story link, unknown story, unplanned story and unknown sprint."""
        stories = [make_story("s-unplanned"), make_story("s-lost", "sp-gone")]
        tasks = [
            make_task("t1"),
            make_task("t2", "s-missing"),
            make_task("t3", "s-unplanned"),
            make_task("t4", "s-lost"),
        ]
        index = SprintGroupingIndex(stories, tasks, SPRINTS)

        assert [t.id for t in index.tasks_for(UNASSIGNED)] == ["t1", "t2", "t3", "t4"]

    def test_empty_bucket(self):
        index = SprintGroupingIndex([], [make_task("t1")], SPRINTS)
        assert index.tasks_for("sp2") == []


class TestBuckets:
    def test_partition_is_exhaustive_and_disjoint(self):
        stories = [
            make_story("s1", "sp1"),
            make_story("s2", "sp2"),
            make_story("s3"),
            make_story("s4", "nope"),
        ]
        tasks = [
            make_task(f"t{i}", story)
            for i, story in enumerate(["s1", "s2", "s3", "s4", None, "zz", "s1", "s2"])
        ]
        index = SprintGroupingIndex(stories, tasks, SPRINTS)
        buckets = index.buckets()

        seen = [t.id for bucket in buckets.values() for t in bucket]
        assert sorted(seen) == sorted(t.id for t in tasks)
        assert len(seen) == len(set(seen))

    def test_preserves_input_order_within_bucket(self):
        stories = [make_story("s1", "sp1")]
        tasks = [make_task("b", "s1"), make_task("a", "s1"), make_task("c", "s1")]
        buckets = SprintGroupingIndex(stories, tasks, SPRINTS).buckets()
        assert [t.id for t in buckets["sp1"]] == ["b", "a", "c"]

    def test_buckets_are_copies(self):
        index = SprintGroupingIndex([], [make_task("t1")], SPRINTS)
        index.buckets()[UNASSIGNED].clear()
        assert len(index.tasks_for(UNASSIGNED)) == 1
