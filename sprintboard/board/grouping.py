"""
Sprint grouping for board tasks.

Tasks are not linked to sprints directly: a task points at a user story,
and the story points at a sprint. SprintGroupingIndex resolves that chain
once per snapshot so rendering is a lookup.
"""

from typing import Iterable

from sprintboard.lib.types import Sprint, Task, UserStory

UNASSIGNED = None


class SprintGroupingIndex:
    """Partition of tasks into sprint buckets.

    The key None is the "unassigned" bucket. A task lands there if it has no
    story link, its story is unknown, or its story is not planned into a
    known sprint. Built once per snapshot; rebuild on any input change.
    """

    def __init__(
        self,
        stories: Iterable[UserStory],
        tasks: Iterable[Task],
        sprints: Iterable[Sprint] | None = None,
    ):
        self.sprints = list(sprints) if sprints is not None else None
        known_sprints = {s.id for s in self.sprints} if self.sprints is not None else None

        self.story_to_sprint: dict[str, str | None] = {}
        for story in stories:
            sprint_id = story.sprint_id
            if sprint_id is not None and known_sprints is not None and sprint_id not in known_sprints:
                sprint_id = UNASSIGNED
            self.story_to_sprint[story.id] = sprint_id

        self._buckets: dict[str | None, list[Task]] = {}
        for task in tasks:
            self._buckets.setdefault(self.sprint_for(task), []).append(task)

    def sprint_for(self, task: Task) -> str | None:
        """Resolve the sprint bucket for a task."""
        if not task.user_story_id:
            return UNASSIGNED
        return self.story_to_sprint.get(task.user_story_id, UNASSIGNED)

    def tasks_for(self, sprint_id: str | None) -> list[Task]:
        """Tasks in one bucket, in input order."""
        return list(self._buckets.get(sprint_id, []))

    def buckets(self) -> dict[str | None, list[Task]]:
        """All non-empty buckets."""
        return {key: list(tasks) for key, tasks in self._buckets.items()}
