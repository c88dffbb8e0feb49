"""
Task templates for story decomposition.

Every story created from a chat directive is split into the same four
tasks. Hours scale with story points but never drop below a per-template
floor. This table is the only place these numbers live.
"""

import math
from dataclasses import dataclass

from sprintboard.lib.status import TODO, to_backend_status


@dataclass(frozen=True)
class TaskTemplate:
    key: str
    prefix: str          # prepended to the story title
    description: str
    floor_hours: int
    multiplier: float

    def hours_for(self, story_points) -> int:
        """max(floor, floor(points * multiplier)); bad points count as 0."""
        try:
            points = float(story_points or 0)
        except (TypeError, ValueError):
            points = 0.0
        if math.isnan(points) or points < 0:
            points = 0.0
        return max(self.floor_hours, math.floor(points * self.multiplier))


TASK_TEMPLATES = (
    TaskTemplate(
        key="ui_design",
        prefix="UI design:",
        description="Design the screens and user flow",
        floor_hours=2,
        multiplier=0.5,
    ),
    TaskTemplate(
        key="backend",
        prefix="Backend:",
        description="Implement the business logic and API endpoints",
        floor_hours=4,
        multiplier=0.8,
    ),
    TaskTemplate(
        key="frontend",
        prefix="Frontend:",
        description="Build the UI components and wire them to the API",
        floor_hours=3,
        multiplier=0.6,
    ),
    TaskTemplate(
        key="testing",
        prefix="Testing:",
        description="Write and run the tests",
        floor_hours=2,
        multiplier=0.4,
    ),
)


def derive_task_payloads(story: dict, created_by: str | None = None) -> list[dict]:
    """Build the four task-create bodies for a created story.

    Args:
        story: Created story record (backend keys: id, title, priority,
            storyPoints, description)
        created_by: User id recorded as creator and default assignee
    """
    title = story.get("title", "")
    payloads = []
    for template in TASK_TEMPLATES:
        payloads.append({
            "userStoryId": story.get("id"),
            "title": f"{template.prefix} {title}",
            "description": f"{template.description} - {title}",
            "estimatedHours": template.hours_for(story.get("storyPoints")),
            "priority": story.get("priority") or "",
            "status": to_backend_status(TODO),
            "assignedTo": created_by,
            "createdBy": created_by,
            "aiGenerated": True,
        })
    return payloads
