"""
Shared data types for sprintboard.

Backend records arrive with camelCase keys; the dataclasses here keep
snake_case attributes and convert at the edge with from_api().
"""

from dataclasses import asdict, dataclass, field
from datetime import datetime


def _opt_str(value) -> str | None:
    if value is None or value == "":
        return None
    return str(value)


@dataclass
class Task:
    """A task card on the board."""
    id: str
    title: str
    description: str = ""
    status: str = "todo"                       # raw backend vocabulary
    priority: str = ""
    estimated_hours: float = 0
    assigned_to: str | None = None
    user_story_id: str | None = None
    ai_generated: bool = False
    project_id: str | None = None

    @classmethod
    def from_api(cls, data: dict) -> "Task":
        return cls(
            id=str(data["id"]),
            title=data.get("title") or "",
            description=data.get("description") or "",
            status=data.get("status") or "todo",
            priority=data.get("priority") or "",
            estimated_hours=data.get("estimatedHours") or 0,
            assigned_to=_opt_str(data.get("assignedTo")),
            user_story_id=_opt_str(data.get("userStoryId")),
            ai_generated=bool(data.get("aiGenerated") or data.get("aiAssigned")),
            project_id=_opt_str(data.get("projectId")),
        )


@dataclass
class UserStory:
    """A backlog user story, optionally planned into a sprint."""
    id: str
    title: str
    description: str = ""
    priority: str = ""
    story_points: int = 0
    acceptance_criteria: list[str] = field(default_factory=list)
    sprint_id: str | None = None
    status: str = "pending"
    project_id: str | None = None

    @classmethod
    def from_api(cls, data: dict) -> "UserStory":
        return cls(
            id=str(data["id"]),
            title=data.get("title") or "",
            description=data.get("description") or "",
            priority=data.get("priority") or "",
            story_points=int(data.get("storyPoints") or 0),
            acceptance_criteria=list(data.get("acceptanceCriteria") or []),
            sprint_id=_opt_str(data.get("sprintId")),
            status=data.get("status") or "pending",
            project_id=_opt_str(data.get("projectId")),
        )


@dataclass
class Sprint:
    id: str
    title: str
    start_date: str | None = None
    end_date: str | None = None
    status: str = ""

    @classmethod
    def from_api(cls, data: dict) -> "Sprint":
        return cls(
            id=str(data["id"]),
            title=data.get("title") or data.get("name") or "",
            start_date=data.get("startDate"),
            end_date=data.get("endDate"),
            status=data.get("status") or "",
        )


@dataclass
class ChatMessage:
    """One transcript entry. Never mutated after creation."""
    id: str
    role: str           # "user" or "assistant"
    content: str
    timestamp: str

    @classmethod
    def create(cls, role: str, content: str, now: datetime | None = None) -> "ChatMessage":
        now = now or datetime.now()
        millis = int(now.timestamp() * 1000)
        return cls(
            id=f"msg-{millis}-{role}",
            role=role,
            content=content,
            timestamp=now.isoformat(),
        )

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class ProjectSnapshot:
    """Read-only collections the board and chat operate on.

    Owned by the caller; components never mutate it and instead ask the
    caller to refresh after backend changes.
    """
    project_id: str
    name: str = ""
    description: str = ""
    tasks: list[Task] = field(default_factory=list)
    stories: list[UserStory] = field(default_factory=list)
    sprints: list[Sprint] = field(default_factory=list)

    def find_task(self, task_id: str) -> Task | None:
        for task in self.tasks:
            if task.id == task_id:
                return task
        return None
