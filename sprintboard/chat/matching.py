"""
Story resolution for delete directives.

A delete item names its target either by id or by criteria. Criteria are
ANDed; title is a case-insensitive substring, everything else must match
exactly. Resolution never guesses between several candidates.
"""

from dataclasses import dataclass

from sprintboard.lib.types import UserStory

FOUND = "found"
NOT_FOUND = "not_found"
AMBIGUOUS = "ambiguous"


@dataclass
class Resolution:
    outcome: str                       # found, not_found, ambiguous
    story_id: str | None = None
    title: str | None = None
    matches: list[str] | None = None   # candidate ids for ambiguous results

    @property
    def ok(self) -> bool:
        return self.outcome == FOUND


def _same_points(expected, actual: int) -> bool:
    try:
        return int(float(expected)) == actual
    except (TypeError, ValueError):
        return False


def matches_criteria(story: UserStory, criteria: dict) -> bool:
    """True if the story satisfies every supplied criterion."""
    title = criteria.get("title")
    if title and title.lower() not in story.title.lower():
        return False
    priority = criteria.get("priority")
    if priority and priority != story.priority:
        return False
    status = criteria.get("status")
    if status and status != story.status:
        return False
    points = criteria.get("storyPoints")
    if points is not None and points != "" and not _same_points(points, story.story_points):
        return False
    return True


def _has_criteria(item: dict) -> bool:
    return any(
        item.get(key) not in (None, "")
        for key in ("title", "priority", "status", "storyPoints")
    )


def resolve_story(item: dict, stories: list[UserStory]) -> Resolution:
    """Resolve one delete item against the project's stories.

    A direct id is taken as-is (the title is filled in when known).
    """
    story_id = item.get("id")
    if story_id not in (None, ""):
        story_id = str(story_id)
        known = next((s for s in stories if s.id == story_id), None)
        return Resolution(FOUND, story_id=story_id, title=known.title if known else story_id)

    if not _has_criteria(item):
        return Resolution(NOT_FOUND)

    candidates = [s for s in stories if matches_criteria(s, item)]
    if not candidates:
        return Resolution(NOT_FOUND)
    if len(candidates) > 1:
        return Resolution(AMBIGUOUS, matches=[s.id for s in candidates])
    return Resolution(FOUND, story_id=candidates[0].id, title=candidates[0].title)


def describe_item(item: dict) -> str:
    """Short human description of what a delete item was looking for."""
    if item.get("id") not in (None, ""):
        return f"id {item['id']}"
    parts = []
    if item.get("title"):
        parts.append(f"\"{item['title']}\"")
    for key in ("priority", "status", "storyPoints"):
        if item.get(key) not in (None, ""):
            parts.append(f"{key}={item[key]}")
    return ", ".join(parts) or "(no criteria)"
