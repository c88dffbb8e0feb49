"""
Chat action pipeline.

Runs after an assistant reply has been fully received and shown. Each
directive found in the reply is executed as an independent unit with its
own report in the conversation; one failed or unsupported directive never
stops the others. Directives run one after another in the order they
appear in the text.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable

from sprintboard.chat.directives import (
    CREATE_TASKS,
    CREATE_USER_STORIES,
    DELETE_USER_STORIES,
    UPDATE_OBJECTIVES,
    Directive,
    extract_directives,
)
from sprintboard.chat.matching import AMBIGUOUS, describe_item, resolve_story
from sprintboard.chat.templates import derive_task_payloads
from sprintboard.chat.transcript import ChatFeed
from sprintboard.lib.api import BackendClient, NetworkFailure
from sprintboard.lib.types import ProjectSnapshot
from sprintboard.notifications import Notifier

logger = logging.getLogger(__name__)

UNSUPPORTED_ACTIONS = (CREATE_TASKS, UPDATE_OBJECTIVES)


@dataclass
class DirectiveOutcome:
    """Result of executing one directive."""
    action: str
    ok: bool
    message: str = ""
    stories_created: list[str] = field(default_factory=list)   # story ids
    tasks_created: int = 0
    deleted: list[str] = field(default_factory=list)           # story titles
    errors: list[str] = field(default_factory=list)
    skipped: bool = False


def _story_points(value) -> int:
    try:
        return max(0, int(float(value)))
    except (TypeError, ValueError):
        return 0


def _bullets(lines: list[str]) -> str:
    return "\n".join(f"- {line}" for line in lines)


class ChatActionPipeline:
    """Executes directives against the backend and reports into the feed."""

    def __init__(
        self,
        client: BackendClient,
        snapshot: ProjectSnapshot,
        feed: ChatFeed,
        notifier: Notifier,
        user_id: str | None = None,
        on_data_changed: Callable[[], None] | None = None,
    ):
        self.client = client
        self.snapshot = snapshot
        self.feed = feed
        self.notifier = notifier
        self.user_id = user_id
        self.on_data_changed = on_data_changed

    def set_snapshot(self, snapshot: ProjectSnapshot) -> None:
        self.snapshot = snapshot

    def run(self, text: str) -> list[DirectiveOutcome]:
        """Execute every directive in text, in order."""
        directives = extract_directives(text)
        if directives:
            logger.info(f"[CHAT] Executing {len(directives)} directive(s)")
        return [self.execute(d) for d in directives]

    def execute(self, directive: Directive) -> DirectiveOutcome:
        if directive.action == CREATE_USER_STORIES:
            return self._create_user_stories(directive)
        if directive.action == DELETE_USER_STORIES:
            return self._delete_user_stories(directive)
        if directive.action in UNSUPPORTED_ACTIONS:
            return self._unsupported(directive)

        logger.info(f"[CHAT] Ignoring unknown directive action '{directive.action}'")
        return DirectiveOutcome(action=directive.action, ok=False, skipped=True)

    def _data_changed(self) -> None:
        if self.on_data_changed:
            self.on_data_changed()

    # create_user_stories

    def _story_payload(self, item: dict) -> dict:
        return {
            "title": item["title"].strip(),
            "description": item.get("description", ""),
            "priority": item.get("priority", ""),
            "storyPoints": _story_points(item.get("storyPoints")),
            "acceptanceCriteria": list(item.get("acceptanceCriteria") or []),
            "status": "pending",
            "projectId": self.snapshot.project_id,
            "createdBy": self.user_id,
            "createdAt": datetime.now().isoformat(),
            "aiGenerated": True,
        }

    def _create_tasks_for(self, story: dict) -> int:
        """Create the derived tasks for a story. Returns how many succeeded."""
        created = 0
        for payload in derive_task_payloads(story, created_by=self.user_id):
            try:
                self.client.create_task(payload)
                created += 1
            except NetworkFailure as e:
                logger.warning(f"[CHAT] Task '{payload['title']}' not created: {e}")
        return created

    def _create_user_stories(self, directive: Directive) -> DirectiveOutcome:
        outcome = DirectiveOutcome(action=directive.action, ok=True)
        titles = []

        for item in directive.items:
            payload = self._story_payload(item)
            pending = self.feed.show_pending(f"Generating user story \"{payload['title']}\"...")
            try:
                created = self.client.create_user_story(payload)
            except NetworkFailure as e:
                self.feed.clear_pending(pending)
                outcome.ok = False
                outcome.errors.append(str(e))
                logger.warning(f"[CHAT] User story '{payload['title']}' not created: {e}")
                break

            story = {**payload, **(created or {})}
            if story.get("id") is None:
                self.feed.clear_pending(pending)
                outcome.ok = False
                outcome.errors.append(f"The backend returned no id for \"{payload['title']}\"")
                break

            outcome.stories_created.append(str(story["id"]))
            titles.append(payload["title"])
            outcome.tasks_created += self._create_tasks_for(story)
            self.feed.clear_pending(pending)

        if not outcome.ok:
            outcome.message = (
                "Could not create the user stories: " + "; ".join(outcome.errors)
            )
            self.feed.post(outcome.message)
            self.notifier.error("User stories not created", outcome.errors[-1])
            if outcome.stories_created:
                self._data_changed()
            return outcome

        outcome.message = (
            f"Created {len(outcome.stories_created)} user stories "
            f"and {outcome.tasks_created} tasks:\n{_bullets(titles)}"
        )
        self.feed.post(outcome.message)
        self.notifier.success(
            "User stories created",
            f"{len(outcome.stories_created)} stories, {outcome.tasks_created} tasks",
        )
        self._data_changed()
        return outcome

    # delete_user_stories

    def _delete_user_stories(self, directive: Directive) -> DirectiveOutcome:
        outcome = DirectiveOutcome(action=directive.action, ok=False)
        stories = list(self.snapshot.stories)

        for item in directive.items:
            wanted = describe_item(item)
            resolution = resolve_story(item, stories)

            if resolution.outcome == AMBIGUOUS:
                outcome.errors.append(
                    f"{wanted} is ambiguous: it matches {len(resolution.matches)} user stories"
                )
                continue
            if not resolution.ok:
                outcome.errors.append(f"No user story found for {wanted}")
                continue

            try:
                self.client.delete_user_story(resolution.story_id)
            except NetworkFailure as e:
                outcome.errors.append(f"Could not delete {resolution.title}: {e}")
                continue
            outcome.deleted.append(resolution.title)

        if outcome.deleted:
            outcome.ok = True
            outcome.message = (
                f"Deleted {len(outcome.deleted)} user stories:\n{_bullets(outcome.deleted)}"
            )
            if outcome.errors:
                outcome.message += f"\n\nWarnings:\n{_bullets(outcome.errors)}"
            self.feed.post(outcome.message)
            self.notifier.success("User stories deleted", f"{len(outcome.deleted)} deleted")
            self._data_changed()
            return outcome

        outcome.message = f"No user stories were deleted:\n{_bullets(outcome.errors)}"
        self.feed.post(outcome.message)
        self.notifier.error("User stories not deleted", "; ".join(outcome.errors))
        return outcome

    # create_tasks / update_objectives

    def _unsupported(self, directive: Directive) -> DirectiveOutcome:
        message = f"The action '{directive.action}' is not yet available."
        self.feed.post(message)
        self.notifier.info("Coming soon", message)
        return DirectiveOutcome(action=directive.action, ok=False, message=message, skipped=True)
