"""
Project history recording and conversation history formatting.

ProjectHistory writes change entries to the backend's per-project history
log. format_conversation_history renders a chat transcript for the prompt
sent to the assistant.
"""

import logging

from sprintboard.lib.api import BackendClient, NetworkFailure
from sprintboard.lib.types import ChatMessage

__all__ = ["ProjectHistory", "format_conversation_history"]

logger = logging.getLogger(__name__)

USER_AGENT = "sprintboard"


class ProjectHistory:
    """Appends change entries to a project's history on the backend.

    History is best-effort: failures are logged and swallowed so they
    never undo or mask the change they describe.
    """

    def __init__(self, client: BackendClient, project_id: str, user_id: str | None = None):
        self.client = client
        self.project_id = project_id
        self.user_id = user_id

    def log_change(
        self,
        change_type: str,
        entity_type: str,
        entity_id: str,
        description: str,
        details: dict,
        source: str = "manual",
    ) -> bool:
        """Record a change. Returns True if the backend accepted it."""
        if not self.user_id:
            logger.debug(f"[HISTORY] No user id configured, not recording {change_type}")
            return False

        payload = {
            "projectId": self.project_id,
            "userId": self.user_id,
            "changeType": change_type,
            "entityType": entity_type,
            "entityId": entity_id,
            "description": description,
            "details": details,
            "userAgent": USER_AGENT,
            "metadata": {"source": source},
        }
        try:
            self.client.create_history_entry(self.project_id, payload)
        except NetworkFailure as e:
            logger.warning(f"[HISTORY] Failed to record {change_type} for {entity_id}: {e}")
            return False
        return True


def format_conversation_history(messages: list[ChatMessage] | None) -> str:
    """
    Format chat history for the assistant prompt.

    Args:
        messages: Transcript messages, oldest first

    Returns:
        "User: ..." / "Assistant: ..." blocks separated by blank lines, or
        an empty string for an empty history
    """
    if not messages:
        return ""

    entries = []
    for message in messages:
        speaker = "User" if message.role == "user" else "Assistant"
        entries.append(f"{speaker}: {message.content}")
    return "\n\n".join(entries)
