"""Chat transcript persistence.

An append-only log of ChatMessage entries keyed by conversation id and
stored as JSON under the configured chat directory. Loaded when a session
starts, saved on every append.
"""

import itertools
import json
import logging
import re
from pathlib import Path

from sprintboard.lib.types import ChatMessage
from sprintboard.lib.validate import ValidationError, validate

logger = logging.getLogger(__name__)

SAFE_ID_RE = re.compile(r'[^A-Za-z0-9_.-]')


class ChatTranscript:
    """
    Ordered chat history for one conversation.

    Usage:
        transcript = ChatTranscript(chat_dir, "project-42")
        transcript.append(ChatMessage.create("user", "Add a login story"))
        transcript.messages[-1].content
    """

    def __init__(self, store_dir: Path, conversation_id: str):
        self.store_dir = store_dir
        self.conversation_id = conversation_id
        safe_id = SAFE_ID_RE.sub("_", conversation_id) or "default"
        self._file_path = store_dir / f"chat-{safe_id}.json"
        self._messages: list[ChatMessage] = []
        self.load()

    @property
    def path(self) -> Path:
        return self._file_path

    @property
    def messages(self) -> list[ChatMessage]:
        """A copy of the messages, oldest first."""
        return list(self._messages)

    def __len__(self) -> int:
        return len(self._messages)

    def load(self) -> None:
        """Load saved messages. Unreadable entries are dropped with a warning."""
        self._messages = []
        if not self._file_path.exists():
            return

        try:
            data = json.loads(self._file_path.read_text())
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"[CHAT] Could not read transcript {self._file_path}: {e}")
            return

        if not isinstance(data, list):
            logger.warning(f"[CHAT] Transcript {self._file_path} is not a list, ignoring")
            return

        for entry in data:
            try:
                validate(entry, "chat_message")
            except ValidationError as e:
                logger.warning(f"[CHAT] Dropping invalid transcript entry: {e}")
                continue
            self._messages.append(ChatMessage(**entry))

    def append(self, message: ChatMessage) -> None:
        """Add a message and persist the transcript."""
        self._messages.append(message)
        self.save()

    def save(self) -> None:
        self.store_dir.mkdir(parents=True, exist_ok=True)
        content = json.dumps([m.to_dict() for m in self._messages], indent=2, ensure_ascii=False)
        self._file_path.write_text(content)


class ChatFeed:
    """What the user sees in the chat: the transcript plus pending notes.

    Pending notes ("generating...") are transient and never saved. Posted
    messages go to the transcript. The listener, if any, is called with
    ("post"|"pending"|"clear", message) so a UI can redraw.
    """

    def __init__(self, transcript: ChatTranscript, listener=None):
        self.transcript = transcript
        self.listener = listener
        self._pending: dict[str, ChatMessage] = {}
        self._counter = itertools.count(1)

    @property
    def pending(self) -> list[ChatMessage]:
        return list(self._pending.values())

    def _emit(self, kind: str, message: ChatMessage) -> None:
        if self.listener:
            self.listener(kind, message)

    def post(self, content: str, role: str = "assistant") -> ChatMessage:
        message = ChatMessage.create(role, content)
        self.transcript.append(message)
        self._emit("post", message)
        return message

    def show_pending(self, content: str) -> str:
        message = ChatMessage.create("assistant", content)
        token = f"{message.id}-pending-{next(self._counter)}"
        self._pending[token] = message
        self._emit("pending", message)
        return token

    def clear_pending(self, token: str) -> None:
        message = self._pending.pop(token, None)
        if message is not None:
            self._emit("clear", message)
