"""
One chat conversation with the assistant.

send() runs the whole exchange: record the user message, stream the reply
while showing its sanitized text, store the sanitized reply, then run the
action pipeline over the raw reply.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable

from sprintboard.chat.attachments import AttachmentManager
from sprintboard.chat.pipeline import ChatActionPipeline, DirectiveOutcome
from sprintboard.chat.sanitize import sanitize
from sprintboard.chat.stream import ChatStream, StreamError
from sprintboard.chat.transcript import ChatFeed
from sprintboard.notifications import Notifier

logger = logging.getLogger(__name__)


@dataclass
class Exchange:
    """What happened during one send()."""
    ok: bool
    raw_reply: str = ""
    display_text: str = ""
    outcomes: list[DirectiveOutcome] = field(default_factory=list)
    error: str | None = None


class ChatSession:
    def __init__(
        self,
        stream: ChatStream,
        feed: ChatFeed,
        pipeline: ChatActionPipeline,
        notifier: Notifier,
        attachments: AttachmentManager | None = None,
        on_display: Callable[[str], None] | None = None,
    ):
        self.stream = stream
        self.feed = feed
        self.pipeline = pipeline
        self.notifier = notifier
        self.attachments = attachments or AttachmentManager()
        self.on_display = on_display

    def send(self, message: str) -> Exchange:
        message = message.strip()
        if not message:
            return Exchange(ok=False, error="Empty message")

        history = self.feed.transcript.messages
        self.feed.post(message, role="user")
        files = self.attachments.files

        received = []

        def on_chunk(chunk: str) -> None:
            received.append(chunk)
            if self.on_display:
                self.on_display(sanitize("".join(received), partial=True))

        try:
            raw = self.stream(self.pipeline.snapshot, history, message, files, on_chunk)
        except StreamError as e:
            logger.warning(f"[CHAT] {e}")
            self.notifier.error("Assistant unavailable", str(e))
            return Exchange(ok=False, raw_reply="".join(received), error=str(e))
        finally:
            self.attachments.clear()

        display = sanitize(raw)
        if display:
            self.feed.post(display)
        outcomes = self.pipeline.run(raw)
        return Exchange(ok=True, raw_reply=raw, display_text=display, outcomes=outcomes)
