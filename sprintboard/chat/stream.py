"""
Assistant reply streaming.

The assistant is reached through a ChatStream callable:

    stream(snapshot, history, message, files, on_chunk) -> full_text

on_chunk receives each piece of text as it arrives. CommandStream is the
shipped implementation: it runs a CLI (claude --print by default), writes
the prompt to stdin and streams stdout back line by line.
"""

import logging
import os
import shlex
import subprocess
import threading
from typing import Callable

from sprintboard.chat.attachments import AttachedFile
from sprintboard.lib.history import format_conversation_history
from sprintboard.lib.status import status_label
from sprintboard.lib.types import ChatMessage, ProjectSnapshot

logger = logging.getLogger(__name__)

ChatStream = Callable[
    [ProjectSnapshot, list[ChatMessage], str, list[AttachedFile], Callable[[str], None]],
    str,
]


class StreamError(Exception):
    """The assistant could not produce a reply."""


def build_chat_prompt(
    snapshot: ProjectSnapshot,
    history: list[ChatMessage],
    message: str,
    files: list[AttachedFile] | None = None,
) -> str:
    """Assemble the prompt: project context, prior conversation, new message."""
    sections = [f"# Project: {snapshot.name or snapshot.project_id}"]
    if snapshot.description:
        sections.append(snapshot.description)

    if snapshot.stories:
        lines = [
            f"- [{s.id}] {s.title} (priority: {s.priority or '-'}, "
            f"points: {s.story_points}, status: {s.status})"
            for s in snapshot.stories
        ]
        sections.append("## User stories\n" + "\n".join(lines))

    if snapshot.tasks:
        lines = [
            f"- [{t.id}] {t.title} ({status_label(t.status)})"
            for t in snapshot.tasks
        ]
        sections.append("## Tasks\n" + "\n".join(lines))

    conversation = format_conversation_history(history)
    if conversation:
        sections.append("## Conversation so far\n" + conversation)

    if files:
        lines = [f"- {f.name} ({f.mime_type}): {f.path}" for f in files]
        sections.append("## Attached files\n" + "\n".join(lines))

    sections.append("## Message\n" + message)
    return "\n\n".join(sections)


class CommandStream:
    """Runs the assistant CLI as a subprocess and streams its output."""

    def __init__(self, command: str = "claude --print", timeout: int = 300):
        self.command = shlex.split(command)
        self.timeout = timeout

    def __call__(
        self,
        snapshot: ProjectSnapshot,
        history: list[ChatMessage],
        message: str,
        files: list[AttachedFile],
        on_chunk: Callable[[str], None],
    ) -> str:
        prompt = build_chat_prompt(snapshot, history, message, files)

        # Remove ANTHROPIC_API_KEY so the CLI uses its own login
        env = {k: v for k, v in os.environ.items() if k != "ANTHROPIC_API_KEY"}

        try:
            proc = subprocess.Popen(
                self.command,
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                env=env,
            )
        except FileNotFoundError:
            raise StreamError(f"Assistant command not found: {self.command[0]}") from None

        timed_out = threading.Event()

        def _kill():
            timed_out.set()
            proc.kill()

        # stderr is read on its own thread while stdout streams
        stderr_parts = []
        reader = threading.Thread(target=lambda: stderr_parts.append(proc.stderr.read()), daemon=True)
        reader.start()

        timer = threading.Timer(self.timeout, _kill)
        timer.start()
        chunks = []
        finished = False
        try:
            try:
                proc.stdin.write(prompt)
                proc.stdin.close()
            except OSError as e:
                raise StreamError(f"Assistant closed its input early: {e}") from None
            for line in iter(proc.stdout.readline, ""):
                chunks.append(line)
                on_chunk(line)
            returncode = proc.wait()
            finished = True
        finally:
            timer.cancel()
            if not finished:
                proc.kill()
                proc.wait()
            reader.join(timeout=5)

        if timed_out.is_set():
            raise StreamError(f"Assistant timed out after {self.timeout}s")
        if returncode != 0:
            detail = "".join(stderr_parts).strip() or "(no output)"
            raise StreamError(f"Assistant failed (exit {returncode}): {detail}")

        text = "".join(chunks)
        logger.debug(f"[CHAT] Received {len(text)} characters from {self.command[0]}")
        return text
