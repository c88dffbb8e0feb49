"""
sprintboard chat / apply / sanitize - Talk to the assistant and act on its replies.
"""

from pathlib import Path

from rich.console import Console
from rich.live import Live
from rich.markup import escape
from rich.text import Text

from sprintboard.chat.attachments import (
    DOCUMENT,
    IMAGE,
    IMAGE_TYPES,
    AttachmentManager,
    guess_mime_type,
)
from sprintboard.chat.pipeline import ChatActionPipeline
from sprintboard.chat.sanitize import render_inline, sanitize
from sprintboard.chat.session import ChatSession
from sprintboard.chat.stream import CommandStream
from sprintboard.chat.transcript import ChatFeed, ChatTranscript
from sprintboard.commands.board import make_client
from sprintboard.lib.api import NetworkFailure
from sprintboard.lib.config import DashboardConfig
from sprintboard.lib.snapshot import load_snapshot
from sprintboard.notifications import Notifier, console_sink


def conversation_id(args) -> str:
    return args.conversation or f"project-{args.project}"


def _feed_printer(console: Console):
    """Feed listener: print assistant posts and pending notes."""
    def listener(kind: str, message) -> None:
        if kind == "pending":
            console.print(f"[dim]{escape(message.content)}[/dim]")
        elif kind == "post" and message.role == "assistant":
            console.print(Text.from_markup(render_inline(message.content)))
            console.print()
    return listener


def _build_pipeline(args, config, client, snapshot, feed, notifier) -> ChatActionPipeline:
    pipeline = ChatActionPipeline(client, snapshot, feed, notifier, user_id=config.user_id)

    def refresh() -> None:
        try:
            pipeline.set_snapshot(load_snapshot(client, args.project))
        except NetworkFailure as e:
            notifier.error("Refresh failed", str(e))

    pipeline.on_data_changed = refresh
    return pipeline


def cmd_chat(args, config: DashboardConfig) -> int:
    """Send one message, stream the reply and run its directives."""
    console = Console()
    client = make_client(config)

    try:
        snapshot = load_snapshot(client, args.project)
    except NetworkFailure as e:
        print(f"ERROR: {e}")
        return 1

    notifier = Notifier(sink=console_sink(console), desktop=config.desktop_notify)
    transcript = ChatTranscript(config.chat_dir, conversation_id(args))
    feed = ChatFeed(transcript, listener=_feed_printer(console))
    pipeline = _build_pipeline(args, config, client, snapshot, feed, notifier)

    attachments = AttachmentManager()
    for name in args.attach or []:
        path = Path(name)
        kind = IMAGE if guess_mime_type(path) in IMAGE_TYPES else DOCUMENT
        added = attachments.add(path, kind)
        if not added.ok:
            console.print(f"[yellow]Skipping attachment:[/yellow] {escape(added.message)}")

    session = ChatSession(
        CommandStream(config.chat_command, config.chat_timeout),
        feed,
        pipeline,
        notifier,
        attachments=attachments,
    )

    with Live(console=console, transient=True) as live:
        session.on_display = lambda text: live.update(Text.from_markup(render_inline(text)))
        exchange = session.send(args.message)

    if not exchange.ok:
        return 1
    return 0 if all(o.ok or o.skipped for o in exchange.outcomes) else 1


def cmd_apply(args, config: DashboardConfig) -> int:
    """Run the directive pipeline over a saved assistant reply."""
    path = Path(args.file)
    if not path.exists():
        print(f"ERROR: File not found: {path}")
        return 1

    console = Console()
    client = make_client(config)

    try:
        snapshot = load_snapshot(client, args.project)
    except NetworkFailure as e:
        print(f"ERROR: {e}")
        return 1

    notifier = Notifier(sink=console_sink(console), desktop=config.desktop_notify)
    transcript = ChatTranscript(config.chat_dir, conversation_id(args))
    feed = ChatFeed(transcript, listener=_feed_printer(console))
    pipeline = _build_pipeline(args, config, client, snapshot, feed, notifier)

    outcomes = pipeline.run(path.read_text())
    if not outcomes:
        print("No directives found")
        return 0
    return 0 if all(o.ok or o.skipped for o in outcomes) else 1


def cmd_sanitize(args) -> int:
    """Print the user-facing text of a saved assistant reply."""
    path = Path(args.file)
    if not path.exists():
        print(f"ERROR: File not found: {path}")
        return 1
    print(sanitize(path.read_text()))
    return 0
