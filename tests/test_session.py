"""Tests for sprintboard.chat.session and sprintboard.chat.stream modules."""

import shlex
import sys
from unittest.mock import MagicMock, patch

import pytest

from sprintboard.chat.attachments import DOCUMENT, AttachmentManager
from sprintboard.chat.pipeline import ChatActionPipeline
from sprintboard.chat.session import ChatSession
from sprintboard.chat.stream import CommandStream, StreamError, build_chat_prompt
from sprintboard.chat.transcript import ChatFeed, ChatTranscript
from sprintboard.lib.types import ChatMessage, ProjectSnapshot, Task, UserStory
from sprintboard.notifications import ERROR, Notifier


REPLY_CHUNKS = [
    "Sure, adding **Checkout**.\n",
    "```json\n",
    '{"action": "create_user_stories", "items": [{"title": "Checkout", "storyPoints": 8}]}\n',
    "```\n",
    "Anything else?",
]


def fake_stream(chunks):
    def stream(snapshot, history, message, files, on_chunk):
        for chunk in chunks:
            on_chunk(chunk)
        return "".join(chunks)
    return MagicMock(side_effect=stream)


@pytest.fixture
def feed(tmp_path):
    return ChatFeed(ChatTranscript(tmp_path, "project-p1"))


@pytest.fixture
def client():
    client = MagicMock()
    client.create_user_story.return_value = {"id": "s9"}
    return client


@pytest.fixture
def notifier():
    return Notifier()


@pytest.fixture
def pipeline(client, feed, notifier):
    return ChatActionPipeline(client, ProjectSnapshot(project_id="p1"), feed, notifier)


class TestChatSession:
    def test_full_exchange(self, feed, pipeline, notifier, client):
        displayed = []
        session = ChatSession(
            fake_stream(REPLY_CHUNKS), feed, pipeline, notifier, on_display=displayed.append
        )

        exchange = session.send("Add a checkout story")

        assert exchange.ok
        roles = [m.role for m in feed.transcript.messages]
        assert roles == ["user", "assistant", "assistant"]
        assert feed.transcript.messages[0].content == "Add a checkout story"
        assert feed.transcript.messages[1].content == "Sure, adding **Checkout**.\n\nAnything else?"
        assert "Created 1 user stories" in feed.transcript.messages[2].content
        assert client.create_task.call_count == 4
        assert len(exchange.outcomes) == 1

    def test_display_never_shows_directive(self, feed, pipeline, notifier):
        displayed = []
        session = ChatSession(
            fake_stream(REPLY_CHUNKS), feed, pipeline, notifier, on_display=displayed.append
        )
        session.send("Add a checkout story")

        assert len(displayed) == len(REPLY_CHUNKS)
        for text in displayed:
            assert "{" not in text
            assert "`" not in text
        assert displayed[-1].endswith("Anything else?")

    def test_history_excludes_new_message(self, feed, pipeline, notifier):
        feed.post("earlier question", role="user")
        stream = fake_stream(["ok"])
        session = ChatSession(stream, feed, pipeline, notifier)

        session.send("new question")

        _, history, message, files, _ = stream.call_args.args
        assert [m.content for m in history] == ["earlier question"]
        assert message == "new question"
        assert files == []

    def test_attachments_sent_then_cleared(self, tmp_path, feed, pipeline, notifier):
        doc = tmp_path / "brief.txt"
        doc.write_text("requirements")
        attachments = AttachmentManager()
        attachments.add(doc, DOCUMENT)
        stream = fake_stream(["ok"])
        session = ChatSession(stream, feed, pipeline, notifier, attachments=attachments)

        session.send("see attached")

        files = stream.call_args.args[3]
        assert [f.name for f in files] == ["brief.txt"]
        assert len(attachments) == 0

    def test_directive_only_reply_posts_no_empty_message(self, feed, pipeline, notifier):
        session = ChatSession(fake_stream(REPLY_CHUNKS[1:4]), feed, pipeline, notifier)
        session.send("just do it")

        contents = [m.content for m in feed.transcript.messages]
        assert "" not in contents
        assert len(contents) == 2  # user message + confirmation

    def test_stream_error(self, feed, pipeline, notifier):
        stream = MagicMock(side_effect=StreamError("Assistant timed out after 300s"))
        session = ChatSession(stream, feed, pipeline, notifier)

        exchange = session.send("hello")

        assert not exchange.ok
        assert "timed out" in exchange.error
        assert notifier.history[-1].level == ERROR
        assert [m.role for m in feed.transcript.messages] == ["user"]

    def test_empty_message_not_sent(self, feed, pipeline, notifier):
        stream = fake_stream(["ok"])
        session = ChatSession(stream, feed, pipeline, notifier)
        assert not session.send("   ").ok
        stream.assert_not_called()
        assert len(feed.transcript) == 0


class TestBuildChatPrompt:
    def test_includes_context_history_and_message(self):
        snapshot = ProjectSnapshot(
            project_id="p1",
            name="Shop",
            stories=[UserStory(id="s1", title="Login", priority="Alta", story_points=5)],
            tasks=[Task(id="t1", title="Login form", status="in-progress")],
        )
        history = [ChatMessage.create("user", "hi"), ChatMessage.create("assistant", "hello")]

        prompt = build_chat_prompt(snapshot, history, "Add checkout")

        assert prompt.startswith("# Project: Shop")
        assert "[s1] Login" in prompt
        assert "Login form (In Progress)" in prompt
        assert "User: hi\n\nAssistant: hello" in prompt
        assert prompt.endswith("## Message\nAdd checkout")


class TestCommandStream:
    def _popen(self, stdout_lines, returncode=0, stderr=""):
        proc = MagicMock()
        proc.stdout.readline.side_effect = list(stdout_lines) + [""]
        proc.stderr.read.return_value = stderr
        proc.wait.return_value = returncode
        return proc

    def test_streams_lines(self):
        proc = self._popen(["Hello\n", "world\n"])
        chunks = []
        with patch("sprintboard.chat.stream.subprocess.Popen", return_value=proc) as popen:
            text = CommandStream("claude --print", timeout=30)(
                ProjectSnapshot(project_id="p1"), [], "hi", [], chunks.append
            )

        assert text == "Hello\nworld\n"
        assert chunks == ["Hello\n", "world\n"]
        assert popen.call_args.args[0] == ["claude", "--print"]
        proc.stdin.write.assert_called_once()
        assert "hi" in proc.stdin.write.call_args.args[0]

    def test_nonzero_exit(self):
        proc = self._popen([], returncode=1, stderr="not logged in")
        with patch("sprintboard.chat.stream.subprocess.Popen", return_value=proc):
            with pytest.raises(StreamError, match="not logged in"):
                CommandStream()(ProjectSnapshot(project_id="p1"), [], "hi", [], lambda c: None)

    def test_command_missing(self):
        with patch("sprintboard.chat.stream.subprocess.Popen", side_effect=FileNotFoundError):
            with pytest.raises(StreamError, match="not found"):
                CommandStream("nope-cli")(ProjectSnapshot(project_id="p1"), [], "hi", [], lambda c: None)

    def test_api_key_removed_from_env(self):
        proc = self._popen(["ok\n"])
        with patch.dict("os.environ", {"ANTHROPIC_API_KEY": "secret"}), \
                patch("sprintboard.chat.stream.subprocess.Popen", return_value=proc) as popen:
            CommandStream()(ProjectSnapshot(project_id="p1"), [], "hi", [], lambda c: None)

        assert "ANTHROPIC_API_KEY" not in popen.call_args.kwargs["env"]

    def test_input_closed_early(self):
        proc = self._popen([])
        proc.stdin.write.side_effect = BrokenPipeError(32, "Broken pipe")
        with patch("sprintboard.chat.stream.subprocess.Popen", return_value=proc):
            with pytest.raises(StreamError, match="closed its input"):
                CommandStream()(ProjectSnapshot(project_id="p1"), [], "hi", [], lambda c: None)

        proc.kill.assert_called_once()
        proc.wait.assert_called_once()

    def test_failing_callback_stops_child(self):
        proc = self._popen(["Hello\n", "world\n"])

        def on_chunk(chunk):
            raise RuntimeError("display broke")

        with patch("sprintboard.chat.stream.subprocess.Popen", return_value=proc):
            with pytest.raises(RuntimeError):
                CommandStream()(ProjectSnapshot(project_id="p1"), [], "hi", [], on_chunk)

        proc.kill.assert_called_once()
        proc.wait.assert_called_once()

    def test_large_stderr_does_not_block(self):
        script = (
            "import sys; sys.stdin.read(); "
            "sys.stderr.write('x' * 300000); sys.stderr.flush(); print('hi')"
        )
        command = f"{shlex.quote(sys.executable)} -c {shlex.quote(script)}"

        text = CommandStream(command, timeout=30)(
            ProjectSnapshot(project_id="p1"), [], "hi", [], lambda c: None
        )

        assert text == "hi\n"
