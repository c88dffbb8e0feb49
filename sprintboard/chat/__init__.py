"""
Chat module for sprintboard.

Assistant streaming, reply sanitizing, transcripts, attachments and the
directive pipeline that turns replies into backlog changes.
"""

from sprintboard.chat.attachments import (
    CHAT_LIMITS,
    PROJECT_LIMITS,
    AddResult,
    AttachedFile,
    AttachmentManager,
)
from sprintboard.chat.directives import Directive, extract_directives
from sprintboard.chat.pipeline import ChatActionPipeline, DirectiveOutcome
from sprintboard.chat.sanitize import render_inline, sanitize
from sprintboard.chat.session import ChatSession, Exchange
from sprintboard.chat.stream import CommandStream, StreamError, build_chat_prompt
from sprintboard.chat.transcript import ChatFeed, ChatTranscript

__all__ = [
    "CHAT_LIMITS",
    "PROJECT_LIMITS",
    "AddResult",
    "AttachedFile",
    "AttachmentManager",
    "Directive",
    "extract_directives",
    "ChatActionPipeline",
    "DirectiveOutcome",
    "render_inline",
    "sanitize",
    "ChatSession",
    "Exchange",
    "CommandStream",
    "StreamError",
    "build_chat_prompt",
    "ChatFeed",
    "ChatTranscript",
]
