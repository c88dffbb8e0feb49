"""
Display cleanup for assistant replies.

Directive blocks are for the pipeline, not for people. sanitize() removes
them from the text shown to the user. Called with partial=True it is safe
on every streamed prefix: an unterminated fence or a trailing run of
backticks is dropped too, so a half-received JSON block never flashes on
screen.
"""

import re

from rich.markup import escape

# Closed fences of any language tag
CLOSED_FENCE_RE = re.compile(r'```[\s\S]*?```')
# An opening fence with no closing fence yet, up to end of text
OPEN_FENCE_RE = re.compile(r'```[\s\S]*\Z')
# One or two trailing backticks: the start of a fence still streaming in
PARTIAL_FENCE_RE = re.compile(r'`{1,2}\Z')

# Lines that are only structural JSON punctuation
STRUCTURAL_LINE_RE = re.compile(r'^\s*[\[\]{}(),]+\s*$')
# Lines carrying directive-shaped keys
DIRECTIVE_KEY_RE = re.compile(r'"(?:action|items|objectives)"\s*:')

BLANK_RUN_RE = re.compile(r'\n{3,}')


def sanitize(raw: str, partial: bool = False) -> str:
    """Return the user-facing text of an assistant reply.

    partial marks a reply that is still streaming in.
    """
    text = (raw or "").replace("\r\n", "\n")
    text = CLOSED_FENCE_RE.sub("", text)
    text = OPEN_FENCE_RE.sub("", text)
    if partial:
        text = PARTIAL_FENCE_RE.sub("", text)

    kept = [
        line for line in text.split("\n")
        if not STRUCTURAL_LINE_RE.match(line) and not DIRECTIVE_KEY_RE.search(line)
    ]
    text = "\n".join(kept)

    text = re.sub(r'[ \t]+\n', "\n", text)
    text = BLANK_RUN_RE.sub("\n\n", text)
    return text.strip()


# Inline code, bold, italic; first match at a position wins
INLINE_RE = re.compile(
    r'`(?P<code>[^`\n]+)`'
    r'|\*\*(?P<bold>.+?)\*\*'
    r'|(?<![*\w])\*(?!\s)(?P<italic>.+?)(?<!\s)\*(?![*\w])'
)


def render_inline(text: str) -> str:
    """Convert light markdown (bold, italic, inline code) to rich markup.

    Everything outside the generated tags is escaped, so arbitrary reply
    text is always valid markup.
    """
    out = []
    pos = 0
    for match in INLINE_RE.finditer(text):
        out.append(escape(text[pos:match.start()]))
        if match.group("code") is not None:
            out.append(f"[cyan]{escape(match.group('code'))}[/cyan]")
        elif match.group("bold") is not None:
            out.append(f"[bold]{render_inline(match.group('bold'))}[/bold]")
        else:
            out.append(f"[italic]{render_inline(match.group('italic'))}[/italic]")
        pos = match.end()
    out.append(escape(text[pos:]))
    return "".join(out)
