"""
Directive extraction from assistant text.

The assistant embeds machine instructions in ```json fenced blocks inside
its otherwise free-form reply. Extraction is best-effort: a block that is
not valid JSON, not an object, or does not match the directive schema is
skipped and the scan carries on with the next one.
"""

import json
import logging
import re
from dataclasses import dataclass, field

from sprintboard.lib.validate import ValidationError, validate

logger = logging.getLogger(__name__)

# ```json ... ``` (tag is case-insensitive, closing fence required)
JSON_FENCE_RE = re.compile(r'```[ \t]*json[ \t]*\r?\n?([\s\S]*?)```', re.IGNORECASE)

CREATE_USER_STORIES = "create_user_stories"
DELETE_USER_STORIES = "delete_user_stories"
CREATE_TASKS = "create_tasks"
UPDATE_OBJECTIVES = "update_objectives"

KNOWN_ACTIONS = (CREATE_USER_STORIES, DELETE_USER_STORIES, CREATE_TASKS, UPDATE_OBJECTIVES)


@dataclass
class Directive:
    """One parsed instruction. Ephemeral, never persisted."""
    action: str
    items: list = field(default_factory=list)
    objectives: list = field(default_factory=list)
    position: int = 0          # offset of the block in the source text


def iter_json_blocks(text: str):
    """Yield (offset, body) for every closed ```json fence, in order."""
    for match in JSON_FENCE_RE.finditer(text or ""):
        yield match.start(), match.group(1).strip()


def parse_directive(body: str, position: int = 0) -> Directive | None:
    """Parse one fenced block body. Returns None if it is not a directive."""
    try:
        data = json.loads(body)
    except json.JSONDecodeError as e:
        logger.debug(f"[CHAT] Skipping malformed directive block at {position}: {e}")
        return None

    try:
        validate(data, "directive")
    except ValidationError as e:
        logger.debug(f"[CHAT] Skipping invalid directive block at {position}: {e}")
        return None

    return Directive(
        action=data["action"],
        items=list(data.get("items") or []),
        objectives=list(data.get("objectives") or []),
        position=position,
    )


def extract_directives(text: str) -> list[Directive]:
    """Return every well-formed directive in textual order."""
    directives = []
    for position, body in iter_json_blocks(text):
        directive = parse_directive(body, position)
        if directive is not None:
            directives.append(directive)
    return directives
