"""
Safe .env file parser.

Parses KEY=value files without shell execution. Values that look like
shell constructs are rejected so a config file can never smuggle commands
into CHAT_COMMAND or similar settings.
"""

import os
import re
from pathlib import Path

FORBIDDEN_PATTERNS = [
    r'`',           # backticks
    r'\$\(',        # command substitution
    r'\$\{',        # variable expansion
    r';',           # command chaining
    r'&&',          # AND chaining
    r'\|',          # pipes and OR chaining
]

KEY_PATTERN = re.compile(r'^[A-Z][A-Z0-9_]*$')


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ('"', "'"):
        return value[1:-1]
    return value


def check_value(value: str, where: str = "value") -> str:
    """Raise ValueError if value contains a forbidden shell pattern."""
    for pattern in FORBIDDEN_PATTERNS:
        if re.search(pattern, value):
            raise ValueError(f"{where}: Forbidden pattern in value")
    return value


def load_env(filepath: str) -> dict:
    """
    Parse env file safely, return dict.

    Raises:
        FileNotFoundError: if file doesn't exist
        ValueError: if syntax invalid or forbidden pattern found
    """
    path = Path(filepath)
    if not path.exists():
        raise FileNotFoundError(f"Env file not found: {filepath}")

    result = {}
    for lineno, line in enumerate(path.read_text().splitlines(), 1):
        line = line.strip()
        if not line or line.startswith('#'):
            continue

        if '=' not in line:
            raise ValueError(f"Line {lineno}: Invalid syntax (no '=')")

        key, _, value = line.partition('=')
        key = key.strip()
        if not KEY_PATTERN.match(key):
            raise ValueError(f"Line {lineno}: Invalid key '{key}'")

        result[key] = check_value(_unquote(value.strip()), f"Line {lineno}")

    return result


def load_prefixed_environ(prefix: str, environ=None) -> dict:
    """Collect PREFIX_* variables from the process environment.

    Keys are returned without the prefix, so SPRINTBOARD_API_URL becomes
    API_URL and can be merged over values from a file.
    """
    environ = os.environ if environ is None else environ
    result = {}
    for key, value in environ.items():
        if key.startswith(prefix) and len(key) > len(prefix):
            result[key[len(prefix):]] = check_value(value, key)
    return result
