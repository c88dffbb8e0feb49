"""
File attachments for chat messages and project creation.

Files are checked against the limits of their context when added. A
rejected file is reported back to the caller and never retried.
"""

import base64
import logging
import mimetypes
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)

MB = 1024 * 1024

IMAGE = "image"
DOCUMENT = "document"

IMAGE_TYPES = frozenset({"image/png", "image/jpeg", "image/gif", "image/webp"})
DOCUMENT_TYPES = frozenset({
    "application/pdf",
    "text/plain",
    "text/markdown",
    "text/csv",
    "application/json",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
})

ALLOWED_TYPES = {IMAGE: IMAGE_TYPES, DOCUMENT: DOCUMENT_TYPES}

# Rejection reasons
DUPLICATE = "duplicate"
TOO_MANY = "too_many"
WRONG_TYPE = "wrong_type"
TOO_LARGE = "too_large"
UNREADABLE = "unreadable"


@dataclass(frozen=True)
class AttachmentLimits:
    max_files: int
    max_image_bytes: int
    max_document_bytes: int

    def max_bytes(self, kind: str) -> int:
        return self.max_image_bytes if kind == IMAGE else self.max_document_bytes


CHAT_LIMITS = AttachmentLimits(max_files=5, max_image_bytes=10 * MB, max_document_bytes=20 * MB)
PROJECT_LIMITS = AttachmentLimits(max_files=10, max_image_bytes=20 * MB, max_document_bytes=20 * MB)


def guess_mime_type(path: Path) -> str:
    if path.suffix.lower() == ".md":
        return "text/markdown"
    mime, _ = mimetypes.guess_type(path.name)
    return mime or "application/octet-stream"


@dataclass
class AttachedFile:
    path: Path
    name: str
    size: int
    mime_type: str
    kind: str
    _preview: str | None = field(default=None, repr=False, compare=False)

    @property
    def key(self) -> tuple[str, int]:
        return (self.name, self.size)

    @property
    def preview(self) -> str | None:
        """Data URI for images, rendered on first access. None for documents."""
        if self.kind != IMAGE:
            return None
        if self._preview is None:
            encoded = base64.b64encode(self.path.read_bytes()).decode("ascii")
            self._preview = f"data:{self.mime_type};base64,{encoded}"
        return self._preview


@dataclass
class AddResult:
    ok: bool
    file: AttachedFile | None = None
    reason: str | None = None
    message: str = ""


class AttachmentManager:
    """Accumulates attachments under count, size, type and dedup rules."""

    def __init__(self, limits: AttachmentLimits = CHAT_LIMITS):
        self.limits = limits
        self._files: list[AttachedFile] = []

    @property
    def files(self) -> list[AttachedFile]:
        return list(self._files)

    def __len__(self) -> int:
        return len(self._files)

    def _reject(self, reason: str, message: str) -> AddResult:
        logger.info(f"[ATTACH] Rejected: {message}")
        return AddResult(ok=False, reason=reason, message=message)

    def add(self, path: Path, kind: str) -> AddResult:
        path = Path(path)
        try:
            size = path.stat().st_size
        except OSError as e:
            return self._reject(UNREADABLE, f"{path.name}: {e}")

        if any(f.key == (path.name, size) for f in self._files):
            return self._reject(DUPLICATE, f"{path.name} is already attached")

        if len(self._files) >= self.limits.max_files:
            return self._reject(TOO_MANY, f"At most {self.limits.max_files} files can be attached")

        mime_type = guess_mime_type(path)
        if mime_type not in ALLOWED_TYPES.get(kind, ()):
            return self._reject(WRONG_TYPE, f"{path.name} ({mime_type}) is not a valid {kind}")

        max_bytes = self.limits.max_bytes(kind)
        if size > max_bytes:
            return self._reject(
                TOO_LARGE, f"{path.name} exceeds the {max_bytes // MB}MB limit for {kind}s"
            )

        attached = AttachedFile(path=path, name=path.name, size=size, mime_type=mime_type, kind=kind)
        self._files.append(attached)
        return AddResult(ok=True, file=attached)

    def remove(self, file: AttachedFile) -> bool:
        for i, existing in enumerate(self._files):
            if existing.key == file.key:
                del self._files[i]
                return True
        return False

    def clear(self) -> None:
        self._files = []
