"""Static asset lookup for the break overlay page."""

from __future__ import annotations

import mimetypes
from pathlib import Path, PurePosixPath
from typing import Optional
from urllib.parse import unquote

_TEXT_LIKE_TYPES = frozenset(
    {
        "application/javascript",
        "application/json",
        "application/manifest+json",
        "image/svg+xml",
    }
)

# mimetypes tables differ between platforms; pin the types the overlay ships.
_KNOWN_TYPES = {
    ".css": "text/css",
    ".html": "text/html",
    ".js": "application/javascript",
    ".json": "application/json",
    ".mp3": "audio/mpeg",
    ".svg": "image/svg+xml",
    ".wav": "audio/wav",
    ".webmanifest": "application/manifest+json",
}


def resolve_static_file(ui_root: Path, request_path: str) -> Optional[Path]:
    """Map a request path to a readable file under `ui_root`.

    Directory requests fall back to their `index.html`. Hidden segments and
    anything escaping the root resolve to `None`.
    """
    relative = PurePosixPath(unquote(request_path or "").lstrip("/"))
    if not relative.parts:
        return None
    if any(part.startswith(".") for part in relative.parts):
        return None

    root = ui_root.resolve()
    candidate = (root / relative).resolve()
    if root not in candidate.parents:
        return None

    if candidate.is_dir():
        candidate = candidate / "index.html"
    return candidate if candidate.is_file() else None


def guess_content_type(path: Path) -> str:
    """Content type for an asset; text payloads are declared as UTF-8."""
    mime_type = _KNOWN_TYPES.get(path.suffix.lower())
    if mime_type is None:
        mime_type, _ = mimetypes.guess_type(path.name)
    if not mime_type:
        return "application/octet-stream"
    if mime_type.startswith("text/") or mime_type in _TEXT_LIKE_TYPES:
        return f"{mime_type}; charset=utf-8"
    return mime_type
