"""Reading content files from the definitions directory."""
from __future__ import annotations

import json
from pathlib import Path

from .errors import DataLoadError


def load_json(path: Path) -> object:
    """Parse one content file, wrapping I/O and syntax problems in DataLoadError."""
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise DataLoadError(f"Missing content file '{path.name}' in {path.parent}", path) from exc
    except OSError as exc:
        raise DataLoadError(f"Cannot read content file {path}: {exc.strerror}", path) from exc

    if not text.strip():
        raise DataLoadError(f"Content file '{path.name}' is empty", path)
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise DataLoadError(
            f"Malformed JSON in '{path.name}' at line {exc.lineno}, column {exc.colno}: {exc.msg}",
            path,
        ) from exc
