"""Where the shipped species, card, event and map files live."""
from __future__ import annotations

from pathlib import Path

DEFINITIONS_DIRNAME = ("data", "definitions")


def get_repo_root() -> Path:
    # src/roguedex/data/paths.py -> project root
    return Path(__file__).resolve().parents[3]


def get_definitions_path(base_path: Path | str | None = None) -> Path:
    """Directory holding the content files; ``base_path`` overrides it (tests, mods)."""
    if base_path is not None:
        return Path(base_path)
    return get_repo_root().joinpath(*DEFINITIONS_DIRNAME)


def get_definition_file(filename: str, base_path: Path | str | None = None) -> Path:
    return get_definitions_path(base_path) / filename
