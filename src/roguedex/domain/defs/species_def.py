"""Species (form) definition model."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True, slots=True)
class SpeciesDef:
    """Base stats for one creature form. Evolved forms are separate entries."""

    id: str
    name: str
    types: Tuple[str, ...]
    max_hp: int
    deck: Tuple[str, ...]
