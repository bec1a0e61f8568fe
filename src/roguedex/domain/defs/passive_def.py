"""Passive ability definition model."""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class PassiveDef:
    id: str
    name: str
    description: str
