"""Factory helpers for runtime entities."""

from .roster_factory import create_roster_member

__all__ = ["create_roster_member"]
