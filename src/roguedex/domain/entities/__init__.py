"""Domain entity exports."""

from .position import GridPosition, all_positions
from .roster_member import RosterMember

__all__ = ["GridPosition", "RosterMember", "all_positions"]
