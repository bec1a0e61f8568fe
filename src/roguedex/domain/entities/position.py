"""Grid position shared by roster members and enemy placements."""
from __future__ import annotations

from dataclasses import dataclass

from roguedex.core.types import COLUMNS, ROWS, Row


@dataclass(frozen=True, slots=True)
class GridPosition:
    row: Row
    column: int

    @property
    def is_valid(self) -> bool:
        return self.row in ROWS and self.column in COLUMNS


def all_positions() -> tuple[GridPosition, ...]:
    """Front row first, then back row, columns left to right."""
    return tuple(GridPosition(row=row, column=column) for row in ROWS for column in COLUMNS)
