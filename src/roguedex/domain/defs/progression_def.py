"""Level-gated progression tree definitions."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True, slots=True)
class ProgressionRung:
    """One level of a progression tree.

    ``evolves_to`` switches the member's form, ``hp_boost`` is added to the
    member's running max-HP modifier, ``passive_id`` of ``None`` grants nothing
    new, and ``cards_to_add`` are appended to the deck in order.
    """

    level: int
    name: str
    description: str = ""
    evolves_to: str | None = None
    hp_boost: int = 0
    passive_id: str | None = None
    cards_to_add: Tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class ProgressionTree:
    """Exactly four rungs, levels 1 through 4, for one species line."""

    base_species_id: str
    rungs: Tuple[ProgressionRung, ...]

    def rung_for_level(self, level: int) -> ProgressionRung | None:
        for rung in self.rungs:
            if rung.level == level:
                return rung
        return None

    @property
    def form_ids(self) -> Tuple[str, ...]:
        """Base id followed by every evolution target, in rung order."""
        forms = [self.base_species_id]
        for rung in self.rungs:
            if rung.evolves_to and rung.evolves_to not in forms:
                forms.append(rung.evolves_to)
        return tuple(forms)
