"""Species repository."""
from __future__ import annotations

from typing import Dict

from roguedex.data.errors import DataValidationError
from roguedex.data.repositories.base import RepositoryBase
from roguedex.domain.defs import SpeciesDef


class SpeciesRepository(RepositoryBase[SpeciesDef]):
    """Loads base stats and starting decks for every creature form."""

    def __init__(self, base_path=None) -> None:
        super().__init__("species.json", base_path)

    def _build(self, raw: dict[str, object]) -> Dict[str, SpeciesDef]:
        species: Dict[str, SpeciesDef] = {}
        for species_id, payload in raw.items():
            context = f"species '{species_id}'"
            data = self._require_mapping(payload, context)
            max_hp = self._require_int(data.get("max_hp"), f"{context} max_hp")
            if max_hp <= 0:
                raise DataValidationError(f"{context} max_hp must be positive.")
            types = self._require_str_list(data.get("types"), f"{context} types")
            if not types:
                raise DataValidationError(f"{context} must declare at least one type.")
            species[species_id] = SpeciesDef(
                id=species_id,
                name=self._require_str(data.get("name"), f"{context} name"),
                types=tuple(types),
                max_hp=max_hp,
                deck=tuple(self._require_str_list(data.get("deck", []), f"{context} deck")),
            )
        return species
