"""Progression tree repository."""
from __future__ import annotations

from typing import Dict, List

from roguedex.config import MAX_LEVEL
from roguedex.data.errors import DataReferenceError, DataValidationError
from roguedex.data.repositories.base import RepositoryBase
from roguedex.data.repositories.cards_repo import CardsRepository
from roguedex.data.repositories.passives_repo import PassivesRepository
from roguedex.data.repositories.species_repo import SpeciesRepository
from roguedex.domain.defs import ProgressionRung, ProgressionTree


class ProgressionRepository(RepositoryBase[ProgressionTree]):
    """Loads level-gated progression trees and resolves forms to their tree.

    Trees are keyed by base species id. Any evolved form id resolves back to
    its owning tree through :meth:`get_tree_for_form`.
    """

    def __init__(
        self,
        base_path=None,
        *,
        species_repo: SpeciesRepository | None = None,
        cards_repo: CardsRepository | None = None,
        passives_repo: PassivesRepository | None = None,
    ) -> None:
        super().__init__("progression.json", base_path)
        self._species_repo = species_repo or SpeciesRepository(base_path)
        self._cards_repo = cards_repo or CardsRepository(base_path)
        self._passives_repo = passives_repo or PassivesRepository(base_path)
        self._form_index: Dict[str, str] | None = None

    def _build(self, raw: dict[str, object]) -> Dict[str, ProgressionTree]:
        trees: Dict[str, ProgressionTree] = {}
        form_index: Dict[str, str] = {}
        for base_id, payload in raw.items():
            context = f"progression '{base_id}'"
            data = self._require_mapping(payload, context)
            self._require_species(base_id, context)
            rung_entries = self._require_list(data.get("rungs"), f"{context} rungs")
            if len(rung_entries) != MAX_LEVEL:
                raise DataValidationError(f"{context} must have exactly {MAX_LEVEL} rungs.")
            rungs: List[ProgressionRung] = []
            for index, entry in enumerate(rung_entries):
                rung = self._build_rung(entry, f"{context} rung {index}")
                if rung.level != index + 1:
                    raise DataValidationError(
                        f"{context} rung {index} level must be {index + 1}, got {rung.level}."
                    )
                rungs.append(rung)
            tree = ProgressionTree(base_species_id=base_id, rungs=tuple(rungs))
            for form_id in tree.form_ids:
                owner = form_index.get(form_id)
                if owner is not None and owner != base_id:
                    raise DataValidationError(
                        f"form '{form_id}' belongs to both '{owner}' and '{base_id}'."
                    )
                form_index[form_id] = base_id
            trees[base_id] = tree
        self._form_index = form_index
        return trees

    def _build_rung(self, payload: object, context: str) -> ProgressionRung:
        data = self._require_mapping(payload, context)
        evolves_to = self._require_optional_str(data.get("evolves_to"), f"{context} evolves_to")
        if evolves_to is not None:
            self._require_species(evolves_to, f"{context} evolves_to")
        passive_id = self._require_optional_str(data.get("passive_id"), f"{context} passive_id")
        if passive_id is not None and not self._passives_repo.has(passive_id):
            raise DataReferenceError(f"{context} references missing passive '{passive_id}'.")
        cards = self._require_str_list(data.get("cards_to_add", []), f"{context} cards_to_add")
        for card_id in cards:
            if not self._cards_repo.has(card_id):
                raise DataReferenceError(f"{context} references missing card '{card_id}'.")
        hp_boost = self._require_int(data.get("hp_boost", 0), f"{context} hp_boost")
        if hp_boost < 0:
            raise DataValidationError(f"{context} hp_boost must be non-negative.")
        return ProgressionRung(
            level=self._require_int(data.get("level"), f"{context} level"),
            name=self._require_str(data.get("name"), f"{context} name"),
            description=str(data.get("description", "")),
            evolves_to=evolves_to,
            hp_boost=hp_boost,
            passive_id=passive_id,
            cards_to_add=tuple(cards),
        )

    def _require_species(self, species_id: str, context: str) -> None:
        if not self._species_repo.has(species_id):
            raise DataReferenceError(f"{context} references missing species '{species_id}'.")

    def get_tree_for_form(self, form_id: str) -> ProgressionTree | None:
        """Return the tree owning ``form_id`` (base or evolved), or None."""
        self._ensure_loaded()
        assert self._form_index is not None
        base_id = self._form_index.get(form_id)
        if base_id is None:
            return None
        return self.get(base_id)

    def base_species_id(self, form_id: str) -> str:
        self._ensure_loaded()
        assert self._form_index is not None
        return self._form_index.get(form_id, form_id)
