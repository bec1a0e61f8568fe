"""Passive ability repository."""
from __future__ import annotations

from typing import Dict

from roguedex.data.repositories.base import RepositoryBase
from roguedex.domain.defs import PassiveDef


class PassivesRepository(RepositoryBase[PassiveDef]):
    def __init__(self, base_path=None) -> None:
        super().__init__("passives.json", base_path)

    def _build(self, raw: dict[str, object]) -> Dict[str, PassiveDef]:
        passives: Dict[str, PassiveDef] = {}
        for passive_id, payload in raw.items():
            data = self._require_mapping(payload, f"passive '{passive_id}'")
            passives[passive_id] = PassiveDef(
                id=passive_id,
                name=self._require_str(data.get("name"), f"passive '{passive_id}' name"),
                description=str(data.get("description", "")),
            )
        return passives
