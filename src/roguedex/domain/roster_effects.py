"""Member-level HP, EXP, modifier and deck math.

Every helper takes a member and returns a new one. Heals and damage leave
knocked-out members untouched; damage never takes a member below 1 HP.
"""
from __future__ import annotations

import math
from dataclasses import replace
from typing import Iterable, Sequence

from roguedex.domain.entities import RosterMember


def heal_percent(member: RosterMember, percent: float) -> RosterMember:
    if not member.is_alive:
        return member
    amount = math.floor(member.max_hp * percent)
    return replace(member, current_hp=min(member.max_hp, member.current_hp + amount))


def full_heal(member: RosterMember) -> RosterMember:
    if not member.is_alive:
        return member
    return replace(member, current_hp=member.max_hp)


def boost_max_hp(member: RosterMember, amount: int) -> RosterMember:
    """Raise max and current HP by ``amount``, tracked in the modifier."""
    max_hp = member.max_hp + amount
    return replace(
        member,
        max_hp=max_hp,
        max_hp_modifier=member.max_hp_modifier + amount,
        current_hp=max(0, min(member.current_hp + amount, max_hp)),
    )


def grant_exp(member: RosterMember, amount: int) -> RosterMember:
    return replace(member, exp=max(0, member.exp + amount))


def apply_damage(member: RosterMember, amount: int) -> RosterMember:
    if not member.is_alive:
        return member
    return replace(member, current_hp=max(1, member.current_hp - amount))


def add_energy_modifier(member: RosterMember, amount: int) -> RosterMember:
    return replace(member, energy_modifier=member.energy_modifier + amount)


def add_draw_modifier(member: RosterMember, amount: int) -> RosterMember:
    return replace(member, draw_modifier=member.draw_modifier + amount)


def add_cards(member: RosterMember, card_ids: Iterable[str]) -> RosterMember:
    return replace(member, deck=member.deck + tuple(card_ids))


def remove_cards_at(member: RosterMember, indices: Sequence[int]) -> RosterMember:
    """Drop the cards at ``indices``, highest index first.

    Out-of-range and repeated indices are ignored, so ``[3, 1]`` and
    ``[1, 3]`` remove the same two original cards.
    """
    deck = list(member.deck)
    for index in sorted(set(indices), reverse=True):
        if 0 <= index < len(deck):
            del deck[index]
    return replace(member, deck=tuple(deck))


def remove_card_ids(member: RosterMember, card_ids: Iterable[str]) -> RosterMember:
    """Remove one copy per listed id, first occurrence first."""
    deck = list(member.deck)
    for card_id in card_ids:
        if card_id in deck:
            deck.remove(card_id)
    return replace(member, deck=tuple(deck))


def revive(member: RosterMember, hp_fraction: float, marker_card_id: str) -> RosterMember:
    current_hp = max(1, math.floor(member.max_hp * hp_fraction))
    return replace(
        member,
        knocked_out=False,
        current_hp=min(current_hp, member.max_hp),
        deck=member.deck + (marker_card_id,),
    )


__all__ = [
    "add_cards",
    "add_draw_modifier",
    "add_energy_modifier",
    "apply_damage",
    "boost_max_hp",
    "full_heal",
    "grant_exp",
    "heal_percent",
    "remove_card_ids",
    "remove_cards_at",
    "revive",
]
