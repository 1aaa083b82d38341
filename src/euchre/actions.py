"""
Actions accepted by ``euchre.game.apply``.

The set is closed: ``Action`` is the union of the dataclasses below and the state
machine matches on it exhaustively.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from .deck import Card, Suit


@dataclass(frozen=True)
class StartGame:
    pass


@dataclass(frozen=True)
class Deal:
    """Deal a new hand. ``deck`` overrides the freshly shuffled deck (tests, replays)."""

    deck: tuple[Card, ...] | None = None


@dataclass(frozen=True)
class Pass:
    pass


@dataclass(frozen=True)
class SetTrump:
    suit: Suit
    going_alone: bool = False


@dataclass(frozen=True)
class PlayCard:
    """Play ``card`` for the seat to act. ``seat``, when given, must be that seat."""

    card: Card
    seat: int | None = None


@dataclass(frozen=True)
class ToggleLearningMode:
    pass


@dataclass(frozen=True)
class CpuPlay:
    """Let the CPU seat whose turn it is bid or play."""

    pass


@dataclass(frozen=True)
class ClearTrick:
    pass


Action = Union[StartGame, Deal, Pass, SetTrump, PlayCard, ToggleLearningMode, CpuPlay, ClearTrick]

__all__ = [
    "Action",
    "StartGame",
    "Deal",
    "Pass",
    "SetTrump",
    "PlayCard",
    "ToggleLearningMode",
    "CpuPlay",
    "ClearTrick",
]
