"""
Game state serialization and the reference snapshot stores.

Exports and imports a GameState to/from JSON-compatible dicts. Stores keep a single
snapshot under a configurable key; a snapshot that cannot be read or does not
describe a well-formed game is treated as absent.
"""
from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Protocol

from .deck import Card, Suit
from .game import GameState, Phase, Player, is_well_formed

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1


class SnapshotError(ValueError):
    """Raised when a snapshot dict does not describe a game state."""


def _cards_to_list(cards: list[Card]) -> list[str]:
    return [c.id for c in cards]


def _cards_from_list(ids: list[str]) -> list[Card]:
    return [Card.from_string(s) for s in ids]


def _player_to_dict(player: Player) -> Dict[str, Any]:
    return {
        "id": player.id,
        "name": player.name,
        "hand": _cards_to_list(player.hand),
        "is_cpu": player.is_cpu,
        "sitting_out": player.sitting_out,
    }


def _player_from_dict(d: Dict[str, Any]) -> Player:
    return Player(
        id=str(d["id"]),
        name=str(d["name"]),
        hand=_cards_from_list(list(d.get("hand", []))),
        is_cpu=bool(d.get("is_cpu", False)),
        sitting_out=bool(d.get("sitting_out", False)),
    )


def state_to_dict(state: GameState) -> Dict[str, Any]:
    """
    Serialize a GameState to a JSON-compatible dict.

    Cards are stored by their identity string (``"J-hearts"``).
    """
    return {
        "schema_version": SCHEMA_VERSION,
        "saved_at": datetime.now(timezone.utc).isoformat(),
        "players": [_player_to_dict(p) for p in state.players],
        "deck": _cards_to_list(state.deck),
        "current_player": state.current_player,
        "dealer": state.dealer,
        "trump": str(state.trump) if state.trump is not None else None,
        "trump_caller": state.trump_caller,
        "trick": _cards_to_list(state.trick),
        "trick_leader": state.trick_leader,
        "played": _cards_to_list(state.played),
        "scores": list(state.scores),
        "phase": state.phase.value,
        "learning_mode": state.learning_mode,
        "pass_count": state.pass_count,
        "going_alone": state.going_alone,
        "awaiting_clear": state.awaiting_clear,
        "revision": state.revision,
    }


def state_from_dict(d: Dict[str, Any]) -> GameState:
    """
    Deserialize a GameState from a dict produced by ``state_to_dict``.

    Raises SnapshotError for anything that is not a well-formed game.
    """
    try:
        trump = d.get("trump")
        caller = d.get("trump_caller")
        state = GameState(
            players=[_player_from_dict(p) for p in d["players"]],
            deck=_cards_from_list(list(d.get("deck", []))),
            current_player=int(d["current_player"]),
            dealer=int(d["dealer"]),
            trump=Suit[trump.upper()] if trump is not None else None,
            trump_caller=int(caller) if caller is not None else None,
            trick=_cards_from_list(list(d.get("trick", []))),
            trick_leader=int(d.get("trick_leader", 0)),
            played=_cards_from_list(list(d.get("played", []))),
            scores=[int(s) for s in d.get("scores", [0, 0])],
            phase=Phase(d["phase"]),
            learning_mode=bool(d.get("learning_mode", False)),
            pass_count=int(d.get("pass_count", 0)),
            going_alone=bool(d.get("going_alone", False)),
            awaiting_clear=bool(d.get("awaiting_clear", False)),
            revision=int(d.get("revision", 0)),
        )
    except (KeyError, TypeError, ValueError, AttributeError) as exc:
        raise SnapshotError(f"Invalid snapshot: {exc}") from exc
    if not is_well_formed(state):
        raise SnapshotError("Snapshot does not describe a well-formed game")
    return state


def state_to_json(state: GameState) -> str:
    """Serialize a GameState to a JSON string."""
    return json.dumps(state_to_dict(state), indent=2)


def state_from_json(s: str) -> GameState:
    """Deserialize a GameState from a JSON string."""
    try:
        d = json.loads(s)
    except json.JSONDecodeError as exc:
        raise SnapshotError(f"Invalid snapshot JSON: {exc}") from exc
    if not isinstance(d, dict):
        raise SnapshotError("Snapshot JSON must be an object")
    return state_from_dict(d)


class Store(Protocol):
    """Persistence collaborator: one opaque snapshot."""

    def load(self) -> GameState | None:
        """Saved state, or None when there is none or it cannot be used."""

    def save(self, state: GameState) -> None:
        """Persist ``state``. Failures are logged, not raised."""


class MemoryStore:
    """In-process key/value store, one snapshot per key (useful for tests and embedding)."""

    def __init__(self, key: str, backing: Dict[str, str] | None = None) -> None:
        self.key = key
        self.backing: Dict[str, str] = backing if backing is not None else {}

    def load(self) -> GameState | None:
        raw = self.backing.get(self.key)
        if raw is None:
            return None
        try:
            return state_from_json(raw)
        except SnapshotError:
            logger.error("Invalid saved state under %r, using initial state", self.key, exc_info=True)
            del self.backing[self.key]
            return None

    def save(self, state: GameState) -> None:
        self.backing[self.key] = state_to_json(state)


class JsonFileStore:
    """Snapshot stored as ``<directory>/<key>.json``."""

    def __init__(self, directory: str | Path, key: str) -> None:
        self.directory = Path(directory)
        self.key = key

    @property
    def path(self) -> Path:
        return self.directory / f"{self.key}.json"

    def load(self) -> GameState | None:
        path = self.path
        if not path.exists():
            return None
        try:
            return state_from_json(path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, SnapshotError):
            logger.error("Error loading game state from %s", path, exc_info=True)
            self._discard()
            return None

    def _discard(self) -> None:
        path = self.path
        if not path.is_file():
            return
        try:
            path.unlink()
        except OSError:
            logger.exception("Error removing unreadable game state %s", path)

    def save(self, state: GameState) -> None:
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            self.path.write_text(state_to_json(state), encoding="utf-8")
        except OSError:
            logger.exception("Error saving game state to %s", self.path)


__all__ = [
    "SCHEMA_VERSION",
    "SnapshotError",
    "state_to_dict",
    "state_from_dict",
    "state_to_json",
    "state_from_json",
    "Store",
    "MemoryStore",
    "JsonFileStore",
]
