"""
GameSession: the glue between ``apply`` and its collaborators.

- a Store (load at start, save after every successful transition),
- a Notifier receiving the transition events (fire-and-forget),
- scheduling: ``scheduled()`` says which follow-up to fire and after what delay;
  ``fire()`` drops entries made stale by a newer state.

The session never sleeps; whoever owns the clock (a UI loop, a timer) calls ``fire``.
``run_pending`` ignores the delays and drives follow-ups until a human must act.
"""
from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Protocol

from .actions import Action, ClearTrick, CpuPlay
from .config import DEFAULT_CONFIG, EngineConfig
from .game import Event, EventKind, GameState, Transition, apply, initial_state, pending_actions
from .persistence import JsonFileStore, Store

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    def notify(self, event: Event) -> None:
        """Receive one event. The return value is ignored."""


class LoggingNotifier:
    """Notifier that writes every event to the ``euchre.events`` logger."""

    def __init__(self, name: str = "euchre.events") -> None:
        self._logger = logging.getLogger(name)

    def notify(self, event: Event) -> None:
        self._logger.info("[%s] %s", event.kind.value, event.message)


class RecordingNotifier:
    """Notifier that keeps events in memory (handy for tests and replays)."""

    def __init__(self) -> None:
        self.events: List[Event] = []

    def notify(self, event: Event) -> None:
        self.events.append(event)


@dataclass(frozen=True)
class ScheduledAction:
    """A follow-up to apply after ``delay_ms``, valid only while the state is at ``revision``."""

    action: Action
    revision: int
    delay_ms: int


class GameSession:
    """Owns the current GameState and feeds actions through ``apply``."""

    def __init__(
        self,
        store: Store | None = None,
        notifier: Notifier | None = None,
        config: EngineConfig | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.config = config or DEFAULT_CONFIG
        self.store = store
        self.notifier = notifier
        self.rng = rng or random.Random()
        self.state: GameState = self._load()

    @classmethod
    def with_file_store(
        cls,
        directory: str | Path,
        notifier: Notifier | None = None,
        config: EngineConfig | None = None,
        rng: random.Random | None = None,
    ) -> "GameSession":
        """Session persisted under ``directory`` using ``config.storage_key``."""
        config = config or DEFAULT_CONFIG
        store = JsonFileStore(directory, config.storage_key)
        return cls(store=store, notifier=notifier, config=config, rng=rng)

    def _load(self) -> GameState:
        if self.store is not None:
            loaded = self.store.load()
            if loaded is not None:
                return loaded
        return initial_state(self.config)

    def _save(self) -> None:
        if self.store is None:
            return
        try:
            self.store.save(self.state)
        except Exception:
            logger.exception("Error saving game state")

    def _notify(self, events: Iterable[Event]) -> None:
        if self.notifier is None:
            return
        for event in events:
            self.notifier.notify(event)

    def dispatch(self, action: Action) -> Transition:
        """Apply ``action`` to the current state; on change, notify and save."""
        transition = apply(self.state, action, rng=self.rng, config=self.config)
        self._notify(transition.events)
        if transition.state is not self.state:
            self.state = transition.state
            self._save()
        return transition

    def scheduled(self) -> List[ScheduledAction]:
        """Follow-ups due for the current state, with their presentation delay."""
        out: List[ScheduledAction] = []
        for action in pending_actions(self.state):
            if isinstance(action, ClearTrick):
                delay = self.config.clear_delay_ms
            elif isinstance(action, CpuPlay):
                delay = self.config.cpu_delay_ms
            else:
                delay = 0
            out.append(ScheduledAction(action=action, revision=self.state.revision, delay_ms=delay))
        return out

    def fire(self, scheduled: ScheduledAction) -> Transition | None:
        """Apply a scheduled follow-up unless a newer state has superseded it."""
        if scheduled.revision != self.state.revision:
            logger.debug(
                "Dropping stale %r (scheduled at revision %d, now %d)",
                scheduled.action,
                scheduled.revision,
                self.state.revision,
            )
            return None
        return self.dispatch(scheduled.action)

    def run_pending(self, max_steps: int = 10_000, stop_after_hands: int | None = None) -> int:
        """
        Apply follow-ups back to back until none is pending (a human must act).
        With ``stop_after_hands`` it also stops once that many hands have completed.
        Returns the number of actions applied.
        """
        steps = 0
        hands = 0
        while steps < max_steps:
            due = self.scheduled()
            if not due:
                break
            transition = self.fire(due[0])
            steps += 1
            if transition is not None and transition.error is not None:
                raise RuntimeError(f"Scheduled {due[0].action!r} was rejected: {transition.error}")
            if transition is not None and any(e.kind == EventKind.HAND_COMPLETE for e in transition.events):
                hands += 1
                if stop_after_hands is not None and hands >= stop_after_hands:
                    break
        return steps


__all__ = [
    "Notifier",
    "LoggingNotifier",
    "RecordingNotifier",
    "ScheduledAction",
    "GameSession",
]
