"""
Engine configuration: bidding thresholds, table roster, presentation delays and
the storage key handed to the persistence collaborator.
"""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class EngineConfig:
    """Configuration shared by the state machine, the CPU heuristics and the session."""

    # Bidding heuristic: call trump at call_threshold, go alone at alone_threshold
    call_threshold: int = 10
    alone_threshold: int = 18
    # Key (namespace) under which the store keeps the snapshot
    storage_key: str = "euchre_game_state"
    # Scheduler delays before a CPU turn and before clearing a finished trick
    cpu_delay_ms: int = 1000
    clear_delay_ms: int = 1500
    player_names: tuple[str, str, str, str] = ("You", "CPU 1", "CPU 2", "CPU 3")
    cpu_seats: tuple[int, ...] = (1, 2, 3)

    def __post_init__(self) -> None:
        if self.alone_threshold <= self.call_threshold:
            raise ValueError("alone_threshold must be strictly greater than call_threshold")
        if len(self.player_names) != 4:
            raise ValueError("player_names must name exactly 4 seats")
        if any(s not in range(4) for s in self.cpu_seats):
            raise ValueError(f"cpu_seats must be seat indices 0..3, got {self.cpu_seats}")
        if not self.storage_key:
            raise ValueError("storage_key must be non-empty")
        if self.cpu_delay_ms < 0 or self.clear_delay_ms < 0:
            raise ValueError("delays must be non-negative")


DEFAULT_CONFIG = EngineConfig()
