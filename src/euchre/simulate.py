"""
Tiny CLI to play CPU-only euchre hands and report per-team statistics.

Usage (from project root, after installing in editable mode):
    python -m euchre.simulate --hands 200 --seed 7
    python -m euchre.simulate --agent random --hands 50
"""
from __future__ import annotations

import argparse
import logging
import random
from dataclasses import dataclass, field
from typing import Dict, List

import numpy as np

from .actions import StartGame
from .agents import HeuristicAgent, Policy, RandomAgent
from .config import EngineConfig
from .deal import team_of
from .game import EventKind, Phase
from .session import GameSession, LoggingNotifier

SIM_CONFIG = EngineConfig(player_names=("North", "East", "South", "West"), cpu_seats=(0, 1, 2, 3))


@dataclass
class SimulationStats:
    """Tricks taken per team for every completed hand, plus bidding counters."""

    tricks: List[tuple[int, int]] = field(default_factory=list)
    calls: List[int] = field(default_factory=lambda: [0, 0])
    lone_calls: int = 0
    forced_calls: int = 0

    def summary(self) -> Dict[str, object]:
        arr = np.array(self.tricks, dtype=np.int64).reshape(-1, 2)
        if arr.shape[0] == 0:
            mean = np.zeros(2)
            std = np.zeros(2)
        else:
            mean = arr.mean(axis=0)
            std = arr.std(axis=0)
        return {
            "hands": int(arr.shape[0]),
            "total_tricks": [int(x) for x in arr.sum(axis=0)],
            "mean_tricks": [float(x) for x in mean],
            "std_tricks": [float(x) for x in std],
            "hands_won": [int((arr[:, 0] > arr[:, 1]).sum()), int((arr[:, 1] > arr[:, 0]).sum())],
            "calls": list(self.calls),
            "lone_calls": self.lone_calls,
            "forced_calls": self.forced_calls,
        }


def make_agent(kind: str, seed: int, config: EngineConfig) -> Policy:
    if kind == "heuristic":
        return HeuristicAgent(config)
    if kind == "random":
        return RandomAgent(seed=seed)
    raise ValueError(f"Unknown agent kind: {kind}")


def run_simulation(
    num_hands: int,
    seed: int,
    agent_kind: str = "heuristic",
    config: EngineConfig = SIM_CONFIG,
    verbose: bool = False,
    max_steps: int = 1_000_000,
) -> SimulationStats:
    """Play ``num_hands`` hands with every seat driven by ``agent_kind`` agents."""
    rng = random.Random(seed)
    notifier = LoggingNotifier() if verbose else None
    session = GameSession(notifier=notifier, config=config, rng=rng)
    agents = [make_agent(agent_kind, seed + seat, config) for seat in range(4)]
    stats = SimulationStats()

    session.dispatch(StartGame())
    start_scores = list(session.state.scores)
    steps = 0
    while len(stats.tricks) < num_hands and steps < max_steps:
        state = session.state
        steps += 1
        if state.phase in (Phase.BIDDING, Phase.PLAYING) and not state.awaiting_clear:
            seat = state.current_player
            transition = session.dispatch(agents[seat].act(state, seat))
        else:
            due = session.scheduled()
            if not due:
                break
            transition = session.fire(due[0])
            if transition is None:
                continue
        if transition.error is not None:
            raise RuntimeError(f"Agent action rejected: {transition.error}")

        for event in transition.events:
            if event.kind == EventKind.TRUMP_CALLED and event.seat is not None:
                stats.calls[team_of(event.seat)] += 1
                # a call by the dealer after three passes is a stuck-dealer call
                if event.seat == state.dealer and state.pass_count >= 3:
                    stats.forced_calls += 1
            elif event.kind == EventKind.GOING_ALONE:
                stats.lone_calls += 1
            elif event.kind == EventKind.HAND_COMPLETE:
                scores = transition.state.scores
                stats.tricks.append((scores[0] - start_scores[0], scores[1] - start_scores[1]))
                start_scores = list(scores)
    return stats


def main() -> None:
    parser = argparse.ArgumentParser(description="Play CPU-only euchre hands and print statistics.")
    parser.add_argument(
        "--hands",
        type=int,
        default=100,
        help="Number of hands to play.",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=42,
        help="Random seed for reproducibility.",
    )
    parser.add_argument(
        "--agent",
        choices=["heuristic", "random"],
        default="heuristic",
        help="Policy used by all four seats.",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log every game event.",
    )
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO if args.verbose else logging.WARNING)

    stats = run_simulation(args.hands, seed=args.seed, agent_kind=args.agent, verbose=args.verbose)
    s = stats.summary()
    print(f"agent={args.agent} hands={s['hands']} seed={args.seed}")
    for team in (0, 1):
        print(
            f"  team {team}: tricks={s['total_tricks'][team]} "
            f"mean={s['mean_tricks'][team]:.2f} std={s['std_tricks'][team]:.2f} "
            f"hands_won={s['hands_won'][team]} calls={s['calls'][team]}"
        )
    print(f"  lone calls={s['lone_calls']} forced dealer calls={s['forced_calls']}")


if __name__ == "__main__":
    main()
