"""
Card-play heuristic and the agents that drive CPU seats.

``best_play`` is the rule-based card choice used by the state machine for CPU turns.
The small ``Policy`` protocol defines the contract used by the simulator:
``act(state, seat) -> action`` where the action is a ``Pass``, ``SetTrump`` or ``PlayCard``.
"""
from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, List, Protocol

from .actions import Action, Pass, PlayCard, SetTrump
from .bidding import BidDecision, decide_bid, must_call
from .config import DEFAULT_CONFIG, EngineConfig
from .deal import partner_of, seat_for_trick_index
from .deck import Card, Rank, Suit, effective_suit, is_trump, rank_value
from .play import beats, determine_winner, led_suit, legal_plays

if TYPE_CHECKING:  # pragma: no cover - import cycle guard for type checking only
    from .game import GameState


def _lowest(cards: list[Card], trump: Suit) -> Card:
    return min(cards, key=lambda c: (rank_value(c, trump), c.suit))


def _suit_length(hand: list[Card], suit: Suit, trump: Suit) -> int:
    return sum(1 for c in hand if effective_suit(c, trump) == suit)


def choose_lead(hand: list[Card], trump: Suit) -> Card:
    """
    Lead preference: right bower, left bower, highest trump, off-suit Ace,
    off-suit King/Queen, then the highest card. Off-suit ties go to the shortest suit.
    """
    trumps = [c for c in hand if is_trump(c, trump)]
    if trumps:
        # rank_value already orders right bower > left bower > other trump
        return max(trumps, key=lambda c: rank_value(c, trump))

    def short_suit_first(c: Card) -> tuple[int, int, int]:
        return (-rank_value(c, trump), _suit_length(hand, c.suit, trump), int(c.suit))

    aces = [c for c in hand if c.rank == Rank.ACE]
    if aces:
        return min(aces, key=short_suit_first)
    faces = [c for c in hand if c.rank in (Rank.KING, Rank.QUEEN)]
    if faces:
        return min(faces, key=short_suit_first)
    return min(hand, key=lambda c: (-rank_value(c, trump), int(c.suit)))


def choose_follow(
    hand: list[Card],
    trick: list[Card],
    trump: Suit,
    partner_winning: bool = False,
    remaining_to_act: int = 0,
) -> Card:
    """Card to play onto a non-empty trick."""
    legal = legal_plays(hand, trick, trump)

    # Partner has it and at most one opponent can still overtake: keep strength
    if partner_winning and remaining_to_act <= 1:
        return _lowest(legal, trump)

    lead = led_suit(trick, trump)
    following = [c for c in legal if effective_suit(c, trump) == lead]
    if following:
        winners = [c for c in following if beats(c, trick, trump)]
        return _lowest(winners or following, trump)

    trumps = [c for c in legal if is_trump(c, trump)]
    if trumps:
        winners = [c for c in trumps if beats(c, trick, trump)]
        if winners:
            return _lowest(winners, trump)
        plain = [c for c in legal if not is_trump(c, trump)]
        return _lowest(plain or trumps, trump)

    return _lowest(legal, trump)


def best_play(
    hand: list[Card],
    trick: list[Card],
    trump: Suit,
    partner_winning: bool = False,
    remaining_to_act: int = 0,
) -> Card:
    """
    Heuristic card choice. ``partner_winning`` says the partner holds the winning card;
    ``remaining_to_act`` is how many players still play after this one.
    """
    if not hand:
        raise ValueError("Cannot choose a play from an empty hand")
    if not trick:
        return choose_lead(hand, trump)
    return choose_follow(hand, trick, trump, partner_winning, remaining_to_act)


def play_context(state: "GameState", seat: int) -> tuple[bool, int]:
    """(partner_winning, remaining_to_act) for ``seat`` about to play into the current trick."""
    remaining = state.active_player_count - len(state.trick) - 1
    if not state.trick or state.trump is None:
        return False, remaining
    winner_idx = determine_winner(state.trick, state.trump)
    winner_seat = seat_for_trick_index(state.trick_leader, winner_idx, state.sitting_out_seat)
    return winner_seat == partner_of(seat), remaining


class Policy(Protocol):
    """Decision policy for one seat."""

    def act(self, state: "GameState", seat: int) -> Action:
        """
        Choose a ``Pass``/``SetTrump`` during bidding or a ``PlayCard`` during play.

        Implementations must only return actions the state machine accepts for ``seat``.
        """


@dataclass
class HeuristicAgent:
    """Rule-based player: ``decide_bid`` for bidding and ``best_play`` for cards."""

    config: EngineConfig = DEFAULT_CONFIG

    def bid_decision(self, state: "GameState", seat: int) -> BidDecision:
        hand = state.players[seat].hand
        return decide_bid(hand, seat == state.dealer, state.pass_count, self.config)

    def choose_card(self, state: "GameState", seat: int) -> Card:
        assert state.trump is not None
        partner_winning, remaining = play_context(state, seat)
        return best_play(state.players[seat].hand, state.trick, state.trump, partner_winning, remaining)

    def act(self, state: "GameState", seat: int) -> Action:
        if state.trump is None:
            decision = self.bid_decision(state, seat)
            if decision.suit is None:
                return Pass()
            return SetTrump(decision.suit, decision.going_alone)
        return PlayCard(self.choose_card(state, seat))


@dataclass
class RandomAgent:
    """
    Baseline policy that samples uniformly among legal actions.

    Usage:
        agent = RandomAgent(seed=42)
        action = agent.act(state, seat)
    """

    seed: int | None = None
    _rng: random.Random = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._rng = random.Random(self.seed)

    def legal_actions(self, state: "GameState", seat: int) -> List[Action]:
        hand = state.players[seat].hand
        if state.trump is None:
            actions: List[Action] = [SetTrump(s, alone) for s in Suit for alone in (False, True)]
            if not must_call(seat == state.dealer, state.pass_count):
                actions.append(Pass())
            return actions
        return [PlayCard(c) for c in legal_plays(hand, state.trick, state.trump)]

    def act(self, state: "GameState", seat: int) -> Action:
        """Pick a random legal action for ``seat``."""
        actions = self.legal_actions(state, seat)
        if not actions:
            raise ValueError("No legal actions available for RandomAgent")
        return self._rng.choice(actions)


__all__ = [
    "Policy",
    "HeuristicAgent",
    "RandomAgent",
    "best_play",
    "choose_lead",
    "choose_follow",
    "play_context",
]
