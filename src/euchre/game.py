"""
Game state and the phase state machine: deal → bid → play → clear trick → next hand.

``apply(state, action)`` is the single entry point. It never mutates its input: it
returns a ``Transition`` holding the new state, the events worth telling the player
about, the follow-up actions a scheduler should apply next, and the error when the
action was rejected (in which case ``transition.state`` is the untouched input).
"""
from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import List, assert_never

from .actions import (
    Action,
    ClearTrick,
    CpuPlay,
    Deal,
    Pass,
    PlayCard,
    SetTrump,
    StartGame,
    ToggleLearningMode,
)
from .agents import HeuristicAgent
from .bidding import FORCED_CALL_PASSES, must_call
from .config import DEFAULT_CONFIG, EngineConfig
from .deal import (
    HAND_SIZE,
    NUM_SEATS,
    deal_hands,
    first_to_act,
    next_active_seat,
    next_dealer,
    next_seat,
    partner_of,
    seat_for_trick_index,
    team_of,
)
from .deck import Card, Suit, build_deck
from .errors import DealError, GameError, InvalidMoveError, InvalidPhaseError
from .play import determine_winner, is_valid_play

logger = logging.getLogger(__name__)

DECK_SIZE = 24


class Phase(str, Enum):
    PRE_GAME = "pre-game"
    DEALING = "dealing"
    BIDDING = "bidding"
    PLAYING = "playing"


class EventKind(str, Enum):
    GAME_STARTED = "game_started"
    HAND_DEALT = "hand_dealt"
    DEAL_FAILED = "deal_failed"
    PASSED = "passed"
    DEALER_MUST_CALL = "dealer_must_call"
    DEALER_FORCED = "dealer_forced"
    TRUMP_CALLED = "trump_called"
    GOING_ALONE = "going_alone"
    TRICK_WON = "trick_won"
    HAND_COMPLETE = "hand_complete"
    STATE_RESET = "state_reset"


@dataclass(frozen=True)
class Event:
    """Human-readable notification produced by a transition."""

    kind: EventKind
    message: str
    seat: int | None = None


@dataclass
class Player:
    id: str
    name: str
    hand: List[Card] = field(default_factory=list)
    is_cpu: bool = False
    # Partner of a lone caller, for the current hand only
    sitting_out: bool = False


@dataclass
class GameState:
    """Everything needed to resume a game. Seats 0..3; teams are (0, 2) and (1, 3)."""

    players: List[Player]
    deck: List[Card] = field(default_factory=list)  # kitty after the deal
    current_player: int = 0
    dealer: int = 0
    trump: Suit | None = None
    trump_caller: int | None = None
    trick: List[Card] = field(default_factory=list)
    trick_leader: int = 0
    played: List[Card] = field(default_factory=list)  # cleared tricks of this hand
    scores: List[int] = field(default_factory=lambda: [0, 0])
    phase: Phase = Phase.PRE_GAME
    learning_mode: bool = False
    pass_count: int = 0
    going_alone: bool = False
    awaiting_clear: bool = False
    revision: int = 0

    @property
    def sitting_out_seat(self) -> int | None:
        for i, p in enumerate(self.players):
            if p.sitting_out:
                return i
        return None

    @property
    def active_player_count(self) -> int:
        return NUM_SEATS - sum(1 for p in self.players if p.sitting_out)

    @property
    def current(self) -> Player:
        return self.players[self.current_player]

    def card_count(self) -> int:
        """Cards accounted for in this hand (24 between the deal and the next deal)."""
        return sum(len(p.hand) for p in self.players) + len(self.deck) + len(self.trick) + len(self.played)

    def copy(self) -> "GameState":
        return replace(
            self,
            players=[replace(p, hand=list(p.hand)) for p in self.players],
            deck=list(self.deck),
            trick=list(self.trick),
            played=list(self.played),
            scores=list(self.scores),
        )


@dataclass
class Transition:
    """Result of ``apply``."""

    state: GameState
    events: List[Event] = field(default_factory=list)
    follow_ups: List[Action] = field(default_factory=list)
    error: GameError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def initial_state(config: EngineConfig = DEFAULT_CONFIG) -> GameState:
    """Canonical pre-game state: seat 0 is human unless ``config.cpu_seats`` says otherwise."""
    players = [
        Player(id=f"p{i + 1}", name=config.player_names[i], is_cpu=i in config.cpu_seats)
        for i in range(NUM_SEATS)
    ]
    return GameState(players=players)


def is_well_formed(state: object) -> bool:
    """Structural check run before every transition."""
    if not isinstance(state, GameState):
        return False
    players = state.players
    if not isinstance(players, list) or len(players) != NUM_SEATS:
        return False
    if not all(isinstance(p, Player) and isinstance(p.hand, list) for p in players):
        return False
    if not isinstance(state.phase, Phase):
        return False
    if not isinstance(state.scores, list) or len(state.scores) != 2:
        return False
    if state.dealer not in range(NUM_SEATS) or state.current_player not in range(NUM_SEATS):
        return False
    if state.trick_leader not in range(NUM_SEATS):
        return False
    if not 0 <= state.pass_count <= FORCED_CALL_PASSES:
        return False

    # Trump exists exactly while the hand is being played
    if (state.phase == Phase.PLAYING) != isinstance(state.trump, Suit):
        return False
    if state.trump is not None and not isinstance(state.trump, Suit):
        return False
    if state.phase == Phase.PLAYING and state.trump_caller not in range(NUM_SEATS):
        return False

    out = [i for i, p in enumerate(players) if p.sitting_out]
    if len(out) > 1 or bool(out) != state.going_alone:
        return False
    if out and (state.trump_caller is None or out[0] != partner_of(state.trump_caller)):
        return False
    return True


def pending_actions(state: GameState) -> List[Action]:
    """What a scheduler should apply next, if anything, without waiting for a human."""
    if state.phase == Phase.DEALING:
        return [Deal()]
    if state.phase not in (Phase.BIDDING, Phase.PLAYING):
        return []
    if state.awaiting_clear:
        return [ClearTrick()]
    player = state.current
    if player.is_cpu and not player.sitting_out:
        return [CpuPlay()]
    return []


def _fresh_state(state: GameState, config: EngineConfig) -> GameState:
    """Initial state that keeps the table roster and the learning-mode preference."""
    fresh = initial_state(config)
    fresh.players = [Player(id=p.id, name=p.name, is_cpu=p.is_cpu) for p in state.players]
    fresh.learning_mode = state.learning_mode
    return fresh


def _require_phase(state: GameState, phase: Phase, what: str) -> None:
    if state.phase != phase:
        raise InvalidPhaseError(f"Cannot {what} during {state.phase.value}")


# --- Transitions ---


def _start_game(state: GameState, events: List[Event], rng: random.Random, config: EngineConfig) -> GameState:
    fresh = _fresh_state(state, config)
    fresh.phase = Phase.DEALING
    fresh.dealer = rng.randrange(NUM_SEATS)
    fresh.current_player = first_to_act(fresh.dealer)
    events.append(
        Event(EventKind.GAME_STARTED, f"New game: {fresh.players[fresh.dealer].name} deals first.", fresh.dealer)
    )
    return fresh


def _deal(state: GameState, action: Deal, events: List[Event], rng: random.Random) -> GameState:
    _require_phase(state, Phase.DEALING, "deal")
    deck = list(action.deck) if action.deck is not None else build_deck(rng)
    if len(set(deck)) != len(deck):
        raise DealError("Deck contains duplicate cards")
    result = deal_hands(deck)
    if len(result.hands) != NUM_SEATS or any(len(h) != HAND_SIZE for h in result.hands):
        raise DealError("Invalid deal detected")

    state.deck = result.kitty
    for p, hand in zip(state.players, result.hands):
        p.hand = list(hand)
        p.sitting_out = False
    state.phase = Phase.BIDDING
    state.current_player = first_to_act(state.dealer)
    state.trick_leader = state.current_player
    state.pass_count = 0
    state.trick = []
    state.played = []
    state.trump = None
    state.trump_caller = None
    state.going_alone = False
    state.awaiting_clear = False
    events.append(Event(EventKind.HAND_DEALT, f"{state.players[state.dealer].name} dealt.", state.dealer))
    return state


def _pass(state: GameState, events: List[Event]) -> GameState:
    _require_phase(state, Phase.BIDDING, "pass")
    seat = state.current_player
    if must_call(seat == state.dealer, state.pass_count):
        raise InvalidMoveError("The dealer must call trump after three passes")

    state.pass_count += 1
    state.current_player = next_seat(seat)
    events.append(Event(EventKind.PASSED, f"{state.players[seat].name} passes.", seat))
    if state.pass_count == FORCED_CALL_PASSES and state.current_player == state.dealer:
        events.append(
            Event(
                EventKind.DEALER_MUST_CALL,
                f"{state.players[state.dealer].name} (dealer) must select trump!",
                state.dealer,
            )
        )
    return state


def _set_trump(state: GameState, suit: Suit, going_alone: bool, events: List[Event]) -> GameState:
    _require_phase(state, Phase.BIDDING, "call trump")
    if not isinstance(suit, Suit):
        raise InvalidMoveError(f"Not a suit: {suit!r}")

    caller = state.current_player
    partner = partner_of(caller) if going_alone else None
    state.trump = suit
    state.trump_caller = caller
    state.phase = Phase.PLAYING
    state.pass_count = 0
    state.going_alone = going_alone
    for i, p in enumerate(state.players):
        p.sitting_out = i == partner

    leader = first_to_act(state.dealer)
    if leader == partner:
        leader = next_seat(leader)
    state.current_player = leader
    state.trick_leader = leader
    state.trick = []
    state.awaiting_clear = False

    name = state.players[caller].name
    events.append(Event(EventKind.TRUMP_CALLED, f"{name} calls {suit!s} as trump.", caller))
    if going_alone:
        events.append(Event(EventKind.GOING_ALONE, f"{name} is going alone!", caller))
    return state


def _play_card(state: GameState, action: PlayCard, events: List[Event]) -> GameState:
    if state.phase != Phase.PLAYING or state.trump is None:
        raise InvalidPhaseError("Trump is not set, cannot play card")
    if state.awaiting_clear:
        raise InvalidPhaseError("The trick is complete and waiting to be cleared")

    seat = state.current_player if action.seat is None else action.seat
    if seat not in range(NUM_SEATS):
        raise InvalidMoveError(f"No such seat: {seat!r}")
    player = state.players[seat]
    if player.sitting_out:
        raise InvalidMoveError(f"{player.name} is sitting out this hand")
    if seat != state.current_player:
        raise InvalidMoveError(f"It is not {player.name}'s turn")
    card = action.card
    if card not in player.hand:
        raise InvalidMoveError(f"{card} is not in {player.name}'s hand")
    if not is_valid_play(card, player.hand, state.trick, state.trump):
        raise InvalidMoveError("Invalid play - you must follow suit if possible!")

    if not state.trick:
        state.trick_leader = seat
    player.hand.remove(card)
    state.trick.append(card)

    sitting_out = state.sitting_out_seat
    if len(state.trick) == state.active_player_count:
        index = determine_winner(state.trick, state.trump)
        winner = seat_for_trick_index(state.trick_leader, index, sitting_out)
        state.scores[team_of(winner)] += 1
        state.current_player = winner
        state.awaiting_clear = True
        events.append(
            Event(EventKind.TRICK_WON, f"{state.players[winner].name} wins the trick!", winner)
        )
    else:
        state.current_player = next_active_seat(seat, sitting_out)
    return state


def _clear_trick(state: GameState, events: List[Event]) -> GameState:
    if not state.awaiting_clear:
        raise InvalidPhaseError("There is no completed trick to clear")

    state.played.extend(state.trick)
    state.trick = []
    state.awaiting_clear = False

    if all(p.sitting_out or not p.hand for p in state.players):
        events.append(
            Event(
                EventKind.HAND_COMPLETE,
                f"Hand complete! Score {state.scores[0]}-{state.scores[1]}. Dealing new cards...",
            )
        )
        state.dealer = next_dealer(state.dealer)
        state.current_player = first_to_act(state.dealer)
        state.phase = Phase.DEALING
        state.trump = None
        state.trump_caller = None
        state.going_alone = False
        for p in state.players:
            p.sitting_out = False
        return state

    # The trick winner is already the current player and leads next
    state.trick_leader = state.current_player
    return state


def _toggle_learning_mode(state: GameState) -> GameState:
    state.learning_mode = not state.learning_mode
    return state


def _cpu_play(state: GameState, events: List[Event], config: EngineConfig) -> GameState:
    seat = state.current_player
    player = state.players[seat]
    if state.phase not in (Phase.BIDDING, Phase.PLAYING) or state.awaiting_clear:
        raise InvalidPhaseError(f"No CPU decision to make during {state.phase.value}")
    if not player.is_cpu or player.sitting_out:
        raise InvalidMoveError(f"It is not a CPU turn ({player.name} to act)")

    agent = HeuristicAgent(config)
    if state.phase == Phase.BIDDING:
        decision = agent.bid_decision(state, seat)
        if decision.suit is None:
            return _pass(state, events)
        if decision.forced:
            events.append(
                Event(EventKind.DEALER_FORCED, f"{player.name} (Dealer) is forced to call trump.", seat)
            )
        return _set_trump(state, decision.suit, decision.going_alone, events)

    if not player.hand:
        raise InvalidMoveError(f"{player.name} has no cards to play")
    card = agent.choose_card(state, seat)
    return _play_card(state, PlayCard(card, seat), events)


def _dispatch(
    state: GameState,
    action: Action,
    events: List[Event],
    rng: random.Random,
    config: EngineConfig,
) -> GameState:
    match action:
        case StartGame():
            return _start_game(state, events, rng, config)
        case Deal():
            return _deal(state, action, events, rng)
        case Pass():
            return _pass(state, events)
        case SetTrump(suit=suit, going_alone=going_alone):
            return _set_trump(state, suit, going_alone, events)
        case PlayCard():
            return _play_card(state, action, events)
        case ToggleLearningMode():
            return _toggle_learning_mode(state)
        case CpuPlay():
            return _cpu_play(state, events, config)
        case ClearTrick():
            return _clear_trick(state, events)
        case _:
            assert_never(action)


def apply(
    state: GameState,
    action: Action,
    rng: random.Random | None = None,
    config: EngineConfig | None = None,
) -> Transition:
    """
    Apply one action. Corrupt state is replaced by the initial state (STATE_RESET event);
    illegal actions leave the state unchanged and set ``Transition.error``; a failed
    deal returns the game to pre-game with DEAL_FAILED and the DealError.
    """
    if config is None:
        config = DEFAULT_CONFIG
    if rng is None:
        rng = random.Random()

    if not is_well_formed(state):
        logger.warning("Invalid state detected, resetting to initial state: %r", state)
        fresh = initial_state(config)
        return Transition(
            state=fresh,
            events=[Event(EventKind.STATE_RESET, "Game state was invalid and has been reset.")],
            follow_ups=pending_actions(fresh),
        )

    if state.learning_mode:
        logger.info("Action: %r (phase=%s, seat=%d)", action, state.phase.value, state.current_player)

    events: List[Event] = []
    try:
        new_state = _dispatch(state.copy(), action, events, rng, config)
    except DealError as exc:
        logger.warning("Failed to deal cards, resetting game: %s", exc)
        new_state = _fresh_state(state, config)
        new_state.revision = state.revision + 1
        return Transition(
            state=new_state,
            events=[Event(EventKind.DEAL_FAILED, "Failed to deal cards. Resetting game.")],
            error=exc,
        )
    except GameError as exc:
        logger.debug("Rejected %r: %s", action, exc)
        return Transition(state=state, error=exc)

    new_state.revision = state.revision + 1
    if state.learning_mode:
        logger.info("New state: phase=%s, seat=%d", new_state.phase.value, new_state.current_player)
    return Transition(state=new_state, events=events, follow_ups=pending_actions(new_state))


__all__ = [
    "Phase",
    "EventKind",
    "Event",
    "Player",
    "GameState",
    "Transition",
    "initial_state",
    "is_well_formed",
    "pending_actions",
    "apply",
    "DECK_SIZE",
]
