import random
from collections import Counter

import pytest

from euchre.actions import (
    ClearTrick,
    CpuPlay,
    Deal,
    Pass,
    PlayCard,
    SetTrump,
    StartGame,
    ToggleLearningMode,
)
from euchre.agents import HeuristicAgent
from euchre.config import EngineConfig
from euchre.deck import Card, Suit, make_deck_24
from euchre.errors import DealError, InvalidMoveError, InvalidPhaseError
from euchre.game import (
    EventKind,
    GameState,
    Phase,
    apply,
    initial_state,
    is_well_formed,
    pending_actions,
)

HUMANS = EngineConfig(cpu_seats=())


def c(text: str) -> Card:
    return Card.from_string(text)


HANDS = [
    ["9d", "10d", "Qd", "9c", "10c"],
    ["9s", "10s", "Qs", "Ks", "Qc"],
    ["Ad", "Kd", "As", "Js", "Kc"],
    ["Jd", "Jh", "Ah", "Kh", "Jc"],
]
KITTY = ["9h", "10h", "Qh", "Ac"]


def fixed_deck() -> tuple[Card, ...]:
    """Deck that deals HANDS to seats 0..3 and leaves KITTY."""
    order = [HANDS[seat][i] for i in range(5) for seat in range(4)] + KITTY
    return tuple(c(s) for s in order)


def dealing_state(dealer: int, config: EngineConfig = HUMANS) -> GameState:
    s = initial_state(config)
    s.phase = Phase.DEALING
    s.dealer = dealer
    return s


def dealt(dealer: int, config: EngineConfig = HUMANS) -> GameState:
    t = apply(dealing_state(dealer, config), Deal(deck=fixed_deck()), config=config)
    assert t.ok
    return t.state


def play(state: GameState, *texts: str) -> GameState:
    for text in texts:
        t = apply(state, PlayCard(c(text)), config=HUMANS)
        assert t.ok, t.error
        assert t.state.card_count() == 24
        state = t.state
    return state


def kinds(transition) -> list[EventKind]:
    return [e.kind for e in transition.events]


# --- setup ---


def test_initial_state():
    s = initial_state()
    assert s.phase == Phase.PRE_GAME
    assert [p.id for p in s.players] == ["p1", "p2", "p3", "p4"]
    assert [p.is_cpu for p in s.players] == [False, True, True, True]
    assert s.scores == [0, 0]
    assert is_well_formed(s)
    assert pending_actions(s) == []


def test_start_game_picks_dealer_from_rng():
    t = apply(initial_state(), StartGame(), rng=random.Random(9))
    assert t.state.phase == Phase.DEALING
    assert t.state.dealer == random.Random(9).randrange(4)
    assert t.state.current_player == (t.state.dealer + 1) % 4
    assert t.follow_ups == [Deal()]
    assert kinds(t) == [EventKind.GAME_STARTED]


def test_start_game_dealer_covers_every_seat():
    rng = random.Random(10)
    dealers = {apply(initial_state(), StartGame(), rng=rng).state.dealer for _ in range(200)}
    assert dealers == {0, 1, 2, 3}


def test_start_game_keeps_roster_and_learning_mode():
    s = initial_state()
    s.learning_mode = True
    s.players[2].name = "Partner"
    s.scores = [3, 4]
    t = apply(s, StartGame())
    assert t.state.learning_mode
    assert t.state.players[2].name == "Partner"
    assert t.state.scores == [0, 0]


def test_deal_gives_five_cards_each():
    t = apply(dealing_state(2), Deal(), rng=random.Random(1), config=HUMANS)
    s = t.state
    assert [len(p.hand) for p in s.players] == [5, 5, 5, 5]
    assert len(s.deck) == 4
    assert s.phase == Phase.BIDDING
    assert s.current_player == 3
    assert s.pass_count == 0
    assert s.trump is None
    assert s.card_count() == 24
    assert Counter(card for p in s.players for card in p.hand) + Counter(s.deck) == Counter(make_deck_24())
    assert kinds(t) == [EventKind.HAND_DEALT]


def test_deal_with_explicit_deck():
    s = dealt(dealer=3)
    assert s.players[0].hand == [c(x) for x in HANDS[0]]
    assert s.deck == [c(x) for x in KITTY]


def test_deal_outside_dealing_is_rejected():
    s = initial_state()
    t = apply(s, Deal())
    assert isinstance(t.error, InvalidPhaseError)
    assert t.state is s


def test_short_deck_returns_to_pre_game():
    s = dealing_state(1)
    s.learning_mode = True
    t = apply(s, Deal(deck=fixed_deck()[:19]), config=HUMANS)
    assert isinstance(t.error, DealError)
    assert kinds(t) == [EventKind.DEAL_FAILED]
    assert t.state.phase == Phase.PRE_GAME
    assert t.state.learning_mode
    assert all(p.hand == [] for p in t.state.players)


def test_duplicate_cards_fail_the_deal():
    deck = fixed_deck()
    t = apply(dealing_state(0), Deal(deck=deck[:23] + deck[:1]), config=HUMANS)
    assert isinstance(t.error, DealError)
    assert t.state.phase == Phase.PRE_GAME


# --- bidding ---


def test_pass_rotates_turn():
    s = dealt(dealer=0)
    t = apply(s, Pass(), config=HUMANS)
    assert t.state.current_player == 2
    assert t.state.pass_count == 1
    assert kinds(t) == [EventKind.PASSED]


def test_pass_outside_bidding_is_rejected():
    t = apply(dealing_state(0), Pass())
    assert isinstance(t.error, InvalidPhaseError)


def test_dealer_is_stuck_after_three_passes():
    s = dealt(dealer=0)
    for expected in (2, 3):
        s = apply(s, Pass(), config=HUMANS).state
        assert s.current_player == expected
    t = apply(s, Pass(), config=HUMANS)
    assert t.state.current_player == 0
    assert t.state.pass_count == 3
    assert kinds(t) == [EventKind.PASSED, EventKind.DEALER_MUST_CALL]

    stuck = t.state
    t = apply(stuck, Pass(), config=HUMANS)
    assert isinstance(t.error, InvalidMoveError)
    assert t.state is stuck

    t = apply(stuck, SetTrump(Suit.SPADES), config=HUMANS)
    assert t.ok
    assert t.state.phase == Phase.PLAYING
    assert t.state.trump == Suit.SPADES
    assert t.state.trump_caller == 0
    assert not t.state.going_alone
    assert t.state.pass_count == 0
    assert t.state.current_player == 1


def test_cpu_dealer_forced_call():
    config = EngineConfig(cpu_seats=(0,))
    s = dealt(dealer=0, config=config)
    for _ in range(3):
        s = apply(s, Pass(), config=config).state
    assert pending_actions(s) == [CpuPlay()]
    t = apply(s, CpuPlay(), config=config)
    assert t.ok
    assert EventKind.DEALER_FORCED in kinds(t)
    # Seat 0 holds 9d 10d Qd 9c 10c: diamonds is its best suit but below the call threshold
    assert t.state.trump == Suit.DIAMONDS
    assert not t.state.going_alone
    assert t.state.phase == Phase.PLAYING


def test_cpu_play_on_human_turn_is_rejected():
    s = dealt(dealer=3)
    t = apply(s, CpuPlay(), config=HUMANS)
    assert isinstance(t.error, InvalidMoveError)
    t = apply(initial_state(), CpuPlay())
    assert isinstance(t.error, InvalidPhaseError)


def test_cpu_play_with_empty_hand_is_rejected():
    config = EngineConfig()
    s = apply(dealt(dealer=0, config=config), SetTrump(Suit.HEARTS), config=config).state
    assert s.current_player == 1
    s.players[1].hand = []
    assert is_well_formed(s)
    t = apply(s, CpuPlay(), config=config)
    assert isinstance(t.error, InvalidMoveError)
    assert t.state is s


def test_well_formed_tracks_lone_hands():
    s = apply(dealt(dealer=0), SetTrump(Suit.SPADES, going_alone=True), config=HUMANS).state
    assert is_well_formed(s)
    s.players[1].sitting_out = True
    assert not is_well_formed(s)
    t = apply(s, PlayCard(c("9s")), config=HUMANS)
    assert [e.kind for e in t.events] == [EventKind.STATE_RESET]


def test_set_trump_outside_bidding_is_rejected():
    t = apply(initial_state(), SetTrump(Suit.HEARTS))
    assert isinstance(t.error, InvalidPhaseError)


# --- playing ---


def test_play_card_before_trump_is_rejected():
    s = dealt(dealer=3)
    t = apply(s, PlayCard(c("9d")), config=HUMANS)
    assert isinstance(t.error, InvalidPhaseError)
    assert t.state is s


def test_full_trick_with_left_bower():
    s = apply(dealt(dealer=3), SetTrump(Suit.HEARTS), config=HUMANS).state
    assert s.current_player == 0
    s = play(s, "9d", "9s", "Ad")
    t = apply(s, PlayCard(c("Jd")), config=HUMANS)
    assert t.ok
    assert kinds(t) == [EventKind.TRICK_WON]
    assert t.state.current_player == 3
    assert t.state.scores == [0, 1]
    assert t.state.awaiting_clear
    assert t.follow_ups == [ClearTrick()]
    assert t.state.card_count() == 24

    waiting = t.state
    t = apply(waiting, PlayCard(c("Jh")), config=HUMANS)
    assert isinstance(t.error, InvalidPhaseError)

    t = apply(waiting, ClearTrick(), config=HUMANS)
    assert t.ok
    assert t.state.trick == []
    assert len(t.state.played) == 4
    assert t.state.trick_leader == 3
    assert t.state.current_player == 3
    assert t.state.phase == Phase.PLAYING
    assert t.state.card_count() == 24


def test_must_follow_suit():
    s = apply(dealt(dealer=3), SetTrump(Suit.HEARTS), config=HUMANS).state
    s = play(s, "9d", "9s")
    # Seat 2 holds Ad and Kd, so As is illegal
    t = apply(s, PlayCard(c("As")), config=HUMANS)
    assert isinstance(t.error, InvalidMoveError)
    assert t.state is s
    assert c("As") in s.players[2].hand


def test_card_not_in_hand_is_rejected():
    s = apply(dealt(dealer=3), SetTrump(Suit.HEARTS), config=HUMANS).state
    t = apply(s, PlayCard(c("Ah")), config=HUMANS)
    assert isinstance(t.error, InvalidMoveError)


def test_out_of_turn_play_is_rejected():
    s = apply(dealt(dealer=3), SetTrump(Suit.HEARTS), config=HUMANS).state
    t = apply(s, PlayCard(c("9s"), seat=1), config=HUMANS)
    assert isinstance(t.error, InvalidMoveError)
    t = apply(s, PlayCard(c("9d"), seat=7), config=HUMANS)
    assert isinstance(t.error, InvalidMoveError)


def test_apply_does_not_mutate_input():
    s = apply(dealt(dealer=3), SetTrump(Suit.HEARTS), config=HUMANS).state
    before = list(s.players[0].hand)
    t = apply(s, PlayCard(c("9d")), config=HUMANS)
    assert t.ok
    assert s.players[0].hand == before
    assert s.trick == []
    assert t.state.revision == s.revision + 1


def test_clear_trick_without_completed_trick_is_rejected():
    s = apply(dealt(dealer=3), SetTrump(Suit.HEARTS), config=HUMANS).state
    t = apply(s, ClearTrick(), config=HUMANS)
    assert isinstance(t.error, InvalidPhaseError)


# --- going alone ---


def test_going_alone_partner_sits_out():
    s = dealt(dealer=0)
    t = apply(s, SetTrump(Suit.SPADES, going_alone=True), config=HUMANS)
    assert kinds(t) == [EventKind.TRUMP_CALLED, EventKind.GOING_ALONE]
    s = t.state
    assert s.going_alone
    assert s.players[3].sitting_out
    assert s.sitting_out_seat == 3
    assert s.active_player_count == 3
    assert s.current_player == 1

    t = apply(s, PlayCard(c("Jc"), seat=3), config=HUMANS)
    assert isinstance(t.error, InvalidMoveError)

    s = play(s, "Qc", "Kc")
    assert s.current_player == 0
    t = apply(s, PlayCard(c("9c")), config=HUMANS)
    assert kinds(t) == [EventKind.TRICK_WON]
    # Kc wins for seat 2
    assert t.state.current_player == 2
    assert t.state.scores == [1, 0]
    assert len(t.state.trick) == 3
    assert t.state.card_count() == 24

    t = apply(t.state, PlayCard(c("Jc"), seat=3), config=HUMANS)
    assert isinstance(t.error, InvalidPhaseError)


def test_lone_caller_partner_left_of_dealer_does_not_lead():
    s = dealt(dealer=2)
    assert s.current_player == 3
    s = apply(s, Pass(), config=HUMANS).state
    s = apply(s, Pass(), config=HUMANS).state
    assert s.current_player == 1
    s = apply(s, SetTrump(Suit.CLUBS, going_alone=True), config=HUMANS).state
    assert s.players[3].sitting_out
    assert s.current_player == 0
    assert s.trick_leader == 0


def _play_out_hand(state: GameState, config: EngineConfig = HUMANS):
    agent = HeuristicAgent(config)
    trick_sizes = []
    while True:
        if state.awaiting_clear:
            trick_sizes.append(len(state.trick))
            t = apply(state, ClearTrick(), config=config)
        else:
            t = apply(state, agent.act(state, state.current_player), config=config)
        assert t.ok, t.error
        state = t.state
        if EventKind.HAND_COMPLETE in kinds(t):
            return t, trick_sizes
        assert state.card_count() == 24


def test_full_hand_rolls_over_to_next_dealer():
    s = apply(dealt(dealer=3), SetTrump(Suit.HEARTS), config=HUMANS).state
    t, sizes = _play_out_hand(s)
    assert sizes == [4, 4, 4, 4, 4]
    end = t.state
    assert sum(end.scores) == 5
    assert end.dealer == 0
    assert end.current_player == 1
    assert end.phase == Phase.DEALING
    assert end.trump is None
    assert not end.going_alone
    assert t.follow_ups == [Deal()]
    assert all(p.hand == [] for p in end.players)


def test_lone_hand_plays_five_three_card_tricks():
    s = apply(dealt(dealer=0), SetTrump(Suit.SPADES, going_alone=True), config=HUMANS).state
    t, sizes = _play_out_hand(s)
    assert sizes == [3, 3, 3, 3, 3]
    end = t.state
    assert sum(end.scores) == 5
    assert not any(p.sitting_out for p in end.players)
    assert end.dealer == 1


# --- misc ---


def test_toggle_learning_mode_any_phase():
    s = initial_state()
    t = apply(s, ToggleLearningMode())
    assert t.state.learning_mode
    assert apply(t.state, ToggleLearningMode()).state.learning_mode is False
    dealt_state = dealt(dealer=1)
    assert apply(dealt_state, ToggleLearningMode()).state.learning_mode


def test_learning_mode_logs_actions(caplog):
    s = initial_state()
    s.learning_mode = True
    with caplog.at_level("INFO", logger="euchre.game"):
        apply(s, StartGame())
    assert any("StartGame" in r.getMessage() for r in caplog.records)


def test_corrupt_state_is_reset():
    s = initial_state()
    s.players = s.players[:3]
    assert not is_well_formed(s)
    t = apply(s, StartGame())
    assert kinds(t) == [EventKind.STATE_RESET]
    assert t.state.phase == Phase.PRE_GAME
    assert len(t.state.players) == 4

    t = apply(None, Pass())  # type: ignore[arg-type]
    assert kinds(t) == [EventKind.STATE_RESET]


def test_rejected_action_keeps_revision():
    s = dealt(dealer=0)
    t = apply(s, PlayCard(c("9s")), config=HUMANS)
    assert t.state.revision == s.revision


def test_pending_actions():
    assert pending_actions(dealing_state(0)) == [Deal()]
    s = dealt(dealer=3)
    assert pending_actions(s) == []
    cpu = dealt(dealer=0, config=EngineConfig())
    assert cpu.current_player == 1
    assert pending_actions(cpu) == [CpuPlay()]


def test_unknown_action_is_a_programming_error():
    with pytest.raises(AssertionError):
        apply(initial_state(), object())  # type: ignore[arg-type]
