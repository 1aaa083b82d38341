"""Euchre rules engine and turn/phase state machine."""

__version__ = "0.1.0"

from .deck import (
    Card,
    Rank,
    Suit,
    build_deck,
    effective_suit,
    is_trump,
    left_bower_suit,
    make_deck_24,
    rank_value,
    shuffle_deck,
)
from .deal import DealResult, deal_hands, partner_of, team_of
from .errors import DealError, EmptyTrickError, GameError, InvalidMoveError, InvalidPhaseError
from .play import determine_winner, is_valid_play, legal_plays
from .bidding import BidDecision, decide_bid, score_suit
from .agents import HeuristicAgent, RandomAgent, best_play
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
from .config import EngineConfig
from .game import (
    Event,
    EventKind,
    GameState,
    Phase,
    Player,
    Transition,
    apply,
    initial_state,
    pending_actions,
)
from .persistence import JsonFileStore, MemoryStore, state_from_json, state_to_json
from .session import GameSession, LoggingNotifier, ScheduledAction
