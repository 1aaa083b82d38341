"""
Bidding (calling trump) heuristic for CPU players.
Each seat, starting left of the dealer, either names a trump suit (optionally going alone) or passes.
After three passes the dealer is stuck and must call.
"""
from __future__ import annotations

from dataclasses import dataclass

from .config import DEFAULT_CONFIG, EngineConfig
from .deck import Card, Rank, Suit, effective_suit, is_left_bower, is_right_bower

# Passes that leave the dealer stuck with the call
FORCED_CALL_PASSES = 3

HIGH_RANKS = (Rank.JACK, Rank.QUEEN, Rank.KING, Rank.ACE)


@dataclass(frozen=True)
class BidDecision:
    """Outcome of the bidding heuristic. ``suit is None`` means pass."""

    suit: Suit | None
    going_alone: bool = False
    forced: bool = False
    score: int = 0

    @property
    def is_pass(self) -> bool:
        return self.suit is None


def score_suit(hand: list[Card], suit: Suit) -> int:
    """
    Strength of ``hand`` if ``suit`` were trump:
    +2 per trump card (bowers included), +3 more per high trump (J/Q/K/A),
    +4 right bower, +3 left bower, +1 per Ace outside ``suit``.
    """
    trumps = [c for c in hand if effective_suit(c, suit) == suit]
    score = 2 * len(trumps)
    score += 3 * sum(1 for c in trumps if c.rank in HIGH_RANKS)
    if any(is_right_bower(c, suit) for c in hand):
        score += 4
    if any(is_left_bower(c, suit) for c in hand):
        score += 3
    score += sum(1 for c in hand if c.rank == Rank.ACE and c.suit != suit)
    return score


def score_hand(hand: list[Card]) -> dict[Suit, int]:
    return {s: score_suit(hand, s) for s in Suit}


def best_suit(hand: list[Card]) -> tuple[Suit, int]:
    """Suit with the strictly greatest score; ties go to the first suit in enum order."""
    best: Suit | None = None
    best_score = -1
    for s, score in score_hand(hand).items():
        if score > best_score:
            best, best_score = s, score
    assert best is not None
    return best, best_score


def longest_suit(hand: list[Card]) -> Suit:
    """Suit with the most raw cards (no bower adjustment); ties to enum order."""
    best = Suit.HEARTS
    most = 0
    for s in Suit:
        n = sum(1 for c in hand if c.suit == s)
        if n > most:
            best, most = s, n
    return best


def must_call(is_dealer: bool, pass_count: int) -> bool:
    return is_dealer and pass_count >= FORCED_CALL_PASSES


def decide_bid(
    hand: list[Card],
    is_dealer: bool,
    pass_count: int,
    config: EngineConfig = DEFAULT_CONFIG,
) -> BidDecision:
    """
    Call the best suit when it clears ``config.call_threshold`` (alone above
    ``config.alone_threshold``), otherwise pass. A stuck dealer always calls, never alone.
    """
    suit, score = best_suit(hand)
    if score >= config.call_threshold:
        return BidDecision(suit=suit, going_alone=score >= config.alone_threshold, score=score)

    if must_call(is_dealer, pass_count):
        if score <= 0:
            suit = longest_suit(hand)
        return BidDecision(suit=suit, going_alone=False, forced=True, score=score)

    return BidDecision(suit=None, score=score)
