"""
Trick-taking: legal moves and trick winner.
Euchre: follow the led suit if you can (the left bower counts as trump); otherwise play anything.
"""
from __future__ import annotations

from .deck import Card, Suit, effective_suit, is_trump, rank_value
from .errors import EmptyTrickError


def led_suit(trick: list[Card], trump: Suit) -> Suit | None:
    """Effective suit of the first card, or None for an empty trick."""
    if not trick:
        return None
    return effective_suit(trick[0], trump)


def has_suit(hand: list[Card], suit: Suit, trump: Suit) -> bool:
    return any(effective_suit(c, trump) == suit for c in hand)


def is_valid_play(card: Card, hand: list[Card], trick: list[Card], trump: Suit) -> bool:
    """
    True if ``card`` may be played from ``hand`` onto ``trick``.
    Leading: any card. Following: must match the lead's effective suit when the hand holds one.
    """
    if card not in hand:
        return False
    lead = led_suit(trick, trump)
    if lead is None:
        return True
    if has_suit(hand, lead, trump):
        return effective_suit(card, trump) == lead
    return True


def legal_plays(hand: list[Card], trick: list[Card], trump: Suit) -> list[Card]:
    """Cards of ``hand`` that may be played onto ``trick``, in hand order."""
    return [c for c in hand if is_valid_play(c, hand, trick, trump)]


def _contends(card: Card, lead: Suit, trump: Suit) -> bool:
    """Only trump or the led suit can take a trick."""
    return is_trump(card, trump) or effective_suit(card, trump) == lead


def determine_winner(trick: list[Card], trump: Suit) -> int:
    """
    Index within ``trick`` of the winning card: highest rank value among trump and led-suit cards.
    """
    if not trick:
        raise EmptyTrickError("Cannot determine the winner of an empty trick")
    lead = effective_suit(trick[0], trump)
    best_index = 0
    best_value = rank_value(trick[0], trump)
    for i, c in enumerate(trick[1:], start=1):
        if not _contends(c, lead, trump):
            continue
        v = rank_value(c, trump)
        if v > best_value:
            best_value = v
            best_index = i
    return best_index


def winning_value(trick: list[Card], trump: Suit) -> int:
    """Rank value of the card currently winning ``trick``."""
    return rank_value(trick[determine_winner(trick, trump)], trump)


def beats(card: Card, trick: list[Card], trump: Suit) -> bool:
    """True if playing ``card`` now would take the lead in a non-empty ``trick``."""
    lead = effective_suit(trick[0], trump)
    if not _contends(card, lead, trump):
        return False
    return rank_value(card, trump) > winning_value(trick, trump)
