"""
Distribution (deal) and seat arithmetic for 4 players.
Seats 0..3 clockwise; partnerships are {0, 2} and {1, 3}.
Each player gets 5 cards, one at a time; the remaining cards form the kitty.
"""
from __future__ import annotations

from typing import NamedTuple

from .deck import Card
from .errors import DealError

NUM_SEATS = 4
HAND_SIZE = 5
CARDS_NEEDED = NUM_SEATS * HAND_SIZE  # 20


class DealResult(NamedTuple):
    """Result of a deal. Hands are indexed by seat; kitty is what is left of the deck."""
    hands: tuple[list[Card], list[Card], list[Card], list[Card]]
    kitty: list[Card]


def deal_hands(deck: list[Card] | None) -> DealResult:
    """
    Deal 5 cards to each seat, round-robin from the top of ``deck`` (seat 0 first).
    The input list is left untouched. Fewer than 20 cards is an error; hands are never padded.
    """
    if deck is None or len(deck) < CARDS_NEEDED:
        n = 0 if deck is None else len(deck)
        raise DealError(f"Need at least {CARDS_NEEDED} cards to deal, got {n}")

    hands: list[list[Card]] = [[] for _ in range(NUM_SEATS)]
    for i in range(CARDS_NEEDED):
        hands[i % NUM_SEATS].append(deck[i])

    return DealResult(
        hands=(hands[0], hands[1], hands[2], hands[3]),
        kitty=list(deck[CARDS_NEEDED:]),
    )


def next_seat(seat: int) -> int:
    """Play rotates clockwise (0 -> 1 -> 2 -> 3 -> 0)."""
    return (seat + 1) % NUM_SEATS


def next_dealer(dealer: int) -> int:
    """The deal passes to the left after every hand."""
    return next_seat(dealer)


def first_to_act(dealer: int) -> int:
    """Player to the left of the dealer bids first and leads the first trick."""
    return next_seat(dealer)


def partner_of(seat: int) -> int:
    return (seat + 2) % NUM_SEATS


def team_of(seat: int) -> int:
    """Team 0 = seats 0 & 2, team 1 = seats 1 & 3."""
    return seat % 2


def next_active_seat(seat: int, sitting_out: int | None = None) -> int:
    """Next seat clockwise, skipping the partner who sits out when someone goes alone."""
    nxt = next_seat(seat)
    if nxt == sitting_out:
        nxt = next_seat(nxt)
    return nxt


def seat_for_trick_index(leader: int, index: int, sitting_out: int | None = None) -> int:
    """Absolute seat of the card at ``index`` in a trick led by ``leader``."""
    seat = leader
    for _ in range(index):
        seat = next_active_seat(seat, sitting_out)
    return seat
