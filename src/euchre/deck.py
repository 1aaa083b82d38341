"""
Euchre deck: 24 cards (9, 10, J, Q, K, A in four suits).
Trump-aware ranking: right bower > left bower > other trump > everything else.
"""
from __future__ import annotations

import random
from dataclasses import dataclass
from enum import IntEnum


class Suit(IntEnum):
    """Hearts, Diamonds, Spades, Clubs. Order used for bidding tie-break (first wins)."""
    HEARTS = 0
    DIAMONDS = 1
    SPADES = 2
    CLUBS = 3

    def __str__(self) -> str:
        return self.name.lower()


class Rank(IntEnum):
    """Base order 9 < 10 < J < Q < K < A; the value is the base rank index."""
    NINE = 0
    TEN = 1
    JACK = 2
    QUEEN = 3
    KING = 4
    ACE = 5

    def __str__(self) -> str:
        return _RANK_LABELS[self]


_RANK_LABELS = {
    Rank.NINE: "9",
    Rank.TEN: "10",
    Rank.JACK: "J",
    Rank.QUEEN: "Q",
    Rank.KING: "K",
    Rank.ACE: "A",
}
_LABEL_TO_RANK = {label: rank for rank, label in _RANK_LABELS.items()}
_SUIT_LETTERS = {"h": Suit.HEARTS, "d": Suit.DIAMONDS, "s": Suit.SPADES, "c": Suit.CLUBS}

# Same-colour pairs: the Jack of the partner suit is the left bower.
_LEFT_BOWER_SUIT = {
    Suit.HEARTS: Suit.DIAMONDS,
    Suit.DIAMONDS: Suit.HEARTS,
    Suit.SPADES: Suit.CLUBS,
    Suit.CLUBS: Suit.SPADES,
}

RIGHT_BOWER_VALUE = 18
LEFT_BOWER_VALUE = 17
TRUMP_OFFSET = 11
PLAIN_OFFSET = 5


@dataclass(frozen=True)
class Card:
    """A single euchre card. Suit + rank is unique within a deck."""

    suit: Suit
    rank: Rank

    @property
    def id(self) -> str:
        """Stable identity, e.g. ``"J-diamonds"``."""
        return f"{self.rank!s}-{self.suit!s}"

    @classmethod
    def from_string(cls, s: str) -> "Card":
        """
        Parse either the identity form (``"10-hearts"``) or the short form
        (``"10h"``, ``"Jd"``, ``"As"``).
        """
        text = s.strip()
        if "-" in text:
            rank_str, suit_str = text.split("-", 1)
            try:
                suit = Suit[suit_str.upper()]
            except KeyError:
                raise ValueError(f"Invalid card string: {s}") from None
        else:
            rank_str, suit_char = text[:-1], text[-1:].lower()
            if suit_char not in _SUIT_LETTERS:
                raise ValueError(f"Invalid card string: {s}")
            suit = _SUIT_LETTERS[suit_char]
        rank = _LABEL_TO_RANK.get(rank_str.upper())
        if rank is None:
            raise ValueError(f"Invalid card string: {s}")
        return cls(suit, rank)

    def __str__(self) -> str:
        return f"{self.rank!s}{'♥♦♠♣'[self.suit]}"

    def __repr__(self) -> str:
        return str(self)


def left_bower_suit(trump: Suit) -> Suit:
    """Suit whose Jack becomes the left bower when ``trump`` is trump."""
    try:
        return _LEFT_BOWER_SUIT[trump]
    except (KeyError, TypeError):
        raise ValueError(f"Not a suit: {trump!r}") from None


def is_right_bower(card: Card, trump: Suit) -> bool:
    return card.rank == Rank.JACK and card.suit == trump


def is_left_bower(card: Card, trump: Suit) -> bool:
    return card.rank == Rank.JACK and card.suit == left_bower_suit(trump)


def effective_suit(card: Card, trump: Suit) -> Suit:
    """The left bower plays as trump; every other card keeps its own suit."""
    if is_left_bower(card, trump):
        return trump
    return card.suit


def is_trump(card: Card, trump: Suit) -> bool:
    return effective_suit(card, trump) == trump


def rank_value(card: Card, trump: Suit) -> int:
    """
    Strength of a card under ``trump``:
    right bower 18, left bower 17, other trump 11..16, non-trump 5..10.
    """
    if is_right_bower(card, trump):
        return RIGHT_BOWER_VALUE
    if is_left_bower(card, trump):
        return LEFT_BOWER_VALUE
    if card.suit == trump:
        return int(card.rank) + TRUMP_OFFSET
    return int(card.rank) + PLAIN_OFFSET


def make_deck_24() -> list[Card]:
    """Build the 24-card deck in suit-major, rank-minor order (unshuffled)."""
    deck: list[Card] = []
    for s in Suit:
        for r in Rank:
            deck.append(Card(s, r))
    return deck


def shuffle_deck(deck: list[Card], rng: random.Random | None = None) -> list[Card]:
    """Fisher–Yates shuffle from the end backwards. Returns a new list."""
    if rng is None:
        rng = random.Random()
    out = list(deck)
    for i in range(len(out) - 1, 0, -1):
        j = rng.randrange(i + 1)
        out[i], out[j] = out[j], out[i]
    return out


def build_deck(rng: random.Random | None = None) -> list[Card]:
    """All 24 cards exactly once, shuffled."""
    return shuffle_deck(make_deck_24(), rng=rng)
