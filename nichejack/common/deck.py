"""
This module contains the Deck class, which represents a single 52-card deck.

The deck is a fixed arena of card slots plus a cursor pointing at the next
undealt card. Dealing advances the cursor; cards are never copied or
removed, so the number of cards remaining is always ``len(slots) - cursor``.

>>> import random
>>> deck = Deck.shuffled(random.Random(7))
>>> deck.remaining
52
>>> hand = deck.deal(2)
>>> deck.remaining
50
"""

import random
from typing import Iterable, List, Optional

from nichejack.common.card import Card, Rank, Suit


class DeckExhaustedError(RuntimeError):
    """Raised when more cards are requested than the deck still holds."""


class Deck:
    """
    A class representing a deck of cards dealt from the top.
    """

    # Precompute the ordered default deck
    _default_deck = tuple(Card(suit, rank) for suit in Suit for rank in Rank)

    __slots__ = ("_cards", "_cursor")

    def __init__(self, cards: Optional[Iterable[Card]] = None):
        """
        Initialize a Deck instance.

        :param cards: Cards in dealing order (optional). If not provided, the
                      52-card default deck is used, unshuffled.
        """
        if cards is None:
            self._cards: List[Card] = list(self._default_deck)
        else:
            self._cards = list(cards)
        self._cursor = 0

    @classmethod
    def shuffled(cls, rng: Optional[random.Random] = None) -> "Deck":
        """
        Build a full deck in uniformly random order.

        :param rng: Random source; a ``random.SystemRandom`` is used when omitted.
        """
        return cls().shuffle(rng)

    @classmethod
    def from_cards(cls, cards: Iterable[Card]) -> "Deck":
        """Build a deck that deals the given cards in the given order."""
        return cls(cards)

    def shuffle(self, rng: Optional[random.Random] = None) -> "Deck":
        """
        Shuffle the undealt cards in place with Fisher-Yates.

        Walks from the last slot down to the first undealt one, swapping each
        slot with a partner drawn uniformly from the slots at or below it.
        """
        if rng is None:
            rng = random.SystemRandom()
        cards = self._cards
        base = self._cursor
        for i in range(len(cards) - 1, base, -1):
            j = base + rng.randrange(i - base + 1)
            cards[i], cards[j] = cards[j], cards[i]
        return self

    def deal(self, num_cards: int = 1) -> List[Card]:
        """
        Take the next ``num_cards`` cards from the top of the deck.

        :return: The dealt cards, in dealing order.
        :raises DeckExhaustedError: If fewer than ``num_cards`` cards remain.
        """
        if num_cards < 0:
            raise ValueError("Number of cards to deal must be non-negative")
        if num_cards > self.remaining:
            raise DeckExhaustedError(
                f"Cannot deal {num_cards} cards, only {self.remaining} remain"
            )
        start = self._cursor
        self._cursor += num_cards
        return self._cards[start : self._cursor]

    @property
    def remaining(self) -> int:
        """Return the number of undealt cards."""
        return len(self._cards) - self._cursor

    @property
    def position(self) -> int:
        """Index of the next card to be dealt."""
        return self._cursor

    def rewind(self, position: int) -> None:
        """
        Return every card dealt since ``position`` to the top of the deck.

        Undoes an action that failed partway through.
        """
        if not 0 <= position <= self._cursor:
            raise ValueError(f"Cannot rewind to {position}, cursor is at {self._cursor}")
        self._cursor = position

    def undealt(self) -> List[Card]:
        """Return the undealt cards in dealing order."""
        return self._cards[self._cursor :]

    def is_empty(self) -> bool:
        return self.remaining == 0

    def __len__(self) -> int:
        return self.remaining

    def __repr__(self) -> str:
        return f"Deck({[repr(card) for card in self.undealt()]})"

    def __str__(self) -> str:
        return f"Deck of {self.remaining} cards"


def new_shuffled_deck(rng: Optional[random.Random] = None) -> Deck:
    """Return a freshly shuffled 52-card deck."""
    return Deck.shuffled(rng)


def deal_top(deck: Deck, n: int) -> List[Card]:
    """Remove and return the first ``n`` cards of ``deck``."""
    return deck.deal(n)
