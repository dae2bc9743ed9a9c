"""
Hand evaluation for blackjack.

Totals count an ace as 11 and demote aces to 1, one at a time, while the
hand would otherwise bust. A hand is soft when at least one ace still counts
as 11 after that.
"""

from typing import Iterable, List, NamedTuple, Optional

from nichejack.common.card import Card, Rank


class HandTotal(NamedTuple):
    total: int
    soft: bool


def evaluate(cards: Iterable[Card]) -> HandTotal:
    """
    Compute the best total of a hand.

    >>> from nichejack.common.card import Suit
    >>> evaluate([Card(Suit.SPADES, Rank.ACE), Card(Suit.HEARTS, Rank.ACE)])
    HandTotal(total=12, soft=True)
    """
    total = 0
    aces = 0
    for card in cards:
        total += card.rank.rank_value
        if card.rank is Rank.ACE:
            aces += 1

    while total > 21 and aces > 0:
        total -= 10
        aces -= 1

    return HandTotal(total, aces > 0 and total <= 21)


def is_blackjack(cards: List[Card]) -> bool:
    """A natural: exactly the two opening cards totalling 21."""
    return len(cards) == 2 and evaluate(cards).total == 21


def is_bust(cards: Iterable[Card]) -> bool:
    return evaluate(cards).total > 21


class BlackjackHand:
    """An ordered, grow-only hand of cards."""

    __slots__ = ("_cards",)

    def __init__(self, cards: Optional[Iterable[Card]] = None):
        self._cards: List[Card] = list(cards) if cards is not None else []

    @property
    def cards(self) -> List[Card]:
        """Returns the cards in the hand."""
        return self._cards

    def add_card(self, card: Card) -> None:
        self._cards.append(card)

    def add_cards(self, cards: Iterable[Card]) -> None:
        self._cards.extend(cards)

    def value(self) -> int:
        """Calculate the optimal value of the hand with ace handling."""
        return evaluate(self._cards).total

    @property
    def is_soft(self) -> bool:
        """Determine if the hand is soft (contains an ace counted as 11)."""
        return evaluate(self._cards).soft

    @property
    def is_blackjack(self) -> bool:
        return is_blackjack(self._cards)

    @property
    def is_bust(self) -> bool:
        return is_bust(self._cards)

    def to_list(self) -> List[dict]:
        return [card.to_dict() for card in self._cards]

    def __len__(self) -> int:
        return len(self._cards)

    def __iter__(self):
        return iter(self._cards)

    def __repr__(self) -> str:
        return f"BlackjackHand({self._cards!r})"

    def __str__(self) -> str:
        return ", ".join(str(card) for card in self._cards)
