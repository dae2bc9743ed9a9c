"""
Pytest configuration for tests at the root level.

This module contains pytest fixtures shared by the whole suite.
"""

import pytest

from nichejack.common.card import Card, Rank, Suit
from nichejack.common.deck import Deck
from nichejack.events import EventBus


# Reset event bus before each test
@pytest.fixture(scope="function", autouse=True)
def reset_event_bus():
    """Reset the event bus singleton before each test."""
    EventBus._instance = None
    yield
    EventBus._instance = None


def parse_card(label: str) -> Card:
    """Build a card from a label such as "A♠" or "10♥"."""
    return Card(Suit(label[-1]), Rank(label[:-1]))


@pytest.fixture
def cards():
    """Factory turning labels into a list of cards."""

    def make(*labels):
        return [parse_card(label) for label in labels]

    return make


@pytest.fixture
def rigged_deck():
    """
    Factory for decks dealt in a fixed order.

    A new game deals the first two cards to the player and the next two to
    the dealer; later cards go to hits and the dealer's draws.
    """

    def make(*labels):
        return Deck.from_cards(parse_card(label) for label in labels)

    return make
