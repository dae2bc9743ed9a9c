"""
Statistics helpers for auditing shuffle fairness.
"""

from typing import Iterable, List, Sequence

import numpy as np

from nichejack.common.card import Card
from nichejack.common.deck import Deck


def calculate_chi_square(
    observed_values: Sequence[float], expected_values: Sequence[float]
) -> float:
    """
    Calculate the chi-square statistic given lists of observed and expected values.

    :param observed_values: A list of observed values
    :param expected_values: A list of expected values
    :return: The calculated chi-square statistic
    :raises ValueError: If the observed_values and expected_values lists do not have the same length

    """
    if len(observed_values) != len(expected_values):
        raise ValueError("Observed and expected value lists must have the same length.")

    observed = np.asarray(observed_values, dtype=float)
    expected = np.asarray(expected_values, dtype=float)
    return float(np.sum((observed - expected) ** 2 / expected))


def position_frequency_table(decks: Iterable[Deck]) -> np.ndarray:
    """
    Count how often each card lands in each position.

    :param decks: Full 52-card decks, none of them dealt from yet
    :return: A 52x52 integer array; row = card in default deck order,
             column = position in the shuffled deck
    """
    index = {card: i for i, card in enumerate(Deck._default_deck)}
    n = len(index)
    table = np.zeros((n, n), dtype=np.int64)
    for deck in decks:
        cards: List[Card] = deck.undealt()
        if len(cards) != n:
            raise ValueError(f"Expected a full deck of {n} cards, got {len(cards)}")
        for position, card in enumerate(cards):
            table[index[card], position] += 1
    return table
