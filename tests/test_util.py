import random

import pytest

from nichejack.common.deck import Deck
from nichejack.common.util import calculate_chi_square, position_frequency_table


def test_calculate_chi_square():
    observed_values = [10, 20, 30, 40]
    expected_values = [15, 25, 35, 45]
    chi_square_stat = calculate_chi_square(observed_values, expected_values)
    expected_chi_square_stat = sum(
        (o - e) ** 2 / e for o, e in zip(observed_values, expected_values)
    )
    assert chi_square_stat == pytest.approx(expected_chi_square_stat)

    # Test with empty lists
    assert calculate_chi_square([], []) == 0

    # Test with different lengths of observed and expected values
    with pytest.raises(ValueError) as exc_info:
        calculate_chi_square([10, 20, 30, 40], [15, 25])
    assert (
        str(exc_info.value)
        == "Observed and expected value lists must have the same length."
    )


def test_position_frequency_table_counts_every_card_once_per_deck():
    rng = random.Random(11)
    table = position_frequency_table(Deck.shuffled(rng) for _ in range(10))
    assert table.shape == (52, 52)
    assert (table.sum(axis=0) == 10).all()
    assert (table.sum(axis=1) == 10).all()


def test_position_frequency_table_rejects_partial_decks():
    deck = Deck()
    deck.deal(1)
    with pytest.raises(ValueError):
        position_frequency_table([deck])


def test_shuffle_spreads_cards_evenly_over_positions():
    rng = random.Random(1234)
    trials = 2000
    table = position_frequency_table(Deck.shuffled(rng) for _ in range(trials))
    expected = [trials / 52] * 52

    # 51 degrees of freedom; 100 is far beyond the 99.9th percentile
    assert calculate_chi_square(table[0], expected) < 100
    assert calculate_chi_square(table[:, 0], expected) < 100
