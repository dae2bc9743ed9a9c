"""
nichejack: a single-deck blackjack engine.

The engine deals and scores games, plays the dealer's hand and keeps many
concurrent game sessions in a GameRegistry.
"""

__version__ = "0.1.0"
