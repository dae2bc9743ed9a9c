"""
Blackjack scoring and dealer policy.
"""

from nichejack.blackjack.hand import BlackjackHand, HandTotal, evaluate, is_blackjack, is_bust
from nichejack.blackjack.rules import Rules

__all__ = ["BlackjackHand", "HandTotal", "evaluate", "is_blackjack", "is_bust", "Rules"]
