"""
Dealer policy for blackjack.

The dealer draws below 17 and, unless configured otherwise, on a soft 17.
The policy runs only once the player stands.
"""

import logging
from typing import List

from nichejack.blackjack.hand import BlackjackHand, evaluate
from nichejack.common.card import Card
from nichejack.common.deck import Deck

logger = logging.getLogger("nichejack.blackjack.rules")


class Rules:
    def __init__(self, dealer_hit_soft_17: bool = True):
        self.dealer_hit_soft_17 = dealer_hit_soft_17

    @classmethod
    def from_config(cls, config: dict) -> "Rules":
        return cls(dealer_hit_soft_17=config.get("dealer_hit_soft_17", True))

    def to_dict(self) -> dict:
        """Convert rules to a dictionary for serialization."""
        return {"dealer_hit_soft_17": self.dealer_hit_soft_17}

    def should_dealer_hit(self, hand: BlackjackHand) -> bool:
        """Determine if the dealer should hit based on the game rules."""
        score, soft = evaluate(hand.cards)
        is_soft_17 = score == 17 and soft
        return score < 17 or (is_soft_17 and self.dealer_hit_soft_17)

    def play_dealer(self, hand: BlackjackHand, deck: Deck) -> List[Card]:
        """
        Draw for the dealer until the policy says stand.

        Mutates ``hand`` and ``deck``; returns the cards drawn, in order.
        """
        drawn: List[Card] = []
        while self.should_dealer_hit(hand):
            card = deck.deal(1)[0]
            hand.add_card(card)
            drawn.append(card)
            logger.debug("Dealer draws %s, total now %d", card, hand.value())
        return drawn
