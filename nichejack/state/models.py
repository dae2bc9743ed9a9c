"""
State models for a blackjack game session.

A GameState is the aggregate root of one game: it owns its deck and both
hands. Only the transition functions in nichejack.state.transitions change
it, and the registry hands out copies taken with ``snapshot``.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional
import time
import uuid

from nichejack.blackjack.hand import BlackjackHand
from nichejack.common.deck import Deck


class GameStatus(Enum):
    """
    Possible statuses of a blackjack game.

    Only PLAYING accepts further actions. PLAYER_STAND and DEALER_STAND are
    part of the wire vocabulary but no transition produces them.
    """

    PLAYING = "playing"
    PLAYER_BLACKJACK = "player_blackjack"
    DEALER_BLACKJACK = "dealer_blackjack"
    PLAYER_BUST = "player_bust"
    DEALER_BUST = "dealer_bust"
    PLAYER_STAND = "player_stand"
    DEALER_STAND = "dealer_stand"
    PLAYER_WIN = "player_win"
    DEALER_WIN = "dealer_win"
    PUSH = "push"

    @property
    def is_terminal(self) -> bool:
        return self is not GameStatus.PLAYING

    def __str__(self) -> str:
        return self.value


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


@dataclass
class GameState:
    """
    One game of blackjack between a player and the dealer.

    Attributes:
        id: Unique identifier for the game
        fid: Optional tag identifying the external owner of the game
        bet: Opaque bet amount, carried through and never settled
        deck: The undealt cards
        player_hand: The player's cards
        dealer_hand: The dealer's cards
        status: Current status of the game
        created_at: Creation time in epoch milliseconds
        updated_at: Time of the last state change in epoch milliseconds
    """

    deck: Deck
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    fid: Optional[int] = None
    bet: int = 0
    player_hand: BlackjackHand = field(default_factory=BlackjackHand)
    dealer_hand: BlackjackHand = field(default_factory=BlackjackHand)
    status: GameStatus = GameStatus.PLAYING
    created_at: int = field(default_factory=now_ms)
    updated_at: int = field(default_factory=now_ms)

    @property
    def is_playing(self) -> bool:
        return self.status is GameStatus.PLAYING

    def snapshot(self) -> "GameState":
        """Return a copy that later actions on this game will not affect."""
        deck = Deck.from_cards(self.deck.undealt())
        return GameState(
            deck=deck,
            id=self.id,
            fid=self.fid,
            bet=self.bet,
            player_hand=BlackjackHand(self.player_hand.cards),
            dealer_hand=BlackjackHand(self.dealer_hand.cards),
            status=self.status,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )

    def to_dict(self, include_deck: bool = True) -> Dict[str, Any]:
        """
        Serialize the game for the boundary layer.

        Args:
            include_deck: Whether to include the undealt deck. The deck is
                included by default; pass False to keep it from clients.
        """
        data: Dict[str, Any] = {
            "id": self.id,
            "fid": self.fid,
            "bet": self.bet,
        }
        if include_deck:
            data["deck"] = [card.to_dict() for card in self.deck.undealt()]
        data.update(
            {
                "playerHand": self.player_hand.to_list(),
                "dealerHand": self.dealer_hand.to_list(),
                "playerTotal": self.player_hand.value(),
                "dealerTotal": self.dealer_hand.value(),
                "status": self.status.value,
                "createdAt": self.created_at,
                "updatedAt": self.updated_at,
            }
        )
        return data
