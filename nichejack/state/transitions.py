"""
State transition functions for a blackjack game session.

Each transition takes the current GameState, applies one step of the game
and returns the same state object. Transitions on a game that is no longer
PLAYING return it untouched; that guard is how repeated or late actions are
made harmless.

Every transition publishes its events to the sink it is given, or to the
bus when none is given. The registry passes an EventBatch so that nothing
is published while the game is locked.
"""

import logging
from typing import Callable, Optional, Union

from nichejack.blackjack.hand import BlackjackHand, evaluate, is_blackjack
from nichejack.blackjack.rules import Rules
from nichejack.common.deck import Deck, DeckExhaustedError
from nichejack.events import EngineEventType, EventBatch, EventBus, EventEmitter
from nichejack.state.models import GameState, GameStatus, now_ms

logger = logging.getLogger("nichejack.state")

EventSink = Union[EventEmitter, EventBatch]


class GameTransitions:
    """
    Transitions for a single game.

    Attributes:
        rules: Dealer policy used when the player stands
        event_bus: Emitter that receives the game's events
        clock: Returns the current time in epoch milliseconds
    """

    def __init__(
        self,
        rules: Optional[Rules] = None,
        event_bus: Optional[EventEmitter] = None,
        clock: Callable[[], int] = now_ms,
    ):
        self.rules = rules if rules is not None else Rules()
        self.event_bus = event_bus if event_bus is not None else EventBus.get_instance()
        self.clock = clock

    def new_game(
        self,
        deck: Deck,
        fid: Optional[int] = None,
        bet: Optional[int] = None,
        events: Optional[EventSink] = None,
    ) -> GameState:
        """
        Deal the opening hands and settle naturals.

        The player receives the first two cards and the dealer the next two.

        Args:
            deck: A deck owned exclusively by the new game
            fid: Optional owner tag
            bet: Optional bet amount, 0 when omitted
            events: Where to publish events; the bus when omitted

        Returns:
            The new game state
        """
        events = self._sink(events)
        now = self.clock()
        state = GameState(
            deck=deck, fid=fid, bet=bet or 0, created_at=now, updated_at=now
        )
        state.player_hand.add_cards(deck.deal(2))
        state.dealer_hand.add_cards(deck.deal(2))

        player_natural = is_blackjack(state.player_hand.cards)
        dealer_natural = is_blackjack(state.dealer_hand.cards)
        if player_natural and dealer_natural:
            state.status = GameStatus.PUSH
        elif player_natural:
            state.status = GameStatus.PLAYER_BLACKJACK
        elif dealer_natural:
            state.status = GameStatus.DEALER_BLACKJACK

        events.emit(
            EngineEventType.GAME_CREATED,
            {
                "game_id": state.id,
                "fid": state.fid,
                "bet": state.bet,
                "status": state.status.value,
                "timestamp": now,
            },
        )
        if state.status.is_terminal:
            self._game_ended(state, events)
        return state

    def hit(self, state: GameState, events: Optional[EventSink] = None) -> GameState:
        """
        Deal one card to the player.

        Returns:
            The game, with PLAYER_BUST set if the new total exceeds 21
        """
        if not state.is_playing:
            logger.debug("Ignoring hit on game %s in status %s", state.id, state.status)
            return state

        events = self._sink(events)
        card = state.deck.deal(1)[0]
        state.player_hand.add_card(card)
        total = state.player_hand.value()
        state.updated_at = self.clock()

        events.emit(
            EngineEventType.PLAYER_ACTION,
            {"game_id": state.id, "action": "hit", "timestamp": state.updated_at},
        )
        events.emit(
            EngineEventType.CARD_DEALT,
            {
                "game_id": state.id,
                "recipient": "player",
                "card": card.to_dict(),
                "total": total,
            },
        )

        if total > 21:
            state.status = GameStatus.PLAYER_BUST
            events.emit(
                EngineEventType.HAND_BUSTED,
                {"game_id": state.id, "recipient": "player", "total": total},
            )
            self._game_ended(state, events)
        return state

    def stand(self, state: GameState, events: Optional[EventSink] = None) -> GameState:
        """
        End the player's turn, play out the dealer and decide the game.

        Returns:
            The game in one of DEALER_BUST, PLAYER_WIN, DEALER_WIN or PUSH

        Raises:
            DeckExhaustedError: If the dealer runs out of cards. The game is
                left exactly as it was before the call and nothing is emitted.
        """
        if not state.is_playing:
            logger.debug(
                "Ignoring stand on game %s in status %s", state.id, state.status
            )
            return state

        events = self._sink(events)
        # Dealer plays on a scratch hand so a failed draw leaves no trace
        start = state.deck.position
        dealer_hand = BlackjackHand(state.dealer_hand.cards)
        try:
            drawn = self.rules.play_dealer(dealer_hand, state.deck)
        except DeckExhaustedError:
            state.deck.rewind(start)
            raise
        state.dealer_hand.add_cards(drawn)

        events.emit(
            EngineEventType.PLAYER_ACTION,
            {"game_id": state.id, "action": "stand", "timestamp": self.clock()},
        )
        for card in drawn:
            events.emit(
                EngineEventType.DEALER_ACTION,
                {"game_id": state.id, "action": "hit", "card": card.to_dict()},
            )

        player = evaluate(state.player_hand.cards).total
        dealer = evaluate(state.dealer_hand.cards).total
        if dealer > 21:
            state.status = GameStatus.DEALER_BUST
            events.emit(
                EngineEventType.HAND_BUSTED,
                {"game_id": state.id, "recipient": "dealer", "total": dealer},
            )
        elif player > dealer:
            state.status = GameStatus.PLAYER_WIN
        elif dealer > player:
            state.status = GameStatus.DEALER_WIN
        else:
            state.status = GameStatus.PUSH

        state.updated_at = self.clock()
        self._game_ended(state, events)
        return state

    def _sink(self, events: Optional[EventSink]) -> EventSink:
        return events if events is not None else self.event_bus

    def _game_ended(self, state: GameState, events: EventSink) -> None:
        logger.info(
            "Game %s finished with %s (player %d, dealer %d)",
            state.id,
            state.status.value,
            state.player_hand.value(),
            state.dealer_hand.value(),
        )
        events.emit(
            EngineEventType.GAME_ENDED,
            {
                "game_id": state.id,
                "status": state.status.value,
                "player_total": state.player_hand.value(),
                "dealer_total": state.dealer_hand.value(),
                "timestamp": state.updated_at,
            },
        )
