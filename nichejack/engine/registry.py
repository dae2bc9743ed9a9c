"""
Session registry for concurrent blackjack games.

The registry maps game ids to live game states. A single lock guards the map
itself; every game also has its own lock, held while a hit or stand mutates
it, so actions on one game are serialized while different games proceed
independently.

Events raised by an action are held in an EventBatch and published once
the game is registered and its lock released, so listeners may call back
into the registry for the same game. Events of two concurrent actions on
one game may reach listeners interleaved; each snapshot is still consistent.

Lookups of unknown ids return None. Callers map that to a missing-resource
response; it is never raised.
"""

import logging
import random
import threading
from typing import Callable, Dict, Optional

from nichejack.blackjack.rules import Rules
from nichejack.common.deck import Deck, DeckExhaustedError
from nichejack.config import load_config
from nichejack.events import EngineEventType, EventBatch, EventBus, EventEmitter
from nichejack.state import GameState, GameTransitions, now_ms

logger = logging.getLogger("nichejack.engine")


class GameRegistry:
    """
    Keyed store of game sessions.

    Construct one per process (or per test) and pass it to whatever serves
    requests.

    Attributes:
        config: Merged configuration, see nichejack.config
        rules: Dealer policy shared by every game in the registry
        event_bus: Emitter receiving game and registry events
    """

    def __init__(
        self,
        config: Optional[Dict] = None,
        event_bus: Optional[EventEmitter] = None,
        rng: Optional[random.Random] = None,
        clock: Callable[[], int] = now_ms,
    ):
        """
        Args:
            config: Configuration overrides
            event_bus: Event emitter; the process-wide EventBus when omitted
            rng: Random source for shuffling; a SystemRandom when omitted
            clock: Returns the current time in epoch milliseconds
        """
        self.config = load_config(config)
        self.rules = Rules.from_config(self.config)
        self.event_bus = event_bus if event_bus is not None else EventBus.get_instance()
        self._rng = rng if rng is not None else random.SystemRandom()
        self._rng_lock = threading.Lock()
        self._clock = clock
        self._transitions = GameTransitions(self.rules, self.event_bus, clock)
        self._games: Dict[str, GameState] = {}
        self._locks: Dict[str, threading.Lock] = {}
        self._registry_lock = threading.Lock()

    def create_game(
        self,
        fid: Optional[int] = None,
        bet: Optional[int] = None,
        deck: Optional[Deck] = None,
    ) -> GameState:
        """
        Create and register a new game.

        Args:
            fid: Optional owner tag
            bet: Optional non-negative bet amount
            deck: Deck to deal from; a freshly shuffled one when omitted

        Returns:
            Snapshot of the new game
        """
        if bet is not None and bet < 0:
            raise ValueError("Bet must be non-negative")

        if deck is None:
            with self._rng_lock:
                deck = Deck.shuffled(self._rng)

        batch = EventBatch(self.event_bus)
        try:
            state = self._transitions.new_game(deck, fid=fid, bet=bet, events=batch)
        except DeckExhaustedError:
            self._report_exhausted(None, "create")
            raise

        with self._registry_lock:
            self._games[state.id] = state
            self._locks[state.id] = threading.Lock()
            snapshot = state.snapshot()

        logger.info(
            "Created game %s for fid=%s bet=%d status=%s",
            state.id,
            fid,
            state.bet,
            state.status.value,
        )
        batch.flush()
        return snapshot

    def get_game(self, game_id: str) -> Optional[GameState]:
        """Return a snapshot of the game, or None if the id is unknown."""
        entry = self._lookup(game_id)
        if entry is None:
            return None
        state, lock = entry
        with lock:
            return state.snapshot()

    def hit(self, game_id: str) -> Optional[GameState]:
        """Deal the player one card. None if the id is unknown."""
        return self._apply(game_id, "hit", self._transitions.hit)

    def stand(self, game_id: str) -> Optional[GameState]:
        """Stand, play the dealer out and decide the game. None if the id is unknown."""
        return self._apply(game_id, "stand", self._transitions.stand)

    def evict_expired(self, now: Optional[int] = None) -> int:
        """
        Drop games idle for longer than ``session_ttl_seconds``.

        Does nothing when no TTL is configured.

        Returns:
            Number of games evicted
        """
        ttl = self.config["session_ttl_seconds"]
        if ttl is None:
            return 0
        cutoff = (self._clock() if now is None else now) - int(ttl * 1000)

        with self._registry_lock:
            expired = [
                game_id
                for game_id, state in self._games.items()
                if state.updated_at < cutoff
            ]
            for game_id in expired:
                del self._games[game_id]
                del self._locks[game_id]

        for game_id in expired:
            self.event_bus.emit(
                EngineEventType.SESSION_EVICTED, {"game_id": game_id, "ttl": ttl}
            )
        if expired:
            logger.info("Evicted %d idle games", len(expired))
        return len(expired)

    def _lookup(self, game_id: str):
        with self._registry_lock:
            state = self._games.get(game_id)
            if state is None:
                return None
            return state, self._locks[game_id]

    def _apply(self, game_id: str, action: str, transition) -> Optional[GameState]:
        entry = self._lookup(game_id)
        if entry is None:
            logger.debug("%s on unknown game %s", action, game_id)
            return None
        state, lock = entry
        batch = EventBatch(self.event_bus)
        try:
            with lock:
                transition(state, batch)
                snapshot = state.snapshot()
        except DeckExhaustedError:
            batch.discard()
            self._report_exhausted(game_id, action)
            raise
        batch.flush()
        return snapshot

    def _report_exhausted(self, game_id: Optional[str], action: str) -> None:
        logger.error("Deck exhausted during %s on game %s", action, game_id)
        self.event_bus.emit(
            EngineEventType.ERROR,
            {"game_id": game_id, "action": action, "error": "deck_exhausted"},
        )

    def __len__(self) -> int:
        with self._registry_lock:
            return len(self._games)

    def __contains__(self, game_id: str) -> bool:
        with self._registry_lock:
            return game_id in self._games
