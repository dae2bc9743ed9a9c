"""
Blackjack API module for nichejack.

This module provides the surface a request handler talks to: create a game,
read it, hit and stand, each returning the serialized game snapshot. It
supports both synchronous and asynchronous operation.
"""

import asyncio
import threading
from typing import Any, Callable, Dict, List, Optional, Union

from nichejack.engine import GameRegistry
from nichejack.events import EngineEventType, EventPriority
from nichejack.state import GameState


class BlackjackGame:
    """
    High-level API for blackjack sessions.

    Example:
        ```python
        # Async usage
        api = BlackjackGame()
        game = await api.start_game(fid=42, bet=10)
        game = await api.hit(game["id"])
        game = await api.stand(game["id"])

        # Sync usage
        api = BlackjackGame(use_async=False)
        game = api.start_game_sync()
        api.stand_sync(game["id"])
        ```

    Methods taking a game id return None when the id is unknown.

    Attributes:
        registry: The GameRegistry holding the sessions
        event_handlers: Unsubscribe functions of handlers registered via on()
    """

    def __init__(
        self,
        registry: Optional[GameRegistry] = None,
        config: Optional[Dict[str, Any]] = None,
        use_async: bool = True,
    ):
        """
        Args:
            registry: Registry to serve from; a new one built from config when omitted
            config: Configuration overrides, used only when no registry is given
            use_async: Whether to use async mode
        """
        self.registry = registry if registry is not None else GameRegistry(config)
        self.event_handlers: Dict[str, List[Callable]] = {}
        self._is_async_mode = use_async
        self._loop = None
        self._async_lock = threading.Lock()

    @property
    def redact_deck(self) -> bool:
        return self.registry.config["redact_deck"]

    async def start_game(
        self, fid: Optional[int] = None, bet: Optional[int] = None
    ) -> Dict[str, Any]:
        """
        Start a new game.

        Args:
            fid: Optional positive owner tag
            bet: Optional non-negative bet amount

        Returns:
            The new game's snapshot

        Raises:
            ValueError: If fid or bet is out of range
        """
        if fid is not None and (
            not isinstance(fid, int) or isinstance(fid, bool) or fid <= 0
        ):
            raise ValueError(f"Invalid fid: {fid!r}")
        if bet is not None and (
            not isinstance(bet, int) or isinstance(bet, bool) or bet < 0
        ):
            raise ValueError(f"Invalid bet: {bet!r}")
        return self._serialize(self.registry.create_game(fid=fid, bet=bet))

    async def get_game(self, game_id: str) -> Optional[Dict[str, Any]]:
        return self._serialize(self.registry.get_game(game_id))

    async def hit(self, game_id: str) -> Optional[Dict[str, Any]]:
        return self._serialize(self.registry.hit(game_id))

    async def stand(self, game_id: str) -> Optional[Dict[str, Any]]:
        return self._serialize(self.registry.stand(game_id))

    def on(
        self,
        event_type: Union[str, EngineEventType],
        handler: Callable,
        priority: EventPriority = EventPriority.NORMAL,
    ) -> Callable:
        """
        Register an event handler.

        Args:
            event_type: Type of event to listen for
            handler: Event handler function
            priority: Priority level for the handler

        Returns:
            Function to call to unsubscribe the handler
        """
        if isinstance(event_type, str):
            try:
                event_type = getattr(EngineEventType, event_type.upper())
            except AttributeError:
                # Keep as string if not a known enum value
                pass

        unsubscribe_func = self.registry.event_bus.on(event_type, handler, priority)
        key = event_type.name if isinstance(event_type, EngineEventType) else event_type
        self.event_handlers.setdefault(key, []).append(unsubscribe_func)
        return unsubscribe_func

    async def shutdown(self) -> None:
        """Unsubscribe every handler registered through this API."""
        for unsubscribers in self.event_handlers.values():
            for unsubscribe in unsubscribers:
                unsubscribe()
        self.event_handlers.clear()

    def _serialize(self, state: Optional[GameState]) -> Optional[Dict[str, Any]]:
        if state is None:
            return None
        return state.to_dict(include_deck=not self.redact_deck)

    # Synchronous API wrappers

    def start_game_sync(
        self, fid: Optional[int] = None, bet: Optional[int] = None
    ) -> Dict[str, Any]:
        """
        Synchronous wrapper for start_game method.
        """
        return self._run_async(self.start_game(fid, bet))

    def get_game_sync(self, game_id: str) -> Optional[Dict[str, Any]]:
        """
        Synchronous wrapper for get_game method.
        """
        return self._run_async(self.get_game(game_id))

    def hit_sync(self, game_id: str) -> Optional[Dict[str, Any]]:
        """
        Synchronous wrapper for hit method.
        """
        return self._run_async(self.hit(game_id))

    def stand_sync(self, game_id: str) -> Optional[Dict[str, Any]]:
        """
        Synchronous wrapper for stand method.
        """
        return self._run_async(self.stand(game_id))

    def shutdown_sync(self) -> None:
        """
        Synchronous wrapper for shutdown method.
        """
        return self._run_async(self.shutdown())

    def _run_async(self, coro):
        """
        Run an async coroutine from a synchronous context.

        Args:
            coro: Coroutine to run

        Returns:
            Result of the coroutine
        """
        if self._is_async_mode:
            coro.close()
            raise RuntimeError(
                "Attempting to use synchronous method in async mode. "
                "Use the async version of this method instead."
            )

        with self._async_lock:
            if self._loop is None or self._loop.is_closed():
                self._loop = asyncio.new_event_loop()
            return self._loop.run_until_complete(coro)

    def close(self) -> None:
        """Close the private event loop used by the sync wrappers."""
        with self._async_lock:
            if self._loop is not None and not self._loop.is_closed():
                self._loop.close()
            self._loop = None
