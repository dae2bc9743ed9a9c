"""
Event system for the nichejack engine.

Game sessions publish what happens to them (cards dealt, player actions,
dealer draws, outcomes) so that boundary layers can observe play without
reaching into session state.

Events raised while a game is locked are collected in an EventBatch and
published only after the lock is released, so a listener may call back into
the registry for the very game it is hearing about.
"""

import bisect
import itertools
import logging
import threading
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

logger = logging.getLogger("nichejack.events")

EventName = Union[str, Enum]


def _event_name(event_type: EventName) -> str:
    return event_type.name if isinstance(event_type, Enum) else event_type


class EventPriority(Enum):
    """Priority levels for event handlers."""

    LOW = 0
    NORMAL = 1
    HIGH = 2
    CRITICAL = 3


class EventEmitter:
    """
    Thread-safe publish/subscribe hub.

    Handlers run in priority order, highest first, and in subscription order
    within one priority. A failing handler is logged and does not stop the
    others.
    """

    def __init__(self):
        self._listeners: Dict[str, List[Tuple[int, int, Callable]]] = {}
        self._sequence = itertools.count()
        self._listener_lock = threading.RLock()

    def on(
        self,
        event_type: EventName,
        callback: Callable,
        priority: EventPriority = EventPriority.NORMAL,
    ) -> Callable:
        """
        Subscribe to an event type.

        Args:
            event_type: The event type to subscribe to (string or enum)
            callback: Function to call when event occurs, signature: fn(event_data)
            priority: Priority level for this handler

        Returns:
            Unsubscribe function that can be called to remove this subscription
        """
        name = _event_name(event_type)
        with self._listener_lock:
            entry = (-priority.value, next(self._sequence), callback)
            bisect.insort(self._listeners.setdefault(name, []), entry)

        def unsubscribe():
            with self._listener_lock:
                handlers = self._listeners.get(name, [])
                if entry in handlers:
                    handlers.remove(entry)

        return unsubscribe

    def emit(self, event_type: EventName, data: Dict[str, Any]) -> None:
        """
        Call every handler subscribed to ``event_type`` with ``data``.
        """
        name = _event_name(event_type)
        with self._listener_lock:
            callbacks = [callback for _, _, callback in self._listeners.get(name, [])]

        # Outside the lock: handlers may subscribe or unsubscribe
        for callback in callbacks:
            try:
                callback(data)
            except Exception as e:
                logger.error(f"Error in event handler for {name}: {e}", exc_info=True)

    def listener_count(self, event_type: Optional[EventName] = None) -> int:
        """Number of listeners for one event type, or of all listeners."""
        with self._listener_lock:
            if event_type is None:
                return sum(len(handlers) for handlers in self._listeners.values())
            return len(self._listeners.get(_event_name(event_type), []))


class EventBatch:
    """
    Events held back until a game's lock is released.

    Offers the same ``emit`` as EventEmitter, so transitions do not care
    which one they are given.
    """

    def __init__(self, target: EventEmitter):
        self.target = target
        self.events: List[Tuple[str, Dict[str, Any]]] = []

    def emit(self, event_type: EventName, data: Dict[str, Any]) -> None:
        self.events.append((_event_name(event_type), data))

    @property
    def names(self) -> List[str]:
        return [name for name, _ in self.events]

    def flush(self) -> None:
        """Publish the held events in order and empty the batch."""
        events, self.events = self.events, []
        for name, data in events:
            self.target.emit(name, data)

    def discard(self) -> None:
        """Drop the held events; used when the action that raised them failed."""
        self.events.clear()


class EventBus:
    """
    Process-wide default event bus.

    Registries fall back to this shared emitter when none is passed in.
    """

    _instance = None
    _lock = threading.Lock()

    @classmethod
    def get_instance(cls) -> EventEmitter:
        """
        Get the singleton instance of the EventBus.

        Returns:
            EventEmitter instance
        """
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = EventEmitter()
        return cls._instance


class EngineEventType(Enum):
    """
    Event types published by game sessions and the registry.
    """

    # Game lifecycle
    GAME_CREATED = "game_created"
    GAME_ENDED = "game_ended"

    # Player events
    PLAYER_ACTION = "player_action"

    # Card events
    CARD_DEALT = "card_dealt"

    # Hand events
    HAND_BUSTED = "hand_busted"

    # Dealer events
    DEALER_ACTION = "dealer_action"

    # Registry events
    SESSION_EVICTED = "session_evicted"

    # Error events
    ERROR = "error"
