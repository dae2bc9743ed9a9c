"""
Event system for the nichejack engine.
"""

from nichejack.events.emitter import (
    EventEmitter,
    EventBatch,
    EventBus,
    EventPriority,
    EngineEventType,
)

__all__ = ["EventEmitter", "EventBatch", "EventBus", "EventPriority", "EngineEventType"]
