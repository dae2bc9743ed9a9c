"""
Game session state for the nichejack engine.

This package provides the GameState aggregate and the transitions that move
a game from its opening deal to an outcome.
"""

from nichejack.state.models import GameState, GameStatus, now_ms

from nichejack.state.transitions import GameTransitions

__all__ = [
    "GameState",
    "GameStatus",
    "GameTransitions",
    "now_ms",
]
