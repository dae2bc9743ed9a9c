"""
Engine package for nichejack.

This package provides the registry that owns and serializes access to live
game sessions.
"""

from nichejack.engine.registry import GameRegistry

__all__ = ["GameRegistry"]
