"""
API module for nichejack.

This module provides the platform-agnostic API that request handlers use to
drive blackjack games, in both synchronous and asynchronous form.
"""

from nichejack.api.blackjack import BlackjackGame

__all__ = ["BlackjackGame"]
