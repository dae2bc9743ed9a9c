#!/usr/bin/env python3
"""
Example demonstrating the BlackjackGame API.

This script starts a few games, follows the engine's events, and plays each
game with a simple "hit below 17" policy.
"""

import asyncio
import logging

from nichejack.api import BlackjackGame
from nichejack.engine import GameRegistry
from nichejack.events import EngineEventType

logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger("blackjack_session_demo")


def describe(cards):
    return " ".join(f"{card['rank']}{card['suit']}" for card in cards)


async def play_one(api: BlackjackGame, fid: int) -> None:
    game = await api.start_game(fid=fid, bet=10)
    logger.info(
        "fid %d dealt %s against dealer %s",
        fid,
        describe(game["playerHand"]),
        describe(game["dealerHand"]),
    )

    while game["status"] == "playing" and game["playerTotal"] < 17:
        game = await api.hit(game["id"])
    if game["status"] == "playing":
        game = await api.stand(game["id"])

    print(
        f"fid {fid}: player {describe(game['playerHand'])} ({game['playerTotal']}) "
        f"vs dealer {describe(game['dealerHand'])} ({game['dealerTotal']}) "
        f"-> {game['status']}"
    )


async def main():
    registry = GameRegistry({"redact_deck": True})
    api = BlackjackGame(registry)

    def on_card_dealt(data):
        print(f"  card dealt to {data['recipient']}: {data['card']}")

    api.on(EngineEventType.CARD_DEALT, on_card_dealt)

    try:
        for fid in range(1, 6):
            await play_one(api, fid)
    finally:
        await api.shutdown()


if __name__ == "__main__":
    asyncio.run(main())
