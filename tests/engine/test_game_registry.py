"""
Tests for the GameRegistry session store.
"""

import random
import threading
from unittest.mock import MagicMock

import pytest

from nichejack.common.deck import DeckExhaustedError
from nichejack.engine import GameRegistry
from nichejack.events import EngineEventType, EventBus, EventEmitter
from nichejack.state import GameStatus


@pytest.fixture
def emitter():
    return EventEmitter()


@pytest.fixture
def registry(emitter):
    return GameRegistry(event_bus=emitter, rng=random.Random(2024))


# Player [2, 2] and dealer [3, 3], followed by cards that keep the player
# under 22 however many of them are drawn.
LOW_CARDS = ("2♠", "2♥", "3♠", "3♥", "A♠", "A♥", "A♦", "A♣", "2♦", "2♣", "3♦", "3♣")


def test_create_game_registers_a_fresh_deal(registry):
    game = registry.create_game(fid=42, bet=5)

    assert game.id in registry
    assert len(registry) == 1
    assert game.fid == 42
    assert game.bet == 5
    assert game.deck.remaining == 48
    assert len(game.player_hand) == 2
    assert len(game.dealer_hand) == 2
    dealt = game.player_hand.cards + game.dealer_hand.cards + game.deck.undealt()
    assert len(set(dealt)) == 52


def test_create_game_defaults(registry):
    game = registry.create_game()
    assert game.fid is None
    assert game.bet == 0


def test_create_game_rejects_negative_bet(registry):
    with pytest.raises(ValueError):
        registry.create_game(bet=-1)


def test_games_get_unique_ids(registry):
    ids = {registry.create_game().id for _ in range(20)}
    assert len(ids) == 20


def test_seeded_registries_deal_the_same_games(emitter):
    first = GameRegistry(event_bus=emitter, rng=random.Random(5)).create_game()
    second = GameRegistry(event_bus=emitter, rng=random.Random(5)).create_game()
    assert first.player_hand.cards == second.player_hand.cards
    assert first.deck.undealt() == second.deck.undealt()


def test_unknown_ids_are_not_found(registry):
    assert registry.get_game("missing") is None
    assert registry.hit("missing") is None
    assert registry.stand("missing") is None


def test_get_game_returns_current_state(registry, rigged_deck):
    game = registry.create_game(deck=rigged_deck("10♠", "6♠", "7♥", "9♥", "5♣", "2♦"))
    registry.hit(game.id)

    current = registry.get_game(game.id)
    assert len(current.player_hand) == 3
    assert current.deck.remaining == 1


def test_returned_games_are_snapshots(registry, rigged_deck):
    game = registry.create_game(deck=rigged_deck("10♠", "6♠", "7♥", "9♥", "5♣", "2♦"))
    registry.hit(game.id)
    assert len(game.player_hand) == 2


def test_end_to_end_with_fixed_deck(registry, rigged_deck):
    game = registry.create_game(deck=rigged_deck("10♠", "6♠", "7♥", "9♥", "5♣", "2♦"))

    game = registry.hit(game.id)
    assert game.player_hand.value() == 21
    assert game.status is GameStatus.PLAYING

    game = registry.stand(game.id)
    assert game.dealer_hand.value() == 18
    assert game.status is GameStatus.PLAYER_WIN


def test_hit_on_finished_game_is_unchanged(registry, rigged_deck):
    game = registry.create_game(deck=rigged_deck("10♠", "6♠", "7♥", "9♥", "K♣", "3♦"))
    busted = registry.hit(game.id)
    assert busted.status is GameStatus.PLAYER_BUST

    again = registry.hit(game.id)
    assert again.to_dict() == busted.to_dict()


def test_exhausted_deck_is_reported_and_raised(registry, emitter, rigged_deck):
    errors = MagicMock()
    emitter.on(EngineEventType.ERROR, errors)
    game = registry.create_game(deck=rigged_deck("2♠", "2♥", "3♠", "3♥"))

    with pytest.raises(DeckExhaustedError):
        registry.hit(game.id)

    errors.assert_called_once_with(
        {"game_id": game.id, "action": "hit", "error": "deck_exhausted"}
    )


def test_concurrent_hits_on_one_game_add_one_card_each(registry, rigged_deck):
    game = registry.create_game(deck=rigged_deck(*LOW_CARDS))
    n = 8
    barrier = threading.Barrier(n)

    def hit():
        barrier.wait()
        registry.hit(game.id)

    threads = [threading.Thread(target=hit) for _ in range(n)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    final = registry.get_game(game.id)
    assert len(final.player_hand) == 2 + n
    assert final.deck.remaining == 0
    assert len(set(final.player_hand.cards)) == 2 + n
    assert final.status is GameStatus.PLAYING


def test_concurrent_games_are_independent(registry):
    games = [registry.create_game() for _ in range(10)]
    results = {}

    def play(game_id):
        registry.stand(game_id)
        results[game_id] = registry.get_game(game_id)

    threads = [threading.Thread(target=play, args=(g.id,)) for g in games]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(results) == 10
    for game in results.values():
        assert game.status is not GameStatus.PLAYING


def test_concurrent_creation(registry):
    def create():
        for _ in range(25):
            registry.create_game()

    threads = [threading.Thread(target=create) for _ in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(registry) == 100


def test_sessions_are_kept_without_ttl(registry):
    registry.create_game()
    assert registry.evict_expired(now=10**15) == 0
    assert len(registry) == 1


def test_idle_sessions_are_evicted_after_ttl(emitter):
    clock = MagicMock(return_value=1_000_000)
    registry = GameRegistry(
        config={"session_ttl_seconds": 60}, event_bus=emitter, clock=clock
    )
    evicted = MagicMock()
    emitter.on(EngineEventType.SESSION_EVICTED, evicted)

    old = registry.create_game()
    clock.return_value = 1_050_000
    fresh = registry.create_game()

    assert registry.evict_expired(now=1_070_000) == 1
    assert old.id not in registry
    assert fresh.id in registry
    assert registry.get_game(old.id) is None
    evicted.assert_called_once_with({"game_id": old.id, "ttl": 60})


def test_registry_uses_event_bus_by_default():
    registry = GameRegistry()
    assert registry.event_bus is EventBus.get_instance()


def test_registry_events(registry, emitter, rigged_deck):
    created = MagicMock()
    ended = MagicMock()
    emitter.on(EngineEventType.GAME_CREATED, created)
    emitter.on(EngineEventType.GAME_ENDED, ended)

    game = registry.create_game(deck=rigged_deck("A♠", "K♠", "10♥", "9♥"), fid=1)

    assert created.call_args[0][0]["game_id"] == game.id
    assert created.call_args[0][0]["status"] == "player_blackjack"
    assert ended.call_args[0][0]["status"] == "player_blackjack"


def test_listeners_see_a_registered_game(registry, emitter, rigged_deck):
    seen = []

    def lookup(data):
        seen.append(registry.get_game(data["game_id"]))

    emitter.on(EngineEventType.GAME_CREATED, lookup)
    emitter.on(EngineEventType.GAME_ENDED, lookup)

    game = registry.create_game(deck=rigged_deck("A♠", "K♠", "10♥", "9♥"))

    assert len(seen) == 2
    assert all(found is not None for found in seen)
    assert seen[-1].id == game.id
    assert seen[-1].status is GameStatus.PLAYER_BLACKJACK


def test_listener_may_call_back_into_the_same_game(registry, emitter, rigged_deck):
    game = registry.create_game(deck=rigged_deck("10♠", "8♠", "10♥", "7♥", "2♣"))
    seen = []

    def on_ended(data):
        seen.append(registry.get_game(data["game_id"]))
        seen.append(registry.stand(data["game_id"]))

    emitter.on(EngineEventType.GAME_ENDED, on_ended)

    worker = threading.Thread(target=registry.stand, args=(game.id,))
    worker.start()
    worker.join(3)

    assert not worker.is_alive()
    assert [found.status for found in seen] == [GameStatus.PLAYER_WIN] * 2
    assert registry.get_game(game.id).deck.remaining == 1


def test_exhausted_stand_leaves_the_game_playable(registry, emitter, rigged_deck):
    errors = MagicMock()
    actions = MagicMock()
    emitter.on(EngineEventType.ERROR, errors)
    emitter.on(EngineEventType.PLAYER_ACTION, actions)
    emitter.on(EngineEventType.DEALER_ACTION, actions)
    game = registry.create_game(deck=rigged_deck("10♠", "6♠", "2♥", "3♥", "4♣"))

    with pytest.raises(DeckExhaustedError):
        registry.stand(game.id)

    errors.assert_called_once_with(
        {"game_id": game.id, "action": "stand", "error": "deck_exhausted"}
    )
    actions.assert_not_called()
    current = registry.get_game(game.id)
    assert len(current.dealer_hand) == 2
    assert current.deck.remaining == 1
    assert current.status is GameStatus.PLAYING

    current = registry.hit(game.id)
    assert current.player_hand.value() == 20
    assert current.status is GameStatus.PLAYING


def test_dealer_soft_17_rule_comes_from_config(emitter, rigged_deck):
    registry = GameRegistry(config={"dealer_hit_soft_17": False}, event_bus=emitter)
    game = registry.create_game(deck=rigged_deck("10♠", "7♠", "A♥", "6♥", "4♣"))

    game = registry.stand(game.id)

    assert len(game.dealer_hand) == 2
    assert game.status is GameStatus.PUSH
