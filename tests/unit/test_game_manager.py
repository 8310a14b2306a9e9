"""
Game Manager Unit Tests

Tests for the facade wiring the game services over one store.
"""

from unittest.mock import Mock

from bluffdict.game_manager import GameManager
from tests.helpers.game_helpers import create_room_with_players, start_round_in_writing


class TestGameManagerWiring:
    """Service construction"""

    def test_services_share_store_and_randomness(self, game_manager):
        assert game_manager.lifecycle.store is game_manager.store
        assert game_manager.ledger.store is game_manager.store
        assert game_manager.rounds.scoring is game_manager.scoring
        assert game_manager.word_pool.random_source is game_manager.random_source
        assert game_manager.word_pool.candidate_count == 5

    def test_defaults_when_nothing_injected(self, game_settings):
        manager = GameManager(Mock(), game_settings=game_settings)

        assert manager.store.max_attempts == game_settings.transaction_max_attempts
        assert manager.random_source is not None


class TestGameManagerQueries:
    """Read helpers"""

    def test_current_round_is_none_in_lobby(self, game_manager):
        room_id, _ = create_room_with_players(game_manager)
        assert game_manager.get_current_round(room_id) is None

    def test_current_round_follows_room(self, game_manager):
        room_id, (host, ann, ben) = create_room_with_players(game_manager)
        start_round_in_writing(game_manager, room_id, host)

        assert game_manager.get_current_round(room_id)["round_id"] == "r1"

    def test_leaderboard_and_rules(self, game_manager):
        room_id, _ = create_room_with_players(game_manager, game_mode='no_reader')

        assert [entry["rank"] for entry in game_manager.get_leaderboard(room_id)] == [1, 2, 3]
        assert game_manager.get_scoring_rules(room_id)["reader_bonus"] == 0
