"""
Game Manager for Bluffdict

Coordinates the specialized services behind one API used by the Socket.IO
handlers and the REST routes. Acts as a facade over the decomposed services.
"""

import logging
from typing import Dict, List, Optional

from bluffdict.config.game_settings import GameSettings, get_game_settings
from bluffdict.content_manager import ContentManager
from bluffdict.core.game_modes import RoomSettings, get_mode_rules
from bluffdict.core.game_phases import GamePhase
from bluffdict.core.random_source import RandomSource
from bluffdict.services.ledger_service import LedgerService
from bluffdict.services.room_lifecycle_service import RoomLifecycleService
from bluffdict.services.round_flow_service import RoundFlowService
from bluffdict.services.scoring_service import ScoringService
from bluffdict.services.validation_service import ValidationService
from bluffdict.services.word_pool_service import WordPoolService
from bluffdict.store import DocumentStore, InMemoryDocumentStore

logger = logging.getLogger(__name__)


class GameManager:
    """Entry point for every game operation."""

    def __init__(self, content_manager: ContentManager, store: Optional[DocumentStore] = None,
                 random_source: Optional[RandomSource] = None,
                 game_settings: Optional[GameSettings] = None):
        self.game_settings = game_settings or get_game_settings()
        self.store = store or InMemoryDocumentStore(self.game_settings.transaction_max_attempts)
        self.random_source = random_source or RandomSource()
        self.content_manager = content_manager

        # Initialize services
        self.validation = ValidationService(self.game_settings)
        self.lifecycle = RoomLifecycleService(self.store, self.random_source, self.validation, self.game_settings)
        self.word_pool = WordPoolService(content_manager, self.random_source, self.game_settings.word_candidate_count)
        self.ledger = LedgerService(self.store, self.validation)
        self.scoring = ScoringService(self.store, self.ledger, self.random_source)
        self.rounds = RoundFlowService(self.store, self.word_pool, self.scoring, self.game_settings,
                                       self.random_source)

    # Room lifecycle operations
    def create_room(self, host_id: str, host_name: str, settings: RoomSettings) -> Dict:
        return self.lifecycle.create_room(host_id, host_name, settings)

    def join_room_by_code(self, code: str, actor_id: str, name: str) -> Dict:
        return self.lifecycle.join_room_by_code(code, actor_id, name)

    def reconnect_or_join(self, code: str, actor_id: str, name: str) -> Dict:
        """
        Join a room by code, or reattach a player already on its roster.

        Players on the roster may come back at any phase; newcomers are
        only admitted in the lobby.
        """
        clean = self.validation.validate_room_code(code)
        actor_id = self.validation.validate_actor_id(actor_id)
        room_id = self.lifecycle.find_room_id_by_code(clean)
        if room_id is not None and self.lifecycle.get_player(room_id, actor_id) is not None:
            room = self.get_room(room_id)
            if room["status"] != GamePhase.LOBBY.value:
                self.set_player_connected(room_id, actor_id, True)
                logger.info(f"Player {actor_id} reconnected to room {room_id}")
                return {"room_id": room_id, "code": clean, "rejoined": True}
        return self.join_room_by_code(clean, actor_id, name)

    def set_player_connected(self, room_id: str, actor_id: str, connected: bool) -> bool:
        return self.lifecycle.set_player_connected(room_id, actor_id, connected)

    def find_room_id_by_code(self, code: str) -> Optional[str]:
        return self.lifecycle.find_room_id_by_code(self.validation.validate_room_code(code))

    def get_room(self, room_id: str) -> Dict:
        return self.lifecycle.get_room(room_id)

    def get_players(self, room_id: str) -> List[Dict]:
        return self.lifecycle.get_players(room_id)

    # Round flow operations
    def start_game(self, room_id: str, actor_id: str) -> bool:
        return self.rounds.start_game(room_id, actor_id)

    def create_next_round(self, room_id: str) -> bool:
        return self.rounds.create_next_round(room_id)

    def choose_word_for_round(self, room_id: str, round_id: str, actor_id: str, word_id: str) -> bool:
        return self.rounds.choose_word_for_round(room_id, round_id, actor_id, word_id)

    def open_reader_review(self, room_id: str, round_id: str, actor_id: str) -> bool:
        return self.rounds.open_reader_review(room_id, round_id, actor_id)

    def open_voting(self, room_id: str, round_id: str, actor_id: str) -> bool:
        return self.rounds.open_voting(room_id, round_id, actor_id)

    def reveal_and_score(self, room_id: str, round_id: str, actor_id: str) -> bool:
        return self.rounds.reveal_and_score(room_id, round_id, actor_id)

    def finish_game(self, room_id: str, actor_id: str) -> bool:
        return self.rounds.finish_game(room_id, actor_id)

    def advance_or_finish(self, room_id: str, actor_id: str) -> Dict:
        return self.rounds.advance_or_finish(room_id, actor_id)

    def get_round(self, room_id: str, round_id: str) -> Dict:
        return self.rounds.get_round(room_id, round_id)

    def get_current_round(self, room_id: str) -> Optional[Dict]:
        """The room's current round, or None while in the lobby."""
        room = self.get_room(room_id)
        if not room.get("current_round_id"):
            return None
        return self.rounds.get_round(room_id, room["current_round_id"])

    # Ledger operations
    def submit_definition(self, room_id: str, round_id: str, actor_id: str, text: str) -> Dict:
        return self.ledger.submit_definition(room_id, round_id, actor_id, text)

    def cast_vote(self, room_id: str, round_id: str, actor_id: str, choice_id: str) -> Dict:
        return self.ledger.cast_vote(room_id, round_id, actor_id, choice_id)

    def cast_vote_for_option(self, room_id: str, round_id: str, actor_id: str, option_id: str) -> Dict:
        return self.ledger.cast_vote_for_option(room_id, round_id, actor_id, option_id)

    def list_submissions(self, room_id: str, round_id: str) -> List[Dict]:
        return self.ledger.list_submissions(room_id, round_id)

    def list_votes(self, room_id: str, round_id: str) -> List[Dict]:
        return self.ledger.list_votes(room_id, round_id)

    # Results
    def get_round_results(self, room_id: str, round_id: str) -> Optional[Dict]:
        return self.scoring.get_round_results(room_id, round_id)

    def get_leaderboard(self, room_id: str) -> List[Dict]:
        return self.scoring.get_leaderboard(self.get_players(room_id))

    def get_scoring_rules(self, room_id: str) -> Dict:
        return self.scoring.scoring_rules(get_mode_rules(self.get_room(room_id)))
