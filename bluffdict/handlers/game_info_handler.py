"""
Game Info Handler

This module handles Socket.IO events related to game information,
including getting round results and the leaderboard.
"""

import logging

from bluffdict.core.errors import ErrorCode, InvalidStateError
from bluffdict.services.error_response_factory import with_error_handling
from .base_handler import BaseInfoHandler

logger = logging.getLogger(__name__)


class GameInfoHandler(BaseInfoHandler):
    """Handler for game information operations like results and leaderboard."""

    @with_error_handling
    def handle_get_round_results(self, data=None):
        """Handle request for the recap of a revealed round."""
        self.log_handler_start('handle_get_round_results', data)

        session_info = self.require_session()
        room_id = session_info['room_id']
        round_id = self.resolve_round_id(room_id, data)

        round_results = self.game_manager.get_round_results(room_id, round_id)

        if round_results:
            self.emit_success('round_results', {
                'results': round_results
            })
            self.log_handler_success('handle_get_round_results', 'Round results sent')
        else:
            raise InvalidStateError(
                ErrorCode.WRONG_PHASE,
                'No round results available. The round has not been revealed yet.',
                {'round_id': round_id}
            )

    @with_error_handling
    def handle_get_leaderboard(self, data=None):
        """Handle request for current leaderboard."""
        self.log_handler_start('handle_get_leaderboard', data)

        session_info = self.require_session()
        room_id = session_info['room_id']

        room = self.game_manager.get_room(room_id)
        self.emit_success('leaderboard', {
            'leaderboard': self.game_manager.get_leaderboard(room_id),
            'scoring_rules': self.game_manager.get_scoring_rules(room_id),
            'target_score': room['target_score'],
            'game_over': room.get('game_over', False),
            'winner_uid': room.get('winner_uid')
        })

        self.log_handler_success('handle_get_leaderboard', 'Leaderboard sent')
