"""
REST API endpoints for the Bluffdict application.
"""

import logging

from flask import Blueprint, jsonify

from container import get_container
from bluffdict.core.errors import ErrorCode, GameError, NotFoundError, ValidationError
from bluffdict.services.error_response_factory import ErrorResponseFactory

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR = {
    NotFoundError: 404,
    ValidationError: 400,
}


def create_api_blueprint():
    """Create the API Blueprint. Services are resolved from the container per request."""
    responses = ErrorResponseFactory()

    api = Blueprint('api', __name__, url_prefix='/api')

    @api.errorhandler(GameError)
    def handle_game_error(error):
        status = next((code for cls, code in _STATUS_BY_ERROR.items() if isinstance(error, cls)), 409)
        logger.warning(f'API error {error.code.value}: {error.message}')
        return jsonify(responses.create_error_response(error.code, error.message, error.details)), status

    @api.route('/health')
    def health():
        """Health check, also reporting the loaded word corpus."""
        content_manager = get_container().get('ContentManager')
        return jsonify({
            'status': 'ok',
            'words_loaded': content_manager.is_loaded(),
            'word_count': content_manager.get_word_count() if content_manager.is_loaded() else 0
        })

    @api.route('/rooms/<code>')
    def find_room(code):
        """Look up a room by its join code."""
        game_manager = get_container().get('GameManager')
        room_id = game_manager.find_room_id_by_code(code)
        if room_id is None:
            raise NotFoundError(ErrorCode.ROOM_NOT_FOUND, 'Room not found', {'code': code})

        room = game_manager.get_room(room_id)
        return jsonify(responses.create_success_response({
            'room_id': room_id,
            'code': room['code'],
            'status': room['status'],
            'game_mode': room['game_mode'],
            'lang_mode': room['lang_mode'],
            'player_count': len(room['player_order'])
        }))

    @api.route('/rooms/<room_id>/leaderboard')
    def leaderboard(room_id):
        """Current standings of a room."""
        game_manager = get_container().get('GameManager')
        room = game_manager.get_room(room_id)
        return jsonify(responses.create_success_response({
            'room_id': room_id,
            'leaderboard': game_manager.get_leaderboard(room_id),
            'target_score': room['target_score'],
            'game_over': room.get('game_over', False),
            'winner_uid': room.get('winner_uid')
        }))

    return api
