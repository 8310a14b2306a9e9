"""
Socket.IO event handlers for the Bluffdict game.

This module provides the main registration function and the
connection/disconnection handlers.
"""

import logging
from functools import wraps

from flask import request
from flask_socketio import emit

from .room_connection_handler import RoomConnectionHandler
from .game_action_handler import GameActionHandler
from .game_info_handler import GameInfoHandler

logger = logging.getLogger(__name__)


def _route(event_name, handler):
    """Wrap a handler so each call is logged with its event name."""
    @wraps(handler)
    def socketio_handler(data=None):
        logger.info(f"Handling event: {event_name} from client: {request.sid}")
        return handler(data)
    return socketio_handler


def build_event_table():
    """Map every client event to its handler method."""
    room_handler = RoomConnectionHandler()
    game_handler = GameActionHandler()
    info_handler = GameInfoHandler()

    return {
        # Room connection
        'create_room': room_handler.handle_create_room,
        'join_room': room_handler.handle_join_room,
        'leave_room': room_handler.handle_leave_room,
        'get_room_state': room_handler.handle_get_room_state,

        # Game actions
        'start_game': game_handler.handle_start_game,
        'choose_word': game_handler.handle_choose_word,
        'submit_definition': game_handler.handle_submit_definition,
        'open_review': game_handler.handle_open_review,
        'open_voting': game_handler.handle_open_voting,
        'cast_vote': game_handler.handle_cast_vote,
        'reveal_and_score': game_handler.handle_reveal_and_score,
        'advance_round': game_handler.handle_advance_round,
        'finish_game': game_handler.handle_finish_game,

        # Game info
        'get_round_results': info_handler.handle_get_round_results,
        'get_leaderboard': info_handler.handle_get_leaderboard,
    }


def register_socket_handlers(socketio_instance):
    """Register all socket handlers with the SocketIO instance."""
    socketio_instance.on_event('connect', handle_connect)
    socketio_instance.on_event('disconnect', handle_disconnect)

    events = build_event_table()
    for event_name, handler in events.items():
        socketio_instance.on_event(event_name, _route(event_name, handler))
        logger.debug(f"Registered SocketIO handler for: {event_name}")

    logger.info(f"Registered {len(events)} socket event handlers")
    return events


def handle_connect(auth=None):
    """Handle client connection."""
    logger.info(f'Client connected: {request.sid}')
    emit('connected', {'status': 'Connected to Bluffdict server'})


def handle_disconnect(reason=None):
    """Handle client disconnection. Players keep their seat and score."""
    logger.info(f'Client disconnected: {request.sid}')

    session_info = RoomConnectionHandler().detach_socket(request.sid)
    if session_info:
        logger.info(
            f'Player {session_info["player_name"]} ({session_info["actor_id"]}) '
            f'disconnected from room {session_info["room_id"]} (score preserved)'
        )
