"""
Room Connection Handler

This module handles Socket.IO events related to room connections,
including creating rooms, joining rooms, leaving rooms, and getting room state.
"""

import logging
from typing import Dict, Optional

from flask import request

from bluffdict.core.errors import ErrorCode, ValidationError
from bluffdict.services.error_response_factory import with_error_handling
from .base_handler import BaseRoomHandler

logger = logging.getLogger(__name__)


class RoomConnectionHandler(BaseRoomHandler):
    """Handler for room connection operations like create, join, leave, and state retrieval."""

    def _ensure_not_in_room(self):
        if self.session_service.has_session(request.sid):
            raise ValidationError(
                ErrorCode.ALREADY_IN_ROOM,
                'You are already in a room. Leave it first.'
            )

    def _attach(self, room_id: str, actor_id: str, player_name: str) -> None:
        """Bind the requesting socket to a room and send it the full state."""
        self.join_socketio_room(room_id)
        self.session_service.create_session(request.sid, room_id, actor_id, player_name)
        self.broadcast_service.send_room_state_to_player(room_id, request.sid, actor_id)

    @with_error_handling
    def handle_create_room(self, data):
        """
        Handle a player creating a room, who becomes its host.

        Expected data format:
        {
            'actor_id': 'opaque-player-id',
            'player_name': 'display_name',
            'target_score': 10,
            'lang_mode': 'en' | 'es' | 'both',
            'game_mode': 'classic' | 'no_reader',
            'reader_choice_enabled': true
        }
        """
        self.log_handler_start('handle_create_room', data)

        data = self.validate_data_dict(data, ['actor_id', 'player_name', 'target_score'])
        self._ensure_not_in_room()

        settings = self.validation_service.validate_room_settings(data)
        actor_id = self.validation_service.validate_actor_id(data['actor_id'])
        player_name = self.validation_service.validate_player_name(data['player_name'])

        result = self.game_manager.create_room(actor_id, player_name, settings)
        room_id = result['room_id']

        self.log_handler_success('handle_create_room', f'Room {room_id} ({result["code"]}) created by {actor_id}')
        self.emit_success('room_created', {
            'room_id': room_id,
            'code': result['code'],
            'actor_id': actor_id,
            'settings': settings.to_dict()
        })
        self._attach(room_id, actor_id, player_name)

    @with_error_handling
    def handle_join_room(self, data):
        """
        Handle player joining a room by its code.

        Expected data format:
        {
            'code': 'ABC234',
            'actor_id': 'opaque-player-id',
            'player_name': 'display_name'
        }
        """
        self.log_handler_start('handle_join_room', data)

        data = self.validate_data_dict(data, ['code', 'actor_id', 'player_name'])
        self._ensure_not_in_room()

        result = self.game_manager.reconnect_or_join(data['code'], data['actor_id'], data['player_name'])
        room_id = result['room_id']
        actor_id = self.validation_service.validate_actor_id(data['actor_id'])
        player_name = self.validation_service.validate_player_name(data['player_name'])

        self.log_handler_success(
            'handle_join_room',
            f'Player {player_name} ({actor_id}) {"rejoined" if result["rejoined"] else "joined"} room {room_id}'
        )
        self.emit_success('room_joined', {
            'room_id': room_id,
            'code': result['code'],
            'actor_id': actor_id,
            'rejoined': result['rejoined']
        })
        self._attach(room_id, actor_id, player_name)

    @with_error_handling
    def handle_leave_room(self, data=None):
        """Handle player leaving their current room. The player stays on the roster."""
        self.log_handler_start('handle_leave_room', data)

        session_info = self.require_session()
        room_id = session_info['room_id']

        self.detach_socket(request.sid)
        self.leave_socketio_room(room_id)

        self.log_handler_success('handle_leave_room', f'Player {session_info["actor_id"]} left room {room_id}')
        self.emit_success('room_left', {
            'room_id': room_id,
            'message': f'Successfully left room {room_id}'
        })

    @with_error_handling
    def handle_get_room_state(self, data=None):
        """Handle request for current room state."""
        self.log_handler_start('handle_get_room_state', data)

        session_info = self.require_session()
        self.broadcast_service.send_room_state_to_player(
            session_info['room_id'], request.sid, session_info['actor_id']
        )

        self.log_handler_success('handle_get_room_state')

    def detach_socket(self, socket_id: str) -> Optional[Dict[str, str]]:
        """
        Drop a socket's session and mark its player disconnected once the
        player has no other socket left in the room.

        Returns:
            The removed session, or None if the socket had none
        """
        session_info = self.session_service.remove_session(socket_id)
        if not session_info:
            return None

        room_id, actor_id = session_info['room_id'], session_info['actor_id']
        if not self.session_service.get_actor_sockets(room_id, actor_id):
            self.game_manager.set_player_connected(room_id, actor_id, False)
        return session_info
