"""
Base Handler Classes

This module provides base classes for Socket.IO handlers with common patterns
for validation, session management, and response formatting.
"""

import logging
from abc import ABC
from typing import Any, Dict, Optional

from flask import request
from flask_socketio import emit, join_room, leave_room

from container import get_container
from bluffdict.core.errors import ErrorCode, ValidationError

logger = logging.getLogger(__name__)

# Specific error codes for commonly missing fields
_MISSING_FIELD_CODES = {
    'room_id': (ErrorCode.MISSING_ROOM_ID, "Room ID is required"),
    'actor_id': (ErrorCode.MISSING_ACTOR_ID, "Actor ID is required"),
    'player_name': (ErrorCode.MISSING_PLAYER_NAME, "Player name is required"),
    'option_id': (ErrorCode.MISSING_CHOICE, "A choice is required"),
}


class BaseHandler(ABC):
    """
    Abstract base class for all Socket.IO handlers.

    Provides common functionality like service access, session management,
    validation patterns, and standardized response formatting.
    """

    def __init__(self):
        self._container = get_container()

    @property
    def game_manager(self):
        return self._container.get('GameManager')

    @property
    def validation_service(self):
        return self.game_manager.validation

    @property
    def error_response_factory(self):
        return self._container.get('ErrorResponseFactory')

    @property
    def session_service(self):
        return self._container.get('SessionService')

    @property
    def broadcast_service(self):
        return self._container.get('BroadcastService')

    def get_current_session(self) -> Optional[Dict[str, Any]]:
        """Get the current session info for the requesting client."""
        return self.session_service.get_session(request.sid)  # type: ignore[attr-defined]

    def require_session(self) -> Dict[str, Any]:
        """
        Get the current session info, raising an error if not in a room.

        Raises:
            ValidationError: If the player is not in a room
        """
        session_info = self.get_current_session()
        if not session_info:
            raise ValidationError(
                ErrorCode.NOT_IN_ROOM,
                'You are not currently in a room'
            )
        return session_info

    def validate_data_dict(self, data: Any, required_fields: Optional[list] = None) -> Dict[str, Any]:
        """
        Validate that data is a dictionary and contains required fields.

        Raises:
            ValidationError: If validation fails
        """
        if data is None and not required_fields:
            return {}

        if not isinstance(data, dict):
            raise ValidationError(
                ErrorCode.INVALID_DATA,
                "Invalid data format - expected dictionary"
            )

        for field in required_fields or []:
            if field not in data:
                code, message = _MISSING_FIELD_CODES.get(
                    field, (ErrorCode.MISSING_DATA, f"Missing required field: {field}")
                )
                raise ValidationError(code, message)

        return data

    def emit_success(self, event_name: str, data: Optional[Dict[str, Any]] = None) -> None:
        """Emit a success response to the requesting client."""
        response = self.error_response_factory.create_success_response(data or {})
        emit(event_name, response)

    def log_handler_start(self, handler_name: str, data: Any = None) -> None:
        """Log the start of handler execution."""
        logger.info(f'{handler_name} called by client: {request.sid}')  # type: ignore[attr-defined]
        if data:
            logger.debug(f'{handler_name} data: {data}')

    def log_handler_success(self, handler_name: str, message: Optional[str] = None) -> None:
        """Log successful handler completion."""
        log_msg = f'{handler_name} completed successfully for client: {request.sid}'  # type: ignore[attr-defined]
        if message:
            log_msg += f' - {message}'
        logger.info(log_msg)


class RoomHandlerMixin:
    """
    Mixin for handlers that deal with room operations.

    Provides joining and leaving of Socket.IO rooms.
    """

    def join_socketio_room(self, room_id: str) -> None:
        """Join a Socket.IO room for broadcasting."""
        join_room(room_id)
        logger.debug(f'Client {request.sid} joined Socket.IO room: {room_id}')  # type: ignore[attr-defined]

    def leave_socketio_room(self, room_id: str) -> None:
        """Leave a Socket.IO room."""
        leave_room(room_id)
        logger.debug(f'Client {request.sid} left Socket.IO room: {room_id}')  # type: ignore[attr-defined]


class GameHandlerMixin:
    """
    Mixin for handlers that act on the room's current round.
    """

    game_manager: Any  # Provided by BaseHandler

    def resolve_round_id(self, room_id: str, data: Optional[Dict[str, Any]]) -> str:
        """
        Round targeted by an action: the one named in the payload, else the
        room's current round.

        Raises:
            ValidationError: If the room has no round yet
        """
        if data and data.get('round_id'):
            return str(data['round_id'])

        room = self.game_manager.get_room(room_id)
        if not room.get('current_round_id'):
            raise ValidationError(
                ErrorCode.ROUND_NOT_FOUND,
                'The game has not started yet'
            )
        return room['current_round_id']


class BaseRoomHandler(BaseHandler, RoomHandlerMixin):
    """Base class for handlers that deal with room operations."""
    pass


class BaseGameHandler(BaseHandler, GameHandlerMixin):
    """Base class for handlers that deal with game operations."""
    pass


class BaseInfoHandler(BaseHandler, GameHandlerMixin):
    """Base class for handlers that provide information/status."""
    pass
