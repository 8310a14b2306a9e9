"""
Core error definitions for Bluffdict

Provides error codes and the game exception hierarchy shared by every service.
"""

from enum import Enum
from typing import Dict, Optional


class ErrorCode(Enum):
    """Standardized error codes for the application."""

    # Request data errors
    INVALID_DATA = "INVALID_DATA"
    MISSING_DATA = "MISSING_DATA"
    MISSING_ROOM_ID = "MISSING_ROOM_ID"
    MISSING_ACTOR_ID = "MISSING_ACTOR_ID"
    MISSING_PLAYER_NAME = "MISSING_PLAYER_NAME"
    PLAYER_NAME_TOO_LONG = "PLAYER_NAME_TOO_LONG"
    INVALID_ROOM_CODE = "INVALID_ROOM_CODE"
    INVALID_SETTINGS = "INVALID_SETTINGS"
    NOT_IN_ROOM = "NOT_IN_ROOM"
    ALREADY_IN_ROOM = "ALREADY_IN_ROOM"

    # Room management errors
    ROOM_NOT_FOUND = "ROOM_NOT_FOUND"
    ROUND_NOT_FOUND = "ROUND_NOT_FOUND"
    WORD_NOT_FOUND = "WORD_NOT_FOUND"
    ROOM_FULL = "ROOM_FULL"
    GAME_ALREADY_STARTED = "GAME_ALREADY_STARTED"
    INSUFFICIENT_PLAYERS = "INSUFFICIENT_PLAYERS"

    # Game flow errors
    WRONG_PHASE = "WRONG_PHASE"
    WRONG_MODE = "WRONG_MODE"
    NOT_AUTHORIZED = "NOT_AUTHORIZED"
    INVALID_WORD_CHOICE = "INVALID_WORD_CHOICE"

    # Submission and vote errors
    DEFINITION_TOO_LONG = "DEFINITION_TOO_LONG"
    READER_CANNOT_SUBMIT = "READER_CANNOT_SUBMIT"
    READER_CANNOT_VOTE = "READER_CANNOT_VOTE"
    SELF_VOTE = "SELF_VOTE"
    MISSING_CHOICE = "MISSING_CHOICE"
    INVALID_CHOICE = "INVALID_CHOICE"

    # System errors
    INTERNAL_ERROR = "INTERNAL_ERROR"
    TRANSACTION_CONFLICT = "TRANSACTION_CONFLICT"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"


class GameError(Exception):
    """Base class for errors surfaced to the calling client."""

    default_code = ErrorCode.INTERNAL_ERROR

    def __init__(self, code: Optional[ErrorCode] = None, message: str = "", details: Optional[Dict] = None):
        self.code = code or self.default_code
        self.message = message
        self.details = details or {}
        super().__init__(message)


class NotFoundError(GameError):
    """Room, round or word does not exist."""
    default_code = ErrorCode.ROOM_NOT_FOUND


class InvalidStateError(GameError):
    """The attempted action does not match the current phase."""
    default_code = ErrorCode.WRONG_PHASE


class UnauthorizedError(GameError):
    """Wrong actor or role for the attempted transition."""
    default_code = ErrorCode.NOT_AUTHORIZED


class ValidationError(GameError):
    """Custom exception for validation errors."""
    default_code = ErrorCode.INVALID_DATA
