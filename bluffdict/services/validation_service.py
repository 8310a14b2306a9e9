"""
Validation Service for Bluffdict

Provides input validation and normalization for client supplied values.
"""

import logging
import re
from typing import Any, Dict, Optional

from bluffdict.config.game_settings import GameSettings, get_game_settings
from bluffdict.core.errors import ErrorCode, ValidationError
from bluffdict.core.game_modes import REAL_CHOICE_ID, RoomSettings
from bluffdict.core.random_source import ROOM_CODE_LENGTH

logger = logging.getLogger(__name__)


def normalize_room_code(code: Any) -> str:
    """Uppercase, drop anything that isn't a letter or digit, keep 6 chars."""
    if not isinstance(code, str):
        return ""
    return re.sub(r'[^A-Z0-9]', '', code.upper())[:ROOM_CODE_LENGTH]


class ValidationService:
    """Service responsible for input validation."""

    MAX_ACTOR_ID_LENGTH = 128
    MAX_ROOM_ID_LENGTH = 50

    ACTOR_ID_PATTERN = re.compile(r'^[A-Za-z0-9_.:-]+$')
    ROOM_ID_PATTERN = re.compile(r'^[a-z0-9]+$')

    def __init__(self, game_settings: Optional[GameSettings] = None):
        self.game_settings = game_settings or get_game_settings()

    def validate_actor_id(self, actor_id: Any) -> str:
        """
        Validate the opaque identity handed out by the identity provider.

        Raises:
            ValidationError: If the id is missing, malformed or reserved
        """
        if not actor_id or not isinstance(actor_id, str):
            raise ValidationError(ErrorCode.MISSING_ACTOR_ID, "Actor ID is required")

        actor_id = actor_id.strip()
        if not actor_id or len(actor_id) > self.MAX_ACTOR_ID_LENGTH or not self.ACTOR_ID_PATTERN.match(actor_id):
            raise ValidationError(ErrorCode.INVALID_DATA, "Actor ID is invalid")
        if actor_id == REAL_CHOICE_ID:
            # Author ids double as bluff choice ids
            raise ValidationError(ErrorCode.INVALID_DATA, "Actor ID is reserved")

        return actor_id

    def validate_room_id(self, room_id: Any) -> str:
        if not room_id or not isinstance(room_id, str):
            raise ValidationError(ErrorCode.MISSING_ROOM_ID, "Room ID is required")

        room_id = room_id.strip()
        if len(room_id) > self.MAX_ROOM_ID_LENGTH or not self.ROOM_ID_PATTERN.match(room_id):
            raise ValidationError(ErrorCode.INVALID_DATA, "Room ID is invalid")

        return room_id

    def validate_player_name(self, player_name: Any) -> str:
        """
        Validate and trim a display name.

        Raises:
            ValidationError: If the name is missing or too long
        """
        if not player_name or not isinstance(player_name, str):
            raise ValidationError(ErrorCode.MISSING_PLAYER_NAME, "Player name is required")

        player_name = player_name.strip()
        if not player_name:
            raise ValidationError(ErrorCode.MISSING_PLAYER_NAME, "Player name cannot be empty")

        max_length = self.game_settings.max_player_name_length
        if len(player_name) > max_length:
            raise ValidationError(
                ErrorCode.PLAYER_NAME_TOO_LONG,
                f"Player name must be {max_length} characters or less",
                {"max_length": max_length, "actual_length": len(player_name)}
            )

        return player_name

    def validate_room_code(self, code: Any) -> str:
        """
        Normalize a join code and check it is complete.

        Raises:
            ValidationError: If fewer than 6 usable characters remain
        """
        clean = normalize_room_code(code)
        if len(clean) != ROOM_CODE_LENGTH:
            raise ValidationError(
                ErrorCode.INVALID_ROOM_CODE,
                f"Room code must have {ROOM_CODE_LENGTH} letters or digits",
                {"code": clean}
            )
        return clean

    def validate_definition_text(self, text: Any) -> str:
        """
        Trim a bluff. Empty text is accepted and simply never counts.

        Raises:
            ValidationError: If text isn't a string or is too long
        """
        if text is None:
            return ""
        if not isinstance(text, str):
            raise ValidationError(ErrorCode.INVALID_DATA, "Definition must be text")

        text = text.strip()
        max_length = self.game_settings.max_definition_length
        if len(text) > max_length:
            raise ValidationError(
                ErrorCode.DEFINITION_TOO_LONG,
                f"Definition must be {max_length} characters or less",
                {"max_length": max_length, "actual_length": len(text)}
            )
        return text

    def validate_choice_id(self, choice_id: Any) -> str:
        if not choice_id or not isinstance(choice_id, str):
            raise ValidationError(ErrorCode.MISSING_CHOICE, "A choice is required")
        return choice_id

    def validate_room_settings(self, data: Dict[str, Any]) -> RoomSettings:
        """Build RoomSettings from a create_room payload."""
        return RoomSettings.from_options(
            target_score=data.get('target_score'),
            lang_mode=data.get('lang_mode', 'en'),
            game_mode=data.get('game_mode', 'classic'),
            reader_choice_enabled=data.get('reader_choice_enabled'),
        )
