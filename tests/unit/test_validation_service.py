"""
Validation Service Unit Tests
Tests for input validation and normalization.
"""

import pytest
import sys
import os

# Add project root to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

from config_factory import AppConfig
from bluffdict.config.game_settings import GameSettings
from bluffdict.core.errors import ErrorCode, ValidationError
from bluffdict.core.game_modes import GameMode, LanguageMode
from bluffdict.services.validation_service import ValidationService, normalize_room_code


class TestNormalizeRoomCode:
    """Join code normalization"""

    def test_uppercases_and_strips_separators(self):
        assert normalize_room_code(" ab-c 2d3 ") == "ABC2D3"

    def test_truncates_to_six(self):
        assert normalize_room_code("ABCDEFGH") == "ABCDEF"

    def test_non_string(self):
        assert normalize_room_code(None) == ""
        assert normalize_room_code(123456) == ""


class TestValidationService:
    """Field validation"""

    def setup_method(self):
        self.service = ValidationService(GameSettings(AppConfig()))

    def test_valid_actor_id_is_trimmed(self):
        assert self.service.validate_actor_id("  user-42 ") == "user-42"

    def test_missing_actor_id(self):
        with pytest.raises(ValidationError) as exc_info:
            self.service.validate_actor_id(None)
        assert exc_info.value.code == ErrorCode.MISSING_ACTOR_ID

    def test_malformed_actor_id(self):
        with pytest.raises(ValidationError) as exc_info:
            self.service.validate_actor_id("rooms/x")
        assert exc_info.value.code == ErrorCode.INVALID_DATA

    def test_reserved_actor_id(self):
        with pytest.raises(ValidationError) as exc_info:
            self.service.validate_actor_id(" REAL ")
        assert exc_info.value.code == ErrorCode.INVALID_DATA
        assert self.service.validate_actor_id("real") == "real"

    def test_room_id(self):
        assert self.service.validate_room_id("abc123") == "abc123"
        with pytest.raises(ValidationError):
            self.service.validate_room_id("ABC 123")

    def test_player_name_trimmed(self):
        assert self.service.validate_player_name("  Ann  ") == "Ann"

    def test_blank_player_name(self):
        with pytest.raises(ValidationError) as exc_info:
            self.service.validate_player_name("   ")
        assert exc_info.value.code == ErrorCode.MISSING_PLAYER_NAME

    def test_player_name_too_long(self):
        with pytest.raises(ValidationError) as exc_info:
            self.service.validate_player_name("n" * 21)
        assert exc_info.value.code == ErrorCode.PLAYER_NAME_TOO_LONG
        assert exc_info.value.details == {"max_length": 20, "actual_length": 21}

    def test_room_code(self):
        assert self.service.validate_room_code("abc-234") == "ABC234"
        with pytest.raises(ValidationError) as exc_info:
            self.service.validate_room_code("ab")
        assert exc_info.value.code == ErrorCode.INVALID_ROOM_CODE

    def test_definition_text(self):
        assert self.service.validate_definition_text(None) == ""
        assert self.service.validate_definition_text("  hi  ") == "hi"
        assert self.service.validate_definition_text(" " + "x" * 200 + " ") == "x" * 200

    def test_definition_not_text(self):
        with pytest.raises(ValidationError) as exc_info:
            self.service.validate_definition_text(42)
        assert exc_info.value.code == ErrorCode.INVALID_DATA

    def test_definition_limit_follows_config(self):
        service = ValidationService(GameSettings(AppConfig(max_definition_length=10)))
        with pytest.raises(ValidationError) as exc_info:
            service.validate_definition_text("x" * 11)
        assert exc_info.value.code == ErrorCode.DEFINITION_TOO_LONG


class TestRoomSettings:
    """create_room options"""

    def setup_method(self):
        self.service = ValidationService(GameSettings(AppConfig()))

    def test_defaults(self):
        settings = self.service.validate_room_settings({"target_score": 10})

        assert settings.lang_mode == LanguageMode.EN
        assert settings.game_mode == GameMode.CLASSIC
        assert settings.reader_choice_enabled is True

    def test_no_reader_never_lets_a_reader_choose(self):
        settings = self.service.validate_room_settings({
            "target_score": 5, "game_mode": "no_reader", "reader_choice_enabled": True
        })
        assert settings.reader_choice_enabled is False

    @pytest.mark.parametrize("target_score", [0, -3, "10", True, None, 2.5])
    def test_invalid_target_score(self, target_score):
        with pytest.raises(ValidationError) as exc_info:
            self.service.validate_room_settings({"target_score": target_score})
        assert exc_info.value.code == ErrorCode.INVALID_SETTINGS

    @pytest.mark.parametrize("options", [
        {"target_score": 10, "lang_mode": "fr"},
        {"target_score": 10, "game_mode": "speed"},
    ])
    def test_unknown_modes(self, options):
        with pytest.raises(ValidationError) as exc_info:
            self.service.validate_room_settings(options)
        assert exc_info.value.code == ErrorCode.INVALID_SETTINGS

    def test_settings_to_dict(self):
        settings = self.service.validate_room_settings({"target_score": 12, "lang_mode": "both"})
        assert settings.to_dict() == {
            "target_score": 12,
            "lang_mode": "both",
            "game_mode": "classic",
            "reader_choice_enabled": True,
        }
