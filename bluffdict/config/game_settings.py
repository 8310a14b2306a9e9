"""
Game Settings Configuration Module

Provides centralized access to game-specific configuration values,
replacing hardcoded constants throughout the codebase.
"""

import logging

logger = logging.getLogger(__name__)


class GameSettings:
    """Centralized game settings management."""

    def __init__(self, app_config=None):
        """
        Initialize game settings.

        Args:
            app_config: Application configuration instance from config_factory
        """
        self._config = app_config
        if app_config is None:
            from config_factory import ConfigError, get_config
            try:
                self._config = get_config()
            except ConfigError as e:
                logger.warning(f"Could not load configuration: {e}, using defaults")
                self._config = None

    @property
    def max_players_per_room(self) -> int:
        """Maximum number of players allowed per room."""
        if self._config is None:
            return 12  # Fallback default

        return self._config.max_players_per_room

    @property
    def min_players_required(self) -> int:
        """Minimum players required to start a game."""
        if self._config is None:
            return 2  # Fallback default

        return self._config.min_players_required

    @property
    def max_definition_length(self) -> int:
        """Maximum bluff length in characters."""
        if self._config is None:
            return 200  # Fallback default

        return self._config.max_definition_length

    @property
    def max_player_name_length(self) -> int:
        if self._config is None:
            return 20

        return self._config.max_player_name_length

    @property
    def word_candidate_count(self) -> int:
        """Number of words offered to the reader in word selection."""
        if self._config is None:
            return 5

        return self._config.word_candidate_count

    @property
    def transaction_max_attempts(self) -> int:
        if self._config is None:
            return 5

        return self._config.transaction_max_attempts

    @property
    def words_file(self) -> str:
        if self._config is None:
            return 'words.yaml'

        return self._config.words_file


# Global instance for easy access
_game_settings_instance = None


def get_game_settings(app_config=None) -> GameSettings:
    """
    Get or create the global game settings instance.

    Args:
        app_config: Optional app config to use

    Returns:
        GameSettings instance
    """
    global _game_settings_instance

    if _game_settings_instance is None or app_config is not None:
        _game_settings_instance = GameSettings(app_config)

    return _game_settings_instance


def reset_game_settings():
    """Reset the global game settings instance (mainly for testing)."""
    global _game_settings_instance
    _game_settings_instance = None
