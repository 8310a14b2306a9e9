"""
Bluffdict configuration.

Every AppConfig field can be set from an environment variable of the same
name in upper case (MAX_PLAYERS_PER_ROOM, WORDS_FILE, ...). FLASK_ENV picks
the environment, which decides the debug and async mode defaults.
"""

import os
import logging
from dataclasses import dataclass, fields
from enum import Enum
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

DEV_SECRET_KEY = 'dev-secret-key-change-in-production'
ASYNC_MODES = ('eventlet', 'threading')

# Inclusive (low, high) bounds of the numeric settings
_BOUNDS = {
    'port': (1, 65535),
    'max_players_per_room': (2, 50),
    'max_definition_length': (10, 2000),
    'max_player_name_length': (1, 100),
    'word_candidate_count': (1, 20),
    'transaction_max_attempts': (1, 100),
}


class Environment(Enum):
    DEVELOPMENT = "development"
    PRODUCTION = "production"
    TESTING = "testing"


class ConfigError(Exception):
    """A setting the server can't run with"""


@dataclass
class AppConfig:
    """Validated settings for the server and the game rules"""

    secret_key: str = DEV_SECRET_KEY
    debug: bool = False
    environment: Environment = Environment.DEVELOPMENT

    # Read by app.py, run_dev.py and gunicorn.conf.py
    host: str = '0.0.0.0'
    port: int = 5000
    socketio_async_mode: str = 'eventlet'
    worker_connections: int = 1000
    timeout: int = 30
    keepalive: int = 2
    log_level: str = 'info'

    # Game rules, read through GameSettings
    max_players_per_room: int = 12
    min_players_required: int = 2
    max_definition_length: int = 200
    max_player_name_length: int = 20
    word_candidate_count: int = 5
    transaction_max_attempts: int = 5
    words_file: str = 'words.yaml'

    def __post_init__(self):
        for name, (low, high) in _BOUNDS.items():
            value = getattr(self, name)
            if value < low or value > high:
                raise ConfigError(f"Invalid {name}: {value}")

        if self.min_players_required < 2 or self.min_players_required > self.max_players_per_room:
            raise ConfigError(f"Invalid min_players_required: {self.min_players_required}")

        if self.socketio_async_mode not in ASYNC_MODES:
            raise ConfigError(f"Invalid socketio_async_mode: {self.socketio_async_mode}")

        if self.is_production and self.secret_key == DEV_SECRET_KEY:
            raise ConfigError("Production environment requires a secure SECRET_KEY")

    @property
    def is_production(self) -> bool:
        return self.environment == Environment.PRODUCTION


_config: Optional[AppConfig] = None


def _convert(env_key: str, raw: str, default: Any) -> Any:
    """Convert an environment string to the type of the field's default."""
    if isinstance(default, bool):
        return raw.lower() in ('true', '1', 'yes', 'on')
    if isinstance(default, int):
        try:
            return int(raw)
        except ValueError:
            logger.warning(f"Invalid integer value for {env_key}: {raw}, using default: {default}")
            return default
    return raw


def load_config() -> AppConfig:
    """Build the global configuration from environment variables."""
    flask_env = os.environ.get('FLASK_ENV', 'development')
    if flask_env in (Environment.DEVELOPMENT.value, Environment.TESTING.value):
        environment = Environment(flask_env)
    else:
        environment = Environment.PRODUCTION

    defaults = {
        'debug': environment != Environment.PRODUCTION,
        'socketio_async_mode': 'threading' if environment == Environment.TESTING else 'eventlet',
    }

    values: Dict[str, Any] = {'environment': environment}
    for config_field in fields(AppConfig):
        if config_field.name == 'environment':
            continue
        env_key = config_field.name.upper()
        default = defaults.get(config_field.name, config_field.default)
        raw = os.environ.get(env_key)
        values[config_field.name] = default if raw is None else _convert(env_key, raw, default)

    config = _install(AppConfig(**values))
    logger.info(f"Configuration loaded for environment: {environment.value}")
    return config


def load_config_from_dict(config_dict: Dict[str, Any]) -> AppConfig:
    """Build the global configuration from a dict of field values (tests)."""
    config_dict = dict(config_dict)
    if isinstance(config_dict.get('environment'), str):
        config_dict['environment'] = Environment(config_dict['environment'])
    return _install(AppConfig(**config_dict))


def _install(config: AppConfig) -> AppConfig:
    global _config
    _config = config
    return config


def get_config() -> AppConfig:
    """
    The loaded global configuration.

    Raises:
        ConfigError: If neither loader has run yet
    """
    if _config is None:
        raise ConfigError("Configuration not loaded. Call load_config() or load_config_from_dict() first.")
    return _config


def reset_config():
    """Forget the loaded configuration."""
    global _config
    _config = None
