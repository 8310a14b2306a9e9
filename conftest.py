"""
Global pytest configuration and fixtures.
Provides game service fixtures built over a fresh in-memory store.
"""

import os

import pytest

# Ensure testing environment before the app or config are imported
os.environ.setdefault('FLASK_ENV', 'testing')

from config_factory import AppConfig, reset_config
from bluffdict.config.game_settings import GameSettings, reset_game_settings
from bluffdict.content_manager import ContentManager
from bluffdict.core.random_source import RandomSource
from bluffdict.game_manager import GameManager
from bluffdict.store import InMemoryDocumentStore

from tests.helpers.game_helpers import make_word_data


@pytest.fixture(scope="function", autouse=True)
def reset_global_settings():
    """Drop cached settings so config overrides never leak between tests."""
    reset_game_settings()
    yield
    reset_game_settings()
    reset_config()


@pytest.fixture
def game_settings():
    """Game settings from the default configuration."""
    return GameSettings(AppConfig())


@pytest.fixture
def content_manager():
    """ContentManager loaded with a small corpus of 8 words."""
    manager = ContentManager()
    manager.load_words_from_data(make_word_data(8))
    return manager


@pytest.fixture
def store():
    return InMemoryDocumentStore()


@pytest.fixture
def random_source():
    """Seeded randomness so codes and shuffles are repeatable."""
    return RandomSource(seed=1234)


@pytest.fixture
def game_manager(content_manager, store, random_source, game_settings):
    """GameManager wired over the fixture store and corpus."""
    return GameManager(content_manager, store, random_source, game_settings)
