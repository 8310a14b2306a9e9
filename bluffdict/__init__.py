"""Bluffdict - a multiplayer dictionary bluffing game server."""

__version__ = "0.1.0"
