"""
Session Service - Maps Socket.IO connections to players.

A player keeps the same actor id across reconnects and devices, so one actor
may own several sockets in a room at once.
"""

import logging
import threading
from typing import Dict, List, Optional

logger = logging.getLogger(__name__)


class SessionService:
    """Manages player sessions and Socket.IO connections."""

    def __init__(self):
        """Initialize the session service."""
        # socket_id -> {'room_id', 'actor_id', 'player_name'}
        self._player_sessions: Dict[str, Dict[str, str]] = {}
        self._lock = threading.Lock()
        logger.info("SessionService initialized")

    def create_session(self, socket_id: str, room_id: str, actor_id: str, player_name: str) -> None:
        """Create or replace the session of a socket."""
        with self._lock:
            self._player_sessions[socket_id] = {
                'room_id': room_id,
                'actor_id': actor_id,
                'player_name': player_name
            }
        logger.debug(f"Created session for player {player_name} ({actor_id}) in room {room_id}")

    def get_session(self, socket_id: str) -> Optional[Dict[str, str]]:
        with self._lock:
            session = self._player_sessions.get(socket_id)
            return dict(session) if session else None

    def has_session(self, socket_id: str) -> bool:
        with self._lock:
            return socket_id in self._player_sessions

    def remove_session(self, socket_id: str) -> Optional[Dict[str, str]]:
        """
        Remove a socket's session.

        Returns:
            The removed session info or None if not found
        """
        with self._lock:
            session_info = self._player_sessions.pop(socket_id, None)
        if session_info:
            logger.debug(f"Removed session for player {session_info['player_name']} ({session_info['actor_id']})")
        return session_info

    def get_sessions_by_room(self, room_id: str) -> Dict[str, Dict[str, str]]:
        """Sessions of a room keyed by socket id."""
        with self._lock:
            return {
                socket_id: dict(info)
                for socket_id, info in self._player_sessions.items()
                if info['room_id'] == room_id
            }

    def get_actor_sockets(self, room_id: str, actor_id: str) -> List[str]:
        """All sockets an actor has open in a room."""
        return [
            socket_id for socket_id, info in self.get_sessions_by_room(room_id).items()
            if info['actor_id'] == actor_id
        ]

    def get_sessions_count(self) -> int:
        with self._lock:
            return len(self._player_sessions)

    def clear(self) -> None:
        """Drop every session (useful for testing)."""
        with self._lock:
            self._player_sessions.clear()
