"""
Room Lifecycle Service for Bluffdict

Handles room creation, join admission and the player roster.
"""

import logging
from typing import Dict, List, Optional

from bluffdict.config.game_settings import GameSettings, get_game_settings
from bluffdict.core.errors import ErrorCode, InvalidStateError, NotFoundError, ValidationError
from bluffdict.core.game_modes import RoomSettings
from bluffdict.core.game_phases import GamePhase
from bluffdict.core.random_source import RandomSource
from bluffdict.services.validation_service import ValidationService
from bluffdict.store import DocumentStore, server_timestamp
from bluffdict.store.paths import ROOMS, player_path, players_path, room_path

logger = logging.getLogger(__name__)


class RoomLifecycleService:
    """Manages room creation, joining and roster bookkeeping."""

    def __init__(self, store: DocumentStore, random_source: RandomSource,
                 validation_service: Optional[ValidationService] = None,
                 game_settings: Optional[GameSettings] = None):
        self.store = store
        self.random_source = random_source
        self.game_settings = game_settings or get_game_settings()
        self.validation = validation_service or ValidationService(self.game_settings)

    def _create_initial_room_data(self, room_id: str, code: str, host_id: str, settings: RoomSettings) -> Dict:
        """Create initial room document."""
        now = server_timestamp()
        room = {
            "room_id": room_id,
            "code": code,
            "status": GamePhase.LOBBY.value,
            "host_uid": host_id,
            "round_index": 0,
            "reader_index": 0,
            "player_order": [host_id],
            "used_word_ids": [],
            "current_round_id": None,
            "game_over": False,
            "winner_uid": None,
            "created_at": now,
            "last_updated_at": now,
        }
        room.update(settings.to_dict())
        return room

    @staticmethod
    def _create_player_data(name: str) -> Dict:
        return {
            "name": name,
            "score": 0,
            "joined_at": server_timestamp(),
            "is_connected": True,
        }

    def create_room(self, host_id: str, host_name: str, settings: RoomSettings) -> Dict:
        """
        Create a room in the lobby with the host as its only player.

        Join codes are not checked against existing rooms; a collision in a
        32^6 space is accepted as a negligible risk.

        Args:
            host_id: Actor id of the creating player
            host_name: Display name of the host
            settings: Validated room settings

        Returns:
            Dict with room_id and code
        """
        host_id = self.validation.validate_actor_id(host_id)
        host_name = self.validation.validate_player_name(host_name)

        room_id = self.random_source.token(10)
        code = self.random_source.room_code()
        room_data = self._create_initial_room_data(room_id, code, host_id, settings)
        player_data = self._create_player_data(host_name)

        def write(transaction):
            transaction.set(room_path(room_id), room_data)
            transaction.set(player_path(room_id, host_id), player_data)

        self.store.run_transaction(write)
        logger.info(f"Created room {room_id} with code {code} for host {host_id} ({settings.game_mode.value})")
        return {"room_id": room_id, "code": code}

    def find_room_id_by_code(self, code: str) -> Optional[str]:
        matches = self.store.query(ROOMS, "code", code)
        if not matches:
            return None
        return matches[0][0]

    def join_room_by_code(self, code: str, actor_id: str, name: str) -> Dict:
        """
        Admit a player to a room in the lobby.

        Rejoining with the same actor id only refreshes the name and the
        connectivity flag; the roster never gets a duplicate entry.

        Returns:
            Dict with room_id, code and whether this was a rejoin

        Raises:
            ValidationError: If the code is malformed or the room is full
            NotFoundError: If no room has this code
            InvalidStateError: If the game already started
        """
        clean = self.validation.validate_room_code(code)
        actor_id = self.validation.validate_actor_id(actor_id)
        name = self.validation.validate_player_name(name)

        room_id = self.find_room_id_by_code(clean)
        if room_id is None:
            raise NotFoundError(ErrorCode.ROOM_NOT_FOUND, "Room not found", {"code": clean})

        max_players = self.game_settings.max_players_per_room
        paths = [room_path(room_id), player_path(room_id, actor_id)]
        outcome = {"rejoined": False}

        def validate(snapshot):
            room = snapshot[paths[0]]
            if room is None:
                raise NotFoundError(ErrorCode.ROOM_NOT_FOUND, "Room not found", {"code": clean})
            if room["status"] != GamePhase.LOBBY.value:
                raise InvalidStateError(
                    ErrorCode.GAME_ALREADY_STARTED,
                    "Game already started, players can only join in the lobby",
                    {"status": room["status"]}
                )
            if snapshot[paths[1]] is None and len(room["player_order"]) >= max_players:
                raise ValidationError(
                    ErrorCode.ROOM_FULL,
                    f"Room is full ({max_players} players)",
                    {"max_players": max_players}
                )
            return True

        def write(snapshot, transaction):
            room = snapshot[paths[0]]
            if snapshot[paths[1]] is None:
                outcome["rejoined"] = False
                transaction.set(paths[1], self._create_player_data(name))
                transaction.update(paths[0], {
                    "player_order": room["player_order"] + [actor_id],
                    "last_updated_at": server_timestamp(),
                })
            else:
                outcome["rejoined"] = True
                transaction.update(paths[1], {"name": name, "is_connected": True})

        self.store.run_atomic(paths, validate, write)
        logger.info(f"Player {actor_id} {'rejoined' if outcome['rejoined'] else 'joined'} room {room_id}")
        return {"room_id": room_id, "code": clean, "rejoined": outcome["rejoined"]}

    def set_player_connected(self, room_id: str, actor_id: str, connected: bool) -> bool:
        """
        Flip a player's connectivity flag. Players are never removed.

        Returns:
            True if the flag changed, False if the player doesn't exist or
            already had that value
        """
        path = player_path(room_id, actor_id)

        def validate(snapshot):
            player = snapshot[path]
            return player is not None and player.get("is_connected") != connected

        def write(snapshot, transaction):
            transaction.update(path, {"is_connected": connected})

        changed = self.store.run_atomic([path], validate, write)
        if changed:
            logger.info(f"Player {actor_id} in room {room_id} is now {'connected' if connected else 'disconnected'}")
        return changed

    def get_room(self, room_id: str) -> Dict:
        """
        Get a room document.

        Raises:
            NotFoundError: If the room doesn't exist
        """
        room = self.store.get(room_path(room_id))
        if room is None:
            raise NotFoundError(ErrorCode.ROOM_NOT_FOUND, f"Room {room_id} not found", {"room_id": room_id})
        return room

    def get_players(self, room_id: str) -> List[Dict]:
        """
        Get all players of a room in join order.

        Returns:
            List of player dicts including their uid
        """
        room = self.get_room(room_id)
        players = {uid: data for uid, data in self.store.list_collection(players_path(room_id))}
        ordered = [uid for uid in room["player_order"] if uid in players]
        ordered += [uid for uid in players if uid not in room["player_order"]]
        return [dict(players[uid], uid=uid) for uid in ordered]

    def get_player(self, room_id: str, actor_id: str) -> Optional[Dict]:
        player = self.store.get(player_path(room_id, actor_id))
        if player is None:
            return None
        return dict(player, uid=actor_id)
