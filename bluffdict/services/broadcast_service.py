"""
Broadcast Service - Centralized Socket.IO message broadcasting.

The service listens to store commits and pushes full snapshots of whatever
changed to the Socket.IO room of the affected game room:
- room and player documents go to the whole room
- round, submission and vote documents are filtered per viewer
"""

import logging
from typing import Any, Dict, Iterable, List, Optional, Set

from bluffdict.core.errors import NotFoundError
from bluffdict.core.game_phases import GamePhase
from bluffdict.services.room_state_presenter import RoomStatePresenter
from bluffdict.store.paths import parse_path

logger = logging.getLogger(__name__)

ROUND_KINDS = {"round", "submission", "vote"}


class BroadcastService:
    """Centralized service for all Socket.IO broadcasting operations."""

    def __init__(self, socketio, game_manager, session_service):
        """Initialize the broadcast service.

        Args:
            socketio: Flask-SocketIO instance for emitting messages
            game_manager: Facade used to read the current documents
            session_service: Maps sockets to actors for per-viewer payloads
        """
        self.socketio = socketio
        self.game_manager = game_manager
        self.session_service = session_service
        self.room_state_presenter = RoomStatePresenter()

    def attach(self, store) -> None:
        """Start broadcasting the commits of a store."""
        store.add_listener(self.handle_store_change)

    # Core emission methods

    def emit_to_room(self, event: str, data: Dict[str, Any], room_id: str):
        """Emit an event to all players in a room."""
        try:
            self.socketio.emit(event, data, to=room_id)
            logger.debug(f'Emitted {event} to room {room_id}')
        except Exception as e:
            logger.error(f'Error emitting {event} to room {room_id}: {e}')

    def emit_to_player(self, event: str, data: Dict[str, Any], socket_id: str):
        """Emit an event to a specific socket."""
        try:
            self.socketio.emit(event, data, to=socket_id)
            logger.debug(f'Emitted {event} to player {socket_id}')
        except Exception as e:
            logger.error(f'Error emitting {event} to player {socket_id}: {e}')

    # Store change handling

    def handle_store_change(self, changed_paths: Iterable[str]) -> None:
        """Group the changed paths by room and broadcast each room once."""
        changes: Dict[str, Set[str]] = {}
        for path in changed_paths:
            info = parse_path(path)
            if info["room_id"] is None or info["kind"] == "unknown":
                continue
            changes.setdefault(info["room_id"], set()).add(info["kind"])

        for room_id, kinds in changes.items():
            self.broadcast_changes(room_id, kinds)

    def broadcast_changes(self, room_id: str, kinds: Set[str]) -> None:
        """Emit the snapshots matching the kinds of documents that changed."""
        try:
            room = self.game_manager.get_room(room_id)
        except NotFoundError:
            logger.debug(f'Room {room_id} vanished before broadcast')
            return

        if "room" in kinds:
            self.emit_to_room('room_snapshot', self.room_state_presenter.create_room_payload(room), room_id)

        if "player" in kinds:
            players = self.game_manager.get_players(room_id)
            self.emit_to_room('players_snapshot', self.room_state_presenter.create_player_list(players), room_id)

        if kinds & ROUND_KINDS and room.get("current_round_id"):
            self.broadcast_round_documents(room, kinds)

    def broadcast_round_documents(self, room: Dict[str, Any], kinds: Set[str]) -> None:
        """
        Send the current round's snapshots to every socket of the room.

        Voting options are built from the submissions, so a submission
        arriving during voting also refreshes the round snapshot.
        """
        room_id, round_id = room["room_id"], room["current_round_id"]
        round_doc = self.game_manager.get_round(room_id, round_id)
        submissions = self.game_manager.list_submissions(room_id, round_id)
        votes = self.game_manager.list_votes(room_id, round_id)

        send_round = "round" in kinds or (
            "submission" in kinds and round_doc["phase"] == GamePhase.VOTING.value
        )
        send_submissions = "round" in kinds or "submission" in kinds
        send_votes = "round" in kinds or "vote" in kinds

        presenter = self.room_state_presenter
        for socket_id, session in self.session_service.get_sessions_by_room(room_id).items():
            viewer = session['actor_id']
            if send_round:
                self.emit_to_player(
                    'round_snapshot',
                    presenter.create_round_payload(room, round_doc, submissions, viewer),
                    socket_id
                )
            if send_submissions:
                self.emit_to_player(
                    'submissions_snapshot',
                    presenter.create_submissions_payload(room, round_doc, submissions, viewer),
                    socket_id
                )
            if send_votes:
                self.emit_to_player(
                    'votes_snapshot',
                    presenter.create_votes_payload(round_doc, votes, viewer),
                    socket_id
                )

    def send_room_state_to_player(self, room_id: str, socket_id: str, actor_id: str):
        """Send complete room state to a specific player (for initial join/reconnect)."""
        room = self.game_manager.get_room(room_id)
        players = self.game_manager.get_players(room_id)
        round_doc: Optional[Dict[str, Any]] = None
        submissions: List[Dict[str, Any]] = []
        votes: List[Dict[str, Any]] = []

        if room.get("current_round_id"):
            round_id = room["current_round_id"]
            round_doc = self.game_manager.get_round(room_id, round_id)
            submissions = self.game_manager.list_submissions(room_id, round_id)
            votes = self.game_manager.list_votes(room_id, round_id)

        state = self.room_state_presenter.create_room_state_for_player(
            room, players, round_doc, submissions, votes, actor_id
        )
        self.emit_to_player('room_state', state, socket_id)
        logger.debug(f'Sent room state to player {socket_id} in room {room_id}')
