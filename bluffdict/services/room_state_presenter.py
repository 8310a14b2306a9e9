"""
Room State Presenter - Viewer-safe snapshots for broadcasts.

Clients re-derive everything from full snapshots, so each payload here is
complete for the entity it describes, filtered for the player receiving it:
word candidates go to the reader only, the real definition stays hidden
from the players who have to find it, and bluff authors stay anonymous
until the reveal.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from bluffdict.core.game_modes import REAL_CHOICE_ID, get_mode_rules
from bluffdict.core.game_phases import GamePhase
from bluffdict.services.ledger_service import build_options, option_id

logger = logging.getLogger(__name__)


def _serialize(value: Any) -> Any:
    """Convert datetimes to ISO strings, recursively."""
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: _serialize(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_serialize(v) for v in value]
    return value


def _has_text(submission: Dict) -> bool:
    return bool((submission.get("text") or "").strip())


class RoomStatePresenter:
    """Centralized service for transforming store documents into client payloads."""

    def create_room_payload(self, room: Dict[str, Any]) -> Dict[str, Any]:
        """Room document as seen by every player."""
        return _serialize(room)

    def create_player_list(self, players: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """Roster in join order."""
        return [
            {
                "uid": player["uid"],
                "name": player["name"],
                "score": player.get("score", 0),
                "is_connected": player.get("is_connected", False),
                "joined_at": _serialize(player.get("joined_at")),
            }
            for player in players
        ]

    def _knows_real_definition(self, room: Dict, round_doc: Dict, viewer_uid: Optional[str]) -> bool:
        if round_doc["phase"] == GamePhase.REVEAL.value:
            return True
        return get_mode_rules(room).has_reader and viewer_uid == round_doc.get("reader_uid")

    def create_round_payload(self, room: Dict[str, Any], round_doc: Dict[str, Any],
                             submissions: List[Dict[str, Any]],
                             viewer_uid: Optional[str]) -> Dict[str, Any]:
        """
        Round snapshot for one viewer.

        Args:
            room: Room document
            round_doc: Round document
            submissions: Current submissions, needed to build voting options
            viewer_uid: Actor receiving the payload

        Returns:
            Dict safe to send to the viewer
        """
        is_reader = viewer_uid is not None and viewer_uid == round_doc.get("reader_uid")
        payload = {
            "round_id": round_doc["round_id"],
            "round_index": round_doc["round_index"],
            "reader_uid": round_doc.get("reader_uid"),
            "lang": round_doc["lang"],
            "phase": round_doc["phase"],
            "pool_reset": round_doc.get("pool_reset", False),
            "word_id": round_doc.get("word_id"),
            "word": round_doc.get("word"),
            "real_definition": None,
            "word_candidates": (round_doc.get("word_candidates") or []) if is_reader else [],
            "options": [],
            "real_choice_id": None,
            "created_at": _serialize(round_doc.get("created_at")),
        }

        if self._knows_real_definition(room, round_doc, viewer_uid):
            payload["real_definition"] = round_doc.get("real_definition")

        if round_doc.get("options"):
            payload["options"] = [
                dict(option, is_real=option["choice_id"] == round_doc.get("real_choice_id"))
                for option in round_doc["options"]
            ]
            payload["real_choice_id"] = round_doc.get("real_choice_id")
        elif round_doc["phase"] == GamePhase.VOTING.value:
            payload["options"] = self.create_voting_options(room, round_doc, submissions, viewer_uid)

        return payload

    def create_voting_options(self, room: Dict[str, Any], round_doc: Dict[str, Any],
                              submissions: List[Dict[str, Any]],
                              viewer_uid: Optional[str]) -> List[Dict[str, Any]]:
        """
        Options offered while voting is open.

        Options carry only an opaque option id, never the choice id, so the
        real definition can't be told apart. Every client gets the same
        order, sorted by option id. A player's own bluff is left out. The
        classic reader sees every option and which one is real.
        """
        rules = get_mode_rules(room)
        reader_uid = round_doc.get("reader_uid") if rules.has_reader else None
        options = [
            dict(option, option_id=option_id(round_doc, option["choice_id"]))
            for option in build_options(round_doc.get("real_definition"), submissions, reader_uid)
        ]
        options.sort(key=lambda o: o["option_id"])

        is_reader = reader_uid is not None and viewer_uid == reader_uid
        result = []
        for option in options:
            if option["author_uid"] is not None and option["author_uid"] == viewer_uid:
                continue
            entry = {"option_id": option["option_id"], "text": option["text"]}
            if is_reader:
                entry["is_real"] = option["choice_id"] == REAL_CHOICE_ID
            result.append(entry)
        return result

    def create_submissions_payload(self, room: Dict[str, Any], round_doc: Dict[str, Any],
                                   submissions: List[Dict[str, Any]],
                                   viewer_uid: Optional[str]) -> Dict[str, Any]:
        """
        Submission set for one viewer: who has submitted, the viewer's own
        text, and every text once the reader reviews or the round is revealed.
        """
        counted = [s for s in submissions if _has_text(s)]
        own = next((s for s in submissions if s["uid"] == viewer_uid), None)
        is_reader = viewer_uid is not None and viewer_uid == round_doc.get("reader_uid")
        phase = round_doc["phase"]

        payload = {
            "round_id": round_doc["round_id"],
            "submitted_count": len(counted),
            "submitted_uids": [s["uid"] for s in counted],
            "own_text": own.get("text") if own else None,
            "entries": [],
        }

        if phase == GamePhase.REVEAL.value:
            payload["entries"] = [
                {"uid": s["uid"], "text": s["text"], "submitted_at": _serialize(s.get("submitted_at"))}
                for s in counted
            ]
        elif is_reader and get_mode_rules(room).allows_review and phase in (
                GamePhase.REVIEW.value, GamePhase.VOTING.value):
            payload["entries"] = [{"text": s["text"]} for s in counted]

        return payload

    def create_votes_payload(self, round_doc: Dict[str, Any], votes: List[Dict[str, Any]],
                             viewer_uid: Optional[str]) -> Dict[str, Any]:
        """Vote set for one viewer; individual choices only after reveal."""
        own = next((v for v in votes if v["uid"] == viewer_uid), None)
        own_option = option_id(round_doc, own["choice_id"]) if own else None
        payload = {
            "round_id": round_doc["round_id"],
            "vote_count": len(votes),
            "voter_uids": [v["uid"] for v in votes],
            "own_option_id": own_option,
            "entries": [],
        }
        if round_doc["phase"] == GamePhase.REVEAL.value:
            payload["entries"] = [
                {"uid": v["uid"], "choice_id": v["choice_id"], "option_id": option_id(round_doc, v["choice_id"]),
                 "voted_at": _serialize(v.get("voted_at"))}
                for v in votes
            ]
        return payload

    def create_room_state_for_player(self, room: Dict[str, Any], players: List[Dict[str, Any]],
                                     round_doc: Optional[Dict[str, Any]],
                                     submissions: List[Dict[str, Any]],
                                     votes: List[Dict[str, Any]],
                                     viewer_uid: Optional[str]) -> Dict[str, Any]:
        """Everything a client needs after joining or reconnecting."""
        state = {
            "room": self.create_room_payload(room),
            "players": self.create_player_list(players),
            "round": None,
            "submissions": None,
            "votes": None,
        }
        if round_doc is not None:
            state["round"] = self.create_round_payload(room, round_doc, submissions, viewer_uid)
            state["submissions"] = self.create_submissions_payload(room, round_doc, submissions, viewer_uid)
            state["votes"] = self.create_votes_payload(round_doc, votes, viewer_uid)
        return state
