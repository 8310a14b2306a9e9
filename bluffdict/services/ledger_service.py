"""
Ledger Service for Bluffdict

Records bluffs and votes. Each player owns exactly one submission and one vote
document per round, so writes from different players never conflict and a
player overwriting their own entry before reveal is last-write-wins.

Clients never see choice ids before the reveal. Every option is sent with an
opaque option id, and votes come back with that id.
"""

import hashlib
import logging
from typing import Dict, List, Optional, Set

from bluffdict.core.errors import ErrorCode, InvalidStateError, NotFoundError, ValidationError
from bluffdict.core.game_modes import REAL_CHOICE_ID, get_mode_rules
from bluffdict.core.game_phases import GamePhase, SUBMISSION_PHASES
from bluffdict.services.validation_service import ValidationService
from bluffdict.store import DocumentStore, server_timestamp
from bluffdict.store.paths import (
    player_path, room_path, round_path, submission_path, submissions_path, vote_path, votes_path
)

logger = logging.getLogger(__name__)

OPTION_ID_LENGTH = 12


def build_options(real_definition: str, submissions: List[Dict], reader_uid: Optional[str]) -> List[Dict]:
    """
    Options of a round before shuffling: the real definition first, then one
    per non-empty bluff. A classic reader's submission is ignored.
    """
    options = [{"choice_id": REAL_CHOICE_ID, "author_uid": None, "text": real_definition}]
    for submission in submissions:
        text = (submission.get("text") or "").strip()
        if not text or (reader_uid and submission["uid"] == reader_uid):
            continue
        options.append({"choice_id": submission["uid"], "author_uid": submission["uid"], "text": text})
    return options


def option_id(round_doc: Dict, choice_id: str) -> str:
    """
    Opaque id of an option, the same for every viewer of the round.

    Salted with the round's secret so a client can't derive the id of the
    real definition itself.
    """
    seed = f"{round_doc.get('option_salt', '')}:{round_doc['round_id']}:{choice_id}"
    digest = hashlib.sha256(seed.encode("utf-8")).hexdigest()
    return digest[:OPTION_ID_LENGTH]


class LedgerService:
    """Per-player upserts of submissions and votes."""

    def __init__(self, store: DocumentStore, validation_service: Optional[ValidationService] = None):
        self.store = store
        self.validation = validation_service or ValidationService()

    def _check_round(self, snapshot: Dict, room_id: str, round_id: str, actor_id: str):
        room = snapshot[room_path(room_id)]
        round_doc = snapshot[round_path(room_id, round_id)]
        if room is None:
            raise NotFoundError(ErrorCode.ROOM_NOT_FOUND, f"Room {room_id} not found", {"room_id": room_id})
        if round_doc is None:
            raise NotFoundError(ErrorCode.ROUND_NOT_FOUND, f"Round {round_id} not found", {"round_id": round_id})
        if snapshot[player_path(room_id, actor_id)] is None:
            raise ValidationError(ErrorCode.NOT_IN_ROOM, "You are not a player in this room")
        return room, round_doc

    def submit_definition(self, room_id: str, round_id: str, actor_id: str, text: str) -> Dict:
        """
        Store or replace a player's bluff for a round.

        The trimmed text is stored even when empty; empty text simply never
        counts as a submitted bluff.

        Returns:
            Dict with the stored text and whether it counts as submitted

        Raises:
            ValidationError: If the classic reader submits or the text is too long
            InvalidStateError: If the round isn't accepting bluffs
        """
        text = self.validation.validate_definition_text(text)
        paths = [room_path(room_id), round_path(room_id, round_id), player_path(room_id, actor_id)]

        def validate(snapshot):
            room, round_doc = self._check_round(snapshot, room_id, round_id, actor_id)
            rules = get_mode_rules(room)
            if rules.has_reader and round_doc.get("reader_uid") == actor_id:
                raise ValidationError(ErrorCode.READER_CANNOT_SUBMIT, "The reader doesn't write a definition this round")
            if round_doc["phase"] not in SUBMISSION_PHASES:
                raise InvalidStateError(
                    ErrorCode.WRONG_PHASE,
                    f"Definitions can't be submitted during {round_doc['phase']}",
                    {"phase": round_doc["phase"]}
                )
            return True

        def write(snapshot, transaction):
            transaction.set(submission_path(room_id, round_id, actor_id), {
                "text": text,
                "submitted_at": server_timestamp(),
            })

        self.store.run_atomic(paths, validate, write)
        logger.info(f"Player {actor_id} submitted a definition for {room_id}/{round_id}")
        return {"text": text, "counted": bool(text)}

    @staticmethod
    def offered_choices(room: Dict, round_doc: Dict, submissions: List[Dict]) -> Set[str]:
        """Choice ids currently on offer: the real definition and every counted bluff."""
        rules = get_mode_rules(room)
        reader_uid = round_doc.get("reader_uid") if rules.has_reader else None
        return {o["choice_id"] for o in build_options(round_doc.get("real_definition"), submissions, reader_uid)}

    def resolve_option(self, room_id: str, round_id: str, option: str) -> str:
        """
        Map the opaque option id a client voted with back to its choice id.

        Raises:
            NotFoundError: If the room or round doesn't exist
            ValidationError: If no current option of the round has this id
        """
        option = self.validation.validate_choice_id(option)
        room = self.store.get(room_path(room_id))
        round_doc = self.store.get(round_path(room_id, round_id))
        if room is None or round_doc is None:
            raise NotFoundError(ErrorCode.ROUND_NOT_FOUND, f"Round {round_id} not found", {"round_id": round_id})

        for choice_id in self.offered_choices(room, round_doc, self.list_submissions(room_id, round_id)):
            if option_id(round_doc, choice_id) == option:
                return choice_id
        raise ValidationError(ErrorCode.INVALID_CHOICE, "That definition isn't one of the options")

    def cast_vote(self, room_id: str, round_id: str, actor_id: str, choice_id: str) -> Dict:
        """
        Store or replace a player's vote.

        Args:
            choice_id: "REAL" or the actor id of the bluff's author; the
                bluff must currently be on offer

        Returns:
            Dict with the choice id and the opaque option id it is shown as

        Raises:
            ValidationError: On a self vote, a vote by the classic reader,
                or a choice that isn't offered
            InvalidStateError: If voting isn't open
        """
        choice_id = self.validation.validate_choice_id(choice_id)
        if choice_id == actor_id:
            raise ValidationError(ErrorCode.SELF_VOTE, "You can't vote for your own definition")

        submissions = self.list_submissions(room_id, round_id)
        paths = [room_path(room_id), round_path(room_id, round_id), player_path(room_id, actor_id)]
        voted = {}

        def validate(snapshot):
            room, round_doc = self._check_round(snapshot, room_id, round_id, actor_id)
            voted["round"] = round_doc
            rules = get_mode_rules(room)
            if rules.has_reader and round_doc.get("reader_uid") == actor_id:
                raise ValidationError(ErrorCode.READER_CANNOT_VOTE, "The reader can't vote this round")
            if round_doc["phase"] != GamePhase.VOTING.value:
                raise InvalidStateError(
                    ErrorCode.WRONG_PHASE,
                    f"Voting is not open during {round_doc['phase']}",
                    {"phase": round_doc["phase"]}
                )
            if choice_id not in self.offered_choices(room, round_doc, submissions):
                raise ValidationError(ErrorCode.INVALID_CHOICE, "That definition isn't one of the options")
            return True

        def write(snapshot, transaction):
            transaction.set(vote_path(room_id, round_id, actor_id), {
                "choice_id": choice_id,
                "voted_at": server_timestamp(),
            })

        self.store.run_atomic(paths, validate, write)
        logger.info(f"Player {actor_id} voted in {room_id}/{round_id}")
        return {"choice_id": choice_id, "option_id": option_id(voted["round"], choice_id)}

    def cast_vote_for_option(self, room_id: str, round_id: str, actor_id: str, option: str) -> Dict:
        """Vote with the opaque option id a client was shown."""
        return self.cast_vote(room_id, round_id, actor_id, self.resolve_option(room_id, round_id, option))

    def list_submissions(self, room_id: str, round_id: str) -> List[Dict]:
        """All submissions of a round, empty ones included, with their author uid."""
        return [dict(data, uid=uid) for uid, data in self.store.list_collection(submissions_path(room_id, round_id))]

    def list_votes(self, room_id: str, round_id: str) -> List[Dict]:
        return [dict(data, uid=uid) for uid, data in self.store.list_collection(votes_path(room_id, round_id))]

    def submitted_count(self, room_id: str, round_id: str) -> int:
        """Number of non-empty bluffs, used for UI gating."""
        return sum(1 for s in self.list_submissions(room_id, round_id) if (s.get("text") or "").strip())

    def vote_count(self, room_id: str, round_id: str) -> int:
        return len(self.list_votes(room_id, round_id))
