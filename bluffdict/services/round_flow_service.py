"""
Round Flow Service for Bluffdict

Drives the room and round phase machine:

    LOBBY -> WORD_SELECT -> WRITING -> REVIEW -> VOTING -> REVEAL -> ... -> FINISHED

Several clients may race to trigger the same transition. Every transition
runs as one store transaction whose phase guard is evaluated against the
snapshot it commits on; a caller that finds the phase already moved on gets
a silent no-op (False) instead of an error.
"""

import logging
from typing import Dict, Optional

from bluffdict.config.game_settings import GameSettings, get_game_settings
from bluffdict.core.errors import (
    ErrorCode, InvalidStateError, NotFoundError, UnauthorizedError, ValidationError
)
from bluffdict.core.game_modes import get_mode_rules
from bluffdict.core.game_phases import GamePhase, ROUND_CREATION_PHASES
from bluffdict.core.random_source import RandomSource
from bluffdict.services.scoring_service import ScoringService
from bluffdict.services.word_pool_service import WordPoolService, choose_language
from bluffdict.store import DocumentStore, server_timestamp
from bluffdict.store.paths import room_path, round_id_for, round_path

logger = logging.getLogger(__name__)

OPTION_SALT_LENGTH = 16


class RoundFlowService:
    """Manages phase transitions of rooms and rounds."""

    def __init__(self, store: DocumentStore, word_pool: WordPoolService, scoring: ScoringService,
                 game_settings: Optional[GameSettings] = None,
                 random_source: Optional[RandomSource] = None):
        self.store = store
        self.word_pool = word_pool
        self.scoring = scoring
        self.game_settings = game_settings or get_game_settings()
        self.random_source = random_source or word_pool.random_source

    @staticmethod
    def _require(room: Optional[Dict], round_doc: Optional[Dict], room_id: str, round_id: str):
        if room is None:
            raise NotFoundError(ErrorCode.ROOM_NOT_FOUND, f"Room {room_id} not found", {"room_id": room_id})
        if round_doc is None:
            raise NotFoundError(ErrorCode.ROUND_NOT_FOUND, f"Round {round_id} not found", {"round_id": round_id})

    def _check_player_count(self, room: Dict):
        minimum = self.game_settings.min_players_required
        if len(room["player_order"]) < minimum:
            raise ValidationError(
                ErrorCode.INSUFFICIENT_PLAYERS,
                f"Need at least {minimum} players",
                {"min_players": minimum, "players": len(room["player_order"])}
            )

    def start_game(self, room_id: str, actor_id: str) -> bool:
        """
        Start the game from the lobby and create the first round.

        The start guard and the round creation are two transactions; the
        round creation guard keeps a duplicate start from making two rounds.

        Returns:
            True if this call created the first round

        Raises:
            NotFoundError: If the room doesn't exist
            UnauthorizedError: If the actor isn't the host
            ValidationError: If fewer than the minimum players joined
        """
        path = room_path(room_id)

        def validate(snapshot):
            room = snapshot[path]
            if room is None:
                raise NotFoundError(ErrorCode.ROOM_NOT_FOUND, f"Room {room_id} not found", {"room_id": room_id})
            if room["host_uid"] != actor_id:
                raise UnauthorizedError(ErrorCode.NOT_AUTHORIZED, "Only the host can start the game")
            if room["status"] != GamePhase.LOBBY.value:
                return False
            self._check_player_count(room)
            return True

        def write(snapshot, transaction):
            transaction.update(path, {"last_updated_at": server_timestamp()})

        if not self.store.run_atomic([path], validate, write):
            logger.warning(f"Start of room {room_id} skipped, game already started")
            return False

        logger.info(f"Host {actor_id} started room {room_id}")
        return self.create_next_round(room_id)

    def create_next_round(self, room_id: str) -> bool:
        """
        Create the room's next round.

        Classic rounds with reader choice open in WORD_SELECT with candidates
        for the reader; every other configuration commits the first drawn
        candidate and opens in WRITING.

        Returns:
            True if a round was created, False if the room isn't between
            rounds (someone else already advanced it) or the game is over
        """
        path = room_path(room_id)
        created = {}

        def body(transaction):
            room = transaction.get(path)
            if room is None:
                raise NotFoundError(ErrorCode.ROOM_NOT_FOUND, f"Room {room_id} not found", {"room_id": room_id})
            if room["status"] not in ROUND_CREATION_PHASES or room.get("game_over"):
                return False
            self._check_player_count(room)

            rules = get_mode_rules(room)
            player_order = room["player_order"]
            round_index = room.get("round_index", 0)
            reader_index = room.get("reader_index", 0)
            reader_uid = player_order[reader_index % len(player_order)] if rules.has_reader else None
            lang = choose_language(room.get("lang_mode", "both"), round_index)
            draw = self.word_pool.draw_candidates(room.get("used_word_ids", []))

            round_id = round_id_for(round_index + 1)
            now = server_timestamp()
            round_doc = {
                "round_id": round_id,
                "room_id": room_id,
                "round_index": round_index + 1,
                "reader_uid": reader_uid,
                "word_id": None,
                "word": None,
                "real_definition": None,
                "lang": lang,
                "phase": GamePhase.WORD_SELECT.value,
                "word_candidates": draw.candidate_views(lang),
                "pool_reset": draw.pool_reset,
                "options": None,
                "real_choice_id": None,
                # Server-side secret behind the option ids clients vote with
                "option_salt": self.random_source.token(OPTION_SALT_LENGTH),
                "created_at": now,
            }
            room_update = {
                "status": GamePhase.WORD_SELECT.value,
                "round_index": round_index + 1,
                "reader_index": (reader_index + 1) % len(player_order),
                "current_round_id": round_id,
                "last_updated_at": now,
            }

            if not (rules.has_reader and room.get("reader_choice_enabled", True)):
                # The first shuffled candidate doubles as the committed word
                chosen = draw.first
                text = self.word_pool.project(chosen, lang)
                round_doc.update({
                    "word_id": chosen.id,
                    "word": text.word,
                    "real_definition": text.definition,
                    "phase": GamePhase.WRITING.value,
                    "word_candidates": [],
                    "chosen_at": now,
                })
                room_update.update({
                    "status": GamePhase.WRITING.value,
                    "used_word_ids": self.word_pool.next_used_word_ids(
                        room.get("used_word_ids", []), chosen.id, draw.pool_reset
                    ),
                })

            transaction.set(round_path(room_id, round_id), round_doc)
            transaction.update(path, room_update)
            created["round_id"] = round_id
            created["phase"] = round_doc["phase"]
            return True

        if not self.store.run_transaction(body):
            logger.warning(f"Round creation in room {room_id} skipped, room is not between rounds")
            return False

        logger.info(f"Created round {created['round_id']} in room {room_id} ({created['phase']})")
        return True

    def choose_word_for_round(self, room_id: str, round_id: str, actor_id: str, word_id: str) -> bool:
        """
        Commit the reader's chosen word.

        Only the chosen word is marked as used; the other candidates remain
        in the pool.

        Raises:
            UnauthorizedError: If the actor isn't the round's reader
            ValidationError: If the word wasn't one of the offered candidates
        """
        r_path, rd_path = room_path(room_id), round_path(room_id, round_id)

        def validate(snapshot):
            room, round_doc = snapshot[r_path], snapshot[rd_path]
            self._require(room, round_doc, room_id, round_id)
            if round_doc.get("reader_uid") != actor_id:
                raise UnauthorizedError(ErrorCode.NOT_AUTHORIZED, "Only the reader can choose the word")
            if round_doc["phase"] != GamePhase.WORD_SELECT.value:
                return False
            if not any(c["id"] == word_id for c in round_doc.get("word_candidates") or []):
                raise ValidationError(ErrorCode.INVALID_WORD_CHOICE, "Invalid word choice", {"word_id": word_id})
            return True

        def write(snapshot, transaction):
            room, round_doc = snapshot[r_path], snapshot[rd_path]
            entry = self.word_pool.get_word(word_id)
            text = self.word_pool.project(entry, round_doc["lang"])
            now = server_timestamp()
            transaction.update(rd_path, {
                "word_id": word_id,
                "word": text.word,
                "real_definition": text.definition,
                "phase": GamePhase.WRITING.value,
                "word_candidates": [],
                "chosen_at": now,
            })
            transaction.update(r_path, {
                "status": GamePhase.WRITING.value,
                "used_word_ids": self.word_pool.next_used_word_ids(
                    room.get("used_word_ids", []), word_id, round_doc.get("pool_reset", False)
                ),
                "last_updated_at": now,
            })

        chosen = self.store.run_atomic([r_path, rd_path], validate, write)
        if chosen:
            logger.info(f"Reader {actor_id} chose word {word_id} for {room_id}/{round_id}")
        else:
            logger.warning(f"Word choice for {room_id}/{round_id} skipped, word already chosen")
        return chosen

    def open_reader_review(self, room_id: str, round_id: str, actor_id: str) -> bool:
        """
        Let the classic reader look at the bluffs before opening voting.

        Raises:
            InvalidStateError: If the room isn't a classic game
            UnauthorizedError: If the actor isn't the reader
        """
        r_path, rd_path = room_path(room_id), round_path(room_id, round_id)

        def validate(snapshot):
            room, round_doc = snapshot[r_path], snapshot[rd_path]
            self._require(room, round_doc, room_id, round_id)
            if not get_mode_rules(room).allows_review:
                raise InvalidStateError(ErrorCode.WRONG_MODE, "Review is only available in classic mode")
            if round_doc.get("reader_uid") != actor_id:
                raise UnauthorizedError(ErrorCode.NOT_AUTHORIZED, "Only the reader can review")
            return round_doc["phase"] == GamePhase.WRITING.value

        def write(snapshot, transaction):
            now = server_timestamp()
            transaction.update(rd_path, {"phase": GamePhase.REVIEW.value, "review_started_at": now})
            transaction.update(r_path, {"status": GamePhase.REVIEW.value, "last_updated_at": now})

        return self._log_transition(
            self.store.run_atomic([r_path, rd_path], validate, write), room_id, round_id, GamePhase.REVIEW
        )

    def open_voting(self, room_id: str, round_id: str, actor_id: str) -> bool:
        """
        Open voting. The classic reader may skip the review step.

        Raises:
            UnauthorizedError: If the actor doesn't control the round
        """
        r_path, rd_path = room_path(room_id), round_path(room_id, round_id)

        def validate(snapshot):
            room, round_doc = snapshot[r_path], snapshot[rd_path]
            self._require(room, round_doc, room_id, round_id)
            rules = get_mode_rules(room)
            if not rules.can_control(room, round_doc, actor_id):
                raise UnauthorizedError(
                    ErrorCode.NOT_AUTHORIZED, f"Only the {rules.controller_label} can open voting"
                )
            return round_doc["phase"] in rules.voting_sources

        def write(snapshot, transaction):
            now = server_timestamp()
            transaction.update(rd_path, {"phase": GamePhase.VOTING.value, "voting_opened_at": now})
            transaction.update(r_path, {"status": GamePhase.VOTING.value, "last_updated_at": now})

        return self._log_transition(
            self.store.run_atomic([r_path, rd_path], validate, write), room_id, round_id, GamePhase.VOTING
        )

    def reveal_and_score(self, room_id: str, round_id: str, actor_id: str) -> bool:
        """Reveal the round and apply scores; see ScoringService."""
        return self._log_transition(
            self.scoring.reveal_and_score(room_id, round_id, actor_id), room_id, round_id, GamePhase.REVEAL
        )

    def finish_game(self, room_id: str, actor_id: str) -> bool:
        """
        End the game for everybody.

        Returns:
            True if this call finished the room, False if it already was

        Raises:
            UnauthorizedError: If the actor may not end the game
        """
        def body(transaction):
            room = transaction.get(room_path(room_id))
            if room is None:
                raise NotFoundError(ErrorCode.ROOM_NOT_FOUND, f"Room {room_id} not found", {"room_id": room_id})
            round_doc = None
            if room.get("current_round_id"):
                round_doc = transaction.get(round_path(room_id, room["current_round_id"]))
            if not get_mode_rules(room).can_advance(room, round_doc, actor_id):
                raise UnauthorizedError(ErrorCode.NOT_AUTHORIZED, "Only the game controller can finish the game")
            if room["status"] == GamePhase.FINISHED.value:
                return False
            transaction.update(room_path(room_id), {
                "status": GamePhase.FINISHED.value,
                "last_updated_at": server_timestamp(),
            })
            return True

        finished = self.store.run_transaction(body)
        if finished:
            logger.info(f"Room {room_id} finished by {actor_id}")
        return finished

    def advance_or_finish(self, room_id: str, actor_id: str) -> Dict:
        """
        Move on after a reveal: create the next round unless the game is over.

        Returns:
            Dict with "finished" (game over, no round created) and
            "advanced" (this call created the round)

        Raises:
            UnauthorizedError: If the actor may not advance the game
        """
        room = self.store.get(room_path(room_id))
        if room is None:
            raise NotFoundError(ErrorCode.ROOM_NOT_FOUND, f"Room {room_id} not found", {"room_id": room_id})
        if room.get("game_over"):
            return {"finished": True, "advanced": False}

        round_doc = None
        if room.get("current_round_id"):
            round_doc = self.store.get(round_path(room_id, room["current_round_id"]))
        rules = get_mode_rules(room)
        if not rules.can_advance(room, round_doc, actor_id):
            raise UnauthorizedError(
                ErrorCode.NOT_AUTHORIZED, f"Only the {rules.controller_label} can advance to the next round"
            )

        return {"finished": False, "advanced": self.create_next_round(room_id)}

    def get_round(self, room_id: str, round_id: str) -> Dict:
        round_doc = self.store.get(round_path(room_id, round_id))
        if round_doc is None:
            raise NotFoundError(ErrorCode.ROUND_NOT_FOUND, f"Round {round_id} not found", {"round_id": round_id})
        return round_doc

    def _log_transition(self, applied: bool, room_id: str, round_id: str, phase: GamePhase) -> bool:
        if applied:
            logger.info(f"Round {room_id}/{round_id} moved to {phase.value}")
        else:
            logger.warning(f"Transition of {room_id}/{round_id} to {phase.value} skipped, phase already changed")
        return applied
