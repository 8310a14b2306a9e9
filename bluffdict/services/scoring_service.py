"""
Scoring Service for Bluffdict

Resolves a finished voting phase into score increments, fixes the order of
the options shown at reveal, detects the end of the game and builds the
round recap.
"""

import logging
from typing import Dict, List, Optional, Tuple

from bluffdict.core.errors import ErrorCode, NotFoundError, UnauthorizedError
from bluffdict.core.game_modes import REAL_CHOICE_ID, ModeRules, get_mode_rules
from bluffdict.core.game_phases import GamePhase
from bluffdict.core.random_source import RandomSource
from bluffdict.services.ledger_service import LedgerService, build_options, option_id
from bluffdict.store import DocumentStore, server_timestamp
from bluffdict.store.paths import player_path, players_path, room_path, round_path

logger = logging.getLogger(__name__)

REAL_VOTE_POINTS = 2
BLUFF_VOTE_POINTS = 1
READER_BONUS_POINTS = 1


def calculate_round_scores(votes: List[Dict], bluff_authors: set, reader_uid: Optional[str],
                           reader_bonus: bool) -> Tuple[Dict[str, int], int]:
    """
    Calculate score deltas for a round.

    Args:
        votes: Vote dicts with the voter uid and choice_id
        bluff_authors: Authors whose bluff was offered as an option
        reader_uid: The round's reader, if any
        reader_bonus: Whether the reader earns a point per fooled voter

    Returns:
        Tuple of (points per player, number of votes for the real definition)
    """
    deltas: Dict[str, int] = {}
    real_votes = 0
    bluff_votes = 0

    for vote in votes:
        choice = vote.get("choice_id")
        if choice == REAL_CHOICE_ID:
            real_votes += 1
            deltas[vote["uid"]] = deltas.get(vote["uid"], 0) + REAL_VOTE_POINTS
        elif choice in bluff_authors and choice != vote["uid"]:
            bluff_votes += 1
            deltas[choice] = deltas.get(choice, 0) + BLUFF_VOTE_POINTS

    # Votes for a bluff that is no longer offered fooled nobody
    if reader_bonus and reader_uid:
        bonus = bluff_votes * READER_BONUS_POINTS
        if bonus > 0:
            deltas[reader_uid] = deltas.get(reader_uid, 0) + bonus

    return deltas, real_votes


class ScoringService:
    """Manages reveal, scoring and game-over detection."""

    def __init__(self, store: DocumentStore, ledger: LedgerService, random_source: RandomSource):
        self.store = store
        self.ledger = ledger
        self.random_source = random_source

    def reveal_and_score(self, room_id: str, round_id: str, actor_id: str) -> bool:
        """
        Reveal the real definition and apply the round's scores.

        Submissions and votes are read before the scoring transaction; the
        VOTING -> REVEAL guard inside it makes sure only one caller scores.

        Returns:
            True if this call revealed the round, False if it was already
            revealed (or not yet in voting)

        Raises:
            NotFoundError: If the room or round doesn't exist
            UnauthorizedError: If the actor doesn't control the round
        """
        submissions = self.ledger.list_submissions(room_id, round_id)
        votes = self.ledger.list_votes(room_id, round_id)
        r_path, rd_path = room_path(room_id), round_path(room_id, round_id)

        def validate(snapshot):
            room, round_doc = snapshot[r_path], snapshot[rd_path]
            if room is None or round_doc is None:
                raise NotFoundError(ErrorCode.ROUND_NOT_FOUND, "Missing room or round",
                                    {"room_id": room_id, "round_id": round_id})
            rules = get_mode_rules(room)
            if not rules.can_control(room, round_doc, actor_id):
                raise UnauthorizedError(
                    ErrorCode.NOT_AUTHORIZED,
                    f"Only the {rules.controller_label} can reveal and score"
                )
            if round_doc["phase"] != GamePhase.VOTING.value:
                logger.warning(f"Reveal of {room_id}/{round_id} skipped, round is in {round_doc['phase']}")
                return False
            return True

        def write(snapshot, transaction):
            room, round_doc = snapshot[r_path], snapshot[rd_path]
            rules = get_mode_rules(room)
            reader_uid = round_doc.get("reader_uid") if rules.has_reader else None

            options = [
                dict(option, option_id=option_id(round_doc, option["choice_id"]))
                for option in self.random_source.shuffled(
                    build_options(round_doc["real_definition"], submissions, reader_uid)
                )
            ]
            bluff_authors = {o["author_uid"] for o in options if o["author_uid"]}
            deltas, real_votes = calculate_round_scores(votes, bluff_authors, reader_uid, rules.reader_bonus)

            for uid, points in deltas.items():
                if points > 0 and uid in room["player_order"]:
                    transaction.increment(player_path(room_id, uid), "score", points)

            now = server_timestamp()
            transaction.update(rd_path, {
                "phase": GamePhase.REVEAL.value,
                "options": options,
                "real_choice_id": REAL_CHOICE_ID,
                "scored_at": now,
            })
            transaction.update(r_path, {"status": GamePhase.REVEAL.value, "last_updated_at": now})
            logger.info(
                f"Scored {room_id}/{round_id}: {len(votes)} votes, {real_votes} for the real definition, "
                f"deltas {deltas}"
            )

        revealed = self.store.run_atomic([r_path, rd_path], validate, write)
        if revealed:
            self.check_and_set_game_over(room_id)
        return revealed

    def check_and_set_game_over(self, room_id: str) -> bool:
        """
        Mark the room as over once somebody reached the target score.

        Players are scanned in join order and the first one holding the top
        score is the winner. game_over never goes back to False.

        Returns:
            True if this call ended the game
        """
        def body(transaction):
            room = transaction.get(room_path(room_id))
            if room is None or room.get("game_over"):
                return False

            winner_uid, top = None, -1
            for uid in room["player_order"]:
                player = transaction.get(player_path(room_id, uid))
                if player is None:
                    continue
                score = player.get("score") or 0
                if score > top:
                    top, winner_uid = score, uid

            if top < room["target_score"]:
                return False

            transaction.update(room_path(room_id), {
                "game_over": True,
                "winner_uid": winner_uid,
                "last_updated_at": server_timestamp(),
            })
            return True

        ended = self.store.run_transaction(body)
        if ended:
            logger.info(f"Game over in room {room_id}")
        return ended

    def get_round_results(self, room_id: str, round_id: str) -> Optional[Dict]:
        """
        Recap of a revealed round: votes per option, the best bluff and each
        player's points.

        Returns:
            Dict of results, or None if the round hasn't been revealed
        """
        room = self.store.get(room_path(room_id))
        round_doc = self.store.get(round_path(room_id, round_id))
        if room is None or round_doc is None:
            raise NotFoundError(ErrorCode.ROUND_NOT_FOUND, "Missing room or round",
                                {"room_id": room_id, "round_id": round_id})
        if not round_doc.get("options"):
            return None

        rules = get_mode_rules(room)
        players = {uid: data for uid, data in self.store.list_collection(players_path(room_id))}
        votes = self.ledger.list_votes(room_id, round_id)
        reader_uid = round_doc.get("reader_uid") if rules.has_reader else None
        bluff_authors = {o["author_uid"] for o in round_doc["options"] if o["author_uid"]}
        deltas, real_votes = calculate_round_scores(votes, bluff_authors, reader_uid, rules.reader_bonus)

        def name_of(uid):
            return players.get(uid, {}).get("name")

        options = []
        for index, option in enumerate(round_doc["options"]):
            voters = [v["uid"] for v in votes if v.get("choice_id") == option["choice_id"]]
            options.append({
                "index": index,
                "choice_id": option["choice_id"],
                "option_id": option_id(round_doc, option["choice_id"]),
                "text": option["text"],
                "is_real": option["choice_id"] == round_doc.get("real_choice_id"),
                "author_uid": option["author_uid"],
                "author_name": name_of(option["author_uid"]) if option["author_uid"] else None,
                "votes_received": len(voters),
                "voters": [name_of(uid) for uid in voters],
            })

        best_bluff = None
        for option in options:
            if option["is_real"] or option["votes_received"] == 0:
                continue
            if best_bluff is None or option["votes_received"] > best_bluff["votes_received"]:
                best_bluff = option

        player_results = {}
        for uid in room["player_order"]:
            vote = next((v for v in votes if v["uid"] == uid), None)
            own = next((o for o in options if o["author_uid"] == uid), None)
            player_results[uid] = {
                "uid": uid,
                "name": name_of(uid),
                "is_reader": uid == reader_uid,
                "choice_id": vote["choice_id"] if vote else None,
                "correct_guess": bool(vote and vote["choice_id"] == REAL_CHOICE_ID),
                "bluff_votes": own["votes_received"] if own else 0,
                "round_points": deltas.get(uid, 0),
                "total_score": players.get(uid, {}).get("score", 0),
            }

        return {
            "round_id": round_id,
            "round_index": round_doc.get("round_index"),
            "word": round_doc.get("word"),
            "lang": round_doc.get("lang"),
            "real_definition": round_doc.get("real_definition"),
            "real_choice_id": round_doc.get("real_choice_id"),
            "reader_uid": reader_uid,
            "options": options,
            "best_bluff": best_bluff,
            "player_results": player_results,
            "total_votes": len(votes),
            "real_votes": real_votes,
        }

    def get_leaderboard(self, players: List[Dict]) -> List[Dict]:
        """
        Get the current leaderboard for players.

        Args:
            players: List of player data dicts

        Returns:
            List of player dicts sorted by score (highest first)
        """
        if not players:
            return []

        entries = (
            {"uid": p["uid"], "name": p["name"], "score": p.get("score", 0),
             "is_connected": p.get("is_connected", False)}
            for p in players
        )

        # Sort by score descending, then by name for ties
        leaderboard = sorted(entries, key=lambda p: (-p["score"], p["name"]))

        # Add rank information
        for i, player in enumerate(leaderboard):
            player["rank"] = i + 1

        return leaderboard

    @staticmethod
    def scoring_rules(rules: ModeRules) -> Dict:
        """Scoring rules description for clients."""
        return {
            "real_vote": REAL_VOTE_POINTS,
            "bluff_vote": BLUFF_VOTE_POINTS,
            "reader_bonus": READER_BONUS_POINTS if rules.reader_bonus else 0,
        }
