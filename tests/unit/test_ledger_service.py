"""
Ledger Service Unit Tests
Tests for bluff submissions and votes.
"""

import pytest

from bluffdict.core.errors import ErrorCode, InvalidStateError, NotFoundError, ValidationError
from bluffdict.services.ledger_service import REAL_CHOICE_ID, option_id
from tests.helpers.game_helpers import create_room_with_players, current_round, start_round_in_writing


class TestSubmitDefinition:
    """Writing bluffs"""

    @pytest.fixture(autouse=True)
    def setup_room(self, game_manager):
        self.gm = game_manager
        self.room_id, (self.host, self.ann, self.ben) = create_room_with_players(game_manager)
        start_round_in_writing(game_manager, self.room_id, self.host)

    def test_submission_is_trimmed_and_stored(self):
        result = self.gm.submit_definition(self.room_id, "r1", self.ann, "  A small lizard  ")

        assert result == {"text": "A small lizard", "counted": True}
        submissions = self.gm.list_submissions(self.room_id, "r1")
        assert [(s["uid"], s["text"]) for s in submissions] == [(self.ann, "A small lizard")]

    def test_resubmission_replaces_previous_text(self):
        self.gm.submit_definition(self.room_id, "r1", self.ann, "first")
        self.gm.submit_definition(self.room_id, "r1", self.ann, "second")

        submissions = self.gm.list_submissions(self.room_id, "r1")
        assert len(submissions) == 1
        assert submissions[0]["text"] == "second"

    def test_empty_text_is_stored_but_not_counted(self):
        result = self.gm.submit_definition(self.room_id, "r1", self.ann, "   ")

        assert result == {"text": "", "counted": False}
        assert len(self.gm.list_submissions(self.room_id, "r1")) == 1
        assert self.gm.ledger.submitted_count(self.room_id, "r1") == 0

    def test_reader_cannot_submit(self):
        with pytest.raises(ValidationError) as exc_info:
            self.gm.submit_definition(self.room_id, "r1", self.host, "nice try")

        assert exc_info.value.code == ErrorCode.READER_CANNOT_SUBMIT
        assert self.gm.list_submissions(self.room_id, "r1") == []

    def test_too_long_definition_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            self.gm.submit_definition(self.room_id, "r1", self.ann, "x" * 201)

        assert exc_info.value.code == ErrorCode.DEFINITION_TOO_LONG

    def test_outsider_cannot_submit(self):
        with pytest.raises(ValidationError) as exc_info:
            self.gm.submit_definition(self.room_id, "r1", "stranger", "hello")

        assert exc_info.value.code == ErrorCode.NOT_IN_ROOM

    def test_unknown_round(self):
        with pytest.raises(NotFoundError) as exc_info:
            self.gm.submit_definition(self.room_id, "r7", self.ann, "hello")

        assert exc_info.value.code == ErrorCode.ROUND_NOT_FOUND

    def test_submissions_still_accepted_during_review_and_voting(self):
        self.gm.open_reader_review(self.room_id, "r1", self.host)
        self.gm.submit_definition(self.room_id, "r1", self.ann, "during review")
        self.gm.open_voting(self.room_id, "r1", self.host)
        self.gm.submit_definition(self.room_id, "r1", self.ben, "during voting")

        assert self.gm.ledger.submitted_count(self.room_id, "r1") == 2

    def test_submission_after_reveal_rejected(self):
        self.gm.open_voting(self.room_id, "r1", self.host)
        self.gm.reveal_and_score(self.room_id, "r1", self.host)

        with pytest.raises(InvalidStateError):
            self.gm.submit_definition(self.room_id, "r1", self.ann, "too late")


class TestSubmitBeforeWordChosen:
    """Submissions wait for the word"""

    def test_submission_during_word_select_rejected(self, game_manager):
        room_id, (host, ann, ben) = create_room_with_players(game_manager)
        game_manager.start_game(room_id, host)

        with pytest.raises(InvalidStateError) as exc_info:
            game_manager.submit_definition(room_id, "r1", ann, "early")

        assert exc_info.value.code == ErrorCode.WRONG_PHASE


class TestCastVote:
    """Voting"""

    @pytest.fixture(autouse=True)
    def setup_room(self, game_manager):
        self.gm = game_manager
        self.room_id, (self.host, self.ann, self.ben) = create_room_with_players(game_manager)
        start_round_in_writing(game_manager, self.room_id, self.host)
        game_manager.submit_definition(self.room_id, "r1", self.ann, "A small lizard")
        game_manager.submit_definition(self.room_id, "r1", self.ben, "A kind of soup")

    def open_voting(self):
        self.gm.open_voting(self.room_id, "r1", self.host)

    def test_vote_before_voting_rejected(self):
        with pytest.raises(InvalidStateError) as exc_info:
            self.gm.cast_vote(self.room_id, "r1", self.ann, REAL_CHOICE_ID)

        assert exc_info.value.code == ErrorCode.WRONG_PHASE

    def test_vote_is_recorded(self):
        self.open_voting()

        result = self.gm.cast_vote(self.room_id, "r1", self.ann, self.ben)

        assert result["choice_id"] == self.ben
        assert result["option_id"] == option_id(current_round(self.gm, self.room_id), self.ben)
        votes = self.gm.list_votes(self.room_id, "r1")
        assert [(v["uid"], v["choice_id"]) for v in votes] == [(self.ann, self.ben)]

    def test_changing_vote_keeps_last_choice(self):
        self.open_voting()
        self.gm.cast_vote(self.room_id, "r1", self.ann, self.ben)
        self.gm.cast_vote(self.room_id, "r1", self.ann, REAL_CHOICE_ID)

        votes = self.gm.list_votes(self.room_id, "r1")
        assert len(votes) == 1
        assert votes[0]["choice_id"] == REAL_CHOICE_ID
        assert self.gm.ledger.vote_count(self.room_id, "r1") == 1

    def test_self_vote_rejected(self):
        self.open_voting()

        with pytest.raises(ValidationError) as exc_info:
            self.gm.cast_vote(self.room_id, "r1", self.ann, self.ann)

        assert exc_info.value.code == ErrorCode.SELF_VOTE

    def test_reader_cannot_vote(self):
        self.open_voting()

        with pytest.raises(ValidationError) as exc_info:
            self.gm.cast_vote(self.room_id, "r1", self.host, REAL_CHOICE_ID)

        assert exc_info.value.code == ErrorCode.READER_CANNOT_VOTE

    def test_unknown_choice_rejected(self):
        self.open_voting()

        with pytest.raises(ValidationError) as exc_info:
            self.gm.cast_vote(self.room_id, "r1", self.ann, "nobody")

        assert exc_info.value.code == ErrorCode.INVALID_CHOICE

    def test_missing_choice_rejected(self):
        self.open_voting()

        with pytest.raises(ValidationError) as exc_info:
            self.gm.cast_vote(self.room_id, "r1", self.ann, "")

        assert exc_info.value.code == ErrorCode.MISSING_CHOICE

    def test_outsider_cannot_vote(self):
        self.open_voting()

        with pytest.raises(ValidationError) as exc_info:
            self.gm.cast_vote(self.room_id, "r1", "stranger", REAL_CHOICE_ID)

        assert exc_info.value.code == ErrorCode.NOT_IN_ROOM

    def test_vote_after_reveal_rejected(self):
        self.open_voting()
        self.gm.reveal_and_score(self.room_id, "r1", self.host)

        with pytest.raises(InvalidStateError):
            self.gm.cast_vote(self.room_id, "r1", self.ann, REAL_CHOICE_ID)

    def test_vote_for_empty_bluff_rejected(self):
        self.gm.submit_definition(self.room_id, "r1", self.ben, "   ")
        self.open_voting()

        with pytest.raises(ValidationError) as exc_info:
            self.gm.cast_vote(self.room_id, "r1", self.ann, self.ben)

        assert exc_info.value.code == ErrorCode.INVALID_CHOICE
        assert self.gm.list_votes(self.room_id, "r1") == []

    def test_vote_for_the_reader_rejected(self):
        self.open_voting()

        with pytest.raises(ValidationError) as exc_info:
            self.gm.cast_vote(self.room_id, "r1", self.ann, self.host)

        assert exc_info.value.code == ErrorCode.INVALID_CHOICE


class TestVoteByOption:
    """Clients vote with the opaque option ids they were shown"""

    @pytest.fixture(autouse=True)
    def setup_room(self, game_manager):
        self.gm = game_manager
        self.room_id, (self.host, self.ann, self.ben) = create_room_with_players(game_manager)
        start_round_in_writing(game_manager, self.room_id, self.host)
        game_manager.submit_definition(self.room_id, "r1", self.ann, "A small lizard")
        game_manager.submit_definition(self.room_id, "r1", self.ben, "A kind of soup")
        game_manager.open_voting(self.room_id, "r1", self.host)
        self.round_doc = current_round(game_manager, self.room_id)

    def test_option_resolves_to_its_choice(self):
        real_option = option_id(self.round_doc, REAL_CHOICE_ID)

        result = self.gm.cast_vote_for_option(self.room_id, "r1", self.ann, real_option)

        assert result == {"choice_id": REAL_CHOICE_ID, "option_id": real_option}
        assert self.gm.list_votes(self.room_id, "r1")[0]["choice_id"] == REAL_CHOICE_ID

    def test_raw_choice_id_is_not_an_option(self):
        with pytest.raises(ValidationError) as exc_info:
            self.gm.cast_vote_for_option(self.room_id, "r1", self.ann, REAL_CHOICE_ID)

        assert exc_info.value.code == ErrorCode.INVALID_CHOICE

    def test_own_option_is_a_self_vote(self):
        with pytest.raises(ValidationError) as exc_info:
            self.gm.cast_vote_for_option(self.room_id, "r1", self.ann, option_id(self.round_doc, self.ann))

        assert exc_info.value.code == ErrorCode.SELF_VOTE

    def test_unknown_round(self):
        with pytest.raises(NotFoundError):
            self.gm.cast_vote_for_option(self.room_id, "r9", self.ann, "abc")


class TestNoReaderLedger:
    """Everybody writes and votes without a reader"""

    def test_host_writes_and_votes(self, game_manager):
        room_id, (host, ann, ben) = create_room_with_players(game_manager, game_mode='no_reader')
        game_manager.start_game(room_id, host)

        game_manager.submit_definition(room_id, "r1", host, "host bluff")
        game_manager.submit_definition(room_id, "r1", ann, "ann bluff")
        game_manager.open_voting(room_id, "r1", host)
        game_manager.cast_vote(room_id, "r1", host, ann)

        assert game_manager.ledger.submitted_count(room_id, "r1") == 2
        assert game_manager.ledger.vote_count(room_id, "r1") == 1
