"""
Game Action Handler

This module handles Socket.IO events that move a game forward: starting
the game, picking the word, writing bluffs, voting, revealing and moving
to the next round.

Phase changes reach every client through the store broadcasts; the
responses emitted here only acknowledge the caller.
"""

import logging

from bluffdict.services.error_response_factory import with_error_handling
from .base_handler import BaseGameHandler

logger = logging.getLogger(__name__)


class GameActionHandler(BaseGameHandler):
    """Handler for game actions of players, readers and hosts."""

    @with_error_handling
    def handle_start_game(self, data=None):
        """Handle the host starting the game from the lobby."""
        self.log_handler_start('handle_start_game', data)

        session_info = self.require_session()
        room_id = session_info['room_id']

        started = self.game_manager.start_game(room_id, session_info['actor_id'])

        self.log_handler_success('handle_start_game', f'Room {room_id} started={started}')
        self.emit_success('game_started', {'room_id': room_id, 'started': started})

    @with_error_handling
    def handle_choose_word(self, data):
        """
        Handle the reader picking the round's word among the candidates.

        Expected data format:
        {
            'word_id': 'w12',
            'round_id': 'r3'  # optional, defaults to the current round
        }
        """
        self.log_handler_start('handle_choose_word', data)

        session_info = self.require_session()
        data = self.validate_data_dict(data, ['word_id'])
        room_id = session_info['room_id']
        round_id = self.resolve_round_id(room_id, data)

        chosen = self.game_manager.choose_word_for_round(
            room_id, round_id, session_info['actor_id'], str(data['word_id'])
        )

        self.log_handler_success('handle_choose_word', f'Word {data["word_id"]} for {room_id}/{round_id}')
        self.emit_success('word_chosen', {'round_id': round_id, 'chosen': chosen})

    @with_error_handling
    def handle_submit_definition(self, data):
        """
        Handle a player writing (or rewriting) their bluff definition.

        Expected data format:
        {
            'text': 'a fake definition',
            'round_id': 'r3'  # optional
        }
        """
        self.log_handler_start('handle_submit_definition', data)

        session_info = self.require_session()
        data = self.validate_data_dict(data, ['text'])
        room_id = session_info['room_id']
        round_id = self.resolve_round_id(room_id, data)

        result = self.game_manager.submit_definition(room_id, round_id, session_info['actor_id'], data['text'])

        self.log_handler_success('handle_submit_definition', f'Player {session_info["actor_id"]} in {room_id}/{round_id}')
        self.emit_success('definition_submitted', dict(result, round_id=round_id))

    @with_error_handling
    def handle_open_review(self, data=None):
        """Handle the classic reader closing writing to review the bluffs."""
        self.log_handler_start('handle_open_review', data)

        session_info = self.require_session()
        room_id = session_info['room_id']
        round_id = self.resolve_round_id(room_id, data)

        opened = self.game_manager.open_reader_review(room_id, round_id, session_info['actor_id'])

        self.log_handler_success('handle_open_review', f'{room_id}/{round_id} opened={opened}')
        self.emit_success('review_opened', {'round_id': round_id, 'opened': opened})

    @with_error_handling
    def handle_open_voting(self, data=None):
        """Handle the reader (or host in no_reader mode) opening the vote."""
        self.log_handler_start('handle_open_voting', data)

        session_info = self.require_session()
        room_id = session_info['room_id']
        round_id = self.resolve_round_id(room_id, data)

        opened = self.game_manager.open_voting(room_id, round_id, session_info['actor_id'])

        self.log_handler_success('handle_open_voting', f'{room_id}/{round_id} opened={opened}')
        self.emit_success('voting_opened', {'round_id': round_id, 'opened': opened})

    @with_error_handling
    def handle_cast_vote(self, data):
        """
        Handle a player voting for the definition they believe is real.

        Expected data format:
        {
            'option_id': '<opaque option id from the round snapshot>',
            'round_id': 'r3'  # optional
        }
        """
        self.log_handler_start('handle_cast_vote', data)

        session_info = self.require_session()
        data = self.validate_data_dict(data, ['option_id'])
        room_id = session_info['room_id']
        round_id = self.resolve_round_id(room_id, data)

        result = self.game_manager.cast_vote_for_option(
            room_id, round_id, session_info['actor_id'], data['option_id']
        )

        self.log_handler_success('handle_cast_vote', f'Player {session_info["actor_id"]} voted in {room_id}/{round_id}')
        # The choice id stays server side until the reveal
        self.emit_success('vote_cast', {'round_id': round_id, 'option_id': result['option_id']})

    @with_error_handling
    def handle_reveal_and_score(self, data=None):
        """Handle closing the vote, revealing the real definition and scoring."""
        self.log_handler_start('handle_reveal_and_score', data)

        session_info = self.require_session()
        room_id = session_info['room_id']
        round_id = self.resolve_round_id(room_id, data)

        revealed = self.game_manager.reveal_and_score(room_id, round_id, session_info['actor_id'])

        self.log_handler_success('handle_reveal_and_score', f'{room_id}/{round_id} revealed={revealed}')
        self.emit_success('round_revealed', {'round_id': round_id, 'revealed': revealed})

    @with_error_handling
    def handle_advance_round(self, data=None):
        """Handle moving past a revealed round: next round, or finish when the game is over."""
        self.log_handler_start('handle_advance_round', data)

        session_info = self.require_session()
        room_id = session_info['room_id']

        result = self.game_manager.advance_or_finish(room_id, session_info['actor_id'])

        self.log_handler_success('handle_advance_round', f'Room {room_id} {result}')
        self.emit_success('round_advanced', dict(result, room_id=room_id))

    @with_error_handling
    def handle_finish_game(self, data=None):
        """Handle ending the game for everybody."""
        self.log_handler_start('handle_finish_game', data)

        session_info = self.require_session()
        room_id = session_info['room_id']

        finished = self.game_manager.finish_game(room_id, session_info['actor_id'])

        self.log_handler_success('handle_finish_game', f'Room {room_id} finished={finished}')
        self.emit_success('game_finished', {'room_id': room_id, 'finished': finished})
