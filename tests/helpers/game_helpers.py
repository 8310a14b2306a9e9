"""
Game setup helpers for unit and integration tests.
Provides a synthetic word corpus and shortcuts that drive a room to a phase.
"""

from typing import Dict, List, Sequence, Tuple

from bluffdict.core.game_modes import RoomSettings
from bluffdict.core.game_phases import GamePhase


def make_word_data(count: int) -> Dict:
    """Corpus dict with `count` bilingual entries w001, w002, ..."""
    return {
        'words': [
            {
                'id': f'w{i:03d}',
                'en': {'word': f'Word{i}', 'definition': f'Real meaning {i}'},
                'es': {'word': f'Palabra{i}', 'definition': f'Significado real {i}'},
            }
            for i in range(1, count + 1)
        ]
    }


def create_room_with_players(game_manager, names: Sequence[str] = ('Host', 'Ann', 'Ben'),
                             target_score: int = 10, game_mode: str = 'classic',
                             lang_mode: str = 'en', reader_choice_enabled=None) -> Tuple[str, List[str]]:
    """
    Create a room hosted by the first name and join the others.

    Actor ids are the lowercased names.

    Returns:
        Tuple of (room_id, actor ids in join order)
    """
    settings = RoomSettings.from_options(target_score, lang_mode, game_mode, reader_choice_enabled)
    actor_ids = [name.lower() for name in names]
    created = game_manager.create_room(actor_ids[0], names[0], settings)
    for actor_id, name in zip(actor_ids[1:], names[1:]):
        game_manager.join_room_by_code(created['code'], actor_id, name)
    return created['room_id'], actor_ids


def current_round(game_manager, room_id: str) -> Dict:
    return game_manager.get_current_round(room_id)


def start_round_in_writing(game_manager, room_id: str, host_id: str) -> Dict:
    """Start the game and, if the reader has to pick, pick the first candidate."""
    game_manager.start_game(room_id, host_id)
    return choose_first_candidate(game_manager, room_id)


def choose_first_candidate(game_manager, room_id: str) -> Dict:
    round_doc = current_round(game_manager, room_id)
    if round_doc['phase'] == GamePhase.WORD_SELECT.value:
        game_manager.choose_word_for_round(
            room_id, round_doc['round_id'], round_doc['reader_uid'], round_doc['word_candidates'][0]['id']
        )
    return current_round(game_manager, room_id)


def controller_of(game_manager, room_id: str, round_doc: Dict) -> str:
    """Actor allowed to open voting and reveal the round."""
    room = game_manager.get_room(room_id)
    return round_doc['reader_uid'] if room['game_mode'] == 'classic' else room['host_uid']


def play_round(game_manager, room_id: str, bluffs: Dict[str, str], votes: Dict[str, str]) -> Dict:
    """
    Play the current round from WRITING to REVEAL.

    Args:
        bluffs: actor id -> bluff text
        votes: actor id -> choice id

    Returns:
        The revealed round document
    """
    round_doc = current_round(game_manager, room_id)
    round_id = round_doc['round_id']
    controller = controller_of(game_manager, room_id, round_doc)

    for actor_id, text in bluffs.items():
        game_manager.submit_definition(room_id, round_id, actor_id, text)
    game_manager.open_voting(room_id, round_id, controller)
    for actor_id, choice_id in votes.items():
        game_manager.cast_vote(room_id, round_id, actor_id, choice_id)
    game_manager.reveal_and_score(room_id, round_id, controller)
    return game_manager.get_round(room_id, round_id)


def scores(game_manager, room_id: str) -> Dict[str, int]:
    return {player['uid']: player['score'] for player in game_manager.get_players(room_id)}
