"""
Word Pool Service for Bluffdict

Chooses the words offered each round so a room doesn't see a word twice
until the whole corpus has been played. Only words that actually get chosen
are marked as used; offered but unchosen candidates stay in the pool.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Sequence

from bluffdict.content_manager import ContentManager, WordEntry, WordText
from bluffdict.core.errors import ErrorCode, NotFoundError
from bluffdict.core.game_modes import LanguageMode
from bluffdict.core.random_source import RandomSource

logger = logging.getLogger(__name__)


def choose_language(lang_mode: str, round_index: int) -> str:
    """
    Language of a round.

    Args:
        lang_mode: Room language mode ("en", "es" or "both")
        round_index: 0-based count of rounds created so far in the room

    Returns:
        "en" or "es"; "both" alternates, starting with Spanish
    """
    if lang_mode in (LanguageMode.EN.value, LanguageMode.ES.value):
        return lang_mode
    return LanguageMode.ES.value if round_index % 2 == 0 else LanguageMode.EN.value


@dataclass
class WordDraw:
    """Candidates drawn for one round."""
    candidates: List[WordEntry]
    pool_reset: bool

    @property
    def first(self) -> WordEntry:
        return self.candidates[0]

    def candidate_views(self, lang: str) -> List[Dict[str, str]]:
        """Candidates as shown to the reader: id and word only."""
        return [
            {"id": entry.id, "word": entry.for_language(lang).word}
            for entry in self.candidates
        ]


class WordPoolService:
    """Allocates words to rounds from the room's unused pool."""

    def __init__(self, content_manager: ContentManager, random_source: RandomSource,
                 candidate_count: int = 5):
        self.content_manager = content_manager
        self.random_source = random_source
        self.candidate_count = candidate_count

    def draw_candidates(self, used_word_ids: Sequence[str]) -> WordDraw:
        """
        Draw up to candidate_count distinct words the room hasn't used.

        When every word has been used the whole corpus becomes eligible
        again and the draw is flagged as a pool reset.

        Args:
            used_word_ids: Word ids already played in the room

        Returns:
            WordDraw with the shuffled candidates

        Raises:
            NotFoundError: If the corpus is empty
        """
        corpus = self.content_manager.get_all_words()
        if not corpus:
            raise NotFoundError(ErrorCode.WORD_NOT_FOUND, "No words are available")

        used = set(used_word_ids or [])
        unused = [entry for entry in corpus if entry.id not in used]
        pool_reset = not unused
        pool = unused if unused else corpus

        if pool_reset:
            logger.info(f"Word pool exhausted after {len(used)} words, starting over")

        candidates = self.random_source.shuffled(pool)[:min(self.candidate_count, len(pool))]
        return WordDraw(candidates=candidates, pool_reset=pool_reset)

    def get_word(self, word_id: str) -> WordEntry:
        entry = self.content_manager.get_word_by_id(word_id)
        if entry is None:
            raise NotFoundError(ErrorCode.WORD_NOT_FOUND, f"Word {word_id} not found", {"word_id": word_id})
        return entry

    @staticmethod
    def project(entry: WordEntry, lang: str) -> WordText:
        return entry.for_language(lang)

    @staticmethod
    def next_used_word_ids(used_word_ids: Sequence[str], chosen_id: str, pool_reset: bool) -> List[str]:
        """
        Used-word list after committing a chosen word.

        After a pool reset the chosen word starts a fresh list on its own.
        """
        if pool_reset:
            return [chosen_id]
        return list(used_word_ids or []) + [chosen_id]
