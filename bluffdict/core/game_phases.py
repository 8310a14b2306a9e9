"""
Game Phase Enumeration

Defines the room and round phase states used throughout the application.
"""

from enum import Enum


class GamePhase(Enum):
    """Game phase enumeration, in the order a round moves through them."""
    LOBBY = "lobby"
    WORD_SELECT = "word_select"
    REVIEW = "review"
    WRITING = "writing"
    VOTING = "voting"
    REVEAL = "reveal"
    FINISHED = "finished"


# Phases in which a round carries its chosen word and real definition
WORD_CHOSEN_PHASES = frozenset({
    GamePhase.WRITING.value,
    GamePhase.REVIEW.value,
    GamePhase.VOTING.value,
    GamePhase.REVEAL.value,
})

# Phases in which players may still (re)submit a bluff
SUBMISSION_PHASES = frozenset({
    GamePhase.WRITING.value,
    GamePhase.REVIEW.value,
    GamePhase.VOTING.value,
})

# Phases from which a new round may be created
ROUND_CREATION_PHASES = frozenset({
    GamePhase.LOBBY.value,
    GamePhase.REVEAL.value,
})
