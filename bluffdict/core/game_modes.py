"""
Game mode configuration

Room options are resolved once, at room creation, into a frozen RoomSettings.
Everything that differs between classic and no-reader games is looked up in
the MODE_RULES table instead of comparing mode strings at every call site.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, FrozenSet, Optional, Set

from bluffdict.core.errors import ErrorCode, ValidationError
from bluffdict.core.game_phases import GamePhase

# Choice id of the real definition; never valid as an actor id
REAL_CHOICE_ID = "REAL"


class GameMode(Enum):
    """Who runs the round."""
    CLASSIC = "classic"
    NO_READER = "no_reader"


class LanguageMode(Enum):
    """Which language the words are played in."""
    EN = "en"
    ES = "es"
    BOTH = "both"


@dataclass(frozen=True)
class RoomSettings:
    """Validated room configuration."""
    target_score: int
    lang_mode: LanguageMode = LanguageMode.EN
    game_mode: GameMode = GameMode.CLASSIC
    reader_choice_enabled: bool = True

    @classmethod
    def from_options(cls, target_score: Any, lang_mode: Any = "en",
                     game_mode: Any = "classic",
                     reader_choice_enabled: Optional[bool] = None) -> 'RoomSettings':
        """
        Build settings from raw client options.

        Args:
            target_score: Score that ends the game, a positive integer
            lang_mode: "en", "es" or "both"
            game_mode: "classic" or "no_reader"
            reader_choice_enabled: Let the reader pick the word (classic only)

        Returns:
            RoomSettings instance

        Raises:
            ValidationError: If any option is invalid
        """
        if isinstance(target_score, bool) or not isinstance(target_score, int) or target_score <= 0:
            raise ValidationError(
                ErrorCode.INVALID_SETTINGS,
                "Target score must be a positive integer",
                {"target_score": target_score}
            )

        try:
            lang = LanguageMode(lang_mode)
        except ValueError:
            raise ValidationError(
                ErrorCode.INVALID_SETTINGS,
                f"Unknown language mode: {lang_mode}",
                {"lang_mode": lang_mode}
            )

        try:
            mode = GameMode(game_mode)
        except ValueError:
            raise ValidationError(
                ErrorCode.INVALID_SETTINGS,
                f"Unknown game mode: {game_mode}",
                {"game_mode": game_mode}
            )

        if mode == GameMode.NO_READER:
            reader_choice = False
        else:
            reader_choice = True if reader_choice_enabled is None else bool(reader_choice_enabled)

        return cls(
            target_score=target_score,
            lang_mode=lang,
            game_mode=mode,
            reader_choice_enabled=reader_choice
        )

    def to_dict(self) -> Dict[str, Any]:
        """Room document fields for these settings."""
        return {
            "target_score": self.target_score,
            "lang_mode": self.lang_mode.value,
            "game_mode": self.game_mode.value,
            "reader_choice_enabled": self.reader_choice_enabled,
        }


def _current_reader(round_doc: Optional[Dict]) -> Set[str]:
    if round_doc and round_doc.get("reader_uid"):
        return {round_doc["reader_uid"]}
    return set()


def _host(room: Dict, round_doc: Optional[Dict]) -> Set[str]:
    return {room["host_uid"]}


def _reader(room: Dict, round_doc: Optional[Dict]) -> Set[str]:
    return _current_reader(round_doc)


def _reader_or_host(room: Dict, round_doc: Optional[Dict]) -> Set[str]:
    return _current_reader(round_doc) | {room["host_uid"]}


@dataclass(frozen=True)
class ModeRules:
    """Behavior that depends on the game mode."""
    mode: GameMode
    has_reader: bool
    reader_bonus: bool
    allows_review: bool
    voting_sources: FrozenSet[str]
    # Actors allowed to open voting and reveal
    controllers: Callable[[Dict, Optional[Dict]], Set[str]]
    # Actors allowed to advance to the next round or finish the game
    advancers: Callable[[Dict, Optional[Dict]], Set[str]]
    controller_label: str

    def can_control(self, room: Dict, round_doc: Optional[Dict], actor_id: str) -> bool:
        return actor_id in self.controllers(room, round_doc)

    def can_advance(self, room: Dict, round_doc: Optional[Dict], actor_id: str) -> bool:
        return actor_id in self.advancers(room, round_doc)


MODE_RULES: Dict[GameMode, ModeRules] = {
    GameMode.CLASSIC: ModeRules(
        mode=GameMode.CLASSIC,
        has_reader=True,
        reader_bonus=True,
        allows_review=True,
        voting_sources=frozenset({GamePhase.REVIEW.value, GamePhase.WRITING.value}),
        controllers=_reader,
        advancers=_reader_or_host,
        controller_label="reader",
    ),
    GameMode.NO_READER: ModeRules(
        mode=GameMode.NO_READER,
        has_reader=False,
        reader_bonus=False,
        allows_review=False,
        voting_sources=frozenset({GamePhase.WRITING.value}),
        controllers=_host,
        advancers=_host,
        controller_label="host",
    ),
}


def get_mode_rules(room: Dict) -> ModeRules:
    """Look up the rules for a room document."""
    return MODE_RULES[GameMode(room.get("game_mode", GameMode.CLASSIC.value))]
