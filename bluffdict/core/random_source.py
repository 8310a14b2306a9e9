"""
Injectable randomness for room codes, word candidates and option shuffles.

Services take a RandomSource instead of calling the random module directly so
tests can seed it and assert exact codes and orders.
"""

import random
from typing import List, Optional, Sequence, TypeVar

T = TypeVar("T")

ROOM_CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
ROOM_CODE_LENGTH = 6


class RandomSource:
    """Seedable wrapper around random.Random."""

    def __init__(self, seed: Optional[int] = None):
        self._random = random.Random(seed)

    def shuffled(self, items: Sequence[T]) -> List[T]:
        """Return a shuffled copy, leaving the input untouched."""
        result = list(items)
        self._random.shuffle(result)
        return result

    def choice(self, items: Sequence[T]) -> Optional[T]:
        if not items:
            return None
        return self._random.choice(items)

    def room_code(self) -> str:
        """Generate a join code from the unambiguous alphabet."""
        return "".join(self._random.choice(ROOM_CODE_ALPHABET) for _ in range(ROOM_CODE_LENGTH))

    def token(self, length: int = 10) -> str:
        """Random lowercase alphanumeric id."""
        alphabet = "abcdefghijklmnopqrstuvwxyz0123456789"
        return "".join(self._random.choice(alphabet) for _ in range(length))
