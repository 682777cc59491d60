"""Default Entropy implementation backed by a seeded random.Random.

The core only consumes the Entropy protocol (factual.interfaces). This module
provides the thin, reproducible adapter used by tests and the sampling CLI:
same seed, same sequence of choices.

arbitrary(like) produces a value shaped like its argument. Supported shapes:
bool, int, float, str, bytes, None, Enum members, tuples (element-wise),
lists (homogeneous, random length), dicts (same keys, arbitrary values) and
dataclass instances (field-wise). Anything else raises TypeError.
"""

from __future__ import annotations

import dataclasses
import enum
import logging
import random
import string
from typing import Any, Sequence, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

INT_MIN: int = -(2**31)
INT_MAX: int = 2**31 - 1
FLOAT_SPAN: float = 1e6
MAX_COLLECTION_LEN: int = 8
MAX_TEXT_LEN: int = 16

_TEXT_ALPHABET: str = string.ascii_letters + string.digits


class SeededEntropy:
    """Entropy backed by random.Random(seed).

    Usage:
        entropy = SeededEntropy(42)
        entropy.int_in_range(1, 6)
        entropy.arbitrary({"x": 0, "name": ""})
    """

    def __init__(self, seed: int | None = None) -> None:
        if seed is None:
            seed = random.SystemRandom().randrange(2**32)
            logger.info("SeededEntropy using generated seed=%d", seed)
        self._seed: int = seed
        self._rng = random.Random(seed)

    @property
    def seed(self) -> int:
        return self._seed

    def int_in_range(self, low: int, high: int) -> int:
        if low > high:
            raise ValueError(f"invalid range {low}..{high}")
        return self._rng.randint(low, high)

    def float_in_range(self, low: float, high: float) -> float:
        if low > high:
            raise ValueError(f"invalid range {low}..{high}")
        return self._rng.uniform(low, high)

    def choose(self, options: Sequence[T]) -> T:
        if not options:
            raise ValueError("cannot choose from an empty sequence")
        if len(options) == 1:
            return options[0]
        return options[self._rng.randrange(len(options))]

    def boolean(self) -> bool:
        return self._rng.random() < 0.5

    def arbitrary(self, like: Any) -> Any:
        # bool before int: bool is an int subclass
        if like is None:
            return None
        if isinstance(like, bool):
            return self.boolean()
        if isinstance(like, enum.Enum):
            return self.choose(list(type(like)))
        if isinstance(like, int):
            return self.int_in_range(INT_MIN, INT_MAX)
        if isinstance(like, float):
            return self.float_in_range(-FLOAT_SPAN, FLOAT_SPAN)
        if isinstance(like, str):
            length = self.int_in_range(0, MAX_TEXT_LEN)
            return "".join(self.choose(_TEXT_ALPHABET) for _ in range(length))
        if isinstance(like, bytes):
            length = self.int_in_range(0, MAX_TEXT_LEN)
            return bytes(self.int_in_range(0, 255) for _ in range(length))
        if dataclasses.is_dataclass(like) and not isinstance(like, type):
            changes = {
                f.name: self.arbitrary(getattr(like, f.name))
                for f in dataclasses.fields(like)
                if f.init
            }
            return dataclasses.replace(like, **changes)
        if isinstance(like, tuple):
            items = [self.arbitrary(x) for x in like]
            if hasattr(like, "_fields"):
                return type(like)(*items)
            return tuple(items)
        if isinstance(like, list):
            if not like:
                return []
            length = self.int_in_range(0, MAX_COLLECTION_LEN)
            return [self.arbitrary(like[0]) for _ in range(length)]
        if isinstance(like, dict):
            return {k: self.arbitrary(v) for k, v in like.items()}
        raise TypeError(f"cannot generate an arbitrary value shaped like {type(like).__name__}")

    def __repr__(self) -> str:
        return f"SeededEntropy(seed={self._seed})"


def random_entropy() -> SeededEntropy:
    """Return a SeededEntropy seeded from OS randomness.

    The chosen seed is logged at INFO so that a failing run can be replayed
    with SeededEntropy(seed).
    """
    return SeededEntropy()
