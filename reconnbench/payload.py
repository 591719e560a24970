from __future__ import annotations

import random
import string
from typing import Optional

DEFAULT_STRING = "foo"
_ALPHABET = string.ascii_letters + string.digits


class PayloadGenerator:
    """Produces keys and values: a fixed string, or random text of a set size."""

    def __init__(
        self,
        *,
        random_payload: bool = False,
        size_bytes: int = 16,
        rng: Optional[random.Random] = None,
    ) -> None:
        if size_bytes < 1:
            raise ValueError("size_bytes must be >= 1")
        self._random_payload = random_payload
        self._size = size_bytes
        self._rng = rng or random.Random()

    @property
    def is_random(self) -> bool:
        return self._random_payload

    def next(self) -> str:
        if not self._random_payload:
            return DEFAULT_STRING
        return "".join(self._rng.choices(_ALPHABET, k=self._size))
