"""
Credential Pool
Spreads requests across several equivalent Gemini API keys
"""

import random
from typing import Iterable, Optional

from config import GEMINI_API_KEYS
from pureplate.errors import PoolExhausted


class CredentialPool:
    """
    Holds interchangeable API keys and hands out one per request.

    Selection is uniform-random and independent per call, so load spreads
    across quotas without any shared cursor. The pool never retries or fails
    over; a key that turns out to be exhausted surfaces as a request failure.
    """

    def __init__(self, keys: Iterable[str], rng: Optional[random.Random] = None):
        self._keys = tuple(k.strip() for k in keys if k and k.strip())
        self._rng = rng or random.Random()

    @classmethod
    def from_config(cls) -> "CredentialPool":
        return cls(GEMINI_API_KEYS)

    @property
    def size(self) -> int:
        return len(self._keys)

    def __len__(self) -> int:
        return self.size

    def select(self) -> str:
        if not self._keys:
            raise PoolExhausted(
                "No Gemini API key configured. "
                "Please set GEMINI_API_KEY_1 (or GEMINI_API_KEYS) in your .env file."
            )
        return self._rng.choice(self._keys)
