"""Generators for the ``state`` and ``nonce`` request parameters."""

import random
import uuid
from typing import Callable

IdFactory = Callable[[], str]

_HEX_DIGITS = "0123456789abcdef"


def secure_uuid() -> str:
    """Random version-4 UUID backed by the OS random source."""
    return str(uuid.uuid4())


def seeded_uuid_factory(seed: int | str | None = None) -> IdFactory:
    """Build a deterministic factory of version-4 shaped UUID strings.

    Useful when a test needs to assert on ``state``/``nonce`` values.
    Not suitable outside of tests.
    """
    rng = random.Random(seed)

    def factory() -> str:
        chars = [_HEX_DIGITS[rng.randrange(16)] for _ in range(36)]
        chars[14] = "4"
        chars[19] = _HEX_DIGITS[(int(chars[19], 16) & 0x3) | 0x8]
        chars[8] = chars[13] = chars[18] = chars[23] = "-"
        return "".join(chars)

    return factory
