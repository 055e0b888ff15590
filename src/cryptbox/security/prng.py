"""Cryptographically secure randomness: bytes, bounded ints and UUIDs."""

import os
import secrets
import uuid

from ..core.encoding import encode_bytes
from ..core.exceptions import InvalidParameterError


PRNG_TYPES = ("bytes", "int", "uuid")


def random_bytes(size: int) -> bytes:
    if size < 0:
        raise InvalidParameterError(f"size must be non-negative, got {size}")
    return os.urandom(size)


def random_int(min_value: int = 0, max_value: int = 100) -> int:
    """Return a uniform int in ``[min_value, max_value)``."""
    if min_value >= max_value:
        raise InvalidParameterError(
            f"max ({max_value}) must be greater than min ({min_value})"
        )
    return min_value + secrets.randbelow(max_value - min_value)


def random_uuid() -> str:
    return str(uuid.uuid4())


def generate(
    kind: str,
    size: int = 16,
    min_value: int = 0,
    max_value: int = 100,
    encoding: str = "hex",
):
    if kind == "bytes":
        return encode_bytes(random_bytes(size), encoding)
    if kind == "int":
        return random_int(min_value, max_value)
    if kind == "uuid":
        return random_uuid()
    raise InvalidParameterError(f"unsupported prng type: {kind!r}")
