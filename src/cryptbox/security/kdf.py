from typing import Optional
import logging

from argon2.exceptions import HashingError
from argon2.low_level import Type, hash_secret_raw
from cryptography.hazmat.primitives.kdf.scrypt import Scrypt

from ..core.config import KdfParams
from ..core.exceptions import (
    ComputationFailureError,
    InvalidParameterError,
    MissingParameterError,
)
from .prng import random_bytes


logger = logging.getLogger(__name__)

SALT_LENGTH = 16
KEY_LENGTHS = (16, 24, 32)


def generate_salt(length: int = SALT_LENGTH) -> bytes:
    """Return a cryptographically secure random salt."""
    return random_bytes(length)


def require_password(password) -> bytes:
    if password is None or password == "" or password == b"":
        raise MissingParameterError("a password is required")
    if isinstance(password, str):
        password = password.encode("utf-8")
    return password


def derive_raw(
    password: bytes,
    salt: bytes,
    length: int,
    params: Optional[KdfParams] = None,
) -> bytes:
    """
    Derive ``length`` bytes from a password and salt with the configured
    memory-hard function (scrypt by default, Argon2id optionally).
    Any output length is accepted; see :func:`derive_key` for cipher keys.
    """
    secret = require_password(password)
    if length <= 0:
        raise InvalidParameterError(f"key length must be positive, got {length}")
    params = params or KdfParams()

    if params.algorithm == "scrypt":
        try:
            kdf = Scrypt(salt=salt, length=length, n=params.n, r=params.r, p=params.p)
            return kdf.derive(secret)
        except (ValueError, MemoryError) as exc:
            raise ComputationFailureError(f"scrypt derivation failed: {exc}") from exc

    if params.algorithm == "argon2id":
        try:
            return hash_secret_raw(
                secret=secret,
                salt=salt,
                time_cost=params.time_cost,
                memory_cost=params.memory_cost,
                parallelism=params.parallelism,
                hash_len=length,
                type=Type.ID,
            )
        except HashingError as exc:
            raise ComputationFailureError(f"argon2id derivation failed: {exc}") from exc

    raise InvalidParameterError(f"unsupported kdf: {params.algorithm!r}")


def derive_key(
    password: bytes,
    salt: bytes,
    key_length: int = 32,
    params: Optional[KdfParams] = None,
) -> bytes:
    """
    Derive a symmetric cipher key. ``key_length`` must be 16, 24 or 32 bytes.
    Deterministic: identical inputs always give identical output.
    """
    if key_length not in KEY_LENGTHS:
        raise InvalidParameterError(
            f"unsupported key length: {key_length} bytes (expected one of {KEY_LENGTHS})"
        )
    key = derive_raw(password, salt, key_length, params)
    logger.debug("derived %d-byte key", key_length)
    return key
