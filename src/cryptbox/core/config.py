"""Configuration records passed explicitly to every operation.

Nothing here is mutable module state. Callers build a ``Settings`` (usually
through :func:`load_settings`) and hand the relevant record to each call.

Environment overrides:

- ``CRYPTBOX_KEY_SIZE``  cipher key size in bits (128, 192 or 256)
- ``CRYPTBOX_ENCODING``  output encoding for printed values
- ``CRYPTBOX_DH_GROUP``  default Diffie-Hellman group name
- ``CRYPTBOX_KDF``       ``scrypt`` or ``argon2id``
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Mapping, Optional
import os

from .encoding import normalize
from .exceptions import InvalidParameterError


KEY_SIZES_BITS = (128, 192, 256)
KDF_ALGORITHMS = ("scrypt", "argon2id")
DEFAULT_CHUNK_SIZE = 64 * 1024


@dataclass(frozen=True)
class KdfParams:
    """Cost parameters for the memory-hard key derivation."""

    algorithm: str = "scrypt"
    # scrypt (same defaults as Node's crypto.scrypt)
    n: int = 2 ** 14
    r: int = 8
    p: int = 1
    # argon2id
    time_cost: int = 3
    memory_cost: int = 65536
    parallelism: int = 1


@dataclass(frozen=True)
class CipherConfig:
    key_size_bits: int = 256
    chunk_size: int = DEFAULT_CHUNK_SIZE
    kdf: KdfParams = field(default_factory=KdfParams)


@dataclass(frozen=True)
class DHConfig:
    group: str = "modp14"
    # reject out-of-range keys; primality of the prime is never checked
    strict: bool = False


@dataclass(frozen=True)
class OutputConfig:
    encoding: str = "hex"


@dataclass(frozen=True)
class Settings:
    cipher: CipherConfig = field(default_factory=CipherConfig)
    dh: DHConfig = field(default_factory=DHConfig)
    output: OutputConfig = field(default_factory=OutputConfig)


def validate_key_size(bits) -> int:
    # whole numbers only: ints, or digit strings from the environment
    if isinstance(bits, str) and bits.strip().isdecimal():
        value = int(bits)
    elif isinstance(bits, int) and not isinstance(bits, bool):
        value = bits
    else:
        raise InvalidParameterError(f"unsupported key size: {bits!r}")
    if value not in KEY_SIZES_BITS:
        raise InvalidParameterError(
            f"unsupported key size: {value} (expected one of {KEY_SIZES_BITS})"
        )
    return value


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """
    Build a Settings record from defaults plus ``CRYPTBOX_*`` overrides.

    Raises InvalidParameterError when an override holds an unsupported value.
    """
    env = os.environ if environ is None else environ
    settings = Settings()

    key_size = env.get("CRYPTBOX_KEY_SIZE")
    if key_size:
        settings = replace(
            settings,
            cipher=replace(settings.cipher, key_size_bits=validate_key_size(key_size)),
        )

    kdf_name = env.get("CRYPTBOX_KDF")
    if kdf_name:
        if kdf_name not in KDF_ALGORITHMS:
            raise InvalidParameterError(f"unsupported kdf: {kdf_name!r}")
        kdf = replace(settings.cipher.kdf, algorithm=kdf_name)
        settings = replace(settings, cipher=replace(settings.cipher, kdf=kdf))

    encoding = env.get("CRYPTBOX_ENCODING")
    if encoding:
        normalize(encoding)
        settings = replace(settings, output=OutputConfig(encoding=encoding))

    group = env.get("CRYPTBOX_DH_GROUP")
    if group:
        # local import: security.dh imports this module
        from ..security.dh import GROUPS

        if group not in GROUPS:
            raise InvalidParameterError(f"unknown Diffie-Hellman group: {group!r}")
        settings = replace(settings, dh=replace(settings.dh, group=group))

    return settings
