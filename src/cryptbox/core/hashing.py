""" Utility for file digest and HMAC operations. """

from pathlib import Path
import hashlib
import hmac

from .encoding import encode_bytes
from .exceptions import InvalidParameterError
from .fileio import CHUNK_SIZE, open_input, read_chunks


def _is_fixed_length(algorithm: str) -> bool:
    # shake_* are XOFs: digest_size is 0 and digest() needs a length
    try:
        return hashlib.new(algorithm).digest_size > 0
    except (ValueError, TypeError):
        return False


def list_algorithms():
    return sorted(name for name in hashlib.algorithms_available if _is_fixed_length(name))


def _new_hash(algorithm: str):
    if not _is_fixed_length(algorithm):
        raise InvalidParameterError(f"unsupported hash algorithm: {algorithm!r}")
    return hashlib.new(algorithm)


def file_digest(file_path: Path, algorithm: str = "sha256", encoding: str = "hex") -> str:

    # Streams the file through the named hash and returns the encoded digest.

    h = _new_hash(algorithm)
    with open_input(file_path) as f:
        for data in read_chunks(f, CHUNK_SIZE):
            h.update(data)
    return encode_bytes(h.digest(), encoding)


def file_hmac(
    file_path: Path,
    key: str | bytes,
    algorithm: str = "sha256",
    encoding: str = "hex",
) -> str:
    """Return the encoded HMAC of a file; a str key is UTF-8 encoded."""
    if isinstance(key, str):
        key = key.encode("utf-8")
    # validate the algorithm name before touching the file
    _new_hash(algorithm)
    try:
        mac = hmac.new(key, digestmod=algorithm)
    except (ValueError, TypeError):
        raise InvalidParameterError(f"unsupported HMAC algorithm: {algorithm!r}") from None
    with open_input(file_path) as f:
        for data in read_chunks(f, CHUNK_SIZE):
            mac.update(data)
    return encode_bytes(mac.digest(), encoding)
