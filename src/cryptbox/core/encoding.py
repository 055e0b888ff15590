"""Text encodings for binary values printed by, or passed to, the CLI.

The names follow the encodings accepted by Node-style command line tools
(``hex``, ``base64``, ``base64url``, ``latin1`` ...). ``encode_bytes`` turns
raw bytes into text, ``decode_text`` is its inverse.
"""

import base64
import binascii

from .exceptions import InvalidParameterError


# alias -> canonical name
_ALIASES = {
    "hex": "hex",
    "base64": "base64",
    "base64url": "base64url",
    "latin1": "latin1",
    "binary": "latin1",
    "ascii": "ascii",
    "utf8": "utf8",
    "utf-8": "utf8",
    "utf16le": "utf16le",
    "utf-16le": "utf16le",
    "ucs2": "utf16le",
    "ucs-2": "utf16le",
}

ENCODINGS = tuple(_ALIASES)


def normalize(encoding: str) -> str:
    """Return the canonical name for ``encoding`` or raise InvalidParameterError."""
    try:
        return _ALIASES[encoding.lower()]
    except (KeyError, AttributeError):
        raise InvalidParameterError(f"unsupported encoding: {encoding!r}") from None


def encode_bytes(data: bytes, encoding: str = "hex") -> str:
    enc = normalize(encoding)
    if enc == "hex":
        return data.hex()
    if enc == "base64":
        return base64.b64encode(data).decode("ascii")
    if enc == "base64url":
        # unpadded, like Node's Buffer#toString("base64url")
        return base64.urlsafe_b64encode(data).decode("ascii").rstrip("=")
    if enc == "latin1":
        return data.decode("latin-1")
    if enc == "ascii":
        # Node masks the high bit rather than failing
        return bytes(b & 0x7F for b in data).decode("ascii")
    if enc == "utf8":
        return data.decode("utf-8", errors="replace")
    return data.decode("utf-16-le", errors="replace")


def decode_text(text: str, encoding: str = "hex") -> bytes:
    enc = normalize(encoding)
    try:
        if enc == "hex":
            return bytes.fromhex(text)
        if enc == "base64":
            return base64.b64decode(text, validate=True)
        if enc == "base64url":
            padded = text + "=" * (-len(text) % 4)
            return base64.urlsafe_b64decode(padded)
        if enc == "latin1":
            return text.encode("latin-1")
        if enc == "ascii":
            return text.encode("ascii")
        if enc == "utf8":
            return text.encode("utf-8")
        return text.encode("utf-16-le")
    except (ValueError, binascii.Error) as exc:
        raise InvalidParameterError(f"value is not valid {enc}") from exc


def int_to_bytes(value: int, length: int = 0) -> bytes:
    """Big-endian bytes of a non-negative int, left-padded to ``length``."""
    size = max(length, (value.bit_length() + 7) // 8, 1)
    return value.to_bytes(size, "big")


def bytes_to_int(data: bytes) -> int:
    return int.from_bytes(data, "big")
