"""Container layout for password-encrypted data.

Layout (no magic, no length prefixes; field sizes follow from the cipher):
- 16 bytes: salt
- 16 bytes: iv (AES block size)
- rest:     AES-CBC ciphertext, PKCS7 padded, a whole number of blocks
"""

from dataclasses import dataclass
from typing import BinaryIO

from ..core.exceptions import IntegrityFailureError, InvalidParameterError
from ..core.fileio import read_block


SALT_SIZE = 16
BLOCK_SIZE = 16
IV_SIZE = BLOCK_SIZE
HEADER_SIZE = SALT_SIZE + IV_SIZE
# smallest valid container: header plus one padded block
MIN_CONTAINER_SIZE = HEADER_SIZE + BLOCK_SIZE

INTEGRITY_MESSAGE = "unable to decrypt: wrong password or corrupted data"


@dataclass(frozen=True)
class ContainerHeader:
    salt: bytes
    iv: bytes

    def pack(self) -> bytes:
        return self.salt + self.iv


def build_header(salt: bytes, iv: bytes) -> ContainerHeader:
    if len(salt) != SALT_SIZE or len(iv) != IV_SIZE:
        raise InvalidParameterError("salt and iv must each be 16 bytes")
    return ContainerHeader(salt=salt, iv=iv)


def parse_header(data: bytes) -> ContainerHeader:
    if len(data) < HEADER_SIZE:
        raise IntegrityFailureError(INTEGRITY_MESSAGE)
    return ContainerHeader(salt=data[:SALT_SIZE], iv=data[SALT_SIZE:HEADER_SIZE])


def read_header(stream: BinaryIO) -> ContainerHeader:
    return parse_header(read_block(stream, HEADER_SIZE))


def ciphertext_length(plaintext_length: int) -> int:
    # PKCS7 always adds at least one byte, so an exact multiple gains a block
    return (plaintext_length // BLOCK_SIZE + 1) * BLOCK_SIZE


def container_length(plaintext_length: int) -> int:
    return HEADER_SIZE + ciphertext_length(plaintext_length)
