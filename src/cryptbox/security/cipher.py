"""Password-based streaming file encryption (AES-CBC + PKCS7).

Output is the container described in :mod:`cryptbox.security.container`:
``salt || iv || ciphertext``. The key is derived from the password and the
salt with :func:`cryptbox.security.kdf.derive_key`, so decryption needs only
the password and the key size used at encryption time.

Files are processed in fixed-size chunks, and output files are written through
a temporary file that is renamed into place only after the last block has
been written (and, for decryption, after the padding has been verified).
There is no authentication tag: a wrong password or corrupted data is
detected only through invalid padding, and both surface as the same
IntegrityFailureError.
"""

from __future__ import annotations

from io import BytesIO
from pathlib import Path
from typing import BinaryIO, Optional
import logging

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from ..core.config import CipherConfig, validate_key_size
from ..core.exceptions import IntegrityFailureError, InvalidParameterError
from ..core.fileio import atomic_output, open_input, read_chunks
from .container import (
    BLOCK_SIZE,
    INTEGRITY_MESSAGE,
    IV_SIZE,
    SALT_SIZE,
    ContainerHeader,
    build_header,
    read_header,
)
from .kdf import require_password, derive_key, generate_salt
from .prng import random_bytes


logger = logging.getLogger(__name__)


def _check_params(password, key_size_bits, salt, config: CipherConfig):
    # everything here runs before any file is opened or randomness is drawn
    secret = require_password(password)
    bits = validate_key_size(config.key_size_bits if key_size_bits is None else key_size_bits)
    if salt is not None and len(salt) != SALT_SIZE:
        raise InvalidParameterError(f"salt must be {SALT_SIZE} bytes, got {len(salt)}")
    return secret, bits


def _aes_cbc(key: bytes, iv: bytes) -> Cipher:
    return Cipher(algorithms.AES(key), modes.CBC(iv))


def _encrypt(inf: BinaryIO, outf: BinaryIO, secret: bytes, bits: int,
             salt: Optional[bytes], config: CipherConfig) -> ContainerHeader:
    if salt is None:
        salt = generate_salt(SALT_SIZE)
    key = derive_key(secret, salt, bits // 8, config.kdf)
    header = build_header(salt, random_bytes(IV_SIZE))

    encryptor = _aes_cbc(key, header.iv).encryptor()
    padder = padding.PKCS7(BLOCK_SIZE * 8).padder()

    outf.write(header.pack())
    for chunk in read_chunks(inf, config.chunk_size):
        outf.write(encryptor.update(padder.update(chunk)))
    outf.write(encryptor.update(padder.finalize()))
    outf.write(encryptor.finalize())
    return header


def _decrypt(inf: BinaryIO, outf: BinaryIO, secret: bytes, bits: int,
             config: CipherConfig) -> None:
    header = read_header(inf)
    key = derive_key(secret, header.salt, bits // 8, config.kdf)

    decryptor = _aes_cbc(key, header.iv).decryptor()
    unpadder = padding.PKCS7(BLOCK_SIZE * 8).unpadder()
    try:
        for chunk in read_chunks(inf, config.chunk_size):
            outf.write(unpadder.update(decryptor.update(chunk)))
        outf.write(unpadder.update(decryptor.finalize()))
        outf.write(unpadder.finalize())
    except ValueError:
        # ragged ciphertext and bad padding are reported identically
        raise IntegrityFailureError(INTEGRITY_MESSAGE) from None


def encrypt_stream(
    inf: BinaryIO,
    outf: BinaryIO,
    password,
    key_size_bits: Optional[int] = None,
    salt: Optional[bytes] = None,
    config: Optional[CipherConfig] = None,
) -> ContainerHeader:
    """
    Encrypt everything readable from ``inf`` and write the container to ``outf``.

    Returns the header (salt and iv) that was written.
    """
    config = config or CipherConfig()
    secret, bits = _check_params(password, key_size_bits, salt, config)
    return _encrypt(inf, outf, secret, bits, salt, config)


def decrypt_stream(
    inf: BinaryIO,
    outf: BinaryIO,
    password,
    key_size_bits: Optional[int] = None,
    config: Optional[CipherConfig] = None,
) -> None:
    """
    Decrypt a container read from ``inf`` into ``outf``.

    Plaintext is written as it is produced; the padding check happens at the
    end, so on IntegrityFailureError the caller must discard ``outf``.
    :func:`decrypt_file` and :func:`decrypt_bytes` do that for you.
    """
    config = config or CipherConfig()
    secret, bits = _check_params(password, key_size_bits, None, config)
    _decrypt(inf, outf, secret, bits, config)


def encrypt_file(
    in_path: str | Path,
    out_path: str | Path,
    password,
    key_size_bits: Optional[int] = None,
    salt: Optional[bytes] = None,
    config: Optional[CipherConfig] = None,
) -> ContainerHeader:
    config = config or CipherConfig()
    secret, bits = _check_params(password, key_size_bits, salt, config)
    logger.debug("encrypting %s -> %s (AES-%d-CBC)", in_path, out_path, bits)

    with open_input(in_path) as inf, atomic_output(out_path) as outf:
        return _encrypt(inf, outf, secret, bits, salt, config)


def decrypt_file(
    in_path: str | Path,
    out_path: str | Path,
    password,
    key_size_bits: Optional[int] = None,
    config: Optional[CipherConfig] = None,
) -> None:
    config = config or CipherConfig()
    secret, bits = _check_params(password, key_size_bits, None, config)
    logger.debug("decrypting %s -> %s (AES-%d-CBC)", in_path, out_path, bits)

    with open_input(in_path) as inf, atomic_output(out_path) as outf:
        _decrypt(inf, outf, secret, bits, config)


def encrypt_bytes(
    data: bytes,
    password,
    key_size_bits: Optional[int] = None,
    salt: Optional[bytes] = None,
    config: Optional[CipherConfig] = None,
) -> bytes:
    out = BytesIO()
    encrypt_stream(BytesIO(data), out, password, key_size_bits, salt, config)
    return out.getvalue()


def decrypt_bytes(
    blob: bytes,
    password,
    key_size_bits: Optional[int] = None,
    config: Optional[CipherConfig] = None,
) -> bytes:
    out = BytesIO()
    decrypt_stream(BytesIO(blob), out, password, key_size_bits, config)
    return out.getvalue()
