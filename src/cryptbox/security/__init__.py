"""Security helpers: randomness, KDF, password-based file encryption and DH for cryptbox.

This package provides:
- scrypt (or Argon2id) key derivation with fixed cost parameters
- AES-CBC streaming encryption into a ``salt || iv || ciphertext`` container
- finite-field Diffie-Hellman over named MODP groups or supplied parameters
"""

from .prng import random_bytes, random_int, random_uuid
from .kdf import generate_salt, derive_key, derive_raw
from .cipher import (
    encrypt_file,
    decrypt_file,
    encrypt_stream,
    decrypt_stream,
    encrypt_bytes,
    decrypt_bytes,
)
from .dh import Generate, Restore, ExchangeResult, build_request, compute_secret, exchange, generate

__all__ = [
    "random_bytes",
    "random_int",
    "random_uuid",
    "generate_salt",
    "derive_key",
    "derive_raw",
    "encrypt_file",
    "decrypt_file",
    "encrypt_stream",
    "decrypt_stream",
    "encrypt_bytes",
    "decrypt_bytes",
    "Generate",
    "Restore",
    "ExchangeResult",
    "build_request",
    "compute_secret",
    "exchange",
    "generate",
]
