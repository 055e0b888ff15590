"""
Command line front end for cryptbox.

Subcommands:
    prng            random bytes, int or uuid
    scrypt          derive a key from a password and salt
    cipher          encrypt a file into a salt || iv || ciphertext container
    decipher        decrypt such a container
    hash            digest of a file
    hmac            HMAC of a file
    diffie-hellman  generate a key pair, or compute a shared secret

Usage:
    cryptbox cipher --password p@ss --size 256 --input notes.txt --output notes.enc
    cryptbox diffie-hellman --group modp14

The password may also come from the CRYPTBOX_PASSWORD environment variable.
Exit code is 0 on success, 1 on a cryptbox error and 2 on a usage error.
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from typing import Optional, Sequence

from cryptbox.core.config import KEY_SIZES_BITS, Settings, load_settings
from cryptbox.core.encoding import ENCODINGS, bytes_to_int, decode_text, encode_bytes
from cryptbox.core.exceptions import CryptboxError
from cryptbox.core.hashing import file_digest, file_hmac
from cryptbox.frontend.cli.logging_config import configure_logging
from cryptbox.security.cipher import decrypt_file, encrypt_file
from cryptbox.security.dh import GROUPS, build_request, exchange
from cryptbox.security.kdf import derive_raw
from cryptbox.security.prng import PRNG_TYPES, generate


logger = logging.getLogger(__name__)

PASSWORD_ENV = "CRYPTBOX_PASSWORD"


def _password(args) -> Optional[str]:
    return args.password if args.password is not None else os.environ.get(PASSWORD_ENV)


def _decode_int(value: Optional[str], encoding: str) -> Optional[int]:
    if value is None:
        return None
    return bytes_to_int(decode_text(value, encoding))


# ----------------------------------------------------------------------
# Command handlers
# ----------------------------------------------------------------------

def cmd_prng(args, settings: Settings) -> None:
    encoding = args.encoding or settings.output.encoding
    print(generate(args.type, args.size, args.min, args.max, encoding))


def cmd_scrypt(args, settings: Settings) -> None:
    encoding = args.encoding or settings.output.encoding
    salt = decode_text(args.salt, args.salt_encoding)
    key = derive_raw(_password(args), salt, args.size, settings.cipher.kdf)
    print(encode_bytes(key, encoding))


def cmd_cipher(args, settings: Settings) -> None:
    salt = decode_text(args.salt, "hex") if args.salt is not None else None
    encrypt_file(
        args.input,
        args.output,
        _password(args),
        key_size_bits=args.size,
        salt=salt,
        config=settings.cipher,
    )
    logger.info("encrypted %s -> %s", args.input, args.output)


def cmd_decipher(args, settings: Settings) -> None:
    decrypt_file(
        args.input,
        args.output,
        _password(args),
        key_size_bits=args.size,
        config=settings.cipher,
    )
    logger.info("decrypted %s -> %s", args.input, args.output)


def cmd_hash(args, settings: Settings) -> None:
    encoding = args.encoding or settings.output.encoding
    print(file_digest(args.input, args.algorithm, encoding))


def cmd_hmac(args, settings: Settings) -> None:
    encoding = args.encoding or settings.output.encoding
    print(file_hmac(args.input, args.key, args.algorithm, encoding))


def cmd_diffie_hellman(args, settings: Settings) -> None:
    encoding = args.encoding or settings.output.encoding
    request = build_request(
        group=args.group or settings.dh.group,
        prime=_decode_int(args.prime, args.prime_encoding),
        generator=_decode_int(args.generator, args.generator_encoding),
        private_key=_decode_int(args.private_key, args.private_key_encoding),
        peer_public_key=_decode_int(args.public_key, args.public_key_encoding),
    )
    result = exchange(request, settings.dh)
    print(json.dumps(result.to_dict(encoding), indent=2))


# ----------------------------------------------------------------------
# Parser
# ----------------------------------------------------------------------

def _add_encoding(parser, dest="encoding", flags=("--encoding", "--enc"), default=None):
    parser.add_argument(*flags, dest=dest, type=str.lower, choices=ENCODINGS, default=default)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="cryptbox", description="Local cryptographic utilities")
    parser.add_argument("-v", "--verbose", action="store_true", help="enable debug logging")
    sub = parser.add_subparsers(dest="command", metavar="command")
    sub.required = True

    p = sub.add_parser("prng", help="Generate a random output")
    p.add_argument("--type", required=True, choices=PRNG_TYPES)
    p.add_argument("--size", type=int, default=16, help="bytes to output (type=bytes)")
    p.add_argument("--min", type=int, default=0, help="minimum int, inclusive (type=int)")
    p.add_argument("--max", type=int, default=100, help="maximum int, exclusive (type=int)")
    _add_encoding(p)
    p.set_defaults(func=cmd_prng)

    p = sub.add_parser("scrypt", help="Derive a key from a password and salt")
    p.add_argument("--password", "-p")
    p.add_argument("--salt", "-s", required=True)
    _add_encoding(p, dest="salt_encoding", flags=("--salt-encoding",), default="utf8")
    p.add_argument("--size", type=int, default=64, help="key length in bytes")
    _add_encoding(p)
    p.set_defaults(func=cmd_scrypt)

    p = sub.add_parser("cipher", help="Encrypt a file with a password")
    p.add_argument("--password", "-p")
    p.add_argument("--salt", "-s", help="16-byte salt as hex (random when omitted)")
    p.add_argument("--size", type=int, choices=KEY_SIZES_BITS, default=None, help="key size in bits")
    p.add_argument("--input", "-i", required=True)
    p.add_argument("--output", "-o", required=True)
    p.set_defaults(func=cmd_cipher)

    p = sub.add_parser("decipher", help="Decrypt a file with a password")
    p.add_argument("--password", "-p")
    p.add_argument("--size", type=int, choices=KEY_SIZES_BITS, default=None, help="key size in bits")
    p.add_argument("--input", "-i", required=True)
    p.add_argument("--output", "-o", required=True)
    p.set_defaults(func=cmd_decipher)

    p = sub.add_parser("hash", help="Hash a file")
    p.add_argument("--algorithm", "-a", default="sha256")
    p.add_argument("--input", "-i", required=True)
    _add_encoding(p)
    p.set_defaults(func=cmd_hash)

    p = sub.add_parser("hmac", help="HMAC a file with a key")
    p.add_argument("--algorithm", "-a", default="sha256")
    p.add_argument("--key", "-k", required=True)
    p.add_argument("--input", "-i", required=True)
    _add_encoding(p)
    p.set_defaults(func=cmd_hmac)

    p = sub.add_parser("diffie-hellman", help="Diffie-Hellman key exchange")
    p.add_argument("--group", choices=sorted(GROUPS), default=None)
    for name in ("prime", "generator", "public-key", "private-key"):
        p.add_argument(f"--{name}")
        _add_encoding(
            p,
            dest=f"{name.replace('-', '_')}_encoding",
            flags=(f"--{name}-encoding",),
            default="hex",
        )
    _add_encoding(p)
    p.set_defaults(func=cmd_diffie_hellman)

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(logging.DEBUG if args.verbose else logging.WARNING)

    try:
        settings = load_settings()
        args.func(args, settings)
    except CryptboxError as e:
        print(f"cryptbox: error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
