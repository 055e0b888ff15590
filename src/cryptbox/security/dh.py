"""Finite-field Diffie-Hellman key agreement.

Two request shapes are supported:

- ``Generate(group)``: pick a named MODP group, draw a private key and
  compute ``public = g^priv mod p``.
- ``Restore(prime, generator, private_key, peer_public_key)``: rebuild our
  own key pair from supplied values and compute
  ``secret = peer_public^priv mod p``. All four values are required.

Supplied primes are trusted as given: they are checked for shape (positive,
larger than the generator) but never tested for primality. With
``DHConfig(strict=True)`` keys outside the usable range are also rejected.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Tuple, Union
import logging

from ..core.config import DHConfig
from ..core.encoding import encode_bytes, int_to_bytes
from ..core.exceptions import (
    ComputationFailureError,
    InvalidGroupParametersError,
    InvalidParameterError,
    MissingParameterError,
)
from .prng import random_int


logger = logging.getLogger(__name__)

# RFC 2409 section 6.2, 1024-bit MODP group (Oakley group 2)
MODP2_PRIME_HEX = (
    "FFFFFFFFFFFFFFFFC90FDAA22168C234C4C6628B80DC1CD129024E088A67CC74"
    "020BBEA63B139B22514A08798E3404DDEF9519B3CD3A431B302B0A6DF25F1437"
    "4FE1356D6D51C245E485B576625E7EC6F44C42E9A637ED6B0BFF5CB6F406B7ED"
    "EE386BFB5A899FA5AE9F24117C4B1FE649286651ECE65381FFFFFFFFFFFFFFFF"
)

# RFC 3526 section 3, 2048-bit MODP group
MODP14_PRIME_HEX = (
    "FFFFFFFFFFFFFFFFC90FDAA22168C234C4C6628B80DC1CD129024E088A67CC74"
    "020BBEA63B139B22514A08798E3404DDEF9519B3CD3A431B302B0A6DF25F1437"
    "4FE1356D6D51C245E485B576625E7EC6F44C42E9A637ED6B0BFF5CB6F406B7ED"
    "EE386BFB5A899FA5AE9F24117C4B1FE649286651ECE45B3DC2007CB8A163BF05"
    "98DA48361C55D39A69163FA8FD24CF5F83655D23DCA3AD961C62F356208552BB"
    "9ED529077096966D670C354E4ABC9804F1746C08CA18217C32905E462E36CE3B"
    "E39E772C180E86039B2783A2EC07A28FB5C55DF06F4C52C9DE2BCBF695581718"
    "3995497CEA956AE515D2261898FA051015728E5A8AACAA68FFFFFFFFFFFFFFFF"
)

# RFC 3526 section 4, 3072-bit MODP group
MODP15_PRIME_HEX = (
    "FFFFFFFFFFFFFFFFC90FDAA22168C234C4C6628B80DC1CD129024E088A67CC74"
    "020BBEA63B139B22514A08798E3404DDEF9519B3CD3A431B302B0A6DF25F1437"
    "4FE1356D6D51C245E485B576625E7EC6F44C42E9A637ED6B0BFF5CB6F406B7ED"
    "EE386BFB5A899FA5AE9F24117C4B1FE649286651ECE45B3DC2007CB8A163BF05"
    "98DA48361C55D39A69163FA8FD24CF5F83655D23DCA3AD961C62F356208552BB"
    "9ED529077096966D670C354E4ABC9804F1746C08CA18217C32905E462E36CE3B"
    "E39E772C180E86039B2783A2EC07A28FB5C55DF06F4C52C9DE2BCBF695581718"
    "3995497CEA956AE515D2261898FA051015728E5A8AAAC42DAD33170D04507A33"
    "A85521ABDF1CBA64ECFB850458DBEF0A8AEA71575D060C7DB3970F85A6E1E4C7"
    "ABF5AE8CDB0933D71E8C94E04A25619DCEE3D2261AD2EE6BF12FFA06D98A0864"
    "D87602733EC86A64521F2B18177B200CBBE117577A615D6C770988C0BAD946E2"
    "08E24FA074E5AB3143DB5BFCE0FD108E4B82D120A93AD2CAFFFFFFFFFFFFFFFF"
)

GROUPS: Dict[str, Tuple[int, int]] = {
    "modp2": (int(MODP2_PRIME_HEX, 16), 2),
    "modp14": (int(MODP14_PRIME_HEX, 16), 2),
    "modp15": (int(MODP15_PRIME_HEX, 16), 2),
}


@dataclass(frozen=True)
class Generate:
    group: str = "modp14"


@dataclass(frozen=True)
class Restore:
    prime: int
    generator: int
    private_key: int
    peer_public_key: int


ExchangeRequest = Union[Generate, Restore]


@dataclass(frozen=True)
class ExchangeResult:
    prime: int
    generator: int
    public_key: int
    private_key: int
    shared_secret: Optional[int] = None

    def to_dict(self, encoding: str = "hex") -> Dict[str, str]:
        """Encode every value as big-endian bytes in ``encoding``.

        The secret is left-padded to the byte length of the prime.
        """
        prime_len = (self.prime.bit_length() + 7) // 8
        out = {
            "prime": encode_bytes(int_to_bytes(self.prime), encoding),
            "generator": encode_bytes(int_to_bytes(self.generator), encoding),
            "publicKey": encode_bytes(int_to_bytes(self.public_key), encoding),
            "privateKey": encode_bytes(int_to_bytes(self.private_key), encoding),
        }
        if self.shared_secret is not None:
            out["secret"] = encode_bytes(
                int_to_bytes(self.shared_secret, prime_len), encoding
            )
        return out


def get_group(name: str) -> Tuple[int, int]:
    try:
        return GROUPS[name]
    except KeyError:
        raise InvalidParameterError(
            f"unknown Diffie-Hellman group: {name!r} (expected one of {sorted(GROUPS)})"
        ) from None


def validate_parameters(prime: int, generator: int) -> None:
    if prime < 3:
        raise InvalidGroupParametersError("prime must be an integer greater than 2")
    if generator < 2 or generator >= prime:
        raise InvalidGroupParametersError("generator must satisfy 2 <= generator < prime")


def _mod_exp(base: int, exponent: int, modulus: int) -> int:
    try:
        return pow(base, exponent, modulus)
    except (ValueError, ArithmeticError) as exc:
        raise ComputationFailureError(f"modular exponentiation failed: {exc}") from exc


def _require_ints(values: Dict[str, object]) -> None:
    missing = [name for name, value in values.items() if value is None]
    if missing:
        raise MissingParameterError(
            "restoring a key exchange requires prime, generator, private_key "
            f"and peer_public_key; missing: {', '.join(missing)}"
        )
    for name, value in values.items():
        # bool is an int subclass but never a meaningful key or modulus
        if not isinstance(value, int) or isinstance(value, bool):
            raise InvalidParameterError(f"{name} must be an integer, got {type(value).__name__}")


def _check_keys(prime: int, private_key: int, peer_public_key: int, strict: bool) -> None:
    if private_key < 1 or peer_public_key < 1:
        raise InvalidParameterError("keys must be positive integers")
    if not strict:
        return
    if private_key > prime - 1:
        raise InvalidParameterError("private key must be smaller than the prime")
    # 1 and p-1 would force the secret into {1, p-1}
    if not 2 <= peer_public_key <= prime - 2:
        raise InvalidParameterError("peer public key is outside [2, prime - 2]")


def generate(group: Optional[str] = None, config: Optional[DHConfig] = None) -> ExchangeResult:
    """Draw a fresh key pair in the named group (``config.group`` by default)."""
    config = config or DHConfig()
    group = group or config.group
    prime, generator = get_group(group)
    private_key = random_int(2, prime - 1)
    public_key = _mod_exp(generator, private_key, prime)
    logger.debug("generated %d-bit key pair in group %s", prime.bit_length(), group)
    return ExchangeResult(
        prime=prime,
        generator=generator,
        public_key=public_key,
        private_key=private_key,
    )


def compute_secret(
    prime: int,
    generator: int,
    private_key: int,
    peer_public_key: int,
    config: Optional[DHConfig] = None,
) -> ExchangeResult:
    """
    Rebuild our key pair from (prime, generator, private_key) and combine it
    with the peer's public key. ``public_key`` in the result is our own.
    """
    config = config or DHConfig()
    _require_ints({
        "prime": prime,
        "generator": generator,
        "private_key": private_key,
        "peer_public_key": peer_public_key,
    })
    validate_parameters(prime, generator)
    _check_keys(prime, private_key, peer_public_key, config.strict)

    public_key = _mod_exp(generator, private_key, prime)
    secret = _mod_exp(peer_public_key, private_key, prime)
    logger.debug("computed shared secret over %d-bit prime", prime.bit_length())
    return ExchangeResult(
        prime=prime,
        generator=generator,
        public_key=public_key,
        private_key=private_key,
        shared_secret=secret,
    )


def build_request(
    group: Optional[str] = None,
    prime: Optional[int] = None,
    generator: Optional[int] = None,
    private_key: Optional[int] = None,
    peer_public_key: Optional[int] = None,
) -> ExchangeRequest:
    """
    Turn loosely supplied values into an ExchangeRequest.

    Supplying any restore value makes all four required; a partial set
    raises MissingParameterError naming the absent ones.
    """
    supplied = {
        "prime": prime,
        "generator": generator,
        "private_key": private_key,
        "peer_public_key": peer_public_key,
    }
    if all(value is None for value in supplied.values()):
        return Generate(group or DHConfig().group)

    _require_ints(supplied)
    return Restore(prime, generator, private_key, peer_public_key)


def exchange(request: ExchangeRequest, config: Optional[DHConfig] = None) -> ExchangeResult:
    if isinstance(request, Generate):
        return generate(request.group, config)
    if isinstance(request, Restore):
        return compute_secret(
            request.prime,
            request.generator,
            request.private_key,
            request.peer_public_key,
            config,
        )
    raise InvalidParameterError(f"unsupported exchange request: {request!r}")
