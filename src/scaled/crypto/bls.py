"""BLS signatures over BN254 (alt_bn128) for the settlement contract.

Signatures live on G1 and public keys on G2, matching the EVM pairing
precompile. Curve arithmetic comes from `py_ecc`; this module only fixes the
encodings the contract expects:

  - a signature is `(x, y)` as two uint256 words;
  - a public key is `(x_imag, x_real, y_imag, y_real)`;
  - messages are mapped to G1 as in RFC 9380: keccak256 expand_message_xmd
    to 96 bytes, two field elements, each sent through the simplified SWU
    map, and the two points added.
"""

from __future__ import annotations

import logging
import secrets
from typing import Optional, Sequence, Tuple

from eth_utils import keccak
from py_ecc.optimized_bn128 import (
    FQ,
    G2,
    Z1,
    add,
    b,
    curve_order,
    field_modulus,
    is_inf,
    is_on_curve,
    multiply,
    normalize,
)

from ..domain.entities import SolG1, SolG2
from ..domain.errors import SigningError

logger = logging.getLogger(__name__)

DOMAIN_SIZE = 32
_P = field_modulus
_KECCAK_BLOCK_SIZE = 136

# Simplified SWU constants for y^2 = x^3 + 3 with Z = 1.
_SWU_C1 = 4
_SWU_C2 = (_P - 1) // 2
_SWU_C3 = pow((_P - 4) * 3 % _P, (_P + 1) // 4, _P)
if _SWU_C3 % 2 == 1:
    _SWU_C3 = _P - _SWU_C3
_SWU_C4 = 4 * (_P - 4) * pow(3, _P - 2, _P) % _P


def expand_message_xmd(domain: bytes, message: bytes, length: int = 96) -> bytes:
    """Expand `message` to `length` uniform bytes with keccak256 under `domain`."""
    if not 0 < len(domain) < 256:
        raise SigningError(f"Domain tag must be 1-255 bytes, got {len(domain)}")
    dst_prime = domain + bytes([len(domain)])
    b0 = keccak(
        bytes(_KECCAK_BLOCK_SIZE)
        + message
        + length.to_bytes(2, "big")
        + b"\x00"
        + dst_prime
    )
    blocks = [keccak(b0 + b"\x01" + dst_prime)]
    for i in range(2, (length + 31) // 32 + 1):
        mixed = bytes(x ^ y for x, y in zip(b0, blocks[-1]))
        blocks.append(keccak(mixed + bytes([i]) + dst_prime))
    return b"".join(blocks)[:length]


def hash_to_field(domain: bytes, message: bytes) -> Tuple[int, int]:
    uniform = expand_message_xmd(domain, message)
    return (
        int.from_bytes(uniform[:48], "big") % _P,
        int.from_bytes(uniform[48:], "big") % _P,
    )


def _sqrt(n: int) -> Optional[int]:
    """Square root mod p (p = 3 mod 4), or None for a non-residue."""
    if n == 0:
        return 0
    if pow(n, (_P - 1) // 2, _P) != 1:
        return None
    return pow(n, (_P + 1) // 4, _P)


def map_to_g1(u: int) -> SolG1:
    """Simplified SWU map of a field element onto G1; y takes the parity of u."""
    if not 0 <= u < _P:
        raise SigningError("Field element out of range")
    tv1 = u * u * _SWU_C1 % _P
    tv2 = (1 + tv1) % _P
    tv1 = (1 - tv1) % _P
    tv3 = tv1 * tv2 % _P
    if tv3 == 0:
        raise SigningError("Field element maps to an exceptional point")
    tv3_inv = pow(tv3, _P - 2, _P)
    tv5 = u * tv1 * tv3_inv * _SWU_C3 % _P
    tv8 = tv2 * tv2 * tv3_inv % _P
    candidates = (
        (_SWU_C2 - tv5) % _P,
        (_SWU_C2 + tv5) % _P,
        (1 + _SWU_C4 * tv8 * tv8) % _P,
    )
    for x in candidates:
        y = _sqrt((pow(x, 3, _P) + 3) % _P)
        if y is not None:
            break
    else:
        raise SigningError("No curve point for field element")
    if u % 2 != y % 2:
        y = (_P - y) % _P
    return x, y


def hash_to_point(domain: bytes, message: bytes) -> SolG1:
    """Map a message to a G1 point under `domain`."""
    u0, u1 = hash_to_field(domain, message)
    point = add(_to_jacobian(map_to_g1(u0)), _to_jacobian(map_to_g1(u1)))
    return _to_sol_g1(point)


def _to_jacobian(point: SolG1):
    x, y = point
    if (x, y) == (0, 0):
        return Z1
    jacobian = (FQ(x), FQ(y), FQ.one())
    if not is_on_curve(jacobian, b):
        raise SigningError(f"Signature ({x}, {y}) is not on G1")
    return jacobian


def _to_sol_g1(point) -> SolG1:
    if is_inf(point):
        return 0, 0
    x, y = normalize(point)
    return int(x), int(y)


def aggregate(signatures: Sequence[SolG1]) -> SolG1:
    """Sum G1 signatures into one aggregate signature.

    The point at infinity is encoded as `(0, 0)`.

    Raises:
        SigningError: If there is nothing to aggregate or a point is invalid.
    """
    if not signatures:
        raise SigningError("No signatures to aggregate")
    acc = Z1
    for signature in signatures:
        acc = add(acc, _to_jacobian(signature))
    return _to_sol_g1(acc)


class BlsSigner:
    """A BLS secret key bound to a 32-byte protocol domain."""

    def __init__(self, domain: bytes, secret: int) -> None:
        if len(domain) != DOMAIN_SIZE:
            raise SigningError(
                f"BLS domain must be {DOMAIN_SIZE} bytes, got {len(domain)}"
            )
        if not 0 < secret < curve_order:
            raise SigningError("BLS secret is outside the curve order")
        self.domain = bytes(domain)
        self._secret = secret
        self._pubkey: Optional[SolG2] = None

    @property
    def pubkey(self) -> SolG2:
        if self._pubkey is None:
            x, y = normalize(multiply(G2, self._secret))
            x_real, x_imag = (int(c) for c in x.coeffs)
            y_real, y_imag = (int(c) for c in y.coeffs)
            self._pubkey = (x_imag, x_real, y_imag, y_real)
        return self._pubkey

    def sign(self, message: bytes) -> SolG1:
        point = _to_jacobian(hash_to_point(self.domain, message))
        signature = _to_sol_g1(multiply(point, self._secret))
        logger.debug("BLS-signed %d-byte message", len(message))
        return signature


def new_bls_signer(domain: bytes, secret_hex: Optional[str] = None) -> BlsSigner:
    """Build a signer for `domain`, from `secret_hex` or a fresh random key.

    Raises:
        SigningError: If the domain or the secret is malformed.
    """
    if secret_hex is None:
        secret = secrets.randbelow(curve_order - 1) + 1
    else:
        try:
            secret = int(secret_hex, 16)
        except ValueError as e:
            raise SigningError(f"Invalid BLS secret hex: {e}") from e
    return BlsSigner(domain, secret)
