from __future__ import annotations

from eth_utils import to_canonical_address

from ...crypto.packing import pack_uints
from ...domain.entities import Receipt, Update
from ...domain.shared import BlsSignerProtocol


def receipt_to_bytes(receipt: Receipt) -> bytes:
    """Canonical bytes both parties sign for a receipt.

    Packed, big-endian: uint64 a_index | uint64 b_index | uint128 amount |
    uint64 expires_by | uint64 seq_no.
    """
    return pack_uints(
        (receipt.a_index, 64),
        (receipt.b_index, 64),
        (receipt.amount, 128),
        (receipt.expires_by, 64),
        (receipt.seq_no, 64),
    )


def registration_message(address: str) -> bytes:
    """Message proving ownership of a BLS key: the packed 20-byte address."""
    return to_canonical_address(address)


def withdrawal_message(next_nonce: int, amount: int) -> bytes:
    """Message authorizing a withdrawal: uint64 nonce | uint128 amount."""
    return pack_uints((next_nonce, 64), (amount, 128))


def sign_update(
    receipt: Receipt,
    a_signer: BlsSignerProtocol,
    b_signer: BlsSignerProtocol,
) -> Update:
    """Have both parties sign `receipt` and bundle the result."""
    message = receipt_to_bytes(receipt)
    return Update(
        receipt=receipt,
        a_signature=a_signer.sign(message),
        b_signature=b_signer.sign(message),
    )
