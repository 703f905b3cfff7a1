"""Call-data encoding for the settlement contract's `post()` entry point.

`post()` takes no ABI arguments: its payload depends on the batch length, so
the contract parses the raw call data itself. Layout, big-endian:

    selector      4 bytes   keccak256("post()")[:4]
    a_index       8 bytes   uint64
    count         2 bytes   uint16
    signature    64 bytes   uint256 x, uint256 y
    per update   24 bytes   uint64 b_index, uint128 amount
"""

from __future__ import annotations

from typing import Final, Sequence

from eth_utils import function_signature_to_4byte_selector
from pydantic import BaseModel, ConfigDict

from ...crypto.packing import PackedReader, PackedWriter
from ...domain.entities import SolG1, Uint64, Uint128, Update
from .validators import validate_batch

POST_SIGNATURE: Final[str] = "post()"
POST_SELECTOR: Final[bytes] = function_signature_to_4byte_selector(POST_SIGNATURE)

HEADER_SIZE: Final[int] = 4 + 8 + 2 + 64
UPDATE_SIZE: Final[int] = 8 + 16


class SettledTransfer(BaseModel):
    """The part of a receipt that travels on-chain."""

    model_config = ConfigDict(frozen=True)

    b_index: Uint64
    amount: Uint128


class DecodedPost(BaseModel):
    """Fields recovered from `post()` call data."""

    model_config = ConfigDict(frozen=True)

    a_index: Uint64
    aggregated_signature: SolG1
    transfers: tuple[SettledTransfer, ...]

    @property
    def count(self) -> int:
        return len(self.transfers)


def encode_post_calldata(
    a_index: int,
    updates: Sequence[Update],
    aggregated_signature: SolG1,
) -> bytes:
    """Encode a settlement batch as `post()` call data. Pure function.

    Args:
        a_index: Index of the party that initiated every receipt
        updates: Non-empty, ordered updates to settle
        aggregated_signature: Aggregate of A/B signatures in update order

    Returns:
        The call data, selector included.

    Raises:
        EmptyBatchError: If `updates` is empty.
        BatchTooLargeError: If there are more than 65535 updates.
        BatchConsistencyError: If an update has a different a_index.
    """
    validate_batch(a_index, updates)

    x, y = aggregated_signature
    writer = PackedWriter()
    writer.write_bytes(POST_SELECTOR)
    writer.write_uint(a_index, 64)
    writer.write_uint(len(updates), 16)
    writer.write_uint(x, 256)
    writer.write_uint(y, 256)
    for update in updates:
        writer.write_uint(update.receipt.b_index, 64)
        writer.write_uint(update.receipt.amount, 128)
    return writer.getvalue()


def decode_post_calldata(data: bytes) -> DecodedPost:
    """Decode call data produced by `encode_post_calldata`.

    Raises:
        ValueError: If the selector is wrong or the length does not match the count.
    """
    reader = PackedReader(data)
    selector = reader.read_bytes(4)
    if selector != POST_SELECTOR:
        raise ValueError(f"Not a post() call: selector 0x{selector.hex()}")

    a_index = reader.read_uint(64)
    count = reader.read_uint(16)
    signature = (reader.read_uint(256), reader.read_uint(256))

    if reader.remaining != count * UPDATE_SIZE:
        raise ValueError(
            f"Call data declares {count} updates but carries "
            f"{reader.remaining} trailing bytes"
        )

    transfers = tuple(
        SettledTransfer(b_index=reader.read_uint(64), amount=reader.read_uint(128))
        for _ in range(count)
    )
    return DecodedPost(
        a_index=a_index,
        aggregated_signature=signature,
        transfers=transfers,
    )
