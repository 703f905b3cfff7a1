"""Pure validation functions for settlement batches and collateral amounts.

These functions contain the rules checked before anything is signed or
submitted, so they can be tested in isolation without a signer or a node.
"""

from __future__ import annotations

from typing import Sequence

from ...domain.entities import UINT16_MAX, UINT64_MAX, UINT128_MAX, Update
from ...domain.errors import (
    BatchConsistencyError,
    BatchTooLargeError,
    EmptyBatchError,
    InvalidAmountError,
)


def validate_batch_size(updates: Sequence[Update]) -> None:
    """Validate that the update count fits the uint16 count field. Pure function.

    Raises:
        EmptyBatchError: If there are no updates.
        BatchTooLargeError: If there are more than 65535 updates.
    """
    if not updates:
        raise EmptyBatchError()
    if len(updates) > UINT16_MAX:
        raise BatchTooLargeError(len(updates), UINT16_MAX)


def validate_batch_consistency(a_index: int, updates: Sequence[Update]) -> None:
    """Validate that every update was initiated by `a_index`. Pure function.

    Raises:
        BatchConsistencyError: On the first update with a different a_index.
    """
    for position, update in enumerate(updates):
        if update.receipt.a_index != a_index:
            raise BatchConsistencyError(position, a_index, update.receipt.a_index)


def validate_batch(a_index: int, updates: Sequence[Update]) -> None:
    """Run every batch rule; size first, then consistency."""
    validate_index(a_index)
    validate_batch_size(updates)
    validate_batch_consistency(a_index, updates)


def validate_index(user_index: int) -> None:
    """Validate that an account index fits in uint64.

    Raises:
        ValueError: If the index is negative or too large.
    """
    if not 0 <= user_index <= UINT64_MAX:
        raise ValueError(f"Account index {user_index} does not fit in uint64")


def validate_amount(amount: int) -> None:
    """Validate a collateral, withdrawal or allowance amount.

    Zero is rejected because it would only burn gas.

    Raises:
        InvalidAmountError: If amount is not in [1, 2**128 - 1].
    """
    if amount <= 0:
        raise InvalidAmountError(f"Amount must be positive, got {amount}")
    if amount > UINT128_MAX:
        raise InvalidAmountError(f"Amount {amount} does not fit in uint128")
