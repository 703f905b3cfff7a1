"""Domain-specific exceptions."""

from __future__ import annotations


class BatchValidationError(ValueError):
    """Raised when a settlement batch cannot be encoded."""


class EmptyBatchError(BatchValidationError):
    """Raised when a batch carries no updates."""

    def __init__(self) -> None:
        super().__init__("Batch must contain at least one update")


class BatchTooLargeError(BatchValidationError):
    """Raised when the update count does not fit the uint16 count field."""

    def __init__(self, count: int, limit: int) -> None:
        self.count = count
        self.limit = limit
        super().__init__(f"Batch has {count} updates, at most {limit} are allowed")


class BatchConsistencyError(BatchValidationError):
    """Raised when an update was not initiated by the batch's declared party."""

    def __init__(self, position: int, expected_a_index: int, actual_a_index: int):
        self.position = position
        self.expected_a_index = expected_a_index
        self.actual_a_index = actual_a_index
        super().__init__(
            f"Update {position} has a_index {actual_a_index}, "
            f"batch declares {expected_a_index}"
        )


class InvalidAmountError(ValueError):
    """Raised when a collateral or withdrawal amount is out of bounds."""


class ChainError(Exception):
    """Raised when the provider or a contract call fails."""


class SigningError(Exception):
    """Raised when a local or BLS signer cannot produce a signature."""
