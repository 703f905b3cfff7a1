"""Protocol interfaces for the signers a settlement session depends on.

These protocols define the contract the client facade needs from a wallet and
from a BLS key. They enable dependency injection and make the facade testable
with in-memory implementations that never touch a network.
"""

from __future__ import annotations

from typing import Any, Callable, Mapping, Protocol, Sequence, TYPE_CHECKING

if TYPE_CHECKING:
    from ..entities import SolG1, SolG2

# A transaction request as understood by web3: "to", "data", "value", ...
TransactionRequest = Mapping[str, Any]
TransactionReceipt = Mapping[str, Any]


class PendingTransactionProtocol(Protocol):
    """Handle to a broadcast transaction that may not be included yet."""

    @property
    def tx_hash(self) -> bytes:
        """Hash of the broadcast transaction."""
        ...

    async def wait(self) -> TransactionReceipt:
        """Wait until the transaction is included.

        Returns:
            The transaction receipt

        Raises:
            ChainError: If the transaction reverted or never got included
        """
        ...


class TransactionSignerProtocol(Protocol):
    """Wallet capability: an address, message signing and transaction submission."""

    @property
    def address(self) -> str:
        """Checksummed externally-owned address of the signer."""
        ...

    def sign_message(self, message: bytes) -> bytes:
        """Sign an application-level message (not a BLS signature).

        Args:
            message: Raw bytes to sign

        Returns:
            The 65-byte recoverable signature
        """
        ...

    async def send_transaction(
        self, tx: "TransactionRequest"
    ) -> PendingTransactionProtocol:
        """Populate, sign and broadcast a transaction.

        Args:
            tx: Partial transaction request; at least "to" and "data"

        Returns:
            A pending transaction handle, returned as soon as it is broadcast
        """
        ...


class BlsSignerProtocol(Protocol):
    """BLS key bound to a protocol domain separator."""

    @property
    def pubkey(self) -> "SolG2":
        """Public key as four uint256 words."""
        ...

    def sign(self, message: bytes) -> "SolG1":
        """Sign `message` under the signer's domain.

        Returns:
            The signature as a G1 point (x, y)
        """
        ...


# Combines signature points into one; the input order is significant.
Aggregator = Callable[[Sequence["SolG1"]], "SolG1"]
