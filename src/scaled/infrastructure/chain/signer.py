from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from eth_account import Account
from eth_account.messages import encode_defunct
from web3 import AsyncWeb3

from ...domain.errors import ChainError, SigningError
from ...domain.shared import TransactionReceipt, TransactionRequest
from ..timing import log_timing
from .transport import PROVIDER_ERRORS

logger = logging.getLogger(__name__)


def build_web3(rpc_url: str) -> AsyncWeb3:
    """Return an `AsyncWeb3` bound to a JSON-RPC HTTP endpoint."""
    return AsyncWeb3(AsyncWeb3.AsyncHTTPProvider(rpc_url))


class PendingTransaction:
    """A broadcast transaction; `wait()` blocks until it is mined."""

    def __init__(self, w3: AsyncWeb3, tx_hash: bytes, timeout: float) -> None:
        self._w3 = w3
        self._tx_hash = tx_hash
        self._timeout = timeout

    @property
    def tx_hash(self) -> bytes:
        return self._tx_hash

    async def wait(self) -> TransactionReceipt:
        try:
            receipt = await self._w3.eth.wait_for_transaction_receipt(
                self._tx_hash, timeout=self._timeout
            )
        except PROVIDER_ERRORS as e:
            raise ChainError(
                f"Transaction 0x{self._tx_hash.hex()} was not confirmed: {e}"
            ) from e
        if receipt["status"] != 1:
            raise ChainError(f"Transaction 0x{self._tx_hash.hex()} reverted")
        return receipt

    def __repr__(self) -> str:
        return f"PendingTransaction(0x{self._tx_hash.hex()})"


class Web3TransactionSigner:
    """Local-key signer that populates, signs and broadcasts transactions.

    Fields the caller leaves out (from, value, nonce, chainId, gas, gasPrice)
    are filled from the node before signing, like ethers' populateTransaction.
    """

    def __init__(
        self,
        w3: AsyncWeb3,
        private_key: str,
        *,
        chain_id: Optional[int] = None,
        receipt_timeout: float = 120.0,
    ) -> None:
        try:
            self._account = Account.from_key(private_key)
        except (ValueError, TypeError) as e:
            raise SigningError(f"Invalid private key: {e}") from e
        self._w3 = w3
        self._chain_id = chain_id
        self._receipt_timeout = receipt_timeout

    @property
    def address(self) -> str:
        return self._account.address

    def sign_message(self, message: bytes) -> bytes:
        signed = self._account.sign_message(encode_defunct(primitive=message))
        return bytes(signed.signature)

    async def populate_transaction(self, tx: TransactionRequest) -> Dict[str, Any]:
        populated: Dict[str, Any] = dict(tx)
        populated.setdefault("from", self.address)
        populated.setdefault("value", 0)
        if "nonce" not in populated:
            populated["nonce"] = await self._w3.eth.get_transaction_count(
                self.address, "pending"
            )
        if "chainId" not in populated:
            populated["chainId"] = (
                self._chain_id
                if self._chain_id is not None
                else await self._w3.eth.chain_id
            )
        if "gas" not in populated:
            populated["gas"] = await self._w3.eth.estimate_gas(populated)
        if "gasPrice" not in populated and "maxFeePerGas" not in populated:
            populated["gasPrice"] = await self._w3.eth.gas_price
        return populated

    @log_timing("send_transaction")
    async def send_transaction(self, tx: TransactionRequest) -> PendingTransaction:
        try:
            populated = await self.populate_transaction(tx)
            signed = self._account.sign_transaction(populated)
            tx_hash = await self._w3.eth.send_raw_transaction(signed.raw_transaction)
        except PROVIDER_ERRORS as e:
            raise ChainError(f"Transaction to {tx.get('to')} failed: {e}") from e
        logger.info("Submitted transaction 0x%s to %s", bytes(tx_hash).hex(), tx.get("to"))
        return PendingTransaction(self._w3, bytes(tx_hash), self._receipt_timeout)
