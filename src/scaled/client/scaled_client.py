"""Session facade over the settlement and router contracts."""

from __future__ import annotations

import logging
from typing import Callable, Sequence

from ..application.settlement.aggregation import aggregate_update_signatures
from ..application.settlement.post_encoder import encode_post_calldata
from ..application.settlement.validators import (
    validate_amount,
    validate_batch,
    validate_index,
)
from ..application.shared.receipts import registration_message, withdrawal_message
from ..crypto.bls import aggregate, new_bls_signer
from ..domain.entities import Account, Batch, Update
from ..domain.shared import (
    Aggregator,
    BlsSignerProtocol,
    PendingTransactionProtocol,
    RouterContractProtocol,
    SettlementContractProtocol,
    TokenContractProtocol,
    TransactionReceipt,
    TransactionSignerProtocol,
)
from ..envs.client_env import Settings
from ..infrastructure.chain.contracts import (
    RouterContract,
    SettlementContract,
    TokenContract,
)
from ..infrastructure.chain.signer import Web3TransactionSigner, build_web3
from ..infrastructure.timing import log_timing

logger = logging.getLogger(__name__)


class ScaledClient:
    """One participant's session with a settlement and a router contract.

    Every mutating call returns as soon as its transaction is broadcast,
    except `register()`, which waits for inclusion. Nothing is retried: a
    `ChainError` (revert, stale nonce, provider failure) reaches the caller.
    """

    def __init__(
        self,
        signer: TransactionSignerProtocol,
        bls_signer: BlsSignerProtocol,
        state: SettlementContractProtocol,
        router: RouterContractProtocol,
        *,
        aggregator: Aggregator = aggregate,
        token_factory: Callable[[str], TokenContractProtocol] = TokenContract,
    ) -> None:
        self.signer = signer
        self.bls_signer = bls_signer
        self.state = state
        self.router = router
        self._aggregator = aggregator
        self._token_factory = token_factory

    @classmethod
    def from_settings(cls, settings: Settings) -> "ScaledClient":
        """Wire a client to a JSON-RPC node from validated settings."""
        w3 = build_web3(settings.rpc_url)
        signer = Web3TransactionSigner(
            w3,
            settings.private_key,
            chain_id=settings.chain_id,
            receipt_timeout=settings.receipt_timeout,
        )
        return cls(
            signer=signer,
            bls_signer=new_bls_signer(settings.bls_domain, settings.bls_secret_hex),
            state=SettlementContract(settings.state_address, w3),
            router=RouterContract(settings.router_address, w3),
        )

    async def _submit(self, to: str, data: bytes) -> PendingTransactionProtocol:
        return await self.signer.send_transaction({"to": to, "data": data, "value": 0})

    async def register(self) -> TransactionReceipt:
        """Bind the signer's address to its BLS public key and wait for inclusion."""
        address = self.signer.address
        signature = self.bls_signer.sign(registration_message(address))
        data = self.state.encode_register(address, self.bls_signer.pubkey, signature)
        pending = await self._submit(self.state.address, data)
        receipt = await pending.wait()
        logger.info("Registered BLS key for %s", address)
        return receipt

    async def fund_account(
        self, user_index: int, amount: int
    ) -> PendingTransactionProtocol:
        """Move `amount` tokens into the account's balance via the router.

        The router must already hold a token allowance (see `approve_router`).
        """
        validate_index(user_index)
        validate_amount(amount)
        data = self.router.encode_fund_account(user_index, amount)
        return await self._submit(self.router.address, data)

    async def deposit_security(
        self, user_index: int, amount: int
    ) -> PendingTransactionProtocol:
        """Move `amount` tokens into the account's security deposit via the router."""
        validate_index(user_index)
        validate_amount(amount)
        data = self.router.encode_deposit_security(user_index, amount)
        return await self._submit(self.router.address, data)

    async def approve_router(self, amount: int) -> PendingTransactionProtocol:
        """Allow the router to pull `amount` collateral tokens from the signer."""
        validate_amount(amount)
        token = self._token_factory(await self.get_token())
        data = token.encode_approve(self.router.address, amount)
        return await self._submit(token.address, data)

    async def init_withdraw(
        self, user_index: int, amount: int
    ) -> PendingTransactionProtocol:
        """Sign and submit a withdrawal intent for the account's next nonce.

        If the nonce moves between the read and inclusion, the contract rejects
        the transaction and the caller has to start over.
        """
        validate_index(user_index)
        validate_amount(amount)
        account = await self.state.accounts(user_index)
        signature = self.bls_signer.sign(withdrawal_message(account.nonce + 1, amount))
        data = self.state.encode_init_withdraw(user_index, amount, signature)
        return await self._submit(self.state.address, data)

    async def process_withdrawal(self, user_index: int) -> PendingTransactionProtocol:
        """Finalize a withdrawal whose on-chain delay has elapsed."""
        validate_index(user_index)
        data = self.state.encode_process_withdrawal(user_index)
        return await self._submit(self.state.address, data)

    @log_timing("post")
    async def post(
        self, a_index: int, updates: Sequence[Update]
    ) -> PendingTransactionProtocol:
        """Settle signed receipts initiated by `a_index` in one transaction.

        Raises:
            BatchValidationError: Before anything is aggregated or submitted.
            ChainError: If the transaction cannot be broadcast.
        """
        validate_batch(a_index, updates)
        batch = Batch(a_index=a_index, updates=tuple(updates))
        aggregated = aggregate_update_signatures(batch.updates, self._aggregator)
        data = encode_post_calldata(batch.a_index, batch.updates, aggregated)
        pending = await self._submit(self.state.address, data)
        logger.info(
            "Posted %d updates for account %d (%d bytes)",
            len(batch.updates),
            batch.a_index,
            len(data),
        )
        return pending

    async def get_account(self, user_index: int) -> Account:
        return await self.state.accounts(user_index)

    async def get_token(self) -> str:
        return await self.state.token()
