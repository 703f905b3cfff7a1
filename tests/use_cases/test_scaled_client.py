"""Use case tests for ScaledClient - in-memory signers and contracts, no node."""

from __future__ import annotations

import pytest
from eth_abi import decode
from eth_utils import function_signature_to_4byte_selector

from scaled.application.settlement.post_encoder import decode_post_calldata
from scaled.application.shared.receipts import (
    registration_message,
    sign_update,
    withdrawal_message,
)
from scaled.client.scaled_client import ScaledClient
from scaled.crypto.bls import BlsSigner, aggregate
from scaled.domain.entities import Account, Receipt
from scaled.domain.errors import (
    BatchConsistencyError,
    BatchTooLargeError,
    ChainError,
    EmptyBatchError,
    InvalidAmountError,
    SigningError,
)
from scaled.envs.client_env import Settings
from scaled.infrastructure.chain.contracts import RouterContract, SettlementContract
from scaled.infrastructure.chain.signer import Web3TransactionSigner
from tests.fixtures import (
    FakeBlsSigner,
    FakeTransactionSigner,
    InMemorySettlementContract,
    RecordingAggregator,
)


def _args(data: bytes, signature: str, types: list[str]) -> tuple:
    assert data[:4] == function_signature_to_4byte_selector(signature)
    return decode(types, data[4:])


# ============================================================================
# register
# ============================================================================


@pytest.mark.asyncio
async def test_register_waits_for_inclusion(
    client: ScaledClient,
    tx_signer: FakeTransactionSigner,
    bls_signer: FakeBlsSigner,
    state_address: str,
) -> None:
    receipt = await client.register()

    assert receipt["status"] == 1
    assert len(tx_signer.pending) == 1
    assert tx_signer.pending[0].waited is True

    tx = tx_signer.sent[0]
    assert tx["to"] == state_address
    assert tx["value"] == 0
    user, pubkey, signature = _args(
        tx["data"],
        "register(address,uint256[4],uint256[2])",
        ["address", "uint256[4]", "uint256[2]"],
    )
    assert user == tx_signer.address.lower()
    assert pubkey == bls_signer.pubkey
    assert bls_signer.signed == [registration_message(tx_signer.address)]
    assert signature == bls_signer.sign(registration_message(tx_signer.address))


@pytest.mark.asyncio
async def test_register_revert_raises_chain_error(
    client: ScaledClient, tx_signer: FakeTransactionSigner
) -> None:
    tx_signer.receipt_status = 0

    with pytest.raises(ChainError, match="reverted"):
        await client.register()


@pytest.mark.asyncio
async def test_register_signing_failure_submits_nothing(
    tx_signer: FakeTransactionSigner,
    state: InMemorySettlementContract,
    router: RouterContract,
) -> None:
    failure = SigningError("BLS key unavailable")
    client = ScaledClient(tx_signer, FakeBlsSigner(fail_with=failure), state, router)

    with pytest.raises(SigningError) as exc_info:
        await client.register()
    assert exc_info.value is failure
    assert tx_signer.sent == []


# ============================================================================
# Collateral
# ============================================================================


@pytest.mark.asyncio
async def test_fund_account_returns_without_waiting(
    client: ScaledClient, tx_signer: FakeTransactionSigner, router_address: str
) -> None:
    pending = await client.fund_account(5, 1000)

    assert pending is tx_signer.pending[0]
    assert pending.waited is False
    tx = tx_signer.sent[0]
    assert tx["to"] == router_address
    assert tx["value"] == 0
    assert _args(
        tx["data"], "fundAccount(uint64,uint128)", ["uint64", "uint128"]
    ) == (5, 1000)


@pytest.mark.asyncio
async def test_deposit_security_targets_its_own_entry_point(
    client: ScaledClient, tx_signer: FakeTransactionSigner, router_address: str
) -> None:
    pending = await client.deposit_security(5, 250)

    assert pending.waited is False
    tx = tx_signer.sent[0]
    assert tx["to"] == router_address
    assert _args(
        tx["data"], "depositSecurity(uint64,uint128)", ["uint64", "uint128"]
    ) == (5, 250)


@pytest.mark.asyncio
@pytest.mark.parametrize("amount", [0, -1, 2**128])
async def test_collateral_amount_bounds(
    client: ScaledClient, tx_signer: FakeTransactionSigner, amount: int
) -> None:
    with pytest.raises(InvalidAmountError):
        await client.fund_account(5, amount)
    with pytest.raises(InvalidAmountError):
        await client.deposit_security(5, amount)
    assert tx_signer.sent == []


@pytest.mark.asyncio
async def test_fund_account_rejects_index_over_uint64(
    client: ScaledClient, tx_signer: FakeTransactionSigner
) -> None:
    with pytest.raises(ValueError, match="uint64"):
        await client.fund_account(2**64, 1)
    assert tx_signer.sent == []


@pytest.mark.asyncio
async def test_approve_router_targets_collateral_token(
    client: ScaledClient,
    tx_signer: FakeTransactionSigner,
    token_address: str,
    router_address: str,
) -> None:
    pending = await client.approve_router(5000)

    assert pending.waited is False
    tx = tx_signer.sent[0]
    assert tx["to"] == token_address
    spender, amount = _args(
        tx["data"], "approve(address,uint256)", ["address", "uint256"]
    )
    assert spender == router_address.lower()
    assert amount == 5000


# ============================================================================
# Withdrawals
# ============================================================================


@pytest.mark.asyncio
async def test_init_withdraw_signs_next_nonce(
    client: ScaledClient,
    tx_signer: FakeTransactionSigner,
    bls_signer: FakeBlsSigner,
    state: InMemorySettlementContract,
    state_address: str,
) -> None:
    pending = await client.init_withdraw(5, 300)

    assert pending.waited is False
    assert state.reads == [("accounts", (5,))]
    assert bls_signer.signed == [withdrawal_message(5, 300)]

    tx = tx_signer.sent[0]
    assert tx["to"] == state_address
    index, amount, signature = _args(
        tx["data"],
        "initWithdraw(uint64,uint128,uint256[2])",
        ["uint64", "uint128", "uint256[2]"],
    )
    assert (index, amount) == (5, 300)
    assert signature == bls_signer.sign(withdrawal_message(5, 300))


@pytest.mark.asyncio
async def test_init_withdraw_on_unknown_account_submits_nothing(
    client: ScaledClient, tx_signer: FakeTransactionSigner
) -> None:
    with pytest.raises(ChainError):
        await client.init_withdraw(99, 300)
    assert tx_signer.sent == []


@pytest.mark.asyncio
async def test_init_withdraw_signing_failure_submits_nothing(
    tx_signer: FakeTransactionSigner,
    state: InMemorySettlementContract,
    router: RouterContract,
) -> None:
    failure = SigningError("BLS key unavailable")
    client = ScaledClient(tx_signer, FakeBlsSigner(fail_with=failure), state, router)

    with pytest.raises(SigningError) as exc_info:
        await client.init_withdraw(5, 300)
    assert exc_info.value is failure
    assert tx_signer.sent == []


@pytest.mark.asyncio
async def test_process_withdrawal(
    client: ScaledClient, tx_signer: FakeTransactionSigner, state_address: str
) -> None:
    pending = await client.process_withdrawal(5)

    assert pending.waited is False
    tx = tx_signer.sent[0]
    assert tx["to"] == state_address
    assert _args(tx["data"], "processWithdrawal(uint64)", ["uint64"]) == (5,)


# ============================================================================
# post
# ============================================================================


@pytest.mark.asyncio
async def test_post_submits_encoded_batch_without_waiting(
    client: ScaledClient,
    tx_signer: FakeTransactionSigner,
    aggregator: RecordingAggregator,
    state_address: str,
    make_update,
) -> None:
    u1 = make_update(7, 42, 1000, a_signature=(1, 2), b_signature=(3, 4))
    u2 = make_update(7, 43, 5, a_signature=(5, 6), b_signature=(7, 8))

    pending = await client.post(7, [u1, u2])

    assert pending.waited is False
    assert aggregator.calls == [[(1, 2), (3, 4), (5, 6), (7, 8)]]

    tx = tx_signer.sent[0]
    assert tx["to"] == state_address
    assert tx["value"] == 0
    decoded = decode_post_calldata(tx["data"])
    assert decoded.a_index == 7
    assert decoded.aggregated_signature == (111, 222)
    assert [(t.b_index, t.amount) for t in decoded.transfers] == [(42, 1000), (43, 5)]


@pytest.mark.asyncio
async def test_post_inconsistent_batch_touches_nothing(
    client: ScaledClient,
    tx_signer: FakeTransactionSigner,
    aggregator: RecordingAggregator,
    make_update,
) -> None:
    with pytest.raises(BatchConsistencyError) as exc_info:
        await client.post(7, [make_update(7, 1, 1), make_update(6, 2, 2)])

    assert exc_info.value.position == 1
    assert aggregator.calls == []
    assert tx_signer.sent == []


@pytest.mark.asyncio
async def test_post_empty_batch_is_rejected(
    client: ScaledClient,
    tx_signer: FakeTransactionSigner,
    aggregator: RecordingAggregator,
) -> None:
    with pytest.raises(EmptyBatchError):
        await client.post(7, [])
    assert aggregator.calls == []
    assert tx_signer.sent == []


@pytest.mark.asyncio
async def test_post_oversized_batch_is_rejected(
    client: ScaledClient,
    tx_signer: FakeTransactionSigner,
    aggregator: RecordingAggregator,
    make_update,
) -> None:
    with pytest.raises(BatchTooLargeError):
        await client.post(7, [make_update(7, 1, 1)] * 65536)
    assert aggregator.calls == []
    assert tx_signer.sent == []


@pytest.mark.asyncio
async def test_post_propagates_chain_error(
    bls_signer: FakeBlsSigner,
    state: InMemorySettlementContract,
    router: RouterContract,
    aggregator: RecordingAggregator,
    make_update,
) -> None:
    failure = ChainError("insufficient funds for gas")
    client = ScaledClient(
        FakeTransactionSigner(fail_with=failure),
        bls_signer,
        state,
        router,
        aggregator=aggregator,
    )

    with pytest.raises(ChainError) as exc_info:
        await client.post(7, [make_update(7, 1, 1)])
    assert exc_info.value is failure


@pytest.mark.asyncio
async def test_post_with_real_bls_signatures(
    tx_signer: FakeTransactionSigner,
    state: InMemorySettlementContract,
    router: RouterContract,
    bls_domain: bytes,
) -> None:
    alice, bob, carol = (BlsSigner(bls_domain, s) for s in (11, 22, 33))
    updates = [
        sign_update(Receipt(a_index=1, b_index=2, amount=10, seq_no=1), alice, bob),
        sign_update(Receipt(a_index=1, b_index=3, amount=20, seq_no=1), alice, carol),
    ]
    client = ScaledClient(tx_signer, alice, state, router)

    await client.post(1, updates)

    decoded = decode_post_calldata(tx_signer.sent[0]["data"])
    expected = aggregate(
        [
            updates[0].a_signature,
            updates[0].b_signature,
            updates[1].a_signature,
            updates[1].b_signature,
        ]
    )
    assert decoded.aggregated_signature == expected


# ============================================================================
# Reads and wiring
# ============================================================================


@pytest.mark.asyncio
async def test_reads_pass_through(client: ScaledClient, token_address: str) -> None:
    assert await client.get_account(5) == Account(balance=10_000, nonce=4, post_nonce=1)
    assert await client.get_token() == token_address


@pytest.mark.asyncio
async def test_clients_do_not_share_state(
    state: InMemorySettlementContract, router: RouterContract, make_update
) -> None:
    first_signer, second_signer = FakeTransactionSigner(), FakeTransactionSigner()
    first = ScaledClient(
        first_signer, FakeBlsSigner(1), state, router, aggregator=RecordingAggregator()
    )
    second = ScaledClient(
        second_signer, FakeBlsSigner(2), state, router, aggregator=RecordingAggregator()
    )

    await first.post(7, [make_update(7, 1, 1)])

    assert len(first_signer.sent) == 1
    assert second_signer.sent == []
    assert second is not first


def test_from_settings_wires_web3_components(
    private_key: str, state_address: str, router_address: str
) -> None:
    settings = Settings(
        rpc_url="http://localhost:8545",
        private_key=private_key,
        state_address=state_address,
        router_address=router_address,
        bls_domain_hex="0f" * 32,
        bls_secret_hex="0x05",
    )

    client = ScaledClient.from_settings(settings)

    assert isinstance(client.signer, Web3TransactionSigner)
    assert client.signer.address == settings.address
    assert isinstance(client.state, SettlementContract)
    assert client.state.address == state_address
    assert isinstance(client.router, RouterContract)
    assert client.router.address == router_address
    assert client.bls_signer.pubkey == BlsSigner(settings.bls_domain, 5).pubkey
