"""Pytest fixtures for client facade tests."""

from __future__ import annotations

import pytest

from scaled.client.scaled_client import ScaledClient
from scaled.domain.entities import Account
from scaled.infrastructure.chain.contracts import RouterContract
from tests.fixtures import (
    FakeBlsSigner,
    FakeTransactionSigner,
    InMemorySettlementContract,
    RecordingAggregator,
)


@pytest.fixture
def tx_signer() -> FakeTransactionSigner:
    return FakeTransactionSigner()


@pytest.fixture
def bls_signer() -> FakeBlsSigner:
    return FakeBlsSigner(seed=100)


@pytest.fixture
def aggregator() -> RecordingAggregator:
    return RecordingAggregator(result=(111, 222))


@pytest.fixture
def state(state_address: str, token_address: str) -> InMemorySettlementContract:
    return InMemorySettlementContract(
        state_address,
        token_address,
        accounts={5: Account(balance=10_000, nonce=4, post_nonce=1)},
    )


@pytest.fixture
def router(router_address: str) -> RouterContract:
    return RouterContract(router_address)


@pytest.fixture
def client(
    tx_signer: FakeTransactionSigner,
    bls_signer: FakeBlsSigner,
    state: InMemorySettlementContract,
    router: RouterContract,
    aggregator: RecordingAggregator,
) -> ScaledClient:
    return ScaledClient(
        signer=tx_signer,
        bls_signer=bls_signer,
        state=state,
        router=router,
        aggregator=aggregator,
    )
