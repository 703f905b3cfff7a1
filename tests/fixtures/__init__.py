"""Test fixtures for in-memory implementations."""

from .fake_contracts import InMemorySettlementContract
from .fake_signers import (
    FakeBlsSigner,
    FakePendingTransaction,
    FakeTransactionSigner,
    RecordingAggregator,
)
from .fake_web3 import FakeAsyncWeb3, bad_gateway

__all__ = [
    "FakeAsyncWeb3",
    "FakeBlsSigner",
    "FakePendingTransaction",
    "FakeTransactionSigner",
    "InMemorySettlementContract",
    "RecordingAggregator",
    "bad_gateway",
]
