"""Shared pytest fixtures for settlement client tests."""

from __future__ import annotations

from typing import Callable

import pytest
from eth_utils import to_checksum_address

from scaled.domain.entities import Receipt, Update

# Well-known development key; never holds real funds.
DEV_PRIVATE_KEY = "0x4c0883a69102937d6231471b5dbb6204fe5129617082792ae468d01a3f362318"


@pytest.fixture
def private_key() -> str:
    return DEV_PRIVATE_KEY


@pytest.fixture
def bls_domain() -> bytes:
    """32-byte domain separator used by every BLS signer in the tests."""
    return bytes.fromhex("0f" * 32)


@pytest.fixture
def state_address() -> str:
    return to_checksum_address("0x" + "11" * 20)


@pytest.fixture
def router_address() -> str:
    return to_checksum_address("0x" + "22" * 20)


@pytest.fixture
def token_address() -> str:
    return to_checksum_address("0x" + "33" * 20)


@pytest.fixture
def make_update() -> Callable[..., Update]:
    """Build an update with distinct, recognisable signature points."""

    def factory(
        a_index: int,
        b_index: int,
        amount: int,
        *,
        seq_no: int = 0,
        a_signature: tuple[int, int] = (1, 2),
        b_signature: tuple[int, int] = (3, 4),
    ) -> Update:
        receipt = Receipt(
            a_index=a_index,
            b_index=b_index,
            amount=amount,
            expires_by=1_000_000,
            seq_no=seq_no,
        )
        return Update(
            receipt=receipt, a_signature=a_signature, b_signature=b_signature
        )

    return factory
