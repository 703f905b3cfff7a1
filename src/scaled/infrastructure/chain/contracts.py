"""Bindings for the settlement, router and token contracts.

Writes are exposed as call-data builders (selector + ABI-encoded arguments) so
any transaction signer can submit them. Reads go through an `AsyncWeb3`
contract object.
"""

from __future__ import annotations

from typing import Any, Optional, Sequence

from eth_abi import encode
from eth_utils import function_signature_to_4byte_selector, to_checksum_address
from web3 import AsyncWeb3

from ...application.settlement.validators import validate_index
from ...domain.entities import Account, SolG1, SolG2
from ...domain.errors import ChainError
from .transport import PROVIDER_ERRORS

STATE_ABI: list[dict[str, Any]] = [
    {
        "name": "post",
        "type": "function",
        "stateMutability": "nonpayable",
        "inputs": [],
        "outputs": [],
    },
    {
        "name": "register",
        "type": "function",
        "stateMutability": "nonpayable",
        "inputs": [
            {"name": "userAddress", "type": "address"},
            {"name": "blsPk", "type": "uint256[4]"},
            {"name": "sk", "type": "uint256[2]"},
        ],
        "outputs": [],
    },
    {
        "name": "accounts",
        "type": "function",
        "stateMutability": "view",
        "inputs": [{"name": "index", "type": "uint64"}],
        "outputs": [
            {"name": "balance", "type": "uint128"},
            {"name": "nonce", "type": "uint64"},
            {"name": "postNonce", "type": "uint64"},
        ],
    },
    {
        "name": "token",
        "type": "function",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [{"name": "", "type": "address"}],
    },
    {
        "name": "initWithdraw",
        "type": "function",
        "stateMutability": "nonpayable",
        "inputs": [
            {"name": "index", "type": "uint64"},
            {"name": "amount", "type": "uint128"},
            {"name": "signature", "type": "uint256[2]"},
        ],
        "outputs": [],
    },
    {
        "name": "processWithdrawal",
        "type": "function",
        "stateMutability": "nonpayable",
        "inputs": [{"name": "index", "type": "uint64"}],
        "outputs": [],
    },
]

ROUTER_ABI: list[dict[str, Any]] = [
    {
        "name": "fundAccount",
        "type": "function",
        "stateMutability": "nonpayable",
        "inputs": [
            {"name": "toIndex", "type": "uint64"},
            {"name": "amount", "type": "uint128"},
        ],
        "outputs": [],
    },
    {
        "name": "depositSecurity",
        "type": "function",
        "stateMutability": "nonpayable",
        "inputs": [
            {"name": "toIndex", "type": "uint64"},
            {"name": "amount", "type": "uint128"},
        ],
        "outputs": [],
    },
]

TOKEN_ABI: list[dict[str, Any]] = [
    {
        "name": "approve",
        "type": "function",
        "stateMutability": "nonpayable",
        "inputs": [
            {"name": "spender", "type": "address"},
            {"name": "amount", "type": "uint256"},
        ],
        "outputs": [{"name": "", "type": "bool"}],
    },
]


def encode_call(signature: str, arg_types: Sequence[str], args: Sequence[Any]) -> bytes:
    """Selector of `signature` followed by the ABI-encoded arguments."""
    return function_signature_to_4byte_selector(signature) + encode(
        list(arg_types), list(args)
    )


class _ContractBinding:
    abi: list[dict[str, Any]] = []

    def __init__(self, address: str, w3: Optional[AsyncWeb3] = None) -> None:
        self._address = to_checksum_address(address)
        self._w3 = w3
        self._contract: Any = None

    @property
    def address(self) -> str:
        return self._address

    def _functions(self) -> Any:
        if self._w3 is None:
            raise ChainError(f"No provider bound to contract {self._address}")
        if self._contract is None:
            self._contract = self._w3.eth.contract(address=self._address, abi=self.abi)
        return self._contract.functions

    async def _call(self, name: str, *args: Any) -> Any:
        try:
            return await getattr(self._functions(), name)(*args).call()
        except PROVIDER_ERRORS as e:
            raise ChainError(f"{name}() call on {self._address} failed: {e}") from e


class SettlementContract(_ContractBinding):
    """The settlement ("state") contract holding BLS keys and account balances."""

    abi = STATE_ABI

    def encode_register(
        self, user_address: str, pubkey: SolG2, signature: SolG1
    ) -> bytes:
        return encode_call(
            "register(address,uint256[4],uint256[2])",
            ["address", "uint256[4]", "uint256[2]"],
            [to_checksum_address(user_address), list(pubkey), list(signature)],
        )

    def encode_init_withdraw(
        self, user_index: int, amount: int, signature: SolG1
    ) -> bytes:
        return encode_call(
            "initWithdraw(uint64,uint128,uint256[2])",
            ["uint64", "uint128", "uint256[2]"],
            [user_index, amount, list(signature)],
        )

    def encode_process_withdrawal(self, user_index: int) -> bytes:
        return encode_call("processWithdrawal(uint64)", ["uint64"], [user_index])

    async def accounts(self, user_index: int) -> Account:
        validate_index(user_index)
        balance, nonce, post_nonce = await self._call("accounts", user_index)
        return Account(balance=balance, nonce=nonce, post_nonce=post_nonce)

    async def token(self) -> str:
        return to_checksum_address(await self._call("token"))


class RouterContract(_ContractBinding):
    """The router contract that turns token deposits into account collateral."""

    abi = ROUTER_ABI

    def encode_fund_account(self, user_index: int, amount: int) -> bytes:
        return encode_call(
            "fundAccount(uint64,uint128)", ["uint64", "uint128"], [user_index, amount]
        )

    def encode_deposit_security(self, user_index: int, amount: int) -> bytes:
        return encode_call(
            "depositSecurity(uint64,uint128)",
            ["uint64", "uint128"],
            [user_index, amount],
        )


class TokenContract(_ContractBinding):
    """ERC-20 collateral token; only the approval step is needed here."""

    abi = TOKEN_ABI

    def encode_approve(self, spender: str, amount: int) -> bytes:
        return encode_call(
            "approve(address,uint256)",
            ["address", "uint256"],
            [to_checksum_address(spender), amount],
        )
