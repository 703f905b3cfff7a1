"""Protocol interfaces for the on-chain contracts used by a settlement session.

Write entry points are exposed as pure call-data builders: the client facade
hands the bytes to a transaction signer, so the contracts never need a key.
Read entry points are async because they query a node.
"""

from __future__ import annotations

from typing import Protocol, TYPE_CHECKING

if TYPE_CHECKING:
    from ..entities import Account, SolG1, SolG2


class SettlementContractProtocol(Protocol):
    """The settlement ("state") contract."""

    @property
    def address(self) -> str: ...

    def encode_register(
        self, user_address: str, pubkey: "SolG2", signature: "SolG1"
    ) -> bytes:
        """Call data for `register(address, uint256[4], uint256[2])`."""
        ...

    def encode_init_withdraw(
        self, user_index: int, amount: int, signature: "SolG1"
    ) -> bytes:
        """Call data for `initWithdraw(uint64, uint128, uint256[2])`."""
        ...

    def encode_process_withdrawal(self, user_index: int) -> bytes:
        """Call data for `processWithdrawal(uint64)`."""
        ...

    async def accounts(self, user_index: int) -> "Account":
        """Fetch the account stored at `user_index`."""
        ...

    async def token(self) -> str:
        """Fetch the address of the collateral token."""
        ...


class RouterContractProtocol(Protocol):
    """The router (collateral) contract."""

    @property
    def address(self) -> str: ...

    def encode_fund_account(self, user_index: int, amount: int) -> bytes:
        """Call data for `fundAccount(uint64, uint128)`."""
        ...

    def encode_deposit_security(self, user_index: int, amount: int) -> bytes:
        """Call data for `depositSecurity(uint64, uint128)`."""
        ...


class TokenContractProtocol(Protocol):
    """An ERC-20 token."""

    @property
    def address(self) -> str: ...

    def encode_approve(self, spender: str, amount: int) -> bytes:
        """Call data for `approve(address, uint256)`."""
        ...
