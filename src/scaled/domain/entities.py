"""Settlement domain entities: Receipt, Update, Batch and Account."""

from __future__ import annotations

from typing import Annotated, Tuple

from pydantic import BaseModel, ConfigDict, Field

UINT16_MAX = 2**16 - 1
UINT64_MAX = 2**64 - 1
UINT128_MAX = 2**128 - 1
UINT256_MAX = 2**256 - 1

Uint64 = Annotated[int, Field(ge=0, le=UINT64_MAX)]
Uint128 = Annotated[int, Field(ge=0, le=UINT128_MAX)]
Uint256 = Annotated[int, Field(ge=0, le=UINT256_MAX)]

# A G1 point as the settlement contract sees it: (x, y).
SolG1 = Tuple[Uint256, Uint256]
# A G2 point in precompile order: (x_imag, x_real, y_imag, y_real).
SolG2 = Tuple[Uint256, Uint256, Uint256, Uint256]


class Receipt(BaseModel):
    """One off-chain debit from account `a_index` to account `b_index`."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    a_index: Uint64
    b_index: Uint64
    amount: Uint128
    # Advisory only; expiry and sequencing are enforced off-chain.
    expires_by: Uint64 = 0
    seq_no: Uint64 = 0


class Update(BaseModel):
    """A receipt together with both parties' BLS signatures over it."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    receipt: Receipt
    a_signature: SolG1
    b_signature: SolG1


class Batch(BaseModel):
    """Updates settled together under one initiating party.

    Every update must share the batch's `a_index`; the check lives in
    `scaled.application.settlement.validators.validate_batch` so that it
    raises the typed batch errors instead of a pydantic ValidationError.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    a_index: Uint64
    updates: Tuple[Update, ...]


class Account(BaseModel):
    """Read-only view of a settlement-contract account."""

    model_config = ConfigDict(frozen=True)

    balance: Uint128
    nonce: Uint64
    post_nonce: Uint64
