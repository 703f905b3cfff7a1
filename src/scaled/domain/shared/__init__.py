"""Shared domain utilities.

This package is domain-accessible and should not depend on application code.
"""

from .contract_protocol import (
    RouterContractProtocol,
    SettlementContractProtocol,
    TokenContractProtocol,
)
from .signer_protocol import (
    Aggregator,
    BlsSignerProtocol,
    PendingTransactionProtocol,
    TransactionReceipt,
    TransactionRequest,
    TransactionSignerProtocol,
)

__all__ = [
    "Aggregator",
    "BlsSignerProtocol",
    "PendingTransactionProtocol",
    "RouterContractProtocol",
    "SettlementContractProtocol",
    "TokenContractProtocol",
    "TransactionReceipt",
    "TransactionRequest",
    "TransactionSignerProtocol",
]
