"""Signature collection for batch settlement.

The settlement contract rebuilds the public-key list as A, B, A, B, ... in
batch order, so the aggregator must see the signatures in exactly that order.
"""

from __future__ import annotations

from typing import Sequence

from ...domain.entities import SolG1, Update
from ...domain.shared import Aggregator


def collect_signatures(updates: Sequence[Update]) -> list[SolG1]:
    """Return `[u1.a, u1.b, u2.a, u2.b, ...]` for the given updates."""
    signatures: list[SolG1] = []
    for update in updates:
        signatures.append(update.a_signature)
        signatures.append(update.b_signature)
    return signatures


def aggregate_update_signatures(
    updates: Sequence[Update], aggregator: Aggregator
) -> SolG1:
    """Aggregate every signature of the batch into one point."""
    return aggregator(collect_signatures(updates))
