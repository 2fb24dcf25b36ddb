"""
Atomic transaction groups.

A group id commits to the ordered ids of its member transactions; every
member carries the same id and the network confirms all or none of them.
"""

from typing import List, Sequence

import structlog

from algotx.core.address import sha512_256
from algotx.core.transaction import MAX_GROUP_SIZE, Transaction
from algotx.exceptions import ValidationError
from algotx.tx.encoding import encode_transaction, pack_canonical, raw_transaction_id

logger = structlog.get_logger(__name__)

GROUP_PREFIX = b"TG"


def compute_group_id(txns: Sequence[Transaction]) -> bytes:
    """
    Compute the group id of an ordered list of transactions.

    Member ids are taken with any existing group id cleared.

    Raises:
        ValidationError: If the group is empty or too large
    """
    if not txns:
        raise ValidationError("a group needs at least one transaction", field="group")
    if len(txns) > MAX_GROUP_SIZE:
        raise ValidationError(
            f"a group allows at most {MAX_GROUP_SIZE} transactions, got {len(txns)}",
            field="group",
        )

    txids = [raw_transaction_id(encode_transaction(txn.replace(group=None))) for txn in txns]
    return sha512_256(GROUP_PREFIX + pack_canonical({"txlist": txids}))


def assign_group_id(txns: Sequence[Transaction]) -> List[Transaction]:
    """Return copies of the transactions carrying their common group id."""
    group_id = compute_group_id(txns)
    logger.debug("group_id_assigned", size=len(txns))
    return [txn.replace(group=group_id) for txn in txns]
