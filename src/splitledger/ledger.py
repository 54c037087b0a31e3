"""Balance aggregation over a group snapshot."""

import logging
from collections.abc import Sequence

from .exceptions import DegenerateSplitError, InvalidAmountError, InvalidReferenceError
from .models import Balance, Expense, GroupSnapshot, Member
from .money import from_minor_units
from .splitter import compute_expense_shares

logger = logging.getLogger(__name__)


def build_member_index(members: Sequence[Member]) -> dict[str, Member]:
    """
    Map member ids to members.

    Raises:
        InvalidReferenceError: If two members share an id
    """
    index: dict[str, Member] = {}
    for member in members:
        if member.id in index:
            raise InvalidReferenceError(
                member.id, f"Duplicate member id in group: {member.id}"
            )
        index[member.id] = member
    return index


def validate_expense(expense: Expense, index: dict[str, Member]) -> None:
    """
    Check that an expense can be aggregated against the given members.

    Raises:
        InvalidAmountError: If the amount is not positive
        DegenerateSplitError: If the expense has no participants
        InvalidReferenceError: If the payer or a participant is unknown
    """
    if expense.amount_minor_units <= 0:
        raise InvalidAmountError(
            expense.amount,
            f"Expense {expense.id} has non-positive amount {expense.amount}",
        )

    if not expense.participant_ids:
        raise DegenerateSplitError(expense.id)

    if expense.payer_id not in index:
        raise InvalidReferenceError(
            expense.payer_id,
            f"Expense {expense.id} is paid by unknown member {expense.payer_id}",
        )

    for member_id in expense.participant_ids:
        if member_id not in index:
            raise InvalidReferenceError(
                member_id,
                f"Expense {expense.id} is split with unknown member {member_id}",
            )


def compute_balances(
    members: Sequence[Member], expenses: Sequence[Expense]
) -> list[Balance]:
    """
    Compute every member's total paid, total owed and net balance.

    Steps:
    1. Validate all expenses against the member set (nothing is aggregated
       if any expense is invalid)
    2. Credit each expense's full amount to its payer
    3. Split each expense equally and charge each participant their share
    4. Net = paid - owed

    Args:
        members: Group members; output follows this order
        expenses: Expenses to aggregate

    Returns:
        One balance per member

    Raises:
        InvalidAmountError, DegenerateSplitError, InvalidReferenceError:
            If any expense fails validation
    """
    index = build_member_index(members)
    for expense in expenses:
        validate_expense(expense, index)

    paid = {member.id: 0 for member in members}
    owed = {member.id: 0 for member in members}

    for expense in expenses:
        paid[expense.payer_id] += expense.amount_minor_units
        for share in compute_expense_shares(expense):
            owed[share.member_id] += share.amount_minor_units

    # Every expense is credited once and charged in full, so the books balance
    assert sum(paid.values()) == sum(owed.values()), "Ledger out of balance"

    balances = [
        Balance(
            member_id=member.id,
            name=member.name,
            total_paid=from_minor_units(paid[member.id]),
            total_owed=from_minor_units(owed[member.id]),
            net_balance=from_minor_units(paid[member.id] - owed[member.id]),
        )
        for member in members
    ]

    logger.debug(
        f"Computed balances for {len(members)} members over {len(expenses)} expenses"
    )

    return balances


def compute_snapshot_balances(snapshot: GroupSnapshot) -> list[Balance]:
    """Compute balances for a group snapshot."""
    return compute_balances(snapshot.members, snapshot.expenses)
