"""Equal-share division of expense amounts."""

import logging

from .models import Expense, ExpenseShare

logger = logging.getLogger(__name__)


def divide_equally(total_minor_units: int, part_count: int) -> list[int]:
    """
    Divide a total into part_count integer shares that sum to the total.

    Every share gets floor(total / part_count); the remainder is handed out
    one minor unit at a time to the first shares, so for the same inputs the
    extra cents always land in the same positions.

    Args:
        total_minor_units: Amount to divide, in minor units
        part_count: Number of shares

    Returns:
        Shares in order, or an empty list when part_count <= 0

    Example:
        divide_equally(10, 3) == [4, 3, 3]
    """
    if part_count <= 0:
        return []

    base = total_minor_units // part_count
    remainder = total_minor_units - base * part_count

    shares = [base] * part_count
    for i in range(remainder):
        shares[i] += 1

    return shares


def compute_expense_shares(expense: Expense) -> list[ExpenseShare]:
    """
    Compute each participant's share of an expense, in participant order.

    Args:
        expense: The expense to split

    Returns:
        One share per participant; empty if the expense has no participants
    """
    amounts = divide_equally(expense.amount_minor_units, len(expense.participant_ids))

    shares = [
        ExpenseShare(member_id=member_id, amount_minor_units=amount)
        for member_id, amount in zip(expense.participant_ids, amounts, strict=True)
    ]

    logger.debug(
        f"Split expense {expense.id} ({expense.amount}) into {len(shares)} shares"
    )

    return shares
