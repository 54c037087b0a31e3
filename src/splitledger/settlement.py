"""Greedy debt settlement.

Turns net balances into a list of payments that zeroes every balance.
Largest creditor is matched with largest debtor until one side runs out.
This is the usual minimum-cash-flow heuristic: deterministic, O(n log n),
always settles fully, though not guaranteed to use the fewest payments for
every distribution of balances.
"""

import logging
from collections.abc import Sequence

from .exceptions import InvalidReferenceError
from .models import Balance, Settlement
from .money import from_minor_units, to_minor_units

logger = logging.getLogger(__name__)


def _largest_first(positions: list[tuple[Balance, int]]) -> list[tuple[Balance, int]]:
    # sorted() is stable with reverse=True, so ties keep member order
    return sorted(positions, key=lambda position: position[1], reverse=True)


def compute_settlements(balances: Sequence[Balance]) -> list[Settlement]:
    """
    Compute payments that settle all balances.

    Args:
        balances: Net balances, normally from compute_balances()

    Returns:
        Ordered settlements (debtor -> creditor). Empty when nobody is owed
        or nobody owes.
    """
    creditors = _largest_first(
        [(b, b.net_minor_units) for b in balances if b.net_minor_units > 0]
    )
    debtors = _largest_first(
        [(b, -b.net_minor_units) for b in balances if b.net_minor_units < 0]
    )

    credit_left = [amount for _, amount in creditors]
    debt_left = [amount for _, amount in debtors]

    settlements: list[Settlement] = []
    i = j = 0

    while i < len(creditors) and j < len(debtors):
        creditor = creditors[i][0]
        debtor = debtors[j][0]

        amount = min(credit_left[i], debt_left[j])
        if amount > 0:
            settlements.append(
                Settlement(
                    from_id=debtor.member_id,
                    from_name=debtor.name,
                    to_id=creditor.member_id,
                    to_name=creditor.name,
                    amount=from_minor_units(amount),
                )
            )
            logger.debug(
                f"{debtor.name} pays {creditor.name} {from_minor_units(amount)}"
            )

        credit_left[i] -= amount
        debt_left[j] -= amount

        if credit_left[i] == 0:
            i += 1
        if debt_left[j] == 0:
            j += 1

    if i < len(creditors) or j < len(debtors):
        logger.warning(
            f"Balances do not sum to zero; {len(creditors) - i} creditors and "
            f"{len(debtors) - j} debtors left unsettled"
        )

    return settlements


def apply_settlements(
    balances: Sequence[Balance], settlements: Sequence[Settlement]
) -> dict[str, int]:
    """
    Apply a settlement plan to balances.

    A debtor paying moves their balance up, a creditor receiving moves it
    down. For a complete plan every residual is zero.

    Args:
        balances: Net balances the plan was computed from
        settlements: Payments to apply

    Returns:
        Residual net balance per member id, in minor units

    Raises:
        InvalidReferenceError: If a settlement names a member not in balances
    """
    residual = {balance.member_id: balance.net_minor_units for balance in balances}

    for settlement in settlements:
        for member_id in (settlement.from_id, settlement.to_id):
            if member_id not in residual:
                raise InvalidReferenceError(member_id)

        amount = to_minor_units(settlement.amount)
        residual[settlement.from_id] += amount
        residual[settlement.to_id] -= amount

    return residual
