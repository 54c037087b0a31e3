"""Service layer that validates group changes and computes summaries.

This module composes the SQLite store with the pure balance and settlement
functions. Every write is validated before it reaches the store, and every
summary is computed from a fresh snapshot.
"""

import logging
import uuid
from collections.abc import Sequence
from datetime import datetime

from .config import Settings
from .db import Database
from .exceptions import (
    DegenerateSplitError,
    DuplicateMemberError,
    InvalidAmountError,
    InvalidNameError,
    InvalidReferenceError,
    MemberInUseError,
)
from .ledger import compute_snapshot_balances
from .models import Balance, Expense, GroupSnapshot, GroupSummary, Member
from .money import Amount, format_amount, to_minor_units
from .settlement import apply_settlements, compute_settlements

logger = logging.getLogger(__name__)


def generate_id() -> str:
    """Generate an opaque record id."""
    return uuid.uuid4().hex


class GroupService:
    """Service for managing a group's members and expenses."""

    def __init__(self, settings: Settings, database: Database):
        """Initialize the group service."""
        self.settings = settings
        self.db = database

    # ========================================================================
    # Members
    # ========================================================================

    def add_member(self, name: str) -> Member:
        """
        Add a member to the group.

        Args:
            name: Display name; surrounding whitespace is stripped

        Returns:
            The new member

        Raises:
            InvalidNameError: If the name is empty
            DuplicateMemberError: If the name is taken (ignoring case)
        """
        trimmed = name.strip()
        if not trimmed:
            raise InvalidNameError("Member name cannot be empty")

        if self.db.get_member_by_name(trimmed):
            raise DuplicateMemberError(trimmed)

        member = Member(id=generate_id(), name=trimmed, created_at=datetime.now())
        self.db.add_member(member)

        logger.info(f"Added member '{member.name}' ({member.id})")
        return member

    def find_member(self, name_or_id: str) -> Member:
        """
        Look up a member by id or by name (ignoring case).

        Raises:
            InvalidReferenceError: If no member matches
        """
        member = self.db.get_member(name_or_id) or self.db.get_member_by_name(
            name_or_id
        )
        if member is None:
            raise InvalidReferenceError(name_or_id)
        return member

    def remove_member(self, member_id: str) -> None:
        """
        Remove a member who is not referenced by any expense.

        Raises:
            InvalidReferenceError: If the member does not exist
            MemberInUseError: If an expense is paid by or split with the member
        """
        member = self.db.get_member(member_id)
        if member is None:
            raise InvalidReferenceError(member_id)

        if self.db.is_member_referenced(member_id):
            raise MemberInUseError(member.id, member.name)

        self.db.delete_member(member_id)
        logger.info(f"Removed member '{member.name}' ({member.id})")

    def list_members(self) -> list[Member]:
        """Get all members in the order they were added."""
        return self.db.get_members()

    # ========================================================================
    # Expenses
    # ========================================================================

    def add_expense(
        self,
        title: str,
        amount: Amount,
        payer_id: str,
        participant_ids: Sequence[str],
    ) -> Expense:
        """
        Record a new expense split equally between participants.

        Args:
            title: What the money was spent on
            amount: Positive decimal amount, e.g. "100.00"
            payer_id: Id of the member who paid
            participant_ids: Ids of the members sharing the cost, in split order

        Returns:
            The new expense

        Raises:
            InvalidNameError: If the title is empty
            InvalidAmountError: If the amount is not a positive number
            DegenerateSplitError: If there are no participants
            InvalidReferenceError: If the payer or a participant is unknown,
                or a participant is listed twice
        """
        trimmed = title.strip()
        if not trimmed:
            raise InvalidNameError("Expense title cannot be empty")

        cents = to_minor_units(amount)
        if cents <= 0:
            raise InvalidAmountError(amount)

        if not participant_ids:
            raise DegenerateSplitError()

        known = {member.id for member in self.db.get_members()}
        if payer_id not in known:
            raise InvalidReferenceError(payer_id)

        seen: set[str] = set()
        for member_id in participant_ids:
            if member_id not in known:
                raise InvalidReferenceError(member_id)
            if member_id in seen:
                raise InvalidReferenceError(
                    member_id, f"Member {member_id} is listed twice in the split"
                )
            seen.add(member_id)

        expense = Expense(
            id=generate_id(),
            title=trimmed,
            amount_minor_units=cents,
            payer_id=payer_id,
            participant_ids=tuple(participant_ids),
            created_at=datetime.now(),
        )
        self.db.add_expense(expense)

        logger.info(
            f"Added expense '{expense.title}' for {self.format(expense.amount)} "
            f"split {len(expense.participant_ids)} ways"
        )
        return expense

    def remove_expense(self, expense_id: str) -> bool:
        """Remove an expense. Returns False if it did not exist."""
        removed = self.db.delete_expense(expense_id)
        if removed:
            logger.info(f"Removed expense {expense_id}")
        else:
            logger.warning(f"Expense {expense_id} not found")
        return removed

    def list_expenses(self) -> list[Expense]:
        """Get all expenses in the order they were added."""
        return self.db.get_expenses()

    # ========================================================================
    # Group
    # ========================================================================

    def snapshot(self) -> GroupSnapshot:
        """Read the current group as an immutable snapshot."""
        return self.db.get_snapshot()

    def compute_balances(self) -> list[Balance]:
        """Compute balances for the current group."""
        return compute_snapshot_balances(self.snapshot())

    def summarize(self) -> GroupSummary:
        """
        Compute balances and the settlement plan for the current group.

        Returns:
            Summary with one balance per member and the payments that settle them
        """
        snapshot = self.snapshot()
        summary = summarize_snapshot(snapshot)

        logger.info(
            f"Summarized {len(snapshot.members)} members and "
            f"{len(snapshot.expenses)} expenses: "
            f"{len(summary.settlements)} settlements"
        )
        return summary

    def clear_all(self) -> None:
        """Remove every member and expense."""
        self.db.clear()
        logger.info("Cleared all members and expenses")

    def format(self, amount: Amount) -> str:
        """Format an amount using the configured currency display."""
        return format_amount(
            amount,
            currency_symbol=self.settings.currency_symbol,
            grouping=self.settings.number_grouping,
        )


def summarize_snapshot(snapshot: GroupSnapshot) -> GroupSummary:
    """
    Compute balances and settlements for a snapshot.

    This is a pure function of the snapshot.
    """
    balances = compute_snapshot_balances(snapshot)
    settlements = compute_settlements(balances)

    residual = apply_settlements(balances, settlements)
    assert not any(residual.values()), "Settlement plan leaves open balances"

    return GroupSummary(balances=balances, settlements=settlements)
