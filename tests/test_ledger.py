"""Tests for balance aggregation."""

import random

import pytest

from splitledger.exceptions import (
    DegenerateSplitError,
    InvalidAmountError,
    InvalidReferenceError,
)
from splitledger.ledger import compute_balances, compute_snapshot_balances
from splitledger.models import Expense, GroupSnapshot, Member
from splitledger.money import to_minor_units


# Helper functions for tests
def make_members(*names: str) -> list[Member]:
    """Create members whose ids are their lowercased names."""
    return [Member(id=name.lower(), name=name) for name in names]


def make_expense(
    id: str, amount: int, payer_id: str, participant_ids: list[str]
) -> Expense:
    """Create an Expense with an amount in minor units."""
    return Expense(
        id=id,
        title=f"Expense {id}",
        amount_minor_units=amount,
        payer_id=payer_id,
        participant_ids=tuple(participant_ids),
    )


def random_group(seed: int, member_count: int = 6, expense_count: int = 40):
    """Build a reproducible group with random expenses."""
    rng = random.Random(seed)
    members = make_members(*[f"M{i}" for i in range(member_count)])
    ids = [m.id for m in members]
    expenses = [
        make_expense(
            id=str(i),
            amount=rng.randint(1, 250000),
            payer_id=rng.choice(ids),
            participant_ids=rng.sample(ids, rng.randint(1, member_count)),
        )
        for i in range(expense_count)
    ]
    return members, expenses


class TestComputeBalancesScenarios:
    """Worked examples."""

    def test_three_way_split_with_remainder(self):
        """A pays 100.00 for A, B, C: A absorbs the extra cent."""
        members = make_members("A", "B", "C")
        expenses = [make_expense("1", 10000, "a", ["a", "b", "c"])]

        balances = compute_balances(members, expenses)

        a, b, c = balances
        assert (a.total_paid, a.total_owed, a.net_balance) == (
            "100.00",
            "33.34",
            "66.66",
        )
        assert (b.total_paid, b.total_owed, b.net_balance) == ("0.00", "33.33", "-33.33")
        assert (c.total_paid, c.total_owed, c.net_balance) == ("0.00", "33.33", "-33.33")

    def test_mutual_expenses_cancel_out(self):
        members = make_members("A", "B")
        expenses = [
            make_expense("1", 5000, "a", ["a", "b"]),
            make_expense("2", 5000, "b", ["a", "b"]),
        ]

        balances = compute_balances(members, expenses)

        assert [b.net_balance for b in balances] == ["0.00", "0.00"]
        assert [b.total_paid for b in balances] == ["50.00", "50.00"]

    def test_payer_not_among_participants(self):
        """A buys a gift for B and C only."""
        members = make_members("A", "B", "C")
        expenses = [make_expense("1", 3001, "a", ["b", "c"])]

        balances = compute_balances(members, expenses)

        assert [b.net_balance for b in balances] == ["30.01", "-15.01", "-15.00"]
        assert balances[0].total_owed == "0.00"

    def test_output_follows_member_order(self):
        members = make_members("Zed", "Amy", "Kim")
        expenses = [make_expense("1", 900, "kim", ["amy"])]

        balances = compute_balances(members, expenses)

        assert [b.name for b in balances] == ["Zed", "Amy", "Kim"]
        assert [b.member_id for b in balances] == ["zed", "amy", "kim"]

    def test_members_without_expenses(self):
        members = make_members("A", "B")

        balances = compute_balances(members, [])

        assert all(b.net_balance == "0.00" for b in balances)

    def test_no_members(self):
        assert compute_balances([], []) == []

    def test_snapshot(self):
        members = make_members("A", "B")
        snapshot = GroupSnapshot(
            members=tuple(members),
            expenses=(make_expense("1", 200, "a", ["a", "b"]),),
        )

        balances = compute_snapshot_balances(snapshot)

        assert [b.net_balance for b in balances] == ["1.00", "-1.00"]


class TestConservation:
    """Balances always sum to zero."""

    @pytest.mark.parametrize("seed", range(10))
    def test_random_groups_balance(self, seed):
        members, expenses = random_group(seed)

        balances = compute_balances(members, expenses)

        paid = sum(to_minor_units(b.total_paid) for b in balances)
        owed = sum(to_minor_units(b.total_owed) for b in balances)
        assert paid == owed == sum(e.amount_minor_units for e in expenses)
        assert sum(b.net_minor_units for b in balances) == 0

    def test_idempotent(self):
        members, expenses = random_group(seed=42)

        first = compute_balances(members, expenses)
        second = compute_balances(members, expenses)

        assert first == second


class TestComputeBalancesErrors:
    """Invalid input is rejected before anything is aggregated."""

    def test_unknown_payer(self):
        members = make_members("A", "B")
        expenses = [make_expense("1", 1000, "ghost", ["a", "b"])]

        with pytest.raises(InvalidReferenceError, match="paid by unknown member") as exc:
            compute_balances(members, expenses)

        assert exc.value.member_id == "ghost"

    def test_unknown_participant(self):
        members = make_members("A", "B")
        expenses = [
            make_expense("1", 1000, "a", ["a", "b"]),
            make_expense("2", 1000, "a", ["a", "ghost"]),
        ]

        with pytest.raises(InvalidReferenceError, match="split with unknown member"):
            compute_balances(members, expenses)

    def test_no_participants(self):
        members = make_members("A")
        expenses = [make_expense("1", 1000, "a", [])]

        with pytest.raises(DegenerateSplitError):
            compute_balances(members, expenses)

    @pytest.mark.parametrize("amount", [0, -500])
    def test_non_positive_amount(self, amount):
        members = make_members("A", "B")
        expenses = [make_expense("1", amount, "a", ["a", "b"])]

        with pytest.raises(InvalidAmountError):
            compute_balances(members, expenses)

    def test_duplicate_member_ids(self):
        members = [Member(id="x", name="One"), Member(id="x", name="Two")]

        with pytest.raises(InvalidReferenceError, match="Duplicate member id"):
            compute_balances(members, [])
