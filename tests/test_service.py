"""Tests for GroupService layer."""

import pytest

from splitledger.config import Settings
from splitledger.db import Database
from splitledger.exceptions import (
    DegenerateSplitError,
    DuplicateMemberError,
    InvalidAmountError,
    InvalidNameError,
    InvalidReferenceError,
    MemberInUseError,
)
from splitledger.service import GroupService, summarize_snapshot


@pytest.fixture
def mock_settings(tmp_path):
    """Create settings pointing at a temporary database."""
    return Settings(
        currency_symbol="$",
        number_grouping="western",
        database_path=tmp_path / "test.db",
    )


@pytest.fixture
def mock_db(mock_settings):
    """Create a temporary database."""
    db = Database(mock_settings.database_path)
    yield db
    db.close()


@pytest.fixture
def service(mock_settings, mock_db):
    """Create a GroupService instance."""
    return GroupService(mock_settings, mock_db)


@pytest.fixture
def trio(service):
    """Members A, B and C, in that order."""
    return [service.add_member(name) for name in ("A", "B", "C")]


class TestMembers:
    """Tests for member management."""

    def test_add_member_strips_name(self, service):
        member = service.add_member("  Asha  ")

        assert member.name == "Asha"
        assert service.list_members() == [member]

    def test_members_keep_insertion_order(self, service, trio):
        assert [m.name for m in service.list_members()] == ["A", "B", "C"]

    def test_empty_name_rejected(self, service):
        with pytest.raises(InvalidNameError):
            service.add_member("   ")

    def test_duplicate_name_ignores_case(self, service):
        service.add_member("Ravi")

        with pytest.raises(DuplicateMemberError, match="already exists"):
            service.add_member(" rAVI ")

        assert len(service.list_members()) == 1

    def test_find_member_by_name_or_id(self, service, trio):
        a = trio[0]

        assert service.find_member("a") == a
        assert service.find_member(a.id) == a

    def test_find_unknown_member(self, service):
        with pytest.raises(InvalidReferenceError):
            service.find_member("nobody")

    def test_remove_unreferenced_member(self, service, trio):
        service.remove_member(trio[2].id)

        assert [m.name for m in service.list_members()] == ["A", "B"]

    def test_remove_payer_refused(self, service, trio):
        a, b, _ = trio
        service.add_expense("Lunch", "10.00", a.id, [b.id])

        with pytest.raises(MemberInUseError):
            service.remove_member(a.id)

    def test_remove_participant_refused(self, service, trio):
        a, b, _ = trio
        service.add_expense("Lunch", "10.00", a.id, [b.id])

        with pytest.raises(MemberInUseError):
            service.remove_member(b.id)

        assert len(service.list_members()) == 3

    def test_remove_unknown_member(self, service):
        with pytest.raises(InvalidReferenceError):
            service.remove_member("missing")


class TestExpenses:
    """Tests for expense validation and storage."""

    def test_add_expense(self, service, trio):
        a, b, c = trio

        expense = service.add_expense(" Dinner ", "100", a.id, [a.id, b.id, c.id])

        assert expense.title == "Dinner"
        assert expense.amount == "100.00"
        assert expense.amount_minor_units == 10000
        assert expense.participant_ids == (a.id, b.id, c.id)
        assert service.list_expenses() == [expense]

    def test_participant_order_survives_storage(self, service, trio):
        a, b, c = trio

        service.add_expense("Taxi", "10.00", a.id, [c.id, a.id, b.id])

        assert service.list_expenses()[0].participant_ids == (c.id, a.id, b.id)

    @pytest.mark.parametrize(
        "amount", ["0", "0.00", "-5", "abc", "", "0.004", "1e999999"]
    )
    def test_invalid_amount(self, service, trio, amount):
        a, b, _ = trio

        with pytest.raises(InvalidAmountError):
            service.add_expense("Lunch", amount, a.id, [a.id, b.id])

        assert service.list_expenses() == []

    def test_empty_title(self, service, trio):
        a, b, _ = trio

        with pytest.raises(InvalidNameError):
            service.add_expense("  ", "5.00", a.id, [b.id])

    def test_no_participants(self, service, trio):
        with pytest.raises(DegenerateSplitError):
            service.add_expense("Lunch", "5.00", trio[0].id, [])

    def test_unknown_payer(self, service, trio):
        with pytest.raises(InvalidReferenceError):
            service.add_expense("Lunch", "5.00", "ghost", [trio[0].id])

    def test_unknown_participant(self, service, trio):
        with pytest.raises(InvalidReferenceError):
            service.add_expense("Lunch", "5.00", trio[0].id, [trio[1].id, "ghost"])

    def test_duplicate_participant(self, service, trio):
        a, b, _ = trio

        with pytest.raises(InvalidReferenceError, match="listed twice"):
            service.add_expense("Lunch", "5.00", a.id, [b.id, b.id])

    def test_remove_expense(self, service, trio):
        a, b, _ = trio
        expense = service.add_expense("Lunch", "5.00", a.id, [a.id, b.id])

        assert service.remove_expense(expense.id) is True
        assert service.list_expenses() == []
        assert service.remove_expense(expense.id) is False

        # Members are free to go once their expenses are gone
        service.remove_member(b.id)


class TestSummarize:
    """Tests for balance and settlement computation."""

    def test_three_way_dinner(self, service, trio):
        a, b, c = trio
        service.add_expense("Dinner", "100.00", a.id, [a.id, b.id, c.id])

        summary = service.summarize()

        assert [(x.name, x.net_balance) for x in summary.balances] == [
            ("A", "66.66"),
            ("B", "-33.33"),
            ("C", "-33.33"),
        ]
        assert [(s.from_name, s.to_name, s.amount) for s in summary.settlements] == [
            ("B", "A", "33.33"),
            ("C", "A", "33.33"),
        ]
        assert not summary.is_settled

    def test_mutual_expenses_settle(self, service):
        a = service.add_member("A")
        b = service.add_member("B")
        service.add_expense("Groceries", "50.00", a.id, [a.id, b.id])
        service.add_expense("Fuel", "50.00", b.id, [a.id, b.id])

        summary = service.summarize()

        assert [x.net_balance for x in summary.balances] == ["0.00", "0.00"]
        assert summary.settlements == []
        assert summary.is_settled

    def test_summary_is_recomputed_after_changes(self, service, trio):
        a, b, _ = trio
        expense = service.add_expense("Lunch", "20.00", a.id, [a.id, b.id])
        assert len(service.summarize().settlements) == 1

        service.remove_expense(expense.id)

        assert service.summarize().is_settled

    def test_summarize_is_idempotent(self, service, trio):
        a, b, c = trio
        service.add_expense("Hotel", "301.00", c.id, [a.id, b.id, c.id])
        service.add_expense("Museum", "45.50", b.id, [a.id, b.id])

        assert service.summarize() == service.summarize()

    def test_summarize_snapshot_is_pure(self, service, trio):
        a, b, _ = trio
        service.add_expense("Lunch", "9.99", a.id, [a.id, b.id])
        snapshot = service.snapshot()

        first = summarize_snapshot(snapshot)
        second = summarize_snapshot(snapshot)

        assert first == second
        assert snapshot == service.snapshot()

    def test_compute_balances(self, service, trio):
        a, b, _ = trio
        service.add_expense("Lunch", "9.99", a.id, [a.id, b.id])

        balances = service.compute_balances()

        assert [x.total_owed for x in balances] == ["5.00", "4.99", "0.00"]

    def test_clear_all(self, service, trio):
        a, b, _ = trio
        service.add_expense("Lunch", "5.00", a.id, [b.id])

        service.clear_all()

        assert service.list_members() == []
        assert service.list_expenses() == []


class TestFormat:
    """Tests for configured currency formatting."""

    def test_uses_settings(self, service):
        assert service.format("1234567.5") == "$1,234,567.50"
