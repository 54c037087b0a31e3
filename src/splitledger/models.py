"""Pydantic domain models for SplitLedger."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from .money import from_minor_units, to_minor_units

# ============================================================================
# Group Records
# ============================================================================


class Member(BaseModel):
    """A person sharing expenses in the group."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    created_at: datetime = Field(default_factory=datetime.now)


class Expense(BaseModel):
    """A shared expense paid by one member and split equally between participants.

    The amount is held in minor units. Participant order matters: the first
    listed participants absorb any remainder cents of the split.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    amount_minor_units: int
    payer_id: str
    participant_ids: tuple[str, ...]
    created_at: datetime = Field(default_factory=datetime.now)

    @property
    def amount(self) -> str:
        """Amount as a two-decimal string."""
        return from_minor_units(self.amount_minor_units)


class GroupSnapshot(BaseModel):
    """Immutable view of the group handed to the balance and settlement functions."""

    model_config = ConfigDict(frozen=True)

    members: tuple[Member, ...] = ()
    expenses: tuple[Expense, ...] = ()


# ============================================================================
# Derived Records
# ============================================================================


class ExpenseShare(BaseModel):
    """One participant's share of a single expense."""

    model_config = ConfigDict(frozen=True)

    member_id: str
    amount_minor_units: int

    @property
    def amount(self) -> str:
        return from_minor_units(self.amount_minor_units)


class Balance(BaseModel):
    """A member's aggregate position across all expenses."""

    model_config = ConfigDict(frozen=True)

    member_id: str
    name: str
    total_paid: str
    total_owed: str
    net_balance: str  # positive = owed by the group, negative = owes the group

    @property
    def net_minor_units(self) -> int:
        return to_minor_units(self.net_balance)


class Settlement(BaseModel):
    """A single payment from a net debtor to a net creditor."""

    model_config = ConfigDict(frozen=True)

    from_id: str
    from_name: str
    to_id: str
    to_name: str
    amount: str


class GroupSummary(BaseModel):
    """Balances and the settlement plan computed from one snapshot."""

    balances: list[Balance]
    settlements: list[Settlement]

    @property
    def is_settled(self) -> bool:
        """True when nobody owes anything."""
        return not self.settlements
