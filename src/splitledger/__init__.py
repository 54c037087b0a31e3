"""SplitLedger - Split shared expenses and settle up with the fewest payments."""

__version__ = "0.1.0"

from .config import Settings, load_settings
from .db import Database
from .ledger import compute_balances
from .models import (
    Balance,
    Expense,
    ExpenseShare,
    GroupSnapshot,
    GroupSummary,
    Member,
    Settlement,
)
from .money import from_minor_units, to_minor_units
from .service import GroupService
from .settlement import compute_settlements
from .splitter import divide_equally

__all__ = [
    "Settings",
    "load_settings",
    "Database",
    "Balance",
    "Expense",
    "ExpenseShare",
    "GroupSnapshot",
    "GroupSummary",
    "Member",
    "Settlement",
    "compute_balances",
    "compute_settlements",
    "divide_equally",
    "from_minor_units",
    "to_minor_units",
    "GroupService",
]
