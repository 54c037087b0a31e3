"""Custom exceptions for SplitLedger."""


class SplitLedgerError(Exception):
    """Base exception for all SplitLedger errors."""

    pass


class ConfigurationError(SplitLedgerError):
    """Raised when configuration is invalid or missing."""

    pass


class InvalidAmountError(SplitLedgerError):
    """Raised when an amount is zero, negative or non-numeric where a positive amount is required."""

    def __init__(self, amount: object, message: str | None = None):
        self.amount = amount
        super().__init__(message or f"Invalid amount: {amount!r} (must be > 0)")


class InvalidReferenceError(SplitLedgerError):
    """Raised when a payer or participant id does not match any member."""

    def __init__(self, member_id: str, message: str | None = None):
        self.member_id = member_id
        super().__init__(message or f"Unknown member: {member_id}")


class DegenerateSplitError(SplitLedgerError):
    """Raised when an expense has no participants to split between."""

    def __init__(self, expense_id: str | None = None, message: str | None = None):
        self.expense_id = expense_id
        super().__init__(
            message or f"Expense {expense_id or '<new>'} has no participants"
        )


class InvalidNameError(SplitLedgerError):
    """Raised when a member name or expense title is empty."""

    pass


class DuplicateMemberError(SplitLedgerError):
    """Raised when a member with the same name (ignoring case) already exists."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Member '{name}' already exists")


class MemberInUseError(SplitLedgerError):
    """Raised when removing a member that is still referenced by an expense."""

    def __init__(self, member_id: str, name: str):
        self.member_id = member_id
        self.name = name
        super().__init__(
            f"Cannot remove '{name}': member is referenced by one or more expenses"
        )
