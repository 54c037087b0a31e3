"""SQLite storage for group members and expenses."""

import sqlite3
from datetime import datetime
from pathlib import Path

from .models import Expense, GroupSnapshot, Member


def name_key(name: str) -> str:
    """Normalize a member name for case-insensitive uniqueness."""
    return name.strip().casefold()


class Database:
    """SQLite database manager."""

    def __init__(self, db_path: Path):
        """Initialize database connection."""
        self.db_path = db_path
        self.conn = sqlite3.connect(str(db_path))
        self.conn.row_factory = sqlite3.Row
        self.conn.execute("PRAGMA foreign_keys = ON")
        self._init_schema()

    def _init_schema(self):
        """Initialize database schema."""
        cursor = self.conn.cursor()

        # Members, kept in insertion order via seq
        cursor.execute(
            """
            CREATE TABLE IF NOT EXISTS members (
                seq INTEGER PRIMARY KEY AUTOINCREMENT,
                id TEXT NOT NULL UNIQUE,
                name TEXT NOT NULL,
                name_key TEXT NOT NULL UNIQUE,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """
        )

        # Expenses
        cursor.execute(
            """
            CREATE TABLE IF NOT EXISTS expenses (
                seq INTEGER PRIMARY KEY AUTOINCREMENT,
                id TEXT NOT NULL UNIQUE,
                title TEXT NOT NULL,
                amount_minor_units INTEGER NOT NULL CHECK (amount_minor_units > 0),
                payer_id TEXT NOT NULL REFERENCES members(id),
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """
        )

        # Participants per expense; position keeps the split order
        cursor.execute(
            """
            CREATE TABLE IF NOT EXISTS expense_participants (
                expense_id TEXT NOT NULL REFERENCES expenses(id) ON DELETE CASCADE,
                member_id TEXT NOT NULL REFERENCES members(id),
                position INTEGER NOT NULL,
                PRIMARY KEY (expense_id, position),
                UNIQUE (expense_id, member_id)
            )
        """
        )

        self.conn.commit()

    def close(self):
        """Close database connection."""
        self.conn.close()

    # ========================================================================
    # Member operations
    # ========================================================================

    def add_member(self, member: Member) -> None:
        """Insert a member."""
        cursor = self.conn.cursor()
        cursor.execute(
            """
            INSERT INTO members (id, name, name_key, created_at)
            VALUES (?, ?, ?, ?)
            """,
            (
                member.id,
                member.name,
                name_key(member.name),
                member.created_at.isoformat(),
            ),
        )
        self.conn.commit()

    def get_member(self, member_id: str) -> Member | None:
        """Get a member by id."""
        cursor = self.conn.cursor()
        cursor.execute(
            "SELECT id, name, created_at FROM members WHERE id = ?", (member_id,)
        )
        row = cursor.fetchone()
        return self._row_to_member(row) if row else None

    def get_member_by_name(self, name: str) -> Member | None:
        """Get a member by name, ignoring case."""
        cursor = self.conn.cursor()
        cursor.execute(
            "SELECT id, name, created_at FROM members WHERE name_key = ?",
            (name_key(name),),
        )
        row = cursor.fetchone()
        return self._row_to_member(row) if row else None

    def get_members(self) -> list[Member]:
        """Get all members in the order they were added."""
        cursor = self.conn.cursor()
        cursor.execute("SELECT id, name, created_at FROM members ORDER BY seq")
        return [self._row_to_member(row) for row in cursor.fetchall()]

    def is_member_referenced(self, member_id: str) -> bool:
        """Check if any expense is paid by or split with a member."""
        cursor = self.conn.cursor()
        cursor.execute(
            """
            SELECT 1 FROM expenses WHERE payer_id = ?
            UNION
            SELECT 1 FROM expense_participants WHERE member_id = ?
            LIMIT 1
            """,
            (member_id, member_id),
        )
        return cursor.fetchone() is not None

    def delete_member(self, member_id: str) -> bool:
        """Delete a member. Returns True if a row was removed."""
        cursor = self.conn.cursor()
        cursor.execute("DELETE FROM members WHERE id = ?", (member_id,))
        self.conn.commit()
        return cursor.rowcount > 0

    @staticmethod
    def _row_to_member(row: sqlite3.Row) -> Member:
        return Member(
            id=row["id"],
            name=row["name"],
            created_at=datetime.fromisoformat(row["created_at"]),
        )

    # ========================================================================
    # Expense operations
    # ========================================================================

    def add_expense(self, expense: Expense) -> None:
        """Insert an expense and its participants in one transaction."""
        with self.conn:
            self.conn.execute(
                """
                INSERT INTO expenses (
                    id, title, amount_minor_units, payer_id, created_at
                ) VALUES (?, ?, ?, ?, ?)
                """,
                (
                    expense.id,
                    expense.title,
                    expense.amount_minor_units,
                    expense.payer_id,
                    expense.created_at.isoformat(),
                ),
            )
            self.conn.executemany(
                """
                INSERT INTO expense_participants (expense_id, member_id, position)
                VALUES (?, ?, ?)
                """,
                [
                    (expense.id, member_id, position)
                    for position, member_id in enumerate(expense.participant_ids)
                ],
            )

    def get_expenses(self) -> list[Expense]:
        """Get all expenses in the order they were added."""
        cursor = self.conn.cursor()
        cursor.execute(
            """
            SELECT expense_id, member_id
            FROM expense_participants
            ORDER BY expense_id, position
            """
        )
        participants: dict[str, list[str]] = {}
        for row in cursor.fetchall():
            participants.setdefault(row["expense_id"], []).append(row["member_id"])

        cursor.execute(
            """
            SELECT id, title, amount_minor_units, payer_id, created_at
            FROM expenses
            ORDER BY seq
            """
        )
        return [
            Expense(
                id=row["id"],
                title=row["title"],
                amount_minor_units=row["amount_minor_units"],
                payer_id=row["payer_id"],
                participant_ids=tuple(participants.get(row["id"], [])),
                created_at=datetime.fromisoformat(row["created_at"]),
            )
            for row in cursor.fetchall()
        ]

    def delete_expense(self, expense_id: str) -> bool:
        """Delete an expense and its participants. Returns True if it existed."""
        with self.conn:
            cursor = self.conn.execute(
                "DELETE FROM expenses WHERE id = ?", (expense_id,)
            )
        return cursor.rowcount > 0

    # ========================================================================
    # Group operations
    # ========================================================================

    def get_snapshot(self) -> GroupSnapshot:
        """Read the whole group as an immutable snapshot."""
        return GroupSnapshot(
            members=tuple(self.get_members()),
            expenses=tuple(self.get_expenses()),
        )

    def clear(self) -> None:
        """Remove all members and expenses."""
        with self.conn:
            self.conn.execute("DELETE FROM expense_participants")
            self.conn.execute("DELETE FROM expenses")
            self.conn.execute("DELETE FROM members")
