"""CLI for SplitLedger using Typer."""

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager

import typer
from rich.console import Console
from rich.table import Table

from .config import load_settings
from .db import Database
from .models import Balance, GroupSummary
from .money import from_minor_units, to_minor_units
from .service import GroupService
from .ui import confirm_action, select_member_interactive

app = typer.Typer(
    name="splitledger",
    help="Track shared expenses and work out who pays whom",
)
member_app = typer.Typer(help="Manage group members")
expense_app = typer.Typer(help="Manage shared expenses")

app.add_typer(member_app, name="member")
app.add_typer(expense_app, name="expense")

console = Console()


def setup_logging(verbose: bool = False):
    """Setup logging configuration."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )


@contextmanager
def open_service(verbose: bool) -> Iterator[GroupService]:
    """Load settings, open the database and report errors the CLI way."""
    setup_logging(verbose)
    db = None

    try:
        settings = load_settings()
        db = Database(settings.database_path)
        yield GroupService(settings, db)

    except Exception as e:
        console.print(f"\n[bold red]Error:[/bold red] {e}")
        if verbose:
            raise
        sys.exit(1)
    finally:
        if db is not None:
            db.close()


def format_money(service: GroupService, amount: str, use_color: bool = True) -> str:
    """
    Format money in accounting style with alignment.

    Negative amounts use parentheses: (₹85.02)
    Positive amounts have spaces:      ₹85.02
    """
    cents = to_minor_units(amount)
    formatted = service.format(from_minor_units(abs(cents)))
    if cents < 0:
        return f"([red]{formatted}[/red])" if use_color else f"({formatted})"
    if cents > 0 and use_color:
        return f" [green]{formatted}[/green] "
    return f" {formatted} "


# ============================================================================
# Members
# ============================================================================


@member_app.command("add")
def member_add(
    name: str = typer.Argument(..., help="Display name of the new member"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """Add a member to the group."""
    with open_service(verbose) as service:
        member = service.add_member(name)
        console.print(f"[green]✓ Added {member.name}[/green]")


@member_app.command("remove")
def member_remove(
    name: str = typer.Argument(..., help="Name or id of the member"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """Remove a member who is not part of any expense."""
    with open_service(verbose) as service:
        member = service.find_member(name)
        service.remove_member(member.id)
        console.print(f"[green]✓ Removed {member.name}[/green]")


@member_app.command("list")
def member_list(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """List group members."""
    with open_service(verbose) as service:
        members = service.list_members()
        if not members:
            console.print("[yellow]No members yet.[/yellow]")
            return

        table = Table(title="Members", show_header=True, header_style="bold magenta")
        table.add_column("#", style="dim", justify="right")
        table.add_column("Name", style="cyan")
        table.add_column("Added", style="dim")

        for idx, member in enumerate(members, 1):
            table.add_row(
                str(idx), member.name, member.created_at.strftime("%Y-%m-%d %H:%M")
            )

        console.print(table)


# ============================================================================
# Expenses
# ============================================================================


@expense_app.command("add")
def expense_add(
    title: str = typer.Option(..., "--title", "-t", help="What the money was for"),
    amount: str = typer.Option(..., "--amount", "-a", help="Amount, e.g. 100.00"),
    paid_by: str | None = typer.Option(
        None, "--paid-by", "-p", help="Member who paid (prompted if omitted)"
    ),
    split: list[str] | None = typer.Option(
        None, "--split", "-s", help="Member sharing the cost (repeat; default: all)"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """
    Record an expense split equally between members.

    The first members listed in --split absorb any leftover cents.
    """
    with open_service(verbose) as service:
        members = service.list_members()
        if not members:
            console.print("[yellow]No members yet.[/yellow]")
            return

        if paid_by:
            payer = service.find_member(paid_by)
        else:
            payer = select_member_interactive(members, "Paid by")
            if payer is None:
                console.print("[yellow]No payer selected.[/yellow]")
                return

        if split:
            participants = [service.find_member(name) for name in split]
        else:
            participants = members

        expense = service.add_expense(
            title=title,
            amount=amount,
            payer_id=payer.id,
            participant_ids=[m.id for m in participants],
        )

        console.print(
            f"[green]✓ Added '{expense.title}' ({service.format(expense.amount)}) "
            f"paid by {payer.name}, split between "
            f"{', '.join(m.name for m in participants)}[/green]"
        )


@expense_app.command("remove")
def expense_remove(
    expense_id: str = typer.Argument(..., help="Id of the expense"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """Remove an expense."""
    with open_service(verbose) as service:
        if service.remove_expense(expense_id):
            console.print("[green]✓ Expense removed[/green]")
        else:
            console.print(f"[yellow]No expense with id {expense_id}.[/yellow]")


@expense_app.command("list")
def expense_list(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """List recorded expenses."""
    with open_service(verbose) as service:
        snapshot = service.snapshot()
        if not snapshot.expenses:
            console.print("[yellow]No expenses yet.[/yellow]")
            return

        names = {member.id: member.name for member in snapshot.members}

        table = Table(title="Expenses", show_header=True, header_style="bold magenta")
        table.add_column("ID", style="dim")
        table.add_column("Title", style="cyan", width=30)
        table.add_column("Amount", justify="right")
        table.add_column("Paid by", style="yellow")
        table.add_column("Split between")

        for expense in snapshot.expenses:
            table.add_row(
                expense.id,
                expense.title,
                service.format(expense.amount),
                names[expense.payer_id],
                ", ".join(names[mid] for mid in expense.participant_ids),
            )

        console.print(table)


# ============================================================================
# Balances and settlements
# ============================================================================


def display_balances(service: GroupService, balances: list[Balance]):
    """Display balances in a table."""
    table = Table(title="Balances", show_header=True, header_style="bold magenta")
    table.add_column("Member", style="cyan")
    table.add_column("Paid", justify="right")
    table.add_column("Owed", justify="right")
    table.add_column("Net", justify="right")

    for balance in balances:
        table.add_row(
            balance.name,
            service.format(balance.total_paid),
            service.format(balance.total_owed),
            format_money(service, balance.net_balance),
        )

    console.print(table)

    # Verification
    net_total = sum(balance.net_minor_units for balance in balances)
    if net_total == 0:
        console.print("  [green]✓ Balances sum to zero[/green]")
    else:
        console.print(f"  [red]✗ Balances off by {net_total} minor units[/red]")


def display_settlements(service: GroupService, summary: GroupSummary):
    """Display the settlement plan."""
    if summary.is_settled:
        console.print("\n[bold green]✓ All settled up![/bold green]\n")
        return

    table = Table(
        title="Settlements", show_header=True, header_style="bold magenta"
    )
    table.add_column("From", style="red")
    table.add_column("", justify="center")
    table.add_column("To", style="green")
    table.add_column("Amount", justify="right")

    for settlement in summary.settlements:
        table.add_row(
            settlement.from_name,
            "→",
            settlement.to_name,
            service.format(settlement.amount),
        )

    console.print()
    console.print(table)
    console.print(f"  Total payments: {len(summary.settlements)}\n")


@app.command()
def balances(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """Show what each member paid, owes and is owed."""
    with open_service(verbose) as service:
        if not service.list_members():
            console.print("[yellow]No members yet.[/yellow]")
            return
        display_balances(service, service.compute_balances())


@app.command()
def settle(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """Show balances and the payments that settle them."""
    with open_service(verbose) as service:
        if not service.list_members():
            console.print("[yellow]No members yet.[/yellow]")
            return

        summary = service.summarize()
        display_balances(service, summary.balances)
        display_settlements(service, summary)


@app.command()
def reset(
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation prompt"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """Delete every member and expense."""
    with open_service(verbose) as service:
        if not yes and not confirm_action("Delete all members and expenses?"):
            console.print("[yellow]Cancelled.[/yellow]")
            return

        service.clear_all()
        console.print("[green]✓ Group cleared[/green]")


if __name__ == "__main__":
    app()
