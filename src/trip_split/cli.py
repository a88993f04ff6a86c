"""CLI for TripSplit using Typer."""

import logging
import sys
from decimal import Decimal
from pathlib import Path
from typing import NoReturn

import typer
from rich.console import Console
from rich.table import Table

from .calculator import balance_status, format_currency
from .config import Settings, load_settings
from .exceptions import TripSplitError
from .loader import load_ledger
from .models import (
    BalanceRecord,
    DetailedBalanceRecord,
    Ledger,
    MemberExpenseBreakdown,
    SettlementSuggestion,
    Trip,
    UserBalanceReport,
)
from .service import BalanceService
from .ui import select_trip_interactive

app = typer.Typer(
    name="trip-split",
    help="Split shared trip expenses and work out who owes whom",
)

console = Console()

LEDGER_OPTION = typer.Option(
    None, "--ledger", "-l", help="Ledger JSON file (default: TRIP_SPLIT_LEDGER_PATH)"
)
VERBOSE_OPTION = typer.Option(False, "--verbose", "-v", help="Verbose output")


def setup_logging(verbose: bool = False):
    """Setup logging configuration."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )


def format_money(amount: Decimal, symbol: str = "₱", use_color: bool = True) -> str:
    """
    Format money in accounting style with alignment.

    Negative amounts use parentheses: (₱85.02)
    Positive amounts have spaces:      ₱85.02
    The spaces ensure decimal points align in tables.
    """
    formatted = format_currency(abs(amount))
    if amount < 0:
        if use_color:
            return f"({symbol}[red]{formatted}[/red])"
        return f"({symbol}{formatted})"
    if use_color:
        return f" [green]{symbol}{formatted}[/green] "
    return f" {symbol}{formatted} "


def _load(ledger_path: Path | None) -> tuple[Settings, Ledger]:
    """Load settings and the ledger, preferring an explicit path."""
    settings = load_settings()
    ledger = load_ledger(ledger_path or settings.ledger_path)
    return settings, ledger


def _pick_trip(ledger: Ledger, trip_id: str | None) -> Trip | None:
    """Resolve the trip to report on, prompting when no id was given."""
    if trip_id is None:
        trip_id = select_trip_interactive(ledger.trips)
        if trip_id is None:
            return None
    return ledger.get_trip(trip_id)


def _fail(error: Exception, verbose: bool) -> NoReturn:
    """Report an error and exit."""
    console.print(f"\n[bold red]Error:[/bold red] {error}")
    if verbose:
        raise error
    sys.exit(1)


def display_balances(trip: Trip, balances: list[BalanceRecord], symbol: str):
    """Display per-member balances in a table."""
    table = Table(
        title=f"Balances: {trip.name}", show_header=True, header_style="bold magenta"
    )
    table.add_column("Member", style="cyan")
    table.add_column("Share", justify="right")
    table.add_column("Owed back", justify="right")
    table.add_column("Net", justify="right")
    table.add_column("Status", no_wrap=False)

    for balance in balances:
        status = balance_status(balance.net_balance, symbol)
        style = {"positive": "green", "negative": "red", "settled": "dim"}[status.tone]
        table.add_row(
            balance.user_name,
            format_money(balance.total_owed, symbol, use_color=False),
            format_money(balance.total_owing, symbol, use_color=False),
            format_money(balance.net_balance, symbol),
            f"[{style}]{status.text}[/{style}]",
        )

    console.print(table)
    console.print(
        f"  Total spent: {format_money(trip.total_expenses(), symbol, use_color=False)}"
    )


def display_breakdown(trip: Trip, balances: list[DetailedBalanceRecord], symbol: str):
    """Display the pairwise who-owes-whom breakdown."""
    table = Table(
        title=f"Who owes whom: {trip.name}",
        show_header=True,
        header_style="bold magenta",
    )
    table.add_column("Member", style="cyan")
    table.add_column("Owes to", no_wrap=False)
    table.add_column("Owed by", no_wrap=False)
    table.add_column("Net", justify="right")

    for balance in balances:
        owes_to = "\n".join(
            f"{entry.user_name}: {symbol} {format_currency(entry.amount)}"
            for entry in balance.owes_to
        )
        owed_by = "\n".join(
            f"{entry.user_name}: {symbol} {format_currency(entry.amount)}"
            for entry in balance.owed_by
        )
        table.add_row(
            balance.user_name,
            owes_to or "[dim]—[/dim]",
            owed_by or "[dim]—[/dim]",
            format_money(balance.net_balance, symbol),
        )

    console.print(table)


def display_expense_breakdowns(
    trip: Trip, breakdowns: list[MemberExpenseBreakdown], symbol: str
):
    """Display each member's debts by payer, down to individual expenses."""
    table = Table(
        title=f"Expenses behind each debt: {trip.name}",
        show_header=True,
        header_style="bold magenta",
    )
    table.add_column("Member", style="cyan")
    table.add_column("Paid by", style="green")
    table.add_column("Expense", no_wrap=False)
    table.add_column("Amount", justify="right")
    table.add_column("Share", justify="right")

    for member in breakdowns:
        if not member.paid_by_breakdown:
            continue

        for payer in member.paid_by_breakdown:
            for share in payer.expenses:
                table.add_row(
                    member.user_name,
                    payer.paid_by_name,
                    share.expense_title or share.expense_id,
                    format_money(share.expense_amount, symbol, use_color=False),
                    format_money(share.user_share, symbol, use_color=False),
                )
            table.add_row(
                "",
                "",
                f"[bold]Owed to {payer.paid_by_name}[/bold]",
                "",
                format_money(payer.total_paid_for_user, symbol, use_color=False),
            )

        table.add_row(
            "",
            "",
            f"[bold]{member.user_name} total[/bold]",
            "",
            format_money(member.total_owed, symbol, use_color=False),
            end_section=True,
        )

    console.print(table)


def display_settlements(
    trip: Trip, suggestions: list[SettlementSuggestion], symbol: str
):
    """Display settlement suggestions in order."""
    if not suggestions:
        console.print(f"\n[green]✓ {trip.name}: all settled up![/green]\n")
        return

    table = Table(
        title=f"Settle up: {trip.name}", show_header=True, header_style="bold magenta"
    )
    table.add_column("#", style="dim", width=4)
    table.add_column("From", style="red")
    table.add_column("To", style="green")
    table.add_column("Amount", justify="right")

    for idx, suggestion in enumerate(suggestions, start=1):
        table.add_row(
            str(idx),
            suggestion.from_user_name,
            suggestion.to_user_name,
            format_money(suggestion.amount, symbol, use_color=False),
        )

    console.print(table)
    console.print(f"  Transfers needed: {len(suggestions)}")


def display_user_report(report: UserBalanceReport, symbol: str):
    """Display a member's position across trips."""
    status = balance_status(report.net_balance, symbol)

    console.print(f"\n[bold]Balance for {report.user_id}:[/bold]")
    console.print(f"  You owe:      {format_money(report.total_owed, symbol, False)}")
    console.print(f"  You are owed: {format_money(report.total_owing, symbol, False)}")
    console.print(f"  {status.text}")
    console.print()

    if not report.trip_balances:
        console.print("[dim]No outstanding amounts on any trip.[/dim]")
        return

    table = Table(title="By trip", show_header=True, header_style="bold magenta")
    table.add_column("Trip", style="cyan")
    table.add_column("You owe", justify="right")
    table.add_column("You are owed", justify="right")

    for trip_balance in report.trip_balances:
        table.add_row(
            trip_balance.trip_name,
            format_money(trip_balance.total_owed, symbol, use_color=False),
            format_money(trip_balance.total_owing, symbol, use_color=False),
        )

    console.print(table)


@app.command()
def trips(
    ledger_path: Path | None = LEDGER_OPTION,
    verbose: bool = VERBOSE_OPTION,
):
    """List the trips in the ledger."""
    setup_logging(verbose)

    try:
        settings, ledger = _load(ledger_path)
    except TripSplitError as e:
        _fail(e, verbose)

    if not ledger.trips:
        console.print("[yellow]No trips found.[/yellow]")
        return

    table = Table(title="Trips", show_header=True, header_style="bold magenta")
    table.add_column("ID", style="dim")
    table.add_column("Name", style="cyan")
    table.add_column("Members", justify="right")
    table.add_column("Expenses", justify="right")
    table.add_column("Total", justify="right")

    for trip in ledger.trips:
        table.add_row(
            trip.id,
            trip.name,
            str(len(trip.members)),
            str(len(trip.expenses)),
            format_money(trip.total_expenses(), settings.currency_symbol, False),
        )

    console.print(table)


@app.command()
def balances(
    trip_id: str | None = typer.Argument(None, help="Trip id (prompts if omitted)"),
    ledger_path: Path | None = LEDGER_OPTION,
    verbose: bool = VERBOSE_OPTION,
):
    """Show each member's share, amount owed back, and net balance."""
    setup_logging(verbose)

    try:
        settings, ledger = _load(ledger_path)
        trip = _pick_trip(ledger, trip_id)
        if trip is None:
            console.print("[yellow]No trip selected.[/yellow]")
            return

        service = BalanceService(settings)
        records = service.trip_balances(trip)
    except TripSplitError as e:
        _fail(e, verbose)

    display_balances(trip, records, settings.currency_symbol)


@app.command()
def breakdown(
    trip_id: str | None = typer.Argument(None, help="Trip id (prompts if omitted)"),
    ledger_path: Path | None = LEDGER_OPTION,
    expenses: bool = typer.Option(
        False, "--expenses", "-e", help="List the expenses behind each debt"
    ),
    verbose: bool = VERBOSE_OPTION,
):
    """Show who owes whom on a trip, pair by pair."""
    setup_logging(verbose)

    try:
        settings, ledger = _load(ledger_path)
        trip = _pick_trip(ledger, trip_id)
        if trip is None:
            console.print("[yellow]No trip selected.[/yellow]")
            return

        service = BalanceService(settings)
        records = service.trip_detailed_balances(trip)
        details = service.trip_expense_breakdowns(trip) if expenses else None
    except TripSplitError as e:
        _fail(e, verbose)

    display_breakdown(trip, records, settings.currency_symbol)
    if details is not None:
        display_expense_breakdowns(trip, details, settings.currency_symbol)


@app.command()
def settle(
    trip_id: str | None = typer.Argument(None, help="Trip id (prompts if omitted)"),
    ledger_path: Path | None = LEDGER_OPTION,
    verbose: bool = VERBOSE_OPTION,
):
    """Suggest the transfers that settle a trip."""
    setup_logging(verbose)

    try:
        settings, ledger = _load(ledger_path)
        trip = _pick_trip(ledger, trip_id)
        if trip is None:
            console.print("[yellow]No trip selected.[/yellow]")
            return

        service = BalanceService(settings)
        suggestions = service.trip_settlements(trip)
    except TripSplitError as e:
        _fail(e, verbose)

    display_settlements(trip, suggestions, settings.currency_symbol)


@app.command()
def user(
    user_id: str = typer.Argument(..., help="Member id"),
    ledger_path: Path | None = LEDGER_OPTION,
    verbose: bool = VERBOSE_OPTION,
):
    """Show a member's balance across all of their trips."""
    setup_logging(verbose)

    try:
        settings, ledger = _load(ledger_path)
        service = BalanceService(settings)
        report = service.user_balance(user_id, ledger.trips)
    except TripSplitError as e:
        _fail(e, verbose)

    display_user_report(report, settings.currency_symbol)


if __name__ == "__main__":
    app()
