"""CLI for the ``pocketpal`` package.

A Typer-based console interface over the ledger: record spending, list
categories and print the same totals the dashboard shows. Business
logic lives in ``pocketpal.orchestrator`` and ``pocketpal.queries``.
"""

import asyncio
from datetime import datetime
from typing import Awaitable, Callable, Optional, TypeVar

import typer
from pydantic import ValidationError

from pocketpal.config import LedgerSettings, get_settings
from pocketpal.models.ledger import Transaction, TransactionDraft
from pocketpal.orchestrator import Ledger, create_ledger
from pocketpal.periods import to_local
from pocketpal.queries import Period, ReportBuilder, format_rupiah
from pocketpal.services.storage import DuplicateCategory, StorageError


T = TypeVar("T")

app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help="Record expenses in a local ledger and report rolling totals.",
)

DB_OPTION = typer.Option(None, "--db", help="Ledger file (overrides POCKETPAL_DATABASE_PATH).")


def _settings(db: Optional[str]) -> LedgerSettings:
    settings = get_settings()
    if db:
        settings = settings.model_copy(update={"database_path": db})
    return settings


def _run(db: Optional[str], action: Callable[[Ledger], Awaitable[T]]) -> T:
    """Open the ledger, run ``action`` against it, always close it."""

    async def runner() -> T:
        ledger = await create_ledger(_settings(db))
        try:
            return await action(ledger)
        finally:
            await ledger.close()

    try:
        return asyncio.run(runner())
    except StorageError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)


def _describe(ledger: Ledger, tx: Transaction) -> str:
    when = to_local(tx.timestamp, ledger.tz).strftime("%Y-%m-%d %H:%M")
    line = f"{when} - {tx.category} - {format_rupiah(tx.amount)}"
    if tx.app:
        line += f" (via {tx.app})"
    return line


@app.command("init")
def init_cmd(db: Optional[str] = DB_OPTION) -> None:
    """Create or upgrade the ledger and seed the default categories."""

    async def action(ledger: Ledger) -> int:
        return len(await ledger.get_categories())

    count = _run(db, action)
    typer.echo(f"Ledger ready with {count} categories.")


@app.command("add")
def add_cmd(
    amount: str = typer.Argument(..., help="Amount spent, e.g. 15000 or 1500.50"),
    category: str = typer.Argument(..., help="Category name"),
    on: Optional[datetime] = typer.Option(
        None, "--date", formats=["%Y-%m-%d"], help="Date of the expense (default today)."
    ),
    notes: Optional[str] = typer.Option(None, help="Free-text notes."),
    pay_app: Optional[str] = typer.Option(None, "--app", help="Payment app used (gopay, jenius, bca)."),
    db: Optional[str] = DB_OPTION,
) -> None:
    """Record one expense."""
    try:
        draft = TransactionDraft(
            amount=amount,
            category=category,
            date=on.date() if on else datetime.now(_settings(db).tzinfo).date(),
            notes=notes,
            app=pay_app,
        )
    except ValidationError as e:
        typer.echo(f"Invalid expense: {e.errors()[0]['msg']}", err=True)
        raise typer.Exit(2)

    tx_id = _run(db, lambda ledger: ledger.add_transaction(draft))
    typer.echo(f"Saved {format_rupiah(draft.decimal_amount)} for {draft.category} (#{tx_id}).")


@app.command("categories")
def categories_cmd(db: Optional[str] = DB_OPTION) -> None:
    """List categories."""
    for category in _run(db, lambda ledger: ledger.get_categories()):
        typer.echo(category.name)


@app.command("add-category")
def add_category_cmd(
    name: str = typer.Argument(..., help="New category name"),
    db: Optional[str] = DB_OPTION,
) -> None:
    """Add a category."""
    async def action(ledger: Ledger) -> Optional[int]:
        try:
            return await ledger.add_category(name)
        except DuplicateCategory as e:
            typer.echo(str(e), err=True)
            return None

    try:
        category_id = _run(db, action)
    except ValueError as e:
        typer.echo(f"Invalid category: {e}", err=True)
        raise typer.Exit(2)
    if category_id is None:
        raise typer.Exit(1)
    typer.echo(f"Added category {name.strip()} (#{category_id}).")


@app.command("summary")
def summary_cmd(db: Optional[str] = DB_OPTION) -> None:
    """Totals for today, this week and this month."""
    totals = _run(db, lambda ledger: ReportBuilder(ledger).period_totals())
    typer.echo(f"Today:      {format_rupiah(totals.today)}")
    typer.echo(f"This week:  {format_rupiah(totals.week)}")
    typer.echo(f"This month: {format_rupiah(totals.month)}")


@app.command("report")
def report_cmd(
    period: Period = typer.Argument(Period.TODAY, help="today, week or month"),
    db: Optional[str] = DB_OPTION,
) -> None:
    """Category breakdown and per-bucket totals for one period."""

    async def action(ledger: Ledger):
        report = await ReportBuilder(ledger).report(period)
        return report, [_describe(ledger, tx) for tx in report.transactions]

    report, lines = _run(db, action)
    typer.echo(f"Total: {format_rupiah(report.total)}")
    if report.is_empty:
        typer.echo("No data to display")
        return

    typer.echo("By category:")
    for name, amount in sorted(report.by_category.items(), key=lambda item: item[1], reverse=True):
        typer.echo(f"  {name}: {format_rupiah(amount)}")
    typer.echo("By bucket:")
    for label, amount in zip(report.labels, report.buckets):
        if amount:
            typer.echo(f"  {label}: {format_rupiah(amount)}")
    typer.echo("Transactions:")
    for line in lines:
        typer.echo(f"  {line}")


@app.command("recent")
def recent_cmd(
    n: Optional[int] = typer.Option(None, "-n", help="How many to show (default from settings)."),
    db: Optional[str] = DB_OPTION,
) -> None:
    """The most recent transactions."""
    limit = n if n is not None else _settings(db).recent_limit

    async def action(ledger: Ledger) -> list[str]:
        return [_describe(ledger, tx) for tx in await ReportBuilder(ledger).recent(limit)]

    lines = _run(db, action)
    if not lines:
        typer.echo("No transactions yet")
    for line in lines:
        typer.echo(line)


if __name__ == "__main__":
    app()
