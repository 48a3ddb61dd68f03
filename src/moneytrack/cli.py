"""Command line entry points for MoneyTrack."""

from __future__ import annotations

from datetime import date

import click

from .config import BaseConfig
from .context import AppContext, create_app_context
from .errors import MoneyTrackError
from .logging_config import setup_logging
from .models.enums import PaymentFrequency


def _context() -> AppContext:
    """Build the app context from the configuration loaded by the group."""

    return create_app_context(click.get_current_context().obj)


@click.group()
@click.version_option(package_name="moneytrack")
@click.pass_context
def cli(ctx: click.Context) -> None:
    """Ledger and loan tools for the MoneyTrack database."""

    config = BaseConfig()
    setup_logging(config)
    ctx.obj = config


@cli.command("init-db")
def init_db() -> None:
    """Create the database schema if it does not exist."""

    ctx = _context()
    try:
        click.echo(f"Database ready: {ctx.config.DATABASE_URL}")
    finally:
        ctx.dispose()


@cli.command("schedule")
@click.option("--principal", required=True, help="Amount borrowed")
@click.option("--rate", default="0", show_default=True,
              help="Annual interest rate as a fraction, e.g. 0.35")
@click.option("--count", type=int, required=True, help="Number of installments")
@click.option(
    "--frequency",
    type=click.Choice([f.value for f in PaymentFrequency], case_sensitive=False),
    default=PaymentFrequency.MONTHLY.value,
    show_default=True,
)
@click.option("--start", "start_date", type=click.DateTime(formats=["%Y-%m-%d"]),
              default=None, help="Loan start date (defaults to today)")
def schedule(principal: str, rate: str, count: int, frequency: str, start_date) -> None:
    """Preview an amortization schedule without saving anything."""

    from .services.amortization import generate_schedule, schedule_summary

    start = start_date.date() if start_date else date.today()
    freq = next(f for f in PaymentFrequency if f.value.lower() == frequency.lower())
    try:
        rows = generate_schedule(
            principal=principal,
            annual_rate=rate,
            installment_count=count,
            start_date=start,
            frequency=freq,
        )
    except MoneyTrackError as exc:
        raise click.ClickException(str(exc)) from exc

    click.echo(f"{'#':>3}  {'due':<10}  {'principal':>12}  {'interest':>10}  {'total':>12}")
    for row in rows:
        click.echo(
            f"{row.sequence:>3}  {row.due_date.isoformat():<10}  {row.principal_amount:>12}  "
            f"{row.interest_amount:>10}  {row.total_amount:>12}"
        )
    summary = schedule_summary(rows)
    click.echo(f"Total interest: {summary.total_interest}")
    click.echo(f"Total paid: {summary.total_paid}")


@cli.command("debt")
def debt() -> None:
    """Show outstanding debt and the next installment due."""

    ctx = _context()
    try:
        click.echo(f"Total debt: {ctx.loans.get_total_debt()}")
        upcoming = ctx.loans.get_next_payment_due()
        if upcoming is None:
            click.echo("No payments due.")
        else:
            click.echo(
                f"Next payment: loan {upcoming.loan.id} installment "
                f"#{upcoming.installment.sequence} due {upcoming.installment.due_date.isoformat()} "
                f"amount {upcoming.installment.total_amount}"
            )
    finally:
        ctx.dispose()


@cli.command("check-balances")
def check_balances() -> None:
    """Compare cached account balances with their transaction history."""

    ctx = _context()
    try:
        drifts = ctx.ledger.find_balance_drift()
    finally:
        ctx.dispose()
    if not drifts:
        click.echo("All balances consistent.")
        return
    for drift in drifts:
        click.echo(
            f"Account {drift.account_id}: cached {drift.cached} derived {drift.derived} "
            f"(off by {drift.difference})"
        )
    click.get_current_context().exit(1)


def main() -> None:  # pragma: no cover - console script shim
    cli()


if __name__ == "__main__":  # pragma: no cover
    main()
