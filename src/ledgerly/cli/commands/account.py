"""Chart of accounts commands."""

import click

from ledgerly.cli.error_handling import fail, handle_domain_error
from ledgerly.cli.input_parsing import resolve_account_or_exit
from ledgerly.domain.entities import AccountType, StatementBucket
from ledgerly.domain.errors import DomainError
from ledgerly.domain.reference_data import format_currency


@click.group()
def account_group():
    """Manage the chart of accounts."""
    pass


@account_group.command("list")
@click.option(
    "--type",
    "account_type",
    type=click.Choice([t.value for t in AccountType]),
    help="Only show accounts of this type",
)
@click.option("--active-only", is_flag=True, help="Hide inactive accounts")
@click.pass_context
def list_accounts(ctx, account_type: str | None, active_only: bool):
    """List accounts with their balances."""
    ledger = ctx.obj["books"].ledger

    accounts = ledger.get_accounts()
    if account_type:
        accounts = [a for a in accounts if a.type.value == account_type]
    if active_only:
        accounts = [a for a in accounts if a.is_active]
    if not accounts:
        click.echo("No accounts found.")
        return

    click.echo(f"\n{'Code':<8} {'Name':<28} {'Type':<10} {'Balance':>16}")
    click.echo("-" * 66)
    for acc in accounts:
        marker = "" if acc.is_active else " (inactive)"
        balance = format_currency(acc.balance, acc.currency)
        click.echo(f"{acc.code:<8} {acc.name + marker:<28} {acc.type.value:<10} {balance:>16}")


@account_group.command("show")
@click.argument("account", metavar="ACCOUNT")
@click.pass_context
def show_account(ctx, account: str):
    """Show one account. ACCOUNT can be a code, name or ID."""
    ledger = ctx.obj["books"].ledger
    acc = ledger.get_account(resolve_account_or_exit(ctx, ledger, account))

    click.echo(f"Account:   {acc.code} {acc.name}")
    click.echo(f"Type:      {acc.type.value}")
    click.echo(f"Category:  {acc.category}")
    click.echo(f"Statement: {acc.statement_bucket.value}")
    click.echo(f"Currency:  {acc.currency}")
    click.echo(f"Balance:   {format_currency(acc.balance, acc.currency)}")
    click.echo(f"Active:    {'yes' if acc.is_active else 'no'}")


@account_group.command("create")
@click.argument("code")
@click.argument("name")
@click.option(
    "--type",
    "account_type",
    required=True,
    type=click.Choice([t.value for t in AccountType]),
    help="Account type",
)
@click.option("--category", default="", help="Free-text category")
@click.option(
    "--bucket",
    type=click.Choice([b.value for b in StatementBucket]),
    help="Statement line (inferred from the name if omitted)",
)
@click.option("--currency", default="USD", show_default=True, help="Account currency")
@click.pass_context
def create_account(ctx, code: str, name: str, account_type: str, category: str, bucket: str | None, currency: str):
    """Add an account to the chart.

    Examples:
        ledgerly account create 1010 "Petty Cash" --type asset --bucket cash
        ledgerly account create 2600 "Bank Loan" --type liability
    """
    ledger = ctx.obj["books"].ledger
    try:
        acc = ledger.create_account(
            code=code,
            name=name,
            account_type=AccountType(account_type),
            category=category,
            statement_bucket=StatementBucket(bucket) if bucket else None,
            currency=currency,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created account {acc.code} '{acc.name}' ({acc.statement_bucket.value})")


@account_group.command("deactivate")
@click.argument("account", metavar="ACCOUNT")
@click.pass_context
def deactivate_account(ctx, account: str):
    """Mark an account inactive. Its balance and history are kept."""
    ledger = ctx.obj["books"].ledger
    account_id = resolve_account_or_exit(ctx, ledger, account)
    acc = ledger.set_account_active(account_id, False)
    if acc is None:
        fail(ctx, f"Account {account} not found")
    click.echo(f"Deactivated account {acc.code} '{acc.name}'")


def register_commands(cli):
    """Register account commands with main CLI."""
    cli.add_command(account_group, name="account")
