"""Transaction management commands."""

import click

from ledgerly.cli.error_handling import fail, handle_domain_error
from ledgerly.cli.input_parsing import (
    parse_amount_or_exit,
    parse_date_or_exit,
    resolve_account_or_exit,
    resolve_date_range,
)
from ledgerly.domain.entities import (
    TransactionCategory,
    TransactionDraft,
    TransactionFilters,
    TransactionFolder,
    TransactionStatus,
)
from ledgerly.domain.errors import DomainError, transaction_not_found
from ledgerly.domain.reference_data import format_currency
from ledgerly.utils.date_parser import PERIODS

CATEGORY_CHOICE = click.Choice([c.value for c in TransactionCategory])
FOLDER_CHOICE = click.Choice([f.value for f in TransactionFolder])
STATUS_CHOICE = click.Choice([s.value for s in TransactionStatus])


@click.group()
def transaction_group():
    """Post and manage transactions."""
    pass


@transaction_group.command("add")
@click.option("--date", "txn_date", default="today", show_default=True, help="Transaction date (YYYY-MM-DD or 'yesterday')")
@click.option("--description", required=True, help="Transaction description")
@click.option("--amount", required=True, help="Amount moved (must be positive)")
@click.option("--debit", required=True, help="Debit account code, name or ID")
@click.option("--credit", required=True, help="Credit account code, name or ID")
@click.option("--currency", default="USD", show_default=True, help="Transaction currency")
@click.option("--category", type=CATEGORY_CHOICE, default="other", show_default=True)
@click.option("--folder", type=FOLDER_CHOICE, default="bank", show_default=True)
@click.option("--reference", default="", help="Reference number")
@click.option("--vat-rate", help="VAT rate in percent")
@click.option("--attach", "attachments", multiple=True, help="Attachment name (repeatable)")
@click.pass_context
def add_transaction(
    ctx,
    txn_date: str,
    description: str,
    amount: str,
    debit: str,
    credit: str,
    currency: str,
    category: str,
    folder: str,
    reference: str,
    vat_rate: str | None,
    attachments: tuple[str, ...],
):
    """Post a double-entry transaction.

    The debit account's balance goes up by the amount and the credit
    account's balance goes down by the same amount.

    Examples:
        ledgerly transaction add --description "Owner investment" --amount 10000 --debit Cash --credit "Share Capital"
        ledgerly transaction add --description "Invoice 12" --amount 1200 --debit 1100 --credit 4000 --category sales --vat-rate 20
    """
    ledger = ctx.obj["books"].ledger
    draft = TransactionDraft(
        description=description,
        amount=parse_amount_or_exit(ctx, amount),
        currency=currency,
        category=TransactionCategory(category),
        folder=TransactionFolder(folder),
        date=parse_date_or_exit(ctx, txn_date),
        debit_account=resolve_account_or_exit(ctx, ledger, debit),
        credit_account=resolve_account_or_exit(ctx, ledger, credit),
        reference=reference,
        vat_rate=parse_amount_or_exit(ctx, vat_rate, "VAT rate") if vat_rate is not None else None,
        attachments=attachments,
    )
    try:
        txn = ledger.post_transaction(draft)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Posted transaction {txn.id}: {format_currency(txn.amount, txn.currency)}")


@transaction_group.command("update")
@click.argument("transaction_id")
@click.option("--date", "txn_date", help="Transaction date")
@click.option("--description", help="Transaction description")
@click.option("--amount", help="Amount moved")
@click.option("--debit", help="Debit account code, name or ID")
@click.option("--credit", help="Credit account code, name or ID")
@click.option("--currency", help="Transaction currency")
@click.option("--category", type=CATEGORY_CHOICE)
@click.option("--folder", type=FOLDER_CHOICE)
@click.option("--reference", help="Reference number")
@click.option("--vat-rate", help="VAT rate in percent, or empty string to clear")
@click.pass_context
def update_transaction(
    ctx,
    transaction_id: str,
    txn_date: str | None,
    description: str | None,
    amount: str | None,
    debit: str | None,
    credit: str | None,
    currency: str | None,
    category: str | None,
    folder: str | None,
    reference: str | None,
    vat_rate: str | None,
):
    """Update a transaction. Only the given fields change.

    Balances are reversed for the old values and reapplied for the new ones.

    Examples:
        ledgerly transaction update txn_ab12 --amount 750
        ledgerly transaction update txn_ab12 --vat-rate ""
    """
    ledger = ctx.obj["books"].ledger
    changes = {}
    if txn_date is not None:
        changes["date"] = parse_date_or_exit(ctx, txn_date)
    if description is not None:
        changes["description"] = description
    if amount is not None:
        changes["amount"] = parse_amount_or_exit(ctx, amount)
    if debit is not None:
        changes["debit_account"] = resolve_account_or_exit(ctx, ledger, debit)
    if credit is not None:
        changes["credit_account"] = resolve_account_or_exit(ctx, ledger, credit)
    if currency is not None:
        changes["currency"] = currency
    if category is not None:
        changes["category"] = category
    if folder is not None:
        changes["folder"] = folder
    if reference is not None:
        changes["reference"] = reference
    if vat_rate is not None:
        changes["vat_rate"] = parse_amount_or_exit(ctx, vat_rate, "VAT rate") if vat_rate else None

    if not changes:
        fail(ctx, "Nothing to update.")

    try:
        txn = ledger.update_transaction(transaction_id, **changes)
    except DomainError as e:
        handle_domain_error(ctx, e)
    if txn is None:
        fail(ctx, transaction_not_found(transaction_id))
    click.echo(f"Updated transaction {transaction_id}")


@transaction_group.command("delete")
@click.argument("transaction_id")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_transaction(ctx, transaction_id: str, yes: bool):
    """Delete a transaction and reverse its balance effect."""
    ledger = ctx.obj["books"].ledger
    txn = ledger.get_transaction(transaction_id)
    if txn is None:
        fail(ctx, transaction_not_found(transaction_id))

    if not yes and not click.confirm(f"Delete '{txn.description}' ({txn.amount} {txn.currency})?"):
        click.echo("Deletion cancelled.")
        return

    ledger.delete_transaction(transaction_id)
    click.echo(f"Deleted transaction {transaction_id}")


@transaction_group.command("status")
@click.argument("transaction_id")
@click.argument("status", type=STATUS_CHOICE)
@click.pass_context
def set_status(ctx, transaction_id: str, status: str):
    """Move a transaction to a new status (pending, approved, reconciled)."""
    ledger = ctx.obj["books"].ledger
    try:
        txn = ledger.set_transaction_status(transaction_id, TransactionStatus(status))
    except DomainError as e:
        handle_domain_error(ctx, e)
    if txn is None:
        fail(ctx, transaction_not_found(transaction_id))
    click.echo(f"Transaction {transaction_id} is now {txn.status.value}")


@transaction_group.command("list")
@click.option("--start-date", help="Start date (YYYY-MM-DD or relative like 'last month')")
@click.option("--end-date", help="End date (YYYY-MM-DD or relative like 'today')")
@click.option("--period", type=click.Choice(PERIODS), help="Named period instead of explicit dates")
@click.option("--category", type=CATEGORY_CHOICE)
@click.option("--folder", type=FOLDER_CHOICE)
@click.option("--status", type=STATUS_CHOICE)
@click.option("--currency", help="Only this currency")
@click.option("--min-amount", help="Smallest amount to include")
@click.option("--max-amount", help="Largest amount to include")
@click.option("--verbose", "-v", is_flag=True, help="Show accounts, VAT and reference")
@click.pass_context
def list_transactions(
    ctx,
    start_date: str | None,
    end_date: str | None,
    period: str | None,
    category: str | None,
    folder: str | None,
    status: str | None,
    currency: str | None,
    min_amount: str | None,
    max_amount: str | None,
    verbose: bool,
):
    """List transactions, newest first, with optional filters."""
    ledger = ctx.obj["books"].ledger
    start, end = resolve_date_range(ctx, start_date=start_date, end_date=end_date, period=period)
    filters = TransactionFilters(
        date_from=start,
        date_to=end,
        category=TransactionCategory(category) if category else None,
        folder=TransactionFolder(folder) if folder else None,
        currency=currency,
        min_amount=parse_amount_or_exit(ctx, min_amount, "minimum amount") if min_amount else None,
        max_amount=parse_amount_or_exit(ctx, max_amount, "maximum amount") if max_amount else None,
        status=TransactionStatus(status) if status else None,
    )

    transactions = ledger.list_transactions(filters)
    if not transactions:
        click.echo("No transactions found.")
        return

    names = {acc.id: acc.name for acc in ledger.get_accounts()}
    click.echo(f"\nFound {len(transactions)} transaction(s):")
    click.echo("-" * 100)
    click.echo(f"{'ID':<22} {'Date':<12} {'Amount':>14} {'Status':<11} {'Description':<38}")
    click.echo("-" * 100)
    for txn in transactions:
        amount_str = format_currency(txn.amount, txn.currency)
        click.echo(
            f"{txn.id:<22} {str(txn.date):<12} {amount_str:>14} {txn.status.value:<11} {txn.description[:38]:<38}"
        )
        if verbose:
            click.echo(
                f"{'':<22} Dr {names.get(txn.debit_account, txn.debit_account)}"
                f" / Cr {names.get(txn.credit_account, txn.credit_account)}"
                f" | {txn.category.value}/{txn.folder.value}"
            )
            if txn.vat_rate is not None:
                click.echo(f"{'':<22} VAT {txn.vat_rate}%: {format_currency(txn.tax_amount, txn.currency)}")
            if txn.reference:
                click.echo(f"{'':<22} Ref {txn.reference}")
            if txn.attachments:
                click.echo(f"{'':<22} Attachments: {', '.join(txn.attachments)}")


def register_commands(cli):
    """Register transaction commands with main CLI."""
    cli.add_command(transaction_group, name="transaction")
