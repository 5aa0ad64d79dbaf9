"""Invoice commands."""

from datetime import timedelta

import click

from ledgerly.cli.error_handling import fail, handle_domain_error
from ledgerly.cli.input_parsing import (
    parse_amount_or_exit,
    parse_date_or_exit,
    resolve_date_range,
)
from ledgerly.domain.entities import InvoiceFilters, InvoiceItemDraft, InvoiceStatus
from ledgerly.domain.errors import DomainError, invoice_not_found
from ledgerly.domain.reference_data import format_currency

STATUS_CHOICE = click.Choice([s.value for s in InvoiceStatus])
DEFAULT_PAYMENT_DAYS = 30


def parse_item(ctx: click.Context, text: str) -> InvoiceItemDraft:
    """Parse an ``DESCRIPTION:QUANTITY:UNIT_PRICE[:VAT_RATE]`` item option."""
    parts = text.rsplit(":", 3) if text.count(":") >= 3 else text.rsplit(":", 2)
    if len(parts) < 3:
        fail(ctx, f"Invalid item '{text}' (expected DESCRIPTION:QUANTITY:UNIT_PRICE[:VAT_RATE])")
    description, quantity, unit_price = parts[0], parts[1], parts[2]
    try:
        qty = int(quantity)
    except ValueError:
        fail(ctx, f"Invalid quantity '{quantity}' in item '{text}'")
    return InvoiceItemDraft(
        description=description,
        quantity=qty,
        unit_price=parse_amount_or_exit(ctx, unit_price, "unit price"),
        vat_rate=parse_amount_or_exit(ctx, parts[3], "VAT rate") if len(parts) == 4 else None,
    )


@click.group()
def invoice_group():
    """Create and manage invoices."""
    pass


@invoice_group.command("create")
@click.option("--customer", "customer_id", required=True, help="Customer ID")
@click.option("--date", "invoice_date", default="today", show_default=True, help="Invoice date")
@click.option("--due-date", help=f"Due date (default: {DEFAULT_PAYMENT_DAYS} days after the invoice date)")
@click.option("--currency", help="Invoice currency (default: the customer's currency)")
@click.option(
    "--item",
    "items",
    multiple=True,
    required=True,
    help="Line item as DESCRIPTION:QUANTITY:UNIT_PRICE[:VAT_RATE] (repeatable)",
)
@click.option("--vat-rate", help="Invoice VAT rate in percent (default: company default)")
@click.option("--notes", default="", help="Notes printed on the invoice")
@click.pass_context
def create_invoice(
    ctx,
    customer_id: str,
    invoice_date: str,
    due_date: str | None,
    currency: str | None,
    items: tuple[str, ...],
    vat_rate: str | None,
    notes: str,
):
    """Create a draft invoice.

    Examples:
        ledgerly invoice create --customer cust_1a2b --item "Consulting:10:150"
        ledgerly invoice create --customer cust_1a2b --item "Widget:3:19.99" --vat-rate 20 --due-date 2024-03-31
    """
    books = ctx.obj["books"]
    customer = books.parties.get_customer(customer_id)
    if customer is None:
        fail(ctx, f"Customer {customer_id} not found")

    issued = parse_date_or_exit(ctx, invoice_date)
    due = parse_date_or_exit(ctx, due_date, "due date") if due_date else issued + timedelta(days=DEFAULT_PAYMENT_DAYS)
    rate = (
        parse_amount_or_exit(ctx, vat_rate, "VAT rate")
        if vat_rate is not None
        else books.settings.get_settings().default_vat_rate
    )

    try:
        invoice = books.invoices.create_invoice(
            customer_id=customer_id,
            date=issued,
            due_date=due,
            currency=currency or customer.currency,
            items=[parse_item(ctx, text) for text in items],
            vat_rate=rate,
            notes=notes,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(
        f"Created invoice {invoice.number} for {invoice.customer_name}: "
        f"{format_currency(invoice.total_amount, invoice.currency)}"
    )


@invoice_group.command("list")
@click.option("--start-date", help="Start date")
@click.option("--end-date", help="End date")
@click.option("--status", type=STATUS_CHOICE)
@click.option("--customer", "customer_id", help="Customer ID")
@click.option("--currency", help="Only this currency")
@click.pass_context
def list_invoices(ctx, start_date: str | None, end_date: str | None, status: str | None, customer_id: str | None, currency: str | None):
    """List invoices, newest first."""
    invoices = ctx.obj["books"].invoices
    start, end = resolve_date_range(ctx, start_date=start_date, end_date=end_date, period=None)
    filters = InvoiceFilters(
        date_from=start,
        date_to=end,
        status=InvoiceStatus(status) if status else None,
        customer_id=customer_id,
        currency=currency,
    )

    found = invoices.list_invoices(filters)
    if not found:
        click.echo("No invoices found.")
        return

    click.echo(f"\n{'Number':<15} {'Date':<12} {'Due':<12} {'Customer':<24} {'Status':<10} {'Total':>14}")
    click.echo("-" * 92)
    for inv in found:
        total = format_currency(inv.total_amount, inv.currency)
        click.echo(
            f"{inv.number:<15} {str(inv.date):<12} {str(inv.due_date):<12} "
            f"{inv.customer_name[:24]:<24} {inv.status.value:<10} {total:>14}"
        )


@invoice_group.command("show")
@click.argument("invoice_id")
@click.pass_context
def show_invoice(ctx, invoice_id: str):
    """Show an invoice by ID or number."""
    inv = ctx.obj["books"].invoices.get_invoice(invoice_id)
    if inv is None:
        fail(ctx, invoice_not_found(invoice_id))

    click.echo(f"Invoice {inv.number} ({inv.status.value})")
    click.echo(f"Customer: {inv.customer_name}")
    if inv.customer_address:
        click.echo(f"          {inv.customer_address}")
    click.echo(f"Date: {inv.date}   Due: {inv.due_date}")
    click.echo("-" * 72)
    for item in inv.items:
        click.echo(
            f"{item.description[:36]:<36} {item.quantity:>5} x {format_currency(item.unit_price, inv.currency):>12}"
            f" {format_currency(item.amount, inv.currency):>14}"
        )
    click.echo("-" * 72)
    click.echo(f"{'Subtotal':<58} {format_currency(inv.subtotal, inv.currency):>13}")
    click.echo(f"{f'VAT ({inv.vat_rate}%)':<58} {format_currency(inv.vat_amount, inv.currency):>13}")
    click.echo(f"{'Total':<58} {format_currency(inv.total_amount, inv.currency):>13}")
    if inv.notes:
        click.echo(f"\nNotes: {inv.notes}")


@invoice_group.command("status")
@click.argument("invoice_id")
@click.argument("status", type=STATUS_CHOICE)
@click.pass_context
def set_status(ctx, invoice_id: str, status: str):
    """Move an invoice to a new status (sent, paid, overdue, cancelled)."""
    try:
        inv = ctx.obj["books"].invoices.set_status(invoice_id, InvoiceStatus(status))
    except DomainError as e:
        handle_domain_error(ctx, e)
    if inv is None:
        fail(ctx, invoice_not_found(invoice_id))
    click.echo(f"Invoice {inv.number} is now {inv.status.value}")


@invoice_group.command("mark-overdue")
@click.pass_context
def mark_overdue(ctx):
    """Mark sent invoices past their due date as overdue."""
    changed = ctx.obj["books"].invoices.mark_overdue()
    if not changed:
        click.echo("No invoices are overdue.")
        return
    for inv in changed:
        click.echo(f"Invoice {inv.number} is overdue (due {inv.due_date})")


@invoice_group.command("delete")
@click.argument("invoice_id")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_invoice(ctx, invoice_id: str, yes: bool):
    """Delete an invoice."""
    invoices = ctx.obj["books"].invoices
    inv = invoices.get_invoice(invoice_id)
    if inv is None:
        fail(ctx, invoice_not_found(invoice_id))
    if not yes and not click.confirm(f"Delete invoice {inv.number}?"):
        click.echo("Deletion cancelled.")
        return
    invoices.delete_invoice(inv.id)
    click.echo(f"Deleted invoice {inv.number}")


def register_commands(cli):
    """Register invoice commands with main CLI."""
    cli.add_command(invoice_group, name="invoice")
