"""Customer and vendor commands."""

import click

from ledgerly.cli.error_handling import fail, handle_domain_error
from ledgerly.cli.input_parsing import parse_amount_or_exit
from ledgerly.domain.errors import DomainError
from ledgerly.domain.reference_data import format_currency


def _contact_options(func):
    for option in reversed(
        [
            click.option("--email", default="", help="Email address"),
            click.option("--phone", default="", help="Phone number"),
            click.option("--address", default="", help="Postal address"),
            click.option("--country", default="", help="Country"),
            click.option("--tax-id", help="Tax registration number"),
            click.option("--currency", default="USD", show_default=True, help="Billing currency"),
        ]
    ):
        func = option(func)
    return func


def _echo_parties(parties) -> None:
    click.echo(f"\n{'ID':<18} {'Name':<28} {'Email':<28} {'Currency':<8} {'Balance':>14}")
    click.echo("-" * 100)
    for party in parties:
        balance = format_currency(party.balance, party.currency)
        click.echo(f"{party.id:<18} {party.name[:28]:<28} {party.email[:28]:<28} {party.currency:<8} {balance:>14}")


@click.group()
def customer_group():
    """Manage customers."""
    pass


@customer_group.command("add")
@click.argument("name")
@_contact_options
@click.option("--credit-limit", default="0", help="Credit limit")
@click.pass_context
def add_customer(ctx, name, email, phone, address, country, tax_id, currency, credit_limit):
    """Add a customer.

    Examples:
        ledgerly customer add "Acme Ltd" --email billing@acme.test --currency GBP
    """
    parties = ctx.obj["books"].parties
    try:
        customer = parties.create_customer(
            name=name,
            email=email,
            phone=phone,
            address=address,
            country=country,
            currency=currency,
            tax_id=tax_id,
            credit_limit=parse_amount_or_exit(ctx, credit_limit, "credit limit"),
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created customer '{customer.name}' (ID: {customer.id})")


@customer_group.command("list")
@click.pass_context
def list_customers(ctx):
    """List customers."""
    customers = ctx.obj["books"].parties.list_customers()
    if not customers:
        click.echo("No customers found.")
        return
    _echo_parties(customers)


@customer_group.command("delete")
@click.argument("customer_id")
@click.pass_context
def delete_customer(ctx, customer_id: str):
    """Delete a customer. Existing invoices keep the customer's details."""
    if not ctx.obj["books"].parties.delete_customer(customer_id):
        fail(ctx, f"Customer {customer_id} not found")
    click.echo(f"Deleted customer {customer_id}")


@click.group()
def vendor_group():
    """Manage vendors."""
    pass


@vendor_group.command("add")
@click.argument("name")
@_contact_options
@click.pass_context
def add_vendor(ctx, name, email, phone, address, country, tax_id, currency):
    """Add a vendor."""
    parties = ctx.obj["books"].parties
    try:
        vendor = parties.create_vendor(
            name=name,
            email=email,
            phone=phone,
            address=address,
            country=country,
            currency=currency,
            tax_id=tax_id,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created vendor '{vendor.name}' (ID: {vendor.id})")


@vendor_group.command("list")
@click.pass_context
def list_vendors(ctx):
    """List vendors."""
    vendors = ctx.obj["books"].parties.list_vendors()
    if not vendors:
        click.echo("No vendors found.")
        return
    _echo_parties(vendors)


@vendor_group.command("delete")
@click.argument("vendor_id")
@click.pass_context
def delete_vendor(ctx, vendor_id: str):
    """Delete a vendor."""
    if not ctx.obj["books"].parties.delete_vendor(vendor_id):
        fail(ctx, f"Vendor {vendor_id} not found")
    click.echo(f"Deleted vendor {vendor_id}")


def register_commands(cli):
    """Register customer and vendor commands with main CLI."""
    cli.add_command(customer_group, name="customer")
    cli.add_command(vendor_group, name="vendor")
