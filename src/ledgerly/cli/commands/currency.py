"""Currency commands."""

from decimal import Decimal

import click

from ledgerly.cli.error_handling import handle_domain_error
from ledgerly.cli.input_parsing import parse_amount_or_exit
from ledgerly.domain.errors import DomainError
from ledgerly.domain.reference_data import (
    convert_with_fees,
    format_currency,
    format_exchange_rate,
)


@click.group()
def currency_group():
    """Currencies and conversion."""
    pass


@currency_group.command("list")
@click.option("--all", "show_all", is_flag=True, help="List every known currency, not just enabled ones")
@click.option("--major", is_flag=True, help="List the major trading currencies")
@click.pass_context
def list_currencies(ctx, show_all: bool, major: bool):
    """List currencies with their USD rates."""
    books = ctx.obj["books"]
    if major:
        currencies = books.reference.major_currencies()
    elif show_all:
        currencies = books.reference.supported_currencies()
    else:
        currencies = books.settings.list_currencies()
    for cur in currencies:
        click.echo(f"{cur.code}  {cur.symbol:<4} {cur.name:<28} {cur.rate}")


@currency_group.command("enable")
@click.argument("code")
@click.pass_context
def enable_currency(ctx, code: str):
    """Enable a known currency for this company."""
    try:
        cur = ctx.obj["books"].settings.enable_currency(code)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Enabled {cur.code} ({cur.name})")


@currency_group.command("convert")
@click.argument("amount")
@click.argument("from_currency")
@click.argument("to_currency")
@click.option("--fee", default="0", show_default=True, help="Conversion fee in percent")
@click.pass_context
def convert(ctx, amount: str, from_currency: str, to_currency: str, fee: str):
    """Convert an amount between currencies at the table rates.

    Example:
        ledgerly currency convert 100 USD EUR --fee 0.5
    """
    value = parse_amount_or_exit(ctx, amount)
    fee_percent = parse_amount_or_exit(ctx, fee, "fee")
    reference = ctx.obj["books"].reference
    try:
        result = convert_with_fees(value, from_currency, to_currency, fee_percent, reference=reference)
        rate_text = format_exchange_rate(from_currency.upper(), to_currency.upper(), reference=reference)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(rate_text)
    click.echo(f"Converted: {format_currency(result['converted_amount'], to_currency.upper())}")
    if fee_percent != Decimal("0"):
        click.echo(f"Fee:       {format_currency(result['fee'], to_currency.upper())}")
        click.echo(f"Total:     {format_currency(result['total_amount'], to_currency.upper())}")


def register_commands(cli):
    """Register currency commands with main CLI."""
    cli.add_command(currency_group, name="currency")
