"""Tax calculation commands."""

import click

from ledgerly.cli.error_handling import fail, handle_domain_error
from ledgerly.cli.input_parsing import parse_amount_or_exit, parse_date_or_exit, resolve_date_range
from ledgerly.domain import tax as tax_engine
from ledgerly.domain.entities import TransactionFilters, VATType
from ledgerly.domain.errors import DomainError
from ledgerly.utils.date_parser import PERIODS

VAT_TYPE_CHOICE = click.Choice([t.value for t in VATType])
COUNTRY_OPTION = click.option("--country", required=True, help="2-letter country code (e.g. GB, DE)")


def _money(value) -> str:
    return f"{value:,.2f}"


def _check_inputs(ctx, amount, country: str) -> None:
    errors = tax_engine.validate_tax_inputs(amount, country)
    if errors:
        fail(ctx, "; ".join(errors))


@click.group()
def tax_group():
    """VAT and corporate tax calculators."""
    pass


@tax_group.command("vat")
@click.argument("net_amount")
@COUNTRY_OPTION
@click.option("--type", "vat_type", type=VAT_TYPE_CHOICE, default="standard", show_default=True)
@click.pass_context
def vat(ctx, net_amount: str, country: str, vat_type: str):
    """Add VAT to a net amount.

    Example:
        ledgerly tax vat 1000 --country GB
    """
    amount = parse_amount_or_exit(ctx, net_amount)
    _check_inputs(ctx, amount, country)
    result = tax_engine.calculate_vat(amount, country, VATType(vat_type))
    click.echo(f"Country:  {result.country} ({result.vat_type.value} rate {result.vat_rate}%)")
    click.echo(f"Net:      {_money(result.net_amount)}")
    click.echo(f"VAT:      {_money(result.vat_amount)}")
    click.echo(f"Gross:    {_money(result.gross_amount)}")


@tax_group.command("vat-from-gross")
@click.argument("gross_amount")
@COUNTRY_OPTION
@click.option("--type", "vat_type", type=VAT_TYPE_CHOICE, default="standard", show_default=True)
@click.pass_context
def vat_from_gross(ctx, gross_amount: str, country: str, vat_type: str):
    """Extract VAT from a gross amount."""
    amount = parse_amount_or_exit(ctx, gross_amount)
    _check_inputs(ctx, amount, country)
    result = tax_engine.calculate_vat_from_gross(amount, country, VATType(vat_type))
    click.echo(f"Country:  {result.country} ({result.vat_type.value} rate {result.vat_rate}%)")
    click.echo(f"Gross:    {_money(result.gross_amount)}")
    click.echo(f"VAT:      {_money(result.vat_amount)}")
    click.echo(f"Net:      {_money(result.net_amount)}")


@tax_group.command("corporate")
@click.argument("gross_profit")
@COUNTRY_OPTION
@click.option("--deductions", default="0", help="Allowable deductions")
@click.pass_context
def corporate(ctx, gross_profit: str, country: str, deductions: str):
    """Calculate corporate tax on profit after deductions."""
    profit = parse_amount_or_exit(ctx, gross_profit, "gross profit")
    try:
        result = tax_engine.calculate_corporate_tax(
            profit, parse_amount_or_exit(ctx, deductions, "deductions"), country
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Country:         {result.country} (rate {result.corporate_rate}%)")
    click.echo(f"Taxable profit:  {_money(result.taxable_profit)}")
    click.echo(f"Tax:             {_money(result.tax_amount)}")
    click.echo(f"Net profit:      {_money(result.net_profit)}")
    click.echo(f"Effective rate:  {result.effective_rate:.2f}%")


@tax_group.command("penalty")
@click.argument("tax_amount")
@click.option("--due", "due_date", required=True, help="Date the tax was due")
@click.option("--paid", "payment_date", default="today", show_default=True, help="Date the tax was paid")
@click.option("--monthly-rate", default=str(tax_engine.DEFAULT_PENALTY_RATE), show_default=True, help="Penalty percent per started month")
@click.pass_context
def penalty(ctx, tax_amount: str, due_date: str, payment_date: str, monthly_rate: str):
    """Calculate a late payment penalty.

    Example:
        ledgerly tax penalty 1000 --due 2024-01-31 --paid 2024-03-15
    """
    result = tax_engine.calculate_late_penalty(
        parse_amount_or_exit(ctx, tax_amount, "tax amount"),
        parse_date_or_exit(ctx, due_date, "due date"),
        parse_date_or_exit(ctx, payment_date, "payment date"),
        parse_amount_or_exit(ctx, monthly_rate, "monthly rate"),
    )
    click.echo(f"Days late:   {result.days_late}")
    click.echo(f"Months late: {result.months_late}")
    click.echo(f"Penalty:     {_money(result.penalty_amount)}")
    click.echo(f"Total due:   {_money(result.total_amount)}")


@tax_group.command("rates")
@click.argument("country")
@click.pass_context
def rates(ctx, country: str):
    """Show the published tax rates for a country."""
    rate = tax_engine.get_tax_rates(country)
    if rate is None:
        fail(ctx, f"Tax rates not found for country: {country}")
    click.echo(f"{rate.country} ({country.upper()}), currency {rate.currency}")
    click.echo(f"  VAT standard: {rate.vat_standard}%")
    click.echo(f"  VAT reduced:  {rate.vat_reduced}%")
    click.echo(f"  VAT zero:     {rate.vat_zero}%")
    click.echo(f"  Corporate:    {rate.corporate_rate}%")


@tax_group.command("countries")
@click.pass_context
def countries(ctx):
    """List countries with known tax rates."""
    for entry in ctx.obj["books"].reference.supported_countries():
        click.echo(f"{entry['code']}  {entry['name']:<24} {entry['currency']}")


@tax_group.command("return")
@COUNTRY_OPTION
@click.option("--start-date", help="Period start")
@click.option("--end-date", help="Period end")
@click.option("--period", type=click.Choice(PERIODS), help="Named period instead of explicit dates")
@click.option("--deductions", default="0", help="Allowable deductions")
@click.pass_context
def tax_return(ctx, country: str, start_date: str | None, end_date: str | None, period: str | None, deductions: str):
    """Prepare a VAT and corporate tax return from posted transactions.

    VAT comes from sales and purchase transactions carrying a VAT rate;
    profit comes from the current profit and loss statement.
    """
    books = ctx.obj["books"]
    if not (period or start_date or end_date):
        period = "last-quarter"
    start, end = resolve_date_range(ctx, start_date=start_date, end_date=end_date, period=period)
    if start is None or end is None:
        fail(ctx, "Both --start-date and --end-date are required.")

    transactions = books.ledger.list_transactions(TransactionFilters(date_from=start, date_to=end))
    pnl = books.statements.derive_profit_loss()
    try:
        result = tax_engine.generate_tax_return(
            tax_engine.taxable_supplies(transactions),
            pnl.profit_before_tax,
            parse_amount_or_exit(ctx, deductions, "deductions"),
            country,
            start,
            end,
            reference=books.reference,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    vat_return = result.vat_return
    click.echo(f"Tax return {result.country} Q{result.quarter} {result.year} ({result.start_date} to {result.end_date})")
    click.echo(f"  Sales:            {_money(vat_return.total_sales)}")
    click.echo(f"  Purchases:        {_money(vat_return.total_purchases)}")
    click.echo(f"  Output VAT:       {_money(vat_return.output_vat)}")
    click.echo(f"  Input VAT:        {_money(vat_return.input_vat)}")
    click.echo(f"  Net VAT due:      {_money(vat_return.net_vat_due)}")
    click.echo(f"  Corporate tax:    {_money(result.corporate_tax.tax_amount)}")
    click.echo(f"  Total liability:  {_money(result.total_tax_liability)}")
    click.echo(f"  Due date:         {result.due_date}")


@tax_group.command("deadlines")
@click.argument("year", type=int)
def deadlines(year: int):
    """Show generic filing deadlines for a year."""
    dates = tax_engine.get_tax_compliance_dates(year)
    for quarter, due in enumerate(dates.vat_return_dates, start=1):
        click.echo(f"VAT return Q{quarter}:    {due}")
    click.echo(f"Corporate tax:      {dates.corporate_tax_due}")
    click.echo(f"Annual return:      {dates.annual_return_due}")


def register_commands(cli):
    """Register tax commands with main CLI."""
    cli.add_command(tax_group, name="tax")
