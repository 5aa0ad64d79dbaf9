"""Financial report commands."""

import click

from ledgerly.cli.input_parsing import resolve_date_range
from ledgerly.domain.reference_data import format_currency

WIDTH = 56


def _line(label: str, amount, currency: str, indent: int = 2) -> None:
    text = " " * indent + label
    click.echo(f"{text:<{WIDTH - 18}}{format_currency(amount, currency):>18}")


def _heading(title: str) -> None:
    click.echo(f"\n{title}")
    click.echo("-" * WIDTH)


@click.group()
def report_group():
    """Financial statements and dashboard figures."""
    pass


@report_group.command("balance-sheet")
@click.pass_context
def balance_sheet(ctx):
    """Show the balance sheet from current account balances."""
    sheet = ctx.obj["books"].statements.derive_balance_sheet()
    cur = sheet.currency

    click.echo(f"Balance Sheet - {sheet.period.name} (as of {sheet.period.end_date})")
    _heading("Assets")
    _line("Cash", sheet.current_assets.cash, cur)
    _line("Accounts receivable", sheet.current_assets.accounts_receivable, cur)
    _line("Inventory", sheet.current_assets.inventory, cur)
    _line("Other current assets", sheet.current_assets.other, cur)
    _line("Total current assets", sheet.current_assets.total, cur, indent=0)
    _line("Property, plant & equipment", sheet.fixed_assets.property_plant_equipment, cur)
    _line("Intangible assets", sheet.fixed_assets.intangible_assets, cur)
    _line("Other fixed assets", sheet.fixed_assets.other, cur)
    _line("Total fixed assets", sheet.fixed_assets.total, cur, indent=0)
    _line("TOTAL ASSETS", sheet.total_assets, cur, indent=0)

    _heading("Liabilities")
    _line("Accounts payable", sheet.current_liabilities.accounts_payable, cur)
    _line("Short-term debt", sheet.current_liabilities.short_term_debt, cur)
    _line("Accrued expenses", sheet.current_liabilities.accrued_expenses, cur)
    _line("Other current liabilities", sheet.current_liabilities.other, cur)
    _line("Total current liabilities", sheet.current_liabilities.total, cur, indent=0)
    _line("Long-term debt", sheet.long_term_liabilities.long_term_debt, cur)
    _line("Other long-term liabilities", sheet.long_term_liabilities.other, cur)
    _line("TOTAL LIABILITIES", sheet.total_liabilities, cur, indent=0)

    _heading("Equity")
    _line("Share capital", sheet.equity.share_capital, cur)
    _line("Retained earnings", sheet.equity.retained_earnings, cur)
    _line("Other equity", sheet.equity.other, cur)
    _line("TOTAL EQUITY", sheet.equity.total, cur, indent=0)

    click.echo("-" * WIDTH)
    _line("LIABILITIES + EQUITY", sheet.total_liabilities + sheet.equity.total, cur, indent=0)
    if sheet.is_balanced:
        click.echo("\nBalanced: assets = liabilities + equity")
    else:
        click.echo(f"\nWARNING: out of balance by {format_currency(sheet.imbalance, cur)}")


@report_group.command("profit-loss")
@click.pass_context
def profit_loss(ctx):
    """Show the profit and loss statement from current account balances."""
    pnl = ctx.obj["books"].statements.derive_profit_loss()
    cur = pnl.currency

    click.echo(f"Profit & Loss - {pnl.period.name} ({pnl.period.start_date} to {pnl.period.end_date})")
    _heading("Revenue")
    _line("Sales", pnl.revenue.sales, cur)
    _line("Other revenue", pnl.revenue.other, cur)
    _line("Total revenue", pnl.revenue.total, cur, indent=0)

    _heading("Expenses")
    _line("Cost of goods sold", pnl.expenses.cost_of_goods_sold, cur)
    _line("Salaries", pnl.expenses.salaries, cur)
    _line("Rent", pnl.expenses.rent, cur)
    _line("Utilities", pnl.expenses.utilities, cur)
    _line("Other expenses", pnl.expenses.other, cur)
    _line("Total expenses", pnl.expenses.total, cur, indent=0)

    click.echo("-" * WIDTH)
    _line("Gross profit", pnl.gross_profit, cur, indent=0)
    _line("Profit before tax", pnl.profit_before_tax, cur, indent=0)
    _line(f"Tax ({pnl.corporate_rate}%)", pnl.tax_expense, cur, indent=0)
    _line("NET PROFIT", pnl.net_profit, cur, indent=0)


@report_group.command("dashboard")
@click.option("--start-date", help="Period start (default: first day of this month)")
@click.option("--end-date", help="Period end (default: last day of this month)")
@click.pass_context
def dashboard(ctx, start_date: str | None, end_date: str | None):
    """Show headline figures."""
    start, end = resolve_date_range(ctx, start_date=start_date, end_date=end_date, period=None)
    kpis = ctx.obj["books"].statements.dashboard_kpis(start, end)
    cur = kpis.currency

    click.echo(f"Dashboard {kpis.period}")
    click.echo("-" * WIDTH)
    _line("Revenue", kpis.total_revenue, cur, indent=0)
    _line("Expenses", kpis.total_expenses, cur, indent=0)
    _line("Net profit", kpis.net_profit, cur, indent=0)
    _line("Cash", kpis.cash_balance, cur, indent=0)
    _line("Receivables", kpis.accounts_receivable, cur, indent=0)
    _line("Payables", kpis.accounts_payable, cur, indent=0)
    status = "healthy" if kpis.current_ratio > 1 else "attention"
    click.echo(f"{'Current ratio':<{WIDTH - 18}}{f'{kpis.current_ratio:.2f} ({status})':>18}")
    click.echo(f"{'Transactions in period':<{WIDTH - 18}}{kpis.transaction_count:>18}")


def register_commands(cli):
    """Register report commands with main CLI."""
    cli.add_command(report_group, name="report")
