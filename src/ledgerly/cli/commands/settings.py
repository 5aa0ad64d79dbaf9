"""Company settings commands."""

import click

from ledgerly.cli.error_handling import handle_domain_error
from ledgerly.domain.errors import DomainError

# CLI option name -> CompanySettings field
SETTABLE = {
    "name": "name",
    "address": "address",
    "country": "country",
    "currency": "currency",
    "tax-id": "tax_id",
    "year-start": "financial_year_start",
    "vat-rate": "default_vat_rate",
    "corporate-rate": "default_corporate_tax_rate",
    "logo": "logo",
}


@click.group()
def settings_group():
    """Show and change company settings."""
    pass


@settings_group.command("show")
@click.pass_context
def show_settings(ctx):
    """Show company settings and the current financial year."""
    settings = ctx.obj["books"].settings
    company = settings.get_settings()
    period = settings.current_period()

    click.echo(f"Name:                 {company.name}")
    click.echo(f"Address:              {company.address}")
    click.echo(f"Country:              {company.country}")
    click.echo(f"Currency:             {company.currency}")
    click.echo(f"Tax ID:               {company.tax_id}")
    click.echo(f"Financial year start: {company.financial_year_start} (current: {period.name}, from {period.start_date})")
    click.echo(f"Default VAT rate:     {company.default_vat_rate}%")
    click.echo(f"Corporate tax rate:   {company.default_corporate_tax_rate}%")
    if company.logo:
        click.echo(f"Logo:                 {company.logo}")


@settings_group.command("set")
@click.argument("key", type=click.Choice(sorted(SETTABLE)))
@click.argument("value")
@click.pass_context
def set_setting(ctx, key: str, value: str):
    """Change one company setting.

    Examples:
        ledgerly settings set name "Acme Ltd"
        ledgerly settings set year-start 04-06
        ledgerly settings set vat-rate 19
    """
    settings = ctx.obj["books"].settings
    try:
        settings.update_settings(**{SETTABLE[key]: value})
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Set {key} to {value}")


def register_commands(cli):
    """Register settings commands with main CLI."""
    cli.add_command(settings_group, name="settings")
