"""Plan Cost CLI - Command-line interface for health plan cost comparison."""

import json
import logging
import os
from pathlib import Path

import click
from rich.console import Console

from plancost import __version__
from plancost.sdk import (
    PlanDataError,
    PlanDataNotFoundError,
    compare_all,
    list_plan_years,
    load_categories,
    load_plan_catalog,
    load_user_inputs,
)

from .renderers.result_renderer import render_comparison, render_ledger
from .settings_commands import settings as settings_group

# Configure logging based on LOG_LEVEL environment variable
_log_level = os.environ.get("LOG_LEVEL", "WARNING").upper()
logging.basicConfig(
    level=getattr(logging, _log_level, logging.WARNING),
    format="%(levelname)s: %(name)s: %(message)s",
)


def _load_catalog(year, plans_file):
    try:
        return load_plan_catalog(year=year, path=Path(plans_file) if plans_file else None)
    except (PlanDataNotFoundError, PlanDataError) as e:
        raise click.ClickException(str(e))


@click.group()
@click.version_option(version=__version__, prog_name="plan-cost")
def cli():
    """Plan Cost - Compare the total annual cost of health plans.

    Plan catalogs are loaded from (in order):

    \b
    1. --plans FILE, if given
    2. settings.json 'plan_years_dir' (set via 'plan-cost settings')
    3. Bundled plan year data

    Run 'plan-cost years' to see available plan years.
    """
    pass


cli.add_command(settings_group)


@cli.command("compare")
@click.argument("inputs", type=click.Path(exists=True, dir_okay=False))
@click.option("--year", "-y", type=int, help="Plan year (default: latest available)")
@click.option("--plans", "plans_file", type=click.Path(exists=True, dir_okay=False),
              help="Plan catalog YAML file (overrides --year)")
@click.option("--categories", "categories_file", type=click.Path(exists=True, dir_okay=False),
              help="Categories YAML file for display names")
@click.option("--ledger", "ledger_plan", help="Show the itemized ledger for this plan")
@click.option("--format", "output_format", type=click.Choice(["table", "json"]), default="table",
              help="Output format (default: table)")
def compare(inputs, year, plans_file, categories_file, ledger_plan, output_format):
    """Rank plans by total annual cost for the usage described in INPUTS.

    INPUTS is a YAML or JSON file with coverage_tier, age_group,
    tax_rate_percent, hsa_contribution, fsa_contribution and
    category_estimates.

    \b
    Examples:
      plan-cost compare inputs.yaml
      plan-cost compare inputs.yaml --year 2026 --ledger "HSA 80"
      plan-cost compare inputs.yaml --format json
    """
    catalog = _load_catalog(year, plans_file)
    try:
        user_inputs = load_user_inputs(Path(inputs))
        categories = load_categories(Path(categories_file) if categories_file else None)
    except (PlanDataNotFoundError, PlanDataError) as e:
        raise click.ClickException(str(e))

    results = compare_all(catalog, user_inputs, categories)

    selected = None
    if ledger_plan:
        selected = next((r for r in results if r.plan_name.lower() == ledger_plan.lower()), None)
        if selected is None:
            names = ", ".join(r.plan_name for r in results)
            raise click.ClickException(f"Plan not found: {ledger_plan}. Available plans: {names}")

    if output_format == "json":
        if selected is not None:
            click.echo(json.dumps(selected.model_dump(), indent=2))
        else:
            payload = {
                "year": catalog.year,
                "results": [r.model_dump(exclude={"ledger"}) for r in results],
            }
            click.echo(json.dumps(payload, indent=2))
        return

    console = Console()
    title = f"{catalog.year} Plan Comparison" if catalog.year else "Plan Comparison"
    render_comparison(console, results, title=title)
    if selected is not None:
        render_ledger(console, selected)


@cli.command("plans")
@click.option("--year", "-y", type=int, help="Plan year (default: latest available)")
@click.option("--plans", "plans_file", type=click.Path(exists=True, dir_okay=False),
              help="Plan catalog YAML file (overrides --year)")
def plans(year, plans_file):
    """List the plans in a plan year catalog."""
    catalog = _load_catalog(year, plans_file)

    if not catalog.plans:
        click.echo("No plans in catalog.")
        return

    click.echo(f"Plans for {catalog.year}:" if catalog.year else "Plans:")
    for plan in catalog.plans:
        deductible = plan.annual_deductible.in_network
        oop = plan.out_of_pocket_maximum.in_network
        oon_deductible = plan.annual_deductible.out_of_network
        oon_oop = plan.out_of_pocket_maximum.out_of_network
        click.echo(
            f"  {plan.name} ({plan.type}): "
            f"premium ${plan.monthly_premiums.single:,.2f}/mo single, "
            f"deductible ${deductible.single:,.0f}/${deductible.family:,.0f}, "
            f"OOP max ${oop.individual:,.0f}/${oop.family:,.0f}"
        )
        click.echo(
            f"    out-of-network: deductible ${oon_deductible.single:,.0f}/${oon_deductible.family:,.0f}, "
            f"OOP max ${oon_oop.individual:,.0f}/${oon_oop.family:,.0f}"
        )


@cli.command("years")
def years():
    """List available plan years."""
    available = list_plan_years()
    if not available:
        click.echo("No plan years found.")
        return
    for year in available:
        click.echo(str(year))


def main():
    """Entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
