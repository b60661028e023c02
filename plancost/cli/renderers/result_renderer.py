"""Rich renderer for plan comparison results.

Transforms SDK results into formatted Rich tables.
"""

from typing import List

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from plancost.sdk import ExpenseEntry, PlanResult


def _money(amount: float) -> str:
    if amount < 0:
        return f"-${abs(amount):,.2f}"
    return f"${amount:,.2f}"


def render_comparison(console: Console, results: List[PlanResult], title: str = "Plan Comparison") -> None:
    """Render ranked plan results as a Rich table.

    Args:
        console: Rich Console instance
        results: Results from compare_all(), cheapest first
        title: Table title
    """
    if not results:
        console.print(Panel("[yellow]No plans in catalog[/yellow]", title="Note", border_style="yellow"))
        return

    table = Table(title=title, box=box.SIMPLE_HEAVY)
    table.add_column("#", justify="right", style="dim")
    table.add_column("Plan")
    table.add_column("Type")
    table.add_column("Premiums", justify="right")
    table.add_column("Out of Pocket", justify="right")
    table.add_column("Tax Savings", justify="right")
    table.add_column("Employer", justify="right")
    table.add_column("Total Cost", justify="right", style="bold")
    table.add_column("Worst Case", justify="right", style="dim")

    for rank, result in enumerate(results, 1):
        table.add_row(
            str(rank),
            result.plan_name,
            result.plan_type,
            _money(result.net_annual_premiums),
            _money(result.out_of_pocket_costs),
            _money(-result.tax_savings),
            _money(-result.employer_contribution),
            _money(result.total_cost),
            _money(result.max_annual_cost),
        )

    console.print(table)


def render_ledger(console: Console, result: PlanResult) -> None:
    """Render the four ledger sections for one plan."""
    ledger = result.ledger

    summary = Table(show_header=False, box=None, padding=(0, 2))
    summary.add_column("item", style="dim")
    summary.add_column("amount", justify="right")
    for entry in ledger.contributions_and_savings:
        summary.add_row(entry.description, _money(entry.amount))
    summary.add_row(f"{result.contribution_type} contribution (you)", _money(result.user_contribution))
    console.print(Panel(summary, title=f"{result.plan_name} - Contributions & Savings", border_style="dim"))

    premiums = Table(show_header=False, box=None, padding=(0, 2))
    premiums.add_column("month", style="dim")
    premiums.add_column("amount", justify="right")
    for entry in ledger.premiums:
        premiums.add_row(entry.description, _money(entry.amount))
    premiums.add_row("[bold]Total[/bold]", f"[bold]{_money(ledger.total_premiums)}[/bold]")
    console.print(Panel(premiums, title="Premiums", border_style="dim"))

    _render_expenses(console, "In-Network Expenses", ledger.in_network_expenses)
    _render_expenses(console, "Out-of-Network Expenses", ledger.out_of_network_expenses)


def _render_expenses(console: Console, title: str, expenses: List[ExpenseEntry]) -> None:
    if not expenses:
        return

    table = Table(title=title, box=box.SIMPLE)
    table.add_column("Category")
    table.add_column("Billed", justify="right")
    table.add_column("Copay", justify="right")
    table.add_column("You Pay", justify="right")
    table.add_column("Insurance Pays", justify="right")
    table.add_column("Deductible Left", justify="right", style="dim")
    table.add_column("OOP Left", justify="right", style="dim")
    table.add_column("Notes", style="dim")

    for entry in expenses:
        name = entry.category_display_name
        if entry.is_free:
            name = f"[green]{name}[/green]"
        table.add_row(
            name,
            _money(entry.billed_amount),
            _money(entry.copay) if entry.copay is not None else "",
            _money(entry.employee_responsibility),
            _money(entry.insurance_responsibility),
            _money(entry.deductible_remaining),
            _money(entry.out_of_pocket_remaining),
            entry.notes or "",
        )

    console.print(table)
