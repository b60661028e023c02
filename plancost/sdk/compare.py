"""Plan comparison - total annual cost for every plan in a catalog.

Each plan gets its own PlanExecution, so plans never share running
totals. Results are sorted by total cost, lowest first.
"""

import logging
from typing import List, Mapping, Optional

from .contributions import compute_contributions, payroll_tax_rate
from .execution import PlanExecution
from .schemas import (
    Category,
    CategoryEstimate,
    CostBreakdown,
    Plan,
    PlanCatalog,
    PlanResult,
    UserInputs,
)

logger = logging.getLogger(__name__)


def _replay_estimate(execution: PlanExecution, estimate: CategoryEstimate) -> None:
    """Replay an estimate one occurrence at a time, in-network first."""
    for network in ("in_network", "out_of_network"):
        visits = getattr(estimate, network)
        quantity = visits.quantity

        quantity_cap = execution.get_quantity_cap(estimate.category_id, network)
        covered = min(quantity, quantity_cap) if quantity_cap is not None else quantity

        for _ in range(covered):
            execution.record_expense(estimate.category_id, visits.cost_per_visit, network, estimate.notes)

        for _ in range(quantity - covered):
            execution.record_capped_expense(
                estimate.category_id, visits.cost_per_visit, network, estimate.notes, "quantity"
            )


def calculate_plan_cost(
    plan: Plan,
    catalog: PlanCatalog,
    user_inputs: UserInputs,
    categories: Optional[Mapping[str, Category]] = None,
) -> PlanResult:
    """Calculate the cost breakdown for a single plan.

    Args:
        plan: Plan to evaluate
        catalog: Catalog the plan belongs to (limits, payroll tax rates)
        user_inputs: Coverage tier, tax rate, contributions and estimates
        categories: Optional category metadata for ledger display names

    Returns:
        PlanResult with the itemized ledger
    """
    tier = user_inputs.coverage_tier
    tax_rate = user_inputs.tax_rate_percent / 100

    monthly_premium = plan.premium_for(tier)
    annual_premiums = monthly_premium * 12

    contributions = compute_contributions(plan, catalog, user_inputs)

    premium_discount = 0.0
    if plan.premiums_are_pre_tax:
        premium_discount = annual_premiums * (tax_rate + payroll_tax_rate(catalog))
    net_annual_premiums = annual_premiums - premium_discount

    execution = PlanExecution(plan, tier, categories)
    execution.add_monthly_premiums(monthly_premium, premium_discount / 12)
    execution.add_employer_contribution(contributions.employer_contribution)
    execution.add_contribution_tax_savings(contributions.tax_savings, contributions.contribution_type)

    for estimate in user_inputs.category_estimates:
        _replay_estimate(execution, estimate)

    out_of_pocket = execution.get_total_out_of_pocket()
    credits = contributions.tax_savings + contributions.employer_contribution
    total_cost = net_annual_premiums + out_of_pocket - credits
    max_annual_cost = net_annual_premiums + execution.oop_max - credits

    logger.debug(
        f"{plan.name}: premiums {net_annual_premiums:.2f} + oop {out_of_pocket:.2f} "
        f"- credits {credits:.2f} = {total_cost:.2f}"
    )

    return PlanResult(
        plan_name=plan.name,
        plan_type=plan.type,
        contribution_type=contributions.contribution_type,
        annual_premiums=annual_premiums,
        net_annual_premiums=net_annual_premiums,
        premium_discount=premium_discount,
        user_contribution=contributions.user_contribution,
        employer_contribution=contributions.employer_contribution,
        total_contributions=contributions.user_contribution + contributions.employer_contribution,
        tax_savings=contributions.tax_savings,
        out_of_pocket_costs=out_of_pocket,
        total_cost=total_cost,
        max_annual_cost=max_annual_cost,
        breakdown=CostBreakdown(
            premiums=net_annual_premiums,
            premium_discount=-premium_discount,
            contribution_tax_savings=-contributions.tax_savings,
            employer_contribution=-contributions.employer_contribution,
            out_of_pocket=out_of_pocket,
            net=total_cost,
        ),
        ledger=execution.get_ledger(),
    )


def compare_all(
    catalog: PlanCatalog,
    user_inputs: UserInputs,
    categories: Optional[Mapping[str, Category]] = None,
) -> List[PlanResult]:
    """Calculate every plan in the catalog, cheapest first."""
    results = [calculate_plan_cost(plan, catalog, user_inputs, categories) for plan in catalog.plans]
    return sorted(results, key=lambda r: r.total_cost)
