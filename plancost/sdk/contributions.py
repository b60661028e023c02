"""HSA/FSA contribution and tax savings calculations.

Pure calculation - receives a plan, its catalog and the user inputs,
returns contributions capped by the year's limits and the resulting
income + payroll tax savings.
"""

from pydantic import BaseModel, ConfigDict

from .schemas import AgeGroup, ContributionType, CoverageTier, Plan, PlanCatalog, UserInputs


class ContributionResult(BaseModel):
    """Contributions and tax savings for one plan."""

    model_config = ConfigDict(frozen=True)

    contribution_type: ContributionType
    user_contribution: float
    employer_contribution: float
    tax_savings: float


def get_max_hsa_contribution(catalog: PlanCatalog, tier: CoverageTier, age_group: AgeGroup) -> float:
    """Total HSA limit (employee + employer) for a coverage tier.

    two_party coverage uses the family limit. Users 55 and older get the
    catch-up amount on top.
    """
    limits = catalog.hsa_contribution_limits
    max_total = limits.single_coverage if tier == "single" else limits.family_coverage
    if age_group == "55_plus":
        max_total += limits.catch_up_age_55_plus
    return max_total


def get_max_fsa_contribution(catalog: PlanCatalog) -> float:
    return catalog.fsa_contribution_limits.healthcare_fsa


def get_employer_hsa_contribution(plan: Plan, tier: CoverageTier) -> float:
    return plan.employer_hsa_for(tier)


def payroll_tax_rate(catalog: PlanCatalog) -> float:
    """Combined employee Social Security + Medicare rate, as a decimal."""
    rates = catalog.payroll_tax_rates
    return (rates.social_security + rates.medicare) / 100


def compute_contributions(plan: Plan, catalog: PlanCatalog, user_inputs: UserInputs) -> ContributionResult:
    """Compute user/employer contributions and tax savings for a plan.

    Args:
        plan: Plan being evaluated
        catalog: Catalog supplying contribution limits and payroll tax rates
        user_inputs: Requested contributions, tier, age group and tax rate

    Returns:
        ContributionResult with contributions never below zero or above the cap
    """
    tier = user_inputs.coverage_tier
    combined_rate = user_inputs.tax_rate_percent / 100 + payroll_tax_rate(catalog)

    if plan.is_hsa:
        contribution_type = "HSA"
        employer_contribution = get_employer_hsa_contribution(plan, tier)
        max_total = get_max_hsa_contribution(catalog, tier, user_inputs.age_group)
        user_contribution = min(user_inputs.hsa_contribution, max_total - employer_contribution)
    else:
        contribution_type = "FSA"
        employer_contribution = 0.0
        user_contribution = min(user_inputs.fsa_contribution, get_max_fsa_contribution(catalog))

    user_contribution = max(0.0, user_contribution)

    return ContributionResult(
        contribution_type=contribution_type,
        user_contribution=user_contribution,
        employer_contribution=employer_contribution,
        tax_savings=user_contribution * combined_rate,
    )
