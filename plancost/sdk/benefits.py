"""Category benefit resolution.

Resolves the coverage rule that applies to a category on a network,
falling back to the plan default when the category is unknown or has no
rule for that network. Lookups never fail.

Resolution order:
1. plan.categories[category_id].<network>_coverage
2. plan.default.<network>_coverage
3. Empty rule (deductible only, insurance pays the rest)
"""

from typing import Mapping, Optional

from .schemas import Category, CoverageRule, Network, Plan


PRESCRIPTION_CATEGORY_PREFIX = "pharmacy_"
PREVENTIVE_LABEL = "[Preventive]"


def resolve_coverage(plan: Plan, category_id: str, network: Network) -> CoverageRule:
    """Get the coverage rule for a category and network.

    Args:
        plan: Plan to look in
        category_id: Category identifier (e.g. 'office_visit_pcp')
        network: 'in_network' or 'out_of_network'

    Returns:
        The category's rule if present, otherwise the plan default
    """
    benefits = plan.categories.get(category_id)
    if benefits is not None:
        rule = benefits.for_network(network)
        if rule is not None:
            return rule

    return plan.default.for_network(network) or CoverageRule()


def get_quantity_cap(plan: Plan, category_id: str, network: Network) -> Optional[int]:
    """Covered occurrences per year, category-wide cap first."""
    benefits = plan.categories.get(category_id)
    if benefits is None:
        return None
    if benefits.qty_cap is not None:
        return benefits.qty_cap
    rule = benefits.for_network(network)
    return rule.qty_cap if rule is not None else None


def get_cost_cap(plan: Plan, category_id: str, network: Network) -> Optional[float]:
    """Covered billed dollars per year, category-wide cap first."""
    benefits = plan.categories.get(category_id)
    if benefits is None:
        return None
    if benefits.cost_cap is not None:
        return benefits.cost_cap
    rule = benefits.for_network(network)
    return rule.cost_cap if rule is not None else None


def lookup_category(
    category_id: str, categories: Optional[Mapping[str, Category]]
) -> Optional[Category]:
    if not categories:
        return None
    return categories.get(category_id)


def category_display_name(
    category_id: str, categories: Optional[Mapping[str, Category]] = None
) -> str:
    """Human-readable category name.

    Uses the catalog name when known, 'Other' for the catch-all
    category, and the id verbatim otherwise.
    """
    category = lookup_category(category_id, categories)
    if category is not None and category.name:
        return category.name
    if category_id == "other":
        return "Other"
    return category_id


def is_preventive(category_id: str, categories: Optional[Mapping[str, Category]] = None) -> bool:
    category = lookup_category(category_id, categories)
    return category.preventive if category is not None else False


def is_prescription_category(category_id: str) -> bool:
    """Check whether a category is a pharmacy/prescription category."""
    return category_id.startswith(PRESCRIPTION_CATEGORY_PREFIX)
