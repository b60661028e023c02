"""Plan Cost SDK - Core functionality for health plan cost comparison.

Scope:
- Catalog, input and result schemas (schemas.py)
- Category coverage resolution with default fallback (benefits.py)
- Per-plan expense replay and ledger (execution.py)
- HSA/FSA contributions and tax savings (contributions.py)
- Plan ranking by total annual cost (compare.py)
- Settings and plan data loading (config.py)

Usage:
    from plancost.sdk import compare_all, load_plan_catalog, load_user_inputs

    catalog = load_plan_catalog(2026)
    results = compare_all(catalog, load_user_inputs("inputs.yaml"))
"""

from .schemas import (
    Category,
    CategoryEstimate,
    ContributionEntry,
    CostBreakdown,
    CoverageRule,
    ExpenseEntry,
    Ledger,
    NetworkBenefits,
    Plan,
    PlanCatalog,
    PlanResult,
    PremiumEntry,
    UserInputs,
    VisitEstimate,
)

from .benefits import (
    resolve_coverage,
    category_display_name,
    is_prescription_category,
)

from .execution import PlanExecution

from .contributions import (
    ContributionResult,
    compute_contributions,
    get_max_hsa_contribution,
    get_max_fsa_contribution,
)

from .compare import (
    calculate_plan_cost,
    compare_all,
)

from .config import (
    get_config_dir,
    get_settings_path,
    load_settings,
    save_settings,
    get_setting,
    set_setting,
    get_plan_years_dir,
    list_plan_years,
    load_plan_catalog,
    load_categories,
    load_user_inputs,
    check_hsa_qualification,
    PlanDataError,
    PlanDataNotFoundError,
)

__all__ = [
    # Schemas
    "Category",
    "CategoryEstimate",
    "ContributionEntry",
    "CostBreakdown",
    "CoverageRule",
    "ExpenseEntry",
    "Ledger",
    "NetworkBenefits",
    "Plan",
    "PlanCatalog",
    "PlanResult",
    "PremiumEntry",
    "UserInputs",
    "VisitEstimate",
    # Benefits
    "resolve_coverage",
    "category_display_name",
    "is_prescription_category",
    # Execution
    "PlanExecution",
    # Contributions
    "ContributionResult",
    "compute_contributions",
    "get_max_hsa_contribution",
    "get_max_fsa_contribution",
    # Comparison
    "calculate_plan_cost",
    "compare_all",
    # Config
    "get_config_dir",
    "get_settings_path",
    "load_settings",
    "save_settings",
    "get_setting",
    "set_setting",
    "get_plan_years_dir",
    "list_plan_years",
    "load_plan_catalog",
    "load_categories",
    "load_user_inputs",
    "check_hsa_qualification",
    "PlanDataError",
    "PlanDataNotFoundError",
]
