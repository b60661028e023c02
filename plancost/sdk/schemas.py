"""Pydantic schemas for plan catalogs, user inputs and results.

Catalog and input schemas use extra='forbid' so typos in YAML files
cause clear errors rather than silent ignoring. Catalog models are
frozen: a loaded catalog is never mutated by the calculator.
"""

from typing import Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


CoverageTier = Literal["single", "two_party", "family"]
AgeGroup = Literal["under_55", "55_plus"]
Network = Literal["in_network", "out_of_network"]
PlanType = Literal["PPO", "HSA"]
ContributionType = Literal["HSA", "FSA"]


# =============================================================================
# Plan Catalog
# =============================================================================


class CoverageRule(BaseModel):
    """Cost sharing for one category on one network.

    is_free wins over everything, then a positive copay wins over
    coinsurance. A rule with none of them set means the deductible
    applies and insurance pays the rest.

    The three deductible/OOP flags only affect the coinsurance path.
    Left unset, the first two follow whether the plan has a deductible
    and the OOP flag is true.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    is_free: bool = Field(default=False, description="No cost to patient (e.g. preventive care)")
    copay: Optional[float] = Field(default=None, ge=0, description="Fixed dollar amount per occurrence")
    coinsurance: Optional[float] = Field(
        default=None, ge=0, le=1, description="Patient share after deductible, as decimal"
    )
    max_coinsurance: Optional[float] = Field(
        default=None, ge=0, description="Per-occurrence cap on the coinsurance amount"
    )
    qty_cap: Optional[int] = Field(default=None, ge=0, description="Covered occurrences per year")
    cost_cap: Optional[float] = Field(default=None, ge=0, description="Covered billed dollars per year")
    requires_deductible_to_be_met: Optional[bool] = Field(
        default=None, description="Coinsurance waits for the deductible (default: plan has a deductible)"
    )
    contributes_to_deductible: Optional[bool] = Field(
        default=None, description="Payments count toward the deductible (default: plan has a deductible)"
    )
    contributes_to_out_of_pocket_max: Optional[bool] = Field(
        default=None, description="Payments count toward the OOP maximum (default: true)"
    )


class NetworkBenefits(BaseModel):
    """Coverage rules for a category, per network."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    in_network_coverage: Optional[CoverageRule] = None
    out_of_network_coverage: Optional[CoverageRule] = None
    qty_cap: Optional[int] = Field(default=None, ge=0)
    cost_cap: Optional[float] = Field(default=None, ge=0)

    def for_network(self, network: Network) -> Optional[CoverageRule]:
        """Rule for a network, or None if absent."""
        if network == "in_network":
            return self.in_network_coverage
        return self.out_of_network_coverage


class TierAmounts(BaseModel):
    """An amount per coverage tier."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    single: float = Field(..., ge=0)
    two_party: float = Field(..., ge=0)
    family: float = Field(..., ge=0)

    def for_tier(self, tier: CoverageTier) -> float:
        return getattr(self, tier)


class DeductibleAmounts(BaseModel):
    """Deductible per bucket. two_party coverage uses the family figure."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    single: float = Field(..., ge=0)
    family: float = Field(..., ge=0)


class OutOfPocketAmounts(BaseModel):
    """Out-of-pocket maximum per bucket. two_party coverage uses the family figure."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    individual: float = Field(..., ge=0)
    family: float = Field(..., ge=0)


class PlanDeductible(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    in_network: DeductibleAmounts
    out_of_network: DeductibleAmounts


class PlanOutOfPocket(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    in_network: OutOfPocketAmounts
    out_of_network: OutOfPocketAmounts


class Plan(BaseModel):
    """One health plan offered in a coverage year."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    name: str = Field(..., min_length=1)
    type: PlanType
    monthly_premiums: TierAmounts
    annual_deductible: PlanDeductible
    out_of_pocket_maximum: PlanOutOfPocket
    default: NetworkBenefits
    categories: Dict[str, NetworkBenefits] = Field(default_factory=dict)
    employer_hsa_contribution: Optional[TierAmounts] = Field(
        default=None, description="Employer HSA seed money per tier (HSA plans only)"
    )
    prescriptions_subject_to_deductible: Optional[bool] = Field(
        default=None,
        description="Prescription copays apply only after the deductible. Defaults to type == HSA.",
    )
    premiums_are_pre_tax: bool = Field(
        default=False, description="Premiums are paid pre-tax through a Section 125 plan"
    )

    @property
    def is_hsa(self) -> bool:
        return self.type == "HSA"

    @property
    def prescriptions_apply_to_deductible(self) -> bool:
        if self.prescriptions_subject_to_deductible is None:
            return self.is_hsa
        return self.prescriptions_subject_to_deductible

    def premium_for(self, tier: CoverageTier) -> float:
        """Monthly premium for a coverage tier."""
        return self.monthly_premiums.for_tier(tier)

    def deductible_for(self, tier: CoverageTier, network: Network = "in_network") -> float:
        """Annual deductible for the tier's bucket (two_party shares family)."""
        amounts = getattr(self.annual_deductible, network)
        return amounts.single if tier == "single" else amounts.family

    def oop_max_for(self, tier: CoverageTier, network: Network = "in_network") -> float:
        """Out-of-pocket maximum for the tier's bucket (two_party shares family)."""
        amounts = getattr(self.out_of_pocket_maximum, network)
        return amounts.individual if tier == "single" else amounts.family

    def employer_hsa_for(self, tier: CoverageTier) -> float:
        if not self.is_hsa or self.employer_hsa_contribution is None:
            return 0.0
        return self.employer_hsa_contribution.for_tier(tier)


class HsaContributionLimits(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    single_coverage: float = Field(..., ge=0)
    family_coverage: float = Field(..., ge=0)
    catch_up_age_55_plus: float = Field(default=0, ge=0)


class FsaContributionLimits(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    healthcare_fsa: float = Field(default=0, ge=0)


class PayrollTaxRates(BaseModel):
    """Employee payroll tax rates, as percentages (e.g. 6.2)."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    social_security: float = Field(..., ge=0, le=100)
    medicare: float = Field(..., ge=0, le=100)


class BucketLimits(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    single: float = Field(..., ge=0)
    family: float = Field(..., ge=0)


class HsaQualificationLimits(BaseModel):
    """IRS limits a high-deductible plan must meet to be HSA-eligible."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    minimum_deductible: BucketLimits
    maximum_out_of_pocket: BucketLimits


class PlanCatalog(BaseModel):
    """All plans and contribution rules for one coverage year."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    year: Optional[int] = None
    hsa_contribution_limits: HsaContributionLimits
    fsa_contribution_limits: FsaContributionLimits = Field(default_factory=FsaContributionLimits)
    payroll_tax_rates: PayrollTaxRates
    hsa_qualification_limits: Optional[HsaQualificationLimits] = None
    plans: List[Plan] = Field(default_factory=list)

    def get_plan(self, name: str) -> Optional[Plan]:
        """Look up a plan by name (case-insensitive)."""
        for plan in self.plans:
            if plan.name.lower() == name.lower():
                return plan
        return None


class Category(BaseModel):
    """Display metadata for a healthcare category."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    name: str
    description: Optional[str] = None
    preventive: bool = False
    notes: List[str] = Field(default_factory=list)


# =============================================================================
# User Inputs
# =============================================================================


class VisitEstimate(BaseModel):
    """Expected occurrences and billed cost per occurrence on one network."""

    model_config = ConfigDict(extra="forbid")

    quantity: int = Field(default=0, ge=0)
    cost_per_visit: float = Field(default=0, ge=0)


class CategoryEstimate(BaseModel):
    """Estimated utilization for one category."""

    model_config = ConfigDict(extra="forbid")

    category_id: str = Field(..., min_length=1)
    in_network: VisitEstimate = Field(default_factory=VisitEstimate)
    out_of_network: VisitEstimate = Field(default_factory=VisitEstimate)
    notes: Optional[str] = None


class UserInputs(BaseModel):
    """Everything the calculator needs to know about the user."""

    model_config = ConfigDict(extra="forbid")

    coverage_tier: CoverageTier = "single"
    age_group: AgeGroup = "under_55"
    tax_rate_percent: float = Field(default=0, ge=0, le=100)
    hsa_contribution: float = Field(default=0, ge=0, description="Requested employee HSA contribution")
    fsa_contribution: float = Field(default=0, ge=0, description="Requested FSA contribution")
    category_estimates: List[CategoryEstimate] = Field(default_factory=list)


# =============================================================================
# Ledger & Results
# =============================================================================


class ContributionEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["contribution", "savings"]
    description: str
    amount: float


class PremiumEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["premium"] = "premium"
    description: str
    amount: float


class ExpenseEntry(BaseModel):
    """One simulated expense occurrence and how it was split."""

    model_config = ConfigDict(frozen=True)

    type: Literal["expense"] = "expense"
    network: Network
    category: str
    category_display_name: str
    is_preventive: bool = False
    is_free: bool = False
    billed_amount: float
    copay: Optional[float] = None
    employee_responsibility: float
    insurance_responsibility: float
    deductible_remaining: float
    out_of_pocket_remaining: float
    notes: Optional[str] = None


LedgerEntry = Union[ContributionEntry, PremiumEntry, ExpenseEntry]


class Ledger(BaseModel):
    """Itemized explanation of a plan's total cost, in four sections."""

    model_config = ConfigDict(frozen=True)

    contributions_and_savings: List[ContributionEntry] = Field(default_factory=list)
    premiums: List[PremiumEntry] = Field(default_factory=list)
    in_network_expenses: List[ExpenseEntry] = Field(default_factory=list)
    out_of_network_expenses: List[ExpenseEntry] = Field(default_factory=list)

    def entries(self) -> List[LedgerEntry]:
        """All entries, section by section."""
        return [
            *self.contributions_and_savings,
            *self.premiums,
            *self.in_network_expenses,
            *self.out_of_network_expenses,
        ]

    @property
    def total_premiums(self) -> float:
        return sum(e.amount for e in self.premiums)

    @property
    def total_contributions_and_savings(self) -> float:
        return sum(e.amount for e in self.contributions_and_savings)

    @property
    def total_employee_expenses(self) -> float:
        """Sum of employee responsibility across both expense sections.

        This matches the plan's out-of-pocket total until the OOP maximum
        is reached. Over-limit rows still bill the employee in full but add
        to out-of-pocket only up to the maximum, and rules that stay out of
        the OOP total bill the employee without adding to it. Either way
        this sum can exceed out_of_pocket_costs.
        """
        return sum(
            e.employee_responsibility
            for e in self.in_network_expenses + self.out_of_network_expenses
        )


class CostBreakdown(BaseModel):
    """Signed components that sum to the net total cost."""

    model_config = ConfigDict(frozen=True)

    premiums: float
    premium_discount: float
    contribution_tax_savings: float
    employer_contribution: float
    out_of_pocket: float
    net: float


class PlanResult(BaseModel):
    """Total annual cost of one plan for one set of user inputs."""

    model_config = ConfigDict(frozen=True)

    plan_name: str
    plan_type: PlanType
    contribution_type: ContributionType
    annual_premiums: float
    net_annual_premiums: float
    premium_discount: float
    user_contribution: float
    employer_contribution: float
    total_contributions: float
    tax_savings: float
    out_of_pocket_costs: float
    total_cost: float = Field(..., description="May be negative when savings exceed costs")
    max_annual_cost: float = Field(..., description="Total cost if the OOP maximum is reached")
    breakdown: CostBreakdown
    ledger: Ledger
