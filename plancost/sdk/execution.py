"""Plan execution - replays expenses against one plan.

A PlanExecution owns the running deductible and out-of-pocket totals for
one plan and one set of user inputs. Expenses must be recorded one
occurrence at a time, in the order the user listed them: once the
out-of-pocket maximum is reached mid-category, later occurrences cost
the employee nothing, and copays apply per occurrence.

Per-occurrence order of checks:
1. Cost cap (billed dollars above the cap are paid 100% by the employee)
2. Out-of-pocket maximum reached -> insurance pays everything
3. Free care -> insurance pays everything
4. Copay (prescriptions on deductible-first plans pay the deductible first)
5. Deductible, then coinsurance (optionally capped per occurrence). Rules
   can skip the deductible or keep a payment out of the deductible or
   out-of-pocket totals.

Both networks share one deductible and one out-of-pocket accumulator,
sized by the plan's in-network figures for the coverage tier.
"""

import logging
from typing import Dict, List, Mapping, Optional, Tuple

from .benefits import (
    PREVENTIVE_LABEL,
    category_display_name,
    get_cost_cap,
    get_quantity_cap,
    is_prescription_category,
    is_preventive,
    resolve_coverage,
)
from .schemas import (
    Category,
    ContributionEntry,
    ContributionType,
    CoverageRule,
    CoverageTier,
    ExpenseEntry,
    Ledger,
    Network,
    Plan,
    PremiumEntry,
)

logger = logging.getLogger(__name__)

CAP_LABELS = {
    "quantity": "[Over visit limit]",
    "cost": "[Over cost limit]",
}


def _flag(value: Optional[bool], default: bool) -> bool:
    return default if value is None else value


class PlanExecution:
    """Stateful simulator for one plan's exposure to a year of expenses."""

    def __init__(
        self,
        plan: Plan,
        coverage_tier: CoverageTier,
        categories: Optional[Mapping[str, Category]] = None,
    ):
        self.plan = plan
        self.coverage_tier = coverage_tier
        self.categories = categories
        self.deductible = plan.deductible_for(coverage_tier)
        self.oop_max = plan.oop_max_for(coverage_tier)

        self.out_of_pocket_spent = 0.0
        self.deductible_spent = 0.0

        self._contributions_and_savings: List[ContributionEntry] = []
        self._premiums: List[PremiumEntry] = []
        self._in_network_expenses: List[ExpenseEntry] = []
        self._out_of_network_expenses: List[ExpenseEntry] = []
        self._cost_cap_spent: Dict[Tuple[str, str], float] = {}

    # --- Running balances ---

    def oop_remaining(self) -> float:
        return max(0.0, self.oop_max - self.out_of_pocket_spent)

    def deductible_remaining(self) -> float:
        return max(0.0, self.deductible - self.deductible_spent)

    def get_total_out_of_pocket(self) -> float:
        return self.out_of_pocket_spent

    # --- Contributions and premiums ---

    def add_monthly_premiums(self, monthly_premium: float, monthly_discount: float = 0.0) -> None:
        """Add 12 monthly premium entries, plus the pre-tax discount if any."""
        for month in range(1, 13):
            self._premiums.append(PremiumEntry(description=f"Month {month}", amount=monthly_premium))

        if monthly_discount > 0:
            self._premiums.append(
                PremiumEntry(description="Premium Net Discount", amount=-(monthly_discount * 12))
            )

    def add_employer_contribution(self, amount: float) -> None:
        if amount > 0:
            self._contributions_and_savings.append(
                ContributionEntry(type="contribution", description="Employer HSA contribution", amount=amount)
            )

    def add_contribution_tax_savings(self, amount: float, contribution_type: ContributionType) -> None:
        if amount > 0:
            self._contributions_and_savings.append(
                ContributionEntry(
                    type="savings",
                    description=f"Tax savings from {contribution_type} contributions",
                    amount=amount,
                )
            )

    # --- Caps ---

    def get_quantity_cap(self, category_id: str, network: Network) -> Optional[int]:
        return get_quantity_cap(self.plan, category_id, network)

    def get_cost_cap(self, category_id: str, network: Network) -> Optional[float]:
        return get_cost_cap(self.plan, category_id, network)

    # --- Expenses ---

    def record_expense(
        self,
        category_id: str,
        billed_amount: float,
        network: Network = "in_network",
        notes: Optional[str] = None,
    ) -> List[ExpenseEntry]:
        """Record a single expense occurrence.

        Args:
            category_id: Category identifier
            billed_amount: Amount billed for this one occurrence
            network: 'in_network' or 'out_of_network'
            notes: Free-form user notes copied to the ledger

        Returns:
            Ledger entries created (two when the occurrence straddles a cost cap)
        """
        rule = resolve_coverage(self.plan, category_id, network)

        cost_cap = self.get_cost_cap(category_id, network)
        if cost_cap is not None:
            key = (category_id, network)
            already_spent = self._cost_cap_spent.get(key, 0.0)
            remaining_cap = max(0.0, cost_cap - already_spent)

            if remaining_cap <= 0:
                return [self.record_capped_expense(category_id, billed_amount, network, notes, "cost")]

            if billed_amount > remaining_cap:
                self._cost_cap_spent[key] = cost_cap
                covered = self._record_covered(category_id, remaining_cap, network, notes, rule)
                over = self.record_capped_expense(
                    category_id, billed_amount - remaining_cap, network, notes, "cost"
                )
                return [covered, over]

            self._cost_cap_spent[key] = already_spent + billed_amount

        return [self._record_covered(category_id, billed_amount, network, notes, rule)]

    def record_capped_expense(
        self,
        category_id: str,
        billed_amount: float,
        network: Network = "in_network",
        notes: Optional[str] = None,
        cap_type: Optional[str] = None,
    ) -> ExpenseEntry:
        """Record an expense beyond a visit or cost limit (employee pays 100%).

        The payment still counts toward the out-of-pocket maximum, up to
        the maximum. Past that point employee_responsibility keeps the full
        billed amount while the out-of-pocket total stays at the maximum.
        """
        cap_label = CAP_LABELS.get(cap_type, "[Over limit]")
        self.out_of_pocket_spent += min(billed_amount, self.oop_remaining())

        entry = ExpenseEntry(
            network=network,
            category=category_id,
            category_display_name=f"{cap_label} {category_display_name(category_id, self.categories)}",
            is_preventive=is_preventive(category_id, self.categories),
            is_free=False,
            billed_amount=billed_amount,
            employee_responsibility=billed_amount,
            insurance_responsibility=0.0,
            deductible_remaining=self.deductible_remaining(),
            out_of_pocket_remaining=self.oop_remaining(),
            notes=f"{cap_label} {notes}" if notes else cap_label,
        )
        self._append(entry)
        return entry

    def _apply_deductible(
        self, amount: float, counts_toward_deductible: bool = True, counts_toward_oop: bool = True
    ) -> float:
        """Charge the employee toward the deductible. Returns the portion applied."""
        oop_limit = self.oop_remaining() if counts_toward_oop else amount
        portion = min(self.deductible_remaining(), amount, oop_limit)
        if portion > 0:
            if counts_toward_oop:
                self.out_of_pocket_spent += portion
            if counts_toward_deductible:
                self.deductible_spent += portion
            return portion
        return 0.0

    def _record_covered(
        self,
        category_id: str,
        cost: float,
        network: Network,
        notes: Optional[str],
        rule: CoverageRule,
    ) -> ExpenseEntry:
        preventive = is_preventive(category_id, self.categories)
        display_name = category_display_name(category_id, self.categories)
        copay_applied: Optional[float] = None

        if self.oop_remaining() <= 0:
            employee = 0.0
        elif rule.is_free:
            employee = 0.0
        elif rule.copay is not None and rule.copay > 0:
            if (
                self.plan.prescriptions_apply_to_deductible
                and is_prescription_category(category_id)
                and self.deductible_remaining() > 0
            ):
                # Deductible first; the copay only covers what is left once it is met
                deductible_portion = self._apply_deductible(cost)
                residual = cost - deductible_portion
                copay_portion = 0.0
                if residual > 0 and self.deductible_remaining() <= 0:
                    copay_applied = min(rule.copay, residual)
                    copay_portion = min(copay_applied, self.oop_remaining())
                    self.out_of_pocket_spent += copay_portion
                employee = deductible_portion + copay_portion
            else:
                copay_applied = rule.copay
                employee = min(rule.copay, self.oop_remaining())
                self.out_of_pocket_spent += employee
        else:
            has_deductible = self.deductible > 0
            requires_deductible = _flag(rule.requires_deductible_to_be_met, has_deductible)
            counts_toward_deductible = _flag(rule.contributes_to_deductible, has_deductible)
            counts_toward_oop = _flag(rule.contributes_to_out_of_pocket_max, True)

            deductible_portion = 0.0
            if requires_deductible:
                deductible_portion = self._apply_deductible(cost, counts_toward_deductible, counts_toward_oop)
            remaining = cost - deductible_portion
            coinsurance_portion = 0.0
            rate = rule.coinsurance or 0.0
            if rate > 0 and remaining > 0:
                amount = remaining * rate
                if rule.max_coinsurance is not None:
                    amount = min(amount, rule.max_coinsurance)
                if counts_toward_oop:
                    amount = min(amount, self.oop_remaining())
                    self.out_of_pocket_spent += amount
                coinsurance_portion = amount
            employee = deductible_portion + coinsurance_portion

        entry = ExpenseEntry(
            network=network,
            category=category_id,
            category_display_name=f"{PREVENTIVE_LABEL} {display_name}" if preventive else display_name,
            is_preventive=preventive,
            is_free=rule.is_free,
            billed_amount=cost,
            copay=copay_applied,
            employee_responsibility=employee,
            insurance_responsibility=max(0.0, cost - employee),
            deductible_remaining=self.deductible_remaining(),
            out_of_pocket_remaining=self.oop_remaining(),
            notes=notes,
        )
        logger.debug(
            f"{self.plan.name}: {category_id} ({network}) billed {cost:.2f} -> "
            f"employee {employee:.2f}, oop remaining {entry.out_of_pocket_remaining:.2f}"
        )
        self._append(entry)
        return entry

    def _append(self, entry: ExpenseEntry) -> None:
        if entry.network == "in_network":
            self._in_network_expenses.append(entry)
        else:
            self._out_of_network_expenses.append(entry)

    # --- Ledger ---

    def _initial_state_entry(self, network: Network) -> ExpenseEntry:
        return ExpenseEntry(
            network=network,
            category="initial_state",
            category_display_name="Initial state",
            billed_amount=0.0,
            employee_responsibility=0.0,
            insurance_responsibility=0.0,
            deductible_remaining=self.deductible,
            out_of_pocket_remaining=self.oop_max,
        )

    def _section(self, expenses: List[ExpenseEntry], network: Network) -> List[ExpenseEntry]:
        if not expenses:
            return []
        # Free care first, otherwise replay order (sorted() is stable)
        ordered = sorted(expenses, key=lambda e: not e.is_free)
        return [self._initial_state_entry(network), *ordered]

    def get_ledger(self) -> Ledger:
        """Snapshot of the itemized ledger."""
        return Ledger(
            contributions_and_savings=list(self._contributions_and_savings),
            premiums=list(self._premiums),
            in_network_expenses=self._section(self._in_network_expenses, "in_network"),
            out_of_network_expenses=self._section(self._out_of_network_expenses, "out_of_network"),
        )
