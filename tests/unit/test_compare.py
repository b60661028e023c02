"""Unit tests for plan comparison and total cost assembly."""

import pytest

from plancost.sdk.compare import calculate_plan_cost, compare_all
from plancost.sdk.execution import PlanExecution

from conftest import make_catalog, make_hsa_plan, make_inputs, make_ppo_plan


def estimate(category_id, quantity=0, cost=0.0, oon_quantity=0, oon_cost=0.0, notes=None):
    return {
        "category_id": category_id,
        "in_network": {"quantity": quantity, "cost_per_visit": cost},
        "out_of_network": {"quantity": oon_quantity, "cost_per_visit": oon_cost},
        "notes": notes,
    }


class TestCompareAll:
    """Tests for ranking plans."""

    def test_empty_catalog_returns_empty_list(self):
        assert compare_all(make_catalog([]), make_inputs()) == []

    def test_sorted_by_total_cost(self, catalog):
        results = compare_all(catalog, make_inputs())

        # No usage: PPO $2400 premiums vs HSA $1800 - $1000 employer
        assert [r.plan_name for r in results] == ["Test HSA", "Test PPO"]
        assert results[0].total_cost <= results[1].total_cost

    def test_plans_do_not_share_state(self, ppo_plan, hsa_plan):
        inputs = make_inputs([estimate("hospital_inpatient", 1, 20000)])

        forward = compare_all(make_catalog([ppo_plan, hsa_plan]), inputs)
        reverse = compare_all(make_catalog([hsa_plan, ppo_plan]), inputs)

        assert [r.model_dump() for r in forward] == [r.model_dump() for r in reverse]
        for result in forward:
            assert result.out_of_pocket_costs == pytest.approx(4500 if result.plan_type == "HSA" else 4400)

    def test_repeated_calls_are_independent(self, catalog):
        inputs = make_inputs([estimate("imaging", 2, 400)])

        assert compare_all(catalog, inputs) == compare_all(catalog, inputs)


class TestCalculatePlanCost:
    """Tests for a single plan's result."""

    def test_total_cost_formula(self, catalog, hsa_plan):
        inputs = make_inputs([estimate("imaging", 1, 1000)], hsa_contribution=2000)

        result = calculate_plan_cost(hsa_plan, catalog, inputs)

        tax_savings = 2000 * (0.22 + 0.0765)
        assert result.annual_premiums == 1800
        assert result.net_annual_premiums == 1800
        assert result.out_of_pocket_costs == 1000
        assert result.tax_savings == pytest.approx(tax_savings)
        assert result.employer_contribution == 1000
        assert result.total_contributions == 3000
        assert result.total_cost == pytest.approx(1800 + 1000 - tax_savings - 1000)
        assert result.breakdown.net == result.total_cost

    def test_total_cost_can_be_negative(self, catalog, hsa_plan):
        inputs = make_inputs(hsa_contribution=3300, tax_rate_percent=40)

        result = calculate_plan_cost(hsa_plan, catalog, inputs)

        assert result.total_cost == pytest.approx(1800 - 3300 * 0.4765 - 1000)
        assert result.total_cost < 0

    def test_max_annual_cost_uses_oop_max(self, catalog, ppo_plan):
        result = calculate_plan_cost(ppo_plan, catalog, make_inputs(fsa_contribution=1000))

        assert result.max_annual_cost == pytest.approx(2400 + 5000 - 1000 * 0.2965)

    def test_quantity_replayed_per_occurrence(self, catalog, ppo_plan):
        inputs = make_inputs([estimate("office_visit_pcp", 3, 100)])

        result = calculate_plan_cost(ppo_plan, catalog, inputs)

        manual = PlanExecution(ppo_plan, "single")
        for _ in range(3):
            manual.record_expense("office_visit_pcp", 100)

        assert result.out_of_pocket_costs == 75
        assert result.out_of_pocket_costs == manual.get_total_out_of_pocket()

    def test_in_network_replayed_before_out_of_network(self, catalog, ppo_plan):
        inputs = make_inputs([estimate("imaging", 1, 400, oon_quantity=1, oon_cost=400)])

        result = calculate_plan_cost(ppo_plan, catalog, inputs)

        # In-network $400 all deductible, then $100 deductible + 40% of $300
        in_row = result.ledger.in_network_expenses[1]
        out_row = result.ledger.out_of_network_expenses[1]
        assert in_row.employee_responsibility == 400
        assert out_row.employee_responsibility == pytest.approx(220)

    def test_estimates_replayed_in_listed_order(self, catalog, hsa_plan):
        first_rx = make_inputs([
            estimate("pharmacy_tier_1_retail_30", 1, 100),
            estimate("imaging", 1, 2000),
        ])
        first_imaging = make_inputs([
            estimate("imaging", 1, 2000),
            estimate("pharmacy_tier_1_retail_30", 1, 100),
        ])

        rx_result = calculate_plan_cost(hsa_plan, catalog, first_rx)
        imaging_result = calculate_plan_cost(hsa_plan, catalog, first_imaging)

        # Rx first: $100 deductible, then $1550 + 20% of $450
        assert rx_result.out_of_pocket_costs == pytest.approx(1740)
        # Imaging first: $1650 + 20% of $350 = $1720, then the $10 copay
        assert imaging_result.out_of_pocket_costs == pytest.approx(1730)

    def test_quantity_cap_charges_extra_visits_in_full(self, catalog):
        plan = make_ppo_plan(categories={"chiropractic_therapy": {"qty_cap": 2, "in_network_coverage": {"copay": 35}}})
        inputs = make_inputs([estimate("chiropractic_therapy", 4, 100, notes="back")])

        result = calculate_plan_cost(plan, catalog, inputs)

        rows = result.ledger.in_network_expenses[1:]
        assert [r.employee_responsibility for r in rows] == [35, 35, 100, 100]
        assert rows[-1].notes == "[Over visit limit] back"
        assert result.out_of_pocket_costs == 270

    def test_ledger_sections_sum_to_result(self, catalog, hsa_plan):
        inputs = make_inputs(
            [
                estimate("preventive_routine_exam", 1, 300),
                estimate("imaging", 2, 900, oon_quantity=1, oon_cost=500),
                estimate("pharmacy_tier_1_retail_30", 6, 40),
            ],
            hsa_contribution=1500,
        )

        result = calculate_plan_cost(hsa_plan, catalog, inputs)
        ledger = result.ledger

        assert ledger.total_premiums == pytest.approx(result.net_annual_premiums)
        assert ledger.total_contributions_and_savings == pytest.approx(
            result.tax_savings + result.employer_contribution
        )
        assert ledger.total_employee_expenses == pytest.approx(result.out_of_pocket_costs)
        assert result.total_cost == pytest.approx(
            ledger.total_premiums + ledger.total_employee_expenses - ledger.total_contributions_and_savings
        )

    def test_ledger_exceeds_out_of_pocket_after_max(self, catalog):
        plan = make_ppo_plan(categories={"chiropractic_therapy": {"qty_cap": 0}})
        inputs = make_inputs(
            [estimate("hospital_inpatient", 1, 30000), estimate("chiropractic_therapy", 2, 100)]
        )

        result = calculate_plan_cost(plan, catalog, inputs)

        assert result.out_of_pocket_costs == 5000
        assert result.ledger.total_employee_expenses == pytest.approx(5200)

    def test_telemedicine_skips_deductible(self, catalog):
        plan = make_hsa_plan(
            categories={
                "telemedicine_pcp": {
                    "in_network_coverage": {
                        "coinsurance": 0.2,
                        "requires_deductible_to_be_met": False,
                        "contributes_to_deductible": False,
                    },
                },
            }
        )
        inputs = make_inputs([estimate("telemedicine_pcp", 1, 100)])

        result = calculate_plan_cost(plan, catalog, inputs)

        assert result.out_of_pocket_costs == pytest.approx(20)
        visit = result.ledger.in_network_expenses[1]
        assert visit.deductible_remaining == 1650

    def test_pre_tax_premiums_discount(self, catalog):
        plan = make_ppo_plan(premiums_are_pre_tax=True)

        result = calculate_plan_cost(plan, catalog, make_inputs())

        discount = 2400 * (0.22 + 0.0765)
        assert result.premium_discount == pytest.approx(discount)
        assert result.net_annual_premiums == pytest.approx(2400 - discount)
        assert result.total_cost == pytest.approx(2400 - discount)
        assert result.ledger.premiums[-1].description == "Premium Net Discount"

    def test_contribution_type_follows_plan_type(self, catalog, ppo_plan, hsa_plan):
        assert calculate_plan_cost(ppo_plan, catalog, make_inputs()).contribution_type == "FSA"
        assert calculate_plan_cost(hsa_plan, catalog, make_inputs()).contribution_type == "HSA"
