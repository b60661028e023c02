"""Unit tests for HSA/FSA contribution and tax savings calculations."""

import pytest

from plancost.sdk.contributions import (
    compute_contributions,
    get_max_hsa_contribution,
    get_max_fsa_contribution,
    payroll_tax_rate,
)

from conftest import make_catalog, make_hsa_plan, make_inputs, make_ppo_plan


class TestLimits:
    """Tests for contribution limit lookup."""

    def test_single_hsa_limit(self, catalog):
        assert get_max_hsa_contribution(catalog, "single", "under_55") == 4300

    def test_two_party_uses_family_limit(self, catalog):
        assert get_max_hsa_contribution(catalog, "two_party", "under_55") == 8550

    def test_catch_up_for_55_plus(self, catalog):
        assert get_max_hsa_contribution(catalog, "family", "55_plus") == 9550

    def test_fsa_limit(self, catalog):
        assert get_max_fsa_contribution(catalog) == 3300

    def test_payroll_tax_rate(self, catalog):
        assert payroll_tax_rate(catalog) == pytest.approx(0.0765)


class TestHsaContributions:
    """Tests for HSA plans."""

    def test_request_capped_by_limit_minus_employer(self, catalog, hsa_plan):
        result = compute_contributions(hsa_plan, catalog, make_inputs(hsa_contribution=5000))

        assert result.contribution_type == "HSA"
        assert result.employer_contribution == 1000
        assert result.user_contribution == 3300

    def test_request_under_limit_is_kept(self, catalog, hsa_plan):
        result = compute_contributions(hsa_plan, catalog, make_inputs(hsa_contribution=2000))

        assert result.user_contribution == 2000
        assert result.tax_savings == pytest.approx(2000 * (0.22 + 0.0765))

    def test_employer_contribution_by_tier(self, catalog, hsa_plan):
        result = compute_contributions(
            hsa_plan, catalog, make_inputs(coverage_tier="family", hsa_contribution=10000)
        )

        assert result.employer_contribution == 2000
        assert result.user_contribution == 6550

    def test_floored_at_zero_when_employer_exceeds_limit(self, catalog):
        plan = make_hsa_plan(employer_hsa_contribution={"single": 5000, "two_party": 9000, "family": 9000})
        result = compute_contributions(plan, catalog, make_inputs(hsa_contribution=1000))

        assert result.user_contribution == 0
        assert result.tax_savings == 0

    def test_missing_employer_contribution_is_zero(self, catalog):
        plan = make_hsa_plan(employer_hsa_contribution=None)
        result = compute_contributions(plan, catalog, make_inputs(hsa_contribution=5000))

        assert result.employer_contribution == 0
        assert result.user_contribution == 4300

    def test_fsa_request_ignored_on_hsa_plan(self, catalog, hsa_plan):
        result = compute_contributions(hsa_plan, catalog, make_inputs(fsa_contribution=2000))

        assert result.user_contribution == 0


class TestFsaContributions:
    """Tests for PPO plans with an FSA."""

    def test_fsa_tax_savings(self, catalog, ppo_plan):
        result = compute_contributions(ppo_plan, catalog, make_inputs(fsa_contribution=1500))

        assert result.contribution_type == "FSA"
        assert result.employer_contribution == 0
        assert result.user_contribution == 1500
        assert result.tax_savings == pytest.approx(444.75)

    def test_fsa_capped_at_limit(self, catalog, ppo_plan):
        result = compute_contributions(ppo_plan, catalog, make_inputs(fsa_contribution=5000))

        assert result.user_contribution == 3300

    def test_ppo_ignores_employer_hsa_amounts(self, catalog):
        plan = make_ppo_plan(employer_hsa_contribution={"single": 500, "two_party": 1000, "family": 1000})
        result = compute_contributions(plan, catalog, make_inputs(fsa_contribution=100))

        assert result.employer_contribution == 0

    def test_zero_tax_rate_still_saves_payroll_tax(self, catalog, ppo_plan):
        result = compute_contributions(
            ppo_plan, catalog, make_inputs(fsa_contribution=1000, tax_rate_percent=0)
        )

        assert result.tax_savings == pytest.approx(76.5)

    def test_no_fsa_limit_means_no_contribution(self, ppo_plan):
        catalog = make_catalog([ppo_plan], fsa_contribution_limits={"healthcare_fsa": 0})
        result = compute_contributions(ppo_plan, catalog, make_inputs(fsa_contribution=1000))

        assert result.user_contribution == 0
