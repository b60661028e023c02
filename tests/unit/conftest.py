"""Shared fixtures for plan cost unit tests."""

import pytest

from plancost.sdk.schemas import PlanCatalog, Plan, UserInputs


def make_ppo_plan(**overrides) -> Plan:
    """PPO with a $500 deductible, 20% coinsurance and a $25 PCP copay."""
    data = {
        "name": "Test PPO",
        "type": "PPO",
        "monthly_premiums": {"single": 200, "two_party": 400, "family": 600},
        "annual_deductible": {
            "in_network": {"single": 500, "family": 1000},
            "out_of_network": {"single": 1000, "family": 2000},
        },
        "out_of_pocket_maximum": {
            "in_network": {"individual": 5000, "family": 10000},
            "out_of_network": {"individual": 10000, "family": 20000},
        },
        "default": {
            "in_network_coverage": {"coinsurance": 0.2},
            "out_of_network_coverage": {"coinsurance": 0.4},
        },
        "categories": {
            "office_visit_pcp": {
                "in_network_coverage": {"copay": 25},
                "out_of_network_coverage": {"copay": 50},
            },
            "preventive_routine_exam": {
                "in_network_coverage": {"is_free": True},
            },
            "pharmacy_tier_1_retail_30": {
                "in_network_coverage": {"copay": 10},
            },
            "pharmacy_tier_2_retail_30": {
                "in_network_coverage": {"coinsurance": 0.2, "max_coinsurance": 60},
            },
        },
    }
    data.update(overrides)
    return Plan.model_validate(data)


def make_hsa_plan(**overrides) -> Plan:
    """HSA plan: $1650 deductible, 20% coinsurance, $4500 OOP max (single)."""
    data = {
        "name": "Test HSA",
        "type": "HSA",
        "monthly_premiums": {"single": 150, "two_party": 300, "family": 450},
        "annual_deductible": {
            "in_network": {"single": 1650, "family": 3300},
            "out_of_network": {"single": 3300, "family": 6600},
        },
        "out_of_pocket_maximum": {
            "in_network": {"individual": 4500, "family": 9000},
            "out_of_network": {"individual": 9000, "family": 18000},
        },
        "default": {
            "in_network_coverage": {"coinsurance": 0.2},
            "out_of_network_coverage": {"coinsurance": 0.4},
        },
        "categories": {
            "preventive_routine_exam": {
                "in_network_coverage": {"is_free": True},
            },
            "pharmacy_tier_1_retail_30": {
                "in_network_coverage": {"copay": 10},
            },
        },
        "employer_hsa_contribution": {"single": 1000, "two_party": 2000, "family": 2000},
    }
    data.update(overrides)
    return Plan.model_validate(data)


def make_catalog(plans=None, **overrides) -> PlanCatalog:
    data = {
        "year": 2025,
        "hsa_contribution_limits": {
            "single_coverage": 4300,
            "family_coverage": 8550,
            "catch_up_age_55_plus": 1000,
        },
        "fsa_contribution_limits": {"healthcare_fsa": 3300},
        "payroll_tax_rates": {"social_security": 6.2, "medicare": 1.45},
        "plans": [p.model_dump() for p in (plans or [])],
    }
    data.update(overrides)
    return PlanCatalog.model_validate(data)


def make_inputs(estimates=None, **overrides) -> UserInputs:
    data = {
        "coverage_tier": "single",
        "age_group": "under_55",
        "tax_rate_percent": 22,
        "hsa_contribution": 0,
        "fsa_contribution": 0,
        "category_estimates": estimates or [],
    }
    data.update(overrides)
    return UserInputs.model_validate(data)


@pytest.fixture
def ppo_plan():
    return make_ppo_plan()


@pytest.fixture
def hsa_plan():
    return make_hsa_plan()


@pytest.fixture
def catalog(ppo_plan, hsa_plan):
    return make_catalog([ppo_plan, hsa_plan])


@pytest.fixture
def isolated_config(tmp_path, monkeypatch):
    """Point the config directory at an empty temp dir."""
    config_dir = tmp_path / "config"
    monkeypatch.setenv("PLAN_COST_CONFIG_PATH", str(config_dir))
    return config_dir
