"""Plan Cost MCP Server - FastMCP implementation for plan comparison tools."""

import json
import logging
from typing import Any

from mcp.server.fastmcp import FastMCP
from pydantic import Field, ValidationError

from plancost.sdk import (
    PlanDataError,
    PlanDataNotFoundError,
    UserInputs,
    compare_all,
    list_plan_years,
    load_categories,
    load_plan_catalog,
)

logger = logging.getLogger(__name__)

# Initialize FastMCP server
mcp = FastMCP("plan-cost")


# --- Tools ---

@mcp.tool()
async def compare_plans(
    inputs: dict[str, Any] = Field(
        description=(
            "User inputs: coverage_tier (single/two_party/family), age_group (under_55/55_plus), "
            "tax_rate_percent, hsa_contribution, fsa_contribution, and category_estimates "
            "(list of {category_id, in_network: {quantity, cost_per_visit}, "
            "out_of_network: {quantity, cost_per_visit}, notes})"
        ),
    ),
    year: int | None = Field(default=None, description="Plan year (default: latest available)"),
    include_ledger: bool = Field(default=False, description="Include the itemized ledger per plan"),
) -> dict[str, Any]:
    """Rank health plans by total annual cost for the given usage. Cheapest plan first."""
    try:
        user_inputs = UserInputs.model_validate(inputs)
        catalog = load_plan_catalog(year=year)
        results = compare_all(catalog, user_inputs, load_categories())

        exclude = None if include_ledger else {"ledger"}
        return {
            "year": catalog.year,
            "results": [r.model_dump(exclude=exclude) for r in results],
            "count": len(results),
        }

    except ValidationError as e:
        return {"error": f"Invalid inputs: {e}", "results": []}
    except (PlanDataNotFoundError, PlanDataError) as e:
        return {"error": str(e), "results": []}
    except Exception as e:
        logger.error(f"Error comparing plans: {e}")
        return {"error": str(e), "results": []}


@mcp.tool()
async def list_plans(
    year: int | None = Field(default=None, description="Plan year (default: latest available)"),
) -> dict[str, Any]:
    """List plans in a plan year catalog with premiums, deductibles and OOP maximums.

    deductible and out_of_pocket_maximum are the in-network figures that
    size the cost calculation. Out-of-network figures are listed separately.
    """
    try:
        catalog = load_plan_catalog(year=year)
        plans = [
            {
                "name": plan.name,
                "type": plan.type,
                "monthly_premiums": plan.monthly_premiums.model_dump(),
                "deductible": plan.annual_deductible.in_network.model_dump(),
                "out_of_pocket_maximum": plan.out_of_pocket_maximum.in_network.model_dump(),
                "out_of_network_deductible": plan.annual_deductible.out_of_network.model_dump(),
                "out_of_network_out_of_pocket_maximum": plan.out_of_pocket_maximum.out_of_network.model_dump(),
            }
            for plan in catalog.plans
        ]
        return {"year": catalog.year, "plans": plans, "count": len(plans)}

    except (PlanDataNotFoundError, PlanDataError) as e:
        return {"error": str(e), "plans": []}
    except Exception as e:
        logger.error(f"Error listing plans: {e}")
        return {"error": str(e), "plans": []}


# --- Resources ---

@mcp.resource("plancost://plan-years")
async def list_years_resource() -> str:
    """List available plan years."""
    try:
        return json.dumps({"years": list_plan_years()}, indent=2)
    except Exception as e:
        return json.dumps({"error": str(e)})


# --- Server Entry Point ---

def run_server():
    """Run the MCP server in stdio mode."""
    mcp.run(transport="stdio")


if __name__ == "__main__":
    run_server()
