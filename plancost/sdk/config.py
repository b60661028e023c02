"""Configuration and plan data loading for Plan Cost.

Configuration lives in settings.json in the config directory:
   - plan_years_dir: directory of <year>.yaml plan catalogs
   - categories: path to a categories YAML file

Config directory resolution:
1. PLAN_COST_CONFIG_PATH environment variable (if set)
2. ~/.config/plan-cost/ (XDG_CONFIG_HOME fallback)

Plan catalog resolution:
1. Explicit path (if provided)
2. <plan_years_dir>/<year>.yaml from settings.json
3. Bundled plancost/data/plan_years/<year>.yaml

Catalogs and user inputs are YAML (JSON also parses as YAML) validated
with the pydantic schemas in plancost.sdk.schemas. Top-level catalog keys
starting with "x-" are ignored so they can hold shared YAML anchors.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic import ValidationError

from .schemas import Category, PlanCatalog, UserInputs

logger = logging.getLogger(__name__)


APP_NAME = "plan-cost"
SETTINGS_FILENAME = "settings.json"
PLAN_YEARS_DIR_SETTING = "plan_years_dir"
CATEGORIES_SETTING = "categories"
PATH_SETTINGS = (PLAN_YEARS_DIR_SETTING, CATEGORIES_SETTING)
CATALOG_SUFFIXES = (".yaml", ".yml")
BUNDLED_DATA_DIR = Path(__file__).resolve().parent.parent / "data"


class PlanDataNotFoundError(Exception):
    """Raised when a plan catalog or data file cannot be found."""
    pass


class PlanDataError(Exception):
    """Raised when a plan catalog or input file is malformed."""
    pass


def get_config_dir() -> Path:
    """PLAN_COST_CONFIG_PATH if set, else $XDG_CONFIG_HOME/plan-cost."""
    env_path = os.environ.get("PLAN_COST_CONFIG_PATH")
    if env_path:
        return Path(env_path)
    return Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config")) / APP_NAME


def get_settings_path() -> Path:
    return get_config_dir() / SETTINGS_FILENAME


def load_settings() -> dict:
    """Current settings, or {} before anything has been saved.

    Raises:
        PlanDataError: If settings.json is not valid JSON
    """
    settings_file = get_settings_path()
    if not settings_file.exists():
        return {}

    try:
        with open(settings_file, "r") as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise PlanDataError(f"{settings_file}: invalid JSON: {e}") from e


def save_settings(settings: dict) -> Path:
    settings_file = get_settings_path()
    settings_file.parent.mkdir(parents=True, exist_ok=True)
    with open(settings_file, "w") as f:
        json.dump(settings, f, indent=2)
    return settings_file


def get_setting(key: str, default: Any = None) -> Any:
    return load_settings().get(key, default)


def set_setting(key: str, value: Any) -> Path:
    """Store a plan data setting. None removes the key.

    Raises:
        PlanDataError: If key is not one of PATH_SETTINGS
    """
    if key not in PATH_SETTINGS:
        known = ", ".join(PATH_SETTINGS)
        raise PlanDataError(f"Unknown setting: {key}. Known settings: {known}")

    settings = load_settings()
    if value is None:
        settings.pop(key, None)
    else:
        settings[key] = value
    return save_settings(settings)


def _custom_path(key: str) -> Optional[Path]:
    """User-configured override for a bundled data location, if any."""
    custom = get_setting(key)
    return Path(custom).expanduser() if custom else None


# =============================================================================
# Plan data
# =============================================================================


def get_plan_years_dir() -> Path:
    """Directory holding <year>.yaml catalogs (custom setting or bundled data)."""
    return _custom_path(PLAN_YEARS_DIR_SETTING) or BUNDLED_DATA_DIR / "plan_years"


def list_plan_years(plan_years_dir: Optional[Path] = None) -> List[int]:
    """List available plan years, newest first."""
    directory = plan_years_dir or get_plan_years_dir()
    if not directory.is_dir():
        return []

    years = set()
    for path in directory.iterdir():
        if path.suffix in CATALOG_SUFFIXES and path.stem.isdigit():
            years.add(int(path.stem))
    return sorted(years, reverse=True)


def get_catalog_path(year: Optional[int] = None) -> Path:
    """Resolve the catalog file for a year (latest year if not given).

    Raises:
        PlanDataNotFoundError: If no catalog exists for the year
    """
    directory = get_plan_years_dir()
    available = list_plan_years(directory)

    if year is None:
        if not available:
            raise PlanDataNotFoundError(f"No plan years found in {directory}")
        year = available[0]

    for suffix in CATALOG_SUFFIXES:
        path = directory / f"{year}{suffix}"
        if path.exists():
            return path

    years_text = ", ".join(str(y) for y in available) or "none"
    raise PlanDataNotFoundError(
        f"Plan data not available for year {year}. Available years: {years_text}"
    )


def _read_yaml(path: Path) -> Any:
    if not path.exists():
        raise PlanDataNotFoundError(f"File not found: {path}")

    try:
        with open(path, "r") as f:
            return yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise PlanDataError(f"{path}: invalid YAML: {e}") from e


def load_plan_catalog(year: Optional[int] = None, path: Optional[Path] = None) -> PlanCatalog:
    """Load and validate a plan catalog.

    Args:
        year: Plan year to load from the plan years directory (default: latest)
        path: Explicit catalog file (overrides year)

    Returns:
        Validated PlanCatalog

    Raises:
        PlanDataNotFoundError: If the catalog file doesn't exist
        PlanDataError: If the file is not valid YAML or fails validation
    """
    catalog_path = Path(path) if path else get_catalog_path(year)
    data = _read_yaml(catalog_path)

    if not isinstance(data, dict):
        raise PlanDataError(f"{catalog_path}: expected a mapping at top level")

    # Top-level "x-" keys hold YAML anchors only
    data = {k: v for k, v in data.items() if not str(k).startswith("x-")}

    if "year" not in data and catalog_path.stem.isdigit():
        data["year"] = int(catalog_path.stem)

    try:
        catalog = PlanCatalog.model_validate(data)
    except ValidationError as e:
        raise PlanDataError(f"{catalog_path}: {e}") from e

    for warning in check_hsa_qualification(catalog):
        logger.warning(f"{catalog_path.name}: {warning}")

    logger.debug(f"Loaded {len(catalog.plans)} plan(s) from {catalog_path}")
    return catalog


def load_categories(path: Optional[Path] = None) -> Dict[str, Category]:
    """Load category display metadata.

    Resolution: explicit path, then settings 'categories', then bundled
    categories.yaml. A missing bundled file yields an empty mapping.
    """
    if path is None:
        path = _custom_path(CATEGORIES_SETTING)
        if path is None:
            path = BUNDLED_DATA_DIR / "categories.yaml"
            if not path.exists():
                return {}

    data = _read_yaml(Path(path)) or {}
    if not isinstance(data, dict):
        raise PlanDataError(f"{path}: expected a mapping of category id to category")

    try:
        return {category_id: Category.model_validate(entry) for category_id, entry in data.items()}
    except ValidationError as e:
        raise PlanDataError(f"{path}: {e}") from e


def load_user_inputs(path: Path) -> UserInputs:
    """Load and validate user inputs from a YAML or JSON file.

    Raises:
        PlanDataNotFoundError: If the file doesn't exist
        PlanDataError: If the inputs fail validation
    """
    data = _read_yaml(Path(path)) or {}

    try:
        return UserInputs.model_validate(data)
    except ValidationError as e:
        raise PlanDataError(f"{path}: {e}") from e


def check_hsa_qualification(catalog: PlanCatalog) -> List[str]:
    """Check HSA plans against the catalog's HSA qualification limits.

    Returns:
        List of warning messages (empty if all HSA plans qualify or no
        limits are defined)
    """
    limits = catalog.hsa_qualification_limits
    if limits is None:
        return []

    warnings = []
    for plan in catalog.plans:
        if not plan.is_hsa:
            continue

        deductible = plan.annual_deductible.in_network
        oop_max = plan.out_of_pocket_maximum.in_network

        if deductible.single < limits.minimum_deductible.single:
            warnings.append(
                f"{plan.name}: single deductible {deductible.single:,.0f} is below "
                f"HSA minimum {limits.minimum_deductible.single:,.0f}"
            )
        if deductible.family < limits.minimum_deductible.family:
            warnings.append(
                f"{plan.name}: family deductible {deductible.family:,.0f} is below "
                f"HSA minimum {limits.minimum_deductible.family:,.0f}"
            )
        if oop_max.individual > limits.maximum_out_of_pocket.single:
            warnings.append(
                f"{plan.name}: individual OOP max {oop_max.individual:,.0f} exceeds "
                f"HSA maximum {limits.maximum_out_of_pocket.single:,.0f}"
            )
        if oop_max.family > limits.maximum_out_of_pocket.family:
            warnings.append(
                f"{plan.name}: family OOP max {oop_max.family:,.0f} exceeds "
                f"HSA maximum {limits.maximum_out_of_pocket.family:,.0f}"
            )

    return warnings
