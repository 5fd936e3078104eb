"""
Predefined runs for reproducibility.

Each scenario names a base config and the overrides applied on top of it.
"""

from dataclasses import asdict
from typing import Any, Dict, List

from .config import Config, get_config


PREDEFINED_SCENARIOS = {
    "single": {
        "description": "One stochastic trajectory (N=1000, I0=10, beta=0.2, gamma=0.1)",
        "config": "default",
        "overrides": {},
    },
    "replicates": {
        "description": "200 independent replicates of the same epidemic",
        "config": "replicates",
        "overrides": {},
    },
    "fast_spread": {
        "description": "Higher contact rate (beta=0.4), 50 replicates",
        "config": "default",
        "overrides": {
            "beta": 0.4,
            "n_replicates": 50,
        },
    },
}


def get_scenario(name: str) -> Dict[str, Any]:
    """
    Get configuration for a predefined scenario.

    Args:
        name: Scenario name (e.g., "single", "replicates").

    Returns:
        Dictionary with the scenario description, base config name and overrides.

    Raises:
        ValueError: If scenario name is not recognized.
    """
    if name not in PREDEFINED_SCENARIOS:
        available = ", ".join(PREDEFINED_SCENARIOS.keys())
        raise ValueError(
            f"Unknown scenario: '{name}'. Available scenarios: {available}"
        )

    scenario = PREDEFINED_SCENARIOS[name].copy()
    scenario["overrides"] = dict(scenario["overrides"])
    return scenario


def build_config(name: str, **overrides: Any) -> Config:
    """
    Builds the Config for a scenario, applying scenario overrides then caller overrides.

    Overrides whose value is None are ignored, so CLI arguments can be passed through.
    """
    scenario = get_scenario(name)
    config = get_config(scenario["config"])

    changes = dict(scenario["overrides"])
    changes.update({key: value for key, value in overrides.items() if value is not None})

    config = Config(**{**asdict(config), **changes})
    config.validate()
    return config


def list_scenarios() -> List[str]:
    """
    Get list of all predefined scenario names.

    Returns:
        List of scenario name strings.
    """
    return list(PREDEFINED_SCENARIOS.keys())


def get_scenario_description(name: str) -> str:
    """
    Get human-readable description of a scenario.

    Args:
        name: Scenario name.

    Returns:
        Description string.

    Raises:
        ValueError: If scenario name is not recognized.
    """
    if name not in PREDEFINED_SCENARIOS:
        raise ValueError(f"Unknown scenario: '{name}'")

    return PREDEFINED_SCENARIOS[name]["description"]
