"""Scenario module - YAML scenario parsing and validation."""

from .schema import (
    Assertion,
    Check,
    Extraction,
    HttpMethod,
    Scenario,
    ScenarioMeta,
    Severity,
    Step,
    ValidationError,
    ValidationResult,
)
from .parser import parse_scenario, parse_scenario_data
from .registry import bundled_names, load_bundled, resolve_scenario
from .validator import validate_scenario

__all__ = [
    "Assertion",
    "Check",
    "Extraction",
    "HttpMethod",
    "Scenario",
    "ScenarioMeta",
    "Severity",
    "Step",
    "ValidationError",
    "ValidationResult",
    "bundled_names",
    "load_bundled",
    "parse_scenario",
    "parse_scenario_data",
    "resolve_scenario",
    "validate_scenario",
]
