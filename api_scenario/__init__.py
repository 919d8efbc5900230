"""Scripted HTTP API scenarios with dependency-chained assertions."""

from .config import RunnerConfig, load_config
from .context import UNDEFINED, ScenarioContext
from .errors import (
    AssertionFailure,
    ContextOverwriteError,
    CriticalAssertionFailure,
    NetworkError,
    RequestEncodingError,
    ScenarioError,
    UnresolvedReferenceError,
)
from .runner import ScenarioExecutor, ScenarioOutcome, StepOutcome, make_entry
from .scenario import (
    Assertion,
    Check,
    Extraction,
    Scenario,
    ScenarioMeta,
    Step,
    load_bundled,
    parse_scenario,
    resolve_scenario,
    validate_scenario,
)

__version__ = "0.1.0"

__all__ = [
    "Assertion",
    "AssertionFailure",
    "Check",
    "ContextOverwriteError",
    "CriticalAssertionFailure",
    "Extraction",
    "NetworkError",
    "RequestEncodingError",
    "RunnerConfig",
    "Scenario",
    "ScenarioContext",
    "ScenarioError",
    "ScenarioExecutor",
    "ScenarioMeta",
    "ScenarioOutcome",
    "Step",
    "StepOutcome",
    "UNDEFINED",
    "UnresolvedReferenceError",
    "load_bundled",
    "load_config",
    "make_entry",
    "parse_scenario",
    "resolve_scenario",
    "validate_scenario",
]
