"""Runner module - scenario execution."""

from .entry import make_entry
from .executor import ScenarioExecutor, ScenarioOutcome, StepOutcome

__all__ = [
    "ScenarioExecutor",
    "ScenarioOutcome",
    "StepOutcome",
    "make_entry",
]
