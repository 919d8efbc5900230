"""Per-iteration entry function for a hosting load engine."""

import logging
from typing import Callable, Optional

from ..config import RunnerConfig
from ..scenario.schema import Scenario
from .executor import ScenarioExecutor, ScenarioOutcome

logger = logging.getLogger(__name__)


def make_entry(
    scenario: Scenario,
    config: Optional[RunnerConfig] = None,
    on_outcome: Optional[Callable[[ScenarioOutcome], None]] = None,
    executor: Optional[ScenarioExecutor] = None,
) -> Callable[[], None]:
    """Build the no-argument function an engine calls once per iteration.

    Each call runs the scenario with a fresh context and returns None;
    results reach the engine only through ``on_outcome`` and the log.
    """
    executor = executor or ScenarioExecutor(config)

    def iteration() -> None:
        outcome = executor.run(scenario)
        logger.info(
            "iteration %s: %s (%d steps, %d ms)",
            scenario.name,
            "aborted" if outcome.aborted else ("passed" if outcome.passed else "failed"),
            len(outcome.steps),
            outcome.duration_ms,
        )
        if on_outcome is not None:
            on_outcome(outcome)

    iteration.__name__ = f"run_{scenario.name.replace('-', '_')}"
    return iteration
