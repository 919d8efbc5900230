"""Scenario executor - runs one scenario as an ordered chain of HTTP steps.

For each step:
1. Resolve URL, body, headers and assertion values from the context
2. Send the request
3. Evaluate every assertion
4. Abort on any failed critical assertion
5. Apply extractions to the context
"""

import datetime
import logging
import random
import time
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Optional

from requests.structures import CaseInsensitiveDict

from ..config import RunnerConfig
from ..context import UNDEFINED, ScenarioContext, seed_context
from ..errors import (
    AssertionFailure,
    ContextOverwriteError,
    CriticalAssertionFailure,
    NetworkError,
    RequestEncodingError,
    ScenarioError,
    UnresolvedReferenceError,
)
from ..reporting.json_reporter import JsonReporter
from ..scenario.schema import Assertion, Scenario, Step
from ..transport.http_client import HttpClient, RequestSpec, Response
from ..validators.assertion_engine import AssertionEngine, AssertionResult
from ..validators.extraction import apply_extractions

logger = logging.getLogger(__name__)


@dataclass
class StepOutcome:
    """What happened when one step was attempted."""
    name: str
    request: Optional[RequestSpec] = None
    response: Optional[Response] = None
    error: Optional[ScenarioError] = None
    assertions: list[AssertionResult] = field(default_factory=list)
    extracted: dict[str, Any] = field(default_factory=dict)
    duration_ms: int = 0

    @property
    def passed(self) -> bool:
        return self.error is None and all(r.passed for r in self.assertions)


@dataclass
class ScenarioOutcome:
    """Complete result of one scenario run."""
    scenario_name: str
    steps: list[StepOutcome] = field(default_factory=list)
    aborted: bool = False
    abort_step: Optional[str] = None
    abort_reason: Optional[str] = None
    failures: list[ScenarioError] = field(default_factory=list)
    context: dict[str, Any] = field(default_factory=dict)
    duration_ms: int = 0
    report_path: Optional[str] = None

    @property
    def passed(self) -> bool:
        return not self.aborted and all(step.passed for step in self.steps)

    @property
    def assertion_results(self) -> list[AssertionResult]:
        return [r for step in self.steps for r in step.assertions]

    def to_flow_json(self) -> dict:
        """Convert to flow-style CLI JSON output."""
        reporter = JsonReporter()
        return reporter.generate_flow_output(reporter.generate(self), self.report_path)


class _StepAborted(Exception):
    """Internal signal carrying the error that ends the run."""

    def __init__(self, error: ScenarioError):
        super().__init__(str(error))
        self.error = error


class ScenarioExecutor:
    """Runs scenarios step by step against a target API.

    The executor holds only configuration; every ``run`` gets its own
    context and, unless a client was injected, its own HTTP session.
    """

    def __init__(
        self,
        config: Optional[RunnerConfig] = None,
        client: Optional[HttpClient] = None,
        client_factory: Optional[Callable[[RunnerConfig], HttpClient]] = None,
        rng: Optional[random.Random] = None,
    ):
        """Initialize scenario executor.

        Args:
            config: Runner configuration.
            client: Transport shared by every run (mainly for tests).
            client_factory: Builds a fresh transport per run.
            rng: Random source for variable generators.
        """
        self.config = config or RunnerConfig()
        self.client = client
        self.client_factory = client_factory or _default_client
        self.rng = rng
        self._engine = AssertionEngine()

    def run(self, scenario: Scenario) -> ScenarioOutcome:
        """Execute every step of the scenario in order.

        Returns:
            ScenarioOutcome with one StepOutcome per attempted step.
        """
        start_time = time.time()
        config = self.config.with_scenario_defaults(scenario.meta)
        outcome = ScenarioOutcome(scenario_name=scenario.name)
        logger.info("Running scenario: %s (%d steps)", scenario.name, scenario.total_steps)

        try:
            context = seed_context(scenario.variables, rng=self.rng)
        except (UnresolvedReferenceError, ContextOverwriteError, ValueError) as e:
            error = e if isinstance(e, ScenarioError) else ScenarioError(str(e))
            self._abort(outcome, "variables", error)
            outcome.duration_ms = int((time.time() - start_time) * 1000)
            return outcome

        client = self.client or self.client_factory(config)
        try:
            for step in scenario.steps:
                step_outcome = StepOutcome(name=step.name)
                outcome.steps.append(step_outcome)
                try:
                    self._run_step(step, config, context, client, step_outcome, outcome)
                except _StepAborted as aborted:
                    self._abort(outcome, step.name, aborted.error)
                    break
        finally:
            if self.client is None:
                client.close()

        outcome.context = context.snapshot()
        outcome.duration_ms = int((time.time() - start_time) * 1000)

        if outcome.aborted:
            logger.warning(
                "Scenario %s aborted at %s: %s",
                scenario.name, outcome.abort_step, outcome.abort_reason,
            )
        else:
            logger.info(
                "Scenario %s completed: %d steps, %s",
                scenario.name, len(outcome.steps), "passed" if outcome.passed else "failed",
            )
        return outcome

    def _run_step(
        self,
        step: Step,
        config: RunnerConfig,
        context: ScenarioContext,
        client: HttpClient,
        step_outcome: StepOutcome,
        outcome: ScenarioOutcome,
    ) -> None:
        start_time = time.time()
        try:
            try:
                request, assertions = self._resolve(step, config, context)
            except UnresolvedReferenceError as e:
                step_outcome.error = e
                raise _StepAborted(e)
            step_outcome.request = request

            try:
                response = client.send(request)
            except NetworkError as e:
                e.step = step.name
                step_outcome.error = e
                raise _StepAborted(e)
            except RequestEncodingError as e:
                step_outcome.error = e
                raise _StepAborted(e)
            step_outcome.response = response
            logger.info("%s %s %s -> %d", step.name, request.method, request.url, response.status)

            report = self._engine.evaluate(assertions, response)
            step_outcome.assertions = report.results

            critical = None
            for result in report.results:
                if result.passed:
                    continue
                if result.is_critical:
                    failure = CriticalAssertionFailure(step.name, result.name, result.details)
                    critical = critical or failure
                else:
                    failure = AssertionFailure(step.name, result.name, result.details)
                logger.warning("%s", failure)
                outcome.failures.append(failure)

            if critical is not None:
                raise _StepAborted(critical)

            try:
                step_outcome.extracted = apply_extractions(response, step.extract, context)
            except ContextOverwriteError as e:
                step_outcome.error = e
                raise _StepAborted(e)

            if step.log:
                try:
                    logger.info("%s", context.resolve(step.log))
                except UnresolvedReferenceError:
                    logger.info("%s", step.log)
        finally:
            step_outcome.duration_ms = int((time.time() - start_time) * 1000)

    def _resolve(
        self,
        step: Step,
        config: RunnerConfig,
        context: ScenarioContext,
    ) -> tuple[RequestSpec, list[Assertion]]:
        """Substitute context values into the request and assertions."""
        headers = CaseInsensitiveDict(config.request_headers())
        headers.update({k: str(v) for k, v in context.resolve(step.headers).items()})
        body = _jsonable(context.resolve(step.body))
        if body is not None:
            headers.setdefault("Content-Type", "application/json")

        request = RequestSpec(
            method=step.method,
            url=config.build_url(context.resolve(step.url)),
            headers=headers,
            body=body,
        )
        assertions = [
            replace(
                assertion,
                checks=[
                    replace(check, expected=context.resolve(check.expected))
                    for check in assertion.checks
                ],
            )
            for assertion in step.assertions
        ]
        return request, assertions

    @staticmethod
    def _abort(outcome: ScenarioOutcome, step_name: str, error: ScenarioError) -> None:
        outcome.aborted = True
        outcome.abort_step = step_name
        if isinstance(error, AssertionFailure):
            outcome.abort_reason = error.assertion
        else:
            outcome.abort_reason = str(error)
            outcome.failures.append(error)


def _default_client(config: RunnerConfig) -> HttpClient:
    return HttpClient(request_timeout=config.request_timeout, verify=config.verify_tls)


def _jsonable(value: Any) -> Any:
    """Replace UNDEFINED with None and dates with ISO strings."""
    if value is UNDEFINED:
        return None
    if isinstance(value, (datetime.date, datetime.datetime)):
        return value.isoformat()
    if isinstance(value, list):
        return [_jsonable(item) for item in value]
    if isinstance(value, dict):
        return {k: _jsonable(v) for k, v in value.items()}
    return value
