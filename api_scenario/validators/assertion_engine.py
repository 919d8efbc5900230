"""Assertion engine for evaluating step assertions against a response.

Assertions are pure predicates over (status, headers, body). Every
assertion of a step is evaluated, in declaration order, even after an
earlier one fails.
"""

import logging
import operator
import re
from dataclasses import dataclass, field
from typing import Any, Callable

from ..context import UNDEFINED
from ..scenario.schema import Assertion, Check
from ..transport.http_client import Response
from .extraction import apply_cast, lookup

logger = logging.getLogger(__name__)


@dataclass
class AssertionResult:
    """Result of a single assertion evaluation."""
    name: str
    passed: bool
    severity: str
    details: str = ""

    @property
    def is_critical(self) -> bool:
        return self.severity == "critical"

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "status": "pass" if self.passed else "fail",
            "severity": self.severity,
            "details": self.details,
        }


@dataclass
class AssertionReport:
    """Report of all assertion evaluations for one step."""
    results: list[AssertionResult] = field(default_factory=list)

    @property
    def passed_count(self) -> int:
        return sum(1 for r in self.results if r.passed)

    @property
    def critical_failures(self) -> list[AssertionResult]:
        return [r for r in self.results if r.is_critical and not r.passed]


def _compare(fn: Callable[[Any, Any], bool]) -> Callable[[Any, Any], bool]:
    def wrapped(actual: Any, expected: Any) -> bool:
        try:
            return bool(fn(actual, expected))
        except TypeError:
            return False
    return wrapped


def _matches(actual: Any, expected: Any) -> bool:
    try:
        return re.search(str(expected), str(actual)) is not None
    except re.error:
        return False


OPERATORS: dict[str, Callable[[Any, Any], bool]] = {
    "eq": operator.eq,
    "ne": operator.ne,
    "gt": _compare(operator.gt),
    "ge": _compare(operator.ge),
    "lt": _compare(operator.lt),
    "le": _compare(operator.le),
    "in": _compare(lambda actual, expected: actual in expected),
    "contains": _compare(lambda actual, expected: expected in actual),
    "matches": _matches,
}


class AssertionEngine:
    """Evaluates step assertions against a received response."""

    def evaluate(self, assertions: list[Assertion], response: Response) -> AssertionReport:
        """Evaluate all assertions against a response.

        Args:
            assertions: Assertions with placeholders already resolved.
            response: The step's response.

        Returns:
            AssertionReport with one result per assertion, in order.
        """
        report = AssertionReport()
        for assertion in assertions:
            result = self._evaluate_assertion(assertion, response)
            if not result.passed:
                logger.debug("assertion '%s' failed: %s", result.name, result.details)
            report.results.append(result)
        return report

    def _evaluate_assertion(self, assertion: Assertion, response: Response) -> AssertionResult:
        failures = []
        for check in assertion.checks:
            passed, actual = self.evaluate_check(check, response)
            if not passed:
                failures.append(f"{check.describe()} (got {actual!r})")

        if assertion.predicate is not None:
            try:
                if not assertion.predicate(response):
                    failures.append("predicate returned false")
            except Exception as e:
                failures.append(f"predicate raised {type(e).__name__}: {e}")

        return AssertionResult(
            name=assertion.name,
            passed=not failures,
            severity=assertion.severity,
            details="; ".join(failures) if failures else "ok",
        )

    def evaluate_check(self, check: Check, response: Response) -> tuple[bool, Any]:
        """Evaluate one check; returns (passed, actual value)."""
        actual = apply_cast(self._read_subject(check, response), check.cast)

        if check.op == "exists":
            return (actual is not UNDEFINED) == bool(check.expected), actual

        if actual is UNDEFINED:
            return check.op == "ne", actual

        compare = OPERATORS.get(check.op)
        if compare is None:
            raise ValueError(f"Unknown operator '{check.op}'")
        return compare(actual, check.expected), actual

    @staticmethod
    def _read_subject(check: Check, response: Response) -> Any:
        if check.subject == "status":
            return response.status
        if check.subject == "json":
            return lookup(response.body, check.path or "")
        if check.subject == "header":
            value = response.header(check.path or "")
            return UNDEFINED if value is None else value
        raise ValueError(f"Unknown check subject '{check.subject}'")
