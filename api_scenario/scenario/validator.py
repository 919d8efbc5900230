"""Scenario validator.

Validates parsed Scenario objects against authoring rules, including a
static check that every ``${key}`` reference is produced by a variable or
by an earlier step's extraction.
"""

import re
from collections import Counter

from .generators import is_generator_spec
from .schema import (
    Scenario,
    Step,
    ValidationError,
    ValidationResult,
    VALID_CASTS,
    VALID_METHODS,
    VALID_OPERATORS,
    VALID_SEVERITIES,
    VALID_SUBJECTS,
)
from .templates import references


def validate_scenario(scenario: Scenario) -> ValidationResult:
    """Validate a parsed Scenario object.

    Checks:
    - Meta fields
    - Variable references (only earlier variables)
    - Step methods, URLs, unique names
    - Assertions, checks and extractions
    - Placeholder references against what earlier steps produce

    Args:
        scenario: Parsed Scenario to validate.

    Returns:
        ValidationResult with errors and warnings.
    """
    errors: list[ValidationError] = []
    warnings: list[ValidationError] = []

    if not scenario.meta.name:
        errors.append(ValidationError(
            path="meta.name",
            message="'name' is required and must not be empty.",
        ))

    available = _validate_variables(scenario, errors)
    _validate_steps(scenario, available, errors, warnings)

    if not scenario.steps:
        warnings.append(ValidationError(
            path="steps",
            message="No steps defined.",
            severity="warning",
        ))

    return ValidationResult(
        valid=len(errors) == 0,
        errors=errors,
        warnings=warnings,
    )


def _validate_variables(scenario: Scenario, errors: list[ValidationError]) -> set[str]:
    """Returns the set of keys the variables make available."""
    available: set[str] = set()
    for key, value in scenario.variables.items():
        if not is_generator_spec(value):
            for ref in sorted(references(value) - available):
                errors.append(ValidationError(
                    path=f"variables.{key}",
                    message=f"References '${{{ref}}}' before it is defined.",
                ))
        available.add(key)
    return available


def _validate_steps(
    scenario: Scenario,
    available: set[str],
    errors: list[ValidationError],
    warnings: list[ValidationError],
) -> None:
    """Validate steps in order, tracking which keys are available."""
    name_counts = Counter(step.name for step in scenario.steps)
    writers: dict[str, str] = {}

    for i, step in enumerate(scenario.steps):
        path = f"steps[{i}]"

        if not step.name:
            errors.append(ValidationError(path=f"{path}.name", message="Step 'name' must not be empty."))
        elif name_counts[step.name] > 1:
            errors.append(ValidationError(
                path=f"{path}.name",
                message=f"Duplicate step name '{step.name}'.",
            ))

        if step.method not in VALID_METHODS:
            errors.append(ValidationError(
                path=f"{path}.method",
                message=f"Invalid method '{step.method}'. Must be one of: {', '.join(sorted(VALID_METHODS))}",
            ))

        if not step.url:
            errors.append(ValidationError(path=f"{path}.url", message="Step 'url' must not be empty."))

        for ref in sorted(_step_references(step) - available):
            errors.append(ValidationError(
                path=path,
                message=f"References '${{{ref}}}' which no variable or earlier step produces.",
            ))

        if not step.assertions:
            warnings.append(ValidationError(
                path=f"{path}.assert",
                message="No assertions defined. Step will pass without validation.",
                severity="warning",
            ))

        _validate_assertions(step, path, errors)

        for j, extraction in enumerate(step.extract):
            e_path = f"{path}.extract[{j}]"
            if extraction.cast is not None and extraction.cast not in VALID_CASTS:
                errors.append(ValidationError(
                    path=f"{e_path}.cast",
                    message=f"Invalid cast '{extraction.cast}'. Must be one of: {', '.join(sorted(VALID_CASTS))}",
                ))
            if extraction.key in writers or extraction.key in scenario.variables:
                previous = writers.get(extraction.key, "variables")
                warnings.append(ValidationError(
                    path=e_path,
                    message=f"Key '{extraction.key}' is also written by {previous}; a different value will fail the run.",
                    severity="warning",
                ))
            writers.setdefault(extraction.key, step.name)
            available.add(extraction.key)


def _step_references(step: Step) -> set[str]:
    found = references(step.url) | references(step.body) | references(step.headers)
    for assertion in step.assertions:
        for check in assertion.checks:
            found |= references(check.expected)
    return found


def _validate_assertions(step: Step, path: str, errors: list[ValidationError]) -> None:
    for j, assertion in enumerate(step.assertions):
        a_path = f"{path}.assert[{j}]"

        if not assertion.name:
            errors.append(ValidationError(
                path=f"{a_path}.name",
                message="Assertion 'name' is required and must not be empty.",
            ))

        if assertion.severity not in VALID_SEVERITIES:
            errors.append(ValidationError(
                path=f"{a_path}.severity",
                message=f"Invalid severity '{assertion.severity}'. Must be one of: {', '.join(sorted(VALID_SEVERITIES))}",
            ))

        if not assertion.checks and assertion.predicate is None:
            errors.append(ValidationError(
                path=a_path,
                message="Assertion has no checks.",
            ))

        for k, check in enumerate(assertion.checks):
            c_path = f"{a_path}.checks[{k}]"
            if check.subject not in VALID_SUBJECTS:
                errors.append(ValidationError(path=c_path, message=f"Invalid subject '{check.subject}'."))
            if check.op not in VALID_OPERATORS:
                errors.append(ValidationError(path=c_path, message=f"Invalid operator '{check.op}'."))
            if check.cast is not None and check.cast not in VALID_CASTS:
                errors.append(ValidationError(path=c_path, message=f"Invalid cast '{check.cast}'."))
            if check.op == "in" and not isinstance(check.expected, list):
                errors.append(ValidationError(path=c_path, message="'in' expects a list."))
            if check.op == "matches" and not references(check.expected):
                try:
                    re.compile(str(check.expected))
                except re.error as e:
                    errors.append(ValidationError(path=c_path, message=f"Invalid regex: {e}"))
