"""YAML scenario parser.

Parses YAML scenario files into Scenario dataclass objects.

Check syntax (one subject key, at most one operator key)::

    - status: 201                  # eq
    - status: [200, 201]           # in
    - json: id
      cast: int
      gt: 0
    - header: Content-Type
      contains: json
    - json: token                  # exists: true
"""

from pathlib import Path
from typing import Any, Union

import yaml

from .schema import (
    Assertion,
    Check,
    Extraction,
    Scenario,
    ScenarioMeta,
    Step,
    VALID_OPERATORS,
    VALID_SUBJECTS,
)


def parse_scenario(file_path: Union[str, Path]) -> Scenario:
    """Parse a YAML scenario file into a Scenario object.

    Args:
        file_path: Path to the YAML scenario file.

    Returns:
        Parsed Scenario object.

    Raises:
        FileNotFoundError: If the scenario file doesn't exist.
        ValueError: If the YAML is malformed or missing required fields.
    """
    file_path = Path(file_path)

    if not file_path.exists():
        raise FileNotFoundError(f"Scenario file not found: {file_path}")

    if file_path.suffix not in (".yaml", ".yml"):
        raise ValueError(f"Expected .yaml or .yml file, got: {file_path.suffix}")

    with open(file_path, "r", encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Malformed YAML in {file_path}: {e}") from e

    if data is None:
        raise ValueError(f"Empty scenario file: {file_path}")

    return parse_scenario_data(data, source=str(file_path))


def parse_scenario_data(data: dict, source: str = "<inline>") -> Scenario:
    """Parse a scenario from a dictionary (already loaded YAML).

    Args:
        data: Dictionary with scenario data.
        source: Source identifier for error messages.

    Returns:
        Parsed Scenario object.

    Raises:
        ValueError: If required fields are missing or malformed.
    """
    if not isinstance(data, dict):
        raise ValueError(f"Scenario must be a YAML mapping, got {type(data).__name__}")

    # Parse meta
    if "meta" not in data:
        raise ValueError(f"Missing required field 'meta' in {source}")

    meta_data = data["meta"]
    if not isinstance(meta_data, dict):
        raise ValueError(f"'meta' must be a mapping in {source}")

    _require_fields(meta_data, ["name"], "meta", source)
    meta = ScenarioMeta(**{
        k: v for k, v in meta_data.items()
        if k in ScenarioMeta.__dataclass_fields__
    })

    variables = data.get("variables") or {}
    if not isinstance(variables, dict):
        raise ValueError(f"'variables' must be a mapping in {source}")

    # Parse steps
    steps_data = data.get("steps", [])
    if not isinstance(steps_data, list):
        raise ValueError(f"'steps' must be a list in {source}")

    steps = []
    for i, step_data in enumerate(steps_data):
        context = f"steps[{i}]"
        if not isinstance(step_data, dict):
            raise ValueError(f"Step {i} must be a mapping in {source}")
        _require_fields(step_data, ["name", "method", "url"], context, source)
        steps.append(_parse_step(step_data, context, source))

    return Scenario(meta=meta, variables=dict(variables), steps=steps)


def _parse_step(data: dict, context: str, source: str) -> Step:
    headers = data.get("headers") or {}
    if not isinstance(headers, dict):
        raise ValueError(f"'headers' must be a mapping in {context} ({source})")

    assert_data = data.get("assert", [])
    if not isinstance(assert_data, list):
        raise ValueError(f"'assert' must be a list in {context} ({source})")

    assertions = []
    for i, a_data in enumerate(assert_data):
        a_context = f"{context}.assert[{i}]"
        if not isinstance(a_data, dict):
            raise ValueError(f"Assertion must be a mapping in {a_context} ({source})")
        _require_fields(a_data, ["name"], a_context, source)
        assertions.append(_parse_assertion(a_data, a_context, source))

    return Step(
        name=str(data["name"]),
        method=str(data["method"]),
        url=str(data["url"]),
        body=data.get("body"),
        headers={str(k): v for k, v in headers.items()},
        assertions=assertions,
        extract=_parse_extractions(data.get("extract"), context, source),
        log=data.get("log"),
    )


def _parse_assertion(data: dict, context: str, source: str) -> Assertion:
    if data.get("critical"):
        severity = "critical"
    else:
        severity = str(data.get("severity", "info"))

    if "checks" in data:
        checks_data = data["checks"]
        if not isinstance(checks_data, list):
            raise ValueError(f"'checks' must be a list in {context} ({source})")
    else:
        # Single inline check: {name: ..., status: 200}
        inline = {
            k: v for k, v in data.items()
            if k not in ("name", "critical", "severity")
        }
        checks_data = [inline] if inline else []

    checks = [
        _parse_check(c, f"{context}.checks[{i}]", source)
        for i, c in enumerate(checks_data)
    ]
    return Assertion(name=str(data["name"]), checks=checks, severity=severity)


def _parse_check(data: Any, context: str, source: str) -> Check:
    if not isinstance(data, dict):
        raise ValueError(f"Check must be a mapping in {context} ({source})")

    subjects = [k for k in data if k in VALID_SUBJECTS]
    if len(subjects) != 1:
        raise ValueError(
            f"Check needs exactly one of {sorted(VALID_SUBJECTS)} in {context} ({source})"
        )
    subject = subjects[0]

    operators = [k for k in data if k in VALID_OPERATORS]
    unknown = set(data) - set(subjects) - set(operators) - {"cast"}
    if unknown:
        raise ValueError(
            f"Unknown check keys {sorted(unknown)} in {context} ({source})"
        )
    if len(operators) > 1:
        raise ValueError(f"Check has more than one operator in {context} ({source})")

    cast = data.get("cast")

    if subject == "status":
        status = data["status"]
        if operators:
            return Check(subject="status", op=operators[0], expected=data[operators[0]], cast=cast)
        if isinstance(status, list):
            return Check(subject="status", op="in", expected=status, cast=cast)
        return Check(subject="status", op="eq", expected=status, cast=cast)

    path = str(data[subject])
    if operators:
        op = operators[0]
        return Check(subject=subject, op=op, expected=data[op], path=path, cast=cast)
    return Check(subject=subject, op="exists", expected=True, path=path, cast=cast)


def _parse_extractions(data: Any, context: str, source: str) -> list[Extraction]:
    """Accepts ``{key: path}`` or ``[{key, path, cast}]``."""
    if not data:
        return []

    if isinstance(data, dict):
        return [Extraction(path=str(path), key=str(key)) for key, path in data.items()]

    if not isinstance(data, list):
        raise ValueError(f"'extract' must be a mapping or list in {context} ({source})")

    extractions = []
    for i, item in enumerate(data):
        e_context = f"{context}.extract[{i}]"
        if not isinstance(item, dict):
            raise ValueError(f"Extraction must be a mapping in {e_context} ({source})")
        _require_fields(item, ["key", "path"], e_context, source)
        extractions.append(Extraction(
            path=str(item["path"]),
            key=str(item["key"]),
            cast=item.get("cast"),
        ))
    return extractions


def _require_fields(
    data: dict, fields: list[str], context: str, source: str
) -> None:
    """Check that required fields exist in a dictionary."""
    for field_name in fields:
        if field_name not in data:
            raise ValueError(
                f"Missing required field '{field_name}' in {context} ({source})"
            )
