"""Scenario data models for HTTP API scenarios.

Defines dataclasses for parsing and representing YAML scenarios.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Optional


class HttpMethod(str, Enum):
    """Supported HTTP methods."""
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"
    HEAD = "HEAD"


class Severity(str, Enum):
    """Assertion severity."""
    CRITICAL = "critical"
    INFO = "info"


class Subject(str, Enum):
    """Part of the response a check reads."""
    STATUS = "status"
    JSON = "json"
    HEADER = "header"


class Operator(str, Enum):
    """Comparison operators for checks."""
    EQ = "eq"
    NE = "ne"
    GT = "gt"
    GE = "ge"
    LT = "lt"
    LE = "le"
    IN = "in"
    CONTAINS = "contains"
    MATCHES = "matches"
    EXISTS = "exists"


VALID_METHODS = {e.value for e in HttpMethod}
VALID_SEVERITIES = {e.value for e in Severity}
VALID_SUBJECTS = {e.value for e in Subject}
VALID_OPERATORS = {e.value for e in Operator}
VALID_CASTS = {"int", "float", "str"}


@dataclass
class ScenarioMeta:
    """Metadata and connection defaults for a scenario."""
    name: str
    description: str = ""
    base_url: Optional[str] = None
    api_key: Optional[str] = None
    api_key_header: Optional[str] = None


@dataclass
class Check:
    """A single comparison against one part of the response."""
    subject: str
    op: str = "eq"
    expected: Any = None
    path: Optional[str] = None  # json field path or header name
    cast: Optional[str] = None

    def __post_init__(self):
        self.subject = self.subject.lower()
        self.op = self.op.lower()

    def describe(self) -> str:
        target = self.subject if self.path is None else f"{self.subject}:{self.path}"
        return f"{target} {self.op} {self.expected!r}"


@dataclass
class Assertion:
    """A named predicate over a response; all checks must hold."""
    name: str
    checks: list[Check] = field(default_factory=list)
    severity: str = "info"
    predicate: Optional[Callable[[Any], bool]] = None

    def __post_init__(self):
        self.severity = self.severity.lower()

    @property
    def is_critical(self) -> bool:
        return self.severity == Severity.CRITICAL.value


@dataclass
class Extraction:
    """Copy a response field into the scenario context."""
    path: str
    key: str
    cast: Optional[str] = None


@dataclass
class Step:
    """One HTTP request with its assertions and extractions."""
    name: str
    method: str
    url: str
    body: Any = None
    headers: dict[str, str] = field(default_factory=dict)
    assertions: list[Assertion] = field(default_factory=list)
    extract: list[Extraction] = field(default_factory=list)
    log: Optional[str] = None

    def __post_init__(self):
        self.method = self.method.upper()


@dataclass
class Scenario:
    """A complete user journey: variables followed by ordered steps."""
    meta: ScenarioMeta
    variables: dict[str, Any] = field(default_factory=dict)
    steps: list[Step] = field(default_factory=list)

    @property
    def name(self) -> str:
        return self.meta.name

    @property
    def total_steps(self) -> int:
        """Total number of steps."""
        return len(self.steps)

    @property
    def total_assertions(self) -> int:
        """Total number of assertions across all steps."""
        return sum(len(step.assertions) for step in self.steps)


@dataclass
class ValidationError:
    """A single validation error."""
    path: str
    message: str
    severity: str = "error"  # "error" or "warning"


@dataclass
class ValidationResult:
    """Result of scenario validation."""
    valid: bool
    errors: list[ValidationError] = field(default_factory=list)
    warnings: list[ValidationError] = field(default_factory=list)

    @property
    def error_count(self) -> int:
        return len(self.errors)

    @property
    def warning_count(self) -> int:
        return len(self.warnings)

    def to_dict(self) -> dict[str, Any]:
        return {
            "valid": self.valid,
            "errors": [{"path": e.path, "message": e.message} for e in self.errors],
            "warnings": [{"path": w.path, "message": w.message} for w in self.warnings],
        }

    def __str__(self) -> str:
        if self.valid:
            msg = "Valid"
            if self.warnings:
                msg += f" ({self.warning_count} warnings)"
            return msg
        return f"Invalid: {self.error_count} errors, {self.warning_count} warnings"
