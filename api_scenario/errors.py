"""Error taxonomy for scenario execution."""

from typing import Any, Optional


class ScenarioError(Exception):
    """Base class for all scenario run errors."""


class NetworkError(ScenarioError):
    """The request could not be completed (connection, DNS, timeout)."""

    def __init__(self, message: str, step: Optional[str] = None):
        super().__init__(message)
        self.step = step


class UnresolvedReferenceError(ScenarioError):
    """A template references a context key that was never produced."""

    def __init__(self, key: str):
        super().__init__(f"Unresolved reference '${{{key}}}'")
        self.key = key


class ContextOverwriteError(ScenarioError):
    """A step tried to replace a value already present in the context."""

    def __init__(self, key: str, old: Any, new: Any):
        super().__init__(
            f"Context key '{key}' already holds {old!r}, refusing to overwrite with {new!r}"
        )
        self.key = key
        self.old = old
        self.new = new


class AssertionFailure(ScenarioError):
    """An informational assertion did not hold."""

    critical = False

    def __init__(self, step: str, assertion: str, details: str = ""):
        message = f"{step}: assertion '{assertion}' failed"
        if details:
            message += f" ({details})"
        super().__init__(message)
        self.step = step
        self.assertion = assertion
        self.details = details


class CriticalAssertionFailure(AssertionFailure):
    """A critical assertion did not hold; the scenario aborts."""

    critical = True


class RequestEncodingError(ScenarioError):
    """A resolved request body cannot be encoded as JSON."""
