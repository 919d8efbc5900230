"""Per-run scenario context and ``${key}`` template resolution."""

import logging
import random
from typing import Any, Iterator, Mapping, Optional

from .errors import ContextOverwriteError, UnresolvedReferenceError
from .scenario.generators import generate, is_generator_spec
from .scenario.templates import PLACEHOLDER

logger = logging.getLogger(__name__)


class _Undefined:
    """Value stored when an extraction finds nothing."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNDEFINED"

    def __str__(self) -> str:
        return "undefined"

    def __bool__(self) -> bool:
        return False


UNDEFINED = _Undefined()


class ScenarioContext(Mapping[str, Any]):
    """Append-only key/value store threading values between steps.

    A key may be written again only with an equal value.
    """

    def __init__(self, initial: Optional[Mapping[str, Any]] = None):
        self._values: dict[str, Any] = {}
        for key, value in (initial or {}).items():
            self.set(key, value)

    def set(self, key: str, value: Any) -> None:
        if key in self._values:
            old = self._values[key]
            if old is value or old == value:
                return
            raise ContextOverwriteError(key, old, value)
        self._values[key] = value
        logger.debug("context[%s] = %r", key, value)

    def __getitem__(self, key: str) -> Any:
        return self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def snapshot(self) -> dict[str, Any]:
        return dict(self._values)

    def resolve(self, template: Any) -> Any:
        """Substitute placeholders in a string, list or mapping.

        A string that is exactly one placeholder resolves to the raw value,
        so non-string values keep their type. Embedded placeholders are
        interpolated as text.

        Raises:
            UnresolvedReferenceError: If a referenced key is absent.
        """
        if isinstance(template, str):
            return self._resolve_string(template)
        if isinstance(template, list):
            return [self.resolve(item) for item in template]
        if isinstance(template, dict):
            return {
                self._resolve_string(k) if isinstance(k, str) else k: self.resolve(v)
                for k, v in template.items()
            }
        return template

    def _lookup(self, key: str) -> Any:
        if key not in self._values:
            raise UnresolvedReferenceError(key)
        return self._values[key]

    def _resolve_string(self, text: str) -> Any:
        whole = PLACEHOLDER.fullmatch(text)
        if whole:
            return self._lookup(whole.group(1))
        return PLACEHOLDER.sub(lambda m: str(self._lookup(m.group(1))), text)


def seed_context(variables: Mapping[str, Any], rng: Optional[random.Random] = None) -> ScenarioContext:
    """Create a fresh context from scenario variables, in declaration order."""
    context = ScenarioContext()
    for key, value in variables.items():
        if is_generator_spec(value):
            context.set(key, generate(value, rng=rng))
        else:
            context.set(key, context.resolve(value))
    return context
