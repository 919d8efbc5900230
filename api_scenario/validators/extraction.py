"""Field-path lookup and value extraction from parsed responses."""

from typing import Any, Optional

from ..context import UNDEFINED, ScenarioContext
from ..errors import ContextOverwriteError
from ..scenario.schema import Extraction
from ..transport.http_client import Response


def lookup(data: Any, path: str) -> Any:
    """Follow a dot-separated path through dicts and lists.

    Integer segments index into lists (``data.0.id``). Returns UNDEFINED
    when any segment is missing.
    """
    current = data
    for segment in path.split("."):
        if isinstance(current, dict):
            if segment not in current:
                return UNDEFINED
            current = current[segment]
        elif isinstance(current, list):
            try:
                current = current[int(segment)]
            except (ValueError, IndexError):
                return UNDEFINED
        else:
            return UNDEFINED
    return current


def apply_cast(value: Any, cast: Optional[str]) -> Any:
    """Convert ``value`` to the named type, UNDEFINED if it can't be."""
    if cast is None or value is UNDEFINED:
        return value
    try:
        if cast == "int":
            if isinstance(value, bool):
                return UNDEFINED
            if isinstance(value, str):
                return int(value.strip())
            return int(value)
        if cast == "float":
            return float(value)
        if cast == "str":
            return "" if value is None else str(value)
    except (TypeError, ValueError, OverflowError):
        return UNDEFINED
    raise ValueError(f"Unknown cast '{cast}'")


def extract(response: Response, extraction: Extraction) -> Any:
    return apply_cast(lookup(response.body, extraction.path), extraction.cast)


def apply_extractions(
    response: Response,
    extractions: list[Extraction],
    context: ScenarioContext,
) -> dict[str, Any]:
    """Write every extraction into ``context``; returns what was written.

    Nothing is written unless every extraction can be.

    Raises:
        ContextOverwriteError: If a key already holds a different value.
    """
    extracted: dict[str, Any] = {}
    for extraction in extractions:
        value = extract(response, extraction)
        if extraction.key in extracted:
            previous = extracted[extraction.key]
        elif extraction.key in context:
            previous = context[extraction.key]
        else:
            extracted[extraction.key] = value
            continue
        if not (previous is value or previous == value):
            raise ContextOverwriteError(extraction.key, previous, value)

    for key, value in extracted.items():
        context.set(key, value)
    return extracted
