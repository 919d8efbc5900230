"""Bundled scenarios shipped with the package.

Each distinct user journey is a named YAML file under ``bundled/``.
"""

from pathlib import Path
from typing import Union

from .parser import parse_scenario
from .schema import Scenario

BUNDLED_DIR = Path(__file__).resolve().parent / "bundled"


def bundled_names() -> list[str]:
    """Names of all bundled scenarios, sorted."""
    return sorted(p.stem for p in BUNDLED_DIR.glob("*.yaml"))


def load_bundled(name: str) -> Scenario:
    """Load a bundled scenario by name.

    Raises:
        KeyError: If no bundled scenario has that name.
    """
    path = BUNDLED_DIR / f"{name}.yaml"
    if not path.exists():
        raise KeyError(
            f"Unknown scenario '{name}'. Bundled scenarios: {', '.join(bundled_names())}"
        )
    return parse_scenario(path)


def resolve_scenario(ref: Union[str, Path]) -> Scenario:
    """Load a scenario from a bundled name or a YAML file path."""
    if isinstance(ref, str) and ref in bundled_names():
        return load_bundled(ref)
    return parse_scenario(ref)
