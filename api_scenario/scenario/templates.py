"""``${key}`` placeholder syntax shared by the parser, validator and runtime."""

import re
from typing import Any

PLACEHOLDER = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_.-]*)\}")


def references(template: Any) -> set[str]:
    """All placeholder keys referenced anywhere in ``template``."""
    found: set[str] = set()
    if isinstance(template, str):
        found.update(PLACEHOLDER.findall(template))
    elif isinstance(template, list):
        for item in template:
            found |= references(item)
    elif isinstance(template, dict):
        for k, v in template.items():
            found |= references(k) | references(v)
    return found
