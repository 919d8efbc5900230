"""Value generators for scenario variables.

A variable declared as a single-key mapping whose key names a generator
is replaced by a freshly generated value at the start of every run::

    variables:
      first_name: {random_string: 10}
      sex: {choice: [M, F]}
      age: {random_int: [18, 99]}
      date_of_birth: {today: true}
"""

import random
import string
from datetime import date
from typing import Any, Callable, Optional

DEFAULT_CHARSET = string.ascii_lowercase


def random_string(length: int, charset: str = DEFAULT_CHARSET, rng: Optional[random.Random] = None) -> str:
    """Random string of ``length`` characters drawn from ``charset``."""
    rng = rng or random
    return "".join(rng.choice(charset) for _ in range(int(length)))


def random_int(bounds: list, rng: Optional[random.Random] = None) -> int:
    """Random integer in the inclusive range ``[lo, hi]``."""
    rng = rng or random
    lo, hi = bounds
    return rng.randint(int(lo), int(hi))


def choice(options: list, rng: Optional[random.Random] = None) -> Any:
    rng = rng or random
    return rng.choice(list(options))


def today(_arg: Any = None, rng: Optional[random.Random] = None) -> str:
    return date.today().isoformat()


GENERATORS: dict[str, Callable[..., Any]] = {
    "random_string": random_string,
    "random_int": random_int,
    "choice": choice,
    "today": today,
}


def is_generator_spec(value: Any) -> bool:
    """Whether ``value`` is a ``{generator: argument}`` mapping."""
    return (
        isinstance(value, dict)
        and len(value) == 1
        and next(iter(value)) in GENERATORS
    )


def generate(spec: dict, rng: Optional[random.Random] = None) -> Any:
    """Produce a value from a ``{generator: argument}`` mapping.

    Raises:
        ValueError: If the generator is unknown or its argument is invalid.
    """
    if not is_generator_spec(spec):
        raise ValueError(f"Not a generator spec: {spec!r}")

    name, arg = next(iter(spec.items()))
    try:
        return GENERATORS[name](arg, rng=rng)
    except (TypeError, ValueError, IndexError) as e:
        raise ValueError(f"Invalid argument for generator '{name}': {arg!r} ({e})") from e
