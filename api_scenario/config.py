"""Runner configuration.

Precedence, lowest first: dataclass defaults, YAML config file,
environment variables, explicit overrides (CLI flags). Scenario ``meta``
connection defaults fill in only what the configuration leaves unset.
"""

import os
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Optional, Union

import yaml

from .scenario.schema import ScenarioMeta
from .transport.http_client import DEFAULT_REQUEST_TIMEOUT

DEFAULT_CONFIG_PATH = Path.home() / ".api-scenario" / "config.yaml"
DEFAULT_API_KEY_HEADER = "x-api-key"

ENV_BASE_URL = "API_SCENARIO_BASE_URL"
ENV_API_KEY = "API_SCENARIO_API_KEY"
ENV_TIMEOUT = "API_SCENARIO_TIMEOUT"


@dataclass
class RunnerConfig:
    """Configuration passed to the executor at construction time."""
    base_url: Optional[str] = None
    api_key: Optional[str] = None
    api_key_header: Optional[str] = None
    default_headers: dict[str, str] = field(default_factory=dict)
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    verify_tls: bool = True
    save_report: bool = False
    report_dir: Optional[Path] = None

    def __post_init__(self):
        if self.report_dir is not None:
            self.report_dir = Path(self.report_dir)
        if self.request_timeout <= 0:
            raise ValueError(f"request_timeout must be positive, got {self.request_timeout}")

    def with_scenario_defaults(self, meta: ScenarioMeta) -> "RunnerConfig":
        """Fill unset connection settings from the scenario's meta block."""
        return replace(
            self,
            base_url=self.base_url or meta.base_url,
            api_key=self.api_key or meta.api_key,
            api_key_header=self.api_key_header or meta.api_key_header or DEFAULT_API_KEY_HEADER,
        )

    def build_url(self, url: str) -> str:
        """Join a step URL with the base URL unless it is already absolute."""
        if url.startswith(("http://", "https://")) or not self.base_url:
            return url
        return f"{self.base_url.rstrip('/')}/{url.lstrip('/')}"

    def request_headers(self) -> dict[str, str]:
        """Headers applied to every request before step headers."""
        headers = dict(self.default_headers)
        if self.api_key:
            headers[self.api_key_header or DEFAULT_API_KEY_HEADER] = self.api_key
        return headers


def load_config(
    path: Optional[Union[str, Path]] = None,
    env: Optional[dict[str, str]] = None,
    **overrides: Any,
) -> RunnerConfig:
    """Build a RunnerConfig from file, environment and overrides.

    Args:
        path: YAML config file. Defaults to ~/.api-scenario/config.yaml
            when that file exists.
        env: Environment mapping (defaults to os.environ).
        **overrides: Field values that win over everything else; None
            values are ignored.

    Raises:
        FileNotFoundError: If an explicit path doesn't exist.
        ValueError: If the file is malformed or has unknown keys.
    """
    env = os.environ if env is None else env
    values: dict[str, Any] = {}

    if path is not None:
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")
        values.update(_read_config_file(path))
    elif DEFAULT_CONFIG_PATH.exists():
        values.update(_read_config_file(DEFAULT_CONFIG_PATH))

    if env.get(ENV_BASE_URL):
        values["base_url"] = env[ENV_BASE_URL].strip()
    if env.get(ENV_API_KEY):
        values["api_key"] = env[ENV_API_KEY].strip()
    if env.get(ENV_TIMEOUT):
        try:
            values["request_timeout"] = float(env[ENV_TIMEOUT])
        except ValueError as e:
            raise ValueError(f"{ENV_TIMEOUT} must be a number, got {env[ENV_TIMEOUT]!r}") from e

    values.update({k: v for k, v in overrides.items() if v is not None})

    known = {f.name for f in fields(RunnerConfig)}
    unknown = set(values) - known
    if unknown:
        raise ValueError(f"Unknown config keys: {', '.join(sorted(unknown))}")

    return RunnerConfig(**values)


def _read_config_file(path: Path) -> dict[str, Any]:
    with open(path, "r", encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Malformed config file {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must be a YAML mapping")
    return data
