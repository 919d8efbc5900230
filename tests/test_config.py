from __future__ import annotations

from pathlib import Path

import pytest

from api_scenario.config import RunnerConfig, load_config
from api_scenario.scenario.schema import ScenarioMeta


def test_defaults_without_file(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setattr("api_scenario.config.DEFAULT_CONFIG_PATH", tmp_path / "absent.yaml")

    config = load_config(env={})

    assert config == RunnerConfig()
    assert config.request_timeout == 30.0


def test_precedence_file_env_overrides(tmp_path: Path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text(
        "base_url: https://file.test\n"
        "api_key: file-key\n"
        "request_timeout: 10\n"
        "default_headers:\n  User-Agent: api-scenario\n",
        encoding="utf-8",
    )

    config = load_config(
        path,
        env={"API_SCENARIO_API_KEY": "env-key", "API_SCENARIO_TIMEOUT": "12.5"},
        base_url="https://cli.test",
        api_key=None,
    )

    assert config.base_url == "https://cli.test"
    assert config.api_key == "env-key"
    assert config.request_timeout == 12.5
    assert config.default_headers == {"User-Agent": "api-scenario"}


def test_unknown_keys_rejected(tmp_path: Path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text("base_url: https://x.test\nretries: 3\n", encoding="utf-8")

    with pytest.raises(ValueError, match="retries"):
        load_config(path, env={})


def test_missing_explicit_file(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "nope.yaml", env={})


def test_bad_timeout(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setattr("api_scenario.config.DEFAULT_CONFIG_PATH", tmp_path / "absent.yaml")

    with pytest.raises(ValueError, match="API_SCENARIO_TIMEOUT"):
        load_config(env={"API_SCENARIO_TIMEOUT": "soon"})
    with pytest.raises(ValueError):
        RunnerConfig(request_timeout=0)


def test_scenario_defaults_only_fill_gaps() -> None:
    meta = ScenarioMeta(name="m", base_url="https://meta.test", api_key="meta-key", api_key_header="X-Key")

    filled = RunnerConfig().with_scenario_defaults(meta)
    kept = RunnerConfig(base_url="https://cfg.test", api_key="cfg-key").with_scenario_defaults(meta)

    assert (filled.base_url, filled.api_key, filled.api_key_header) == ("https://meta.test", "meta-key", "X-Key")
    assert (kept.base_url, kept.api_key) == ("https://cfg.test", "cfg-key")
    assert kept.request_headers() == {"X-Key": "cfg-key"}


def test_build_url() -> None:
    config = RunnerConfig(base_url="https://api.test/v1/")

    assert config.build_url("/users") == "https://api.test/v1/users"
    assert config.build_url("users/1") == "https://api.test/v1/users/1"
    assert config.build_url("http://other.test/") == "http://other.test/"
    assert RunnerConfig().build_url("/users") == "/users"
