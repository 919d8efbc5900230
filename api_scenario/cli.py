"""CLI entry point for the scenario runner.

    api-scenario run <scenario> [options]
    api-scenario list
    api-scenario validate <scenario>

``<scenario>`` is a bundled scenario name or a path to a YAML file.
Machine-readable JSON goes to stdout; logs go to stderr.
"""

import json
import logging
import sys
import time
from pathlib import Path
from typing import Optional

import click

from .config import load_config
from .reporting.json_reporter import JsonReporter
from .runner.executor import ScenarioExecutor
from .scenario.registry import bundled_names, load_bundled, resolve_scenario
from .scenario.validator import validate_scenario

logger = logging.getLogger(__name__)

EXIT_FAILED = 1
EXIT_INVALID = 2


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _echo_json(payload: dict, pretty: bool = False) -> None:
    click.echo(json.dumps(payload, ensure_ascii=False, indent=2 if pretty else None, default=str))


def output_error(message: str, command: str = "run", pretty: bool = False, **extra) -> None:
    """Output error in flow JSON format."""
    _echo_json({
        "success": False,
        "command": command,
        "data": extra or None,
        "message": message,
    }, pretty)


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Debug logging on stderr.")
def main(verbose: bool) -> None:
    """Run scripted HTTP API scenarios."""
    _configure_logging(verbose)


@main.command()
@click.argument("scenario_ref")
@click.option("--base-url", default=None, help="Target host; overrides scenario and config.")
@click.option("--api-key", default=None, help="API key sent on every request.")
@click.option("--config", "config_path", type=click.Path(dir_okay=False, path_type=Path), default=None,
              help="YAML config file.")
@click.option("--timeout", type=float, default=None, help="Per-request timeout in seconds.")
@click.option("--save-report", is_flag=True, help="Save a JSON report to file.")
@click.option("--report-dir", type=click.Path(file_okay=False, path_type=Path), default=None,
              help="Directory for saved reports.")
@click.option("--pretty", is_flag=True, help="Pretty print output.")
def run(
    scenario_ref: str,
    base_url: Optional[str],
    api_key: Optional[str],
    config_path: Optional[Path],
    timeout: Optional[float],
    save_report: bool,
    report_dir: Optional[Path],
    pretty: bool,
) -> None:
    """Run a scenario once and print the outcome as JSON."""
    try:
        scenario = resolve_scenario(scenario_ref)
        validation = validate_scenario(scenario)
    except (FileNotFoundError, ValueError) as e:
        output_error(f"Failed to parse scenario: {e}", pretty=pretty)
        sys.exit(EXIT_INVALID)

    if not validation.valid:
        errors_str = "; ".join(f"{e.path}: {e.message}" for e in validation.errors)
        output_error(f"Invalid scenario: {errors_str}", pretty=pretty)
        sys.exit(EXIT_INVALID)

    for warning in validation.warnings:
        logger.warning("%s: %s", warning.path, warning.message)

    try:
        config = load_config(
            config_path,
            base_url=base_url,
            api_key=api_key,
            request_timeout=timeout,
            save_report=save_report or None,
            report_dir=report_dir,
        )
    except (FileNotFoundError, ValueError) as e:
        output_error(f"Invalid configuration: {e}", pretty=pretty)
        sys.exit(EXIT_INVALID)

    start_time = time.time()
    try:
        outcome = ScenarioExecutor(config).run(scenario)
    except KeyboardInterrupt:
        duration_ms = int((time.time() - start_time) * 1000)
        output_error("Run interrupted by user", pretty=pretty, duration_ms=duration_ms)
        sys.exit(130)

    reporter = JsonReporter()
    report = reporter.generate(outcome)

    if config.save_report:
        report_path = (config.report_dir or Path(".")) / f"scenario_report_{scenario.name}.json"
        try:
            outcome.report_path = str(reporter.save(report, report_path))
            logger.info("Report saved: %s", outcome.report_path)
        except OSError as e:
            logger.warning("Failed to save report: %s", e)

    flow_output = reporter.generate_flow_output(report, outcome.report_path)
    _echo_json(flow_output, pretty)

    if not flow_output["success"]:
        sys.exit(EXIT_FAILED)


@main.command(name="list")
def list_scenarios() -> None:
    """List bundled scenarios."""
    scenarios = []
    for name in bundled_names():
        scenario = load_bundled(name)
        scenarios.append({
            "name": name,
            "description": scenario.meta.description,
            "steps": scenario.total_steps,
        })
    _echo_json({
        "success": True,
        "command": "list",
        "data": scenarios,
        "message": f"{len(scenarios)} bundled scenarios",
    })


@main.command()
@click.argument("scenario_ref")
def validate(scenario_ref: str) -> None:
    """Validate a scenario without running it."""
    try:
        scenario = resolve_scenario(scenario_ref)
    except (FileNotFoundError, ValueError) as e:
        output_error(f"Failed to parse scenario: {e}", command="validate")
        sys.exit(EXIT_INVALID)

    result = validate_scenario(scenario)
    _echo_json({
        "success": result.valid,
        "command": "validate",
        "data": result.to_dict(),
        "message": str(result),
    })
    if not result.valid:
        sys.exit(EXIT_INVALID)


if __name__ == "__main__":
    main()
