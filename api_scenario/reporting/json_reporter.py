"""JSON report generator for scenario runs.

Generates structured JSON reports from scenario outcomes.
"""

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from ..context import UNDEFINED


class JsonReporter:
    """Generates JSON reports from scenario outcomes."""

    def generate(self, outcome) -> dict[str, Any]:
        """Generate a JSON report from a ScenarioOutcome.

        Args:
            outcome: Result of ScenarioExecutor.run().

        Returns:
            Report dictionary ready for JSON serialization.
        """
        results = outcome.assertion_results
        passed = sum(1 for r in results if r.passed)

        if outcome.aborted:
            status = "aborted"
        elif outcome.passed:
            status = "passed"
        else:
            status = "failed"

        return {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "scenario": outcome.scenario_name,
            "status": status,
            "summary": {
                "steps": len(outcome.steps),
                "total": len(results),
                "passed": passed,
                "failed": len(results) - passed,
                "duration_ms": outcome.duration_ms,
            },
            "steps": [self._step_entry(step) for step in outcome.steps],
            "aborted": outcome.aborted,
            "abort_step": outcome.abort_step,
            "abort_reason": outcome.abort_reason,
            "errors": [str(f) for f in outcome.failures],
        }

    @staticmethod
    def _step_entry(step) -> dict[str, Any]:
        entry: dict[str, Any] = {
            "name": step.name,
            "status": "pass" if step.passed else "fail",
            "duration_ms": step.duration_ms,
            "assertions": [r.to_dict() for r in step.assertions],
            "extracted": {k: _plain(v) for k, v in step.extracted.items()},
        }
        if step.request is not None:
            entry["request"] = {"method": step.request.method, "url": step.request.url}
        if step.response is not None:
            entry["response"] = {
                "status": step.response.status,
                "elapsed_ms": step.response.elapsed_ms,
            }
        if step.error is not None:
            entry["error"] = f"{type(step.error).__name__}: {step.error}"
        return entry

    def save(self, report: dict[str, Any], path: Path) -> Path:
        """Save report to a JSON file.

        Args:
            report: Report dictionary.
            path: Output file path.

        Returns:
            Path to the saved file.
        """
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "w", encoding="utf-8") as f:
            json.dump(report, f, indent=2, ensure_ascii=False)

        return path

    def generate_flow_output(
        self,
        report: dict[str, Any],
        report_path: Optional[str] = None,
    ) -> dict[str, Any]:
        """Generate flow-style CLI JSON output.

        {
            "success": bool,
            "command": "run",
            "data": { ... },
            "message": str
        }

        Args:
            report: Report dictionary from generate().
            report_path: Path where report was saved.

        Returns:
            Flow-compatible JSON output.
        """
        summary = report["summary"]
        success = report["status"] == "passed"

        data: dict[str, Any] = {
            "scenario": report["scenario"],
            "steps": summary["steps"],
            "total_assertions": summary["total"],
            "passed": summary["passed"],
            "failed": summary["failed"],
            "duration_ms": summary["duration_ms"],
            "aborted": report["aborted"],
        }

        if report_path:
            data["report_path"] = report_path

        if report["aborted"]:
            data["abort_step"] = report["abort_step"]
            message = f"Aborted at step '{report['abort_step']}': {report['abort_reason']}"
        elif not success:
            message = f"{summary['failed']} of {summary['total']} assertions failed"
        else:
            message = "All assertions passed"

        return {
            "success": success,
            "command": "run",
            "data": data,
            "message": message,
        }


def _plain(value: Any) -> Any:
    return None if value is UNDEFINED else value
