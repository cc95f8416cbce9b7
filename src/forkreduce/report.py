"""
Report generation and formatting.

This module turns demo results into a report dictionary and renders it
either for the console (aggregate followed by worker -> count lines) or as
JSON.
"""

import json
from datetime import UTC, datetime
from typing import Any


def generate_report(
    command: str,
    runs: list[dict[str, Any]],
    **details: Any,
) -> dict[str, Any]:
    """
    Build a report from one or more reduction runs

    Args:
        command: Name of the demo that produced the runs
        runs: Result dictionaries from measure_reduction
        **details: Extra top-level fields (e.g. word_count, mode)

    Returns:
        Report dictionary
    """
    return {
        "command": command,
        "timestamp": datetime.now(UTC).isoformat(),
        "pool_size": runs[0]["pool_size"] if runs else None,
        **details,
        "runs": runs,
    }


def format_report_console(report: dict[str, Any]) -> str:
    """
    Format report for console output

    Args:
        report: Report dictionary

    Returns:
        Formatted string for console display
    """
    lines = []

    lines.append("=" * 60)
    lines.append(f"FORKREDUCE {report['command'].upper()}")
    lines.append("=" * 60)
    lines.append(f"Pool Size: {report['pool_size']}")
    for key, value in report.items():
        if key not in ("command", "timestamp", "pool_size", "runs"):
            lines.append(f"{key.replace('_', ' ').title()}: {value}")
    lines.append("")

    for run in report["runs"]:
        lines.append(f"=== {run['label']} ===")
        lines.append(f"Result: {run['result']}")
        for worker, count in sorted(run["contributions"].items()):
            lines.append(f"{worker} -> {count}")
        lines.append(f"Total elements: {run['total_elements']}")
        lines.append(f"Duration: {run['duration_seconds']:.3f}s")
        lines.append("")

    return "\n".join(lines)


def format_report_json(report: dict[str, Any]) -> str:
    """Serialize report to an indented JSON string"""
    return json.dumps(report, indent=2, default=str)


def export_report_json(report: dict[str, Any], output_path: str) -> None:
    """
    Export report to JSON file

    Args:
        report: Report dictionary
        output_path: Path to output file
    """
    with open(output_path, 'w') as f:
        f.write(format_report_json(report))
