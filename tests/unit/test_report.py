"""
Unit tests for report generation and formatting
"""

import json

from forkreduce.report import (
    export_report_json,
    format_report_console,
    format_report_json,
    generate_report,
)


def make_run(label="sum", result=15, contributions=None):
    contributions = contributions or {"pool-worker-2": 2, "pool-worker-1": 3}
    return {
        "label": label,
        "result": result,
        "contributions": contributions,
        "total_elements": sum(contributions.values()),
        "pool_size": 2,
        "duration_seconds": 0.25,
        "timestamp": "2024-01-01T00:00:00+00:00",
    }


class TestGenerateReport:
    """Test generate_report"""

    def test_structure(self):
        """Test command, pool size, details and runs are included"""
        report = generate_report("words", [make_run("list"), make_run("set")], word_count=5)

        assert report["command"] == "words"
        assert report["pool_size"] == 2
        assert report["word_count"] == 5
        assert [run["label"] for run in report["runs"]] == ["list", "set"]
        assert "timestamp" in report

    def test_no_runs(self):
        """Test an empty run list has no pool size"""
        report = generate_report("sum", [])

        assert report["pool_size"] is None
        assert report["runs"] == []


class TestFormatReportConsole:
    """Test console formatting"""

    def test_worker_lines_sorted(self):
        """Test aggregate is followed by sorted worker -> count lines"""
        output = format_report_console(generate_report("sum", [make_run()]))
        lines = output.splitlines()

        result_index = lines.index("Result: 15")
        assert lines[result_index + 1] == "pool-worker-1 -> 3"
        assert lines[result_index + 2] == "pool-worker-2 -> 2"
        assert "Total elements: 5" in lines
        assert "Duration: 0.250s" in lines

    def test_header_and_details(self):
        """Test the header and extra details are rendered"""
        report = generate_report("primes", [make_run(result=None)], mode="any")

        output = format_report_console(report)

        assert "FORKREDUCE PRIMES" in output
        assert "Pool Size: 2" in output
        assert "Mode: any" in output
        assert "Result: None" in output

    def test_each_run_has_a_section(self):
        """Test multiple runs each get a labelled section"""
        output = format_report_console(
            generate_report("words", [make_run("list"), make_run("set")])
        )

        assert "=== list ===" in output
        assert "=== set ===" in output


class TestJsonReport:
    """Test JSON formatting and export"""

    def test_format_report_json(self):
        """Test JSON output parses back to the report"""
        report = generate_report("sum", [make_run()])

        data = json.loads(format_report_json(report))

        assert data["runs"][0]["contributions"] == {"pool-worker-2": 2, "pool-worker-1": 3}
        assert data["runs"][0]["result"] == 15

    def test_export_report_json(self, tmp_path):
        """Test the report is written to disk"""
        output_path = tmp_path / "report.json"

        export_report_json(generate_report("sum", [make_run()]), str(output_path))

        data = json.loads(output_path.read_text())
        assert data["command"] == "sum"
