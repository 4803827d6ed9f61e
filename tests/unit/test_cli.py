"""Tests for the command line entry point."""

import json

import pytest
from structlog.testing import capture_logs

from causal_robustness import cli


@pytest.fixture(autouse=True)
def quiet_logging(monkeypatch):
    """Keep log output off stdout so the JSON result can be parsed."""
    monkeypatch.setattr(cli, "setup_logging", lambda: None)
    with capture_logs():
        yield


@pytest.fixture
def scenario_csv(tmp_path, scenario_frame):
    path = tmp_path / "observations.csv"
    scenario_frame.assign(label="x").to_csv(path, index=False)
    return path


class TestParser:
    """Argument parsing."""

    def test_defaults(self, tmp_path):
        args = cli.build_parser().parse_args([str(tmp_path / "data.csv")])

        assert args.variables is None
        assert args.alpha is None
        assert args.seed is None
        assert args.output is None

    def test_options(self, tmp_path):
        args = cli.build_parser().parse_args([
            str(tmp_path / "data.csv"),
            "--variables", "A,B",
            "--alpha", "0.4",
            "--num-samples", "200",
            "--confidence-level", "0.9",
            "--seed", "7",
        ])

        assert args.variables == "A,B"
        assert args.alpha == 0.4
        assert args.num_samples == 200
        assert args.confidence_level == 0.9
        assert args.seed == 7


class TestMain:
    """End-to-end runs on CSV files."""

    def test_prints_json_result(self, scenario_csv, capsys):
        exit_code = cli.main([str(scenario_csv), "--num-samples", "200"])

        assert exit_code == 0
        result = json.loads(capsys.readouterr().out)
        # Non-numeric columns are skipped by default
        assert result["variables"] == ["A", "B", "C"]
        assert {"from": "A", "to": "B"}.items() <= result["filtered_edges"][0].items()

    def test_writes_output_file(self, scenario_csv, tmp_path):
        output = tmp_path / "result.json"

        exit_code = cli.main([
            str(scenario_csv), "--variables", "A, B", "--output", str(output)
        ])

        assert exit_code == 0
        result = json.loads(output.read_text())
        assert result["variables"] == ["A", "B"]
        assert set(result["confidence_intervals"]) == {"A", "B"}

    def test_seed_reproduces_output(self, scenario_csv, tmp_path):
        first, second = tmp_path / "first.json", tmp_path / "second.json"

        cli.main([str(scenario_csv), "--seed", "3", "--output", str(first)])
        cli.main([str(scenario_csv), "--seed", "3", "--output", str(second)])

        first_edges = json.loads(first.read_text())["edges"]
        second_edges = json.loads(second.read_text())["edges"]
        assert [(e["from"], e["to"], e["p_value"]) for e in first_edges] == [
            (e["from"], e["to"], e["p_value"]) for e in second_edges
        ]

    def test_alpha_applies_to_every_variable(self, scenario_csv, tmp_path):
        output = tmp_path / "result.json"

        exit_code = cli.main([
            str(scenario_csv), "--variables", "A,B", "--alpha", "1.0",
            "--output", str(output),
        ])

        assert exit_code == 0
        filtering = json.loads(output.read_text())["filtering"]
        # alpha = 1 leaves the series unsmoothed
        noise_reduction = filtering["A"]["smoothing_metrics"]["noise_reduction"]
        assert noise_reduction == pytest.approx(0.0, abs=0.1)

    def test_missing_file(self, tmp_path, capsys):
        exit_code = cli.main([str(tmp_path / "absent.csv")])

        assert exit_code == 1
        assert capsys.readouterr().err.startswith("Error: cannot read")

    @pytest.mark.parametrize(
        "options",
        [
            ["--confidence-level", "1.5"],
            ["--num-samples", "0"],
            ["--alpha", "0"],
        ],
    )
    def test_invalid_options_exit_with_error(self, scenario_csv, capsys, options):
        exit_code = cli.main([str(scenario_csv), *options])

        assert exit_code == 1
        captured = capsys.readouterr()
        assert captured.err.startswith("Error: ")
        assert captured.out == ""
