import io
import json

import pytest

from main import main
from power_analytics import create_example


@pytest.fixture
def batch_file(tmp_path):
    path = tmp_path / "batch.json"
    path.write_text(json.dumps(create_example("balanced").to_dict()))
    return path


class TestCli:
    """Tests for the command-line interface"""

    def test_example(self, capsys):
        assert main(["--example", "balanced"]) == 0

        results = json.loads(capsys.readouterr().out)
        assert results["frequency_hz"] == pytest.approx(50.0, abs=1.0)
        assert results["phase_sequence"] == "positive"
        assert "power_calculations" not in results

    def test_list_examples(self, capsys):
        assert main(["--list-examples"]) == 0

        out = capsys.readouterr().out
        for name in ("balanced", "unbalanced", "harmonic"):
            assert f"{name}:" in out

    def test_input_file(self, capsys, batch_file):
        assert main(["--input", str(batch_file)]) == 0
        assert "rms_values" in json.loads(capsys.readouterr().out)

    def test_input_from_stdin(self, capsys, monkeypatch, batch_file):
        monkeypatch.setattr("sys.stdin", io.StringIO(batch_file.read_text()))

        assert main(["--input", "-"]) == 0
        assert "rms_values" in json.loads(capsys.readouterr().out)

    def test_invalid_input(self, capsys, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text(json.dumps({"voltage_L1": [1.0, 2.0]}))

        assert main(["--input", str(path)]) == 1

        err = capsys.readouterr().err
        assert "Invalid data" in err
        assert "Missing required field: voltage_L2" in err

    def test_oversized_sampling_rate(self, capsys, tmp_path):
        data = create_example("balanced").to_dict()
        data["sampling_rate_hz"] = 10**400
        path = tmp_path / "huge.json"
        path.write_text(json.dumps(data))

        assert main(["--input", str(path)]) == 1
        assert "sampling_rate_hz must be a positive number" in capsys.readouterr().err

    def test_unreadable_input(self, capsys, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{ not json")

        assert main(["--input", str(path)]) == 1
        assert main(["--input", str(tmp_path / "missing.json")]) == 1

    def test_validate_only(self, capsys, batch_file):
        assert main(["--input", str(batch_file), "--validate-only"]) == 0
        assert capsys.readouterr().out.strip() == "Valid batch: 100 samples at 1000 Hz"

    def test_external_analysis(self, capsys, tmp_path):
        external = tmp_path / "gemini.json"
        external.write_text(
            json.dumps(
                {
                    "frequency_hz": 50.5,
                    "power_calculations": {"power_factor": 0.95},
                    "analysis_notes": {"summary": "Looks balanced"},
                }
            )
        )

        assert main(["--example", "balanced", "--external", str(external)]) == 0

        results = json.loads(capsys.readouterr().out)
        assert results["frequency_hz"] == 50.5
        assert results["power_analysis"]["power_factor"]["total"] == 0.95
        assert results["power_calculations"]["power_factor"] == 0.95
        assert results["analysis_summary"] == "Looks balanced"

    def test_output_file(self, capsys, tmp_path):
        output = tmp_path / "results.json"

        assert main(["--example", "harmonic", "--output", str(output)]) == 0

        assert capsys.readouterr().out.strip() == f"Results written to {output}"
        results = json.loads(output.read_text())
        assert results["quality_metrics"]["thd_voltage"]["L1"] > 5.0

    def test_ai_without_key_falls_back(self, capsys, monkeypatch):
        monkeypatch.delenv("GEMINI_API_KEY", raising=False)

        assert main(["--example", "balanced", "--ai"]) == 0

        results = json.loads(capsys.readouterr().out)
        assert "analysis_notes" not in results

    def test_source_is_required(self):
        with pytest.raises(SystemExit):
            main([])
