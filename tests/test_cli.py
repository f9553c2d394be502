"""Integration tests for the command-line interface."""

import json
import os

import pytest

from gesturematch.cli import main


@pytest.fixture
def pentagram_file(temp_dir, pentagram_points):
    """Write a drawn pentagram figure to disk."""
    pts = pentagram_points
    data = {
        "segments": [
            {"a": list(pts[i]), "b": list(pts[(i + 1) % 5])} for i in range(5)
        ],
    }
    path = os.path.join(temp_dir, "pentagram.json")
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f)
    return path


class TestCli:
    """Tests for the gesturematch CLI."""

    def test_no_command_prints_help(self, capsys):
        assert main([]) == 0
        assert "usage" in capsys.readouterr().out

    def test_match(self, pentagram_file, temp_dir, capsys):
        out_path = os.path.join(temp_dir, "result.json")

        code = main(["match", "--figure", pentagram_file, "--out", out_path])

        assert code == 0
        out = capsys.readouterr().out
        assert "Best match: pentagram (accepted)" in out

        with open(out_path, encoding="utf-8") as f:
            result = json.load(f)
        assert result["template"] == "pentagram"
        assert result["accepted"] is True
        assert len(result["overlay"]) == 5

    def test_match_nothing(self, temp_dir, capsys):
        path = os.path.join(temp_dir, "line.json")
        with open(path, "w", encoding="utf-8") as f:
            json.dump({"segments": [{"a": [0, 0, 0], "b": [1, 0, 0]}]}, f)

        assert main(["match", "-f", path]) == 0
        assert "No template could be matched" in capsys.readouterr().out

    def test_match_missing_file(self, temp_dir, capsys):
        code = main(["match", "-f", os.path.join(temp_dir, "missing.json")])

        assert code == 1
        assert "Error" in capsys.readouterr().err

    def test_match_invalid_arc(self, temp_dir, capsys):
        """Test an arc with repeated points is reported, not raised."""
        path = os.path.join(temp_dir, "bad.json")
        with open(path, "w", encoding="utf-8") as f:
            json.dump({"arcs": [{"end1": [0, 0, 0], "midpoint": [0, 0, 0], "end2": [1, 0, 0]}]}, f)

        assert main(["match", "-f", path]) == 1
        assert "arc points must be distinct" in capsys.readouterr().err

    def test_match_circle_missing_guide_point(self, temp_dir, capsys):
        """Test a circle lacking p1 is reported, not raised."""
        path = os.path.join(temp_dir, "circle.json")
        with open(path, "w", encoding="utf-8") as f:
            json.dump({"circles": [{"p2": [0, 1, 0], "p3": [-1, 0, 0]}]}, f)

        assert main(["match", "-f", path]) == 1
        assert "missing p1" in capsys.readouterr().err

    def test_match_segments_not_a_list(self, temp_dir, capsys):
        path = os.path.join(temp_dir, "segments.json")
        with open(path, "w", encoding="utf-8") as f:
            json.dump({"segments": 5}, f)

        assert main(["match", "-f", path]) == 1
        assert "must be a list" in capsys.readouterr().err

    def test_exact_match_output_is_strict_json(self, temp_dir, library, capsys):
        """Test an infinite score is written as a string a strict reader accepts."""
        template = library.get("pentagram")
        figure = os.path.join(temp_dir, "exact.json")
        with open(figure, "w", encoding="utf-8") as f:
            json.dump({"segments": [s.model_dump() for s in template.segments]}, f)
        out_path = os.path.join(temp_dir, "result.json")

        assert main(["match", "-f", figure, "--out", out_path]) == 0

        def reject(token):
            raise ValueError(token)

        with open(out_path, encoding="utf-8") as f:
            result = json.load(f, parse_constant=reject)
        assert result["template"] == "pentagram"
        assert result["raw_score"] == "inf"

    def test_match_with_trace(self, pentagram_file, capsys):
        try:
            code = main(["match", "-f", pentagram_file, "--trace", "--trace-level", "DEBUG"])
        finally:
            from gesturematch.tracer import configure_tracer
            configure_tracer(enabled=False)

        assert code == 0
        err = capsys.readouterr().err
        assert "cli:cli_match" in err
        assert "Scored pentagram" in err

    def test_templates(self, capsys):
        assert main(["templates"]) == 0

        lines = capsys.readouterr().out.strip().split("\n")
        assert len(lines) == 8
        assert lines[0].startswith("brimstone_up")
        assert "to illuminate" in lines[-1]

    def test_init_config(self, temp_dir, capsys):
        path = os.path.join(temp_dir, "config.yaml")

        assert main(["init-config", "--out", path]) == 0
        assert os.path.exists(path)

        from gesturematch.config import MatcherConfig, load_config
        assert load_config(path) == MatcherConfig()
