from __future__ import annotations

import json

from tools import score_answers

from tests.conftest import SAMPLE_VALUES


def _write(tmp_path, payload) -> str:
    path = tmp_path / "answers.json"
    path.write_text(json.dumps(payload), encoding="utf-8")
    return str(path)


def test_cli_scores_and_shares(tmp_path, capsys):
    rows = [{"itemId": f"q{i}", "value": v} for i, v in enumerate(SAMPLE_VALUES, start=1)]
    path = _write(tmp_path, {"responseId": "cli-1", "answers": rows, "metadata": {"timeSpent": 60}})

    code = score_answers.main([path, "--share", "--no-percentiles"])
    out = json.loads(capsys.readouterr().out)

    assert code == 0
    assert out["scores"]["overall_score"] == 86.11
    assert out["reliability"]["overall_rating"] == "excellent"
    assert len(out["reliability"]["checks"]) == 5
    assert all("percentile" not in d for d in out["share"]["dimensions"])


def test_cli_exit_code_for_unusable_answers(tmp_path, capsys):
    rows = [{"itemId": f"q{i}", "value": 3} for i in range(1, 10)]
    code = score_answers.main([_write(tmp_path, rows), "--time-spent", "5"])
    out = json.loads(capsys.readouterr().out)
    assert code == 2
    assert out["reliability"]["overall_rating"] == "poor"


def test_cli_rejects_out_of_range_values(tmp_path, capsys):
    code = score_answers.main([_write(tmp_path, [{"itemId": "q1", "value": 9}])])
    assert code == 1
    assert "out of range" in capsys.readouterr().err
