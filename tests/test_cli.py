from pathlib import Path
import json
import sys

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import main as cli


def test_preset_run_prints_summary(tmp_path, capsys):
    cli.main(["--preset", "lightTraffic", "--history-path", str(tmp_path / "h.json")])

    out = capsys.readouterr().out
    assert "Cycle length: 64s -> 117s" in out
    assert "delayReduction" in out
    assert not (tmp_path / "h.json").exists()


def test_saved_runs_are_listed_and_cleared(tmp_path, capsys):
    history_path = str(tmp_path / "h.json")
    cli.main(["--preset", "rushHour", "--save", "--history-path", history_path])
    capsys.readouterr()

    cli.main(["--history", "--history-path", history_path])
    listed = capsys.readouterr().out.strip().splitlines()
    assert len(listed) == 1

    cli.main(["--clear-history", "--history-path", history_path])
    cli.main(["--history", "--history-path", history_path])
    assert capsys.readouterr().out.strip() == "History cleared"


def test_json_output_for_config_file(tmp_path, capsys):
    config_path = tmp_path / "config.json"
    config_path.write_text(json.dumps({"cycleLength": 200}), encoding="utf-8")

    cli.main(["--config", str(config_path), "--json", "--history-path", str(tmp_path / "h.json")])

    payload = json.loads(capsys.readouterr().out)
    assert payload["config"]["original"]["cycleLength"] == 170
    assert set(payload["improvements"]) == {
        "delayReduction",
        "queueReduction",
        "throughputIncrease",
        "congestionReduction",
        "waitTimeReduction",
        "loadBalanceImprovement",
    }


def test_list_presets(capsys):
    cli.main(["--list-presets"])

    out = capsys.readouterr().out
    assert "rushHour: Rush Hour Peak" in out
    assert "unevenFlow: Uneven Corridor" in out


def test_log_level_is_taken_from_engine_config(monkeypatch, capsys):
    calls = []
    monkeypatch.setattr(cli.logging, "basicConfig", lambda **kwargs: calls.append(kwargs))

    cli.main(["--list-presets", "--log-level", "debug"])

    assert calls == [{"level": cli.logging.DEBUG}]
