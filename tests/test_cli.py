import importlib.util
import json
from pathlib import Path

import pytest

SCRIPT = Path(__file__).resolve().parent.parent / "scripts" / "itinerary.py"


@pytest.fixture
def cli(monkeypatch):
    spec = importlib.util.spec_from_file_location("itinerary_cli", SCRIPT)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    monkeypatch.setattr(module, "setup_logging_from_config", lambda config: None)
    return module


@pytest.fixture
def run(cli, dataset_file, tmp_path):
    state_file = tmp_path / "state.json"

    def _run(*args: str) -> int:
        return cli.main(["--source", str(dataset_file), "--state-file", str(state_file), *args])

    _run.state_file = state_file
    return _run


def test_timeline(run, capsys) -> None:
    assert run("timeline", "--day", "monday") == 0
    out = capsys.readouterr().out
    assert "MONDAY (3 events)" in out
    assert out.index("CARR") < out.index("TT") < out.index("LII")
    assert "TUESDAY" not in out


def test_assign_then_member_summary(run, capsys) -> None:
    assert run("assign", "e1", "alice") == 0
    assert json.loads(json.loads(run.state_file.read_text())["ahr-assignments"]) == {"e1": "alice"}
    capsys.readouterr()

    assert run("member", "alice") == 0
    out = capsys.readouterr().out
    assert "Alice Moreau" in out
    assert "Assigned events: 1" in out

    assert run("assign", "e1", "--clear") == 0
    assert run("timeline", "--team", "alice") == 0
    assert "No events match" in capsys.readouterr().out


def test_unknown_ids_exit_1(run, capsys) -> None:
    assert run("assign", "missing", "alice") == 1
    assert run("assign", "e1", "nobody") == 1
    assert run("member", "nobody") == 1
    assert run("broker", "nobody") == 1
    assert "Unknown" in capsys.readouterr().err


def test_unavailable_dataset_exit_1(cli, tmp_path, capsys) -> None:
    code = cli.main(["--source", str(tmp_path / "missing.json"), "--state-file", str(tmp_path / "s.json"), "timeline"])
    assert code == 1
    assert "Itinerary unavailable" in capsys.readouterr().err


def test_export_to_file(run, tmp_path) -> None:
    out = tmp_path / "monday.ics"
    assert run("export", "--day", "monday", "--output", str(out)) == 0
    text = out.read_bytes().decode("utf-8")
    assert text.count("BEGIN:VEVENT") == 2


def test_grid_and_companies(run, capsys) -> None:
    assert run("grid", "--day", "monday") == 0
    assert run("note", "TT", "backlog") == 0
    assert run("companies") == 0
    out = capsys.readouterr().out
    assert "9:00 AM | CARR (Baird)" in out
    assert "*TT" in out
    assert "1 shared" in out


def test_unwritable_state_file_exit_1(cli, dataset_file, tmp_path, capsys) -> None:
    # A directory in place of the state file makes every write fail
    state_dir = tmp_path / "state-as-dir"
    state_dir.mkdir()
    code = cli.main(["--source", str(dataset_file), "--state-file", str(state_dir), "assign", "e1", "alice"])
    assert code == 1
    assert "Could not save ahr-assignments" in capsys.readouterr().err
