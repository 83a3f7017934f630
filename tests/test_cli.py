"""End-to-end tests for the ulc command line."""

from __future__ import annotations

import json
from datetime import date
from pathlib import Path

import pytest

from ulc.__main__ import main


@pytest.fixture
def ledger_dir(tmp_path: Path, monkeypatch) -> Path:
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("ULC_LOG_LEVEL", raising=False)
    d = tmp_path / "ledger"
    monkeypatch.setenv("ULC_LEDGER_DIR", str(d))
    return d


def _write(ledger_dir: Path, data: dict) -> Path:
    ledger_dir.mkdir(parents=True, exist_ok=True)
    path = ledger_dir / f"{data['lid']}.json"
    path.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
    return path


RECORD_A = {"lid": "A", "project": "P", "created_at": "2025-01-01", "summary": "S", "goals": ["g1"]}


class TestHelp:
    @pytest.mark.parametrize("argv", [[], ["help"], ["--help"], ["-h"]])
    def test_usage_is_success(self, argv, capsys):
        assert main(argv) == 0
        assert "Usage:" in capsys.readouterr().out

    def test_unknown_command_fails(self, capsys):
        assert main(["frobnicate"]) == 1
        err = capsys.readouterr().err
        assert "ulc: unknown command: frobnicate" in err
        assert "Usage:" in err


class TestInit:
    def test_creates_template(self, ledger_dir: Path, capsys):
        assert main(["init", "--lid", "T1", "--project", "P"]) == 0
        path = ledger_dir / "T1.json"
        assert capsys.readouterr().out == f"Created: {path}\n"
        rec = json.loads(path.read_text(encoding="utf-8"))
        assert rec["lid"] == "T1"
        assert rec["created_at"] == date.today().isoformat()
        assert rec["goals"] == ["TODO", "TODO"]

    def test_initial_values(self, ledger_dir: Path):
        argv = ["init", "--lid", "T1", "--project", "P", "--summary", "Real",
                "--goal", "g1", "--goal", "g2", "--constraint", "c1"]
        assert main(argv) == 0
        rec = json.loads((ledger_dir / "T1.json").read_text(encoding="utf-8"))
        assert rec["summary"] == "Real"
        assert rec["goals"] == ["g1", "g2"]
        assert rec["constraints"] == ["c1"]

    def test_conflict_without_force(self, ledger_dir: Path, capsys):
        path = _write(ledger_dir, RECORD_A)
        before = path.read_text(encoding="utf-8")
        assert main(["init", "--lid", "A", "--project", "Other"]) == 1
        err = capsys.readouterr().err
        assert err.startswith("ulc: ledger entry already exists")
        assert "--force" in err
        assert path.read_text(encoding="utf-8") == before

    def test_force_overwrites(self, ledger_dir: Path):
        _write(ledger_dir, RECORD_A)
        assert main(["init", "--lid", "A", "--project", "Other", "--force"]) == 0
        rec = json.loads((ledger_dir / "A.json").read_text(encoding="utf-8"))
        assert rec["project"] == "Other"

    @pytest.mark.parametrize(
        "argv, flag",
        [(["init", "--project", "P"], "--lid"), (["init", "--lid", "T1"], "--project")],
    )
    def test_missing_required_flag(self, ledger_dir: Path, argv, flag, capsys):
        assert main(argv) == 1
        assert flag in capsys.readouterr().err

    def test_ledger_dir_flag_beats_config(self, ledger_dir: Path, tmp_path: Path):
        other = tmp_path / "other"
        assert main(["init", "--lid", "T1", "--project", "P", "--ledger-dir", str(other)]) == 0
        assert (other / "T1.json").exists()
        assert not (ledger_dir / "T1.json").exists()


class TestWake:
    def test_scenario_init_then_wake_text(self, ledger_dir: Path, capsys):
        assert main(["init", "--lid", "T1", "--project", "P"]) == 0
        capsys.readouterr()

        assert main(["wake", "--lid", "T1"]) == 0
        captured = capsys.readouterr()
        assert captured.out.startswith("[CONTEXT_BLOCK_START]\n")
        assert "Ledger ID: T1\n" in captured.out
        assert "Summary:\n- TODO: one-sentence purpose for this collaboration context\n" in captured.out
        assert captured.out.endswith("[CONTEXT_BLOCK_END]\n")
        assert "ulc: warning: `summary` still looks like a TODO" in captured.err

    def test_scenario_json(self, ledger_dir: Path, capsys):
        _write(ledger_dir, RECORD_A)
        assert main(["wake", "--lid", "A", "--json"]) == 0
        captured = capsys.readouterr()
        packet = json.loads(captured.out)
        assert packet["meta"]["lid"] == "A"
        assert packet["goals"] == ["g1"]
        assert packet["style"]["ask_when_uncertain"] is True
        assert captured.err == ""

    def test_file_output(self, ledger_dir: Path, tmp_path: Path, capsys):
        _write(ledger_dir, RECORD_A)
        target = tmp_path / "out" / "nested" / "pccb.txt"
        assert main(["wake", "--lid", "A", "--file", str(target)]) == 0
        out = capsys.readouterr().out
        assert target.read_text(encoding="utf-8") == out

    def test_missing_entry(self, ledger_dir: Path, capsys):
        assert main(["wake", "--lid", "NOPE"]) == 1
        captured = capsys.readouterr()
        assert captured.out == ""
        assert "ledger entry not found" in captured.err
        assert str(ledger_dir / "NOPE.json") in captured.err

    def test_missing_required_fields_enumerated(self, ledger_dir: Path, capsys):
        _write(ledger_dir, {"lid": "BAD", "project": " "})
        assert main(["wake", "--lid", "BAD"]) == 1
        captured = capsys.readouterr()
        assert captured.out == ""
        assert "missing required field(s): project, created_at, summary" in captured.err

    def test_corrupt_file(self, ledger_dir: Path, capsys):
        ledger_dir.mkdir(parents=True)
        (ledger_dir / "BAD.json").write_text("{nope", encoding="utf-8")
        assert main(["wake", "--lid", "BAD"]) == 1
        assert "failed to read or parse JSON" in capsys.readouterr().err

    def test_malformed_optional_field_warns_but_succeeds(self, ledger_dir: Path, capsys):
        _write(ledger_dir, dict(RECORD_A, style={"ask_when_uncertain": "sometimes"}))
        assert main(["wake", "--lid", "A"]) == 0
        captured = capsys.readouterr()
        assert "- Ask when uncertain: yes\n" in captured.out
        assert "`style.ask_when_uncertain` should be boolean." in captured.err


class TestList:
    def test_empty_hint(self, ledger_dir: Path, capsys):
        assert main(["list"]) == 0
        out = capsys.readouterr().out
        assert f"No ledger entries found in: {ledger_dir}" in out
        assert "Tip: ulc init" in out

    def test_skips_corrupt_file(self, ledger_dir: Path, capsys):
        _write(ledger_dir, RECORD_A)
        (ledger_dir / "broken.json").write_text("{", encoding="utf-8")
        assert main(["list", "--json"]) == 0
        envelope = json.loads(capsys.readouterr().out)
        assert envelope["ledger_dir"] == str(ledger_dir)
        assert [e["lid"] for e in envelope["entries"]] == ["A"]
        assert envelope["entries"][0]["file"] == str(ledger_dir / "A.json")
        assert [s["file"] for s in envelope["skipped"]] == [str(ledger_dir / "broken.json")]

    def test_text_listing(self, ledger_dir: Path, capsys):
        _write(ledger_dir, RECORD_A)
        _write(ledger_dir, {"lid": "NEWER", "project": "Q", "created_at": "2026-01-01"})
        assert main(["list"]) == 0
        out = capsys.readouterr().out
        assert out.startswith(f"Ledger directory: {ledger_dir}\n\n")
        assert out.index("- NEWER — Q") < out.index("- A — P")
        assert "  summary: S\n" in out


class TestUpdate:
    def test_scenario_add_and_remove_goal(self, ledger_dir: Path, capsys):
        path = _write(ledger_dir, RECORD_A)
        assert main(["update", "--lid", "A", "--add-goal", "g2", "--remove-goal", "g1"]) == 0
        assert capsys.readouterr().out == f"Updated: {path}\n"

        rec = json.loads(path.read_text(encoding="utf-8"))
        assert rec["goals"] == ["g2"]
        assert rec["modified_at"].startswith(date.today().isoformat())
        assert rec["last_state"]["as_of"] == date.today().isoformat()
        assert rec["created_at"] == "2025-01-01"

    def test_no_changes_no_write(self, ledger_dir: Path, capsys):
        path = _write(ledger_dir, RECORD_A)
        before = path.read_text(encoding="utf-8")
        assert main(["update", "--lid", "A"]) == 0
        assert capsys.readouterr().out == "No changes applied.\n"
        assert path.read_text(encoding="utf-8") == before

    def test_note_added_once(self, ledger_dir: Path):
        path = _write(ledger_dir, RECORD_A)
        assert main(["update", "--lid", "A", "--add-note", "checkpoint"]) == 0
        assert main(["update", "--lid", "A", "--add-note", "checkpoint"]) == 0
        rec = json.loads(path.read_text(encoding="utf-8"))
        assert rec["last_state"]["notes"] == ["checkpoint"]

    def test_invalid_yes_no_rejected(self, ledger_dir: Path, capsys):
        path = _write(ledger_dir, RECORD_A)
        before = path.read_text(encoding="utf-8")
        assert main(["update", "--lid", "A", "--ask-when-uncertain", "perhaps"]) == 1
        err = capsys.readouterr().err
        assert "--ask-when-uncertain" in err
        assert "yes|no" in err
        assert path.read_text(encoding="utf-8") == before

    def test_ask_when_uncertain_no(self, ledger_dir: Path, capsys):
        _write(ledger_dir, RECORD_A)
        assert main(["update", "--lid", "A", "--ask-when-uncertain", "NO"]) == 0
        capsys.readouterr()
        assert main(["wake", "--lid", "A"]) == 0
        assert "- Ask when uncertain: no\n" in capsys.readouterr().out

    def test_warnings_recomputed_after_patch(self, ledger_dir: Path, capsys):
        _write(ledger_dir, RECORD_A)
        assert main(["update", "--lid", "A", "--add-goal", "TODO"]) == 0
        assert "`goals` contains TODO placeholder(s)" in capsys.readouterr().err

    def test_wrong_shape_fields_kept_and_reported(self, ledger_dir: Path, capsys):
        path = _write(
            ledger_dir,
            dict(RECORD_A, goals="ship it", style={"ask_when_uncertain": "maybe", "tone": "dry"}),
        )
        assert main(["update", "--lid", "A", "--add-note", "n"]) == 0
        err = capsys.readouterr().err
        assert "ulc: warning: `goals` should be an array of strings." in err
        assert "ulc: warning: `style.ask_when_uncertain` should be boolean." in err

        rec = json.loads(path.read_text(encoding="utf-8"))
        assert rec["goals"] == "ship it"
        assert rec["style"] == {"tone": "dry", "ask_when_uncertain": "maybe"}
        assert rec["last_state"]["notes"] == ["n"]

    def test_edit_replaces_wrong_shape_field(self, ledger_dir: Path, capsys):
        path = _write(ledger_dir, dict(RECORD_A, goals="ship it"))
        assert main(["update", "--lid", "A", "--add-goal", "g2"]) == 0
        assert "`goals`" not in capsys.readouterr().err
        assert json.loads(path.read_text(encoding="utf-8"))["goals"] == ["g2"]


class TestConfigErrors:
    def test_malformed_toml_in_cwd(self, ledger_dir: Path, tmp_path: Path, capsys):
        (tmp_path / "ulc.toml").write_text("ledger_dir = [\n", encoding="utf-8")
        assert main(["list"]) == 1
        err = capsys.readouterr().err
        assert err.startswith("ulc: failed to load config: ")
        assert "ulc.toml" in err

    def test_malformed_explicit_config(self, ledger_dir: Path, tmp_path: Path, capsys):
        cfg = tmp_path / "custom.toml"
        cfg.write_text("log_level = \n", encoding="utf-8")
        assert main(["--config", str(cfg), "list"]) == 1
        assert str(cfg) in capsys.readouterr().err
