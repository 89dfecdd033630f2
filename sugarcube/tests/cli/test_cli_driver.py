# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import json
from pathlib import Path

import pytest

from sugarcube.cli import EXIT_DIAGNOSTICS, EXIT_FAILURE, EXIT_OK, main


SUGARED = "const r = a |> f;\nconst xs = 1 :: [];\n"
LOWERED = 'const r = __binop__(a, "|>", f);\nconst xs = __binop__(1, "::", []);\n'


@pytest.fixture(autouse=True)
def _isolated_cwd(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
	# keep a stray ./sugarcube.json out of the tests
	monkeypatch.chdir(tmp_path)


def _write(tmp_path: Path, name: str, content: str) -> Path:
	path = tmp_path / name
	path.write_text(content)
	return path


def test_preprocess_to_stdout(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
	src = _write(tmp_path, "main.ts", SUGARED)
	assert main(["preprocess", str(src)]) == EXIT_OK
	assert capsys.readouterr().out == LOWERED


def test_preprocess_to_file(tmp_path: Path) -> None:
	src = _write(tmp_path, "main.ts", SUGARED)
	out = tmp_path / "out.ts"
	assert main(["preprocess", str(src), "-o", str(out)]) == EXIT_OK
	assert out.read_text() == LOWERED


def test_preprocess_diff(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
	src = _write(tmp_path, "main.ts", SUGARED)
	assert main(["preprocess", str(src), "--diff"]) == EXIT_OK
	out = capsys.readouterr().out
	assert out.startswith(f"--- {src}\n+++ {src} (preprocessed)\n")
	assert "-const r = a |> f;\n" in out
	assert '+const r = __binop__(a, "|>", f);\n' in out


def test_preprocess_json(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
	src = _write(tmp_path, "main.ts", SUGARED)
	assert main(["preprocess", str(src), "--json", "--check"]) == EXIT_OK
	payload = json.loads(capsys.readouterr().out)
	assert payload == {"exit_code": 0, "diagnostics": [], "output": LOWERED}


def test_preprocess_check_reports_invalid_output(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
	src = _write(tmp_path, "main.ts", SUGARED)
	assert main(["preprocess", str(src), "--check", "--no-pipeline"]) == EXIT_DIAGNOSTICS
	captured = capsys.readouterr()
	assert captured.out == ""
	assert f"{src}:1:" in captured.err
	assert "error: syntax error" in captured.err


def test_feature_flags(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
	src = _write(tmp_path, "main.ts", SUGARED)
	assert main(["preprocess", str(src), "--no-cons"]) == EXIT_OK
	assert capsys.readouterr().out == 'const r = __binop__(a, "|>", f);\nconst xs = 1 :: [];\n'


def test_default_config_file_is_picked_up(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
	_write(tmp_path, "sugarcube.json", json.dumps({"syntax": {"pipeline": False}}))
	src = _write(tmp_path, "main.ts", SUGARED)
	assert main(["preprocess", str(src)]) == EXIT_OK
	assert capsys.readouterr().out == 'const r = a |> f;\nconst xs = __binop__(1, "::", []);\n'


def test_explicit_config_must_exist(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
	src = _write(tmp_path, "main.ts", SUGARED)
	assert main(["check", str(src), "--config", str(tmp_path / "nope.json"), "--json"]) == EXIT_FAILURE
	payload = json.loads(capsys.readouterr().out)
	assert payload["exit_code"] == EXIT_FAILURE
	assert payload["diagnostics"][0]["phase"] == "config"
	assert payload["diagnostics"][0]["code"] == "E-SC-CONFIG"


def test_malformed_config(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
	cfg = _write(tmp_path, "cfg.json", "{not json")
	src = _write(tmp_path, "main.ts", SUGARED)
	assert main(["preprocess", str(src), "--config", str(cfg)]) == EXIT_FAILURE
	assert "invalid JSON" in capsys.readouterr().err


def test_missing_source_file(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
	assert main(["check", str(tmp_path / "missing.ts")]) == EXIT_FAILURE
	assert "missing.ts" in capsys.readouterr().err


def test_check_ok(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
	src = _write(tmp_path, "main.ts", SUGARED)
	assert main(["check", str(src), "--json"]) == EXIT_OK
	assert json.loads(capsys.readouterr().out) == {"exit_code": 0, "diagnostics": []}


def test_check_reports_parse_errors(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
	src = _write(tmp_path, "broken.ts", "const = ;\n")
	assert main(["check", str(src), "--json"]) == EXIT_DIAGNOSTICS
	payload = json.loads(capsys.readouterr().out)
	assert payload["exit_code"] == EXIT_DIAGNOSTICS
	diag = payload["diagnostics"][0]
	assert diag["phase"] == "parser"
	assert diag["file"] == str(src)
	assert diag["line"] == 1


def test_parse_prints_tree(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
	src = _write(tmp_path, "main.ts", SUGARED)
	assert main(["parse", str(src)]) == EXIT_OK
	out = capsys.readouterr().out
	assert out.startswith("module")
	assert "__binop__" in out


def test_regions_json(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
	src = _write(tmp_path, "main.ts", 'const s = "a |> b"; // note\n')
	assert main(["regions", str(src), "--json"]) == EXIT_OK
	payload = json.loads(capsys.readouterr().out)
	kinds = [r["kind"] for r in payload["regions"]]
	assert kinds == ["code", "string", "code", "line_comment"]
	assert payload["regions"][1]["start"] == 10
	assert payload["regions"][1]["line"] == 1 and payload["regions"][1]["column"] == 11
	assert payload["regions"][1]["end_line"] == 1 and payload["regions"][1]["end_column"] == 19


def test_regions_human(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
	src = _write(tmp_path, "main.ts", "`a ${x}`\n")
	assert main(["regions", str(src)]) == EXIT_OK
	lines = capsys.readouterr().out.splitlines()
	assert [line.split("\t")[1] for line in lines] == [
		"template_text",
		"template_interpolation",
		"template_text",
		"code",
	]


def test_usage_errors_exit_2(capsys: pytest.CaptureFixture[str]) -> None:
	with pytest.raises(SystemExit) as excinfo:
		main([])
	assert excinfo.value.code == 2
	with pytest.raises(SystemExit) as excinfo:
		main(["frobnicate", "x.ts"])
	assert excinfo.value.code == 2


def test_undecodable_source_is_an_io_failure(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
	src = tmp_path / "bad.ts"
	src.write_bytes(b"const x = \xff\xfe;\n")
	assert main(["preprocess", str(src), "--json"]) == EXIT_FAILURE
	payload = json.loads(capsys.readouterr().out)
	diag = payload["diagnostics"][0]
	assert diag["code"] == "E-IO"
	assert diag["phase"] == "io"
	assert diag["file"] == str(src)


def test_undecodable_config_is_a_config_failure(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
	cfg = tmp_path / "cfg.json"
	cfg.write_bytes(b'{"syntax": {"pipeline": \xff}}')
	src = _write(tmp_path, "main.ts", SUGARED)
	assert main(["check", str(src), "--config", str(cfg), "--json"]) == EXIT_FAILURE
	payload = json.loads(capsys.readouterr().out)
	assert payload["diagnostics"][0]["phase"] == "config"
