# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import io
import json
from pathlib import Path

import pytest

from candidargs.cli import main

LEDGER_DID = """
type Account = record { owner : principal; subaccount : opt blob };
type TransferArgs = record { to : Account; amount : nat; memo : opt nat64 };

service : {
	transfer : (TransferArgs) -> (variant { Ok : nat; Err : text });
	balance_of : (Account) -> (nat) query;
	fee : () -> (nat) query;
}
"""


@pytest.fixture
def did_file(tmp_path: Path) -> Path:
	path = tmp_path / "ledger.did"
	path.write_text(LEDGER_DID, encoding="utf-8")
	return path


def test_methods_human(did_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
	assert main(["methods", str(did_file)]) == 0
	out = capsys.readouterr().out.splitlines()
	assert out[1] == "balance_of (query): (record { owner : principal; subaccount : opt blob })"
	assert out[2] == "fee (query): ()"


def test_methods_json(did_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
	assert main(["methods", str(did_file), "--json"]) == 0
	rows = json.loads(capsys.readouterr().out)
	assert [r["name"] for r in rows] == ["transfer", "balance_of", "fee"]
	assert rows[0]["mode"] == "update"


def test_resolve_args_and_returns(did_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
	assert main(["resolve", str(did_file), "transfer"]) == 0
	assert capsys.readouterr().out.strip() == (
		"record { to : record { owner : principal; subaccount : opt blob }; amount : nat; memo : opt nat64 }"
	)
	assert main(["resolve", str(did_file), "transfer", "--returns"]) == 0
	assert capsys.readouterr().out.strip() == "variant { Ok : nat; Err : text }"


def test_validate_ok_and_invalid(did_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
	assert main(["validate", str(did_file), "balance_of", '{"owner": "aaaaa-aa"}']) == 0
	assert capsys.readouterr().out.strip() == "ok"
	assert main(["validate", str(did_file), "balance_of", '{"owner": 1, "extra": 2}']) == 1
	err = capsys.readouterr().err.splitlines()
	assert err == ["(root).owner: expected principal text, got number", "(root): unknown field extra"]


def test_encode_reads_json_from_file(did_file: Path, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
	args = tmp_path / "args.json"
	args.write_text('{"to": {"owner": "aaaaa-aa"}, "amount": "100000000000000000000"}', encoding="utf-8")
	assert main(["encode", str(did_file), "transfer", f"@{args}"]) == 0
	assert capsys.readouterr().out.strip() == (
		'(record { to = record { owner = principal "aaaaa-aa"; subaccount = null }; '
		"amount = 100000000000000000000 : nat; memo = null })"
	)


def test_encode_reads_json_from_stdin(
	did_file: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
	monkeypatch.setattr("sys.stdin", io.StringIO(""))
	assert main(["encode", str(did_file), "fee", "-"]) == 0
	assert capsys.readouterr().out.strip() == "()"


def test_example(did_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
	assert main(["example", str(did_file), "balance_of"]) == 0
	out = capsys.readouterr().out
	assert json.loads(out) == {"owner": "ryjl3-tyaaa-aaaaa-aaaba-cai", "subaccount": None}


def test_unknown_method_exits_2(did_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
	assert main(["resolve", str(did_file), "mint"]) == 2
	assert capsys.readouterr().err.startswith("error: unknown method 'mint'")


def test_cycle_and_depth_errors_exit_2(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
	path = tmp_path / "cycle.did"
	path.write_text("type A = opt A; service : { go : (A) -> () }", encoding="utf-8")
	assert main(["resolve", str(path), "go"]) == 2
	assert "type alias cycle detected: A -> A" in capsys.readouterr().err

	deep = tmp_path / "deep.did"
	deep.write_text("type A = opt B; type B = opt nat; service : { go : (A) -> () }", encoding="utf-8")
	assert main(["--max-depth", "1", "resolve", str(deep), "go"]) == 2
	assert "deeper than 1" in capsys.readouterr().err


def test_parse_error_exits_2(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
	path = tmp_path / "broken.did"
	path.write_text("type A = record { a : nat;", encoding="utf-8")
	assert main(["resolve", str(path), "go"]) == 2
	assert "unclosed '{'" in capsys.readouterr().err
