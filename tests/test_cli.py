"""Tests for the ``token-auditor`` command line."""

import json

import pytest

from token_auditor.cli import main

CRITICAL = """pragma solidity ^0.8.0;
contract Killable {
    function kill() public {
        selfdestruct(payable(msg.sender));
    }
}
"""

HIGH = """pragma solidity ^0.8.0;
contract Auth {
    address owner;
    function check() public view {
        require(tx.origin == owner);
    }
}
"""

CLEAN = """pragma solidity ^0.8.0;
contract Empty {
}
"""


def run_cli(*argv):
    with pytest.raises(SystemExit) as excinfo:
        main(list(argv))
    return excinfo.value.code


@pytest.fixture
def write_contract(tmp_path):
    def write(source, name="Token.sol"):
        path = tmp_path / name
        path.write_text(source, encoding="utf-8")
        return str(path)
    return write


@pytest.mark.parametrize("source, expected", [(CRITICAL, 2), (HIGH, 1), (CLEAN, 0)])
def test_exit_code_reflects_worst_severity(write_contract, source, expected) -> None:
    assert run_cli("--quiet", "audit", write_contract(source)) == expected


def test_audit_prints_findings(write_contract, capsys) -> None:
    run_cli("--quiet", "--serial", "audit", write_contract(CRITICAL))
    out = capsys.readouterr().out
    assert "AUDIT SUMMARY" in out
    assert "Critical Risk: Unprotected Self-Destruct" in out


def test_json_and_markdown_exports(write_contract, tmp_path) -> None:
    json_path = tmp_path / "report.json"
    md_path = tmp_path / "report.md"
    run_cli("--quiet", "audit", write_contract(CRITICAL), "-j", str(json_path), "-o", str(md_path))

    data = json.loads(json_path.read_text())
    assert data["summary"]["critical"] == 1
    assert md_path.read_text().startswith("# Token Contract Security Audit Report")


def test_bytecode_option(write_contract) -> None:
    assert run_cli("--quiet", "audit", write_contract(CLEAN), "--bytecode", "0x") == 2


def test_max_results_and_disable(write_contract, tmp_path) -> None:
    json_path = tmp_path / "report.json"
    run_cli("--quiet", "--max-results", "1", "--disable", "gas", "audit", write_contract(HIGH), "-j", str(json_path))
    findings = json.loads(json_path.read_text())["findings"]
    assert [f["name"] for f in findings] == ["Unsafe Authentication Pattern: tx.origin"]


def test_missing_file(tmp_path) -> None:
    assert run_cli("--quiet", "audit", str(tmp_path / "Nope.sol")) == 1


def test_malformed_source(write_contract, capsys) -> None:
    assert run_cli("--quiet", "audit", write_contract("just prose, no code")) == 1
    assert "Invalid Solidity source" in capsys.readouterr().out


def test_fetch_without_api_key(capsys) -> None:
    assert run_cli("--quiet", "fetch", "0xdAC17F958D2ee523a2206206994597C13D831ec7") == 1
    assert "API key required" in capsys.readouterr().out


def test_detectors_listing(capsys) -> None:
    assert run_cli("--quiet", "detectors") == 0
    out = capsys.readouterr().out
    assert "rugpull.ownership_transfer [rule]" in out
    assert "bytecode.not_deployed [check]" in out


def test_no_command_prints_help(capsys) -> None:
    assert run_cli() == 0
    assert "usage:" in capsys.readouterr().out
