import logging
import time

import pytest

from token_auditor.detectors import Detector
from token_auditor.engine import AuditEngine, EngineConfig, create_engine
from token_auditor.models import AuditContext, Finding
from token_auditor.patterns import Severity, SEVERITY_ORDER
from token_auditor.sources import MalformedSourceError

RISKY_TOKEN = """pragma solidity ^0.8.0;

contract RiskyToken {
    address public owner;
    bool public tradingEnabled;
    uint256 public sellTax = 25;
    mapping(address => bool) private _blacklisted;
    mapping(address => uint256) public balances;

    function transferOwnership(address newOwner) public {
        owner = newOwner;
    }

    function mint(address to, uint256 amount) public {
        _mint(to, amount);
    }

    function withdraw() external {
        uint256 amount = balances[msg.sender];
        (bool ok, ) = msg.sender.call{value: amount}("");
        balances[msg.sender] = 0;
        require(ok);
    }

    function kill() public {
        selfdestruct(payable(msg.sender));
    }
}
"""


def names(findings):
    return [f.name for f in findings]


def static_detector(detector_id, *findings, delay=0.0):
    def detect(context, scanner):
        if delay:
            time.sleep(delay)
        return list(findings)
    return Detector(detector_id=detector_id, detect=detect)


def finding(name, severity=Severity.MEDIUM, snippet=""):
    return Finding(name, severity, snippet, "explanation", "impact", "recommendation")


# Preconditions

@pytest.mark.parametrize("source", ["", "   \n", "hello world, not a contract"])
def test_malformed_source_is_rejected_before_detectors_run(source) -> None:
    calls = []

    def detect(context, scanner):
        calls.append(context)
        return []

    engine = AuditEngine(EngineConfig(parallel=False), detectors=[Detector("test.spy", detect)])
    with pytest.raises(MalformedSourceError):
        engine.run(AuditContext(source_text=source))
    assert calls == []


def test_interface_only_source_is_accepted(serial_engine) -> None:
    assert isinstance(serial_engine.audit("interface IERC20 { function totalSupply() external view returns (uint256); }"), list)


# Isolation and ordering

def test_failing_detector_contributes_nothing(caplog) -> None:
    def explode(context, scanner):
        raise RuntimeError("boom")

    engine = AuditEngine(
        EngineConfig(parallel=True),
        detectors=[
            Detector("test.boom", explode),
            static_detector("test.ok", finding("Survivor")),
        ],
    )
    with caplog.at_level(logging.ERROR, logger="token_auditor.engine"):
        result = engine.audit("contract A {}")

    assert names(result) == ["Survivor"]
    assert "test.boom" in caplog.text


def test_parallel_run_keeps_registry_order() -> None:
    detectors = [
        static_detector("test.slow", finding("first"), delay=0.05),
        static_detector("test.fast", finding("second")),
        static_detector("test.faster", finding("third")),
    ]
    engine = AuditEngine(EngineConfig(parallel=True, max_workers=3), detectors=detectors)
    assert names(engine.run_detectors(AuditContext("contract A {}"))) == ["first", "second", "third"]


def test_parallel_and_serial_agree(serial_engine, parallel_engine) -> None:
    assert serial_engine.audit(RISKY_TOKEN) == parallel_engine.audit(RISKY_TOKEN)


def test_repeated_runs_are_identical(parallel_engine) -> None:
    first = parallel_engine.audit(RISKY_TOKEN, bytecode="0x")
    assert all(parallel_engine.audit(RISKY_TOKEN, bytecode="0x") == first for _ in range(3))


# Report shape

def test_report_is_sorted_capped_and_unique() -> None:
    engine = AuditEngine(EngineConfig(max_results=5, parallel=False))
    report = engine.audit(RISKY_TOKEN)
    assert len(report) == 5
    ranks = [f.severity.rank for f in report]
    assert ranks == sorted(ranks)
    assert len({(f.name, f.code_snippet) for f in report}) == len(report)


def test_default_cap_is_ten() -> None:
    assert len(AuditEngine(EngineConfig(parallel=False)).audit(RISKY_TOKEN)) == 10


def test_whole_source_suppression(serial_engine) -> None:
    unsafe = "pragma solidity ^0.8.0;\ncontract T {\n    function transferOwnership(address newOwner) public { owner = newOwner; }\n}\n"
    assert "Potential Ownership Transfer Risk" in names(serial_engine.audit(unsafe))

    governed = unsafe + "contract Governor {\n    // queued through the timelock\n}\n"
    assert "Potential Ownership Transfer Risk" not in names(serial_engine.audit(governed))


def test_disabled_family_is_skipped() -> None:
    engine = AuditEngine(EngineConfig(parallel=False, max_results=100, disabled_detectors=("gas", "honeypot")))
    assert not any(d.family in ("gas", "honeypot") for d in engine.detectors)
    assert "Excessive Transaction Fee" not in names(engine.audit(RISKY_TOKEN))


# End-to-end scenarios

def by_name(findings, name):
    return [f for f in findings if f.name == name]


def test_guarded_mint_without_cap(serial_engine) -> None:
    source = (
        "pragma solidity ^0.8.0;\ncontract Token {\n"
        "    function mint(address to, uint256 amount) public onlyOwner { _mint(to, amount); }\n}\n"
    )
    matches = by_name(serial_engine.audit(source), "Uncapped Minting with Access Controls")
    assert len(matches) == 1
    assert matches[0].severity is Severity.MEDIUM
    assert not by_name(serial_engine.audit(source), "Unlimited Minting Risk")


def test_tx_origin_authentication(serial_engine) -> None:
    source = "pragma solidity ^0.8.0;\ncontract Auth {\n    function check() public view { require(tx.origin == owner); }\n}\n"
    matches = by_name(serial_engine.audit(source), "Unsafe Authentication Pattern: tx.origin")
    assert [f.severity for f in matches] == [Severity.HIGH]


def test_unprotected_selfdestruct(serial_engine) -> None:
    matches = by_name(serial_engine.audit(RISKY_TOKEN), "Critical Risk: Unprotected Self-Destruct")
    assert [f.severity for f in matches] == [Severity.CRITICAL]


def test_empty_bytecode(serial_engine) -> None:
    result = serial_engine.audit(RISKY_TOKEN, bytecode="0x")
    bytecode_names = {"Contract Not Deployed or Self-Destructed", "Possible Proxy Contract", "Hidden Assembly Code"}
    assert [f.name for f in result if f.name in bytecode_names] == ["Contract Not Deployed or Self-Destructed"]
    assert by_name(result, "Contract Not Deployed or Self-Destructed")[0].severity is Severity.CRITICAL


def test_excessive_fee(serial_engine) -> None:
    matches = by_name(serial_engine.audit(RISKY_TOKEN), "Excessive Transaction Fee")
    assert [f.severity for f in matches] == [Severity.CRITICAL]


def test_informational_findings_rank_last(serial_engine) -> None:
    source = RISKY_TOKEN.replace("selfdestruct(payable(msg.sender));", "revert();")
    result = serial_engine.audit(source, bytecode="0x6080")
    assert {f.severity for f in result} == set(SEVERITY_ORDER)
    assert result[-1].name == "Possible Proxy Contract"


# Configuration

def test_config_from_env() -> None:
    config = EngineConfig.from_env({
        "TOKEN_AUDITOR_MAX_RESULTS": "3",
        "TOKEN_AUDITOR_WORKERS": "2",
        "TOKEN_AUDITOR_DISABLED": "gas, proxy,",
        "TOKEN_AUDITOR_SERIAL": "yes",
    })
    assert config == EngineConfig(max_results=3, parallel=False, max_workers=2, disabled_detectors=("gas", "proxy"))


def test_config_defaults() -> None:
    assert EngineConfig.from_env({}) == EngineConfig()


def test_create_engine_arguments_override_env(monkeypatch) -> None:
    monkeypatch.setenv("TOKEN_AUDITOR_MAX_RESULTS", "4")
    monkeypatch.setenv("TOKEN_AUDITOR_DISABLED", "gas")

    assert create_engine().config.max_results == 4
    engine = create_engine(max_results=2, parallel=False, disabled_detectors=[])
    assert engine.config == EngineConfig(max_results=2, parallel=False)
    assert any(d.family == "gas" for d in engine.detectors)
