"""Shared fixtures for the token auditor test suite."""

from textwrap import dedent

import pytest

from token_auditor.detectors import get_detector
from token_auditor.engine import AuditEngine, EngineConfig
from token_auditor.models import AuditContext

ENV_VARS = (
    "TOKEN_AUDITOR_MAX_RESULTS",
    "TOKEN_AUDITOR_WORKERS",
    "TOKEN_AUDITOR_DISABLED",
    "TOKEN_AUDITOR_SERIAL",
    "ETHERSCAN_API_KEY",
    "ETHERSCAN_API_URL",
    "ETHEREUM_RPC_URL",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def solidity(text: str) -> str:
    return dedent(text).strip() + "\n"


@pytest.fixture
def run_detector():
    def run(detector_id, source, bytecode="", contract_address=""):
        context = AuditContext(
            source_text=solidity(source),
            bytecode=bytecode,
            contract_address=contract_address,
        )
        return get_detector(detector_id).run(context)
    return run


@pytest.fixture
def serial_engine():
    return AuditEngine(EngineConfig(max_results=100, parallel=False))


@pytest.fixture
def parallel_engine():
    return AuditEngine(EngineConfig(max_results=100, parallel=True, max_workers=4))
