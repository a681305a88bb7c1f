import pytest
import requests

from token_auditor.explorer import (
    ContractSource,
    ExplorerClient,
    ExplorerError,
    SourceNotFoundError,
    is_valid_address,
)
from token_auditor.sources import MalformedSourceError

ADDRESS = "0xdAC17F958D2ee523a2206206994597C13D831ec7"
TOKEN = "pragma solidity ^0.8.0;\ncontract Token {}\n"


class FakeResponse:
    def __init__(self, payload=None, status_code=200, url="https://explorer.test/api"):
        self.payload = payload if payload is not None else {}
        self.status_code = status_code
        self.url = url

    def json(self):
        return self.payload

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"{self.status_code} error", response=self)


class FakeSession:
    def __init__(self, *responses):
        self.responses = list(responses)
        self.headers = {}
        self.calls = []

    def _next(self, method, url, kwargs):
        self.calls.append((method, url, kwargs))
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    def get(self, url, **kwargs):
        return self._next("GET", url, kwargs)

    def post(self, url, **kwargs):
        return self._next("POST", url, kwargs)


def source_payload(source=TOKEN, name="Token", compiler="v0.8.19+commit.7dd6d404"):
    return {
        "status": "1",
        "message": "OK",
        "result": [{"SourceCode": source, "ContractName": name, "CompilerVersion": compiler}],
    }


def make_client(*responses, **kwargs):
    session = FakeSession(*responses)
    kwargs.setdefault("api_key", "test-key")
    client = ExplorerClient(session=session, base_url="https://explorer.test/api", **kwargs)
    return client, session


def test_address_validation() -> None:
    assert is_valid_address(ADDRESS)
    assert not is_valid_address("")
    assert not is_valid_address("0x1234")
    assert not is_valid_address(ADDRESS[2:])


def test_api_key_is_required() -> None:
    with pytest.raises(ValueError):
        ExplorerClient()


def test_api_key_from_environment(monkeypatch) -> None:
    monkeypatch.setenv("ETHERSCAN_API_KEY", "env-key")
    monkeypatch.setenv("ETHERSCAN_API_URL", "https://other.test/api")
    client = ExplorerClient(session=FakeSession())
    assert client.api_key == "env-key"
    assert client.base_url == "https://other.test/api"


def test_fetch_contract_source() -> None:
    client, session = make_client(FakeResponse(source_payload()))
    contract = client.fetch_contract_source(ADDRESS)

    assert contract == ContractSource(source_code=TOKEN.strip(), contract_name="Token", compiler="v0.8.19+commit.7dd6d404")
    method, url, kwargs = session.calls[0]
    assert (method, url) == ("GET", "https://explorer.test/api")
    assert kwargs["params"]["action"] == "getsourcecode"
    assert kwargs["params"]["address"] == ADDRESS
    assert kwargs["params"]["apikey"] == "test-key"


def test_invalid_address_never_hits_the_network() -> None:
    client, session = make_client()
    with pytest.raises(ValueError):
        client.fetch_contract_source("not-an-address")
    assert session.calls == []


def test_unverified_contract() -> None:
    client, _ = make_client(FakeResponse({"status": "0", "message": "NOTOK", "result": "Invalid address"}))
    with pytest.raises(SourceNotFoundError):
        client.fetch_contract_source(ADDRESS)


def test_empty_source_code_is_not_found() -> None:
    client, _ = make_client(FakeResponse(source_payload(source="")))
    with pytest.raises(SourceNotFoundError):
        client.fetch_contract_source(ADDRESS)


def test_non_solidity_source_is_malformed() -> None:
    client, _ = make_client(FakeResponse(source_payload(source="just some text")))
    with pytest.raises(MalformedSourceError):
        client.fetch_contract_source(ADDRESS)


@pytest.mark.parametrize("status", [401, 403])
def test_auth_failures_are_configuration_errors(status) -> None:
    client, _ = make_client(FakeResponse(status_code=status))
    with pytest.raises(ValueError):
        client.fetch_contract_source(ADDRESS)


def test_server_errors_are_explorer_errors() -> None:
    client, _ = make_client(FakeResponse(status_code=502))
    with pytest.raises(ExplorerError):
        client.fetch_contract_source(ADDRESS)


def test_transport_errors_are_explorer_errors() -> None:
    client, _ = make_client(requests.exceptions.ConnectionError("unreachable"))
    with pytest.raises(ExplorerError):
        client.fetch_contract_source(ADDRESS)


def test_successful_lookups_are_cached(tmp_path) -> None:
    client, session = make_client(FakeResponse(source_payload()), cache_dir=str(tmp_path))
    first = client.fetch_contract_source(ADDRESS)
    second = client.fetch_contract_source(ADDRESS)

    assert first == second
    assert len(session.calls) == 1
    assert len(list(tmp_path.glob("*.json"))) == 1


def test_cache_can_be_bypassed(tmp_path) -> None:
    client, session = make_client(
        FakeResponse(source_payload()), FakeResponse(source_payload(name="Renamed")), cache_dir=str(tmp_path)
    )
    client.fetch_contract_source(ADDRESS)
    assert client.fetch_contract_source(ADDRESS, use_cache=False).contract_name == "Renamed"
    assert len(session.calls) == 2


def test_fetch_bytecode() -> None:
    client, session = make_client(
        FakeResponse({"jsonrpc": "2.0", "id": 1, "result": "0x6080"}), rpc_url="https://node.test"
    )
    assert client.fetch_bytecode(ADDRESS) == "0x6080"

    method, url, kwargs = session.calls[0]
    assert (method, url) == ("POST", "https://node.test")
    assert kwargs["json"]["method"] == "eth_getCode"
    assert kwargs["json"]["params"] == [ADDRESS, "latest"]


def test_fetch_bytecode_without_code() -> None:
    client, _ = make_client(FakeResponse({"jsonrpc": "2.0", "id": 1, "result": None}), rpc_url="https://node.test")
    assert client.fetch_bytecode(ADDRESS) == "0x"


def test_fetch_bytecode_rpc_error() -> None:
    client, _ = make_client(
        FakeResponse({"jsonrpc": "2.0", "id": 1, "error": {"code": -32000, "message": "bad"}}),
        rpc_url="https://node.test",
    )
    with pytest.raises(ExplorerError):
        client.fetch_bytecode(ADDRESS)


def test_fetch_bytecode_requires_rpc_url() -> None:
    client, _ = make_client()
    with pytest.raises(ValueError):
        client.fetch_bytecode(ADDRESS)
