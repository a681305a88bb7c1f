"""
Block Explorer and Node Client

Fetches what the audit engine needs for a deployed contract: verified
source from an Etherscan-compatible API and runtime bytecode from a
JSON-RPC node. All network access happens here, before an audit starts.
"""

import hashlib
import json
import logging
import os
import re
import time
from dataclasses import dataclass
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, Dict, List, Optional

import requests

from .sources import normalize_source

logger = logging.getLogger(__name__)

_ADDRESS = re.compile(r'^0x[a-fA-F0-9]{40}$')


class ExplorerError(RuntimeError):
    """Transport or API failure talking to the explorer or node."""


class SourceNotFoundError(LookupError):
    """No verified source is published for the address."""


def is_valid_address(address: str) -> bool:
    return bool(address) and _ADDRESS.match(address) is not None


@dataclass
class ContractSource:
    """Verified source plus the metadata the explorer reports with it."""
    source_code: str
    contract_name: str
    compiler: str

    @classmethod
    def from_api_response(cls, data: Dict) -> 'ContractSource':
        """Create ContractSource from one explorer `result` entry."""
        raw = data.get('SourceCode') or ''
        if not raw.strip():
            raise SourceNotFoundError("Contract source code not found or not verified")

        return cls(
            source_code=normalize_source(raw),
            contract_name=data.get('ContractName', ''),
            compiler=data.get('CompilerVersion', ''),
        )


class ExplorerClient:
    """Client for an Etherscan-compatible API and an Ethereum JSON-RPC node."""

    BASE_URL = "https://api.etherscan.io/api"
    RATE_LIMIT_REQUESTS = 5  # free tier: 5 requests per second
    RATE_LIMIT_WINDOW = 1  # seconds

    def __init__(
        self,
        api_key: Optional[str] = None,
        rpc_url: Optional[str] = None,
        base_url: Optional[str] = None,
        cache_dir: Optional[str] = None,
        session: Optional[requests.Session] = None,
        timeout: float = 30.0,
    ):
        """
        Initialize the client.

        Args:
            api_key: Explorer API key. If not provided, looks for ETHERSCAN_API_KEY env var.
            rpc_url: JSON-RPC endpoint. If not provided, looks for ETHEREUM_RPC_URL env var.
            base_url: Explorer API root. Defaults to ETHERSCAN_API_URL or BASE_URL.
            cache_dir: Directory for caching source lookups. If None, caching is disabled.
            session: requests session to use (a new one by default).
            timeout: Per-request timeout in seconds.
        """
        self.api_key = api_key or os.environ.get('ETHERSCAN_API_KEY')
        if not self.api_key:
            raise ValueError(
                "API key required. Set ETHERSCAN_API_KEY environment variable or pass api_key parameter."
            )

        self.rpc_url = rpc_url or os.environ.get('ETHEREUM_RPC_URL')
        self.base_url = base_url or os.environ.get('ETHERSCAN_API_URL') or self.BASE_URL
        self.timeout = timeout

        self.session = session or requests.Session()
        self.session.headers.update({'Accept': 'application/json'})

        self._request_times: List[float] = []

        self.cache_dir = Path(cache_dir) if cache_dir else None
        if self.cache_dir:
            self.cache_dir.mkdir(parents=True, exist_ok=True)

    def _check_rate_limit(self):
        now = time.time()
        self._request_times = [t for t in self._request_times if now - t < self.RATE_LIMIT_WINDOW]

        if len(self._request_times) >= self.RATE_LIMIT_REQUESTS:
            wait_time = self.RATE_LIMIT_WINDOW - (now - self._request_times[0])
            if wait_time > 0:
                logger.debug("Rate limit reached, waiting %.2fs", wait_time)
                time.sleep(wait_time)

        self._request_times.append(now)

    def _get_cache_key(self, params: Dict) -> str:
        param_str = json.dumps({k: v for k, v in params.items() if k != 'apikey'}, sort_keys=True)
        return hashlib.md5(param_str.encode()).hexdigest()

    def _get_cached(self, cache_key: str) -> Optional[Dict]:
        """Get cached result if available and fresh."""
        if not self.cache_dir:
            return None

        cache_file = self.cache_dir / f"{cache_key}.json"
        if cache_file.exists():
            try:
                data = json.loads(cache_file.read_text())
                cached_time = datetime.fromisoformat(data.get('_cached_at', '2000-01-01'))
                if datetime.now() - cached_time < timedelta(hours=24):
                    return data
            except (json.JSONDecodeError, ValueError):
                logger.debug("Ignoring unreadable cache entry %s", cache_file)

        return None

    def _save_cache(self, cache_key: str, data: Dict):
        if not self.cache_dir:
            return

        data = dict(data, _cached_at=datetime.now().isoformat())
        cache_file = self.cache_dir / f"{cache_key}.json"
        cache_file.write_text(json.dumps(data, indent=2))

    def _raise_for_status(self, response: requests.Response):
        try:
            response.raise_for_status()
        except requests.exceptions.HTTPError as e:
            if response.status_code in (401, 403):
                raise ValueError("Invalid API key. Please check your ETHERSCAN_API_KEY.") from e
            raise ExplorerError(f"HTTP {response.status_code} from {response.url}") from e

    def _get(self, params: Dict[str, Any], use_cache: bool = True) -> Dict:
        cache_key = self._get_cache_key(params)
        if use_cache:
            cached = self._get_cached(cache_key)
            if cached:
                return cached

        self._check_rate_limit()
        try:
            response = self.session.get(self.base_url, params=params, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            raise ExplorerError(f"Explorer request failed: {e}") from e

        self._raise_for_status(response)
        data = response.json()

        if use_cache and data.get('status') == '1':
            self._save_cache(cache_key, data)
        return data

    def fetch_contract_source(self, address: str, use_cache: bool = True) -> ContractSource:
        """
        Fetch and normalize the verified source for a contract.

        Raises:
            ValueError: invalid address or API key
            SourceNotFoundError: the contract is not verified
            MalformedSourceError: the published source is not recognisable Solidity
        """
        if not is_valid_address(address):
            raise ValueError(f"Invalid Ethereum contract address: {address!r}")

        data = self._get({
            'module': 'contract',
            'action': 'getsourcecode',
            'address': address,
            'apikey': self.api_key,
        }, use_cache=use_cache)

        results = data.get('result')
        if data.get('status') != '1' or not isinstance(results, list) or not results:
            raise SourceNotFoundError(f"Contract source code not found or not verified: {address}")

        logger.debug("Fetched source for %s (%s)", address, results[0].get('ContractName', '?'))
        return ContractSource.from_api_response(results[0])

    def fetch_bytecode(self, address: str) -> str:
        """Runtime bytecode via eth_getCode; "0x" when the address holds no code."""
        if not is_valid_address(address):
            raise ValueError(f"Invalid Ethereum contract address: {address!r}")
        if not self.rpc_url:
            raise ValueError("RPC URL required. Set ETHEREUM_RPC_URL environment variable or pass rpc_url.")

        payload = {
            'jsonrpc': '2.0',
            'id': 1,
            'method': 'eth_getCode',
            'params': [address, 'latest'],
        }
        try:
            response = self.session.post(self.rpc_url, json=payload, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            raise ExplorerError(f"RPC request failed: {e}") from e

        self._raise_for_status(response)
        data = response.json()
        if 'error' in data:
            raise ExplorerError(f"eth_getCode failed: {data['error']}")
        return data.get('result') or '0x'


def create_client(
    api_key: Optional[str] = None,
    rpc_url: Optional[str] = None,
    enable_cache: bool = True,
) -> ExplorerClient:
    """
    Factory function to create an explorer client.

    Args:
        api_key: API key (or set ETHERSCAN_API_KEY env var)
        rpc_url: Node URL (or set ETHEREUM_RPC_URL env var)
        enable_cache: Whether to cache source lookups on disk
    """
    cache_dir = None
    if enable_cache:
        cache_dir = str(Path.home() / '.cache' / 'token-auditor')

    return ExplorerClient(api_key=api_key, rpc_url=rpc_url, cache_dir=cache_dir)
