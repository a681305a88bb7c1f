"""
Token Auditor - Heuristic Security Triage for ERC-20 Token Contracts

Scans Solidity source (and optionally deployed bytecode) for rug-pull,
honeypot, minting, reentrancy, proxy and related risk patterns, and
returns a short, severity-ordered list of findings.
"""

from .auditor import TokenAuditor, create_auditor, AuditReport
from .engine import AuditEngine, EngineConfig, create_engine
from .aggregator import aggregate
from .analyzer import SourceScanner, extract_snippet
from .models import AuditContext, Finding, SecurityIssue
from .patterns import Severity, SEVERITY_ORDER
from .sources import MalformedSourceError, normalize_source
from .explorer import ExplorerClient, create_client, ContractSource, ExplorerError, SourceNotFoundError
from .detectors import ContextRule, Detector, Verdict, all_detectors, get_detector

__version__ = "1.0.0"

__all__ = [
    # Main classes
    "TokenAuditor",
    "AuditEngine",
    "ExplorerClient",
    "SourceScanner",

    # Factory functions
    "create_auditor",
    "create_engine",
    "create_client",

    # Data classes
    "AuditReport",
    "AuditContext",
    "EngineConfig",
    "Finding",
    "SecurityIssue",
    "ContractSource",

    # Detectors
    "ContextRule",
    "Detector",
    "Verdict",
    "all_detectors",
    "get_detector",

    # Helpers
    "aggregate",
    "extract_snippet",
    "normalize_source",
    "Severity",
    "SEVERITY_ORDER",

    # Errors
    "MalformedSourceError",
    "ExplorerError",
    "SourceNotFoundError",
]
