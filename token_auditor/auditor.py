"""
Main Auditor Module

Ties source acquisition to the audit engine and renders the resulting
report for terminals, Markdown, JSON and API responses.
"""

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional

from .engine import AuditEngine, create_engine
from .explorer import ExplorerClient
from .models import AuditContext, Finding
from .patterns import SEVERITY_ORDER, Severity

logger = logging.getLogger(__name__)

SEVERITY_COLORS = {
    Severity.CRITICAL: '\033[91m',  # Red
    Severity.HIGH: '\033[93m',      # Yellow
    Severity.MEDIUM: '\033[94m',    # Blue
    Severity.LOW: '\033[96m',       # Cyan
    Severity.INFORMATIONAL: '\033[37m',
}
SEVERITY_ICONS = {
    Severity.CRITICAL: '🔴',
    Severity.HIGH: '🟠',
    Severity.MEDIUM: '🟡',
    Severity.LOW: '🔵',
    Severity.INFORMATIONAL: '⚪',
}
RESET = '\033[0m'
BOLD = '\033[1m'


def format_finding(finding: Finding) -> str:
    """Format a finding for terminal display."""
    color = SEVERITY_COLORS.get(finding.severity, '')

    output = []
    output.append(f"\n{'#'*80}")
    output.append(f"{BOLD}{color}{finding.name}{RESET}")
    output.append(f"{'#'*80}")
    output.append(f"Severity: {color}{finding.severity.value}{RESET}")

    if finding.code_snippet:
        output.append(f"\n{BOLD}Code:{RESET}")
        output.append("-" * 40)
        for line in finding.code_snippet.split('\n'):
            output.append(f"  {line}")
        output.append("-" * 40)

    output.append(f"\n{BOLD}Why:{RESET} {finding.explanation}")
    output.append(f"{BOLD}Impact:{RESET} {finding.impact}")
    output.append(f"{BOLD}Recommendation:{RESET} {finding.recommendation}")

    return '\n'.join(output)


@dataclass
class AuditReport:
    """Ordered, capped findings for one audited contract."""
    target: str
    timestamp: datetime
    findings: List[Finding] = field(default_factory=list)
    contract_address: str = ""
    contract_name: str = ""
    compiler: str = ""
    lines_analyzed: int = 0

    def __len__(self) -> int:
        return len(self.findings)

    def __iter__(self) -> Iterator[Finding]:
        return iter(self.findings)

    def count(self, severity: Severity) -> int:
        return sum(1 for f in self.findings if f.severity == severity)

    @property
    def critical_count(self) -> int:
        return self.count(Severity.CRITICAL)

    @property
    def high_count(self) -> int:
        return self.count(Severity.HIGH)

    @property
    def medium_count(self) -> int:
        return self.count(Severity.MEDIUM)

    def format_summary(self) -> str:
        output = []
        output.append("\n" + "=" * 80)
        output.append("AUDIT SUMMARY")
        output.append("=" * 80)
        output.append(f"Target: {self.target}")
        if self.contract_name:
            output.append(f"Contract: {self.contract_name} ({self.compiler or 'unknown compiler'})")
        output.append(f"Date: {self.timestamp.strftime('%Y-%m-%d %H:%M:%S')}")
        output.append(f"Lines Analyzed: {self.lines_analyzed}")
        output.append("")
        output.append("FINDINGS:")
        for severity in SEVERITY_ORDER:
            output.append(f"  {SEVERITY_ICONS[severity]} {severity.value.upper()}: {self.count(severity)}")
        output.append(f"  📊 TOTAL: {len(self.findings)}")
        output.append("=" * 80)

        return '\n'.join(output)

    def to_markdown(self) -> str:
        md = []
        md.append("# Token Contract Security Audit Report")
        md.append("")
        md.append(f"**Target:** {self.target}")
        if self.contract_name:
            md.append(f"**Contract:** {self.contract_name}")
        if self.compiler:
            md.append(f"**Compiler:** {self.compiler}")
        md.append(f"**Date:** {self.timestamp.strftime('%Y-%m-%d %H:%M:%S')}")
        md.append("")
        md.append("## Summary")
        md.append("")
        md.append("| Severity | Count |")
        md.append("|----------|-------|")
        for severity in SEVERITY_ORDER:
            md.append(f"| {SEVERITY_ICONS[severity]} {severity.value} | {self.count(severity)} |")
        md.append(f"| **Total** | **{len(self.findings)}** |")
        md.append("")
        md.append("---")
        md.append("")
        md.append("## Detailed Findings")

        for finding in self.findings:
            md.append("")
            md.append(f"### [{finding.severity.value}] {finding.name}")
            md.append("")
            if finding.code_snippet:
                md.append("```solidity")
                md.append(finding.code_snippet)
                md.append("```")
                md.append("")
            md.append(finding.explanation)
            md.append("")
            md.append(f"**Impact:** {finding.impact}")
            md.append("")
            md.append(f"**Recommendation:** {finding.recommendation}")
            md.append("")
            md.append("---")

        return '\n'.join(md)

    def to_json(self) -> str:
        data = {
            "target": self.target,
            "timestamp": self.timestamp.isoformat(),
            "contractAddress": self.contract_address,
            "contractName": self.contract_name,
            "compiler": self.compiler,
            "summary": {
                severity.value.lower(): self.count(severity) for severity in SEVERITY_ORDER
            },
            "linesAnalyzed": self.lines_analyzed,
            "findings": [f.to_dict() for f in self.findings],
        }
        data["summary"]["total"] = len(self.findings)
        return json.dumps(data, indent=2)

    def to_response(self) -> Dict[str, Any]:
        """API response body: findings mapped to security-issue records."""
        return {
            "contractAddress": self.contract_address,
            "contractName": self.contract_name,
            "compiler": self.compiler,
            "securityAnalysis": {
                "issues": [f.to_security_issue().to_dict() for f in self.findings],
            },
        }


class TokenAuditor:
    """Runs the engine over code snippets, files or deployed contracts."""

    def __init__(self, engine: Optional[AuditEngine] = None, client: Optional[ExplorerClient] = None):
        self.engine = engine or create_engine()
        self.client = client

    def audit_code(
        self,
        code: str,
        target_name: str = "code snippet",
        bytecode: str = "",
        contract_address: str = "",
        syntax_tree: Any = None,
    ) -> AuditReport:
        """
        Audit Solidity source text.

        Raises MalformedSourceError if the code is not recognisable Solidity.
        """
        findings = self.engine.run(AuditContext(
            source_text=code,
            syntax_tree=syntax_tree,
            bytecode=bytecode,
            contract_address=contract_address,
        ))

        return AuditReport(
            target=target_name,
            timestamp=datetime.now(),
            findings=findings,
            contract_address=contract_address,
            lines_analyzed=len(code.split('\n')),
        )

    def audit_file(self, file_path: str, bytecode: str = "", contract_address: str = "") -> AuditReport:
        path = Path(file_path)
        if not path.exists():
            raise FileNotFoundError(f"File not found: {file_path}")

        code = path.read_text(encoding='utf-8')
        return self.audit_code(
            code,
            target_name=str(path.absolute()),
            bytecode=bytecode,
            contract_address=contract_address,
        )

    def audit_address(self, address: str, include_bytecode: bool = True) -> AuditReport:
        """
        Fetch a deployed contract's verified source (and bytecode) and audit it.

        Bytecode checks are skipped when include_bytecode is False or no RPC
        endpoint is configured.
        """
        if self.client is None:
            raise ValueError("An explorer client is required to audit a deployed contract.")

        contract = self.client.fetch_contract_source(address)

        bytecode = ""
        if not include_bytecode:
            logger.info("Bytecode fetch disabled; bytecode checks skipped for %s", address)
        elif not self.client.rpc_url:
            logger.info("No RPC endpoint configured; bytecode checks skipped for %s", address)
        else:
            bytecode = self.client.fetch_bytecode(address)

        report = self.audit_code(
            contract.source_code,
            target_name=address,
            bytecode=bytecode,
            contract_address=address,
        )
        report.contract_name = contract.contract_name
        report.compiler = contract.compiler
        return report


def create_auditor(
    client: Optional[ExplorerClient] = None,
    max_results: Optional[int] = None,
    parallel: Optional[bool] = None,
    disabled_detectors: Optional[List[str]] = None,
    max_workers: Optional[int] = None,
) -> TokenAuditor:
    """
    Factory function to create an auditor instance.

    Args:
        client: Explorer client, required only for audit_address()
        max_results: Report cap (default 10, or TOKEN_AUDITOR_MAX_RESULTS)
        parallel: Run detectors on a thread pool
        disabled_detectors: Detector ids or family names to skip
        max_workers: Thread-pool size (default: executor default)
    """
    engine = create_engine(
        max_results=max_results,
        parallel=parallel,
        disabled_detectors=disabled_detectors,
        max_workers=max_workers,
    )
    return TokenAuditor(engine=engine, client=client)
