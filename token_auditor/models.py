"""
Data Model

Finding is the unit of detector output, AuditContext the read-only bundle
every detector receives, and SecurityIssue the record handed back to
API consumers.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from .patterns import Severity

EMPTY_BYTECODE = "0x"


@dataclass(frozen=True)
class Finding:
    """One reported issue."""
    name: str
    severity: Severity
    code_snippet: str
    explanation: str
    impact: str
    recommendation: str

    def to_dict(self) -> Dict[str, str]:
        return {
            "name": self.name,
            "severity": self.severity.value,
            "codeSnippet": self.code_snippet,
            "explanation": self.explanation,
            "impact": self.impact,
            "recommendation": self.recommendation,
        }

    def to_security_issue(self, confidence: str = "High") -> 'SecurityIssue':
        return SecurityIssue(
            title=self.name,
            description=(
                f"{self.explanation}\n\nImpact: {self.impact}"
                f"\n\nRecommendation: {self.recommendation}"
            ),
            impact=self.severity.value,
            confidence=confidence,
        )


@dataclass(frozen=True)
class AuditContext:
    """Immutable input shared by every detector of one audit run."""
    source_text: str
    syntax_tree: Optional[Any] = None
    bytecode: str = ""
    contract_address: str = ""

    @property
    def has_bytecode(self) -> bool:
        """True when bytecode was supplied at all ("" means not fetched)."""
        return bool(self.bytecode)

    @property
    def is_empty_contract(self) -> bool:
        return self.bytecode == EMPTY_BYTECODE


@dataclass(frozen=True)
class SecurityIssue:
    """Response record for the HTTP/JSON boundary."""
    title: str
    description: str
    impact: str
    confidence: str

    def to_dict(self) -> Dict[str, str]:
        return {
            "title": self.title,
            "description": self.description,
            "impact": self.impact,
            "confidence": self.confidence,
        }
