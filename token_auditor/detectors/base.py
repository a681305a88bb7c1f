"""
Detector Registration

Two kinds of detector share one registry:

- ContextRule rows: "does RISKY appear, unless a SAFE marker also appears",
  followed by a severity rule that picks the name and grade. Most checks
  are a single row.
- plain detector functions for checks that need more than co-occurrence
  (counting, thresholds, function-scoped tests, bytecode).

Registry order is declaration order and is the order findings are merged.
"""

from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from ..analyzer import SourceScanner
from ..models import AuditContext, Finding
from ..patterns import PatternLike, Severity

DetectFunction = Callable[[AuditContext, SourceScanner], List[Finding]]


@dataclass(frozen=True)
class Verdict:
    """What a severity rule decided to report."""
    name: str
    severity: Severity
    explanation: str
    impact: str
    recommendation: str
    # Replaces the rule's extracted snippet when set (e.g. redaction).
    code_snippet: Optional[str] = None

    def to_finding(self, code_snippet: str) -> Finding:
        return Finding(
            name=self.name,
            severity=self.severity,
            code_snippet=self.code_snippet if self.code_snippet is not None else code_snippet,
            explanation=self.explanation,
            impact=self.impact,
            recommendation=self.recommendation,
        )


SeverityRule = Callable[[SourceScanner], Optional[Verdict]]


def fixed(verdict: Verdict) -> SeverityRule:
    """Severity rule that always reports the same verdict."""
    return lambda scanner: verdict


@dataclass(frozen=True)
class ContextRule:
    detector_id: str
    risky: PatternLike
    safe_contexts: Tuple[PatternLike, ...]
    severity_rule: SeverityRule
    # Pattern used for the snippet; defaults to `risky`.
    snippet: Optional[PatternLike] = None

    def evaluate(self, scanner: SourceScanner) -> List[Finding]:
        if not scanner.is_risky_in_context(self.risky, self.safe_contexts):
            return []
        verdict = self.severity_rule(scanner)
        if verdict is None:
            return []
        snippet_pattern = self.snippet if self.snippet is not None else self.risky
        return [verdict.to_finding(scanner.snippet(snippet_pattern))]


@dataclass(frozen=True)
class Detector:
    detector_id: str
    detect: DetectFunction
    rule: Optional[ContextRule] = field(default=None, compare=False)

    @property
    def family(self) -> str:
        return self.detector_id.split('.', 1)[0]

    def run(self, context: AuditContext, scanner: Optional[SourceScanner] = None) -> List[Finding]:
        if scanner is None:
            scanner = SourceScanner(context.source_text)
        return list(self.detect(context, scanner))


_REGISTRY: Dict[str, Detector] = {}


def register(detector: Detector) -> Detector:
    if detector.detector_id in _REGISTRY:
        raise ValueError(f"Detector already registered: {detector.detector_id}")
    _REGISTRY[detector.detector_id] = detector
    return detector


def rule(
    detector_id: str,
    risky: PatternLike,
    safe_contexts: Iterable[PatternLike] = (),
    severity_rule: Optional[SeverityRule] = None,
    verdict: Optional[Verdict] = None,
    snippet: Optional[PatternLike] = None,
) -> ContextRule:
    """Declare and register a ContextRule row."""
    if severity_rule is None:
        if verdict is None:
            raise ValueError(f"{detector_id}: either severity_rule or verdict is required")
        severity_rule = fixed(verdict)

    context_rule = ContextRule(
        detector_id=detector_id,
        risky=risky,
        safe_contexts=tuple(safe_contexts),
        severity_rule=severity_rule,
        snippet=snippet,
    )
    register(Detector(
        detector_id=detector_id,
        detect=lambda context, scanner: context_rule.evaluate(scanner),
        rule=context_rule,
    ))
    return context_rule


def detector(detector_id: str) -> Callable[[DetectFunction], DetectFunction]:
    """Register a detect(context, scanner) function under detector_id."""
    def decorate(func: DetectFunction) -> DetectFunction:
        register(Detector(detector_id=detector_id, detect=func))
        return func
    return decorate


def all_detectors() -> Tuple[Detector, ...]:
    return tuple(_REGISTRY.values())


def get_detector(detector_id: str) -> Detector:
    try:
        return _REGISTRY[detector_id]
    except KeyError:
        raise KeyError(f"Unknown detector: {detector_id}") from None


def select_detectors(disabled: Iterable[str] = ()) -> Tuple[Detector, ...]:
    """All detectors except those whose id or family is in `disabled`."""
    skip = set(disabled)
    return tuple(
        d for d in _REGISTRY.values()
        if d.detector_id not in skip and d.family not in skip
    )
