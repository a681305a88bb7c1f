"""
Finding Aggregation

Turns the raw, merged detector output into the bounded report: stable
severity sort, dedup on name plus normalized snippet prefix, then cap.
"""

import re
from typing import Iterable, List, Tuple

from .models import Finding

DEFAULT_MAX_RESULTS = 10
SNIPPET_KEY_LENGTH = 100

_WHITESPACE = re.compile(r'\s+')


def dedup_key(finding: Finding) -> Tuple[str, str]:
    normalized = _WHITESPACE.sub(' ', finding.code_snippet).strip()
    return (finding.name, normalized[:SNIPPET_KEY_LENGTH])


def aggregate(findings: Iterable[Finding], max_results: int = DEFAULT_MAX_RESULTS) -> List[Finding]:
    """
    Sort, deduplicate and cap findings.

    The sort is stable, so findings of equal severity keep their merge
    order, and the first (most severe) instance of a duplicate key wins.
    """
    if max_results < 0:
        raise ValueError(f"max_results must be non-negative, got {max_results}")

    ordered = sorted(findings, key=lambda f: f.severity.rank)

    unique: List[Finding] = []
    seen = set()
    for finding in ordered:
        key = dedup_key(finding)
        if key not in seen:
            seen.add(key)
            unique.append(finding)

    return unique[:max_results]
