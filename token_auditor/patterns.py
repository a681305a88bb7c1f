"""
Severity Levels and Pattern Matching Primitives

Every detector speaks in terms of two things defined here:
- Severity: the closed, totally ordered set of finding grades
- patterns: either a literal substring or a compiled regular expression,
  matched against contract source text
"""

import re
from enum import Enum
from typing import List, Optional, Pattern, Tuple, Union


class Severity(Enum):
    CRITICAL = "Critical"
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"
    INFORMATIONAL = "Informational"

    @property
    def rank(self) -> int:
        """Position in SEVERITY_ORDER; 0 is the most severe."""
        return SEVERITY_ORDER.index(self)

    @classmethod
    def parse(cls, value: str) -> 'Severity':
        """Look up a severity by its display value, case-insensitively."""
        for severity in cls:
            if severity.value.lower() == value.strip().lower():
                return severity
        raise ValueError(f"Unknown severity: {value!r}")


# Single source of truth for ranking, most severe first.
SEVERITY_ORDER: Tuple[Severity, ...] = (
    Severity.CRITICAL,
    Severity.HIGH,
    Severity.MEDIUM,
    Severity.LOW,
    Severity.INFORMATIONAL,
)


# A literal substring or a compiled regex.
PatternLike = Union[str, Pattern]


def compile_pattern(pattern: PatternLike) -> Pattern:
    """Compile a pattern; plain strings are matched literally."""
    if isinstance(pattern, str):
        return re.compile(re.escape(pattern))
    return pattern


def find(source: str, pattern: PatternLike) -> Optional['re.Match']:
    """Return the first match of pattern in source, or None."""
    return compile_pattern(pattern).search(source)


def contains(source: str, pattern: PatternLike) -> bool:
    if isinstance(pattern, str):
        return pattern in source
    return pattern.search(source) is not None


def contains_any(source: str, patterns) -> bool:
    return any(contains(source, p) for p in patterns)


def find_all(source: str, pattern: PatternLike) -> List[str]:
    """Return the full text of every non-overlapping match, in order."""
    return [m.group(0) for m in compile_pattern(pattern).finditer(source)]
