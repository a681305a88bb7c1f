"""
Solidity Source Scanner

Wraps one contract's source text with the primitives detectors are built
from: pattern tests, the context guard, snippet extraction and a few
structural helpers (pragma version, contract names).
"""

import re
from typing import Iterable, List, Optional, Tuple

from .patterns import PatternLike, contains, contains_any, find, find_all

# Characters of context taken on each side of a match.
SNIPPET_RADIUS = 100

_PRAGMA_VERSION = re.compile(r'pragma\s+solidity\s*[\^>=<~]*\s*(\d+)\.(\d+)')
_CONTRACT_DECL = re.compile(r'(?:abstract\s+contract|contract|interface|library)\s+(\w+)')


def extract_snippet(source: str, pattern: PatternLike, radius: int = SNIPPET_RADIUS) -> str:
    """
    Return the source around the first match of pattern.

    The window spans `radius` characters either side of the match and is
    cut back to the first and last newline it contains, then stripped.
    An empty string means no match.
    """
    match = find(source, pattern)
    if match is None:
        return ""

    start = max(0, match.start() - radius)
    end = min(len(source), match.end() + radius)
    window = source[start:end]

    first_newline = window.find('\n')
    last_newline = window.rfind('\n')
    line_start = 0 if first_newline == -1 else first_newline
    line_end = len(window) if last_newline == -1 else last_newline

    return window[line_start:line_end].strip()


class SourceScanner:
    """Read-only view over a contract's source text."""

    def __init__(self, source: str):
        self.source = source

    def contains(self, pattern: PatternLike) -> bool:
        return contains(self.source, pattern)

    def contains_any(self, patterns: Iterable[PatternLike]) -> bool:
        return contains_any(self.source, patterns)

    def find(self, pattern: PatternLike):
        return find(self.source, pattern)

    def find_all(self, pattern: PatternLike) -> List[str]:
        return find_all(self.source, pattern)

    def is_risky_in_context(self, risky: PatternLike, safe_contexts: Iterable[PatternLike]) -> bool:
        """
        True when `risky` occurs and none of `safe_contexts` occurs.

        Suppression is whole-source: a safe marker anywhere in the file
        silences the risky pattern everywhere else.
        """
        if not self.contains(risky):
            return False
        for safe in safe_contexts:
            if self.contains(safe):
                return False
        return True

    def snippet(self, pattern: PatternLike) -> str:
        return extract_snippet(self.source, pattern)

    def solidity_version(self) -> Optional[Tuple[int, int]]:
        """(major, minor) from the first pragma statement."""
        match = _PRAGMA_VERSION.search(self.source)
        if match:
            return (int(match.group(1)), int(match.group(2)))
        return None

    def is_solidity_08_plus(self) -> bool:
        """Check if code uses Solidity 0.8.0 or higher (checked arithmetic)."""
        version = self.solidity_version()
        if version:
            major, minor = version
            return major >= 1 or (major == 0 and minor >= 8)
        return False

    def contract_names(self) -> List[str]:
        return _CONTRACT_DECL.findall(self.source)
