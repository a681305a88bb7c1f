"""
Integer-Safety Detectors

Overflow checks only matter before Solidity 0.8, which made arithmetic
checked by default; narrowing casts truncate silently in every version.
"""

import re

from ..patterns import Severity
from .base import Verdict, detector

SAFE_MATH_MARKERS = (
    'using SafeMath',
    'import "@openzeppelin/contracts/utils/math/SafeMath.sol"',
)

_ARITHMETIC = re.compile(r'([\w.]+\s*[+\-*]\s*[\w.]+)')
_NARROWING_CAST = re.compile(r'uint\d+\([a-zA-Z0-9_.]+\)')
_SMALL_UINT_DECLARATION = re.compile(r'(uint8|uint16)\s+[a-zA-Z0-9_]+')

SMALL_UINT_THRESHOLD = 5


def _unchecked_arithmetic(scanner) -> bool:
    """Pre-0.8 pragma and no SafeMath in sight."""
    if scanner.solidity_version() is None or scanner.is_solidity_08_plus():
        return False
    return not scanner.contains_any(SAFE_MATH_MARKERS)


@detector('arithmetic.overflow')
def detect_overflow(context, scanner):
    if not _unchecked_arithmetic(scanner) or not scanner.contains(_ARITHMETIC):
        return []

    return [Verdict(
        name='Integer Overflow/Underflow Risk',
        severity=Severity.HIGH,
        explanation='The contract uses arithmetic operations without SafeMath protection in a Solidity '
                    'version < 0.8.0.',
        impact='Vulnerable to integer overflow/underflow attacks, which can lead to unexpected behavior or fund loss.',
        recommendation='Use SafeMath for all arithmetic operations or upgrade to Solidity 0.8.0 or later.',
    ).to_finding(scanner.snippet(_ARITHMETIC))]


@detector('arithmetic.unsafe_cast')
def detect_unsafe_cast(context, scanner):
    if not scanner.contains(_NARROWING_CAST):
        return []

    return [Verdict(
        name='Integer Overflow Risk: Unsafe Type Casting',
        severity=Severity.MEDIUM,
        explanation='The contract performs unsafe type casting between integer types.',
        impact='Could lead to truncation and unexpected values if the source value exceeds the target type range.',
        recommendation='Use safe casting libraries like SafeCast from OpenZeppelin or add manual validation.',
    ).to_finding(scanner.snippet(_NARROWING_CAST))]


@detector('arithmetic.small_integers')
def detect_small_integers(context, scanner):
    declarations = scanner.find_all(_SMALL_UINT_DECLARATION)
    if len(declarations) <= SMALL_UINT_THRESHOLD or not _unchecked_arithmetic(scanner):
        return []

    return [Verdict(
        name='Integer Overflow Risk: Excessive Use of Small Integers',
        severity=Severity.LOW,
        explanation='The contract uses multiple small integer types (uint8, uint16) which can overflow more easily.',
        impact='Increased risk of overflow in arithmetic operations involving these small integer types.',
        recommendation='Consider using larger integer types or ensure proper overflow protection.',
    ).to_finding('\n'.join(declarations[:3]))]
