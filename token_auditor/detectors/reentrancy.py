"""
Reentrancy Detectors
"""

import re

from ..patterns import Severity
from .base import Verdict, detector, rule

# Value transfer followed by an assignment in the next statement.
_CALL_THEN_ASSIGN = re.compile(
    r'(\.(transfer|send|call)(\{[^}]*\})?\s*\([^;]*\)[^;]*;\s*[^;]*\s*=\s*[^;]*;)'
)

STATE_AFTER_CALL = rule(
    'reentrancy.state_after_call',
    risky=_CALL_THEN_ASSIGN,
    verdict=Verdict(
        name='Reentrancy Vulnerability: State Update After External Call',
        severity=Severity.CRITICAL,
        explanation='The contract updates state variables after making external calls.',
        impact='Vulnerable to reentrancy attacks where the external call can reenter the function before '
               'state is updated.',
        recommendation='Follow the checks-effects-interactions pattern: update state before making external calls.',
    ),
)


_VALUE_TRANSFER = re.compile(r'\.transfer\(|\.send\(|\.call\{value:|\.call\.value\(')
_FUNCTION_WITH_VALUE_TRANSFER = re.compile(
    r'function\s+([a-zA-Z0-9_]+)\s*\([^)]*\)\s*(external|public)[^{]*\{\s*[^}]*'
    r'(\.transfer\(|\.send\(|\.call\{value:|\.call\.value\()'
)
_FUNCTION_WITH_ASSIGNMENT = re.compile(
    r'function\s+([a-zA-Z0-9_]+)\s*\([^)]*\)\s*(external|public)[^{]*\{\s*[^}]*(\s*=\s*)'
)

MISSING_GUARD = rule(
    'reentrancy.missing_guard',
    risky=_VALUE_TRANSFER,
    safe_contexts=['nonReentrant', 'reentrancyGuard'],
    verdict=Verdict(
        name='Reentrancy Risk: Missing Reentrancy Guard',
        severity=Severity.HIGH,
        explanation='The contract makes external calls without using a reentrancy guard.',
        impact='May be vulnerable to reentrancy attacks if proper precautions are not taken elsewhere.',
        recommendation='Implement a reentrancy guard using the nonReentrant modifier from OpenZeppelin or similar.',
    ),
    snippet=_FUNCTION_WITH_VALUE_TRANSFER,
)


@detector('reentrancy.cross_function')
def detect_cross_function_reentrancy(context, scanner):
    calling = list(_FUNCTION_WITH_VALUE_TRANSFER.finditer(scanner.source))
    if not calling:
        return []

    calling_names = {m.group(1) for m in calling}
    assigning_names = {m.group(1) for m in _FUNCTION_WITH_ASSIGNMENT.finditer(scanner.source)}
    # Needs a state-writing function other than a calling one, or a second caller.
    if not assigning_names or (assigning_names <= calling_names and len(calling_names) < 2):
        return []

    return [Verdict(
        name='Reentrancy Risk: Potential Cross-Function Reentrancy',
        severity=Severity.MEDIUM,
        explanation='The contract contains functions with external calls and separate functions that modify state.',
        impact='May be vulnerable to cross-function reentrancy if an attacker can call these functions in sequence.',
        recommendation='Apply reentrancy guards to all functions that make external calls or modify related state.',
    ).to_finding(calling[0].group(0))]
