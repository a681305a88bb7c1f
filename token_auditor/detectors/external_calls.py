"""
Unchecked External Call Detectors
"""

import re

from ..patterns import Severity
from .base import Verdict, detector, rule

UNCHECKED_TRANSFER = rule(
    'external_calls.unchecked_transfer',
    risky='.transfer(',
    safe_contexts=['require('],
    verdict=Verdict(
        name='Unchecked Transfer Call',
        severity=Severity.MEDIUM,
        explanation='The contract uses .transfer() without checking the result.',
        impact='While .transfer() throws on failure, lack of proper error handling may cause unexpected behavior.',
        recommendation='Add try/catch or proper error handling around transfer calls.',
    ),
    snippet=re.compile(r'[a-zA-Z0-9_]+\.transfer\([^;]*\);'),
)

_UNCHECKED_SEND = re.compile(r'[a-zA-Z0-9_]+\.send\([^;]*\);(?!\s*require)')
_UNCHECKED_CALL = re.compile(r'[a-zA-Z0-9_]+\.call(\{[^}]*\})?\([^;]*\);(?!\s*(require|if))')
# A call expression not followed by `;`, a comparison or a compound assignment.
_IGNORED_RETURN = re.compile(r'([a-zA-Z0-9_]+\([^)]*\))(?!\s*(;|==|!=|>=|<=|\+=|-=|\*=|/=))')


@detector('external_calls.unchecked_send')
def detect_unchecked_send(context, scanner):
    match = scanner.find(_UNCHECKED_SEND)
    if match is None:
        return []

    return [Verdict(
        name='Unchecked Send Result',
        severity=Severity.HIGH,
        explanation='The contract uses .send() without checking the boolean return value.',
        impact='Failed sends will not revert the transaction, potentially leaving the contract in an '
               'inconsistent state.',
        recommendation='Always check the return value of .send() with require() or use .transfer() instead.',
    ).to_finding(match.group(0))]


@detector('external_calls.unchecked_call')
def detect_unchecked_call(context, scanner):
    match = scanner.find(_UNCHECKED_CALL)
    if match is None:
        return []

    return [Verdict(
        name='Unchecked Low-Level Call',
        severity=Severity.HIGH,
        explanation='The contract uses low-level .call() without checking the return value.',
        impact='Failed calls will not revert the transaction, potentially leading to silent failures and '
               'unexpected state.',
        recommendation='Always check the return value of low-level calls with require() or if statements.',
    ).to_finding(match.group(0))]


@detector('external_calls.unused_return')
def detect_unused_return(context, scanner):
    match = scanner.find(_IGNORED_RETURN)
    if match is None:
        return []

    return [Verdict(
        name='Potential Unused Return Values',
        severity=Severity.LOW,
        explanation='The contract may have calls to functions that return values which are not used.',
        impact='Ignoring return values might miss critical information leading to unexpected behavior.',
        recommendation='Ensure all return values from function calls are properly checked and handled.',
    ).to_finding(scanner.snippet(match.group(0)))]
