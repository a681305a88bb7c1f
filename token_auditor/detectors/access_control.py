"""
Access-Control Detectors

tx.origin authentication, self-destruct, emergency withdrawals and
initializers that anyone can call.
"""

import re

from ..patterns import Severity, contains_any
from .base import Verdict, detector, rule

_TX_ORIGIN_AUTH = (
    re.compile(r'require\s*\(\s*tx\.origin\s*=='),
    re.compile(r'if\s*\(\s*tx\.origin\s*=='),
    re.compile(r'tx\.origin\s*==\s*owner'),
)


def _grade_tx_origin(scanner):
    if scanner.contains_any(_TX_ORIGIN_AUTH):
        return Verdict(
            name='Unsafe Authentication Pattern: tx.origin',
            severity=Severity.HIGH,
            explanation='The contract uses tx.origin for authentication instead of msg.sender.',
            impact='Vulnerable to phishing attacks where a user calls a malicious contract that then calls '
                   'this contract.',
            recommendation='Use msg.sender instead of tx.origin for authentication.',
        )
    return Verdict(
        name='tx.origin Usage',
        severity=Severity.MEDIUM,
        explanation='The contract uses tx.origin which can be problematic in certain contexts.',
        impact='Potential security issues if tx.origin is used for critical logic.',
        recommendation='Review tx.origin usage and consider alternatives like msg.sender where appropriate.',
    )


TX_ORIGIN = rule(
    'access_control.tx_origin',
    risky='tx.origin',
    # MEV-protection framing
    safe_contexts=['block.coinbase', 'frontrun'],
    severity_rule=_grade_tx_origin,
)


_SELFDESTRUCT_FUNCTION = re.compile(
    r'function\s+[a-zA-Z0-9_]+\s*\([^)]*\)\s*(external|public)[^{]*\{\s*[^}]*(selfdestruct|suicide\()'
)
ACCESS_GUARDS = ('onlyOwner', 'require(', 'modifier', 'onlyRole')
_TIMELOCK_MARKERS = ('timelock', 'delay', re.compile(r'block\.timestamp\s*>\s*[a-zA-Z0-9_]+'))


@detector('access_control.selfdestruct')
def detect_selfdestruct(context, scanner):
    if not scanner.contains_any(('selfdestruct', 'suicide(')):
        return []

    match = scanner.find(_SELFDESTRUCT_FUNCTION)
    if match is None:
        return []

    function_text = match.group(0)
    snippet = scanner.snippet(_SELFDESTRUCT_FUNCTION) or function_text.strip()

    if not contains_any(function_text, ACCESS_GUARDS):
        verdict = Verdict(
            name='Critical Risk: Unprotected Self-Destruct',
            severity=Severity.CRITICAL,
            explanation='The contract contains a selfdestruct function without access controls.',
            impact='Anyone can destroy the contract and withdraw its entire balance.',
            recommendation='Add proper access controls to selfdestruct functionality or remove it entirely.',
        )
    elif not contains_any(function_text, _TIMELOCK_MARKERS):
        verdict = Verdict(
            name='Self-Destruct Without Time-Lock',
            severity=Severity.HIGH,
            explanation='The contract contains a selfdestruct function with basic access controls but no '
                        'time-lock.',
            impact='Privileged roles can immediately destroy the contract without warning.',
            recommendation='Add a time-lock to selfdestruct functionality to allow users time to react.',
        )
    else:
        return []

    return [verdict.to_finding(snippet)]


_EMERGENCY_FUNCTION = re.compile(r'(emergencyWithdraw|withdrawAll|rescueTokens)')
_ROLE_GATES = ('onlyOwner', 'onlyAdmin', 'onlyRole')


def _grade_emergency_withdraw(scanner):
    gated = contains_any(scanner.snippet(_EMERGENCY_FUNCTION), _ROLE_GATES)
    if gated:
        return Verdict(
            name='Privileged Emergency Functions',
            severity=Severity.MEDIUM,
            explanation='The contract contains emergency withdrawal functions restricted to privileged roles.',
            impact='Privileged roles can withdraw funds from the contract without additional safeguards.',
            recommendation='Implement time-locks and multi-signature requirements for emergency functions.',
        )
    return Verdict(
        name='Unprotected Emergency Functions',
        severity=Severity.CRITICAL,
        explanation='The contract contains emergency withdrawal functions without proper access controls.',
        impact='Anyone can potentially drain funds from the contract.',
        recommendation='Add proper access controls and safeguards to emergency functions.',
    )


EMERGENCY_WITHDRAW = rule(
    'access_control.emergency_withdraw',
    risky=_EMERGENCY_FUNCTION,
    safe_contexts=[
        'timelock',
        'TimeLock',
        'multisig',
        'MultiSig',
        # multiple approvals
        re.compile(r'require\(\s*[a-zA-Z0-9_]+\.length\s*>\s*[0-9]+\s*\)'),
    ],
    severity_rule=_grade_emergency_withdraw,
)


_INITIALIZE_HEADER = re.compile(r'function\s+initialize[a-zA-Z0-9_]*\s*\([^)]*\)\s*(external|public)[^{;]*')
UPGRADEABLE_MARKERS = ('upgradeable', 'Upgradeable', 'proxy', 'Proxy', 'ERC1967')


@detector('access_control.initializer')
def detect_unprotected_initializer(context, scanner):
    if not scanner.contains_any(('initializer', 'function initialize')):
        return []

    match = scanner.find(_INITIALIZE_HEADER)
    if match is None:
        return []
    header = match.group(0)
    snippet = scanner.snippet(_INITIALIZE_HEADER)

    if scanner.contains_any(UPGRADEABLE_MARKERS):
        if contains_any(header, ('initializer', 'onlyOwner', 'onlyRole', 'onlyAdmin')):
            return []
        verdict = Verdict(
            name='Unprotected Initializer in Upgradeable Contract',
            severity=Severity.CRITICAL,
            explanation='The contract has an initializer function without proper access controls or '
                        'initializer modifier.',
            impact='The contract can be re-initialized by an attacker, potentially taking control of it.',
            recommendation='Add the "initializer" modifier or access control to all initialize functions.',
        )
    else:
        if contains_any(header, ('initializer', 'onlyOwner')):
            return []
        verdict = Verdict(
            name='Potentially Unprotected Initializer',
            severity=Severity.MEDIUM,
            explanation='The contract has an initialize function that may be unprotected.',
            impact='If this is an upgradeable contract, it could be vulnerable to re-initialization attacks.',
            recommendation='If this is an upgradeable contract, add the "initializer" modifier or access '
                           'control to all initialize functions.',
        )

    return [verdict.to_finding(snippet)]
