"""
Proxy / Storage-Layout Detectors

Every check in this family is skipped unless the source shows proxy or
upgradeability markers.
"""

import re

from ..patterns import Severity
from .base import Verdict, detector

PROXY_MARKERS = ('delegatecall', 'upgradeability', 'Proxy', '_implementation', 'Upgradeable')

_UPGRADEABLE_CONTRACT = re.compile(r'\bcontract\s+[a-zA-Z0-9_]+\s+is\s+[^{]*Upgradeable')
_STORAGE_DECLARATION = re.compile(r'\s+(uint|int|address|bool|bytes|string)[\s\[\]0-9]*\s+[a-zA-Z0-9_]+;')
_INITIALIZE = re.compile(r'function\s+initialize[a-zA-Z0-9_]*\s*\(')


def is_proxy(scanner) -> bool:
    return scanner.contains_any(PROXY_MARKERS)


@detector('proxy.storage_collision')
def detect_storage_collision(context, scanner):
    if not is_proxy(scanner) or not scanner.contains(_UPGRADEABLE_CONTRACT):
        return []

    declarations = [d.strip() for d in scanner.find_all(_STORAGE_DECLARATION)]
    if not declarations:
        return []

    return [Verdict(
        name='Proxy Contract Risk: Potential Storage Collision',
        severity=Severity.HIGH,
        explanation='The upgradeable contract defines storage variables that may collide with the base implementation.',
        impact='Storage collisions can corrupt data or cause unexpected behavior after contract upgrades.',
        recommendation="Use OpenZeppelin's upgradeable contracts pattern with storage gaps or EIP-2535 Diamond pattern.",
    ).to_finding('\n'.join(declarations[:3]))]


@detector('proxy.unprotected_initializer')
def detect_proxy_initializer(context, scanner):
    if not is_proxy(scanner):
        return []
    if not scanner.contains('function initialize') or scanner.contains('initializer'):
        return []

    return [Verdict(
        name='Proxy Contract Risk: Unprotected Initializer',
        severity=Severity.CRITICAL,
        explanation='The initialize function in the proxy/implementation contract lacks the initializer modifier.',
        impact='The contract can be reinitialized after deployment, potentially allowing attackers to reset the '
               'contract state.',
        recommendation='Add the initializer modifier to the initialize function to prevent multiple initializations.',
    ).to_finding(scanner.snippet(_INITIALIZE))]


@detector('proxy.delegatecall')
def detect_delegatecall(context, scanner):
    if not is_proxy(scanner) or not scanner.contains('delegatecall('):
        return []

    return [Verdict(
        name='Proxy Contract Risk: Delegatecall Usage',
        severity=Severity.HIGH,
        explanation='The contract uses delegatecall which executes code in the context of the calling contract.',
        impact="Improper use of delegatecall can allow attackers to modify the proxy's storage or behavior "
               "unexpectedly.",
        recommendation='Ensure delegatecall target addresses are strictly validated and implement proper access '
                       'controls.',
    ).to_finding(scanner.snippet('delegatecall('))]
