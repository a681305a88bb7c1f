"""
Ownership / Rug-Pull Detectors

Owner powers that let a deployer walk away with funds or liquidity.
"""

import re

from ..patterns import Severity
from .base import Verdict, rule

_OWNERSHIP_TRANSFER = re.compile(r'(transferOwnership|newOwner|owner\s*=\s*_[a-zA-Z0-9]+)')

_OWNERSHIP_ZERO_ADDRESS_GUARDS = (
    'require(newOwner != address(0)',
    'require(_newOwner != address(0)',
    re.compile(r'require\(\s*[_a-zA-Z0-9]+\s*!=\s*address\(0\)\s*\)'),
)


def _grade_ownership_transfer(scanner):
    guarded = scanner.contains_any(_OWNERSHIP_ZERO_ADDRESS_GUARDS)
    return Verdict(
        name='Potential Ownership Transfer Risk',
        severity=Severity.MEDIUM if guarded else Severity.HIGH,
        explanation='The contract allows ownership transfers which could enable privileged operations.'
                    + (' Some basic safeguards are in place.' if guarded else ''),
        impact='A malicious actor who gains ownership can control critical contract functions.',
        recommendation='Consider using a multi-signature wallet, time-lock, or DAO for ownership management.',
    )


OWNERSHIP_TRANSFER = rule(
    'rugpull.ownership_transfer',
    risky=_OWNERSHIP_TRANSFER,
    safe_contexts=[
        'timelock',
        'TimeLock',
        'governance',
        'Governance',
        'multisig',
        'MultiSig',
        re.compile(r'require\(\s*delay\s*[><=]'),
        re.compile(r'require\(\s*block\.timestamp\s*[><=]'),
        re.compile(r'onlyRole\(GOVERNANCE_ROLE\)'),
        re.compile(r'onlyRole\(ADMIN_ROLE\)'),
    ],
    severity_rule=_grade_ownership_transfer,
    snippet=re.compile(r'(function transferOwnership|function setOwner|owner\s*=\s*_[a-zA-Z0-9]+)'),
)


# An owner-only, argument-less function that moves value within 500 chars.
_SUSPICIOUS_WITHDRAWAL = re.compile(
    r'function\s+([a-zA-Z0-9_]+)\s*\(\s*\)\s*(external|public)\s+onlyOwner'
    r'[\s\S]{1,500}(transfer\(|send\(|call\{value:|\.call\.value\()'
)

ALLOWED_WITHDRAWAL_NAMES = frozenset({'withdraw', 'rescue', 'emergencyWithdraw', 'recoverEth', 'claimFees'})


def _grade_hidden_withdrawal(scanner):
    match = scanner.find(_SUSPICIOUS_WITHDRAWAL)
    if match is None or match.group(1) in ALLOWED_WITHDRAWAL_NAMES:
        return None
    return Verdict(
        name='Potential Hidden Withdrawal Function',
        severity=Severity.HIGH,
        explanation='The contract contains owner-only functions that can withdraw funds with non-standard naming.',
        impact='The owner can potentially drain contract funds unexpectedly.',
        recommendation='Use clear function naming for withdrawal capabilities and implement time-locks or limits.',
    )


HIDDEN_WITHDRAWAL = rule(
    'rugpull.hidden_withdrawal',
    risky=_SUSPICIOUS_WITHDRAWAL,
    safe_contexts=['emergency', 'rescue', 'recover', 'fee', 'withdraw'],
    severity_rule=_grade_hidden_withdrawal,
)


_PRIVILEGED_GATES = ('onlyOwner', 'onlyAdmin', 'onlyRole')


def _grade_liquidity_removal(scanner):
    privileged = scanner.contains_any(_PRIVILEGED_GATES)
    return Verdict(
        name='Privileged Liquidity Removal' if privileged else 'Liquidity Removal Functionality',
        severity=Severity.HIGH if privileged else Severity.MEDIUM,
        explanation='The contract allows removal of DEX liquidity'
                    + (', restricted to privileged roles.' if privileged else '.'),
        impact='Investors could be affected if liquidity is removed unexpectedly.',
        recommendation='Liquidity should be locked or have a time delay with community notification.',
    )


LIQUIDITY_REMOVAL = rule(
    'rugpull.liquidity_removal',
    risky=re.compile(r'(removeLiquidity|remove[A-Z][a-zA-Z0-9]*Liquidity)'),
    safe_contexts=[
        'lock',
        'Lock',
        'timelock',
        'TimeLock',
        re.compile(r'require\(\s*block\.timestamp\s*>\s*[a-zA-Z0-9_]+\s*\)'),
    ],
    severity_rule=_grade_liquidity_removal,
    snippet=re.compile(r'(function\s+remove[A-Za-z]*Liquidity|removeLiquidity|removeLiquidityETH)'),
)


ADDRESS_RESTRICTION = rule(
    'rugpull.address_restriction',
    risky=re.compile(r'(blacklist|blocklist|_blacklisted|_blocklisted)'),
    safe_contexts=['antiBot', 'anti-bot', 'AntiBot', 'compliance', 'Compliance', 'sanction', 'Sanction'],
    verdict=Verdict(
        name='Address Restriction Functionality',
        severity=Severity.MEDIUM,
        explanation='The contract contains functionality that can restrict specific addresses from transacting.',
        impact='Specific users can be prevented from selling or transferring tokens.',
        recommendation='Ensure blacklist functionality has clear governance controls and transparent criteria for use.',
    ),
)
