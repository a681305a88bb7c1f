"""
Minting / Supply Detectors
"""

import re

from ..patterns import Severity
from .base import Verdict, detector, rule

MINT_DISABLE = rule(
    'minting.mint_disable',
    risky=re.compile(r'(mintingFinished|mint.*Enabled\s*=\s*false|mint.*Enabled\s*==\s*true)'),
    safe_contexts=[
        'initialSupply',
        'INITIAL_SUPPLY',
        'MAX_SUPPLY',
        'maxSupply',
        re.compile(r'cap\s*=\s*[0-9]+'),
        re.compile(r'CAP\s*=\s*[0-9]+'),
    ],
    verdict=Verdict(
        name='Mint Control Mechanism',
        severity=Severity.MEDIUM,
        explanation='The contract allows minting to be disabled.',
        impact='If minting is disabled before all tokens are minted, it may prevent proper distribution.',
        recommendation='Ensure minting cannot be disabled until all planned distribution is complete.',
    ),
)


_SUPPLY_CAP = re.compile(r'(maxSupply|MAX_SUPPLY|totalSupply\s*\+\s*amount\s*<=|cap\s*=|CAP\s*=)')
# Header plus the body up to the first closing brace.
_MINT_FUNCTION = re.compile(r'function\s+mint[^{]*\{[^}]*')
_MINT_ACCESS_GUARD = re.compile(r'(require|onlyOwner|onlyMinter|onlyRole)', re.IGNORECASE)


def _grade_unlimited_mint(scanner):
    guarded = any(
        _MINT_ACCESS_GUARD.search(m) for m in scanner.find_all(_MINT_FUNCTION)
    )
    if guarded:
        return Verdict(
            name='Uncapped Minting with Access Controls',
            severity=Severity.MEDIUM,
            explanation='The contract allows token minting without a maximum supply cap.'
                        ' However, minting is restricted to privileged roles.',
            impact='Privileged roles can mint tokens beyond expected supply, potentially causing inflation.',
            recommendation='Implement a maximum supply cap that cannot be exceeded.',
        )
    return Verdict(
        name='Unlimited Minting Risk',
        severity=Severity.CRITICAL,
        explanation='The contract allows token minting without a maximum supply cap.',
        impact='The owner can mint infinite tokens, causing severe inflation and devaluing existing tokens.',
        recommendation='Implement a maximum supply cap that cannot be exceeded.',
    )


UNLIMITED_MINT = rule(
    'minting.unlimited_mint',
    risky=re.compile(r'function\s+mint'),
    safe_contexts=[_SUPPLY_CAP],
    severity_rule=_grade_unlimited_mint,
)


DIRECT_SUPPLY_MANIPULATION = rule(
    'minting.direct_supply_manipulation',
    risky=re.compile(r'(totalSupply\s*=|totalSupply\s*\+=|totalSupply\s*\-=)'),
    safe_contexts=[
        'constructor',
        'initialize',
        re.compile(r'function\s+mint'),
        re.compile(r'function\s+burn'),
    ],
    verdict=Verdict(
        name='Direct Supply Manipulation',
        severity=Severity.HIGH,
        explanation='The contract allows direct manipulation of the total supply variable outside of '
                    'standard mint/burn functions.',
        impact='The token supply can be changed arbitrarily, potentially causing inflation or deflation attacks.',
        recommendation='Total supply should only change through minting and burning functions with proper controls.',
    ),
)


_OWNER_ONLY_FUNCTION = re.compile(r'function\s+[a-zA-Z0-9_]+\s*\([^)]*\)\s*(external|public)\s+onlyOwner')
_SUPPLY_WORDS = ('mint', 'burn', 'Mint', 'Burn')
_CANONICAL_SUPPLY_FUNCTIONS = ('function mint', 'function burn', 'function mintTo', 'function burnFrom')


@detector('minting.excess_supply_functions')
def detect_excess_supply_functions(context, scanner):
    privileged = scanner.find_all(_OWNER_ONLY_FUNCTION)
    non_standard = [
        header for header in privileged
        if any(word in header for word in _SUPPLY_WORDS)
        and not any(canonical in header for canonical in _CANONICAL_SUPPLY_FUNCTIONS)
    ]

    if len(non_standard) <= 2:
        return []

    return [Verdict(
        name='Multiple Supply-Altering Functions',
        severity=Severity.MEDIUM,
        explanation=f'The contract contains {len(non_standard)} different privileged mint/burn functions '
                    'beyond standard ones.',
        impact='Multiple ways to alter token supply increases the attack surface and audit complexity.',
        recommendation='Simplify and consolidate supply-altering functions to reduce risk.',
    ).to_finding('\n...\n'.join(non_standard[:3]))]
