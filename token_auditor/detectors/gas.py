"""
Gas-Optimization Detectors
"""

import re

from ..patterns import Severity
from .base import Verdict, detector, rule

STORAGE_IN_LOOP = rule(
    'gas.storage_in_loop',
    risky=re.compile(
        r'(for|while)[\s\S]{0,100}(?:=[\w\s.]{0,100}storage[\w\s.]{0,100}|storage[\w\s.]{0,100}=)'
    ),
    verdict=Verdict(
        name='Gas Optimization: Storage Operations in Loop',
        severity=Severity.MEDIUM,
        explanation='The contract performs storage operations within loops.',
        impact='High gas costs that could lead to block gas limit issues and expensive transactions.',
        recommendation='Cache storage variables to memory before the loop and update storage after the loop.',
    ),
)

UNBOUNDED_LOOP = rule(
    'gas.unbounded_loop',
    risky=re.compile(r'(for|while)[\s\S]{0,200}(\.length|msg\.sender)'),
    verdict=Verdict(
        name='Gas Optimization: Potentially Unbounded Loop',
        severity=Severity.MEDIUM,
        explanation='The contract contains loops that may iterate over unbounded arrays or collections.',
        impact='Could exceed block gas limits if the array/collection grows large enough, causing DoS.',
        recommendation='Implement pagination or limits on loop iterations to prevent gas-limit DoS.',
    ),
)

REPEATED_STORAGE = rule(
    'gas.repeated_storage',
    risky=re.compile(
        r'[\w\s.]{0,100}=[\w\s.]{0,100}storage[\w\s.]{0,50}[\s\S]{0,50}=[\w\s.]{0,100}storage[\w\s.]{0,100}'
    ),
    verdict=Verdict(
        name='Gas Optimization: Multiple Storage Operations',
        severity=Severity.LOW,
        explanation='The contract performs multiple storage operations that could be optimized.',
        impact='Higher than necessary gas costs for contract execution.',
        recommendation='Batch storage operations where possible and use memory variables for intermediate values.',
    ),
)

_ZERO_ADDRESS_CHECK = re.compile(r'require\s*\([^;]*address\(0(?:x0)?\)')


@detector('gas.zero_address')
def detect_missing_zero_address_check(context, scanner):
    if scanner.contains(_ZERO_ADDRESS_CHECK):
        return []

    return [Verdict(
        name='Missing Zero Address Validation',
        severity=Severity.LOW,
        explanation='The contract may not validate against zero address (0x0) inputs.',
        impact='Could lead to tokens or funds being sent to the zero address and permanently lost.',
        recommendation='Add require() checks to ensure critical address parameters are not the zero address.',
    ).to_finding('')]
