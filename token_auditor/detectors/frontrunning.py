"""
Front-Running Detectors
"""

import re

from ..patterns import Severity
from .base import Verdict, rule

BLOCK_PROPERTIES = rule(
    'frontrunning.block_properties',
    risky=re.compile(r'(block\.(timestamp|number|difficulty|coinbase|gaslimit|basefee|hash))'),
    verdict=Verdict(
        name='Front-Running Risk: Block Properties Used in Calculations',
        severity=Severity.MEDIUM,
        explanation='The contract uses block properties in calculations that may be manipulated by miners.',
        impact='Vulnerable to miner front-running and manipulation of block properties to gain advantage.',
        recommendation='Avoid using block properties for critical calculations. Use oracles or commit-reveal schemes.',
    ),
)

MISSING_TRANSACTION_GUARDS = rule(
    'frontrunning.missing_guards',
    risky=re.compile(r'swap|trade|buy|sell'),
    safe_contexts=['deadline', 'minOutput', 'maxSlippage'],
    verdict=Verdict(
        name='Front-Running Risk: Missing Transaction Guards',
        severity=Severity.HIGH,
        explanation='Trading or swap functions lack front-running protections like deadlines or slippage controls.',
        impact='Transactions can be front-run by MEV bots or miners, causing users to receive worse execution prices.',
        recommendation='Implement deadline parameters, minimum output amounts, and maximum slippage tolerances.',
    ),
    snippet=re.compile(r'(function\s+(swap|trade|buy|sell))'),
)

FIRST_DEPOSITOR = rule(
    'frontrunning.first_depositor',
    risky=re.compile(r'function\s+deposit[\s\S]{0,500}totalSupply[\s\S]{0,100}==\s*0'),
    verdict=Verdict(
        name='Front-Running Risk: First-Depositor Attack',
        severity=Severity.MEDIUM,
        explanation='Special logic for the first deposit/mint may be vulnerable to front-running attacks.',
        impact='Attackers can front-run the first deposit with a minimal amount to gain disproportionate control.',
        recommendation='Initialize contracts with a minimal liquidity from a trusted source or use a different approach.',
    ),
)
