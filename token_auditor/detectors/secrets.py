"""
Hardcoded Address and Secret Detectors

Secret-shaped literals are reported with a redacted snippet so the report
never repeats the credential.
"""

import re

from ..patterns import Severity
from .base import Verdict, detector, rule

REDACTED = '-- Redacted for security --'

_ADDRESS_LITERAL = re.compile(r'(?<![a-fA-F0-9])0x[a-fA-F0-9]{40}(?![a-fA-F0-9])')


@detector('secrets.hardcoded_addresses')
def detect_hardcoded_addresses(context, scanner):
    own_address = context.contract_address.lower()
    addresses = []
    for literal in scanner.find_all(_ADDRESS_LITERAL):
        if literal.lower() != own_address and literal not in addresses:
            addresses.append(literal)

    if not addresses:
        return []

    return [Verdict(
        name='Hardcoded Ethereum Addresses',
        severity=Severity.MEDIUM,
        explanation=f'The contract contains {len(addresses)} hardcoded Ethereum addresses.',
        impact='Hardcoded addresses reduce contract flexibility and may pose issues if those addresses '
               'are compromised.',
        recommendation='Use configurable address parameters that can be set by governance instead of hardcoding.',
    ).to_finding(scanner.snippet(addresses[0]))]


PRIVATE_KEY = rule(
    'secrets.private_key',
    risky=re.compile(r'private\s+(key|KEY)[\s=]+["\']0x[a-fA-F0-9]{64}["\']'),
    verdict=Verdict(
        name='Critical Security Risk: Hardcoded Private Key',
        severity=Severity.CRITICAL,
        explanation='The contract contains what appears to be a hardcoded private key.',
        impact='Anyone with access to the source code can access the private key and gain complete control.',
        recommendation='Never hardcode private keys in contract code. Use secure external key management solutions.',
        code_snippet=REDACTED,
    ),
)

API_KEY = rule(
    'secrets.api_key',
    risky=re.compile(r'(secret|SECRET|api|API|key|KEY|apiKey|ApiKey)[\s=]+["\'][a-zA-Z0-9_\-+/=]{16,}["\']'),
    verdict=Verdict(
        name='Security Risk: Hardcoded API/Secret Key',
        severity=Severity.CRITICAL,
        explanation='The contract contains what appears to be a hardcoded API key, secret, or credential.',
        impact='Sensitive credentials in public blockchain code can be extracted and misused.',
        recommendation='Never store sensitive API keys or secrets in contract code. Use secure oracles or '
                       'off-chain solutions.',
        code_snippet=REDACTED,
    ),
)
