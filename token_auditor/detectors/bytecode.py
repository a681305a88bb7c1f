"""
Deployed-Bytecode Heuristics

These read AuditContext.bytecode rather than the source. An empty string
means the bytecode was never fetched and the whole family stays silent;
"0x" means the address holds no code, which short-circuits the other
checks.
"""

from ..models import EMPTY_BYTECODE
from ..patterns import Severity
from .base import Verdict, detector

# Hex-string length below which deployed code is treated as a likely proxy.
MINIMAL_BYTECODE_LENGTH = 1000
HIDDEN_ASSEMBLY_FINGERPRINT = '39509556'


def _has_deployed_code(context) -> bool:
    return context.has_bytecode and context.bytecode != EMPTY_BYTECODE


@detector('bytecode.not_deployed')
def detect_not_deployed(context, scanner):
    if not context.is_empty_contract:
        return []

    return [Verdict(
        name='Contract Not Deployed or Self-Destructed',
        severity=Severity.CRITICAL,
        explanation='The contract is either not deployed or has been self-destructed.',
        impact='All contract functionality is unavailable.',
        recommendation='Verify the contract address and deployment status.',
    ).to_finding('')]


@detector('bytecode.minimal_proxy')
def detect_minimal_bytecode(context, scanner):
    if not _has_deployed_code(context):
        return []
    if len(context.bytecode) >= MINIMAL_BYTECODE_LENGTH or scanner.contains('selfdestruct'):
        return []

    return [Verdict(
        name='Possible Proxy Contract',
        severity=Severity.INFORMATIONAL,
        explanation='This contract has minimal bytecode and may be a proxy to another implementation contract.',
        impact='Actual implementation logic may be located in another contract.',
        recommendation='Analyze the implementation contract for a complete security assessment.',
    ).to_finding(scanner.source[:200] + '...')]


@detector('bytecode.hidden_assembly')
def detect_hidden_assembly(context, scanner):
    if not _has_deployed_code(context):
        return []
    if HIDDEN_ASSEMBLY_FINGERPRINT not in context.bytecode or scanner.contains('assembly'):
        return []

    return [Verdict(
        name='Hidden Assembly Code',
        severity=Severity.HIGH,
        explanation='The contract bytecode contains assembly operations not evident in the source code.',
        impact='Potential for hidden functionality not visible in source code review.',
        recommendation='Verify all source code has been provided and check for obfuscated logic.',
    ).to_finding('')]
