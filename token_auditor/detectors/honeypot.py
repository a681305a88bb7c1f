"""
Honeypot / Trading-Restriction Detectors

Mechanisms that let holders buy but not sell: trading switches, punitive
taxes, whitelists and owner-only transfer paths.
"""

import re

from ..patterns import Severity
from .base import Verdict, detector, rule

_TRADING_SWITCH = re.compile(r'(canTrade|tradingEnabled|trading[A-Z][a-zA-Z0-9]*Enabled)')

_TRADING_TIME_BOUNDS = (
    re.compile(r'tradingEnabled\s*=\s*true\s*;'),
    re.compile(r'setTimeout'),
    re.compile(r'after\s*\(\s*[0-9]+\s*\)'),
)


def _grade_trading_restriction(scanner):
    if scanner.contains_any(_TRADING_TIME_BOUNDS):
        return Verdict(
            name='Temporary Trading Restrictions',
            severity=Severity.MEDIUM,
            explanation='The contract contains mechanisms to temporarily enable/disable trading.',
            impact='Users may be unable to sell tokens during an initial period, which could be legitimate '
                   'for launch mechanics.',
            recommendation='Ensure trading restrictions have a reasonable time limit and cannot be extended '
                           'arbitrarily.',
        )
    return Verdict(
        name='Trading Restriction Mechanism',
        severity=Severity.HIGH,
        explanation='The contract contains mechanisms to enable/disable trading.',
        impact='Users may be unable to sell tokens if trading is disabled by the owner.',
        recommendation='Remove trading restriction mechanisms or add time-locks with proper governance.',
    )


TRADING_RESTRICTION = rule(
    'honeypot.trading_restriction',
    risky=_TRADING_SWITCH,
    safe_contexts=[
        'launchTime',
        'startTime',
        'LAUNCH_TIME',
        'START_TIME',
        re.compile(r'block\.timestamp\s*[<>]=?\s*[a-zA-Z0-9_]+'),
        'tradingEnabledForever',
    ],
    severity_rule=_grade_trading_restriction,
)


_FEE_ASSIGNMENT = re.compile(r'(\w+)(Fee|Tax)\s*=\s*(\d+)')
_LEGITIMATE_FEE_USES = ('liquidity', 'marketing', 'charity', 'development', 'ecosystem')

MODERATE_TAX = 5
HIGH_TAX = 10
EXCESSIVE_TAX = 20


@detector('honeypot.transaction_tax')
def detect_transaction_tax(context, scanner):
    highest_tax = 0
    highest_match = ''
    for match in re.finditer(_FEE_ASSIGNMENT, scanner.source):
        value = int(match.group(3))
        if value > highest_tax:
            highest_tax = value
            highest_match = match.group(0)

    if highest_tax <= MODERATE_TAX:
        return []

    if highest_tax > EXCESSIVE_TAX:
        legitimate = scanner.contains_any(_LEGITIMATE_FEE_USES)
        name = 'Excessive Transaction Fee'
        severity = Severity.HIGH if legitimate else Severity.CRITICAL
        level = 'very high'
        impact = ('Users will lose a significant portion of their funds when making transactions, '
                  'potentially creating a honeypot.')
        recommendation = 'Reduce transaction fee to a reasonable level (typically under 10%).'
    else:
        name = 'High Transaction Fee' if highest_tax > HIGH_TAX else 'Transaction Fee Mechanism'
        severity = Severity.MEDIUM
        level = 'high' if highest_tax > HIGH_TAX else 'moderate'
        impact = ('Users will pay fees on transactions, which may be used for legitimate purposes like '
                  'liquidity, marketing, etc.')
        recommendation = 'Ensure fee distribution is transparent and serves a legitimate purpose.'

    return [Verdict(
        name=name,
        severity=severity,
        explanation=f'The contract implements a {level} transaction fee ({highest_tax}%).',
        impact=impact,
        recommendation=recommendation,
    ).to_finding(scanner.snippet(highest_match))]


_WHITELIST_LAUNCH_FRAMING = ('presale', 'preSale', 'ICO', 'initialOffering', 'launch', 'antiBot')


def _grade_transfer_whitelist(scanner):
    if scanner.contains_any(_WHITELIST_LAUNCH_FRAMING):
        return Verdict(
            name='Transfer Whitelist Mechanism',
            severity=Severity.MEDIUM,
            explanation='The contract restricts token transfers to whitelisted addresses only, which may be '
                        'for a legitimate purpose like presale or launch protection.',
            impact='Some users may be unable to transfer tokens during specific periods, which could be '
                   'legitimate for launch mechanics.',
            recommendation='Ensure whitelist restrictions have a clear purpose and timeline for removal.',
        )
    return Verdict(
        name='Restrictive Transfer Whitelist',
        severity=Severity.HIGH,
        explanation='The contract restricts token transfers to whitelisted addresses only.',
        impact='Regular users may be unable to sell tokens if they are not whitelisted.',
        recommendation='Remove transfer whitelist or ensure all legitimate users are automatically whitelisted.',
    )


TRANSFER_WHITELIST = rule(
    'honeypot.transfer_whitelist',
    risky=re.compile(r'function\s+(transfer|transferFrom)[\s\S]{0,1000}require\([^)]*whitelist'),
    severity_rule=_grade_transfer_whitelist,
)


def _grade_owner_transfer_rules(scanner):
    fee_exemption = (
        (scanner.contains('fee') and scanner.contains('exclude'))
        or (scanner.contains('tax') and scanner.contains('exempt'))
    )
    if fee_exemption:
        return Verdict(
            name='Special Transfer Rules for Privileged Addresses',
            severity=Severity.MEDIUM,
            explanation='The transfer functions have special rules for the owner or specific addresses, '
                        'which may be for fee exemptions.',
            impact='Different transfer rules for privileged addresses could create unfair advantages but may '
                   'be legitimate for certain use cases.',
            recommendation='Ensure special rules are transparent and serve a legitimate purpose.',
        )
    return Verdict(
        name='Owner-Based Transfer Rules',
        severity=Severity.HIGH,
        explanation='The transfer functions have special rules for the owner or specific addresses.',
        impact='Different transfer rules may create a honeypot where only privileged addresses can sell.',
        recommendation='Ensure transfer rules are consistent for all users.',
    )


OWNER_TRANSFER_RULES = rule(
    'honeypot.owner_transfer_rules',
    risky=re.compile(r'function\s+(transfer|transferFrom)[\s\S]{0,500}if\s*\(\s*[^)]*[=!]=\s*owner'),
    severity_rule=_grade_owner_transfer_rules,
)


_ANTI_BOT_SUNSET = (
    re.compile(r'antiBot.*=\s*false'),
    'setTimeout',
    re.compile(r'block\.timestamp\s*[<>]=?\s*[a-zA-Z0-9_]+'),
)


def _grade_anti_bot(scanner):
    if scanner.contains_any(_ANTI_BOT_SUNSET):
        return Verdict(
            name='Temporary Anti-Bot Mechanism',
            severity=Severity.LOW,
            explanation='The contract contains anti-bot mechanisms with time limitations.',
            impact='Anti-bot measures are temporary and likely used to protect the token launch from '
                   'front-running bots.',
            recommendation='Ensure anti-bot measures have a reasonable time limit and clear criteria.',
        )
    return Verdict(
        name='Anti-Bot Mechanism',
        severity=Severity.MEDIUM,
        explanation='The contract contains anti-bot mechanisms.',
        impact='Anti-bot measures could potentially be misused to prevent legitimate users from selling tokens.',
        recommendation='Review anti-bot implementation for potential abuse and ensure it has a sunset clause.',
    )


ANTI_BOT = rule(
    'honeypot.anti_bot',
    risky=re.compile(r'(antiBot|anti-bot|antiBotEnabled)'),
    severity_rule=_grade_anti_bot,
)
