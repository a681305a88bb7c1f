"""
Detector Families

Importing this package registers every detector. Family modules are
imported in report order; within a module, detectors register in
declaration order.
"""

from . import (  # noqa: F401
    rugpull,
    minting,
    honeypot,
    access_control,
    reentrancy,
    arithmetic,
    external_calls,
    bytecode,
    secrets,
    gas,
    frontrunning,
    proxy,
)
from .base import (
    ContextRule,
    Detector,
    Verdict,
    all_detectors,
    get_detector,
    select_detectors,
)

FAMILIES = (
    "rugpull",
    "minting",
    "honeypot",
    "access_control",
    "reentrancy",
    "arithmetic",
    "external_calls",
    "bytecode",
    "secrets",
    "gas",
    "frontrunning",
    "proxy",
)


def context_rules():
    """The declarative rule table, in registration order."""
    return tuple(d.rule for d in all_detectors() if d.rule is not None)


__all__ = [
    "ContextRule",
    "Detector",
    "Verdict",
    "FAMILIES",
    "all_detectors",
    "context_rules",
    "get_detector",
    "select_detectors",
]
