"""
Source Preconditions and Explorer Encodings

Block explorers return verified source in one of three shapes:
- flattened Solidity text
- a JSON object mapping file names to source strings
- a standard-json-input document, usually wrapped in an extra pair of
  braces: {{"language": "Solidity", "sources": {path: {"content": ...}}}}

normalize_source() reduces all of them to the main contract's Solidity
text; ensure_solidity_source() is the precondition every audit checks.
"""

import json
import logging
import re

logger = logging.getLogger(__name__)

_DECLARATION = re.compile(r'\b(contract|interface|library)\s+[A-Za-z_][A-Za-z0-9_]*')

# Where to start slicing when the JSON cannot be decoded.
_SOLIDITY_STARTS = (
    re.compile(r'pragma\s+solidity\s+[\^<>=0-9.\s]+;'),
    re.compile(r'contract\s+[a-zA-Z0-9_]+\s*\{'),
    re.compile(r'interface\s+[a-zA-Z0-9_]+\s*\{'),
    re.compile(r'library\s+[a-zA-Z0-9_]+\s*\{'),
)


class MalformedSourceError(ValueError):
    """Source text that cannot be confirmed to be a Solidity contract."""


def looks_like_solidity(source: str) -> bool:
    if not source or not source.strip():
        return False
    return 'pragma' in source or _DECLARATION.search(source) is not None


def ensure_solidity_source(source: str) -> str:
    if not looks_like_solidity(source):
        raise MalformedSourceError(
            "The source code does not appear to be valid Solidity code. "
            "It must contain a pragma or a contract/interface/library declaration."
        )
    return source


def _main_source_from_json(parsed) -> str:
    if not isinstance(parsed, dict):
        return ""

    sources = parsed.get("sources")
    if isinstance(sources, dict) and sources:
        first = next(iter(sources.values()))
        if isinstance(first, dict):
            return first.get("content", "")
        return first if isinstance(first, str) else ""

    for value in parsed.values():
        if isinstance(value, dict) and isinstance(value.get("content"), str):
            value = value["content"]
        if isinstance(value, str) and 'contract' in value:
            return value
    return ""


def _slice_from_solidity_start(raw: str) -> str:
    for pattern in _SOLIDITY_STARTS:
        match = pattern.search(raw)
        if match:
            return raw[match.start():]
    return raw


def normalize_source(raw: str) -> str:
    """
    Return the main Solidity source from an explorer SourceCode field.

    Raises MalformedSourceError if nothing recognisable as Solidity is left.
    """
    source = raw.strip()

    if source.startswith('{') and source.endswith('}'):
        candidate = source
        if candidate.startswith('{{') and candidate.endswith('}}'):
            candidate = candidate[1:-1]

        try:
            extracted = _main_source_from_json(json.loads(candidate))
        except json.JSONDecodeError as e:
            logger.warning("Failed to parse JSON-encoded source code: %s", e)
            extracted = ""

        source = extracted or _slice_from_solidity_start(source)

    return ensure_solidity_source(source)
