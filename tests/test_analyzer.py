import re

from token_auditor.analyzer import SNIPPET_RADIUS, SourceScanner, extract_snippet


def test_extract_snippet_without_match_is_empty() -> None:
    assert extract_snippet("contract A {}", "selfdestruct") == ""


def test_extract_snippet_single_line_keeps_whole_window() -> None:
    assert extract_snippet("abc tx.origin def", "tx.origin") == "abc tx.origin def"


def test_extract_snippet_trims_to_newlines_inside_window() -> None:
    source = "line one\nuint x = a + b;\nline three\n"
    # The window starts at offset 0 but is still cut at its first newline.
    assert extract_snippet(source, "a + b") == "uint x = a + b;\nline three"


def test_extract_snippet_radius_limits_context() -> None:
    source = "a" * 300 + "\nfoo();\n" + "b" * 300
    assert extract_snippet(source, "foo()") == "foo();"
    assert SNIPPET_RADIUS == 100


def test_extract_snippet_accepts_regex() -> None:
    source = "contract A {\n    function kill() public {\n        selfdestruct(owner);\n    }\n}\n"
    snippet = extract_snippet(source, re.compile(r"selfdestruct\(\w+\)"))
    assert "selfdestruct(owner);" in snippet


def test_context_guard_requires_risky_pattern() -> None:
    scanner = SourceScanner("contract A { uint256 x; }")
    assert not scanner.is_risky_in_context("tx.origin", [])


def test_context_guard_without_safe_marker_is_risky() -> None:
    scanner = SourceScanner("require(tx.origin == owner);")
    assert scanner.is_risky_in_context("tx.origin", ["frontrun"])


def test_context_guard_suppresses_across_the_whole_source() -> None:
    source = (
        "contract A {\n"
        "    function a() public { require(tx.origin == owner); }\n"
        "}\n"
        "contract B {\n"
        "    // frontrun protection lives here\n"
        "}\n"
    )
    scanner = SourceScanner(source)
    assert not scanner.is_risky_in_context("tx.origin", ["block.coinbase", "frontrun"])


def test_solidity_version_detection() -> None:
    assert SourceScanner("pragma solidity ^0.7.6;").solidity_version() == (0, 7)
    assert not SourceScanner("pragma solidity ^0.7.6;").is_solidity_08_plus()

    modern = SourceScanner("pragma solidity >=0.8.0 <0.9.0;")
    assert modern.solidity_version() == (0, 8)
    assert modern.is_solidity_08_plus()


def test_missing_pragma_has_no_version() -> None:
    scanner = SourceScanner("contract A {}")
    assert scanner.solidity_version() is None
    assert not scanner.is_solidity_08_plus()


def test_contract_names() -> None:
    scanner = SourceScanner("abstract contract A {}\ncontract B is A {}\nlibrary L {}\n")
    assert scanner.contract_names() == ["A", "B", "L"]
