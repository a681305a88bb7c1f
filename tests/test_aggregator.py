import pytest

from token_auditor.aggregator import DEFAULT_MAX_RESULTS, aggregate, dedup_key
from token_auditor.models import Finding
from token_auditor.patterns import Severity


def make(name, severity, snippet="", explanation="e"):
    return Finding(name, severity, snippet, explanation, "impact", "recommendation")


def test_sorted_by_severity() -> None:
    findings = [
        make("low", Severity.LOW),
        make("critical", Severity.CRITICAL),
        make("info", Severity.INFORMATIONAL),
        make("medium", Severity.MEDIUM),
        make("high", Severity.HIGH),
    ]
    assert [f.name for f in aggregate(findings)] == ["critical", "high", "medium", "low", "info"]


def test_sort_is_stable_within_a_severity() -> None:
    findings = [make("b", Severity.MEDIUM), make("a", Severity.HIGH), make("c", Severity.MEDIUM), make("d", Severity.MEDIUM)]
    assert [f.name for f in aggregate(findings)] == ["a", "b", "c", "d"]


def test_duplicates_collapse_on_normalized_snippet() -> None:
    first = make("Same", Severity.HIGH, "a.transfer(x);\n    b = 1;", explanation="first")
    second = make("Same", Severity.HIGH, "a.transfer(x); b = 1;", explanation="second")
    result = aggregate([first, second])
    assert result == [first]


def test_dedup_key_uses_snippet_prefix_only() -> None:
    prefix = "x" * 100
    first = make("Same", Severity.LOW, prefix + "tail-one")
    second = make("Same", Severity.LOW, prefix + "tail-two")
    assert dedup_key(first) == dedup_key(second)
    assert len(aggregate([first, second])) == 1


def test_same_snippet_different_names_are_kept() -> None:
    findings = [make("One", Severity.LOW, "x = 1;"), make("Two", Severity.LOW, "x = 1;")]
    assert len(aggregate(findings)) == 2


def test_most_severe_duplicate_survives() -> None:
    weak = make("Same", Severity.LOW, "snippet")
    strong = make("Same", Severity.HIGH, "snippet")
    assert aggregate([weak, strong]) == [strong]


def test_cap_applies_after_sort_and_dedup() -> None:
    findings = [make(f"n{i}", Severity.LOW) for i in range(15)] + [make("top", Severity.CRITICAL)]
    result = aggregate(findings)
    assert len(result) == DEFAULT_MAX_RESULTS
    assert result[0].name == "top"


def test_zero_cap_and_empty_input() -> None:
    assert aggregate([make("a", Severity.HIGH)], max_results=0) == []
    assert aggregate([]) == []


def test_negative_cap_is_rejected() -> None:
    with pytest.raises(ValueError):
        aggregate([], max_results=-1)
