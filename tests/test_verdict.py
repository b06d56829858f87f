from __future__ import annotations

from datetime import datetime, timezone

from hypothesis import given
from hypothesis import strategies as st

from phylorefcheck.schemas import Specifier, StatusRecord
from phylorefcheck.verify.reconcile import reconcile
from phylorefcheck.verify.status import compute_expected_resolution
from phylorefcheck.verify.verdict import (
    NO_EXPECTED_RESOLUTION,
    NO_NODES_MATCHED,
    UNMATCHED_SPECIFIERS,
    classify,
)

T0 = datetime(2018, 1, 1, tzinfo=timezone.utc)
PREFIX = "http://example.org/jphyloref"
N1 = PREFIX + "#n1"
N2 = PREFIX + "#n2"
N3 = PREFIX + "#n3"
N4 = PREFIX + "#n4"
S1 = Specifier(id=PREFIX + "#s1", unmatched=True)


def _verdict(resolved, expected, records=(), unmatched=frozenset(), specifier_comments=()):
    expected_to_resolve, active = compute_expected_resolution(records)
    return classify(
        reconcile(resolved, expected),
        expected_to_resolve,
        active,
        unmatched,
        specifier_comments=specifier_comments,
        uri_prefix=PREFIX,
    )


def test_published_exact_match_passes_without_advisory() -> None:
    verdict = _verdict({N1}, {N1}, [StatusRecord(status="published", start=T0)])
    assert verdict.outcome == "PASS"
    assert verdict.comments == ("Expected nodes: [#n1]", "Resolved nodes: [#n1]")


def test_nothing_resolved_fails_even_with_unmatched_specifiers() -> None:
    verdict = _verdict(
        set(),
        set(),
        unmatched=frozenset({S1}),
        specifier_comments=("Specifier 's1' is marked as unmatched.",),
    )
    assert verdict.outcome == "FAIL"
    assert verdict.comments[0] == NO_NODES_MATCHED
    assert "Specifier 's1' is marked as unmatched." in verdict.comments


def test_draft_mismatch_is_expected_fail() -> None:
    verdict = _verdict({N2}, {N1}, [StatusRecord(status="draft", start=T0)])
    assert verdict.outcome == "EXPECTED_FAIL"
    assert verdict.directive == "TODO"
    assert "not expected to resolve" in verdict.reason
    assert f"Some nodes were resolved but were not expected: [<{N2}>]" in verdict.comments
    assert f"Some nodes were expected but were not resolved: [<{N1}>]" in verdict.comments


def test_mismatch_without_mitigation_fails() -> None:
    verdict = _verdict({N3}, {N4})
    assert verdict.outcome == "FAIL"
    assert verdict.reason is None
    assert f"Some nodes were resolved but were not expected: [<{N3}>]" in verdict.comments
    assert f"Some nodes were expected but were not resolved: [<{N4}>]" in verdict.comments


def test_unexpected_pass_carries_advisory() -> None:
    verdict = _verdict({N1}, {N1}, [StatusRecord(status="draft", start=T0)])
    assert verdict.outcome == "PASS"
    assert any("status should be changed to 'pso:submitted'" in c for c in verdict.comments)


def test_unmatched_specifier_reason_wins_over_status() -> None:
    verdict = _verdict(
        {N1, N2}, {N1}, [StatusRecord(status="draft", start=T0)], unmatched=frozenset({S1})
    )
    assert verdict.outcome == "EXPECTED_FAIL"
    assert verdict.reason == UNMATCHED_SPECIFIERS
    # Already a draft, so no inconsistency to flag.
    assert not any("should have a status of 'pso:draft'" in c for c in verdict.comments)


def test_unmatched_specifier_without_draft_status_is_flagged() -> None:
    verdict = _verdict(
        {N1, N2}, {N1}, [StatusRecord(status="submitted", start=T0)], unmatched=frozenset({S1})
    )
    assert verdict.outcome == "EXPECTED_FAIL"
    assert "specifiers did not match" in verdict.reason
    assert any("should have a status of 'pso:draft'" in c for c in verdict.comments)


def test_nothing_expected_is_not_testable() -> None:
    verdict = _verdict({N1}, set())
    assert verdict.outcome == "NOT_TESTABLE"
    assert verdict.directive == "SKIP"
    assert verdict.reason == NO_EXPECTED_RESOLUTION
    assert verdict.comments[1] == f"It resolved to the following 1 nodes: [<{N1}>]"


NODES = st.frozensets(st.sampled_from([N1, N2, N3, N4]), max_size=4)
STATUSES = st.lists(
    st.builds(
        StatusRecord,
        status=st.sampled_from(["draft", "final-draft", "submitted", "published", "other"]),
        start=st.one_of(st.none(), st.just(T0)),
    ),
    max_size=3,
)


@given(NODES, STATUSES, st.booleans())
def test_empty_resolution_always_fails(expected, records, has_unmatched) -> None:
    unmatched = frozenset({S1}) if has_unmatched else frozenset()
    verdict = _verdict(set(), expected, records, unmatched)
    assert verdict.outcome == "FAIL"


@given(NODES.filter(bool), STATUSES, st.booleans())
def test_exact_match_always_passes(nodes, records, has_unmatched) -> None:
    unmatched = frozenset({S1}) if has_unmatched else frozenset()
    verdict = _verdict(nodes, nodes, records, unmatched)
    expected_to_resolve, _ = compute_expected_resolution(records)
    assert verdict.outcome == "PASS"
    advisory = any("was not expected to resolve" in c for c in verdict.comments)
    assert advisory is (not expected_to_resolve)
