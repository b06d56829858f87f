"""Per-phyloreference verdicts.

``classify`` is a pure function of the facts gathered for one phyloreference.
Rules are tried in priority order and the first that applies decides:

1. nothing resolved: FAIL, with no mitigation;
2. nothing expected: NOT_TESTABLE (SKIP);
3. resolved exactly the expected nodes: PASS;
4. otherwise FAIL, downgraded to EXPECTED_FAIL (TODO) when the active
   status says it is not expected to resolve yet, or when some specifier is
   unmatched. The unmatched-specifier reason takes precedence.
"""

from __future__ import annotations

from typing import AbstractSet, List, Optional, Sequence

from ..schemas import ReconciliationResult, Specifier, StatusRecord, Verdict
from .reconcile import format_iris, format_nodes
from .status import format_statuses

NO_NODES_MATCHED = "No nodes matched."
NO_EXPECTED_RESOLUTION = "Phyloreference has no expected resolution, and so cannot be tested."
UNMATCHED_SPECIFIERS = "Phyloreference could not be tested, as one or more specifiers did not match."


def not_expected_reason(active_statuses: Sequence[StatusRecord]) -> str:
    return (
        "Phyloreference did not resolve as expected, but is not expected to resolve given status "
        + format_statuses(active_statuses)
    )


def _node_comments(reconciliation: ReconciliationResult, prefix: Optional[str]) -> List[str]:
    comments = [
        f"Expected nodes: {format_nodes(reconciliation.expected, prefix)}",
        f"Resolved nodes: {format_nodes(reconciliation.resolved, prefix)}",
    ]
    if reconciliation.extra:
        comments.append(
            "Some nodes were resolved but were not expected: " + format_iris(reconciliation.extra)
        )
    if reconciliation.missing:
        comments.append(
            "Some nodes were expected but were not resolved: " + format_iris(reconciliation.missing)
        )
    return comments


def classify(
    reconciliation: ReconciliationResult,
    expected_to_resolve: bool,
    active_statuses: Sequence[StatusRecord],
    unmatched_specifiers: AbstractSet[Specifier],
    specifier_comments: Sequence[str] = (),
    uri_prefix: Optional[str] = None,
) -> Verdict:
    resolved = reconciliation.resolved

    if not resolved:
        comments = [
            NO_NODES_MATCHED,
            f"Expected nodes: {format_nodes(reconciliation.expected, uri_prefix)}",
        ]
        if reconciliation.missing:
            comments.append(
                "Some nodes were expected but were not resolved: "
                + format_iris(reconciliation.missing)
            )
        comments.extend(specifier_comments)
        return Verdict.failed(tuple(comments))

    if not reconciliation.expected:
        comments = [
            "Expected nodes: []",
            f"It resolved to the following {len(resolved)} nodes: {format_iris(resolved)}",
        ]
        comments.extend(specifier_comments)
        return Verdict.not_testable(NO_EXPECTED_RESOLUTION, tuple(comments))

    comments = _node_comments(reconciliation, uri_prefix)
    comments.extend(specifier_comments)

    if reconciliation.exact:
        if not expected_to_resolve:
            comments.append(
                "Phyloreference resolved correctly but was not expected to resolve; "
                "status should be changed to 'pso:submitted' from "
                + format_statuses(active_statuses)
            )
        return Verdict.passed(tuple(comments))

    reason: Optional[str] = None
    if not expected_to_resolve:
        reason = not_expected_reason(active_statuses)
    if unmatched_specifiers:
        reason = UNMATCHED_SPECIFIERS
        if not any(record.status == "draft" for record in active_statuses):
            comments.append(
                "Since specifiers remain unmatched, this phyloreference should have a status of "
                "'pso:draft' but instead its status is " + format_statuses(active_statuses)
            )
    if reason is None:
        return Verdict.failed(tuple(comments))
    return Verdict.expected_fail(reason, tuple(comments))
