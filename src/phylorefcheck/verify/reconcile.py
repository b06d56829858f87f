"""Set reconciliation between resolved and expected nodes.

Node identity is the canonical id string. Prefix stripping is only ever
applied to the output of ``reconcile``; stripping first could merge distinct
nodes that share a suffix.
"""

from __future__ import annotations

from typing import AbstractSet, Iterable, List, Optional

from ..schemas import ReconciliationResult


def reconcile(resolved: AbstractSet[str], expected: AbstractSet[str]) -> ReconciliationResult:
    resolved_set = frozenset(resolved)
    expected_set = frozenset(expected)
    return ReconciliationResult(
        resolved=resolved_set,
        expected=expected_set,
        missing=expected_set - resolved_set,
        extra=resolved_set - expected_set,
    )


def strip_prefix(iri: str, prefix: Optional[str]) -> str:
    if prefix and iri.startswith(prefix):
        return iri[len(prefix) :]
    return iri


def present_nodes(nodes: Iterable[str], prefix: Optional[str] = None) -> List[str]:
    return sorted(strip_prefix(node, prefix) for node in nodes)


def format_nodes(nodes: Iterable[str], prefix: Optional[str] = None) -> str:
    return "[" + ", ".join(present_nodes(nodes, prefix)) + "]"


def format_iris(nodes: Iterable[str]) -> str:
    return "[" + ", ".join(f"<{node}>" for node in sorted(nodes)) + "]"
