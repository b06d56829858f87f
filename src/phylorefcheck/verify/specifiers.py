from __future__ import annotations

from typing import FrozenSet, Iterable, List, Sequence

from ..graph.ports import HAS_UNMATCHED_SPECIFIER, KnowledgeGraph, label_of
from ..schemas import Definition, Specifier


def find_unmatched_specifiers(definition: Definition, graph: KnowledgeGraph) -> FrozenSet[Specifier]:
    """Specifiers the graph asserts as unmatched for ``definition``.

    Only asserted facts are read; no inference is attempted.
    """
    return frozenset(
        Specifier(id=iri, unmatched=True)
        for iri in graph.asserted_objects(definition.id, HAS_UNMATCHED_SPECIFIER)
    )


def short_form(iri: str) -> str:
    for separator in ("#", "/"):
        _, sep, tail = iri.rpartition(separator)
        if sep and tail:
            return tail
    return iri


def describe_unmatched(
    specifiers: Iterable[Specifier], graph: KnowledgeGraph, preferred_langs: Sequence[str]
) -> List[str]:
    comments = []
    for specifier in sorted(specifiers, key=lambda item: item.id):
        name = label_of(specifier.id, graph, preferred_langs) or short_form(specifier.id)
        comments.append(f"Specifier '{name}' is marked as unmatched.")
    return comments
