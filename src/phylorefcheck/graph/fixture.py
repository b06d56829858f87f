"""Pre-reasoned fixtures.

A fixture is a JSON document holding facts a reasoner has already asserted:
which nodes are instances of each phyloreference, which nodes were expected,
labels, unmatched specifiers and status annotations. ``FixtureGraph`` serves
those facts through both the KnowledgeGraph and the Oracle contracts, so a
fixture can be tested without running a reasoner.
"""

from __future__ import annotations

import logging
import sys
from collections import defaultdict
from pathlib import Path
from typing import Any, Dict, FrozenSet, List, Optional, Sequence, Set

from pydantic import BaseModel, Field, ValidationError

from ..config import DEFAULT_URI_PREFIX
from ..errors import InputError
from ..schemas import Definition, StatusRecord
from ..utils import loads_json
from ..verify.status import statuses_from_annotations
from .ports import (
    HAS_SPECIFIER,
    HAS_UNMATCHED_SPECIFIER,
    PHYLOREF_NAMESPACE,
    RDFS_LABEL,
    ClassExpression,
)

logger = logging.getLogger(__name__)

PREFIXES = {
    "phyloref": PHYLOREF_NAMESPACE,
    "pso": "http://purl.org/spar/pso/",
    "obo": "http://purl.obolibrary.org/obo/",
    "rdfs": "http://www.w3.org/2000/01/rdf-schema#",
    "cdao": "http://purl.obolibrary.org/obo/CDAO_",
}

FIXTURE_REASONER = "Pre-reasoned fixture (asserted facts only)"

Labels = Dict[str, List[str]]


class FixtureClass(BaseModel):
    id: str
    subclass_of: List[str] = Field(default_factory=list)
    labels: Labels = Field(default_factory=dict)


class FixtureDefinition(FixtureClass):
    specifiers: List[str] = Field(default_factory=list)
    unmatched_specifiers: List[str] = Field(default_factory=list)
    statuses: Any = None


class FixtureNode(BaseModel):
    id: str
    labels: Labels = Field(default_factory=dict)
    member_of: List[str] = Field(default_factory=list)
    expected_for: List[str] = Field(default_factory=list)


class FixtureDocument(BaseModel):
    base: str = DEFAULT_URI_PREFIX
    reasoner: str = FIXTURE_REASONER
    classes: List[FixtureClass] = Field(default_factory=list)
    definitions: List[FixtureDefinition] = Field(default_factory=list)
    nodes: List[FixtureNode] = Field(default_factory=list)
    labels: Dict[str, Labels] = Field(default_factory=dict)


def expand_iri(value: str, base: str) -> str:
    """Expand a CURIE or a base-relative reference into a full IRI."""
    if "://" in value or value.startswith(("urn:", "_:")):
        return value
    prefix, sep, local = value.partition(":")
    if sep and prefix in PREFIXES:
        return PREFIXES[prefix] + local
    if value.startswith("#"):
        return base + value
    return base + "#" + value


class FixtureGraph:
    def __init__(self, document: FixtureDocument) -> None:
        self.document = document
        base = document.base
        self._subclass_edges: Dict[str, List[str]] = defaultdict(list)
        self._class_order: List[str] = []
        self._objects: Dict[tuple[str, str], Set[str]] = defaultdict(set)
        self._literals: Dict[tuple[str, str], Dict[str, Set[str]]] = defaultdict(
            lambda: defaultdict(set)
        )
        self._raw_statuses: Dict[str, Any] = {}
        self._members: Dict[str, Set[str]] = defaultdict(set)
        self._expected: Dict[str, Set[str]] = defaultdict(set)

        for cls in list(document.classes) + list(document.definitions):
            iri = expand_iri(cls.id, base)
            self._class_order.append(iri)
            for parent in cls.subclass_of:
                self._subclass_edges[expand_iri(parent, base)].append(iri)
            self._add_labels(iri, cls.labels)
        for definition in document.definitions:
            iri = expand_iri(definition.id, base)
            for specifier in definition.specifiers + definition.unmatched_specifiers:
                self._objects[(iri, HAS_SPECIFIER)].add(expand_iri(specifier, base))
            for specifier in definition.unmatched_specifiers:
                self._objects[(iri, HAS_UNMATCHED_SPECIFIER)].add(expand_iri(specifier, base))
            self._raw_statuses[iri] = definition.statuses
        for node in document.nodes:
            node_iri = expand_iri(node.id, base)
            self._add_labels(node_iri, node.labels)
            for phyloref in node.member_of:
                self._members[expand_iri(phyloref, base)].add(node_iri)
            for phyloref in node.expected_for:
                self._expected[expand_iri(phyloref, base)].add(node_iri)
        for entity, labels in document.labels.items():
            self._add_labels(expand_iri(entity, base), labels)

    def _add_labels(self, iri: str, labels: Labels) -> None:
        for lang, values in labels.items():
            self._literals[(iri, RDFS_LABEL)][lang].update(values)

    def asserted_objects(self, subject: str, predicate: str) -> FrozenSet[str]:
        return frozenset(self._objects.get((subject, predicate), ()))

    def literals(self, subject: str, predicate: str) -> Dict[str, Set[str]]:
        values = self._literals.get((subject, predicate), {})
        return {lang: set(items) for lang, items in values.items()}

    def statuses_of(self, definition: Definition) -> List[StatusRecord]:
        return statuses_from_annotations(definition.id, self._raw_statuses.get(definition.id))

    def instances_of(self, expression: ClassExpression) -> FrozenSet[str]:
        if expression.kind == "named":
            found: Set[str] = set()
            for iri in [expression.target] + list(self.subclasses_of(expression.target)):
                found.update(self._members.get(iri, ()))
            return frozenset(found)
        return frozenset(self._expected.get(expression.target, ()))

    def subclasses_of(self, class_iri: str) -> Sequence[str]:
        reachable: Set[str] = set()
        frontier = [class_iri]
        while frontier:
            current = frontier.pop()
            for child in self._subclass_edges.get(current, ()):
                if child not in reachable:
                    reachable.add(child)
                    frontier.append(child)
        return [iri for iri in dict.fromkeys(self._class_order) if iri in reachable]

    def name_and_version(self) -> str:
        return self.document.reasoner


def parse_fixture(data: bytes, source: str) -> FixtureGraph:
    payload = loads_json(data, source)
    try:
        document = FixtureDocument.model_validate(payload)
    except ValidationError as exc:
        raise InputError(f"'{source}' is not a valid phyloreference fixture: {exc}") from exc
    logger.info(
        "loaded fixture %s: %d definitions, %d nodes",
        source,
        len(document.definitions),
        len(document.nodes),
    )
    return FixtureGraph(document)


def load_fixture(path: Optional[Path]) -> FixtureGraph:
    """Load a fixture from ``path``; ``None`` or ``-`` reads standard input."""
    if path is None or str(path) == "-":
        return parse_fixture(sys.stdin.buffer.read(), "-")
    try:
        data = path.read_bytes()
    except OSError as exc:
        raise InputError(f"could not open input file '{path}': {exc}") from exc
    return parse_fixture(data, str(path))
