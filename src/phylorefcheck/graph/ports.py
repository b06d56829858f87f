"""Contracts for the knowledge graph and the classification oracle.

The verification engine never walks an ontology itself. It asks a
KnowledgeGraph for asserted facts and an Oracle for class membership; both can
be backed by a real reasoner or by a pre-reasoned fixture.
"""

from __future__ import annotations

import logging
from typing import Dict, FrozenSet, List, Literal, Optional, Protocol, Sequence, Set

from pydantic import BaseModel, ConfigDict

from ..schemas import Definition, StatusRecord

logger = logging.getLogger(__name__)

PHYLOREF_NAMESPACE = "http://ontology.phyloref.org/phyloref.owl#"
PHYLOREFERENCE = PHYLOREF_NAMESPACE + "Phyloreference"
HAS_UNMATCHED_SPECIFIER = PHYLOREF_NAMESPACE + "has_unmatched_specifier"
HAS_SPECIFIER = PHYLOREF_NAMESPACE + "has_specifier"
RDFS_LABEL = "http://www.w3.org/2000/01/rdf-schema#label"
# "is specified output of" / "has specified input" from the Ontology for Biomedical Investigations.
OBI_IS_SPECIFIED_OUTPUT_OF = "http://purl.obolibrary.org/obo/OBI_0000312"
OBI_HAS_SPECIFIED_INPUT = "http://purl.obolibrary.org/obo/OBI_0000293"


class ClassExpression(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["named", "expected_output_of"]
    target: str

    @classmethod
    def named(cls, iri: str) -> "ClassExpression":
        return cls(kind="named", target=iri)

    @classmethod
    def expected_output_of(cls, iri: str) -> "ClassExpression":
        """Nodes that are the specified output of a process whose input was ``iri``."""
        return cls(kind="expected_output_of", target=iri)

    def __str__(self) -> str:
        if self.kind == "named":
            return f"<{self.target}>"
        return (
            f"<{OBI_IS_SPECIFIED_OUTPUT_OF}> some "
            f"(<{OBI_HAS_SPECIFIED_INPUT}> value <{self.target}>)"
        )


class KnowledgeGraph(Protocol):
    def asserted_objects(self, subject: str, predicate: str) -> FrozenSet[str]:
        ...

    def literals(self, subject: str, predicate: str) -> Dict[str, Set[str]]:
        """Literal values of ``predicate`` on ``subject`` keyed by language tag ("" if none)."""
        ...

    def statuses_of(self, definition: Definition) -> List[StatusRecord]:
        ...


class Oracle(Protocol):
    def instances_of(self, expression: ClassExpression) -> FrozenSet[str]:
        ...

    def subclasses_of(self, class_iri: str) -> Sequence[str]:
        """All direct and indirect subclasses of ``class_iri`` in a stable order."""
        ...

    def name_and_version(self) -> str:
        ...


def is_meta_class(iri: str) -> bool:
    return iri.startswith(PHYLOREF_NAMESPACE)


def label_of(
    entity: str, graph: KnowledgeGraph, preferred_langs: Sequence[str]
) -> Optional[str]:
    values_by_lang = graph.literals(entity, RDFS_LABEL)
    for lang in list(preferred_langs) + [""]:
        values = values_by_lang.get(lang)
        if values:
            return sorted(values)[0]
    return None


def list_definitions(
    graph: KnowledgeGraph, oracle: Oracle, preferred_langs: Sequence[str] = ("en",)
) -> List[Definition]:
    definitions: List[Definition] = []
    seen: Set[str] = set()
    for iri in oracle.subclasses_of(PHYLOREFERENCE):
        if iri in seen or is_meta_class(iri):
            continue
        seen.add(iri)
        definitions.append(
            Definition(
                id=iri,
                label=label_of(iri, graph, preferred_langs),
                specifiers=graph.asserted_objects(iri, HAS_SPECIFIER),
            )
        )
    logger.info("identified %d phyloreferences", len(definitions))
    return definitions
