"""Drive a test run over every phyloreference in a knowledge graph.

A run happens in three phases. First, facts are gathered for every
definition; status annotations are validated here, so a malformed one aborts
the run before any verdict exists. Next, each definition is classified; this
is pure and may fan out across threads. Finally, verdicts are aggregated in
delivery order.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import FrozenSet, List, Optional, Sequence, Tuple

from ..config import Settings
from ..graph.ports import ClassExpression, KnowledgeGraph, Oracle, list_definitions
from ..report.aggregator import build_report
from ..schemas import Definition, Report, Specifier, StatusRecord, Verdict
from ..verify.reconcile import reconcile
from ..verify.specifiers import describe_unmatched, find_unmatched_specifiers
from ..verify.status import compute_expected_resolution
from ..verify.verdict import classify

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DefinitionFacts:
    definition: Definition
    resolved: FrozenSet[str]
    expected: FrozenSet[str]
    statuses: Tuple[StatusRecord, ...]
    unmatched: FrozenSet[Specifier]
    specifier_comments: Tuple[str, ...] = ()


def gather_facts(
    definition: Definition, graph: KnowledgeGraph, oracle: Oracle, settings: Settings
) -> DefinitionFacts:
    resolved = oracle.instances_of(ClassExpression.named(definition.id))
    expected = oracle.instances_of(ClassExpression.expected_output_of(definition.id))
    unmatched = find_unmatched_specifiers(definition, graph)
    logger.info("phyloreference <%s> has nodes: %s", definition.id, sorted(resolved))
    return DefinitionFacts(
        definition=definition,
        resolved=resolved,
        expected=expected,
        statuses=tuple(graph.statuses_of(definition)),
        unmatched=unmatched,
        specifier_comments=tuple(describe_unmatched(unmatched, graph, settings.preferred_langs)),
    )


def evaluate(facts: DefinitionFacts, uri_prefix: Optional[str] = None) -> Verdict:
    expected_to_resolve, active = compute_expected_resolution(facts.statuses)
    reconciliation = reconcile(facts.resolved, facts.expected)
    return classify(
        reconciliation,
        expected_to_resolve,
        active,
        facts.unmatched,
        specifier_comments=facts.specifier_comments,
        uri_prefix=uri_prefix,
    )


def classify_all(
    facts: Sequence[DefinitionFacts], settings: Settings
) -> List[Tuple[Definition, Verdict]]:
    prefix = settings.uri_prefix if settings.strip_uri_prefix else None
    if settings.workers <= 1 or len(facts) <= 1:
        return [(item.definition, evaluate(item, prefix)) for item in facts]
    with ThreadPoolExecutor(max_workers=settings.workers) as executor:
        # map() yields in submission order, which keeps the sequence numbers stable.
        verdicts = list(executor.map(lambda item: evaluate(item, prefix), facts))
    return [(item.definition, verdict) for item, verdict in zip(facts, verdicts)]


def run_tests(
    graph: KnowledgeGraph,
    oracle: Oracle,
    settings: Optional[Settings] = None,
    source: Optional[str] = None,
) -> Report:
    settings = settings or Settings()
    definitions = list_definitions(graph, oracle, settings.preferred_langs)
    facts = [gather_facts(definition, graph, oracle, settings) for definition in definitions]
    header = []
    if source is not None:
        header.append(f"From file: {source}")
    header.append(f"Using reasoner: {oracle.name_and_version()}")
    return build_report(classify_all(facts, settings), header)
