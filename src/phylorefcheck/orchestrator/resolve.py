from __future__ import annotations

import traceback
from typing import Any, Dict, List, Optional

from ..config import Settings
from ..graph.ports import ClassExpression, KnowledgeGraph, Oracle, list_definitions
from ..verify.reconcile import present_nodes, strip_prefix


def resolve_all(
    graph: KnowledgeGraph, oracle: Oracle, settings: Optional[Settings] = None
) -> Dict[str, List[str]]:
    """Map each phyloreference to the nodes it resolves to, without judging them."""
    settings = settings or Settings()
    prefix = settings.uri_prefix if settings.strip_uri_prefix else None
    resolved: Dict[str, List[str]] = {}
    for definition in list_definitions(graph, oracle, settings.preferred_langs):
        nodes = oracle.instances_of(ClassExpression.named(definition.id))
        resolved[strip_prefix(definition.id, prefix)] = present_nodes(nodes, prefix)
    return resolved


def resolution_payload(resolved: Dict[str, List[str]]) -> Dict[str, Any]:
    return {"phylorefs": resolved}


def error_payload(message: str, exc: BaseException) -> Dict[str, Any]:
    return {
        "error": message,
        "stackTrace": "".join(traceback.format_exception_only(type(exc), exc)).strip(),
    }
