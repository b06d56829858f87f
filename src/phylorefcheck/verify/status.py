"""Publication status handling.

Definitions carry a history of Publishing Status Ontology (PSO) statuses, each
held over a time interval. Only the statuses that are currently active (the
interval has started and has no end) decide whether a definition is expected
to resolve yet.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Tuple

from ..errors import StatusAnnotationError
from ..schemas import StatusRecord, StatusTag

logger = logging.getLogger(__name__)

PSO_NAMESPACE = "http://purl.org/spar/pso/"
PSO_DRAFT = PSO_NAMESPACE + "draft"
PSO_FINAL_DRAFT = PSO_NAMESPACE + "final-draft"
PSO_SUBMITTED = PSO_NAMESPACE + "submitted"
PSO_PUBLISHED = PSO_NAMESPACE + "published"

EARLIEST_INSTANT = datetime.min.replace(tzinfo=timezone.utc)
LATEST_INSTANT = datetime.max.replace(tzinfo=timezone.utc)

RESOLVING_STATUSES = frozenset({"submitted", "published"})

_KNOWN_TAGS: Tuple[StatusTag, ...] = ("draft", "final-draft", "submitted", "published")

# phyx-style annotation keys, as found in JSON-LD phyloreference files.
_PHYX_STATUS = "pso:withStatus"
_PHYX_TIME = "tvc:atTime"
_PHYX_START = "timeinterval:hasIntervalStartDate"
_PHYX_END = "timeinterval:hasIntervalEndDate"


def status_tag(value: str) -> StatusTag:
    """Map a PSO IRI, ``pso:`` CURIE or bare status name onto a status tag."""
    name = value.strip()
    if name.startswith(PSO_NAMESPACE):
        name = name[len(PSO_NAMESPACE) :]
    elif name.startswith("pso:"):
        name = name[len("pso:") :]
    name = name.lower()
    for tag in _KNOWN_TAGS:
        if name == tag:
            return tag
    return "other"


def parse_instant(value: Any, default: datetime) -> datetime:
    """Parse an ISO-8601 instant, falling back to ``default`` when unparsable.

    Naive values are taken to be UTC so that every returned instant compares
    with every other.
    """
    if isinstance(value, datetime):
        parsed = value
    else:
        text = str(value).strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            logger.warning("unparsable status timestamp %r; using %s", value, default.isoformat())
            return default
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _optional_instant(value: Any, default: datetime) -> Optional[datetime]:
    if value is None:
        return None
    return parse_instant(value, default)


def _status_value(definition_id: str, raw: Any) -> str:
    if isinstance(raw, str):
        return raw
    if isinstance(raw, Mapping) and isinstance(raw.get("@id"), str):
        return raw["@id"]
    raise StatusAnnotationError(definition_id, f"status must be a string or {{'@id': ...}}, got {raw!r}")


def _interval(
    definition_id: str, raw: Any, start_key: str, end_key: str
) -> Tuple[Optional[datetime], Optional[datetime]]:
    if raw is None:
        return None, None
    if not isinstance(raw, Mapping):
        raise StatusAnnotationError(definition_id, f"interval must be a mapping, got {raw!r}")
    unknown = set(raw) - {start_key, end_key, "@type"}
    if unknown:
        raise StatusAnnotationError(definition_id, f"unexpected interval keys {sorted(unknown)}")
    for key in (start_key, end_key):
        if isinstance(raw.get(key), (Mapping, list)):
            raise StatusAnnotationError(definition_id, f"{key} must be a scalar, got {raw[key]!r}")
    start = _optional_instant(raw.get(start_key), EARLIEST_INSTANT)
    end = _optional_instant(raw.get(end_key), LATEST_INSTANT)
    return start, end


def status_from_annotation(definition_id: str, raw: Any) -> StatusRecord:
    """Build one StatusRecord from a raw annotation.

    Two shapes are recognised: the compact ``{"status", "interval": {"start",
    "end"}}`` form and the phyx form ``{"pso:withStatus", "tvc:atTime":
    {"timeinterval:hasIntervalStartDate", "timeinterval:hasIntervalEndDate"}}``.
    Anything else raises StatusAnnotationError.
    """
    if not isinstance(raw, Mapping):
        raise StatusAnnotationError(definition_id, f"annotation must be a mapping, got {raw!r}")
    if "status" in raw:
        value = _status_value(definition_id, raw["status"])
        start, end = _interval(definition_id, raw.get("interval"), "start", "end")
    elif _PHYX_STATUS in raw:
        value = _status_value(definition_id, raw[_PHYX_STATUS])
        start, end = _interval(definition_id, raw.get(_PHYX_TIME), _PHYX_START, _PHYX_END)
    else:
        raise StatusAnnotationError(definition_id, f"no status in annotation {dict(raw)!r}")
    return StatusRecord(status=status_tag(value), status_iri=value, start=start, end=end)


def statuses_from_annotations(definition_id: str, raw: Any) -> List[StatusRecord]:
    if raw is None:
        return []
    if not isinstance(raw, Sequence) or isinstance(raw, (str, bytes)):
        raise StatusAnnotationError(definition_id, f"statuses must be a list, got {raw!r}")
    return [status_from_annotation(definition_id, item) for item in raw]


def active_statuses(records: Iterable[StatusRecord]) -> List[StatusRecord]:
    return [record for record in records if record.is_active]


def compute_expected_resolution(
    records: Iterable[StatusRecord],
) -> Tuple[bool, List[StatusRecord]]:
    """Decide whether a definition is currently expected to resolve.

    With no active status we assume it should resolve. Otherwise it is expected
    to resolve only if some active status is submitted or published.
    """
    active = active_statuses(records)
    if not active:
        return True, active
    expected = any(record.status in RESOLVING_STATUSES for record in active)
    return expected, active


def format_statuses(records: Iterable[StatusRecord]) -> str:
    return "[" + ", ".join(str(record) for record in records) + "]"
