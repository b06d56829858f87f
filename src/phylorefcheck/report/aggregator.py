"""Aggregate verdicts into a TAP report.

Output follows the Test Anything Protocol (https://testanything.org/): a
``1..N`` plan, one ``ok``/``not ok`` line per phyloreference, and ``#``
diagnostic lines beneath it. The last line is a comment carrying the blake3
digest of the report.
"""

from __future__ import annotations

import logging
from typing import IO, Iterable, List, Optional, Sequence, Tuple

from ..schemas import Definition, Report, ReportCounts, ReportEntry, Verdict

logger = logging.getLogger(__name__)


class ReportAggregator:
    def __init__(self, header_comments: Sequence[str] = ()) -> None:
        self.header_comments = list(header_comments)
        self._entries: List[ReportEntry] = []
        self._success = 0
        self._failure = 0
        self._todo = 0
        self._skip = 0

    def add(self, definition: Definition, verdict: Verdict) -> ReportEntry:
        entry = ReportEntry(sequence=len(self._entries) + 1, definition=definition, verdict=verdict)
        self._entries.append(entry)
        if verdict.outcome == "PASS":
            self._success += 1
        elif verdict.outcome == "FAIL":
            self._failure += 1
        elif verdict.outcome == "EXPECTED_FAIL":
            self._todo += 1
        else:
            self._skip += 1
        logger.debug("test %d <%s>: %s", entry.sequence, definition.id, verdict.outcome)
        return entry

    def extend(self, results: Iterable[Tuple[Definition, Verdict]]) -> None:
        for definition, verdict in results:
            self.add(definition, verdict)

    @property
    def counts(self) -> ReportCounts:
        return ReportCounts(
            success=self._success, failure=self._failure, todo=self._todo, skip=self._skip
        )

    def report(self) -> Report:
        return Report(
            header_comments=self.header_comments,
            entries=list(self._entries),
            counts=self.counts,
        )


def build_report(
    results: Iterable[Tuple[Definition, Verdict]], header_comments: Sequence[str] = ()
) -> Report:
    aggregator = ReportAggregator(header_comments)
    aggregator.extend(results)
    return aggregator.report()


def _comment(text: str) -> List[str]:
    return ["# " + line if line else "#" for line in text.splitlines() or [""]]


def _single_line(text: str) -> str:
    return " ".join(text.splitlines())


def _description(definition: Definition) -> str:
    # '#' would start a directive on the test line.
    label = _single_line(definition.display_label).replace("#", "\\#")
    return f"Phyloreference '{label}'"


def verdict_line(entry: ReportEntry) -> str:
    verdict = entry.verdict
    status = "ok" if verdict.ok else "not ok"
    line = f"{status} {entry.sequence} {_description(entry.definition)}"
    if verdict.directive is not None:
        line += f" # {verdict.directive} {_single_line(verdict.reason or '')}"
    return line


def render_tap(report: Report) -> str:
    lines = [f"1..{report.plan}"]
    for comment in report.header_comments:
        lines.extend(_comment(comment))
    for entry in report.entries:
        lines.append(verdict_line(entry))
        for comment in entry.verdict.comments:
            lines.extend(_comment(comment))
    lines.append(digest_comment(report))
    return "\n".join(lines) + "\n"


def digest_comment(report: Report) -> str:
    return f"# digest blake3:{report.digest}"


def summary_line(counts: ReportCounts) -> str:
    return (
        f"Testing complete:{counts.success} successes, {counts.failure} failures, "
        f"{counts.todo} failures marked TODO, {counts.skip} skipped."
    )


def emit(report: Report, out: IO[str], diagnostics: Optional[IO[str]] = None) -> int:
    """Write the TAP document to ``out`` and the summary to ``diagnostics``.

    Returns the process exit status for the report.
    """
    out.write(render_tap(report))
    out.flush()
    summary = summary_line(report.counts)
    if diagnostics is not None:
        diagnostics.write(summary + "\n")
    logger.info("%s (digest blake3:%s)", summary, report.digest)
    return report.exit_status
