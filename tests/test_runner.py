from __future__ import annotations

from pathlib import Path

import pytest

from phylorefcheck.config import Settings
from phylorefcheck.errors import ConfigurationError
from phylorefcheck.graph.fixture import load_fixture
from phylorefcheck.orchestrator.resolve import resolve_all
from phylorefcheck.orchestrator.runner import run_tests
from phylorefcheck.report.aggregator import render_tap
from phylorefcheck.schemas import NO_SUCCESS_EXIT_STATUS

DATA = Path(__file__).parent / "data"
BASE = "http://example.org/jphyloref"


def test_failing_fixture_report() -> None:
    graph = load_fixture(DATA / "failing.json")
    report = run_tests(graph, graph, Settings(), source="failing.json")
    assert render_tap(report) == (
        "1..3\n"
        "# From file: failing.json\n"
        "# Using reasoner: Pre-reasoned fixture (asserted facts only)\n"
        "ok 1 Phyloreference '1'\n"
        "# Expected nodes: [#phylogeny0_node2]\n"
        "# Resolved nodes: [#phylogeny0_node2]\n"
        "not ok 2 Phyloreference '2'\n"
        "# Expected nodes: [#phylogeny0_node1]\n"
        "# Resolved nodes: [#phylogeny0_node2]\n"
        f"# Some nodes were resolved but were not expected: [<{BASE}#phylogeny0_node2>]\n"
        f"# Some nodes were expected but were not resolved: [<{BASE}#phylogeny0_node1>]\n"
        "not ok 3 Phyloreference '4' # SKIP Phyloreference has no expected resolution, "
        "and so cannot be tested.\n"
        "# Expected nodes: []\n"
        f"# It resolved to the following 1 nodes: [<{BASE}#phylogeny0_node2>]\n"
        f"# digest blake3:{report.digest}\n"
    )
    assert (report.counts.success, report.counts.failure) == (1, 1)
    assert (report.counts.todo, report.counts.skip) == (0, 1)
    assert report.exit_status == 1


def test_drafts_fixture_has_no_successes() -> None:
    graph = load_fixture(DATA / "drafts.json")
    report = run_tests(graph, graph)
    outcomes = {entry.definition.display_label: entry.verdict for entry in report.entries}
    assert outcomes["Draft clade"].outcome == "EXPECTED_FAIL"
    assert "not expected to resolve" in outcomes["Draft clade"].reason
    unmatched = outcomes["Unmatched clade"]
    assert unmatched.outcome == "EXPECTED_FAIL"
    assert "specifiers did not match" in unmatched.reason
    assert "Specifier 'Specifier A' is marked as unmatched." in unmatched.comments
    assert any("should have a status of 'pso:draft'" in c for c in unmatched.comments)
    assert report.counts.todo == 2
    assert report.counts.skip == 1
    assert report.exit_status == NO_SUCCESS_EXIT_STATUS


def test_parallel_run_keeps_delivery_order() -> None:
    graph = load_fixture(DATA / "failing.json")
    sequential = run_tests(graph, graph, Settings(workers=1))
    parallel = run_tests(graph, graph, Settings(workers=4))
    assert parallel.entries == sequential.entries
    assert render_tap(parallel) == render_tap(sequential)


def test_keep_prefix_reports_full_iris() -> None:
    graph = load_fixture(DATA / "failing.json")
    report = run_tests(graph, graph, Settings(strip_uri_prefix=False))
    assert f"Expected nodes: [{BASE}#phylogeny0_node2]" in report.entries[0].verdict.comments


def test_bad_status_aborts_before_any_verdict() -> None:
    graph = load_fixture(DATA / "bad_status.json")
    with pytest.raises(ConfigurationError):
        run_tests(graph, graph)


def test_resolve_all_strips_prefix() -> None:
    graph = load_fixture(DATA / "failing.json")
    assert resolve_all(graph, graph) == {
        "#phyloref0": ["#phylogeny0_node2"],
        "#phyloref1": ["#phylogeny0_node2"],
        "#phyloref2": ["#phylogeny0_node2"],
    }
