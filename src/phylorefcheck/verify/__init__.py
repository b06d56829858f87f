from .reconcile import format_nodes, present_nodes, reconcile, strip_prefix
from .specifiers import describe_unmatched, find_unmatched_specifiers
from .status import compute_expected_resolution, parse_instant, status_tag
from .verdict import classify

__all__ = [
    "classify",
    "compute_expected_resolution",
    "describe_unmatched",
    "find_unmatched_specifiers",
    "format_nodes",
    "parse_instant",
    "present_nodes",
    "reconcile",
    "status_tag",
    "strip_prefix",
]
