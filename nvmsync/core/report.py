"""Rendering of :class:`~nvmsync.models.SuggestionSet` for the terminal."""

from __future__ import annotations

from typing import Any, Dict, List

from nvmsync.models.release import ReleaseRecord, SuggestionSet
from nvmsync.utils.console import colorize_lts, print_table
from nvmsync.utils.version_utils import Ordering, compare


def _relation(record: ReleaseRecord, target: str) -> str:
    order = compare(record.version, target)
    if order is Ordering.GREATER:
        return "newer"
    if order is Ordering.LESS:
        return "older"
    return "target"


def suggestion_rows(suggestions: SuggestionSet, target: str) -> List[Dict[str, Any]]:
    """Build one table row per distinct suggested release.

    Rows follow :meth:`SuggestionSet.candidates` order; the ``Kind`` column
    says why each release was suggested.
    """
    kinds: Dict[str, List[str]] = {}

    def tag(record: ReleaseRecord, kind: str) -> None:
        kinds.setdefault(record.version, [])
        if kind not in kinds[record.version]:
            kinds[record.version].append(kind)

    tag(suggestions.latest, "latest")
    if suggestions.latest_lts is not None:
        tag(suggestions.latest_lts, "latest LTS")
    for record in suggestions.nearest_lts:
        tag(record, "nearest LTS")
    for record in suggestions.nearest_non_lts:
        tag(record, "nearest current")

    return [
        {
            "Version": record.label,
            "Released": record.date,
            "LTS": colorize_lts(record.lts),
            "Relation": _relation(record, target),
            "Kind": ", ".join(kinds[record.version]),
        }
        for record in suggestions.candidates()
    ]


def display_suggestions(suggestions: SuggestionSet, target: str) -> None:
    """Print the suggestions for ``target`` as a table."""
    column_styles = {
        "Version": {"style": "bold cyan", "no_wrap": True},
        "Released": {"style": "dim", "justify": "center"},
        "LTS": {"justify": "center"},
        "Relation": {"justify": "center"},
        "Kind": {"justify": "left"},
    }
    print_table(
        suggestion_rows(suggestions, target),
        title=f"Available alternatives to v{target}",
        column_styles=column_styles,
    )
