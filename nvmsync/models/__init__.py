"""
Unified data model exports for nvmsync.

Example:
    >>> from nvmsync.models import ReleaseRecord, SuggestionSet
"""

from __future__ import annotations

from nvmsync.models.release import ReleaseRecord, SuggestionSet

__all__ = [
    "ReleaseRecord",
    "SuggestionSet",
]
