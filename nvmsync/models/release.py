"""
Release catalog data models for nvmsync.

This module defines the validated representation of one Node.js release as
listed by the remote release index, and the set of suggestions computed
from those releases for a target version.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Union

from nvmsync.exceptions import CatalogParseError
from nvmsync.utils.version_utils import is_valid_version, major_of, normalize


@dataclass(frozen=True)
class ReleaseRecord:
    """One published Node.js release.

    Args:
        version: Normalized version (``"18.17.0"``).
        label: Version as published (``"v18.17.0"``).
        date: Release date string as published.
        lts: ``False`` for current releases, otherwise the LTS codename.
    """

    version: str
    label: str
    date: str
    lts: Union[bool, str] = False

    @property
    def is_lts(self) -> bool:
        return bool(self.lts)

    @property
    def major(self) -> str:
        return major_of(self.version)

    @classmethod
    def from_json(
        cls,
        raw: Any,
        *,
        index: Optional[int] = None,
    ) -> "ReleaseRecord":
        """Validate one raw catalog entry.

        Args:
            raw: Decoded JSON object with ``version``, ``date`` and ``lts``.
            index: Position in the catalog, reported on failure.

        Raises:
            CatalogParseError: The entry is not an object, a field is
                missing, or a field has the wrong type or format.
        """
        if not isinstance(raw, Mapping):
            raise CatalogParseError(
                f"Catalog entry must be an object, got {type(raw).__name__}",
                index=index,
            )

        for name in ("version", "date", "lts"):
            if name not in raw:
                raise CatalogParseError(
                    f"Catalog entry is missing '{name}'",
                    index=index,
                    field=name,
                )

        label = raw["version"]
        if not isinstance(label, str) or not is_valid_version(label):
            raise CatalogParseError(
                f"Catalog entry has malformed version {label!r}",
                index=index,
                field="version",
            )

        date = raw["date"]
        if not isinstance(date, str):
            raise CatalogParseError(
                f"Catalog entry has malformed date {date!r}",
                index=index,
                field="date",
            )

        lts = raw["lts"]
        if not isinstance(lts, (bool, str)):
            raise CatalogParseError(
                f"Catalog entry has malformed lts flag {lts!r}",
                index=index,
                field="lts",
            )

        return cls(version=normalize(label), label=label.strip(), date=date, lts=lts)

    def to_json(self) -> Dict[str, Any]:
        """Return a JSON-serializable representation."""
        return {
            "version": self.label,
            "date": self.date,
            "lts": self.lts,
        }


@dataclass
class SuggestionSet:
    """Releases worth offering when the target version cannot be installed.

    Attributes:
        latest: Newest release in the catalog.
        latest_lts: Newest LTS release, or ``None`` if the catalog has none.
        nearest_lts: LTS releases just above the target (nearest first),
            then just below it (nearest first).
        nearest_non_lts: Same for current releases; empty when the
            target's major version is itself an LTS line.
    """

    latest: ReleaseRecord
    latest_lts: Optional[ReleaseRecord] = None
    nearest_lts: List[ReleaseRecord] = field(default_factory=list)
    nearest_non_lts: List[ReleaseRecord] = field(default_factory=list)

    def candidates(self) -> List[ReleaseRecord]:
        """Return every suggested release once, in presentation order."""
        seen = set()
        ordered: List[ReleaseRecord] = []
        pool = [self.latest, self.latest_lts, *self.nearest_lts, *self.nearest_non_lts]
        for record in pool:
            if record is not None and record.version not in seen:
                seen.add(record.version)
                ordered.append(record)
        return ordered

    def to_json(self) -> Dict[str, Any]:
        """Return a JSON-serializable representation."""
        return {
            "latest": self.latest.to_json(),
            "latest_lts": self.latest_lts.to_json() if self.latest_lts else None,
            "nearest_lts": [r.to_json() for r in self.nearest_lts],
            "nearest_non_lts": [r.to_json() for r in self.nearest_non_lts],
        }
