"""Release catalog and nearest-version suggestions for nvmsync.

When the declared Node.js version cannot be installed, nvmsync fetches the
official release index and offers a short list of alternatives around the
target version:

1. **latest** and **latest LTS** releases, for orientation.
2. **nearest LTS** releases: up to three just above the target and up to
   three just below it. If fewer than three LTS releases exist below, the
   list is topped up with LTS releases at or above the target.
3. **nearest current (non-LTS)** releases, chosen the same way but without
   the top-up, and only when the target's major version is not an LTS line.

:func:`suggest` is pure; :func:`fetch_catalog` is the only network access.

Typical usage::

    async with HTTPClient() as http:
        records = await fetch_catalog(http, DEFAULT_CATALOG_URL)
    suggestions = suggest(records, "18.99.0")
"""

from __future__ import annotations

from typing import Any, Callable, List, Optional, Sequence

from nvmsync.exceptions import CatalogParseError, EmptyCatalogError
from nvmsync.constants import SUGGESTION_LIMIT
from nvmsync.models.release import ReleaseRecord, SuggestionSet
from nvmsync.utils.http import HTTPClient
from nvmsync.utils.logger import get_logger
from nvmsync.utils.version_utils import (
    Ordering,
    compare,
    major_of,
    normalize,
    version_key,
)

logger = get_logger("catalog")

__all__ = ["fetch_catalog", "parse_catalog", "sort_releases", "suggest"]


# ---------------------------------------------------------------------------
# Ingestion
# ---------------------------------------------------------------------------


def parse_catalog(data: Any) -> List[ReleaseRecord]:
    """Validate a decoded release index.

    Args:
        data: Decoded JSON, expected to be an array of release objects.

    Returns:
        One :class:`ReleaseRecord` per version, in input order. When the
        index lists a version more than once, the first entry wins.

    Raises:
        CatalogParseError: ``data`` is not a list or an entry is malformed.
    """
    if not isinstance(data, list):
        raise CatalogParseError(
            f"Release catalog must be a JSON array, got {type(data).__name__}"
        )

    records: List[ReleaseRecord] = []
    seen = set()
    for i, raw in enumerate(data):
        record = ReleaseRecord.from_json(raw, index=i)
        if record.version in seen:
            logger.debug("Skipping duplicate catalog entry %s", record.label)
            continue
        seen.add(record.version)
        records.append(record)
    return records


async def fetch_catalog(http: HTTPClient, url: str) -> List[ReleaseRecord]:
    """Download and validate the release index at ``url``.

    Raises:
        NetworkError: The request failed.
        OperationTimeoutError: The request timed out.
        CatalogParseError: The body is not valid JSON or has bad entries.
    """
    logger.info("Fetching release catalog from %s", url)
    response = await http.get(url)

    try:
        data = response.json()
    except ValueError as exc:
        raise CatalogParseError(f"Release catalog from {url} is not valid JSON") from exc

    records = parse_catalog(data)
    logger.debug("Catalog contains %d release(s)", len(records))
    return records


def sort_releases(records: Sequence[ReleaseRecord]) -> List[ReleaseRecord]:
    """Sort releases newest first; equal versions keep their input order."""
    return sorted(records, key=version_key(lambda r: r.version), reverse=True)


# ---------------------------------------------------------------------------
# Suggestions
# ---------------------------------------------------------------------------


def suggest(
    records: Sequence[ReleaseRecord],
    target: str,
    *,
    limit: int = SUGGESTION_LIMIT,
    minimum: Optional[str] = None,
) -> SuggestionSet:
    """Pick the releases nearest to ``target``.

    Args:
        records: Releases in any order.
        target: Version the operator asked for (``v`` prefix allowed).
        limit: Maximum entries taken on each side of the target.
        minimum: Releases below this version are ignored entirely.

    Returns:
        The computed :class:`SuggestionSet`.

    Raises:
        EmptyCatalogError: No releases remain to choose from.
        InvalidVersionError: ``target`` or ``minimum`` is malformed.
    """
    pool = list(records)
    if minimum is not None:
        pool = [r for r in pool if compare(r.version, minimum) != Ordering.LESS]

    ordered = sort_releases(pool)
    if not ordered:
        raise EmptyCatalogError("Release catalog is empty")

    latest = ordered[0]
    latest_lts = latest if latest.is_lts else next(
        (r for r in ordered if r.is_lts), None
    )

    target = normalize(target)
    older = [r for r in ordered if compare(r.version, target) == Ordering.LESS]
    newer = [r for r in ordered if compare(r.version, target) == Ordering.GREATER]

    lts_above = _nearest_above(newer, limit, lambda r: r.is_lts)
    lts_below = _nearest_below(older, limit, lambda r: r.is_lts)

    if len(lts_below) < limit:
        # Top up from LTS releases at or above the target, nearest first.
        # Releases already listed above the target are skipped on purpose,
        # so the top-up may reach farther LTS lines instead of repeating them.
        chosen = {r.version for r in lts_above}
        backfill = [
            r
            for r in reversed(ordered)
            if r.is_lts
            and compare(r.version, target) != Ordering.LESS
            and r.version not in chosen
        ]
        lts_below.extend(backfill[: limit - len(lts_below)])

    target_major = major_of(target)
    is_target_major_lts = any(
        r.is_lts and r.version.startswith(f"{target_major}.") for r in ordered
    )

    nearest_non_lts: List[ReleaseRecord] = []
    if not is_target_major_lts:
        nearest_non_lts = _nearest_above(
            newer, limit, lambda r: not r.is_lts
        ) + _nearest_below(older, limit, lambda r: not r.is_lts)

    logger.debug(
        "Suggestions for %s: %d LTS, %d non-LTS (target major is LTS: %s)",
        target,
        len(lts_above) + len(lts_below),
        len(nearest_non_lts),
        is_target_major_lts,
    )

    return SuggestionSet(
        latest=latest,
        latest_lts=latest_lts,
        nearest_lts=lts_above + lts_below,
        nearest_non_lts=nearest_non_lts,
    )


def _nearest_above(
    newer: List[ReleaseRecord],
    limit: int,
    wanted: Callable[[ReleaseRecord], bool],
) -> List[ReleaseRecord]:
    # ``newer`` is newest first; the nearest ones sit at its tail.
    return [r for r in reversed(newer) if wanted(r)][:limit]


def _nearest_below(
    older: List[ReleaseRecord],
    limit: int,
    wanted: Callable[[ReleaseRecord], bool],
) -> List[ReleaseRecord]:
    return [r for r in older if wanted(r)][:limit]
