"""
Version normalization and comparison utilities for nvmsync.

Node.js versions are plain dotted integers (``16.10.0``), optionally written
with a leading ``v`` (``v16.10.0``). Comparison is segment-wise numeric,
missing trailing segments count as ``0``, and anything that is not a dotted
sequence of non-negative integers is rejected with
:class:`~nvmsync.exceptions.InvalidVersionError`.
"""

from __future__ import annotations

import re
import functools
from enum import IntEnum
from typing import Callable, Tuple, TypeVar

from packaging.version import Version

from nvmsync.exceptions import InvalidVersionError

T = TypeVar("T")

_DOTTED_NUMERIC = re.compile(r"^\d+(?:\.\d+)*$")


class Ordering(IntEnum):
    """Result of :func:`compare`, usable wherever ``cmp``-style ints are."""

    LESS = -1
    EQUAL = 0
    GREATER = 1


def normalize(raw: str) -> str:
    """Strip surrounding whitespace and one leading ``v``/``V``.

    Never validates; malformed input passes through unchanged otherwise.

    Examples:
        >>> normalize("  v2.0.0  ")
        '2.0.0'
        >>> normalize("lts/*")
        'lts/*'
    """
    value = raw.strip()
    if value[:1] in ("v", "V"):
        value = value[1:]
    return value.strip()


def is_valid_version(value: str) -> bool:
    """Return True if ``value`` normalizes to a dotted-numeric version."""
    return bool(_DOTTED_NUMERIC.match(normalize(value)))


def _parse(value: str) -> Version:
    """Parse a version string, rejecting anything but dotted integers."""
    normalized = normalize(value)
    if not _DOTTED_NUMERIC.match(normalized):
        raise InvalidVersionError(value)
    # Dotted integers are always valid release segments; Version pads
    # missing trailing segments with zeros when comparing.
    return Version(normalized)


def compare(a: str, b: str) -> Ordering:
    """Order two version strings by numeric dot-segment comparison.

    Examples:
        >>> compare("16.9", "16.10.0")
        <Ordering.LESS: -1>
        >>> compare("v18", "18.0.0")
        <Ordering.EQUAL: 0>

    Raises:
        InvalidVersionError: Either argument has a non-numeric segment.
    """
    left, right = _parse(a), _parse(b)
    if left < right:
        return Ordering.LESS
    if left > right:
        return Ordering.GREATER
    return Ordering.EQUAL


def major_of(value: str) -> str:
    """Return the major segment of a version string, as written."""
    return normalize(value).split(".", 1)[0]


def release_tuple(value: str) -> Tuple[int, ...]:
    """Return the numeric segments of a valid version."""
    return _parse(value).release


def version_key(get_version: Callable[[T], str]) -> Callable[[T], object]:
    """Build a sort key ordering items by :func:`compare` on ``get_version``.

    ``sorted`` is stable, so items with equal versions keep their input
    order.
    """
    by_version = functools.cmp_to_key(lambda x, y: int(compare(x, y)))
    return lambda item: by_version(get_version(item))
