"""Rendering and parsing of calendar version strings."""

import re
from typing import NamedTuple

from .errors import InvalidInverseVersionError

FIELD_RE = re.compile(r"[0-9]+")


class VersionFields(NamedTuple):
    """The four numeric fields of a calendar version."""

    year_offset: int
    month: int
    day: int
    order: int

    @classmethod
    def empty(cls) -> "VersionFields":
        """Fields used when the repository has no commits."""
        return cls(0, 0, 0, 0)


def format_version(
    fields: VersionFields,
    prefix: str = "v",
    separator: str = ".",
    short: bool = False,
) -> str:
    """Join the fields with ``separator`` and prepend ``prefix``.

    With ``short`` a zero order field is dropped along with its separator;
    a non-zero order is always kept.
    """
    parts = [str(value) for value in fields]
    if short and fields.order == 0:
        parts = parts[:-1]
    return prefix + separator.join(parts)


def parse_version(text: str, prefix: str = "v", separator: str = ".") -> VersionFields:
    """Parse a version string produced by format_version().

    A three-field string (as written with ``short``) gets an implicit zero
    order.

    Raises:
        InvalidInverseVersionError: If the string does not hold three or four
            non-negative integers
    """
    if not separator:
        raise InvalidInverseVersionError(text, "separator must not be empty")

    body = text[len(prefix):] if prefix and text.startswith(prefix) else text
    parts = body.split(separator)
    if len(parts) == 3:
        parts.append("0")
    if len(parts) != 4:
        raise InvalidInverseVersionError(
            text, f"expected 3 or 4 fields separated by {separator!r}, got {len(parts)}"
        )

    for part in parts:
        if not FIELD_RE.fullmatch(part):
            raise InvalidInverseVersionError(text, f"field {part!r} is not a number")

    return VersionFields(*(int(part) for part in parts))
