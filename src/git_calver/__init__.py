"""
git-calver - calendar versions derived from git history.

Turns the commit history of a repository into deterministic, sortable
YEAR.MONTH.DAY.ORDER version strings and maps such versions back to the
commit that produced them.
"""

__version__ = "1.0.0"

from .errors import CalverError  # noqa: E402
from .formatter import VersionFields, format_version, parse_version  # noqa: E402
from .service import CalendarVersioner, describe, find_commit  # noqa: E402

__all__ = [
    "CalverError",
    "CalendarVersioner",
    "VersionFields",
    "describe",
    "find_commit",
    "format_version",
    "parse_version",
]
