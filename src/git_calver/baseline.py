"""
Baseline year resolution.

The baseline is the year subtracted from a commit's own year to produce the
leading version field. It is either given explicitly or derived from the
oldest root commit reachable from the starting commit.
"""

import logging
from typing import Optional, Union

from .errors import InvalidYearError
from .repository import Commit, GitRepository
from .traversal import ancestry_full

logger = logging.getLogger(__name__)


def parse_year(value: Union[str, int]) -> int:
    """Parse an explicit baseline year.

    Raises:
        InvalidYearError: If the value is not an integer
    """
    if isinstance(value, bool):
        raise InvalidYearError(str(value))
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except ValueError:
        raise InvalidYearError(str(value))


def find_oldest_root(repo: GitRepository, commit: Commit) -> Commit:
    """Return the parentless ancestor with the earliest committer timestamp.

    A repository can have several roots (orphan branches merged in, grafts,
    shallow boundaries). Roots with identical timestamps resolve to the first
    one encountered in the walk, which is stable for a given history.
    """
    if commit.is_root:
        oldest: Optional[Commit] = commit
    else:
        oldest = None

    with ancestry_full(repo, commit) as commits:
        for candidate in commits:
            if not candidate.is_root:
                continue
            if oldest is None or candidate.committed_at_utc < oldest.committed_at_utc:
                oldest = candidate

    # The walk always includes at least one root unless history is corrupt
    if oldest is None:
        oldest = commit

    logger.debug(
        "Oldest root for %s is %s (%s)",
        commit.short_hash,
        oldest.short_hash,
        oldest.committed_at_utc.isoformat(),
    )
    return oldest


def resolve_baseline(
    repo: GitRepository,
    commit: Commit,
    explicit_year: Optional[Union[str, int]] = None,
) -> int:
    """Determine the baseline year for versioning ``commit``.

    Args:
        repo: Opened repository
        commit: Starting commit for the root search
        explicit_year: Caller supplied year, used verbatim when given

    Returns:
        The baseline year

    Raises:
        InvalidYearError: If explicit_year is not an integer
    """
    if explicit_year is not None and explicit_year != "":
        return parse_year(explicit_year)

    cached = repo.baseline_cache.get(commit.hash)
    if cached is not None:
        return cached

    year = find_oldest_root(repo, commit).committed_at_utc.year
    repo.baseline_cache[commit.hash] = year
    return year


def year_offset(commit: Commit, baseline: int) -> int:
    """Years between the baseline and the commit, never negative."""
    return max(0, commit.committed_at_utc.year - baseline)
