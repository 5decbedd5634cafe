"""
Same-day commit ordinal.

The last version field ranks a commit among the commits made on the same UTC
calendar day. Walking history newest-first from a tip, the first commit of
that day gets ordinal 0, the next one 1, and so on. The ordinal is a rank from
the end of the day, not a chronological index.

A commit the tip does not reach is ranked within its own history instead:
its ordinal is the number of same-day commits among its ancestors.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Iterable, Iterator, Optional

from .baseline import year_offset
from .formatter import VersionFields
from .repository import Commit, GitRepository
from .traversal import ancestry_post_order

logger = logging.getLogger(__name__)

ONE_DAY = timedelta(days=1)


def utc_day_start(instant: datetime) -> datetime:
    """Midnight UTC of the calendar day containing ``instant``."""
    utc = instant.astimezone(timezone.utc)
    return datetime(utc.year, utc.month, utc.day, tzinfo=timezone.utc)


def _within_day(
    commits: Iterable[Commit], day_start: datetime, early_exit: bool
) -> Iterator[Commit]:
    day_end = day_start + ONE_DAY
    for candidate in commits:
        when = candidate.committed_at_utc
        if when < day_start:
            if early_exit:
                return
            continue
        if when < day_end:
            yield candidate


def _rank_from_tip(
    repo: GitRepository, commit: Commit, tip: Commit, early_exit: bool
) -> Optional[int]:
    day_start = utc_day_start(commit.committed_at)
    with ancestry_post_order(repo, tip) as commits:
        for ordinal, candidate in enumerate(_within_day(commits, day_start, early_exit)):
            if candidate.hash == commit.hash:
                return ordinal
    return None


def _rank_in_own_history(repo: GitRepository, commit: Commit, early_exit: bool) -> int:
    day_start = utc_day_start(commit.committed_at)
    with ancestry_post_order(repo, commit) as commits:
        count = sum(1 for _ in _within_day(commits, day_start, early_exit))
    return max(count - 1, 0)


def count_same_day_order(
    repo: GitRepository,
    commit: Commit,
    tip: Optional[Commit] = None,
    early_exit: bool = True,
) -> int:
    """Zero-based rank of ``commit`` among its day's commits seen from ``tip``.

    Commits are counted along ancestry_post_order(tip) while their committer
    timestamp falls on the commit's UTC day, up to and including the commit
    itself. Commits from later days are skipped.

    With early_exit the scan stops at the first commit older than the day,
    relying on the walk being sorted by committer date. Histories with clock
    skew can make that cut the scan short; pass early_exit=False to compare
    every commit against the day window instead.

    When no tip is given, or the tip does not reach the commit, the commit is
    ranked by the same-day commits in its own ancestry, so distinct commits of
    one day on an unmerged branch still get distinct ordinals.

    Args:
        repo: Opened repository
        commit: Commit to rank
        tip: Commit the walk starts from
        early_exit: Stop at the first commit older than the day

    Returns:
        The ordinal, 0 for the most recent commit of the day
    """
    if tip is not None:
        ordinal = _rank_from_tip(repo, commit, tip, early_exit)
        if ordinal is not None:
            logger.debug(
                "Order of %s is %d seen from %s",
                commit.short_hash,
                ordinal,
                tip.short_hash,
            )
            return ordinal
        logger.debug(
            "%s not reached from %s, ranking it within its own history",
            commit.short_hash,
            tip.short_hash,
        )

    ordinal = _rank_in_own_history(repo, commit, early_exit)
    logger.debug("Order of %s within its own history is %d", commit.short_hash, ordinal)
    return ordinal


def version_fields(
    repo: GitRepository,
    commit: Commit,
    baseline: int,
    tip: Optional[Commit] = None,
    early_exit: bool = True,
) -> VersionFields:
    """Compute the four version fields of ``commit``.

    Both the forward computation and the inverse search call this, so a
    version always maps back to the commit it was produced from.
    """
    when = commit.committed_at_utc
    return VersionFields(
        year_offset=year_offset(commit, baseline),
        month=when.month,
        day=when.day,
        order=count_same_day_order(repo, commit, tip=tip, early_exit=early_exit),
    )
