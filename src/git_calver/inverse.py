"""
Inverse lookup: find the commit that produced a version.

The search replays the forward computation against every commit reachable
from HEAD, newest first, and returns the first commit whose fields match.
It is linear in history size times the same-day scan, which is acceptable for
an occasional diagnostic lookup.
"""

import logging
from typing import Optional

from .errors import NoMatchError
from .formatter import VersionFields
from .ordering import version_fields
from .repository import Commit, GitRepository
from .traversal import ancestry_post_order

logger = logging.getLogger(__name__)


def invert(
    repo: GitRepository,
    head: Optional[Commit],
    baseline: int,
    target: VersionFields,
    early_exit: bool = True,
    version: Optional[str] = None,
) -> str:
    """Return the hash of the commit whose version fields equal ``target``.

    Args:
        repo: Opened repository
        head: Commit the search starts from (the repository HEAD)
        baseline: Baseline year used when the version was produced
        target: Parsed version fields
        early_exit: Same-day scan mode, must match the forward computation
        version: Original version string, for error messages

    Raises:
        NoMatchError: If no reachable commit produces the target fields
    """
    label = version if version is not None else ".".join(str(f) for f in target)
    if head is None:
        raise NoMatchError(label)

    target_year = baseline + target.year_offset
    logger.debug(
        "Searching for %04d-%02d-%02d order %d from %s",
        target_year,
        target.month,
        target.day,
        target.order,
        head.short_hash,
    )

    scanned = 0
    with ancestry_post_order(repo, head) as commits:
        for candidate in commits:
            scanned += 1
            when = candidate.committed_at_utc
            # Cheap date check first; the ordinal needs its own history scan
            if (when.month, when.day) != (target.month, target.day):
                continue

            fields = version_fields(
                repo, candidate, baseline, tip=head, early_exit=early_exit
            )
            if fields == target:
                logger.debug("Matched %s after %d commits", candidate.hash, scanned)
                return candidate.hash

    logger.debug("No match after scanning %d commits", scanned)
    raise NoMatchError(label)
