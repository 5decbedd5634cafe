"""Commit ancestry iteration orders used by the versioning algorithm."""

import logging
from contextlib import contextmanager
from typing import Iterator

from .repository import Commit, GitRepository

logger = logging.getLogger(__name__)


@contextmanager
def ancestry_post_order(repo: GitRepository, commit: Commit) -> Iterator[Iterator[Commit]]:
    """Iterate ancestry most-recent-first, starting with ``commit``.

    Commits come in committer-date order (newest first) and a commit is never
    listed before all of its children, so merged branches are interleaved near
    their merge point as in ``git log``. Commits with equal timestamps keep the
    order in which git's walk reaches them. Shallow clones simply end at the
    shallow boundary.

    The iterator is single use; request a new one for every scan.
    """
    with repo.iter_log(commit, order=GitRepository.ORDER_DATE) as commits:
        yield commits


@contextmanager
def ancestry_full(repo: GitRepository, commit: Commit) -> Iterator[Iterator[Commit]]:
    """Iterate every ancestor reachable from ``commit`` in no particular order."""
    with repo.iter_log(commit, order=GitRepository.ORDER_DEFAULT) as commits:
        yield commits
