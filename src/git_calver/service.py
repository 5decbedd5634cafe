"""
Calendar versioning service.

Wires repository access, baseline resolution, same-day ordering, formatting
and inverse lookup together behind one object configured by VersionConfig.
"""

import logging
from pathlib import Path
from typing import Any, Optional, Union

from .baseline import resolve_baseline
from .config import VersionConfig
from .errors import UsageError
from .formatter import VersionFields, format_version, parse_version
from .inverse import invert
from .ordering import version_fields
from .repository import Commit, GitRepository, open_repository

logger = logging.getLogger(__name__)


class CalendarVersioner:
    """Derives calendar versions for commits of one repository."""

    def __init__(self, repo: GitRepository, config: Optional[VersionConfig] = None):
        """Initialize the versioner.

        Args:
            repo: Opened repository; the caller owns and closes it
            config: Options, defaults when omitted
        """
        self.repo = repo
        self.config = config or VersionConfig()

    def fields_for(
        self, commit: Commit, baseline: int, tip: Optional[Commit] = None
    ) -> VersionFields:
        """Version fields of a commit, ranked from ``tip`` (default: the commit)."""
        return version_fields(
            self.repo, commit, baseline, tip=tip, early_exit=self.config.early_exit
        )

    def compute_fields(self, revision: Optional[str] = None) -> VersionFields:
        """Resolve a revision and compute its version fields.

        Returns VersionFields.empty() when the repository has no commits.
        The baseline and the same-day ranking are both taken from HEAD, or
        from the commit itself when HEAD is unborn.
        """
        revision = revision or self.config.revision
        commit = self.repo.resolve(revision)
        if commit is None:
            return VersionFields.empty()

        tip = self.repo.head() or commit
        baseline = resolve_baseline(self.repo, tip, self.config.year)
        fields = self.fields_for(commit, baseline, tip=tip)
        logger.debug(
            "Fields for %s (%s): %s with baseline %d",
            revision,
            commit.short_hash,
            tuple(fields),
            baseline,
        )
        return fields

    def version(self, revision: Optional[str] = None) -> str:
        """Formatted version string for a revision."""
        return format_version(
            self.compute_fields(revision),
            prefix=self.config.prefix,
            separator=self.config.separator,
            short=self.config.short,
        )

    def inverse(self, version: Optional[str] = None) -> str:
        """Hash of the commit reachable from HEAD that produced ``version``.

        Raises:
            InvalidInverseVersionError: If the version string cannot be parsed
            NoMatchError: If no commit produces the version
            UsageError: If no version string is given or configured
        """
        version = version if version is not None else self.config.inverse
        if version is None:
            raise UsageError("no version given for inverse lookup")

        target = parse_version(
            version, prefix=self.config.prefix, separator=self.config.separator
        )
        head = self.repo.head()
        baseline = (
            resolve_baseline(self.repo, head, self.config.year) if head is not None else 0
        )
        return invert(
            self.repo,
            head,
            baseline,
            target,
            early_exit=self.config.early_exit,
            version=version,
        )

    def run(self) -> str:
        """Output for the configured mode: a commit hash or a version string."""
        if self.config.inverse is not None:
            return self.inverse()
        return self.version()


def describe(path: Union[str, Path] = ".", **options: Any) -> str:
    """Calendar version of a revision in the repository at ``path``.

    Keyword options are VersionConfig fields (revision, year, prefix, ...).
    """
    config = VersionConfig(**options)
    with open_repository(path) as repo:
        return CalendarVersioner(repo, config).version()


def find_commit(path: Union[str, Path], version: str, **options: Any) -> str:
    """Hash of the commit in the repository at ``path`` that produced ``version``."""
    config = VersionConfig(**options)
    with open_repository(path) as repo:
        return CalendarVersioner(repo, config).inverse(version)
