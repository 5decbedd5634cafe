"""
Read-only access to a git repository.

Opens a repository by path, resolves revisions to commits and streams commit
metadata (hash, parents, committer timestamp) for history traversals. All git
operations go through run_git_command()/stream_git_lines() from git_runner.
"""

import logging
import re
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Iterator, Optional, Tuple, Union

from .errors import (
    GitCommandError,
    NotACommitError,
    NotARepositoryError,
    UnresolvedRevisionError,
)
from .utils.git_runner import run_git_command, stream_git_lines

logger = logging.getLogger(__name__)

HEX_RE = re.compile(r"^[0-9a-fA-F]{4,64}$")


@dataclass(frozen=True)
class Commit:
    """Commit metadata needed to derive a calendar version."""

    hash: str
    parents: Tuple[str, ...]
    committed_at: datetime  # committer timestamp, timezone-aware

    @property
    def is_root(self) -> bool:
        return not self.parents

    @property
    def committed_at_utc(self) -> datetime:
        return self.committed_at.astimezone(timezone.utc)

    @property
    def short_hash(self) -> str:
        return self.hash[:7]


class GitRepository:
    """Handle on an opened git repository.

    Use as a context manager (or call close()) so that the per-handle
    baseline cache is dropped when the invocation ends.
    """

    # Fields separated by NUL character (\x00), one commit per line
    LOG_FORMAT = "%H%x00%P%x00%cI"

    # Traversal orders understood by iter_log()
    ORDER_DATE = "date"
    ORDER_DEFAULT = "default"

    def __init__(self, root: Path, git_dir: Path, bare: bool = False):
        """Initialize the repository handle.

        Args:
            root: Work tree root (the git directory itself for bare repositories)
            git_dir: Absolute path of the git directory
            bare: Whether the repository has no work tree
        """
        self.root = root
        self.git_dir = git_dir
        self.bare = bare
        self.baseline_cache: Dict[str, int] = {}
        self._closed = False

    def __enter__(self) -> "GitRepository":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"GitRepository(root={str(self.root)!r})"

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """Release the handle. Further queries raise ValueError."""
        self.baseline_cache.clear()
        self._closed = True

    def _ensure_open(self) -> None:
        if self._closed:
            raise ValueError(f"operation on closed repository: {self.root}")

    def _git(self, *args: str, check: bool = True):
        self._ensure_open()
        return run_git_command(["git", *args], cwd=self.root, check=check)

    def has_commits(self) -> bool:
        """Return True when at least one commit is reachable from any ref."""
        result = self._git("rev-list", "-n", "1", "--all")
        return bool(result.stdout.strip())

    def head(self) -> Optional[Commit]:
        """Return the HEAD commit, or None when HEAD is unborn."""
        try:
            return self.resolve("HEAD")
        except UnresolvedRevisionError:
            return None

    def resolve(self, revision: str) -> Optional[Commit]:
        """Resolve a revision string to a commit.

        Accepts HEAD, symbolic refs, branch and tag names, full or abbreviated
        hashes and relative expressions such as ``HEAD~2``. Annotated tags are
        peeled to the commit they point at.

        Args:
            revision: Revision to resolve

        Returns:
            The resolved Commit, or None when the repository has no commits

        Raises:
            UnresolvedRevisionError: If nothing matches the revision
            NotACommitError: If the revision names a tree, blob or a tag that
                does not point at a commit
        """
        if not self.has_commits():
            logger.debug("Repository %s has no commits", self.root)
            return None

        if not revision or revision.startswith("-"):
            raise UnresolvedRevisionError(revision)

        object_id = self._rev_parse(revision)
        if object_id is None:
            object_id = self._lookup_raw_commit(revision)

        object_type = self._object_type(object_id)
        if object_type == "tag":
            peeled = self._rev_parse(f"{object_id}^{{}}")
            peeled_type = self._object_type(peeled) if peeled else "tag"
            if peeled is None or peeled_type != "commit":
                raise NotACommitError(revision, peeled_type)
            object_id = peeled
        elif object_type != "commit":
            raise NotACommitError(revision, object_type)

        logger.debug("Resolved %s to %s", revision, object_id)
        return self.get_commit(object_id)

    def _rev_parse(self, revision: str) -> Optional[str]:
        result = self._git("rev-parse", "--verify", "--quiet", revision, check=False)
        if result.returncode != 0:
            return None
        return result.stdout.strip() or None

    def _lookup_raw_commit(self, revision: str) -> str:
        """Look a raw object hash up directly in the object database.

        Abbreviated hashes that are ambiguous for rev-parse still resolve when
        exactly one candidate is a commit.
        """
        if not HEX_RE.match(revision):
            raise UnresolvedRevisionError(revision)

        object_id = self._rev_parse(f"{revision}^{{commit}}")
        if object_id is not None:
            return object_id

        result = self._git("cat-file", "-t", revision, check=False)
        if result.returncode == 0:
            raise NotACommitError(revision, result.stdout.strip())
        raise UnresolvedRevisionError(revision)

    def _object_type(self, object_id: str) -> str:
        return str(self._git("cat-file", "-t", object_id).stdout.strip())

    def get_commit(self, commit_hash: str) -> Commit:
        """Fetch a commit by hash.

        Raises:
            UnresolvedRevisionError: If the commit does not exist
        """
        try:
            result = self._git(
                "-c",
                "log.showSignature=false",
                "show",
                "-s",
                f"--format={self.LOG_FORMAT}",
                commit_hash,
            )
        except GitCommandError:
            raise UnresolvedRevisionError(commit_hash)

        line = result.stdout.strip("\n").split("\n")[0]
        if not line:
            raise UnresolvedRevisionError(commit_hash)
        return self._parse_commit_line(line)

    @contextmanager
    def iter_log(self, commit: Commit, order: str = ORDER_DATE) -> Iterator[Iterator[Commit]]:
        """Stream the ancestry of a commit.

        Args:
            commit: Commit to start from (included in the output)
            order: ORDER_DATE for committer-date order with children before
                parents, ORDER_DEFAULT for git's default walk

        Yields:
            Lazy iterator of Commit objects, valid inside the with block
        """
        self._ensure_open()
        cmd = ["git", "-c", "log.showSignature=false", "log", f"--format={self.LOG_FORMAT}"]
        if order == self.ORDER_DATE:
            cmd.append("--date-order")
        elif order != self.ORDER_DEFAULT:
            raise ValueError(f"unknown traversal order: {order}")
        cmd.extend([commit.hash, "--"])

        with stream_git_lines(cmd, self.root) as lines:
            yield (self._parse_commit_line(line) for line in lines if line)

    @staticmethod
    def _parse_commit_line(line: str) -> Commit:
        """Parse one LOG_FORMAT line into a Commit."""
        fields = line.split("\x00")
        if len(fields) != 3:
            raise ValueError(f"unexpected git log record: {line!r}")

        commit_hash, parents, committer_date = fields
        return Commit(
            hash=commit_hash,
            parents=tuple(parents.split()),
            committed_at=datetime.fromisoformat(committer_date),
        )


def open_repository(path: Union[str, Path]) -> GitRepository:
    """Open the git repository containing ``path``.

    The path may be the work tree root, any directory below it, or a bare
    repository directory.

    Raises:
        NotARepositoryError: If the path does not exist or is not in a repository
    """
    start = Path(path).expanduser()
    if not start.is_dir():
        raise NotARepositoryError(str(path), "no such directory")

    result = run_git_command(
        ["git", "rev-parse", "--absolute-git-dir", "--is-bare-repository"],
        cwd=start,
        check=False,
    )
    if result.returncode != 0:
        detail = result.stderr.strip().splitlines()
        raise NotARepositoryError(str(path), detail[0] if detail else None)

    git_dir_line, bare_line = result.stdout.strip().splitlines()[:2]
    git_dir = Path(git_dir_line)
    bare = bare_line.strip() == "true"

    if bare:
        root = git_dir
    else:
        toplevel = run_git_command(
            ["git", "rev-parse", "--show-toplevel"], cwd=start, check=False
        )
        if toplevel.returncode != 0 or not toplevel.stdout.strip():
            # Inside the git directory of a non-bare repository
            root = git_dir
        else:
            root = Path(toplevel.stdout.strip())

    logger.debug("Opened repository %s (git dir %s)", root, git_dir)
    return GitRepository(root=root, git_dir=git_dir, bare=bare)
