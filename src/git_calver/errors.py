"""Exceptions raised by git-calver.

Every error the tool can report derives from ``CalverError`` and carries the
process exit status the command line should use for it.
"""

from typing import List, Optional


class CalverError(Exception):
    """Base exception for git-calver errors."""

    exit_code: int = 1

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotARepositoryError(CalverError):
    """Raised when a path is not inside a git repository."""

    def __init__(self, path: str, detail: Optional[str] = None):
        message = f"not a git repository: {path}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)
        self.path = path


class UnresolvedRevisionError(CalverError):
    """Raised when a revision string matches no object."""

    def __init__(self, revision: str):
        super().__init__(f"unable to resolve revision: {revision}")
        self.revision = revision


class NotACommitError(CalverError):
    """Raised when a revision resolves to an object that is not a commit."""

    def __init__(self, revision: str, object_type: str):
        super().__init__(f"revision {revision} is a {object_type}, not a commit")
        self.revision = revision
        self.object_type = object_type


class InvalidYearError(CalverError):
    """Raised when the explicit baseline year is not an integer."""

    def __init__(self, value: str):
        super().__init__(f"invalid year: {value!r}")
        self.value = value


class InvalidInverseVersionError(CalverError):
    """Raised when a version string cannot be parsed back into fields."""

    def __init__(self, version: str, reason: str):
        super().__init__(f"invalid inverse version {version!r}: {reason}")
        self.version = version
        self.reason = reason


class NoMatchError(CalverError):
    """Raised when no commit in history produces the requested version."""

    def __init__(self, version: str):
        super().__init__(f"no commit matches version {version}")
        self.version = version


class UsageError(CalverError):
    """Raised for invalid combinations of command line arguments."""

    exit_code = 2


class ConfigError(CalverError):
    """Raised when an options file cannot be read or validated."""

    pass


class GitNotFoundError(CalverError):
    """Raised when the git executable is not available."""

    pass


class GitCommandError(CalverError):
    """Raised when a git command fails unexpectedly."""

    def __init__(self, cmd: List[str], returncode: int, stderr: Optional[str]):
        detail = (stderr or "").strip()
        message = f"git command failed ({returncode}): {' '.join(cmd)}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)
        self.cmd = cmd
        self.returncode = returncode
        self.stderr = stderr or ""
