"""
Centralized Git command runner with dubious ownership handling.

Every git invocation made by git-calver goes through this module. Commands run
with ``safe.directory`` pointing at the repository so that build pipelines
running under a different user than the checkout owner can still read history.

Two entry points are provided:

- ``run_git_command`` for short queries whose whole output is needed.
- ``stream_git_lines`` for history traversals, which are consumed lazily and
  may be abandoned early.
"""

import logging
import os
import subprocess
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Iterator, List, Optional

from ..errors import GitCommandError, GitNotFoundError

logger = logging.getLogger(__name__)


def get_git_environment(project_dir: Path) -> Dict[str, str]:
    """
    Get environment variables for git commands to handle dubious ownership.

    Args:
        project_dir: Path to the repository (or a directory inside it)

    Returns:
        Dictionary of environment variables for git commands
    """
    env = os.environ.copy()

    env["GIT_CONFIG_COUNT"] = "1"
    env["GIT_CONFIG_KEY_0"] = "safe.directory"
    env["GIT_CONFIG_VALUE_0"] = str(Path(project_dir).resolve())

    # Shift caller supplied GIT_CONFIG_* entries up by one so index 0 stays ours
    config_count = 1
    for key in os.environ:
        if key.startswith("GIT_CONFIG_KEY_"):
            idx = key.replace("GIT_CONFIG_KEY_", "")
            if idx.isdigit():
                new_idx = int(idx) + 1
                env[f"GIT_CONFIG_KEY_{new_idx}"] = os.environ[key]
                if f"GIT_CONFIG_VALUE_{idx}" in os.environ:
                    env[f"GIT_CONFIG_VALUE_{new_idx}"] = os.environ[
                        f"GIT_CONFIG_VALUE_{idx}"
                    ]
                config_count = max(config_count, new_idx + 1)

    env["GIT_CONFIG_COUNT"] = str(config_count)

    return env


def _check_command(cmd: List[str]) -> None:
    if not cmd or cmd[0] != "git":
        raise ValueError("Command must start with 'git'")


def run_git_command(
    cmd: List[str],
    cwd: Path,
    check: bool = True,
    timeout: Optional[float] = None,
) -> subprocess.CompletedProcess:
    """
    Run a git command with proper environment handling for dubious ownership.

    Args:
        cmd: Git command as a list (e.g., ["git", "rev-parse", "HEAD"])
        cwd: Working directory for the command
        check: Whether to raise GitCommandError on non-zero exit
        timeout: Optional timeout in seconds

    Returns:
        CompletedProcess instance with text stdout and stderr

    Raises:
        GitCommandError: If check=True and the command fails
        GitNotFoundError: If the git executable cannot be found
    """
    _check_command(cmd)

    logger.debug("Running %s in %s", " ".join(cmd), cwd)
    try:
        result = subprocess.run(
            cmd,
            cwd=cwd,
            capture_output=True,
            text=True,
            timeout=timeout,
            env=get_git_environment(cwd),
        )
    except FileNotFoundError as e:
        raise GitNotFoundError(f"git executable not found: {e}") from e

    if check and result.returncode != 0:
        raise GitCommandError(cmd, result.returncode, result.stderr)

    return result


@contextmanager
def stream_git_lines(cmd: List[str], cwd: Path) -> Iterator[Iterator[str]]:
    """
    Start a git command and yield an iterator over its output lines.

    The child process is terminated and reaped when the ``with`` block exits,
    whether the lines were fully consumed, abandoned early, or an exception
    was raised by the caller.

    Args:
        cmd: Git command as a list
        cwd: Working directory for the command

    Yields:
        Iterator of output lines with the trailing newline removed

    Raises:
        GitCommandError: If the command exits non-zero after being fully read
        GitNotFoundError: If the git executable cannot be found
    """
    _check_command(cmd)

    logger.debug("Streaming %s in %s", " ".join(cmd), cwd)
    # stderr goes to a file: a full stderr pipe would stall git mid-stream
    stderr_file = tempfile.TemporaryFile(mode="w+")
    try:
        process = subprocess.Popen(
            cmd,
            cwd=cwd,
            stdout=subprocess.PIPE,
            stderr=stderr_file,
            text=True,
            env=get_git_environment(cwd),
        )
    except FileNotFoundError as e:
        stderr_file.close()
        raise GitNotFoundError(f"git executable not found: {e}") from e

    exhausted = False

    def lines() -> Iterator[str]:
        nonlocal exhausted
        assert process.stdout is not None
        for line in process.stdout:
            yield line.rstrip("\n")
        exhausted = True

    try:
        yield lines()
        if exhausted:
            returncode = process.wait()
            if returncode != 0:
                stderr_file.seek(0)
                raise GitCommandError(cmd, returncode, stderr_file.read())
    finally:
        if process.poll() is None:
            process.terminate()
        process.wait()
        if process.stdout is not None:
            process.stdout.close()
        stderr_file.close()
