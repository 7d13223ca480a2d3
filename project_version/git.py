"""
Git-backed version discovery.

Runs git as a subprocess inside the repository root to read the latest
tag and the current commit, and combines them into a Version.

Every call spawns exactly one git process and waits for it. Output from
both pipes is drained by subprocess.run, so large output cannot deadlock.
"""

import os
import subprocess
from typing import List, Optional
from loguru import logger

from .errors import (
    ExternalToolError,
    InvalidVersionArgument,
    VersionFormatError,
    VersionUnavailableError,
)
from .version import DEFAULT_VERSION, Version, VersionResult


class GitVersionSource:
    """Queries a git working tree for its version information."""

    def __init__(self, repo_root: Optional[str] = None, git_executable: str = 'git',
                 timeout: Optional[float] = None):
        """
        Args:
            repo_root: Repository root used as the working directory for git
                (defaults to the current working directory)
            git_executable: Name or path of the git binary
            timeout: Seconds to wait for each git call (None waits forever)
        """
        self.repo_root = repo_root or os.getcwd()
        self.git_executable = git_executable
        self.timeout = timeout

    def run_git(self, *args: str) -> str:
        """
        Run a git command and return its trimmed standard output.

        Args:
            *args: Arguments passed to git, e.g. 'rev-parse', 'HEAD'

        Returns:
            str: Standard output with surrounding whitespace removed

        Raises:
            ExternalToolError: If git cannot be started, times out or exits non-zero
        """
        command: List[str] = [self.git_executable, *args]
        logger.debug(f"Running {' '.join(command)} in {self.repo_root}")

        try:
            result = subprocess.run(
                command,
                capture_output=True,
                text=True,
                encoding='utf-8',
                errors='replace',
                timeout=self.timeout,
                cwd=self.repo_root
            )
        except subprocess.TimeoutExpired:
            raise ExternalToolError(command, None, f"timed out after {self.timeout} seconds")
        except (OSError, ValueError) as e:
            # FileNotFoundError (no git), PermissionError, missing cwd, NUL byte in a path
            raise ExternalToolError(command, None, str(e)) from e

        stdout = (result.stdout or '').strip()
        stderr = (result.stderr or '').strip()
        logger.debug(f"git {args[0] if args else ''} exited with code {result.returncode}")

        if result.returncode != 0:
            raise ExternalToolError(command, result.returncode, stderr)

        return stdout

    def is_repository(self) -> bool:
        """Check whether repo_root is inside a git repository. Never raises."""
        try:
            self.run_git('rev-parse', '--git-dir')
            return True
        except ExternalToolError as e:
            logger.debug(f"Not a git repository: {e}")
            return False

    def latest_tag(self) -> str:
        """Get the most recent tag reachable from HEAD, e.g. "v1.2.3"."""
        return self.run_git('describe', '--tags', '--abbrev=0')

    def commit_id(self, short: bool = True) -> str:
        """Get the current commit hash (abbreviated unless short is False)."""
        if short:
            return self.run_git('rev-parse', '--short', 'HEAD')
        return self.run_git('rev-parse', 'HEAD')

    def describe(self) -> str:
        """Get the long describe string, e.g. "v1.2.3-5-g1a2b3c4"."""
        return self.run_git('describe', '--tags', '--always', '--long')

    def current_version(self) -> Version:
        """
        Build a Version from the latest tag and the current short commit.

        The commit hash always replaces any revision encoded in the tag.

        Returns:
            Version: e.g. Version(2, 4, 0, "9fceb02") for tag "v2.4.0"

        Raises:
            VersionUnavailableError: Wrapping the ExternalToolError or
                VersionFormatError that caused the failure
        """
        try:
            tag = self.latest_tag()
            commit = self.commit_id(short=True)
            return Version.parse(tag).with_revision(commit)
        except (ExternalToolError, VersionFormatError, InvalidVersionArgument) as e:
            raise VersionUnavailableError(
                "Failed to get version from git. Ensure you're in a git repository "
                f"with at least one tag in format 'v1.2.3' ({e})",
                cause=e
            ) from e

    def try_current_version(self) -> VersionResult:
        """Like current_version(), but returns (DEFAULT_VERSION, False) on failure."""
        try:
            return VersionResult(self.current_version(), True)
        except VersionUnavailableError as e:
            logger.debug(f"Version lookup failed: {e}")
            return VersionResult(DEFAULT_VERSION, False)
