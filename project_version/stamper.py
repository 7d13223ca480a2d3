"""
Build-time version injection.

Writes the version discovered from git into a version file (and optionally
a build-number file) before a build, and puts the previous contents back
afterwards, whether the build succeeded, failed or was interrupted.

The previous contents are kept in the persistent settings store until the
revert happens. If the process dies mid-build the backup is left behind,
and the next run restores it via recover_interrupted().
"""

import os
from contextlib import contextmanager
from pathlib import Path
from typing import Callable, Iterator, Optional
from loguru import logger

from .config import StampSettings
from .errors import ProjectVersionError, VersionUnavailableError
from .git import GitVersionSource
from .settings_manager import SettingsManager
from .utils import is_process_running, write_version_field
from .version import Version

BACKUP_KEY = 'backup.version'
BACKUP_BUILD_NUMBER_KEY = 'backup.build_number'
BACKUP_PID_KEY = 'backup.pid'


class StampError(ProjectVersionError):
    """Version injection failed and fail-on-error is set."""


def _read_backup(path: Optional[str]) -> Optional[str]:
    """Full file contents, or None when the file does not exist."""
    if not path or not os.path.exists(path):
        return None
    return Path(path).read_text(encoding='utf-8')


def _restore_backup(path: str, contents: Optional[str]) -> None:
    """Put back saved contents. None means the file did not exist before."""
    if contents is None:
        if os.path.exists(path):
            os.remove(path)
        return
    Path(path).write_text(contents, encoding='utf-8')


class VersionStamper:
    """Injects the git version into files around a build and reverts it afterwards."""

    def __init__(self, source: GitVersionSource, store: SettingsManager, version_file: str,
                 build_number_file: Optional[str] = None, settings: StampSettings = None):
        self.source = source
        self.store = store
        self.version_file = version_file
        self.build_number_file = build_number_file
        self.settings = settings or StampSettings()

    def _log(self, message: str) -> None:
        if self.settings.verbose:
            logger.info(message)
        else:
            logger.debug(message)

    def _skip_or_fail(self, message: str, cause: Exception = None) -> None:
        if self.settings.fail_on_error:
            if cause is not None:
                raise StampError(message) from cause
            raise StampError(message)
        if self.settings.verbose:
            logger.warning(message)

    def has_backup(self) -> bool:
        """Check whether a previous injection has not been reverted yet."""
        return self.store.has_key(BACKUP_KEY)

    def inject(self) -> Optional[Version]:
        """
        Write the current git version into the configured files.

        Returns:
            Version: The injected version, or None if injection was skipped

        Raises:
            StampError: If the version cannot be determined and fail_on_error is set
        """
        if not self.settings.enabled:
            logger.debug("Automatic versioning disabled, skipping version injection")
            return None

        if not self.source.is_repository():
            self._skip_or_fail(f"Not a git repository ({self.source.repo_root}). Skipping version injection.")
            return None

        if self.settings.fail_on_error:
            try:
                version = self.source.current_version()
            except VersionUnavailableError as e:
                self._skip_or_fail(str(e), cause=e)
                return None
        else:
            version, ok = self.source.try_current_version()
            if not ok:
                self._skip_or_fail(
                    "Could not retrieve version from git. Ensure you have at least one tag in format 'v1.2.3'."
                )
                return None

        # A leftover backup already holds the pristine contents, only fill in what is missing
        backup = {BACKUP_PID_KEY: os.getpid()}
        if not self.has_backup():
            backup[BACKUP_KEY] = _read_backup(self.version_file)
        if self.build_number_file and not self.store.has_key(BACKUP_BUILD_NUMBER_KEY):
            backup[BACKUP_BUILD_NUMBER_KEY] = _read_backup(self.build_number_file)
        self.store.update(backup)

        write_version_field(self.version_file, version.to_release_string())
        if self.build_number_file:
            write_version_field(self.build_number_file, str(version.to_build_number()))

        self._log(f"Injected version from git: {version.to_prefixed_string()} into {self.version_file}")
        return version

    def revert(self) -> bool:
        """
        Restore the files saved by inject().

        Returns:
            bool: True if a backup existed and was restored
        """
        if not self.has_backup():
            return False

        original = self.store.get(BACKUP_KEY)
        _restore_backup(self.version_file, original)

        if self.store.has_key(BACKUP_BUILD_NUMBER_KEY):
            if self.build_number_file:
                _restore_backup(self.build_number_file, self.store.get(BACKUP_BUILD_NUMBER_KEY))
            self.store.delete(BACKUP_BUILD_NUMBER_KEY)

        self.store.delete(BACKUP_PID_KEY)
        self.store.delete(BACKUP_KEY)

        shown = original.strip() if original is not None else '(no file)'
        self._log(f"Reverted version to original: {shown}")
        return True

    def build_in_progress(self) -> bool:
        """Check whether the process that made the backup is still running."""
        pid = self.store.get(BACKUP_PID_KEY)
        if not isinstance(pid, int) or pid == os.getpid():
            return False
        return is_process_running(pid)

    def recover_interrupted(self, build_in_progress: Callable[[], bool] = None) -> bool:
        """
        Revert a backup left behind by an interrupted build.

        Args:
            build_in_progress: Callable reporting whether a build is running now
                (defaults to checking the process id stored with the backup)

        Returns:
            bool: True if a leftover backup was restored
        """
        if not self.has_backup():
            return False

        check = build_in_progress or self.build_in_progress
        if check():
            logger.debug("Version backup belongs to a running build, leaving it in place")
            return False

        logger.warning("Detected interrupted build. Reverting version...")
        return self.revert()

    @contextmanager
    def stamped(self) -> Iterator[Optional[Version]]:
        """
        Inject the version for the duration of a with-block.

        The revert runs on every exit path, including exceptions and
        KeyboardInterrupt.
        """
        try:
            yield self.inject()
        finally:
            self.revert()
