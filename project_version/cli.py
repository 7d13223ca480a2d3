"""
Command-line interface for Project Version.

Main entry point that wires configuration, the persistent settings store,
git version discovery and the build stamper together.
"""

import signal
import subprocess
import sys
import argparse
from dataclasses import dataclass
from typing import List, Optional
from loguru import logger
from rich.console import Console
from rich.table import Table

from .config import Config, load_config, load_stamp_settings
from .errors import ExternalToolError, InvalidVersionArgument, VersionFormatError
from .git import GitVersionSource
from .logging_config import setup_logging
from .settings_manager import SettingsManager
from .stamper import StampError, VersionStamper
from .utils import read_version_field, write_version_field
from .version import DEFAULT_VERSION, Version

# Shared console for coordinated logging and command output
console = Console()


class ApplicationState:
    """Global application state for signal handling and cleanup."""
    def __init__(self):
        self.config = None
        self.stamper = None
        self.console = console

    def set_config(self, config):
        """Set the configuration object."""
        self.config = config

    def set_stamper(self, stamper):
        """Set the stamper whose injection must be reverted on shutdown."""
        self.stamper = stamper

    def cleanup(self):
        """Perform cleanup operations."""
        if self.stamper is not None:
            try:
                self.stamper.revert()
            except OSError as e:
                logger.warning(f"Failed to revert version during interrupt: {e}")

        if self.console:
            self.console.show_cursor(True)


# Global application state
app_state = ApplicationState()


@dataclass
class VersionStatus:
    """Snapshot of git version information, refreshed on demand only."""

    is_repository: bool = False
    has_version: bool = False
    version: Version = DEFAULT_VERSION
    latest_tag: str = ''
    describe: str = ''
    error_message: str = ''

    def refresh(self, source: GitVersionSource) -> 'VersionStatus':
        """Re-run the git queries and update this snapshot in place."""
        self.is_repository = source.is_repository()
        self.has_version = False
        self.version = DEFAULT_VERSION
        self.latest_tag = ''
        self.describe = ''
        self.error_message = ''

        if not self.is_repository:
            return self

        self.version, self.has_version = source.try_current_version()
        try:
            self.latest_tag = source.latest_tag()
            self.describe = source.describe()
        except ExternalToolError as e:
            self.error_message = e.stderr or str(e)
        return self


def _str2bool(value: str) -> bool:
    value = value.strip().lower()
    if value in ('true', '1', 'yes', 'on'):
        return True
    if value in ('false', '0', 'no', 'off'):
        return False
    raise argparse.ArgumentTypeError(f"expected true/false (got: {value})")


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog='project-version',
        description='Derive a semantic version from git tags and stamp it into version files'
    )

    # Repository and files
    parser.add_argument('--repo', help='Repository root used as the working directory for git (default: current directory)')
    parser.add_argument('--version-file', help='Single-line version file to stamp (default: VERSION)')
    parser.add_argument('--build-number-file', help='Optional file receiving major*10000 + minor*100 + patch')
    parser.add_argument('--config-dir', help='Folder holding settings.json (default: <repo>/.project_version)')
    parser.add_argument('--git-path', help='git executable to use (default: git on PATH)')
    parser.add_argument('--git-timeout', type=float, help='Seconds to wait for each git command, 0 for no limit (default: 10)')

    # Logging
    parser.add_argument('--log-level', choices=['DEBUG', 'VERBOSE', 'INFO', 'WARNING', 'ERROR', 'debug', 'verbose', 'info', 'warning', 'error'], help='Logging level (default: INFO)')

    subparsers = parser.add_subparsers(dest='command', metavar='COMMAND')
    subparsers.required = True

    subparsers.add_parser('show', help='Show the version derived from git')
    subparsers.add_parser('stamp', help='Write the git version into the version file without backup')

    build_parser = subparsers.add_parser('build', help='Stamp the version, run a build command, then revert')
    build_parser.add_argument('--enable', dest='enabled', action='store_const', const=True, help='Inject the version even if disabled in settings')
    build_parser.add_argument('--disable', dest='enabled', action='store_const', const=False, help='Do not inject the version for this run')
    build_parser.add_argument('--verbose', dest='verbose', action='store_const', const=True, help='Log version injection and reversion')
    build_parser.add_argument('--quiet', dest='verbose', action='store_const', const=False, help='Only log failures')
    build_parser.add_argument('--fail-on-error', dest='fail_on_error', action='store_const', const=True, help='Fail if the version cannot be read from git')
    build_parser.add_argument('build_command', nargs=argparse.REMAINDER, help='Build command to run (after --)')

    subparsers.add_parser('restore', help='Revert a version left behind by an interrupted build')

    settings_parser = subparsers.add_parser('settings', help='Show or change persisted flags')
    settings_parser.add_argument('--set-enabled', type=_str2bool, metavar='BOOL', help='Enable automatic versioning during builds')
    settings_parser.add_argument('--set-verbose', type=_str2bool, metavar='BOOL', help='Log version changes')
    settings_parser.add_argument('--set-fail-on-error', type=_str2bool, metavar='BOOL', help='Fail build if the version cannot be retrieved')

    parse_parser = subparsers.add_parser('parse', help='Parse a version string and print its parts')
    parse_parser.add_argument('text', help='Version string, e.g. v1.2.3+abc123')

    return parser.parse_args(argv)


def signal_handler(signum, frame):
    """Handle interrupt signals gracefully."""
    logger.info("Received interrupt signal, shutting down gracefully...")

    # Perform cleanup using global application state
    app_state.cleanup()

    sys.exit(1)


def create_source(config: Config) -> GitVersionSource:
    """Create the git version source for the configured repository."""
    return GitVersionSource(config.repo_root, git_executable=config.git_path, timeout=config.git_timeout)


def create_stamper(config: Config, args=None) -> VersionStamper:
    """Create a stamper using persisted flags overridden by CLI arguments."""
    store = SettingsManager(config.config_dir)
    settings = load_stamp_settings(store, args)
    return VersionStamper(
        create_source(config),
        store,
        config.version_file,
        build_number_file=config.build_number_file,
        settings=settings
    )


def show_version(config: Config) -> int:
    """Show the version derived from git. Returns the exit code."""
    status = VersionStatus().refresh(create_source(config))

    if not status.is_repository:
        logger.warning(f'⚠️  Not a git repository: {config.repo_root}')
        return 1

    if not status.has_version:
        logger.warning(status.error_message or "⚠️  Could not retrieve version from git. Ensure you have at least one tag in format 'v1.2.3'")
        return 1

    version = status.version
    table = Table(title='Git Version', show_header=False)
    table.add_column('Field', style='bold cyan')
    table.add_column('Value')
    table.add_row('Latest Tag', status.latest_tag)
    table.add_row('Commit Hash', version.revision or 'N/A')
    table.add_row('Full Version', version.to_canonical_string())
    table.add_row('Prefixed', version.to_prefixed_string())
    table.add_row('Release', version.to_release_string())
    table.add_row('Build Number', str(version.to_build_number()))
    table.add_row('Describe', status.describe)
    table.add_row('Version File', read_version_field(config.version_file) or '(missing)')
    console.print(table)
    return 0


def stamp_version(config: Config) -> int:
    """Write the git version into the version file permanently. Returns the exit code."""
    source = create_source(config)
    if not source.is_repository():
        logger.error(f'❌ Not a git repository: {config.repo_root}')
        return 1

    version, ok = source.try_current_version()
    if not ok:
        logger.error("❌ Could not retrieve version from git. Ensure you have at least one tag in format 'v1.2.3'")
        return 1

    write_version_field(config.version_file, version.to_release_string())
    if config.build_number_file:
        write_version_field(config.build_number_file, str(version.to_build_number()))

    logger.info(f'✅ Updated {config.version_file} to {version.to_prefixed_string()}')
    return 0


def run_command(command: List[str], cwd: str) -> int:
    """Run a build command in the foreground and return its exit code."""
    logger.debug(f"Running build command: {' '.join(command)}")
    return subprocess.run(command, cwd=cwd).returncode


def run_build(config: Config, args) -> int:
    """Stamp the version, run the build command and always revert. Returns the exit code."""
    command = list(args.build_command or [])
    if command and command[0] == '--':
        command = command[1:]
    if not command:
        logger.error('❌ No build command given. Usage: project-version build -- <command> [args...]')
        return 2

    stamper = create_stamper(config, args)
    app_state.set_stamper(stamper)
    stamper.recover_interrupted()

    try:
        with stamper.stamped():
            try:
                return run_command(command, config.repo_root)
            except OSError as e:
                logger.error(f'❌ Failed to start build command: {e}')
                return 1
    except StampError as e:
        logger.error(f'❌ Build failed: {e}')
        return 1
    finally:
        app_state.set_stamper(None)


def restore_version(config: Config) -> int:
    """Revert a version left behind by an interrupted build. Returns the exit code."""
    stamper = create_stamper(config)
    if not stamper.recover_interrupted():
        logger.info('Nothing to restore')
    return 0


def manage_settings(config: Config, args) -> int:
    """Show or update the persisted flags. Returns the exit code."""
    store = SettingsManager(config.config_dir)

    if args.set_enabled is not None:
        store.enabled = args.set_enabled
    if args.set_verbose is not None:
        store.verbose = args.set_verbose
    if args.set_fail_on_error is not None:
        store.fail_on_error = args.set_fail_on_error

    table = Table(title='Project Version Settings', show_header=False)
    table.add_column('Setting', style='bold cyan')
    table.add_column('Value')
    table.add_row('Enable Automatic Versioning', str(store.enabled))
    table.add_row('Verbose Logging', str(store.verbose))
    table.add_row('Fail Build On Error', str(store.fail_on_error))
    table.add_row('Settings File', str(store.settings_file))
    console.print(table)
    return 0


def parse_command(text: str) -> int:
    """Parse a version string and print its parts. Returns the exit code."""
    try:
        version = Version.parse(text)
    except (InvalidVersionArgument, VersionFormatError) as e:
        logger.error(f'❌ {e}')
        return 1

    console.print(f'Major: {version.major}', markup=False)
    console.print(f'Minor: {version.minor}', markup=False)
    console.print(f'Patch: {version.patch}', markup=False)
    console.print(f'Revision: {version.revision or "N/A"}', markup=False)
    console.print(f'Canonical: {version.to_canonical_string()}', markup=False)
    return 0


def setup_application(argv: Optional[List[str]] = None) -> tuple:
    """Set up logging, parse arguments, and load configuration."""
    # Set up logging with default level first
    setup_logging(console=console)

    args = parse_arguments(argv)

    if args.log_level:
        setup_logging(args.log_level.upper(), console=console)

    # Parsing needs no repository, git or settings
    if args.command == 'parse':
        return args, None

    # Set up signal handlers for graceful shutdown
    signal.signal(signal.SIGINT, signal_handler)
    # SIGTERM doesn't exist on Windows
    if hasattr(signal, 'SIGTERM'):
        signal.signal(signal.SIGTERM, signal_handler)

    config = load_config(args)
    if config is None:
        sys.exit(1)

    app_state.set_config(config)
    setup_logging(config.log_level, console=console)

    return args, config


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point for the application."""
    args, config = setup_application(argv)

    if args.command == 'parse':
        sys.exit(parse_command(args.text))

    if args.command == 'show':
        code = show_version(config)
    elif args.command == 'stamp':
        code = stamp_version(config)
    elif args.command == 'build':
        code = run_build(config, args)
    elif args.command == 'restore':
        code = restore_version(config)
    else:
        code = manage_settings(config, args)

    sys.exit(code)


if __name__ == '__main__':
    main()
