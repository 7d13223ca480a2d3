"""
Tests for git.py module.

Tests git command execution, error reporting and version composition
against a scripted subprocess backend, plus one run against real git.
"""

import shutil
import subprocess
import pytest
from unittest.mock import patch

from project_version.errors import (
    ExternalToolError,
    VersionFormatError,
    VersionUnavailableError,
)
from project_version.git import GitVersionSource
from project_version.version import DEFAULT_VERSION, Version


@pytest.fixture
def source(tmp_path):
    return GitVersionSource(str(tmp_path))


class TestRunGit:
    """Test subprocess invocation details."""

    def test_returns_trimmed_stdout(self, source, fake_git):
        fake_git.respond('git rev-parse --short HEAD', '  9fceb02\n\n')
        assert source.run_git('rev-parse', '--short', 'HEAD') == '9fceb02'

    def test_invocation_arguments(self, source, fake_git, tmp_path):
        """Test list arguments, no shell, captured output and repo cwd."""
        fake_git.respond('git rev-parse --git-dir', '.git')
        source.run_git('rev-parse', '--git-dir')

        args, kwargs = fake_git.mock.call_args
        assert args[0] == ['git', 'rev-parse', '--git-dir']
        assert kwargs['cwd'] == str(tmp_path)
        assert kwargs['capture_output'] is True
        assert kwargs['text'] is True
        assert kwargs.get('shell', False) is False

    def test_timeout_passed_through(self, tmp_path, fake_git):
        fake_git.respond('git rev-parse --git-dir', '.git')
        GitVersionSource(str(tmp_path), timeout=5).run_git('rev-parse', '--git-dir')
        assert fake_git.mock.call_args.kwargs['timeout'] == 5

    def test_custom_executable(self, tmp_path, fake_git):
        fake_git.respond('/opt/git/bin/git rev-parse HEAD', 'abc')
        source = GitVersionSource(str(tmp_path), git_executable='/opt/git/bin/git')
        assert source.run_git('rev-parse', 'HEAD') == 'abc'

    def test_defaults_to_current_directory(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        assert GitVersionSource().repo_root == str(tmp_path)

    def test_non_zero_exit_raises(self, source, fake_git):
        fake_git.respond('git describe --tags --abbrev=0', '', returncode=128,
                         stderr='fatal: No names found, cannot describe anything.\n')

        with pytest.raises(ExternalToolError) as exc_info:
            source.run_git('describe', '--tags', '--abbrev=0')

        error = exc_info.value
        assert error.returncode == 128
        assert error.stderr == 'fatal: No names found, cannot describe anything.'
        assert error.command == ['git', 'describe', '--tags', '--abbrev=0']
        assert 'No names found' in str(error)

    def test_zero_exit_with_odd_output_is_success(self, source, fake_git):
        fake_git.respond('git describe --tags --abbrev=0', 'not-a-version', stderr='warning: something')
        assert source.latest_tag() == 'not-a-version'

    def test_missing_executable_raises(self, source, fake_git):
        fake_git.raise_on('git rev-parse HEAD', FileNotFoundError("No such file or directory: 'git'"))

        with pytest.raises(ExternalToolError) as exc_info:
            source.commit_id(short=False)

        assert exc_info.value.returncode is None
        assert 'No such file' in exc_info.value.stderr
        assert isinstance(exc_info.value.__cause__, FileNotFoundError)

    def test_timeout_raises(self, source, fake_git):
        fake_git.raise_on('git rev-parse HEAD', subprocess.TimeoutExpired(['git'], 1))

        with pytest.raises(ExternalToolError) as exc_info:
            source.commit_id(short=False)

        assert exc_info.value.returncode is None
        assert 'timed out' in exc_info.value.stderr


class TestIsRepository:
    """Test repository detection."""

    def test_repository(self, source, fake_git):
        fake_git.respond('git rev-parse --git-dir', '.git')
        assert source.is_repository() is True

    def test_not_repository(self, source, fake_git):
        fake_git.respond('git rev-parse --git-dir', '', returncode=128,
                         stderr='fatal: not a git repository (or any of the parent directories): .git')
        assert source.is_repository() is False

    def test_git_missing(self, source, fake_git):
        fake_git.raise_on('git rev-parse --git-dir', FileNotFoundError('git'))
        assert source.is_repository() is False

    def test_missing_directory(self, tmp_path):
        """Test a missing working directory is reported as False, not raised."""
        source = GitVersionSource(str(tmp_path / 'does-not-exist'))
        assert source.is_repository() is False

    def test_unlaunchable_path(self, tmp_path):
        """Test a path subprocess refuses to use is reported as False."""
        source = GitVersionSource(str(tmp_path) + '/a\x00b')
        assert source.is_repository() is False

    def test_launch_value_error_is_external_tool_error(self, source, fake_git):
        fake_git.raise_on('git describe --tags --abbrev=0', ValueError('embedded null byte'))

        with pytest.raises(ExternalToolError) as exc_info:
            source.latest_tag()

        assert exc_info.value.returncode is None
        assert isinstance(exc_info.value.__cause__, ValueError)


class TestQueries:
    """Test individual git queries."""

    def test_latest_tag(self, source, fake_git):
        fake_git.repository(tag='v1.5.0')
        assert source.latest_tag() == 'v1.5.0'
        assert fake_git.commands() == ['git describe --tags --abbrev=0']

    def test_commit_id_short(self, source, fake_git):
        fake_git.repository()
        assert source.commit_id() == '9fceb02'
        assert fake_git.commands() == ['git rev-parse --short HEAD']

    def test_commit_id_full(self, source, fake_git):
        fake_git.repository()
        assert source.commit_id(short=False) == '9fceb02d0ae598e95dc970b74767f19372d61af8'
        assert fake_git.commands() == ['git rev-parse HEAD']

    def test_describe(self, source, fake_git):
        fake_git.repository()
        assert source.describe() == 'v2.4.0-0-g9fceb02'


class TestCurrentVersion:
    """Test version composition."""

    def test_current_version(self, source, fake_git):
        fake_git.repository(tag='v2.4.0', short_sha='9fceb02')

        version = source.current_version()

        assert version == Version(2, 4, 0, '9fceb02')
        assert version.to_prefixed_string() == 'v2.4.0+9fceb02'

    def test_live_commit_replaces_tag_revision(self, source, fake_git):
        fake_git.repository(tag='v1.2.3+deadbeef', short_sha='cafe123')
        assert source.current_version() == Version(1, 2, 3, 'cafe123')

    def test_no_tags(self, source, fake_git):
        fake_git.repository()
        fake_git.respond('git describe --tags --abbrev=0', '', returncode=128, stderr='fatal: No tags')

        with pytest.raises(VersionUnavailableError) as exc_info:
            source.current_version()

        cause = exc_info.value.cause
        assert isinstance(cause, ExternalToolError)
        assert cause.stderr == 'fatal: No tags'
        assert exc_info.value.__cause__ is cause

    def test_no_tags_tolerant(self, source, fake_git):
        fake_git.repository()
        fake_git.respond('git describe --tags --abbrev=0', '', returncode=128, stderr='fatal: No tags')

        version, ok = source.try_current_version()

        assert ok is False
        assert version == DEFAULT_VERSION

    def test_bad_tag_format(self, source, fake_git):
        fake_git.repository(tag='release-1.2')

        with pytest.raises(VersionUnavailableError) as exc_info:
            source.current_version()

        assert isinstance(exc_info.value.cause, VersionFormatError)

    def test_very_long_tag_component(self, source, fake_git):
        fake_git.repository(tag='v' + '9' * 5000 + '.0.0')

        with pytest.raises(VersionUnavailableError) as exc_info:
            source.current_version()

        assert isinstance(exc_info.value.cause, VersionFormatError)
        assert source.try_current_version() == (DEFAULT_VERSION, False)

    def test_empty_tag_output(self, source, fake_git):
        """Test a zero exit with no output surfaces as a parse failure."""
        fake_git.repository(tag='')

        with pytest.raises(VersionUnavailableError) as exc_info:
            source.current_version()

        assert isinstance(exc_info.value.cause, ValueError)

    def test_commit_failure(self, source, fake_git):
        fake_git.repository()
        fake_git.respond('git rev-parse --short HEAD', '', returncode=128,
                         stderr="fatal: ambiguous argument 'HEAD'")

        with pytest.raises(VersionUnavailableError) as exc_info:
            source.current_version()

        assert isinstance(exc_info.value.cause, ExternalToolError)

    def test_try_current_version_success(self, source, fake_git):
        fake_git.repository(tag='v0.9.1', short_sha='abc1234')
        assert source.try_current_version() == (Version(0, 9, 1, 'abc1234'), True)

    def test_no_retries(self, source, fake_git):
        fake_git.respond('git describe --tags --abbrev=0', '', returncode=128, stderr='fatal: No tags')
        source.try_current_version()
        assert fake_git.commands() == ['git describe --tags --abbrev=0']


@pytest.mark.skipif(shutil.which('git') is None, reason='git not installed')
class TestRealGit:
    """Run against a throwaway repository with the real git binary."""

    @staticmethod
    def _git(cwd, *args):
        subprocess.run(
            ['git', '-c', 'user.name=Test', '-c', 'user.email=test@example.com',
             '-c', 'commit.gpgsign=false', '-c', 'tag.gpgsign=false', *args],
            cwd=cwd, check=True, capture_output=True
        )

    def test_version_from_real_repository(self, tmp_path):
        self._git(tmp_path, 'init', '-q')
        (tmp_path / 'README').write_text('hello\n')
        self._git(tmp_path, 'add', 'README')
        self._git(tmp_path, 'commit', '-q', '-m', 'initial')
        self._git(tmp_path, 'tag', 'v3.2.1')

        source = GitVersionSource(str(tmp_path), timeout=30)

        assert source.is_repository() is True
        assert source.latest_tag() == 'v3.2.1'
        version = source.current_version()
        assert version.to_release_string() == '3.2.1'
        assert version.revision == source.commit_id(short=True)
        assert source.commit_id(short=False).startswith(version.revision)

    def test_real_directory_without_repository(self, tmp_path):
        # GIT_CEILING_DIRECTORIES stops git from finding a repository above tmp_path
        with patch.dict('os.environ', {'GIT_CEILING_DIRECTORIES': str(tmp_path.parent)}):
            assert GitVersionSource(str(tmp_path)).is_repository() is False
