"""
Pytest configuration and shared fixtures for test suite.

Provides a scripted fake for subprocess.run so git can be simulated
without a real repository, plus isolated settings storage.
"""

import subprocess
import pytest
from unittest.mock import patch

from project_version.config import Config
from project_version.settings_manager import SettingsManager, reset_settings_manager


class FakeGit:
    """Scripted replacement for subprocess.run keyed by the full command line."""

    def __init__(self):
        self.responses = {}
        self.mock = None

    def respond(self, command: str, stdout: str = '', returncode: int = 0, stderr: str = ''):
        """Register the result for a command such as 'git rev-parse --git-dir'."""
        self.responses[command] = (returncode, stdout, stderr)

    def raise_on(self, command: str, error: BaseException):
        """Make a command raise instead of returning."""
        self.responses[command] = error

    def repository(self, tag: str = 'v2.4.0', short_sha: str = '9fceb02',
                   full_sha: str = '9fceb02d0ae598e95dc970b74767f19372d61af8'):
        """Script a healthy repository with one tag."""
        self.respond('git rev-parse --git-dir', '.git\n')
        self.respond('git describe --tags --abbrev=0', f'{tag}\n')
        self.respond('git rev-parse --short HEAD', f'{short_sha}\n')
        self.respond('git rev-parse HEAD', f'{full_sha}\n')
        self.respond('git describe --tags --always --long', f'{tag}-0-g{short_sha}\n')

    def __call__(self, command, **kwargs):
        key = ' '.join(command)
        response = self.responses.get(key)
        if response is None:
            return subprocess.CompletedProcess(command, 128, '', f'fatal: unscripted command: {key}')
        if isinstance(response, BaseException):
            raise response
        returncode, stdout, stderr = response
        return subprocess.CompletedProcess(command, returncode, stdout, stderr)

    def commands(self):
        """Command lines that were executed, in order."""
        return [' '.join(c.args[0]) for c in self.mock.call_args_list]


@pytest.fixture
def fake_git():
    """Patch subprocess.run with a FakeGit instance."""
    fake = FakeGit()
    with patch('project_version.git.subprocess.run', side_effect=fake) as mock_run:
        fake.mock = mock_run
        yield fake


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Keep user environment variables out of the tests."""
    for key in ('PROJECT_VERSION_ENABLED', 'PROJECT_VERSION_VERBOSE', 'PROJECT_VERSION_FAIL_ON_ERROR',
                'PROJECT_VERSION_REPO', 'PROJECT_VERSION_FILE', 'PROJECT_VERSION_BUILD_NUMBER_FILE',
                'PROJECT_VERSION_CONFIG_DIR', 'PROJECT_VERSION_GIT_TIMEOUT', 'GIT_PATH', 'LOG_LEVEL'):
        monkeypatch.delenv(key, raising=False)
    reset_settings_manager()
    yield
    reset_settings_manager()


@pytest.fixture
def settings_store(tmp_path):
    """SettingsManager backed by a temporary directory."""
    return SettingsManager(config_dir=str(tmp_path / 'state'))


@pytest.fixture
def repo_config(tmp_path):
    """Config pointing at a temporary repository folder."""
    return Config(
        repo_root=str(tmp_path),
        git_path='git',
        git_timeout=None,
        version_file=str(tmp_path / 'VERSION'),
        build_number_file=None,
        config_dir=str(tmp_path / 'state'),
        log_level='INFO'
    )
