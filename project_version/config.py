"""
Configuration management for Project Version.

Handles environment variable loading, validation, and provides a centralized
configuration object for the command-line interface.
"""

import os
import shutil
from dataclasses import dataclass
from typing import Optional
from dotenv import load_dotenv
from loguru import logger

from .settings_manager import DEFAULT_CONFIG_DIR_NAME, SettingsManager

# Load environment variables from .env file
load_dotenv()

VALID_LOG_LEVELS = ['DEBUG', 'VERBOSE', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']


def get_config_value(cli_args, field_name: str, env_key: str, default, value_type: type = str):
    """
    Get configuration value with proper precedence: CLI args > env vars > defaults.

    Args:
        cli_args: CLI arguments object or None
        field_name: Name of the CLI argument field
        env_key: Environment variable key
        default: Default value if neither CLI nor env var is set
        value_type: Type to convert the value to (str, int, float, bool)

    Returns:
        The configuration value converted to the specified type
    """
    cli_value = getattr(cli_args, field_name, None) if cli_args else None
    if cli_value is not None:
        return cli_value

    env_value = os.environ.get(env_key, '')

    # Handle boolean conversion specially
    if value_type == bool:
        if env_value.strip().lower() in ('true', '1', 'yes'):
            return True
        elif env_value.strip().lower() in ('false', '0', 'no'):
            return False
        return default

    # Handle other types
    if not env_value:
        return default

    try:
        return value_type(env_value)
    except (ValueError, TypeError):
        return default


def get_config_value_str(cli_args, field_name: str, env_key: str, default: str = '') -> str:
    """Get string configuration value."""
    return get_config_value(cli_args, field_name, env_key, default, str)


def get_config_value_float(cli_args, field_name: str, env_key: str, default: float = 0.0) -> float:
    """Get float configuration value."""
    return get_config_value(cli_args, field_name, env_key, default, float)


def get_config_value_bool(cli_args, field_name: str, env_key: str, default: bool = False) -> bool:
    """Get boolean configuration value."""
    return get_config_value(cli_args, field_name, env_key, default, bool)


@dataclass
class StampSettings:
    """Flags controlling version injection around a build."""

    enabled: bool = False
    verbose: bool = True
    fail_on_error: bool = False


@dataclass
class Config:
    """Configuration object containing all application settings."""

    # Repository
    repo_root: str
    git_path: str
    git_timeout: Optional[float]

    # Files written during stamping
    version_file: str
    build_number_file: Optional[str]

    # Persistent state (flags and backups)
    config_dir: str

    # Logging
    log_level: str


def _resolve_path(repo_root: str, path: str) -> str:
    """Interpret a relative path against the repository root."""
    if not path:
        return path
    if os.path.isabs(path):
        return path
    return os.path.join(repo_root, path)


def load_stamp_settings(store: SettingsManager, cli_args=None) -> StampSettings:
    """
    Resolve stamping flags: CLI overrides > persisted settings (which fall back to env vars).

    Args:
        store: Persistent settings store
        cli_args: Parsed CLI arguments or None

    Returns:
        StampSettings: Effective flags for this run
    """
    enabled = getattr(cli_args, 'enabled', None) if cli_args else None
    verbose = getattr(cli_args, 'verbose', None) if cli_args else None
    fail_on_error = getattr(cli_args, 'fail_on_error', None) if cli_args else None

    return StampSettings(
        enabled=store.enabled if enabled is None else enabled,
        verbose=store.verbose if verbose is None else verbose,
        fail_on_error=store.fail_on_error if fail_on_error is None else fail_on_error,
    )


def load_config(cli_args=None) -> Optional[Config]:
    """
    Load and validate configuration from CLI arguments and environment variables.
    CLI arguments take precedence over environment variables.

    Args:
        cli_args: Parsed CLI arguments or None

    Returns:
        Config: Validated configuration object, or None if validation failed
    """
    repo_root = get_config_value_str(cli_args, 'repo', 'PROJECT_VERSION_REPO', os.getcwd())
    repo_root = os.path.abspath(repo_root)

    version_file = get_config_value_str(cli_args, 'version_file', 'PROJECT_VERSION_FILE', 'VERSION')
    build_number_file = get_config_value_str(cli_args, 'build_number_file', 'PROJECT_VERSION_BUILD_NUMBER_FILE', '')
    config_dir = get_config_value_str(cli_args, 'config_dir', 'PROJECT_VERSION_CONFIG_DIR',
                                      os.path.join(repo_root, DEFAULT_CONFIG_DIR_NAME))
    git_path = get_config_value_str(cli_args, 'git_path', 'GIT_PATH', '')
    git_timeout = get_config_value_float(cli_args, 'git_timeout', 'PROJECT_VERSION_GIT_TIMEOUT', 10.0)

    # Handle log_level (case insensitive)
    log_level = get_config_value_str(cli_args, 'log_level', 'LOG_LEVEL', 'INFO').upper()

    validation_errors = []

    if log_level not in VALID_LOG_LEVELS:
        validation_errors.append(f'LOG_LEVEL must be one of {VALID_LOG_LEVELS} (got: {log_level})')

    if git_timeout < 0:
        validation_errors.append(f'PROJECT_VERSION_GIT_TIMEOUT must be 0 or more seconds (got: {git_timeout})')

    if not os.path.isdir(repo_root):
        validation_errors.append(f'PROJECT_VERSION_REPO ({repo_root}) is not a directory')

    # Find git
    resolved_git = shutil.which(git_path or 'git')
    if not resolved_git:
        validation_errors.append(f'git not found ({git_path or "git"}). git must be installed and available in PATH.')

    if validation_errors:
        logger.error('❌ Configuration Error:')
        for i, error_msg in enumerate(validation_errors, 1):
            logger.error(f'   {i}. {error_msg}')
        return None

    config = Config(
        repo_root=repo_root,
        git_path=resolved_git,
        git_timeout=git_timeout or None,
        version_file=_resolve_path(repo_root, version_file),
        build_number_file=_resolve_path(repo_root, build_number_file) or None,
        config_dir=_resolve_path(repo_root, config_dir),
        log_level=log_level
    )

    logger.debug(f'PROJECT_VERSION_REPO = {config.repo_root}')
    logger.debug(f'PROJECT_VERSION_FILE = {config.version_file}')
    logger.debug(f'PROJECT_VERSION_BUILD_NUMBER_FILE = {config.build_number_file}')
    logger.debug(f'PROJECT_VERSION_CONFIG_DIR = {config.config_dir}')
    logger.debug(f'GIT_PATH = {config.git_path}')
    logger.debug(f'PROJECT_VERSION_GIT_TIMEOUT = {config.git_timeout}')

    return config
