"""
Project Version

Derives a semantic version (major.minor.patch+commit) from git tags and
stamps it into version files around a build, restoring the previous
value afterwards.
"""

from ._version import __version__
from .errors import (
    ExternalToolError,
    InvalidVersionArgument,
    ProjectVersionError,
    VersionFormatError,
    VersionUnavailableError,
)
from .git import GitVersionSource
from .version import DEFAULT_VERSION, Version, VersionResult, parse_version, try_parse_version

__description__ = "Semantic version from git tags, with build-time version stamping"

__all__ = [
    "__version__",
    "DEFAULT_VERSION",
    "ExternalToolError",
    "GitVersionSource",
    "InvalidVersionArgument",
    "ProjectVersionError",
    "Version",
    "VersionFormatError",
    "VersionResult",
    "VersionUnavailableError",
    "parse_version",
    "try_parse_version",
]
