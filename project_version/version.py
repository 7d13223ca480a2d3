"""
Semantic version value type.

A version is "major.minor.patch" with an optional opaque revision token
appended after a '+', e.g. "1.2.3" or "1.2.3+9fceb02". A single leading
'v' (any case) is accepted when parsing, so git tags like "v1.2.3" parse
directly.
"""

import re
from dataclasses import dataclass, replace
from typing import NamedTuple, Optional

from .errors import InvalidVersionArgument, VersionFormatError

# Largest value accepted for any numeric component (signed 32-bit)
MAX_COMPONENT = 2**31 - 1

_VERSION_PATTERN = re.compile(r'(\d+)\.(\d+)\.(\d+)(?:\+(.+))?', re.ASCII | re.DOTALL)


@dataclass(frozen=True)
class Version:
    """Immutable major.minor.patch version with an optional revision."""

    major: int = 0
    minor: int = 0
    patch: int = 0
    revision: Optional[str] = None

    def __post_init__(self):
        for name in ('major', 'minor', 'patch'):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise InvalidVersionArgument(f"{name} must be an integer (got: {value!r})")
            if value < 0 or value > MAX_COMPONENT:
                raise InvalidVersionArgument(f"{name} must be between 0-{MAX_COMPONENT} (got: {value})")

        if self.revision is not None and not isinstance(self.revision, str):
            raise InvalidVersionArgument(f"revision must be a string or None (got: {self.revision!r})")
        # "" and None both mean "no revision" once formatted
        if self.revision == '':
            object.__setattr__(self, 'revision', None)

    @classmethod
    def parse(cls, text: str) -> 'Version':
        """
        Parse a version string.

        Args:
            text: Version string like "1.2.3", "v1.2.3" or "v1.2.3+abc123"

        Returns:
            Version: Parsed version

        Raises:
            InvalidVersionArgument: If text is None, not a string, or blank
            VersionFormatError: If text does not match the version grammar
        """
        if not isinstance(text, str) or not text.strip():
            raise InvalidVersionArgument("Version string cannot be None or empty")

        candidate = text[1:] if text[:1] in ('v', 'V') else text

        match = _VERSION_PATTERN.fullmatch(candidate)
        if not match:
            raise VersionFormatError(
                f"Invalid version format: '{text}'. "
                f"Expected format: 'major.minor.patch' or 'major.minor.patch+revision'"
            )

        numbers = []
        for group in match.groups()[:3]:
            # Check the digit count first, int() refuses very long strings
            digits = group.lstrip('0') or '0'
            if len(digits) > len(str(MAX_COMPONENT)) or int(digits) > MAX_COMPONENT:
                raise VersionFormatError(f"Version component {digits[:20]} in '{text[:64]}' is too large")
            numbers.append(int(digits))

        return cls(numbers[0], numbers[1], numbers[2], match.group(4))

    @classmethod
    def try_parse(cls, text: str) -> 'VersionResult':
        """Parse a version string, returning (DEFAULT_VERSION, False) instead of raising."""
        try:
            return VersionResult(cls.parse(text), True)
        except (InvalidVersionArgument, VersionFormatError):
            return VersionResult(DEFAULT_VERSION, False)

    def to_canonical_string(self) -> str:
        """Format as "major.minor.patch" or "major.minor.patch+revision"."""
        if self.revision:
            return f"{self.to_release_string()}+{self.revision}"
        return self.to_release_string()

    def to_release_string(self) -> str:
        """
        Format as "major.minor.patch" without the revision.

        Use this for version fields that reject build metadata.
        """
        return f"{self.major}.{self.minor}.{self.patch}"

    def to_prefixed_string(self) -> str:
        """Format as "vmajor.minor.patch[+revision]"."""
        return 'v' + self.to_canonical_string()

    def to_build_number(self) -> int:
        """Combine the numeric parts into one integer, e.g. 1.2.3 -> 10203."""
        return self.major * 10000 + self.minor * 100 + self.patch

    def with_revision(self, revision: Optional[str]) -> 'Version':
        """Return a copy of this version with a different revision."""
        return replace(self, revision=revision)

    def __str__(self) -> str:
        return self.to_canonical_string()


class VersionResult(NamedTuple):
    """Outcome of a tolerant lookup. Unpacks as (version, ok)."""

    version: Version
    ok: bool


DEFAULT_VERSION = Version()


def parse_version(text: str) -> Version:
    """Module-level alias for Version.parse()."""
    return Version.parse(text)


def try_parse_version(text: str) -> VersionResult:
    """Module-level alias for Version.try_parse()."""
    return Version.try_parse(text)
