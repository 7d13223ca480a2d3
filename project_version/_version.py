"""Package version.

Kept in sync with the version in pyproject.toml when cutting a release.
"""

from typing import Tuple

__version__ = "1.0.0"
__version_tuple__: Tuple[int, int, int] = (1, 0, 0)
