"""
Utility functions for Project Version.

Small platform helpers and single-line file access shared by the stamper
and the command-line interface.
"""

import os
from typing import Optional


def is_windows() -> bool:
    """Check if running on Windows operating system."""
    return os.name == 'nt'


def is_process_running(pid: int) -> bool:
    """
    Check whether a process with the given id is alive.

    On Windows there is no cheap signal-0 probe, so the check is done
    through OpenProcess.

    Args:
        pid: Process id to check

    Returns:
        bool: True if the process exists
    """
    if pid <= 0:
        return False

    if is_windows():
        import ctypes
        PROCESS_QUERY_LIMITED_INFORMATION = 0x1000
        handle = ctypes.windll.kernel32.OpenProcess(PROCESS_QUERY_LIMITED_INFORMATION, False, pid)
        if not handle:
            return False
        ctypes.windll.kernel32.CloseHandle(handle)
        return True

    try:
        os.kill(pid, 0)
    except ProcessLookupError:
        return False
    except PermissionError:
        # Exists, but owned by another user
        return True
    except OSError:
        return False
    return True


def read_version_field(path: str) -> Optional[str]:
    """
    Read a single-line version file.

    Args:
        path: File to read

    Returns:
        str: First line without the line ending, or None if the file does not exist
    """
    if not os.path.exists(path):
        return None
    with open(path, 'r', encoding='utf-8') as f:
        return f.readline().rstrip('\r\n')


def write_version_field(path: str, value: str) -> None:
    """Write a single value followed by a newline, creating parent folders."""
    parent = os.path.dirname(path)
    if parent:
        os.makedirs(parent, exist_ok=True)
    with open(path, 'w', encoding='utf-8') as f:
        f.write(f"{value}\n")
