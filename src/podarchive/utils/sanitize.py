"""Filesystem-safe name fragments.

Characters are dropped, never replaced, so the result of sanitizing a string
that is already clean is the string itself.
"""

import sys

EXTRA_INVALID_CHARS = frozenset('<>:"/\\|?*')

if sys.platform == "win32":
    _CONTROL_CHARS = frozenset(chr(i) for i in range(32))
    INVALID_PATH_CHARS = frozenset('"<>|') | _CONTROL_CHARS
    INVALID_FILENAME_CHARS = frozenset('"<>|:*?\\/') | _CONTROL_CHARS
else:
    INVALID_PATH_CHARS = frozenset("\0")
    INVALID_FILENAME_CHARS = frozenset("\0/")

_FOLDER_INVALID = INVALID_PATH_CHARS | EXTRA_INVALID_CHARS
_FILE_INVALID = INVALID_FILENAME_CHARS | EXTRA_INVALID_CHARS


def _strip_chars(text: str, invalid: frozenset[str]) -> str:
    return "".join(c for c in text if c not in invalid).strip()


def sanitize_folder_name(name: str) -> str:
    """Make ``name`` usable as a directory name.

    Args:
        name: Arbitrary text, e.g. ``"My Show (2024)"``

    Returns:
        ``name`` without path-invalid characters, whitespace-trimmed
    """
    return _strip_chars(name, _FOLDER_INVALID)


def sanitize_file_name(name: str) -> str:
    """Make ``name`` usable as a file name.

    Args:
        name: Arbitrary text, e.g. an episode title

    Returns:
        ``name`` without filename-invalid characters, whitespace-trimmed
    """
    return _strip_chars(name, _FILE_INVALID)
