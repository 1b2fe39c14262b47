"""Hashing utilities for sqlgoose."""

import hashlib
from pathlib import Path


def checksum(content: bytes) -> str:
    """Calculate the MD5 checksum of script bytes.

    Used for drift detection, not security.

    Args:
        content: Exact script bytes.

    Returns:
        32-character lowercase hexadecimal digest.
    """
    return hashlib.md5(content).hexdigest()


def checksum_file(path: Path) -> str:
    """Calculate the checksum of a file's content."""
    return checksum(Path(path).read_bytes())
