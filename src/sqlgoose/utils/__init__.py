"""Utility helpers for sqlgoose."""

from .hashing import checksum, checksum_file

__all__ = ["checksum", "checksum_file"]
