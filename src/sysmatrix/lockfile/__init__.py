"""Lockfile model, construction, and IO."""

from .io import parse_lockfile, read_lockfile, serialize_lockfile, write_lockfile
from .model import LockedInput, Lockfile
from .resolve import LOCKFILE_VERSION, build_lockfile

__all__ = [
    "LOCKFILE_VERSION",
    "LockedInput",
    "Lockfile",
    "build_lockfile",
    "parse_lockfile",
    "read_lockfile",
    "serialize_lockfile",
    "write_lockfile",
]
