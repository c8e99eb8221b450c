"""Snapshot storage module."""

from .output import SnapshotWriter

__all__ = ["SnapshotWriter"]
