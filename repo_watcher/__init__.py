"""Repository Watcher - GitHub repository metadata snapshots."""

__version__ = "0.1.0"
