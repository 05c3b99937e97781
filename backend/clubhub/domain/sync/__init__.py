"""Sync domain exports."""

from .engine import SyncEngine, SyncStatus

__all__ = ["SyncEngine", "SyncStatus"]
