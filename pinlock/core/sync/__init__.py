"""Sync module for reconciling a workspace with a lock file.

Contains the SyncService, which checks out every pinned repository at its
declared revision and then rebuilds the declared commands.
"""

from pinlock.core.sync.sync_service import SyncService

__all__ = ["SyncService"]
