"""Mirror store synchronization."""

from backend.core.sync.mirror_sync import MirrorSink, MirrorSyncDrainer

__all__ = ["MirrorSink", "MirrorSyncDrainer"]
