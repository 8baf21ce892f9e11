"""Core services: ledgers, lifecycle coordinator, sync bridge, fun facts, DJ gate."""
from barjukebox.core.coordinator import CooldownSweeper, LifecycleCoordinator
from barjukebox.core.sync_bridge import FileBridge, LocalBus, SyncBridge

__all__ = ["CooldownSweeper", "LifecycleCoordinator", "FileBridge", "LocalBus", "SyncBridge"]
