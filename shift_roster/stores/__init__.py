"""Per-application registry of domain stores."""

from __future__ import annotations

import threading

from flask import Flask, current_app

from shift_roster.snapshots import SnapshotCache
from shift_roster.stores.base import Store, WriteRejected, WriteResult
from shift_roster.stores.groups import GroupStore
from shift_roster.stores.leaves import LeaveStore
from shift_roster.stores.people import PersonStore
from shift_roster.stores.roles import RoleStore
from shift_roster.stores.rosters import RosterStore
from shift_roster.stores.shifts import ShiftStore
from shift_roster.stores.templates import ShiftTemplateStore

EXTENSION_KEY = "shift_roster.stores"

__all__ = [
    "Store",
    "StoreRegistry",
    "WriteRejected",
    "WriteResult",
    "get_stores",
    "init_stores",
]


class StoreRegistry:
    def __init__(self, snapshots: SnapshotCache | None = None) -> None:
        self.snapshots = snapshots
        self.roles = RoleStore()
        self.people = PersonStore()
        self.groups = GroupStore()
        self.leaves = LeaveStore()
        self.templates = ShiftTemplateStore(snapshots)
        self.rosters = RosterStore(snapshots)
        self.shifts = ShiftStore()
        self.initialized = False
        self._init_lock = threading.Lock()

    def all(self) -> list[Store]:
        return [self.roles, self.people, self.groups, self.shifts, self.leaves, self.templates, self.rosters]

    def restore_snapshots(self) -> None:
        for store in (self.templates, self.rosters):
            if store.restore():
                current_app.logger.info("Restored cached %s snapshot.", store.name)

    def initialize(self) -> bool:
        """Load every domain once; roles and people first since the rest refer to them."""
        if self.initialized:
            return False
        with self._init_lock:
            if self.initialized:
                return False
            self.restore_snapshots()
            self.roles.fetch()
            self.people.fetch()
            for store in (self.groups, self.shifts, self.leaves, self.templates, self.rosters):
                store.fetch()
            self.initialized = True
        current_app.logger.info("Stores initialised.")
        return True

    def refresh(self, *names: str) -> None:
        for name in names:
            getattr(self, name).fetch()


def init_stores(app: Flask) -> StoreRegistry:
    snapshots = SnapshotCache(app.config.get("SNAPSHOT_CACHE_DIR"), app.logger)
    registry = StoreRegistry(snapshots)
    app.extensions[EXTENSION_KEY] = registry
    return registry


def get_stores() -> StoreRegistry:
    return current_app.extensions[EXTENSION_KEY]
