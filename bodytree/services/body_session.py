from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Iterable, Optional

from bodytree.core.events import (
    SKELETON_BUILT,
    SKELETON_UPDATED,
    SNAPSHOT_EXPORTED,
    EventBus,
    SkeletonBuiltEvent,
    SkeletonUpdatedEvent,
    SnapshotExportedEvent,
)
from bodytree.core.frames import FrameEntry
from bodytree.core.joint_tree import JointTree
from bodytree.core.snapshot import ImmutableJointTree
from bodytree.models.config import AppConfig
from bodytree.services.export_manager import SnapshotExporter

logger = logging.getLogger(__name__)


@dataclass
class BodySessionState:
    frames_received: int = 0
    updates_applied: int = 0
    last_timestamp: float = 0.0
    last_update_at: float | None = None
    exports: int = 0
    resolution_errors: list[str] = field(default_factory=list)


class BodySession:
    """Feeds tracked frames into a live joint tree and exports snapshots of it."""

    def __init__(self, cfg: AppConfig, event_bus: EventBus, exporter: SnapshotExporter):
        self.cfg = cfg
        self.event_bus = event_bus
        self.exporter = exporter
        self.tree: Optional[JointTree] = None
        self.state = BodySessionState()
        self._lock = threading.Lock()

    def ingest_frame(self, entries: Iterable[FrameEntry], timestamp: float | None = None) -> dict:
        entries = list(entries)
        now = float(timestamp) if timestamp is not None else time.time()
        using_absolute = self.cfg.tracking.using_absolute_translation
        with self._lock:
            self.state.frames_received += 1
            self.state.last_timestamp = now

            if self.tree is None or self.tree.root is None:
                if not entries:
                    return {"ok": True, "message": "empty_frame", "tree_size": None}
                tree = JointTree()
                errors = tree.build_from_flat_list(entries, using_absolute)
                self.tree = tree
                self.state.last_update_at = now
                self.state.resolution_errors = [str(e) for e in errors]
                self.event_bus.publish(
                    SKELETON_BUILT,
                    SkeletonBuiltEvent(
                        timestamp=now,
                        tree_size=tree.tree_size,
                        resolution_errors=list(self.state.resolution_errors),
                    ),
                )
                return {
                    "ok": True,
                    "message": "built",
                    "tree_size": tree.tree_size,
                    "resolution_errors": list(self.state.resolution_errors),
                }

            if not self.tree.can_update:
                return {"ok": True, "message": "frozen", "tree_size": self.tree.tree_size}

            interval = float(self.cfg.tracking.update_interval_s)
            last = self.state.last_update_at
            if last is not None and interval > 0 and (now - last) < interval:
                return {"ok": True, "message": "throttled", "tree_size": self.tree.tree_size}

            updated = self.tree.update_joints(entries, using_absolute)
            self.state.updates_applied += 1
            self.state.last_update_at = now
            self.event_bus.publish(
                SKELETON_UPDATED, SkeletonUpdatedEvent(timestamp=now, entries=updated)
            )
            return {
                "ok": True,
                "message": "updated",
                "tree_size": self.tree.tree_size,
                "updated_joints": updated,
            }

    def _snapshot_locked(self) -> ImmutableJointTree:
        if self.tree is None or self.tree.root is None:
            raise ValueError("no_skeleton")
        self.tree.can_update = False
        try:
            return ImmutableJointTree.construct_from(self.tree)
        finally:
            self.tree.can_update = True

    def snapshot(self) -> ImmutableJointTree:
        with self._lock:
            return self._snapshot_locked()

    def record(self, label: str | None = None) -> dict:
        with self._lock:
            snapshot = self._snapshot_locked()
        record = self.exporter.export(snapshot, label=label)
        with self._lock:
            self.state.exports += 1
        self.event_bus.publish(
            SNAPSHOT_EXPORTED,
            SnapshotExportedEvent(
                export_id=record["export_id"],
                path=record["path"],
                tree_size=record["tree_size"],
            ),
        )
        return record

    def reset(self) -> dict:
        with self._lock:
            self.tree = None
            self.state = BodySessionState()
        logger.info("Body session reset")
        return {"ok": True, "message": "reset"}

    def status(self) -> dict:
        with self._lock:
            tree = self.tree
            return {
                "has_skeleton": tree is not None and tree.root is not None,
                "tree_size": tree.tree_size if tree is not None else None,
                "can_update": tree.can_update if tree is not None else False,
                "frames_received": self.state.frames_received,
                "updates_applied": self.state.updates_applied,
                "last_timestamp": self.state.last_timestamp,
                "exports": self.state.exports,
                "resolution_errors": list(self.state.resolution_errors),
                "joints": tree.describe() if tree is not None else [],
            }
