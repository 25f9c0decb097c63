from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Dict, List

SKELETON_BUILT = "skeleton_built"
SKELETON_UPDATED = "skeleton_updated"
SNAPSHOT_EXPORTED = "snapshot_exported"


@dataclass
class SkeletonBuiltEvent:
    timestamp: float
    tree_size: int | None
    resolution_errors: list[str] = field(default_factory=list)


@dataclass
class SkeletonUpdatedEvent:
    timestamp: float
    entries: int


@dataclass
class SnapshotExportedEvent:
    export_id: str
    path: str
    tree_size: int | None


class EventBus:
    def __init__(self):
        self._subs: Dict[str, List[Callable]] = {}

    def subscribe(self, event_name: str, callback: Callable) -> None:
        self._subs.setdefault(event_name, []).append(callback)

    def publish(self, event_name: str, payload) -> None:
        for callback in self._subs.get(event_name, []):
            callback(payload)
