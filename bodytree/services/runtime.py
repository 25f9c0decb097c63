from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from bodytree.core.events import EventBus
from bodytree.services.body_session import BodySession
from bodytree.services.config_store import ConfigStore
from bodytree.services.export_manager import SnapshotExporter


@dataclass
class RuntimeContext:
    config_store: ConfigStore
    event_bus: EventBus
    exporter: SnapshotExporter
    body_session: BodySession


def build_runtime(config_path: Path) -> RuntimeContext:
    config_store = ConfigStore(config_path)
    cfg = config_store.config
    event_bus = EventBus()
    exporter = SnapshotExporter(cfg.export)
    body_session = BodySession(cfg, event_bus, exporter)
    return RuntimeContext(
        config_store=config_store,
        event_bus=event_bus,
        exporter=exporter,
        body_session=body_session,
    )
