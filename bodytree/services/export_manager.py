from __future__ import annotations

import logging
import threading
import time
import uuid
from pathlib import Path
from typing import Optional

from bodytree.core.snapshot import ImmutableJointTree
from bodytree.models.api import JointDocument
from bodytree.models.config import ExportConfig
from bodytree.services.state_io import load_json, save_json_atomic

logger = logging.getLogger(__name__)


def snapshot_document(snapshot: ImmutableJointTree) -> Optional[dict]:
    document = snapshot.to_document()
    if document is None:
        return None
    return JointDocument.model_validate(document).model_dump(by_alias=True)


def snapshot_from_document(document: Optional[dict]) -> ImmutableJointTree:
    if document is None:
        return ImmutableJointTree()
    validated = JointDocument.model_validate(document)
    return ImmutableJointTree.from_document(validated.model_dump(by_alias=True))


class SnapshotExporter:
    def __init__(self, cfg: ExportConfig):
        self.cfg = cfg
        self._lock = threading.Lock()
        self._exports: dict[str, dict] = {}

    def export(self, snapshot: ImmutableJointTree, label: str | None = None) -> dict:
        export_id = f"skeleton_{uuid.uuid4().hex[:12]}"
        path = Path(self.cfg.output_dir) / f"{export_id}.json"
        save_json_atomic(path, snapshot_document(snapshot), indent=self.cfg.indent)
        record = {
            "export_id": export_id,
            "label": label,
            "path": str(path),
            "tree_size": snapshot.tree_size,
            "exported_at": float(time.time()),
        }
        with self._lock:
            self._exports[export_id] = record
        logger.info("Exported skeleton snapshot %s to %s", export_id, path)
        return dict(record)

    def list_exports(self) -> list[dict]:
        with self._lock:
            items = [dict(item) for item in self._exports.values()]
        items.sort(key=lambda item: float(item.get("exported_at", 0.0)), reverse=True)
        return items

    def get(self, export_id: str) -> dict:
        with self._lock:
            record = self._exports.get(export_id)
        if record is None:
            raise LookupError("export_not_found")
        return dict(record)

    def load(self, export_id: str) -> ImmutableJointTree:
        record = self.get(export_id)
        return snapshot_from_document(load_json(record["path"]))
