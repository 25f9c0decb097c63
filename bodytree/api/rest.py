from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from bodytree.api.auth import require_runtime
from bodytree.core.frames import FrameEntry
from bodytree.models.api import (
    FrameEntryPayload,
    FrameRequest,
    RecordRequest,
    SessionActionResponse,
)
from bodytree.models.config import ConfigUpdate
from bodytree.services.export_manager import snapshot_document
from bodytree.services.runtime import RuntimeContext

router = APIRouter(prefix="/api")


def _frame_entry(joint: FrameEntryPayload) -> FrameEntry:
    if joint.transform is not None:
        return FrameEntry.from_matrix(joint.name, joint.transform, column_major=joint.column_major)
    return FrameEntry(
        name=joint.name, translation=tuple(joint.translation), rotation=tuple(joint.rotation)
    )


@router.get("/config")
def get_config(runtime: RuntimeContext = Depends(require_runtime)):
    return runtime.config_store.config.maybe_masked_dump(mask_token=True)


@router.put("/config")
def put_config(payload: ConfigUpdate, runtime: RuntimeContext = Depends(require_runtime)):
    cfg = runtime.config_store.update(payload)
    # Services hold references to the previous config sections.
    runtime.body_session.cfg = cfg
    runtime.exporter.cfg = cfg.export
    return cfg.maybe_masked_dump(mask_token=True)


@router.post("/frames")
def post_frame(payload: FrameRequest, runtime: RuntimeContext = Depends(require_runtime)):
    try:
        entries = [_frame_entry(joint) for joint in payload.joints]
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return runtime.body_session.ingest_frame(entries, timestamp=payload.timestamp)


@router.get("/skeleton")
def get_skeleton(runtime: RuntimeContext = Depends(require_runtime)):
    try:
        snapshot = runtime.body_session.snapshot()
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return {"tree_size": snapshot.tree_size, "root": snapshot_document(snapshot)}


@router.post("/skeleton/record")
def record_skeleton(
    payload: RecordRequest | None = None,
    runtime: RuntimeContext = Depends(require_runtime),
):
    label = payload.label if payload is not None else None
    try:
        return runtime.body_session.record(label=label)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


@router.get("/exports")
def list_exports(runtime: RuntimeContext = Depends(require_runtime)):
    return runtime.exporter.list_exports()


@router.get("/exports/{export_id}")
def get_export(export_id: str, runtime: RuntimeContext = Depends(require_runtime)):
    try:
        record = runtime.exporter.get(export_id)
        snapshot = runtime.exporter.load(export_id)
    except LookupError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return {**record, "root": snapshot_document(snapshot)}


@router.get("/session/status")
def session_status(runtime: RuntimeContext = Depends(require_runtime)):
    return runtime.body_session.status()


@router.post("/session/reset", response_model=SessionActionResponse)
def reset_session(runtime: RuntimeContext = Depends(require_runtime)):
    out = runtime.body_session.reset()
    return SessionActionResponse(**out)
