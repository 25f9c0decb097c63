from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class SessionActionResponse(BaseModel):
    ok: bool
    message: str


class FrameEntryPayload(BaseModel):
    """A joint given either as translation + rotation or as a 4x4 model transform."""

    name: str
    translation: Optional[list[float]] = Field(default=None, min_length=3, max_length=3)
    rotation: Optional[list[float]] = Field(default=None, min_length=4, max_length=4)
    transform: Optional[list[float]] = Field(default=None, min_length=16, max_length=16)
    column_major: bool = False

    @model_validator(mode="after")
    def _require_transform_or_pose(self) -> "FrameEntryPayload":
        if self.transform is None and (self.translation is None or self.rotation is None):
            raise ValueError("joint needs either transform or translation and rotation")
        return self


class FrameRequest(BaseModel):
    joints: list[FrameEntryPayload] = Field(default_factory=list)
    timestamp: Optional[float] = None


class RecordRequest(BaseModel):
    label: Optional[str] = None


class JointDocument(BaseModel):
    """One joint of an exported skeleton; ``parent`` is implied by nesting."""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    relative_translation: list[float] = Field(
        alias="relativeTranslation", min_length=3, max_length=3
    )
    absolute_translation: list[float] = Field(
        alias="absoluteTranslation", min_length=3, max_length=3
    )
    rotation: list[float] = Field(min_length=4, max_length=4)
    children: list["JointDocument"] = Field(default_factory=list)


JointDocument.model_rebuild()
