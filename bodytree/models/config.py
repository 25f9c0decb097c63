from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field, field_validator


class ServerConfig(BaseModel):
    token: str = "change-me"


class TrackingConfig(BaseModel):
    using_absolute_translation: bool = True
    update_interval_s: float = 0.25

    @field_validator("update_interval_s")
    @classmethod
    def _validate_interval(cls, value: float) -> float:
        if value < 0:
            raise ValueError("update_interval_s must be >= 0")
        return value


class ExportConfig(BaseModel):
    output_dir: str = "data/exports/skeletons"
    indent: int = 2


class AppConfig(BaseModel):
    server: ServerConfig = Field(default_factory=ServerConfig)
    tracking: TrackingConfig = Field(default_factory=TrackingConfig)
    export: ExportConfig = Field(default_factory=ExportConfig)

    def maybe_masked_dump(self, mask_token: bool = True) -> dict:
        data = self.model_dump()
        if mask_token:
            token = data["server"].get("token", "")
            if token:
                data["server"]["token"] = "*" * max(4, len(token))
        return data


class ConfigUpdate(BaseModel):
    server: Optional[ServerConfig] = None
    tracking: Optional[TrackingConfig] = None
    export: Optional[ExportConfig] = None
