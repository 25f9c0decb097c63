from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Sequence

import numpy as np
from scipy.spatial.transform import Rotation

from bodytree.core import hierarchy
from bodytree.core.constants import ROTATION_SIZE, TRANSLATION_SIZE


def _as_vector(values: Iterable[float], size: int, label: str) -> tuple[float, ...]:
    arr = np.array(values, dtype=float).reshape(-1)
    if arr.shape != (size,):
        raise ValueError(f"{label} must have {size} components, got {arr.shape[0]}")
    if not np.all(np.isfinite(arr)):
        raise ValueError(f"{label} must be finite")
    return tuple(float(v) for v in arr)


@dataclass(frozen=True)
class FrameEntry:
    """One tracked joint in a frame: path-encoded name, translation, rotation (x, y, z, w)."""

    name: str
    translation: tuple[float, float, float]
    rotation: tuple[float, float, float, float]

    def __post_init__(self):
        object.__setattr__(
            self, "translation", _as_vector(self.translation, TRANSLATION_SIZE, "translation")
        )
        object.__setattr__(self, "rotation", _as_vector(self.rotation, ROTATION_SIZE, "rotation"))

    @property
    def segments(self) -> list[str]:
        return hierarchy.segments(self.name)

    @property
    def depth(self) -> int:
        return hierarchy.depth(self.name)

    @property
    def leaf_name(self) -> str:
        return hierarchy.leaf_name(self.name)

    @classmethod
    def from_matrix(cls, name: str, matrix, column_major: bool = False) -> "FrameEntry":
        flat = np.array(matrix, dtype=float).reshape(-1)
        if flat.shape != (16,):
            raise ValueError("transform matrix must have 16 components")
        mat = flat.reshape(4, 4)
        if column_major:
            mat = mat.T
        translation = mat[:3, 3]
        # as_quat() is scalar-last: imaginary xyz, then real w.
        rotation = Rotation.from_matrix(mat[:3, :3]).as_quat()
        return cls(name=name, translation=tuple(translation), rotation=tuple(rotation))


def entries_from_pairs(names: Sequence[str], transforms: Sequence) -> list[FrameEntry]:
    if len(names) != len(transforms):
        raise ValueError(
            f"got {len(names)} joint names for {len(transforms)} transforms"
        )
    out: list[FrameEntry] = []
    for name, transform in zip(names, transforms):
        if isinstance(transform, tuple) and len(transform) == 2:
            translation, rotation = transform
            out.append(FrameEntry(name=name, translation=translation, rotation=rotation))
        else:
            out.append(FrameEntry.from_matrix(name, transform))
    return out
