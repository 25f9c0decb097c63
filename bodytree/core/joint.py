from __future__ import annotations

import weakref
from typing import Iterable, Optional

import numpy as np

from bodytree.core.smoothing import SmoothingBuffer


class JointNode:
    """A single skeleton joint with smoothed translation and rotation.

    Children are owned through ``children``. The parent link is a weak reference
    so it never keeps a detached subtree's ancestors alive.
    """

    def __init__(
        self,
        name: str,
        translation: Iterable[float],
        rotation: Iterable[float],
    ):
        self.name = name
        self._translations = SmoothingBuffer(translation)
        self._rotations = SmoothingBuffer(rotation)
        self.children: list[JointNode] = []
        self._parent_ref: Optional[weakref.ReferenceType[JointNode]] = None

    @property
    def parent(self) -> Optional[JointNode]:
        if self._parent_ref is None:
            return None
        return self._parent_ref()

    @property
    def relative_translation(self) -> np.ndarray:
        return self._translations.mean()

    @property
    def rotation(self) -> np.ndarray:
        # Component-wise mean, deliberately left un-normalized.
        return self._rotations.mean()

    @property
    def absolute_translation(self) -> np.ndarray:
        parent = self.parent
        base = parent.absolute_translation if parent is not None else np.zeros(3)
        return base + self.relative_translation

    @property
    def descendant_count(self) -> int:
        return sum(1 + child.descendant_count for child in self.children)

    @property
    def translation_history(self) -> list[np.ndarray]:
        return self._translations.samples()

    @property
    def rotation_history(self) -> list[np.ndarray]:
        return self._rotations.samples()

    def relative_to_parent(self, translation: Iterable[float], using_absolute: bool) -> np.ndarray:
        point = np.array(translation, dtype=float)
        if not using_absolute:
            return point
        parent = self.parent
        if parent is None:
            return point
        return point - parent.absolute_translation

    def update(
        self,
        translation: Iterable[float],
        rotation: Iterable[float],
        using_absolute: bool,
    ) -> None:
        self._translations.push(self.relative_to_parent(translation, using_absolute))
        self._rotations.push(rotation)

    def is_self_or_ancestor(self, node: JointNode) -> bool:
        current: Optional[JointNode] = self
        while current is not None:
            if current is node:
                return True
            current = current.parent
        return False

    def add_child(self, node: JointNode) -> None:
        if self.is_self_or_ancestor(node):
            raise ValueError(f"adding '{node.name}' under '{self.name}' would create a cycle")
        old_parent = node.parent
        if old_parent is not None:
            old_parent.children = [c for c in old_parent.children if c.name != node.name]
        # Sibling names are unique: the new node replaces a same-named child.
        for child in self.children:
            if child.name == node.name and child is not node:
                child._parent_ref = None
        self.children = [c for c in self.children if c.name != node.name]
        self.children.append(node)
        node._parent_ref = weakref.ref(self)

    def find_child(self, name: str) -> Optional[JointNode]:
        for child in self.children:
            if child.name == name:
                return child
        return None

    def find_descendant(self, name: str) -> Optional[JointNode]:
        direct = self.find_child(name)
        if direct is not None:
            return direct
        for child in self.children:
            found = child.find_descendant(name)
            if found is not None:
                return found
        return None

    def find_self_or_descendant(self, name: str) -> Optional[JointNode]:
        if name == self.name:
            return self
        return self.find_descendant(name)

    def is_equivalent(self, other: JointNode) -> bool:
        if len(self.children) != len(other.children):
            return False
        for child in self.children:
            counterpart = other.find_child(child.name)
            if counterpart is None:
                return False
            if not child.is_equivalent(counterpart):
                return False
        return True

    def deep_copy(self, with_children: bool = True) -> JointNode:
        copied = JointNode(self.name, self.relative_translation, self.rotation)
        if with_children:
            for child in self.children:
                copied.add_child(child.deep_copy(with_children=True))
        return copied

    def __repr__(self) -> str:
        xyz = np.round(self.absolute_translation, 4).tolist()
        return f"JointNode({self.name!r}, absolute={xyz}, children={len(self.children)})"
