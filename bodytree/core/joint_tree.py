from __future__ import annotations

import logging
from collections import deque
from typing import Iterable, Iterator, Optional

import numpy as np

from bodytree.core import hierarchy
from bodytree.core.errors import HierarchyResolutionError
from bodytree.core.frames import FrameEntry
from bodytree.core.joint import JointNode

logger = logging.getLogger(__name__)


def _by_depth(entries: Iterable) -> list[FrameEntry]:
    frame = [e if isinstance(e, FrameEntry) else FrameEntry(*e) for e in entries]
    # Stable: entries at equal depth keep their frame order.
    return sorted(frame, key=lambda entry: entry.depth)


class JointTree:
    def __init__(self, root: Optional[JointNode] = None):
        self.root = root
        self.can_update = True
        self.resolution_errors: list[HierarchyResolutionError] = []

    @classmethod
    def from_flat_list(cls, entries: Iterable[FrameEntry], using_absolute: bool) -> "JointTree":
        tree = cls()
        tree.build_from_flat_list(entries, using_absolute)
        return tree

    @property
    def tree_size(self) -> int | None:
        if self.root is None:
            return None
        return self.root.descendant_count + 1

    def build_from_flat_list(
        self,
        entries: Iterable[FrameEntry],
        using_absolute: bool,
    ) -> list[HierarchyResolutionError]:
        ordered = _by_depth(entries)
        self.resolution_errors = []
        if not ordered:
            logger.warning("Joint list is empty, tree left without a root")
            return []

        root_entry = ordered.pop(0)
        root_name = root_entry.segments[0]
        self.root = JointNode(root_name, root_entry.translation, root_entry.rotation)

        for entry in ordered:
            ancestor_name = hierarchy.ancestor_name(entry.name, root_name)
            ancestor = self.root.find_self_or_descendant(ancestor_name)
            if ancestor is None:
                error = HierarchyResolutionError(entry.name, ancestor_name)
                logger.warning("Error creating joint tree: %s", error)
                self.resolution_errors.append(error)
                continue

            joint_name = entry.leaf_name
            if entry.depth == 1 and joint_name == root_name:
                existing = self.root
            else:
                existing = ancestor.find_child(joint_name)
            if existing is not None:
                logger.debug("Repeated joint found with hierarchy %s", entry.segments)
                existing.update(entry.translation, entry.rotation, using_absolute)
                continue

            translation = np.array(entry.translation, dtype=float)
            if using_absolute:
                translation = translation - ancestor.absolute_translation
            ancestor.add_child(JointNode(joint_name, translation, entry.rotation))

        logger.info(
            "Joint tree created with %d joints (%d unresolved)",
            self.tree_size,
            len(self.resolution_errors),
        )
        return list(self.resolution_errors)

    def update_joints(self, entries: Iterable[FrameEntry], using_absolute: bool) -> int:
        if not self.can_update or self.root is None:
            return 0
        updated = 0
        for entry in _by_depth(entries):
            joint = self.root.find_self_or_descendant(entry.leaf_name)
            if joint is None:
                continue
            joint.update(entry.translation, entry.rotation, using_absolute)
            updated += 1
        return updated

    def traverse_bfs(self) -> Iterator[JointNode]:
        if self.root is None:
            return
        queue: deque[JointNode] = deque([self.root])
        while queue:
            joint = queue.popleft()
            yield joint
            queue.extend(joint.children)

    def __iter__(self) -> Iterator[JointNode]:
        return self.traverse_bfs()

    def find(self, name: str) -> Optional[JointNode]:
        if self.root is None:
            return None
        return self.root.find_self_or_descendant(name)

    def structural_equivalence(self, other: "JointTree") -> bool:
        if self.root is None or other.root is None:
            return False
        if self.tree_size != other.tree_size:
            return False
        return self.root.is_equivalent(other.root)

    def deep_copy(self) -> "JointTree":
        copied = JointTree()
        if self.root is not None:
            copied.root = self.root.deep_copy(with_children=True)
        return copied

    def describe(self) -> list[str]:
        lines = []
        for joint in self.traverse_bfs():
            xyz = np.round(joint.absolute_translation, 4).tolist()
            lines.append(f"{joint.name} | absolute: {xyz}")
        return lines
