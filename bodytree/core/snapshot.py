from __future__ import annotations

import logging
import weakref
from collections import deque
from typing import Any, Iterable, Iterator, Optional

from bodytree.core.joint_tree import JointTree

logger = logging.getLogger(__name__)


def _frozen(values: Iterable[float]) -> tuple[float, ...]:
    return tuple(float(v) for v in values)


class ImmutableJointNode:
    """Point-in-time copy of a joint; values are captured once and never recomputed."""

    __slots__ = (
        "_name",
        "_relative_translation",
        "_absolute_translation",
        "_rotation",
        "_children",
        "_parent_ref",
        "__weakref__",
    )

    def __init__(
        self,
        name: str,
        relative_translation: Iterable[float],
        absolute_translation: Iterable[float],
        rotation: Iterable[float],
    ):
        object.__setattr__(self, "_name", name)
        object.__setattr__(self, "_relative_translation", _frozen(relative_translation))
        object.__setattr__(self, "_absolute_translation", _frozen(absolute_translation))
        object.__setattr__(self, "_rotation", _frozen(rotation))
        object.__setattr__(self, "_children", [])
        object.__setattr__(self, "_parent_ref", None)

    def __setattr__(self, key, value):
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __delattr__(self, key):
        raise AttributeError(f"{type(self).__name__} is immutable")

    @classmethod
    def from_joint(cls, joint) -> "ImmutableJointNode":
        return cls(
            joint.name,
            joint.relative_translation,
            joint.absolute_translation,
            joint.rotation,
        )

    @property
    def name(self) -> str:
        return self._name

    @property
    def relative_translation(self) -> tuple[float, float, float]:
        return self._relative_translation

    @property
    def absolute_translation(self) -> tuple[float, float, float]:
        return self._absolute_translation

    @property
    def rotation(self) -> tuple[float, float, float, float]:
        return self._rotation

    @property
    def children(self) -> tuple["ImmutableJointNode", ...]:
        return tuple(self._children)

    @property
    def parent(self) -> Optional["ImmutableJointNode"]:
        if self._parent_ref is None:
            return None
        return self._parent_ref()

    @property
    def descendant_count(self) -> int:
        return sum(1 + child.descendant_count for child in self._children)

    def _attach(self, child: "ImmutableJointNode") -> None:
        # Only used while a snapshot is being assembled.
        self._children.append(child)
        object.__setattr__(child, "_parent_ref", weakref.ref(self))

    def find_child(self, name: str) -> Optional["ImmutableJointNode"]:
        for child in self._children:
            if child.name == name:
                return child
        return None

    def find_descendant(self, name: str) -> Optional["ImmutableJointNode"]:
        direct = self.find_child(name)
        if direct is not None:
            return direct
        for child in self._children:
            found = child.find_descendant(name)
            if found is not None:
                return found
        return None

    def find_self_or_descendant(self, name: str) -> Optional["ImmutableJointNode"]:
        if name == self._name:
            return self
        return self.find_descendant(name)

    def to_document(self) -> dict[str, Any]:
        return {
            "name": self._name,
            "relativeTranslation": list(self._relative_translation),
            "absoluteTranslation": list(self._absolute_translation),
            "rotation": list(self._rotation),
            "children": [child.to_document() for child in self._children],
        }

    def __repr__(self) -> str:
        return (
            f"ImmutableJointNode({self._name!r}, absolute={list(self._absolute_translation)}, "
            f"rotation={list(self._rotation)})"
        )


class ImmutableJointTree:
    __slots__ = ("_root",)

    def __init__(self, root: Optional[ImmutableJointNode] = None):
        object.__setattr__(self, "_root", root)

    def __setattr__(self, key, value):
        raise AttributeError(f"{type(self).__name__} is immutable")

    @classmethod
    def construct_from(cls, tree: JointTree) -> "ImmutableJointTree":
        if tree.root is None:
            return cls()

        root = ImmutableJointNode.from_joint(tree.root)
        queue = deque((child, root) for child in tree.root.children)
        while queue:
            joint, ancestor = queue.popleft()
            frozen = ImmutableJointNode.from_joint(joint)
            ancestor._attach(frozen)
            queue.extend((child, frozen) for child in joint.children)

        snapshot = cls(root)
        logger.info("Immutable joint tree created with %d joints", snapshot.tree_size)
        return snapshot

    @classmethod
    def from_document(cls, document: Optional[dict[str, Any]]) -> "ImmutableJointTree":
        if document is None:
            return cls()

        def _node(payload: dict[str, Any]) -> ImmutableJointNode:
            return ImmutableJointNode(
                payload["name"],
                payload["relativeTranslation"],
                payload["absoluteTranslation"],
                payload["rotation"],
            )

        root = _node(document)
        queue = deque((child, root) for child in document.get("children", []))
        while queue:
            payload, ancestor = queue.popleft()
            node = _node(payload)
            ancestor._attach(node)
            queue.extend((child, node) for child in payload.get("children", []))
        return cls(root)

    @property
    def root(self) -> Optional[ImmutableJointNode]:
        return self._root

    @property
    def tree_size(self) -> int | None:
        if self._root is None:
            return None
        return self._root.descendant_count + 1

    def traverse_bfs(self) -> Iterator[ImmutableJointNode]:
        if self._root is None:
            return
        queue: deque[ImmutableJointNode] = deque([self._root])
        while queue:
            joint = queue.popleft()
            yield joint
            queue.extend(joint.children)

    def __iter__(self) -> Iterator[ImmutableJointNode]:
        return self.traverse_bfs()

    def find(self, name: str) -> Optional[ImmutableJointNode]:
        if self._root is None:
            return None
        return self._root.find_self_or_descendant(name)

    def to_document(self) -> Optional[dict[str, Any]]:
        if self._root is None:
            return None
        return self._root.to_document()
