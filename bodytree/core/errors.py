from __future__ import annotations


class JointTreeError(Exception):
    pass


class HierarchyResolutionError(JointTreeError):
    """Ancestor of a joint path was not present when the tree was built.

    Collected and returned by the build, never raised by it.
    """

    def __init__(self, path: str, ancestor: str):
        self.path = path
        self.ancestor = ancestor
        super().__init__(f"ancestor '{ancestor}' for joint with hierarchy '{path}' not found")
