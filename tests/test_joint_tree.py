import itertools
import unittest

import numpy as np

from bodytree.core.errors import HierarchyResolutionError
from bodytree.core.frames import FrameEntry
from bodytree.core.joint_tree import JointTree

IDENTITY = (0.0, 0.0, 0.0, 1.0)


def _entry(name, xyz, rot=IDENTITY):
    return FrameEntry(name=name, translation=xyz, rotation=rot)


def _arm_frame():
    return [
        _entry("root", (1.0, 0.0, 0.0)),
        _entry("root/arm", (1.0, 1.0, 0.0)),
        _entry("root/arm/hand", (1.0, 1.0, 1.0)),
    ]


class JointTreeBuildTests(unittest.TestCase):
    def test_builds_chain_from_flat_list(self):
        tree = JointTree.from_flat_list(_arm_frame(), using_absolute=False)
        self.assertEqual(tree.root.name, "root")
        self.assertEqual([c.name for c in tree.root.children], ["arm"])
        self.assertEqual([c.name for c in tree.root.children[0].children], ["hand"])
        self.assertEqual(tree.tree_size, 3)
        self.assertEqual(tree.resolution_errors, [])

    def test_accepts_plain_tuples(self):
        tree = JointTree.from_flat_list(
            [("root", (0.0, 0.0, 0.0), IDENTITY), ("root/arm", (0.0, 1.0, 0.0), IDENTITY)],
            using_absolute=False,
        )
        self.assertEqual(tree.tree_size, 2)

    def test_build_is_order_independent(self):
        frame = [
            _entry("root", (0.0, 0.0, 0.0)),
            _entry("root/left", (1.0, 0.0, 0.0)),
            _entry("root/right", (-1.0, 0.0, 0.0)),
            _entry("root/left/hand", (2.0, 0.0, 0.0)),
        ]
        reference = JointTree.from_flat_list(frame, using_absolute=True)
        for perm in itertools.permutations(frame):
            tree = JointTree.from_flat_list(list(perm), using_absolute=True)
            self.assertEqual(tree.tree_size, 4)
            self.assertTrue(tree.structural_equivalence(reference))
            np.testing.assert_allclose(
                tree.find("hand").absolute_translation, [2.0, 0.0, 0.0], atol=1e-9
            )

    def test_absolute_input_is_stored_relative_to_parent(self):
        tree = JointTree.from_flat_list(_arm_frame(), using_absolute=True)
        np.testing.assert_allclose(tree.find("arm").relative_translation, [0.0, 1.0, 0.0])
        np.testing.assert_allclose(tree.find("hand").relative_translation, [0.0, 0.0, 1.0])
        np.testing.assert_allclose(tree.find("hand").absolute_translation, [1.0, 1.0, 1.0])

    def test_absolute_equals_parent_plus_relative_after_updates(self):
        tree = JointTree.from_flat_list(_arm_frame(), using_absolute=True)
        rng = np.random.default_rng(7)
        for _ in range(8):
            frame = [
                _entry(e.name, tuple(np.array(e.translation) + rng.normal(0.0, 0.05, 3)))
                for e in _arm_frame()
            ]
            tree.update_joints(frame, using_absolute=True)
        for joint in tree.traverse_bfs():
            if joint.parent is None:
                continue
            np.testing.assert_allclose(
                joint.absolute_translation,
                joint.parent.absolute_translation + joint.relative_translation,
                atol=1e-9,
            )

    def test_missing_ancestor_is_reported_and_skipped(self):
        frame = [
            _entry("root", (0.0, 0.0, 0.0)),
            _entry("root/arm/hand", (0.0, 0.0, 1.0)),
            _entry("root/leg", (0.0, -1.0, 0.0)),
        ]
        tree = JointTree()
        errors = tree.build_from_flat_list(frame, using_absolute=False)
        self.assertEqual(len(errors), 1)
        self.assertIsInstance(errors[0], HierarchyResolutionError)
        self.assertEqual(errors[0].path, "root/arm/hand")
        self.assertEqual(errors[0].ancestor, "arm")
        self.assertEqual(tree.tree_size, 2)
        self.assertIsNone(tree.find("hand"))
        self.assertIsNotNone(tree.find("leg"))

    def test_duplicate_joint_is_folded_into_history(self):
        frame = [
            _entry("root", (0.0, 0.0, 0.0)),
            _entry("root/arm", (0.0, 1.0, 0.0)),
            _entry("root/arm", (0.0, 3.0, 0.0)),
        ]
        tree = JointTree.from_flat_list(frame, using_absolute=False)
        self.assertEqual(tree.tree_size, 2)
        arm = tree.find("arm")
        self.assertEqual(len(arm.translation_history), 2)
        np.testing.assert_allclose(arm.relative_translation, [0.0, 2.0, 0.0])

    def test_repeated_root_is_folded_into_root(self):
        frame = [_entry("root", (0.0, 0.0, 0.0)), _entry("root", (2.0, 0.0, 0.0))]
        tree = JointTree.from_flat_list(frame, using_absolute=True)
        self.assertEqual(tree.tree_size, 1)
        np.testing.assert_allclose(tree.root.relative_translation, [1.0, 0.0, 0.0])

    def test_empty_list_leaves_tree_without_root(self):
        tree = JointTree.from_flat_list([], using_absolute=True)
        self.assertIsNone(tree.root)
        self.assertIsNone(tree.tree_size)
        self.assertEqual(list(tree.traverse_bfs()), [])
        self.assertFalse(tree.structural_equivalence(tree))
        self.assertEqual(tree.update_joints(_arm_frame(), using_absolute=True), 0)


class JointTreeUpdateTests(unittest.TestCase):
    def test_update_pushes_into_existing_joints(self):
        tree = JointTree.from_flat_list(_arm_frame(), using_absolute=False)
        updated = tree.update_joints(
            [_entry("root/arm", (3.0, 0.0, 0.0))], using_absolute=False
        )
        self.assertEqual(updated, 1)
        np.testing.assert_allclose(tree.find("arm").relative_translation, [2.0, 0.5, 0.0])

    def test_unknown_joint_is_skipped(self):
        tree = JointTree.from_flat_list(_arm_frame(), using_absolute=False)
        updated = tree.update_joints(
            [_entry("root/arm/finger", (0.0, 0.0, 0.0))], using_absolute=False
        )
        self.assertEqual(updated, 0)
        self.assertEqual(tree.tree_size, 3)
        self.assertIsNone(tree.find("finger"))

    def test_frozen_tree_ignores_updates(self):
        tree = JointTree.from_flat_list(_arm_frame(), using_absolute=True)
        before = {j.name: (j.translation_history, j.rotation_history) for j in tree}
        tree.can_update = False
        for _ in range(6):
            tree.update_joints(
                [_entry(e.name, (9.0, 9.0, 9.0), (1.0, 0.0, 0.0, 0.0)) for e in _arm_frame()],
                using_absolute=True,
            )
        for joint in tree:
            translations, rotations = before[joint.name]
            self.assertEqual(len(joint.translation_history), len(translations))
            for got, want in zip(joint.translation_history, translations):
                np.testing.assert_array_equal(got, want)
            for got, want in zip(joint.rotation_history, rotations):
                np.testing.assert_array_equal(got, want)

        tree.can_update = True
        self.assertEqual(tree.update_joints(_arm_frame(), using_absolute=True), 3)


class JointTreeTraversalTests(unittest.TestCase):
    def _tree(self):
        return JointTree.from_flat_list(
            [
                _entry("root", (0.0, 0.0, 0.0)),
                _entry("root/a", (1.0, 0.0, 0.0)),
                _entry("root/b", (0.0, 1.0, 0.0)),
                _entry("root/a/c", (0.0, 0.0, 1.0)),
                _entry("root/b/d", (1.0, 1.0, 1.0)),
            ],
            using_absolute=False,
        )

    def test_bfs_is_level_order_and_restartable(self):
        tree = self._tree()
        names = [j.name for j in tree.traverse_bfs()]
        self.assertEqual(names, ["root", "a", "b", "c", "d"])
        self.assertEqual([j.name for j in tree.traverse_bfs()], names)

    def test_descendant_count_matches_tree_size(self):
        tree = self._tree()
        self.assertEqual(tree.root.descendant_count, tree.tree_size - 1)
        self.assertEqual(len(list(tree)), tree.tree_size)

    def test_structural_equivalence(self):
        tree = self._tree()
        other = JointTree.from_flat_list(
            [
                _entry("root", (5.0, 0.0, 0.0)),
                _entry("root/b", (0.0, 0.0, 0.0)),
                _entry("root/a", (0.0, 0.0, 0.0)),
                _entry("root/b/d", (0.0, 0.0, 0.0)),
                _entry("root/a/c", (0.0, 0.0, 0.0)),
            ],
            using_absolute=False,
        )
        self.assertTrue(tree.structural_equivalence(other))

        smaller = JointTree.from_flat_list(
            [_entry("root", (0.0, 0.0, 0.0)), _entry("root/a", (0.0, 0.0, 0.0))],
            using_absolute=False,
        )
        self.assertFalse(tree.structural_equivalence(smaller))
        self.assertFalse(tree.structural_equivalence(JointTree()))

    def test_deep_copy_is_independent(self):
        tree = self._tree()
        copied = tree.deep_copy()
        self.assertTrue(copied.structural_equivalence(tree))
        self.assertIsNot(copied.root, tree.root)
        tree.update_joints([_entry("root/a", (9.0, 0.0, 0.0))], using_absolute=False)
        np.testing.assert_allclose(copied.find("a").relative_translation, [1.0, 0.0, 0.0])
        self.assertIsNone(JointTree().deep_copy().root)

    def test_describe_lists_every_joint(self):
        lines = self._tree().describe()
        self.assertEqual(len(lines), 5)
        self.assertTrue(lines[0].startswith("root | absolute:"))


if __name__ == "__main__":
    unittest.main()
