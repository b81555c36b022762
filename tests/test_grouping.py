"""Tests for center-expansion grouping."""

import unittest

import numpy as np

from sasc.core.distance import build_matrix
from sasc.core.features import SourceFile, VECTOR_SIZE
from sasc.core.grouping import ClusterBuilder, build_groups, validate_threshold
from sasc.errors import InvalidArgumentError


def files_on_line(positions, names=None):
    """Files whose pairwise distance is the difference of their positions."""
    names = names or [f"f{i}.go" for i in range(len(positions))]
    files = []
    for name, position in zip(names, positions):
        vec = np.zeros(VECTOR_SIZE, dtype=np.int64)
        vec[0] = position
        files.append(SourceFile(path=name, vector=vec))
    return files


class TestClusterBuilder(unittest.TestCase):
    """Test group formation, numbering and cross-references."""

    def test_single_group_and_isolated_file(self):
        matrix = build_matrix(files_on_line([0, 1, 2, 100], ["a", "b", "c", "d"]))

        groups = build_groups(matrix, 5)

        self.assertEqual(len(groups), 1)
        group = groups[0]
        self.assertEqual(group.number, 1)
        self.assertEqual(group.center_path, "a")
        self.assertEqual([m.path for m in group.members], ["a", "b", "c"])
        self.assertEqual(group.cross_references, [])
        self.assertEqual([m.distance for m in group.members], [0.0, 1.0, 2.0])

    def test_overlapping_groups_mark_cross_references(self):
        """A-B and B-C are close, A-C is not."""
        matrix = build_matrix(files_on_line([0, 4, 8], ["A", "B", "C"]))

        groups = build_groups(matrix, 5)

        self.assertEqual(len(groups), 2)

        first, second = groups
        self.assertEqual(first.number, 1)
        self.assertEqual(first.center_path, "A")
        self.assertEqual([m.path for m in first.members], ["A", "B"])
        self.assertEqual(first.cross_references, [])

        self.assertEqual(second.number, 2)
        self.assertEqual(second.center_path, "B")
        self.assertEqual([m.path for m in second.members], ["A", "B", "C"])
        self.assertEqual([m.path for m in second.cross_references], ["A", "B"])
        for member in second.cross_references:
            self.assertEqual(member.owner_path, "A")
        self.assertEqual([m.path for m in second.new_members], ["C"])
        self.assertEqual(second.new_members[0].owner_path, "B")

    def test_group_of_only_claimed_files_is_not_emitted(self):
        matrix = build_matrix(files_on_line([0, 4, 8], ["A", "B", "C"]))

        groups = build_groups(matrix, 5)

        self.assertNotIn("C", [g.center_path for g in groups])

    def test_every_file_belongs_to_at_most_one_group(self):
        matrix = build_matrix(files_on_line([0, 3, 6, 9, 12, 40, 41]))

        groups = build_groups(matrix, 4)

        owned = [m.path for g in groups for m in g.new_members]
        self.assertEqual(len(owned), len(set(owned)))

    def test_no_groups_below_smallest_distance(self):
        matrix = build_matrix(files_on_line([0, 10, 20]))
        self.assertEqual(build_groups(matrix, 9.99), [])

    def test_threshold_is_inclusive(self):
        matrix = build_matrix(files_on_line([0, 10]))

        groups = build_groups(matrix, 10)

        self.assertEqual(len(groups), 1)
        self.assertEqual(groups[0].size, 2)

    def test_numbering_counts_emitted_groups_only(self):
        matrix = build_matrix(files_on_line([500, 0, 1], ["lonely", "x", "y"]))

        groups = build_groups(matrix, 2)

        self.assertEqual(len(groups), 1)
        self.assertEqual(groups[0].number, 1)
        self.assertEqual(groups[0].center_path, "x")

    def test_result_depends_on_discovery_order(self):
        forward = build_groups(build_matrix(files_on_line([0, 4, 8], ["A", "B", "C"])), 5)
        backward = build_groups(build_matrix(files_on_line([8, 4, 0], ["C", "B", "A"])), 5)

        self.assertEqual(forward[0].center_path, "A")
        self.assertEqual(backward[0].center_path, "C")

    def test_deterministic(self):
        matrix = build_matrix(files_on_line([0, 2, 5, 7, 30, 31]))

        first = [g.to_dict() for g in build_groups(matrix, 3)]
        second = [g.to_dict() for g in build_groups(matrix, 3)]

        self.assertEqual(first, second)

    def test_builder_can_be_reused(self):
        matrix = build_matrix(files_on_line([0, 4, 8]))
        builder = ClusterBuilder(matrix, 5)

        self.assertEqual(len(builder.build()), 2)
        self.assertEqual(len(builder.build()), 2)

    def test_empty_matrix(self):
        self.assertEqual(build_groups(build_matrix([]), 10), [])

    def test_to_dict(self):
        matrix = build_matrix(files_on_line([0, 1], ["a", "b"]))

        data = build_groups(matrix, 1)[0].to_dict()

        self.assertEqual(data["number"], 1)
        self.assertEqual(data["center"], "a")
        self.assertEqual(
            data["members"][1],
            {"path": "b", "distance": 1.0, "cross_reference": False, "owner": "a"}
        )


class TestValidateThreshold(unittest.TestCase):
    """Test threshold validation."""

    def test_accepts_numbers_and_numeric_strings(self):
        self.assertEqual(validate_threshold(40), 40.0)
        self.assertEqual(validate_threshold("12.5"), 12.5)
        self.assertEqual(validate_threshold(0), 0.0)

    def test_rejects_invalid_values(self):
        for value in ["abc", None, -1, "-0.5", float("nan"), float("inf"), "inf"]:
            with self.subTest(value=value):
                with self.assertRaises(InvalidArgumentError):
                    validate_threshold(value)

    def test_builder_validates_threshold(self):
        matrix = build_matrix(files_on_line([0, 1]))
        with self.assertRaises(InvalidArgumentError):
            ClusterBuilder(matrix, -3)


if __name__ == "__main__":
    unittest.main()
