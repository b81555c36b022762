"""Tests for the Euclidean distance matrix."""

import math

import numpy as np
import pytest

from sasc.core.distance import DistanceMatrix, build_matrix, pairwise_distance
from sasc.core.features import SourceFile, VECTOR_SIZE, extract_all


class TestPairwiseDistance:
    """Test the distance between two vectors."""

    def test_identity(self, make_vector):
        vec = make_vector(7, byte=65)
        assert pairwise_distance(vec, vec) == 0.0

    def test_single_position_difference(self, make_vector):
        """Differing in one byte value by d gives exactly d."""
        a = make_vector(3, byte=10)
        b = make_vector(10, byte=10)
        assert pairwise_distance(a, b) == 7.0
        assert pairwise_distance(b, a) == 7.0

    def test_euclidean(self):
        a = np.zeros(VECTOR_SIZE)
        b = np.zeros(VECTOR_SIZE)
        b[0] = 3
        b[1] = 4
        assert pairwise_distance(a, b) == 5.0

    def test_wrong_shape(self):
        with pytest.raises(ValueError):
            pairwise_distance(np.zeros(10), np.zeros(10))

    def test_anagrams_are_identical(self, tmp_path):
        """Same bytes in another order give distance 0."""
        (tmp_path / "a.go").write_text("CASA")
        (tmp_path / "b.go").write_text("SAAC")

        a, b = extract_all([tmp_path / "a.go", tmp_path / "b.go"])

        assert pairwise_distance(a.vector, b.vector) == 0.0


class TestBuildMatrix:
    """Test the complete matrix."""

    @pytest.fixture
    def files(self):
        rng = np.random.default_rng(1234)
        return [
            SourceFile(path=f"f{i}.go", vector=rng.integers(0, 50, VECTOR_SIZE))
            for i in range(6)
        ]

    def test_symmetric_with_zero_diagonal(self, files):
        matrix = build_matrix(files)
        array = matrix.as_array()

        assert array.shape == (6, 6)
        assert np.array_equal(array, array.T)
        assert not np.diag(array).any()
        assert (array >= 0).all()

    def test_matches_pairwise_distance(self, files):
        matrix = build_matrix(files)

        for i, a in enumerate(files):
            for j, b in enumerate(files):
                assert matrix.distance(i, j) == pytest.approx(
                    pairwise_distance(a.vector, b.vector)
                )

    def test_deterministic(self, files):
        first = build_matrix(files).as_array()
        second = build_matrix(files).as_array()
        assert np.array_equal(first, second)

    def test_read_only(self, files):
        matrix = build_matrix(files)
        with pytest.raises(ValueError):
            matrix.as_array()[0, 1] = 1.0

    def test_no_files(self):
        matrix = build_matrix([])
        assert len(matrix) == 0
        assert matrix.as_array().shape == (0, 0)

    def test_single_file(self, make_vector):
        matrix = build_matrix([SourceFile(path="only.go", vector=make_vector(5))])

        assert len(matrix) == 1
        assert matrix.distance(0, 0) == 0.0
        assert matrix.nearest(0) == []

    def test_rejects_wrong_array(self, make_vector):
        files = [SourceFile(path="a.go", vector=make_vector(1))]
        with pytest.raises(ValueError):
            DistanceMatrix(files, np.zeros((2, 2)))


class TestDistanceMatrixViews:
    """Test entries, nearest-first listings and lookups."""

    def test_entries_keep_discovery_order(self, line_matrix):
        matrix = line_matrix([0, 10, 3, 1])

        entries = matrix.entries(0)

        assert [e.index for e in entries] == [0, 1, 2, 3]
        assert [e.distance for e in entries] == [0.0, 10.0, 3.0, 1.0]

    def test_nearest_sorted_without_self(self, line_matrix):
        matrix = line_matrix([0, 10, 3, 1])

        nearest = matrix.nearest(0)

        assert [e.index for e in nearest] == [3, 2, 1]
        assert [e.distance for e in nearest] == [1.0, 3.0, 10.0]

    def test_nearest_does_not_reorder_rows(self, line_matrix):
        matrix = line_matrix([0, 10, 3, 1])
        matrix.nearest(0)
        assert [e.index for e in matrix.entries(0)] == [0, 1, 2, 3]

    def test_nearest_threshold_is_inclusive(self, line_matrix):
        matrix = line_matrix([0, 10, 3, 1])

        assert [e.index for e in matrix.nearest(0, threshold=3)] == [3, 2]
        assert matrix.nearest(0, threshold=0.5) == []

    def test_zero_distance_neighbour_kept(self, line_matrix):
        """A different file at distance 0 is listed, only self is excluded."""
        matrix = line_matrix([5, 5], names=["a.go", "b.go"])

        nearest = matrix.nearest(0, threshold=0)

        assert [(e.path, e.distance) for e in nearest] == [("b.go", 0.0)]

    def test_ties_keep_discovery_order(self, line_matrix):
        matrix = line_matrix([5, 7, 3, 9])
        assert [e.index for e in matrix.nearest(0)] == [1, 2, 3]

    def test_within_includes_self(self, line_matrix):
        matrix = line_matrix([0, 4, 8])
        assert [e.index for e in matrix.within(1, 4)] == [0, 1, 2]

    def test_index_of(self, line_matrix):
        matrix = line_matrix([0, 1], names=["a.go", "b.go"])

        assert matrix.index_of("b.go") == 1
        with pytest.raises(KeyError):
            matrix.index_of("c.go")

    def test_paths(self, line_matrix):
        matrix = line_matrix([0, 1], names=["a.go", "b.go"])
        assert matrix.paths == ["a.go", "b.go"]
        assert math.isclose(matrix.distance(0, 1), 1.0)
