"""Tests for the fast and incremental extractors."""

import numpy as np
import pytest

from tlsvect.extract.base import Extraction
from tlsvect.extract.fast import FastExtractor
from tlsvect.extract.incremental import IncrementalExtractor
from tlsvect.fit.line2d import TlsLine2D
from tlsvect.fit.line3d import TlsLine3D
from tlsvect.fit.plane3d import TlsPlane3D
from tlsvect.shapes import gen_hemicycle, gen_spiral, add_noise
from tlsvect.stats.prefix import PrefixSumArray


def run_fast(points, sigma, approximation=TlsLine2D):
    pts = np.asarray(points, dtype=np.float64)
    prefix = PrefixSumArray(pts.shape[1])
    prefix.precompute(pts)
    return FastExtractor(approximation, sigma)(pts, prefix)


def run_incremental(points, sigma, approximation=TlsLine2D):
    return IncrementalExtractor(approximation, sigma)(points)


EXTRACTORS = [run_fast, run_incremental]


class TestExtraction:
    """Tests for the extraction container."""

    def test_breakpoints_and_coverage(self):
        extraction = Extraction()
        extraction.append(None, 0, 10)
        extraction.append(None, 10, 25)

        assert extraction.breakpoints() == [10]
        assert extraction.covers(25)
        assert not extraction.covers(30)

    def test_gap_is_not_coverage(self):
        extraction = Extraction()
        extraction.append(None, 0, 10)
        extraction.append(None, 11, 25)

        assert not extraction.covers(25)

    def test_negative_sigma_rejected(self):
        with pytest.raises(ValueError):
            FastExtractor(TlsLine2D, -0.1)


@pytest.mark.parametrize("extract", EXTRACTORS)
class TestExtractors:
    """Properties shared by both extractors."""

    def test_single_line(self, extract, collinear_points):
        """50 collinear points give one line over all of them."""
        extraction = extract(collinear_points, 0.01)

        assert len(extraction) == 1
        assert extraction.ranges[0].as_tuple() == (0, 50)
        assert extraction.approximations[0].sigma2 == pytest.approx(0.0, abs=1e-9)

    def test_right_angle(self, extract, l_shape_points):
        """Two perpendicular runs split at the first point of the second run."""
        extraction = extract(l_shape_points, 0.01)

        assert len(extraction) == 2
        assert abs(extraction.breakpoints()[0] - 25) <= 1

    @pytest.mark.parametrize("n", [10, 57, 200])
    def test_coverage_and_error_bound(self, extract, n):
        points = add_noise(gen_hemicycle(n), 0.01, seed=n)
        sigma = 0.05
        extraction = extract(points, sigma)

        assert extraction.covers(n)
        for approximation, index_range in zip(extraction.approximations, extraction.ranges):
            assert index_range.size >= TlsLine2D.MIN_POINTS
            assert approximation.sigma2 <= sigma * sigma + 1e-12

    def test_error_bound_on_random_walks(self, extract):
        """Rough clouds often end in a short remainder; the bound still holds."""
        sigma = 0.3
        for seed in range(40):
            rng = np.random.default_rng(seed)
            n = int(rng.integers(100, 200))
            points = np.cumsum(rng.normal(size=(n, 2)), axis=0)
            extraction = extract(points, sigma)

            assert extraction.covers(n), seed
            for approximation, index_range in zip(extraction.approximations, extraction.ranges):
                assert index_range.size >= TlsLine2D.MIN_POINTS, seed
                assert approximation.sigma2 < sigma * sigma + 1e-9, (seed, index_range)

    def test_short_tail_shortens_earlier_range(self, extract):
        """A minimal range before the tail moves back into a longer range."""
        points = np.array([
            [0.0, 0.0], [1.0, 0.0], [2.0, 0.0], [3.0, 0.0],
            [3.0, 5.0], [6.0, 5.0], [6.0, 9.0],
        ])
        extraction = extract(points, 0.01)

        assert [r.as_tuple() for r in extraction.ranges] == [(0, 3), (3, 5), (5, 7)]
        assert extraction.approximations[0].sigma2 == pytest.approx(0.0, abs=1e-12)

    def test_zero_sigma_gives_minimal_ranges(self, extract):
        points = add_noise(gen_hemicycle(9), 0.1, seed=1)
        extraction = extract(points, 0.0)

        assert extraction.covers(9)
        assert [r.size for r in extraction.ranges] == [2, 2, 2, 3]

    def test_determinism(self, extract):
        points = add_noise(gen_hemicycle(300), 0.02, seed=5)
        first = extract(points, 0.03)
        second = extract(points, 0.03)

        assert first.ranges == second.ranges
        for a, b in zip(first.approximations, second.approximations):
            assert np.array_equal(a.direction, b.direction)
            assert np.array_equal(a.anchor, b.anchor)
            assert a.sigma2 == b.sigma2

    def test_too_few_points(self, extract):
        assert extract(np.array([[0.0, 0.0]]), 0.1) is None

    def test_minimum_points(self, extract):
        extraction = extract(np.array([[0.0, 0.0], [1.0, 5.0]]), 0.0)

        assert [r.as_tuple() for r in extraction.ranges] == [(0, 2)]

    def test_3d_lines(self, extract, step_points_3d):
        extraction = extract(step_points_3d, 0.01, TlsLine3D)

        assert extraction.covers(60)
        assert extraction.breakpoints() == [30]

    def test_planes_never_leave_short_tail(self, extract):
        points = add_noise(gen_spiral(101), 0.05, seed=2)
        extraction = extract(points, 0.05, TlsPlane3D)

        assert extraction.covers(101)
        assert min(r.size for r in extraction.ranges) >= 3


class TestFastExtractor:
    """Tests specific to the binary search extractor."""

    def test_short_tail_is_rebalanced(self):
        """A one-point remainder moves a point over from the previous range."""
        points = np.array([[0.0, 0.0], [1.0, 0.0], [2.0, 0.0], [3.0, 0.0], [3.0, 5.0]])
        extraction = run_fast(points, 0.01)

        assert [r.as_tuple() for r in extraction.ranges] == [(0, 3), (3, 5)]

    def test_short_tail_is_absorbed(self):
        """A remainder that cannot be rebalanced joins the last range."""
        points = np.array([[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [2.0, 0.0, 0.0], [3.0, 7.0, 0.0]])
        extraction = run_fast(points, 0.0, TlsPlane3D)

        assert [r.as_tuple() for r in extraction.ranges] == [(0, 4)]

    def test_reuses_prefix_buffer(self, collinear_points):
        prefix = PrefixSumArray(2)
        extractor = FastExtractor(TlsLine2D, 0.01)
        prefix.precompute(collinear_points)
        extractor(collinear_points, prefix)
        prefix.precompute(collinear_points[:20])

        extraction = extractor(collinear_points[:20], prefix)
        assert extraction.ranges[0].as_tuple() == (0, 20)
        assert prefix.capacity == 50


class TestIncrementalExtractor:
    """Tests specific to the streaming extractor."""

    def test_accepts_generator(self, l_shape_points):
        """Points are consumed in a single pass from any iterable."""
        stream = (tuple(p) for p in l_shape_points)
        extraction = IncrementalExtractor(TlsLine2D, 0.01)(stream)

        assert [r.as_tuple() for r in extraction.ranges] == [(0, 25), (25, 50)]

    def test_short_tail_is_rebalanced(self):
        points = [[0.0, 0.0], [1.0, 0.0], [2.0, 0.0], [3.0, 0.0], [3.0, 5.0]]
        extraction = IncrementalExtractor(TlsLine2D, 0.01)(iter(points))

        assert [r.as_tuple() for r in extraction.ranges] == [(0, 3), (3, 5)]
        assert extraction.approximations[0].sigma2 == pytest.approx(0.0, abs=1e-12)

    def test_short_tail_is_merged(self):
        points = [[0.0, 0.0], [1.0, 0.0], [2.0, 3.0]]
        extraction = IncrementalExtractor(TlsLine2D, 0.01)(points)

        assert [r.as_tuple() for r in extraction.ranges] == [(0, 3)]
