"""Tests for slabfield.geometry._path."""

import numpy as np
import numpy.testing as npt
import pytest

from slabfield._coordinates import SPHERICAL, Point
from slabfield._exceptions import ConfigurationError
from slabfield.geometry import (
    CONTINUOUS_MONOTONE_SPLINE,
    LINEAR,
    MONOTONE_SPLINE,
    NONE,
    Path,
)


@pytest.fixture
def trace():
    return np.array([[0.0, 0.0], [100e3, 0.0], [200e3, 50e3], [250e3, 200e3]])


class TestConstruction:
    def test_none_keeps_points(self, trace):
        path = Path(trace, interpolation=NONE)
        npt.assert_array_equal(path.coordinates, trace)
        npt.assert_array_equal(path.arc, [0.0, 1.0, 2.0, 3.0])
        assert path.n_original == 4
        assert len(path) == 4
        assert not path.continuous

    def test_accepts_points(self):
        path = Path([Point([0.0, 0.0], SPHERICAL), Point([0.1, 0.2], SPHERICAL)],
                    system=SPHERICAL)
        assert path.system == SPHERICAL
        npt.assert_allclose(path.coordinates[1], [0.1, 0.2])
        assert all(p.system == SPHERICAL for p in path.surface_points())

    def test_unknown_interpolation(self, trace):
        with pytest.raises(ConfigurationError, match="Unknown interpolation type"):
            Path(trace, interpolation="cubic")

    def test_too_few_points(self):
        with pytest.raises(ConfigurationError, match="at least two coordinates"):
            Path([[0.0, 0.0]])

    def test_bad_shape(self):
        with pytest.raises(ConfigurationError, match="shape"):
            Path([[0.0, 0.0, 0.0], [1.0, 1.0, 1.0]])


class TestLinear:
    def test_no_resampling(self, trace):
        path = Path(trace, interpolation=LINEAR, maximum_spacing=1e3)
        npt.assert_array_equal(path.coordinates, trace)

    def test_evaluate_and_tangent(self, trace):
        path = Path(trace, interpolation=LINEAR)
        npt.assert_allclose(path.evaluate(1.5), [150e3, 25e3])
        npt.assert_allclose(path.evaluate([0.0, 3.0]), trace[[0, 3]])
        npt.assert_allclose(path.tangent(1.5), trace[2] - trace[1])
        npt.assert_allclose(path.tangent(3.0), trace[3] - trace[2])


class TestMonotoneSpline:
    def test_spacing_bound(self, trace):
        spacing = 10e3
        path = Path(trace, interpolation=MONOTONE_SPLINE, maximum_spacing=spacing)
        gaps = np.linalg.norm(np.diff(path.coordinates, axis=0), axis=1)
        assert np.all(gaps <= spacing * (1.0 + 1e-9))
        assert len(path) > len(trace)

    def test_original_points_kept_at_integer_arc(self, trace):
        path = Path(trace, interpolation=MONOTONE_SPLINE, maximum_spacing=10e3)
        for i, point in enumerate(trace):
            j = int(np.flatnonzero(path.arc == float(i))[0])
            npt.assert_allclose(path.coordinates[j], point)

    def test_arc_strictly_increasing(self, trace):
        path = Path(trace, interpolation=MONOTONE_SPLINE, maximum_spacing=7e3)
        assert np.all(np.diff(path.arc) > 0.0)
        assert path.arc[0] == 0.0
        assert path.arc[-1] == 3.0

    def test_zero_spacing_disables_insertion(self, trace):
        path = Path(trace, interpolation=MONOTONE_SPLINE, maximum_spacing=0.0)
        npt.assert_array_equal(path.coordinates, trace)

    def test_monotone_between_monotone_points(self, trace):
        path = Path(trace, interpolation=MONOTONE_SPLINE, maximum_spacing=5e3)
        assert np.all(np.diff(path.coordinates[:, 0]) >= 0.0)
        assert np.all(np.diff(path.coordinates[:, 1]) >= 0.0)


class TestContinuousMonotoneSpline:
    def test_passes_through_points(self, trace):
        path = Path(trace, interpolation=CONTINUOUS_MONOTONE_SPLINE, maximum_spacing=1e3)
        assert path.continuous
        npt.assert_array_equal(path.coordinates, trace)
        npt.assert_allclose(path.evaluate(np.arange(4.0)), trace, atol=1e-6)

    def test_tangent_is_spline_derivative(self, trace):
        path = Path(trace, interpolation=CONTINUOUS_MONOTONE_SPLINE)
        h = 1e-6
        numeric = (path.evaluate(1.3 + h) - path.evaluate(1.3 - h)) / (2 * h)
        npt.assert_allclose(path.tangent(1.3), numeric, rtol=1e-5)
