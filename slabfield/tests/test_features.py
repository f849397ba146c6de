"""Tests for slabfield.features: segments, dispatch and whole-feature queries.

All features here use a Cartesian world with the model surface at height
``SURFACE``, a trace along the y axis at x = 0 and the dip point at
positive x.
"""

import math

import numpy as np
import numpy.testing as npt
import pytest

from slabfield._coordinates import CartesianCoordinateSystem
from slabfield._exceptions import ConfigurationError, FieldEvaluationError
from slabfield._rotations import euler_angles_to_rotation_matrix, is_rotation_matrix
from slabfield.features import (
    Fault,
    ModelArena,
    Segment,
    SegmentTable,
    SubductingPlate,
    assemble_sections,
    blend,
    blend_grains,
    feature_types,
)
from slabfield.geometry import Path
from slabfield.models import (
    Grains,
    TemperatureModel,
    UniformComposition,
    UniformGrains,
    UniformTemperature,
)

SURFACE = 1e6
CS = CartesianCoordinateSystem()
TRACE = [[0.0, 0.0], [0.0, 500e3]]
DIP_POINT = [1e6, 0.0]
ANGLE = math.radians(30.0)


def query(along, distance, y=250e3):
    """Position, natural coordinates and depth of a point in the profile."""
    h = along * math.cos(ANGLE) - distance * math.sin(ANGLE)
    v = -along * math.sin(ANGLE) - distance * math.cos(ANGLE)
    position = np.array([h, y, SURFACE + v])
    return position, CS.to_natural(position), -v


def make_plate(cls=SubductingPlate, thickness=100e3, arena=None, handles=None,
               section_segments=None, **kwargs):
    arena = arena if arena is not None else ModelArena()
    segment = Segment(length=200e3, thickness=thickness, angle=ANGLE, **(handles or {}))
    return cls("test", CS, Path(TRACE), DIP_POINT, [segment], models=arena,
               section_segments=section_segments, **kwargs)


class NanTemperature(TemperatureModel):
    name = "nan"

    def evaluate(self, query, value):
        return math.nan


# Segments and sections

class TestSegment:
    def test_scalars_expand_to_pairs(self):
        seg = Segment(length=10.0, thickness=5.0, angle=0.1)
        assert seg.thickness == (5.0, 5.0)
        assert seg.angle == (0.1, 0.1)
        assert seg.top_truncation == (0.0, 0.0)

    def test_negative_length(self):
        with pytest.raises(ConfigurationError, match="length must be >= 0"):
            Segment(length=-1.0, thickness=5.0)

    def test_bad_pair(self):
        with pytest.raises(ConfigurationError, match="one or two finite values"):
            Segment(length=1.0, thickness=[1.0, 2.0, 3.0])
        with pytest.raises(ConfigurationError, match="one or two finite values"):
            Segment(length=1.0, thickness=math.nan)


class TestSections:
    def test_override(self):
        a = Segment(length=1.0, thickness=1.0)
        b = Segment(length=2.0, thickness=1.0)
        sections = assemble_sections(3, [a], {1: [b]})
        assert [s[0].length for s in sections] == [1.0, 2.0, 1.0]

    def test_override_out_of_range(self):
        a = Segment(length=1.0, thickness=1.0)
        with pytest.raises(ConfigurationError, match="only 2 coordinates"):
            assemble_sections(2, [a], {5: [a]})

    def test_segment_count_mismatch(self):
        a = Segment(length=1.0, thickness=1.0)
        with pytest.raises(ConfigurationError, match="not the same amount of segments"):
            assemble_sections(2, [a], {0: [a, a]})

    def test_table_aggregates(self):
        a = Segment(length=100.0, thickness=[10.0, 30.0])
        b = Segment(length=50.0, thickness=20.0)
        table = SegmentTable(assemble_sections(2, [a, b], {1: [b, b]}))
        npt.assert_allclose(table.total_length, [150.0, 100.0])
        assert table.max_total_length == 150.0
        assert table.max_thickness == 30.0
        assert (table.n_sections, table.n_segments) == (2, 2)
        assert table.segment(1, 0) is b

    def test_arena_resolve(self):
        arena = ModelArena()
        handle = arena.add("temperature", UniformTemperature(600.0))
        assert arena.resolve("temperature", (handle,))[0].temperature == 600.0
        with pytest.raises(ConfigurationError, match="only 1 are registered"):
            arena.resolve("temperature", (0, 3))


# Dispatch

class TestBlend:
    def test_endpoints_exact(self):
        assert blend(0.1, 0.7, 0.0) == 0.1
        assert blend(0.1, 0.7, 1.0) == 0.7
        assert blend(0.0, 1.0, 0.3) == pytest.approx(0.3)

    def test_grains_identical_orientation_kept(self):
        a = Grains([0.5, 0.5], np.tile(np.eye(3), (2, 1, 1)))
        b = Grains([0.2, 0.8], np.tile(np.eye(3), (2, 1, 1)))
        out = blend_grains(a, b, 0.5)
        npt.assert_allclose(out.sizes, [0.35, 0.65])
        npt.assert_array_equal(out.rotation_matrices, a.rotation_matrices)

    def test_grains_non_rotation_blended_linearly(self):
        a = Grains([1.0], np.zeros((1, 3, 3)))
        b = Grains([1.0], np.eye(3)[None])
        out = blend_grains(a, b, 0.25)
        npt.assert_allclose(out.rotation_matrices[0], 0.25 * np.eye(3))

    def test_grains_count_mismatch(self):
        with pytest.raises(FieldEvaluationError, match="Cannot blend"):
            blend_grains(Grains.identity(2), Grains.identity(3), 0.5)


# Feature queries

class TestSubductingPlate:
    @pytest.fixture
    def plate(self):
        arena = ModelArena()
        comp = arena.add("composition", UniformComposition(
            [2], [0.8], min_distance=10e3, max_distance=50e3))
        temps = arena.add_all("temperature", [UniformTemperature(600.0),
                                              UniformTemperature(100.0, operation="add")])
        return make_plate(arena=arena, handles={"composition_models": (comp,),
                                                "temperature_models": temps})

    def test_registered(self):
        assert feature_types["subducting plate"] is SubductingPlate
        assert feature_types["fault"] is Fault

    def test_composition_inside_window(self, plate):
        position, natural, depth = query(100e3, 30e3)
        assert plate.composition(position, natural, depth, 2, 0.0) == pytest.approx(0.8)

    def test_composition_outside_window_unchanged(self, plate):
        position, natural, depth = query(100e3, 60e3)
        assert plate.composition(position, natural, depth, 2, 0.25) == 0.25

    def test_models_applied_in_order(self, plate):
        position, natural, depth = query(100e3, 30e3)
        assert plate.temperature(position, natural, depth, 9.81, 1600.0) == pytest.approx(700.0)

    def test_outside_bounding_box_unchanged(self, plate):
        position = np.array([2e6, 250e3, SURFACE - 50e3])
        natural = CS.to_natural(position)
        assert plate.temperature(position, natural, 50e3, 9.81, 1600.0) == 1600.0
        box = plate.get_bounding_box(natural, 50e3)
        assert not box.point_inside(natural.surface)

    def test_above_slab_unchanged(self, plate):
        position, natural, depth = query(100e3, -10e3)
        assert plate.temperature(position, natural, depth, 9.81, 1600.0) == 1600.0

    def test_below_slab_unchanged(self, plate):
        position, natural, depth = query(100e3, 110e3)
        assert plate.temperature(position, natural, depth, 9.81, 1600.0) == 1600.0

    def test_public_distance(self, plate):
        position, natural, depth = query(100e3, 30e3)
        result = plate.distance(position, natural, depth)
        assert result.distance_from_plane == pytest.approx(30e3)
        assert result.distance_along_plane == pytest.approx(100e3)

    def test_depth_window(self):
        arena = ModelArena()
        temp = arena.add("temperature", UniformTemperature(600.0))
        plate = make_plate(arena=arena, handles={"temperature_models": (temp,)},
                           max_depth=50e3)
        position, natural, depth = query(100e3, 30e3)
        assert depth > 50e3
        assert plate.temperature(position, natural, depth, 9.81, 1600.0) == 1600.0
        shallow = query(20e3, 10e3)
        assert shallow[2] < 50e3
        assert plate.temperature(*shallow, 9.81, 1600.0) == 600.0

    def test_deeper_than_slab_extent(self, plate):
        position = np.array([0.0, 250e3, SURFACE - 400e3])
        natural = CS.to_natural(position)
        assert plate.temperature(position, natural, 400e3, 9.81, 1600.0) == 1600.0

    def test_zero_thickness_unchanged(self):
        arena = ModelArena()
        temp = arena.add("temperature", UniformTemperature(600.0))
        plate = make_plate(thickness=0.0, arena=arena,
                           handles={"temperature_models": (temp,)})
        position, natural, depth = query(100e3, 0.0)
        assert plate.temperature(position, natural, depth, 9.81, 1600.0) == 1600.0

    def test_two_segment_slab(self):
        arena = ModelArena()
        comp = arena.add("composition", UniformComposition(
            [2], [0.8], min_distance=10e3, max_distance=50e3))
        segment = Segment(length=100e3, thickness=100e3, angle=ANGLE,
                          composition_models=(comp,))
        plate = SubductingPlate("two", CS, Path(TRACE), DIP_POINT, [segment, segment],
                                models=arena)
        position, natural, depth = query(150e3, 30e3)
        assert plate.distance(position, natural, depth).segment == 1
        assert plate.composition(position, natural, depth, 2, 0.0) == pytest.approx(0.8)

    def test_zero_thickness_at_section_boundary(self):
        arena = ModelArena()
        temp = arena.add("temperature", UniformTemperature(600.0))
        closed = Segment(length=200e3, thickness=0.0, angle=ANGLE,
                         temperature_models=(temp,))
        plate = make_plate(arena=arena, handles={"temperature_models": (temp,)},
                           section_segments={1: [closed]})
        position, natural, depth = query(100e3, 0.0, y=500e3)
        assert plate.temperature(position, natural, depth, 9.81, 1600.0) == 1600.0
        position, natural, depth = query(100e3, 0.0, y=250e3)
        assert plate.temperature(position, natural, depth, 9.81, 1600.0) == 600.0

    def test_nonfinite_model_output(self):
        arena = ModelArena()
        temp = arena.add("temperature", NanTemperature())
        plate = make_plate(arena=arena, handles={"temperature_models": (temp,)})
        position, natural, depth = query(100e3, 30e3)
        with pytest.raises(FieldEvaluationError, match="not finite"):
            plate.temperature(position, natural, depth, 9.81, 1600.0)

    def test_nonpositive_starting_radius(self, plate):
        position = np.array([0.0, 250e3, -10.0])
        natural = CS.to_natural(position)
        with pytest.raises(FieldEvaluationError, match="Starting radius"):
            plate.temperature(position, natural, 10.0, 9.81, 1600.0)

    def test_inverted_depth_window(self):
        with pytest.raises(ConfigurationError, match="max depth"):
            make_plate(min_depth=100e3, max_depth=50e3)


class TestSectionBlending:
    @pytest.fixture
    def plate(self):
        arena = ModelArena()
        cold = arena.add("temperature", UniformTemperature(500.0))
        hot = arena.add("temperature", UniformTemperature(1000.0))
        first = arena.add("grains", UniformGrains([0], euler_angles=[[0.0, 0.0, 0.0]],
                                                  grain_sizes=[0.1]))
        second = arena.add("grains", UniformGrains([0], euler_angles=[[90.0, 0.0, 0.0]],
                                                   grain_sizes=[0.3]))
        override = Segment(length=200e3, thickness=100e3, angle=ANGLE,
                           temperature_models=(hot,), grains_models=(second,))
        return make_plate(arena=arena,
                          handles={"temperature_models": (cold,),
                                   "grains_models": (first,)},
                          section_segments={1: [override]})

    @pytest.mark.parametrize("y, expected", [
        (0.0, 500.0),
        (125e3, 625.0),
        (250e3, 750.0),
        (500e3, 1000.0),
    ])
    def test_temperature_blend(self, plate, y, expected):
        position, natural, depth = query(100e3, 30e3, y=y)
        assert plate.temperature(position, natural, depth, 9.81, 1600.0) == pytest.approx(
            expected, rel=1e-12)

    def test_endpoints_exact(self, plate):
        for y, expected in ((0.0, 500.0), (500e3, 1000.0)):
            position, natural, depth = query(100e3, 30e3, y=y)
            assert plate.temperature(position, natural, depth, 9.81, 1600.0) == expected

    def test_grains_slerped(self, plate):
        position, natural, depth = query(100e3, 30e3)
        out = plate.grains(position, natural, depth, 0, Grains.identity(3))
        npt.assert_allclose(out.sizes, 0.2)
        expected = euler_angles_to_rotation_matrix(45.0, 0.0, 0.0)
        for m in out.rotation_matrices:
            assert is_rotation_matrix(m)
            npt.assert_allclose(m, expected, atol=1e-12)

    def test_grains_input_not_mutated(self, plate):
        position, natural, depth = query(100e3, 30e3)
        grains = Grains.identity(3)
        plate.grains(position, natural, depth, 0, grains)
        npt.assert_array_equal(grains.rotation_matrices, np.tile(np.eye(3), (3, 1, 1)))


class TestFault:
    @pytest.fixture
    def fault(self):
        arena = ModelArena()
        comp = arena.add("composition", UniformComposition([1], [1.0]))
        temp = arena.add("temperature", UniformTemperature(
            900.0, min_distance=0.0, max_distance=5e3))
        return make_plate(cls=Fault, thickness=20e3, arena=arena,
                          handles={"composition_models": (comp,),
                                   "temperature_models": (temp,)})

    @pytest.mark.parametrize("distance, inside", [
        (-9e3, True),
        (0.0, True),
        (9e3, True),
        (11e3, False),
        (-11e3, False),
    ])
    def test_membership(self, fault, distance, inside):
        position, natural, depth = query(100e3, distance)
        expected = 1.0 if inside else 0.0
        assert fault.composition(position, natural, depth, 1, 0.0) == expected

    def test_reference_distance_is_absolute(self, fault):
        for distance in (-4e3, 4e3):
            position, natural, depth = query(100e3, distance)
            assert fault.temperature(position, natural, depth, 9.81, 1600.0) == 900.0
        position, natural, depth = query(100e3, -7e3)
        assert fault.temperature(position, natural, depth, 9.81, 1600.0) == 1600.0
