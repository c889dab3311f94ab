#!/usr/bin/env python
# -*- coding: utf-8 -*-

import math

import numpy
import pytest

from bezcurve import bezier, errors, vector
from bezcurve.curve import MAX_SEGMENT_SAMPLES, MIN_RESOLUTION, Curve, make_circle
from bezcurve.point import CurvePoint, HandleStyle


def test_segment_counts():
    curve = Curve()
    assert curve.segment_count == 0
    curve.add_point(CurvePoint())
    assert curve.segment_count == 0
    curve.closed = True
    assert curve.segment_count == 1
    curve.add_point(CurvePoint((1, 0, 0)))
    curve.add_point(CurvePoint((2, 0, 0)))
    assert curve.segment_count == 3
    curve.closed = False
    assert curve.segment_count == 2
    assert curve.last_index == 2


def test_empty_curve_evaluates_to_nothing():
    curve = Curve()
    assert curve.approximate_length() == 0
    assert curve.interpolated_points().shape == (0, 3)
    with pytest.raises(errors.DegenerateSelectionError):
        curve.point_at(0.5)


@pytest.mark.parametrize("index", [-1, 5, 100])
def test_invalid_index(five_points, index):
    with pytest.raises(errors.InvalidIndexError):
        five_points[index]
    with pytest.raises(IndexError):
        five_points.remove_point(index)
    assert len(five_points) == 5


def test_last_point(five_points):
    assert five_points.last() is five_points[4]
    with pytest.raises(errors.InvalidIndexError):
        Curve().last()


def test_resolution_clamped():
    curve = Curve(resolution=0)
    assert curve.resolution == MIN_RESOLUTION
    curve.resolution = -5
    assert curve.resolution == MIN_RESOLUTION
    curve.resolution = 3
    assert curve.resolution == 3


def test_insert_and_remove(five_points):
    point = CurvePoint((9, 9, 9))
    five_points.insert_point(2, point)
    assert five_points.index_of(point) == 2
    assert len(five_points) == 6
    assert five_points.remove_point(2) is point
    with pytest.raises(errors.StaleReferenceError):
        five_points.index_of(point)
    five_points.insert_point(5, point)
    assert five_points.last() is point
    with pytest.raises(errors.InvalidIndexError):
        five_points.insert_point(7, CurvePoint())
    with pytest.raises(ValueError):
        five_points.insert_point(0, point)


def test_move_point(five_points):
    points = list(five_points)
    five_points.move_point(0, 3)
    assert list(five_points) == points[1:4] + [points[0]] + points[4:]


def test_add_point_at_global_position():
    curve = Curve(frame=vector.translation_matrix((1, 0, 0)))
    point = curve.add_point_at((3, 2, 1))
    numpy.testing.assert_allclose(point.position, (2, 2, 1))
    numpy.testing.assert_allclose(curve.global_position(0), (3, 2, 1))
    assert point.handle_style is HandleStyle.NONE


def test_append_point_continues_last_direction():
    curve = Curve()
    first = curve.append_point()
    numpy.testing.assert_allclose(first.position, (0, 0, 0))
    numpy.testing.assert_allclose(first.handle2, (0, 0, 1))
    second = curve.append_point(distance=2.0)
    numpy.testing.assert_allclose(second.position, (0, 0, 2))
    numpy.testing.assert_allclose(second.handle1, (0, 0, -1))


def test_listeners_fire_once_per_change(five_points, listener_calls):
    five_points.add_listener(listener_calls)
    five_points.set_global_handle(1, 2, (5, 5, 5))
    assert len(listener_calls.calls) == 1
    with five_points.changes():
        five_points[0].position = (1, 1, 1)
        five_points.remove_point(4)
        with five_points.changes():
            five_points.add_point(CurvePoint())
        assert len(listener_calls.calls) == 1
    assert len(listener_calls.calls) == 2
    assert listener_calls.calls[-1] is five_points
    five_points.remove_listener(listener_calls)
    five_points.remove_point(0)
    assert len(listener_calls.calls) == 2


def test_no_notification_when_batch_fails(five_points, listener_calls):
    five_points.add_listener(listener_calls)
    with pytest.raises(RuntimeError):
        with five_points.changes():
            raise RuntimeError("abort")
    assert listener_calls.calls == []
    five_points.notify_changed()
    assert len(listener_calls.calls) == 1


def test_global_handles(five_points):
    five_points.frame = vector.translation_matrix((0, 10, 0))
    numpy.testing.assert_allclose(five_points.global_handle(1, 1), (0.8, 10.6, -1))
    five_points.set_global_handle(1, 1, (1, 10.5, -1))
    numpy.testing.assert_allclose(five_points[1].handle1, (0, 0, 0))
    with pytest.raises(ValueError):
        five_points.global_handle(1, 3)


def test_closed_curve_wraparound_segment(circle):
    last, first = circle.segment(3)
    assert last is circle[3]
    assert first is circle[0]
    numpy.testing.assert_allclose(circle.segment_control_points(3)[2], circle[0].position + circle[0].handle1)
    with pytest.raises(errors.InvalidIndexError):
        circle.segment(4)


def test_circle_length(circle):
    total = sum(bezier.approximate_length(a, b, num_samples=50) for a, b in circle.segments())
    assert total == pytest.approx(math.pi, rel=0.05)
    assert circle.approximate_length(num_samples=50) == pytest.approx(total)


def test_circle_points_lie_near_radius(circle):
    points = circle.interpolated_points()
    radii = numpy.sqrt((points**2).sum(axis=1))
    numpy.testing.assert_allclose(radii, 0.5, rtol=0.02)
    numpy.testing.assert_allclose(points[:, 1], 0)


def test_point_at_spans_segments(circle):
    numpy.testing.assert_allclose(circle.point_at(0), circle[0].position)
    numpy.testing.assert_allclose(circle.point_at(0.25), circle[1].position, atol=1e-12)
    numpy.testing.assert_allclose(circle.point_at(1), circle[0].position, atol=1e-12)
    tangent = circle.tangent_at(0)
    numpy.testing.assert_allclose(tangent, 3 * circle[0].handle2)


def test_interpolated_points_density(two_points):
    two_points.resolution = 1
    coarse = two_points.interpolated_points()
    two_points.resolution = 20
    fine = two_points.interpolated_points()
    assert len(fine) > len(coarse) >= 2
    numpy.testing.assert_allclose(fine[0], two_points[0].position)
    numpy.testing.assert_allclose(fine[-1], two_points[1].position)


def test_interpolated_points_global_space(two_points):
    two_points.frame = vector.translation_matrix((0, 0, 5))
    local = two_points.interpolated_points(global_space=False)
    numpy.testing.assert_allclose(two_points.interpolated_points(), local + (0, 0, 5))


def test_missing_points_must_be_cleaned_up():
    curve = Curve([CurvePoint(), None, CurvePoint((1, 0, 0))])
    assert curve.missing_indices() == [1]
    with pytest.raises(errors.MissingPointError):
        curve.approximate_length()
    assert curve.clean_up_null_points() == 1
    assert len(curve) == 2
    assert curve.clean_up_null_points() == 0
    assert curve.approximate_length() == pytest.approx(1)


def test_record_round_trip(circle):
    circle.frame = vector.translation_matrix((1, 2, 3))
    circle.mirror = True
    circle.mirror_axis = "z"
    copy = Curve.from_record(circle.to_record())
    assert copy.closed
    assert copy.mirror
    assert copy.mirror_axis is vector.Axis.Z
    assert copy.resolution == circle.resolution
    numpy.testing.assert_allclose(copy.frame, circle.frame)
    for p1, p2 in zip(circle, copy):
        numpy.testing.assert_allclose(p1.position, p2.position)
        numpy.testing.assert_allclose(p1.handle1, p2.handle1)
        numpy.testing.assert_allclose(p1.handle2, p2.handle2)
        assert p1.handle_style is p2.handle_style


def test_copy_is_independent(circle, listener_calls):
    circle.add_listener(listener_calls)
    duplicate = circle.copy()
    duplicate[0].position = (5, 5, 5)
    duplicate.remove_point(1)
    assert len(circle) == 4
    numpy.testing.assert_allclose(circle[0].position, (0, 0, 0.5))
    assert listener_calls.calls == []


def test_make_circle_handles():
    curve = make_circle(radius=2)
    numpy.testing.assert_allclose(curve[0].position, (0, 0, 2))
    numpy.testing.assert_allclose(curve[0].handle1, (-1.12, 0, 0))
    numpy.testing.assert_allclose(curve[0].handle2, (1.12, 0, 0))
    assert all(p.handle_style is HandleStyle.EQUAL for p in curve)


def test_constructor_rejects_foreign_and_repeated_points():
    point = CurvePoint()
    with pytest.raises(ValueError):
        Curve([point, CurvePoint((1, 0, 0)), point])
    with pytest.raises(TypeError):
        Curve([point, (1, 0, 0)])
    curve = Curve([point])
    with pytest.raises(ValueError):
        curve.set_points([point, point])
    assert list(curve) == [point]


def test_interpolated_points_sample_count_is_bounded(two_points):
    two_points.resolution = 1e12
    points = two_points.interpolated_points()
    assert len(points) == MAX_SEGMENT_SAMPLES
    numpy.testing.assert_allclose(points[-1], two_points[1].position)


def test_singular_frame_rejected(five_points):
    frame = numpy.diag([1.0, 0.0, 1.0, 1.0])
    with pytest.raises(ValueError):
        five_points.frame = frame
    with pytest.raises(ValueError):
        Curve(frame=frame)
    numpy.testing.assert_array_equal(five_points.frame, numpy.eye(4))
