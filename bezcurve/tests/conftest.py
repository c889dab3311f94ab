#!/usr/bin/env python
# -*- coding: utf-8 -*-

import numpy
import pytest

from bezcurve.curve import Curve, make_circle
from bezcurve.point import CurvePoint, HandleStyle


@pytest.fixture
def circle():
    return make_circle(radius=0.5)


@pytest.fixture
def five_points():
    """Open curve of five broken-handle points with distinct values."""
    points = [
        CurvePoint(
            position=(i, 0.5 * i, -i),
            handle1=(-0.2, 0.1 * i, 0.0),
            handle2=(0.3, 0.0, 0.1 * i),
            handle_style=HandleStyle.BROKEN,
        )
        for i in range(5)
    ]
    return Curve(points, name="five")


@pytest.fixture
def two_points():
    return Curve(
        [
            CurvePoint((0, 0, 0), handle2=(1, 1, 0), handle_style=HandleStyle.BROKEN),
            CurvePoint((3, 0, 0), handle1=(-1, 1, 0), handle_style=HandleStyle.BROKEN),
        ],
        name="two",
    )


@pytest.fixture
def listener_calls():
    calls = []

    def listener(curve):
        calls.append(curve)

    listener.calls = calls
    return listener


def point_state(point):
    return (
        point.position.tolist(),
        point.handle1.tolist(),
        point.handle2.tolist(),
        point.handle_style,
    )


def assert_points_equal(points1, points2):
    assert len(points1) == len(points2)
    for p1, p2 in zip(points1, points2):
        numpy.testing.assert_allclose(p1.position, p2.position, atol=1e-12)
        numpy.testing.assert_allclose(p1.handle1, p2.handle1, atol=1e-12)
        numpy.testing.assert_allclose(p1.handle2, p2.handle2, atol=1e-12)
        assert p1.handle_style == p2.handle_style
