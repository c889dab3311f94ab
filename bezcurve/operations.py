"""Batch edits over the points of a Curve.

Every operation validates its input before changing anything, leaves each
point's handles consistent with its handle style, and notifies the curve's
listeners once. Selections are iterables of point indices; None selects the
whole curve.
"""

import logging

import numpy

from . import bezier
from . import errors
from . import vector
from .curve import Curve
from .point import CurvePoint, HandleStyle

logger = logging.getLogger(__name__)

def _selected(curve, selection):
    curve.require_intact()
    if selection is None:
        return list(range(len(curve)))
    return curve.check_indices(selection)

def _require_points(curve, indices, minimum, operation):
    if len(indices) < minimum:
        raise errors.DegenerateSelectionError('{} needs at least {} point{} on curve "{}", got {}.'.format(
            operation, minimum, '' if minimum == 1 else 's', curve.name, len(indices)))

def snap_to_axis(curve, axis, selection=None):
    """Zero the given coordinate of each selected point's local position,
    flattening the points onto the plane through the curve's origin that is
    perpendicular to that axis."""
    axis = vector.Axis.parse(axis)
    indices = _selected(curve, selection)
    with curve.changes():
        for i in indices:
            position = curve[i].position
            position[axis] = 0
            curve[i].position = position
    logger.debug('Snapped {} points of "{}" to the {} axis'.format(len(indices), curve.name, axis.name))

def mirror_around_axis(curve, axis, selection=None):
    """Negate the given coordinate of each selected point's local position and
    of both its handles."""
    axis = vector.Axis.parse(axis)
    indices = _selected(curve, selection)
    flip = numpy.ones(3)
    flip[axis] = -1
    with curve.changes():
        for i in indices:
            point = curve[i]
            point.position = point.position * flip
            point.set_handles(point.handle1 * flip, point.handle2 * flip)
    logger.debug('Mirrored {} points of "{}" around the {} axis'.format(len(indices), curve.name, axis.name))

def reverse(curve):
    """Reverse the direction of the curve: the point order is reversed and
    each point's handles swap roles."""
    curve.require_intact()
    points = list(curve)[::-1]
    with curve.changes():
        for point in points:
            point.set_handles(point.handle2, point.handle1)
        curve.set_points(points)
    logger.debug('Reversed "{}"'.format(curve.name))

def align_points(curve, selection):
    """Line up the selected points along the straight line joining the first
    and last of them (in index order).

    Each selected point's handles are rotated by the smallest rotation that
    turns handle2 towards the line's direction, and the points between the two
    ends are moved onto the line.
    """
    indices = _selected(curve, selection)
    _require_points(curve, indices, 2, 'Align')
    first = curve[indices[0]].position
    last = curve[indices[-1]].position
    normal = vector.normalize(last - first)
    if vector.is_zero(normal):
        raise errors.DegenerateSelectionError('Cannot align points on curve "{}": the first and last selected '
            'points coincide.'.format(curve.name))
    midpoint = (first + last) / 2
    with curve.changes():
        for n, i in enumerate(indices):
            point = curve[i]
            rotation = vector.rotation_between(point.handle2, normal)
            point.set_handles(rotation @ point.handle1, rotation @ point.handle2)
            if 0 < n < len(indices) - 1:
                offset = point.position - midpoint
                point.position = midpoint + numpy.dot(offset, normal) * normal
    logger.debug('Aligned {} points of "{}"'.format(len(indices), curve.name))

def level(curve, selection=None, up_axis=vector.Axis.Y):
    """Move the selected points to their mean height along up_axis, and make
    their handles horizontal by removing the up component."""
    up_axis = vector.Axis.parse(up_axis)
    indices = _selected(curve, selection)
    _require_points(curve, indices, 1, 'Level')
    height = numpy.mean([curve[i].position[up_axis] for i in indices])
    flatten = numpy.ones(3)
    flatten[up_axis] = 0
    with curve.changes():
        for i in indices:
            point = curve[i]
            position = point.position
            position[up_axis] = height
            point.position = position
            point.set_handles(point.handle1 * flatten, point.handle2 * flatten)
    logger.debug('Leveled {} points of "{}" at height {}'.format(len(indices), curve.name, height))

def center_pivot(curve):
    """Move the curve's origin to the center of its points' bounding box.

    The frame is translated (in local space) to the box center and every
    position is offset by the opposite amount, so no point moves in global
    space.
    """
    indices = _selected(curve, None)
    _require_points(curve, indices, 1, 'Center pivot')
    positions = numpy.array([curve[i].position for i in indices])
    center = (positions.min(axis=0) + positions.max(axis=0)) / 2
    with curve.changes():
        curve.frame = curve.frame @ vector.translation_matrix(center)
        for i in indices:
            curve[i].position = curve[i].position - center
    logger.debug('Centered pivot of "{}" by {}'.format(curve.name, center))

def remove_points(curve, selection):
    """Delete the points at the given indices. Returns the removed points in
    index order."""
    indices = _selected(curve, selection)
    removed = []
    with curve.changes():
        for i in reversed(indices):
            removed.append(curve.remove_point(i))
    logger.debug('Removed {} points from "{}"'.format(len(removed), curve.name))
    return removed[::-1]

def _check_consecutive(curve, indices):
    _require_points(curve, indices, 2, 'Subdivide')
    if any(b - a != 1 for a, b in zip(indices[:-1], indices[1:])):
        raise errors.DegenerateSelectionError('Subdivide needs adjacent points on curve "{}", got indices {}.'.format(
            curve.name, indices))

def subdivide(curve, selection, t=0.5):
    """Insert a point into each segment between consecutive selected points.

    Each new point sits at parameter t of its segment and gets aligned handles
    such that the two halves trace the original segment. The handles of the
    selected points that face into the subdivided segments are shortened to
    match; handles facing away from the selection are left alone. Selected
    points with equal handles whose new handles differ in length are switched
    to aligned handles.
    Returns the new points in curve order.
    """
    if not 0 <= t <= 1:
        raise ValueError('Subdivision parameter must be in [0, 1], not {}.'.format(t))
    indices = _selected(curve, selection)
    _check_consecutive(curve, indices)
    # split every segment against the unmodified curve first
    splits = []
    new_handles = {i: [curve[i].handle1, curve[i].handle2] for i in indices}
    for index in indices[:-1]:
        a = curve[index]
        b = curve[index + 1]
        (left_start, left_end, left_tangent0, left_tangent1,
         right_start, right_end, right_tangent0, right_tangent1) = bezier.split_bezier(
            t, a.position, b.position, a.handle2, b.handle1)
        new_handles[index][1] = left_tangent0
        new_handles[index + 1][0] = right_tangent1
        splits.append(CurvePoint(left_end, left_tangent1, right_tangent0, HandleStyle.ALIGNED))
    with curve.changes():
        for i in indices:
            point = curve[i]
            handle1, handle2 = new_handles[i]
            if point.handle_style is HandleStyle.EQUAL and not numpy.allclose(handle1, -handle2):
                logger.debug('Switching point {} of "{}" to aligned handles'.format(i, curve.name))
                point.handle_style = HandleStyle.ALIGNED
            if i == indices[0]:
                point.handle2 = handle2
            elif i == indices[-1]:
                point.handle1 = handle1
            else:
                point.set_handles(handle1, handle2)
        # insert backwards so that insertions do not shift pending indices
        for index, point in reversed(list(zip(indices[:-1], splits))):
            curve.insert_point(index + 1, point)
    logger.debug('Subdivided {} segments of "{}"'.format(len(splits), curve.name))
    return splits

def split(curve, index, t=None):
    """Split an open curve in two, returning the new curve.

    If t is None, the curve is split at the interior point 'index': the
    original curve keeps points [0, index] and the new curve receives a copy of
    that point followed by the remaining points. Otherwise segment 'index' is
    first subdivided at t and the curve is split at the inserted point.
    """
    curve.require_intact()
    if curve.closed:
        raise errors.DegenerateSelectionError('Cannot split closed curve "{}"; open it first.'.format(curve.name))
    if t is not None:
        if not 0 < t < 1:
            raise errors.DegenerateSelectionError('Split parameter must be strictly between 0 and 1, not {}.'.format(t))
        curve.check_indices([index, index + 1])
    elif not 0 < curve.check_index(index) < curve.last_index:
        raise errors.DegenerateSelectionError('Cannot split curve "{}" at end point {}.'.format(curve.name, index))
    with curve.changes():
        if t is not None:
            subdivide(curve, [index, index + 1], t)
            index += 1
        points = list(curve)
        new_curve = Curve([points[index].copy()] + points[index + 1:], resolution=curve.resolution,
            frame=curve.frame, mirror=curve.mirror, mirror_axis=curve.mirror_axis, name=curve.name + ' split')
        curve.set_points(points[:index + 1])
    logger.debug('Split "{}" at point {} into {} and {} points'.format(curve.name, index, len(curve), len(new_curve)))
    return new_curve
