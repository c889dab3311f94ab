# This code is licensed under the MIT License (see LICENSE file for details)

import contextlib
import logging
import math

import numpy

from . import bezier
from . import errors
from . import upgrade
from . import vector
from .point import CurvePoint, HandleStyle

logger = logging.getLogger(__name__)

MIN_RESOLUTION = 0.0001
DEFAULT_RESOLUTION = 10.0
CIRCLE_HANDLE_RATIO = 0.56
MAX_SEGMENT_SAMPLES = 10000

class Curve:
    """A piecewise cubic Bezier curve: an ordered sequence of CurvePoints,
    positioned in space by a 4x4 local-to-global frame.

    Point positions and handles are stored in the curve's local space. The
    curve exclusively owns its points; an index is only meaningful until the
    next insertion or removal, while the CurvePoint object itself stays a
    stable reference (see index_of()).

    Listeners registered with add_listener() are called with the curve once
    per logical edit: a single setter call, or a whole block of edits made
    inside 'with curve.changes():'.
    """
    def __init__(self, points=(), closed=False, resolution=DEFAULT_RESOLUTION, frame=None,
            mirror=False, mirror_axis=vector.Axis.X, name='BezierCurve'):
        """Parameters:
            points: iterable of CurvePoints, in curve order.
            closed: if True, the last point connects back to the first.
            resolution: samples per unit length for interpolated_points();
                clamped to at least MIN_RESOLUTION.
            frame: 4x4 local-to-global affine matrix, or None for identity.
            mirror, mirror_axis: request that the curve be displayed mirrored
                across the given axis. Only stored; no mirrored geometry is
                generated here.
            name: label used in log messages.
        """
        self.name = name
        self._points = self._checked_points(points)
        self.closed = bool(closed)
        self.resolution = resolution
        self.frame = frame
        self.mirror = bool(mirror)
        self.mirror_axis = mirror_axis
        self.version = upgrade.CURRENT_VERSION
        self._listeners = []
        self._batch_depth = 0

    def __repr__(self):
        return 'Curve("{}", {} points, closed={})'.format(self.name, len(self._points), self.closed)

    @property
    def resolution(self):
        return self._resolution

    @resolution.setter
    def resolution(self, value):
        value = float(value)
        if math.isinf(value):
            raise ValueError('Resolution must be finite.')
        if not value >= MIN_RESOLUTION:
            logger.debug('Clamping resolution {} of "{}" to {}'.format(value, self.name, MIN_RESOLUTION))
            value = MIN_RESOLUTION
        self._resolution = value

    @property
    def frame(self):
        return self._frame.copy()

    @frame.setter
    def frame(self, value):
        self._frame = vector.as_frame(value)

    @property
    def mirror_axis(self):
        return self._mirror_axis

    @mirror_axis.setter
    def mirror_axis(self, axis):
        self._mirror_axis = vector.Axis.parse(axis)

    # change notification

    def add_listener(self, callback):
        """Register callback(curve) to be called after each logical change."""
        self._listeners.append(callback)

    def remove_listener(self, callback):
        self._listeners.remove(callback)

    def notify_changed(self):
        """Inform listeners that the curve changed. Inside a changes() block
        the notification is deferred until the outermost block exits."""
        if self._batch_depth > 0:
            return
        for callback in list(self._listeners):
            callback(self)

    @contextlib.contextmanager
    def changes(self):
        """Context manager grouping edits into one change notification.

        Listeners are called once when the outermost block exits normally.
        Edits made directly on CurvePoint objects inside the block are covered
        too. No notification is sent if the block raises.
        """
        self._batch_depth += 1
        try:
            yield self
        finally:
            self._batch_depth -= 1
        self.notify_changed()

    # sequence access

    def __len__(self):
        return len(self._points)

    def __iter__(self):
        return iter(self._points)

    def __contains__(self, point):
        return any(p is point for p in self._points)

    def __getitem__(self, index):
        return self._points[self.check_index(index)]

    @property
    def point_count(self):
        return len(self._points)

    @property
    def last_index(self):
        return len(self._points) - 1

    @property
    def segment_count(self):
        if self.closed:
            return len(self._points)
        return max(len(self._points) - 1, 0)

    def last(self):
        """Return the last point of the curve."""
        if not self._points:
            raise errors.InvalidIndexError('Curve "{}" has no points.'.format(self.name))
        return self[self.last_index]

    def check_index(self, index, upper=None):
        if upper is None:
            upper = len(self._points)
        if isinstance(index, bool) or not isinstance(index, (int, numpy.integer)):
            raise TypeError('Point indices must be integers, not {}.'.format(type(index).__name__))
        if not 0 <= index < upper:
            raise errors.InvalidIndexError('Point index {} out of range for curve "{}" with {} points.'.format(
                index, self.name, len(self._points)))
        return int(index)

    def check_indices(self, selection):
        """Validate an iterable of point indices and return them sorted, with
        duplicates removed."""
        return sorted(set(self.check_index(i) for i in selection))

    def _checked_points(self, points):
        # None entries stand for missing points; see clean_up_null_points()
        points = list(points)
        seen = set()
        for point in points:
            if point is None:
                continue
            if not isinstance(point, CurvePoint):
                raise TypeError('Expected a CurvePoint, not {}.'.format(type(point).__name__))
            if id(point) in seen:
                raise ValueError('Point appears more than once in curve "{}".'.format(self.name))
            seen.add(id(point))
        return points

    def require_intact(self):
        """Raise MissingPointError if any entry in the point list is empty."""
        missing = self.missing_indices()
        if missing:
            raise errors.MissingPointError('Curve "{}" has missing points at indices {}.'.format(self.name, missing))

    def missing_indices(self):
        return [i for i, point in enumerate(self._points) if point is None]

    def clean_up_null_points(self):
        """Remove empty entries from the point list, returning how many were
        removed. Indices of the following points shift down accordingly."""
        missing = self.missing_indices()
        if not missing:
            return 0
        logger.warning('Removing {} missing points from curve "{}"'.format(len(missing), self.name))
        self._points = [p for p in self._points if p is not None]
        self.notify_changed()
        return len(missing)

    def index_of(self, point):
        """Return the current index of a point, looked up by identity."""
        for i, p in enumerate(self._points):
            if p is point:
                return i
        raise errors.StaleReferenceError('Point is not part of curve "{}".'.format(self.name))

    # structural edits

    def add_point(self, point):
        """Append a CurvePoint and return it."""
        return self.insert_point(len(self._points), point)

    def add_point_at(self, global_position):
        """Append a new point with no handles at the given global position."""
        point = CurvePoint(handle_style=HandleStyle.NONE)
        point.set_global_position(self._frame, global_position)
        return self.add_point(point)

    def insert_point(self, index, point):
        """Insert a CurvePoint so that it ends up at 'index', which may range
        from 0 to point_count inclusive."""
        if not isinstance(point, CurvePoint):
            raise TypeError('Expected a CurvePoint, not {}.'.format(type(point).__name__))
        if point in self:
            raise ValueError('Point is already part of curve "{}".'.format(self.name))
        index = self.check_index(index, upper=len(self._points) + 1)
        self._points.insert(index, point)
        self.notify_changed()
        return point

    def remove_point(self, index):
        """Remove and return the point at 'index'; later points shift down."""
        point = self._points.pop(self.check_index(index))
        self.notify_changed()
        return point

    def move_point(self, index, new_index):
        """Move the point at 'index' so that it ends up at 'new_index'."""
        index = self.check_index(index)
        new_index = self.check_index(new_index)
        self._points.insert(new_index, self._points.pop(index))
        self.notify_changed()

    def append_point(self, distance=2.0):
        """Add a point 'distance' beyond the last point, continuing in the
        direction of the last point's handles. On an empty curve the point is
        placed at the origin, facing +z."""
        if self._points:
            self.require_intact()
            last = self._points[-1]
            direction = vector.normalize(last.handle2 - last.handle1)
            position = last.position + direction * distance
        else:
            direction = numpy.array([0, 0, 1.0])
            position = numpy.zeros(3)
        return self.add_point(CurvePoint(position, -direction, direction, HandleStyle.EQUAL))

    def set_points(self, points):
        """Replace all points at once."""
        self._points = self._checked_points(points)
        self.notify_changed()

    def copy(self):
        """Return an independent copy of the curve (without listeners)."""
        self.require_intact()
        new = Curve([p.copy() for p in self._points], closed=self.closed, resolution=self.resolution,
            frame=self._frame, mirror=self.mirror, mirror_axis=self.mirror_axis, name=self.name)
        new.version = self.version
        return new

    # global-space accessors

    def global_position(self, index):
        return self[index].global_position(self._frame)

    def set_global_position(self, index, value):
        self[index].set_global_position(self._frame, value)
        self.notify_changed()

    def global_handle(self, index, which):
        """Return the global position of handle 'which' (1 or 2) of a point."""
        point = self[index]
        if which == 1:
            return point.global_handle1(self._frame)
        if which == 2:
            return point.global_handle2(self._frame)
        raise ValueError('Handle must be 1 or 2, not {!r}.'.format(which))

    def set_global_handle(self, index, which, value):
        point = self[index]
        if which == 1:
            point.set_global_handle1(self._frame, value)
        elif which == 2:
            point.set_global_handle2(self._frame, value)
        else:
            raise ValueError('Handle must be 1 or 2, not {!r}.'.format(which))
        self.notify_changed()

    # evaluation

    def segment(self, index):
        """Return the (start, end) points of segment 'index'. For a closed
        curve the last segment runs from the last point back to the first."""
        self.require_intact()
        if not 0 <= index < self.segment_count:
            raise errors.InvalidIndexError('Segment index {} out of range for curve "{}" with {} segments.'.format(
                index, self.name, self.segment_count))
        return self._points[index], self._points[(index + 1) % len(self._points)]

    def segments(self):
        return [self.segment(i) for i in range(self.segment_count)]

    def segment_control_points(self, index):
        """Return the local-space control points of a segment, shape (4, 3)."""
        return bezier.segment_control_points(*self.segment(index))

    def _locate(self, t):
        count = self.segment_count
        if count == 0:
            raise errors.DegenerateSelectionError('Curve "{}" has no segments to evaluate.'.format(self.name))
        t = min(max(float(t), 0.0), 1.0) * count
        index = min(int(t), count - 1)
        return index, t - index

    def point_at(self, t, global_space=True):
        """Evaluate the curve at t in [0, 1], with each segment taking an equal
        share of the parameter range."""
        index, local_t = self._locate(t)
        point = bezier.evaluate(local_t, *self.segment_control_points(index))
        if global_space:
            point = vector.transform_point(self._frame, point)
        return point

    def tangent_at(self, t, global_space=True):
        """Return the derivative of the curve at t in [0, 1] with respect to the
        segment parameter."""
        index, local_t = self._locate(t)
        tangent = bezier.derivative(local_t, *self.segment_control_points(index))
        if global_space:
            tangent = tangent @ self._frame[:3, :3].T
        return tangent

    def segment_lengths(self, num_samples=bezier.DEFAULT_LENGTH_SAMPLES):
        """Approximate local-space length of each segment."""
        return numpy.array([bezier.approximate_length(a, b, num_samples) for a, b in self.segments()])

    def approximate_length(self, num_samples=bezier.DEFAULT_LENGTH_SAMPLES):
        """Approximate local-space length of the whole curve; see
        bezier.approximate_length()."""
        return self.segment_lengths(num_samples).sum()

    def interpolated_points(self, global_space=True):
        """Sample the curve densely enough for display.

        Each segment is sampled at max(2, ceil(resolution * length)) evenly
        spaced parameter values, but never more than MAX_SEGMENT_SAMPLES; the
        shared endpoints of adjacent segments are included only once. A closed
        curve ends with a copy of its first point.

        Returns: array of shape (n, 3); empty if the curve has no segments.
        """
        samples = []
        for i, (a, b) in enumerate(self.segments()):
            length = bezier.approximate_length(a, b)
            count = min(max(2, int(math.ceil(self.resolution * length))), MAX_SEGMENT_SAMPLES)
            t = numpy.linspace(0, 1, count)
            points = bezier.point_between(a, b, t)
            samples.append(points if i == 0 else points[1:])
        if not samples:
            return numpy.empty((0, 3))
        points = numpy.concatenate(samples)
        if global_space:
            points = vector.transform_point(self._frame, points)
        return points

    # records

    def to_record(self):
        """Return the curve as a plain dict of lists and scalars, for hosts
        that persist curves in their own formats."""
        self.require_intact()
        return {
            'version': self.version,
            'name': self.name,
            'closed': self.closed,
            'resolution': self.resolution,
            'mirror': self.mirror,
            'mirror_axis': self.mirror_axis.name.lower(),
            'frame': self._frame.tolist(),
            'points': [upgrade.point_record(p) for p in self._points],
        }

    @classmethod
    def from_record(cls, record):
        """Build a curve from a record made by to_record(), upgrading it
        first if it was stored by an older version."""
        record = upgrade.upgrade(record)
        points = [None if p is None else CurvePoint(p['position'], p['handle1'], p['handle2'], p['handle_style'])
            for p in record.get('points', [])]
        curve = cls(points, closed=record.get('closed', False), resolution=record.get('resolution', DEFAULT_RESOLUTION),
            frame=record.get('frame'), mirror=record.get('mirror', False), mirror_axis=record.get('mirror_axis', 'x'),
            name=record.get('name', 'BezierCurve'))
        curve.version = record['version']
        return curve

def make_circle(radius=0.5, handle_length=None, frame=None, name='BezierCurve'):
    """Return a closed four-point curve approximating a circle of the given
    radius in the xz-plane, with equal handles.

    If handle_length is None it is CIRCLE_HANDLE_RATIO * radius (0.28 for the
    default radius of 0.5).
    """
    if handle_length is None:
        handle_length = CIRCLE_HANDLE_RATIO * radius
    r = radius
    h = handle_length
    points = [
        CurvePoint((0, 0, r), handle1=(-h, 0, 0), handle_style=HandleStyle.EQUAL),
        CurvePoint((r, 0, 0), handle1=(0, 0, h), handle_style=HandleStyle.EQUAL),
        CurvePoint((0, 0, -r), handle1=(h, 0, 0), handle_style=HandleStyle.EQUAL),
        CurvePoint((-r, 0, 0), handle1=(0, 0, -h), handle_style=HandleStyle.EQUAL),
    ]
    return Curve(points, closed=True, frame=frame, name=name)
