import numpy

DEFAULT_LENGTH_SAMPLES = 10

def evaluate(t, p0, p1, p2, p3, clamp=False):
    """Evaluate a cubic Bezier curve at parameter value(s) t.

    Parameters:
        t: scalar or array of n parameter values. Values outside [0, 1]
            extrapolate along the same polynomial unless clamp is True.
        p0, p3: endpoints of the curve.
        p1, p2: absolute positions of the two inner control points (not
            offsets from the endpoints).
        clamp: if True, clip t to [0, 1] before evaluating.

    Returns: array of shape (3,) for scalar t, or (n, 3) for array t.
    """
    p0, p1, p2, p3 = (numpy.asarray(p, dtype=float) for p in (p0, p1, p2, p3))
    t, scalar = _parameters(t, clamp)
    s = 1 - t
    points = (s**3 * p0 + 3 * s**2 * t * p1 + 3 * s * t**2 * p2 + t**3 * p3)
    return points[0] if scalar else points

def derivative(t, p0, p1, p2, p3, clamp=False):
    """Evaluate the first derivative (tangent) of a cubic Bezier curve at
    parameter value(s) t. Arguments and return shapes are as for evaluate()."""
    p0, p1, p2, p3 = (numpy.asarray(p, dtype=float) for p in (p0, p1, p2, p3))
    t, scalar = _parameters(t, clamp)
    s = 1 - t
    tangents = (3 * s**2 * (p1 - p0) + 6 * s * t * (p2 - p1) + 3 * t**2 * (p3 - p2))
    return tangents[0] if scalar else tangents

def _parameters(t, clamp):
    t = numpy.asarray(t, dtype=float)
    scalar = t.ndim == 0
    t = numpy.atleast_1d(t)
    if clamp:
        t = t.clip(0, 1)
    return t[:, numpy.newaxis], scalar

def segment_control_points(point_a, point_b):
    """Return the four absolute control points, shape (4, 3), of the segment
    leaving point_a (via its handle2) and arriving at point_b (via its handle1)."""
    a = point_a.position
    b = point_b.position
    return numpy.array([a, a + point_a.handle2, b + point_b.handle1, b])

def point_between(point_a, point_b, t):
    """Evaluate the segment between two adjacent CurvePoints at t."""
    return evaluate(t, *segment_control_points(point_a, point_b))

def polyline_length(points):
    """Return the total length of a polyline of shape (n, d)."""
    points = numpy.asarray(points)
    return numpy.sqrt(((points[:-1] - points[1:])**2).sum(axis=1)).sum()

def approximate_length(point_a, point_b, num_samples=DEFAULT_LENGTH_SAMPLES):
    """Approximate the arc-length of the segment between two adjacent
    CurvePoints by evaluating it at num_samples evenly-spaced parameter values
    and calculating the length of the resulting polyline.

    The estimate never exceeds the true arc length and improves as num_samples
    grows. num_samples must be at least 2."""
    if num_samples < 2:
        raise ValueError('num_samples must be at least 2, not {}.'.format(num_samples))
    t = numpy.linspace(0, 1, int(num_samples))
    return polyline_length(point_between(point_a, point_b, t))

def _lerp(a, b, t):
    return a + (b - a) * t

def split_bezier(t, p0, p3, tangent0, tangent3):
    """Split a cubic Bezier segment in two at parameter t with de Casteljau's
    construction.

    Parameters:
        t: parameter value at which to split, in [0, 1].
        p0, p3: segment endpoints.
        tangent0: offset of the first inner control point from p0 (the start
            point's handle2).
        tangent3: offset of the second inner control point from p3 (the end
            point's handle1).

    Returns: (left_start, left_end, left_tangent0, left_tangent1,
              right_start, right_end, right_tangent0, right_tangent1)
        Each tangent is an offset from its own endpoint, so that
        left_tangent0 can be assigned as the start point's handle2,
        left_tangent1 and right_tangent0 as the new split point's handle1 and
        handle2, and right_tangent1 as the end point's handle1.
    """
    p0 = numpy.asarray(p0, dtype=float)
    p3 = numpy.asarray(p3, dtype=float)
    p1 = p0 + tangent0
    p2 = p3 + tangent3
    # first level
    q0 = _lerp(p0, p1, t)
    q1 = _lerp(p1, p2, t)
    q2 = _lerp(p2, p3, t)
    # second level
    r0 = _lerp(q0, q1, t)
    r1 = _lerp(q1, q2, t)
    split = _lerp(r0, r1, t)
    return (p0.copy(), split, q0 - p0, r0 - split,
            split.copy(), p3.copy(), r1 - split, q2 - p3)
