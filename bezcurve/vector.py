import enum

import numpy
from scipy.spatial.transform import Rotation

class Axis(enum.IntEnum):
    X = 0
    Y = 1
    Z = 2

    @classmethod
    def parse(cls, axis):
        """Return an Axis from an Axis, an integer index 0-2, or one of the
        strings 'x', 'y', 'z' (case-insensitive)."""
        if isinstance(axis, str):
            try:
                return cls[axis.upper()]
            except KeyError:
                raise ValueError('Unknown axis "{}": use "x", "y" or "z".'.format(axis))
        try:
            return cls(axis)
        except ValueError:
            raise ValueError('Axis index must be 0, 1 or 2, not {!r}.'.format(axis))

def as_vector(value):
    """Return a new float array of shape (3,) from any 3-element sequence.

    Raises ValueError if the value does not have three components or contains
    NaN or infinite values, so that such values are never stored on a curve."""
    vector = numpy.array(value, dtype=float)
    if vector.shape != (3,):
        raise ValueError('Expected a 3-component vector, got shape {}.'.format(vector.shape))
    if not numpy.isfinite(vector).all():
        raise ValueError('Vector components must be finite, got {}.'.format(vector))
    return vector

def magnitude(vector):
    return numpy.sqrt((numpy.asarray(vector)**2).sum(axis=-1))

def is_zero(vector):
    return not numpy.any(vector)

def normalize(vector):
    """Return the unit vector in the direction of 'vector', or the zero vector
    if 'vector' has zero length."""
    vector = numpy.asarray(vector, dtype=float)
    length = magnitude(vector)
    if length == 0:
        return numpy.zeros_like(vector)
    return vector / length

def _perpendicular(vector):
    # cross with whichever basis vector is least parallel to the input
    basis = numpy.zeros(3)
    basis[numpy.argmin(numpy.absolute(vector))] = 1
    return normalize(numpy.cross(vector, basis))

def rotation_between(v_from, v_to):
    """Return the 3x3 matrix of the minimal rotation taking the direction of
    v_from onto the direction of v_to.

    If either vector has zero length, the identity is returned. Antiparallel
    vectors are rotated by pi around an arbitrary perpendicular axis."""
    a = normalize(v_from)
    b = normalize(v_to)
    if is_zero(a) or is_zero(b):
        return numpy.eye(3)
    axis = numpy.cross(a, b)
    sin = magnitude(axis)
    cos = numpy.dot(a, b)
    if numpy.isclose(sin, 0):
        if cos > 0:
            return numpy.eye(3)
        axis = _perpendicular(a)
    else:
        axis = axis / sin
    angle = numpy.arctan2(sin, cos)
    return Rotation.from_rotvec(axis * angle).as_matrix()

def translation_matrix(offset):
    """Return a 4x4 affine matrix translating by 'offset'."""
    matrix = numpy.eye(4)
    matrix[:3, 3] = offset
    return matrix

def as_frame(frame):
    """Validate a 4x4 affine local-to-global matrix; None means identity."""
    if frame is None:
        return numpy.eye(4)
    frame = numpy.array(frame, dtype=float)
    if frame.shape != (4, 4):
        raise ValueError('Frame must be a 4x4 affine matrix, got shape {}.'.format(frame.shape))
    if not numpy.isfinite(frame).all():
        raise ValueError('Frame must contain only finite values.')
    if numpy.linalg.matrix_rank(frame[:3, :3]) < 3:
        raise ValueError('Frame must be invertible, got linear part {}.'.format(frame[:3, :3].tolist()))
    return frame

def transform_point(frame, points):
    """Map local points (shape (3,) or (n, 3)) to global space through a 4x4
    affine frame."""
    points = numpy.asarray(points, dtype=float)
    return points @ frame[:3, :3].T + frame[:3, 3]

def inverse_transform_point(frame, points):
    """Map global points (shape (3,) or (n, 3)) into the local space of a 4x4
    affine frame."""
    points = numpy.asarray(points, dtype=float)
    return numpy.linalg.solve(frame[:3, :3], (points - frame[:3, 3]).T).T
