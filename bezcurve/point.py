import enum
import logging

import numpy

from . import vector

logger = logging.getLogger(__name__)

DEFAULT_HANDLE = (0.1, 0, 0)

class HandleStyle(enum.Enum):
    """Relationship enforced between a point's two handles.

    EQUAL: handle2 is always -handle1.
    ALIGNED: handle2 points opposite handle1; the magnitudes are independent.
    BROKEN: the handles move independently.
    NONE: the point has no handles (both are zero) and the curve has a
        corner there.
    """
    EQUAL = 'equal'
    ALIGNED = 'aligned'
    BROKEN = 'broken'
    NONE = 'none'

def dependent_handle(style, written, other):
    """Return the value the other handle must take after 'written' was
    assigned to one handle of a point with the given style.

    NONE is handled by CurvePoint itself, since a non-zero write to a
    handle-less point changes its style rather than the other handle.
    """
    if style is HandleStyle.EQUAL:
        return -written
    if style is HandleStyle.ALIGNED:
        if vector.is_zero(written):
            # no direction to align to
            return other
        return -vector.normalize(written) * vector.magnitude(other)
    if style is HandleStyle.NONE:
        return numpy.zeros(3)
    return other

def normalized_handles(style, handle1, handle2):
    """Return (handle1, handle2) adjusted to satisfy a newly-selected style.

    Existing handle values are kept where the style allows; points that have
    no handles at all get a small default pair so the handles stay editable.
    """
    h1_zero = vector.is_zero(handle1)
    h2_zero = vector.is_zero(handle2)
    if style is HandleStyle.NONE:
        return numpy.zeros(3), numpy.zeros(3)
    if h1_zero and h2_zero:
        default = numpy.array(DEFAULT_HANDLE, dtype=float)
        return default, -default
    if style is HandleStyle.BROKEN:
        return handle1, handle2
    if style is HandleStyle.EQUAL:
        if not h1_zero:
            return handle1, -handle1
        return -handle2, handle2
    # ALIGNED: a zero handle borrows the length of the other one
    if h1_zero:
        return -vector.normalize(handle2) * vector.magnitude(handle2), handle2
    length = vector.magnitude(handle1) if h2_zero else vector.magnitude(handle2)
    return handle1, -vector.normalize(handle1) * length

class CurvePoint:
    """A curve control point: a local-space position plus two tangent handles,
    stored as offsets from the position.

    handle1 shapes the segment arriving from the previous point, handle2 the
    segment leaving towards the next point. Whenever one handle is assigned,
    the other is corrected to satisfy handle_style.

    Properties return copies, so to modify a value assign it back:
        point.position += offset
    """
    def __init__(self, position=(0, 0, 0), handle1=(0, 0, 0), handle2=(0, 0, 0), handle_style=HandleStyle.BROKEN):
        self._position = vector.as_vector(position)
        self._handle1 = vector.as_vector(handle1)
        self._handle2 = vector.as_vector(handle2)
        self._handle_style = HandleStyle(handle_style)
        if self._handle_style is HandleStyle.NONE:
            self._handle1, self._handle2 = normalized_handles(HandleStyle.NONE, self._handle1, self._handle2)
        elif self._handle_style is not HandleStyle.BROKEN:
            if vector.is_zero(self._handle1):
                self._handle1 = dependent_handle(self._handle_style, self._handle2, self._handle1)
            else:
                self._handle2 = dependent_handle(self._handle_style, self._handle1, self._handle2)

    def __repr__(self):
        return 'CurvePoint(position={}, handle1={}, handle2={}, handle_style={})'.format(
            list(self._position), list(self._handle1), list(self._handle2), self._handle_style)

    @property
    def position(self):
        return self._position.copy()

    @position.setter
    def position(self, value):
        self._position = vector.as_vector(value)

    @property
    def handle1(self):
        return self._handle1.copy()

    @handle1.setter
    def handle1(self, value):
        value = vector.as_vector(value)
        if self._accept_handle(value):
            self._handle1 = value
            self._handle2 = dependent_handle(self._handle_style, value, self._handle2)

    @property
    def handle2(self):
        return self._handle2.copy()

    @handle2.setter
    def handle2(self, value):
        value = vector.as_vector(value)
        if self._accept_handle(value):
            self._handle2 = value
            self._handle1 = dependent_handle(self._handle_style, value, self._handle1)

    def _accept_handle(self, value):
        if self._handle_style is not HandleStyle.NONE:
            return True
        if vector.is_zero(value):
            return False
        logger.debug('Handle assigned to a point without handles; switching it to broken handles')
        self._handle_style = HandleStyle.BROKEN
        return True

    @property
    def handle_style(self):
        return self._handle_style

    @handle_style.setter
    def handle_style(self, style):
        style = HandleStyle(style)
        self._handle1, self._handle2 = normalized_handles(style, self._handle1, self._handle2)
        self._handle_style = style

    def set_handles(self, handle1, handle2):
        """Assign both handles at once, then re-derive handle2 from handle1
        according to the handle style."""
        handle1 = vector.as_vector(handle1)
        handle2 = vector.as_vector(handle2)
        if self._handle_style is HandleStyle.NONE:
            return
        self._handle1 = handle1
        self._handle2 = dependent_handle(self._handle_style, handle1, handle2)

    def normalize(self):
        """Re-establish the handle style from the current handle1."""
        self.set_handles(self._handle1, self._handle2)

    def global_position(self, frame):
        return vector.transform_point(frame, self._position)

    def set_global_position(self, frame, value):
        self.position = vector.inverse_transform_point(frame, vector.as_vector(value))

    def global_handle1(self, frame):
        """Position of the first handle in global space, given the owning
        curve's 4x4 local-to-global frame."""
        return vector.transform_point(frame, self._position + self._handle1)

    def set_global_handle1(self, frame, value):
        self.handle1 = vector.inverse_transform_point(frame, vector.as_vector(value)) - self._position

    def global_handle2(self, frame):
        """Position of the second handle in global space, given the owning
        curve's 4x4 local-to-global frame."""
        return vector.transform_point(frame, self._position + self._handle2)

    def set_global_handle2(self, frame, value):
        self.handle2 = vector.inverse_transform_point(frame, vector.as_vector(value)) - self._position

    def copy(self):
        point = CurvePoint.__new__(CurvePoint)
        point._position = self._position.copy()
        point._handle1 = self._handle1.copy()
        point._handle2 = self._handle2.copy()
        point._handle_style = self._handle_style
        return point
