"""Migration of stored curve records to the current schema version.

A record is a plain dict such as produced by Curve.to_record(). Records
written by older versions differ as follows:

Version 1: 'resolution' counted interpolated points per segment rather than
    per unit length.
Versions 1 and 2: points were stored as separate objects, listed under
    'legacy_points'. Each entry has a global 'position', local 'handle1' and
    'handle2', and a 'handle_style' of 'Connected', 'Broken' or 'None'.

Each step is a pure function of (version, record) and never modifies the
record passed in.
"""

import copy
import logging

from . import bezier
from . import vector
from .point import CurvePoint, HandleStyle

logger = logging.getLogger(__name__)

CURRENT_VERSION = 3
UPGRADE_LENGTH_SAMPLES = 5

LEGACY_HANDLE_STYLES = {
    'Connected': HandleStyle.EQUAL,
    'Broken': HandleStyle.BROKEN,
    'None': HandleStyle.NONE,
}

def point_record(point):
    """Return a CurvePoint as a dict of plain lists."""
    return {
        'position': point.position.tolist(),
        'handle1': point.handle1.tolist(),
        'handle2': point.handle2.tolist(),
        'handle_style': point.handle_style.value,
    }

def _handle_style(name):
    if name in LEGACY_HANDLE_STYLES:
        return LEGACY_HANDLE_STYLES[name]
    return HandleStyle(name)

def _legacy_points(record):
    frame = vector.as_frame(record.get('frame'))
    points = []
    for entry in record.get('legacy_points') or []:
        # legacy positions were stored in global space
        position = vector.inverse_transform_point(frame, vector.as_vector(entry['position']))
        points.append(CurvePoint(position, entry.get('handle1', (0, 0, 0)), entry.get('handle2', (0, 0, 0)),
            _handle_style(entry.get('handle_style', 'Connected'))))
    return points

def _inline_points(record):
    return [CurvePoint(p['position'], p['handle1'], p['handle2'], _handle_style(p['handle_style']))
        for p in record.get('points') or [] if p is not None]

def _upgrade_to_2(record):
    name = record.get('name', '')
    points = _inline_points(record) or _legacy_points(record)
    if len(points) >= 2 and 'resolution' in record:
        logger.info('Adapting resolution value of curve "{}"'.format(name))
        # keep the interpolation density of the shortest segment
        shortest = min(bezier.approximate_length(a, b, UPGRADE_LENGTH_SAMPLES)
            for a, b in zip(points[:-1], points[1:]))
        if shortest > 0:
            resolution = record['resolution'] / shortest
            logger.info('Old resolution: {}, new resolution: {}'.format(record['resolution'], resolution))
            record['resolution'] = resolution
        else:
            logger.warning('Curve "{}" has a zero-length segment; keeping resolution {}'.format(
                name, record['resolution']))
    record['version'] = 2
    return record

def _upgrade_to_3(record):
    name = record.get('name', '')
    logger.info('Upgrading curve "{}" to version 3'.format(name))
    legacy = _legacy_points(record)
    if legacy:
        record['points'] = [point_record(p) for p in legacy]
        logger.info('Upgraded curve "{}" with {} points to inline points'.format(name, len(legacy)))
    else:
        logger.warning('Upgraded curve "{}", but it had no legacy points'.format(name))
    record.pop('legacy_points', None)
    record['version'] = 3
    return record

def upgrade_step(version, record):
    """Apply a single migration step to a record at the given version.

    Returns: (new_version, new_record). A record already at CURRENT_VERSION
    is returned as-is.
    """
    if version >= CURRENT_VERSION:
        return version, record
    record = copy.deepcopy(record)
    if version < 2:
        record = _upgrade_to_2(record)
    else:
        record = _upgrade_to_3(record)
    return record['version'], record

def upgrade(record):
    """Migrate a record to CURRENT_VERSION, one version step at a time.

    A record without a 'version' entry is treated as version 1.
    Raises ValueError for records written by a newer version.
    """
    version = record.get('version', 1)
    if version > CURRENT_VERSION:
        raise ValueError('Curve record version {} is newer than the supported version {}.'.format(
            version, CURRENT_VERSION))
    while version < CURRENT_VERSION:
        version, record = upgrade_step(version, record)
    return record
