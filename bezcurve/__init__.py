'''
# bezcurve

Piecewise cubic Bezier curves in 3D: a point/handle data model, evaluation,
arc-length estimation, de Casteljau splitting and batch editing operations.

Modules
-------
 - bezcurve.vector: numpy helpers for 3-vectors, axes, 4x4 affine frames and minimal rotations (using scipy.spatial.transform).
 - bezcurve.bezier: evaluation, derivative, approximate arc-length and de Casteljau splitting of single cubic segments.
 - bezcurve.point: CurvePoint and the HandleStyle rules relating a point's two handles.
 - bezcurve.curve: Curve, an ordered, optionally closed sequence of CurvePoints with change notification, tessellation and plain-dict records.
 - bezcurve.operations: snap, mirror, reverse, align, level, center-pivot, remove, subdivide and split operations over a curve's points.
 - bezcurve.upgrade: migration of curve records stored by older versions.
 - bezcurve.errors: exceptions raised for invalid indices, selections and stale points.

Example
-------
    from bezcurve import curve, operations
    c = curve.make_circle(radius=0.5)
    c.approximate_length(num_samples=50) # close to pi
    operations.subdivide(c, [0, 1])
'''
