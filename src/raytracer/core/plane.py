"""Parametric plane used for the camera's projection rectangle.

A plane is a corner point plus two span vectors. The span vectors need not
be unit length or orthogonal; ``plane_at(plane, us, vs)`` with
``us, vs`` in [0, 1] sweeps the parallelogram they span.
"""

import taichi as ti
import taichi.math as tm

vec3 = tm.vec3


@ti.dataclass
class Plane:
    """A parallelogram anchored at ``origin`` and spanned by ``u`` and ``v``.

    Attributes:
        origin: The anchor corner (vec3).
        u: First span vector (vec3).
        v: Second span vector (vec3), not parallel to ``u``.
    """

    origin: vec3
    u: vec3
    v: vec3


@ti.func
def plane_at(plane: Plane, us: ti.f32, vs: ti.f32) -> vec3:
    """Interpolate a point on the plane: origin + u * us + v * vs."""
    return plane.origin + plane.u * us + plane.v * vs
