"""Floor primitive: an infinite horizontal plane.

The floor is the plane ``y = position.y`` with the constant normal (0, 1, 0).
Only the y component of its position matters for intersection; x and z are
kept so the floor can be moved like any other shape.

Ray-floor intersection is linear:

    origin.y + t * direction.y = position.y

A ray whose direction has (near-)zero y component is parallel to the floor
and never hits it.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.raytracer.geometry.floor import Floor, hit_floor
    >>> floor = Floor(position=ti.math.vec3(0, -1, 0))
    >>> # Use hit_floor within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from src.raytracer.core.ray import Ray, ray_at

from .sphere import EPSILON, T_MAX, Intersection, make_miss

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Direction y components at or below this magnitude count as parallel
PARALLEL_EPSILON = 1e-8


@ti.dataclass
class Floor:
    """An infinite horizontal plane with Phong material properties.

    Attributes:
        position: A point on the plane; only ``position.y`` is used.
        color: The surface color (RGB).
        reflectivity: Mirror blend factor in [0, 1].
        exponent: Specular (Phong) exponent, >= 0.
    """

    position: vec3
    color: vec3
    reflectivity: ti.f32
    exponent: ti.f32


@ti.func
def hit_floor(ray: Ray, floor: Floor) -> Intersection:
    """Test for ray-floor intersection.

    Args:
        ray: The casting ray.
        floor: The floor to test.

    Returns:
        An Intersection with normal (0, 1, 0); check the hit field.
    """
    result = make_miss()

    denom = ray.direction.y
    if ti.abs(denom) > PARALLEL_EPSILON:
        t = (floor.position.y - ray.origin.y) / denom

        if t > EPSILON and t <= T_MAX:
            result = Intersection(
                hit=1,
                t=t,
                position=ray_at(ray, t),
                normal=vec3(0.0, 1.0, 0.0),
                color=floor.color,
                reflectivity=floor.reflectivity,
                exponent=floor.exponent,
            )

    return result


@ti.func
def floor_intersects(ray: Ray, floor: Floor) -> ti.i32:
    """Return 1 if the ray hits the floor within (EPSILON, T_MAX], else 0."""
    rec = hit_floor(ray, floor)
    return rec.hit

