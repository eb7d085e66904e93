"""Ray data structure and vector utilities for the ray tracer.

This module provides the Ray dataclass and the vector helpers used by every
other component. Rays are parametric: a point along the ray is
``origin + t * direction``. Directions are NOT normalized by default; the
magnitude of the direction is the distance the ray is meant to travel, so
``t = 1`` is the intended endpoint of the ray.

All operations are pure and return new values. Helpers that divide by a
magnitude (``to_unit``, ``to_length``) require a non-zero input; a
zero-length vector produces non-finite components rather than an error.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> origin = ti.math.vec3(0.0, 0.0, 0.0)
    >>> direction = ti.math.vec3(0.0, 0.0, -10.0)
    >>> ray = Ray(origin=origin, direction=direction)
    >>> end = ray_end(ray)  # (0, 0, -10)
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.dataclass
class Ray:
    """A ray with an origin point and direction vector.

    Attributes:
        origin: The starting point of the ray (vec3).
        direction: The direction vector of the ray (vec3). Its magnitude is
            meaningful: ``t = 1`` lands on ``origin + direction``.
    """

    origin: vec3
    direction: vec3


@ti.func
def make_ray(origin: vec3, direction: vec3) -> Ray:
    """Create a ray from origin and direction."""
    return Ray(origin=origin, direction=direction)


@ti.func
def ray_at(ray: Ray, t: ti.f32) -> vec3:
    """Compute the point along the ray at parameter t.

    Args:
        ray: The ray to evaluate.
        t: The parameter value. ``t = 1`` is the end of the ray.

    Returns:
        The point ray.origin + t * ray.direction.
    """
    return ray.origin + t * ray.direction


@ti.func
def ray_end(ray: Ray) -> vec3:
    """Return the intended endpoint of the ray (t = 1)."""
    return ray.origin + ray.direction


@ti.func
def ray_length(ray: Ray) -> ti.f32:
    """Return the magnitude of the ray's direction."""
    return tm.length(ray.direction)


@ti.func
def ray_length_squared(ray: Ray) -> ti.f32:
    """Return the squared magnitude of the ray's direction."""
    return tm.dot(ray.direction, ray.direction)


@ti.func
def ray_to_length(ray: Ray, target: ti.f32) -> Ray:
    """Rescale the ray's direction to the given magnitude.

    The origin is preserved.

    Args:
        ray: The ray to rescale. Its direction must be non-zero.
        target: The desired direction magnitude.

    Returns:
        A new ray with the same origin and a direction of length ``target``.
    """
    return Ray(origin=ray.origin, direction=to_length(ray.direction, target))


@ti.func
def ray_to_unit(ray: Ray) -> Ray:
    """Return the ray with its direction normalized to unit length."""
    return Ray(origin=ray.origin, direction=to_unit(ray.direction))


# =============================================================================
# Vector Utility Functions
# =============================================================================


@ti.func
def length(v: vec3) -> ti.f32:
    """Compute the length (magnitude) of a vector."""
    return tm.length(v)


@ti.func
def length_squared(v: vec3) -> ti.f32:
    """Compute the squared length of a vector.

    Cheaper than length() when only comparing magnitudes.
    """
    return tm.dot(v, v)


@ti.func
def to_unit(v: vec3) -> vec3:
    """Normalize a vector to unit length.

    Unlike ``tm.normalize`` this multiplies by the reciprocal length, so a
    zero-length input yields non-finite components.

    Args:
        v: The input vector (must be non-zero).

    Returns:
        A unit vector in the same direction as v.
    """
    return v * (1.0 / tm.length(v))


@ti.func
def to_length(v: vec3, target: ti.f32) -> vec3:
    """Rescale a vector to the given magnitude.

    Args:
        v: The input vector (must be non-zero).
        target: The desired magnitude.

    Returns:
        A vector parallel to v with length ``target``.
    """
    return v * (target / tm.length(v))


@ti.func
def dot(a: vec3, b: vec3) -> ti.f32:
    """Compute the dot product of two vectors."""
    return tm.dot(a, b)


@ti.func
def cross(a: vec3, b: vec3) -> vec3:
    """Compute the cross product of two vectors."""
    return tm.cross(a, b)


@ti.func
def reflect(incident: vec3, normal: vec3) -> vec3:
    """Reflect an incident vector about a normal.

    The normal should be unit length for correct results. The magnitude of
    the incident vector is preserved.

    Args:
        incident: The incoming direction vector (pointing toward the surface).
        normal: The surface normal (should be normalized).

    Returns:
        The reflected direction vector.
    """
    return incident - 2.0 * tm.dot(incident, normal) * normal


@ti.func
def clamp_color(color: vec3) -> vec3:
    """Clamp each component of a color to [0, 1]."""
    return tm.clamp(color, 0.0, 1.0)
