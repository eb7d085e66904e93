"""Sphere primitive with ray-sphere intersection.

This module provides the Sphere dataclass, the Intersection record shared by
all shapes, and the sphere intersection functions.

Intersections are reported along the casting ray's own parameterization.
A hit is only valid for ``t`` in the half-open range ``(EPSILON, T_MAX]``:

- ``EPSILON`` keeps shadow and reflection rays from re-hitting the surface
  they start on.
- ``T_MAX = 1.0`` because rays are built with a direction whose magnitude is
  their maximum travel distance; ``t`` is fractional progress along it.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.raytracer.geometry.sphere import Sphere, hit_sphere
    >>> sphere = Sphere(center=ti.math.vec3(0, 0, 0), radius=5.0)
    >>> # Use hit_sphere within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from src.raytracer.core.ray import Ray, ray_at

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Smallest accepted parametric distance (self-intersection guard)
EPSILON = 1e-4

# Largest accepted parametric distance (end of the casting ray)
T_MAX = 1.0


@ti.dataclass
class Sphere:
    """A sphere with Phong material properties.

    Attributes:
        center: The center point of the sphere (vec3).
        radius: The radius of the sphere (positive float).
        color: The surface color (RGB).
        reflectivity: Mirror blend factor in [0, 1].
        exponent: Specular (Phong) exponent, >= 0.
    """

    center: vec3
    radius: ti.f32
    color: vec3
    reflectivity: ti.f32
    exponent: ti.f32


@ti.dataclass
class Intersection:
    """Record of a ray-shape intersection.

    Attributes:
        hit: Whether the ray intersected the shape (1 if hit, 0 if miss).
        t: Parametric distance along the casting ray. Only valid if hit == 1.
        position: The 3D point of intersection. Only valid if hit == 1.
        normal: The surface normal at the hit point. NOT normalized; the
            caller normalizes. Faces the hemisphere the ray came from.
        color: Surface color of the hit shape.
        reflectivity: Mirror blend factor of the hit shape.
        exponent: Specular exponent of the hit shape.
    """

    hit: ti.i32
    t: ti.f32
    position: vec3
    normal: vec3
    color: vec3
    reflectivity: ti.f32
    exponent: ti.f32


@ti.func
def make_miss() -> Intersection:
    """Create an Intersection indicating no hit."""
    return Intersection(
        hit=0,
        t=0.0,
        position=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        color=vec3(0.0, 0.0, 0.0),
        reflectivity=0.0,
        exponent=0.0,
    )


@ti.func
def hit_sphere(ray: Ray, sphere: Sphere) -> Intersection:
    """Test for ray-sphere intersection.

    Solves ``|O + tD - C|^2 = r^2`` for t:

        a = dot(D, D)
        b = 2 * dot(D, O - C)
        c = dot(O - C, O - C) - r^2

    The near root is preferred. If it lies at or before EPSILON the ray
    started inside the sphere (or on its surface), so the far root is used
    and the normal is flipped to face the ray.

    Args:
        ray: The casting ray. Its direction need not be normalized.
        sphere: The sphere to test.

    Returns:
        An Intersection; check the hit field.
    """
    oc = ray.origin - sphere.center

    a = tm.dot(ray.direction, ray.direction)
    b = 2.0 * tm.dot(ray.direction, oc)
    c = tm.dot(oc, oc) - sphere.radius * sphere.radius

    discriminant = b * b - 4.0 * a * c

    result = make_miss()

    if discriminant >= 0.0:
        sqrt_d = ti.sqrt(discriminant)
        two_a = 2.0 * a

        t = (-b - sqrt_d) / two_a
        side = 1.0
        valid = 1

        if t <= EPSILON:
            # Near root is behind (or at) the origin: ray starts inside
            t = (-b + sqrt_d) / two_a
            side = -1.0
            if t <= EPSILON:
                valid = 0

        if valid == 1 and t <= T_MAX:
            point = ray_at(ray, t)
            result = Intersection(
                hit=1,
                t=t,
                position=point,
                normal=(point - sphere.center) * side,
                color=sphere.color,
                reflectivity=sphere.reflectivity,
                exponent=sphere.exponent,
            )

    return result


@ti.func
def sphere_intersects(ray: Ray, sphere: Sphere) -> ti.i32:
    """Return 1 if the ray hits the sphere within (EPSILON, T_MAX], else 0."""
    rec = hit_sphere(ray, sphere)
    return rec.hit


@ti.func
def make_sphere(
    center: vec3, radius: ti.f32, color: vec3, reflectivity: ti.f32, exponent: ti.f32
) -> Sphere:
    """Create a sphere within a Taichi kernel."""
    return Sphere(
        center=center,
        radius=radius,
        color=color,
        reflectivity=reflectivity,
        exponent=exponent,
    )
