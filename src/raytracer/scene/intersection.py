"""Scene-level primitive intersection testing.

This module stores the scene's shapes in Taichi fields and provides the
nearest-hit and any-hit queries over all of them. There is no acceleration
structure: every query is a linear scan over every shape.

Shapes are stored per kind (spheres, floors) in Structure-of-Arrays layout.
The Python-side Scene writes these fields before each render; kernels only
read them.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.raytracer.scene.intersection import (
    ...     add_sphere, add_floor, intersect_scene, clear_scene
    ... )
    >>> clear_scene()
    >>> add_sphere((0, 0, 0), 5.0, color=(1, 0, 0))
    >>> add_floor((0, -5, 0), color=(0.5, 0.5, 0.5))
    >>> # Use intersect_scene within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from src.raytracer.core.ray import Ray
from src.raytracer.geometry.floor import Floor, hit_floor
from src.raytracer.geometry.sphere import T_MAX, Intersection, Sphere, hit_sphere, make_miss

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Maximum number of primitives supported in the scene
MAX_SPHERES = 1024
MAX_FLOORS = 64

# Sphere storage: Structure of Arrays layout
sphere_centers = ti.Vector.field(3, dtype=ti.f32, shape=MAX_SPHERES)
sphere_radii = ti.field(dtype=ti.f32, shape=MAX_SPHERES)
sphere_colors = ti.Vector.field(3, dtype=ti.f32, shape=MAX_SPHERES)
sphere_reflectivities = ti.field(dtype=ti.f32, shape=MAX_SPHERES)
sphere_exponents = ti.field(dtype=ti.f32, shape=MAX_SPHERES)
num_spheres = ti.field(dtype=ti.i32, shape=())

# Floor storage: Structure of Arrays layout
floor_positions = ti.Vector.field(3, dtype=ti.f32, shape=MAX_FLOORS)
floor_colors = ti.Vector.field(3, dtype=ti.f32, shape=MAX_FLOORS)
floor_reflectivities = ti.field(dtype=ti.f32, shape=MAX_FLOORS)
floor_exponents = ti.field(dtype=ti.f32, shape=MAX_FLOORS)
num_floors = ti.field(dtype=ti.i32, shape=())


def clear_scene() -> None:
    """Clear all primitives from the scene.

    Resets the primitive counts to zero. The actual field data is not
    cleared but will be overwritten when new primitives are added.
    """
    num_spheres[None] = 0
    num_floors[None] = 0


def add_sphere(
    center: tuple[float, float, float],
    radius: float,
    color: tuple[float, float, float] = (1.0, 1.0, 1.0),
    reflectivity: float = 0.0,
    exponent: float = 0.0,
) -> int:
    """Add a sphere to the scene.

    Args:
        center: The center point of the sphere.
        radius: The radius of the sphere (should be positive).
        color: The surface color (RGB).
        reflectivity: Mirror blend factor in [0, 1].
        exponent: Specular exponent.

    Returns:
        The index of the added sphere.

    Raises:
        RuntimeError: If the maximum number of spheres is exceeded.
    """
    idx = num_spheres[None]
    if idx >= MAX_SPHERES:
        raise RuntimeError(f"Maximum number of spheres ({MAX_SPHERES}) exceeded")
    sphere_centers[idx] = [center[0], center[1], center[2]]
    sphere_radii[idx] = radius
    sphere_colors[idx] = [color[0], color[1], color[2]]
    sphere_reflectivities[idx] = reflectivity
    sphere_exponents[idx] = exponent
    num_spheres[None] = idx + 1
    return idx


def add_floor(
    position: tuple[float, float, float],
    color: tuple[float, float, float] = (1.0, 1.0, 1.0),
    reflectivity: float = 0.0,
    exponent: float = 0.0,
) -> int:
    """Add a floor (infinite horizontal plane at position.y) to the scene.

    Args:
        position: A point on the floor; only y is used for intersection.
        color: The surface color (RGB).
        reflectivity: Mirror blend factor in [0, 1].
        exponent: Specular exponent.

    Returns:
        The index of the added floor.

    Raises:
        RuntimeError: If the maximum number of floors is exceeded.
    """
    idx = num_floors[None]
    if idx >= MAX_FLOORS:
        raise RuntimeError(f"Maximum number of floors ({MAX_FLOORS}) exceeded")
    floor_positions[idx] = [position[0], position[1], position[2]]
    floor_colors[idx] = [color[0], color[1], color[2]]
    floor_reflectivities[idx] = reflectivity
    floor_exponents[idx] = exponent
    num_floors[None] = idx + 1
    return idx


def get_sphere_count() -> int:
    """Get the number of spheres in the scene."""
    return int(num_spheres[None])


def get_floor_count() -> int:
    """Get the number of floors in the scene."""
    return int(num_floors[None])


@ti.func
def get_sphere(i: ti.i32) -> Sphere:
    """Assemble the i-th stored sphere."""
    return Sphere(
        center=sphere_centers[i],
        radius=sphere_radii[i],
        color=sphere_colors[i],
        reflectivity=sphere_reflectivities[i],
        exponent=sphere_exponents[i],
    )


@ti.func
def get_floor(i: ti.i32) -> Floor:
    """Assemble the i-th stored floor."""
    return Floor(
        position=floor_positions[i],
        color=floor_colors[i],
        reflectivity=floor_reflectivities[i],
        exponent=floor_exponents[i],
    )


@ti.func
def intersect_scene(ray: Ray) -> Intersection:
    """Test ray against all primitives in the scene.

    Iterates through all spheres, then all floors, keeping the hit with
    the smallest t. On exactly equal t the earlier shape wins.

    Args:
        ray: The casting ray.

    Returns:
        The closest Intersection, or a miss record if nothing was hit.
    """
    result = make_miss()
    # Any valid hit has t <= T_MAX, so this starts beyond every hit
    closest_t = T_MAX + 1.0

    for i in range(num_spheres[None]):
        rec = hit_sphere(ray, get_sphere(i))
        if rec.hit == 1 and rec.t < closest_t:
            closest_t = rec.t
            result = rec

    for i in range(num_floors[None]):
        rec = hit_floor(ray, get_floor(i))
        if rec.hit == 1 and rec.t < closest_t:
            closest_t = rec.t
            result = rec

    return result


@ti.func
def intersect_scene_any(ray: Ray) -> ti.i32:
    """Test if ray hits any primitive in the scene (shadow ray query).

    Only existence matters, not distance, so the scan stops testing once
    something has been hit.

    Args:
        ray: The casting ray.

    Returns:
        1 if any primitive was hit, 0 otherwise.
    """
    hit_any = 0

    for i in range(num_spheres[None]):
        if hit_any == 0:
            rec = hit_sphere(ray, get_sphere(i))
            if rec.hit == 1:
                hit_any = 1

    for i in range(num_floors[None]):
        if hit_any == 0:
            rec = hit_floor(ray, get_floor(i))
            if rec.hit == 1:
                hit_any = 1

    return hit_any
