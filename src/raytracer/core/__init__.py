"""Core rendering module.

This module contains the fundamental building blocks for ray tracing:

Components:
    ray: Ray data structure and vector utilities
    plane: Parametric plane for the camera's projection rectangle
    integrator: Whitted-style shading kernel and render target

The shading model is Phong-style local illumination (ambient, diffuse,
specular) with binary hard shadows and a bounded number of mirror bounces
blended by each surface's reflectivity.
"""

from .plane import Plane, plane_at
from .ray import (
    Ray,
    clamp_color,
    cross,
    dot,
    length,
    length_squared,
    make_ray,
    ray_at,
    ray_end,
    ray_length,
    ray_length_squared,
    ray_to_length,
    ray_to_unit,
    reflect,
    to_length,
    to_unit,
    vec3,
)

# Note: integrator is NOT imported here to avoid circular imports.
# Import directly from src.raytracer.core.integrator when needed.

__all__ = [
    "Ray",
    "Plane",
    "plane_at",
    "make_ray",
    "ray_at",
    "ray_end",
    "ray_length",
    "ray_length_squared",
    "ray_to_length",
    "ray_to_unit",
    "vec3",
    "length",
    "length_squared",
    "to_unit",
    "to_length",
    "dot",
    "cross",
    "reflect",
    "clamp_color",
]
