"""Geometry module for shape primitives.

This module provides geometric primitives and intersection algorithms:

Components:
    sphere: Sphere primitive, the shared Intersection record
    floor: Infinite horizontal plane primitive

All intersection routines are implemented as Taichi functions (@ti.func).
Every shape follows the same protocol:

    rec = hit_<shape>(ray, shape)          # nearest valid hit or a miss
    hit = <shape>_intersects(ray, shape)   # 1 iff hit_<shape> hits

Valid hits lie in (EPSILON, T_MAX] along the casting ray.
"""

from .floor import PARALLEL_EPSILON, Floor, floor_intersects, hit_floor
from .sphere import (
    EPSILON,
    T_MAX,
    Intersection,
    Sphere,
    hit_sphere,
    make_miss,
    make_sphere,
    sphere_intersects,
)

__all__ = [
    "EPSILON",
    "T_MAX",
    "PARALLEL_EPSILON",
    "Intersection",
    "make_miss",
    "Sphere",
    "hit_sphere",
    "sphere_intersects",
    "make_sphere",
    "Floor",
    "hit_floor",
    "floor_intersects",
]
