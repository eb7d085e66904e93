"""Scene module for scene storage and construction.

Components:
    intersection: Shape storage fields and nearest-hit/any-hit queries
    lights: Point light storage and the Light dataclass
    shapes: Python-side shape dataclasses (spheres, floors)
    scene: Scene container and render entry point
    animation: Per-frame shape motion and camera re-aiming
    random_scene: Seeded random scene generation

Scene data is organized for kernel access:
    - Structure-of-Arrays layout, one set of fields per shape kind
    - Fields are rewritten by Scene.upload() before every render

The scene, animation and random_scene modules depend on the integrator
and are imported directly rather than re-exported here.
"""

from .intersection import (
    MAX_FLOORS,
    MAX_SPHERES,
    add_floor,
    add_sphere,
    clear_scene,
    get_floor_count,
    get_sphere_count,
    intersect_scene,
    intersect_scene_any,
)
from .lights import MAX_LIGHTS, Light, add_light, clear_lights, get_light_count
from .shapes import FloorShape, HitInfo, Shape, SphereShape, shape_from_dict

__all__ = [
    # Intersection module
    "add_sphere",
    "add_floor",
    "clear_scene",
    "get_sphere_count",
    "get_floor_count",
    "intersect_scene",
    "intersect_scene_any",
    "MAX_SPHERES",
    "MAX_FLOORS",
    # Lights module
    "Light",
    "add_light",
    "clear_lights",
    "get_light_count",
    "MAX_LIGHTS",
    # Shapes module
    "Shape",
    "SphereShape",
    "FloorShape",
    "HitInfo",
    "shape_from_dict",
]
