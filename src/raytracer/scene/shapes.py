"""Python-side shape descriptions.

Shapes form a closed set {Sphere, Floor}. Each kind is a dataclass sharing
the Shape base: a position that can be moved between renders, surface
properties (color, reflectivity, specular exponent), upload into the
scene fields, and configuration round-tripping.

Shapes can also be queried directly from Python. The query runs the same
Taichi intersection code the renderer uses through a small kernel, so a
shape answers exactly as it does during a render.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.raytracer.scene.shapes import SphereShape
    >>> ball = SphereShape(center=(0.0, 0.0, 0.0), radius=5.0, color=(1.0, 0.0, 0.0))
    >>> hit = ball.intersect((0.0, 0.0, 10.0), (0.0, 0.0, -20.0))
    >>> hit.t
    0.25
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

import taichi as ti

from src.raytracer.core.ray import Ray
from src.raytracer.geometry.floor import Floor, hit_floor
from src.raytracer.geometry.sphere import Intersection, Sphere, hit_sphere
from src.raytracer.scene.intersection import add_floor, add_sphere


@dataclass
class HitInfo:
    """Result of a Python-side intersection query.

    Attributes:
        t: Ray parameter of the hit, in (EPSILON, 1].
        position: World-space hit point.
        normal: Surface normal at the hit (not normalized).
        color: Surface color of the shape.
        reflectivity: Mirror blend factor of the shape.
        exponent: Specular exponent of the shape.
    """

    t: float
    position: tuple[float, float, float]
    normal: tuple[float, float, float]
    color: tuple[float, float, float]
    reflectivity: float
    exponent: float


def _as_vec3(values: Any) -> tuple[float, float, float]:
    return (float(values[0]), float(values[1]), float(values[2]))


def _validate_surface(reflectivity: float, exponent: float) -> None:
    """Check the surface parameters shared by every shape kind.

    Raises:
        ValueError: If reflectivity is outside [0, 1] or exponent is negative.
    """
    if not 0.0 <= reflectivity <= 1.0:
        raise ValueError(f"Reflectivity must be in [0, 1], got {reflectivity}")
    if exponent < 0.0:
        raise ValueError(f"Specular exponent must be non-negative, got {exponent}")


# =============================================================================
# Query Kernels
# =============================================================================

# Query ray
_query_origin = ti.Vector.field(3, dtype=ti.f32, shape=())
_query_direction = ti.Vector.field(3, dtype=ti.f32, shape=())

# Query shape (center doubles as floor position)
_query_center = ti.Vector.field(3, dtype=ti.f32, shape=())
_query_radius = ti.field(dtype=ti.f32, shape=())
_query_color = ti.Vector.field(3, dtype=ti.f32, shape=())
_query_reflectivity = ti.field(dtype=ti.f32, shape=())
_query_exponent = ti.field(dtype=ti.f32, shape=())

# Query result
_result_hit = ti.field(dtype=ti.i32, shape=())
_result_t = ti.field(dtype=ti.f32, shape=())
_result_position = ti.Vector.field(3, dtype=ti.f32, shape=())
_result_normal = ti.Vector.field(3, dtype=ti.f32, shape=())


@ti.func
def _store_result(rec: Intersection):
    _result_hit[None] = rec.hit
    _result_t[None] = rec.t
    _result_position[None] = rec.position
    _result_normal[None] = rec.normal


@ti.kernel
def _query_sphere():
    ray = Ray(origin=_query_origin[None], direction=_query_direction[None])
    sphere = Sphere(
        center=_query_center[None],
        radius=_query_radius[None],
        color=_query_color[None],
        reflectivity=_query_reflectivity[None],
        exponent=_query_exponent[None],
    )
    _store_result(hit_sphere(ray, sphere))


@ti.kernel
def _query_floor():
    ray = Ray(origin=_query_origin[None], direction=_query_direction[None])
    floor = Floor(
        position=_query_center[None],
        color=_query_color[None],
        reflectivity=_query_reflectivity[None],
        exponent=_query_exponent[None],
    )
    _store_result(hit_floor(ray, floor))


# =============================================================================
# Shapes
# =============================================================================


class Shape(ABC):
    """Base class for renderable shapes.

    Subclasses are dataclasses providing color, reflectivity and exponent
    attributes and implementing the abstract methods below.
    """

    color: tuple[float, float, float]
    reflectivity: float
    exponent: float

    @abstractmethod
    def get_position(self) -> tuple[float, float, float]:
        ...

    @abstractmethod
    def set_position(self, position: tuple[float, float, float]) -> None:
        ...

    @abstractmethod
    def upload(self) -> int:
        """Write this shape into the scene fields and return its index."""
        ...

    @abstractmethod
    def to_dict(self) -> dict[str, Any]:
        ...

    @abstractmethod
    def _run_query(self) -> None:
        ...

    def intersect(
        self,
        origin: tuple[float, float, float],
        direction: tuple[float, float, float],
    ) -> HitInfo | None:
        """Find the nearest hit along the ray origin + direction * t.

        Args:
            origin: Ray origin.
            direction: Ray direction; hits are accepted for t in (EPSILON, 1].

        Returns:
            The hit, or None on a miss.
        """
        _query_origin[None] = [origin[0], origin[1], origin[2]]
        _query_direction[None] = [direction[0], direction[1], direction[2]]
        _query_color[None] = [self.color[0], self.color[1], self.color[2]]
        _query_reflectivity[None] = self.reflectivity
        _query_exponent[None] = self.exponent
        self._run_query()

        if _result_hit[None] == 0:
            return None

        return HitInfo(
            t=float(_result_t[None]),
            position=_as_vec3(_result_position[None]),
            normal=_as_vec3(_result_normal[None]),
            color=_as_vec3(self.color),
            reflectivity=float(self.reflectivity),
            exponent=float(self.exponent),
        )

    def intersects(
        self,
        origin: tuple[float, float, float],
        direction: tuple[float, float, float],
    ) -> bool:
        """Check whether the ray hits this shape."""
        return self.intersect(origin, direction) is not None


@dataclass
class SphereShape(Shape):
    """A sphere.

    Attributes:
        center: Center of the sphere.
        radius: Radius, must be positive.
        color: Surface color (RGB).
        reflectivity: Mirror blend factor in [0, 1].
        exponent: Specular exponent, >= 0.
    """

    center: tuple[float, float, float]
    radius: float
    color: tuple[float, float, float] = (1.0, 1.0, 1.0)
    reflectivity: float = 0.0
    exponent: float = 0.0

    def __post_init__(self) -> None:
        if self.radius <= 0.0:
            raise ValueError(f"Sphere radius must be positive, got {self.radius}")
        _validate_surface(self.reflectivity, self.exponent)

    def get_position(self) -> tuple[float, float, float]:
        return self.center

    def set_position(self, position: tuple[float, float, float]) -> None:
        self.center = _as_vec3(position)

    def upload(self) -> int:
        return add_sphere(self.center, self.radius, self.color, self.reflectivity, self.exponent)

    def _run_query(self) -> None:
        _query_center[None] = [self.center[0], self.center[1], self.center[2]]
        _query_radius[None] = self.radius
        _query_sphere()

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": "sphere",
            "center": list(self.center),
            "radius": self.radius,
            "color": list(self.color),
            "reflectivity": self.reflectivity,
            "exponent": self.exponent,
        }


@dataclass
class FloorShape(Shape):
    """An infinite horizontal plane at height position.y, facing +y.

    Attributes:
        position: A point on the floor. Only y affects intersection.
        color: Surface color (RGB).
        reflectivity: Mirror blend factor in [0, 1].
        exponent: Specular exponent, >= 0.
    """

    position: tuple[float, float, float] = (0.0, 0.0, 0.0)
    color: tuple[float, float, float] = (1.0, 1.0, 1.0)
    reflectivity: float = 0.0
    exponent: float = 0.0

    def __post_init__(self) -> None:
        _validate_surface(self.reflectivity, self.exponent)

    def get_position(self) -> tuple[float, float, float]:
        return self.position

    def set_position(self, position: tuple[float, float, float]) -> None:
        self.position = _as_vec3(position)

    def upload(self) -> int:
        return add_floor(self.position, self.color, self.reflectivity, self.exponent)

    def _run_query(self) -> None:
        _query_center[None] = [self.position[0], self.position[1], self.position[2]]
        _query_floor()

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": "floor",
            "position": list(self.position),
            "color": list(self.color),
            "reflectivity": self.reflectivity,
            "exponent": self.exponent,
        }


def shape_from_dict(data: dict[str, Any]) -> Shape:
    """Build a shape from its configuration dictionary.

    Args:
        data: Dictionary with a 'type' key ('sphere' or 'floor') and the
            shape's parameters.

    Returns:
        The constructed shape.

    Raises:
        ValueError: If the shape type is unknown or a parameter is invalid.
    """
    shape_type = data.get("type", "").lower()
    color = _as_vec3(data.get("color", [1.0, 1.0, 1.0]))
    reflectivity = data.get("reflectivity", 0.0)
    exponent = data.get("exponent", 0.0)

    if shape_type == "sphere":
        return SphereShape(
            center=_as_vec3(data.get("center", [0.0, 0.0, 0.0])),
            radius=data.get("radius", 1.0),
            color=color,
            reflectivity=reflectivity,
            exponent=exponent,
        )
    elif shape_type == "floor":
        return FloorShape(
            position=_as_vec3(data.get("position", [0.0, 0.0, 0.0])),
            color=color,
            reflectivity=reflectivity,
            exponent=exponent,
        )
    else:
        raise ValueError(f"Unknown shape type: {shape_type}")
