"""Projection-plane camera for primary ray generation.

The camera is an eye (origin + forward direction), an up vector, and a
rectangular near plane of size ``frust_width x frust_height`` placed
``near_dist`` units ahead of the eye. Field of view follows from the ratio
of the frustum size to ``near_dist``.

Each primary ray starts on the near plane and points away from the eye,
with its direction scaled to ``far_dist``. Since intersections are only
accepted for ``t <= 1``, a primary ray sees geometry up to ``far_dist``
beyond the near plane.

The basis is derived without requiring ``up`` to be orthogonal to the
forward direction:

    right = unit(forward x up) * frust_width
    up'   = unit(right x forward) * frust_height

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.raytracer.camera.projection import Camera, setup_camera, get_ray
    >>>
    >>> camera = Camera(
    ...     origin=(0.0, 0.0, 10.0),
    ...     direction=(0.0, 0.0, -1.0),
    ...     up=(0.0, 1.0, 0.0),
    ...     near_dist=1.0,
    ...     far_dist=100.0,
    ...     frust_width=1.0,
    ...     frust_height=1.0,
    ... )
    >>> setup_camera(camera)
    >>>
    >>> @ti.kernel
    ... def render():
    ...     ray = get_ray(0.5, 0.5)  # Ray through the center of the near plane
"""

from dataclasses import dataclass
from typing import Any

import numpy as np
import numpy.typing as npt
import taichi as ti

from src.raytracer.core.plane import Plane, plane_at
from src.raytracer.core.ray import Ray, to_length, vec3

# Cross products shorter than this mean up is parallel to the eye direction
DEGENERATE_EPSILON = 1e-12

# =============================================================================
# Camera Data Structures
# =============================================================================


@dataclass(frozen=True)
class ProjectionPlane:
    """The camera's near plane: a corner plus two span vectors.

    Attributes:
        origin: Bottom-left corner of the near plane.
        u: Span from the left edge to the right edge (length frust_width).
        v: Span from the bottom edge to the top edge (length frust_height).
    """

    origin: npt.NDArray[np.float64]
    u: npt.NDArray[np.float64]
    v: npt.NDArray[np.float64]

    def interp(self, us: float, vs: float) -> npt.NDArray[np.float64]:
        """Return origin + u * us + v * vs.

        (0, 0) is the bottom-left corner and (1, 1) the top-right corner.
        """
        return self.origin + self.u * us + self.v * vs


@dataclass
class Camera:
    """Configuration for the projection-plane camera.

    Attributes:
        origin: Eye position in world space (x, y, z).
        direction: Forward direction (x, y, z). Its magnitude is irrelevant.
        up: Approximate up direction. Must not be parallel to ``direction``.
        near_dist: Distance from the eye to the near plane.
        far_dist: Length of primary and reflection rays.
        frust_width: Width of the near plane.
        frust_height: Height of the near plane.
    """

    origin: tuple[float, float, float] = (0.0, 0.0, 10.0)
    direction: tuple[float, float, float] = (0.0, 0.0, -1.0)
    up: tuple[float, float, float] = (0.0, 1.0, 0.0)
    near_dist: float = 1.0
    far_dist: float = 100.0
    frust_width: float = 1.0
    frust_height: float = 1.0

    def near_plane(self) -> ProjectionPlane:
        """Compute the rectangular near plane perpendicular to the eye direction.

        Returns:
            A ProjectionPlane anchored at its bottom-left corner.

        Raises:
            ValueError: If the eye direction is zero-length or parallel to up.
        """
        direction = np.asarray(self.direction, dtype=np.float64)
        up = np.asarray(self.up, dtype=np.float64)

        dir_length = np.linalg.norm(direction)
        if dir_length == 0.0:
            raise ValueError("Camera direction must be non-zero")

        # Eye direction rescaled to near_dist; its endpoint is the plane center
        forward = direction * (self.near_dist / dir_length)
        center = np.asarray(self.origin, dtype=np.float64) + forward

        right = np.cross(forward, up)
        right_length = np.linalg.norm(right)
        if right_length < DEGENERATE_EPSILON:
            raise ValueError(
                f"Camera up {self.up} must not be parallel to direction {self.direction}"
            )
        right = right * (self.frust_width / right_length)

        up_vec = np.cross(right, forward)
        up_vec = up_vec * (self.frust_height / np.linalg.norm(up_vec))

        bottom_left = center - right / 2.0 - up_vec / 2.0
        return ProjectionPlane(origin=bottom_left, u=right, v=up_vec)

    def look_at(self, point: tuple[float, float, float]) -> None:
        """Re-aim the camera at a point, keeping the eye position fixed.

        The new direction is exactly ``point - origin`` (not normalized).
        """
        self.direction = (
            point[0] - self.origin[0],
            point[1] - self.origin[1],
            point[2] - self.origin[2],
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "origin": list(self.origin),
            "direction": list(self.direction),
            "up": list(self.up),
            "near_dist": self.near_dist,
            "far_dist": self.far_dist,
            "frust_width": self.frust_width,
            "frust_height": self.frust_height,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Camera":
        defaults = cls()
        origin = data.get("origin", defaults.origin)
        direction = data.get("direction", defaults.direction)
        up = data.get("up", defaults.up)
        return cls(
            origin=(origin[0], origin[1], origin[2]),
            direction=(direction[0], direction[1], direction[2]),
            up=(up[0], up[1], up[2]),
            near_dist=data.get("near_dist", defaults.near_dist),
            far_dist=data.get("far_dist", defaults.far_dist),
            frust_width=data.get("frust_width", defaults.frust_width),
            frust_height=data.get("frust_height", defaults.frust_height),
        )


# =============================================================================
# Taichi Fields for Camera State
# =============================================================================

# Eye position
_eye_origin = ti.Vector.field(3, dtype=ti.f32, shape=())

# Near plane (bottom-left corner and span vectors)
_near_origin = ti.Vector.field(3, dtype=ti.f32, shape=())
_near_u = ti.Vector.field(3, dtype=ti.f32, shape=())
_near_v = ti.Vector.field(3, dtype=ti.f32, shape=())

# Length of primary rays
_far_dist = ti.field(dtype=ti.f32, shape=())


# =============================================================================
# Camera Setup (Python-side, called before each render)
# =============================================================================


def setup_camera(camera: Camera) -> None:
    """Upload camera state for kernel-side ray generation.

    Args:
        camera: The camera to upload.

    Raises:
        ValueError: If the camera is degenerate (see Camera.near_plane).
    """
    plane = camera.near_plane()

    _eye_origin[None] = [float(c) for c in camera.origin]
    _near_origin[None] = plane.origin.tolist()
    _near_u[None] = plane.u.tolist()
    _near_v[None] = plane.v.tolist()
    _far_dist[None] = camera.far_dist


# =============================================================================
# Ray Generation (Taichi-compatible)
# =============================================================================


@ti.func
def get_near_plane() -> Plane:
    """Get the uploaded near plane."""
    return Plane(origin=_near_origin[None], u=_near_u[None], v=_near_v[None])


@ti.func
def get_far_dist() -> ti.f32:
    """Get the uploaded primary ray length."""
    return _far_dist[None]


@ti.func
def get_ray(u: ti.f32, v: ti.f32) -> Ray:
    """Generate a primary ray through normalized near-plane coordinates.

    The coordinates are normalized:
    - u = 0: left edge, u = 1: right edge
    - v = 0: bottom edge, v = 1: top edge

    Args:
        u: Horizontal coordinate in [0, 1].
        v: Vertical coordinate in [0, 1].

    Returns:
        A Ray starting on the near plane, pointing away from the eye, with
        direction magnitude far_dist.
    """
    point = plane_at(get_near_plane(), u, v)
    direction = to_length(point - _eye_origin[None], _far_dist[None])
    return Ray(origin=point, direction=direction)


# =============================================================================
# Utility Functions
# =============================================================================


def get_camera_info() -> dict[str, Any]:
    """Get the uploaded camera state for debugging.

    Returns:
        Dictionary with origin, near_origin, near_u, near_v and far_dist.
    """
    origin_vec = _eye_origin[None]
    near_origin = _near_origin[None]
    u_vec = _near_u[None]
    v_vec = _near_v[None]

    return {
        "origin": (float(origin_vec[0]), float(origin_vec[1]), float(origin_vec[2])),
        "near_origin": (float(near_origin[0]), float(near_origin[1]), float(near_origin[2])),
        "near_u": (float(u_vec[0]), float(u_vec[1]), float(u_vec[2])),
        "near_v": (float(v_vec[0]), float(v_vec[1]), float(v_vec[2])),
        "far_dist": float(_far_dist[None]),
    }
