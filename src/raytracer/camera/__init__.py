"""Camera module for view and primary ray generation.

Components:
    projection: Camera with a rectangular near plane and look-at re-aiming

Camera responsibilities:
    - Derive the near plane from eye, up, near distance and frustum size
    - Re-aim at a point (look_at) between frames
    - Map (u, v) near-plane coordinates to world-space primary rays

Ray generation uses normalized coordinates:
    u in [0, 1]: left to right across the near plane
    v in [0, 1]: bottom to top across the near plane
"""

from .projection import (
    Camera,
    ProjectionPlane,
    get_camera_info,
    get_far_dist,
    get_near_plane,
    get_ray,
    setup_camera,
)

__all__ = [
    "Camera",
    "ProjectionPlane",
    "setup_camera",
    "get_ray",
    "get_near_plane",
    "get_far_dist",
    "get_camera_info",
]
