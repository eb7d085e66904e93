"""Point lights.

A point light has a position, a color and a brightness. Brightness is an
inverse-square-law multiplier: a light contributes
``color * cos_term * brightness / distance^2`` to the diffuse term.

Lights are described on the Python side by the Light dataclass and uploaded
into Taichi fields for the shading kernel.
"""

from dataclasses import dataclass
from typing import Any

import taichi as ti

# Maximum number of point lights supported in the scene
MAX_LIGHTS = 64

light_positions = ti.Vector.field(3, dtype=ti.f32, shape=MAX_LIGHTS)
light_colors = ti.Vector.field(3, dtype=ti.f32, shape=MAX_LIGHTS)
light_brightness = ti.field(dtype=ti.f32, shape=MAX_LIGHTS)
num_lights = ti.field(dtype=ti.i32, shape=())


@dataclass
class Light:
    """A point light.

    Attributes:
        position: World-space position (x, y, z).
        color: Light color (R, G, B).
        brightness: Inverse-square intensity multiplier, >= 0.
    """

    position: tuple[float, float, float]
    color: tuple[float, float, float] = (1.0, 1.0, 1.0)
    brightness: float = 1.0

    def __post_init__(self) -> None:
        if self.brightness < 0.0:
            raise ValueError(f"Light brightness must be non-negative, got {self.brightness}")

    def upload(self) -> int:
        """Write this light into the light fields and return its index."""
        return add_light(self.position, self.color, self.brightness)

    def to_dict(self) -> dict[str, Any]:
        return {
            "position": list(self.position),
            "color": list(self.color),
            "brightness": self.brightness,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Light":
        position = data.get("position", [0.0, 0.0, 0.0])
        color = data.get("color", [1.0, 1.0, 1.0])
        return cls(
            position=(position[0], position[1], position[2]),
            color=(color[0], color[1], color[2]),
            brightness=data.get("brightness", 1.0),
        )


def clear_lights() -> None:
    """Remove all lights."""
    num_lights[None] = 0


def add_light(
    position: tuple[float, float, float],
    color: tuple[float, float, float],
    brightness: float,
) -> int:
    """Add a point light.

    Args:
        position: World-space position.
        color: Light color (RGB).
        brightness: Inverse-square intensity multiplier.

    Returns:
        The index of the added light.

    Raises:
        RuntimeError: If the maximum number of lights is exceeded.
    """
    idx = num_lights[None]
    if idx >= MAX_LIGHTS:
        raise RuntimeError(f"Maximum number of lights ({MAX_LIGHTS}) exceeded")
    light_positions[idx] = [position[0], position[1], position[2]]
    light_colors[idx] = [color[0], color[1], color[2]]
    light_brightness[idx] = brightness
    num_lights[None] = idx + 1
    return idx


def get_light_count() -> int:
    """Get the number of lights in the scene."""
    return int(num_lights[None])
