"""Scene container and renderer entry point.

A Scene owns the camera, the ordered shapes, the point lights, the
background and ambient colors, and the reflection bounce limit. Rendering
uploads this state into the Taichi fields and runs the shading kernel over
the raster in row bands.

Every render re-uploads the whole scene, so shapes and the camera may be
changed freely between renders. Nothing is read from the Python objects
while a kernel is running.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from PIL import Image
    >>> from src.raytracer.scene.scene import Scene
    >>> from src.raytracer.scene.shapes import SphereShape, FloorShape
    >>> from src.raytracer.scene.lights import Light
    >>>
    >>> scene = Scene(color_ambient=(0.2, 0.2, 0.2))
    >>> scene.add_shape(SphereShape(center=(0, 0, 0), radius=2.0, color=(1, 0, 0)))
    >>> scene.add_shape(FloorShape(position=(0, -2, 0)))
    >>> scene.add_light(Light(position=(5, 5, 5), brightness=50.0))
    >>> image = scene.render(Image.new("RGB", (320, 240)))
"""

from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from typing import Any

import numpy as np
import numpy.typing as npt
from PIL import Image

from src.raytracer.camera.projection import Camera, setup_camera
from src.raytracer.core.integrator import (
    DEFAULT_BOUNCE_LIMIT,
    get_normalized_image_numpy,
    render_rows,
    set_render_settings,
    setup_render_target,
)
from src.raytracer.preview.export import image_to_uint8
from src.raytracer.scene.intersection import clear_scene
from src.raytracer.scene.lights import Light, clear_lights
from src.raytracer.scene.shapes import Shape, shape_from_dict

# Callback type for render progress: (rows_done, total_rows)
ProgressCallback = Callable[[int, int], None]


@dataclass
class SceneConfig:
    """Configuration for scene serialization.

    Attributes:
        camera: Camera configuration.
        shapes: List of shape configurations, each with a 'type' key.
        lights: List of light configurations.
        color_background: Color of rays that hit nothing.
        color_ambient: Ambient light color.
        bounce_limit: Maximum reflection depth.
    """

    camera: dict[str, Any] = field(default_factory=dict)
    shapes: list[dict[str, Any]] = field(default_factory=list)
    lights: list[dict[str, Any]] = field(default_factory=list)
    color_background: list[float] = field(default_factory=lambda: [0.0, 0.0, 0.0])
    color_ambient: list[float] = field(default_factory=lambda: [0.1, 0.1, 0.1])
    bounce_limit: int = DEFAULT_BOUNCE_LIMIT


class Scene:
    """A renderable scene.

    Attributes:
        camera: The viewing camera.
        shapes: Shapes in the scene. Order only breaks exact ties in t.
        lights: Point lights in the scene.
        color_background: Color of rays that hit nothing.
        color_ambient: Ambient light color added to every lit surface.
        bounce_limit: Maximum reflection depth, >= 0.
    """

    def __init__(
        self,
        camera: Camera | None = None,
        color_background: tuple[float, float, float] = (0.0, 0.0, 0.0),
        color_ambient: tuple[float, float, float] = (0.1, 0.1, 0.1),
        bounce_limit: int = DEFAULT_BOUNCE_LIMIT,
    ) -> None:
        self.camera = camera if camera is not None else Camera()
        self.shapes: list[Shape] = []
        self.lights: list[Light] = []
        self.color_background = color_background
        self.color_ambient = color_ambient
        self.bounce_limit = bounce_limit

    @property
    def bounce_limit(self) -> int:
        return self._bounce_limit

    @bounce_limit.setter
    def bounce_limit(self, value: int) -> None:
        if value < 0:
            raise ValueError(f"bounce_limit must be non-negative, got {value}")
        self._bounce_limit = int(value)

    def add_shape(self, shape: Shape) -> Shape:
        """Add a shape and return it."""
        self.shapes.append(shape)
        return shape

    def add_light(self, light: Light) -> Light:
        """Add a point light and return it."""
        self.lights.append(light)
        return light

    # =========================================================================
    # Rendering
    # =========================================================================

    def upload(self) -> None:
        """Write the whole scene into the Taichi fields.

        Clears the shape and light storage, uploads every shape and light
        in order, uploads the camera and sets the shading parameters.

        Raises:
            ValueError: If the camera is degenerate.
            RuntimeError: If the scene exceeds a storage capacity.
        """
        clear_scene()
        clear_lights()

        for shape in self.shapes:
            shape.upload()
        for light in self.lights:
            light.upload()

        setup_camera(self.camera)
        set_render_settings(self.color_background, self.color_ambient, self.bounce_limit)

    def render_progressive(
        self,
        width: int,
        height: int,
        rows_per_batch: int | None = None,
    ) -> Iterator[tuple[int, int]]:
        """Render in row bands, yielding after each band.

        Stopping iteration early leaves the remaining rows unrendered.

        Args:
            width: Image width in pixels.
            height: Image height in pixels.
            rows_per_batch: Rows per kernel launch. Defaults to the full height.

        Yields:
            Tuple of (rows_done, total_rows).

        Raises:
            ValueError: If the size or batch size is invalid.
        """
        if rows_per_batch is None:
            rows_per_batch = height
        if rows_per_batch <= 0:
            raise ValueError(f"rows_per_batch must be positive, got {rows_per_batch}")

        self.upload()
        setup_render_target(width, height)

        row = 0
        while row < height:
            row_end = min(row + rows_per_batch, height)
            render_rows(row, row_end)
            row = row_end
            yield row, height

    def render_array(self, width: int, height: int) -> npt.NDArray[np.float32]:
        """Render the scene to a float array.

        Returns:
            Array of shape (height, width, 3) in [0, 1], top row first.
        """
        for _ in self.render_progressive(width, height):
            pass
        return get_normalized_image_numpy()

    def render(
        self,
        image: Image.Image,
        rows_per_batch: int | None = None,
        callback: ProgressCallback | None = None,
    ) -> Image.Image:
        """Render the scene into a Pillow image.

        The raster size is taken from the image. Every pixel is written, at
        full opacity for RGBA images.

        Args:
            image: Target image, mode RGB or RGBA.
            rows_per_batch: Rows per kernel launch. Defaults to the full height.
            callback: Called with (rows_done, total_rows) after each band.

        Returns:
            The same image, fully populated.

        Raises:
            ValueError: If the image mode is not RGB or RGBA.
        """
        if image.mode not in ("RGB", "RGBA"):
            raise ValueError(f"Unsupported image mode: {image.mode}")

        width, height = image.size
        for rows_done, total_rows in self.render_progressive(width, height, rows_per_batch):
            if callback is not None:
                callback(rows_done, total_rows)

        rendered = Image.fromarray(image_to_uint8(get_normalized_image_numpy()))
        if image.mode == "RGBA":
            rendered = rendered.convert("RGBA")
        image.paste(rendered, (0, 0))
        return image

    # =========================================================================
    # Scene Serialization
    # =========================================================================

    def to_config(self) -> SceneConfig:
        """Export the scene to a configuration object."""
        return SceneConfig(
            camera=self.camera.to_dict(),
            shapes=[shape.to_dict() for shape in self.shapes],
            lights=[light.to_dict() for light in self.lights],
            color_background=list(self.color_background),
            color_ambient=list(self.color_ambient),
            bounce_limit=self.bounce_limit,
        )

    @classmethod
    def from_config(cls, config: SceneConfig) -> "Scene":
        """Build a scene from a configuration object.

        Raises:
            ValueError: If the configuration contains invalid data.
        """
        background = config.color_background
        ambient = config.color_ambient
        scene = cls(
            camera=Camera.from_dict(config.camera),
            color_background=(background[0], background[1], background[2]),
            color_ambient=(ambient[0], ambient[1], ambient[2]),
            bounce_limit=config.bounce_limit,
        )

        for shape_config in config.shapes:
            scene.add_shape(shape_from_dict(shape_config))
        for light_config in config.lights:
            scene.add_light(Light.from_dict(light_config))

        return scene

    def to_dict(self) -> dict[str, Any]:
        """Export the scene to a dictionary (for JSON serialization)."""
        config = self.to_config()
        return {
            "camera": config.camera,
            "shapes": config.shapes,
            "lights": config.lights,
            "color_background": config.color_background,
            "color_ambient": config.color_ambient,
            "bounce_limit": config.bounce_limit,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Scene":
        """Build a scene from a dictionary.

        Args:
            data: Dictionary with 'camera', 'shapes', 'lights',
                'color_background', 'color_ambient' and 'bounce_limit' keys.
        """
        defaults = SceneConfig()
        config = SceneConfig(
            camera=data.get("camera", defaults.camera),
            shapes=data.get("shapes", defaults.shapes),
            lights=data.get("lights", defaults.lights),
            color_background=data.get("color_background", defaults.color_background),
            color_ambient=data.get("color_ambient", defaults.color_ambient),
            bounce_limit=data.get("bounce_limit", defaults.bounce_limit),
        )
        return cls.from_config(config)
