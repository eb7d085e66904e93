"""Frame-by-frame animation of scene shapes.

Each Motion moves one shape with a constant acceleration, integrated with
semi-implicit Euler: velocity is updated first, then position using the
new velocity. An Animation advances every motion by a fixed time step
between renders and can keep the camera aimed at a point or a shape.

Shapes are only moved between renders, never while a render is running.

Example:
    >>> from src.raytracer.scene.animation import Animation, Motion
    >>> ball = scene.add_shape(SphereShape(center=(0, 5, 0), radius=1.0))
    >>> animation = Animation(
    ...     scene,
    ...     [Motion(ball, velocity=(1, 0, 0), acceleration=(0, -9.8, 0))],
    ...     dt=1 / 24,
    ...     camera_target=ball,
    ... )
    >>> for index, image in animation.frames(48, 320, 240):
    ...     image.save(f"frame_{index:04d}.png")
"""

from collections.abc import Iterator
from dataclasses import dataclass

import numpy as np
from PIL import Image

from src.raytracer.scene.scene import Scene
from src.raytracer.scene.shapes import Shape

# Default frame time step (24 frames per second)
DEFAULT_DT = 1.0 / 24.0


@dataclass
class Motion:
    """Linear motion of a single shape.

    Attributes:
        shape: The shape being moved.
        velocity: Current velocity (units per second).
        acceleration: Constant acceleration (units per second squared).
    """

    shape: Shape
    velocity: tuple[float, float, float] = (0.0, 0.0, 0.0)
    acceleration: tuple[float, float, float] = (0.0, 0.0, 0.0)

    def step(self, dt: float) -> None:
        """Advance the shape by one time step."""
        velocity = np.asarray(self.velocity, dtype=np.float64)
        velocity = velocity + np.asarray(self.acceleration, dtype=np.float64) * dt
        position = np.asarray(self.shape.get_position(), dtype=np.float64) + velocity * dt

        self.velocity = (float(velocity[0]), float(velocity[1]), float(velocity[2]))
        self.shape.set_position((float(position[0]), float(position[1]), float(position[2])))


class Animation:
    """Drives a scene through a sequence of frames.

    Attributes:
        scene: The animated scene.
        motions: Motions applied on every step.
        dt: Time step between frames, in seconds.
        camera_target: Optional point or shape the camera is re-aimed at
            before each frame.
        time: Elapsed animation time.
    """

    def __init__(
        self,
        scene: Scene,
        motions: list[Motion] | None = None,
        dt: float = DEFAULT_DT,
        camera_target: tuple[float, float, float] | Shape | None = None,
    ) -> None:
        if dt <= 0.0:
            raise ValueError(f"Time step must be positive, got {dt}")

        self.scene = scene
        self.motions = motions if motions is not None else []
        self.dt = dt
        self.camera_target = camera_target
        self.time = 0.0

    def aim_camera(self) -> None:
        """Point the camera at the target, if one is set."""
        if self.camera_target is None:
            return
        if isinstance(self.camera_target, Shape):
            target = self.camera_target.get_position()
        else:
            target = self.camera_target
        self.scene.camera.look_at(target)

    def step(self) -> None:
        """Advance every motion by dt and re-aim the camera."""
        for motion in self.motions:
            motion.step(self.dt)
        self.time += self.dt
        self.aim_camera()

    def frames(self, count: int, width: int, height: int) -> Iterator[tuple[int, Image.Image]]:
        """Render a sequence of frames.

        Frame 0 shows the initial state. Each following frame is rendered
        after one step.

        Args:
            count: Number of frames.
            width: Frame width in pixels.
            height: Frame height in pixels.

        Yields:
            Tuple of (frame_index, image).
        """
        for index in range(count):
            if index == 0:
                self.aim_camera()
            else:
                self.step()
            image = Image.new("RGB", (width, height))
            yield index, self.scene.render(image)
