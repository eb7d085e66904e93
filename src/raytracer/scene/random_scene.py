"""Seeded random scene generation.

Builds a floor, a number of spheres resting above it with random sizes,
colors, surface properties and velocities, and a few point lights. The
same seed and parameters always produce the same scene.

Example:
    >>> from src.raytracer.scene.random_scene import RandomSceneParams, create_random_scene
    >>> scene, animation = create_random_scene(seed=42, params=RandomSceneParams(num_spheres=12))
    >>> for index, image in animation.frames(10, 320, 240):
    ...     image.save(f"frame_{index:04d}.png")
"""

from dataclasses import dataclass

import numpy as np

from src.raytracer.camera.projection import Camera
from src.raytracer.scene.animation import DEFAULT_DT, Animation, Motion
from src.raytracer.scene.lights import Light
from src.raytracer.scene.scene import Scene
from src.raytracer.scene.shapes import FloorShape, SphereShape


@dataclass
class RandomSceneParams:
    """Parameters for random scene generation.

    Attributes:
        num_spheres: Number of spheres.
        num_lights: Number of point lights.
        spread: Spheres are placed with x and z in [-spread, spread].
        radius_range: Range of sphere radii.
        lift_range: Range of gaps between a sphere's bottom and the floor.
        reflectivity_range: Range of sphere reflectivities.
        exponent_range: Range of specular exponents.
        max_speed: Maximum speed along each axis.
        gravity: Downward acceleration applied to every sphere.
        floor_height: y coordinate of the floor.
        floor_color: Floor color.
        floor_reflectivity: Floor reflectivity.
        light_height: Height of the lights above the floor.
        light_brightness: Brightness of each light.
        color_background: Background color.
        color_ambient: Ambient light color.
        bounce_limit: Maximum reflection depth.
        camera_origin: Eye position.
        frust_width: Near plane width.
        frust_height: Near plane height.
        dt: Animation time step.
    """

    num_spheres: int = 8
    num_lights: int = 2
    spread: float = 8.0
    radius_range: tuple[float, float] = (0.5, 2.0)
    lift_range: tuple[float, float] = (0.0, 3.0)
    reflectivity_range: tuple[float, float] = (0.0, 0.6)
    exponent_range: tuple[float, float] = (5.0, 100.0)
    max_speed: float = 2.0
    gravity: float = 0.0
    floor_height: float = -2.0
    floor_color: tuple[float, float, float] = (0.6, 0.6, 0.6)
    floor_reflectivity: float = 0.3
    light_height: float = 15.0
    light_brightness: float = 200.0
    color_background: tuple[float, float, float] = (0.05, 0.05, 0.1)
    color_ambient: tuple[float, float, float] = (0.1, 0.1, 0.1)
    bounce_limit: int = 3
    camera_origin: tuple[float, float, float] = (0.0, 4.0, 20.0)
    frust_width: float = 1.6
    frust_height: float = 1.2
    dt: float = DEFAULT_DT


def _vec3(values: np.ndarray) -> tuple[float, float, float]:
    return (float(values[0]), float(values[1]), float(values[2]))


def create_random_scene(
    seed: int | None = None,
    params: RandomSceneParams | None = None,
) -> tuple[Scene, Animation]:
    """Generate a random animated scene.

    Args:
        seed: Random seed. None draws fresh entropy.
        params: Generation parameters. Defaults to RandomSceneParams().

    Returns:
        Tuple of (scene, animation). The animation moves every sphere and
        keeps the camera aimed at the scene center.

    Raises:
        ValueError: If num_spheres or num_lights is negative.
    """
    if params is None:
        params = RandomSceneParams()
    if params.num_spheres < 0 or params.num_lights < 0:
        raise ValueError(
            f"Shape and light counts must be non-negative, got "
            f"{params.num_spheres} spheres and {params.num_lights} lights"
        )

    rng = np.random.default_rng(seed)

    center = (0.0, params.floor_height, 0.0)
    camera = Camera(
        origin=params.camera_origin,
        frust_width=params.frust_width,
        frust_height=params.frust_height,
    )
    camera.look_at(center)

    scene = Scene(
        camera=camera,
        color_background=params.color_background,
        color_ambient=params.color_ambient,
        bounce_limit=params.bounce_limit,
    )
    scene.add_shape(
        FloorShape(
            position=center,
            color=params.floor_color,
            reflectivity=params.floor_reflectivity,
            exponent=50.0,
        )
    )

    motions = []
    for _ in range(params.num_spheres):
        radius = float(rng.uniform(*params.radius_range))
        lift = float(rng.uniform(*params.lift_range))
        x, z = rng.uniform(-params.spread, params.spread, size=2)
        position = (float(x), params.floor_height + radius + lift, float(z))

        sphere = SphereShape(
            center=position,
            radius=radius,
            color=_vec3(rng.uniform(0.1, 1.0, size=3)),
            reflectivity=float(rng.uniform(*params.reflectivity_range)),
            exponent=float(rng.uniform(*params.exponent_range)),
        )
        scene.add_shape(sphere)

        velocity = rng.uniform(-params.max_speed, params.max_speed, size=3)
        motions.append(
            Motion(
                shape=sphere,
                velocity=_vec3(velocity),
                acceleration=(0.0, -params.gravity, 0.0),
            )
        )

    for _ in range(params.num_lights):
        x, z = rng.uniform(-params.spread, params.spread, size=2)
        scene.add_light(
            Light(
                position=(float(x), params.floor_height + params.light_height, float(z)),
                color=_vec3(rng.uniform(0.7, 1.0, size=3)),
                brightness=params.light_brightness,
            )
        )

    animation = Animation(scene, motions, dt=params.dt, camera_target=center)
    return scene, animation
