"""Preview module for rendered output.

Components:
    export: PNG export of single images and numbered frame sequences

Example:
    >>> from src.raytracer.preview import save_frames
    >>> from src.raytracer.scene.random_scene import create_random_scene
    >>>
    >>> scene, animation = create_random_scene(seed=7)
    >>> save_frames(animation.frames(24, 320, 240), "frames")
"""

from src.raytracer.preview.export import (
    frame_path,
    image_to_uint8,
    save_frames,
    save_png,
)

__all__ = [
    "save_png",
    "save_frames",
    "frame_path",
    "image_to_uint8",
]
