"""Image export utilities for rendered images.

Rendered images are float arrays of shape (H, W, 3) in [0, 1], top row
first. They are written as 8-bit PNG files via Pillow, either one at a
time or as a numbered frame sequence for animations.

Example:
    >>> from src.raytracer.preview.export import save_png
    >>> from src.raytracer.scene.scene import Scene
    >>>
    >>> scene = Scene()
    >>> save_png(scene.render_array(512, 512), "output.png")
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from pathlib import Path

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage


def image_to_uint8(image: npt.NDArray[np.floating[npt.NBitBase]]) -> npt.NDArray[np.uint8]:
    """Convert a float image to uint8 for display/export.

    Values are clipped to [0, 1] and scaled by 255, truncating.

    Args:
        image: Image array of shape (H, W, 3).

    Returns:
        8-bit image array of shape (H, W, 3) with dtype uint8.
    """
    clipped = np.clip(image, 0.0, 1.0)
    return (clipped * 255).astype(np.uint8)


def save_png(
    image: npt.NDArray[np.floating[npt.NBitBase]] | PILImage.Image,
    filepath: str | Path,
) -> None:
    """Save a rendered image as a PNG file.

    Args:
        image: Float image array of shape (H, W, 3), or a Pillow image.
        filepath: Output file path (should end in .png).
    """
    if isinstance(image, PILImage.Image):
        pil_image = image
    else:
        pil_image = PILImage.fromarray(image_to_uint8(image))
    pil_image.save(filepath)


def frame_path(directory: str | Path, index: int, prefix: str = "frame") -> Path:
    """Path of one frame in a numbered sequence.

    Example:
        >>> frame_path("out", 3)
        PosixPath('out/frame_0003.png')
    """
    return Path(directory) / f"{prefix}_{index:04d}.png"


def save_frames(
    frames: Iterable[tuple[int, npt.NDArray[np.floating[npt.NBitBase]] | PILImage.Image]],
    directory: str | Path,
    prefix: str = "frame",
    callback: Callable[[int], None] | None = None,
) -> list[Path]:
    """Save a sequence of frames as numbered PNG files.

    The directory is created if needed.

    Args:
        frames: Iterable of (index, image) pairs, as yielded by
            Animation.frames().
        directory: Output directory.
        prefix: File name prefix.
        callback: Optional function called with the number of frames
            written so far, after each frame.

    Returns:
        Paths of the written files, in order.
    """
    out_dir = Path(directory)
    out_dir.mkdir(parents=True, exist_ok=True)

    paths = []
    for index, image in frames:
        path = frame_path(out_dir, index, prefix)
        save_png(image, path)
        paths.append(path)
        if callback is not None:
            callback(len(paths))
    return paths
