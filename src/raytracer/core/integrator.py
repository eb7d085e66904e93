"""Whitted-style shading integrator and render target.

This module implements the shading kernel: nearest-hit resolution, Phong
local illumination from point lights with binary hard shadows, and mirror
reflection blended by surface reflectivity, bounded by a bounce limit.

The shading of a ray is defined recursively:

    C(ray, k) = background                          if nothing is hit
    C(ray, k) = base * (ambient + L) + S            otherwise

    base = color + (C(reflected, k - 1) - color) * reflectivity
           if k > 0 and reflectivity > 0, else color

where L is the summed unshadowed diffuse light and S the summed specular
highlight at the hit point. Taichi functions cannot recurse, so
trace_color() evaluates this front to back, carrying the weight
``reflectivity * (ambient + L)`` that each level applies to the next.

Key features:
    - Brute-force nearest hit over every shape
    - Hard shadows (a light is fully visible or fully occluded)
    - Bounded mirror bounces
    - Row-band rendering so callers can report progress or cancel

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.raytracer.core.integrator import (
    ...     setup_render_target, set_render_settings, render_image
    ... )
    >>> from src.raytracer.camera.projection import Camera, setup_camera
    >>>
    >>> setup_camera(Camera())
    >>> set_render_settings((0.0, 0.0, 0.0), (0.1, 0.1, 0.1), bounce_limit=2)
    >>> setup_render_target(256, 256)
    >>> render_image()
"""

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from src.raytracer.camera.projection import get_far_dist, get_ray
from src.raytracer.core.ray import Ray, clamp_color, reflect, to_length, to_unit
from src.raytracer.geometry.sphere import Intersection
from src.raytracer.scene.intersection import intersect_scene, intersect_scene_any
from src.raytracer.scene.lights import (
    light_brightness,
    light_colors,
    light_positions,
    num_lights,
)

# Type alias for 3D vectors
vec3 = tm.vec3

# =============================================================================
# Render Settings
# =============================================================================

# Default reflection bounce limit
DEFAULT_BOUNCE_LIMIT = 3

_background_color = ti.Vector.field(3, dtype=ti.f32, shape=())
_ambient_color = ti.Vector.field(3, dtype=ti.f32, shape=())
_bounce_limit = ti.field(dtype=ti.i32, shape=())


def set_render_settings(
    background: tuple[float, float, float],
    ambient: tuple[float, float, float],
    bounce_limit: int = DEFAULT_BOUNCE_LIMIT,
) -> None:
    """Configure the scene-wide shading parameters.

    Args:
        background: Color returned for rays that hit nothing.
        ambient: Ambient light color added to every lit surface.
        bounce_limit: Maximum reflection depth per primary ray.

    Raises:
        ValueError: If bounce_limit is negative.
    """
    if bounce_limit < 0:
        raise ValueError(f"bounce_limit must be non-negative, got {bounce_limit}")

    _background_color[None] = [background[0], background[1], background[2]]
    _ambient_color[None] = [ambient[0], ambient[1], ambient[2]]
    _bounce_limit[None] = bounce_limit


def get_bounce_limit() -> int:
    """Get the configured reflection bounce limit."""
    return int(_bounce_limit[None])


# =============================================================================
# Render Target (Image Buffer)
# =============================================================================

# Maximum supported image dimensions (preallocated to avoid kernel recompilation)
MAX_IMAGE_WIDTH = 2048
MAX_IMAGE_HEIGHT = 2048

# Image dimensions (actual active size)
_image_width = ti.field(dtype=ti.i32, shape=())
_image_height = ti.field(dtype=ti.i32, shape=())

# Color buffer, indexed [x, y] with y = 0 the bottom sample row
_color_buffer = ti.Vector.field(3, dtype=ti.f32, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))

# Flag to track if render target is initialized
_render_target_initialized = ti.field(dtype=ti.i32, shape=())


def setup_render_target(width: int, height: int) -> None:
    """Initialize the render target buffers.

    Sets the active image dimensions and clears the buffer.

    Args:
        width: Image width in pixels (max MAX_IMAGE_WIDTH).
        height: Image height in pixels (max MAX_IMAGE_HEIGHT).

    Raises:
        ValueError: If dimensions are not positive or exceed the maximum.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Image dimensions must be positive, got {width}x{height}")
    if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
        raise ValueError(
            f"Image dimensions ({width}x{height}) exceed maximum supported "
            f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
        )

    _image_width[None] = width
    _image_height[None] = height
    _render_target_initialized[None] = 1

    clear_render_target()


def clear_render_target() -> None:
    """Clear the render target buffer to zero."""
    _color_buffer.fill(0.0)


def get_image_dimensions() -> tuple[int, int]:
    """Get the current render target dimensions.

    Returns:
        Tuple of (width, height).
    """
    return int(_image_width[None]), int(_image_height[None])


def _check_render_target_initialized() -> None:
    """Check if render target is initialized and raise if not."""
    if _render_target_initialized[None] == 0:
        raise RuntimeError("Render target not set up. Call setup_render_target() first.")


def get_image() -> "ti.MatrixField":
    """Get the color buffer.

    Note: This returns the full preallocated buffer. Use get_image_dimensions()
    to determine the active region.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()
    return _color_buffer


# =============================================================================
# Shading Core
# =============================================================================


@ti.func
def shade_lights(rec: Intersection, ray: Ray):
    """Accumulate diffuse and specular light at a hit point.

    For each light a shadow ray is cast from the hit point to the light.
    Any shape hit along it occludes the light entirely.

    Args:
        rec: The intersection being shaded.
        ray: The ray that produced the intersection.

    Returns:
        A tuple of (total_light_color, total_specular_color).
    """
    normal = to_unit(rec.normal)
    view = to_unit(-ray.direction)

    total_light = vec3(0.0, 0.0, 0.0)
    total_specular = vec3(0.0, 0.0, 0.0)

    for k in range(num_lights[None]):
        to_light = light_positions[k] - rec.position
        shadow_ray = Ray(origin=rec.position, direction=to_light)

        if intersect_scene_any(shadow_ray) == 0:
            light_dir = to_unit(to_light)

            # Diffuse: Lambert cosine with inverse-square falloff
            cos_term = ti.max(0.0, tm.dot(normal, light_dir))
            diffuse = clamp_color(light_colors[k] * cos_term)
            total_light += diffuse * (1.0 / tm.dot(to_light, to_light)) * light_brightness[k]

            # Specular: Phong reflection of the light direction
            mirrored = reflect(-light_dir, normal)
            spec_dot = tm.dot(mirrored, view)
            if spec_dot > 0.0:
                highlight = spec_dot**rec.exponent
                total_specular += clamp_color(light_colors[k] * rec.reflectivity * highlight)

    return total_light, total_specular


@ti.func
def trace_color(ray: Ray, bounce_limit: ti.i32) -> vec3:
    """Compute the color seen along a ray.

    Args:
        ray: The ray to trace. Hits are accepted for t in (EPSILON, 1].
        bounce_limit: Maximum number of mirror reflections to follow.
            With 0 no reflection ray is ever cast.

    Returns:
        The unclamped color (RGB).
    """
    origin = ray.origin
    direction = ray.direction

    color = vec3(0.0, 0.0, 0.0)

    # Share of the current level in the final color
    weight = vec3(1.0, 1.0, 1.0)

    remaining = bounce_limit

    # Active flag for continuation (Taichi doesn't support break in ti.func loops)
    active = 1

    for _ in range(bounce_limit + 1):
        if active == 1:
            current = Ray(origin=origin, direction=direction)
            rec = intersect_scene(current)

            if rec.hit == 0:
                color += weight * _background_color[None]
                active = 0
            else:
                total_light, total_specular = shade_lights(rec, current)
                lit = _ambient_color[None] + total_light

                if remaining > 0 and rec.reflectivity > 0.0:
                    r = rec.reflectivity
                    color += weight * (rec.color * (1.0 - r) * lit + total_specular)
                    weight *= r * lit

                    normal = to_unit(rec.normal)
                    origin = rec.position
                    direction = to_length(reflect(direction, normal), get_far_dist())
                    remaining -= 1
                else:
                    color += weight * (rec.color * lit + total_specular)
                    active = 0

    return color


@ti.func
def render_pixel_impl(pixel_i: ti.i32, pixel_j: ti.i32, width: ti.i32, height: ti.i32) -> vec3:
    """Trace the primary ray through the center of a pixel.

    Args:
        pixel_i: Pixel x-coordinate (0 = left).
        pixel_j: Pixel y-coordinate (0 = bottom).
        width: Image width in pixels.
        height: Image height in pixels.

    Returns:
        The pixel color clamped to [0, 1]. Non-finite channels become 0.
    """
    u = (ti.cast(pixel_i, ti.f32) + 0.5) / ti.cast(width, ti.f32)
    v = (ti.cast(pixel_j, ti.f32) + 0.5) / ti.cast(height, ti.f32)

    color = trace_color(get_ray(u, v), _bounce_limit[None])

    # Degenerate geometry yields NaN/Inf; render those channels black
    for c in ti.static(range(3)):
        if tm.isnan(color[c]) or tm.isinf(color[c]):
            color[c] = 0.0

    return clamp_color(color)


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.kernel
def _render_rows(width: ti.i32, height: ti.i32, row_start: ti.i32, row_end: ti.i32):
    """Render every pixel in sample rows [row_start, row_end)."""
    for i, j in ti.ndrange(width, (row_start, row_end)):
        _color_buffer[i, j] = render_pixel_impl(i, j, width, height)


# Single-ray probe state, for tests and debugging
_probe_origin = ti.Vector.field(3, dtype=ti.f32, shape=())
_probe_direction = ti.Vector.field(3, dtype=ti.f32, shape=())
_probe_color = ti.Vector.field(3, dtype=ti.f32, shape=())


@ti.kernel
def _trace_probe(bounce_limit: ti.i32):
    """Trace the probe ray into _probe_color."""
    ray = Ray(origin=_probe_origin[None], direction=_probe_direction[None])
    _probe_color[None] = trace_color(ray, bounce_limit)


@ti.kernel
def _render_single_pixel(pixel_i: ti.i32, pixel_j: ti.i32, width: ti.i32, height: ti.i32):
    """Render one pixel into _probe_color."""
    _probe_color[None] = render_pixel_impl(pixel_i, pixel_j, width, height)


# =============================================================================
# Public Rendering API
# =============================================================================


def trace_ray(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
    bounce_limit: int | None = None,
) -> tuple[float, float, float]:
    """Trace a single ray against the uploaded scene.

    Args:
        origin: Ray origin.
        direction: Ray direction; its magnitude is the ray's reach.
        bounce_limit: Reflection depth. Defaults to the configured limit.

    Returns:
        Tuple of (R, G, B), unclamped.
    """
    if bounce_limit is None:
        bounce_limit = get_bounce_limit()

    _probe_origin[None] = [origin[0], origin[1], origin[2]]
    _probe_direction[None] = [direction[0], direction[1], direction[2]]
    _trace_probe(bounce_limit)

    color = _probe_color[None]
    return (float(color[0]), float(color[1]), float(color[2]))


def render_sample(pixel_i: int, pixel_j: int) -> tuple[float, float, float]:
    """Render a single pixel.

    Args:
        pixel_i: Pixel x-coordinate (0 = left).
        pixel_j: Pixel y-coordinate (0 = bottom).

    Returns:
        Tuple of (R, G, B) color values in [0, 1].

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    _render_single_pixel(pixel_i, pixel_j, width, height)

    color = _probe_color[None]
    return (float(color[0]), float(color[1]), float(color[2]))


def render_rows(row_start: int, row_end: int) -> None:
    """Render sample rows [row_start, row_end) of the render target.

    Row 0 is the bottom of the near plane.

    Raises:
        RuntimeError: If render target has not been set up.
        ValueError: If the row range is outside the image.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    if not 0 <= row_start <= row_end <= height:
        raise ValueError(f"Row range [{row_start}, {row_end}) outside image height {height}")

    if row_start < row_end:
        _render_rows(width, height, row_start, row_end)


def render_image() -> None:
    """Render every pixel of the render target.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    _, height = get_image_dimensions()
    render_rows(0, height)


def get_normalized_image_numpy() -> npt.NDArray[np.float32]:
    """Get the rendered image as a NumPy array.

    The array shape is (height, width, 3), values in [0, 1], with row 0 the
    top of the image.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()

    # Get raw image data (full buffer)
    full_image = _color_buffer.to_numpy()

    # Extract active region
    image = full_image[:width, :height, :]

    # Transpose from (width, height, 3) to (height, width, 3) for standard image format
    image = np.transpose(image, (1, 0, 2))

    # Flip vertically (sample rows run bottom-up, images top-down)
    image = np.flipud(image)

    return np.clip(image, 0.0, 1.0).astype(np.float32)
