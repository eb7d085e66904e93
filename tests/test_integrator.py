"""Tests for the Whitted shading integrator.

This module tests the core shading functionality including:
- Render settings validation
- Render target setup and management
- Ambient, diffuse and specular shading
- Hard shadows
- Reflection blending and the bounce limit
- Row-band rendering and image orientation

Note: Imports are done inside test methods to avoid Taichi initialization issues.
The conftest.py fixture initializes Taichi before tests run, so module-level
imports of modules containing ti.field() declarations would fail.
"""

import numpy as np
import pytest


def _setup_view(far_dist=100.0, frust=1.0):
    """Upload a camera at (0, 0, 10) looking down -z."""
    from src.raytracer.camera.projection import Camera, setup_camera

    setup_camera(Camera(far_dist=far_dist, frust_width=frust, frust_height=frust))


# Primary ray from the default eye straight at the origin
EYE = (0.0, 0.0, 10.0)
FORWARD = (0.0, 0.0, -100.0)


class TestRenderSettings:
    """Test shading parameter configuration."""

    def test_set_render_settings(self):
        """Test the bounce limit is stored."""
        from src.raytracer.core.integrator import get_bounce_limit, set_render_settings

        set_render_settings((0.0, 0.0, 0.0), (0.1, 0.1, 0.1), bounce_limit=5)
        assert get_bounce_limit() == 5

    def test_negative_bounce_limit_rejected(self):
        """Test a negative bounce limit raises."""
        from src.raytracer.core.integrator import set_render_settings

        with pytest.raises(ValueError, match="bounce_limit"):
            set_render_settings((0.0, 0.0, 0.0), (0.0, 0.0, 0.0), bounce_limit=-1)


class TestRenderTargetSetup:
    """Test render target initialization and management."""

    def test_setup_render_target_sets_dimensions(self):
        """Test that setup_render_target records the active size."""
        from src.raytracer.core.integrator import (
            get_image,
            get_image_dimensions,
            setup_render_target,
        )

        setup_render_target(64, 48)

        assert get_image_dimensions() == (64, 48)
        assert get_image() is not None

    def test_oversized_target_rejected(self):
        """Test dimensions above the preallocated maximum raise."""
        from src.raytracer.core.integrator import MAX_IMAGE_WIDTH, setup_render_target

        with pytest.raises(ValueError, match="exceed maximum"):
            setup_render_target(MAX_IMAGE_WIDTH + 1, 16)

    def test_non_positive_target_rejected(self):
        """Test zero-sized targets raise."""
        from src.raytracer.core.integrator import setup_render_target

        with pytest.raises(ValueError, match="positive"):
            setup_render_target(0, 16)

    def test_render_without_setup_raises_error(self):
        """Test that rendering raises if the target is not set up."""
        import src.raytracer.core.integrator as integrator
        from src.raytracer.core.integrator import render_image

        # Mark as not initialized
        original_value = integrator._render_target_initialized[None]
        integrator._render_target_initialized[None] = 0

        with pytest.raises(RuntimeError, match="Render target not set up"):
            render_image()

        # Restore
        integrator._render_target_initialized[None] = original_value

    def test_invalid_row_range_rejected(self):
        """Test render_rows checks the band against the image height."""
        from src.raytracer.core.integrator import render_rows, setup_render_target

        setup_render_target(8, 8)

        with pytest.raises(ValueError, match="Row range"):
            render_rows(4, 9)


class TestLocalShading:
    """Test ambient, diffuse and specular terms."""

    def test_miss_returns_background(self):
        """Test a ray hitting nothing returns the background color."""
        from src.raytracer.core.integrator import set_render_settings, trace_ray

        _setup_view()
        set_render_settings((0.2, 0.3, 0.4), (1.0, 1.0, 1.0), bounce_limit=2)

        assert trace_ray(EYE, FORWARD) == pytest.approx((0.2, 0.3, 0.4), abs=1e-6)

    def test_ambient_only_without_lights(self):
        """Test an unlit surface shows color times ambient."""
        from src.raytracer.core.integrator import set_render_settings, trace_ray
        from src.raytracer.scene.intersection import add_sphere

        _setup_view()
        set_render_settings((0.0, 0.0, 0.0), (0.2, 0.2, 0.2), bounce_limit=0)
        add_sphere((0.0, 0.0, 0.0), 1.0, color=(1.0, 0.5, 0.25))

        assert trace_ray(EYE, FORWARD) == pytest.approx((0.2, 0.1, 0.05), abs=1e-6)

    def test_diffuse_inverse_square(self):
        """Test a light head-on at distance 4 with brightness 8 adds 0.5."""
        from src.raytracer.core.integrator import set_render_settings, trace_ray
        from src.raytracer.scene.intersection import add_sphere
        from src.raytracer.scene.lights import add_light

        _setup_view()
        set_render_settings((0.0, 0.0, 0.0), (0.0, 0.0, 0.0), bounce_limit=0)
        add_sphere((0.0, 0.0, 0.0), 1.0, color=(1.0, 1.0, 1.0))
        add_light((0.0, 0.0, 5.0), (1.0, 1.0, 1.0), 8.0)

        assert trace_ray(EYE, FORWARD) == pytest.approx((0.5, 0.5, 0.5), abs=1e-5)

    def test_diffuse_cosine_term(self):
        """Test an oblique light is weighted by the cosine of its angle."""
        from src.raytracer.core.integrator import set_render_settings, trace_ray
        from src.raytracer.scene.intersection import add_sphere
        from src.raytracer.scene.lights import add_light

        _setup_view()
        set_render_settings((0.0, 0.0, 0.0), (0.0, 0.0, 0.0), bounce_limit=0)
        add_sphere((0.0, 0.0, 0.0), 1.0, color=(1.0, 1.0, 1.0))
        # Light vector (3, 0, 4) from the hit point (0, 0, 1): cos = 0.8, d^2 = 25
        add_light((3.0, 0.0, 5.0), (1.0, 1.0, 1.0), 25.0)

        assert trace_ray(EYE, FORWARD) == pytest.approx((0.8, 0.8, 0.8), abs=1e-5)

    def test_specular_highlight(self):
        """Test the specular term is light color times reflectivity at peak."""
        from src.raytracer.core.integrator import set_render_settings, trace_ray
        from src.raytracer.scene.intersection import add_sphere
        from src.raytracer.scene.lights import add_light

        _setup_view()
        set_render_settings((0.0, 0.0, 0.0), (0.0, 0.0, 0.0), bounce_limit=0)
        add_sphere((0.0, 0.0, 0.0), 1.0, color=(0.0, 0.0, 0.0), reflectivity=0.5, exponent=10.0)
        add_light((0.0, 0.0, 5.0), (1.0, 1.0, 1.0), 0.0)

        assert trace_ray(EYE, FORWARD) == pytest.approx((0.5, 0.5, 0.5), abs=1e-5)

    def test_diffuse_clamped_per_light(self):
        """Test a light's color times cosine is clamped before falloff."""
        from src.raytracer.core.integrator import set_render_settings, trace_ray
        from src.raytracer.scene.intersection import add_sphere
        from src.raytracer.scene.lights import add_light

        _setup_view()
        set_render_settings((0.0, 0.0, 0.0), (0.0, 0.0, 0.0), bounce_limit=0)
        add_sphere((0.0, 0.0, 0.0), 1.0, color=(1.0, 1.0, 1.0))
        add_light((0.0, 0.0, 5.0), (4.0, 4.0, 4.0), 8.0)

        assert trace_ray(EYE, FORWARD) == pytest.approx((0.5, 0.5, 0.5), abs=1e-5)


class TestShadows:
    """Test hard shadows from point lights."""

    def test_occluder_blocks_light(self):
        """Test a shape between the hit point and the light removes its contribution."""
        from src.raytracer.core.integrator import set_render_settings, trace_ray
        from src.raytracer.scene.intersection import add_sphere
        from src.raytracer.scene.lights import add_light

        _setup_view()
        set_render_settings((0.0, 0.0, 0.0), (0.1, 0.1, 0.1), bounce_limit=0)
        add_sphere((0.0, 0.0, 0.0), 1.0, color=(1.0, 1.0, 1.0))
        add_light((3.0, 0.0, 5.0), (1.0, 1.0, 1.0), 25.0)

        lit = trace_ray(EYE, FORWARD)
        assert lit == pytest.approx((0.9, 0.9, 0.9), abs=1e-5)

        # Occluder halfway along the shadow ray, off the primary ray's path
        add_sphere((1.5, 0.0, 3.0), 0.3, color=(1.0, 1.0, 1.0))

        shadowed = trace_ray(EYE, FORWARD)
        assert shadowed == pytest.approx((0.1, 0.1, 0.1), abs=1e-5)

    def test_light_behind_surface_is_blocked(self):
        """Test a light on the far side of a sphere does not light the front."""
        from src.raytracer.core.integrator import set_render_settings, trace_ray
        from src.raytracer.scene.intersection import add_sphere
        from src.raytracer.scene.lights import add_light

        _setup_view()
        set_render_settings((0.0, 0.0, 0.0), (0.1, 0.1, 0.1), bounce_limit=0)
        add_sphere((0.0, 0.0, 0.0), 1.0, color=(1.0, 1.0, 1.0), reflectivity=0.5, exponent=5.0)
        add_light((0.0, 0.0, -5.0), (1.0, 1.0, 1.0), 100.0)

        assert trace_ray(EYE, FORWARD) == pytest.approx((0.1, 0.1, 0.1), abs=1e-5)

    def test_shape_beyond_light_does_not_shadow(self):
        """Test shadow rays stop at the light."""
        from src.raytracer.core.integrator import set_render_settings, trace_ray
        from src.raytracer.scene.intersection import add_sphere
        from src.raytracer.scene.lights import add_light

        _setup_view()
        set_render_settings((0.0, 0.0, 0.0), (0.0, 0.0, 0.0), bounce_limit=0)
        add_sphere((0.0, 0.0, 0.0), 1.0, color=(1.0, 1.0, 1.0))
        add_light((3.0, 0.0, 5.0), (1.0, 1.0, 1.0), 25.0)
        # On the extension of the shadow ray past the light
        add_sphere((6.0, 0.0, 9.0), 0.5, color=(1.0, 1.0, 1.0))

        assert trace_ray(EYE, FORWARD) == pytest.approx((0.8, 0.8, 0.8), abs=1e-5)


class TestReflection:
    """Test reflection blending and the bounce limit."""

    def test_bounce_limit_zero_never_reflects(self):
        """Test a fully reflective surface shows its own color with no bounces."""
        from src.raytracer.core.integrator import set_render_settings, trace_ray
        from src.raytracer.scene.intersection import add_sphere

        _setup_view()
        set_render_settings((0.0, 0.0, 1.0), (1.0, 1.0, 1.0), bounce_limit=0)
        add_sphere((0.0, 0.0, 0.0), 1.0, color=(1.0, 0.0, 0.0), reflectivity=1.0)

        assert trace_ray(EYE, FORWARD) == pytest.approx((1.0, 0.0, 0.0), abs=1e-6)

    def test_reflection_blends_background(self):
        """Test half reflectivity blends the surface with what it reflects."""
        from src.raytracer.core.integrator import set_render_settings, trace_ray
        from src.raytracer.scene.intersection import add_sphere

        _setup_view()
        set_render_settings((0.0, 0.0, 1.0), (1.0, 1.0, 1.0), bounce_limit=1)
        add_sphere((0.0, 0.0, 0.0), 1.0, color=(1.0, 0.0, 0.0), reflectivity=0.5)

        assert trace_ray(EYE, FORWARD) == pytest.approx((0.5, 0.0, 0.5), abs=1e-5)

    def test_reflection_scaled_by_lighting(self):
        """Test the blended base color is multiplied by ambient plus light."""
        from src.raytracer.core.integrator import set_render_settings, trace_ray
        from src.raytracer.scene.intersection import add_sphere

        _setup_view()
        set_render_settings((0.0, 0.0, 1.0), (0.5, 0.5, 0.5), bounce_limit=1)
        add_sphere((0.0, 0.0, 0.0), 1.0, color=(1.0, 0.0, 0.0), reflectivity=0.5)

        assert trace_ray(EYE, FORWARD) == pytest.approx((0.25, 0.0, 0.25), abs=1e-5)

    def test_mirror_sees_other_sphere(self):
        """Test a perfect mirror shows the shape in the reflected direction."""
        from src.raytracer.core.integrator import set_render_settings, trace_ray
        from src.raytracer.scene.intersection import add_sphere

        _setup_view()
        set_render_settings((0.0, 0.0, 0.0), (1.0, 1.0, 1.0), bounce_limit=1)
        add_sphere((0.0, 0.0, 0.0), 1.0, color=(1.0, 0.0, 0.0), reflectivity=1.0)
        # Behind the eye, only visible in the mirror
        add_sphere((0.0, 0.0, 20.0), 2.0, color=(0.0, 1.0, 0.0))

        assert trace_ray(EYE, FORWARD) == pytest.approx((0.0, 1.0, 0.0), abs=1e-5)

    def test_bounce_limit_caps_depth(self):
        """Test facing mirrors stop reflecting once the limit is reached."""
        from src.raytracer.core.integrator import set_render_settings, trace_ray
        from src.raytracer.scene.intersection import add_sphere

        _setup_view()
        set_render_settings((0.0, 0.0, 0.0), (1.0, 1.0, 1.0), bounce_limit=0)
        add_sphere((0.0, 0.0, 0.0), 1.0, color=(1.0, 0.0, 0.0), reflectivity=0.5)
        add_sphere((0.0, 0.0, 20.0), 2.0, color=(0.0, 1.0, 0.0), reflectivity=0.5)

        # Depth 0: own color only
        assert trace_ray(EYE, FORWARD, bounce_limit=0) == pytest.approx((1.0, 0.0, 0.0), abs=1e-5)
        # Depth 1: half red, half the green sphere's own color
        assert trace_ray(EYE, FORWARD, bounce_limit=1) == pytest.approx((0.5, 0.5, 0.0), abs=1e-5)
        # Depth 2: the green sphere reflects red back
        assert trace_ray(EYE, FORWARD, bounce_limit=2) == pytest.approx((0.75, 0.25, 0.0), abs=1e-5)


class TestImageRendering:
    """Test full-image rendering through the camera."""

    def test_sphere_center_and_background_corners(self):
        """Test a 3x3 render of a sphere filling only the center pixel."""
        from src.raytracer.core.integrator import (
            get_normalized_image_numpy,
            render_image,
            set_render_settings,
            setup_render_target,
        )
        from src.raytracer.scene.intersection import add_sphere

        _setup_view(frust=3.0)
        set_render_settings((0.0, 0.0, 1.0), (0.5, 0.5, 0.5), bounce_limit=0)
        add_sphere((0.0, 0.0, 0.0), 5.0, color=(1.0, 0.0, 0.0))

        setup_render_target(3, 3)
        render_image()
        image = get_normalized_image_numpy()

        assert image.shape == (3, 3, 3)
        np.testing.assert_allclose(image[1, 1], [0.5, 0.0, 0.0], atol=1e-5)
        for row, col in [(0, 0), (0, 1), (0, 2), (1, 0), (1, 2), (2, 0), (2, 1), (2, 2)]:
            np.testing.assert_allclose(image[row, col], [0.0, 0.0, 1.0], atol=1e-6)

    def test_floor_appears_in_bottom_row(self):
        """Test image row 0 is the top of the view."""
        from src.raytracer.core.integrator import (
            get_normalized_image_numpy,
            render_image,
            set_render_settings,
            setup_render_target,
        )
        from src.raytracer.scene.intersection import add_floor

        _setup_view(frust=3.0)
        set_render_settings((0.0, 0.0, 1.0), (1.0, 1.0, 1.0), bounce_limit=0)
        add_floor((0.0, -2.0, 0.0), color=(0.0, 1.0, 0.0))

        setup_render_target(3, 3)
        render_image()
        image = get_normalized_image_numpy()

        np.testing.assert_allclose(image[0], [[0.0, 0.0, 1.0]] * 3, atol=1e-6)
        np.testing.assert_allclose(image[2], [[0.0, 1.0, 0.0]] * 3, atol=1e-6)

    def test_render_sample_matches_image(self):
        """Test render_sample agrees with the full render."""
        from src.raytracer.core.integrator import (
            get_normalized_image_numpy,
            render_image,
            render_sample,
            set_render_settings,
            setup_render_target,
        )
        from src.raytracer.scene.intersection import add_floor

        _setup_view(frust=3.0)
        set_render_settings((0.0, 0.0, 1.0), (1.0, 1.0, 1.0), bounce_limit=0)
        add_floor((0.0, -2.0, 0.0), color=(0.0, 1.0, 0.0))

        setup_render_target(3, 3)
        render_image()
        image = get_normalized_image_numpy()

        # Sample row 0 is the bottom of the image
        assert render_sample(1, 0) == pytest.approx(tuple(image[2, 1]), abs=1e-6)
        assert render_sample(1, 2) == pytest.approx(tuple(image[0, 1]), abs=1e-6)

    def test_row_bands_cover_image(self):
        """Test rendering in bands matches a single full render."""
        from src.raytracer.core.integrator import (
            get_normalized_image_numpy,
            render_image,
            render_rows,
            set_render_settings,
            setup_render_target,
        )
        from src.raytracer.scene.intersection import add_floor, add_sphere
        from src.raytracer.scene.lights import add_light

        _setup_view(frust=2.0)
        set_render_settings((0.1, 0.1, 0.2), (0.2, 0.2, 0.2), bounce_limit=2)
        add_sphere((0.0, 0.0, 0.0), 2.0, color=(0.9, 0.2, 0.2), reflectivity=0.3, exponent=20.0)
        add_floor((0.0, -2.0, 0.0), color=(0.5, 0.5, 0.5), reflectivity=0.2)
        add_light((5.0, 8.0, 5.0), (1.0, 1.0, 1.0), 100.0)

        setup_render_target(16, 12)
        render_image()
        full = get_normalized_image_numpy()

        setup_render_target(16, 12)
        for start in range(0, 12, 5):
            render_rows(start, min(start + 5, 12))
        banded = get_normalized_image_numpy()

        np.testing.assert_array_equal(full, banded)

    def test_rendered_values_in_display_range(self):
        """Test every channel of a bright scene is finite and within [0, 1]."""
        from src.raytracer.core.integrator import (
            get_normalized_image_numpy,
            render_image,
            set_render_settings,
            setup_render_target,
        )
        from src.raytracer.scene.intersection import add_sphere
        from src.raytracer.scene.lights import add_light

        _setup_view(frust=2.0)
        set_render_settings((0.0, 0.0, 0.0), (2.0, 2.0, 2.0), bounce_limit=3)
        add_sphere((0.0, 0.0, 0.0), 2.0, color=(1.0, 1.0, 1.0), reflectivity=0.9, exponent=1.0)
        add_light((0.0, 0.0, 4.0), (5.0, 5.0, 5.0), 1000.0)

        setup_render_target(8, 8)
        render_image()
        image = get_normalized_image_numpy()

        assert np.all(np.isfinite(image))
        assert image.min() >= 0.0
        assert image.max() <= 1.0

    def test_non_finite_color_written_as_black(self):
        """Test a light sitting on the hit point yields a non-finite color but a zero pixel."""
        from src.raytracer.core.integrator import (
            get_normalized_image_numpy,
            render_image,
            render_sample,
            setup_render_target,
            trace_ray,
        )
        from src.raytracer.scene.intersection import add_sphere
        from src.raytracer.scene.lights import add_light

        _setup_view()
        add_sphere((0.0, 0.0, 0.0), 1.0)
        # The primary ray hits the sphere exactly at (0, 0, 1)
        add_light((0.0, 0.0, 1.0), (1.0, 1.0, 1.0), 1.0)

        assert not np.all(np.isfinite(trace_ray(EYE, FORWARD)))

        setup_render_target(1, 1)
        assert render_sample(0, 0) == (0.0, 0.0, 0.0)

        render_image()
        image = get_normalized_image_numpy()

        assert np.all(np.isfinite(image))
        np.testing.assert_array_equal(image, np.zeros((1, 1, 3), dtype=np.float32))
