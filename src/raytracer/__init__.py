"""Taichi-based Whitted ray tracer.

This package renders scenes of spheres and floors lit by point lights,
with support for:
- Phong ambient/diffuse/specular shading
- Hard shadows from point lights
- Mirror reflection blended by surface reflectivity, with a bounce limit
- Animation of shapes across frames and seeded random scenes

Subpackages:
    core: Ray and plane utilities, shading integrator and render target
    geometry: Sphere and floor intersection
    scene: Shape/light storage, Scene container, animation, random scenes
    camera: Projection-plane camera with primary ray generation
    preview: PNG export
"""

__version__ = "0.1.0"
