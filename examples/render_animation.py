#!/usr/bin/env python3
"""Render an animated scene to a PNG frame sequence.

The scene is either generated from a random seed or loaded from a JSON
scene file (the format written by Scene.to_dict()). Spheres in a random
scene move with their own velocities; the camera stays aimed at the scene
center.

Usage:
    python -m examples.render_animation [options]

Options:
    --width WIDTH           Frame width in pixels (default: 640)
    --height HEIGHT         Frame height in pixels (default: 480)
    --frames FRAMES         Number of frames (default: 48)
    --seed SEED             Random scene seed (default: 0)
    --spheres SPHERES       Number of spheres in a random scene (default: 8)
    --bounce-limit LIMIT    Maximum reflection depth (default: 3, or the
                            scene file's own value)
    --output-dir DIR        Output directory (default: frames)
    --scene FILE            JSON scene file instead of a random scene
    --quiet                 Suppress progress output

Example:
    python -m examples.render_animation --width 320 --height 240 --frames 24 --seed 7
"""

from __future__ import annotations

import argparse
import json
import sys
import time
from pathlib import Path

import taichi as ti


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render an animated scene to a PNG frame sequence.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--width",
        type=int,
        default=640,
        help="Frame width in pixels (default: 640)",
    )
    parser.add_argument(
        "--height",
        type=int,
        default=480,
        help="Frame height in pixels (default: 480)",
    )
    parser.add_argument(
        "--frames",
        type=int,
        default=48,
        help="Number of frames (default: 48)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=0,
        help="Random scene seed (default: 0)",
    )
    parser.add_argument(
        "--spheres",
        type=int,
        default=8,
        help="Number of spheres in a random scene (default: 8)",
    )
    parser.add_argument(
        "--bounce-limit",
        type=int,
        default=None,
        help="Maximum reflection depth (default: 3, or the scene file's own value)",
    )
    parser.add_argument(
        "--output-dir",
        type=str,
        default="frames",
        help="Output directory (default: frames)",
    )
    parser.add_argument(
        "--scene",
        type=str,
        default=None,
        help="JSON scene file to render instead of a random scene",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output",
    )
    return parser.parse_args()


def render_animation(
    width: int = 640,
    height: int = 480,
    num_frames: int = 48,
    seed: int = 0,
    num_spheres: int = 8,
    bounce_limit: int | None = None,
    output_dir: str = "frames",
    scene_file: str | None = None,
    quiet: bool = False,
) -> list[Path]:
    """Render an animation and save every frame.

    Args:
        width: Frame width in pixels.
        height: Frame height in pixels.
        num_frames: Number of frames to render.
        seed: Random scene seed.
        num_spheres: Number of spheres in a random scene.
        bounce_limit: Maximum reflection depth. None keeps the scene file's
            value, or the random scene default.
        output_dir: Directory for the PNG sequence.
        scene_file: Optional JSON scene file. Loaded scenes are static.
        quiet: If True, suppress progress output.

    Returns:
        Paths of the saved frames.
    """
    # Lazy imports to allow Taichi initialization first
    from src.raytracer.preview.export import save_frames
    from src.raytracer.scene.animation import Animation
    from src.raytracer.scene.random_scene import RandomSceneParams, create_random_scene
    from src.raytracer.scene.scene import Scene

    if scene_file is not None:
        if not quiet:
            print(f"Loading scene from {scene_file}...")
        with open(scene_file) as f:
            scene = Scene.from_dict(json.load(f))
        if bounce_limit is not None:
            scene.bounce_limit = bounce_limit
        animation = Animation(scene)
    else:
        if not quiet:
            print(f"Creating random scene (seed={seed}, spheres={num_spheres})...")
        params = RandomSceneParams(num_spheres=num_spheres)
        if bounce_limit is not None:
            params.bounce_limit = bounce_limit
        scene, animation = create_random_scene(seed=seed, params=params)

    if not quiet:
        print(f"Rendering {num_frames} frames at {width}x{height}...")

    start_time = time.time()

    def report_progress(frames_done: int) -> None:
        elapsed = time.time() - start_time
        fps = frames_done / elapsed if elapsed > 0 else 0
        print(
            f"\r  Progress: {frames_done}/{num_frames} frames - {fps:.2f} fps",
            end="",
            flush=True,
        )

    paths = save_frames(
        animation.frames(num_frames, width, height),
        output_dir,
        callback=None if quiet else report_progress,
    )

    total_time = time.time() - start_time
    if not quiet:
        print()  # Newline after progress
        print(f"Saved to: {Path(output_dir).absolute()}")
        print(f"Total time: {total_time:.2f}s")

    return paths


def main() -> int:
    """Main entry point."""
    args = parse_args()

    # Initialize Taichi
    # Use GPU if available, fall back to CPU
    try:
        ti.init(arch=ti.gpu)
        if not args.quiet:
            print("Using GPU backend")
    except Exception:
        ti.init(arch=ti.cpu)
        if not args.quiet:
            print("Using CPU backend")

    try:
        render_animation(
            width=args.width,
            height=args.height,
            num_frames=args.frames,
            seed=args.seed,
            num_spheres=args.spheres,
            bounce_limit=args.bounce_limit,
            output_dir=args.output_dir,
            scene_file=args.scene,
            quiet=args.quiet,
        )
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
