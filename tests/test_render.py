"""Tests for segment rasterization."""

import numpy as np
from PIL import Image, ImageDraw

from lumen.config import GrowthSegment, RenderParams
from lumen.gradient import Color
from lumen.lsystem import LSystem
from lumen.render import Canvas, rasterize_segments, render_lsystem, render_simple

SIZE = (64, 64)


def make_segment(
    start=(10.0, 32.0),
    end=(54.0, 32.0),
    depth: int = 0,
    light_intensity: float = 0.0,
    width: float = 4.0,
    color: Color = Color(1.0, 0.0, 0.0),
    glow_color: Color = Color(0.0, 0.0, 1.0, 0.5),
) -> GrowthSegment:
    """Horizontal segment across the middle of the test canvas."""
    return GrowthSegment(start, end, depth, light_intensity, 0, width, color, glow_color)


class TestCanvas:
    """Pillow-backed drawing primitives."""

    def test_line_covers_centre_pixels(self) -> None:
        canvas = Canvas(20, 20)
        canvas.add_line((2.0, 10.0), (18.0, 10.0), 4.0, Color(1.0, 1.0, 1.0))
        pixels = canvas.to_rgba8()

        assert pixels[9, 10, 3] == 255
        assert pixels[2, 10, 3] == 0

    def test_additive_painting_accumulates(self) -> None:
        canvas = Canvas(10, 10)
        color = Color(0.2, 0.2, 0.2, 1.0)
        canvas.add_circle((5.0, 5.0), 3.0, color)
        canvas.add_circle((5.0, 5.0), 3.0, color)
        pixels = canvas.to_rgba8()

        assert pixels[5, 5, 0] == 102
        assert pixels[5, 5, 3] == 255

    def test_additive_ink_is_premultiplied(self) -> None:
        canvas = Canvas(10, 10)
        canvas.add_circle((5.0, 5.0), 3.0, Color(1.0, 0.0, 0.0, 0.5))

        assert tuple(canvas.to_rgba8()[5, 5]) == (128, 0, 0, 128)

    def test_offscreen_shapes_are_skipped(self) -> None:
        canvas = Canvas(10, 10)
        canvas.add_line((-50.0, -50.0), (-40.0, -40.0), 3.0, Color(1.0, 1.0, 1.0))
        canvas.add_circle((100.0, 100.0), 5.0, Color(1.0, 1.0, 1.0))
        canvas.add_radial((-80.0, 5.0), 20.0, Color(1.0, 1.0, 1.0), (1.0, 0.0), (0.0, 1.0))

        assert not canvas.to_rgba8().any()

    def test_shapes_clip_at_the_edge(self) -> None:
        canvas = Canvas(10, 10)
        canvas.add_circle((0.0, 0.0), 4.0, Color(1.0, 1.0, 1.0))
        pixels = canvas.to_rgba8()

        assert pixels[0, 0, 3] == 255
        assert pixels[9, 9, 3] == 0

    def test_radial_fades_outward(self) -> None:
        canvas = Canvas(40, 40)
        canvas.add_radial((20.0, 20.0), 16.0, Color(1.0, 1.0, 1.0), (1.0, 0.0), (0.0, 1.0))
        pixels = canvas.to_rgba8()

        assert pixels[20, 20, 3] > pixels[20, 28, 3] > pixels[20, 38, 3]
        assert pixels[20, 38, 3] == 0

    def test_composite_over_covers_and_keeps(self) -> None:
        """An opaque layer replaces what is under it; transparent pixels keep the canvas."""
        canvas = Canvas(10, 10)
        canvas.add_circle((5.0, 5.0), 6.0, Color(0.0, 0.0, 1.0, 0.5))
        layer = Image.new("RGBA", (10, 10), (0, 0, 0, 0))
        ImageDraw.Draw(layer).rectangle([0, 0, 4, 9], fill=(255, 0, 0, 255))

        canvas.composite_over(layer)
        pixels = canvas.to_rgba8()

        assert tuple(pixels[5, 2]) == (255, 0, 0, 255)
        assert tuple(pixels[5, 7]) == (0, 0, 128, 128)


class TestRasterizeSegments:
    """Layer order and buffer format."""

    def test_empty_segments_give_transparent_buffer(self) -> None:
        pixels = rasterize_segments([], SIZE)

        assert pixels.shape == (64, 64, 4)
        assert pixels.dtype == np.uint8
        assert not pixels.any()

    def test_non_positive_size_is_no_result(self) -> None:
        assert rasterize_segments([make_segment()], (0, 64)) is None

    def test_core_stroke_is_opaque(self) -> None:
        pixels = rasterize_segments([make_segment()], SIZE, RenderParams(enable_glow=False))

        assert tuple(pixels[31, 30]) == (255, 0, 0, 255)
        assert pixels[5, 30, 3] == 0

    def test_core_draws_over_glow(self) -> None:
        """Inside the core only the core colour shows; outside it the glow does."""
        pixels = rasterize_segments([make_segment()], SIZE, RenderParams())

        assert tuple(pixels[31, 30]) == (255, 0, 0, 255)
        assert pixels[25, 30, 2] > 0
        assert pixels[25, 30, 0] == 0

    def test_light_points_at_lit_tips(self) -> None:
        """Segments with light above 0.5 get an additive dot at their end."""
        params = RenderParams(enable_glow=False)
        dark = rasterize_segments([make_segment(light_intensity=0.0)], SIZE, params)
        lit = rasterize_segments([make_segment(light_intensity=1.0)], SIZE, params)

        assert dark[32, 56, 3] == 0
        assert lit[32, 56, 3] > 0

    def test_bloom_only_on_outer_branches(self) -> None:
        """Bloom needs depth ratio above 0.6 as well as light."""
        params = RenderParams(enable_glow=False)
        root = make_segment(start=(5.0, 5.0), end=(6.0, 5.0), depth=0, light_intensity=0.5, width=1.0)
        tip = make_segment(depth=4, light_intensity=0.5, width=1.0)

        pixels = rasterize_segments([root, tip], SIZE, params)

        # At the light-point threshold, not above it, so anything past the tip is bloom
        assert pixels[32, 56, 3] > 0
        assert pixels[5, 8, 3] == 0

    def test_deterministic(self) -> None:
        segments = LSystem.bush().generate_segments(2, SIZE, 4.0)
        a = rasterize_segments(segments, SIZE)
        b = rasterize_segments(segments, SIZE)

        assert np.array_equal(a, b)

    def test_premultiplied(self) -> None:
        """Colour channels never exceed alpha."""
        segments = LSystem.bush().generate_segments(2, SIZE, 4.0)
        pixels = rasterize_segments(segments, SIZE).astype(int)

        assert (pixels[..., :3] <= pixels[..., 3:4] + 1).all()


class TestRenderHelpers:
    def test_render_lsystem_matches_two_steps(self) -> None:
        system = LSystem.bush(30.0)
        params = RenderParams(random_seed=5)
        expected = rasterize_segments(system.generate_segments(2, SIZE, 4.0, params), SIZE, params)

        assert np.array_equal(render_lsystem(system, 2, SIZE, 4.0, params), expected)

    def test_render_simple_has_no_glow(self) -> None:
        """Thin strokes only: far fewer pixels touched than the glowing render."""
        system = LSystem.bush()
        simple = render_simple(system, 2, SIZE, 4.0)
        glowing = render_lsystem(system, 2, SIZE, 4.0)

        assert (simple[..., 3] > 0).sum() < (glowing[..., 3] > 0).sum()
