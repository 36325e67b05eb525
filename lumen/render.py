"""
Rasterization of growth segments.

Segments are painted onto a transparent, premultiplied RGBA canvas in layers:
    1. Glow strokes, additive ("plus lighter"), wide and soft
    2. Core strokes, normal source-over, always on top of the glow
    3. Light points at brightly lit segment tips, additive
    4. Bloom dots at lit outer branch tips, additive, always last

Drawing goes through Pillow. Strokes are ImageDraw lines with round caps.
Additive shapes are drawn onto a scratch layer cut to their bounding box and
summed in with ImageChops.add, which saturates per channel the way "plus
lighter" does on premultiplied data. Cores are drawn onto one straight-alpha
layer and laid over with Image.alpha_composite.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence

import numpy as np
from PIL import Image, ImageChops, ImageDraw

from lumen.config import GrowthSegment, Point, RenderParams
from lumen.gradient import Color
from lumen.lsystem import LSystem

logger = logging.getLogger(__name__)

LIGHT_POINT_THRESHOLD = 0.5
BLOOM_DEPTH_THRESHOLD = 0.6
BLOOM_LIGHT_THRESHOLD = 0.3

# Pillow addresses pixels by their top-left corner; segment coordinates are continuous
PIXEL_CENTER = 0.5

Ink = tuple[int, int, int, int]


def _channel(value: float) -> int:
    return round(min(1.0, max(0.0, value)) * 255)


def straight_ink(color: Color) -> Ink:
    return (_channel(color.r), _channel(color.g), _channel(color.b), _channel(color.a))


def premultiplied_ink(color: Color) -> Ink:
    alpha = min(1.0, max(0.0, color.a))
    return (
        _channel(color.r * alpha),
        _channel(color.g * alpha),
        _channel(color.b * alpha),
        _channel(alpha),
    )


def draw_stroke(
    draw: ImageDraw.ImageDraw, start: Point, end: Point, width: float, ink: Ink
) -> None:
    """Round-capped line in the draw's own pixel coordinates."""
    draw.line([start, end], fill=ink, width=max(1, round(width)))
    half = width / 2
    if half >= 1:
        for x, y in (start, end):
            draw.ellipse([x - half, y - half, x + half, y + half], fill=ink)


class Canvas:
    """Premultiplied RGBA canvas backed by a Pillow image."""

    def __init__(self, width: int, height: int) -> None:
        self.width = width
        self.height = height
        self.image = Image.new("RGBA", (width, height), (0, 0, 0, 0))

    def _scratch(self, xmin: float, ymin: float, xmax: float, ymax: float):
        """Transparent layer over a bounding box, or None when it misses the canvas."""
        left = math.floor(xmin - PIXEL_CENTER)
        top = math.floor(ymin - PIXEL_CENTER)
        right = math.ceil(xmax - PIXEL_CENTER) + 1
        bottom = math.ceil(ymax - PIXEL_CENTER) + 1
        if right <= 0 or bottom <= 0 or left >= self.width or top >= self.height:
            return None
        layer = Image.new("RGBA", (right - left, bottom - top), (0, 0, 0, 0))
        return layer, left, top

    def _local(self, point: Point, left: int, top: int) -> Point:
        return (point[0] - PIXEL_CENTER - left, point[1] - PIXEL_CENTER - top)

    def add_layer(self, layer: Image.Image, left: int, top: int) -> None:
        """Sum a premultiplied layer into the canvas with its corner at (left, top)."""
        box = (
            max(0, left),
            max(0, top),
            min(self.width, left + layer.width),
            min(self.height, top + layer.height),
        )
        if box[0] >= box[2] or box[1] >= box[3]:
            return
        region = self.image.crop(box)
        part = layer.crop((box[0] - left, box[1] - top, box[2] - left, box[3] - top))
        self.image.paste(ImageChops.add(region, part), box[:2])

    def add_line(self, start: Point, end: Point, width: float, color: Color) -> None:
        half = width / 2 + 1
        scratch = self._scratch(
            min(start[0], end[0]) - half,
            min(start[1], end[1]) - half,
            max(start[0], end[0]) + half,
            max(start[1], end[1]) + half,
        )
        if scratch is None:
            return
        layer, left, top = scratch
        draw_stroke(
            ImageDraw.Draw(layer),
            self._local(start, left, top),
            self._local(end, left, top),
            width,
            premultiplied_ink(color),
        )
        self.add_layer(layer, left, top)

    def add_circle(self, center: Point, radius: float, color: Color) -> None:
        if radius <= 0:
            return
        scratch = self._scratch(
            center[0] - radius, center[1] - radius, center[0] + radius, center[1] + radius
        )
        if scratch is None:
            return
        layer, left, top = scratch
        x, y = self._local(center, left, top)
        ImageDraw.Draw(layer).ellipse(
            [x - radius, y - radius, x + radius, y + radius], fill=premultiplied_ink(color)
        )
        self.add_layer(layer, left, top)

    def add_radial(
        self,
        center: Point,
        radius: float,
        color: Color,
        alphas: Sequence[float],
        locations: Sequence[float],
    ) -> None:
        """
        Radial gradient of one opaque colour, alpha interpolated over radius fractions.

        Built from Pillow's 256 px radial ramp (0 at the centre, 255 at the
        rim and beyond), mapped through an alpha table and resized to the
        diameter. Corners past the rim take the last alpha.
        """
        diameter = round(radius * 2)
        if diameter <= 0:
            return
        table = np.interp(np.arange(256) / 255.0, locations, alphas)
        alpha = Image.radial_gradient("L").point([_channel(a) for a in table])
        alpha = alpha.resize((diameter, diameter), Image.Resampling.BILINEAR)
        channels = [alpha.point([_channel(c * v / 255) for v in range(256)]) for c in color.rgb]
        layer = Image.merge("RGBA", (*channels, alpha))

        left = round(center[0] - PIXEL_CENTER - radius)
        top = round(center[1] - PIXEL_CENTER - radius)
        self.add_layer(layer, left, top)

    def composite_over(self, layer: Image.Image) -> None:
        """Source-over a straight-alpha layer the size of the canvas."""
        straight = Image.frombytes("RGBa", self.image.size, self.image.tobytes()).convert("RGBA")
        combined = Image.alpha_composite(straight, layer).convert("RGBa")
        self.image = Image.frombytes("RGBA", combined.size, combined.tobytes())

    def to_rgba8(self) -> np.ndarray:
        """Premultiplied uint8 RGBA, shape (height, width, 4)."""
        return np.array(self.image, dtype=np.uint8)


def rasterize_segments(
    segments: Sequence[GrowthSegment],
    canvas_size: tuple[int, int],
    params: RenderParams | None = None,
) -> np.ndarray | None:
    """
    Paint segments onto a transparent buffer for compositing.

    Args:
        segments: Segments in emission order
        canvas_size: (width, height) in pixels
        params: Glow settings and gradient (defaults to RenderParams())

    Returns:
        Premultiplied uint8 RGBA array of shape (height, width, 4), or None
        when the buffer cannot be allocated
    """
    if params is None:
        params = RenderParams()
    width, height = int(canvas_size[0]), int(canvas_size[1])
    if width <= 0 or height <= 0:
        logger.warning("Cannot allocate a %dx%d growth layer", width, height)
        return None

    try:
        canvas = Canvas(width, height)
        cores = Image.new("RGBA", (width, height), (0, 0, 0, 0))
    except MemoryError:
        logger.warning("Out of memory allocating a %dx%d growth layer", width, height)
        return None

    if params.enable_glow:
        for seg in segments:
            glow_boost = 1.0 + seg.light_intensity * 0.8
            glow_width = (seg.width * 3.0 + params.glow_radius) * glow_boost
            canvas.add_line(seg.start, seg.end, glow_width, seg.glow_color)

    # Core colours come from the gradient and are opaque, so later strokes
    # replacing earlier ones on this layer is source-over in emission order.
    draw = ImageDraw.Draw(cores)
    for seg in segments:
        draw_stroke(
            draw,
            (seg.start[0] - PIXEL_CENTER, seg.start[1] - PIXEL_CENTER),
            (seg.end[0] - PIXEL_CENTER, seg.end[1] - PIXEL_CENTER),
            seg.width,
            straight_ink(seg.color),
        )
    canvas.composite_over(cores)

    tip_color = params.gradient.color_at(1.0)
    for seg in segments:
        if seg.light_intensity > LIGHT_POINT_THRESHOLD:
            brightness = (seg.light_intensity - 0.5) * 2
            canvas.add_circle(seg.end, 3.0 * brightness, tip_color.with_alpha(0.6 * brightness))

    max_depth = max((seg.depth for seg in segments), default=0)
    halo_color = params.gradient.color_at(0.9)
    for seg in segments:
        depth_ratio = seg.depth / max_depth if max_depth > 0 else 0.0
        if depth_ratio > BLOOM_DEPTH_THRESHOLD and seg.light_intensity > BLOOM_LIGHT_THRESHOLD:
            bloom = (depth_ratio - 0.6) / 0.4 * seg.light_intensity
            canvas.add_circle(seg.end, 6.0 * bloom, halo_color.with_alpha(0.25 * bloom))
            canvas.add_circle(seg.end, 2.0 * bloom, tip_color.with_alpha(0.5 * bloom))

    logger.debug("Rasterized %d segments onto %dx%d", len(segments), width, height)
    return canvas.to_rgba8()


def render_lsystem(
    system: LSystem,
    iterations: int,
    canvas_size: tuple[int, int],
    step_length: float,
    params: RenderParams | None = None,
) -> np.ndarray | None:
    """Grow and rasterize in one call."""
    if params is None:
        params = RenderParams()
    segments = system.generate_segments(iterations, canvas_size, step_length, params)
    return rasterize_segments(segments, canvas_size, params)


def render_simple(
    system: LSystem,
    iterations: int,
    canvas_size: tuple[int, int],
    step_length: float,
) -> np.ndarray | None:
    """Plain thin strokes: base width 3, no glow."""
    params = RenderParams(base_width=3.0, enable_glow=False)
    return render_lsystem(system, iterations, canvas_size, step_length, params)
