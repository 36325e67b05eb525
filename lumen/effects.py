"""
Post-processing for finished artwork.

All functions take and return uint8 RGBA arrays of shape (height, width, 4)
and never modify their input. Overlays are premultiplied, as produced by
render.rasterize_segments; backgrounds are opaque.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

import numpy as np
from scipy.ndimage import gaussian_filter

from lumen.config import LightSource
from lumen.gradient import Color
from lumen.render import Canvas
from lumen.rng import SeededRandom

logger = logging.getLogger(__name__)

# Radial light glow: alpha at fractions of the glow radius
LIGHT_GLOW_ALPHAS = (0.65, 0.2, 0.0)
LIGHT_GLOW_LOCATIONS = (0.0, 0.4, 1.0)
LIGHT_GLOW_RADIUS = 55.0
LIGHT_CORE_RADIUS = 18.0
LIGHT_CORE_ALPHA = 0.8

# Vignette: alpha (as a fraction of intensity) at fractions of the half diagonal
VIGNETTE_ALPHAS = (0.0, 0.3, 1.0)
VIGNETTE_LOCATIONS = (0.0, 0.6, 1.0)

GRAIN_DENSITY = 0.1
GRAIN_ALPHA = 0.15


def _to_float(image: np.ndarray) -> np.ndarray:
    return np.asarray(image, dtype=np.float64) / 255.0


def _to_uint8(pixels: np.ndarray) -> np.ndarray:
    return np.rint(np.clip(pixels, 0.0, 1.0) * 255).astype(np.uint8)


# =============================================================================
# COMPOSITING
# =============================================================================


def composite_additive(base: np.ndarray, overlay: np.ndarray, alpha: float = 1.0) -> np.ndarray:
    """
    "Plus lighter" composite: premultiplied overlay added to the base, clamped.

    Args:
        base: RGBA background
        overlay: Premultiplied RGBA layer of the same size
        alpha: Overall overlay opacity
    """
    result = _to_float(base) + _to_float(overlay) * alpha
    return _to_uint8(result)


def composite_screen(base: np.ndarray, overlay: np.ndarray, alpha: float = 1.0) -> np.ndarray:
    """Screen composite: 1 - (1 - base) * (1 - overlay)."""
    b = _to_float(base)
    o = _to_float(overlay) * alpha
    return _to_uint8(b + o - b * o)


# =============================================================================
# FILTERS
# =============================================================================


def apply_vignette(image: np.ndarray, intensity: float = 0.4) -> np.ndarray:
    """Darken toward the corners with a radial black gradient."""
    height, width = image.shape[:2]
    pixels = _to_float(image)

    cx = width / 2
    cy = height / 2
    max_radius = float(np.hypot(cx, cy))
    if max_radius == 0:
        return image.copy()

    px = np.arange(width, dtype=np.float64)[None, :] + 0.5
    py = np.arange(height, dtype=np.float64)[:, None] + 0.5
    fraction = np.hypot(px - cx, py - cy) / max_radius
    shade = np.interp(fraction, VIGNETTE_LOCATIONS, VIGNETTE_ALPHAS) * intensity

    keep = 1.0 - np.clip(shade, 0.0, 1.0)
    pixels[..., :3] *= keep[..., None]
    pixels[..., 3] = shade + pixels[..., 3] * keep
    return _to_uint8(pixels)


def _overlay_blend(base: float, top: float) -> float:
    if base < 0.5:
        return 2 * base * top
    return 1 - 2 * (1 - base) * (1 - top)


def apply_grain(image: np.ndarray, intensity: float = 0.05, seed: int = 42) -> np.ndarray:
    """
    Sparse film grain: random grey pixels overlay-blended at low opacity.

    The pixel count is width * height * intensity * 0.1. Positions and grey
    levels come from a SeededRandom, drawn as (x, y, grey) per pixel in
    sequence, so the result is reproducible per seed.
    """
    height, width = image.shape[:2]
    pixels = _to_float(image)
    rng = SeededRandom(seed)

    count = int(width * height * intensity * GRAIN_DENSITY)
    for _ in range(count):
        x = rng.next_int(0, width - 1)
        y = rng.next_int(0, height - 1)
        gray = rng.next_double(0.0, 1.0)
        for channel in range(3):
            value = pixels[y, x, channel]
            blended = _overlay_blend(value, gray)
            pixels[y, x, channel] = value + (blended - value) * GRAIN_ALPHA

    logger.debug("Applied %d grain points (seed=%d)", count, seed)
    return _to_uint8(pixels)


def apply_blur(image: np.ndarray, radius: float) -> np.ndarray:
    """Gaussian blur over both spatial axes; channels are blurred independently."""
    if radius <= 0:
        return image.copy()
    blurred = gaussian_filter(_to_float(image), sigma=(radius, radius, 0), mode="constant")
    return _to_uint8(blurred)


# =============================================================================
# LIGHT LAYER
# =============================================================================


def render_lights_layer(
    lights: Sequence[LightSource],
    size: tuple[int, int],
    glow_color: Color,
    scale: float = 1.0,
) -> np.ndarray | None:
    """
    Transparent layer with a soft glow and a bright core per light.

    Args:
        lights: Lights in output pixel coordinates
        size: (width, height) of the layer
        glow_color: Colour of every light
        scale: Size factor relative to the 512 reference canvas

    Returns:
        Premultiplied uint8 RGBA layer, or None when it cannot be allocated
    """
    width, height = int(size[0]), int(size[1])
    if width <= 0 or height <= 0:
        logger.warning("Cannot allocate a %dx%d light layer", width, height)
        return None
    try:
        canvas = Canvas(width, height)
    except MemoryError:
        logger.warning("Out of memory allocating a %dx%d light layer", width, height)
        return None

    for light in lights:
        outer = LIGHT_GLOW_RADIUS * light.intensity * scale
        inner = LIGHT_CORE_RADIUS * light.intensity * scale
        canvas.add_radial(
            light.position, outer * 2, glow_color, LIGHT_GLOW_ALPHAS, LIGHT_GLOW_LOCATIONS
        )
        canvas.add_circle(light.position, inner, glow_color.with_alpha(LIGHT_CORE_ALPHA))
    return canvas.to_rgba8()
