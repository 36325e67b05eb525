"""
Domain-warped fractal noise backgrounds.

Pipeline per pixel:
    1. Optionally offset the sampling coordinate by two auxiliary warp
       fields (seed + 1000, seed + 2000), clamped to the image
    2. Sample the base field and normalise [-1, 1] -> [0, 1]
    3. Apply the gamma curve
    4. Optionally add position-keyed film grain (+/- 0.03)
    5. Map through the colour gradient to an opaque RGBA pixel

The whole buffer is computed with numpy in one pass; identical inputs give
byte-identical output.
"""

import logging

import numpy as np

from lumen.config import (
    WARP_LACUNARITY,
    WARP_OCTAVES,
    WARP_PERSISTENCE,
    WARP_SEED_OFFSETS,
    NoiseParameters,
)
from lumen.gradient import ColorGradient
from lumen.noise import PerlinNoise
from lumen.rng import UINT64_MASK

logger = logging.getLogger(__name__)

GRAIN_MULTIPLIER = 2654435761
GRAIN_AMPLITUDE = 0.06  # Full width of the grain offset range


def grain_offsets(seed: int, width: int, height: int) -> np.ndarray:
    """
    Deterministic grain offsets in [-0.03, 0.03).

    A multiplicative hash of (seed + pixel index) taken modulo 2^16. Keyed
    only on seed and position, never on a random stream.
    """
    index = np.arange(width * height, dtype=np.uint64).reshape(height, width)
    mixed = (np.uint64(seed & UINT64_MASK) + index) * np.uint64(GRAIN_MULTIPLIER)
    value = (mixed % np.uint64(65536)).astype(np.float64) / 65536.0
    return (value - 0.5) * GRAIN_AMPLITUDE


def _warp_coordinates(
    width: int, height: int, params: NoiseParameters, seed: int
) -> tuple[np.ndarray, np.ndarray]:
    """Warped and clamped integer sampling coordinates, shape (height, width)."""
    fields = [
        PerlinNoise(
            seed + offset,
            frequency=params.warp_frequency,
            octaves=WARP_OCTAVES,
            persistence=WARP_PERSISTENCE,
            lacunarity=WARP_LACUNARITY,
        ).noise_map(width, height)
        for offset in WARP_SEED_OFFSETS
    ]
    warp_x, warp_y = fields

    # Offsets truncate toward zero
    offset_x = np.trunc(warp_x * params.warp_strength).astype(np.int64)
    offset_y = np.trunc(warp_y * params.warp_strength).astype(np.int64)

    xs = np.arange(width, dtype=np.int64)[None, :] + offset_x
    ys = np.arange(height, dtype=np.int64)[:, None] + offset_y
    return np.clip(ys, 0, height - 1), np.clip(xs, 0, width - 1)


def noise_values(
    width: int,
    height: int,
    params: NoiseParameters,
    seed: int,
    grain: bool = True,
) -> np.ndarray:
    """
    Final normalised noise value per pixel, before colour mapping.

    Returns:
        Float64 array of shape (height, width) in [0, 1]
    """
    base = PerlinNoise(
        seed,
        frequency=params.frequency,
        octaves=params.octaves,
        persistence=params.persistence,
        lacunarity=params.lacunarity,
    ).noise_map(width, height)

    if params.enable_warp:
        ys, xs = _warp_coordinates(width, height, params, seed)
        value = base[ys, xs]
    else:
        value = base

    norm = np.clip(value * 0.5 + 0.5, 0.0, 1.0)
    norm = norm**params.gamma

    if grain:
        norm = np.clip(norm + grain_offsets(seed, width, height), 0.0, 1.0)
    return norm


def generate_background(
    width: int,
    height: int,
    params: NoiseParameters | None = None,
    seed: int = 42,
    gradient: ColorGradient | None = None,
    grain: bool = True,
) -> np.ndarray | None:
    """
    Generate an opaque background buffer.

    Args:
        width, height: Size in pixels
        params: Noise settings (defaults to NoiseParameters())
        seed: Seed for the base field; warp fields use seed + 1000/2000
        gradient: Colour mapping (defaults to Cosmic Nebula)
        grain: Add deterministic film grain

    Returns:
        uint8 array of shape (height, width, 4) with alpha 255, or None when
        the buffer cannot be allocated
    """
    if params is None:
        params = NoiseParameters()
    if gradient is None:
        gradient = ColorGradient.cosmic_nebula()

    if width <= 0 or height <= 0:
        logger.warning("Cannot allocate a %dx%d background", width, height)
        return None

    try:
        norm = noise_values(width, height, params, seed, grain)
        rgb = gradient.colors_at(norm)
        pixels = np.empty((height, width, 4), dtype=np.uint8)
    except MemoryError:
        logger.warning("Out of memory generating a %dx%d background", width, height)
        return None

    pixels[..., :3] = (rgb * 255).astype(np.uint8)
    pixels[..., 3] = 255
    logger.debug(
        "Generated %dx%d background (seed=%d, warp=%s, grain=%s)",
        width, height, seed, params.enable_warp, grain,
    )
    return pixels


def generate_perlin_background(
    width: int, height: int, frequency: float, octaves: int, seed: int
) -> np.ndarray | None:
    """Default warped background on the Deep Space gradient."""
    params = NoiseParameters(frequency=frequency, octaves=octaves)
    return generate_background(
        width, height, params=params, seed=seed, gradient=ColorGradient.deep_space()
    )
