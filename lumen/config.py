"""
Configuration and value types for the generative growth pipeline.

This module defines the constants, parameter bundles and records passed
between the background generator, the L-system engine, the rasterizer and
the challenge scorer.

Coordinates are image coordinates: x grows to the right, y grows downward,
headings are in degrees with -90 pointing "up" the canvas.

All records are immutable. A generation pass receives them as snapshots and
returns fresh results; nothing here is shared mutable state.
"""

import math
from dataclasses import dataclass, field
from enum import IntEnum
from typing import NamedTuple

from lumen.gradient import Color, ColorGradient

Point = tuple[float, float]

# Phototropism: linear attraction falloff, zero at and beyond this distance
ATTRACTION_RADIUS = 300.0
# Below this combined attraction magnitude no deflection is applied
ATTRACTION_EPSILON = 0.01
# Fraction of the angular difference applied per draw step, before clamping
DEFLECTION_DAMPING = 0.3

# Colouring: quadratic light falloff radius
LIGHT_FALLOFF_RADIUS = 400.0

# Turtle start: horizontal centre, near the bottom, pointing up
ROOT_HEIGHT_FRACTION = 0.88
INITIAL_HEADING = -90.0

# Auxiliary domain-warp fields
WARP_OCTAVES = 4
WARP_PERSISTENCE = 0.5
WARP_LACUNARITY = 2.0
WARP_SEED_OFFSETS = (1000, 2000)

# Canvas size the interactive shell works at; export sizes scale from it
REFERENCE_CANVAS = 512


class LightSource(NamedTuple):
    """A light the growth bends toward. Intensity in [0, 1]."""

    position: Point
    intensity: float = 1.0

    def attraction_vector(
        self, point: Point, max_distance: float = ATTRACTION_RADIUS
    ) -> Point:
        """
        Vector from point toward this light, scaled by a soft linear falloff.

        strength = intensity * max(0, 1 - distance / max_distance)

        Returns the zero vector when the point is within 1 unit of the light.
        """
        dx = self.position[0] - point[0]
        dy = self.position[1] - point[1]
        distance = math.hypot(dx, dy)

        if distance < 1:
            return (0.0, 0.0)

        strength = self.intensity * max(0.0, 1 - distance / max_distance)
        return ((dx / distance) * strength, (dy / distance) * strength)

    def scaled(self, factor: float) -> "LightSource":
        """Same light at a position scaled for another canvas size."""
        return LightSource(
            (self.position[0] * factor, self.position[1] * factor), self.intensity
        )


class GrowthSegment(NamedTuple):
    """
    One drawn segment of the growth structure.

    Segments are emitted in turtle order (not spatial order); `order` is the
    emission index and drives the animated reveal in the shell.
    """

    start: Point
    end: Point
    depth: int  # Branch nesting level
    light_intensity: float  # Light at the segment midpoint, [0, 1]
    order: int  # Emission sequence
    width: float
    color: Color
    glow_color: Color  # Alpha carries the glow strength


class LifeStage(IntEnum):
    """Complexity tier; the value is the L-system iteration count."""

    SEED = 1
    SPROUT = 2
    GROWTH = 3
    BLOOM = 4
    TRANSCEND = 5

    @property
    def label(self) -> str:
        return self.name.capitalize()

    @property
    def description(self) -> str:
        return _STAGE_DESCRIPTIONS[self]

    @property
    def iterations(self) -> int:
        return int(self.value)

    @property
    def base_color(self) -> Color:
        return _STAGE_COLORS[self]


_STAGE_DESCRIPTIONS = {
    LifeStage.SEED: "Origin of life, infinite potential",
    LifeStage.SPROUT: "First reach toward the light",
    LifeStage.GROWTH: "Life force flourishing",
    LifeStage.BLOOM: "Blooming into beauty",
    LifeStage.TRANSCEND: "Becoming one with light",
}

_STAGE_COLORS = {
    LifeStage.SEED: Color(0.2, 0.4, 0.3),
    LifeStage.SPROUT: Color(0.3, 0.6, 0.4),
    LifeStage.GROWTH: Color(0.4, 0.7, 0.5),
    LifeStage.BLOOM: Color(0.6, 0.85, 0.6),
    LifeStage.TRANSCEND: Color(0.8, 0.95, 0.9),
}


@dataclass(frozen=True)
class NoiseParameters:
    """
    Fractal noise settings for the background.

    Together with the seed and the gradient these fully determine the
    background buffer.
    """

    frequency: float = 0.6  # Base field cycles across the sampled domain
    octaves: int = 6
    persistence: float = 0.5  # Amplitude multiplier per octave
    lacunarity: float = 2.0  # Frequency multiplier per octave
    warp_frequency: float = 0.8
    warp_strength: float = 25.0  # Pixels of offset at unit warp noise
    gamma: float = 1.4
    enable_warp: bool = True

    @classmethod
    def for_intensity(
        cls,
        cosmic_intensity: float,
        warp_strength: float = 25.0,
        enable_warp: bool = True,
        frequency: float = 0.6,
        octaves: int = 6,
    ) -> "NoiseParameters":
        """
        Background settings driven by the shell's intensity slider.

        Lower intensity means a steeper gamma curve and a darker sky.
        """
        return cls(
            frequency=frequency,
            octaves=octaves,
            warp_strength=warp_strength,
            gamma=1.4 + (1.0 - cosmic_intensity) * 0.6,
            enable_warp=enable_warp,
        )


@dataclass(frozen=True)
class RenderParams:
    """Visual and phototropism settings for growth generation and rendering."""

    base_width: float = 6.0
    width_decay: float = 0.65  # Width multiplier per depth level
    angle_variation: float = 8.0  # Random jitter, +/- degrees per draw step
    enable_glow: bool = True
    glow_radius: float = 8.0
    glow_alpha: float = 0.4
    gradient: ColorGradient = field(default_factory=ColorGradient.light_of_life)
    depth_color_fade: bool = True  # Colour fades toward the tips

    # Phototropism
    light_sources: tuple[LightSource, ...] = ()
    phototropism_strength: float = 15.0  # Max deflection in degrees per step
    light_color_influence: float = 0.3

    random_seed: int = 42
    min_width: float = 0.5
