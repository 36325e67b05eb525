"""
Colour gradients for backgrounds and growth shading.

A gradient is an ordered list of (position, colour) stops. Lookups clamp the
query to [0, 1], find the first bracketing pair of stops and interpolate each
RGB channel linearly. The output is always fully opaque.

The same lookup is used per pixel (background) and per segment (growth), so
there is a scalar version and a vectorised numpy version with identical
bracket semantics.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import NamedTuple

import numpy as np


class Color(NamedTuple):
    """RGBA colour with float channels in [0, 1]."""

    r: float
    g: float
    b: float
    a: float = 1.0

    def with_alpha(self, alpha: float) -> "Color":
        """Same colour with a different alpha component."""
        return self._replace(a=alpha)

    @property
    def rgb(self) -> tuple[float, float, float]:
        return (self.r, self.g, self.b)


@dataclass(frozen=True)
class ColorGradient:
    """
    Ordered colour stops with linear interpolation.

    Invariants (checked at construction):
        - at least one stop
        - positions non-decreasing
        - first position 0, last position 1
    """

    name: str
    stops: tuple[tuple[float, Color], ...]

    def __post_init__(self) -> None:
        if not self.stops:
            raise ValueError("Gradient needs at least one stop")
        positions = [position for position, _ in self.stops]
        if any(b < a for a, b in zip(positions, positions[1:])):
            raise ValueError("Gradient stop positions must be non-decreasing")
        if positions[0] != 0.0 or positions[-1] != 1.0:
            raise ValueError("Gradient must start at 0 and end at 1")

    def color_at(self, t: float) -> Color:
        """
        Interpolated colour at position t.

        t is clamped to [0, 1]. The first stop pair whose closed interval
        contains t is used; a zero-width pair yields its lower colour.
        """
        clamped = max(0.0, min(1.0, t))

        lower = self.stops[0]
        upper = self.stops[-1]
        for i in range(len(self.stops) - 1):
            if self.stops[i][0] <= clamped <= self.stops[i + 1][0]:
                lower = self.stops[i]
                upper = self.stops[i + 1]
                break

        span = upper[0] - lower[0]
        local_t = (clamped - lower[0]) / span if span > 0 else 0.0

        c1 = lower[1]
        c2 = upper[1]
        return Color(
            c1.r + (c2.r - c1.r) * local_t,
            c1.g + (c2.g - c1.g) * local_t,
            c1.b + (c2.b - c1.b) * local_t,
            1.0,
        )

    def colors_at(self, values: np.ndarray) -> np.ndarray:
        """
        Vectorised color_at.

        Args:
            values: Array of gradient positions, any shape

        Returns:
            Float64 array of shape values.shape + (3,) holding RGB in [0, 1]
        """
        t = np.clip(np.asarray(values, dtype=np.float64), 0.0, 1.0)
        positions = np.array([position for position, _ in self.stops], dtype=np.float64)
        rgb = np.array([color.rgb for _, color in self.stops], dtype=np.float64)

        last = len(self.stops) - 1
        lower = np.zeros(t.shape, dtype=np.intp)
        upper = np.full(t.shape, last, dtype=np.intp)
        matched = np.zeros(t.shape, dtype=bool)

        # First matching bracket wins, same as the scalar scan
        for i in range(last):
            hit = ~matched & (t >= positions[i]) & (t <= positions[i + 1])
            lower[hit] = i
            upper[hit] = i + 1
            matched |= hit

        span = positions[upper] - positions[lower]
        safe_span = np.where(span > 0, span, 1.0)
        local_t = np.where(span > 0, (t - positions[lower]) / safe_span, 0.0)

        c1 = rgb[lower]
        c2 = rgb[upper]
        return c1 + (c2 - c1) * local_t[..., None]

    # -------------------------------------------------------------------------
    # Presets
    # -------------------------------------------------------------------------

    @classmethod
    def cosmic_nebula(cls) -> "ColorGradient":
        """Mysterious purple-red nebula."""
        return cls(
            name="Cosmic Nebula",
            stops=(
                (0.0, Color(0.02, 0.01, 0.05)),
                (0.25, Color(0.1, 0.02, 0.15)),
                (0.5, Color(0.25, 0.05, 0.35)),
                (0.75, Color(0.5, 0.15, 0.5)),
                (1.0, Color(0.9, 0.7, 0.95)),
            ),
        )

    @classmethod
    def deep_space(cls) -> "ColorGradient":
        """Deep blue-black tones."""
        return cls(
            name="Deep Space",
            stops=(
                (0.0, Color(0.0, 0.0, 0.02)),
                (0.3, Color(0.02, 0.05, 0.12)),
                (0.6, Color(0.05, 0.15, 0.3)),
                (1.0, Color(0.2, 0.4, 0.7)),
            ),
        )

    @classmethod
    def ethereal_aurora(cls) -> "ColorGradient":
        """Flowing teal-green."""
        return cls(
            name="Ethereal Aurora",
            stops=(
                (0.0, Color(0.01, 0.03, 0.05)),
                (0.3, Color(0.02, 0.15, 0.2)),
                (0.5, Color(0.1, 0.4, 0.35)),
                (0.7, Color(0.3, 0.7, 0.5)),
                (1.0, Color(0.6, 0.95, 0.8)),
            ),
        )

    @classmethod
    def bioluminescence(cls) -> "ColorGradient":
        """Deep sea blue-green glow."""
        return cls(
            name="Bioluminescence",
            stops=(
                (0.0, Color(0.0, 0.02, 0.05)),
                (0.35, Color(0.0, 0.1, 0.2)),
                (0.6, Color(0.0, 0.35, 0.5)),
                (0.85, Color(0.1, 0.7, 0.8)),
                (1.0, Color(0.5, 1.0, 0.95)),
            ),
        )

    @classmethod
    def light_of_life(cls) -> "ColorGradient":
        """
        Growth gradient: forest green roots through yellow-green buds to the
        warm white of segments merged with light.
        """
        return cls(
            name="Light of Life",
            stops=(
                (0.0, Color(0.12, 0.25, 0.18)),
                (0.2, Color(0.2, 0.4, 0.28)),
                (0.4, Color(0.35, 0.6, 0.38)),
                (0.55, Color(0.5, 0.75, 0.45)),
                (0.7, Color(0.7, 0.88, 0.55)),
                (0.82, Color(0.9, 0.95, 0.7)),
                (0.92, Color(0.98, 0.98, 0.85)),
                (1.0, Color(1.0, 1.0, 0.95)),
            ),
        )

    @classmethod
    def golden_life(cls) -> "ColorGradient":
        """Warmer growth variant for sunset/fire looks."""
        return cls(
            name="Golden Life",
            stops=(
                (0.0, Color(0.25, 0.15, 0.1)),
                (0.3, Color(0.5, 0.3, 0.15)),
                (0.5, Color(0.8, 0.5, 0.2)),
                (0.7, Color(0.95, 0.7, 0.3)),
                (0.85, Color(1.0, 0.85, 0.5)),
                (1.0, Color(1.0, 0.95, 0.8)),
            ),
        )

    @classmethod
    def ethereal_cyan(cls) -> "ColorGradient":
        """Cool growth variant for deep space."""
        return cls(
            name="Ethereal Cyan",
            stops=(
                (0.0, Color(0.05, 0.15, 0.2)),
                (0.3, Color(0.1, 0.35, 0.45)),
                (0.5, Color(0.2, 0.6, 0.7)),
                (0.7, Color(0.4, 0.8, 0.85)),
                (0.85, Color(0.7, 0.95, 0.95)),
                (1.0, Color(0.9, 1.0, 1.0)),
            ),
        )

    @classmethod
    def background_presets(cls) -> tuple["ColorGradient", ...]:
        """The four background gradients, in theme order."""
        return (
            cls.cosmic_nebula(),
            cls.deep_space(),
            cls.ethereal_aurora(),
            cls.bioluminescence(),
        )
