"""
End-to-end artwork generation.

One settings snapshot drives the whole pass:
    1. Background: warped fractal noise on the theme's gradient
    2. Growth: the bush L-system, bent toward the lights
    3. Overlay: segments rasterized with glow and bloom
    4. Composite: overlay (and optionally a blurred light layer) added to
       the background, then an optional vignette

Settings positions are in 512 x 512 reference-canvas pixels and are scaled
to the output size. Export sizes of 2048 and 4096 also scale stroke widths
and glow radius so the artwork keeps its look.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import NamedTuple

import numpy as np

from lumen import effects
from lumen.background import generate_background
from lumen.config import REFERENCE_CANVAS, GrowthSegment, LifeStage, LightSource, NoiseParameters, RenderParams
from lumen.gradient import Color, ColorGradient
from lumen.lsystem import LSystem
from lumen.render import rasterize_segments

logger = logging.getLogger(__name__)

GROWTH_GLOW_RADIUS = 8.0
GROWTH_GLOW_ALPHA = 0.45
GROWTH_LIGHT_COLOR_INFLUENCE = 0.35
VIGNETTE_INTENSITY = 0.4


class CosmicTheme(str, Enum):
    """Background themes; the value is the display name."""

    NEBULA = "Nebula"
    AURORA = "Aurora"
    DEEP_SPACE = "Deep Space"
    BIOLUMINESCENCE = "Biolum"

    @property
    def gradient(self) -> ColorGradient:
        return _THEME_GRADIENTS[self]()

    @property
    def description(self) -> str:
        return _THEME_DESCRIPTIONS[self]


_THEME_GRADIENTS = {
    CosmicTheme.NEBULA: ColorGradient.cosmic_nebula,
    CosmicTheme.AURORA: ColorGradient.ethereal_aurora,
    CosmicTheme.DEEP_SPACE: ColorGradient.deep_space,
    CosmicTheme.BIOLUMINESCENCE: ColorGradient.bioluminescence,
}

_THEME_DESCRIPTIONS = {
    CosmicTheme.NEBULA: "Purple-red cosmic nebula",
    CosmicTheme.AURORA: "Flowing northern lights",
    CosmicTheme.DEEP_SPACE: "Profound outer space",
    CosmicTheme.BIOLUMINESCENCE: "Deep sea bioluminescence",
}


@dataclass(frozen=True)
class ArtworkSettings:
    """
    Snapshot of the shell's controls.

    Lights are in reference-canvas pixels. `particle_speed` and
    `trail_length` only affect the shell's animation; they are carried so
    the exported record is complete.
    """

    theme: CosmicTheme = CosmicTheme.NEBULA
    life_stage: LifeStage = LifeStage.GROWTH
    seed: int = 42
    branch_angle: float = 25.0
    phototropism: float = 15.0
    cosmic_intensity: float = 0.6
    warp_strength: float = 25.0
    enable_warp: bool = True
    enable_vignette: bool = True
    frequency: float = 0.6
    octaves: int = 6
    bloom_intensity: float = 15.0  # Blur radius of the light layer
    glow_color: Color = Color(0.4, 0.9, 0.6)
    particle_speed: float = 50.0
    trail_length: float = 0.8
    lights: tuple[LightSource, ...] = field(default_factory=tuple)

    def with_lights(self, *lights: LightSource) -> ArtworkSettings:
        return replace(self, lights=tuple(lights))


@dataclass(frozen=True)
class SamplePreset:
    """Curated showcase configuration; light positions are normalised to [0, 1]."""

    name: str
    description: str
    seed: int
    theme: CosmicTheme
    life_stage: LifeStage
    branch_angle: float
    phototropism: float
    light_positions: tuple[tuple[float, float, float], ...]

    def to_settings(self, canvas_size: int = REFERENCE_CANVAS) -> ArtworkSettings:
        lights = tuple(
            LightSource((x * canvas_size, y * canvas_size), intensity)
            for x, y, intensity in self.light_positions
        )
        return ArtworkSettings(
            theme=self.theme,
            life_stage=self.life_stage,
            seed=self.seed,
            branch_angle=self.branch_angle,
            phototropism=self.phototropism,
            lights=lights,
        )

    @classmethod
    def showcase(cls) -> tuple[SamplePreset, ...]:
        return (
            cls(
                name="Cosmic Embrace",
                description="Balanced growth reaching for twin lights",
                seed=2024,
                theme=CosmicTheme.NEBULA,
                life_stage=LifeStage.BLOOM,
                branch_angle=25.0,
                phototropism=18.0,
                light_positions=((0.3, 0.4, 1.0), (0.7, 0.35, 0.9)),
            ),
            cls(
                name="Deep Sea Dreams",
                description="Bioluminescent life in the abyss",
                seed=8888,
                theme=CosmicTheme.BIOLUMINESCENCE,
                life_stage=LifeStage.TRANSCEND,
                branch_angle=22.0,
                phototropism=20.0,
                light_positions=((0.5, 0.25, 1.0), (0.25, 0.5, 0.7), (0.75, 0.5, 0.7)),
            ),
            cls(
                name="Aurora Dance",
                description="Life dancing under northern lights",
                seed=42,
                theme=CosmicTheme.AURORA,
                life_stage=LifeStage.GROWTH,
                branch_angle=28.0,
                phototropism=15.0,
                light_positions=((0.4, 0.3, 1.0), (0.6, 0.4, 0.85)),
            ),
        )


class Artwork(NamedTuple):
    """Result of one generation pass."""

    image: np.ndarray  # Opaque uint8 RGBA, (size, size, 4)
    background: np.ndarray
    overlay: np.ndarray  # Premultiplied growth layer
    segments: list[GrowthSegment]
    settings: ArtworkSettings
    size: int


# =============================================================================
# STAGES
# =============================================================================


def resolution_profile(size: int) -> tuple[float, float]:
    """(minimum step length, stroke scale) for an output size."""
    if size >= 4096:
        return 0.3, 4.0
    if size >= 2048:
        return 0.5, 2.0
    return 1.0, 1.0


def noise_parameters_for(settings: ArtworkSettings) -> NoiseParameters:
    return NoiseParameters.for_intensity(
        settings.cosmic_intensity,
        warp_strength=settings.warp_strength,
        enable_warp=settings.enable_warp,
        frequency=settings.frequency,
        octaves=settings.octaves,
    )


def render_params_for(settings: ArtworkSettings, size: int = REFERENCE_CANVAS) -> RenderParams:
    """Growth styling for the given output size, with lights scaled to it."""
    _, stroke_scale = resolution_profile(size)
    light_scale = size / REFERENCE_CANVAS
    return RenderParams(
        base_width=(4.0 + settings.life_stage.value * 0.5) * stroke_scale,
        width_decay=0.65,
        angle_variation=8.0,
        enable_glow=True,
        glow_radius=GROWTH_GLOW_RADIUS * stroke_scale,
        glow_alpha=GROWTH_GLOW_ALPHA,
        gradient=ColorGradient.light_of_life(),
        depth_color_fade=True,
        light_sources=tuple(light.scaled(light_scale) for light in settings.lights),
        phototropism_strength=settings.phototropism,
        light_color_influence=GROWTH_LIGHT_COLOR_INFLUENCE,
        random_seed=settings.seed,
    )


def step_length_for(size: int, iterations: int) -> float:
    min_step, _ = resolution_profile(size)
    return max(min_step, size / 3.0**iterations)


def generate_background_for(
    settings: ArtworkSettings, size: int = REFERENCE_CANVAS
) -> np.ndarray | None:
    return generate_background(
        size,
        size,
        params=noise_parameters_for(settings),
        seed=settings.seed,
        gradient=settings.theme.gradient,
        grain=True,
    )


def grow(settings: ArtworkSettings, size: int = REFERENCE_CANVAS) -> list[GrowthSegment]:
    """Growth segments for the settings at the given output size."""
    system = LSystem.bush(settings.branch_angle)
    iterations = settings.life_stage.iterations
    return system.generate_segments(
        iterations,
        (size, size),
        step_length_for(size, iterations),
        render_params_for(settings, size),
    )


def render_artwork(
    settings: ArtworkSettings,
    size: int = REFERENCE_CANVAS,
    include_lights: bool = False,
) -> Artwork | None:
    """
    Full generation pass.

    Args:
        settings: Control snapshot
        size: Square output size in pixels
        include_lights: Also composite the blurred light-source layer

    Returns:
        Artwork, or None when any buffer cannot be allocated
    """
    background = generate_background_for(settings, size)
    if background is None:
        return None

    params = render_params_for(settings, size)
    segments = grow(settings, size)
    overlay = rasterize_segments(segments, (size, size), params)
    if overlay is None:
        return None

    image = effects.composite_additive(background, overlay)

    if include_lights and settings.lights:
        light_scale = size / REFERENCE_CANVAS
        layer = effects.render_lights_layer(
            params.light_sources, (size, size), settings.glow_color, light_scale
        )
        if layer is None:
            return None
        layer = effects.apply_blur(layer, settings.bloom_intensity * light_scale)
        image = effects.composite_additive(image, layer)

    if settings.enable_vignette:
        image = effects.apply_vignette(image, VIGNETTE_INTENSITY)

    logger.debug(
        "Rendered %dx%d artwork: stage=%s theme=%s seed=%d segments=%d",
        size, size, settings.life_stage.label, settings.theme.value, settings.seed, len(segments),
    )
    return Artwork(image, background, overlay, segments, settings, size)
