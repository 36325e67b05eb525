"""
Lumen Generative Growth Module

Deterministic generative art: a branching structure grows toward
user-placed lights over a domain-warped noise sky, and challenge mode scores
how well the growth covers target zones.

Modules:
    config: Constants, value types and parameter bundles
    rng: Seeded uniform draws (Mersenne Twister)
    gradient: Colour stops and named gradient presets
    noise: Seeded fractal gradient noise
    background: Domain-warped noise backgrounds with film grain
    lsystem: L-system expansion, phototropism and the turtle interpreter
    render: Rasterization of growth segments with glow and bloom
    effects: Compositing, vignette, grain, blur and light layers
    coverage: Grid-sampled target coverage
    challenges: Challenge catalog, star ratings and achievements
    pipeline: Themes, showcase presets and end-to-end artwork generation
    params: Exported JSON parameter record
    visualization: matplotlib previews
"""

from lumen.background import generate_background, generate_perlin_background
from lumen.challenges import (
    Achievement,
    Challenge,
    ChallengeResult,
    ChallengeTarget,
    best_achievement,
    evaluate_challenge,
    star_explanation,
    stars_for,
    unlocked_after,
)
from lumen.config import GrowthSegment, LifeStage, LightSource, NoiseParameters, RenderParams
from lumen.coverage import calculate_coverage, distance_point_to_segment
from lumen.gradient import Color, ColorGradient
from lumen.lsystem import LSystem, grow, light_intensity_at, phototropism_angle
from lumen.params import ParameterSet
from lumen.pipeline import Artwork, ArtworkSettings, CosmicTheme, SamplePreset, render_artwork
from lumen.render import rasterize_segments, render_lsystem, render_simple
from lumen.rng import SeededRandom

__all__ = [
    # Config
    "GrowthSegment",
    "LifeStage",
    "LightSource",
    "NoiseParameters",
    "RenderParams",
    # Primitives
    "Color",
    "ColorGradient",
    "SeededRandom",
    # Background
    "generate_background",
    "generate_perlin_background",
    # Growth
    "LSystem",
    "grow",
    "light_intensity_at",
    "phototropism_angle",
    # Rendering
    "rasterize_segments",
    "render_lsystem",
    "render_simple",
    # Scoring
    "calculate_coverage",
    "distance_point_to_segment",
    "Achievement",
    "Challenge",
    "ChallengeResult",
    "ChallengeTarget",
    "best_achievement",
    "evaluate_challenge",
    "star_explanation",
    "stars_for",
    "unlocked_after",
    # Pipeline
    "Artwork",
    "ArtworkSettings",
    "CosmicTheme",
    "ParameterSet",
    "SamplePreset",
    "render_artwork",
]
