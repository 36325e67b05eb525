"""
Exported parameter record.

A flat JSON object the shell saves next to an artwork. Feeding it back
through `ParameterSet.to_settings` and `pipeline.render_artwork` at the same
canvas size regenerates the artwork exactly. Keys are camelCase; output is
pretty-printed with sorted keys.
"""

from __future__ import annotations

import json

from pydantic import BaseModel, ConfigDict, Field, field_validator

from lumen.config import LifeStage, LightSource
from lumen.gradient import Color
from lumen.pipeline import ArtworkSettings, CosmicTheme

# [x, y, intensity] in reference-canvas pixels
LightTriple = tuple[float, float, float]


class ParameterSet(BaseModel):
    """Everything needed to reproduce one artwork."""

    model_config = ConfigDict(populate_by_name=True)

    theme: str = Field(default=CosmicTheme.NEBULA.value, description="Theme name")
    life_stage: int = Field(default=3, ge=1, le=5, alias="lifeStage", description="Iterations 1-5")
    seed: int = Field(default=42, description="Seed for background and growth")
    frequency: float = Field(default=0.6, description="Background noise frequency")
    octaves: int = Field(default=6, description="Background noise octaves")
    bloom_intensity: float = Field(default=15.0, alias="bloomIntensity", description="Light blur radius")
    glow_color_r: float = Field(default=0.4, alias="glowColorR")
    glow_color_g: float = Field(default=0.9, alias="glowColorG")
    glow_color_b: float = Field(default=0.6, alias="glowColorB")
    particle_speed: float = Field(default=50.0, alias="particleSpeed")
    trail_length: float = Field(default=0.8, alias="trailLength")
    l_system_angle: float = Field(default=25.0, alias="lSystemAngle", description="Branch angle")
    light_positions: list[LightTriple] = Field(
        default_factory=list, alias="lightPositions", description="[[x, y, intensity], ...]"
    )

    # Regeneration extras; defaults match the interactive shell so older records load
    phototropism: float = Field(default=15.0, description="Max deflection per step")
    cosmic_intensity: float = Field(default=0.6, alias="cosmicIntensity")
    warp_strength: float = Field(default=25.0, alias="warpStrength")
    enable_warp: bool = Field(default=True, alias="enableWarp")
    enable_vignette: bool = Field(default=True, alias="enableVignette")
    canvas_size: int = Field(default=512, alias="canvasSize", description="Output size in pixels")

    @field_validator("theme")
    @classmethod
    def _known_theme(cls, value: str) -> str:
        CosmicTheme(value)
        return value

    @field_validator("light_positions")
    @classmethod
    def _intensity_in_range(cls, value: list[LightTriple]) -> list[LightTriple]:
        for _, _, intensity in value:
            if not 0.0 <= intensity <= 1.0:
                raise ValueError(f"Light intensity {intensity} outside [0, 1]")
        return value

    # -------------------------------------------------------------------------
    # JSON
    # -------------------------------------------------------------------------

    def to_json(self) -> str:
        return json.dumps(self.model_dump(by_alias=True), sort_keys=True, indent=2)

    @classmethod
    def from_json(cls, text: str | bytes) -> ParameterSet:
        """Parse a record; raises pydantic.ValidationError on malformed input."""
        return cls.model_validate_json(text)

    # -------------------------------------------------------------------------
    # Settings conversion
    # -------------------------------------------------------------------------

    @classmethod
    def from_settings(cls, settings: ArtworkSettings, canvas_size: int = 512) -> ParameterSet:
        return cls(
            theme=settings.theme.value,
            life_stage=int(settings.life_stage),
            seed=settings.seed,
            frequency=settings.frequency,
            octaves=settings.octaves,
            bloom_intensity=settings.bloom_intensity,
            glow_color_r=settings.glow_color.r,
            glow_color_g=settings.glow_color.g,
            glow_color_b=settings.glow_color.b,
            particle_speed=settings.particle_speed,
            trail_length=settings.trail_length,
            l_system_angle=settings.branch_angle,
            light_positions=[
                (light.position[0], light.position[1], light.intensity)
                for light in settings.lights
            ],
            phototropism=settings.phototropism,
            cosmic_intensity=settings.cosmic_intensity,
            warp_strength=settings.warp_strength,
            enable_warp=settings.enable_warp,
            enable_vignette=settings.enable_vignette,
            canvas_size=canvas_size,
        )

    def to_settings(self) -> ArtworkSettings:
        return ArtworkSettings(
            theme=CosmicTheme(self.theme),
            life_stage=LifeStage(self.life_stage),
            seed=self.seed,
            branch_angle=self.l_system_angle,
            phototropism=self.phototropism,
            cosmic_intensity=self.cosmic_intensity,
            warp_strength=self.warp_strength,
            enable_warp=self.enable_warp,
            enable_vignette=self.enable_vignette,
            frequency=self.frequency,
            octaves=self.octaves,
            bloom_intensity=self.bloom_intensity,
            glow_color=Color(self.glow_color_r, self.glow_color_g, self.glow_color_b),
            particle_speed=self.particle_speed,
            trail_length=self.trail_length,
            lights=tuple(LightSource((x, y), intensity) for x, y, intensity in self.light_positions),
        )
