"""Tests for themes, presets and end-to-end artwork generation."""

import numpy as np
import pytest

from lumen.config import LifeStage, LightSource
from lumen.gradient import ColorGradient
from lumen.lsystem import LSystem
from lumen.pipeline import (
    ArtworkSettings,
    CosmicTheme,
    SamplePreset,
    grow,
    render_artwork,
    render_params_for,
    resolution_profile,
    step_length_for,
)

SIZE = 64


def small_settings(**overrides) -> ArtworkSettings:
    """Seed-stage settings with one light, cheap to render."""
    defaults = dict(
        life_stage=LifeStage.SEED,
        seed=11,
        lights=(LightSource((300.0, 200.0), 1.0),),
    )
    defaults.update(overrides)
    return ArtworkSettings(**defaults)


class TestThemes:
    def test_theme_gradients(self) -> None:
        assert CosmicTheme.NEBULA.gradient == ColorGradient.cosmic_nebula()
        assert CosmicTheme.AURORA.gradient == ColorGradient.ethereal_aurora()
        assert CosmicTheme.DEEP_SPACE.gradient == ColorGradient.deep_space()
        assert CosmicTheme.BIOLUMINESCENCE.gradient == ColorGradient.bioluminescence()

    def test_theme_names(self) -> None:
        assert [t.value for t in CosmicTheme] == ["Nebula", "Aurora", "Deep Space", "Biolum"]
        assert CosmicTheme("Biolum").description == "Deep sea bioluminescence"


class TestLifeStage:
    def test_iterations_follow_value(self) -> None:
        assert [stage.iterations for stage in LifeStage] == [1, 2, 3, 4, 5]
        assert LifeStage.BLOOM.label == "Bloom"
        assert LifeStage.TRANSCEND.description == "Becoming one with light"


class TestShowcase:
    def test_presets(self) -> None:
        presets = SamplePreset.showcase()

        assert [p.name for p in presets] == ["Cosmic Embrace", "Deep Sea Dreams", "Aurora Dance"]
        assert [p.seed for p in presets] == [2024, 8888, 42]
        assert presets[1].theme is CosmicTheme.BIOLUMINESCENCE
        assert presets[1].life_stage is LifeStage.TRANSCEND

    def test_to_settings_scales_lights(self) -> None:
        settings = SamplePreset.showcase()[0].to_settings()

        assert settings.seed == 2024
        assert settings.branch_angle == 25.0
        assert settings.phototropism == 18.0
        assert settings.lights[0].position == pytest.approx((0.3 * 512, 0.4 * 512))
        assert settings.lights[1].intensity == 0.9


class TestResolution:
    def test_profiles(self) -> None:
        assert resolution_profile(512) == (1.0, 1.0)
        assert resolution_profile(2048) == (0.5, 2.0)
        assert resolution_profile(4096) == (0.3, 4.0)

    def test_step_length(self) -> None:
        assert step_length_for(512, 3) == pytest.approx(512 / 27)
        assert step_length_for(512, 6) == 1.0
        assert step_length_for(4096, 9) == 0.3

    def test_render_params_scale_with_size(self) -> None:
        settings = small_settings(life_stage=LifeStage.GROWTH)
        base = render_params_for(settings, 512)
        large = render_params_for(settings, 2048)

        assert base.base_width == pytest.approx(5.5)
        assert base.glow_radius == 8.0
        assert base.glow_alpha == 0.45
        assert base.light_color_influence == 0.35
        assert base.random_seed == 11
        assert large.base_width == pytest.approx(11.0)
        assert large.glow_radius == 16.0
        assert large.light_sources[0].position == pytest.approx((1200.0, 800.0))


class TestGrow:
    def test_matches_bush(self) -> None:
        settings = small_settings(life_stage=LifeStage.SPROUT, branch_angle=30.0)
        expected = LSystem.bush(30.0).generate_segments(
            2, (SIZE, SIZE), step_length_for(SIZE, 2), render_params_for(settings, SIZE)
        )

        assert grow(settings, SIZE) == expected


class TestRenderArtwork:
    def test_output(self) -> None:
        artwork = render_artwork(small_settings(), SIZE)

        assert artwork.image.shape == (SIZE, SIZE, 4)
        assert artwork.image.dtype == np.uint8
        assert (artwork.image[..., 3] == 255).all()
        assert len(artwork.segments) == 8
        assert artwork.size == SIZE

    def test_deterministic(self) -> None:
        a = render_artwork(small_settings(), SIZE)
        b = render_artwork(small_settings(), SIZE)

        assert a.image.tobytes() == b.image.tobytes()
        assert a.segments == b.segments

    def test_growth_brightens_background(self) -> None:
        """The additive overlay never darkens a pixel."""
        artwork = render_artwork(small_settings(enable_vignette=False), SIZE)

        assert (artwork.image[..., :3] >= artwork.background[..., :3]).all()
        assert (artwork.image[..., :3] > artwork.background[..., :3]).any()

    def test_vignette_darkens_corners(self) -> None:
        plain = render_artwork(small_settings(enable_vignette=False), SIZE)
        vignetted = render_artwork(small_settings(enable_vignette=True), SIZE)

        assert vignetted.image[0, 0, :3].sum() <= plain.image[0, 0, :3].sum()
        assert not np.array_equal(vignetted.image, plain.image)

    def test_light_layer(self) -> None:
        settings = small_settings(enable_vignette=False)
        without = render_artwork(settings, SIZE)
        with_lights = render_artwork(settings, SIZE, include_lights=True)

        assert with_lights.image.astype(int).sum() > without.image.astype(int).sum()

    def test_no_result_for_empty_canvas(self) -> None:
        assert render_artwork(small_settings(), 0) is None
