"""Smoke tests for the matplotlib previews."""

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt  # noqa: E402

from lumen.challenges import Challenge, evaluate_challenge  # noqa: E402
from lumen.config import LifeStage, LightSource  # noqa: E402
from lumen.pipeline import ArtworkSettings, render_artwork  # noqa: E402
from lumen.visualization import plot_artwork, plot_challenge, plot_growth_order, save_image  # noqa: E402


def small_artwork():
    settings = ArtworkSettings(life_stage=LifeStage.SPROUT, lights=(LightSource((256.0, 150.0), 1.0),))
    return render_artwork(settings, 64)


class TestPlots:
    def teardown_method(self) -> None:
        plt.close("all")

    def test_plot_artwork(self) -> None:
        ax = plot_artwork(small_artwork())

        assert len(ax.images) == 1
        assert "Sprout" in ax.get_title()

    def test_plot_growth_order(self) -> None:
        artwork = small_artwork()
        ax = plot_growth_order(artwork.segments, (64, 64))

        assert len(ax.collections) == 1
        assert str(len(artwork.segments)) in ax.get_title()

    def test_plot_challenge_catalog_entry(self) -> None:
        ax = plot_challenge(Challenge.presets()[2])

        assert len(ax.patches) == 3

    def test_plot_challenge_result(self) -> None:
        artwork = render_artwork(ArtworkSettings(life_stage=LifeStage.SEED), 512)
        result = evaluate_challenge(Challenge.presets()[0], artwork.segments, lights_used=0)

        ax = plot_challenge(result, artwork.segments, artwork.image)

        assert len(ax.patches) == 1
        assert "First Light" in ax.get_title()

    def test_save_image(self, tmp_path) -> None:
        path = tmp_path / "art.png"
        save_image(small_artwork().image, str(path))

        assert path.exists()
