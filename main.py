"""
Lumen - Generative Growth Demo

Walks the whole pipeline:
1. Render each showcase preset (background, growth, glow, vignette)
2. Export its parameter record and check that it regenerates exactly
3. Play the challenge catalog with a fixed light placement and rate it

Images, records and a preview figure are written to ./output.
"""

from pathlib import Path

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt
import numpy as np

from lumen.challenges import Achievement, Challenge, best_achievement, evaluate_challenge, unlocked_after
from lumen.config import LightSource
from lumen.params import ParameterSet
from lumen.pipeline import ArtworkSettings, SamplePreset, grow, render_artwork
from lumen.visualization import plot_artwork, plot_challenge, save_image

OUTPUT_DIR = Path("output")
CANVAS = 512


def render_showcase() -> list:
    """Render every showcase preset and verify its exported record."""
    artworks = []
    for preset in SamplePreset.showcase():
        print(f"\n{preset.name}: {preset.description}")
        settings = preset.to_settings(CANVAS)

        artwork = render_artwork(settings, CANVAS, include_lights=True)
        if artwork is None:
            print("  Render failed, skipping")
            continue
        print(f"  Stage {settings.life_stage.label}, theme {settings.theme.value}, seed {settings.seed}")
        print(f"  Segments: {len(artwork.segments)}")

        slug = preset.name.lower().replace(" ", "_")
        save_image(artwork.image, str(OUTPUT_DIR / f"{slug}.png"))

        record = ParameterSet.from_settings(settings, canvas_size=CANVAS)
        (OUTPUT_DIR / f"{slug}.json").write_text(record.to_json())

        reloaded = ParameterSet.from_json(record.to_json())
        regenerated = render_artwork(reloaded.to_settings(), reloaded.canvas_size, include_lights=True)
        identical = regenerated is not None and np.array_equal(regenerated.image, artwork.image)
        print(f"  Record regenerates identically: {identical}")

        artworks.append(artwork)
    return artworks


def light_above_each_target(challenge: Challenge) -> tuple[LightSource, ...]:
    """Naive strategy: one light per target, up to the budget."""
    return tuple(
        LightSource((float(t.position[0]), float(t.position[1])), 1.0)
        for t in challenge.targets[: challenge.max_lights]
    )


def play_challenges() -> list:
    """Score every challenge with the naive strategy and track unlocks."""
    achievements: dict[int, Achievement] = {}
    unlocked = frozenset({0})
    results = []

    for index, challenge in enumerate(Challenge.presets()):
        lights = light_above_each_target(challenge)
        settings = ArtworkSettings(seed=7, phototropism=25.0, lights=lights)
        segments = grow(settings, CANVAS)
        result = evaluate_challenge(challenge, segments, lights_used=len(lights))

        locked = "" if index in unlocked else " (locked)"
        print(f"\n{challenge.name}{locked}: {challenge.description}")
        for target in result.challenge.targets:
            mark = "reached" if target.is_reached else "missed"
            print(
                f"  Target {target.position}: {target.current_coverage:.0%} "
                f"(need {target.required_coverage:.0%}) {mark}"
            )
        print(f"  Score: {result.score:.1f}")

        if result.stars is not None:
            print(f"  {result.stars} stars: {result.explanation}")
            achievements[index] = best_achievement(
                achievements.get(index), Achievement(result.stars, result.average_coverage)
            )
            unlocked = unlocked_after(index, result.stars, unlocked)

        results.append(result)

    print(f"\nUnlocked challenges: {sorted(unlocked)}")
    return results


def main() -> None:
    print("\n" + "=" * 60)
    print("  LUMEN: Generative Growth Toward Light")
    print("=" * 60)

    OUTPUT_DIR.mkdir(exist_ok=True)

    print("\n" + "=" * 60)
    print("PART 1: Showcase presets")
    print("=" * 60)
    artworks = render_showcase()

    print("\n" + "=" * 60)
    print("PART 2: Challenge mode")
    print("=" * 60)
    results = play_challenges()

    fig, axes = plt.subplots(1, len(artworks) + 1, figsize=(6 * (len(artworks) + 1), 6), squeeze=False)
    axes = axes[0]
    for ax, artwork in zip(axes, artworks):
        plot_artwork(artwork, ax=ax)
    plot_challenge(results[0], ax=axes[-1])
    fig.tight_layout()
    fig.savefig(OUTPUT_DIR / "preview.png", dpi=100)
    plt.close(fig)

    print("\n" + "=" * 60)
    print("Demo complete!")
    print("=" * 60)
    print(f"\nImages, parameter records and preview written to {OUTPUT_DIR}/")


if __name__ == "__main__":
    main()
