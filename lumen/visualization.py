"""
matplotlib previews for artwork, growth order and challenge targets.

Images are shown in pixel coordinates with y growing downward, matching the
generator's coordinate system, so overlays line up with the artwork.
"""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np

from lumen.challenges import Challenge, ChallengeResult
from lumen.config import GrowthSegment, LightSource
from lumen.pipeline import Artwork

REACHED_COLOR = "#4cd964"
UNREACHED_COLOR = "#ff9500"


def save_image(image: np.ndarray, path: str) -> None:
    """Write an RGBA buffer to disk (format from the file extension)."""
    import matplotlib.pyplot as plt

    plt.imsave(path, image)


def plot_lights(lights: Sequence[LightSource], ax, scale: float = 1.0) -> None:
    """Mark light positions, sized by intensity."""
    if not lights:
        return
    xs = [light.position[0] * scale for light in lights]
    ys = [light.position[1] * scale for light in lights]
    sizes = [40 + 160 * light.intensity for light in lights]
    ax.scatter(xs, ys, s=sizes, c="#fff6c8", edgecolors="white", linewidths=1.0, zorder=3)


def plot_artwork(artwork: Artwork, show_lights: bool = True, title: str | None = None, ax=None):
    """
    Show a finished artwork.

    Args:
        artwork: Result of pipeline.render_artwork
        show_lights: Mark the light sources on top
        title: Plot title (defaults to stage, theme and seed)
        ax: Matplotlib axis (optional, creates new figure if None)

    Returns:
        Matplotlib axis with the plot
    """
    import matplotlib.pyplot as plt

    if ax is None:
        _, ax = plt.subplots(figsize=(6, 6))

    ax.imshow(artwork.image, origin="upper", interpolation="nearest")
    if show_lights:
        plot_lights(artwork.settings.lights, ax, scale=artwork.size / 512)

    settings = artwork.settings
    if title is None:
        title = f"{settings.life_stage.label} / {settings.theme.value} / seed {settings.seed}"
    ax.set_title(title)
    ax.set_axis_off()
    return ax


def plot_growth_order(
    segments: Sequence[GrowthSegment],
    canvas_size: tuple[int, int],
    cmap: str = "viridis",
    ax=None,
):
    """Segments coloured by emission order, the order the shell reveals them in."""
    import matplotlib.pyplot as plt
    from matplotlib.collections import LineCollection

    if ax is None:
        _, ax = plt.subplots(figsize=(6, 6))

    if segments:
        lines = [[seg.start, seg.end] for seg in segments]
        order = np.array([seg.order for seg in segments], dtype=np.float64)
        widths = [max(0.5, seg.width * 0.5) for seg in segments]
        collection = LineCollection(lines, cmap=cmap, linewidths=widths)
        collection.set_array(order)
        ax.add_collection(collection)
        plt.colorbar(collection, ax=ax, label="Emission order")

    ax.set_xlim(0, canvas_size[0])
    ax.set_ylim(canvas_size[1], 0)
    ax.set_aspect("equal")
    ax.set_title(f"Growth order ({len(segments)} segments)")
    return ax


def plot_challenge(
    challenge: Challenge | ChallengeResult,
    segments: Sequence[GrowthSegment] = (),
    image: np.ndarray | None = None,
    ax=None,
):
    """
    Draw challenge targets, green when reached and orange otherwise.

    Accepts either a catalog entry or an evaluation result; for a result the
    per-target coverage is written next to each zone and the star rating
    goes into the title.
    """
    import matplotlib.pyplot as plt
    from matplotlib.patches import Circle

    if ax is None:
        _, ax = plt.subplots(figsize=(6, 6))

    result = challenge if isinstance(challenge, ChallengeResult) else None
    scored = result.challenge if result is not None else challenge

    if image is not None:
        ax.imshow(image, origin="upper", interpolation="nearest")
    for seg in segments:
        ax.plot(
            [seg.start[0], seg.end[0]],
            [seg.start[1], seg.end[1]],
            color="white",
            linewidth=max(0.5, seg.width * 0.4),
            alpha=0.7,
        )

    for target in scored.targets:
        color = REACHED_COLOR if target.is_reached else UNREACHED_COLOR
        ax.add_patch(
            Circle(target.position, target.radius, fill=False, edgecolor=color, linewidth=2)
        )
        if result is not None:
            ax.annotate(
                f"{int(target.current_coverage * 100)}% / {int(target.required_coverage * 100)}%",
                target.position,
                color=color,
                ha="center",
                va="center",
                fontsize=8,
            )

    title = f"{scored.name} (difficulty {scored.difficulty}, max {scored.max_lights} lights)"
    if result is not None and result.stars is not None:
        title += f"\n{result.stars} stars: {result.explanation}"
    ax.set_title(title)
    if image is None:
        ax.set_xlim(0, 512)
        ax.set_ylim(512, 0)
    ax.set_aspect("equal")
    return ax
