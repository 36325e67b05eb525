"""
Challenge mode: target zones, star ratings and achievement bookkeeping.

A challenge asks the player to grow a structure that covers every target
zone while placing at most `max_lights` lights. Everything here is a pure
function of its inputs; catalog entries are never mutated, and evaluation
returns fresh values for the calling layer to keep.

Star rating table (first match wins):
    coverage < 0.4                                          -> 0
    lights <= max and coverage >= 0.75                      -> 3
    (lights <= max and coverage >= 0.5)
        or (lights < max and coverage >= 0.4)               -> 2
    otherwise                                               -> 1
"""

from __future__ import annotations

import dataclasses
import logging
import math
from collections.abc import Sequence
from dataclasses import dataclass
from typing import NamedTuple

from lumen.config import GrowthSegment, Point
from lumen.coverage import DEFAULT_SAMPLE_COUNT, calculate_coverage

logger = logging.getLogger(__name__)

EVALUATION_SAMPLE_COUNT = 10
MIN_STAR_COVERAGE = 0.4
THREE_STAR_COVERAGE = 0.75
TWO_STAR_COVERAGE = 0.5


# =============================================================================
# STAR RATING
# =============================================================================


def stars_for(lights_used: int, total_coverage: float, max_lights: int) -> int:
    """
    Star rating 0-3 from light usage and average coverage.

    Only meaningful once every target of the challenge has been reached;
    per-target completion is not checked here.
    """
    if total_coverage < MIN_STAR_COVERAGE:
        return 0
    if lights_used <= max_lights and total_coverage >= THREE_STAR_COVERAGE:
        return 3
    if (lights_used <= max_lights and total_coverage >= TWO_STAR_COVERAGE) or (
        lights_used < max_lights and total_coverage >= MIN_STAR_COVERAGE
    ):
        return 2
    return 1


def star_explanation(lights_used: int, total_coverage: float, max_lights: int) -> str:
    """Human-readable reason for the rating stars_for gives the same inputs."""
    stars = stars_for(lights_used, total_coverage, max_lights)
    coverage_pct = int(total_coverage * 100)

    if stars == 3:
        return f"Perfect! {coverage_pct}% coverage with {lights_used}/{max_lights} lights"
    if stars == 2:
        if total_coverage < THREE_STAR_COVERAGE:
            return f"Great! Need {75 - coverage_pct}% more coverage for 3 stars"
        return f"Great! Use {lights_used - max_lights} fewer lights for 3 stars"
    if stars == 1:
        return "Complete! Optimize lights or coverage for more stars"
    return f"Need {40 - coverage_pct}% more coverage"


# =============================================================================
# TARGETS AND CHALLENGES
# =============================================================================


@dataclass(frozen=True)
class ChallengeTarget:
    """
    Circular zone the growth has to fill.

    `is_reached` and `current_coverage` are scoring outputs; `scored` returns
    a copy with them recomputed instead of updating this instance.
    """

    position: Point
    radius: float
    required_coverage: float  # Fraction of the zone, [0, 1]
    is_reached: bool = False
    current_coverage: float = 0.0

    def check_coverage(self, segment_end: Point) -> bool:
        """Simple endpoint test: does a segment end inside the zone?"""
        distance = math.hypot(
            segment_end[0] - self.position[0], segment_end[1] - self.position[1]
        )
        return distance <= self.radius

    def calculate_grid_coverage(
        self, segments: Sequence[GrowthSegment], sample_count: int = DEFAULT_SAMPLE_COUNT
    ) -> float:
        return calculate_coverage(self, segments, sample_count)

    def scored(
        self, segments: Sequence[GrowthSegment], sample_count: int = EVALUATION_SAMPLE_COUNT
    ) -> ChallengeTarget:
        coverage = self.calculate_grid_coverage(segments, sample_count)
        return dataclasses.replace(
            self,
            is_reached=coverage >= self.required_coverage,
            current_coverage=coverage,
        )

    def scaled(self, factor: float) -> ChallengeTarget:
        """Same zone on a canvas `factor` times the 512 reference size."""
        return dataclasses.replace(
            self,
            position=(self.position[0] * factor, self.position[1] * factor),
            radius=self.radius * factor,
        )


@dataclass(frozen=True)
class Challenge:
    """A named set of targets, a light budget and a difficulty from 1 to 5."""

    name: str
    description: str
    max_lights: int
    targets: tuple[ChallengeTarget, ...]
    difficulty: int

    @property
    def is_completed(self) -> bool:
        return all(target.is_reached for target in self.targets)

    @property
    def progress(self) -> float:
        """Fraction of targets reached."""
        if not self.targets:
            return 0.0
        reached = sum(1 for target in self.targets if target.is_reached)
        return reached / len(self.targets)

    def calculate_stars(self, lights_used: int, total_coverage: float) -> int:
        return stars_for(lights_used, total_coverage, self.max_lights)

    def star_explanation(self, lights_used: int, total_coverage: float) -> str:
        return star_explanation(lights_used, total_coverage, self.max_lights)

    @classmethod
    def presets(cls) -> tuple[Challenge, ...]:
        """The challenge catalog, easiest first, on a 512 x 512 canvas."""
        return (
            cls(
                name="First Light",
                description="Guide life to reach the beacon",
                max_lights=1,
                targets=(ChallengeTarget((256, 150), 55, 0.4),),
                difficulty=1,
            ),
            cls(
                name="Twin Stars",
                description="Reach both light sources with one tree",
                max_lights=2,
                targets=(
                    ChallengeTarget((150, 180), 50, 0.35),
                    ChallengeTarget((362, 180), 50, 0.35),
                ),
                difficulty=2,
            ),
            cls(
                name="Guardian's Trial",
                description="Illuminate all corners with limited light",
                max_lights=3,
                targets=(
                    ChallengeTarget((100, 120), 45, 0.3),
                    ChallengeTarget((412, 120), 45, 0.3),
                    ChallengeTarget((256, 80), 45, 0.3),
                ),
                difficulty=3,
            ),
            cls(
                name="Cosmic Bloom",
                description="Reach all four quadrants - master the phototropism",
                max_lights=2,
                targets=(
                    ChallengeTarget((128, 128), 40, 0.25),
                    ChallengeTarget((384, 128), 40, 0.25),
                    ChallengeTarget((128, 256), 40, 0.25),
                    ChallengeTarget((384, 256), 40, 0.25),
                ),
                difficulty=4,
            ),
            cls(
                name="Nebula Master",
                description="The ultimate challenge - reach all with minimal light",
                max_lights=2,
                targets=(
                    ChallengeTarget((80, 100), 35, 0.2),
                    ChallengeTarget((432, 100), 35, 0.2),
                    ChallengeTarget((180, 200), 35, 0.2),
                    ChallengeTarget((332, 200), 35, 0.2),
                    ChallengeTarget((256, 100), 35, 0.2),
                ),
                difficulty=5,
            ),
        )


# =============================================================================
# EVALUATION
# =============================================================================


class ChallengeResult(NamedTuple):
    """Outcome of scoring one segment set against a challenge."""

    challenge: Challenge  # Copy with scored targets
    score: float  # Average coverage x 100
    lights_used: int
    stars: int | None  # None until every target is reached
    explanation: str | None

    @property
    def average_coverage(self) -> float:
        return self.score / 100

    @property
    def reached_count(self) -> int:
        return sum(1 for target in self.challenge.targets if target.is_reached)


def evaluate_challenge(
    challenge: Challenge,
    segments: Sequence[GrowthSegment],
    lights_used: int,
    sample_count: int = EVALUATION_SAMPLE_COUNT,
) -> ChallengeResult:
    """
    Score every target and rate the attempt.

    Stars and their explanation are only produced when all targets reach
    their own required coverage.
    """
    targets = tuple(target.scored(segments, sample_count) for target in challenge.targets)
    scored = dataclasses.replace(challenge, targets=targets)

    average = sum(t.current_coverage for t in targets) / len(targets) if targets else 0.0

    stars = None
    explanation = None
    if scored.is_completed:
        stars = scored.calculate_stars(lights_used, average)
        explanation = scored.star_explanation(lights_used, average)

    logger.debug(
        "Challenge %r: %d/%d targets, average coverage %.3f, stars=%s",
        challenge.name, sum(t.is_reached for t in targets), len(targets), average, stars,
    )
    return ChallengeResult(scored, average * 100, lights_used, stars, explanation)


# =============================================================================
# ACHIEVEMENTS
# =============================================================================


class Achievement(NamedTuple):
    stars: int
    coverage: float


def best_achievement(existing: Achievement | None, new: Achievement) -> Achievement:
    """Keep more stars, or equal stars with strictly higher coverage."""
    if existing is None:
        return new
    if new.stars > existing.stars or (
        new.stars == existing.stars and new.coverage > existing.coverage
    ):
        return new
    return existing


def unlocked_after(
    challenge_index: int, stars: int, unlocked: frozenset[int], total: int | None = None
) -> frozenset[int]:
    """Unlocked challenge indices after a rated attempt; one star opens the next."""
    if total is None:
        total = len(Challenge.presets())
    if stars >= 1 and challenge_index + 1 < total:
        return unlocked | {challenge_index + 1}
    return unlocked
