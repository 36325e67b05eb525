"""Tests for star ratings, the challenge catalog and evaluation."""

import dataclasses

import pytest

from lumen.challenges import (
    Achievement,
    Challenge,
    ChallengeTarget,
    best_achievement,
    evaluate_challenge,
    star_explanation,
    stars_for,
    unlocked_after,
)
from lumen.config import GrowthSegment
from lumen.gradient import Color


def make_segment(start, end) -> GrowthSegment:
    white = Color(1.0, 1.0, 1.0)
    return GrowthSegment(start, end, 0, 0.0, 0, 1.0, white, white)


def full_canvas_hatch(size: float = 512.0, spacing: float = 4.0) -> list[GrowthSegment]:
    """Horizontal lines dense enough to cover every target on the canvas."""
    segments = []
    y = 0.0
    while y <= size:
        segments.append(make_segment((0.0, y), (size, y)))
        y += spacing
    return segments


class TestStarsFor:
    """The four-branch rating table."""

    def test_three_stars(self) -> None:
        assert stars_for(1, 0.8, 1) == 3
        assert stars_for(1, 0.75, 1) == 3

    def test_over_budget_with_good_coverage_is_one_star(self) -> None:
        """Two lights on a one-light budget fails both star-two clauses."""
        assert stars_for(2, 0.8, 1) == 1

    def test_zero_stars_below_minimum_coverage(self) -> None:
        assert stars_for(5, 0.3, 1) == 0
        assert stars_for(0, 0.39, 3) == 0

    def test_two_stars_within_budget(self) -> None:
        assert stars_for(1, 0.6, 1) == 2
        assert stars_for(1, 0.5, 1) == 2

    def test_two_stars_under_budget_with_low_coverage(self) -> None:
        assert stars_for(1, 0.45, 2) == 2

    def test_one_star_at_budget_with_low_coverage(self) -> None:
        assert stars_for(1, 0.45, 1) == 1


class TestStarExplanation:
    def test_three_stars(self) -> None:
        assert star_explanation(1, 0.8, 1) == "Perfect! 80% coverage with 1/1 lights"

    def test_two_stars_needs_coverage(self) -> None:
        assert star_explanation(1, 0.6, 1) == "Great! Need 15% more coverage for 3 stars"

    def test_one_star(self) -> None:
        assert star_explanation(2, 0.8, 1) == "Complete! Optimize lights or coverage for more stars"

    def test_zero_stars(self) -> None:
        assert star_explanation(5, 0.3, 1) == "Need 10% more coverage"


class TestChallengeTarget:
    def test_endpoint_check(self) -> None:
        target = ChallengeTarget((100.0, 100.0), 20.0, 0.3)

        assert target.check_coverage((110.0, 110.0))
        assert target.check_coverage((120.0, 100.0))
        assert not target.check_coverage((121.0, 100.0))

    def test_scored_returns_copy(self) -> None:
        target = ChallengeTarget((100.0, 100.0), 20.0, 0.3)
        scored = target.scored(full_canvas_hatch(200.0))

        assert scored.is_reached
        assert scored.current_coverage == 1.0
        assert not target.is_reached
        assert target.current_coverage == 0.0

    def test_scaled(self) -> None:
        target = ChallengeTarget((256.0, 150.0), 55.0, 0.4).scaled(2.0)

        assert target.position == (512.0, 300.0)
        assert target.radius == 110.0
        assert target.required_coverage == 0.4


class TestCatalog:
    def test_presets(self) -> None:
        presets = Challenge.presets()

        assert [c.name for c in presets] == [
            "First Light",
            "Twin Stars",
            "Guardian's Trial",
            "Cosmic Bloom",
            "Nebula Master",
        ]
        assert [c.max_lights for c in presets] == [1, 2, 3, 2, 2]
        assert [c.difficulty for c in presets] == [1, 2, 3, 4, 5]
        assert [len(c.targets) for c in presets] == [1, 2, 3, 4, 5]

    def test_first_light_geometry(self) -> None:
        target = Challenge.presets()[0].targets[0]

        assert target.position == (256, 150)
        assert target.radius == 55
        assert target.required_coverage == 0.4

    def test_progress_and_completion(self) -> None:
        challenge = Challenge.presets()[1]
        assert challenge.progress == 0.0
        assert not challenge.is_completed

        first, second = challenge.targets
        half = dataclasses.replace(challenge, targets=(dataclasses.replace(first, is_reached=True), second))
        assert half.progress == 0.5
        assert not half.is_completed

        full = dataclasses.replace(
            challenge, targets=tuple(dataclasses.replace(t, is_reached=True) for t in challenge.targets)
        )
        assert full.progress == 1.0
        assert full.is_completed

    def test_methods_delegate_to_table(self) -> None:
        challenge = Challenge.presets()[0]

        assert challenge.calculate_stars(1, 0.8) == stars_for(1, 0.8, 1)
        assert challenge.star_explanation(1, 0.8) == star_explanation(1, 0.8, 1)


class TestEvaluateChallenge:
    def test_no_growth(self) -> None:
        challenge = Challenge.presets()[0]
        result = evaluate_challenge(challenge, [], lights_used=1)

        assert result.score == 0.0
        assert result.stars is None
        assert result.explanation is None
        assert result.reached_count == 0

    def test_full_coverage_earns_three_stars(self) -> None:
        challenge = Challenge.presets()[0]
        result = evaluate_challenge(challenge, full_canvas_hatch(), lights_used=1)

        assert result.score == pytest.approx(100.0)
        assert result.average_coverage == pytest.approx(1.0)
        assert result.stars == 3
        assert result.explanation == "Perfect! 100% coverage with 1/1 lights"
        assert result.challenge.is_completed

    def test_over_budget_still_rated(self) -> None:
        challenge = Challenge.presets()[0]
        result = evaluate_challenge(challenge, full_canvas_hatch(), lights_used=3)

        assert result.stars == 1

    def test_partial_reach_has_no_stars(self) -> None:
        """Covering one of two targets gives a score but no rating."""
        challenge = Challenge.presets()[1]
        left_only = [make_segment((0.0, s.start[1]), (256.0, s.start[1])) for s in full_canvas_hatch()]

        result = evaluate_challenge(challenge, left_only, lights_used=1)

        assert result.reached_count == 1
        assert result.score == pytest.approx(50.0)
        assert result.stars is None

    def test_catalog_not_mutated(self) -> None:
        challenge = Challenge.presets()[0]
        evaluate_challenge(challenge, full_canvas_hatch(), lights_used=1)

        assert not challenge.targets[0].is_reached


class TestAchievements:
    def test_first_record_kept(self) -> None:
        new = Achievement(2, 0.6)

        assert best_achievement(None, new) == new

    def test_more_stars_wins(self) -> None:
        assert best_achievement(Achievement(1, 0.9), Achievement(2, 0.5)) == Achievement(2, 0.5)

    def test_fewer_stars_loses(self) -> None:
        assert best_achievement(Achievement(3, 0.8), Achievement(2, 0.99)) == Achievement(3, 0.8)

    def test_equal_stars_higher_coverage_wins(self) -> None:
        assert best_achievement(Achievement(2, 0.6), Achievement(2, 0.7)) == Achievement(2, 0.7)

    def test_tie_keeps_existing(self) -> None:
        existing = Achievement(2, 0.6)

        assert best_achievement(existing, Achievement(2, 0.6)) is existing

    def test_unlock_next_on_one_star(self) -> None:
        assert unlocked_after(0, 1, frozenset({0})) == frozenset({0, 1})

    def test_no_unlock_without_stars(self) -> None:
        assert unlocked_after(0, 0, frozenset({0})) == frozenset({0})

    def test_last_challenge_unlocks_nothing(self) -> None:
        unlocked = frozenset(range(5))

        assert unlocked_after(4, 3, unlocked) == unlocked
