"""
L-system growth with phototropism.

Two stages:
    1. Expansion: rewrite every symbol of the axiom with its rule, a fixed
       number of times. Symbols without a rule pass through unchanged.
    2. Interpretation: a turtle walks the expanded string and emits one
       GrowthSegment per draw symbol.

Turtle alphabet:
    F, G   draw forward one step (jitter + phototropism for this step only)
    +      turn by +angle
    -      turn by -angle
    [      push (position, heading, depth), depth + 1
    ]      pop; no-op on an empty stack
    other  ignored

The interpreter is a single loop over an explicit stack. Random jitter is
drawn from one SeededRandom in strict emission order, so the same seed and
parameters always reproduce the same segment list.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import NamedTuple

from lumen.config import (
    ATTRACTION_EPSILON,
    DEFLECTION_DAMPING,
    INITIAL_HEADING,
    LIGHT_FALLOFF_RADIUS,
    ROOT_HEIGHT_FRACTION,
    GrowthSegment,
    LightSource,
    Point,
    RenderParams,
)
from lumen.gradient import Color
from lumen.rng import SeededRandom

logger = logging.getLogger(__name__)

DRAW_SYMBOLS = frozenset("FG")
TURN_POSITIVE = "+"
TURN_NEGATIVE = "-"
BRANCH_OPEN = "["
BRANCH_CLOSE = "]"

BUSH_RULE = "FF+[+F-F-F]-[-F+F+F]"


# =============================================================================
# LIGHT FIELD
# =============================================================================


def phototropism_angle(
    position: Point,
    heading: float,
    light_sources: Sequence[LightSource],
    strength: float,
) -> float:
    """
    Heading deflection (degrees) toward the combined light direction.

    The attraction vectors of all lights are summed. The signed difference
    between their direction and the heading, normalised to (-180, 180], is
    damped to 30% and then clamped to +/- strength * min(1, |attraction|).
    """
    if not light_sources:
        return 0.0

    total_x = 0.0
    total_y = 0.0
    for light in light_sources:
        ax, ay = light.attraction_vector(position)
        total_x += ax
        total_y += ay

    magnitude = math.hypot(total_x, total_y)
    if magnitude < ATTRACTION_EPSILON:
        return 0.0

    light_angle = math.degrees(math.atan2(total_y, total_x))
    diff = light_angle - heading
    while diff > 180:
        diff -= 360
    while diff <= -180:
        diff += 360

    max_turn = strength * min(1.0, magnitude)
    return max(-max_turn, min(max_turn, diff * DEFLECTION_DAMPING))


def light_intensity_at(position: Point, light_sources: Sequence[LightSource]) -> float:
    """Summed light with quadratic falloff over LIGHT_FALLOFF_RADIUS, in [0, 1]."""
    total = 0.0
    for light in light_sources:
        distance = math.hypot(
            position[0] - light.position[0], position[1] - light.position[1]
        )
        falloff = max(0.0, 1 - distance / LIGHT_FALLOFF_RADIUS)
        total += light.intensity * falloff * falloff
    return max(0.0, min(1.0, total))


# =============================================================================
# SEGMENT STYLE
# =============================================================================


def segment_style(
    depth: int, light_intensity: float, iterations: int, params: RenderParams
) -> tuple[float, Color, Color]:
    """
    Width, core colour and glow colour for a segment.

    Width thins exponentially with depth. Colour position fades from the
    bright end of the gradient at the root toward the middle at the deepest
    level, plus a light bonus. The glow uses a gentler fade and carries its
    strength in alpha: dimmer further out, brighter near light.
    """
    depth_ratio = depth / max(1, iterations)
    width = params.base_width * params.width_decay**depth

    base_t = 1.0 - depth_ratio * 0.6 if params.depth_color_fade else 0.95
    color_t = base_t + light_intensity * params.light_color_influence * 1.5
    color = params.gradient.color_at(min(1.0, color_t))

    glow_boost = 1.0 + light_intensity * 0.8
    glow_base_t = 1.0 - depth_ratio * 0.5 if params.depth_color_fade else 0.8
    glow_t = glow_base_t + light_intensity * params.light_color_influence
    glow_alpha = params.glow_alpha * (1.0 - depth_ratio * 0.3) * glow_boost
    glow_color = params.gradient.color_at(min(1.0, glow_t)).with_alpha(glow_alpha)

    return max(params.min_width, width), color, glow_color


# =============================================================================
# TURTLE
# =============================================================================


class TurtleState(NamedTuple):
    x: float
    y: float
    heading: float
    depth: int


def interpret(
    instructions: str,
    angle: float,
    canvas_size: tuple[float, float],
    step_length: float,
    params: RenderParams,
    iterations: int,
) -> list[GrowthSegment]:
    """
    Walk an expanded instruction string and emit segments in draw order.

    Args:
        instructions: Expanded L-system string
        angle: Turn angle for + and - (degrees)
        canvas_size: (width, height); the root sits at (width/2, height*0.88)
        step_length: Length of one draw step
        params: Styling, lights and random seed
        iterations: Expansion depth, used to normalise depth for colouring

    Returns:
        Segments in emission order
    """
    rng = SeededRandom(params.random_seed)
    lights = params.light_sources

    width, height = canvas_size
    state = TurtleState(width / 2, height * ROOT_HEIGHT_FRACTION, INITIAL_HEADING, 0)
    stack: list[TurtleState] = []
    segments: list[GrowthSegment] = []

    for symbol in instructions:
        if symbol in DRAW_SYMBOLS:
            x, y, heading, depth = state
            deflection = phototropism_angle(
                (x, y), heading, lights, params.phototropism_strength
            )
            jitter = rng.next_double(-params.angle_variation, params.angle_variation)
            rad = math.radians(heading + jitter + deflection)
            nx = x + step_length * math.cos(rad)
            ny = y + step_length * math.sin(rad)

            midpoint = ((x + nx) / 2, (y + ny) / 2)
            intensity = light_intensity_at(midpoint, lights)
            seg_width, color, glow_color = segment_style(depth, intensity, iterations, params)

            segments.append(
                GrowthSegment(
                    start=(x, y),
                    end=(nx, ny),
                    depth=depth,
                    light_intensity=intensity,
                    order=len(segments),
                    width=seg_width,
                    color=color,
                    glow_color=glow_color,
                )
            )
            # The heading itself keeps only explicit turns
            state = TurtleState(nx, ny, heading, depth)
        elif symbol == TURN_POSITIVE:
            state = state._replace(heading=state.heading + angle)
        elif symbol == TURN_NEGATIVE:
            state = state._replace(heading=state.heading - angle)
        elif symbol == BRANCH_OPEN:
            stack.append(state)
            state = state._replace(depth=state.depth + 1)
        elif symbol == BRANCH_CLOSE:
            if stack:
                state = stack.pop()

    logger.debug(
        "Interpreted %d symbols into %d segments (%d lights)",
        len(instructions), len(segments), len(lights),
    )
    return segments


# =============================================================================
# L-SYSTEM
# =============================================================================


@dataclass(frozen=True)
class LSystem:
    """
    Axiom, rewrite rules and turn angle.

    Iteration counts are expected to be small (life stages 1-5); string
    length grows exponentially with them.
    """

    axiom: str
    rules: Mapping[str, str] = field(default_factory=dict)
    angle: float = 25.0

    def __post_init__(self) -> None:
        # Own a private copy so callers cannot mutate the rules afterwards
        object.__setattr__(self, "rules", dict(self.rules))

    @classmethod
    def bush(cls, angle: float = 25.0) -> LSystem:
        """The branching bush used for every life stage: F -> FF+[+F-F-F]-[-F+F+F]."""
        return cls(axiom="F", rules={"F": BUSH_RULE}, angle=angle)

    def generate(self, iterations: int) -> str:
        """Expand the axiom `iterations` times; 0 returns the axiom."""
        current = self.axiom
        for _ in range(iterations):
            current = "".join(self.rules.get(symbol, symbol) for symbol in current)
        logger.debug("Expanded %r over %d iterations: %d symbols", self.axiom, iterations, len(current))
        return current

    def generate_segments(
        self,
        iterations: int,
        canvas_size: tuple[float, float],
        step_length: float,
        params: RenderParams | None = None,
    ) -> list[GrowthSegment]:
        """Expand and interpret in one call."""
        if params is None:
            params = RenderParams()
        instructions = self.generate(iterations)
        return interpret(instructions, self.angle, canvas_size, step_length, params, iterations)


def grow(
    axiom: str,
    rules: Mapping[str, str],
    angle: float,
    iterations: int,
    canvas_size: tuple[float, float],
    step_length: float,
    params: RenderParams | None = None,
) -> list[GrowthSegment]:
    """Expand & grow from a bare grammar definition."""
    return LSystem(axiom, rules, angle).generate_segments(
        iterations, canvas_size, step_length, params
    )


def count_draw_symbols(instructions: str) -> int:
    """Number of segments a string will emit."""
    return sum(1 for symbol in instructions if symbol in DRAW_SYMBOLS)
