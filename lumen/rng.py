"""
Reproducible random numbers for growth jitter and film grain.

Every draw takes exactly one raw 32-bit output from a Mersenne Twister
stream, uniform in [0, RAW_MAX], and maps it linearly onto the requested
range. The same seed and the same sequence of calls always give the same
values.
"""

import numpy as np

RAW_MAX = 2**32 - 1
UINT64_MASK = 2**64 - 1


class SeededRandom:
    """
    Seeded uniform draws over arbitrary numeric ranges.

    Not thread-safe: each call advances the shared generator state, so one
    instance belongs to one generation pass.
    """

    def __init__(self, seed: int) -> None:
        self.seed = seed & UINT64_MASK
        self._bit_generator = np.random.MT19937(self.seed)

    def _next_raw(self) -> int:
        return int(self._bit_generator.random_raw())

    def next_double(self, low: float, high: float) -> float:
        """Uniform float in [low, high]; high only when the raw draw is RAW_MAX."""
        normalized = self._next_raw() / RAW_MAX
        return low + normalized * (high - low)

    def next_int(self, low: int, high: int) -> int:
        """Integer in [low, high], truncated toward low."""
        normalized = self._next_raw() / RAW_MAX
        return low + int(normalized * (high - low))

    def next_bool(self) -> bool:
        return self._next_raw() % 2 == 0
