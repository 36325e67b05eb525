"""
Seeded coherent noise.

Classic 2D gradient (Perlin) noise over a seeded permutation table, summed
over octaves as fractal Brownian motion. The field is smooth, band-limited
and deterministic per seed. Values are nominally in [-1, 1].
"""

import numpy as np

from lumen.rng import UINT64_MASK

TABLE_SIZE = 256
# Unit-gradient Perlin noise peaks at sqrt(0.5); rescale to roughly [-1, 1]
_AMPLITUDE_SCALE = np.sqrt(2.0)


def _fade(t: np.ndarray) -> np.ndarray:
    """Perlin fade curve 6t^5 - 15t^4 + 10t^3."""
    return t * t * t * (t * (t * 6 - 15) + 10)


class PerlinNoise:
    """
    Fractal gradient noise field.

    Args:
        seed: Any integer; reduced to 64 bits
        frequency: Base cycles per unit of domain
        octaves: Number of layers summed
        persistence: Amplitude multiplier per octave
        lacunarity: Frequency multiplier per octave
    """

    def __init__(
        self,
        seed: int,
        frequency: float = 1.0,
        octaves: int = 6,
        persistence: float = 0.5,
        lacunarity: float = 2.0,
    ) -> None:
        self.frequency = frequency
        self.octaves = octaves
        self.persistence = persistence
        self.lacunarity = lacunarity

        rng = np.random.default_rng(seed & UINT64_MASK)
        perm = rng.permutation(TABLE_SIZE)
        self._perm = np.concatenate([perm, perm])
        angles = rng.uniform(0.0, 2.0 * np.pi, TABLE_SIZE)
        self._grad_x = np.cos(angles)
        self._grad_y = np.sin(angles)
        # Per-octave lattice offsets keep octaves from sharing zero crossings
        self._offsets = rng.uniform(0.0, TABLE_SIZE, size=(max(octaves, 0), 2))

    def _gradient_noise(self, x: np.ndarray, y: np.ndarray) -> np.ndarray:
        x0 = np.floor(x)
        y0 = np.floor(y)
        xf = x - x0
        yf = y - y0
        xi = x0.astype(np.int64) & (TABLE_SIZE - 1)
        yi = y0.astype(np.int64) & (TABLE_SIZE - 1)

        def corner(ix: np.ndarray, iy: np.ndarray, dx: np.ndarray, dy: np.ndarray) -> np.ndarray:
            h = self._perm[self._perm[ix] + iy]
            return self._grad_x[h] * dx + self._grad_y[h] * dy

        n00 = corner(xi, yi, xf, yf)
        n10 = corner(xi + 1, yi, xf - 1, yf)
        n01 = corner(xi, yi + 1, xf, yf - 1)
        n11 = corner(xi + 1, yi + 1, xf - 1, yf - 1)

        u = _fade(xf)
        v = _fade(yf)
        nx0 = n00 + u * (n10 - n00)
        nx1 = n01 + u * (n11 - n01)
        return (nx0 + v * (nx1 - nx0)) * _AMPLITUDE_SCALE

    def sample(self, x: np.ndarray, y: np.ndarray) -> np.ndarray:
        """Fractal noise at domain coordinates (broadcastable arrays)."""
        x = np.asarray(x, dtype=np.float64)
        y = np.asarray(y, dtype=np.float64)
        total = np.zeros(np.broadcast(x, y).shape, dtype=np.float64)
        amplitude = 1.0
        frequency = self.frequency
        norm = 0.0

        for octave in range(self.octaves):
            ox, oy = self._offsets[octave]
            total += amplitude * self._gradient_noise(x * frequency + ox, y * frequency + oy)
            norm += amplitude
            amplitude *= self.persistence
            frequency *= self.lacunarity

        if norm == 0:
            return total
        return total / norm

    def noise_map(
        self,
        width: int,
        height: int,
        size: tuple[float, float] = (2.0, 2.0),
        origin: tuple[float, float] = (0.0, 0.0),
    ) -> np.ndarray:
        """
        Sample a width x height grid covering `size` domain units.

        Returns:
            Array of shape (height, width); element [y, x] is pixel (x, y)
        """
        xs = origin[0] + np.arange(width, dtype=np.float64) * (size[0] / width)
        ys = origin[1] + np.arange(height, dtype=np.float64) * (size[1] / height)
        return self.sample(xs[None, :], ys[:, None])
