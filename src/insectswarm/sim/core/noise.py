from __future__ import annotations

import math

from .rng import DeterministicRng

_LATTICE_SIZE = 4096


class NoiseField:
    """Smooth 1D value noise in ``[0, 1]``.

    Each octave samples a seeded lattice of uniform values and blends the two
    surrounding lattice points with cosine interpolation, so the field is
    continuous with a continuous first derivative. Octaves double in frequency
    and scale by ``falloff``; the sum is divided by the total amplitude.
    Negative inputs mirror positive ones.
    """

    def __init__(self, seed: int, octaves: int = 4, falloff: float = 0.5):
        self._rng = DeterministicRng(seed)
        self._octaves = octaves
        self._falloff = falloff
        self._lattice = [self._rng.next_float() for _ in range(_LATTICE_SIZE)]
        amplitude = 1.0
        total = 0.0
        for _ in range(octaves):
            total += amplitude
            amplitude *= falloff
        self._amplitude_total = total

    def sample(self, x: float) -> float:
        x = abs(x)
        lattice = self._lattice
        mask = _LATTICE_SIZE - 1
        result = 0.0
        amplitude = 1.0
        frequency = 1.0
        for _ in range(self._octaves):
            scaled = x * frequency
            base = math.floor(scaled)
            frac = scaled - base
            index = int(base) & mask
            low = lattice[index]
            high = lattice[(index + 1) & mask]
            blend = 0.5 * (1.0 - math.cos(frac * math.pi))
            result += (low + (high - low) * blend) * amplitude
            amplitude *= self._falloff
            frequency *= 2.0
        value = result / self._amplitude_total
        return min(1.0, max(0.0, value))

    def __call__(self, x: float) -> float:
        return self.sample(x)
