from __future__ import annotations

from insectswarm.sim.core.noise import NoiseField


def test_samples_are_bounded():
    noise = NoiseField(seed=3)
    for i in range(20000):
        value = noise.sample(i * 0.0371 - 50.0)
        assert 0.0 <= value <= 1.0


def test_deterministic_for_seed():
    first = NoiseField(seed=11)
    second = NoiseField(seed=11)
    other = NoiseField(seed=12)
    xs = [i * 0.173 for i in range(200)]

    assert [first.sample(x) for x in xs] == [second.sample(x) for x in xs]
    assert [first.sample(x) for x in xs] != [other.sample(x) for x in xs]
    assert first.sample(4.2) == first.sample(4.2)


def test_continuous_across_lattice_points():
    noise = NoiseField(seed=5)
    eps = 1e-7
    for lattice in range(0, 40):
        x = float(lattice)
        assert abs(noise.sample(x + eps) - noise.sample(x - eps)) < 1e-5


def test_smooth_small_steps_give_small_changes():
    noise = NoiseField(seed=8)
    step = 0.002
    previous = noise.sample(0.0)
    for i in range(1, 5000):
        current = noise.sample(i * step)
        # Worst-case slope of four cosine-blended octaves is below 3.5 per unit.
        assert abs(current - previous) <= 3.5 * step
        previous = current


def test_negative_inputs_mirror_positive():
    noise = NoiseField(seed=21)
    for x in (0.25, 1.5, 17.75):
        assert noise.sample(-x) == noise.sample(x)


def test_single_octave_hits_lattice_values():
    noise = NoiseField(seed=2, octaves=1)
    assert noise(3.0) == noise._lattice[3]
    assert noise(0.0) == noise._lattice[0]
