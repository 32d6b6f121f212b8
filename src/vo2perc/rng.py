import numpy as np

from vo2perc._lattice import Point


class RandomSource:
    """
    Explicitly owned stream of uniform random values.

    Every simulation owns its own source, so runs are reproducible given a seed and
    independent runs can execute concurrently without sharing state.

    Attributes:
        seed (Optional[int]): The seed the stream was created from. `None` draws fresh entropy from the OS.

    Note:
        ```python
        rng = RandomSource(seed = 42)
        grid = Grid.random(16, 16, rng)
        children = rng.spawn(4)   # independent streams for a parameter sweep
        ```
    """
    def __init__(self, seed = None, generator = None):
        self.seed = seed
        self._generator = generator if generator is not None else np.random.default_rng(seed)

    def __repr__(self):
        return f"RandomSource(seed={self.seed})"

    def random_bool(self):
        """Uniform boolean."""
        return bool(self._generator.integers(0, 2))

    def random_int(self, n):
        """Uniform integer in [0, n)."""
        return int(self._generator.integers(0, n))

    def random_float(self):
        """Uniform float in [0, 1)."""
        return float(self._generator.random())

    def random_point(self, lx, ly):
        """Uniform lattice point in the `lx` x `ly` rectangle."""
        return Point(self.random_int(lx), self.random_int(ly))

    def random_bools(self, shape):
        return self._generator.integers(0, 2, size=shape).astype(bool)

    def spawn(self, n):
        """Returns `n` statistically independent child sources."""
        return [RandomSource(generator = g) for g in self._generator.spawn(n)]
