import logging
import math
from dataclasses import dataclass, field, fields
from typing import List, Optional

from vo2perc._config import is_integer, is_real, load_object, normalize_keys
from vo2perc.energetics import Energetics
from vo2perc.errors import ConfigurationError
from vo2perc.grid import Grid
from vo2perc.rng import RandomSource

logger = logging.getLogger(__name__)


@dataclass
class MonteCarloOutput:
    """
    Data reported for a single time step of a simulation.

    Attributes:
        active_sites (int): Number of active sites.
        dimers (int): Number of dimers.
        largest_cluster_size (int): Number of sites in the largest cluster.
        grid (Optional[Grid]): Snapshot of the grid, only present at recording steps.
    """
    active_sites: int
    dimers: int
    largest_cluster_size: int
    grid: Optional[Grid] = None


@dataclass(frozen=True)
class MonteCarlo:
    """
    Metropolis Monte Carlo simulation of the lattice.

    The parameters are fixed once the simulation is constructed. The random source is
    the only part that changes state, by drawing numbers.

    Attributes:
        eta_minimum (float): Offset added to the uniform random number before comparing its log to the
                             log Boltzmann factor. Must be > 0, keeps log(0) out of the acceptance test.
        total_steps (int): Number of trial flips in a simulation. Must be > 0.
        record_interval (int): Number of steps between grid snapshots. 0 records only the final grid.
        rng (RandomSource): Source of all random numbers used by the simulation.

    Note:
        ```python
        energetics = Energetics(Environment(beta = 1.0, delta = 1.0, v = 0.5))
        mc = MonteCarlo(eta_minimum = 1e-12, total_steps = 10000, record_interval = 1000, rng = RandomSource(0))
        output = mc.simulate(energetics, 32, 32)
        ```
    """
    eta_minimum: float
    total_steps: int
    record_interval: int = 0
    rng: RandomSource = field(default_factory=RandomSource, compare=False)

    def __post_init__(self):
        if not (is_real(self.eta_minimum) and math.isfinite(self.eta_minimum) and self.eta_minimum > 0):
            raise ConfigurationError(f"eta_minimum must be positive, got {self.eta_minimum!r}")
        if not is_integer(self.total_steps) or self.total_steps <= 0:
            raise ConfigurationError(f"total_steps must be a positive integer, got {self.total_steps!r}")
        if not is_integer(self.record_interval) or self.record_interval < 0:
            raise ConfigurationError(f"record_interval must be a non-negative integer, got {self.record_interval!r}")
        object.__setattr__(self, "eta_minimum", float(self.eta_minimum))
        object.__setattr__(self, "total_steps", int(self.total_steps))
        object.__setattr__(self, "record_interval", int(self.record_interval))

    @classmethod
    def from_dict(cls, values: dict):
        """Reads the parameters from a dict. An optional "seed" key seeds the random source."""
        values = dict(values)
        seed = values.pop("seed", values.pop("Seed", None))
        params = normalize_keys(cls, values)
        params.pop("rng", None)
        for name in ("total_steps", "record_interval"):
            # JSON has no integer type
            if isinstance(params.get(name), float) and params[name].is_integer():
                params[name] = int(params[name])
        try:
            return cls(**params, rng=RandomSource(seed))
        except TypeError as e:
            raise ConfigurationError(f"Incomplete Monte Carlo parameters {values}: {e}") from e

    @classmethod
    def from_json(cls, path):
        with open(path, "r") as f:
            return cls.from_dict(load_object(f.read(), str(path)))

    def to_dict(self) -> dict:
        return {f.name: getattr(self, f.name) for f in fields(self) if f.name != "rng"}

    def step(self, energetics: Energetics, grid: Grid) -> bool:
        """Proposes to toggle a random site of `grid` and applies the toggle if it is accepted.

        Moves to lower energy are always accepted. Other moves are accepted if
        `log(eta + eta_minimum) <= -beta * energy_change` for uniform `eta` in [0, 1).

        Returns:
            bool: True if and only if the site was toggled
        """
        p = self.rng.random_point(grid.lx, grid.ly)
        energy_change = energetics.site_flip_energy(grid, p)
        if energy_change < 0:
            grid.toggle(p)
            return True
        log_eta = math.log(self.rng.random_float() + self.eta_minimum)
        if log_eta <= energetics.log_boltzmann(energy_change):
            grid.toggle(p)
            return True
        return False

    def _is_recording_step(self, time: int) -> bool:
        if self.record_interval == 0:
            return time == self.total_steps - 1
        return time % self.record_interval == 0

    def simulate(self, energetics: Energetics, lx: int, ly: int) -> List[MonteCarloOutput]:
        """Runs `total_steps` steps starting from a random `lx` x `ly` grid.

        The initial number of active sites is the equilibrium estimate without dimer coupling,
        `lx * ly * exp(-beta * delta)`.

        Returns:
            list[MonteCarloOutput]: one record per step, describing the grid before that step's trial flip
        """
        expected_active = int(lx * ly * energetics.boltzmann(energetics.delta))
        grid = Grid.random_constrained(lx, ly, expected_active, self.rng)
        logger.info(
            "Starting simulation on %dx%d grid, %d steps, %d initially active sites",
            lx, ly, self.total_steps, expected_active,
        )

        output_list = []
        accepted = 0
        for time in range(self.total_steps):
            snapshot = None
            if self._is_recording_step(time):
                snapshot = grid.copy()
                logger.debug("Recorded grid at step %d", time)
            output_list.append(
                MonteCarloOutput(
                    active_sites=grid.active_site_count(),
                    dimers=grid.dimer_count(),
                    largest_cluster_size=grid.largest_cluster_size(),
                    grid=snapshot,
                )
            )
            accepted += self.step(energetics, grid)

        logger.info("Simulation finished, accepted %d of %d flips", accepted, self.total_steps)
        return output_list
