import logging
import math
from typing import Tuple

import jax
import jax.numpy as jnp

from vo2perc import _lattice
from vo2perc._lattice import Point
from vo2perc._numerics import fermi_dist, solve_1d
from vo2perc.environment import Environment
from vo2perc.errors import UndefinedFermiEnergyError
from vo2perc.grid import Grid
from vo2perc.matrix import SymmetricMatrix

logger = logging.getLogger(__name__)


class Energetics:
    """
    Energies of a Grid in a given Environment.

    The atomic part counts excited atoms and dimers, the electronic part is a two-orbital tight-binding model
    living on the active sites.

    Attributes:
        env (Environment): The physical parameters.
    """
    def __init__(self, env: Environment):
        self.env = env

    @property
    def beta(self):
        return self.env.beta

    @property
    def delta(self):
        return self.env.delta

    @property
    def v(self):
        return self.env.v

    def boltzmann(self, energy: float) -> float:
        return math.exp(-self.beta * energy)

    def log_boltzmann(self, energy: float) -> float:
        return -self.beta * energy

    def atomic_hamiltonian(self, grid: Grid) -> float:
        """Energy of the atoms on `grid`, without the electronic contribution."""
        return self.delta * grid.active_site_count() - self.v * grid.dimer_count()

    def site_flip_energy(self, grid: Grid, p: Point) -> float:
        """Change of the atomic energy if the site at `p` was toggled. `grid` is not modified.

        Activating costs delta, deactivating gains it back. A completed dimer lowers the energy by v,
        a broken one raises it by v.
        """
        energy_change = -self.delta if grid.get(p) else self.delta
        return energy_change - grid.dimer_change(p) * self.v

    def electron_hamiltonian(self, grid: Grid) -> Tuple[SymmetricMatrix, SymmetricMatrix]:
        """Tight-binding Hamiltonians of the alpha and beta orbital, indexed by `y * lx + x`.

        Electrons in the alpha orbital hop only along dimer-direction bonds, electrons in the beta orbital
        hop along dimer and diagonal bonds. Only bonds between two active sites contribute.

        Returns:
            tuple[SymmetricMatrix, SymmetricMatrix]: alpha and beta Hamiltonian
        """
        env = self.env
        size = grid.lx * grid.ly
        alpha, beta = SymmetricMatrix(size), SymmetricMatrix(size)
        for i in grid.active_sites().keys():
            alpha.set(int(i), int(i), env.epsilon_alpha)
            beta.set(int(i), int(i), env.epsilon_beta)
        for i, j in zip(*_lattice.dimer_bonds(grid.data)):
            alpha.set(int(i), int(j), -env.t_alpha)
            beta.set(int(i), int(j), -env.t_beta_dimer)
        for i, j in zip(*_lattice.diag_bonds(grid.data)):
            beta.set(int(i), int(j), -env.t_beta_diag)
        return alpha, beta

    def electron_energies(self, grid: Grid) -> jax.Array:
        """Sorted single-particle energies of both orbitals on the active sites.

        Every listed level holds two electrons (spin degeneracy).
        """
        alpha, beta = self.electron_hamiltonian(grid)
        active = grid.active_sites().keys()
        alpha_energies, _ = alpha.eigensystem(keep=active)
        beta_energies, _ = beta.eigensystem(keep=active)
        return jnp.sort(jnp.concatenate([alpha_energies, beta_energies]))

    def fermi_energy(self, grid: Grid, particle_count: int) -> float:
        """Energy of the highest level occupied by `particle_count` electrons at zero temperature.

        Raises:
            UndefinedFermiEnergyError: `particle_count` is not positive or exceeds the number of states
        """
        if particle_count <= 0:
            raise UndefinedFermiEnergyError(f"Fermi energy not defined for {particle_count} particles")
        energies = self.electron_energies(grid)
        num_occupied = (particle_count + 1) // 2
        if num_occupied > energies.size:
            raise UndefinedFermiEnergyError(
                f"{particle_count} particles do not fit into {energies.size} doubly degenerate levels"
            )
        return float(energies[num_occupied - 1])

    def num_electrons(self, energies, mu):
        """Number of electrons when the levels `energies` are filled up to chemical potential `mu`."""
        return float((2.0 * fermi_dist(jnp.asarray(energies) - mu)).sum())

    def num_electrons_error(self, energies, particle_count, mu):
        return particle_count - self.num_electrons(energies, mu)

    def find_mu(self, grid: Grid, particle_count: int, eps: float = 1e-9) -> float:
        """Chemical potential at which the levels on `grid` hold `particle_count` electrons.

        The search is restricted to [-100 delta, 100 delta].

        Raises:
            UndefinedFermiEnergyError: `particle_count` is not positive or the grid has no electronic levels
            RootNotBracketedError: no such mu in the search interval
            NonConvergenceError: the root finder did not reach the tolerance `eps`
        """
        if particle_count <= 0:
            raise UndefinedFermiEnergyError(f"Chemical potential not defined for {particle_count} particles")
        energies = self.electron_energies(grid)
        if energies.size == 0:
            raise UndefinedFermiEnergyError("Chemical potential not defined on a grid without active sites")
        mu = solve_1d(
            lambda mu: self.num_electrons_error(energies, particle_count, mu),
            -100.0 * self.delta,
            100.0 * self.delta,
            eps,
            eps,
        )
        logger.debug("mu = %s for %s particles on %s levels", mu, particle_count, energies.size)
        return mu
