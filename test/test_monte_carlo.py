import math
from dataclasses import FrozenInstanceError

import numpy as np
import pytest

from vo2perc import *

@pytest.fixture
def energetics():
    return Energetics(Environment(beta = 1.0, delta = 1.0, v = 0.5))

class FixedSource(RandomSource):
    """always proposes site (0, 0) and draws the same eta"""
    def __init__(self, eta):
        super().__init__(0)
        self.eta = eta

    def random_point(self, lx, ly):
        return Point(0, 0)

    def random_float(self):
        return self.eta

class RecordingSource(RandomSource):
    def random_float(self):
        self.last_eta = super().random_float()
        return self.last_eta

@pytest.mark.parametrize("eta_minimum, total_steps, record_interval", [
    (0.0, 10, 0), (-1e-12, 10, 0), (1e-12, 0, 0), (1e-12, 10, -1), (1e-12, 2.5, 1),
])
def test_invalid_parameters(eta_minimum, total_steps, record_interval):
    with pytest.raises(ConfigurationError):
        MonteCarlo(eta_minimum, total_steps, record_interval)

def test_from_dict():
    mc = MonteCarlo.from_dict({"EtaMinimum" : 1e-12, "TotalSteps" : 10.0, "RecordInterval" : 2, "seed" : 3})
    assert mc.total_steps == 10 and isinstance(mc.total_steps, int)
    assert mc.record_interval == 2
    assert mc.rng.seed == 3
    assert mc.to_dict() == {"eta_minimum" : 1e-12, "total_steps" : 10, "record_interval" : 2}
    with pytest.raises(ConfigurationError):
        MonteCarlo.from_dict({"total_steps" : 10})

def test_from_json(tmp_path):
    path = tmp_path / "mc.json"
    path.write_text('{"eta_minimum" : 1e-9, "total_steps" : 5}')
    mc = MonteCarlo.from_json(path)
    assert mc.record_interval == 0

def test_energy_lowering_step_is_accepted(energetics):
    mc = MonteCarlo(1e-12, 1, rng = FixedSource(0.99))
    grid = Grid([[True]])
    assert mc.step(energetics, grid)
    assert not grid.get(Point(0, 0))

def test_step_compares_eta_to_boltzmann_factor(energetics):
    # activating the single site costs delta => accepted iff eta + eta_minimum <= exp(-1)
    grid = Grid([[False]])
    assert not MonteCarlo(1e-12, 1, rng = FixedSource(0.5)).step(energetics, grid)
    assert not grid.get(Point(0, 0))
    assert MonteCarlo(1e-12, 1, rng = FixedSource(0.3)).step(energetics, grid)
    assert grid.get(Point(0, 0))

def test_no_acceptance_above_boltzmann_factor(energetics):
    rng = RecordingSource(17)
    mc = MonteCarlo(1e-15, 1, rng = rng)
    boltzmann = energetics.boltzmann(energetics.delta)
    for _ in range(5000):
        grid = Grid([[False]])
        accepted = mc.step(energetics, grid)
        assert accepted == (rng.last_eta + mc.eta_minimum <= boltzmann)
        assert accepted == grid.get(Point(0, 0))

def test_acceptance_rate(energetics):
    mc = MonteCarlo(1e-12, 1, rng = RandomSource(1234))
    trials = 20000
    accepted = sum(mc.step(energetics, Grid([[False]])) for _ in range(trials))
    # standard deviation of the rate is ~0.0034
    assert abs(accepted / trials - math.exp(-1.0)) < 0.015

def test_simulate_records(energetics):
    mc = MonteCarlo(1e-12, 200, 50, rng = RandomSource(42))
    output = mc.simulate(energetics, 6, 6)
    assert len(output) == 200
    assert output[0].active_sites == int(36 * math.exp(-1.0))
    recorded = [t for t, o in enumerate(output) if o.grid is not None]
    assert recorded == [0, 50, 100, 150]
    for o in output:
        if o.grid is None:
            continue
        assert o.active_sites == o.grid.active_site_count()
        assert o.dimers == o.grid.dimer_count()
        assert o.largest_cluster_size == len(o.grid.largest_cluster())

def test_simulate_consecutive_records_differ_by_one_flip(energetics):
    mc = MonteCarlo(1e-12, 100, 1, rng = RandomSource(3))
    output = mc.simulate(energetics, 4, 4)
    for before, after in zip(output, output[1:]):
        assert abs(after.active_sites - before.active_sites) <= 1
        diff = np.array(after.grid.to_list()) != np.array(before.grid.to_list())
        assert diff.sum() <= 1

def test_simulate_records_only_final_grid(energetics):
    mc = MonteCarlo(1e-12, 30, 0, rng = RandomSource(0))
    output = mc.simulate(energetics, 5, 5)
    assert len(output) == 30
    assert all(o.grid is None for o in output[:-1])
    assert output[-1].grid is not None
    assert output[-1].active_sites == output[-1].grid.active_site_count()

def test_simulate_is_reproducible(energetics):
    def run(seed):
        output = MonteCarlo(1e-12, 100, rng = RandomSource(seed)).simulate(energetics, 5, 5)
        return [(o.active_sites, o.dimers, o.largest_cluster_size) for o in output]
    assert run(8) == run(8)

def test_parameters_are_fixed_after_construction(energetics):
    mc = MonteCarlo(1e-12, 10, 0, rng = RandomSource(0))
    with pytest.raises(FrozenInstanceError):
        mc.record_interval = -3
    with pytest.raises(FrozenInstanceError):
        mc.total_steps = 20
    assert mc.record_interval == 0
    # drawing numbers still works on the frozen simulation
    assert len(mc.simulate(energetics, 3, 3)) == 10

@pytest.mark.parametrize("total_steps, record_interval", [(True, 0), (10, False), (False, 1)])
def test_bool_step_counts_rejected(total_steps, record_interval):
    with pytest.raises(ConfigurationError):
        MonteCarlo(1e-12, total_steps, record_interval)

def test_numpy_integer_parameters():
    mc = MonteCarlo(np.float64(1e-12), np.int64(10), np.int32(2))
    assert mc.total_steps == 10 and type(mc.total_steps) is int
    assert mc.record_interval == 2 and type(mc.record_interval) is int
