import json

import numpy as np

from vo2perc import *

def _energetics():
    return Energetics(Environment(beta = 1.0, delta = 1.0, v = 0.5, t_alpha = 1.0, t_beta_dimer = 1.0, t_beta_diag = 0.5))

def test_iter_grids():
    configurations = {tuple(map(tuple, g.to_list())) for g in iter_grids(2, 2)}
    assert len(configurations) == 16

def test_analyze_cluster():
    e = _energetics()
    assert analyze_cluster(Grid([[True, False, True], [False, False, True]]), e) is None
    assert analyze_cluster(Grid.from_dims(2, 2), e) is None

    analysis = analyze_cluster(Grid([[True], [True]]), e)
    assert analysis.total_sites == 2
    # dimer: alpha and beta both give -1, +1 => two electrons fill the lowest level
    np.testing.assert_allclose(analysis.fermi, -1.0)
    assert analysis.grid == [[True], [True]]

def test_brute_force_survey(tmp_path):
    path = tmp_path / "survey.json"
    written = brute_force_survey(2, _energetics(), path)
    # connected subsets of the 2x2 lattice: 4 singles, 5 bonds, 4 triples, 1 full
    assert written == 14
    chunks = [c for c in path.read_text().split(SEPARATOR) if c]
    assert len(chunks) == 14
    records = [json.loads(c) for c in chunks]
    assert all(set(r) == {"total_sites", "fermi", "grid"} for r in records)
    assert sorted(r["total_sites"] for r in records) == [1] * 4 + [2] * 5 + [3] * 4 + [4]
