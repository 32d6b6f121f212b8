import numpy as np
import pytest

from vo2perc import *

DEFAULT_DATA = [[True, False, True], [False, False, True]]

def test_grid_creation():
    grid = Grid(DEFAULT_DATA)
    assert grid.lx == 2 and grid.ly == 3
    for x, row in enumerate(DEFAULT_DATA):
        for y, val in enumerate(row):
            assert grid.get(Point(x, y)) == val

def test_random_grids_reproduce_input():
    rng = np.random.default_rng(3)
    for _ in range(20):
        lx, ly = rng.integers(1, 9, size=2)
        data = rng.integers(0, 2, size=(lx, ly)).astype(bool).tolist()
        grid = Grid(data)
        assert grid.to_list() == data
        assert grid.active_site_count() == sum(map(sum, data))

@pytest.mark.parametrize("data", [[], [[]], [[True], [True, False]], [True, False], [[[True]]]])
def test_invalid_shape(data):
    with pytest.raises(GridShapeError):
        Grid(data)

def test_invalid_dims():
    with pytest.raises(GridShapeError):
        Grid.from_dims(0, 3)
    with pytest.raises(GridShapeError):
        Grid.random(2, -1)

def test_grid_set_toggle():
    grid = Grid([[False]])
    p = Point(0, 0)
    grid.set(p, True)
    assert grid.get(p)
    grid.toggle(p)
    assert not grid.get(p)

def test_out_of_bounds_access():
    grid = Grid(DEFAULT_DATA)
    with pytest.raises(IndexError):
        grid.get(Point(2, 0))
    with pytest.raises(IndexError):
        grid.set(Point(0, 3), True)
    with pytest.raises(IndexError):
        grid.toggle(Point(-1, 0))

def test_grid_site_counting():
    grid = Grid(DEFAULT_DATA)
    assert grid.active_site_count() == 3
    assert grid.dimer_count() == 1

def test_dimer_count_odd_width():
    grid = Grid([[True], [True], [True]])
    assert grid.dimer_count() == 1
    assert grid.dimer_partner(Point(2, 0)) is None
    assert grid.dimer_change(Point(2, 0)) == 0

def test_dimer_change():
    grid = Grid(DEFAULT_DATA)
    assert grid.dimer_change(Point(0, 0)) == 0
    assert grid.dimer_change(Point(0, 2)) == -1
    assert grid.dimer_change(Point(0, 1)) == 0
    assert grid.dimer_change(Point(1, 0)) == 1

def test_dimer_change_predicts_dimer_count():
    grid = Grid.random(7, 6, RandomSource(11))
    for p, _ in list(grid.iterate()):
        before, change = grid.dimer_count(), grid.dimer_change(p)
        grid.toggle(p)
        assert grid.dimer_count() == before + change
        grid.toggle(p)

def test_grid_clusters():
    grid = Grid(DEFAULT_DATA)
    known_cluster_1 = PointSet(2, 3, [Point(0, 0)])
    known_cluster_2 = PointSet(2, 3, [Point(0, 2), Point(1, 2)])
    clusters = grid.all_clusters()
    assert len(clusters) == 2
    assert known_cluster_1 in clusters and known_cluster_2 in clusters
    assert grid.largest_cluster() == known_cluster_2
    assert grid.largest_cluster_size() == 2

def test_cluster_of_site():
    grid = Grid(DEFAULT_DATA)
    assert grid.cluster(Point(1, 2)) == PointSet(2, 3, [Point(0, 2), Point(1, 2)])
    assert len(grid.cluster(Point(0, 1))) == 0

def test_all_clusters_partition_active_sites():
    grid = Grid.random(12, 10, RandomSource(5))
    clusters = grid.all_clusters()
    union = []
    for c in clusters:
        union += c.elements()
        # every member reaches exactly its own cluster
        for p in c:
            assert grid.cluster(p) == c
    assert len(union) == len(set(union))
    assert PointSet(grid.lx, grid.ly, union) == grid.active_sites()
    assert grid.largest_cluster_size() == max(len(c) for c in clusters)
    assert len(grid.largest_cluster()) == grid.largest_cluster_size()

def test_large_cluster():
    # one cluster spanning the whole grid would overflow a recursive search
    grid = Grid(np.ones((200, 200), dtype=bool))
    assert len(grid.cluster(Point(0, 0))) == 200 * 200
    assert len(grid.all_clusters()) == 1

def test_no_active_sites():
    grid = Grid.from_dims(3, 3)
    assert grid.all_clusters() == []
    assert len(grid.largest_cluster()) == 0
    assert grid.largest_cluster_size() == 0

def test_random_constrained_grid_creation():
    active_sites, L = 128, 64
    grid = Grid.random_constrained(L, L, active_sites, RandomSource(0))
    assert grid.active_site_count() == active_sites

def test_random_constrained_grid_clamps():
    assert Grid.random_constrained(3, 3, -5).active_site_count() == 0
    assert Grid.random_constrained(3, 3, 100).active_site_count() == 9

def test_random_grid_is_reproducible():
    assert Grid.random(8, 8, RandomSource(1)) == Grid.random(8, 8, RandomSource(1))

def test_copy_is_independent():
    grid = Grid(DEFAULT_DATA)
    cp = grid.copy()
    cp.toggle(Point(0, 0))
    assert grid.get(Point(0, 0)) and not cp.get(Point(0, 0))
    assert grid != cp

def test_next_grid_visits_all_configurations():
    grid = Grid.from_dims(2, 2)
    seen = {tuple(map(tuple, grid.to_list()))}
    while not grid.next_grid():
        seen.add(tuple(map(tuple, grid.to_list())))
    assert len(seen) == 16
    assert grid.active_site_count() == 0

def test_next_grid_counts_in_binary():
    grid = Grid.from_dims(2, 2)
    grid.next_grid()
    assert grid.get(Point(0, 0))
    grid.next_grid()
    assert not grid.get(Point(0, 0)) and grid.get(Point(1, 0))
    grid.next_grid()
    grid.next_grid()
    assert grid.active_sites() == PointSet(2, 2, [Point(0, 1)])
