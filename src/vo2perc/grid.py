from collections.abc import Iterator, Sequence
from typing import List, Optional, Tuple

import numpy as np
from scipy.sparse import coo_matrix
from scipy.sparse.csgraph import connected_components

from vo2perc import _lattice
from vo2perc._lattice import Point
from vo2perc.errors import GridShapeError
from vo2perc.point_set import PointSet
from vo2perc.rng import RandomSource


def check_dimensions(grid_data):
    """True if and only if `grid_data` is an M x N rectangle with M > 0 and N > 0."""
    # numpy and jax arrays
    if hasattr(grid_data, "ndim"):
        return grid_data.ndim == 2 and grid_data.size > 0
    if not isinstance(grid_data, Sequence) or len(grid_data) == 0:
        return False
    rows = list(grid_data)
    if not all(isinstance(row, (Sequence, np.ndarray)) for row in rows):
        return False
    size = len(rows[0])
    return size > 0 and all(len(row) == size for row in rows)


class Grid:
    """
    2D centered rectangular (rhombic) lattice where every site is either active (True) or inactive (False).

    The data is indexed as `data[x][y]`: the outer index runs over `x` (the dimer-forming direction, `0 <= x < lx`)
    and the inner index over `y` (`0 <= y < ly`). Active sites form clusters through their neighbors in the dimer
    direction and in the diagonal directions.

    Attributes:
        lx (int): Width of the grid.
        ly (int): Height of the grid.

    Note:
        ```python
        grid = Grid([[True, False, True], [False, False, True]])
        grid.dimer_count()        # 1
        grid.largest_cluster()    # {(0, 2), (1, 2)}
        ```
    """
    def __init__(self, data):
        if not check_dimensions(data):
            raise GridShapeError("Grid data must be rectangular and contain at least one point")
        self._data = np.array(data, dtype=bool)
        if self._data.ndim != 2:
            raise GridShapeError("Grid data must be a two-dimensional array of booleans")

    @classmethod
    def from_dims(cls, lx: int, ly: int):
        """All-inactive grid of the given dimensions."""
        if lx <= 0 or ly <= 0:
            raise GridShapeError(f"invalid grid dimensions ({lx}, {ly})")
        return cls(np.zeros((lx, ly), dtype=bool))

    @classmethod
    def random(cls, lx: int, ly: int, rng: Optional[RandomSource] = None):
        """Grid where every site is active with probability 1/2."""
        if lx <= 0 or ly <= 0:
            raise GridShapeError(f"invalid grid dimensions ({lx}, {ly})")
        rng = rng if rng is not None else RandomSource()
        return cls(rng.random_bools((lx, ly)))

    @classmethod
    def random_constrained(cls, lx: int, ly: int, n: int, rng: Optional[RandomSource] = None):
        """Grid with exactly `n` randomly placed active sites. `n` is clamped to [0, lx * ly]."""
        grid = cls.from_dims(lx, ly)
        rng = rng if rng is not None else RandomSource()
        n = min(max(n, 0), lx * ly)
        active_count = 0
        while active_count < n:
            p = rng.random_point(lx, ly)
            if not grid.get(p):
                grid.set(p, True)
                active_count += 1
        return grid

    @property
    def lx(self) -> int:
        return self._data.shape[0]

    @property
    def ly(self) -> int:
        return self._data.shape[1]

    @property
    def data(self):
        """read-only view of the site values, indexed [x, y]"""
        view = self._data.view()
        view.flags.writeable = False
        return view

    def __eq__(self, other):
        if not isinstance(other, Grid):
            return NotImplemented
        return self._data.shape == other._data.shape and bool((self._data == other._data).all())

    def __repr__(self):
        rows = "\n".join("".join("#" if v else "." for v in row) for row in self._data)
        return f"Grid {self.lx}x{self.ly}, {self.active_site_count()} active sites\n{rows}"

    def to_list(self):
        return self._data.tolist()

    def in_bounds(self, p):
        return _lattice.in_bounds(p, self.lx, self.ly)

    def get(self, p: Point) -> bool:
        _lattice.check_bounds(p, self.lx, self.ly)
        return bool(self._data[p[0], p[1]])

    def set(self, p: Point, value: bool):
        _lattice.check_bounds(p, self.lx, self.ly)
        self._data[p[0], p[1]] = value

    def toggle(self, p: Point):
        _lattice.check_bounds(p, self.lx, self.ly)
        self._data[p[0], p[1]] = not self._data[p[0], p[1]]

    def iterate(self) -> Iterator[Tuple[Point, bool]]:
        """Yields `(Point, value)` for every site, x-major."""
        for x in range(self.lx):
            for y in range(self.ly):
                yield Point(x, y), bool(self._data[x, y])

    def copy(self):
        return Grid(self._data.copy())

    def next_grid(self) -> bool:
        """Advances the grid to the next configuration, counting in binary with site `y * lx + x` as bit weight.

        Returns:
            bool: True once all configurations have been visited (the grid wraps around to all-inactive).
        """
        flat = self._data.T.reshape(-1)
        inactive = np.flatnonzero(~flat)
        if inactive.size == 0:
            self._data[:, :] = False
            return True
        first = inactive[0]
        flat[:first] = False
        flat[first] = True
        self._data[:, :] = flat.reshape(self.ly, self.lx).T
        return False

    def active_site_count(self) -> int:
        return int(self._data.sum())

    def dimer_count(self) -> int:
        """Number of dimers, i.e. active pairs (x, y) - (x + 1, y) with even x.

        If lx is odd, the final column can't be in a dimer.
        """
        left = self._data[0:self.lx - 1:2, :]
        right = self._data[1:self.lx:2, :]
        return int((left & right).sum())

    def dimer_partner(self, p: Point) -> Optional[Point]:
        return _lattice.dimer_partner(p, self.lx, self.ly)

    def dimer_change(self, p: Point) -> int:
        """Change in the number of dimers if the site at `p` was flipped."""
        value = self.get(p)
        partner = self.dimer_partner(p)
        if partner is None or not self.get(partner):
            return 0
        return -1 if value else 1

    def neighbors(self, p):
        return _lattice.neighbors(p, self.lx, self.ly)

    def dimer_neighbors(self, p):
        return _lattice.dimer_neighbors(p, self.lx, self.ly)

    def diag_neighbors(self, p):
        return _lattice.diag_neighbors(p, self.lx, self.ly)

    def point_set(self):
        """empty PointSet on this grid's lattice"""
        return PointSet(self.lx, self.ly)

    def active_sites(self) -> PointSet:
        return PointSet._from_keys(self.lx, self.ly, self._active_keys())

    def _active_keys(self):
        # transposing makes the row-major flat index equal to y * lx + x
        return np.flatnonzero(self._data.T)

    def cluster(self, p: Point) -> PointSet:
        """Cluster of active sites containing `p`. Empty if `p` is inactive."""
        ps = self.point_set()
        if not self.get(p):
            return ps
        ps.add(p)
        stack = [p]
        while stack:
            site = stack.pop()
            for n in self.neighbors(site):
                if self._data[n.x, n.y] and n not in ps:
                    ps.add(n)
                    stack.append(n)
        return ps

    def _cluster_labels(self):
        keys = self._active_keys()
        n = self.lx * self.ly
        i, j = _lattice.bond_pairs(self._data)
        graph = coo_matrix((np.ones(i.size), (i, j)), shape=(n, n)).tocsr()
        _, labels = connected_components(graph, directed=False)
        return keys, labels[keys]

    def all_clusters(self) -> List[PointSet]:
        """Partition of the active sites into clusters, ordered by their first member."""
        keys, labels = self._cluster_labels()
        members = {}
        for key, label in zip(keys, labels):
            members.setdefault(label, []).append(key)
        return [PointSet._from_keys(self.lx, self.ly, ks) for ks in members.values()]

    def largest_cluster(self) -> PointSet:
        """Largest cluster on the grid, the first one found on ties. Empty if no site is active."""
        keys, labels = self._cluster_labels()
        if keys.size == 0:
            return self.point_set()
        _, first, counts = np.unique(labels, return_index=True, return_counts=True)
        # np.unique sorts by label => break ties by position of the first member
        best = min(range(counts.size), key=lambda k: (-counts[k], first[k]))
        return PointSet._from_keys(self.lx, self.ly, keys[labels == labels[first[best]]])

    def largest_cluster_size(self) -> int:
        keys, labels = self._cluster_labels()
        if keys.size == 0:
            return 0
        return int(np.unique(labels, return_counts=True)[1].max())
