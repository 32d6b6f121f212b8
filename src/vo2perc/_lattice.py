from typing import NamedTuple, Optional

import numpy as np


class Point(NamedTuple):
    x: int
    y: int


def in_bounds(p, lx, ly):
    return 0 <= p[0] < lx and 0 <= p[1] < ly


def check_bounds(p, lx, ly):
    if not in_bounds(p, lx, ly):
        raise IndexError(f"Grid point ({p[0]}, {p[1]}) out of bounds")


def to_1d(p, lx, ly):
    """Linear index `y * lx + x` of the point `p` in an `lx` x `ly` lattice."""
    check_bounds(p, lx, ly)
    return lx * p[1] + p[0]


def from_1d(key, lx, ly):
    """Inverse of `to_1d`."""
    if key < 0 or key >= lx * ly:
        raise IndexError(f"1D key {key} out of bounds")
    y, x = divmod(key, lx)
    return Point(x, y)


def dimer_neighbors(p, lx, ly):
    """Neighbors of `p` in the dimer-forming (x) direction."""
    x, y = p
    ns = []
    # left
    if x > 0:
        ns.append(Point(x - 1, y))
    # right
    if x < lx - 1:
        ns.append(Point(x + 1, y))
    return ns


def diag_neighbors(p, lx, ly):
    """Diagonal neighbors of `p`. Their labelling depends on the parity of y."""
    x, y = p
    xmax, ymax = lx - 1, ly - 1
    ns = []
    if y % 2 == 0:
        if y > 0:
            ns.append(Point(x, y - 1))
        if y < ymax:
            ns.append(Point(x, y + 1))
        if x > 0 and y > 0:
            ns.append(Point(x - 1, y - 1))
        if x > 0 and y < ymax:
            ns.append(Point(x - 1, y + 1))
    else:
        # odd y => y > 0
        ns.append(Point(x, y - 1))
        if y < ymax:
            ns.append(Point(x, y + 1))
        if x < xmax:
            ns.append(Point(x + 1, y - 1))
        if x < xmax and y < ymax:
            ns.append(Point(x + 1, y + 1))
    return ns


def neighbors(p, lx, ly):
    """All (up to six) neighbors of `p` on the rhombic lattice."""
    return dimer_neighbors(p, lx, ly) + diag_neighbors(p, lx, ly)


def dimer_partner(p, lx, ly) -> Optional[Point]:
    """Site that can form a dimer with `p`, or None if it has no partner.

    Even x pairs to the right, odd x to the left. If lx is odd, the last column
    has no partner.
    """
    check_bounds(p, lx, ly)
    x, y = p
    if x % 2 == 0:
        if x + 1 == lx:
            return None
        return Point(x + 1, y)
    return Point(x - 1, y)


def _linear_index(lx, ly):
    xs, ys = np.meshgrid(np.arange(lx), np.arange(ly), indexing="ij")
    return ys * lx + xs, ys


def dimer_bonds(active: np.ndarray):
    """Bonds (x, y) - (x + 1, y) between active sites as 1D index arrays `(i, j)`."""
    lx, ly = active.shape
    index, _ = _linear_index(lx, ly)
    mask = active[:-1, :] & active[1:, :]
    return index[:-1, :][mask], index[1:, :][mask]


def diag_bonds(active: np.ndarray):
    """Diagonal bonds between active sites as 1D index arrays `(i, j)`, each listed once from its lower end."""
    lx, ly = active.shape
    index, ys = _linear_index(lx, ly)
    if ly < 2:
        empty = np.zeros(0, dtype=index.dtype)
        return empty, empty

    # (x, y) - (x, y + 1)
    mask = active[:, :-1] & active[:, 1:]
    starts = [index[:, :-1][mask]]
    ends = [index[:, 1:][mask]]

    # (x, y) - (x - 1, y + 1) for even y, (x, y) - (x + 1, y + 1) for odd y
    even = (ys[:, :-1] % 2) == 0
    shifted = np.zeros_like(mask)
    shifted[1:, :] = active[1:, :-1] & active[:-1, 1:] & even[1:, :]
    starts.append(index[:, :-1][shifted])
    ends.append(index[:, :-1][shifted] - 1 + lx)
    shifted = np.zeros_like(mask)
    shifted[:-1, :] = active[:-1, :-1] & active[1:, 1:] & ~even[:-1, :]
    starts.append(index[:, :-1][shifted])
    ends.append(index[:, :-1][shifted] + 1 + lx)

    return np.concatenate(starts), np.concatenate(ends)


def bond_pairs(active: np.ndarray, diagonal: bool = True):
    """Bonds between active sites, each listed once.

    Parameters:
        active (numpy.ndarray): boolean array of shape (lx, ly), indexed [x, y]
        diagonal (bool): include diagonal bonds in addition to dimer-direction bonds

    Returns:
        tuple[numpy.ndarray, numpy.ndarray]: 1D indices `(i, j)` of the two ends of every bond
    """
    i, j = dimer_bonds(active)
    if not diagonal:
        return i, j
    di, dj = diag_bonds(active)
    return np.concatenate([i, di]), np.concatenate([j, dj])
