from vo2perc._lattice import from_1d, to_1d


class PointSet:
    """
    Unordered set of points on a fixed `lx` x `ly` lattice.

    Points are stored by their linear index `y * lx + x`, so membership, insertion and removal are O(1).

    Attributes:
        lx (int): Width of the lattice the points live on.
        ly (int): Height of the lattice the points live on.

    Note:
        Two point sets are equal if they live on the same lattice and contain the same points,
        independent of insertion order.
    """
    def __init__(self, lx, ly, points = None):
        self.lx = lx
        self.ly = ly
        self._keys = set()
        for p in points or []:
            self.add(p)

    @classmethod
    def _from_keys(cls, lx, ly, keys):
        ps = cls(lx, ly)
        ps._keys = set(int(k) for k in keys)
        return ps

    def __len__(self):
        return len(self._keys)

    def __contains__(self, p):
        return to_1d(p, self.lx, self.ly) in self._keys

    def __iter__(self):
        return (from_1d(k, self.lx, self.ly) for k in sorted(self._keys))

    def __eq__(self, other):
        if not isinstance(other, PointSet):
            return NotImplemented
        return (self.lx, self.ly) == (other.lx, other.ly) and self._keys == other._keys

    def __repr__(self):
        return f"PointSet({self.lx}x{self.ly}, {self.elements()})"

    def size(self):
        return len(self)

    def contains(self, p):
        return p in self

    def add(self, p):
        self._keys.add(to_1d(p, self.lx, self.ly))

    def remove(self, p):
        """Removes `p` if present."""
        self._keys.discard(to_1d(p, self.lx, self.ly))

    def point(self):
        """Returns an arbitrary member of the set without removing it.

        Raises:
            KeyError: the set is empty
        """
        if not self._keys:
            raise KeyError("point requested from an empty PointSet")
        return from_1d(next(iter(self._keys)), self.lx, self.ly)

    def elements(self):
        """list of all points in the set"""
        return list(self)

    def keys(self):
        """linear indices of all points in the set"""
        return sorted(self._keys)

    def copy(self):
        return PointSet._from_keys(self.lx, self.ly, self._keys)
