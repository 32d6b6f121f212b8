import jax
import jax.numpy as jnp
import numpy as np

from vo2perc import _numerics  # noqa: F401, enables 64 bit jax


class _SortedTupleDict(dict):

    def __getitem__(self, key):
        sorted_key = tuple(sorted(key))
        return super().__getitem__(sorted_key)

    def __setitem__(self, key, value):
        sorted_key = tuple(sorted(key))
        super().__setitem__(sorted_key, value)

    def __contains__(self, key):
        sorted_key = tuple(sorted(key))
        return super().__contains__(sorted_key)

    def __delitem__(self, key):
        sorted_key = tuple(sorted(key))
        super().__delitem__(sorted_key)


class SymmetricMatrix:
    """
    Sparse real symmetric `length` x `length` matrix.

    Only one triangle is stored, keyed by the sorted index pair `(i, j)`. Reads are mirrored across the diagonal,
    missing elements are zero.

    Attributes:
        length (int): Number of rows (= number of columns).

    Note:
        Lattice Hamiltonians have many empty rows (inactive sites). `remove_empty_rows` compacts the matrix before
        it is handed to the eigensolver, `insert_empty_rows` maps the result back to the original index space.

        ```python
        sym = SymmetricMatrix(7)
        sym.set(4, 6, 5.0)
        sym.get(6, 4)   # 5.0
        ```
    """
    def __init__(self, length):
        self.length = length
        self._data = _SortedTupleDict()

    def _check(self, i, j):
        if not (0 <= i < self.length and 0 <= j < self.length):
            raise IndexError(f"matrix access ({i}, {j}) out of bounds for length {self.length}")

    def get(self, i, j):
        self._check(i, j)
        if (i, j) in self._data:
            return self._data[(i, j)]
        return 0.0

    def set(self, i, j, val):
        self._check(i, j)
        self._data[(i, j)] = float(val)

    def add(self, i, j, val):
        """Adds `val` to the element at (i, j)."""
        self.set(i, j, self.get(i, j) + val)

    def items(self):
        """Yields `((i, j), value)` with i <= j for every stored element."""
        return self._data.items()

    def __eq__(self, other):
        if not isinstance(other, SymmetricMatrix):
            return NotImplemented
        if self.length != other.length:
            return False
        # zeros may or may not be stored, so compare through get in both directions
        return all(other.get(i, j) == val for (i, j), val in self.items()) and all(
            self.get(i, j) == val for (i, j), val in other.items()
        )

    def __str__(self):
        return "\n".join(
            " ".join(str(self.get(i, j)) for j in range(self.length)) for i in range(self.length)
        )

    def to_dense(self):
        matrix = np.zeros((self.length, self.length))
        for (i, j), val in self.items():
            matrix[i, j] = val
            matrix[j, i] = val
        return jnp.array(matrix)

    def remove_empty_rows(self, keep = None):
        """Returns a copy without the empty rows (and columns).

        Parameters:
            keep (Iterable[int], optional): row indices that are retained even if they are empty

        Returns:
            tuple[SymmetricMatrix, dict[int, int]]: the compact matrix and the map from its row indices
            to the row indices of this matrix
        """
        non_empty = set(keep) if keep is not None else set()
        for (i, j), val in self.items():
            if val != 0.0:
                non_empty.update((i, j))
        convert = dict(enumerate(sorted(non_empty)))
        inverse = {old: new for new, old in convert.items()}

        compact = SymmetricMatrix(len(convert))
        for (i, j), val in self.items():
            if val != 0.0:
                compact.set(inverse[i], inverse[j], val)
        return compact, convert

    def reconstruct_empty_rows(self, convert, length):
        """Inverse of `remove_empty_rows`: a `length` x `length` matrix with the rows of this matrix moved
        to the indices given by `convert`, all other rows zero."""
        full = SymmetricMatrix(length)
        for (i, j), val in self.items():
            full.set(convert[i], convert[j], val)
        return full

    def eigensystem(self, keep = None):
        """Diagonalizes the matrix after removing its empty rows.

        Parameters:
            keep (Iterable[int], optional): row indices that take part in the diagonalization even if empty

        Returns:
            tuple[jax.Array, jax.Array]: ascending eigenvalues of the compact matrix (M of them) and an
            N x M array whose k-th column is the eigenvector of the k-th eigenvalue in the original index space
        """
        compact, convert = self.remove_empty_rows(keep)
        if compact.length == 0:
            return jnp.zeros(0), jnp.zeros((self.length, 0))
        eigenvectors, energies = jax.lax.linalg.eigh(compact.to_dense())
        return energies, insert_empty_rows(eigenvectors, convert, self.length)


def insert_empty_rows(orig, convert, length, columns = False):
    """Expands `orig` to `length` rows, moving row `r` to `convert[r]` and zero-filling the rest.

    Parameters:
        orig (array-like): compact array
        convert (dict[int, int]): map from compact to original row indices, as returned by `remove_empty_rows`
        length (int): number of rows of the result
        columns (bool): also expand the columns in the same way, for square matrices

    Returns:
        jax.Array: the expanded array
    """
    orig = jnp.asarray(orig)
    rows = jnp.array([convert[r] for r in range(orig.shape[0])], dtype=int)
    if columns:
        full = jnp.zeros((length, length), dtype=orig.dtype)
        return full.at[rows[:, None], rows].set(orig)
    full = jnp.zeros((length,) + orig.shape[1:], dtype=orig.dtype)
    return full.at[rows].set(orig)
