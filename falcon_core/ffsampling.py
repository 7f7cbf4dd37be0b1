"""
This file contains important algorithms for Falcon:
- the Fast Fourier orthogonalization (in its LDL form), which builds the
  falcon tree;
- the Fast Fourier sampling, which walks it.

The falcon tree is stored in flat arrays indexed like a binary heap:
the children of node i are the nodes 2 * i + 1 and 2 * i + 2. For a
degree n, nodes 0 to n - 2 are internal and hold the polynomial l10 of
the LDL decomposition; nodes n - 1 to 2 * n - 2 are leaves and hold a
single real number.
"""
import numpy as np

from .fft import adj_fft, merge_fft, split_fft
from .samplerz import samplerz


def gram_fft(B_fft):
    """Compute the Gram matrix of a basis B: G = B * adj(B) (FFT representation)."""
    rows = range(len(B_fft))
    ncols = range(len(B_fft[0]))
    G = [[None for j in rows] for i in rows]
    for i in rows:
        for j in rows:
            G[i][j] = sum(B_fft[i][k] * adj_fft(B_fft[j][k]) for k in ncols)
    return G


def ldl_fft(G):
    """
    Compute the LDL decomposition of G. Only works with 2 * 2 matrices.

    Args:
        G: a Gram matrix

    Format: FFT

    Corresponds to algorithm 9 (LDL*) of Falcon's documentation.
    """
    deg = len(G[0][0])
    dim = len(G)
    assert (dim == 2)
    assert (dim == len(G[0]))

    zero = np.zeros(deg, dtype=complex)
    one = np.ones(deg, dtype=complex)
    D00 = G[0][0].copy()
    L10 = G[1][0] / G[0][0]
    D11 = G[1][1] - L10 * adj_fft(L10) * G[0][0]
    L = [[one, zero], [L10, one]]
    D = [[D00, zero], [zero, D11]]
    return [L, D]


class FalconTree:
    """
    The falcon tree of a secret basis.

    Typical use:

    >>> tree = FalconTree.from_gram(G0_fft)
    >>> tree.normalize(sigma)
    >>> z = ffsampling_fft(t_fft, tree, sigmin, randombytes)
    """

    def __init__(self, n):
        self.n = n
        self.l10 = [None] * (n - 1)
        self.leaves = np.zeros(n)

    @classmethod
    def from_gram(cls, G):
        """Compute the falcon tree of a Gram matrix (FFT representation).

        Corresponds to algorithm 8 (ffLDL*) of Falcon's documentation.
        """
        tree = cls(len(G[0][0]))
        tree._fill(0, G)
        return tree

    def _fill(self, index, G):
        n = len(G[0][0])
        L, D = ldl_fft(G)
        self.l10[index] = L[1][0]
        if (n > 2):
            # In this case, we recurse on the diagonal of D
            d00, d01 = split_fft(D[0][0])
            d10, d11 = split_fft(D[1][1])
            G0 = [[d00, d01], [adj_fft(d01), d00]]
            G1 = [[d10, d11], [adj_fft(d11), d10]]
            self._fill(2 * index + 1, G0)
            self._fill(2 * index + 2, G1)
        elif (n == 2):
            # The diagonal of D is real and constant: it is stored in the leaves
            self.leaves[self.leaf_slot(2 * index + 1)] = D[0][0][0].real
            self.leaves[self.leaf_slot(2 * index + 2)] = D[1][1][0].real

    def leaf_slot(self, index):
        """Position in self.leaves of the leaf of heap index 'index'."""
        return index - (self.n - 1)

    def normalize(self, sigma):
        """
        Normalize leaves of the tree (from values ||b_i||**2 to sigma/||b_i||).
        """
        self.leaves = sigma / np.sqrt(self.leaves)

    def depth(self):
        return self.n.bit_length() - 1

    def __eq__(self, other):
        if not isinstance(other, FalconTree) or other.n != self.n:
            return NotImplemented
        return (
            np.array_equal(self.leaves, other.leaves)
            and all(np.array_equal(a, b) for a, b in zip(self.l10, other.l10))
        )

    def __str__(self):
        with np.printoptions(linewidth=200, precision=5, suppress=True):
            return print_tree(self)


def print_tree(tree, index=0, pref=""):
    """
    Display a falcon tree in a readable form.

    Args:
        tree: a FalconTree
        index: the heap index of the node to start from

    Format: fft
    """
    leaf = "|_____> "
    top = "|_______"
    son1 = "|       "
    son2 = "        "
    width = len(top)

    if index >= tree.n - 1:
        return (pref[:-width] + leaf + str(tree.leaves[tree.leaf_slot(index)]) + "\n")

    a = ""
    if (pref == ""):
        a += pref + str(tree.l10[index]) + "\n"
    else:
        a += pref[:-width] + top + str(tree.l10[index]) + "\n"
    a += print_tree(tree, 2 * index + 1, pref + son1)
    a += print_tree(tree, 2 * index + 2, pref + son2)
    return a


def ffsampling_fft(t, tree, sigmin, randombytes, index=0):
    """Compute the ffsampling of t, using a normalized falcon tree.

    Args:
        t: a vector
        tree: a normalized FalconTree
        sigmin: the lower bound of the standard deviations
        randombytes: a source of randomness
        index: the heap index of the current node

    Format: FFT

    Corresponds to algorithm 11 (ffSampling) of Falcon's documentation.
    """
    n = len(t[0])
    z = [0, 0]
    if (n > 1):
        l10 = tree.l10[index]
        z[1] = merge_fft(ffsampling_fft(split_fft(t[1]), tree, sigmin, randombytes, 2 * index + 2))
        t0b = t[0] + (t[1] - z[1]) * l10
        z[0] = merge_fft(ffsampling_fft(split_fft(t0b), tree, sigmin, randombytes, 2 * index + 1))
        return z
    elif (n == 1):
        sigma = tree.leaves[tree.leaf_slot(index)]
        z[0] = np.array([samplerz(t[0][0].real, sigma, sigmin, randombytes)], dtype=complex)
        z[1] = np.array([samplerz(t[1][0].real, sigma, sigmin, randombytes)], dtype=complex)
        return z
