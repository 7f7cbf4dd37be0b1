"""
Constants and helpers shared by the FFT and the NTT.

Polynomials live in Z[x] / (x ** n + 1), n a power of two with n <= 1024.
"""

"""q is the integer modulus which is used in Falcon."""
q = 12 * 1024 + 1


"""Order of the root of unity all the roots of x ** n + 1 are powers of."""
ROOT_ORDER = 2048


def split(f):
    """Split a polynomial f in two polynomials.

    Args:
        f: a polynomial

    Format: coefficient
    """
    return [f[0::2], f[1::2]]


def merge(f_list):
    """Merge two polynomials into a single polynomial f.

    Args:
        f_list: a list of polynomials

    Format: coefficient
    """
    f0, f1 = f_list
    n = 2 * len(f0)
    f = [0] * n
    f[0::2] = list(f0)
    f[1::2] = list(f1)
    return f


def sqnorm(v):
    """Compute the square euclidean norm of the vector v."""
    res = 0
    for elt in v:
        for coef in elt:
            res += coef ** 2
    return res


def root_exponents(n):
    """
    Exponents e such that the roots of x ** n + 1 are w ** e,
    w being a primitive ROOT_ORDER-th root of unity.

    The order matches the split/merge recursion: the entries 2 * i and
    2 * i + 1 are the two square roots of entry i at degree n // 2.
    """
    if n == 2:
        return [ROOT_ORDER // 4, 3 * ROOT_ORDER // 4]
    exponents = []
    for e in root_exponents(n // 2):
        exponents += [e // 2, e // 2 + ROOT_ORDER // 2]
    return exponents
