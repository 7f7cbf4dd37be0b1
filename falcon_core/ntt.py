"""This file contains an implementation of the NTT.

The NTT implemented here is for polynomials in Z_q[x]/(phi), with:
- The integer modulus q = 12 * 1024 + 1 = 12289
- The polynomial modulus phi = x ** n + 1, with n a power of two, n =< 1024

The code is voluntarily very similar to the code of the FFT.
"""
from .common import ROOT_ORDER, merge, q, root_exponents, split
from .errors import NotInvertible


def xgcd(b, n):
    """Compute the extended GCD of two integers b and n.

    Return d, u, v such that d = u * b + v * n, and d >= 0 is the GCD of b, n.
    """
    x0, x1, y0, y1 = 1, 0, 0, 1
    while n != 0:
        quo, b, n = b // n, n, b % n
        x0, x1 = x1, x0 - quo * x1
        y0, y1 = y1, y0 - quo * y1
    if b < 0:
        return -b, -x0, -y0
    return b, x0, y0


def inv_mod_q(x):
    """Inverse of x mod q, through the extended Euclidean algorithm."""
    d, u, _ = xgcd(x % q, q)
    if d != 1:
        raise NotInvertible("%d is not invertible mod q" % x)
    return u % q


def _primitive_root():
    """Smallest generator of the multiplicative group of Z_q (q - 1 = 2^12 * 3)."""
    for g in range(2, q):
        if pow(g, (q - 1) // 2, q) != 1 and pow(g, (q - 1) // 3, q) != 1:
            return g


"""w is a primitive ROOT_ORDER-th root of unity mod q."""
w = pow(_primitive_root(), (q - 1) // ROOT_ORDER, q)


"""roots_dict_Zq[n] holds the roots of x ** n + 1 mod q, in the order of split/merge."""
roots_dict_Zq = {
    1 << k: [pow(w, e, q) for e in root_exponents(1 << k)]
    for k in range(1, 11)
}
inv_roots_dict_Zq = {n: [pow(x, q - 2, q) for x in roots] for n, roots in roots_dict_Zq.items()}


"""i2 is the inverse of 2 mod q."""
i2 = 6145


"""sqr1 is a square root of (-1) mod q."""
sqr1 = roots_dict_Zq[2][0]
inv_sqr1 = inv_mod_q(sqr1)


def split_ntt(f_ntt):
    """Split a polynomial f in two polynomials.

    Args:
        f_ntt: a polynomial

    Format: NTT
    """
    n = len(f_ntt)
    w_inv = inv_roots_dict_Zq[n]
    f0_ntt = [0] * (n // 2)
    f1_ntt = [0] * (n // 2)
    for i in range(n // 2):
        f0_ntt[i] = (i2 * (f_ntt[2 * i] + f_ntt[2 * i + 1])) % q
        f1_ntt[i] = (i2 * (f_ntt[2 * i] - f_ntt[2 * i + 1]) * w_inv[2 * i]) % q
    return [f0_ntt, f1_ntt]


def merge_ntt(f_list_ntt):
    """Merge two polynomials into a single polynomial f.

    Args:
        f_list_ntt: a list of polynomials

    Format: NTT
    """
    f0_ntt, f1_ntt = f_list_ntt
    n = 2 * len(f0_ntt)
    w = roots_dict_Zq[n]
    f_ntt = [0] * n
    for i in range(n // 2):
        f_ntt[2 * i + 0] = (f0_ntt[i] + w[2 * i] * f1_ntt[i]) % q
        f_ntt[2 * i + 1] = (f0_ntt[i] - w[2 * i] * f1_ntt[i]) % q
    return f_ntt


def ntt(f):
    """Compute the NTT of a polynomial.

    Args:
        f: a polynomial

    Format: input as coefficients, output as NTT
    """
    n = len(f)
    if (n > 2):
        f0, f1 = split(f)
        f0_ntt = ntt(f0)
        f1_ntt = ntt(f1)
        f_ntt = merge_ntt([f0_ntt, f1_ntt])
    elif (n == 2):
        f_ntt = [0] * n
        f_ntt[0] = (f[0] + sqr1 * f[1]) % q
        f_ntt[1] = (f[0] - sqr1 * f[1]) % q
    return f_ntt


def intt(f_ntt):
    """Compute the inverse NTT of a polynomial.

    Args:
        f_ntt: a NTT of a polynomial

    Format: input as NTT, output as coefficients
    """
    n = len(f_ntt)
    if (n > 2):
        f0_ntt, f1_ntt = split_ntt(f_ntt)
        f0 = intt(f0_ntt)
        f1 = intt(f1_ntt)
        f = merge([f0, f1])
    elif (n == 2):
        f = [0] * n
        f[0] = (i2 * (f_ntt[0] + f_ntt[1])) % q
        f[1] = (i2 * inv_sqr1 * (f_ntt[0] - f_ntt[1])) % q
    return f


def add_zq(f, g):
    """Addition of two polynomials (coefficient representation)."""
    assert len(f) == len(g)
    deg = len(f)
    return [(f[i] + g[i]) % q for i in range(deg)]


def neg_zq(f):
    """Negation of a polynomials (any representation)."""
    deg = len(f)
    return [(- f[i]) % q for i in range(deg)]


def sub_zq(f, g):
    """Substraction of two polynomials (any representation)."""
    return add_zq(f, neg_zq(g))


def mul_zq(f, g):
    """Multiplication of two polynomials (coefficient representation)."""
    return intt(mul_ntt(ntt(f), ntt(g)))


def div_zq(f, g):
    """Division of two polynomials (coefficient representation)."""
    return intt(div_ntt(ntt(f), ntt(g)))


def inv_zq(f):
    """Inverse of a polynomial mod (phi, q) (coefficient representation).

    Raise NotInvertible if f is not a unit.
    """
    return intt(inv_ntt(ntt(f)))


def center_zq(f):
    """Representatives of the coefficients of f in (-q/2, q/2]."""
    return [(coef + (q >> 1)) % q - (q >> 1) for coef in f]


def is_invertible(f):
    """Return True iff f is a unit mod (phi, q)."""
    return all(elt != 0 for elt in ntt([coef % q for coef in f]))


def mul_ntt(f_ntt, g_ntt):
    """Multiplication of two polynomials (NTT representation)."""
    assert len(f_ntt) == len(g_ntt)
    deg = len(f_ntt)
    return [(f_ntt[i] * g_ntt[i]) % q for i in range(deg)]


def inv_ntt(f_ntt):
    """Inverse of a polynomial (NTT representation)."""
    if any(elt % q == 0 for elt in f_ntt):
        raise NotInvertible("the polynomial is not invertible mod (phi, q)")
    return [inv_mod_q(elt) for elt in f_ntt]


def div_ntt(f_ntt, g_ntt):
    """Division of two polynomials (NTT representation)."""
    assert len(f_ntt) == len(g_ntt)
    return mul_ntt(f_ntt, inv_ntt(g_ntt))
