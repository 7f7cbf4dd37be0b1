"""This file contains an implementation of the FFT.

The FFT implemented here is for polynomials in R[x]/(phi), with:
- The polynomial modulus phi = x ** n + 1, with n a power of two, n =< 1024

The FFT representation of f is the vector of the values of f at the n
roots of phi, stored in a numpy complex array.
The code is voluntarily very similar to the code of the NTT.
"""
import numpy as np

from .common import ROOT_ORDER, root_exponents, split


"""roots_dict[n] holds the roots of x ** n + 1, in the order of split/merge."""
roots_dict = {
    1 << k: np.exp(1j * np.pi * np.array(root_exponents(1 << k)) / (ROOT_ORDER // 2))
    for k in range(1, 11)
}


def split_fft(f_fft):
    """Split a polynomial f in two polynomials.

    Args:
        f_fft: a polynomial

    Format: FFT
    """
    n = len(f_fft)
    w = roots_dict[n][0::2]
    f0_fft = 0.5 * (f_fft[0::2] + f_fft[1::2])
    f1_fft = 0.5 * (f_fft[0::2] - f_fft[1::2]) * w.conj()
    return [f0_fft, f1_fft]


def merge_fft(f_list_fft):
    """Merge two polynomials into a single polynomial f.

    Args:
        f_list_fft: a list of polynomials

    Format: FFT
    """
    f0_fft, f1_fft = f_list_fft
    n = 2 * len(f0_fft)
    w = roots_dict[n][0::2]
    f_fft = np.empty(n, dtype=complex)
    f_fft[0::2] = f0_fft + w * f1_fft
    f_fft[1::2] = f0_fft - w * f1_fft
    return f_fft


def fft(f):
    """Compute the FFT of a polynomial mod (x ** n + 1).

    Args:
        f: a polynomial

    Format: input as coefficients, output as FFT
    """
    n = len(f)
    if (n > 2):
        f0, f1 = split(f)
        f0_fft = fft(f0)
        f1_fft = fft(f1)
        f_fft = merge_fft([f0_fft, f1_fft])
    elif (n == 2):
        f_fft = np.empty(n, dtype=complex)
        f_fft[0] = complex(f[0], f[1])
        f_fft[1] = complex(f[0], -f[1])
    return f_fft


def ifft(f_fft):
    """Compute the inverse FFT of a polynomial mod (x ** n + 1).

    Args:
        f: a FFT of a polynomial

    Format: input as FFT, output as coefficients (numpy float array)
    """
    n = len(f_fft)
    if (n > 2):
        f0_fft, f1_fft = split_fft(f_fft)
        f = np.empty(n)
        f[0::2] = ifft(f0_fft)
        f[1::2] = ifft(f1_fft)
    elif (n == 2):
        f = np.array([f_fft[0].real, f_fft[0].imag])
    return f


def round_poly(f):
    """Round the coefficients of a real polynomial to the nearest integers."""
    return [int(elt) for elt in np.rint(f)]


def add(f, g):
    """Addition of two polynomials (coefficient representation)."""
    assert len(f) == len(g)
    deg = len(f)
    return [f[i] + g[i] for i in range(deg)]


def neg(f):
    """Negation of a polynomials (any representation)."""
    deg = len(f)
    return [- f[i] for i in range(deg)]


def sub(f, g):
    """Substraction of two polynomials (any representation)."""
    return add(f, neg(g))


def add_fft(f_fft, g_fft):
    """Addition of two polynomials (FFT representation)."""
    return f_fft + g_fft


def sub_fft(f_fft, g_fft):
    """Substraction of two polynomials (FFT representation)."""
    return f_fft - g_fft


def mul_fft(f_fft, g_fft):
    """Multiplication of two polynomials (FFT representation)."""
    return f_fft * g_fft


def div_fft(f_fft, g_fft):
    """Division of two polynomials (FFT representation)."""
    if np.any(g_fft == 0):
        raise ZeroDivisionError
    return f_fft / g_fft


def adj_fft(f_fft):
    """Ajoint of a polynomial (FFT representation)."""
    return f_fft.conj()
