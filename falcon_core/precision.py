"""
Precision requirements of the floating-point part of Falcon.

Signing mixes exact arithmetic modulo q with floating-point arithmetic in
the FFT domain. Two things must hold for the signatures to be both valid
and secure:

- the FFT round-off never moves a coordinate of v = z * B by 1/2 or more,
  otherwise the rounding back to integers is wrong and the signature does
  not verify (fft_error_bound, check_fft_precision);
- the leaves of the falcon tree stay within [sigmin, MAX_SIGMA], which
  bounds the statistical distance of each call to samplerz, and thus the
  Renyi divergence between the real and the ideal sampler
  (sampler_relative_error, optimal_renyi_order, reduced_security).

All the analysis is done with mpmath.
"""
from mpmath import mp

from .samplerz import MAX_SIGMA


"""Unit round-off of IEEE-754 double precision."""
UNIT_ROUNDOFF = mp.mpf(2) ** -53


def smooth(logeps, m):
    """Smoothing parameter of Z^m for a smoothing error 2 ** -logeps."""
    return mp.sqrt(mp.log(2 * m) + logeps * mp.log(2)) / mp.sqrt(2 * mp.pi * mp.pi)


def anti_smooth(r, dim, tolerance=mp.mpf(10) ** -15):
    """Inverse of smooth(): find logeps such that smooth(logeps, dim) = r."""
    left_logeps = mp.mpf(1)
    right_logeps = mp.mpf(3000)
    mid_logeps = (left_logeps + right_logeps) / 2
    t = smooth(mid_logeps, dim)
    # 3000 / 2 ** 64 is far below the tolerance
    for _ in range(64):
        if abs(t - r) <= tolerance:
            break
        if t > r:
            right_logeps = mid_logeps
        else:
            left_logeps = mid_logeps
        mid_logeps = (left_logeps + right_logeps) / 2
        t = smooth(mid_logeps, dim)
    return mid_logeps


def collect_leaves(tree):
    """Standard deviations stored in the leaves of a (normalized) falcon tree."""
    return [float(leaf) for leaf in tree.leaves]


def check_tree(tree, param):
    """Check that every leaf of a normalized tree is in [sigmin, MAX_SIGMA]."""
    return all(param.sigmin <= r <= MAX_SIGMA for r in collect_leaves(tree))


def sampler_relative_error(tree):
    """
    Relative error of the fast Fourier sampler, when each leaf of the tree
    is sampled with a smoothing error 2 ** -anti_smooth(leaf, 1).
    """
    with mp.workdps(50):
        eps = mp.mpf(1)
        for r in collect_leaves(tree):
            logeps = anti_smooth(mp.mpf(r), 1)
            eps = eps * (mp.mpf(1) + mp.power(2, -logeps))
        return eps ** 2 - 1


def falcon_relative_error(logeps):
    """Relative error of the sampler for a uniform smoothing error 2 ** -logeps."""
    return mp.mpf(2) * mp.power(2, -mp.mpf(logeps))


def renyi_divergence(a, re):
    """Renyi divergence of order a for a relative error re."""
    return mp.mpf(1) + a * mp.power(re, 2) / 2


def optimal_renyi_order(queries, re, lam):
    """Renyi order minimizing the security loss after 'queries' signatures."""
    k = mp.power(re, 2) / 2
    m = queries * k / mp.log(2)
    return (lam * k + mp.sqrt(lam * k * lam * k + 4 * lam * m)) / 2 / m


def reduced_security(queries, a, re, lam):
    """Bits of security lost, at order a, by using an imperfect sampler."""
    return queries * mp.log(renyi_divergence(a, re), 2) + lam / a


def fft_error_bound(n):
    """
    Bound on the relative error ||fl(FFT(f)) - FFT(f)|| / ||FFT(f)|| of a
    radix-2 FFT of size n computed in double precision, with twiddle
    factors correct to one unit round-off.
    """
    u = UNIT_ROUNDOFF
    mu = u
    gamma4 = 4 * u / (1 - 4 * u)
    eta = mu + gamma4 * (mp.sqrt(2) + mu)
    depth = mp.log(n, 2)
    return depth * eta / (1 - depth * eta)


def check_fft_precision(n, max_norm):
    """
    Check that a polynomial of euclidean norm at most max_norm goes through
    an FFT and an inverse FFT with an absolute error below 1/2 per
    coefficient, so that rounding recovers the exact integers.
    """
    with mp.workdps(30):
        rel = fft_error_bound(n)
        # Forward and inverse transforms, plus the pointwise products.
        err = (2 * rel + 2 * UNIT_ROUNDOFF) * max_norm
        return err < mp.mpf(1) / 2
