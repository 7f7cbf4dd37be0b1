"""
Parameter sets for Falcon.

The tabulated values follow from the smoothing parameter of Z^(2n):
    sigmin    = smooth(logeps, 2 * n)
    sigma     = 1.17 * sqrt(q) * sigmin
    sig_bound = floor((1.1 * sigma * sqrt(2 * n)) ** 2)
see derive_param() below.
"""
from dataclasses import dataclass
from math import sqrt

from mpmath import mp

from .common import q
from .precision import smooth


logn = {
    2: 1,
    4: 2,
    8: 3,
    16: 4,
    32: 5,
    64: 6,
    128: 7,
    256: 8,
    512: 9,
    1024: 10
}


# Bytelength of the signing salt and header
HEAD_LEN = 1
SALT_LEN = 40
SEED_LEN = 56

# Length of the seed of the key pair generation
KEYGEN_SEED_LEN = 32

# Max Gram-Schmidt norm of the private basis
GS_BOUND = 1.17 * sqrt(q)


@dataclass(frozen=True)
class FalconParam:
    """
    Dataclass for Falcon parameters.
    - n is the dimension/degree of the cyclotomic ring
    - sigma is the std. dev. of signatures (Gaussians over a lattice)
    - sigmin is a lower bounds on the std. dev. of each Gaussian over Z
    - sigbound is the upper bound on ||s1||^2 + ||s2||^2
    - sig_bytelen is the bytelength of signatures
    - keygen_attempts bounds the number of (f, g) candidates in keygen
    - sign_attempts bounds the number of samplings in sign
    """
    n: int
    sigma: float
    sigmin: float
    sig_bound: int
    sig_bytelen: int
    keygen_attempts: int = 1000
    sign_attempts: int = 64

    @property
    def logn(self) -> int:
        return logn[self.n]


# (n, sigma, sigmin, sig_bound, sig_bytelen) for each supported degree
_PARAM_TABLE = [
    (2, 144.81253976308423, 1.1165085072329104, 101498, 44),
    (4, 146.83798833523608, 1.1321247692325274, 208714, 47),
    (8, 148.83587593064718, 1.147528535373367, 428865, 52),
    (16, 151.78340713845503, 1.170254078853483, 892039, 63),
    (32, 154.6747794602761, 1.1925466358390344, 1852696, 82),
    (64, 157.51308555044122, 1.2144300507766141, 3842630, 122),
    (128, 160.30114421975344, 1.235926056771981, 7959734, 200),
    (256, 163.04153322607107, 1.2570545284063217, 16468416, 356),
    (512, 165.7366171829776, 1.2778336969128337, 34034726, 666),
    (1024, 168.38857144654395, 1.298280334344292, 70265242, 1280),
]

params = {
    n: FalconParam(n=n, sigma=sigma, sigmin=sigmin, sig_bound=sig_bound, sig_bytelen=sig_bytelen)
    for n, sigma, sigmin, sig_bound, sig_bytelen in _PARAM_TABLE
}


def derive_param(n, logeps, sig_bytelen=None):
    """
    Recompute (sigma, sigmin, sig_bound) for degree n, where 2 ** -logeps
    is the smoothing error targeted for Z^(2n).

    Falcon-512 uses logeps = 35.5 and Falcon-1024 uses logeps = 36.
    """
    with mp.workdps(50):
        sigmin = smooth(logeps, 2 * n)
        sigma = mp.mpf(1.17) * mp.sqrt(q) * sigmin
        beta = mp.mpf(1.1) * sigma * mp.sqrt(2 * n)
        sig_bound = int(mp.floor(beta ** 2))
    if sig_bytelen is None:
        sig_bytelen = params[n].sig_bytelen if n in params else 0
    return FalconParam(
        n=n,
        sigma=float(sigma),
        sigmin=float(sigmin),
        sig_bound=sig_bound,
        sig_bytelen=sig_bytelen,
    )
