"""
This file implements the generation of the NTRU polynomials of a Falcon
secret key: short polynomials f, g, F, G such that f * G - g * F = q
mod (x ** n + 1).

The equation is solved with the tower-of-fields approach: the field norms
of f and g are computed down to degree 1, the equation is solved over the
integers with the extended GCD, and the solution is lifted back up and
reduced (Babai) at each level.
"""
import logging

from .common import q, sqnorm
from .encoding import FG_bits, fg_bits, fits
from .errors import KeyGenerationFailed
from .fft import add_fft, adj_fft, fft, ifft, mul_fft
from .ntt import is_invertible, xgcd
from .params import GS_BOUND, logn


logger = logging.getLogger(__name__)


# Number of Babai reduction rounds after which reduce() gives up
MAX_REDUCE_ROUNDS = 1 << 12

# Number of rejected polynomials (or coefficients) after which gauss_sample gives up
MAX_GAUSS_TRIALS = 64


def karatsuba(a, b, n):
    """Karatsuba multiplication between polynomials.

    The coefficients may be either integer or real.
    """
    if n == 1:
        return [a[0] * b[0], 0]
    n2 = n // 2
    a0 = a[:n2]
    a1 = a[n2:]
    b0 = b[:n2]
    b1 = b[n2:]
    ax = [a0[i] + a1[i] for i in range(n2)]
    bx = [b0[i] + b1[i] for i in range(n2)]
    a0b0 = karatsuba(a0, b0, n2)
    a1b1 = karatsuba(a1, b1, n2)
    axbx = karatsuba(ax, bx, n2)
    for i in range(n):
        axbx[i] -= (a0b0[i] + a1b1[i])
    ab = [0] * (2 * n)
    for i in range(n):
        ab[i] += a0b0[i]
        ab[i + n] += a1b1[i]
        ab[i + n2] += axbx[i]
    return ab


def karamul(a, b):
    """Karatsuba multiplication, followed by reduction mod (x ** n + 1)."""
    n = len(a)
    ab = karatsuba(a, b, n)
    abr = [ab[i] - ab[i + n] for i in range(n)]
    return abr


def galois_conjugate(a):
    """
    Galois conjugate of an element a in Q[x] / (x ** n + 1).
    Here, the Galois conjugate of a(x) is simply a(-x).
    """
    n = len(a)
    return [((-1) ** i) * a[i] for i in range(n)]


def field_norm(a):
    """
    Project an element a of Q[x] / (x ** n + 1) onto Q[x] / (x ** (n / 2) + 1).
    Only works if n is a power-of-two.
    """
    n2 = len(a) // 2
    ae = [a[2 * i] for i in range(n2)]
    ao = [a[2 * i + 1] for i in range(n2)]
    ae_squared = karamul(ae, ae)
    ao_squared = karamul(ao, ao)
    res = ae_squared[:]
    for i in range(n2 - 1):
        res[i + 1] -= ao_squared[i]
    res[0] += ao_squared[n2 - 1]
    return res


def lift(a):
    """
    Lift an element a of Q[x] / (x ** (n / 2) + 1) up to Q[x] / (x ** n + 1).
    The lift of a(x) is simply a(x ** 2) seen as an element of Q[x] / (x ** n + 1).
    """
    n = len(a)
    res = [0] * (2 * n)
    for i in range(n):
        res[2 * i] = a[i]
    return res


def bitsize(a):
    """
    Compute the bitsize of an element of Z (not counting the sign).
    The bitsize is rounded to the next multiple of 8.
    This makes the function slightly imprecise, but faster to compute.
    """
    val = abs(a)
    res = 0
    while val:
        res += 8
        val >>= 8
    return res


def reduce(f, g, F, G):
    """
    Reduce (F, G) relatively to (f, g).

    This is done via Babai's reduction.
    (F, G) <-- (F, G) - k * (f, g), where k = round((F f* + G g*) / (f f* + g g*)).
    Corresponds to algorithm 7 (Reduce) of Falcon's documentation.

    The coefficients are shifted down to 53 bits before going through the
    FFT, so the reduction works for arbitrarily large integers.
    """
    n = len(f)
    size = max(53, bitsize(min(f)), bitsize(max(f)), bitsize(min(g)), bitsize(max(g)))

    f_adjust = [elt >> (size - 53) for elt in f]
    g_adjust = [elt >> (size - 53) for elt in g]
    fa_fft = fft(f_adjust)
    ga_fft = fft(g_adjust)
    den_fft = add_fft(mul_fft(fa_fft, adj_fft(fa_fft)), mul_fft(ga_fft, adj_fft(ga_fft)))

    for _ in range(MAX_REDUCE_ROUNDS):
        # Because we work in finite precision to reduce very large polynomials,
        # we may need to perform the reduction several times.
        Size = max(53, bitsize(min(F)), bitsize(max(F)), bitsize(min(G)), bitsize(max(G)))
        if Size < size:
            break

        F_adjust = [elt >> (Size - 53) for elt in F]
        G_adjust = [elt >> (Size - 53) for elt in G]
        Fa_fft = fft(F_adjust)
        Ga_fft = fft(G_adjust)

        num_fft = add_fft(mul_fft(Fa_fft, adj_fft(fa_fft)), mul_fft(Ga_fft, adj_fft(ga_fft)))
        k = [int(round(elt)) for elt in ifft(num_fft / den_fft)]
        if all(elt == 0 for elt in k):
            break
        # The two shifts by size - 53 and Size - 53 cancel out to Size - size
        fk = karamul(f, k)
        gk = karamul(g, k)
        for i in range(n):
            F[i] -= fk[i] << (Size - size)
            G[i] -= gk[i] << (Size - size)
    return F, G


def ntru_solve(f, g):
    """
    Solve the NTRU equation for f and g.
    Corresponds to NTRUSolve in Falcon's documentation.

    Raise ArithmeticError if the resultants of f and g are not coprime.
    """
    n = len(f)
    if n == 1:
        f0 = f[0]
        g0 = g[0]
        d, u, v = xgcd(f0, g0)
        if d != 1:
            raise ArithmeticError("the resultants of f and g are not coprime")
        return [- q * v], [q * u]
    else:
        fp = field_norm(f)
        gp = field_norm(g)
        Fp, Gp = ntru_solve(fp, gp)
        F = karamul(lift(Fp), galois_conjugate(g))
        G = karamul(lift(Gp), galois_conjugate(f))
        F, G = reduce(f, g, F, G)
        return F, G


def gs_norm(f, g):
    """
    Compute the squared Gram-Schmidt norm of the NTRU matrix generated by f, g.

    This matrix is [[g, - f], [G, - F]], and its squared Gram-Schmidt norm
    is the max of ||(g, -f)|| ** 2 and ||(q f* / (f f* + g g*), q g* / (f f* + g g*))|| ** 2.
    The second term is computed in the FFT domain, with Parseval's identity.
    """
    n = len(f)
    sqnorm_fg = sqnorm([f, g])
    f_fft = fft(f)
    g_fft = fft(g)
    ffgg = (f_fft * adj_fft(f_fft) + g_fft * adj_fft(g_fft)).real
    sqnorm_FG = (q ** 2) * sum(1 / ffgg) / n
    return max(sqnorm_fg, sqnorm_FG)


# Tables of the cumulative distribution (scaled to 2 ** 16) of the
# coefficients of f and g, for degrees 256, 512 and 1024. The table for
# degree 256 is also used for lower degrees, several samples being added.
gauss_tab8 = [
    1, 3, 6, 11, 22, 40, 73, 129,
    222, 371, 602, 950, 1460, 2183, 3179, 4509,
    6231, 8395, 11032, 14150, 17726, 21703, 25995, 30487,
    35048, 39540, 43832, 47809, 51385, 54503, 57140, 59304,
    61026, 62356, 63352, 64075, 64585, 64933, 65164, 65313,
    65406, 65462, 65495, 65513, 65524, 65529, 65532, 65534]
gauss_tab9 = [
    1, 4, 11, 28, 65, 146, 308, 615,
    1164, 2083, 3535, 5692, 8706, 12669, 17574, 23285,
    29542, 35993, 42250, 47961, 52866, 56829, 59843, 62000,
    63452, 64371, 64920, 65227, 65389, 65470, 65507, 65524,
    65531, 65534]
gauss_tab10 = [
    2, 8, 28, 94, 280, 742, 1761, 3753,
    7197, 12472, 19623, 28206, 37329, 45912, 53063, 58338,
    61782, 63774, 64793, 65255, 65441, 65507, 65527, 65533]


def _uint16_stream(randombytes):
    """Yield 16-bit unsigned integers (little-endian), read by chunks of 512 bytes."""
    while True:
        chunk = randombytes(512)
        for i in range(256):
            yield chunk[2 * i] + (chunk[2 * i + 1] << 8)


def gauss_sample(n, randombytes):
    """
    Sample a polynomial of degree n < 2 ** 11 with coefficients following a
    discrete Gaussian of std. dev. close to 1.17 * sqrt(q / (2 * n)), and
    odd parity.

    Coefficients outside [-127, 127] are resampled, which only happens for
    small degrees, and even polynomials are resampled from the same stream.
    Raise KeyGenerationFailed if randombytes keeps producing rejected
    values, which a sound source does with negligible probability.
    """
    k = logn[n]
    if k == 10:
        tab, reps = gauss_tab10, 1
    elif k == 9:
        tab, reps = gauss_tab9, 1
    else:
        tab, reps = gauss_tab8, 1 << (8 - k)
    half = len(tab) >> 1
    stream = _uint16_stream(randombytes)

    for _ in range(MAX_GAUSS_TRIALS):
        f = []
        for _ in range(n):
            for _ in range(MAX_GAUSS_TRIALS):
                v = 0
                for _ in range(reps):
                    y = next(stream)
                    v += sum(1 for elt in tab if elt < y) - half
                if -127 <= v <= 127:
                    break
            else:
                raise KeyGenerationFailed("coefficients of f, g out of [-127, 127] "
                                          "%d times in a row" % MAX_GAUSS_TRIALS)
            f.append(v)
        if sum(f) & 1:
            return f
    raise KeyGenerationFailed("%d sampled polynomials in a row have even parity"
                              % MAX_GAUSS_TRIALS)


def ntru_candidates(n, randombytes, attempts):
    """
    Yield the tuples (f, g, F, G) that pass all the checks of key generation,
    out of 'attempts' samplings of (f, g).

    Each tuple verifies f * G - g * F = q mod (x ** n + 1), f is invertible
    mod q, and the Gram-Schmidt norm of [[g, - f], [G, - F]] is small.
    """
    for attempt in range(attempts):
        f = gauss_sample(n, randombytes)
        g = gauss_sample(n, randombytes)
        if not (fits(f, fg_bits[logn[n]]) and fits(g, fg_bits[logn[n]])):
            logger.debug("attempt %d: f, g do not fit on %d bits", attempt, fg_bits[logn[n]])
            continue
        if gs_norm(f, g) > (GS_BOUND ** 2):
            logger.debug("attempt %d: Gram-Schmidt norm too large", attempt)
            continue
        if not is_invertible(f):
            logger.debug("attempt %d: f is not invertible mod q", attempt)
            continue
        try:
            F, G = ntru_solve(f, g)
        except ArithmeticError:
            logger.debug("attempt %d: no solution to the NTRU equation", attempt)
            continue
        if not (fits(F, FG_bits) and fits(G, FG_bits)):
            logger.debug("attempt %d: F, G do not fit on %d bits", attempt, FG_bits)
            continue
        yield f, g, F, G


def ntru_gen(n, randombytes, attempts=1000):
    """
    Implement the algorithm 5 (NTRUGen) of Falcon's documentation.
    At the end of the function, polynomials f, g, F, G in Z[x]/(x ** n + 1)
    are output, which verify f * G - g * F = q mod (x ** n + 1).

    Return None if no suitable (f, g) is found in 'attempts' trials, and
    raise KeyGenerationFailed if randombytes cannot feed gauss_sample.
    """
    return next(ntru_candidates(n, randombytes, attempts), None)
