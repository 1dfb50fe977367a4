"""
Normal and chi-square probabilities and critical chi-square values.

The probability routines are the classic public-domain approximations by
Gary Perlman (Wang Institute), later adapted by John Walker:

- the normal CDF uses Ibbetson's polynomial approximation
  (Algorithm 209, Collected Algorithms of the CACM, 1963, p. 616);
- the chi-square upper tail uses Hill and Pike's recurrence
  (Algorithm 299, Collected Algorithms of the CACM, 1967, p. 243, with the
  rounding-error remark of ACM TOMS, June 1985, p. 185).

Critical values are found by bisection, relying on the tail probability
being decreasing in ``x``. They are the expensive part, so a
:class:`ChiSquare` engine memoizes them per ``(p, df)`` in a
:class:`ChiSquareCache` that is safe to share between threads.
"""

from __future__ import annotations

import math
import threading
from typing import Callable, Hashable

BIGX = 20.0  # max value to represent exp(x)
LOG_SQRT_PI = 0.5723649429247000870717135  # log(sqrt(pi))
I_SQRT_PI = 0.5641895835477562869480795  # 1 / sqrt(pi)

Z_MAX = 6.0  # maximum meaningful z value
CHI_EPSILON = 0.000001  # accuracy of the critical value bisection
CHI_MAX = 99999.0  # maximum chi-square value


def _ex(x: float) -> float:
    """exp(x), flushed to 0 below -BIGX."""
    return 0.0 if x < -BIGX else math.exp(x)


def normal_cdf(z: float) -> float:
    """
    Probability that a standard normal variable is at most ``z``.

    This is the one-sided CDF P(Z <= z); the odd-df chi-square tail takes
    ``2 * normal_cdf(-sqrt(x))`` from it. The approximation has six digit
    accuracy for |z| < 6. Beyond that the central mass saturates to 1, so the
    result is exactly 1.0 for z >= 6 and 0.0 for z <= -6.

    Args:
        z (float): Standard normal value.

    Returns:
        float: P(Z <= z), in [0, 1].
    """
    if z == 0.0:
        x = 0.0
    else:
        y = 0.5 * abs(z)
        if y >= Z_MAX * 0.5:
            x = 1.0
        elif y < 1.0:
            w = y * y
            x = ((((((((0.000124818987 * w
                        - 0.001075204047) * w + 0.005198775019) * w
                      - 0.019198292004) * w + 0.059054035642) * w
                    - 0.151968751364) * w + 0.319152932694) * w
                  - 0.531923007300) * w + 0.797884560593) * y * 2.0
        else:
            y -= 2.0
            x = (((((((((((((-0.000045255659 * y
                             + 0.000152529290) * y - 0.000019538132) * y
                           - 0.000676904986) * y + 0.001390604284) * y
                         - 0.000794620820) * y - 0.002034254874) * y
                       + 0.006549791214) * y - 0.010557625006) * y
                     + 0.011630447319) * y - 0.009279453341) * y
                   + 0.005353579108) * y - 0.002141268741) * y
                 + 0.000535310849) * y + 0.999936657524
    return (x + 1.0) * 0.5 if z > 0.0 else (1.0 - x) * 0.5


def chi_square_tail_probability(x: float, df: int) -> float:
    """
    Probability that a chi-square variable with ``df`` degrees of freedom exceeds ``x``.

    Non-positive ``x`` or ``df < 1`` return 1.0 (the null hypothesis can never
    be rejected). When ``x / 2`` exceeds BIGX the series is summed in the log
    domain so that no intermediate term overflows.

    Args:
        x (float): Observed chi-square statistic.
        df (int): Degrees of freedom.

    Returns:
        float: Upper tail probability, in [0, 1].
    """
    if x <= 0.0 or df < 1:
        return 1.0

    a = 0.5 * x
    even = df % 2 == 0
    y = _ex(-a) if df > 1 else 0.0
    s = y if even else 2.0 * normal_cdf(-math.sqrt(x))
    if df <= 2:
        return s

    x = 0.5 * (df - 1.0)
    z = 1.0 if even else 0.5
    if a > BIGX:
        e = 0.0 if even else LOG_SQRT_PI
        c = math.log(a)
        while z <= x:
            e = math.log(z) + e
            s += _ex(c * z - a - e)
            z += 1.0
        return s

    e = 1.0 if even else I_SQRT_PI / math.sqrt(a)
    c = 0.0
    while z <= x:
        e = e * (a / z)
        c = c + e
        z += 1.0
    return c * y + s


def _bisect_critical_value(p: float, df: int) -> float:
    minchisq = 0.0
    maxchisq = CHI_MAX
    chisqval = df / math.sqrt(p)  # fair first value
    while (maxchisq - minchisq) > CHI_EPSILON:
        if chi_square_tail_probability(chisqval, df) < p:
            maxchisq = chisqval
        else:
            minchisq = chisqval
        chisqval = (maxchisq + minchisq) * 0.5
    return chisqval


class ChiSquareCache:
    """
    Thread-safe memo table with get-or-compute semantics.

    The lock only guards dictionary access; ``compute`` runs unlocked, so two
    threads missing the same key may both compute it. The first value stored
    is kept, which is harmless for pure functions.
    """

    def __init__(self):
        self._values = {}
        self._lock = threading.Lock()

    def get(self, key: Hashable):
        with self._lock:
            return self._values.get(key)

    def get_or_compute(self, key: Hashable, compute: Callable[[], float]) -> float:
        with self._lock:
            if key in self._values:
                return self._values[key]
        value = compute()
        with self._lock:
            return self._values.setdefault(key, value)

    def clear(self) -> None:
        with self._lock:
            self._values.clear()

    def __len__(self):
        with self._lock:
            return len(self._values)

    def __contains__(self, key):
        with self._lock:
            return key in self._values


class ChiSquare:
    """
    Critical chi-square value service backed by an injectable cache.

    Args:
        cache (ChiSquareCache, optional): Memo table to use. A private one is
            created when omitted, so separate engines never share entries.
    """

    def __init__(self, cache: ChiSquareCache | None = None):
        self.cache = cache if cache is not None else ChiSquareCache()

    def critical_value(self, p: float, df: int) -> float:
        """
        Chi-square value whose upper tail probability at ``df`` degrees of freedom is ``p``.

        Args:
            p (float): Target tail probability (significance level).
            df (int): Degrees of freedom.

        Returns:
            float: The critical value, within CHI_EPSILON. ``p <= 0`` gives
            CHI_MAX and ``p >= 1`` gives 0.
        """
        if p <= 0.0:
            return CHI_MAX
        if p >= 1.0:
            return 0.0
        return self.cache.get_or_compute((p, df), lambda: _bisect_critical_value(p, df))


_default_engine = ChiSquare()


def default_engine() -> ChiSquare:
    """Return the process-wide engine used when none is injected."""
    return _default_engine


def critical_value(p: float, df: int) -> float:
    """Critical value from the process-wide engine. See :meth:`ChiSquare.critical_value`."""
    return _default_engine.critical_value(p, df)
