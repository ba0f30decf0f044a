"""
Special functions underlying the closed-form distributions.

The densities and cumulative distribution functions of the Gamma family,
Beta, Student-t, Poisson, Dirichlet and the Wishart family are all written
in terms of a handful of special functions:

.. math::
    \\log\\Gamma(x), \\quad
    B(a, b) = \\frac{\\Gamma(a)\\Gamma(b)}{\\Gamma(a+b)}, \\quad
    P(a, x) = \\frac{1}{\\Gamma(a)} \\int_0^x t^{a-1} e^{-t} dt, \\quad
    I_x(a, b) = \\frac{1}{B(a, b)} \\int_0^x t^{a-1} (1-t)^{b-1} dt

together with the error function and its inverse.

All functions accept scalars or arrays and broadcast their arguments. Scalar
input returns a Python ``float``.
"""

import numpy as np
from numpy.typing import ArrayLike, NDArray
from typing import Union

# Lanczos approximation with g = 7 and 9 coefficients.
_LANCZOS_G = 7.0
_LANCZOS_COEFFICIENTS = np.array([
    0.99999999999980993,
    676.5203681218851,
    -1259.1392167224028,
    771.32342877765313,
    -176.61502916214059,
    12.507343278686905,
    -0.13857109526572012,
    9.9843695780195716e-6,
    1.5056327351493116e-7,
])
_HALF_LOG_2PI = 0.5 * np.log(2.0 * np.pi)

# Iteration controls for the series and continued fractions.
_MAX_ITERATIONS = 1000
_EPS = 3.0e-16
_FPMIN = 1.0e-300

# Lower incomplete gamma saturates to 1 beyond this argument.
_GAMMA_SATURATION = 1.0e10

# Numerical Recipes erfc coefficients (fractional error < 1.2e-7).
_ERF_COEFFICIENTS = np.array([
    -1.26551223, 1.00002368, 0.37409196, 0.09678418, -0.18628806,
    0.27886807, -1.13520398, 1.48851587, -0.82215223, 0.17087277,
])

# Rational initial approximation for the inverse error function.
_ERFINV_A = np.array([0.886226899, -1.645349621, 0.914624893, -0.140543331])
_ERFINV_B = np.array([-2.118377725, 1.442710462, -0.329097515, 0.012229801])
_ERFINV_C = np.array([-1.970840454, -1.624906493, 3.429567803, 1.641345311])
_ERFINV_D = np.array([3.543889200, 1.637067800])
_ERFINV_CENTRAL = 0.7
_TWO_OVER_SQRT_PI = 2.0 / np.sqrt(np.pi)


def _is_scalar(*args) -> bool:
    return all(np.ndim(a) == 0 for a in args)


def _output(result: NDArray, scalar: bool) -> Union[float, NDArray]:
    if scalar:
        return float(np.reshape(result, -1)[0])
    return result


# ============================================================================
# Gamma and Beta functions
# ============================================================================

def _lanczos_log_gamma(x: NDArray) -> NDArray:
    """Lanczos series, valid for ``x >= 0.5``."""
    z = x - 1.0
    a = np.full_like(z, _LANCZOS_COEFFICIENTS[0])
    for i in range(1, len(_LANCZOS_COEFFICIENTS)):
        a = a + _LANCZOS_COEFFICIENTS[i] / (z + i)
    t = z + _LANCZOS_G + 0.5
    return _HALF_LOG_2PI + (z + 0.5) * np.log(t) - t + np.log(a)


def log_gamma(x: ArrayLike) -> Union[float, NDArray]:
    """
    Natural logarithm of the Gamma function, :math:`\\log\\Gamma(x)`.

    Uses the Lanczos approximation (:math:`g = 7`, nine coefficients) for
    :math:`x \\geq 1/2` and the reflection formula

    .. math::
        \\log\\Gamma(x) = \\log\\frac{\\pi}{\\sin(\\pi x)} - \\log\\Gamma(1 - x)

    below it. The relative error is below :math:`10^{-10}` on
    :math:`(0, 10^6]`.

    Parameters
    ----------
    x : array_like
        Strictly positive arguments.

    Returns
    -------
    lgamma : float or ndarray
        :math:`\\log\\Gamma(x)`.

    Raises
    ------
    ValueError
        If any argument is not strictly positive.
    """
    scalar = _is_scalar(x)
    x = np.atleast_1d(np.asarray(x, dtype=float))
    if np.any(x <= 0):
        raise ValueError(f"log_gamma requires x > 0, got min {np.min(x)}")

    small = x < 0.5
    result = _lanczos_log_gamma(np.where(small, 1.0 - x, x))
    if np.any(small):
        xs = x[small]
        result[small] = np.log(np.pi / np.sin(np.pi * xs)) - result[small]
    return _output(result, scalar)


def log_factorial(n: ArrayLike) -> Union[float, NDArray]:
    """
    Logarithm of :math:`n!` for nonnegative integers, :math:`\\log\\Gamma(n+1)`.

    Parameters
    ----------
    n : array_like
        Nonnegative counts.

    Returns
    -------
    log_fact : float or ndarray
    """
    scalar = _is_scalar(n)
    n = np.atleast_1d(np.asarray(n, dtype=float))
    if np.any(n < 0):
        raise ValueError(f"log_factorial requires n >= 0, got min {np.min(n)}")
    result = np.zeros_like(n)
    large = n > 1
    if np.any(large):
        result[large] = log_gamma(n[large] + 1.0)
    return _output(result, scalar)


def log_beta(a: ArrayLike, b: ArrayLike) -> Union[float, NDArray]:
    """
    Logarithm of the Beta function.

    .. math::
        \\log B(a, b) = \\log\\Gamma(a) + \\log\\Gamma(b) - \\log\\Gamma(a + b)
    """
    scalar = _is_scalar(a, b)
    a, b = np.broadcast_arrays(np.asarray(a, dtype=float), np.asarray(b, dtype=float))
    result = (np.asarray(log_gamma(a)) + np.asarray(log_gamma(b))
              - np.asarray(log_gamma(a + b)))
    return _output(result, scalar)


def log_multinomial_beta(alpha: ArrayLike) -> Union[float, NDArray]:
    """
    Logarithm of the multinomial Beta function along the last axis.

    .. math::
        \\log B(\\alpha) = \\sum_i \\log\\Gamma(\\alpha_i)
        - \\log\\Gamma\\left(\\sum_i \\alpha_i\\right)

    This is the log normalizer of the Dirichlet distribution.

    Parameters
    ----------
    alpha : array_like
        Positive parameters, shape ``(..., k)``.

    Returns
    -------
    log_b : float or ndarray
        Shape ``(...)``.
    """
    alpha = np.asarray(alpha, dtype=float)
    result = (np.sum(np.asarray(log_gamma(alpha)), axis=-1)
              - np.asarray(log_gamma(np.sum(alpha, axis=-1))))
    if np.ndim(result) == 0:
        return float(result)
    return result


def log_multivariate_gamma(x: float, p: int) -> float:
    """
    Logarithm of the multivariate Gamma function :math:`\\Gamma_p(x)`.

    .. math::
        \\log\\Gamma_p(x) = \\frac{p(p-1)}{4}\\log\\pi
        + \\sum_{j=1}^{p} \\log\\Gamma\\left(x + \\frac{1-j}{2}\\right)

    Parameters
    ----------
    x : float
        Argument, must exceed :math:`(p-1)/2`.
    p : int
        Dimension.
    """
    j = np.arange(1, p + 1)
    return float(p * (p - 1) / 4.0 * np.log(np.pi)
                 + np.sum(log_gamma(x + (1.0 - j) / 2.0)))


# ============================================================================
# Incomplete Gamma function
# ============================================================================

def _gamma_iterations(a: float) -> int:
    """Iteration cap for the incomplete gamma expansions.

    Near ``x = a`` the terms decay like ``exp(-n**2 / 2a)``, so the number of
    terms needed grows with ``sqrt(a)``.
    """
    return max(_MAX_ITERATIONS, int(20.0 * np.sqrt(a)) + 100)


def _gamma_series(a: float, x: float) -> float:
    """Series representation of P(a, x), converges for ``x < a + 1``."""
    ap = a
    delta = total = 1.0 / a
    for _ in range(_gamma_iterations(a)):
        ap += 1.0
        delta *= x / ap
        total += delta
        if abs(delta) < abs(total) * _EPS:
            return total * np.exp(-x + a * np.log(x) - log_gamma(a))
    raise RuntimeError(
        f"Incomplete gamma series did not converge for a={a}, x={x}"
    )


def _gamma_continued_fraction(a: float, x: float) -> float:
    """Continued fraction for Q(a, x) = 1 - P(a, x) using Lentz's method."""
    b = x + 1.0 - a
    c = 1.0 / _FPMIN
    d = 1.0 / b
    h = d
    for i in range(1, _gamma_iterations(a) + 1):
        an = -i * (i - a)
        b += 2.0
        d = an * d + b
        if abs(d) < _FPMIN:
            d = _FPMIN
        c = b + an / c
        if abs(c) < _FPMIN:
            c = _FPMIN
        d = 1.0 / d
        delta = d * c
        h *= delta
        if abs(delta - 1.0) < _EPS:
            break
    return np.exp(-x + a * np.log(x) - log_gamma(a)) * h


def _lower_incomplete_gamma_scalar(a: float, x: float) -> float:
    if x <= 0.0:
        return 0.0
    if x > _GAMMA_SATURATION:
        return 1.0
    if np.isinf(a):
        return 0.0
    if x < a + 1.0:
        return _gamma_series(a, x)
    return 1.0 - _gamma_continued_fraction(a, x)


def lower_incomplete_gamma(a: ArrayLike, x: ArrayLike) -> Union[float, NDArray]:
    """
    Regularized lower incomplete gamma function :math:`P(a, x)`.

    .. math::
        P(a, x) = \\frac{\\gamma(a, x)}{\\Gamma(a)}
        = \\frac{1}{\\Gamma(a)} \\int_0^x t^{a-1} e^{-t} dt

    Evaluated with the series expansion for :math:`x < a + 1` and with the
    continued fraction for the complement otherwise.

    Parameters
    ----------
    a : array_like
        Shape, strictly positive.
    x : array_like
        Upper integration limit. Values ``x <= 0`` give 0 and values above
        ``1e10`` give 1. An infinite shape gives 0 for finite ``x``.

    Returns
    -------
    p : float or ndarray
        Values in :math:`[0, 1]`.

    Raises
    ------
    ValueError
        If any shape is not strictly positive.
    RuntimeError
        If the series expansion fails to converge.
    """
    scalar = _is_scalar(a, x)
    a, x = np.broadcast_arrays(np.asarray(a, dtype=float), np.asarray(x, dtype=float))
    if np.any(a <= 0):
        raise ValueError(f"Shape must be positive, got min {np.min(a)}")

    result = np.empty(a.shape, dtype=float)
    for idx in np.ndindex(a.shape):
        result[idx] = _lower_incomplete_gamma_scalar(float(a[idx]), float(x[idx]))
    return _output(result, scalar)


# ============================================================================
# Incomplete Beta function
# ============================================================================

def _beta_continued_fraction(a: float, b: float, x: float) -> float:
    """Continued fraction for the incomplete beta function (Lentz)."""
    qab = a + b
    qap = a + 1.0
    qam = a - 1.0
    c = 1.0
    d = 1.0 - qab * x / qap
    if abs(d) < _FPMIN:
        d = _FPMIN
    d = 1.0 / d
    h = d
    for m in range(1, _MAX_ITERATIONS + 1):
        m2 = 2 * m
        # Even step
        aa = m * (b - m) * x / ((qam + m2) * (a + m2))
        d = 1.0 + aa * d
        if abs(d) < _FPMIN:
            d = _FPMIN
        c = 1.0 + aa / c
        if abs(c) < _FPMIN:
            c = _FPMIN
        d = 1.0 / d
        h *= d * c
        # Odd step
        aa = -(a + m) * (qab + m) * x / ((a + m2) * (qap + m2))
        d = 1.0 + aa * d
        if abs(d) < _FPMIN:
            d = _FPMIN
        c = 1.0 + aa / c
        if abs(c) < _FPMIN:
            c = _FPMIN
        d = 1.0 / d
        delta = d * c
        h *= delta
        if abs(delta - 1.0) < _EPS:
            break
    return h


def _regularized_incomplete_beta_scalar(a: float, b: float, x: float) -> float:
    if x <= 0.0:
        return 0.0
    if x >= 1.0:
        return 1.0
    bt = np.exp(a * np.log(x) + b * np.log1p(-x) - log_beta(a, b))
    if x < (a + 1.0) / (a + b + 2.0):
        return bt * _beta_continued_fraction(a, b, x) / a
    return 1.0 - bt * _beta_continued_fraction(b, a, 1.0 - x) / b


def regularized_incomplete_beta(a: ArrayLike, b: ArrayLike,
                                x: ArrayLike) -> Union[float, NDArray]:
    """
    Regularized incomplete Beta function :math:`I_x(a, b)`.

    .. math::
        I_x(a, b) = \\frac{1}{B(a, b)} \\int_0^x t^{a-1} (1-t)^{b-1} dt

    The continued fraction converges rapidly for
    :math:`x < (a+1)/(a+b+2)`; otherwise the symmetry
    :math:`I_x(a, b) = 1 - I_{1-x}(b, a)` is used.

    Parameters
    ----------
    a, b : array_like
        Shape parameters, strictly positive.
    x : array_like
        Evaluation points in :math:`[0, 1]`.

    Returns
    -------
    i : float or ndarray
        0 at ``x = 0`` and 1 at ``x = 1``.

    Raises
    ------
    ValueError
        If ``x`` lies outside :math:`[0, 1]` or a shape is not positive.
    """
    scalar = _is_scalar(a, b, x)
    a, b, x = np.broadcast_arrays(np.asarray(a, dtype=float),
                                  np.asarray(b, dtype=float),
                                  np.asarray(x, dtype=float))
    if np.any((x < 0.0) | (x > 1.0)):
        raise ValueError("x must be in [0, 1]")
    if np.any(a <= 0) or np.any(b <= 0):
        raise ValueError("Shape parameters a and b must be positive")

    result = np.empty(x.shape, dtype=float)
    for idx in np.ndindex(x.shape):
        result[idx] = _regularized_incomplete_beta_scalar(
            float(a[idx]), float(b[idx]), float(x[idx])
        )
    return _output(result, scalar)


# ============================================================================
# Error function
# ============================================================================

def erf(z: ArrayLike) -> Union[float, NDArray]:
    """
    Error function via a Chebyshev-fitted Horner polynomial.

    .. math::
        \\text{erf}(z) = \\frac{2}{\\sqrt{\\pi}} \\int_0^z e^{-t^2} dt

    With :math:`t = 1/(1 + |z|/2)` the complement is approximated as
    :math:`t \\exp(-z^2 + \\text{poly}(t))` with fractional error below
    :math:`1.2 \\times 10^{-7}`. The function is odd and exactly zero at
    the origin.
    """
    scalar = _is_scalar(z)
    z = np.asarray(z, dtype=float)
    abs_z = np.abs(z)
    t = 1.0 / (1.0 + 0.5 * abs_z)

    poly = np.full_like(t, _ERF_COEFFICIENTS[-1])
    for coefficient in _ERF_COEFFICIENTS[-2::-1]:
        poly = coefficient + t * poly

    ans = 1.0 - t * np.exp(-abs_z * abs_z + poly)
    result = np.where(z == 0.0, 0.0, np.sign(z) * ans)
    return _output(result, scalar)


def _horner(coefficients: NDArray, z: NDArray) -> NDArray:
    result = np.full_like(z, coefficients[-1])
    for coefficient in coefficients[-2::-1]:
        result = coefficient + z * result
    return result


def erfinv(y: ArrayLike) -> Union[float, NDArray]:
    """
    Inverse of the error function.

    A rational approximation gives about six correct digits, which two
    Newton-Raphson steps on :func:`erf`

    .. math::
        x \\leftarrow x - \\frac{\\text{erf}(x) - y}{\\frac{2}{\\sqrt{\\pi}} e^{-x^2}}

    refine to the precision of :func:`erf`.

    Parameters
    ----------
    y : array_like
        Values in :math:`(-1, 1)`.

    Returns
    -------
    x : float or ndarray
        ``+inf`` for ``y >= 1`` and ``-inf`` for ``y <= -1``.
    """
    scalar = _is_scalar(y)
    y = np.atleast_1d(np.asarray(y, dtype=float))
    x = np.full_like(y, np.nan)

    x[y >= 1.0] = np.inf
    x[y <= -1.0] = -np.inf

    central = np.abs(y) <= _ERFINV_CENTRAL
    if np.any(central):
        yc = y[central]
        z = yc * yc
        x[central] = yc * _horner(_ERFINV_A, z) / (_horner(_ERFINV_B, z) * z + 1.0)

    upper = (y > _ERFINV_CENTRAL) & (y < 1.0)
    if np.any(upper):
        z = np.sqrt(-np.log((1.0 - y[upper]) / 2.0))
        x[upper] = _horner(_ERFINV_C, z) / (_horner(_ERFINV_D, z) * z + 1.0)

    lower = (y < -_ERFINV_CENTRAL) & (y > -1.0)
    if np.any(lower):
        z = np.sqrt(-np.log((1.0 + y[lower]) / 2.0))
        x[lower] = -_horner(_ERFINV_C, z) / (_horner(_ERFINV_D, z) * z + 1.0)

    finite = np.isfinite(x)
    if np.any(finite):
        xf = x[finite]
        yf = y[finite]
        for _ in range(2):
            xf = xf - (np.asarray(erf(xf)) - yf) / (_TWO_OVER_SQRT_PI * np.exp(-xf * xf))
        x[finite] = xf

    return _output(x, scalar)


__all__ = [
    'log_gamma',
    'log_factorial',
    'log_beta',
    'log_multinomial_beta',
    'log_multivariate_gamma',
    'lower_incomplete_gamma',
    'regularized_incomplete_beta',
    'erf',
    'erfinv',
]
