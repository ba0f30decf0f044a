"""
Log-normal distribution.

:math:`X` is log-normal when :math:`\\log X \\sim N(\\mu, v)`:

.. math::
    p(x|\\mu, v) = \\frac{1}{x\\sqrt{2\\pi v}}
    \\exp\\left(-\\frac{(\\log x - \\mu)^2}{2v}\\right), \\quad x > 0

Parametrized by the mean ``log_mean`` and variance ``log_variance`` of
:math:`\\log X`.
"""

from typing import Optional, Tuple, Union

import numpy as np
from numpy.typing import ArrayLike, NDArray

from probdist.base import Distribution
from probdist.params import LogNormalParams
from probdist.utils.special import erf, erfinv
from probdist.utils.statistics import mean_and_variance, weighted_mean_and_variance

_LOG_2PI = np.log(2.0 * np.pi)


class LogNormal(Distribution):
    """
    Log-normal distribution.

    Examples
    --------
    >>> dist = LogNormal.from_classical_params(log_mean=0.0, log_variance=1.0)
    >>> dist.cdf(1.0)
    0.5
    >>> dist.pdf(-1.0)
    0.0

    Notes
    -----
    Parameter vector order is ``[log_mean, log_variance]``.
    """

    _param_names = ('log_mean', 'log_variance')

    def __init__(self):
        super().__init__()
        self._log_mean: Optional[float] = None
        self._log_variance: Optional[float] = None

    def _set_from_classical(self, *, log_mean, log_variance) -> None:
        log_mean = float(log_mean)
        log_variance = float(log_variance)
        if not np.isfinite(log_mean):
            raise ValueError(f"Log mean must be finite, got {log_mean}")
        if not log_variance > 0 or not np.isfinite(log_variance):
            raise ValueError(f"Log variance must be positive, got {log_variance}")
        self._log_mean = log_mean
        self._log_variance = log_variance
        self._fitted = True
        self._invalidate_cache()

    def _compute_classical_params(self) -> LogNormalParams:
        return LogNormalParams(log_mean=self._log_mean, log_variance=self._log_variance)

    def logpdf(self, x: ArrayLike) -> Union[float, NDArray[np.floating]]:
        """
        Log density, ``-inf`` for :math:`x \\leq 0`.

        .. math::
            \\log p(x) = -\\frac{(\\log x - \\mu)^2}{2v} - \\frac{1}{2}\\log(2\\pi v) - \\log x
        """
        self._check_fitted()
        x = np.asarray(x, dtype=float)
        positive = x > 0
        log_x = np.log(np.where(positive, x, 1.0))
        delta = log_x - self._log_mean
        result = (-delta * delta / (2.0 * self._log_variance)
                  - 0.5 * (_LOG_2PI + np.log(self._log_variance)) - log_x)
        result = np.where(positive, result, -np.inf)
        return self._wrap_output(x, result)

    def cdf(self, x: ArrayLike) -> Union[float, NDArray[np.floating]]:
        self._check_fitted()
        x = np.asarray(x, dtype=float)
        positive = x > 0
        log_x = np.log(np.where(positive, x, 1.0))
        z = (log_x - self._log_mean) / np.sqrt(2.0 * self._log_variance)
        result = np.where(positive, 0.5 * (1.0 + np.asarray(erf(z))), 0.0)
        return self._wrap_output(x, np.clip(result, 0.0, 1.0))

    def ppf(self, q: ArrayLike) -> Union[float, NDArray[np.floating]]:
        """:math:`\\exp(\\mu + \\sqrt{2v}\\,\\text{erf}^{-1}(2q - 1))`."""
        self._check_fitted()
        q = np.asarray(q, dtype=float)
        result = np.exp(self._log_mean
                        + np.sqrt(2.0 * self._log_variance) * np.asarray(erfinv(2.0 * q - 1.0)))
        return self._wrap_output(q, result)

    def support(self) -> Tuple[float, float]:
        return (0.0, np.inf)

    def rvs(self, size=None, random_state=None) -> Union[float, NDArray]:
        self._check_fitted()
        rng = self._get_rng(random_state)
        samples = np.exp(self._log_mean + np.sqrt(self._log_variance) * rng.standard_normal(size))
        if size is None:
            return float(samples)
        return samples

    def mean(self) -> float:
        """:math:`\\exp(\\mu + v/2)`."""
        self._check_fitted()
        return float(np.exp(self._log_mean + 0.5 * self._log_variance))

    def var(self) -> float:
        """:math:`(e^{v} - 1)\\,e^{2\\mu + v}`."""
        self._check_fitted()
        return float(np.expm1(self._log_variance)
                     * np.exp(2.0 * self._log_mean + self._log_variance))

    def fit(self, X: ArrayLike, y: Optional[ArrayLike] = None,
            sample_weight: Optional[ArrayLike] = None, **kwargs) -> 'LogNormal':
        """
        Gaussian maximum likelihood on :math:`\\log x`.

        Unweighted data must be strictly positive. With ``sample_weight``,
        nonpositive points get zero weight.
        """
        X = np.asarray(X, dtype=float).ravel()
        positive = X > 0
        if sample_weight is None:
            if not np.all(positive):
                raise ValueError("LogNormal fit requires strictly positive data")
            log_mean, log_variance = mean_and_variance(np.log(X))
        else:
            w = np.where(positive, np.abs(np.asarray(sample_weight, dtype=float).ravel()), 0.0)
            log_x = np.log(np.where(positive, X, 1.0))
            log_mean, log_variance = weighted_mean_and_variance(log_x, w)
        self._set_from_classical(log_mean=log_mean, log_variance=log_variance)
        return self
