"""
Negative Binomial distribution.

The number of successes before the :math:`r`-th failure in independent
trials with success probability :math:`p`:

.. math::
    P(X = k|r, p) = \\frac{\\Gamma(k + r)}{k!\\,\\Gamma(r)} (1-p)^r p^k,
    \\quad k = 0, 1, 2, \\ldots

:math:`r` may be any positive real. The CDF is
:math:`F(k) = I_{1-p}(r, k + 1)`.
"""

from typing import Optional, Tuple, Union

import numpy as np
from numpy.typing import ArrayLike, NDArray
from scipy.special import xlogy

from probdist.base import Distribution
from probdist.params import NegativeBinomialParams
from probdist.distributions.univariate.binomial import _check_probability
from probdist.utils.special import log_factorial, log_gamma, regularized_incomplete_beta
from probdist.utils.statistics import mean_and_variance, weighted_mean_and_variance


class NegativeBinomial(Distribution):
    """
    Negative Binomial distribution with ``r`` failures and success
    probability ``p``.

    Examples
    --------
    >>> dist = NegativeBinomial.from_classical_params(r=3.0, p=0.5)
    >>> dist.mean(), dist.var()
    (3.0, 6.0)

    Notes
    -----
    The variance always exceeds the mean, which makes the distribution a
    common model for overdispersed counts. Parameter vector order is
    ``[r, p]``.
    """

    _param_names = ('r', 'p')

    def __init__(self):
        super().__init__()
        self._r: Optional[float] = None
        self._p: Optional[float] = None

    def _set_from_classical(self, *, r, p) -> None:
        r = float(r)
        if not r > 0 or not np.isfinite(r):
            raise ValueError(f"R must be positive, got {r}")
        p = _check_probability(p, upper_open=True)
        self._r = r
        self._p = p
        self._fitted = True
        self._invalidate_cache()

    def _compute_classical_params(self) -> NegativeBinomialParams:
        return NegativeBinomialParams(r=self._r, p=self._p)

    def logpdf(self, x: ArrayLike) -> Union[float, NDArray[np.floating]]:
        """
        Log mass
        :math:`\\log\\Gamma(k+r) - \\log k! - \\log\\Gamma(r) + r\\log(1-p) + k\\log p`.
        """
        self._check_fitted()
        x = np.asarray(x, dtype=float)
        valid = (x >= 0) & (x == np.floor(x)) & np.isfinite(x)
        k = np.where(valid, x, 0.0)
        with np.errstate(divide='ignore'):
            result = (np.asarray(log_gamma(k + self._r)) - np.asarray(log_factorial(k))
                      - log_gamma(self._r) + self._r * np.log1p(-self._p)
                      + xlogy(k, self._p))
        result = np.where(valid, result, -np.inf)
        return self._wrap_output(x, result)

    def pmf(self, x: ArrayLike) -> Union[float, NDArray[np.floating]]:
        """Alias of :meth:`pdf`."""
        return self.pdf(x)

    def logpmf(self, x: ArrayLike) -> Union[float, NDArray[np.floating]]:
        """Alias of :meth:`logpdf`."""
        return self.logpdf(x)

    def cdf(self, x: ArrayLike) -> Union[float, NDArray[np.floating]]:
        """:math:`I_{1-p}(r, \\lfloor x\\rfloor + 1)`, 0 below zero and 1 at ``+inf``."""
        self._check_fitted()
        x = np.asarray(x, dtype=float)
        k = np.floor(np.atleast_1d(x))
        result = np.where(np.isposinf(k), 1.0, 0.0)
        inside = (k >= 0) & np.isfinite(k)
        if np.any(inside):
            result[inside] = regularized_incomplete_beta(self._r, k[inside] + 1.0,
                                                         1.0 - self._p)
        return self._wrap_output(x, result.reshape(x.shape))

    def support(self) -> Tuple[float, float]:
        return (0.0, np.inf)

    def rvs(self, size=None, random_state=None) -> Union[int, NDArray]:
        self._check_fitted()
        rng = self._get_rng(random_state)
        # numpy counts draws before the r-th event of probability 1 - p
        samples = rng.negative_binomial(self._r, 1.0 - self._p, size)
        if size is None:
            return int(samples)
        return samples

    def mean(self) -> float:
        """:math:`rp/(1-p)`."""
        self._check_fitted()
        return self._r * self._p / (1.0 - self._p)

    def var(self) -> float:
        """:math:`rp/(1-p)^2`."""
        self._check_fitted()
        q = 1.0 - self._p
        return self._r * self._p / (q * q)

    def fit(self, X: ArrayLike, y: Optional[ArrayLike] = None,
            sample_weight: Optional[ArrayLike] = None, **kwargs) -> 'NegativeBinomial':
        """
        Method-of-moments estimate.

        With sample mean :math:`m`, variance :math:`v` and :math:`c = m/v`,

        .. math::
            \\hat r = \\left|\\frac{m\\,c}{c - 1}\\right|, \\qquad
            \\hat p = \\frac{m}{m + \\hat r}

        Raises
        ------
        ValueError
            If the sample variance is zero or equals the mean.
        """
        X = np.asarray(X, dtype=float).ravel()
        if sample_weight is None:
            mean, variance = mean_and_variance(X)
        else:
            mean, variance = weighted_mean_and_variance(X, sample_weight)
        if variance <= 0 or mean <= 0:
            raise ValueError(
                f"Negative binomial moment fit needs positive mean and variance, "
                f"got mean={mean}, variance={variance}"
            )
        ratio = mean / variance
        if ratio == 1.0:
            raise ValueError("Negative binomial moment fit needs variance different from the mean")
        r = abs(mean * ratio / (ratio - 1.0))
        self._set_from_classical(r=r, p=mean / (mean + r))
        return self
