"""
Univariate Gaussian (normal) distribution.

The Gaussian distribution has PDF:

.. math::
    p(x|\\mu, \\sigma^2) = \\frac{1}{\\sqrt{2\\pi\\sigma^2}}
    \\exp\\left(-\\frac{(x-\\mu)^2}{2\\sigma^2}\\right)

Parametrized by the mean :math:`\\mu` and the variance :math:`\\sigma^2 > 0`.
The CDF and its inverse are expressed through the error function:

.. math::
    F(x) = \\frac{1}{2}\\left(1 + \\text{erf}\\left(\\frac{x - \\mu}{\\sigma\\sqrt{2}}\\right)\\right),
    \\qquad
    F^{-1}(p) = \\mu + \\sigma\\sqrt{2}\\,\\text{erf}^{-1}(2p - 1)
"""

import numpy as np
from numpy.typing import ArrayLike, NDArray
from typing import Optional, Union

from probdist.base import Distribution
from probdist.params import GaussianParams
from probdist.utils.special import erf, erfinv
from probdist.utils.statistics import (
    mean_and_variance,
    weighted_mean_and_variance,
    ScalarSufficientStatistic,
)

#: Variance added by the maximum likelihood estimator.
DEFAULT_VARIANCE = 1e-5

_LOG_2PI = np.log(2.0 * np.pi)


class Gaussian(Distribution):
    """
    Univariate Gaussian distribution.

    Parameters are set through ``from_classical_params(mean=..., variance=...)``
    or estimated with :meth:`fit`.

    Examples
    --------
    >>> dist = Gaussian.from_classical_params(mean=5.0, variance=2.0)
    >>> dist.mean(), dist.var()
    (5.0, 2.0)
    >>> dist.cdf(5.0)
    0.5

    >>> # Fit from (optionally weighted) data
    >>> data = np.random.default_rng(0).normal(1.0, 2.0, size=1000)
    >>> dist = Gaussian().fit(data)

    See Also
    --------
    StudentT : Heavy-tailed generalization
    MultivariateNormal : Vector-valued Gaussian

    Notes
    -----
    Parameter vector order is ``[mean, variance]``.
    """

    _param_names = ('mean', 'variance')

    def __init__(self):
        super().__init__()
        self._mean: Optional[float] = None
        self._variance: Optional[float] = None

    def _set_from_classical(self, *, mean, variance) -> None:
        mean = float(mean)
        variance = float(variance)
        if not np.isfinite(mean):
            raise ValueError(f"Mean must be finite, got {mean}")
        if not variance > 0 or not np.isfinite(variance):
            raise ValueError(f"Variance must be positive, got {variance}")

        self._mean = mean
        self._variance = variance
        self._fitted = True
        self._invalidate_cache()

    def _compute_classical_params(self) -> GaussianParams:
        return GaussianParams(mean=self._mean, variance=self._variance)

    # ============================================================
    # Density and distribution functions
    # ============================================================

    def logpdf(self, x: ArrayLike) -> Union[float, NDArray[np.floating]]:
        """
        Log density computed directly in log space.

        .. math::
            \\log p(x) = -\\frac{(x-\\mu)^2}{2\\sigma^2} - \\frac{1}{2}\\log(2\\pi\\sigma^2)
        """
        self._check_fitted()
        x = np.asarray(x, dtype=float)
        delta = x - self._mean
        result = -delta * delta / (2.0 * self._variance) - 0.5 * (_LOG_2PI + np.log(self._variance))
        return self._wrap_output(x, result)

    def cdf(self, x: ArrayLike) -> Union[float, NDArray[np.floating]]:
        """
        Cumulative distribution function via :func:`~probdist.utils.special.erf`.

        Exactly 0.5 at the mean and clamped to :math:`[0, 1]`.
        """
        self._check_fitted()
        x = np.asarray(x, dtype=float)
        z = (x - self._mean) / np.sqrt(2.0 * self._variance)
        result = np.clip(0.5 * (1.0 + np.asarray(erf(z))), 0.0, 1.0)
        return self._wrap_output(x, result)

    def ppf(self, q: ArrayLike) -> Union[float, NDArray[np.floating]]:
        """
        Inverse CDF, ``-inf`` for ``q <= 0`` and ``inf`` for ``q >= 1``.
        """
        self._check_fitted()
        q = np.asarray(q, dtype=float)
        result = self._mean + np.sqrt(2.0 * self._variance) * np.asarray(erfinv(2.0 * q - 1.0))
        return self._wrap_output(q, result)

    def rvs(self, size=None, random_state=None) -> Union[float, NDArray]:
        """
        Generate random samples as ``mean + sigma * z`` with standard normal ``z``.

        Parameters
        ----------
        size : int or tuple of ints, optional
            Shape of samples to generate.
        random_state : int or Generator, optional
            Random number generator seed or instance.

        Returns
        -------
        samples : float or ndarray
        """
        self._check_fitted()
        rng = self._get_rng(random_state)
        samples = rng.standard_normal(size) * np.sqrt(self._variance) + self._mean
        if size is None:
            return float(samples)
        return samples

    # ============================================================
    # Moments
    # ============================================================

    def mean(self) -> float:
        """Mean :math:`\\mu`."""
        self._check_fitted()
        return self._mean

    def var(self) -> float:
        """Variance :math:`\\sigma^2`."""
        self._check_fitted()
        return self._variance

    def entropy(self) -> float:
        """Differential entropy :math:`\\frac{1}{2}\\log(2\\pi e \\sigma^2)`."""
        self._check_fitted()
        return 0.5 * (1.0 + _LOG_2PI + np.log(self._variance))

    # ============================================================
    # Estimation
    # ============================================================

    def fit(self, X: ArrayLike, y: Optional[ArrayLike] = None,
            sample_weight: Optional[ArrayLike] = None, *,
            default_variance: float = DEFAULT_VARIANCE) -> 'Gaussian':
        """
        Maximum likelihood estimate with an additive variance floor.

        Without weights the mean and unbiased variance are used (zero
        variance for a single sample). With weights the weighted mean and
        the weighted variance :math:`\\sum_i |w_i|(x_i-\\bar x)^2 / \\sum_i |w_i|`
        are used. In both cases ``default_variance`` is added, so duplicate
        or singleton data still yield a proper distribution.

        Parameters
        ----------
        X : array_like
            One-dimensional data.
        y : array_like, optional
            Ignored (for sklearn API compatibility).
        sample_weight : array_like, optional
            Per-sample weights.
        default_variance : float, optional
            Additive variance floor. Default ``1e-5``.

        Returns
        -------
        self : Gaussian
        """
        X = np.asarray(X, dtype=float).ravel()
        if sample_weight is None:
            mean, variance = mean_and_variance(X)
        else:
            mean, variance = weighted_mean_and_variance(X, sample_weight)
        self._set_from_classical(mean=mean, variance=variance + default_variance)
        return self

    @classmethod
    def from_sufficient_statistic(cls, statistic: ScalarSufficientStatistic) -> 'Gaussian':
        """Gaussian with the accumulator's mean and (regularized) variance."""
        if statistic.count == 0:
            raise ValueError("insufficient data: sufficient statistic is empty")
        return cls.from_classical_params(mean=statistic.mean, variance=statistic.variance)

    # ============================================================
    # Algebra
    # ============================================================

    def times(self, other: 'Gaussian') -> 'Gaussian':
        """
        Normalized product of two Gaussian densities.

        .. math::
            \\mu = \\frac{\\mu_1\\sigma_2^2 + \\mu_2\\sigma_1^2}{\\sigma_1^2 + \\sigma_2^2},
            \\qquad
            \\sigma^2 = \\frac{\\sigma_1^2\\sigma_2^2}{\\sigma_1^2 + \\sigma_2^2}
        """
        self._check_fitted()
        other._check_fitted()
        v1, v2 = self._variance, other._variance
        total = v1 + v2
        return Gaussian.from_classical_params(
            mean=(self._mean * v2 + other._mean * v1) / total,
            variance=v1 * v2 / total,
        )

    def convolve(self, other: 'Gaussian') -> 'Gaussian':
        """Distribution of the sum of two independent Gaussian variables."""
        self._check_fitted()
        other._check_fitted()
        return Gaussian.from_classical_params(
            mean=self._mean + other._mean,
            variance=self._variance + other._variance,
        )


# Alias for convenience
Normal = Gaussian
