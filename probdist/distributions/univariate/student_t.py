"""
Univariate Student-t distribution.

Parametrized by the degrees of freedom :math:`\\nu`, the location
:math:`\\mu` and the precision :math:`\\lambda` (inverse squared scale):

.. math::
    p(x|\\nu, \\mu, \\lambda) = \\frac{\\Gamma(\\frac{\\nu+1}{2})}{\\Gamma(\\frac{\\nu}{2})}
    \\sqrt{\\frac{\\lambda}{\\pi\\nu}}
    \\left(1 + \\frac{\\lambda(x-\\mu)^2}{\\nu}\\right)^{-\\frac{\\nu+1}{2}}

The CDF follows from the regularized incomplete Beta function:

.. math::
    F(x) = 1 - \\frac{1}{2} I_{t}\\left(\\frac{\\nu}{2}, \\frac{1}{2}\\right),
    \\quad t = \\frac{\\nu}{\\nu + \\lambda(x-\\mu)^2}

for :math:`x \\geq \\mu`, mirrored below the location.
"""

from functools import cached_property
from typing import Optional, Union

import numpy as np
from numpy.typing import ArrayLike, NDArray

from probdist.base import Distribution
from probdist.params import StudentTParams
from probdist.distributions.univariate.gamma import sample_standard_gamma
from probdist.utils.special import log_gamma, regularized_incomplete_beta
from probdist.utils.statistics import (
    mean_and_variance,
    weighted_mean_and_variance,
    kurtosis,
    weighted_kurtosis,
)

#: Variance added by the kurtosis-based estimator.
DEFAULT_VARIANCE = 1e-5


class StudentT(Distribution):
    """
    Student-t distribution with location and precision.

    Examples
    --------
    >>> dist = StudentT.from_classical_params(dof=5.0, mean=0.0, precision=1.0)
    >>> dist.cdf(0.0)
    0.5
    >>> dist.var()
    1.6666666666666667

    Notes
    -----
    Samples are :math:`\\mu + Z/\\sqrt{\\lambda}\\cdot\\sqrt{\\nu/C}` with
    :math:`Z` standard normal and :math:`C \\sim \\chi^2_\\nu`.
    Parameter vector order is ``[dof, mean, precision]``.
    """

    _cached_attrs = Distribution._cached_attrs + ('log_normalizer',)
    _param_names = ('dof', 'mean', 'precision')

    def __init__(self):
        super().__init__()
        self._dof: Optional[float] = None
        self._mean: Optional[float] = None
        self._precision: Optional[float] = None

    def _set_from_classical(self, *, dof, mean=0.0, precision=1.0) -> None:
        dof = float(dof)
        mean = float(mean)
        precision = float(precision)
        if not dof > 0 or not np.isfinite(dof):
            raise ValueError(f"Degrees of freedom must be positive, got {dof}")
        if not np.isfinite(mean):
            raise ValueError(f"Mean must be finite, got {mean}")
        if not precision > 0 or not np.isfinite(precision):
            raise ValueError(f"Precision must be positive, got {precision}")
        self._dof = dof
        self._mean = mean
        self._precision = precision
        self._fitted = True
        self._invalidate_cache()

    def _compute_classical_params(self) -> StudentTParams:
        return StudentTParams(dof=self._dof, mean=self._mean, precision=self._precision)

    @cached_property
    def log_normalizer(self) -> float:
        """Log of the constant factor of the density (cached)."""
        self._check_fitted()
        v = self._dof
        return (log_gamma(0.5 * v + 0.5) - log_gamma(0.5 * v)
                + 0.5 * np.log(self._precision / (np.pi * v)))

    def logpdf(self, x: ArrayLike) -> Union[float, NDArray[np.floating]]:
        self._check_fitted()
        x = np.asarray(x, dtype=float)
        v = self._dof
        delta = x - self._mean
        result = self.log_normalizer - (0.5 * v + 0.5) * np.log1p(self._precision * delta * delta / v)
        return self._wrap_output(x, result)

    def cdf(self, x: ArrayLike) -> Union[float, NDArray[np.floating]]:
        self._check_fitted()
        x = np.asarray(x, dtype=float)
        v = self._dof
        delta = x - self._mean
        t = v / (v + self._precision * delta * delta)
        tail = 0.5 * np.asarray(regularized_incomplete_beta(0.5 * v, 0.5, t))
        result = np.clip(np.where(delta < 0, tail, 1.0 - tail), 0.0, 1.0)
        return self._wrap_output(x, result)

    def rvs(self, size=None, random_state=None) -> Union[float, NDArray]:
        self._check_fitted()
        rng = self._get_rng(random_state)
        z = rng.standard_normal(size) / np.sqrt(self._precision)
        chi2 = 2.0 * sample_standard_gamma(0.5 * self._dof, size, rng)
        samples = z * np.sqrt(self._dof / chi2) + self._mean
        if size is None:
            return float(samples)
        return samples

    def mean(self) -> float:
        """Location :math:`\\mu`."""
        self._check_fitted()
        return self._mean

    def var(self) -> float:
        """
        Variance :math:`\\frac{\\nu}{\\nu-2}\\frac{1}{\\lambda}`.

        Raises
        ------
        ValueError
            If :math:`\\nu \\leq 2`, where the variance is undefined.
        """
        self._check_fitted()
        if self._dof <= 2.0:
            raise ValueError(
                f"Variance is undefined for degrees of freedom <= 2, got {self._dof}"
            )
        return self._dof / (self._dof - 2.0) / self._precision

    def fit(self, X: ArrayLike, y: Optional[ArrayLike] = None,
            sample_weight: Optional[ArrayLike] = None, *,
            default_variance: float = DEFAULT_VARIANCE) -> 'StudentT':
        """
        Estimate from the sample mean, variance and excess kurtosis.

        The excess kurtosis of a Student-t is :math:`6/(\\nu - 4)`, hence

        .. math::
            \\hat\\nu = \\frac{6}{|\\kappa| + 10^{-5}} + 4, \\qquad
            \\hat\\lambda = \\frac{\\hat\\nu}{s^2(\\hat\\nu - 2)}

        with ``default_variance`` added to :math:`s^2`.
        """
        X = np.asarray(X, dtype=float).ravel()
        if sample_weight is None:
            mean, variance = mean_and_variance(X)
            kurt = kurtosis(X)
        else:
            mean, variance = weighted_mean_and_variance(X, sample_weight)
            kurt = weighted_kurtosis(X, sample_weight)
        variance += default_variance
        dof = 6.0 / (abs(kurt) + 1e-5) + 4.0
        precision = dof / (variance * (dof - 2.0))
        self._set_from_classical(dof=dof, mean=mean, precision=precision)
        return self
