"""
Exponential distribution.

The exponential distribution has PDF:

.. math::
    p(x|\\lambda) = \\lambda e^{-\\lambda x}

for :math:`x \\geq 0`, where :math:`\\lambda > 0` is the rate parameter.
It is the Gamma distribution with shape 1 and scale :math:`1/\\lambda`.
"""

from typing import Optional, Tuple, Union

import numpy as np
from numpy.typing import ArrayLike, NDArray

from probdist.base import Distribution
from probdist.params import ExponentialParams
from probdist.utils.statistics import mean_and_variance, weighted_mean_and_variance


class Exponential(Distribution):
    """
    Exponential distribution with rate :math:`\\lambda`.

    Examples
    --------
    >>> dist = Exponential.from_classical_params(rate=2.0)
    >>> dist.mean()
    0.5
    >>> dist.ppf(0.0)
    0.0

    Notes
    -----
    Parameter vector order is ``[rate]``.
    """

    _param_names = ('rate',)

    def __init__(self):
        super().__init__()
        self._rate: Optional[float] = None

    def _set_from_classical(self, *, rate) -> None:
        rate = float(rate)
        if not rate > 0 or not np.isfinite(rate):
            raise ValueError(f"Rate must be positive, got {rate}")
        self._rate = rate
        self._fitted = True
        self._invalidate_cache()

    def _compute_classical_params(self) -> ExponentialParams:
        return ExponentialParams(rate=self._rate)

    def logpdf(self, x: ArrayLike) -> Union[float, NDArray[np.floating]]:
        self._check_fitted()
        x = np.asarray(x, dtype=float)
        result = np.where(x >= 0, np.log(self._rate) - self._rate * x, -np.inf)
        return self._wrap_output(x, result)

    def cdf(self, x: ArrayLike) -> Union[float, NDArray[np.floating]]:
        self._check_fitted()
        x = np.asarray(x, dtype=float)
        result = np.where(x > 0, -np.expm1(-self._rate * np.maximum(x, 0.0)), 0.0)
        return self._wrap_output(x, result)

    def ppf(self, q: ArrayLike) -> Union[float, NDArray[np.floating]]:
        """:math:`-\\log(1 - q)/\\lambda`."""
        self._check_fitted()
        q = np.asarray(q, dtype=float)
        with np.errstate(divide='ignore'):
            result = -np.log1p(-q) / self._rate
        return self._wrap_output(q, result)

    def support(self) -> Tuple[float, float]:
        return (0.0, np.inf)

    def rvs(self, size=None, random_state=None) -> Union[float, NDArray]:
        """Inverse-CDF sampling, :math:`X = -\\log(1 - U)/\\lambda`."""
        self._check_fitted()
        rng = self._get_rng(random_state)
        samples = -np.log1p(-rng.random(size)) / self._rate
        if size is None:
            return float(samples)
        return samples

    def mean(self) -> float:
        self._check_fitted()
        return 1.0 / self._rate

    def var(self) -> float:
        self._check_fitted()
        return 1.0 / self._rate ** 2

    def fit(self, X: ArrayLike, y: Optional[ArrayLike] = None,
            sample_weight: Optional[ArrayLike] = None, **kwargs) -> 'Exponential':
        """Maximum likelihood estimate :math:`\\hat\\lambda = 1/\\bar x`."""
        X = np.asarray(X, dtype=float).ravel()
        if sample_weight is None:
            mean, _ = mean_and_variance(X)
        else:
            mean, _ = weighted_mean_and_variance(X, sample_weight)
        if mean <= 0:
            raise ValueError(f"Exponential fit needs a positive mean, got {mean}")
        self._set_from_classical(rate=1.0 / mean)
        return self
