"""
Logistic distribution.

.. math::
    p(x|\\mu, s) = \\frac{e^{-z}}{s(1 + e^{-z})^2}, \\quad z = \\frac{x - \\mu}{s}

The CDF is the logistic sigmoid :math:`F(x) = 1/(1 + e^{-z})`.
"""

from typing import Optional, Union

import numpy as np
from numpy.typing import ArrayLike, NDArray
from scipy.special import expit, logit

from probdist.base import Distribution
from probdist.params import LogisticParams
from probdist.utils.statistics import mean_and_variance, weighted_mean_and_variance


class Logistic(Distribution):
    """
    Logistic distribution with location :math:`\\mu` and scale :math:`s`.

    Examples
    --------
    >>> dist = Logistic.from_classical_params(location=0.0, scale=1.0)
    >>> dist.cdf(0.0)
    0.5

    Notes
    -----
    Sampling inverts the CDF. Parameter vector order is ``[location, scale]``.
    """

    _param_names = ('location', 'scale')

    def __init__(self):
        super().__init__()
        self._location: Optional[float] = None
        self._scale: Optional[float] = None

    def _set_from_classical(self, *, location=0.0, scale=1.0) -> None:
        location = float(location)
        scale = float(scale)
        if not np.isfinite(location):
            raise ValueError(f"Location must be finite, got {location}")
        if not scale > 0 or not np.isfinite(scale):
            raise ValueError(f"Scale must be positive, got {scale}")
        self._location = location
        self._scale = scale
        self._fitted = True
        self._invalidate_cache()

    def _compute_classical_params(self) -> LogisticParams:
        return LogisticParams(location=self._location, scale=self._scale)

    def logpdf(self, x: ArrayLike) -> Union[float, NDArray[np.floating]]:
        """:math:`-\\log s - |z| - 2\\log(1 + e^{-|z|})`, stable in both tails."""
        self._check_fitted()
        x = np.asarray(x, dtype=float)
        abs_z = np.abs((x - self._location) / self._scale)
        result = -np.log(self._scale) - abs_z - 2.0 * np.log1p(np.exp(-abs_z))
        return self._wrap_output(x, result)

    def cdf(self, x: ArrayLike) -> Union[float, NDArray[np.floating]]:
        self._check_fitted()
        x = np.asarray(x, dtype=float)
        result = expit((x - self._location) / self._scale)
        return self._wrap_output(x, np.asarray(result))

    def ppf(self, q: ArrayLike) -> Union[float, NDArray[np.floating]]:
        """:math:`\\mu + s\\log(q/(1-q))`, infinite at 0 and 1."""
        self._check_fitted()
        q = np.asarray(q, dtype=float)
        result = self._location + self._scale * logit(q)
        return self._wrap_output(q, np.asarray(result))

    def rvs(self, size=None, random_state=None) -> Union[float, NDArray]:
        self._check_fitted()
        rng = self._get_rng(random_state)
        samples = self._location + self._scale * logit(rng.random(size))
        if size is None:
            return float(samples)
        return samples

    def mean(self) -> float:
        self._check_fitted()
        return self._location

    def median(self) -> float:
        self._check_fitted()
        return self._location

    def var(self) -> float:
        """:math:`(\\pi s)^2/3`."""
        self._check_fitted()
        return (np.pi * self._scale) ** 2 / 3.0

    def fit(self, X: ArrayLike, y: Optional[ArrayLike] = None,
            sample_weight: Optional[ArrayLike] = None, **kwargs) -> 'Logistic':
        """
        Method-of-moments estimate: :math:`\\hat\\mu = m` and
        :math:`\\hat s = \\sqrt{3v}/\\pi`.
        """
        X = np.asarray(X, dtype=float).ravel()
        if sample_weight is None:
            mean, variance = mean_and_variance(X)
        else:
            mean, variance = weighted_mean_and_variance(X, sample_weight)
        if variance <= 0:
            raise ValueError(f"Logistic moment fit needs positive variance, got {variance}")
        self._set_from_classical(location=mean, scale=np.sqrt(3.0 * variance) / np.pi)
        return self
