"""
Laplace (double exponential) distribution.

.. math::
    p(x|\\mu, b) = \\frac{1}{2b}\\exp\\left(-\\frac{|x - \\mu|}{b}\\right)
"""

from typing import Optional, Union

import numpy as np
from numpy.typing import ArrayLike, NDArray

from probdist.base import Distribution
from probdist.params import LaplaceParams
from probdist.utils.statistics import weighted_median


class Laplace(Distribution):
    """
    Laplace distribution with location :math:`\\mu` and scale :math:`b`.

    Examples
    --------
    >>> dist = Laplace.from_classical_params(location=0.0, scale=1.0)
    >>> dist.var()
    2.0

    Notes
    -----
    Parameter vector order is ``[location, scale]``.
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

    def _compute_classical_params(self) -> LaplaceParams:
        return LaplaceParams(location=self._location, scale=self._scale)

    def logpdf(self, x: ArrayLike) -> Union[float, NDArray[np.floating]]:
        self._check_fitted()
        x = np.asarray(x, dtype=float)
        result = -np.log(2.0 * self._scale) - np.abs(x - self._location) / self._scale
        return self._wrap_output(x, result)

    def cdf(self, x: ArrayLike) -> Union[float, NDArray[np.floating]]:
        self._check_fitted()
        x = np.asarray(x, dtype=float)
        z = (x - self._location) / self._scale
        result = np.where(z < 0, 0.5 * np.exp(np.minimum(z, 0.0)),
                          1.0 - 0.5 * np.exp(-np.maximum(z, 0.0)))
        return self._wrap_output(x, result)

    def ppf(self, q: ArrayLike) -> Union[float, NDArray[np.floating]]:
        self._check_fitted()
        q = np.asarray(q, dtype=float)
        centered = q - 0.5
        with np.errstate(divide='ignore'):
            result = self._location - self._scale * np.sign(centered) * np.log1p(-2.0 * np.abs(centered))
        return self._wrap_output(q, result)

    def rvs(self, size=None, random_state=None) -> Union[float, NDArray]:
        """Difference of two exponential variates, scaled and shifted."""
        self._check_fitted()
        rng = self._get_rng(random_state)
        e1 = -np.log1p(-rng.random(size))
        e2 = -np.log1p(-rng.random(size))
        samples = self._location + self._scale * (e1 - e2)
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
        self._check_fitted()
        return 2.0 * self._scale ** 2

    def fit(self, X: ArrayLike, y: Optional[ArrayLike] = None,
            sample_weight: Optional[ArrayLike] = None, **kwargs) -> 'Laplace':
        """
        Maximum likelihood estimate: the (weighted) median and the mean
        absolute deviation around it.
        """
        X = np.asarray(X, dtype=float).ravel()
        if X.size == 0:
            raise ValueError("insufficient data: at least one sample is required")
        if sample_weight is None:
            w = np.ones_like(X)
            location = float(np.median(X))
        else:
            w = np.abs(np.asarray(sample_weight, dtype=float).ravel())
            location = weighted_median(X, w)
        scale = np.sum(w * np.abs(X - location)) / np.sum(w)
        if scale <= 0:
            raise ValueError("insufficient data: all samples equal the median")
        self._set_from_classical(location=location, scale=scale)
        return self
