"""
Cauchy distribution.

.. math::
    p(x|x_0, \\gamma) = \\frac{1}{\\pi\\gamma\\left(1 + \\left(\\frac{x - x_0}{\\gamma}\\right)^2\\right)}

The CDF and quantile function are closed form:

.. math::
    F(x) = \\frac{1}{2} + \\frac{1}{\\pi}\\arctan\\frac{x - x_0}{\\gamma},
    \\qquad
    F^{-1}(q) = x_0 + \\gamma\\tan\\left(\\pi\\left(q - \\tfrac{1}{2}\\right)\\right)

Mean and variance do not exist.
"""

from typing import Optional, Union

import numpy as np
from numpy.typing import ArrayLike, NDArray

from probdist.base import Distribution
from probdist.params import CauchyParams
from probdist.utils.statistics import weighted_median


class Cauchy(Distribution):
    """
    Cauchy (Lorentz) distribution with location :math:`x_0` and scale
    :math:`\\gamma`.

    Examples
    --------
    >>> dist = Cauchy.from_classical_params(location=1.0, scale=2.0)
    >>> dist.cdf(1.0)
    0.5
    >>> dist.ppf(0.75)
    3.0

    Notes
    -----
    Samples are the ratio of two independent standard normals, scaled by
    :math:`\\gamma` and shifted by :math:`x_0`. Parameter vector order is
    ``[location, scale]``.
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

    def _compute_classical_params(self) -> CauchyParams:
        return CauchyParams(location=self._location, scale=self._scale)

    def logpdf(self, x: ArrayLike) -> Union[float, NDArray[np.floating]]:
        self._check_fitted()
        x = np.asarray(x, dtype=float)
        z = (x - self._location) / self._scale
        result = -np.log(np.pi * self._scale) - np.log1p(z * z)
        return self._wrap_output(x, result)

    def cdf(self, x: ArrayLike) -> Union[float, NDArray[np.floating]]:
        self._check_fitted()
        x = np.asarray(x, dtype=float)
        z = (x - self._location) / self._scale
        result = 0.5 + np.arctan(z) / np.pi
        return self._wrap_output(x, result)

    def ppf(self, q: ArrayLike) -> Union[float, NDArray[np.floating]]:
        """Quantile function, ``-inf`` at 0 and ``inf`` at 1."""
        self._check_fitted()
        q = np.asarray(q, dtype=float)
        result = self._location + self._scale * np.tan(np.pi * (q - 0.5))
        result = np.where(q <= 0.0, -np.inf, np.where(q >= 1.0, np.inf, result))
        return self._wrap_output(q, result)

    def rvs(self, size=None, random_state=None) -> Union[float, NDArray]:
        self._check_fitted()
        rng = self._get_rng(random_state)
        numerator = rng.standard_normal(size)
        denominator = rng.standard_normal(size)
        samples = numerator / denominator * self._scale + self._location
        if size is None:
            return float(samples)
        return samples

    def median(self) -> float:
        self._check_fitted()
        return self._location

    def mean(self) -> float:
        """
        Raises
        ------
        ValueError
            Always, the Cauchy distribution has no mean.
        """
        raise ValueError("Mean is undefined for the Cauchy distribution")

    def var(self) -> float:
        """
        Raises
        ------
        ValueError
            Always, the Cauchy distribution has no variance.
        """
        raise ValueError("Variance is undefined for the Cauchy distribution")

    def fit(self, X: ArrayLike, y: Optional[ArrayLike] = None,
            sample_weight: Optional[ArrayLike] = None, **kwargs) -> 'Cauchy':
        """
        Quantile estimate: location is the median, scale is half the
        interquartile range.
        """
        X = np.asarray(X, dtype=float).ravel()
        if X.size == 0:
            raise ValueError("insufficient data: at least one sample is required")
        if sample_weight is None:
            q1, location, q3 = np.quantile(X, [0.25, 0.5, 0.75])
        else:
            q1 = weighted_median(X, sample_weight, quantile=0.25)
            location = weighted_median(X, sample_weight)
            q3 = weighted_median(X, sample_weight, quantile=0.75)
        scale = 0.5 * (q3 - q1)
        if scale <= 0:
            raise ValueError(
                f"Cauchy fit needs a positive interquartile range, got {2.0 * scale}"
            )
        self._set_from_classical(location=location, scale=scale)
        return self
