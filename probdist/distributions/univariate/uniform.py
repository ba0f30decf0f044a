"""
Continuous uniform distribution on :math:`[a, b]`.
"""

from typing import Optional, Tuple, Union

import numpy as np
from numpy.typing import ArrayLike, NDArray

from probdist.base import Distribution
from probdist.params import UniformParams


class Uniform(Distribution):
    """
    Uniform distribution between ``low`` and ``high``.

    Examples
    --------
    >>> dist = Uniform.from_classical_params(low=0.0, high=4.0)
    >>> dist.cdf(1.0), dist.mean()
    (0.25, 2.0)

    Notes
    -----
    Parameter vector order is ``[low, high]``.
    """

    _param_names = ('low', 'high')

    def __init__(self):
        super().__init__()
        self._low: Optional[float] = None
        self._high: Optional[float] = None

    def _set_from_classical(self, *, low=0.0, high=1.0) -> None:
        low = float(low)
        high = float(high)
        if not (np.isfinite(low) and np.isfinite(high)):
            raise ValueError(f"Bounds must be finite, got low={low}, high={high}")
        if not high > low:
            raise ValueError(f"High must be greater than low, got low={low}, high={high}")
        self._low = low
        self._high = high
        self._fitted = True
        self._invalidate_cache()

    def _compute_classical_params(self) -> UniformParams:
        return UniformParams(low=self._low, high=self._high)

    def logpdf(self, x: ArrayLike) -> Union[float, NDArray[np.floating]]:
        self._check_fitted()
        x = np.asarray(x, dtype=float)
        inside = (x >= self._low) & (x <= self._high)
        result = np.where(inside, -np.log(self._high - self._low), -np.inf)
        return self._wrap_output(x, result)

    def cdf(self, x: ArrayLike) -> Union[float, NDArray[np.floating]]:
        self._check_fitted()
        x = np.asarray(x, dtype=float)
        result = np.clip((x - self._low) / (self._high - self._low), 0.0, 1.0)
        return self._wrap_output(x, result)

    def ppf(self, q: ArrayLike) -> Union[float, NDArray[np.floating]]:
        self._check_fitted()
        q = np.asarray(q, dtype=float)
        result = self._low + q * (self._high - self._low)
        return self._wrap_output(q, result)

    def support(self) -> Tuple[float, float]:
        self._check_fitted()
        return (self._low, self._high)

    def rvs(self, size=None, random_state=None) -> Union[float, NDArray]:
        self._check_fitted()
        rng = self._get_rng(random_state)
        samples = self._low + (self._high - self._low) * rng.random(size)
        if size is None:
            return float(samples)
        return samples

    def mean(self) -> float:
        self._check_fitted()
        return 0.5 * (self._low + self._high)

    def var(self) -> float:
        self._check_fitted()
        return (self._high - self._low) ** 2 / 12.0

    def fit(self, X: ArrayLike, y: Optional[ArrayLike] = None,
            sample_weight: Optional[ArrayLike] = None, **kwargs) -> 'Uniform':
        """Maximum likelihood estimate: the sample minimum and maximum.

        Points with zero weight are excluded.
        """
        X = np.asarray(X, dtype=float).ravel()
        if sample_weight is not None:
            X = X[np.abs(np.asarray(sample_weight, dtype=float).ravel()) > 0]
        if X.size < 2:
            raise ValueError("insufficient data: at least two samples are required")
        self._set_from_classical(low=np.min(X), high=np.max(X))
        return self
