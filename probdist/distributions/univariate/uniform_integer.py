"""
Discrete uniform distribution on the integers :math:`\\{a, a+1, \\ldots, b\\}`.
"""

from typing import Optional, Tuple, Union

import numpy as np
from numpy.typing import ArrayLike, NDArray

from probdist.base import Distribution
from probdist.params import UniformIntegerParams


def _check_integer(value, name: str) -> int:
    if not np.isfinite(float(value)) or float(value) != int(value):
        raise ValueError(f"{name} must be an integer, got {value}")
    return int(value)


class UniformInteger(Distribution):
    """
    Uniform distribution over the integers from ``low`` to ``high`` inclusive.

    Examples
    --------
    >>> dist = UniformInteger.from_classical_params(low=1, high=6)
    >>> dist.pmf(3), dist.mean()
    (0.16666666666666666, 3.5)

    Notes
    -----
    ``low == high`` is a point mass. Parameter vector order is
    ``[low, high]``; a vector with the bounds reversed is put back in order.
    """

    _param_names = ('low', 'high')

    def __init__(self):
        super().__init__()
        self._low: Optional[int] = None
        self._high: Optional[int] = None

    def _set_from_classical(self, *, low, high) -> None:
        low = _check_integer(low, "Low")
        high = _check_integer(high, "High")
        if high < low:
            raise ValueError(f"High must not be less than low, got low={low}, high={high}")
        self._low = low
        self._high = high
        self._fitted = True
        self._invalidate_cache()

    def _set_from_parameter_vector(self, parameters: NDArray) -> None:
        if len(parameters) != 2:
            raise ValueError(
                f"UniformInteger parameter vector must have length 2, got {len(parameters)}"
            )
        low, high = sorted(int(round(v)) for v in parameters)
        self._set_from_classical(low=low, high=high)

    def _compute_classical_params(self) -> UniformIntegerParams:
        return UniformIntegerParams(low=self._low, high=self._high)

    @property
    def n_values(self) -> int:
        """Number of support points :math:`b - a + 1`."""
        self._check_fitted()
        return self._high - self._low + 1

    def logpdf(self, x: ArrayLike) -> Union[float, NDArray[np.floating]]:
        self._check_fitted()
        x = np.asarray(x, dtype=float)
        inside = (x >= self._low) & (x <= self._high) & (x == np.floor(x))
        result = np.where(inside, -np.log(self.n_values), -np.inf)
        return self._wrap_output(x, result)

    def pmf(self, x: ArrayLike) -> Union[float, NDArray[np.floating]]:
        """Alias of :meth:`pdf`."""
        return self.pdf(x)

    def logpmf(self, x: ArrayLike) -> Union[float, NDArray[np.floating]]:
        """Alias of :meth:`logpdf`."""
        return self.logpdf(x)

    def cdf(self, x: ArrayLike) -> Union[float, NDArray[np.floating]]:
        """:math:`(\\lfloor x\\rfloor - a + 1)/(b - a + 1)`, clipped to :math:`[0, 1]`."""
        self._check_fitted()
        x = np.asarray(x, dtype=float)
        result = np.clip((np.floor(x) - self._low + 1.0) / self.n_values, 0.0, 1.0)
        return self._wrap_output(x, result)

    def support(self) -> Tuple[float, float]:
        self._check_fitted()
        return (float(self._low), float(self._high))

    def rvs(self, size=None, random_state=None) -> Union[int, NDArray]:
        self._check_fitted()
        rng = self._get_rng(random_state)
        samples = rng.integers(self._low, self._high + 1, size=size)
        if size is None:
            return int(samples)
        return samples

    def mean(self) -> float:
        self._check_fitted()
        return 0.5 * (self._low + self._high)

    def var(self) -> float:
        """:math:`((b - a + 1)^2 - 1)/12`."""
        self._check_fitted()
        return (self.n_values ** 2 - 1.0) / 12.0

    def fit(self, X: ArrayLike, y: Optional[ArrayLike] = None,
            sample_weight: Optional[ArrayLike] = None, **kwargs) -> 'UniformInteger':
        """Maximum likelihood estimate: the sample minimum and maximum.

        Points with zero weight are excluded.
        """
        X = np.asarray(X, dtype=float).ravel()
        if sample_weight is not None:
            X = X[np.abs(np.asarray(sample_weight, dtype=float).ravel()) > 0]
        if X.size == 0:
            raise ValueError("insufficient data: at least one sample is required")
        if np.any(X != np.floor(X)):
            raise ValueError("Discrete uniform fit requires integer data")
        self._set_from_classical(low=np.min(X), high=np.max(X))
        return self
