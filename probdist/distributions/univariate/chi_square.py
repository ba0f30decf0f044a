"""
Chi-square distribution.

The Chi-square distribution with :math:`\\nu` degrees of freedom is the
Gamma distribution with shape :math:`\\nu/2` and scale 2:

.. math::
    p(x|\\nu) = \\frac{x^{\\nu/2-1} e^{-x/2}}{2^{\\nu/2}\\Gamma(\\nu/2)}, \\quad x > 0

Density, CDF and sampling are delegated to that Gamma distribution, so the
two agree exactly.
"""

from functools import cached_property
from typing import Optional, Tuple, Union

import numpy as np
from numpy.typing import ArrayLike, NDArray

from probdist.base import Distribution
from probdist.params import ChiSquareParams
from probdist.distributions.univariate.gamma import Gamma
from probdist.utils.statistics import mean_and_variance, weighted_mean_and_variance


class ChiSquare(Distribution):
    """
    Chi-square distribution with ``dof`` degrees of freedom.

    Examples
    --------
    >>> dist = ChiSquare.from_classical_params(dof=4.0)
    >>> dist.mean(), dist.var()
    (4.0, 8.0)

    Notes
    -----
    Parameter vector order is ``[dof]``.
    """

    _cached_attrs = Distribution._cached_attrs + ('gamma',)
    _param_names = ('dof',)

    def __init__(self):
        super().__init__()
        self._dof: Optional[float] = None

    def _set_from_classical(self, *, dof) -> None:
        dof = float(dof)
        if not dof > 0 or not np.isfinite(dof):
            raise ValueError(f"Degrees of freedom must be positive, got {dof}")
        self._dof = dof
        self._fitted = True
        self._invalidate_cache()

    def _compute_classical_params(self) -> ChiSquareParams:
        return ChiSquareParams(dof=self._dof)

    @property
    def dof(self) -> float:
        """Degrees of freedom :math:`\\nu`."""
        self._check_fitted()
        return self._dof

    @cached_property
    def gamma(self) -> Gamma:
        """The equivalent ``Gamma(shape=dof/2, scale=2)`` (cached)."""
        self._check_fitted()
        return Gamma.from_classical_params(shape=self._dof / 2.0, scale=2.0)

    def logpdf(self, x: ArrayLike) -> Union[float, NDArray[np.floating]]:
        self._check_fitted()
        return self.gamma.logpdf(x)

    def cdf(self, x: ArrayLike) -> Union[float, NDArray[np.floating]]:
        self._check_fitted()
        return self.gamma.cdf(x)

    def support(self) -> Tuple[float, float]:
        return (0.0, np.inf)

    def rvs(self, size=None, random_state=None) -> Union[float, NDArray]:
        """Samples drawn as ``Gamma(dof/2, 2)`` variates."""
        self._check_fitted()
        return self.gamma.rvs(size=size, random_state=random_state)

    def mean(self) -> float:
        self._check_fitted()
        return self._dof

    def var(self) -> float:
        self._check_fitted()
        return 2.0 * self._dof

    def fit(self, X: ArrayLike, y: Optional[ArrayLike] = None,
            sample_weight: Optional[ArrayLike] = None, **kwargs) -> 'ChiSquare':
        """Moment match: the degrees of freedom equal the sample mean."""
        X = np.asarray(X, dtype=float).ravel()
        if sample_weight is None:
            mean, _ = mean_and_variance(X)
        else:
            mean, _ = weighted_mean_and_variance(X, sample_weight)
        self._set_from_classical(dof=mean)
        return self
