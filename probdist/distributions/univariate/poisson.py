"""
Poisson distribution.

The Poisson distribution has probability mass function:

.. math::
    P(X = k|\\lambda) = \\frac{\\lambda^k e^{-\\lambda}}{k!}, \\quad k = 0, 1, 2, \\ldots

and CDF :math:`F(x) = 1 - P(\\lfloor x \\rfloor + 1, \\lambda)` where
:math:`P` is the regularized lower incomplete gamma function.
"""

from typing import Optional, Tuple, Union

import numpy as np
from numpy.typing import ArrayLike, NDArray

from probdist.base import Distribution
from probdist.params import PoissonParams
from probdist.utils.special import log_factorial, lower_incomplete_gamma
from probdist.utils.statistics import mean_and_variance, weighted_mean_and_variance


class Poisson(Distribution):
    """
    Poisson distribution with rate :math:`\\lambda`.

    ``pdf`` / ``logpdf`` evaluate the mass function (``pmf`` / ``logpmf``
    are aliases). Non-integer and negative arguments have zero mass.

    Examples
    --------
    >>> dist = Poisson.from_classical_params(rate=3.0)
    >>> dist.pmf(0) == np.exp(-3.0)
    True

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

    def _compute_classical_params(self) -> PoissonParams:
        return PoissonParams(rate=self._rate)

    def logpdf(self, x: ArrayLike) -> Union[float, NDArray[np.floating]]:
        """
        Log mass :math:`k\\log\\lambda - \\lambda - \\log k!`.

        Exactly :math:`-\\lambda` at :math:`k = 0`, ``-inf`` for negative or
        non-integer :math:`k`.
        """
        self._check_fitted()
        x = np.asarray(x, dtype=float)
        valid = (x >= 0) & (x == np.floor(x))
        k = np.where(valid, x, 0.0)
        result = k * np.log(self._rate) - self._rate - np.asarray(log_factorial(k))
        result = np.where(valid, result, -np.inf)
        return self._wrap_output(x, result)

    def pmf(self, x: ArrayLike) -> Union[float, NDArray[np.floating]]:
        """Alias of :meth:`pdf`."""
        return self.pdf(x)

    def logpmf(self, x: ArrayLike) -> Union[float, NDArray[np.floating]]:
        """Alias of :meth:`logpdf`."""
        return self.logpdf(x)

    def cdf(self, x: ArrayLike) -> Union[float, NDArray[np.floating]]:
        """
        :math:`P(X \\leq x)`: 0 below zero, :math:`e^{-\\lambda}` on
        :math:`[0, 1)` and :math:`1 - P(\\lfloor x\\rfloor + 1, \\lambda)` above.
        Exactly 1 at ``+inf``.
        """
        self._check_fitted()
        x = np.asarray(x, dtype=float)
        k = np.floor(np.atleast_1d(x))
        result = np.zeros(k.shape)
        result[k == 0] = np.exp(-self._rate)
        result[np.isposinf(k)] = 1.0
        above = (k > 0) & np.isfinite(k)
        if np.any(above):
            result[above] = 1.0 - np.asarray(
                lower_incomplete_gamma(k[above] + 1.0, self._rate)
            )
        return self._wrap_output(x, result.reshape(x.shape))

    def support(self) -> Tuple[float, float]:
        return (0.0, np.inf)

    def rvs(self, size=None, random_state=None) -> Union[int, NDArray]:
        self._check_fitted()
        rng = self._get_rng(random_state)
        samples = rng.poisson(self._rate, size)
        if size is None:
            return int(samples)
        return samples

    def mean(self) -> float:
        self._check_fitted()
        return self._rate

    def var(self) -> float:
        self._check_fitted()
        return self._rate

    def fit(self, X: ArrayLike, y: Optional[ArrayLike] = None,
            sample_weight: Optional[ArrayLike] = None, **kwargs) -> 'Poisson':
        """Maximum likelihood estimate: the (weighted) sample mean."""
        X = np.asarray(X, dtype=float).ravel()
        if sample_weight is None:
            rate, _ = mean_and_variance(X)
        else:
            rate, _ = weighted_mean_and_variance(X, sample_weight)
        self._set_from_classical(rate=rate)
        return self
