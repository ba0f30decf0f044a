"""
Beta distribution.

The Beta distribution has PDF:

.. math::
    p(x|\\alpha, \\beta) = \\frac{x^{\\alpha-1}(1-x)^{\\beta-1}}{B(\\alpha, \\beta)}

for :math:`x \\in [0, 1]` and zero elsewhere. The CDF is the regularized
incomplete Beta function :math:`I_x(\\alpha, \\beta)`.
"""

from functools import cached_property
from typing import Optional, Tuple, Union

import numpy as np
from numpy.typing import ArrayLike, NDArray
from scipy.special import xlogy, xlog1py

from probdist.base import Distribution
from probdist.params import BetaParams
from probdist.distributions.univariate.gamma import sample_standard_gamma
from probdist.utils.special import log_beta, regularized_incomplete_beta
from probdist.utils.statistics import mean_and_variance, weighted_mean_and_variance


class Beta(Distribution):
    """
    Beta distribution on the unit interval.

    Examples
    --------
    >>> dist = Beta.from_classical_params(alpha=2.0, beta=5.0)
    >>> dist.mean()
    0.2857142857142857
    >>> dist.pdf(1.5)
    0.0

    Notes
    -----
    Sampling uses :math:`X/(X+Y)` with :math:`X \\sim \\text{Gamma}(\\alpha, 1)`
    and :math:`Y \\sim \\text{Gamma}(\\beta, 1)`. Parameter vector order is
    ``[alpha, beta]``.
    """

    _cached_attrs = Distribution._cached_attrs + ('log_beta_function',)
    _param_names = ('alpha', 'beta')

    def __init__(self):
        super().__init__()
        self._alpha: Optional[float] = None
        self._beta: Optional[float] = None

    def _set_from_classical(self, *, alpha, beta) -> None:
        alpha = float(alpha)
        beta = float(beta)
        if not alpha > 0 or not np.isfinite(alpha):
            raise ValueError(f"Alpha must be positive, got {alpha}")
        if not beta > 0 or not np.isfinite(beta):
            raise ValueError(f"Beta must be positive, got {beta}")
        self._alpha = alpha
        self._beta = beta
        self._fitted = True
        self._invalidate_cache()

    def _compute_classical_params(self) -> BetaParams:
        return BetaParams(alpha=self._alpha, beta=self._beta)

    @cached_property
    def log_beta_function(self) -> float:
        """:math:`\\log B(\\alpha, \\beta)` (cached)."""
        self._check_fitted()
        return log_beta(self._alpha, self._beta)

    def logpdf(self, x: ArrayLike) -> Union[float, NDArray[np.floating]]:
        """
        Log density, ``-inf`` outside :math:`[0, 1]`.

        .. math::
            \\log p(x) = (\\alpha-1)\\log x + (\\beta-1)\\log(1-x) - \\log B(\\alpha, \\beta)
        """
        self._check_fitted()
        x = np.asarray(x, dtype=float)
        inside = (x >= 0.0) & (x <= 1.0)
        safe_x = np.where(inside, x, 0.5)
        with np.errstate(divide='ignore'):
            result = (xlogy(self._alpha - 1.0, safe_x)
                      + xlog1py(self._beta - 1.0, -safe_x)
                      - self.log_beta_function)
        result = np.where(inside, result, -np.inf)
        return self._wrap_output(x, result)

    def cdf(self, x: ArrayLike) -> Union[float, NDArray[np.floating]]:
        """Regularized incomplete Beta function, 0 below 0 and 1 above 1."""
        self._check_fitted()
        x = np.asarray(x, dtype=float)
        result = regularized_incomplete_beta(self._alpha, self._beta, np.clip(x, 0.0, 1.0))
        return self._wrap_output(x, np.asarray(result))

    def support(self) -> Tuple[float, float]:
        return (0.0, 1.0)

    def rvs(self, size=None, random_state=None) -> Union[float, NDArray]:
        """Samples drawn as :math:`X/(X+Y)` from two independent Gamma variates."""
        self._check_fitted()
        rng = self._get_rng(random_state)
        x = sample_standard_gamma(self._alpha, size, rng)
        y = sample_standard_gamma(self._beta, size, rng)
        samples = x / (x + y)
        if size is None:
            return float(samples)
        return samples

    def mean(self) -> float:
        """:math:`\\alpha/(\\alpha+\\beta)`."""
        self._check_fitted()
        return self._alpha / (self._alpha + self._beta)

    def var(self) -> float:
        """:math:`\\alpha\\beta/((\\alpha+\\beta)^2(\\alpha+\\beta+1))`."""
        self._check_fitted()
        apb = self._alpha + self._beta
        return self._alpha * self._beta / (apb * apb * (apb + 1.0))

    def fit(self, X: ArrayLike, y: Optional[ArrayLike] = None,
            sample_weight: Optional[ArrayLike] = None, **kwargs) -> 'Beta':
        """
        Method-of-moments estimate.

        .. math::
            c = \\frac{m(1-m)}{v} - 1, \\qquad
            \\hat\\alpha = |c\\,m|, \\qquad \\hat\\beta = |c\\,(1-m)|
        """
        X = np.asarray(X, dtype=float).ravel()
        if sample_weight is None:
            mean, variance = mean_and_variance(X)
        else:
            mean, variance = weighted_mean_and_variance(X, sample_weight)
        if variance <= 0:
            raise ValueError(f"Beta moment fit needs positive variance, got {variance}")
        apb = mean * (1.0 - mean) / variance - 1.0
        self._set_from_classical(alpha=abs(apb * mean), beta=abs(apb * (1.0 - mean)))
        return self
