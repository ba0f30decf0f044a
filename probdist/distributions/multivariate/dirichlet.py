"""
Dirichlet distribution.

The Dirichlet distribution over the probability simplex has PDF:

.. math::
    p(x|\\alpha) = \\frac{1}{B(\\alpha)} \\prod_{i=1}^k x_i^{\\alpha_i - 1}

with the multinomial Beta function
:math:`B(\\alpha) = \\prod_i \\Gamma(\\alpha_i) / \\Gamma(\\sum_i \\alpha_i)`.
"""

from functools import cached_property
from typing import Optional

import numpy as np
from numpy.typing import ArrayLike, NDArray

from probdist.base import Distribution
from probdist.params import DirichletParams
from probdist.distributions.univariate.gamma import sample_standard_gamma
from probdist.utils.special import log_multinomial_beta
from probdist.utils.statistics import normalized_weights


class Dirichlet(Distribution):
    """
    Dirichlet distribution with concentration vector :math:`\\alpha`.

    Examples
    --------
    >>> dist = Dirichlet.from_classical_params(alpha=[1.0, 2.0, 3.0])
    >>> dist.mean()
    array([0.16666667, 0.33333333, 0.5       ])

    Notes
    -----
    Inputs to :meth:`pdf` and :meth:`logpdf` are L1-normalized first, so any
    positive vector is mapped onto the simplex. A nonpositive coordinate has
    zero density. Samples are normalized ``Gamma(alpha_i, 1)`` draws.
    Parameter vector order is ``[alpha_1, ..., alpha_k]``.
    """

    _cached_attrs = Distribution._cached_attrs + ('log_normalizer',)

    def __init__(self):
        super().__init__()
        self._alpha: Optional[NDArray] = None

    def _set_from_classical(self, *, alpha) -> None:
        alpha = np.asarray(alpha, dtype=float).flatten()
        if alpha.size < 2:
            raise ValueError(f"Alpha must have at least 2 entries, got {alpha.size}")
        if not np.all(alpha > 0) or not np.all(np.isfinite(alpha)):
            raise ValueError(f"All alpha entries must be positive, got {alpha}")
        self._alpha = alpha.copy()
        self._fitted = True
        self._invalidate_cache()

    def _compute_classical_params(self) -> DirichletParams:
        return DirichletParams(alpha=self._alpha.copy())

    def _compute_parameter_vector(self) -> NDArray:
        return self._alpha.copy()

    def _set_from_parameter_vector(self, parameters: NDArray) -> None:
        if self._alpha is not None and len(parameters) != len(self._alpha):
            raise ValueError(
                f"Dirichlet parameter vector must have length {len(self._alpha)}, "
                f"got {len(parameters)}"
            )
        self._set_from_classical(alpha=parameters)

    @property
    def d(self) -> int:
        """Number of categories :math:`k`."""
        self._check_fitted()
        return self._alpha.size

    @cached_property
    def log_normalizer(self) -> float:
        """:math:`\\log B(\\alpha)` (cached)."""
        self._check_fitted()
        return log_multinomial_beta(self._alpha)

    def logpdf(self, x: ArrayLike):
        """
        Log density of the L1-normalized input, ``-inf`` when a coordinate is
        not strictly positive.
        """
        self._check_fitted()
        x = np.asarray(x, dtype=float)
        X = np.atleast_2d(x)
        if X.shape[-1] != self._alpha.size:
            raise ValueError(f"Expected {self._alpha.size}-dimensional input, got {X.shape[-1]}")
        positive = np.all(X > 0, axis=-1)
        safe = np.where(positive[:, None], X, 1.0)
        safe = safe / np.sum(np.abs(safe), axis=-1, keepdims=True)
        result = np.sum((self._alpha - 1.0) * np.log(safe), axis=-1) - self.log_normalizer
        result = np.where(positive, result, -np.inf)
        if x.ndim <= 1:
            return float(result[0])
        return result

    def rvs(self, size=None, random_state=None) -> NDArray:
        """
        Generate samples on the simplex, shape ``(size, k)`` or ``(k,)``.
        """
        self._check_fitted()
        rng = self._get_rng(random_state)
        n = 1 if size is None else size
        shape = (n,) if isinstance(n, (int, np.integer)) else tuple(n)
        draws = np.stack(
            [sample_standard_gamma(a, shape, rng) for a in self._alpha], axis=-1
        )
        totals = np.sum(draws, axis=-1, keepdims=True)
        samples = draws / np.where(totals > 0, totals, 1.0)
        if size is None:
            return samples[0]
        return samples

    def mean(self) -> NDArray:
        """:math:`\\alpha / \\sum_i \\alpha_i`."""
        self._check_fitted()
        return self._alpha / np.sum(self._alpha)

    def var(self) -> NDArray:
        """Marginal variances :math:`m_i(1 - m_i)/(\\alpha_0 + 1)`."""
        self._check_fitted()
        m = self.mean()
        return m * (1.0 - m) / (np.sum(self._alpha) + 1.0)

    def cov(self) -> NDArray:
        """Covariance :math:`(\\text{diag}(m) - mm^T)/(\\alpha_0 + 1)`."""
        self._check_fitted()
        m = self.mean()
        return (np.diag(m) - np.outer(m, m)) / (np.sum(self._alpha) + 1.0)

    def fit(self, X: ArrayLike, y: Optional[ArrayLike] = None,
            sample_weight: Optional[ArrayLike] = None, **kwargs) -> 'Dirichlet':
        """
        Method-of-moments estimate.

        Rows are L1-normalized. With sample mean :math:`m` and variance
        :math:`v_1` of the first coordinate,

        .. math::
            \\alpha_0 = \\frac{m_1(1 - m_1)}{v_1} - 1, \\qquad
            \\hat\\alpha = \\alpha_0\\, m
        """
        X = np.asarray(X, dtype=float)
        if X.ndim != 2 or X.shape[1] < 2:
            raise ValueError(f"Dirichlet fit needs data of shape (n, k >= 2), got {X.shape}")
        n = X.shape[0]
        if n < 2:
            raise ValueError("insufficient data: at least two samples are required")
        X = X / np.sum(np.abs(X), axis=1, keepdims=True)
        w = normalized_weights(sample_weight, n)
        mean = w @ X
        v1 = np.sum(w * (X[:, 0] - mean[0]) ** 2)
        if v1 <= 0:
            raise ValueError("Dirichlet moment fit needs a positive variance")
        alpha0 = mean[0] * (1.0 - mean[0]) / v1 - 1.0
        self._set_from_classical(alpha=alpha0 * mean)
        return self

    def __repr__(self) -> str:
        if not self._fitted:
            return "Dirichlet(not fitted)"
        alpha_str = ", ".join(f"{a:.4f}" for a in self._alpha)
        return f"Dirichlet(alpha=[{alpha_str}])"
