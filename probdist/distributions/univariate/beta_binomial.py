"""
Beta-Binomial distribution.

A Binomial count whose success probability is itself Beta distributed:

.. math::
    P(X = k|n, \\alpha, \\beta) = \\binom{n}{k}
    \\frac{B(k + \\alpha, n - k + \\beta)}{B(\\alpha, \\beta)},
    \\quad k = 0, 1, \\ldots, n
"""

from functools import cached_property
from typing import Optional, Tuple, Union

import numpy as np
from numpy.typing import ArrayLike, NDArray

from probdist.base import Distribution
from probdist.params import BetaBinomialParams
from probdist.distributions.univariate.binomial import _check_n_trials, log_binomial_coefficient
from probdist.distributions.univariate.gamma import sample_standard_gamma
from probdist.utils.special import log_beta
from probdist.utils.statistics import mean_and_variance, weighted_mean_and_variance


class BetaBinomial(Distribution):
    """
    Beta-Binomial distribution with ``n_trials`` trials and Beta prior
    ``(alpha, beta)`` on the success probability.

    Examples
    --------
    >>> dist = BetaBinomial.from_classical_params(n_trials=10, alpha=1.0, beta=1.0)
    >>> round(dist.pmf(3), 12)
    0.090909090909

    Notes
    -----
    With ``alpha = beta = 1`` every count in :math:`\\{0, \\ldots, n\\}` is
    equally likely. Parameter vector order is ``[n_trials, alpha, beta]``.
    """

    _cached_attrs = Distribution._cached_attrs + ('log_mass_table',)
    _param_names = ('n_trials', 'alpha', 'beta')

    def __init__(self):
        super().__init__()
        self._n_trials: Optional[int] = None
        self._alpha: Optional[float] = None
        self._beta: Optional[float] = None

    def _set_from_classical(self, *, n_trials, alpha, beta) -> None:
        n_trials = _check_n_trials(n_trials)
        alpha = float(alpha)
        beta = float(beta)
        if not alpha > 0 or not np.isfinite(alpha):
            raise ValueError(f"Alpha must be positive, got {alpha}")
        if not beta > 0 or not np.isfinite(beta):
            raise ValueError(f"Beta must be positive, got {beta}")
        self._n_trials = n_trials
        self._alpha = alpha
        self._beta = beta
        self._fitted = True
        self._invalidate_cache()

    def _set_from_parameter_vector(self, parameters: NDArray) -> None:
        if len(parameters) != 3:
            raise ValueError(
                f"BetaBinomial parameter vector must have length 3, got {len(parameters)}"
            )
        self._set_from_classical(n_trials=int(parameters[0]), alpha=parameters[1],
                                 beta=parameters[2])

    def _compute_classical_params(self) -> BetaBinomialParams:
        return BetaBinomialParams(n_trials=self._n_trials, alpha=self._alpha, beta=self._beta)

    @cached_property
    def log_mass_table(self) -> NDArray:
        """Log mass of every count :math:`0, \\ldots, n` (cached)."""
        self._check_fitted()
        n = self._n_trials
        k = np.arange(n + 1, dtype=float)
        return (log_binomial_coefficient(n, k)
                + np.asarray(log_beta(k + self._alpha, n - k + self._beta))
                - log_beta(self._alpha, self._beta))

    def logpdf(self, x: ArrayLike) -> Union[float, NDArray[np.floating]]:
        """Log mass, ``-inf`` for non-integer values and values outside :math:`[0, n]`."""
        self._check_fitted()
        x = np.asarray(x, dtype=float)
        valid = (x >= 0) & (x <= self._n_trials) & (x == np.floor(x))
        index = np.where(valid, x, 0.0).astype(int)
        result = np.where(valid, self.log_mass_table[index], -np.inf)
        return self._wrap_output(x, result)

    def pmf(self, x: ArrayLike) -> Union[float, NDArray[np.floating]]:
        """Alias of :meth:`pdf`."""
        return self.pdf(x)

    def logpmf(self, x: ArrayLike) -> Union[float, NDArray[np.floating]]:
        """Alias of :meth:`logpdf`."""
        return self.logpdf(x)

    def cdf(self, x: ArrayLike) -> Union[float, NDArray[np.floating]]:
        """Cumulative sum of the mass table, 0 below zero and 1 from :math:`n` on."""
        self._check_fitted()
        x = np.asarray(x, dtype=float)
        cumulative = np.minimum(np.cumsum(np.exp(self.log_mass_table)), 1.0)
        cumulative[-1] = 1.0
        k = np.floor(x)
        index = np.clip(np.nan_to_num(k, posinf=self._n_trials, neginf=-1.0),
                        0, self._n_trials).astype(int)
        result = np.where(k < 0, 0.0, cumulative[index])
        return self._wrap_output(x, result)

    def support(self) -> Tuple[float, float]:
        self._check_fitted()
        return (0.0, float(self._n_trials))

    def rvs(self, size=None, random_state=None) -> Union[int, NDArray]:
        """Draw :math:`p \\sim \\text{Beta}(\\alpha, \\beta)`, then a Binomial count."""
        self._check_fitted()
        rng = self._get_rng(random_state)
        x = sample_standard_gamma(self._alpha, size, rng)
        y = sample_standard_gamma(self._beta, size, rng)
        samples = rng.binomial(self._n_trials, x / (x + y))
        if size is None:
            return int(samples)
        return samples

    def mean(self) -> float:
        """:math:`n\\alpha/(\\alpha+\\beta)`."""
        self._check_fitted()
        return self._n_trials * self._alpha / (self._alpha + self._beta)

    def var(self) -> float:
        """:math:`n\\alpha\\beta(\\alpha+\\beta+n)/((\\alpha+\\beta)^2(\\alpha+\\beta+1))`."""
        self._check_fitted()
        n = self._n_trials
        apb = self._alpha + self._beta
        return n * self._alpha * self._beta * (apb + n) / (apb * apb * (apb + 1.0))

    def fit(self, X: ArrayLike, y: Optional[ArrayLike] = None,
            sample_weight: Optional[ArrayLike] = None, *,
            n_trials: Optional[int] = None, **kwargs) -> 'BetaBinomial':
        """
        Method-of-moments estimate for a known number of trials.

        With raw moments :math:`m_1, m_2` and :math:`D = n(m_2/m_1 - m_1 - 1) + m_1`,

        .. math::
            \\hat\\alpha = \\frac{n m_1 - m_2}{D}, \\qquad
            \\hat\\beta = \\frac{(n - m_1)(n - m_2/m_1)}{D}

        Parameters
        ----------
        X : array_like
            Observed counts.
        sample_weight : array_like, optional
            Per-sample weights.
        n_trials : int, optional
            Number of trials. Defaults to the current value when fitted,
            otherwise to the largest observed count.

        Raises
        ------
        ValueError
            If the data are not overdispersed relative to a Binomial, so the
            estimates are not positive.
        """
        X = np.asarray(X, dtype=float).ravel()
        if sample_weight is None:
            m1, variance = mean_and_variance(X)
        else:
            m1, variance = weighted_mean_and_variance(X, sample_weight)
        if n_trials is None:
            n_trials = self._n_trials if self._fitted else max(int(np.max(X)), 1)
        n = _check_n_trials(n_trials)
        if np.any(X < 0) or np.any(X > n):
            raise ValueError(f"Counts must lie in [0, {n}]")
        if m1 <= 0:
            raise ValueError(f"Beta-binomial moment fit needs a positive mean, got {m1}")
        m2 = variance + m1 * m1
        denominator = n * (m2 / m1 - m1 - 1.0) + m1
        alpha = (n * m1 - m2) / denominator
        beta = (n - m1) * (n - m2 / m1) / denominator
        if not (alpha > 0 and beta > 0 and np.isfinite(alpha) and np.isfinite(beta)):
            raise ValueError(
                f"Beta-binomial moment fit gave non-positive estimates "
                f"alpha={alpha}, beta={beta}; data are not overdispersed"
            )
        self._set_from_classical(n_trials=n, alpha=alpha, beta=beta)
        return self
