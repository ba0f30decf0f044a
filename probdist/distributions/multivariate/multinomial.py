"""
Multinomial and Categorical distributions.

The Multinomial distribution counts the outcomes of :math:`n` independent
draws from :math:`k` categories with probabilities :math:`p_i`:

.. math::
    P(x|n, p) = \\frac{n!}{\\prod_i x_i!} \\prod_i p_i^{x_i},
    \\quad \\sum_i x_i = n

Probabilities are stored as nonnegative weights normalized by their sum.
The Categorical distribution is the single-draw case :math:`n = 1`, with
observations encoded as one-hot vectors.
"""

from typing import Optional

import numpy as np
from numpy.typing import ArrayLike, NDArray
from scipy.special import xlogy

from probdist.base import Distribution
from probdist.params import CategoricalParams, MultinomialParams
from probdist.distributions.univariate.binomial import _check_n_trials
from probdist.utils.special import log_factorial
from probdist.utils.statistics import normalized_weights


def _check_weights(weights) -> NDArray:
    weights = np.asarray(weights, dtype=float).flatten()
    if weights.size < 2:
        raise ValueError(f"Weights must have at least 2 entries, got {weights.size}")
    if np.any(weights < 0) or not np.all(np.isfinite(weights)):
        raise ValueError(f"Weights must be nonnegative and finite, got {weights}")
    if np.sum(weights) <= 0:
        raise ValueError(f"Weights must have a positive sum, got {weights}")
    return weights.copy()


class Multinomial(Distribution):
    """
    Multinomial distribution with ``n_trials`` draws over ``k`` categories.

    Examples
    --------
    >>> dist = Multinomial.from_classical_params(n_trials=4, weights=[1.0, 1.0, 2.0])
    >>> dist.mean()
    array([1., 1., 2.])

    Notes
    -----
    A count vector that is not made of nonnegative integers summing to
    ``n_trials`` has zero mass. Parameter vector order is
    ``[n_trials, w_1, ..., w_k]``.
    """

    def __init__(self):
        super().__init__()
        self._n_trials: Optional[int] = None
        self._weights: Optional[NDArray] = None

    def _set_from_classical(self, *, n_trials, weights) -> None:
        n_trials = _check_n_trials(n_trials)
        weights = _check_weights(weights)
        self._n_trials = n_trials
        self._weights = weights
        self._fitted = True
        self._invalidate_cache()

    def _compute_classical_params(self) -> MultinomialParams:
        return MultinomialParams(n_trials=self._n_trials, weights=self._weights.copy())

    def _compute_parameter_vector(self) -> NDArray:
        return np.concatenate([[self._n_trials], self._weights])

    def _set_from_parameter_vector(self, parameters: NDArray) -> None:
        if len(parameters) < 3:
            raise ValueError(
                f"Multinomial parameter vector must have length at least 3, got {len(parameters)}"
            )
        self._set_from_classical(n_trials=int(parameters[0]), weights=parameters[1:])

    @property
    def d(self) -> int:
        """Number of categories :math:`k`."""
        self._check_fitted()
        return self._weights.size

    @property
    def n_trials(self) -> int:
        self._check_fitted()
        return self._n_trials

    @property
    def probabilities(self) -> NDArray:
        """Category probabilities :math:`p = w / \\sum_i w_i`."""
        self._check_fitted()
        return self._weights / np.sum(self._weights)

    def logpdf(self, x: ArrayLike):
        """
        Log mass :math:`\\log n! - \\sum_i \\log x_i! + \\sum_i x_i \\log p_i`.

        Accepts a single count vector of shape ``(k,)`` or a batch of shape
        ``(n_samples, k)``.
        """
        self._check_fitted()
        x = np.asarray(x, dtype=float)
        X = np.atleast_2d(x)
        if X.shape[-1] != self.d:
            raise ValueError(f"Expected {self.d}-dimensional input, got {X.shape[-1]}")
        valid = (np.all((X >= 0) & (X == np.floor(X)), axis=-1)
                 & (np.sum(X, axis=-1) == self._n_trials))
        safe = np.where(valid[:, None], X, 0.0)
        with np.errstate(divide='ignore'):
            result = (log_factorial(self._n_trials)
                      - np.sum(np.asarray(log_factorial(safe)), axis=-1)
                      + np.sum(xlogy(safe, self.probabilities), axis=-1))
        result = np.where(valid, result, -np.inf)
        if x.ndim <= 1:
            return float(result[0])
        return result

    def pmf(self, x: ArrayLike):
        """Alias of :meth:`pdf`."""
        return self.pdf(x)

    def logpmf(self, x: ArrayLike):
        """Alias of :meth:`logpdf`."""
        return self.logpdf(x)

    def rvs(self, size=None, random_state=None) -> NDArray:
        """Count vectors of shape ``(*size, k)``, or ``(k,)`` when ``size`` is None."""
        self._check_fitted()
        rng = self._get_rng(random_state)
        return rng.multinomial(self._n_trials, self.probabilities, size=size)

    def mean(self) -> NDArray:
        """:math:`np`."""
        self._check_fitted()
        return self._n_trials * self.probabilities

    def var(self) -> NDArray:
        """Marginal variances :math:`np_i(1 - p_i)`."""
        self._check_fitted()
        p = self.probabilities
        return self._n_trials * p * (1.0 - p)

    def cov(self) -> NDArray:
        """Covariance :math:`n(\\text{diag}(p) - pp^T)`."""
        self._check_fitted()
        p = self.probabilities
        return self._n_trials * (np.diag(p) - np.outer(p, p))

    @staticmethod
    def _check_counts(X: NDArray, name: str) -> NDArray:
        if X.ndim != 2 or X.shape[1] < 2:
            raise ValueError(f"{name} fit needs data of shape (n, k >= 2), got {X.shape}")
        if X.shape[0] == 0:
            raise ValueError("insufficient data: at least one sample is required")
        if np.any(X < 0) or np.any(X != np.floor(X)):
            raise ValueError(f"{name} fit requires nonnegative integer counts")
        return X

    def fit(self, X: ArrayLike, y: Optional[ArrayLike] = None,
            sample_weight: Optional[ArrayLike] = None, **kwargs) -> 'Multinomial':
        """
        Maximum likelihood estimate.

        ``n_trials`` is the common row total; the weights are the (weighted)
        category totals.

        Raises
        ------
        ValueError
            If the rows do not share the same positive total.
        """
        X = self._check_counts(np.asarray(X, dtype=float), "Multinomial")
        totals = np.sum(X, axis=1)
        if np.any(totals != totals[0]) or totals[0] < 1:
            raise ValueError("Multinomial fit requires every row to sum to the same positive count")
        w = normalized_weights(sample_weight, X.shape[0])
        self._set_from_classical(n_trials=int(totals[0]), weights=w @ X)
        return self

    def __repr__(self) -> str:
        if not self._fitted:
            return f"{self.__class__.__name__}(not fitted)"
        p_str = ", ".join(f"{p:.4f}" for p in self.probabilities)
        return f"Multinomial(n_trials={self._n_trials}, p=[{p_str}])"


class Categorical(Multinomial):
    """
    Categorical distribution: a single draw over ``k`` categories.

    Observations are one-hot vectors of length ``k``.

    Examples
    --------
    >>> dist = Categorical.from_classical_params(weights=[1.0, 3.0])
    >>> dist.pmf([0, 1])
    0.75

    Notes
    -----
    Parameter vector order is ``[w_1, ..., w_k]``.
    """

    def _set_from_classical(self, *, weights) -> None:
        super()._set_from_classical(n_trials=1, weights=weights)

    def _compute_classical_params(self) -> CategoricalParams:
        return CategoricalParams(weights=self._weights.copy())

    def _compute_parameter_vector(self) -> NDArray:
        return self._weights.copy()

    def _set_from_parameter_vector(self, parameters: NDArray) -> None:
        if self._weights is not None and len(parameters) != self._weights.size:
            raise ValueError(
                f"Categorical parameter vector must have length {self._weights.size}, "
                f"got {len(parameters)}"
            )
        self._set_from_classical(weights=parameters)

    def fit(self, X: ArrayLike, y: Optional[ArrayLike] = None,
            sample_weight: Optional[ArrayLike] = None, **kwargs) -> 'Categorical':
        """Maximum likelihood estimate: the (weighted) category frequencies of one-hot rows."""
        X = self._check_counts(np.asarray(X, dtype=float), "Categorical")
        if np.any(np.sum(X, axis=1) != 1):
            raise ValueError("Categorical fit requires one-hot rows")
        w = normalized_weights(sample_weight, X.shape[0])
        self._set_from_classical(weights=w @ X)
        return self

    def __repr__(self) -> str:
        if not self._fitted:
            return "Categorical(not fitted)"
        p_str = ", ".join(f"{p:.4f}" for p in self.probabilities)
        return f"Categorical(p=[{p_str}])"
