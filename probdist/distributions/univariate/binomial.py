"""
Binomial distribution.

The number of successes in :math:`n` independent trials with success
probability :math:`p`:

.. math::
    P(X = k|n, p) = \\binom{n}{k} p^k (1-p)^{n-k}, \\quad k = 0, 1, \\ldots, n

The CDF is :math:`F(k) = 1 - I_p(k + 1, n - k)` with the regularized
incomplete Beta function :math:`I`.
"""

from typing import Optional, Tuple, Union

import numpy as np
from numpy.typing import ArrayLike, NDArray
from scipy.special import xlogy, xlog1py

from probdist.base import Distribution
from probdist.params import BinomialParams
from probdist.utils.special import log_factorial, regularized_incomplete_beta
from probdist.utils.statistics import mean_and_variance, weighted_mean_and_variance


def _check_n_trials(n_trials) -> int:
    if float(n_trials) != int(n_trials) or int(n_trials) < 1:
        raise ValueError(f"Number of trials must be a positive integer, got {n_trials}")
    return int(n_trials)


def _check_probability(p, upper_open: bool = False) -> float:
    p = float(p)
    if not (0.0 <= p <= 1.0) or (upper_open and p == 1.0):
        bound = "[0, 1)" if upper_open else "[0, 1]"
        raise ValueError(f"Probability must be in {bound}, got {p}")
    return p


def log_binomial_coefficient(n: ArrayLike, k: ArrayLike) -> Union[float, NDArray]:
    """:math:`\\log\\binom{n}{k}` for integers :math:`0 \\leq k \\leq n`."""
    n = np.asarray(n, dtype=float)
    k = np.asarray(k, dtype=float)
    return (np.asarray(log_factorial(n)) - np.asarray(log_factorial(k))
            - np.asarray(log_factorial(n - k)))


class Binomial(Distribution):
    """
    Binomial distribution with ``n_trials`` trials and success probability ``p``.

    ``pdf`` / ``logpdf`` evaluate the mass function (``pmf`` / ``logpmf``
    are aliases). Non-integer values and values outside :math:`[0, n]`
    have zero mass.

    Examples
    --------
    >>> dist = Binomial.from_classical_params(n_trials=10, p=0.3)
    >>> dist.mean(), dist.var()
    (3.0, 2.1)

    Notes
    -----
    Parameter vector order is ``[n_trials, p]``; ``n_trials`` is truncated
    to an integer when set from a vector.
    """

    _param_names = ('n_trials', 'p')

    def __init__(self):
        super().__init__()
        self._n_trials: Optional[int] = None
        self._p: Optional[float] = None

    def _set_from_classical(self, *, n_trials, p) -> None:
        n_trials = _check_n_trials(n_trials)
        p = _check_probability(p)
        self._n_trials = n_trials
        self._p = p
        self._fitted = True
        self._invalidate_cache()

    def _set_from_parameter_vector(self, parameters: NDArray) -> None:
        if len(parameters) != 2:
            raise ValueError(
                f"Binomial parameter vector must have length 2, got {len(parameters)}"
            )
        self._set_from_classical(n_trials=int(parameters[0]), p=parameters[1])

    def _compute_classical_params(self) -> BinomialParams:
        return BinomialParams(n_trials=self._n_trials, p=self._p)

    def logpdf(self, x: ArrayLike) -> Union[float, NDArray[np.floating]]:
        """
        Log mass :math:`\\log\\binom{n}{k} + k\\log p + (n-k)\\log(1-p)`.

        The terms with :math:`k = 0` or :math:`k = n` vanish exactly, so
        ``p = 0`` and ``p = 1`` give point masses.
        """
        self._check_fitted()
        x = np.asarray(x, dtype=float)
        n = self._n_trials
        valid = (x >= 0) & (x <= n) & (x == np.floor(x))
        k = np.where(valid, x, 0.0)
        with np.errstate(divide='ignore'):
            result = (log_binomial_coefficient(n, k) + xlogy(k, self._p)
                      + xlog1py(n - k, -self._p))
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
        :math:`P(X \\leq x)`: 0 below zero, 1 from :math:`n` on and
        :math:`1 - I_p(\\lfloor x\\rfloor + 1, n - \\lfloor x\\rfloor)` between.
        """
        self._check_fitted()
        x = np.asarray(x, dtype=float)
        n = self._n_trials
        k = np.floor(np.atleast_1d(x))
        result = np.where(k >= n, 1.0, 0.0)
        inside = (k >= 0) & (k < n)
        if np.any(inside):
            ki = k[inside]
            result[inside] = 1.0 - np.asarray(
                regularized_incomplete_beta(ki + 1.0, n - ki, self._p)
            )
        return self._wrap_output(x, result.reshape(x.shape))

    def support(self) -> Tuple[float, float]:
        self._check_fitted()
        return (0.0, float(self._n_trials))

    def rvs(self, size=None, random_state=None) -> Union[int, NDArray]:
        self._check_fitted()
        rng = self._get_rng(random_state)
        samples = rng.binomial(self._n_trials, self._p, size)
        if size is None:
            return int(samples)
        return samples

    def mean(self) -> float:
        """:math:`np`."""
        self._check_fitted()
        return self._n_trials * self._p

    def var(self) -> float:
        """:math:`np(1-p)`."""
        self._check_fitted()
        return self._n_trials * self._p * (1.0 - self._p)

    def fit(self, X: ArrayLike, y: Optional[ArrayLike] = None,
            sample_weight: Optional[ArrayLike] = None, *,
            n_trials: Optional[int] = None, **kwargs) -> 'Binomial':
        """
        Maximum likelihood estimate of ``p`` for a known number of trials.

        Parameters
        ----------
        X : array_like
            Observed success counts.
        sample_weight : array_like, optional
            Per-sample weights.
        n_trials : int, optional
            Number of trials. Defaults to the current value when fitted,
            otherwise to the largest observed count.

        Returns
        -------
        self : Binomial
        """
        X = np.asarray(X, dtype=float).ravel()
        if sample_weight is None:
            mean, _ = mean_and_variance(X)
        else:
            mean, _ = weighted_mean_and_variance(X, sample_weight)
        if n_trials is None:
            n_trials = self._n_trials if self._fitted else max(int(np.max(X)), 1)
        n_trials = _check_n_trials(n_trials)
        if np.any(X < 0) or np.any(X > n_trials):
            raise ValueError(f"Counts must lie in [0, {n_trials}]")
        self._set_from_classical(n_trials=n_trials, p=mean / n_trials)
        return self
