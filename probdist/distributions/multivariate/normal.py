"""
Multivariate Normal distribution.

The multivariate Normal distribution has PDF:

.. math::
    p(x|\\mu,\\Sigma) = (2\\pi)^{-d/2} |\\Sigma|^{-1/2}
    \\exp\\left(-\\frac{1}{2} (x-\\mu)^T \\Sigma^{-1} (x-\\mu)\\right)

for :math:`x \\in \\mathbb{R}^d`, where :math:`\\mu` is the mean vector
and :math:`\\Sigma` is the covariance matrix.

Internal storage
----------------
The distribution stores the mean and the symmetrized covariance:

- ``_mean``: mean vector, shape ``(d,)``
- ``_cov``: covariance matrix, shape ``(d, d)``

Derived quantities ``cholesky_factor``, ``log_det_cov``, ``precision`` and
``log_leading_coefficient`` are cached properties, computed on demand and
invalidated when parameters change.
"""

from functools import cached_property
from typing import Optional, Tuple, Union

import numpy as np
from numpy.typing import ArrayLike, NDArray
from scipy import stats
from scipy.linalg import cho_solve, solve_triangular

from probdist.base import Distribution
from probdist.params import MultivariateNormalParams
from probdist.utils.linalg import (
    symmetrize, checked_cholesky, robust_cholesky, log_det_from_cholesky,
)
from probdist.utils.statistics import MultivariateSufficientStatistic, normalized_weights

#: Diagonal regularization added by the maximum likelihood estimators.
DEFAULT_COVARIANCE = 1e-5

_LOG_2PI = np.log(2.0 * np.pi)


class MultivariateNormal(Distribution):
    """
    Multivariate Normal distribution.

    Supports both univariate (d=1) and multivariate (d>1) cases.

    Parameters
    ----------
    d : int, optional
        Dimension of the distribution. Inferred from parameters if not provided.

    Attributes
    ----------
    _mean : ndarray or None
        Mean vector, shape ``(d,)``.
    _cov : ndarray or None
        Symmetric positive definite covariance, shape ``(d, d)``.
    _d : int or None
        Dimension of the distribution.

    Examples
    --------
    >>> mean = np.array([1.0, 2.0])
    >>> cov = np.array([[1.0, 0.5], [0.5, 1.0]])
    >>> dist = MultivariateNormal.from_classical_params(mean=mean, cov=cov)
    >>> dist.mean()
    array([1., 2.])

    >>> # Fit from data
    >>> data = np.random.default_rng(0).multivariate_normal([0, 0], cov, size=1000)
    >>> dist = MultivariateNormal(d=2).fit(data)

    Notes
    -----
    Covariances whose off-diagonal pairs differ by at most ``1e-5`` are
    averaged into a symmetric matrix; larger asymmetry raises ``ValueError``.

    Samples are :math:`\\mu + L z` with :math:`L` the lower Cholesky factor of
    :math:`\\Sigma` and :math:`z \\sim N(0, I)`.

    Parameter vector order is ``[mean, vec(cov)]`` (row-major).
    """

    _cached_attrs: Tuple[str, ...] = Distribution._cached_attrs + (
        'cholesky_factor', 'log_det_cov', 'precision', 'log_leading_coefficient',
    )

    def __init__(self, d: Optional[int] = None):
        super().__init__()
        self._d = d
        self._mean: Optional[NDArray] = None
        self._cov: Optional[NDArray] = None

    @property
    def d(self) -> int:
        """Dimension of the distribution."""
        if self._d is None:
            raise ValueError("Dimension not set. Use from_classical_params() or fit().")
        return self._d

    # ============================================================
    # Cached derived quantities
    # ============================================================

    @cached_property
    def cholesky_factor(self) -> NDArray:
        """Lower Cholesky factor :math:`L` with :math:`\\Sigma = LL^T` (cached)."""
        self._check_fitted()
        return checked_cholesky(self._cov, name="Covariance matrix")

    @cached_property
    def log_det_cov(self) -> float:
        r"""
        Log-determinant of the covariance matrix (cached).

        .. math::
            \log|\Sigma| = 2 \sum_{i=1}^d \log L_{ii}
        """
        return log_det_from_cholesky(self.cholesky_factor)

    @cached_property
    def precision(self) -> NDArray:
        """Inverse covariance :math:`\\Sigma^{-1}` (cached)."""
        inverse = cho_solve((self.cholesky_factor, True), np.eye(self._d))
        return 0.5 * (inverse + inverse.T)

    @cached_property
    def log_leading_coefficient(self) -> float:
        """:math:`-\\frac{d}{2}\\log 2\\pi - \\frac{1}{2}\\log|\\Sigma|` (cached)."""
        return -0.5 * self._d * _LOG_2PI - 0.5 * self.log_det_cov

    # ============================================================
    # Internal state management
    # ============================================================

    def _set_from_classical(self, *, mean, cov) -> None:
        """
        Validate and store the mean vector and covariance matrix.

        Raises
        ------
        ValueError
            On dimension mismatch, asymmetry beyond ``1e-5`` or a covariance
            that is not positive definite.
        """
        mean = np.asarray(mean, dtype=float).flatten()
        cov = np.asarray(cov, dtype=float)

        # Handle scalar input for 1D case
        if cov.ndim == 0:
            cov = np.array([[float(cov)]])
        elif cov.ndim == 1:
            cov = np.diag(cov)

        d = len(mean)
        if d == 0:
            raise ValueError("Mean must have at least one dimension")
        if cov.shape != (d, d):
            raise ValueError(f"cov shape {cov.shape} doesn't match mean dimension {d}")
        if not np.all(np.isfinite(mean)):
            raise ValueError("Mean must be finite")

        cov = symmetrize(cov, name="Covariance matrix")
        L = checked_cholesky(cov, name="Covariance matrix")

        self._d = d
        self._mean = mean.copy()
        self._cov = cov
        self._fitted = True
        self._invalidate_cache()
        # Seed the cache with the factor computed during validation.
        self.__dict__['cholesky_factor'] = L

    def _compute_classical_params(self) -> MultivariateNormalParams:
        return MultivariateNormalParams(mean=self._mean.copy(), cov=self._cov.copy())

    def _compute_parameter_vector(self) -> NDArray:
        return np.concatenate([self._mean, self._cov.ravel()])

    def _set_from_parameter_vector(self, parameters: NDArray) -> None:
        n = len(parameters)
        # n = d + d^2
        d = int(round((-1 + np.sqrt(1 + 4 * n)) / 2))
        if d < 1 or d * (d + 1) != n:
            raise ValueError(
                f"MultivariateNormal parameter vector must have length d + d^2, got {n}"
            )
        if self._d is not None and d != self._d:
            raise ValueError(f"Expected {self._d + self._d ** 2} parameters, got {n}")
        self._set_from_classical(mean=parameters[:d], cov=parameters[d:].reshape(d, d))

    # ============================================================
    # Density
    # ============================================================

    def _as_samples(self, x: ArrayLike) -> NDArray:
        x = np.asarray(x, dtype=float)
        if self._d == 1 and x.ndim <= 1 and x.size != 1:
            x = x.reshape(-1, 1)
        X = np.atleast_2d(x)
        if X.shape[-1] != self._d:
            raise ValueError(f"Expected {self._d}-dimensional input, got {X.shape[-1]}")
        return X

    def z_squared(self, x: ArrayLike) -> Union[float, NDArray[np.floating]]:
        """
        Squared Mahalanobis distance :math:`(x-\\mu)^T \\Sigma^{-1}(x-\\mu)`.

        Computed as :math:`\\|L^{-1}(x-\\mu)\\|^2` with ``solve_triangular``.

        Parameters
        ----------
        x : array_like
            Shape ``(d,)`` for a single point, ``(n, d)`` for n points.

        Returns
        -------
        z2 : float or ndarray
        """
        self._check_fitted()
        single = np.ndim(x) <= 1 and np.size(x) == self._d
        X = self._as_samples(x)
        Z = solve_triangular(self.cholesky_factor, (X - self._mean).T, lower=True)
        result = np.sum(Z ** 2, axis=0)
        if single:
            return float(result[0])
        return result

    def logpdf(self, x: ArrayLike) -> Union[float, NDArray[np.floating]]:
        """
        Log probability density using Cholesky-based computation.

        .. math::
            \\log p(x|\\mu,\\Sigma) = -\\frac{d}{2}\\log(2\\pi)
            - \\frac{1}{2}\\log|\\Sigma|
            - \\frac{1}{2}(x-\\mu)^T \\Sigma^{-1}(x-\\mu)

        Parameters
        ----------
        x : array_like
            Points at which to evaluate log PDF.
            Shape ``(d,)`` for single sample, ``(n, d)`` for n samples.

        Returns
        -------
        logpdf : float or ndarray
        """
        self._check_fitted()
        return self.log_leading_coefficient - 0.5 * self.z_squared(x)

    def cdf(self, x: ArrayLike) -> Union[float, NDArray[np.floating]]:
        """
        Cumulative distribution function, via ``scipy.stats.multivariate_normal``.
        """
        self._check_fitted()
        return stats.multivariate_normal(mean=self._mean, cov=self._cov).cdf(x)

    # ============================================================
    # Sampling and moments
    # ============================================================

    def rvs(self, size=None, random_state=None) -> NDArray:
        """
        Generate random samples using :math:`X = \\mu + L Z` where :math:`Z \\sim N(0, I)`.

        Parameters
        ----------
        size : int or tuple of ints, optional
            Number of samples to generate.
        random_state : int or Generator, optional
            Random number generator.

        Returns
        -------
        samples : ndarray
            Shape ``(size, d)``, or ``(d,)`` for ``size=None``.
        """
        self._check_fitted()
        rng = self._get_rng(random_state)
        L = self.cholesky_factor
        if size is None:
            return self._mean + L @ rng.standard_normal(self._d)
        if isinstance(size, (int, np.integer)):
            z = rng.standard_normal((size, self._d))
        else:
            z = rng.standard_normal((*size, self._d))
        return self._mean + z @ L.T

    def mean(self) -> NDArray:
        """Mean of the distribution: E[X] = μ."""
        self._check_fitted()
        return self._mean.copy()

    def var(self) -> NDArray:
        """Variance (diagonal of covariance matrix)."""
        self._check_fitted()
        return np.diag(self._cov).copy()

    def cov(self) -> NDArray:
        """Covariance matrix Σ."""
        self._check_fitted()
        return self._cov.copy()

    def entropy(self) -> float:
        """
        Differential entropy.

        .. math::
            H(X) = \\frac{d}{2}(1 + \\log(2\\pi)) + \\frac{1}{2}\\log|\\Sigma|
        """
        self._check_fitted()
        return 0.5 * self._d * (1.0 + _LOG_2PI) + 0.5 * self.log_det_cov

    # ============================================================
    # Estimation
    # ============================================================

    def fit(self, X: ArrayLike, y: Optional[ArrayLike] = None,
            sample_weight: Optional[ArrayLike] = None, *,
            default_covariance: float = DEFAULT_COVARIANCE) -> 'MultivariateNormal':
        """
        Maximum likelihood estimate with diagonal regularization.

        Without weights:

        .. math::
            \\hat\\mu = \\bar x, \\qquad
            \\hat\\Sigma = \\frac{1}{n-1}\\sum_i (x_i - \\bar x)(x_i - \\bar x)^T + c I

        With weights normalized to :math:`\\sum_i w_i = 1`, the covariance is
        divided by :math:`1 - \\sum_i w_i^2` instead (the biased estimate is
        used when that correction is not positive).

        Parameters
        ----------
        X : array_like
            Training data. Shape ``(n_samples, d)`` or ``(n_samples,)`` for 1D.
        y : array_like, optional
            Ignored.
        sample_weight : array_like, optional
            Per-sample weights.
        default_covariance : float, optional
            Diagonal regularization :math:`c`. Default ``1e-5``.

        Returns
        -------
        self : MultivariateNormal

        Raises
        ------
        ValueError
            If fewer than two samples are given.
        """
        X = np.asarray(X, dtype=float)
        if X.ndim == 1:
            X = X.reshape(-1, 1)
        n, d = X.shape
        if n < 2:
            raise ValueError(
                f"insufficient data: need at least 2 samples to estimate a covariance, got {n}"
            )
        if self._d is not None and self._d != d:
            raise ValueError(f"Expected {self._d}-dimensional data, got {d}")

        if sample_weight is None:
            mean = np.mean(X, axis=0)
            diff = X - mean
            cov = diff.T @ diff / (n - 1)
        else:
            w = normalized_weights(sample_weight, n)
            mean = w @ X
            diff = X - mean
            cov = (diff * w[:, None]).T @ diff
            correction = 1.0 - np.sum(w * w)
            if correction > 0:
                cov = cov / correction

        cov = cov + default_covariance * np.eye(d)
        # Collinear data with no regularization can leave cov singular.
        L = robust_cholesky(0.5 * (cov + cov.T))
        self._set_from_classical(mean=mean, cov=L @ L.T)
        return self

    @classmethod
    def from_sufficient_statistic(cls, statistic: MultivariateSufficientStatistic
                                  ) -> 'MultivariateNormal':
        """Gaussian with the accumulator's mean and covariance."""
        if statistic.count == 0:
            raise ValueError("insufficient data: sufficient statistic is empty")
        return cls.from_classical_params(mean=statistic.mean, cov=statistic.covariance)

    # ============================================================
    # Algebra
    # ============================================================

    def times(self, other: 'MultivariateNormal') -> 'MultivariateNormal':
        """
        Normalized product of two Gaussian densities.

        .. math::
            \\Sigma = (\\Sigma_1^{-1} + \\Sigma_2^{-1})^{-1}, \\qquad
            \\mu = \\Sigma(\\Sigma_1^{-1}\\mu_1 + \\Sigma_2^{-1}\\mu_2)
        """
        self._check_fitted()
        other._check_fitted()
        combined = self.precision + other.precision
        cov = np.linalg.inv(combined)
        mean = cov @ (self.precision @ self._mean + other.precision @ other._mean)
        return MultivariateNormal.from_classical_params(mean=mean, cov=0.5 * (cov + cov.T))

    def convolve(self, other: 'MultivariateNormal') -> 'MultivariateNormal':
        """Distribution of the sum of two independent Gaussian vectors."""
        self._check_fitted()
        other._check_fitted()
        return MultivariateNormal.from_classical_params(
            mean=self._mean + other._mean, cov=self._cov + other._cov
        )

    def scale(self, A: ArrayLike) -> 'MultivariateNormal':
        """Distribution of :math:`AX`: mean :math:`A\\mu`, covariance :math:`A\\Sigma A^T`."""
        self._check_fitted()
        A = np.atleast_2d(np.asarray(A, dtype=float))
        cov = A @ self._cov @ A.T
        return MultivariateNormal.from_classical_params(mean=A @ self._mean, cov=cov)

    def plus(self, other: Union['MultivariateNormal', ArrayLike]) -> 'MultivariateNormal':
        """
        Distribution of :math:`X + b` for a constant vector ``b``, or of
        :math:`X + Y` when ``other`` is an independent Gaussian.
        """
        self._check_fitted()
        if isinstance(other, MultivariateNormal):
            return self.convolve(other)
        b = np.asarray(other, dtype=float).ravel()
        return MultivariateNormal.from_classical_params(mean=self._mean + b, cov=self._cov)

    # ============================================================
    # String representation
    # ============================================================

    def __repr__(self) -> str:
        if not self._fitted:
            if self._d is not None:
                return f"MultivariateNormal(d={self._d}, not fitted)"
            return "MultivariateNormal(not fitted)"
        if self._d <= 3:
            mean_str = ", ".join(f"{x:.4f}" for x in self._mean)
            return f"MultivariateNormal(mean=[{mean_str}], d={self._d})"
        return f"MultivariateNormal(d={self._d})"


# Alias for convenience
MVN = MultivariateNormal
