"""
Sample moments and sufficient statistic accumulators.

The estimators of the univariate distributions are all driven by a few
sample moments, optionally weighted:

- :func:`mean_and_variance` and :func:`weighted_mean_and_variance`
- :func:`kurtosis` and :func:`weighted_kurtosis` (excess kurtosis)
- :func:`weighted_median` (weighted quantiles for the robust location fits)

The accumulators :class:`ScalarSufficientStatistic` and
:class:`MultivariateSufficientStatistic` maintain a running count, mean and
sum of squared differences (Welford's algorithm) so that a Gaussian estimate
can be produced without replaying the data. Two accumulators can be merged
with the parallel-update formula of Chan, Golub and LeVeque.
"""

from typing import Optional, Tuple

import numpy as np
from numpy.typing import ArrayLike, NDArray


# ============================================================================
# Sample moments
# ============================================================================

def mean_and_variance(x: ArrayLike) -> Tuple[float, float]:
    """
    Sample mean and unbiased sample variance.

    Parameters
    ----------
    x : array_like
        One-dimensional data.

    Returns
    -------
    mean : float
    variance : float
        :math:`\\frac{1}{n-1}\\sum_i (x_i - \\bar x)^2`, or 0 when fewer than
        two samples are given.
    """
    x = np.asarray(x, dtype=float).ravel()
    n = x.size
    if n == 0:
        raise ValueError("insufficient data: at least one sample is required")
    mean = float(np.mean(x))
    if n < 2:
        return mean, 0.0
    return mean, float(np.sum((x - mean) ** 2) / (n - 1))


def weighted_mean_and_variance(x: ArrayLike, weights: ArrayLike) -> Tuple[float, float]:
    """
    Weighted sample mean and (biased) weighted variance.

    Weights enter through their absolute value:

    .. math::
        \\bar x = \\frac{\\sum_i |w_i| x_i}{\\sum_i |w_i|}, \\qquad
        s^2 = \\frac{\\sum_i |w_i| (x_i - \\bar x)^2}{\\sum_i |w_i|}

    A zero total weight yields ``(0.0, 0.0)``.
    """
    x = np.asarray(x, dtype=float).ravel()
    w = np.abs(np.asarray(weights, dtype=float).ravel())
    if x.shape != w.shape:
        raise ValueError(f"weights shape {w.shape} doesn't match data shape {x.shape}")
    total = np.sum(w)
    if total <= 0.0:
        return 0.0, 0.0
    # Points with zero weight may carry non-finite values (e.g. log of 0).
    active = w > 0
    x, w = x[active], w[active]
    mean = np.sum(w * x) / total
    variance = np.sum(w * (x - mean) ** 2) / total
    return float(mean), float(variance)


def kurtosis(x: ArrayLike) -> float:
    """
    Excess kurtosis: biased fourth central moment over the squared unbiased
    variance, minus 3. Returns 0 for fewer than two samples.
    """
    x = np.asarray(x, dtype=float).ravel()
    if x.size < 2:
        return 0.0
    mean, variance = mean_and_variance(x)
    if variance <= 0.0:
        return 0.0
    m4 = np.mean((x - mean) ** 4)
    return float(m4 / (variance * variance) - 3.0)


def weighted_kurtosis(x: ArrayLike, weights: ArrayLike) -> float:
    """Weighted excess kurtosis, see :func:`kurtosis`."""
    x = np.asarray(x, dtype=float).ravel()
    w = np.abs(np.asarray(weights, dtype=float).ravel())
    if x.size < 2:
        return 0.0
    mean, variance = weighted_mean_and_variance(x, w)
    if variance <= 0.0:
        return 0.0
    active = w > 0
    m4 = np.sum(w[active] * (x[active] - mean) ** 4) / np.sum(w)
    return float(m4 / (variance * variance) - 3.0)


def weighted_median(x: ArrayLike, weights: ArrayLike, quantile: float = 0.5) -> float:
    """
    Weighted quantile (the median by default).

    The data are sorted and the first point whose cumulative weight reaches
    ``quantile`` times the total weight is returned.

    Parameters
    ----------
    x : array_like
        One-dimensional data.
    weights : array_like
        Nonnegative weights (absolute values are used).
    quantile : float, optional
        Probability level in [0, 1]. Default 0.5.

    Returns
    -------
    value : float
    """
    x = np.asarray(x, dtype=float).ravel()
    w = np.abs(np.asarray(weights, dtype=float).ravel())
    if x.shape != w.shape:
        raise ValueError(f"weights shape {w.shape} doesn't match data shape {x.shape}")
    if not 0.0 <= quantile <= 1.0:
        raise ValueError(f"quantile must be in [0, 1], got {quantile}")
    total = np.sum(w)
    if total <= 0.0:
        raise ValueError("insufficient data: sample weights sum to zero")
    order = np.argsort(x)
    cumulative = np.cumsum(w[order])
    index = np.searchsorted(cumulative, quantile * total)
    return float(x[order][min(index, x.size - 1)])


# ============================================================================
# Sufficient statistic accumulators
# ============================================================================

class ScalarSufficientStatistic:
    """
    Running count, mean and sum of squared differences of scalar data.

    Parameters
    ----------
    default_variance : float, optional
        Added to the variance estimate. Default ``1e-5``.

    Examples
    --------
    >>> stat = ScalarSufficientStatistic()
    >>> stat.update_batch([1.0, 2.0, 3.0])
    >>> stat.mean, stat.variance
    (2.0, 1.00001)
    """

    def __init__(self, default_variance: float = 1e-5):
        if default_variance < 0:
            raise ValueError(f"default_variance must be nonnegative, got {default_variance}")
        self.default_variance = default_variance
        self.count = 0
        self.mean = 0.0
        self.sum_squared_differences = 0.0

    def update(self, value: float) -> None:
        """Welford update with a single observation."""
        value = float(value)
        self.count += 1
        delta = value - self.mean
        self.mean += delta / self.count
        self.sum_squared_differences += delta * (value - self.mean)

    def update_batch(self, values: ArrayLike) -> None:
        """Fold a whole array in with one merge."""
        values = np.asarray(values, dtype=float).ravel()
        if values.size == 0:
            return
        batch = ScalarSufficientStatistic(self.default_variance)
        batch.count = values.size
        batch.mean = float(np.mean(values))
        batch.sum_squared_differences = float(np.sum((values - batch.mean) ** 2))
        self.merge(batch)

    def merge(self, other: 'ScalarSufficientStatistic') -> 'ScalarSufficientStatistic':
        """
        Merge another accumulator into this one in place.

        .. math::
            M_{2} = M_{2,a} + M_{2,b} + \\delta^2 \\frac{n_a n_b}{n_a + n_b}
        """
        if other.count == 0:
            return self
        if self.count == 0:
            self.count = other.count
            self.mean = other.mean
            self.sum_squared_differences = other.sum_squared_differences
            return self
        n = self.count + other.count
        delta = other.mean - self.mean
        self.mean += delta * other.count / n
        self.sum_squared_differences += (
            other.sum_squared_differences + delta * delta * self.count * other.count / n
        )
        self.count = n
        return self

    def __add__(self, other: 'ScalarSufficientStatistic') -> 'ScalarSufficientStatistic':
        result = ScalarSufficientStatistic(self.default_variance)
        result.merge(self)
        result.merge(other)
        return result

    @property
    def variance(self) -> float:
        """Unbiased variance plus ``default_variance``."""
        if self.count < 2:
            return self.default_variance
        return self.sum_squared_differences / (self.count - 1) + self.default_variance

    def __repr__(self) -> str:
        return (f"ScalarSufficientStatistic(count={self.count}, mean={self.mean:.4f}, "
                f"variance={self.variance:.4f})")


class MultivariateSufficientStatistic:
    """
    Running count, mean vector and sum of outer products of differences.

    The sum of squared differences starts at ``default_covariance * I`` so
    that the covariance estimate is positive definite from the first
    observation on.

    Parameters
    ----------
    dim : int
        Dimension of the observations.
    default_covariance : float, optional
        Diagonal regularization. Default ``1e-5``.
    """

    def __init__(self, dim: int, default_covariance: float = 1e-5):
        if dim < 1:
            raise ValueError(f"dim must be positive, got {dim}")
        self.dim = dim
        self.default_covariance = default_covariance
        self.count = 0
        self.mean = np.zeros(dim)
        self.sum_squared_differences = default_covariance * np.eye(dim)

    def _check_dim(self, x: NDArray) -> None:
        if x.shape[-1] != self.dim:
            raise ValueError(f"Expected {self.dim}-dimensional input, got {x.shape[-1]}")

    def update(self, value: ArrayLike) -> None:
        """Welford update with a single observation."""
        x = np.asarray(value, dtype=float).ravel()
        self._check_dim(x)
        self.count += 1
        delta = x - self.mean
        self.mean = self.mean + delta / self.count
        self.sum_squared_differences = (
            self.sum_squared_differences + np.outer(delta, x - self.mean)
        )

    def update_batch(self, values: ArrayLike) -> None:
        """Fold an ``(n, dim)`` array in with one merge."""
        X = np.atleast_2d(np.asarray(values, dtype=float))
        self._check_dim(X)
        if X.shape[0] == 0:
            return
        batch = MultivariateSufficientStatistic(self.dim, 0.0)
        batch.count = X.shape[0]
        batch.mean = np.mean(X, axis=0)
        diff = X - batch.mean
        batch.sum_squared_differences = diff.T @ diff
        self.merge(batch)

    def merge(self, other: 'MultivariateSufficientStatistic',
              ) -> 'MultivariateSufficientStatistic':
        """
        Merge another accumulator into this one in place.

        Only this accumulator's ``default_covariance`` regularization is
        kept; the one carried by ``other`` is removed before merging.
        """
        if other.dim != self.dim:
            raise ValueError(f"Cannot merge dimension {other.dim} into {self.dim}")
        if other.count == 0:
            return self
        other_ssd = other.sum_squared_differences - other.default_covariance * np.eye(self.dim)
        n = self.count + other.count
        delta = other.mean - self.mean
        self.mean = self.mean + delta * other.count / n
        self.sum_squared_differences = (
            self.sum_squared_differences + other_ssd
            + np.outer(delta, delta) * self.count * other.count / n
        )
        self.count = n
        return self

    def __add__(self, other: 'MultivariateSufficientStatistic',
                ) -> 'MultivariateSufficientStatistic':
        result = MultivariateSufficientStatistic(self.dim, self.default_covariance)
        result.merge(self)
        result.merge(other)
        return result

    @property
    def covariance(self) -> NDArray:
        """``SSD / (n - 1)``, or the SSD itself for fewer than two samples."""
        if self.count < 2:
            return self.sum_squared_differences.copy()
        return self.sum_squared_differences / (self.count - 1)

    def __repr__(self) -> str:
        return f"MultivariateSufficientStatistic(dim={self.dim}, count={self.count})"


def normalized_weights(weights: Optional[ArrayLike], n: int) -> NDArray:
    """
    Absolute, sum-to-one sample weights (uniform when ``weights`` is None).

    Raises
    ------
    ValueError
        If the weights have the wrong length or sum to zero.
    """
    if weights is None:
        return np.full(n, 1.0 / n)
    w = np.abs(np.asarray(weights, dtype=float).ravel())
    if w.shape != (n,):
        raise ValueError(f"sample_weight must have shape ({n},), got {w.shape}")
    total = np.sum(w)
    if total <= 0:
        raise ValueError("insufficient data: sample weights sum to zero")
    return w / total
