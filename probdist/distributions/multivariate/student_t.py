"""
Multivariate Student-t distribution.

Parametrized by the degrees of freedom :math:`\\nu`, the location
:math:`\\mu` and the precision (inverse scale) matrix :math:`P`:

.. math::
    \\log p(x) = \\log\\Gamma\\left(\\frac{d+\\nu}{2}\\right)
    - \\log\\Gamma\\left(\\frac{\\nu}{2}\\right) + \\frac{1}{2}\\log|P|
    - \\frac{d}{2}\\log(\\pi\\nu)
    - \\frac{d+\\nu}{2}\\log\\left(1 + \\frac{z^2}{\\nu}\\right)

with :math:`z^2 = (x-\\mu)^T P (x-\\mu)`.
"""

from functools import cached_property
from typing import Optional, Tuple

import numpy as np
from numpy.typing import ArrayLike, NDArray
from scipy.linalg import cho_solve

from probdist.base import Distribution
from probdist.params import MultivariateStudentTParams
from probdist.distributions.univariate.gamma import sample_standard_gamma
from probdist.distributions.multivariate.normal import MultivariateNormal
from probdist.utils.linalg import symmetrize, checked_cholesky, log_det_from_cholesky
from probdist.utils.special import log_gamma
from probdist.utils.statistics import normalized_weights

#: Degrees of freedom used by :meth:`MultivariateStudentT.fit` when none is set.
DEFAULT_DOF = 3.0


class MultivariateStudentT(Distribution):
    """
    Multivariate Student-t distribution.

    Examples
    --------
    >>> dist = MultivariateStudentT.from_classical_params(
    ...     dof=5.0, mean=np.zeros(2), precision=np.eye(2))
    >>> dist.cov()
    array([[1.66666667, 0.        ],
           [0.        , 1.66666667]])

    Notes
    -----
    Samples are Gaussian draws with covariance :math:`P^{-1}`, scaled by
    :math:`\\sqrt{\\nu / C}` with :math:`C \\sim \\chi^2_\\nu`, then shifted by
    :math:`\\mu`. Parameter vector order is ``[dof, mean, vec(precision)]``.
    """

    _cached_attrs: Tuple[str, ...] = Distribution._cached_attrs + (
        'precision_cholesky', 'log_det_precision', 'scale_matrix',
    )

    def __init__(self, d: Optional[int] = None):
        super().__init__()
        self._d = d
        self._dof: Optional[float] = None
        self._mean: Optional[NDArray] = None
        self._precision: Optional[NDArray] = None

    @property
    def d(self) -> int:
        """Dimension of the distribution."""
        if self._d is None:
            raise ValueError("Dimension not set. Use from_classical_params() or fit().")
        return self._d

    @cached_property
    def precision_cholesky(self) -> NDArray:
        """Lower Cholesky factor of the precision matrix (cached)."""
        self._check_fitted()
        return checked_cholesky(self._precision, name="Precision matrix")

    @cached_property
    def log_det_precision(self) -> float:
        """:math:`\\log|P|` (cached)."""
        return log_det_from_cholesky(self.precision_cholesky)

    @cached_property
    def scale_matrix(self) -> NDArray:
        """:math:`P^{-1}` (cached)."""
        inverse = cho_solve((self.precision_cholesky, True), np.eye(self._d))
        return 0.5 * (inverse + inverse.T)

    def _set_from_classical(self, *, dof, mean, precision) -> None:
        dof = float(dof)
        mean = np.asarray(mean, dtype=float).flatten()
        precision = np.atleast_2d(np.asarray(precision, dtype=float))
        if not dof > 0 or not np.isfinite(dof):
            raise ValueError(f"Degrees of freedom must be positive, got {dof}")
        d = len(mean)
        if d == 0:
            raise ValueError("Mean must have at least one dimension")
        if precision.shape != (d, d):
            raise ValueError(f"precision shape {precision.shape} doesn't match mean dimension {d}")
        if not np.all(np.isfinite(mean)):
            raise ValueError("Mean must be finite")
        precision = symmetrize(precision, name="Precision matrix")
        L = checked_cholesky(precision, name="Precision matrix")

        self._d = d
        self._dof = dof
        self._mean = mean.copy()
        self._precision = precision
        self._fitted = True
        self._invalidate_cache()
        self.__dict__['precision_cholesky'] = L

    def _compute_classical_params(self) -> MultivariateStudentTParams:
        return MultivariateStudentTParams(
            dof=self._dof, mean=self._mean.copy(), precision=self._precision.copy()
        )

    def _compute_parameter_vector(self) -> NDArray:
        return np.concatenate([[self._dof], self._mean, self._precision.ravel()])

    def _set_from_parameter_vector(self, parameters: NDArray) -> None:
        n = len(parameters) - 1
        d = int(round((-1 + np.sqrt(1 + 4 * max(n, 0))) / 2))
        if d < 1 or d * (d + 1) != n:
            raise ValueError(
                f"MultivariateStudentT parameter vector must have length 1 + d + d^2, "
                f"got {len(parameters)}"
            )
        self._set_from_classical(
            dof=parameters[0], mean=parameters[1:d + 1],
            precision=parameters[d + 1:].reshape(d, d),
        )

    def logpdf(self, x: ArrayLike):
        self._check_fitted()
        x = np.asarray(x, dtype=float)
        single = x.ndim <= 1 and x.size == self._d
        X = np.atleast_2d(x)
        if self._d == 1 and not single:
            X = x.reshape(-1, 1)
        if X.shape[-1] != self._d:
            raise ValueError(f"Expected {self._d}-dimensional input, got {X.shape[-1]}")
        diff = X - self._mean
        z2 = np.einsum('ij,jk,ik->i', diff, self._precision, diff)
        d, v = self._d, self._dof
        half = 0.5 * (d + v)
        result = (log_gamma(half) - log_gamma(0.5 * v) + 0.5 * self.log_det_precision
                  - 0.5 * d * np.log(np.pi * v) - half * np.log1p(z2 / v))
        if single:
            return float(result[0])
        return result

    def rvs(self, size=None, random_state=None) -> NDArray:
        """
        Generate random samples, shape ``(size, d)`` or ``(d,)`` for ``size=None``.
        """
        self._check_fitted()
        rng = self._get_rng(random_state)
        gaussian = MultivariateNormal.from_classical_params(
            mean=np.zeros(self._d), cov=self.scale_matrix
        )
        z = gaussian.rvs(size=size, random_state=rng)
        chi2 = 2.0 * sample_standard_gamma(0.5 * self._dof, size, rng)
        return z * np.sqrt(self._dof / np.asarray(chi2))[..., None] + self._mean

    def mean(self) -> NDArray:
        self._check_fitted()
        return self._mean.copy()

    def cov(self) -> NDArray:
        """
        Covariance :math:`\\frac{\\nu}{\\nu - 2} P^{-1}`.

        Raises
        ------
        ValueError
            If :math:`\\nu \\leq 2`.
        """
        self._check_fitted()
        if self._dof <= 2.0:
            raise ValueError(
                f"Covariance is undefined for degrees of freedom <= 2, got {self._dof}"
            )
        return self._dof / (self._dof - 2.0) * self.scale_matrix

    def var(self) -> NDArray:
        """Diagonal of :meth:`cov`."""
        return np.diag(self.cov()).copy()

    def fit(self, X: ArrayLike, y: Optional[ArrayLike] = None,
            sample_weight: Optional[ArrayLike] = None, *,
            dof: Optional[float] = None) -> 'MultivariateStudentT':
        """
        Moment fit with fixed degrees of freedom.

        The location is the sample mean and the precision is chosen so that
        :meth:`cov` equals the sample covariance:

        .. math::
            \\hat P = \\frac{\\nu}{\\nu - 2}\\hat\\Sigma^{-1}

        Parameters
        ----------
        X : array_like
            Data, shape ``(n_samples, d)``.
        y : array_like, optional
            Ignored.
        sample_weight : array_like, optional
            Per-sample weights.
        dof : float, optional
            Degrees of freedom, greater than 2. Defaults to the current value,
            or ``DEFAULT_DOF`` for an unfitted instance.

        Returns
        -------
        self : MultivariateStudentT
        """
        if dof is None:
            dof = self._dof if self._dof is not None else DEFAULT_DOF
        if dof <= 2.0:
            raise ValueError(f"Moment fit requires degrees of freedom > 2, got {dof}")
        X = np.asarray(X, dtype=float)
        if X.ndim == 1:
            X = X.reshape(-1, 1)
        n = X.shape[0]
        w = None if sample_weight is None else normalized_weights(sample_weight, n)
        gaussian = MultivariateNormal().fit(X, sample_weight=w)
        precision = dof / (dof - 2.0) * gaussian.precision
        self._set_from_classical(dof=dof, mean=gaussian.mean(), precision=precision)
        return self

    def __repr__(self) -> str:
        if not self._fitted:
            return "MultivariateStudentT(not fitted)"
        return f"MultivariateStudentT(dof={self._dof:.4f}, d={self._d})"
