"""
Wishart and Inverse Wishart distributions over symmetric positive definite
matrices.

Wishart with :math:`n` degrees of freedom and scale :math:`V` (dimension
:math:`p`):

.. math::
    \\log p(X) = \\frac{n-p-1}{2}\\log|X| - \\frac{1}{2}\\text{tr}(V^{-1}X)
    - \\frac{np}{2}\\log 2 - \\frac{n}{2}\\log|V| - \\log\\Gamma_p\\left(\\frac{n}{2}\\right)

Inverse Wishart with :math:`m` degrees of freedom and inverse scale
:math:`\\Psi`:

.. math::
    \\log p(X) = \\frac{m}{2}\\log|\\Psi| - \\frac{m+p+1}{2}\\log|X|
    - \\frac{1}{2}\\text{tr}(\\Psi X^{-1})
    - \\frac{mp}{2}\\log 2 - \\log\\Gamma_p\\left(\\frac{m}{2}\\right)

A Wishart draw is a sum of :math:`n` outer products of Gaussian vectors; an
Inverse Wishart draw is the inverse of a Wishart draw with scale
:math:`\\Psi^{-1}`.
"""

from abc import abstractmethod
from functools import cached_property
from typing import Optional, Tuple

import numpy as np
from numpy.typing import ArrayLike, NDArray
from scipy.linalg import cho_solve

from probdist.base import Distribution
from probdist.params import WishartParams, InverseWishartParams
from probdist.utils.linalg import symmetrize, checked_cholesky, log_det_from_cholesky
from probdist.utils.special import log_multivariate_gamma
from probdist.utils.statistics import normalized_weights

_LOG_2 = np.log(2.0)


def _as_matrices(X: ArrayLike, p: int) -> Tuple[NDArray, bool]:
    X = np.asarray(X, dtype=float)
    if X.ndim < 2 or X.shape[-2:] != (p, p):
        raise ValueError(f"Expected ({p}, {p}) matrices, got shape {X.shape}")
    return X.reshape((-1, p, p)), X.ndim == 2


def _wishart_draws(L: NDArray, dof: int, n: int, rng: np.random.Generator) -> NDArray:
    """``n`` sums of ``dof`` outer products of ``N(0, LL^T)`` vectors."""
    p = L.shape[0]
    G = rng.standard_normal((n, dof, p)) @ L.T
    return np.einsum('nki,nkj->nij', G, G)


class _MatrixDistribution(Distribution):
    """Shared state of the Wishart family: integer dof and a SPD matrix."""

    _cached_attrs = Distribution._cached_attrs + ('matrix_cholesky', 'log_det_matrix')
    _matrix_name = 'scale'

    def __init__(self):
        super().__init__()
        self._dof: Optional[int] = None
        self._matrix: Optional[NDArray] = None

    @property
    def d(self) -> int:
        """Dimension :math:`p` of the matrices."""
        self._check_fitted()
        return self._matrix.shape[0]

    @cached_property
    def matrix_cholesky(self) -> NDArray:
        self._check_fitted()
        return checked_cholesky(self._matrix, name=self._matrix_name.capitalize())

    @cached_property
    def log_det_matrix(self) -> float:
        return log_det_from_cholesky(self.matrix_cholesky)

    @abstractmethod
    def _min_dof(self, p: int) -> int:
        """Smallest admissible degrees of freedom in dimension ``p``."""
        pass

    def _set_matrix(self, dof, matrix) -> None:
        matrix = symmetrize(np.atleast_2d(np.asarray(matrix, dtype=float)),
                            name=self._matrix_name.capitalize())
        if float(dof) != int(dof):
            raise ValueError(f"Degrees of freedom must be an integer, got {dof}")
        dof = int(dof)
        p = matrix.shape[0]
        if dof < self._min_dof(p):
            raise ValueError(
                f"Degrees of freedom must be at least {self._min_dof(p)} for "
                f"dimension {p}, got {dof}"
            )
        L = checked_cholesky(matrix, name=self._matrix_name.capitalize())
        self._dof = dof
        self._matrix = matrix
        self._fitted = True
        self._invalidate_cache()
        self.__dict__['matrix_cholesky'] = L

    def _compute_parameter_vector(self) -> NDArray:
        return np.concatenate([[self._dof], self._matrix.ravel()])

    def _set_from_parameter_vector(self, parameters: NDArray) -> None:
        p = int(round(np.sqrt(len(parameters) - 1))) if len(parameters) > 1 else 0
        if p < 1 or 1 + p * p != len(parameters):
            raise ValueError(
                f"{self.__class__.__name__} parameter vector must have length 1 + p^2, "
                f"got {len(parameters)}"
            )
        self._set_from_classical(**{
            'dof': int(round(parameters[0])),
            self._matrix_name: parameters[1:].reshape(p, p),
        })

    def _log_dets(self, X: NDArray) -> Tuple[NDArray, NDArray]:
        sign, log_det = np.linalg.slogdet(X)
        return sign > 0, np.where(sign > 0, log_det, 0.0)

    def __repr__(self) -> str:
        if not self._fitted:
            return f"{self.__class__.__name__}(not fitted)"
        return f"{self.__class__.__name__}(dof={self._dof}, d={self._matrix.shape[0]})"


class Wishart(_MatrixDistribution):
    """
    Wishart distribution.

    Examples
    --------
    >>> dist = Wishart.from_classical_params(dof=5, scale=np.eye(2))
    >>> dist.mean()
    array([[5., 0.],
           [0., 5.]])

    Notes
    -----
    Parameter vector order is ``[dof, vec(scale)]``.
    """

    _matrix_name = 'scale'

    def _min_dof(self, p: int) -> int:
        return p

    def _set_from_classical(self, *, dof, scale) -> None:
        self._set_matrix(dof, scale)

    def _compute_classical_params(self) -> WishartParams:
        return WishartParams(dof=self._dof, scale=self._matrix.copy())

    def logpdf(self, x: ArrayLike):
        """Log density, ``-inf`` for matrices that are not positive definite."""
        self._check_fitted()
        p = self._matrix.shape[0]
        X, single = _as_matrices(x, p)
        n = self._dof
        positive, log_det_x = self._log_dets(X)
        inverse_scale = cho_solve((self.matrix_cholesky, True), np.eye(p))
        trace = np.einsum('ij,nji->n', inverse_scale, X)
        result = (0.5 * (n - p - 1) * log_det_x - 0.5 * trace - 0.5 * n * p * _LOG_2
                  - 0.5 * n * self.log_det_matrix - log_multivariate_gamma(0.5 * n, p))
        result = np.where(positive, result, -np.inf)
        if single:
            return float(result[0])
        return result

    def rvs(self, size=None, random_state=None) -> NDArray:
        """Samples of shape ``(size, p, p)``, or ``(p, p)`` for ``size=None``."""
        self._check_fitted()
        rng = self._get_rng(random_state)
        n = 1 if size is None else int(size)
        draws = _wishart_draws(self.matrix_cholesky, self._dof, n, rng)
        if size is None:
            return draws[0]
        return draws

    def mean(self) -> NDArray:
        """:math:`nV`."""
        self._check_fitted()
        return self._dof * self._matrix

    def var(self) -> NDArray:
        """Elementwise variances :math:`n(V_{ij}^2 + V_{ii}V_{jj})`."""
        self._check_fitted()
        V = self._matrix
        diag = np.diag(V)
        return self._dof * (V ** 2 + np.outer(diag, diag))

    def fit(self, X: ArrayLike, y: Optional[ArrayLike] = None,
            sample_weight: Optional[ArrayLike] = None, *,
            dof: Optional[int] = None) -> 'Wishart':
        """
        Moment fit with fixed degrees of freedom: :math:`\\hat V = \\bar X / n`.

        ``dof`` defaults to the current value, or the dimension for an
        unfitted instance.
        """
        X = np.asarray(X, dtype=float)
        if X.ndim != 3 or X.shape[1] != X.shape[2]:
            raise ValueError(f"Wishart fit needs data of shape (n, p, p), got {X.shape}")
        w = normalized_weights(sample_weight, X.shape[0])
        mean = np.einsum('n,nij->ij', w, X)
        if dof is None:
            dof = self._dof if self._dof is not None else X.shape[1]
        self._set_from_classical(dof=dof, scale=mean / dof)
        return self


class InverseWishart(_MatrixDistribution):
    """
    Inverse Wishart distribution.

    Examples
    --------
    >>> dist = InverseWishart.from_classical_params(dof=5, inverse_scale=np.eye(2))
    >>> dist.mean()
    array([[0.5, 0. ],
           [0. , 0.5]])

    Notes
    -----
    Parameter vector order is ``[dof, vec(inverse_scale)]``.
    """

    _cached_attrs = _MatrixDistribution._cached_attrs + ('scale_cholesky',)
    _matrix_name = 'inverse_scale'

    def _min_dof(self, p: int) -> int:
        return p + 1

    def _set_from_classical(self, *, dof, inverse_scale) -> None:
        self._set_matrix(dof, inverse_scale)

    def _compute_classical_params(self) -> InverseWishartParams:
        return InverseWishartParams(dof=self._dof, inverse_scale=self._matrix.copy())

    @cached_property
    def scale_cholesky(self) -> NDArray:
        """Lower Cholesky factor of :math:`\\Psi^{-1}` (cached)."""
        p = self._matrix.shape[0]
        scale = cho_solve((self.matrix_cholesky, True), np.eye(p))
        return checked_cholesky(0.5 * (scale + scale.T), name="Scale")

    def logpdf(self, x: ArrayLike):
        """Log density, ``-inf`` for matrices that are not positive definite."""
        self._check_fitted()
        p = self._matrix.shape[0]
        X, single = _as_matrices(x, p)
        m = self._dof
        positive, log_det_x = self._log_dets(X)
        safe = np.where(positive[:, None, None], X, np.eye(p))
        trace = np.trace(self._matrix @ np.linalg.inv(safe), axis1=-2, axis2=-1)
        result = (0.5 * m * self.log_det_matrix - 0.5 * (m + p + 1) * log_det_x
                  - 0.5 * trace - 0.5 * m * p * _LOG_2
                  - log_multivariate_gamma(0.5 * m, p))
        result = np.where(positive, result, -np.inf)
        if single:
            return float(result[0])
        return result

    def rvs(self, size=None, random_state=None) -> NDArray:
        """Inverses of Wishart draws with scale :math:`\\Psi^{-1}`."""
        self._check_fitted()
        rng = self._get_rng(random_state)
        n = 1 if size is None else int(size)
        draws = np.linalg.inv(_wishart_draws(self.scale_cholesky, self._dof, n, rng))
        if size is None:
            return draws[0]
        return draws

    def mean(self) -> NDArray:
        """
        :math:`\\Psi / (m - p - 1)`.

        Raises
        ------
        ValueError
            If :math:`m \\leq p + 1`.
        """
        self._check_fitted()
        p = self._matrix.shape[0]
        denominator = self._dof - p - 1.0
        if denominator <= 0:
            raise ValueError(
                f"Mean is undefined for degrees of freedom <= p + 1, got dof={self._dof}, p={p}"
            )
        return self._matrix / denominator

    def fit(self, X: ArrayLike, y: Optional[ArrayLike] = None,
            sample_weight: Optional[ArrayLike] = None, *,
            dof: Optional[int] = None) -> 'InverseWishart':
        """
        Moment fit with fixed degrees of freedom:
        :math:`\\hat\\Psi = (m - p - 1)\\bar X`.

        ``dof`` defaults to the current value, or :math:`p + 2` for an
        unfitted instance.
        """
        X = np.asarray(X, dtype=float)
        if X.ndim != 3 or X.shape[1] != X.shape[2]:
            raise ValueError(f"InverseWishart fit needs data of shape (n, p, p), got {X.shape}")
        p = X.shape[1]
        w = normalized_weights(sample_weight, X.shape[0])
        mean = np.einsum('n,nij->ij', w, X)
        if dof is None:
            dof = self._dof if self._dof is not None else p + 2
        if dof <= p + 1:
            raise ValueError(f"Moment fit requires degrees of freedom > p + 1, got {dof}")
        self._set_from_classical(dof=dof, inverse_scale=(dof - p - 1.0) * mean)
        return self
