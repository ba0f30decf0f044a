"""Linear algebra utilities for probdist.

Provides numerically robust wrappers around the matrix operations used by
the multivariate distributions: covariance symmetrization, Cholesky
decomposition with automatic regularization, and Cholesky-based
log-determinants.
"""

import numpy as np
from numpy.typing import ArrayLike, NDArray
from scipy.linalg import cholesky, LinAlgError

# Largest absolute asymmetry tolerated (and averaged away) in a covariance.
SYMMETRY_TOLERANCE = 1e-5


def symmetrize(A: ArrayLike, *, tol: float = SYMMETRY_TOLERANCE,
               name: str = "Matrix") -> NDArray:
    """
    Return a symmetric copy of a nearly symmetric square matrix.

    Every off-diagonal pair :math:`(A_{ij}, A_{ji})` that differs by at
    most ``tol`` is replaced by its average. A larger difference is an
    invalid parameter, not a rounding artifact.

    Parameters
    ----------
    A : array_like, shape (d, d)
        Square matrix.
    tol : float, optional
        Absolute tolerance on :math:`|A_{ij} - A_{ji}|`. Default ``1e-5``.
    name : str, optional
        Name used in error messages.

    Returns
    -------
    S : ndarray, shape (d, d)
        :math:`(A + A^T)/2`.

    Raises
    ------
    ValueError
        If ``A`` is not square or is asymmetric beyond ``tol``.
    """
    A = np.array(A, dtype=float)
    if A.ndim != 2 or A.shape[0] != A.shape[1]:
        raise ValueError(f"{name} must be square, got shape {A.shape}")
    max_asym = np.max(np.abs(A - A.T)) if A.size else 0.0
    if max_asym > tol:
        raise ValueError(
            f"{name} must be symmetric, max asymmetry {max_asym:.3g} exceeds {tol:.0e}"
        )
    return 0.5 * (A + A.T)


def checked_cholesky(A: NDArray, *, name: str = "Matrix") -> NDArray:
    """
    Lower Cholesky factor of a user-supplied matrix.

    Unlike :func:`robust_cholesky`, no regularization is attempted: a matrix
    that is not positive definite is an invalid parameter.

    Raises
    ------
    ValueError
        If ``A`` is not positive definite.
    """
    try:
        return cholesky(A, lower=True)
    except LinAlgError:
        raise ValueError(f"{name} must be positive definite")


def robust_cholesky(A: NDArray, *, eps: float = 1e-8) -> NDArray:
    r"""
    Compute lower Cholesky factor with eigenvalue-based regularization.

    Attempts :math:`L L^T = A`. If :math:`A` is not positive definite,
    computes the minimum eigenvalue and adds
    :math:`(|\lambda_{\min}| + \varepsilon) I` to guarantee positive
    definiteness.

    Parameters
    ----------
    A : ndarray, shape (d, d)
        Matrix to decompose, approximately symmetric positive definite
        (e.g., a covariance from an M-step).
    eps : float, optional
        Small positive constant added beyond :math:`|\lambda_{\min}|`
        when regularizing. Default is ``1e-8``.

    Returns
    -------
    L : ndarray, shape (d, d)
        Lower Cholesky factor satisfying :math:`L L^T \approx A`.

    Raises
    ------
    LinAlgError
        If decomposition fails even after eigenvalue-based regularization.

    Notes
    -----
    Intended for internal estimation steps where slight regularization is
    acceptable. User-provided covariances go through
    :func:`checked_cholesky`.

    Examples
    --------
    >>> import numpy as np
    >>> from probdist.utils import robust_cholesky
    >>> A = np.array([[1.0, 0.5], [0.5, 1.0]])
    >>> L = robust_cholesky(A)
    >>> np.allclose(L @ L.T, A)
    True
    """
    try:
        return cholesky(A, lower=True)
    except LinAlgError:
        d = A.shape[0]
        min_eig = np.linalg.eigvalsh(A)[0]
        jitter = max(eps, abs(min_eig) + eps)
        return cholesky(A + jitter * np.eye(d), lower=True)


def log_det_from_cholesky(L: NDArray) -> float:
    """Log-determinant :math:`\\log|A| = 2 \\sum_i \\log L_{ii}` from a Cholesky factor."""
    return float(2.0 * np.sum(np.log(np.diag(L))))
