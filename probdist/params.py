"""
Frozen dataclass parameter containers for all distributions.

Each distribution's classical parameters are represented as a frozen dataclass
with ``slots=True``. This provides:

- **IDE autocompletion**: ``params.mean`` instead of ``params['mean']``
- **Immutability**: Prevents accidental mutation of reported parameters
- **Dict conversion**: ``dataclasses.asdict(params)`` when needed

Examples
--------
>>> from probdist.params import GammaParams
>>> p = GammaParams(shape=2.0, scale=1.5)
>>> p.shape
2.0
>>> p['scale']
1.5
>>> p.shape = 3.0  # Raises FrozenInstanceError

Notes
-----
The ``frozen=True`` flag prevents attribute reassignment, but numpy arrays
are internally mutable (``params.mean[0] = 999`` still works at the Python
level). Distributions hand out copies, so in-place edits never reach the
distribution that produced them.
"""

from dataclasses import dataclass, fields
import numpy as np


class _ParamsBase:
    """Mixin providing dict-style access on frozen dataclass params.

    Allows both ``params.mean`` and ``params['mean']`` access styles,
    plus ``items()``, ``keys()``, ``values()`` for iteration.
    """

    __slots__ = ()

    def __getitem__(self, key: str):
        try:
            return getattr(self, key)
        except AttributeError:
            raise KeyError(key)

    def __contains__(self, key: str) -> bool:
        return hasattr(self, key)

    def keys(self):
        """Yield field names."""
        return (f.name for f in fields(self))

    def values(self):
        """Yield field values."""
        return (getattr(self, f.name) for f in fields(self))

    def items(self):
        """Yield ``(name, value)`` pairs."""
        return ((f.name, getattr(self, f.name)) for f in fields(self))


# ============================================================================
# Univariate distribution parameters
# ============================================================================

@dataclass(frozen=True, slots=True)
class GaussianParams(_ParamsBase):
    """
    Classical parameters for the univariate Gaussian distribution.

    Attributes
    ----------
    mean : float
        Location :math:`\\mu`.
    variance : float
        Variance :math:`\\sigma^2 > 0`.
    """
    mean: float
    variance: float


@dataclass(frozen=True, slots=True)
class GammaParams(_ParamsBase):
    """
    Classical parameters for the Gamma distribution.

    Attributes
    ----------
    shape : float
        Shape parameter :math:`k > 0`.
    scale : float
        Scale parameter :math:`\\theta > 0` (the rate is :math:`1/\\theta`).
    """
    shape: float
    scale: float


@dataclass(frozen=True, slots=True)
class ChiSquareParams(_ParamsBase):
    """
    Classical parameters for the Chi-square distribution.

    Attributes
    ----------
    dof : float
        Degrees of freedom :math:`\\nu > 0`.
    """
    dof: float


@dataclass(frozen=True, slots=True)
class BetaParams(_ParamsBase):
    """
    Classical parameters for the Beta distribution.

    Attributes
    ----------
    alpha : float
        First shape parameter :math:`\\alpha > 0`.
    beta : float
        Second shape parameter :math:`\\beta > 0`.
    """
    alpha: float
    beta: float


@dataclass(frozen=True, slots=True)
class PoissonParams(_ParamsBase):
    """
    Classical parameters for the Poisson distribution.

    Attributes
    ----------
    rate : float
        Expected count :math:`\\lambda > 0`.
    """
    rate: float


@dataclass(frozen=True, slots=True)
class StudentTParams(_ParamsBase):
    """
    Classical parameters for the univariate Student-t distribution.

    Attributes
    ----------
    dof : float
        Degrees of freedom :math:`\\nu > 0`.
    mean : float
        Location :math:`\\mu`.
    precision : float
        Inverse squared scale :math:`\\lambda > 0`.
    """
    dof: float
    mean: float
    precision: float


@dataclass(frozen=True, slots=True)
class CauchyParams(_ParamsBase):
    """
    Classical parameters for the Cauchy distribution.

    Attributes
    ----------
    location : float
        Median :math:`x_0`.
    scale : float
        Half width at half maximum :math:`\\gamma > 0`.
    """
    location: float
    scale: float


@dataclass(frozen=True, slots=True)
class LogNormalParams(_ParamsBase):
    """
    Classical parameters for the log-normal distribution.

    Attributes
    ----------
    log_mean : float
        Mean of :math:`\\log X`.
    log_variance : float
        Variance of :math:`\\log X`, strictly positive.
    """
    log_mean: float
    log_variance: float


@dataclass(frozen=True, slots=True)
class ParetoParams(_ParamsBase):
    """
    Classical parameters for the (shifted) Pareto distribution.

    Attributes
    ----------
    shape : float
        Tail index :math:`\\alpha > 0`.
    scale : float
        Minimum of the unshifted variable :math:`x_m > 0`.
    shift : float
        Amount subtracted from the unshifted variable.
    """
    shape: float
    scale: float
    shift: float


@dataclass(frozen=True, slots=True)
class InverseGammaParams(_ParamsBase):
    """
    Classical parameters for the Inverse Gamma distribution.

    Attributes
    ----------
    shape : float
        Shape parameter :math:`\\alpha > 0`.
    scale : float
        Scale parameter :math:`\\beta > 0`.
    """
    shape: float
    scale: float


@dataclass(frozen=True, slots=True)
class ExponentialParams(_ParamsBase):
    """
    Classical parameters for the Exponential distribution.

    Attributes
    ----------
    rate : float
        Rate parameter :math:`\\lambda > 0`.
    """
    rate: float


@dataclass(frozen=True, slots=True)
class LaplaceParams(_ParamsBase):
    """
    Classical parameters for the Laplace distribution.

    Attributes
    ----------
    location : float
        Median :math:`\\mu`.
    scale : float
        Mean absolute deviation :math:`b > 0`.
    """
    location: float
    scale: float


@dataclass(frozen=True, slots=True)
class UniformParams(_ParamsBase):
    """
    Classical parameters for the continuous Uniform distribution.

    Attributes
    ----------
    low : float
        Lower bound of the support.
    high : float
        Upper bound of the support, strictly greater than ``low``.
    """
    low: float
    high: float


@dataclass(frozen=True, slots=True)
class StudentizedRangeParams(_ParamsBase):
    """
    Classical parameters for the Studentized Range distribution.

    Attributes
    ----------
    treatment_count : int
        Number of groups being compared, at least 2.
    dof : float
        Degrees of freedom of the variance estimate.
    """
    treatment_count: int
    dof: float


@dataclass(frozen=True, slots=True)
class LogisticParams(_ParamsBase):
    """
    Classical parameters for the Logistic distribution.

    Attributes
    ----------
    location : float
        Location (mean and median).
    scale : float
        Scale parameter, strictly positive.
    """
    location: float
    scale: float


@dataclass(frozen=True, slots=True)
class BinomialParams(_ParamsBase):
    """
    Classical parameters for the Binomial distribution.

    Attributes
    ----------
    n_trials : int
        Number of trials, at least 1.
    p : float
        Success probability in :math:`[0, 1]`.
    """
    n_trials: int
    p: float


@dataclass(frozen=True, slots=True)
class NegativeBinomialParams(_ParamsBase):
    """
    Classical parameters for the Negative Binomial distribution.

    Attributes
    ----------
    r : float
        Number of failures until the experiment stops, strictly positive.
    p : float
        Success probability of each trial in :math:`[0, 1)`.
    """
    r: float
    p: float


@dataclass(frozen=True, slots=True)
class BetaBinomialParams(_ParamsBase):
    """
    Classical parameters for the Beta-Binomial distribution.

    Attributes
    ----------
    n_trials : int
        Number of trials, at least 1.
    alpha : float
        First shape of the Beta prior on the success probability.
    beta : float
        Second shape of the Beta prior on the success probability.
    """
    n_trials: int
    alpha: float
    beta: float


@dataclass(frozen=True, slots=True)
class UniformIntegerParams(_ParamsBase):
    """
    Classical parameters for the discrete uniform distribution.

    Attributes
    ----------
    low : int
        Smallest value of the support.
    high : int
        Largest value of the support, at least ``low``.
    """
    low: int
    high: int


# ============================================================================
# Multivariate distribution parameters
# ============================================================================

@dataclass(frozen=True, slots=True)
class MultivariateNormalParams(_ParamsBase):
    """
    Classical parameters for the Multivariate Normal distribution.

    Attributes
    ----------
    mean : np.ndarray
        Mean vector, shape ``(d,)``.
    cov : np.ndarray
        Covariance matrix, shape ``(d, d)``.
    """
    mean: np.ndarray
    cov: np.ndarray


@dataclass(frozen=True, slots=True)
class MultivariateStudentTParams(_ParamsBase):
    """
    Classical parameters for the multivariate Student-t distribution.

    Attributes
    ----------
    dof : float
        Degrees of freedom :math:`\\nu > 0`.
    mean : np.ndarray
        Location vector, shape ``(d,)``.
    precision : np.ndarray
        Inverse scale matrix, shape ``(d, d)``.
    """
    dof: float
    mean: np.ndarray
    precision: np.ndarray


@dataclass(frozen=True, slots=True)
class DirichletParams(_ParamsBase):
    """
    Classical parameters for the Dirichlet distribution.

    Attributes
    ----------
    alpha : np.ndarray
        Concentration vector, shape ``(k,)`` with ``k >= 2`` and all entries
        strictly positive.
    """
    alpha: np.ndarray


@dataclass(frozen=True, slots=True)
class WishartParams(_ParamsBase):
    """
    Classical parameters for the Wishart distribution.

    Attributes
    ----------
    dof : int
        Degrees of freedom, greater than ``d - 1``.
    scale : np.ndarray
        Scale matrix, shape ``(d, d)``.
    """
    dof: int
    scale: np.ndarray


@dataclass(frozen=True, slots=True)
class InverseWishartParams(_ParamsBase):
    """
    Classical parameters for the Inverse Wishart distribution.

    Attributes
    ----------
    dof : int
        Degrees of freedom, greater than ``d``.
    inverse_scale : np.ndarray
        Inverse scale matrix :math:`\\Psi`, shape ``(d, d)``.
    """
    dof: int
    inverse_scale: np.ndarray


@dataclass(frozen=True, slots=True)
class MultinomialParams(_ParamsBase):
    """
    Classical parameters for the Multinomial distribution.

    Attributes
    ----------
    n_trials : int
        Number of trials, at least 1.
    weights : np.ndarray
        Unnormalized nonnegative category weights, shape ``(k,)`` with
        ``k >= 2``.
    """
    n_trials: int
    weights: np.ndarray


@dataclass(frozen=True, slots=True)
class CategoricalParams(_ParamsBase):
    """
    Classical parameters for the Categorical distribution.

    Attributes
    ----------
    weights : np.ndarray
        Unnormalized nonnegative category weights, shape ``(k,)`` with
        ``k >= 2``.
    """
    weights: np.ndarray


# ============================================================================
# Mixture parameters
# ============================================================================

@dataclass(frozen=True, slots=True)
class MixtureParams(_ParamsBase):
    """
    Classical parameters for a finite mixture.

    Attributes
    ----------
    priors : np.ndarray
        Unnormalized nonnegative component weights, shape ``(K,)``.
    components : tuple
        Classical parameters of each component.
    """
    priors: np.ndarray
    components: tuple


__all__ = [
    "GaussianParams",
    "GammaParams",
    "ChiSquareParams",
    "BetaParams",
    "PoissonParams",
    "StudentTParams",
    "CauchyParams",
    "LogNormalParams",
    "ParetoParams",
    "InverseGammaParams",
    "ExponentialParams",
    "LaplaceParams",
    "UniformParams",
    "StudentizedRangeParams",
    "LogisticParams",
    "BinomialParams",
    "NegativeBinomialParams",
    "BetaBinomialParams",
    "UniformIntegerParams",
    "MultivariateNormalParams",
    "MultivariateStudentTParams",
    "DirichletParams",
    "WishartParams",
    "InverseWishartParams",
    "MultinomialParams",
    "CategoricalParams",
    "MixtureParams",
]
