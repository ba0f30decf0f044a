"""
probdist: parametric probability distributions with estimators.

A catalog of univariate, multivariate and mixture distributions sharing a
scipy-like API (``pdf``, ``logpdf``, ``cdf``, ``ppf``, ``rvs``, ``mean``,
``var``) and sklearn-style estimation (``fit`` returns self).

Key features:
- Closed-form moments, densities and cumulative functions
- Native sampling (Marsaglia-Tsang Gamma, Cholesky Gaussian, ratio methods)
- Maximum likelihood and moment-matching estimators with sample weights
- Soft and hard EM for mixtures
- Cached derived quantities (Cholesky factors, log-determinants, normalizers)
- Frozen dataclass parameter containers (probdist.params)
"""

from probdist.params import (
    GaussianParams,
    GammaParams,
    ChiSquareParams,
    BetaParams,
    PoissonParams,
    StudentTParams,
    CauchyParams,
    LogNormalParams,
    ParetoParams,
    InverseGammaParams,
    ExponentialParams,
    LaplaceParams,
    UniformParams,
    StudentizedRangeParams,
    LogisticParams,
    BinomialParams,
    NegativeBinomialParams,
    BetaBinomialParams,
    UniformIntegerParams,
    MultivariateNormalParams,
    MultivariateStudentTParams,
    DirichletParams,
    WishartParams,
    InverseWishartParams,
    MultinomialParams,
    CategoricalParams,
    MixtureParams,
)

__all__ = [
    # Parameter dataclasses
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
