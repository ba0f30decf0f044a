"""Utility functions for probdist package."""

from .special import (
    log_gamma,
    log_factorial,
    log_beta,
    log_multinomial_beta,
    log_multivariate_gamma,
    lower_incomplete_gamma,
    regularized_incomplete_beta,
    erf,
    erfinv,
)
from .linalg import (
    SYMMETRY_TOLERANCE,
    symmetrize,
    checked_cholesky,
    robust_cholesky,
    log_det_from_cholesky,
)
from .statistics import (
    mean_and_variance,
    weighted_mean_and_variance,
    kurtosis,
    weighted_kurtosis,
    weighted_median,
    normalized_weights,
    ScalarSufficientStatistic,
    MultivariateSufficientStatistic,
)

__all__ = [
    'log_gamma', 'log_factorial', 'log_beta', 'log_multinomial_beta',
    'log_multivariate_gamma', 'lower_incomplete_gamma',
    'regularized_incomplete_beta', 'erf', 'erfinv',
    'SYMMETRY_TOLERANCE', 'symmetrize', 'checked_cholesky',
    'robust_cholesky', 'log_det_from_cholesky',
    'mean_and_variance', 'weighted_mean_and_variance',
    'kurtosis', 'weighted_kurtosis', 'weighted_median', 'normalized_weights',
    'ScalarSufficientStatistic', 'MultivariateSufficientStatistic',
]
