"""
Finite mixture distributions with EM estimators.

- :class:`ScalarMixture`: mixture of univariate distributions (soft EM)
- :class:`GaussianMixture`: mixture of multivariate Gaussians (soft EM or
  k-means based hard assignment)
"""

from .scalar_mixture import ScalarMixture
from .gaussian_mixture import GaussianMixture

__all__ = ['ScalarMixture', 'GaussianMixture']
