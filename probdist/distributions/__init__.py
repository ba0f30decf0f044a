"""
Distribution catalog.

- :mod:`probdist.distributions.univariate`: scalar distributions
- :mod:`probdist.distributions.multivariate`: vector and matrix distributions
- :mod:`probdist.distributions.mixtures`: finite mixtures with EM estimators
"""
