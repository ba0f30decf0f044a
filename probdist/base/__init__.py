"""Base classes shared by all distributions."""

from probdist.base.distribution import Distribution
from probdist.base.mixture import MixtureModel

__all__ = ['Distribution', 'MixtureModel']
