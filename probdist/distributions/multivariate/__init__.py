"""Multivariate distributions."""

from .normal import MultivariateNormal, MVN
from .student_t import MultivariateStudentT
from .dirichlet import Dirichlet
from .wishart import Wishart, InverseWishart
from .multinomial import Multinomial, Categorical

__all__ = ['MultivariateNormal', 'MVN', 'MultivariateStudentT', 'Dirichlet',
           'Wishart', 'InverseWishart', 'Multinomial', 'Categorical']
