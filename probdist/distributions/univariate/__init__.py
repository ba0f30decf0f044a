"""Univariate distributions."""

from .gaussian import Gaussian, Normal
from .gamma import Gamma, sample_standard_gamma
from .chi_square import ChiSquare
from .beta import Beta
from .poisson import Poisson
from .student_t import StudentT
from .cauchy import Cauchy
from .log_normal import LogNormal
from .pareto import Pareto
from .inverse_gamma import InverseGamma
from .exponential import Exponential
from .laplace import Laplace
from .uniform import Uniform
from .studentized_range import StudentizedRange
from .logistic import Logistic
from .binomial import Binomial
from .negative_binomial import NegativeBinomial
from .beta_binomial import BetaBinomial
from .uniform_integer import UniformInteger

__all__ = ['Gaussian', 'Normal', 'Gamma', 'sample_standard_gamma', 'ChiSquare',
           'Beta', 'Poisson', 'StudentT', 'Cauchy', 'LogNormal', 'Pareto',
           'InverseGamma', 'Exponential', 'Laplace', 'Uniform', 'StudentizedRange',
           'Logistic', 'Binomial', 'NegativeBinomial', 'BetaBinomial', 'UniformInteger']
