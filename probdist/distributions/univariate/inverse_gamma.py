"""
Inverse Gamma distribution.

The Inverse Gamma distribution has PDF:

.. math::
    p(x|\\alpha, \\beta) = \\frac{\\beta^\\alpha}{\\Gamma(\\alpha)}
    x^{-\\alpha-1} e^{-\\beta/x}

for :math:`x > 0`, where :math:`\\alpha > 0` is the shape parameter
and :math:`\\beta > 0` is the scale parameter.

If :math:`Y \\sim \\text{Gamma}(\\alpha, \\text{scale}=1/\\beta)`, then
:math:`1/Y \\sim \\text{InvGamma}(\\alpha, \\beta)`; the CDF and sampling
both go through that Gamma variable.
"""

from functools import cached_property
from typing import Optional, Tuple, Union

import numpy as np
from numpy.typing import ArrayLike, NDArray

from probdist.base import Distribution
from probdist.params import InverseGammaParams
from probdist.distributions.univariate.gamma import Gamma
from probdist.utils.special import log_gamma
from probdist.utils.statistics import mean_and_variance, weighted_mean_and_variance


class InverseGamma(Distribution):
    """
    Inverse Gamma distribution with shape :math:`\\alpha` and scale
    :math:`\\beta`.

    Examples
    --------
    >>> dist = InverseGamma.from_classical_params(shape=3.0, scale=1.5)
    >>> dist.mean()
    0.75

    See Also
    --------
    Gamma : Distribution of :math:`1/X`

    Notes
    -----
    The mean exists only for :math:`\\alpha > 1`:

    .. math::
        E[X] = \\frac{\\beta}{\\alpha - 1}

    The variance exists only for :math:`\\alpha > 2`:

    .. math::
        \\text{Var}[X] = \\frac{\\beta^2}{(\\alpha-1)^2(\\alpha-2)}

    Parameter vector order is ``[shape, scale]``.
    """

    _cached_attrs = Distribution._cached_attrs + ('reciprocal',)
    _param_names = ('shape', 'scale')

    def __init__(self):
        super().__init__()
        self._shape: Optional[float] = None
        self._scale: Optional[float] = None

    def _set_from_classical(self, *, shape, scale) -> None:
        shape = float(shape)
        scale = float(scale)
        if not shape > 0 or not np.isfinite(shape):
            raise ValueError(f"Shape must be positive, got {shape}")
        if not scale > 0 or not np.isfinite(scale):
            raise ValueError(f"Scale must be positive, got {scale}")
        self._shape = shape
        self._scale = scale
        self._fitted = True
        self._invalidate_cache()

    def _compute_classical_params(self) -> InverseGammaParams:
        return InverseGammaParams(shape=self._shape, scale=self._scale)

    @cached_property
    def reciprocal(self) -> Gamma:
        """Distribution of :math:`1/X`, ``Gamma(shape, scale=1/scale)`` (cached)."""
        self._check_fitted()
        return Gamma.from_classical_params(shape=self._shape, scale=1.0 / self._scale)

    def logpdf(self, x: ArrayLike) -> Union[float, NDArray[np.floating]]:
        """
        Log density, ``-inf`` for :math:`x \\leq 0`.

        .. math::
            \\log p(x) = \\alpha\\log\\beta - \\log\\Gamma(\\alpha)
            - (\\alpha+1)\\log x - \\beta/x
        """
        self._check_fitted()
        x = np.asarray(x, dtype=float)
        positive = x > 0
        safe_x = np.where(positive, x, 1.0)
        a, b = self._shape, self._scale
        result = a * np.log(b) - log_gamma(a) - (a + 1.0) * np.log(safe_x) - b / safe_x
        result = np.where(positive, result, -np.inf)
        return self._wrap_output(x, result)

    def cdf(self, x: ArrayLike) -> Union[float, NDArray[np.floating]]:
        """:math:`1 - F_{\\text{Gamma}}(1/x)`, 0 for :math:`x \\leq 0`."""
        self._check_fitted()
        x = np.asarray(x, dtype=float)
        positive = x > 0
        safe_x = np.where(positive, x, 1.0)
        result = np.where(positive, 1.0 - np.asarray(self.reciprocal.cdf(1.0 / safe_x)), 0.0)
        return self._wrap_output(x, result)

    def support(self) -> Tuple[float, float]:
        return (0.0, np.inf)

    def rvs(self, size=None, random_state=None) -> Union[float, NDArray]:
        """Samples drawn as reciprocals of Gamma variates."""
        self._check_fitted()
        return 1.0 / self.reciprocal.rvs(size=size, random_state=random_state)

    def mean(self) -> float:
        """
        Raises
        ------
        ValueError
            If :math:`\\alpha \\leq 1`.
        """
        self._check_fitted()
        if self._shape <= 1.0:
            raise ValueError(f"Mean is undefined for shape <= 1, got {self._shape}")
        return self._scale / (self._shape - 1.0)

    def var(self) -> float:
        """
        Raises
        ------
        ValueError
            If :math:`\\alpha \\leq 2`.
        """
        self._check_fitted()
        a = self._shape
        if a <= 2.0:
            raise ValueError(f"Variance is undefined for shape <= 2, got {a}")
        return self._scale ** 2 / ((a - 1.0) ** 2 * (a - 2.0))

    def fit(self, X: ArrayLike, y: Optional[ArrayLike] = None,
            sample_weight: Optional[ArrayLike] = None, **kwargs) -> 'InverseGamma':
        """
        Method-of-moments estimate.

        .. math::
            \\hat\\alpha = \\frac{\\bar x^2}{s^2} + 2, \\qquad
            \\hat\\beta = \\bar x(\\hat\\alpha - 1)
        """
        X = np.asarray(X, dtype=float).ravel()
        if sample_weight is None:
            mean, variance = mean_and_variance(X)
        else:
            mean, variance = weighted_mean_and_variance(X, sample_weight)
        if variance <= 0 or mean <= 0:
            raise ValueError(
                f"InverseGamma moment fit needs positive mean and variance, got "
                f"mean={mean}, variance={variance}"
            )
        shape = mean * mean / variance + 2.0
        self._set_from_classical(shape=shape, scale=mean * (shape - 1.0))
        return self
