"""
Shifted Pareto distribution.

With tail index :math:`\\alpha`, scale :math:`x_m` and shift :math:`c`, the
variable :math:`X + c` is Pareto distributed with minimum :math:`x_m`:

.. math::
    F(x) = 1 - \\left(\\frac{x_m}{x + c}\\right)^{\\alpha}, \\quad x + c > x_m

.. math::
    \\log p(x) = \\log\\alpha + \\alpha\\log x_m - (\\alpha + 1)\\log(x + c)

The support is :math:`(x_m - c, \\infty)`.
"""

from typing import Optional, Tuple, Union

import numpy as np
from numpy.typing import ArrayLike, NDArray

from probdist.base import Distribution
from probdist.params import ParetoParams


class Pareto(Distribution):
    """
    Pareto distribution with shape, scale and shift.

    Examples
    --------
    >>> dist = Pareto.from_classical_params(shape=3.0, scale=1.0)
    >>> dist.support()
    (1.0, inf)
    >>> dist.mean()
    1.5

    Notes
    -----
    Samples are :math:`x_m U^{-1/\\alpha} - c`. Parameter vector order is
    ``[shape, scale, shift]``.
    """

    _param_names = ('shape', 'scale', 'shift')

    def __init__(self):
        super().__init__()
        self._shape: Optional[float] = None
        self._scale: Optional[float] = None
        self._shift: Optional[float] = None

    def _set_from_classical(self, *, shape, scale, shift=0.0) -> None:
        shape = float(shape)
        scale = float(scale)
        shift = float(shift)
        if not shape > 0 or not np.isfinite(shape):
            raise ValueError(f"Shape must be positive, got {shape}")
        if not scale > 0 or not np.isfinite(scale):
            raise ValueError(f"Scale must be positive, got {scale}")
        if not np.isfinite(shift):
            raise ValueError(f"Shift must be finite, got {shift}")
        self._shape = shape
        self._scale = scale
        self._shift = shift
        self._fitted = True
        self._invalidate_cache()

    def _compute_classical_params(self) -> ParetoParams:
        return ParetoParams(shape=self._shape, scale=self._scale, shift=self._shift)

    def logpdf(self, x: ArrayLike) -> Union[float, NDArray[np.floating]]:
        """Log density, ``-inf`` below the support."""
        self._check_fitted()
        x = np.asarray(x, dtype=float)
        shifted = x + self._shift
        inside = shifted >= self._scale
        safe = np.where(inside, shifted, self._scale)
        a = self._shape
        result = np.log(a) + a * np.log(self._scale) - (a + 1.0) * np.log(safe)
        result = np.where(inside, result, -np.inf)
        return self._wrap_output(x, result)

    def cdf(self, x: ArrayLike) -> Union[float, NDArray[np.floating]]:
        self._check_fitted()
        x = np.asarray(x, dtype=float)
        shifted = x + self._shift
        inside = shifted > self._scale
        safe = np.where(inside, shifted, self._scale)
        result = np.where(inside, 1.0 - (self._scale / safe) ** self._shape, 0.0)
        return self._wrap_output(x, result)

    def ppf(self, q: ArrayLike) -> Union[float, NDArray[np.floating]]:
        """Quantile function; the lower support limit at 0 and ``inf`` at 1."""
        self._check_fitted()
        q = np.asarray(q, dtype=float)
        safe = np.where((q > 0) & (q < 1), q, 0.5)
        result = self._scale / (1.0 - safe) ** (1.0 / self._shape) - self._shift
        lower = self._scale - self._shift
        result = np.where(q <= 0.0, lower, np.where(q >= 1.0, np.inf, result))
        return self._wrap_output(q, result)

    def support(self) -> Tuple[float, float]:
        self._check_fitted()
        return (self._scale - self._shift, np.inf)

    def rvs(self, size=None, random_state=None) -> Union[float, NDArray]:
        self._check_fitted()
        rng = self._get_rng(random_state)
        # 1 - U lies in (0, 1]
        u = 1.0 - rng.random(size)
        samples = self._scale / u ** (1.0 / self._shape) - self._shift
        if size is None:
            return float(samples)
        return samples

    def mean(self) -> float:
        """
        :math:`\\frac{\\alpha x_m}{\\alpha - 1} - c`.

        Raises
        ------
        ValueError
            If :math:`\\alpha \\leq 1`.
        """
        self._check_fitted()
        if self._shape <= 1.0:
            raise ValueError(f"Mean is undefined for shape <= 1, got {self._shape}")
        return self._shape * self._scale / (self._shape - 1.0) - self._shift

    def var(self) -> float:
        """
        :math:`\\frac{x_m^2\\alpha}{(\\alpha - 1)^2(\\alpha - 2)}`.

        Raises
        ------
        ValueError
            If :math:`\\alpha \\leq 2`.
        """
        self._check_fitted()
        a = self._shape
        if a <= 2.0:
            raise ValueError(f"Variance is undefined for shape <= 2, got {a}")
        return self._scale ** 2 * a / ((a - 1.0) ** 2 * (a - 2.0))

    def fit(self, X: ArrayLike, y: Optional[ArrayLike] = None,
            sample_weight: Optional[ArrayLike] = None, *,
            shift: float = 0.0) -> 'Pareto':
        """
        Maximum likelihood estimate for a known shift.

        .. math::
            \\hat x_m = \\min_i (x_i + c), \\qquad
            \\hat\\alpha = \\frac{\\sum_i w_i}{\\sum_i w_i \\log((x_i + c)/\\hat x_m)}

        Parameters
        ----------
        X : array_like
            Data.
        y : array_like, optional
            Ignored.
        sample_weight : array_like, optional
            Per-sample weights; points with zero weight are ignored.
        shift : float, optional
            Known shift :math:`c`. Default 0.

        Returns
        -------
        self : Pareto
        """
        X = np.asarray(X, dtype=float).ravel() + shift
        if sample_weight is None:
            w = np.ones_like(X)
        else:
            w = np.abs(np.asarray(sample_weight, dtype=float).ravel())
            if w.shape != X.shape:
                raise ValueError(
                    f"sample_weight shape {w.shape} doesn't match data shape {X.shape}"
                )
        active = w > 0
        if not np.any(active):
            raise ValueError("insufficient data: at least one weighted sample is required")
        X, w = X[active], w[active]
        scale = float(np.min(X))
        if scale <= 0:
            raise ValueError(f"Pareto fit requires shifted data > 0, got minimum {scale}")
        total_log = np.sum(w * np.log(X / scale))
        if total_log <= 0:
            raise ValueError("insufficient data: all samples equal the minimum")
        self._set_from_classical(shape=np.sum(w) / total_log, scale=scale, shift=shift)
        return self
