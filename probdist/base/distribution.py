"""
Base class for probability distributions with scipy-like API.

This module provides an abstract base class that defines the standard interface
for probability distributions, similar to ``scipy.stats``, together with the
parameter management shared by every distribution in the package.

The API includes:

- **Density functions**: :meth:`pdf`, :meth:`logpdf`
- **Cumulative distribution**: :meth:`cdf`, :meth:`sf` (survival function)
- **Quantile functions**: :meth:`ppf`, :meth:`isf` (inverse survival)
- **Random sampling**: :meth:`rvs`
- **Fitting**: :meth:`fit` (returns self for method chaining)
- **Moments**: :meth:`mean`, :meth:`var`, :meth:`std`, :meth:`stats`
- **Parameters**: :meth:`from_classical_params`, :attr:`classical_params`,
  :meth:`get_parameter_vector`, :meth:`set_parameter_vector`

Derived quantities (inverses, log-determinants, normalizing constants) are
``functools.cached_property`` entries listed in ``_cached_attrs``. Every
parameter change goes through a ``_set_from_*`` method that validates the
new values, sets ``_fitted`` and calls :meth:`Distribution._invalidate_cache`,
so a cached value never outlives the parameters it was computed from.
"""

import copy
import dataclasses
from abc import ABC, abstractmethod
from functools import cached_property
from typing import Optional, Tuple, Union

import numpy as np
from numpy.typing import ArrayLike, NDArray


class Distribution(ABC):
    """
    Abstract base class for probability distributions.

    Subclasses implement the state management contract:

    - ``_set_from_classical(**kwargs)``: validate and store classical
      parameters, set ``self._fitted = True`` and call
      ``self._invalidate_cache()``.
    - ``_compute_classical_params()``: build the frozen parameter dataclass.
    - ``logpdf``, ``rvs`` and ``fit``.

    Parameter vectors default to the classical parameters listed in
    ``_param_names``, in that order. Distributions with array-valued
    parameters override ``_compute_parameter_vector`` and
    ``_set_from_parameter_vector``.

    Attributes
    ----------
    _fitted : bool
        Whether parameters have been set.
    _cached_attrs : tuple of str
        Names of ``cached_property`` attributes cleared on parameter change.
    _param_names : tuple of str
        Classical parameter names in parameter-vector order.
    """

    _cached_attrs: Tuple[str, ...] = ('classical_params',)
    _param_names: Tuple[str, ...] = ()

    def __init__(self):
        self._fitted = False

    # ============================================================
    # Cache infrastructure
    # ============================================================

    def _check_fitted(self) -> None:
        """Raise if parameters have not been set."""
        if not self._fitted:
            raise ValueError(
                f"{self.__class__.__name__} parameters not set. "
                "Use from_classical_params() or fit()."
            )

    def _invalidate_cache(self) -> None:
        """Drop every cached derived quantity listed in ``_cached_attrs``."""
        for attr in self._cached_attrs:
            self.__dict__.pop(attr, None)

    # ============================================================
    # Factory methods and setters
    # ============================================================

    @classmethod
    def from_classical_params(cls, **kwargs) -> 'Distribution':
        """
        Create distribution from classical parameters.

        Examples
        --------
        >>> Gamma.from_classical_params(shape=2.0, scale=1.0)
        Gamma(shape=2.0000, scale=1.0000)
        """
        instance = cls()
        instance.set_classical_params(**kwargs)
        return instance

    @classmethod
    def from_parameter_vector(cls, parameters: ArrayLike) -> 'Distribution':
        """Create distribution from a flat parameter vector."""
        instance = cls()
        instance.set_parameter_vector(parameters)
        return instance

    def set_classical_params(self, **kwargs) -> 'Distribution':
        """
        Set parameters from classical parametrization.

        Returns
        -------
        self : Distribution
            Returns self for method chaining.
        """
        if not kwargs:
            return self
        self._set_from_classical(**kwargs)
        return self

    def set_parameter_vector(self, parameters: ArrayLike) -> 'Distribution':
        """
        Set parameters from a flat numeric vector.

        The field order is fixed per distribution (see ``_param_names``)
        and round-trips exactly with :meth:`get_parameter_vector`.

        Raises
        ------
        ValueError
            If the vector has the wrong length or invalid values.
        """
        parameters = np.asarray(parameters, dtype=float).ravel()
        self._set_from_parameter_vector(parameters)
        return self

    def get_parameter_vector(self) -> NDArray:
        """Flat numeric vector of the current parameters."""
        self._check_fitted()
        return np.asarray(self._compute_parameter_vector(), dtype=float).copy()

    # ============================================================
    # Internal state management (subclass contract)
    # ============================================================

    @abstractmethod
    def _set_from_classical(self, **kwargs) -> None:
        """Validate and store classical parameters."""
        pass

    @abstractmethod
    def _compute_classical_params(self):
        """Build the frozen classical parameter dataclass."""
        pass

    def _compute_parameter_vector(self) -> NDArray:
        params = self.classical_params
        return np.array([params[name] for name in self._param_names], dtype=float)

    def _set_from_parameter_vector(self, parameters: NDArray) -> None:
        if len(parameters) != len(self._param_names):
            raise ValueError(
                f"{self.__class__.__name__} parameter vector must have length "
                f"{len(self._param_names)}, got {len(parameters)}"
            )
        self._set_from_classical(**dict(zip(self._param_names, parameters)))

    @cached_property
    def classical_params(self):
        """
        Classical parameters as a frozen dataclass (cached).

        Returns
        -------
        params : dataclass
            Supports both ``params.name`` and ``params['name']``.
        """
        self._check_fitted()
        return self._compute_classical_params()

    # ============================================================
    # Helpers
    # ============================================================

    @staticmethod
    def _get_rng(random_state: Optional[Union[int, np.random.Generator]]
                 ) -> np.random.Generator:
        """Set up the random number generator."""
        if random_state is None:
            return np.random.default_rng()
        elif isinstance(random_state, (int, np.integer)):
            return np.random.default_rng(random_state)
        return random_state

    @staticmethod
    def _wrap_output(x: NDArray, result: NDArray) -> Union[float, NDArray]:
        """Return a Python float for scalar input, the array otherwise."""
        if np.ndim(x) == 0:
            return float(result)
        return result

    # ============================================================
    # Density and distribution functions
    # ============================================================

    @abstractmethod
    def logpdf(self, x: ArrayLike) -> Union[float, NDArray[np.floating]]:
        """
        Log of the probability density (or mass) function.

        Parameters
        ----------
        x : array_like
            Points at which to evaluate the log PDF.

        Returns
        -------
        logpdf : float or ndarray
            Log probability density at each point, ``-inf`` outside the
            support.
        """
        pass

    def pdf(self, x: ArrayLike) -> Union[float, NDArray[np.floating]]:
        """
        Probability density function, ``exp(logpdf(x))``.

        Parameters
        ----------
        x : array_like
            Points at which to evaluate the PDF.

        Returns
        -------
        pdf : float or ndarray
            Probability density at each point.
        """
        return np.exp(self.logpdf(x))

    def cdf(self, x: ArrayLike) -> Union[float, NDArray[np.floating]]:
        """
        Cumulative distribution function.

        Parameters
        ----------
        x : array_like
            Points at which to evaluate the CDF.

        Returns
        -------
        cdf : float or ndarray
            Cumulative probability at each point.
        """
        raise NotImplementedError("CDF not implemented for this distribution")

    def logcdf(self, x: ArrayLike) -> Union[float, NDArray[np.floating]]:
        """Log of the cumulative distribution function."""
        with np.errstate(divide='ignore'):
            return np.log(self.cdf(x))

    def sf(self, x: ArrayLike) -> Union[float, NDArray[np.floating]]:
        """Survival function (1 - CDF)."""
        return 1.0 - self.cdf(x)

    def logsf(self, x: ArrayLike) -> Union[float, NDArray[np.floating]]:
        """Log of the survival function."""
        with np.errstate(divide='ignore'):
            return np.log(self.sf(x))

    def ppf(self, q: ArrayLike) -> Union[float, NDArray[np.floating]]:
        """
        Percent point function (inverse of CDF).

        Parameters
        ----------
        q : array_like
            Probabilities at which to evaluate the PPF.

        Returns
        -------
        ppf : float or ndarray
            Quantiles corresponding to the given probabilities.
        """
        raise NotImplementedError("PPF not implemented for this distribution")

    def isf(self, q: ArrayLike) -> Union[float, NDArray[np.floating]]:
        """Inverse survival function (inverse of SF)."""
        return self.ppf(1.0 - np.asarray(q, dtype=float))

    def support(self) -> Tuple[float, float]:
        """
        Lower and upper limits of the support.

        Returns
        -------
        support : tuple of float
            ``(min, max)``; infinite limits are ``-inf`` / ``inf``.
        """
        return (-np.inf, np.inf)

    @abstractmethod
    def rvs(self, size: Optional[Union[int, tuple]] = None,
            random_state: Optional[Union[int, np.random.Generator]] = None
            ) -> Union[float, NDArray]:
        """
        Random variate sampling.

        Parameters
        ----------
        size : int or tuple of ints, optional
            Shape of the output. If None, returns a single draw.
        random_state : int or numpy.random.Generator, optional
            Seed or generator. Draws are reproducible only when a seed or
            seeded generator is supplied.

        Returns
        -------
        rvs : float or ndarray
            Random variates.
        """
        pass

    @abstractmethod
    def fit(self, X: ArrayLike, y: Optional[ArrayLike] = None,
            sample_weight: Optional[ArrayLike] = None, **kwargs) -> 'Distribution':
        """
        Fit distribution parameters to data (sklearn-style).

        Parameters
        ----------
        X : array_like
            Data to fit the distribution to.
        y : array_like, optional
            Ignored (for sklearn API compatibility).
        sample_weight : array_like, optional
            Per-sample weights for the weighted estimator.

        Returns
        -------
        self : Distribution
            The fitted distribution instance (for method chaining).
        """
        pass

    # ============================================================
    # Moments
    # ============================================================

    def stats(self, moments: str = 'mv') -> Union[float, NDArray, tuple]:
        """
        Return moments of the distribution.

        Parameters
        ----------
        moments : str, optional
            Composed of letters ['mv'] defining which moments to compute:
            'm' = mean, 'v' = variance. Default is 'mv'.

        Returns
        -------
        stats : float, ndarray or tuple
            Requested moments.
        """
        results = []
        if 'm' in moments:
            results.append(self.mean())
        if 'v' in moments:
            results.append(self.var())

        if len(results) == 1:
            return results[0]
        return tuple(results)

    def mean(self) -> Union[float, NDArray]:
        """Mean of the distribution."""
        raise NotImplementedError("Mean not implemented for this distribution")

    def var(self) -> Union[float, NDArray]:
        """Variance of the distribution."""
        raise NotImplementedError("Variance not implemented for this distribution")

    def std(self) -> Union[float, NDArray]:
        """Standard deviation of the distribution."""
        return np.sqrt(self.var())

    def median(self) -> Union[float, NDArray]:
        """Median of the distribution."""
        return self.ppf(0.5)

    def interval(self, confidence: float) -> Tuple[float, float]:
        """
        Confidence interval with equal areas around the median.

        Parameters
        ----------
        confidence : float
            Probability mass of the interval, in (0, 1).

        Returns
        -------
        a, b : tuple of float
            Lower and upper bounds of the interval.
        """
        lower = self.ppf((1 - confidence) / 2)
        upper = self.ppf((1 + confidence) / 2)
        return lower, upper

    # ============================================================
    # Scoring and copying
    # ============================================================

    def score(self, X: ArrayLike, y: Optional[ArrayLike] = None) -> float:
        """
        Compute mean log-likelihood (sklearn-style scoring).

        Higher scores are better (sklearn convention).

        Parameters
        ----------
        X : array_like
            Data samples.
        y : array_like, optional
            Ignored (for sklearn API compatibility).

        Returns
        -------
        score : float
            Mean log-likelihood.
        """
        X = np.asarray(X)
        return float(np.mean(self.logpdf(X)))

    def copy(self) -> 'Distribution':
        """Independent deep copy, safe to mutate or use from another thread."""
        return copy.deepcopy(self)

    # ============================================================
    # String representation
    # ============================================================

    def __repr__(self) -> str:
        """String representation of the distribution."""
        if not self._fitted:
            return f"{self.__class__.__name__}(not fitted)"

        classical = self.classical_params
        param_str = ", ".join(
            f"{f.name}={getattr(classical, f.name):.4f}"
            if isinstance(getattr(classical, f.name), (int, float, np.number))
            else f"{f.name}=..."
            for f in dataclasses.fields(classical)
        )
        return f"{self.__class__.__name__}({param_str})"
