"""
Base class for finite mixture models.

A mixture holds an ordered list of component distributions and a parallel
array of nonnegative prior weights :math:`w_k`. The weights need not sum to
one; their total :math:`W` normalizes every prior-weighted quantity:

.. math::
    p(x) = \\frac{1}{W}\\sum_{k=1}^K w_k\\, p_k(x)

Densities are combined in log space with :func:`scipy.special.logsumexp`.
Responsibilities (posterior component probabilities) are the normalized
terms of that sum; a sample that every component assigns zero density gets
a uniform responsibility row and a ``RuntimeWarning``.

Subclasses provide the moments and the EM estimator in :meth:`fit`.
"""

import warnings
from typing import List, Optional, Sequence, Union

import numpy as np
from numpy.typing import ArrayLike, NDArray
from scipy.special import logsumexp

from probdist.base.distribution import Distribution
from probdist.params import MixtureParams


class MixtureModel(Distribution):
    """
    Abstract finite mixture of component distributions.

    Components are deep-copied on assignment, so a mixture never shares
    state with the distributions it was built from.

    Attributes
    ----------
    n_iter_ : int
        Number of EM iterations run by the last :meth:`fit`.
    converged_ : bool
        Whether the last :meth:`fit` met its tolerance before ``max_iter``.
    """

    def __init__(self):
        super().__init__()
        self._components: List[Distribution] = []
        self._priors: Optional[NDArray] = None
        self.n_iter_ = 0
        self.converged_ = False

    # ============================================================
    # Parameters
    # ============================================================

    @property
    def n_components(self) -> int:
        """Number of mixture components."""
        self._check_fitted()
        return len(self._components)

    @property
    def components(self) -> List[Distribution]:
        """The component distributions (owned by the mixture)."""
        self._check_fitted()
        return self._components

    @property
    def priors(self) -> NDArray:
        """Copy of the (unnormalized) prior weights."""
        self._check_fitted()
        return self._priors.copy()

    @property
    def prior_sum(self) -> float:
        """Normalizer :math:`W = \\sum_k w_k`."""
        self._check_fitted()
        return float(np.sum(self._priors))

    @property
    def weights(self) -> NDArray:
        """Prior weights normalized to sum to one."""
        self._check_fitted()
        return self._priors / np.sum(self._priors)

    def _set_from_classical(self, *, components: Sequence[Distribution],
                            priors: Optional[ArrayLike] = None) -> None:
        components = list(components)
        if len(components) == 0:
            raise ValueError("Mixture must have at least one component")
        for component in components:
            if not isinstance(component, Distribution):
                raise ValueError(
                    f"Components must be Distribution instances, got {type(component).__name__}"
                )
            component._check_fitted()
        if priors is None:
            priors = np.ones(len(components))
        priors = np.asarray(priors, dtype=float).flatten()
        if len(priors) != len(components):
            raise ValueError(
                f"Number of priors ({len(priors)}) doesn't match number of "
                f"components ({len(components)})"
            )
        if np.any(priors < 0) or not np.all(np.isfinite(priors)):
            raise ValueError(f"Priors must be nonnegative and finite, got {priors}")
        if np.sum(priors) <= 0:
            raise ValueError(f"Priors must have a positive sum, got {priors}")

        self._components = [component.copy() for component in components]
        self._priors = priors.copy()
        self._fitted = True
        self._invalidate_cache()

    def _compute_classical_params(self) -> MixtureParams:
        return MixtureParams(
            priors=self._priors.copy(),
            components=tuple(c.classical_params for c in self._components),
        )

    @property
    def classical_params(self) -> MixtureParams:
        """
        Priors and component parameters.

        Not cached: components are reachable through :attr:`components` and
        may be changed in place.
        """
        self._check_fitted()
        return self._compute_classical_params()

    def _compute_parameter_vector(self) -> NDArray:
        return np.concatenate(
            [self._priors] + [c.get_parameter_vector() for c in self._components]
        )

    def _set_from_parameter_vector(self, parameters: NDArray) -> None:
        # The component layout comes from the current components.
        self._check_fitted()
        sizes = [len(c.get_parameter_vector()) for c in self._components]
        K = len(self._components)
        expected = K + sum(sizes)
        if len(parameters) != expected:
            raise ValueError(
                f"{self.__class__.__name__} parameter vector must have length "
                f"{expected}, got {len(parameters)}"
            )
        components = [c.copy() for c in self._components]
        start = K
        for component, size in zip(components, sizes):
            component.set_parameter_vector(parameters[start:start + size])
            start += size
        self._set_from_classical(components=components, priors=parameters[:K])

    # ============================================================
    # Densities and responsibilities
    # ============================================================

    def _weighted_log_densities(self, x: ArrayLike):
        """
        :math:`\\log w_k + \\log p_k(x)` for every sample and component.

        Returns the ``(n_samples, K)`` array and whether ``x`` was a single
        observation.
        """
        self._check_fitted()
        columns = [np.asarray(c.logpdf(x), dtype=float) for c in self._components]
        single = columns[0].ndim == 0
        with np.errstate(divide='ignore'):
            log_priors = np.log(self._priors)
        log_densities = np.stack([np.atleast_1d(col) for col in columns], axis=-1)
        return log_densities + log_priors, single

    def logpdf(self, x: ArrayLike) -> Union[float, NDArray[np.floating]]:
        """
        Log density :math:`\\log\\sum_k w_k p_k(x) - \\log W`.
        """
        weighted, single = self._weighted_log_densities(x)
        result = logsumexp(weighted, axis=-1) - np.log(self.prior_sum)
        if single:
            return float(result[0])
        return result

    @staticmethod
    def _normalize_responsibilities(weighted: NDArray) -> NDArray:
        """
        Row-normalize prior-weighted log densities into responsibilities.

        A row whose densities are all zero becomes uniform.
        """
        n, K = weighted.shape
        totals = logsumexp(weighted, axis=1, keepdims=True)
        degenerate = ~np.isfinite(totals[:, 0])
        responsibilities = np.empty_like(weighted)
        ok = ~degenerate
        responsibilities[ok] = np.exp(weighted[ok] - totals[ok])
        if np.any(degenerate):
            warnings.warn(
                f"{int(np.sum(degenerate))} sample(s) have zero density under every "
                "component; using uniform responsibilities",
                RuntimeWarning,
            )
            responsibilities[degenerate] = 1.0 / K
        return responsibilities

    def predict_proba(self, X: ArrayLike) -> NDArray:
        """
        Posterior probability of each component for each sample.

        Parameters
        ----------
        X : array_like
            Samples.

        Returns
        -------
        responsibilities : ndarray
            Shape ``(n_samples, K)``, rows summing to one. A sample with zero
            density under every component gets a uniform row (with a
            ``RuntimeWarning``).
        """
        weighted, single = self._weighted_log_densities(X)
        responsibilities = self._normalize_responsibilities(weighted)
        if single:
            return responsibilities[0]
        return responsibilities

    def predict(self, X: ArrayLike) -> Union[int, NDArray]:
        """Index of the most likely component for each sample."""
        responsibilities = self.predict_proba(X)
        labels = np.argmax(responsibilities, axis=-1)
        if np.ndim(labels) == 0:
            return int(labels)
        return labels

    # ============================================================
    # Sampling
    # ============================================================

    def rvs(self, size=None, random_state=None):
        """
        Draw a component with probability :math:`w_k / W`, then sample it.

        Parameters
        ----------
        size : int or tuple of ints, optional
            Output shape, followed by the component event shape. If None,
            returns a single draw.
        random_state : int or numpy.random.Generator, optional
            Seed or generator.
        """
        self._check_fitted()
        rng = self._get_rng(random_state)
        if size is None:
            k = rng.choice(len(self._components), p=self.weights)
            return self._components[k].rvs(random_state=rng)

        shape = (size,) if isinstance(size, (int, np.integer)) else tuple(size)
        n = int(np.prod(shape))
        labels = rng.choice(len(self._components), size=n, p=self.weights)
        draws = [self._components[k].rvs(size=int(np.sum(labels == k)), random_state=rng)
                 for k in range(len(self._components))]
        stacked = np.concatenate([np.asarray(d, dtype=float) for d in draws], axis=0)
        samples = np.empty_like(stacked)
        samples[np.argsort(labels, kind='stable')] = stacked
        return samples.reshape(shape + samples.shape[1:])

    # ============================================================
    # EM bookkeeping
    # ============================================================

    def _report_iteration(self, X: NDArray, *, verbose: int, iteration: int,
                          **changes: float) -> None:
        """
        Print EM progress.

        ``verbose >= 1`` prints the mean log-likelihood, ``verbose >= 2``
        also the convergence measures passed as keyword arguments.
        """
        if verbose >= 1:
            ll = np.mean(self.logpdf(X))
            print(f"Iteration {iteration + 1}: log-likelihood = {ll:.6f}")
            if verbose >= 2 and changes:
                detail = ", ".join(f"{name}={value:.2e}" for name, value in changes.items())
                print(f"  change: {detail}")

    def __repr__(self) -> str:
        if not self._fitted:
            return f"{self.__class__.__name__}(not fitted)"
        weights = ", ".join(f"{w:.4f}" for w in self.weights)
        return f"{self.__class__.__name__}(n_components={len(self._components)}, weights=[{weights}])"
