"""
Mixture of univariate distributions with a soft EM estimator.

The density, CDF and moments are prior-weighted combinations of the
components:

.. math::
    \\mathbb{E}[X] = \\frac{1}{W}\\sum_k w_k m_k, \\qquad
    \\text{Var}[X] = \\sum_k \\frac{w_k}{W}(v_k + m_k^2) - \\mathbb{E}[X]^2

:meth:`ScalarMixture.fit` runs soft (responsibility-weighted) EM. Any
univariate distribution whose ``fit`` accepts ``sample_weight`` can serve
as a component; the default is a Gaussian with a unit variance floor.
"""

from typing import Optional, Sequence, Union

import numpy as np
from numpy.typing import ArrayLike, NDArray

from probdist.base import Distribution, MixtureModel
from probdist.distributions.univariate.gaussian import Gaussian

#: Default iteration cap of :meth:`ScalarMixture.fit`.
DEFAULT_MAX_ITER = 100

#: Default tolerance on the total absolute responsibility change.
DEFAULT_TOL = 1e-5

#: Variance floor of the default Gaussian components.
DEFAULT_COMPONENT_VARIANCE = 1.0


class ScalarMixture(MixtureModel):
    """
    Finite mixture of univariate distributions.

    Examples
    --------
    >>> mix = ScalarMixture.from_classical_params(components=[
    ...     Gaussian.from_classical_params(mean=0.0, variance=1.0),
    ...     Gaussian.from_classical_params(mean=10.0, variance=1.0)])
    >>> mix.mean()
    5.0

    Notes
    -----
    Parameter vector order is ``[w_1, ..., w_K, component_1, ..., component_K]``
    where each component contributes its own parameter vector.
    """

    def cdf(self, x: ArrayLike) -> Union[float, NDArray[np.floating]]:
        """Prior-weighted sum of the component CDFs."""
        self._check_fitted()
        x = np.asarray(x, dtype=float)
        result = sum(w * np.asarray(c.cdf(x)) for w, c in zip(self._priors, self._components))
        return self._wrap_output(x, np.asarray(result) / self.prior_sum)

    def support(self):
        lows, highs = zip(*(c.support() for c in self._components))
        return (min(lows), max(highs))

    def mean(self) -> float:
        self._check_fitted()
        means = np.array([c.mean() for c in self._components])
        return float(np.sum(self._priors * means) / self.prior_sum)

    def var(self) -> float:
        """Law of total variance over the components."""
        self._check_fitted()
        means = np.array([c.mean() for c in self._components])
        variances = np.array([c.var() for c in self._components])
        mean = np.sum(self._priors * means) / self.prior_sum
        return float(np.sum(self.weights * (variances + means ** 2)) - mean ** 2)

    # ============================================================
    # Soft EM
    # ============================================================

    def _initial_responsibilities(self, X: NDArray, K: int,
                                  rng: np.random.Generator) -> NDArray:
        """Soft assignment to randomly perturbed data points."""
        centers = X[rng.integers(len(X), size=K)] + rng.standard_normal(K)
        affinity = np.exp(-np.abs(X[:, None] - centers[None, :]))
        totals = np.sum(affinity, axis=1, keepdims=True)
        return affinity / np.where(totals > 0, totals, 1.0)

    def _m_step(self, X: NDArray, responsibilities: NDArray,
                components: Sequence[Distribution], fit_params: dict) -> None:
        for k, component in enumerate(components):
            component.fit(X, sample_weight=responsibilities[:, k], **fit_params)
        self._set_from_classical(components=components,
                                 priors=np.sum(responsibilities, axis=0))

    def fit(self, X: ArrayLike, y: Optional[ArrayLike] = None,
            sample_weight: Optional[ArrayLike] = None, *,
            n_components: Optional[int] = None,
            component: Optional[Distribution] = None,
            component_fit_params: Optional[dict] = None,
            max_iter: int = DEFAULT_MAX_ITER,
            tol: float = DEFAULT_TOL,
            verbose: int = 0,
            random_state: Optional[Union[int, np.random.Generator]] = None,
            ) -> 'ScalarMixture':
        """
        Fit the mixture with soft EM.

        Initialization picks ``n_components`` random data points, perturbs
        each by standard normal noise, and assigns every sample to the
        centers with weights proportional to :math:`e^{-|x - c_k|}`. Each
        component is fitted once with its column of that assignment as
        sample weights.

        Each iteration then

        1. recomputes responsibilities from the prior-weighted densities
           (uniform for samples with zero density everywhere);
        2. stops if the total absolute change of the responsibilities is at
           most ``tol``;
        3. otherwise refits each component with its responsibilities as
           sample weights and sets the priors to the column sums.

        Reaching ``max_iter`` is not an error; check ``converged_``.

        Parameters
        ----------
        X : array_like
            One-dimensional data, shape ``(n_samples,)``.
        y : array_like, optional
            Ignored (for sklearn API compatibility).
        sample_weight : array_like, optional
            Not supported; must be None.
        n_components : int, optional
            Number of components. Defaults to the current number of
            components, or 2 for an unfitted mixture.
        component : Distribution, optional
            Prototype copied for every component. Defaults to the class of
            the current first component, or :class:`Gaussian`.
        component_fit_params : dict, optional
            Extra keyword arguments for each component's ``fit``. Gaussian
            components default to ``{'default_variance': 1.0}``.
        max_iter : int, optional
            Maximum number of EM iterations. Default 100.
        tol : float, optional
            Tolerance on the total responsibility change. Default ``1e-5``.
        verbose : int, optional
            0 silent, 1 per-iteration log-likelihood, 2 also the
            responsibility change.
        random_state : int or Generator, optional
            Random state for the initialization.

        Returns
        -------
        self : ScalarMixture
        """
        if sample_weight is not None:
            raise ValueError("ScalarMixture.fit does not support sample_weight")
        X = np.asarray(X, dtype=float).ravel()
        if X.size == 0:
            raise ValueError("insufficient data: X is empty")
        rng = self._get_rng(random_state)

        if n_components is None:
            n_components = len(self._components) if self._fitted else 2
        if n_components < 1:
            raise ValueError(f"n_components must be positive, got {n_components}")
        if component is None:
            component = self._components[0] if self._fitted else Gaussian()
        if component_fit_params is None:
            component_fit_params = (
                {'default_variance': DEFAULT_COMPONENT_VARIANCE}
                if isinstance(component, Gaussian) else {}
            )
        components = [component.copy() for _ in range(n_components)]

        responsibilities = self._initial_responsibilities(X, n_components, rng)
        self._m_step(X, responsibilities, components, component_fit_params)

        if verbose > 0:
            init_ll = np.mean(self.logpdf(X))
            print(f"Initial log-likelihood: {init_ll:.6f}")

        self.converged_ = False
        for iteration in range(max_iter):
            previous = responsibilities
            responsibilities = self.predict_proba(X)
            change = float(np.sum(np.abs(responsibilities - previous)))
            self._report_iteration(X, verbose=verbose, iteration=iteration,
                                   responsibility=change)

            if change <= tol:
                if verbose >= 1:
                    print(f"Converged at iteration {iteration + 1}")
                self.n_iter_ = iteration + 1
                self.converged_ = True
                return self

            self._m_step(X, responsibilities, self._components, component_fit_params)

        self.n_iter_ = max_iter

        if verbose >= 1:
            final_ll = np.mean(self.logpdf(X))
            print(f"Final log-likelihood: {final_ll:.6f}")

        return self
