"""
Mixture of multivariate Gaussians.

.. math::
    p(x) = \\frac{1}{W}\\sum_{k=1}^K w_k\\, \\mathcal{N}(x \\mid \\mu_k, \\Sigma_k)

Two estimators are provided by :meth:`GaussianMixture.fit`:

- ``method='soft'``: EM started from the overall maximum likelihood
  Gaussian, with component :math:`k` using covariance
  :math:`0.5^k\\hat\\Sigma` and equal priors. Iterations stop once every
  component's mean and covariance change by at most ``tol`` relative to
  the previous iteration.
- ``method='hard'``: k-means clustering (:func:`scipy.cluster.vq.kmeans2`),
  then one maximum likelihood Gaussian per cluster with priors proportional
  to cluster sizes.
"""

from typing import Optional, Union

import numpy as np
from numpy.typing import ArrayLike, NDArray
from scipy.cluster.vq import kmeans2, vq

from probdist.base import MixtureModel
from probdist.distributions.multivariate.normal import MultivariateNormal, DEFAULT_COVARIANCE

#: Default iteration cap of :meth:`GaussianMixture.fit`.
DEFAULT_MAX_ITER = 100

#: Default tolerance on the relative change of means and covariances.
DEFAULT_TOL = 1e-4

#: Covariance shrink factor between successive initial components.
COVARIANCE_SCALE = 0.5


def _relative_change(new: NDArray, old: NDArray) -> float:
    return float(np.linalg.norm(new - old) / max(np.linalg.norm(old), 1e-10))


class GaussianMixture(MixtureModel):
    """
    Finite mixture of multivariate Gaussians.

    Examples
    --------
    >>> X = np.vstack([np.random.default_rng(0).normal(0, 1, (200, 2)),
    ...                np.random.default_rng(1).normal(8, 1, (200, 2))])
    >>> gm = GaussianMixture().fit(X, n_components=2, method='hard', random_state=0)
    >>> gm.n_components
    2

    Notes
    -----
    Parameter vector order is ``[w_1, ..., w_K, mvn_1, ..., mvn_K]`` with
    each component laid out as ``[mean, vec(cov)]``.
    """

    @property
    def d(self) -> int:
        """Dimension of the distribution."""
        self._check_fitted()
        return self._components[0].d

    def mean(self) -> NDArray:
        self._check_fitted()
        means = np.array([c.mean() for c in self._components])
        return self.weights @ means

    def cov(self) -> NDArray:
        """
        Mixture covariance
        :math:`\\sum_k \\frac{w_k}{W}(\\Sigma_k + \\mu_k\\mu_k^T) - \\bar\\mu\\bar\\mu^T`.
        """
        self._check_fitted()
        mean = self.mean()
        second = sum(w * (c.cov() + np.outer(c.mean(), c.mean()))
                     for w, c in zip(self.weights, self._components))
        return second - np.outer(mean, mean)

    def var(self) -> NDArray:
        """Diagonal of :meth:`cov`."""
        return np.diag(self.cov()).copy()

    # ============================================================
    # Estimation
    # ============================================================

    @staticmethod
    def _as_data(X: ArrayLike) -> NDArray:
        X = np.asarray(X, dtype=float)
        if X.ndim == 1:
            X = X.reshape(-1, 1)
        if X.ndim != 2:
            raise ValueError(f"X must be 2-dimensional (n_samples, d), got shape {X.shape}")
        return X

    @classmethod
    def fit_single_gaussian(cls, X: ArrayLike, *,
                            default_covariance: float = DEFAULT_COVARIANCE) -> 'GaussianMixture':
        """One-component mixture holding the maximum likelihood Gaussian of ``X``."""
        X = cls._as_data(X)
        gaussian = MultivariateNormal().fit(X, default_covariance=default_covariance)
        mixture = cls.from_classical_params(components=[gaussian], priors=[1.0])
        mixture.converged_ = True
        return mixture

    def fit(self, X: ArrayLike, y: Optional[ArrayLike] = None,
            sample_weight: Optional[ArrayLike] = None, *,
            n_components: Optional[int] = None,
            method: str = 'soft',
            max_iter: int = DEFAULT_MAX_ITER,
            tol: float = DEFAULT_TOL,
            verbose: int = 0,
            random_state: Optional[Union[int, np.random.Generator]] = None,
            ) -> 'GaussianMixture':
        """
        Fit the mixture to data.

        Parameters
        ----------
        X : array_like
            Data, shape ``(n_samples, d)``.
        y : array_like, optional
            Ignored (for sklearn API compatibility).
        sample_weight : array_like, optional
            Not supported; must be None.
        n_components : int, optional
            Number of components. Defaults to the current number of
            components, or 2 for an unfitted mixture.
        method : {'soft', 'hard'}, optional
            Soft EM or k-means based hard assignment. Default ``'soft'``.
        max_iter : int, optional
            Maximum number of EM (or k-means) iterations. Default 100.
        tol : float, optional
            Soft EM tolerance on the relative parameter change. Default
            ``1e-4``.
        verbose : int, optional
            0 silent, 1 per-iteration log-likelihood, 2 also the parameter
            changes.
        random_state : int or Generator, optional
            Random state for the k-means seeding.

        Returns
        -------
        self : GaussianMixture

        Raises
        ------
        ValueError
            For an unknown ``method``, or "insufficient data" when a
            Gaussian cannot be estimated (fewer than two samples overall or
            in some k-means cluster).
        """
        if sample_weight is not None:
            raise ValueError("GaussianMixture.fit does not support sample_weight")
        X = self._as_data(X)
        if n_components is None:
            n_components = len(self._components) if self._fitted else 2
        if n_components < 1:
            raise ValueError(f"n_components must be positive, got {n_components}")

        if method == 'soft':
            return self._fit_soft(X, n_components, max_iter=max_iter, tol=tol,
                                  verbose=verbose)
        elif method == 'hard':
            return self._fit_hard(X, n_components, max_iter=max_iter,
                                  verbose=verbose, random_state=random_state)
        raise ValueError(f"Unknown method: {method!r}. Use 'soft' or 'hard'.")

    def _fit_soft(self, X: NDArray, K: int, *, max_iter: int, tol: float,
                  verbose: int) -> 'GaussianMixture':
        overall = MultivariateNormal().fit(X)
        components = [
            MultivariateNormal.from_classical_params(
                mean=overall.mean(), cov=overall.cov() * COVARIANCE_SCALE ** k)
            for k in range(K)
        ]
        self._set_from_classical(components=components, priors=np.full(K, 1.0 / K))

        if verbose > 0:
            init_ll = np.mean(self.logpdf(X))
            print(f"Initial log-likelihood: {init_ll:.6f}")

        n = X.shape[0]
        self.converged_ = False
        for iteration in range(max_iter):
            previous = self._components
            responsibilities = self.predict_proba(X)
            components = [MultivariateNormal().fit(X, sample_weight=responsibilities[:, k])
                          for k in range(K)]
            self._set_from_classical(components=components,
                                     priors=np.sum(responsibilities, axis=0) / n)

            mean_change = max(_relative_change(new.mean(), old.mean())
                              for new, old in zip(self._components, previous))
            cov_change = max(_relative_change(new.cov(), old.cov())
                             for new, old in zip(self._components, previous))
            self._report_iteration(X, verbose=verbose, iteration=iteration,
                                   mean=mean_change, cov=cov_change)

            if max(mean_change, cov_change) <= tol:
                if verbose >= 1:
                    print(f"Converged at iteration {iteration + 1}")
                self.n_iter_ = iteration + 1
                self.converged_ = True
                return self

        self.n_iter_ = max_iter

        if verbose >= 1:
            final_ll = np.mean(self.logpdf(X))
            print(f"Final log-likelihood: {final_ll:.6f}")

        return self

    def _fit_hard(self, X: NDArray, K: int, *, max_iter: int, verbose: int,
                  random_state) -> 'GaussianMixture':
        rng = self._get_rng(random_state)
        centroids, labels = kmeans2(X, K, iter=max_iter, minit='++', seed=rng)

        components = []
        sizes = np.bincount(labels, minlength=K)
        for k in range(K):
            if sizes[k] < 2:
                raise ValueError(
                    f"insufficient data: cluster {k} has {sizes[k]} point(s), "
                    "need at least 2 to estimate a covariance"
                )
            components.append(MultivariateNormal().fit(X[labels == k]))
        self._set_from_classical(components=components, priors=sizes / X.shape[0])

        # Stable when one more assignment step leaves every label unchanged.
        reassigned, _ = vq(X, centroids)
        self.n_iter_ = max_iter
        self.converged_ = bool(np.all(reassigned == labels))

        if verbose >= 1:
            final_ll = np.mean(self.logpdf(X))
            print(f"Cluster sizes: {sizes.tolist()}")
            print(f"Final log-likelihood: {final_ll:.6f}")

        return self
