"""
Tests for the cache infrastructure on Distribution base class.

Tests that:
- _fitted flag works correctly
- _check_fitted() raises before fitting, passes after
- _invalidate_cache() clears cached_property values
- _invalidate_cache() is idempotent (safe when no cache)
- _cached_attrs inheritance works for subclasses
- every parameter setter of the concrete distributions clears the cache
"""

from dataclasses import dataclass
from functools import cached_property

import numpy as np
import pytest

from probdist.base.distribution import Distribution
from probdist.distributions.univariate.gaussian import Gaussian
from probdist.distributions.univariate.student_t import StudentT
from probdist.distributions.univariate.beta_binomial import BetaBinomial
from probdist.distributions.multivariate.normal import MultivariateNormal
from probdist.distributions.multivariate.dirichlet import Dirichlet
from probdist.distributions.mixtures.scalar_mixture import ScalarMixture


# ============================================================================
# Minimal concrete subclass for testing
# ============================================================================

@dataclass(frozen=True)
class _MockParams:
    value: float


class _MockDistribution(Distribution):
    """Minimal concrete Distribution for testing cache infrastructure."""

    _cached_attrs = Distribution._cached_attrs + ('expensive_value',)
    _param_names = ('value',)

    def __init__(self):
        super().__init__()
        self._data = None
        self._compute_count = 0  # Track how many times expensive_value is computed

    @cached_property
    def expensive_value(self) -> float:
        """Simulates an expensive derived computation."""
        self._compute_count += 1
        return self._data * 2.0

    def _set_from_classical(self, *, value):
        self._data = float(value)
        self._fitted = True
        self._invalidate_cache()

    def _compute_classical_params(self):
        return _MockParams(value=self._data)

    def _compute_parameter_vector(self):
        return np.array([self._data])

    def set_data(self, value: float):
        self._set_from_classical(value=value)

    # Required abstract methods (minimal stubs)
    def logpdf(self, x):
        return np.zeros_like(np.asarray(x, dtype=float))

    def rvs(self, size=None, random_state=None):
        return np.zeros(size or 1)

    def fit(self, X, y=None, sample_weight=None, **kwargs):
        self.set_data(float(np.mean(X)))
        return self


class _MockChild(_MockDistribution):
    """Child class that extends _cached_attrs."""

    _cached_attrs = _MockDistribution._cached_attrs + ('another_value',)

    @cached_property
    def another_value(self) -> float:
        return self._data ** 2


# ============================================================================
# Tests
# ============================================================================

class TestFittedFlag:
    def test_initially_not_fitted(self):
        dist = _MockDistribution()
        assert dist._fitted is False

    def test_fitted_after_set_data(self):
        dist = _MockDistribution()
        dist.set_data(5.0)
        assert dist._fitted is True

    def test_fitted_after_fit(self):
        dist = _MockDistribution()
        result = dist.fit(np.array([1.0, 2.0, 3.0]))
        assert dist._fitted is True
        assert result is dist  # fit returns self


class TestCheckFitted:
    def test_raises_when_not_fitted(self):
        dist = _MockDistribution()
        with pytest.raises(ValueError, match="parameters not set"):
            dist._check_fitted()

    def test_passes_when_fitted(self):
        dist = _MockDistribution()
        dist.set_data(5.0)
        dist._check_fitted()  # Should not raise

    def test_error_includes_class_name(self):
        dist = _MockDistribution()
        with pytest.raises(ValueError, match="_MockDistribution"):
            dist._check_fitted()

    @pytest.mark.parametrize("cls", [Gaussian, StudentT, MultivariateNormal, Dirichlet,
                                     BetaBinomial])
    def test_unparameterized_distribution_refuses_queries(self, cls):
        with pytest.raises(ValueError, match="parameters not set"):
            cls().mean()


class TestInvalidateCache:
    def test_cached_property_computed_once(self):
        dist = _MockDistribution()
        dist.set_data(5.0)
        assert dist._compute_count == 0

        val1 = dist.expensive_value
        assert val1 == 10.0
        assert dist._compute_count == 1

        val2 = dist.expensive_value
        assert val2 == 10.0
        assert dist._compute_count == 1

    def test_invalidate_clears_cache(self):
        dist = _MockDistribution()
        dist.set_data(5.0)

        _ = dist.expensive_value
        assert dist._compute_count == 1

        dist._invalidate_cache()
        val2 = dist.expensive_value
        assert dist._compute_count == 2
        assert val2 == 10.0

    def test_set_data_invalidates_cache(self):
        dist = _MockDistribution()
        dist.set_data(5.0)
        assert dist.expensive_value == 10.0

        dist.set_data(7.0)
        assert dist.expensive_value == 14.0
        assert dist._compute_count == 2

    def test_set_parameter_vector_invalidates_cache(self):
        dist = _MockDistribution()
        dist.set_data(5.0)
        _ = dist.expensive_value
        _ = dist.classical_params

        dist.set_parameter_vector([3.0])
        assert dist.expensive_value == 6.0
        assert dist.classical_params.value == 3.0

    def test_invalidate_idempotent_no_cache(self):
        """_invalidate_cache is safe to call when no cached values exist."""
        dist = _MockDistribution()
        dist._invalidate_cache()
        dist._invalidate_cache()

    def test_invalidate_idempotent_after_clear(self):
        dist = _MockDistribution()
        dist.set_data(5.0)
        _ = dist.expensive_value
        dist._invalidate_cache()
        dist._invalidate_cache()


class TestCachedAttrsInheritance:
    def test_parent_cached_attrs(self):
        assert 'expensive_value' in _MockDistribution._cached_attrs

    def test_child_extends_cached_attrs(self):
        assert 'expensive_value' in _MockChild._cached_attrs
        assert 'another_value' in _MockChild._cached_attrs

    def test_child_invalidates_both(self):
        dist = _MockChild()
        dist.set_data(5.0)

        assert dist.expensive_value == 10.0
        assert dist.another_value == 25.0

        dist.set_data(3.0)

        assert dist.expensive_value == 6.0
        assert dist.another_value == 9.0

    def test_base_distribution_caches_classical_params(self):
        assert Distribution._cached_attrs == ('classical_params',)


# ============================================================================
# Concrete distributions
# ============================================================================

class TestConcreteCacheInvalidation:
    def test_gaussian_classical_params_refresh(self):
        dist = Gaussian.from_classical_params(mean=0.0, variance=1.0)
        assert dist.classical_params.mean == 0.0
        dist.set_classical_params(mean=2.0, variance=1.0)
        assert dist.classical_params.mean == 2.0

    def test_student_t_normalizer_refresh(self):
        dist = StudentT.from_classical_params(dof=3.0, mean=0.0, precision=1.0)
        before = dist.logpdf(0.0)
        dist.set_classical_params(dof=3.0, mean=0.0, precision=4.0)
        after = dist.logpdf(0.0)
        # Precision 4 doubles the peak density.
        np.testing.assert_allclose(after - before, np.log(2.0), rtol=1e-10)

    def test_mvn_cholesky_refresh(self):
        mvn = MultivariateNormal.from_classical_params(mean=np.zeros(2), cov=np.eye(2))
        L1 = mvn.cholesky_factor.copy()
        mvn.set_classical_params(mean=np.zeros(2), cov=4.0 * np.eye(2))
        np.testing.assert_allclose(mvn.cholesky_factor, 2.0 * L1)
        np.testing.assert_allclose(mvn.log_det_cov, 2.0 * np.log(4.0))
        np.testing.assert_allclose(mvn.precision, 0.25 * np.eye(2))

    def test_mvn_fit_refresh(self):
        rng = np.random.default_rng(0)
        mvn = MultivariateNormal.from_classical_params(mean=np.zeros(2), cov=np.eye(2))
        _ = mvn.precision
        X = rng.normal(size=(500, 2)) * 3.0
        mvn.fit(X)
        np.testing.assert_allclose(mvn.precision @ mvn.cov(), np.eye(2), atol=1e-10)

    def test_dirichlet_normalizer_refresh(self):
        dist = Dirichlet.from_classical_params(alpha=[1.0, 1.0, 1.0])
        np.testing.assert_allclose(dist.pdf([1 / 3, 1 / 3, 1 / 3]), 2.0)
        dist.set_parameter_vector([2.0, 2.0, 2.0])
        np.testing.assert_allclose(dist.log_normalizer, -np.log(120.0), rtol=1e-10)

    def test_beta_binomial_mass_table_refresh(self):
        dist = BetaBinomial.from_classical_params(n_trials=3, alpha=1.0, beta=1.0)
        np.testing.assert_allclose(dist.pmf(3), 0.25)
        dist.set_classical_params(n_trials=5, alpha=1.0, beta=1.0)
        assert dist.log_mass_table.shape == (6,)
        np.testing.assert_allclose(dist.pmf(5), 1.0 / 6.0)

    def test_mixture_components_are_independent_copies(self):
        component = Gaussian.from_classical_params(mean=0.0, variance=1.0)
        mixture = ScalarMixture.from_classical_params(components=[component, component])
        component.set_classical_params(mean=5.0, variance=1.0)
        assert mixture.mean() == 0.0
        assert mixture.components[0] is not mixture.components[1]
