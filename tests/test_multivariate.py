"""
Tests for the multivariate distributions.

Densities are compared against ``scipy.stats``; sampling is checked through
sample moments; the Gaussian algebra (product, convolution, affine maps) is
checked against closed forms.
"""

import numpy as np
import pytest
from scipy import stats

from probdist.distributions.multivariate import (
    MultivariateNormal, MVN, MultivariateStudentT, Dirichlet, Wishart, InverseWishart,
    Multinomial, Categorical,
)
from probdist.distributions.multivariate.wishart import _MatrixDistribution


# ============================================================================
# Fixtures
# ============================================================================

@pytest.fixture
def mvn_params():
    mean = np.array([1.0, -2.0, 0.5])
    cov = np.array([[2.0, 0.3, 0.1],
                    [0.3, 1.0, -0.2],
                    [0.1, -0.2, 0.5]])
    return mean, cov


@pytest.fixture
def spd_matrix():
    return np.array([[1.5, 0.4],
                     [0.4, 0.8]])


# ============================================================================
# Multivariate normal
# ============================================================================

class TestMultivariateNormal:
    def test_logpdf_matches_scipy(self, mvn_params):
        mean, cov = mvn_params
        dist = MultivariateNormal.from_classical_params(mean=mean, cov=cov)
        X = np.random.default_rng(0).normal(size=(20, 3))
        np.testing.assert_allclose(dist.logpdf(X),
                                   stats.multivariate_normal(mean, cov).logpdf(X), rtol=1e-10)

    def test_single_point_returns_float(self, mvn_params):
        mean, cov = mvn_params
        dist = MultivariateNormal.from_classical_params(mean=mean, cov=cov)
        value = dist.logpdf(mean)
        assert isinstance(value, float)
        np.testing.assert_allclose(value, stats.multivariate_normal(mean, cov).logpdf(mean))

    def test_z_squared(self, mvn_params):
        mean, cov = mvn_params
        dist = MultivariateNormal.from_classical_params(mean=mean, cov=cov)
        x = np.array([0.0, 0.0, 0.0])
        diff = x - mean
        np.testing.assert_allclose(dist.z_squared(x), diff @ np.linalg.solve(cov, diff))
        assert dist.z_squared(mean) == 0.0

    def test_one_dimensional(self):
        dist = MultivariateNormal.from_classical_params(mean=[1.0], cov=4.0)
        x = np.array([0.0, 1.0, 3.0])
        np.testing.assert_allclose(dist.logpdf(x), stats.norm(1.0, 2.0).logpdf(x), rtol=1e-12)
        assert dist.d == 1

    def test_cdf_matches_scipy(self, mvn_params):
        mean, cov = mvn_params
        dist = MultivariateNormal.from_classical_params(mean=mean, cov=cov)
        np.testing.assert_allclose(dist.cdf(mean),
                                   stats.multivariate_normal(mean, cov).cdf(mean), atol=1e-3)

    def test_entropy(self, mvn_params):
        mean, cov = mvn_params
        dist = MultivariateNormal.from_classical_params(mean=mean, cov=cov)
        np.testing.assert_allclose(dist.entropy(), stats.multivariate_normal(mean, cov).entropy())

    def test_cached_quantities(self, mvn_params):
        mean, cov = mvn_params
        dist = MultivariateNormal.from_classical_params(mean=mean, cov=cov)
        L = dist.cholesky_factor
        np.testing.assert_allclose(L @ L.T, cov, atol=1e-12)
        np.testing.assert_allclose(dist.precision, np.linalg.inv(cov), atol=1e-10)
        np.testing.assert_allclose(dist.log_det_cov, np.log(np.linalg.det(cov)))

    def test_small_asymmetry_is_averaged(self):
        cov = np.array([[1.0, 0.5 + 4e-6], [0.5, 1.0]])
        dist = MultivariateNormal.from_classical_params(mean=np.zeros(2), cov=cov)
        np.testing.assert_array_equal(dist.cov(), dist.cov().T)

    def test_large_asymmetry_raises(self):
        cov = np.array([[1.0, 0.5], [0.2, 1.0]])
        with pytest.raises(ValueError, match="symmetric"):
            MultivariateNormal.from_classical_params(mean=np.zeros(2), cov=cov)

    def test_not_positive_definite_raises(self):
        cov = np.array([[1.0, 2.0], [2.0, 1.0]])
        with pytest.raises(ValueError, match="positive definite"):
            MultivariateNormal.from_classical_params(mean=np.zeros(2), cov=cov)

    def test_dimension_mismatch_raises(self):
        with pytest.raises(ValueError, match="doesn't match"):
            MultivariateNormal.from_classical_params(mean=np.zeros(3), cov=np.eye(2))
        dist = MultivariateNormal.from_classical_params(mean=np.zeros(2), cov=np.eye(2))
        with pytest.raises(ValueError, match="2-dimensional"):
            dist.logpdf(np.zeros((4, 3)))

    def test_parameter_vector_round_trip(self, mvn_params):
        mean, cov = mvn_params
        dist = MultivariateNormal.from_classical_params(mean=mean, cov=cov)
        vector = dist.get_parameter_vector()
        assert vector.shape == (12,)
        clone = MultivariateNormal.from_parameter_vector(vector)
        np.testing.assert_array_equal(clone.get_parameter_vector(), vector)

    def test_parameter_vector_bad_length(self):
        with pytest.raises(ValueError, match="d \\+ d\\^2"):
            MultivariateNormal.from_parameter_vector(np.ones(5))

    def test_rvs_moments(self, mvn_params):
        mean, cov = mvn_params
        dist = MultivariateNormal.from_classical_params(mean=mean, cov=cov)
        samples = dist.rvs(size=100_000, random_state=1)
        assert samples.shape == (100_000, 3)
        np.testing.assert_allclose(samples.mean(axis=0), mean, atol=0.03)
        np.testing.assert_allclose(np.cov(samples, rowvar=False), cov, atol=0.03)

    def test_rvs_shapes(self, mvn_params):
        mean, cov = mvn_params
        dist = MultivariateNormal.from_classical_params(mean=mean, cov=cov)
        assert dist.rvs(random_state=0).shape == (3,)
        assert dist.rvs(size=(4, 5), random_state=0).shape == (4, 5, 3)

    def test_alias(self):
        assert MVN is MultivariateNormal

    def test_repr(self):
        dist = MultivariateNormal.from_classical_params(mean=[1.0, 2.0], cov=np.eye(2))
        assert repr(dist) == "MultivariateNormal(mean=[1.0000, 2.0000], d=2)"
        assert repr(MultivariateNormal(d=4)) == "MultivariateNormal(d=4, not fitted)"


class TestMultivariateNormalFit:
    def test_unbiased_covariance(self, mvn_params):
        mean, cov = mvn_params
        X = np.random.default_rng(2).multivariate_normal(mean, cov, size=5000)
        dist = MultivariateNormal().fit(X)
        np.testing.assert_allclose(dist.mean(), X.mean(axis=0), atol=1e-12)
        np.testing.assert_allclose(dist.cov(), np.cov(X, rowvar=False) + 1e-5 * np.eye(3),
                                   atol=1e-10)

    def test_weighted_fit_ignores_zero_weights(self):
        rng = np.random.default_rng(3)
        X = np.vstack([rng.normal(size=(200, 2)), rng.normal(50.0, 1.0, size=(200, 2))])
        w = np.r_[np.ones(200), np.zeros(200)]
        dist = MultivariateNormal().fit(X, sample_weight=w)
        np.testing.assert_allclose(dist.mean(), X[:200].mean(axis=0), atol=1e-10)
        np.testing.assert_allclose(dist.cov(), np.cov(X[:200], rowvar=False) + 1e-5 * np.eye(2),
                                   atol=1e-8)

    def test_collinear_data_yields_valid_distribution(self):
        t = np.linspace(0.0, 1.0, 50)
        X = np.column_stack([t, 2.0 * t])
        dist = MultivariateNormal().fit(X)
        assert np.all(np.isfinite(dist.logpdf(X)))
        assert np.all(np.linalg.eigvalsh(dist.cov()) > 0)

    def test_needs_two_samples(self):
        with pytest.raises(ValueError, match="insufficient data"):
            MultivariateNormal().fit(np.ones((1, 2)))

    def test_one_dimensional_input(self):
        X = np.random.default_rng(4).normal(3.0, 2.0, size=1000)
        dist = MultivariateNormal().fit(X)
        assert dist.d == 1
        np.testing.assert_allclose(dist.mean(), [np.mean(X)])


class TestMultivariateNormalAlgebra:
    def test_times(self):
        a = MultivariateNormal.from_classical_params(mean=np.zeros(2), cov=np.eye(2))
        b = MultivariateNormal.from_classical_params(mean=np.array([4.0, 2.0]),
                                                     cov=3.0 * np.eye(2))
        product = a.times(b)
        np.testing.assert_allclose(product.mean(), [1.0, 0.5])
        np.testing.assert_allclose(product.cov(), 0.75 * np.eye(2))

    def test_times_matches_univariate_formula(self, spd_matrix):
        a = MultivariateNormal.from_classical_params(mean=[1.0, 0.0], cov=spd_matrix)
        b = MultivariateNormal.from_classical_params(mean=[0.0, 2.0], cov=2.0 * np.eye(2))
        product = a.times(b)
        P = np.linalg.inv(spd_matrix) + 0.5 * np.eye(2)
        expected_cov = np.linalg.inv(P)
        expected_mean = expected_cov @ (np.linalg.solve(spd_matrix, [1.0, 0.0]) + [0.0, 1.0])
        np.testing.assert_allclose(product.cov(), expected_cov, atol=1e-12)
        np.testing.assert_allclose(product.mean(), expected_mean, atol=1e-12)

    def test_convolve(self, spd_matrix):
        a = MultivariateNormal.from_classical_params(mean=[1.0, 2.0], cov=spd_matrix)
        b = MultivariateNormal.from_classical_params(mean=[3.0, -1.0], cov=np.eye(2))
        total = a.convolve(b)
        np.testing.assert_allclose(total.mean(), [4.0, 1.0])
        np.testing.assert_allclose(total.cov(), spd_matrix + np.eye(2))

    def test_scale(self, spd_matrix):
        dist = MultivariateNormal.from_classical_params(mean=[1.0, 2.0], cov=spd_matrix)
        A = np.array([[1.0, 1.0], [0.0, 2.0]])
        mapped = dist.scale(A)
        np.testing.assert_allclose(mapped.mean(), [3.0, 4.0])
        np.testing.assert_allclose(mapped.cov(), A @ spd_matrix @ A.T, atol=1e-12)

    def test_plus_vector_and_distribution(self, spd_matrix):
        dist = MultivariateNormal.from_classical_params(mean=[1.0, 2.0], cov=spd_matrix)
        shifted = dist.plus([10.0, 20.0])
        np.testing.assert_allclose(shifted.mean(), [11.0, 22.0])
        np.testing.assert_array_equal(shifted.cov(), spd_matrix)
        other = MultivariateNormal.from_classical_params(mean=[0.0, 0.0], cov=np.eye(2))
        np.testing.assert_allclose(dist.plus(other).cov(), spd_matrix + np.eye(2))

    def test_operands_unchanged(self, spd_matrix):
        a = MultivariateNormal.from_classical_params(mean=[1.0, 2.0], cov=spd_matrix)
        b = MultivariateNormal.from_classical_params(mean=[0.0, 0.0], cov=np.eye(2))
        a.times(b)
        a.convolve(b)
        np.testing.assert_array_equal(a.mean(), [1.0, 2.0])
        np.testing.assert_array_equal(b.cov(), np.eye(2))


# ============================================================================
# Multivariate Student-t
# ============================================================================

class TestMultivariateStudentT:
    def test_logpdf_matches_scipy(self, spd_matrix):
        mean = np.array([0.5, -1.0])
        dist = MultivariateStudentT.from_classical_params(
            dof=4.0, mean=mean, precision=np.linalg.inv(spd_matrix))
        reference = stats.multivariate_t(loc=mean, shape=spd_matrix, df=4.0)
        X = np.random.default_rng(5).normal(size=(15, 2))
        np.testing.assert_allclose(dist.logpdf(X), reference.logpdf(X), rtol=1e-8)
        np.testing.assert_allclose(dist.logpdf(mean), reference.logpdf(mean), rtol=1e-10)

    def test_covariance(self, spd_matrix):
        dist = MultivariateStudentT.from_classical_params(
            dof=5.0, mean=np.zeros(2), precision=np.linalg.inv(spd_matrix))
        np.testing.assert_allclose(dist.cov(), 5.0 / 3.0 * spd_matrix, rtol=1e-10)
        np.testing.assert_allclose(dist.var(), np.diag(dist.cov()))

    def test_covariance_undefined(self):
        dist = MultivariateStudentT.from_classical_params(
            dof=2.0, mean=np.zeros(2), precision=np.eye(2))
        with pytest.raises(ValueError, match="undefined"):
            dist.cov()

    def test_rvs_moments(self, spd_matrix):
        dist = MultivariateStudentT.from_classical_params(
            dof=10.0, mean=np.array([1.0, 2.0]), precision=np.linalg.inv(spd_matrix))
        samples = dist.rvs(size=100_000, random_state=6)
        assert samples.shape == (100_000, 2)
        np.testing.assert_allclose(samples.mean(axis=0), [1.0, 2.0], atol=0.03)
        np.testing.assert_allclose(np.cov(samples, rowvar=False), dist.cov(), atol=0.06)
        assert dist.rvs(random_state=0).shape == (2,)

    def test_fit_matches_sample_covariance(self, spd_matrix):
        X = stats.multivariate_t(loc=[0.0, 1.0], shape=spd_matrix, df=6.0).rvs(
            size=5000, random_state=7)
        dist = MultivariateStudentT().fit(X, dof=6.0)
        np.testing.assert_allclose(dist.mean(), X.mean(axis=0), atol=1e-12)
        np.testing.assert_allclose(dist.cov(), np.cov(X, rowvar=False), rtol=1e-3, atol=1e-4)

    def test_fit_default_dof(self):
        X = np.random.default_rng(8).normal(size=(100, 2))
        assert MultivariateStudentT().fit(X).classical_params.dof == 3.0

    def test_fit_rejects_small_dof(self):
        with pytest.raises(ValueError, match="> 2"):
            MultivariateStudentT().fit(np.ones((10, 2)), dof=2.0)

    def test_parameter_vector_round_trip(self, spd_matrix):
        dist = MultivariateStudentT.from_classical_params(
            dof=4.0, mean=[1.0, 2.0], precision=spd_matrix)
        vector = dist.get_parameter_vector()
        assert vector[0] == 4.0
        clone = MultivariateStudentT.from_parameter_vector(vector)
        np.testing.assert_array_equal(clone.get_parameter_vector(), vector)

    def test_invalid_parameters(self):
        with pytest.raises(ValueError, match="Degrees of freedom must be positive"):
            MultivariateStudentT.from_classical_params(dof=0.0, mean=np.zeros(2),
                                                       precision=np.eye(2))
        with pytest.raises(ValueError, match="positive definite"):
            MultivariateStudentT.from_classical_params(
                dof=3.0, mean=np.zeros(2), precision=np.array([[1.0, 2.0], [2.0, 1.0]]))


# ============================================================================
# Dirichlet
# ============================================================================

class TestDirichlet:
    def test_logpdf_matches_scipy(self):
        alpha = np.array([2.0, 3.0, 1.5])
        dist = Dirichlet.from_classical_params(alpha=alpha)
        X = np.random.default_rng(9).dirichlet(alpha, size=10)
        expected = np.array([stats.dirichlet(alpha).logpdf(x) for x in X])
        np.testing.assert_allclose(dist.logpdf(X), expected, rtol=1e-10)

    def test_input_is_normalized(self):
        dist = Dirichlet.from_classical_params(alpha=[2.0, 3.0])
        assert dist.logpdf([2.0, 2.0]) == pytest.approx(dist.logpdf([0.5, 0.5]))

    def test_nonpositive_coordinate_has_zero_density(self):
        dist = Dirichlet.from_classical_params(alpha=[2.0, 3.0, 4.0])
        assert dist.pdf([0.5, 0.5, 0.0]) == 0.0
        assert dist.logpdf([1.0, -0.5, 0.5]) == -np.inf

    def test_moments(self):
        alpha = np.array([1.0, 2.0, 3.0])
        dist = Dirichlet.from_classical_params(alpha=alpha)
        reference = stats.dirichlet(alpha)
        np.testing.assert_allclose(dist.mean(), reference.mean())
        np.testing.assert_allclose(dist.var(), reference.var())
        np.testing.assert_allclose(np.diag(dist.cov()), dist.var())

    def test_rvs_on_simplex(self):
        dist = Dirichlet.from_classical_params(alpha=[0.5, 1.0, 4.0])
        samples = dist.rvs(size=50_000, random_state=10)
        assert samples.shape == (50_000, 3)
        np.testing.assert_allclose(samples.sum(axis=1), 1.0)
        assert np.all(samples >= 0)
        np.testing.assert_allclose(samples.mean(axis=0), dist.mean(), atol=0.01)
        assert dist.rvs(random_state=0).shape == (3,)

    def test_fit_recovers_alpha(self):
        alpha = np.array([2.0, 5.0, 3.0])
        X = np.random.default_rng(11).dirichlet(alpha, size=20_000)
        dist = Dirichlet().fit(X)
        np.testing.assert_allclose(dist.classical_params.alpha, alpha, rtol=0.05)

    def test_invalid(self):
        with pytest.raises(ValueError, match="at least 2"):
            Dirichlet.from_classical_params(alpha=[1.0])
        with pytest.raises(ValueError, match="positive"):
            Dirichlet.from_classical_params(alpha=[1.0, 0.0])
        with pytest.raises(ValueError, match="insufficient data"):
            Dirichlet().fit(np.ones((1, 3)))

    def test_parameter_vector_length_is_fixed(self):
        dist = Dirichlet.from_classical_params(alpha=[1.0, 2.0])
        with pytest.raises(ValueError, match="length 2"):
            dist.set_parameter_vector([1.0, 2.0, 3.0])


# ============================================================================
# Wishart and Inverse Wishart
# ============================================================================

class TestWishart:
    def test_logpdf_matches_scipy(self, spd_matrix):
        dist = Wishart.from_classical_params(dof=5, scale=spd_matrix)
        reference = stats.wishart(df=5, scale=spd_matrix)
        X = reference.rvs(size=6, random_state=12)
        np.testing.assert_allclose(dist.logpdf(X), reference.logpdf(X.transpose(1, 2, 0)),
                                   rtol=1e-10)
        np.testing.assert_allclose(dist.logpdf(X[0]), reference.logpdf(X[0]), rtol=1e-10)

    def test_non_positive_definite_has_zero_density(self, spd_matrix):
        dist = Wishart.from_classical_params(dof=3, scale=spd_matrix)
        assert dist.logpdf(np.array([[1.0, 2.0], [2.0, 1.0]])) == -np.inf

    def test_moments(self, spd_matrix):
        dist = Wishart.from_classical_params(dof=4, scale=spd_matrix)
        reference = stats.wishart(df=4, scale=spd_matrix)
        np.testing.assert_allclose(dist.mean(), reference.mean())
        np.testing.assert_allclose(dist.var(), reference.var())

    def test_rvs_mean(self, spd_matrix):
        dist = Wishart.from_classical_params(dof=6, scale=spd_matrix)
        samples = dist.rvs(size=20_000, random_state=13)
        assert samples.shape == (20_000, 2, 2)
        np.testing.assert_allclose(samples.mean(axis=0), dist.mean(), rtol=0.03, atol=0.03)
        assert dist.rvs(random_state=0).shape == (2, 2)

    def test_dof_validation(self, spd_matrix):
        with pytest.raises(ValueError, match="integer"):
            Wishart.from_classical_params(dof=3.5, scale=spd_matrix)
        with pytest.raises(ValueError, match="at least 2"):
            Wishart.from_classical_params(dof=1, scale=spd_matrix)

    def test_fit(self, spd_matrix):
        X = Wishart.from_classical_params(dof=5, scale=spd_matrix).rvs(size=20_000,
                                                                      random_state=14)
        dist = Wishart().fit(X, dof=5)
        np.testing.assert_allclose(dist.classical_params.scale, spd_matrix, atol=0.03)

    def test_parameter_vector_round_trip(self, spd_matrix):
        dist = Wishart.from_classical_params(dof=4, scale=spd_matrix)
        vector = dist.get_parameter_vector()
        np.testing.assert_array_equal(vector, np.r_[4.0, spd_matrix.ravel()])
        clone = Wishart.from_parameter_vector(vector)
        assert clone.classical_params.dof == 4


class TestInverseWishart:
    def test_logpdf_matches_scipy(self, spd_matrix):
        dist = InverseWishart.from_classical_params(dof=6, inverse_scale=spd_matrix)
        reference = stats.invwishart(df=6, scale=spd_matrix)
        X = reference.rvs(size=6, random_state=15)
        np.testing.assert_allclose(dist.logpdf(X), reference.logpdf(X.transpose(1, 2, 0)),
                                   rtol=1e-8)
        np.testing.assert_allclose(dist.logpdf(X[0]), reference.logpdf(X[0]), rtol=1e-8)

    def test_mean(self, spd_matrix):
        dist = InverseWishart.from_classical_params(dof=6, inverse_scale=spd_matrix)
        np.testing.assert_allclose(dist.mean(), stats.invwishart(df=6, scale=spd_matrix).mean())

    def test_mean_undefined(self, spd_matrix):
        dist = InverseWishart.from_classical_params(dof=3, inverse_scale=spd_matrix)
        with pytest.raises(ValueError, match="undefined"):
            dist.mean()

    def test_rvs_mean(self, spd_matrix):
        dist = InverseWishart.from_classical_params(dof=10, inverse_scale=spd_matrix)
        samples = dist.rvs(size=20_000, random_state=16)
        np.testing.assert_allclose(samples.mean(axis=0), dist.mean(), atol=0.01)
        np.testing.assert_allclose(samples[0], samples[0].T, atol=1e-12)

    def test_dof_validation(self, spd_matrix):
        with pytest.raises(ValueError, match="at least 3"):
            InverseWishart.from_classical_params(dof=2, inverse_scale=spd_matrix)

    def test_fit(self, spd_matrix):
        X = InverseWishart.from_classical_params(dof=8, inverse_scale=spd_matrix).rvs(
            size=20_000, random_state=17)
        dist = InverseWishart().fit(X, dof=8)
        np.testing.assert_allclose(dist.classical_params.inverse_scale, spd_matrix, atol=0.05)

    def test_fit_rejects_small_dof(self, spd_matrix):
        X = np.stack([spd_matrix] * 5)
        with pytest.raises(ValueError, match="> p \\+ 1"):
            InverseWishart().fit(X, dof=3)

    def test_min_dof_is_abstract(self):
        assert "_min_dof" in _MatrixDistribution.__abstractmethods__
        assert "_min_dof" not in InverseWishart.__abstractmethods__
        assert "_min_dof" not in Wishart.__abstractmethods__


# ============================================================================
# Multinomial and Categorical
# ============================================================================

class TestMultinomial:
    def test_logpmf_matches_scipy(self):
        weights = np.array([1.0, 2.0, 5.0])
        dist = Multinomial.from_classical_params(n_trials=6, weights=weights)
        reference = stats.multinomial(6, weights / weights.sum())
        X = reference.rvs(size=20, random_state=18)
        np.testing.assert_allclose(dist.logpmf(X), reference.logpmf(X), rtol=1e-10)
        np.testing.assert_allclose(dist.pmf(X[0]), reference.pmf(X[0]), rtol=1e-10)
        assert isinstance(dist.logpmf(X[0]), float)

    def test_wrong_total_has_zero_mass(self):
        dist = Multinomial.from_classical_params(n_trials=4, weights=[1.0, 1.0])
        assert dist.pmf([1, 2]) == 0.0
        assert dist.logpmf([1.5, 2.5]) == -np.inf
        assert dist.logpmf([-1, 5]) == -np.inf

    def test_zero_weight_category(self):
        dist = Multinomial.from_classical_params(n_trials=3, weights=[1.0, 0.0, 1.0])
        assert dist.pmf([1, 1, 1]) == 0.0
        assert dist.pmf([3, 0, 0]) == pytest.approx(0.125)

    def test_pmf_sums_to_one(self):
        dist = Multinomial.from_classical_params(n_trials=3, weights=[0.2, 0.3, 0.5])
        grid = np.array([[a, b, 3 - a - b] for a in range(4) for b in range(4 - a)])
        assert np.sum(dist.pmf(grid)) == pytest.approx(1.0, abs=1e-12)

    def test_moments(self):
        weights = np.array([2.0, 1.0, 1.0])
        dist = Multinomial.from_classical_params(n_trials=8, weights=weights)
        reference = stats.multinomial(8, weights / weights.sum())
        np.testing.assert_allclose(dist.mean(), reference.mean())
        np.testing.assert_allclose(dist.cov(), reference.cov())
        np.testing.assert_allclose(dist.var(), np.diag(reference.cov()))

    def test_rvs(self):
        dist = Multinomial.from_classical_params(n_trials=10, weights=[1.0, 3.0])
        samples = dist.rvs(size=20_000, random_state=19)
        assert samples.shape == (20_000, 2)
        np.testing.assert_array_equal(samples.sum(axis=1), 10)
        np.testing.assert_allclose(samples.mean(axis=0), dist.mean(), atol=0.05)
        assert dist.rvs(random_state=0).shape == (2,)
        assert dist.rvs(size=(3, 4), random_state=0).shape == (3, 4, 2)

    def test_fit(self):
        X = np.random.default_rng(20).multinomial(7, [0.2, 0.5, 0.3], size=20_000)
        dist = Multinomial().fit(X)
        assert dist.n_trials == 7
        np.testing.assert_allclose(dist.probabilities, [0.2, 0.5, 0.3], atol=0.01)

    def test_fit_weighted(self):
        X = np.array([[2, 0], [0, 2]])
        dist = Multinomial().fit(X, sample_weight=[3.0, 1.0])
        np.testing.assert_allclose(dist.probabilities, [0.75, 0.25])

    def test_fit_rejects_unequal_totals(self):
        with pytest.raises(ValueError, match="same positive count"):
            Multinomial().fit([[1, 2], [2, 2]])

    def test_parameter_vector_round_trip(self):
        dist = Multinomial.from_classical_params(n_trials=5, weights=[1.0, 2.0, 3.0])
        vector = dist.get_parameter_vector()
        np.testing.assert_array_equal(vector, [5.0, 1.0, 2.0, 3.0])
        clone = Multinomial.from_parameter_vector(vector)
        assert clone.n_trials == 5
        np.testing.assert_allclose(clone.probabilities, dist.probabilities)

    def test_invalid(self):
        with pytest.raises(ValueError, match="at least 2"):
            Multinomial.from_classical_params(n_trials=2, weights=[1.0])
        with pytest.raises(ValueError, match="nonnegative"):
            Multinomial.from_classical_params(n_trials=2, weights=[1.0, -1.0])
        with pytest.raises(ValueError, match="positive sum"):
            Multinomial.from_classical_params(n_trials=2, weights=[0.0, 0.0])
        with pytest.raises(ValueError, match="Number of trials"):
            Multinomial.from_classical_params(n_trials=0, weights=[1.0, 1.0])

    def test_repr(self):
        dist = Multinomial.from_classical_params(n_trials=2, weights=[1.0, 3.0])
        assert repr(dist) == "Multinomial(n_trials=2, p=[0.2500, 0.7500])"


class TestCategorical:
    def test_one_hot_mass(self):
        dist = Categorical.from_classical_params(weights=[1.0, 3.0, 4.0])
        np.testing.assert_allclose(dist.pmf(np.eye(3)), [0.125, 0.375, 0.5])
        assert dist.pmf([1, 1, 0]) == 0.0

    def test_is_single_trial_multinomial(self):
        dist = Categorical.from_classical_params(weights=[1.0, 1.0])
        assert dist.n_trials == 1
        np.testing.assert_allclose(dist.cov(), [[0.25, -0.25], [-0.25, 0.25]])

    def test_rvs_one_hot(self):
        dist = Categorical.from_classical_params(weights=[2.0, 1.0, 1.0])
        samples = dist.rvs(size=20_000, random_state=21)
        np.testing.assert_array_equal(samples.sum(axis=1), 1)
        np.testing.assert_allclose(samples.mean(axis=0), [0.5, 0.25, 0.25], atol=0.02)

    def test_fit(self):
        X = np.eye(3)[[0, 0, 1, 2, 2, 2]]
        dist = Categorical().fit(X)
        np.testing.assert_allclose(dist.probabilities, [2 / 6, 1 / 6, 3 / 6])

    def test_fit_rejects_counts(self):
        with pytest.raises(ValueError, match="one-hot"):
            Categorical().fit([[2, 0], [0, 1]])

    def test_parameter_vector(self):
        dist = Categorical.from_classical_params(weights=[1.0, 2.0])
        np.testing.assert_array_equal(dist.get_parameter_vector(), [1.0, 2.0])
        with pytest.raises(ValueError, match="length 2"):
            dist.set_parameter_vector([1.0, 2.0, 3.0])
        assert Categorical.from_parameter_vector([3.0, 1.0]).classical_params.weights[0] == 3.0

    def test_repr(self):
        assert repr(Categorical()) == "Categorical(not fitted)"
