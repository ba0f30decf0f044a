"""
Tests for the discrete univariate distributions.

Mass functions, CDFs and moments are compared against ``scipy.stats``
frozen distributions on a grid of integer and non-integer points; the
estimators are checked for parameter recovery on seeded samples.
"""

import numpy as np
import pytest
from scipy import stats

from probdist.distributions.univariate import (
    Poisson, Binomial, NegativeBinomial, BetaBinomial, UniformInteger,
)
from probdist.distributions.univariate.binomial import log_binomial_coefficient


# ============================================================================
# Reference table
# ============================================================================

CASES = {
    "poisson": (Poisson, {"rate": 3.5}, stats.poisson(3.5)),
    "binomial": (Binomial, {"n_trials": 12, "p": 0.35}, stats.binom(12, 0.35)),
    "negative_binomial": (NegativeBinomial, {"r": 2.5, "p": 0.6},
                          stats.nbinom(2.5, 0.4)),
    "beta_binomial": (BetaBinomial, {"n_trials": 15, "alpha": 2.0, "beta": 3.0},
                      stats.betabinom(15, 2.0, 3.0)),
    "uniform_integer": (UniformInteger, {"low": -3, "high": 8}, stats.randint(-3, 9)),
}


def _make(name):
    cls, params, reference = CASES[name]
    return cls.from_classical_params(**params), reference


def _integers(reference):
    lower, upper = reference.ppf([1e-10, 1 - 1e-10])
    return np.arange(lower, upper + 1.0)


# ============================================================================
# Mass and cumulative functions
# ============================================================================

class TestMass:
    @pytest.mark.parametrize("name", list(CASES))
    def test_pmf_matches_scipy(self, name):
        dist, reference = _make(name)
        k = _integers(reference)
        np.testing.assert_allclose(dist.pmf(k), reference.pmf(k), rtol=1e-8, atol=1e-14)
        np.testing.assert_allclose(dist.logpmf(k), reference.logpmf(k), rtol=1e-8, atol=1e-10)

    @pytest.mark.parametrize("name", list(CASES))
    def test_pmf_sums_to_one(self, name):
        dist, reference = _make(name)
        assert np.sum(dist.pmf(_integers(reference))) == pytest.approx(1.0, abs=1e-8)

    @pytest.mark.parametrize("name", list(CASES))
    def test_off_lattice_has_zero_mass(self, name):
        dist, _ = _make(name)
        lower, upper = dist.support()
        assert dist.pmf(lower + 0.5) == 0.0
        assert dist.pmf(lower - 1.0) == 0.0
        assert dist.logpmf(lower - 1.0) == -np.inf
        if np.isfinite(upper):
            assert dist.pmf(upper + 1.0) == 0.0

    @pytest.mark.parametrize("name", list(CASES))
    def test_scalar_input_returns_float(self, name):
        dist, reference = _make(name)
        median = float(reference.median())
        assert isinstance(dist.pmf(median), float)
        assert isinstance(dist.cdf(median), float)


class TestCDF:
    @pytest.mark.parametrize("name", list(CASES))
    def test_cdf_matches_scipy(self, name):
        dist, reference = _make(name)
        k = _integers(reference)
        x = np.concatenate([k, k + 0.5])
        np.testing.assert_allclose(dist.cdf(x), reference.cdf(x), rtol=1e-8, atol=1e-10)

    @pytest.mark.parametrize("name", list(CASES))
    def test_cdf_limits(self, name):
        dist, _ = _make(name)
        lower, upper = dist.support()
        assert dist.cdf(lower - 1.0) == 0.0
        assert dist.cdf(-np.inf) == 0.0
        assert dist.cdf(upper) == 1.0
        assert dist.cdf(np.inf) == 1.0

    @pytest.mark.parametrize("name", list(CASES))
    def test_cdf_is_cumulative_pmf(self, name):
        dist, reference = _make(name)
        k = _integers(reference)
        lower, _ = dist.support()
        k = k[k >= lower]
        np.testing.assert_allclose(dist.cdf(k), np.cumsum(dist.pmf(k)), atol=1e-10)

    def test_binomial_degenerate_probabilities(self):
        never = Binomial.from_classical_params(n_trials=5, p=0.0)
        always = Binomial.from_classical_params(n_trials=5, p=1.0)
        assert never.pmf(0) == 1.0
        assert never.cdf(0) == 1.0
        assert always.pmf(5) == 1.0
        assert always.cdf(4) == 0.0


# ============================================================================
# Moments, parameters, sampling
# ============================================================================

class TestMoments:
    @pytest.mark.parametrize("name", list(CASES))
    def test_mean_and_var_match_scipy(self, name):
        dist, reference = _make(name)
        np.testing.assert_allclose(dist.mean(), reference.mean(), rtol=1e-12)
        np.testing.assert_allclose(dist.var(), reference.var(), rtol=1e-10)

    def test_uniform_integer_point_mass(self):
        dist = UniformInteger.from_classical_params(low=4, high=4)
        assert dist.pmf(4) == 1.0
        assert dist.var() == 0.0


class TestParameters:
    @pytest.mark.parametrize("name", list(CASES))
    def test_parameter_vector_round_trip(self, name):
        dist, _ = _make(name)
        vector = dist.get_parameter_vector()
        clone = type(dist).from_parameter_vector(vector)
        np.testing.assert_array_equal(clone.get_parameter_vector(), vector)
        np.testing.assert_array_equal(vector, list(CASES[name][1].values()))

    @pytest.mark.parametrize("name", list(CASES))
    def test_parameter_vector_wrong_length(self, name):
        dist, _ = _make(name)
        with pytest.raises(ValueError, match="length"):
            dist.set_parameter_vector(np.append(dist.get_parameter_vector(), 1.0))

    def test_uniform_integer_vector_reorders_bounds(self):
        dist = UniformInteger.from_parameter_vector([7.0, 2.0])
        assert dist.support() == (2.0, 7.0)

    def test_binomial_vector_truncates_trials(self):
        dist = Binomial.from_parameter_vector([10.7, 0.5])
        assert dist.classical_params.n_trials == 10

    @pytest.mark.parametrize("cls,kwargs,match", [
        (Binomial, {"n_trials": 0, "p": 0.5}, "Number of trials must be a positive integer"),
        (Binomial, {"n_trials": 2.5, "p": 0.5}, "Number of trials must be a positive integer"),
        (Binomial, {"n_trials": 5, "p": 1.5}, r"Probability must be in \[0, 1\]"),
        (NegativeBinomial, {"r": 0.0, "p": 0.5}, "R must be positive"),
        (NegativeBinomial, {"r": 2.0, "p": 1.0}, r"Probability must be in \[0, 1\)"),
        (BetaBinomial, {"n_trials": 5, "alpha": 0.0, "beta": 1.0}, "Alpha must be positive"),
        (BetaBinomial, {"n_trials": 5, "alpha": 1.0, "beta": -1.0}, "Beta must be positive"),
        (UniformInteger, {"low": 3, "high": 1}, "High must not be less than low"),
        (UniformInteger, {"low": 0.5, "high": 2}, "Low must be an integer"),
    ])
    def test_invalid_parameters(self, cls, kwargs, match):
        with pytest.raises(ValueError, match=match):
            cls.from_classical_params(**kwargs)

    def test_repr(self):
        assert repr(Binomial()) == "Binomial(not fitted)"

    def test_log_binomial_coefficient(self):
        np.testing.assert_allclose(log_binomial_coefficient(10, [0, 3, 10]),
                                   np.log([1.0, 120.0, 1.0]), atol=1e-12)


class TestSampling:
    @pytest.mark.parametrize("name", list(CASES))
    def test_single_draw_is_int(self, name):
        dist, _ = _make(name)
        assert type(dist.rvs(random_state=0)) is int

    @pytest.mark.parametrize("name", list(CASES))
    def test_draws_on_support(self, name):
        dist, _ = _make(name)
        lower, upper = dist.support()
        samples = dist.rvs(size=(50, 4), random_state=1)
        assert samples.shape == (50, 4)
        assert np.all((samples >= lower) & (samples <= upper))
        assert np.all(samples == np.floor(samples))

    def test_beta_binomial_frequencies(self):
        dist = BetaBinomial.from_classical_params(n_trials=6, alpha=0.5, beta=0.8)
        samples = dist.rvs(size=100_000, random_state=2)
        frequencies = np.bincount(samples, minlength=7) / samples.size
        np.testing.assert_allclose(frequencies, dist.pmf(np.arange(7)), atol=0.01)


# ============================================================================
# Estimation
# ============================================================================

class TestFit:
    N = 50_000

    def test_binomial(self):
        X = np.random.default_rng(0).binomial(20, 0.3, self.N)
        dist = Binomial().fit(X, n_trials=20)
        assert dist.classical_params.n_trials == 20
        assert dist.classical_params.p == pytest.approx(np.mean(X) / 20.0)

    def test_binomial_keeps_fitted_trials(self):
        dist = Binomial.from_classical_params(n_trials=10, p=0.5)
        dist.fit([1.0, 2.0, 3.0])
        assert dist.classical_params.n_trials == 10
        assert dist.classical_params.p == pytest.approx(0.2)

    def test_binomial_defaults_to_largest_count(self):
        dist = Binomial().fit([0.0, 2.0, 4.0])
        assert dist.classical_params.n_trials == 4
        assert dist.classical_params.p == pytest.approx(0.5)

    def test_binomial_rejects_counts_above_trials(self):
        with pytest.raises(ValueError, match="Counts must lie in"):
            Binomial().fit([1.0, 6.0], n_trials=5)

    def test_binomial_weighted_equals_repeated(self):
        weighted = Binomial().fit([1.0, 4.0], sample_weight=[3.0, 1.0], n_trials=5)
        repeated = Binomial().fit([1.0, 1.0, 1.0, 4.0], n_trials=5)
        assert weighted.mean() == pytest.approx(repeated.mean())

    def test_negative_binomial(self):
        X = np.random.default_rng(1).negative_binomial(3.0, 0.4, self.N)
        params = NegativeBinomial().fit(X).classical_params
        assert params.r == pytest.approx(3.0, rel=0.08)
        assert params.p == pytest.approx(0.6, rel=0.03)

    def test_negative_binomial_needs_spread(self):
        with pytest.raises(ValueError, match="variance"):
            NegativeBinomial().fit([2.0, 2.0, 2.0])

    def test_beta_binomial(self):
        X = stats.betabinom(20, 2.0, 5.0).rvs(size=self.N, random_state=2)
        params = BetaBinomial().fit(X, n_trials=20).classical_params
        assert params.alpha == pytest.approx(2.0, rel=0.1)
        assert params.beta == pytest.approx(5.0, rel=0.1)

    def test_beta_binomial_underdispersed_raises(self):
        X = np.random.default_rng(3).binomial(10, 0.5, 2000)
        X = np.clip(X, 4, 6)
        with pytest.raises(ValueError, match="not overdispersed"):
            BetaBinomial().fit(X, n_trials=10)

    def test_uniform_integer(self):
        X = np.random.default_rng(4).integers(-5, 11, 1000)
        params = UniformInteger().fit(X).classical_params
        assert (params.low, params.high) == (-5, 10)

    def test_uniform_integer_weighted_ignores_zero_weight(self):
        params = UniformInteger().fit([1, 3, 50], sample_weight=[1.0, 2.0, 0.0]).classical_params
        assert (params.low, params.high) == (1, 3)

    def test_uniform_integer_rejects_fractions(self):
        with pytest.raises(ValueError, match="integer"):
            UniformInteger().fit([1.0, 2.5])

    @pytest.mark.parametrize("cls", [Binomial, NegativeBinomial, BetaBinomial, UniformInteger])
    def test_fit_returns_self(self, cls):
        X = stats.betabinom(10, 1.5, 2.5).rvs(size=500, random_state=5)
        dist = cls()
        assert dist.fit(X) is dist
