"""
Tests for special functions and linear algebra helpers.

Each special function is compared against ``scipy.special``; the boundary
behaviour (domain errors, saturation, exact endpoint values) is tested
explicitly.
"""

import numpy as np
import pytest
from scipy import special as sp

from probdist.utils.special import (
    log_gamma,
    log_factorial,
    log_beta,
    log_multinomial_beta,
    log_multivariate_gamma,
    lower_incomplete_gamma,
    regularized_incomplete_beta,
    erf,
    erfinv,
)
from probdist.utils.linalg import (
    symmetrize,
    checked_cholesky,
    robust_cholesky,
    log_det_from_cholesky,
)


# ============================================================================
# Gamma family
# ============================================================================

class TestLogGamma:
    @pytest.mark.parametrize("x", [1e-8, 0.1, 0.3, 0.5, 1.0, 1.5, 2.0, 3.7, 10.0,
                                   123.4, 1e4, 1e6])
    def test_matches_scipy(self, x):
        np.testing.assert_allclose(log_gamma(x), sp.gammaln(x), rtol=1e-10, atol=1e-12)

    def test_vectorized(self):
        x = np.linspace(0.05, 50.0, 200)
        np.testing.assert_allclose(log_gamma(x), sp.gammaln(x), rtol=1e-10, atol=1e-12)

    def test_scalar_returns_float(self):
        assert isinstance(log_gamma(2.5), float)

    @pytest.mark.parametrize("x", [0.0, -1.0, -0.5])
    def test_nonpositive_raises(self, x):
        with pytest.raises(ValueError):
            log_gamma(x)


class TestLogFactorial:
    def test_small_values(self):
        assert log_factorial(0) == 0.0
        assert log_factorial(1) == 0.0
        np.testing.assert_allclose(log_factorial(5), np.log(120.0), rtol=1e-12)

    def test_vectorized(self):
        n = np.arange(0, 30)
        np.testing.assert_allclose(log_factorial(n), sp.gammaln(n + 1.0), rtol=1e-10, atol=1e-12)

    def test_negative_raises(self):
        with pytest.raises(ValueError):
            log_factorial(-1)


class TestLogBeta:
    @pytest.mark.parametrize("a,b", [(0.5, 0.5), (1.0, 1.0), (2.0, 5.0), (30.0, 0.2)])
    def test_matches_scipy(self, a, b):
        np.testing.assert_allclose(log_beta(a, b), sp.betaln(a, b), rtol=1e-10, atol=1e-12)

    def test_multinomial_beta(self):
        alpha = np.array([0.5, 2.0, 3.5])
        expected = np.sum(sp.gammaln(alpha)) - sp.gammaln(np.sum(alpha))
        np.testing.assert_allclose(log_multinomial_beta(alpha), expected, rtol=1e-10)

    def test_multinomial_beta_reduces_to_beta(self):
        np.testing.assert_allclose(log_multinomial_beta([2.0, 3.0]), log_beta(2.0, 3.0),
                                   rtol=1e-12)

    @pytest.mark.parametrize("x,p", [(3.0, 1), (2.5, 2), (5.0, 3), (10.0, 4)])
    def test_multivariate_gamma(self, x, p):
        np.testing.assert_allclose(log_multivariate_gamma(x, p), sp.multigammaln(x, p),
                                   rtol=1e-10)


# ============================================================================
# Incomplete functions
# ============================================================================

class TestLowerIncompleteGamma:
    @pytest.mark.parametrize("a", [0.3, 1.0, 2.5, 10.0, 100.0])
    @pytest.mark.parametrize("x", [0.01, 0.5, 1.0, 3.0, 12.0, 150.0])
    def test_matches_scipy(self, a, x):
        np.testing.assert_allclose(lower_incomplete_gamma(a, x), sp.gammainc(a, x),
                                   rtol=1e-8, atol=1e-12)

    def test_zero_below_support(self):
        assert lower_incomplete_gamma(2.0, 0.0) == 0.0
        assert lower_incomplete_gamma(2.0, -3.0) == 0.0

    def test_saturates(self):
        assert lower_incomplete_gamma(2.0, 1e11) == 1.0
        assert lower_incomplete_gamma(2.0, np.inf) == 1.0

    def test_infinite_shape(self):
        assert lower_incomplete_gamma(np.inf, 3.0) == 0.0

    @pytest.mark.parametrize("a", [2e4, 1e5, 1e6])
    @pytest.mark.parametrize("ratio", [0.99, 1.0, 1.01])
    def test_large_shape_near_mode(self, a, ratio):
        x = ratio * a
        np.testing.assert_allclose(lower_incomplete_gamma(a, x), sp.gammainc(a, x),
                                   rtol=1e-6, atol=1e-10)

    def test_exponential_case(self):
        x = np.array([0.1, 1.0, 4.0])
        np.testing.assert_allclose(lower_incomplete_gamma(1.0, x), 1.0 - np.exp(-x),
                                   rtol=1e-10)

    def test_invalid_shape_raises(self):
        with pytest.raises(ValueError, match="positive"):
            lower_incomplete_gamma(0.0, 1.0)


class TestRegularizedIncompleteBeta:
    @pytest.mark.parametrize("a,b", [(0.5, 0.5), (1.0, 3.0), (2.0, 5.0), (8.0, 2.0)])
    @pytest.mark.parametrize("x", [0.01, 0.2, 0.5, 0.8, 0.99])
    def test_matches_scipy(self, a, b, x):
        np.testing.assert_allclose(regularized_incomplete_beta(a, b, x), sp.betainc(a, b, x),
                                   rtol=1e-8, atol=1e-12)

    def test_endpoints(self):
        assert regularized_incomplete_beta(2.0, 3.0, 0.0) == 0.0
        assert regularized_incomplete_beta(2.0, 3.0, 1.0) == 1.0

    def test_symmetry(self):
        x = 0.3
        np.testing.assert_allclose(
            regularized_incomplete_beta(2.0, 5.0, x),
            1.0 - regularized_incomplete_beta(5.0, 2.0, 1.0 - x),
            rtol=1e-10,
        )

    @pytest.mark.parametrize("x", [-0.1, 1.5])
    def test_out_of_range_raises(self, x):
        with pytest.raises(ValueError, match=r"\[0, 1\]"):
            regularized_incomplete_beta(2.0, 3.0, x)


# ============================================================================
# Error function
# ============================================================================

class TestErf:
    def test_matches_scipy(self):
        z = np.linspace(-4.0, 4.0, 81)
        np.testing.assert_allclose(erf(z), sp.erf(z), atol=2e-7)

    def test_odd_and_zero(self):
        assert erf(0.0) == 0.0
        np.testing.assert_allclose(erf(-1.3), -erf(1.3))

    @pytest.mark.parametrize("x", [-3.0, -1.0, 0.0, 1.0, 3.0])
    def test_erfinv_round_trip(self, x):
        np.testing.assert_allclose(erfinv(erf(x)), x, atol=1e-6)

    def test_erfinv_matches_scipy(self):
        y = np.linspace(-0.99, 0.99, 41)
        np.testing.assert_allclose(erfinv(y), sp.erfinv(y), atol=1e-6)

    def test_erfinv_saturates(self):
        assert erfinv(1.0) == np.inf
        assert erfinv(-1.0) == -np.inf
        assert erfinv(2.0) == np.inf


# ============================================================================
# Linear algebra
# ============================================================================

class TestLinalg:
    def test_symmetrize_averages_small_asymmetry(self):
        A = np.array([[2.0, 1.0 + 4e-6], [1.0, 3.0]])
        S = symmetrize(A)
        np.testing.assert_array_equal(S, S.T)
        np.testing.assert_allclose(S[0, 1], 1.0 + 2e-6)

    def test_symmetrize_rejects_large_asymmetry(self):
        A = np.array([[2.0, 1.5], [1.0, 3.0]])
        with pytest.raises(ValueError, match="symmetric"):
            symmetrize(A, name="Covariance")

    def test_symmetrize_rejects_non_square(self):
        with pytest.raises(ValueError, match="square"):
            symmetrize(np.ones((2, 3)))

    def test_checked_cholesky(self):
        A = np.array([[4.0, 2.0], [2.0, 3.0]])
        L = checked_cholesky(A)
        np.testing.assert_allclose(L @ L.T, A)
        np.testing.assert_allclose(log_det_from_cholesky(L), np.log(np.linalg.det(A)))

    def test_checked_cholesky_not_positive_definite(self):
        with pytest.raises(ValueError, match="positive definite"):
            checked_cholesky(np.array([[1.0, 2.0], [2.0, 1.0]]), name="Covariance")

    def test_robust_cholesky_regularizes(self):
        A = np.array([[1.0, 1.0], [1.0, 1.0]])
        L = robust_cholesky(A)
        assert np.all(np.diag(L) > 0)
        np.testing.assert_allclose(L @ L.T, A, atol=1e-6)
