"""
Tests for the multivariate Gaussian mixture.

Covers the hard (k-means) and soft (EM) estimators, the single Gaussian
baseline, the mixture moments and the failure modes of fitting.
"""

import numpy as np
import pytest

from probdist.distributions.mixtures import GaussianMixture
from probdist.distributions.multivariate import MultivariateNormal


@pytest.fixture
def clusters():
    rng = np.random.default_rng(0)
    return np.vstack([rng.normal(0.0, 1.0, size=(300, 2)),
                      rng.normal(6.0, 0.7, size=(100, 2))])


def _sorted_means(mixture):
    means = np.array([c.mean() for c in mixture.components])
    return means[np.argsort(means[:, 0])]


class TestHardFit:
    def test_recovers_clusters(self, clusters):
        gm = GaussianMixture().fit(clusters, n_components=2, method='hard', random_state=0)
        np.testing.assert_allclose(_sorted_means(gm), [[0.0, 0.0], [6.0, 6.0]], atol=0.3)
        np.testing.assert_allclose(np.sort(gm.weights), [0.25, 0.75])
        assert gm.converged_ is True
        assert gm.n_components == 2
        assert gm.d == 2

    def test_components_are_cluster_estimates(self, clusters):
        gm = GaussianMixture().fit(clusters, n_components=2, method='hard', random_state=1)
        labels = gm.predict(clusters)
        for k, component in enumerate(gm.components):
            members = clusters[labels == k]
            np.testing.assert_allclose(component.mean(), members.mean(axis=0), atol=1e-8)

    def test_cluster_too_small(self):
        X = np.array([[0.0, 0.0], [0.0, 0.1], [10.0, 10.0], [20.0, 20.0]])
        with pytest.raises(ValueError, match="insufficient data: cluster"):
            GaussianMixture().fit(X, n_components=3, method='hard', random_state=0)

    def test_verbose(self, clusters, capsys):
        GaussianMixture().fit(clusters, n_components=2, method='hard', verbose=1,
                              random_state=0)
        out = capsys.readouterr().out
        assert "Cluster sizes: " in out
        assert "Final log-likelihood: " in out


class TestSoftFit:
    def test_improves_on_single_gaussian(self, clusters):
        gm = GaussianMixture().fit(clusters, n_components=2, method='soft')
        single = GaussianMixture.fit_single_gaussian(clusters)
        assert gm.score(clusters) > single.score(clusters)

    def test_recovers_clusters(self, clusters):
        gm = GaussianMixture().fit(clusters, n_components=2, max_iter=500)
        np.testing.assert_allclose(_sorted_means(gm), [[0.0, 0.0], [6.0, 6.0]], atol=0.5)
        assert gm.converged_ is True
        assert gm.n_iter_ < 500
        np.testing.assert_allclose(gm.weights.sum(), 1.0)

    def test_max_iter_reached(self, clusters):
        gm = GaussianMixture().fit(clusters, n_components=2, max_iter=2, tol=0.0)
        assert gm.n_iter_ == 2
        assert gm.converged_ is False

    def test_verbose_output(self, clusters, capsys):
        GaussianMixture().fit(clusters, n_components=2, max_iter=2, tol=0.0, verbose=2)
        lines = capsys.readouterr().out.splitlines()
        assert lines[0].startswith("Initial log-likelihood: ")
        assert lines[1].startswith("Iteration 1: log-likelihood = ")
        assert lines[2].startswith("  change: mean=")
        assert "cov=" in lines[2]
        assert lines[-1].startswith("Final log-likelihood: ")

    def test_one_dimensional_data(self):
        rng = np.random.default_rng(2)
        X = np.concatenate([rng.normal(0.0, 1.0, 300), rng.normal(8.0, 0.5, 100)])
        gm = GaussianMixture().fit(X, n_components=2, max_iter=300)
        assert gm.d == 1
        means = np.sort([c.mean()[0] for c in gm.components])
        np.testing.assert_allclose(means, [0.0, 8.0], atol=0.5)

    def test_insufficient_data(self):
        with pytest.raises(ValueError, match="insufficient data"):
            GaussianMixture().fit(np.ones((1, 2)), n_components=1)


class TestFitArguments:
    def test_unknown_method(self, clusters):
        with pytest.raises(ValueError, match="Unknown method"):
            GaussianMixture().fit(clusters, method='median')

    def test_rejects_sample_weight(self, clusters):
        with pytest.raises(ValueError, match="sample_weight"):
            GaussianMixture().fit(clusters, sample_weight=np.ones(len(clusters)))

    def test_rejects_bad_shape(self):
        with pytest.raises(ValueError, match="2-dimensional"):
            GaussianMixture().fit(np.ones((3, 2, 2)))

    def test_default_component_count(self, clusters):
        gm = GaussianMixture().fit(clusters, method='hard', random_state=0)
        assert gm.n_components == 2
        gm.fit(clusters, max_iter=5)
        assert gm.n_components == 2


class TestSingleGaussian:
    def test_fit_single_gaussian(self, clusters):
        gm = GaussianMixture.fit_single_gaussian(clusters)
        assert gm.n_components == 1
        assert gm.converged_ is True
        np.testing.assert_array_equal(gm.priors, [1.0])
        np.testing.assert_allclose(gm.mean(), clusters.mean(axis=0))
        reference = MultivariateNormal().fit(clusters)
        np.testing.assert_allclose(gm.logpdf(clusters), reference.logpdf(clusters))

    def test_default_covariance(self):
        X = np.array([[1.0, 2.0], [1.0, 2.0], [1.0, 2.0]])
        gm = GaussianMixture.fit_single_gaussian(X, default_covariance=0.5)
        np.testing.assert_allclose(gm.cov(), 0.5 * np.eye(2))


class TestMixtureMoments:
    @pytest.fixture
    def mixture(self):
        return GaussianMixture.from_classical_params(
            components=[
                MultivariateNormal.from_classical_params(mean=[0.0, 0.0], cov=np.eye(2)),
                MultivariateNormal.from_classical_params(mean=[4.0, 0.0],
                                                         cov=np.diag([2.0, 0.5])),
            ],
            priors=[3.0, 1.0],
        )

    def test_mean(self, mixture):
        np.testing.assert_allclose(mixture.mean(), [1.0, 0.0])

    def test_cov_total_covariance(self, mixture):
        # 0.75 * I + 0.25 * diag(2, 0.5) + spread of the means
        within = np.diag([1.25, 0.875])
        between = 0.75 * np.diag([1.0, 0.0]) + 0.25 * np.diag([9.0, 0.0])
        np.testing.assert_allclose(mixture.cov(), within + between)
        np.testing.assert_allclose(mixture.var(), np.diag(within + between))

    def test_rvs(self, mixture):
        samples = mixture.rvs(size=50_000, random_state=3)
        assert samples.shape == (50_000, 2)
        np.testing.assert_allclose(samples.mean(axis=0), mixture.mean(), atol=0.05)
        np.testing.assert_allclose(np.cov(samples, rowvar=False), mixture.cov(), atol=0.1)
        assert mixture.rvs(random_state=0).shape == (2,)

    def test_rvs_tuple_size(self, mixture):
        samples = mixture.rvs(size=(4, 5), random_state=4)
        assert samples.shape == (4, 5, 2)
        flat = mixture.rvs(size=20, random_state=4)
        np.testing.assert_array_equal(samples.reshape(20, 2), flat)

    def test_logpdf(self, mixture):
        x = np.array([[0.0, 0.0], [4.0, 1.0]])
        a, b = mixture.components
        expected = np.log(0.75 * a.pdf(x) + 0.25 * b.pdf(x))
        np.testing.assert_allclose(mixture.logpdf(x), expected, rtol=1e-12)
        assert isinstance(mixture.logpdf([0.0, 0.0]), float)

    def test_parameter_vector(self, mixture):
        vector = mixture.get_parameter_vector()
        assert vector.shape == (2 + 2 * 6,)
        np.testing.assert_array_equal(vector[:2], [3.0, 1.0])
        clone = mixture.copy().set_parameter_vector(vector)
        np.testing.assert_array_equal(clone.get_parameter_vector(), vector)
