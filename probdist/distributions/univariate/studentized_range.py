"""
Studentized range distribution.

Distribution of the range of ``treatment_count`` independent standard
normal variables divided by an independent scaled chi variable with ``dof``
degrees of freedom. It underlies Tukey's honestly significant difference
test.

The CDF and its inverse come from :data:`scipy.stats.studentized_range`.
The moments have no closed form and are estimated by Monte Carlo, fanning
the draws out over a thread pool with independent child generators.
"""

from concurrent.futures import ThreadPoolExecutor
from typing import Optional, Tuple, Union

import numpy as np
from numpy.typing import ArrayLike, NDArray
from scipy import stats

from probdist.base import Distribution
from probdist.params import StudentizedRangeParams
from probdist.distributions.univariate.gaussian import Gaussian
from probdist.distributions.univariate.student_t import StudentT

#: Degrees of freedom at or above which ranges are drawn from a Gaussian.
GAUSSIAN_DOF_THRESHOLD = 30.0

#: Monte Carlo sample count for :meth:`StudentizedRange.mean`;
#: :meth:`StudentizedRange.var` uses ten times as many.
DEFAULT_NUM_SAMPLES = 1000

#: Entropy of the seed sequence used by the moment estimates.
MOMENT_SEED = 2

#: Number of tasks the moment estimates are split into.
DEFAULT_NUM_TASKS = 4


class StudentizedRange(Distribution):
    """
    Studentized range distribution.

    Examples
    --------
    >>> dist = StudentizedRange.from_classical_params(treatment_count=3, dof=10.0)
    >>> q = dist.ppf(0.95)
    >>> abs(dist.cdf(q) - 0.95) < 1e-6
    True

    Notes
    -----
    :meth:`mean` and :meth:`var` are deterministic: they always draw from a
    ``numpy.random.SeedSequence(2)``. Parameter vector order is
    ``[treatment_count, dof]``; ``treatment_count`` is truncated to an
    integer when read from a vector.
    """

    _param_names = ('treatment_count', 'dof')

    def __init__(self):
        super().__init__()
        self._treatment_count: Optional[int] = None
        self._dof: Optional[float] = None

    def _set_from_classical(self, *, treatment_count=2, dof=np.inf) -> None:
        treatment_count = int(treatment_count)
        dof = float(dof)
        if treatment_count < 2:
            raise ValueError(f"Treatment count must be at least 2, got {treatment_count}")
        if not dof > 0:
            raise ValueError(f"Degrees of freedom must be positive, got {dof}")
        self._treatment_count = treatment_count
        self._dof = dof
        self._fitted = True
        self._invalidate_cache()

    def _compute_classical_params(self) -> StudentizedRangeParams:
        return StudentizedRangeParams(treatment_count=self._treatment_count, dof=self._dof)

    def _range_source(self) -> Distribution:
        if self._dof < GAUSSIAN_DOF_THRESHOLD:
            return StudentT.from_classical_params(dof=self._dof, mean=0.0, precision=1.0)
        return Gaussian.from_classical_params(mean=0.0, variance=1.0)

    def logpdf(self, x: ArrayLike) -> Union[float, NDArray[np.floating]]:
        self._check_fitted()
        x = np.asarray(x, dtype=float)
        result = stats.studentized_range.logpdf(x, self._treatment_count, self._dof)
        return self._wrap_output(x, np.asarray(result))

    def cdf(self, x: ArrayLike) -> Union[float, NDArray[np.floating]]:
        self._check_fitted()
        x = np.asarray(x, dtype=float)
        result = stats.studentized_range.cdf(x, self._treatment_count, self._dof)
        return self._wrap_output(x, np.asarray(result))

    def ppf(self, q: ArrayLike) -> Union[float, NDArray[np.floating]]:
        self._check_fitted()
        q = np.asarray(q, dtype=float)
        result = stats.studentized_range.ppf(q, self._treatment_count, self._dof)
        return self._wrap_output(q, np.asarray(result))

    def support(self) -> Tuple[float, float]:
        return (0.0, np.inf)

    def rvs(self, size=None, random_state=None) -> Union[float, NDArray]:
        """
        Sample as the range (max minus min) of ``treatment_count`` draws from
        a standard Student-t (``dof < 30``) or standard Gaussian.
        """
        self._check_fitted()
        rng = self._get_rng(random_state)
        shape = () if size is None else np.atleast_1d(size).tolist()
        draws = self._range_source().rvs(
            size=tuple(shape) + (self._treatment_count,), random_state=rng
        )
        ranges = np.max(draws, axis=-1) - np.min(draws, axis=-1)
        if size is None:
            return float(ranges)
        return ranges

    def _monte_carlo_sample(self, num_samples: int,
                            num_tasks: int = DEFAULT_NUM_TASKS) -> NDArray:
        """Draw ``num_samples`` ranges split over a thread pool."""
        children = np.random.SeedSequence(MOMENT_SEED).spawn(num_tasks)
        counts = [len(chunk) for chunk in np.array_split(np.arange(num_samples), num_tasks)]
        with ThreadPoolExecutor(max_workers=num_tasks) as executor:
            futures = [
                executor.submit(self.copy().rvs, count, np.random.default_rng(child))
                for count, child in zip(counts, children)
            ]
            return np.concatenate([future.result() for future in futures])

    def mean(self) -> float:
        """Monte Carlo estimate from ``DEFAULT_NUM_SAMPLES`` draws."""
        self._check_fitted()
        return float(np.mean(self._monte_carlo_sample(DEFAULT_NUM_SAMPLES)))

    def var(self) -> float:
        """Monte Carlo estimate (unbiased) from ``10 * DEFAULT_NUM_SAMPLES`` draws."""
        self._check_fitted()
        return float(np.var(self._monte_carlo_sample(10 * DEFAULT_NUM_SAMPLES), ddof=1))

    def fit(self, X: ArrayLike, y: Optional[ArrayLike] = None,
            sample_weight: Optional[ArrayLike] = None, **kwargs) -> 'StudentizedRange':
        """
        Not supported: the studentized range is a reference distribution
        for test statistics.

        Raises
        ------
        NotImplementedError
        """
        raise NotImplementedError("StudentizedRange does not support fitting")
