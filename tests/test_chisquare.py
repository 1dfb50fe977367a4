import math
from concurrent.futures import ThreadPoolExecutor

import pytest

from id3tree.chisquare import (
    CHI_MAX,
    ChiSquare,
    ChiSquareCache,
    chi_square_tail_probability,
    critical_value,
    default_engine,
    normal_cdf,
)


class TestNormalCdf:
    @pytest.mark.parametrize(
        "z, expected",
        [(0.0, 0.5), (1.0, 0.8413447), (-1.0, 0.1586553), (1.96, 0.9750021), (-2.5758, 0.0050000), (3.0, 0.9986501)],
    )
    def test_known_values(self, z, expected):
        assert normal_cdf(z) == pytest.approx(expected, abs=1e-5)

    def test_saturates_beyond_six(self):
        assert normal_cdf(6.0) == 1.0
        assert normal_cdf(12.5) == 1.0
        assert normal_cdf(-6.0) == 0.0
        assert normal_cdf(-40.0) == 0.0

    def test_symmetry(self):
        for z in (0.3, 1.2, 2.7, 4.4):
            assert normal_cdf(z) + normal_cdf(-z) == pytest.approx(1.0, abs=1e-12)

    def test_one_degree_of_freedom_tail_is_two_lower_tails(self):
        for x in (0.5, 3.84, 10.0):
            assert chi_square_tail_probability(x, 1) == 2.0 * normal_cdf(-math.sqrt(x))


class TestChiSquareTailProbability:
    def test_non_positive_x_or_df_returns_one(self):
        assert chi_square_tail_probability(0.0, 3) == 1.0
        assert chi_square_tail_probability(-2.0, 3) == 1.0
        assert chi_square_tail_probability(5.0, 0) == 1.0
        assert chi_square_tail_probability(5.0, -1) == 1.0

    def test_two_degrees_of_freedom_is_exponential(self):
        for x in (0.5, 4.0, 10.0, 30.0):
            expected = math.exp(-x / 2) if x / 2 <= 20 else 0.0
            assert chi_square_tail_probability(x, 2) == pytest.approx(expected, abs=1e-12)

    def test_four_degrees_of_freedom_closed_form(self):
        # P(X > x) = exp(-x/2) * (1 + x/2)
        assert chi_square_tail_probability(6.0, 4) == pytest.approx(math.exp(-3.0) * 4.0, rel=1e-9)

    @pytest.mark.parametrize(
        "x, df, expected",
        [(3.841459, 1, 0.05), (5.991465, 2, 0.05), (6.634897, 1, 0.01), (18.307038, 10, 0.05), (11.344867, 3, 0.01)],
    )
    def test_textbook_table(self, x, df, expected):
        assert chi_square_tail_probability(x, df) == pytest.approx(expected, abs=1e-5)

    def test_large_arguments_use_log_domain_without_overflow(self):
        # x / 2 > 20 switches to the log-domain recurrence
        p = chi_square_tail_probability(50.892181, 30)
        assert p == pytest.approx(0.01, abs=1e-5)
        assert 0.0 <= chi_square_tail_probability(5000.0, 301) <= 1.0

    def test_log_domain_branch_is_continuous(self):
        below = chi_square_tail_probability(40.0, 25)
        above = chi_square_tail_probability(40.0001, 25)
        assert below == pytest.approx(above, abs=1e-5)

    def test_decreasing_in_x(self):
        values = [chi_square_tail_probability(x, 5) for x in (0.5, 1, 2, 5, 10, 20, 45, 80)]
        assert values == sorted(values, reverse=True)


class TestCriticalValue:
    @pytest.mark.parametrize(
        "p, df, expected",
        [(0.05, 1, 3.841459), (0.05, 2, 5.991465), (0.01, 1, 6.634897), (0.05, 10, 18.307038), (0.01, 30, 50.892181)],
    )
    def test_textbook_table(self, chi_square, p, df, expected):
        assert chi_square.critical_value(p, df) == pytest.approx(expected, abs=1e-3)

    def test_boundaries(self, chi_square):
        assert chi_square.critical_value(0.0, 3) == CHI_MAX
        assert chi_square.critical_value(-0.5, 3) == CHI_MAX
        assert chi_square.critical_value(1.0, 3) == 0.0
        assert chi_square.critical_value(1.5, 3) == 0.0
        # boundary answers are not cached
        assert len(chi_square.cache) == 0

    def test_zero_degrees_of_freedom_can_never_be_reached(self, chi_square):
        assert chi_square.critical_value(0.05, 0) > CHI_MAX - 1

    @pytest.mark.parametrize("df", [1, 2, 3, 4, 7, 10, 30])
    def test_inverts_tail_probability(self, chi_square, df):
        for p in (0.01, 0.05, 0.1, 0.25, 0.5, 0.75, 0.9):
            x = chi_square.critical_value(p, df)
            assert chi_square_tail_probability(x, df) == pytest.approx(p, abs=1e-5)

    @pytest.mark.parametrize("df", [1, 3, 12])
    def test_non_increasing_in_p(self, chi_square, df):
        ps = [0.001, 0.01, 0.05, 0.1, 0.3, 0.5, 0.8, 0.99]
        values = [chi_square.critical_value(p, df) for p in ps]
        assert values == sorted(values, reverse=True)

    def test_module_function_uses_default_engine(self):
        value = critical_value(0.05, 1)
        assert (0.05, 1) in default_engine().cache
        assert value == default_engine().critical_value(0.05, 1)


class TestCache:
    def test_results_are_memoized(self, chi_square):
        first = chi_square.critical_value(0.05, 4)
        assert (0.05, 4) in chi_square.cache
        assert chi_square.critical_value(0.05, 4) == first
        assert len(chi_square.cache) == 1

    def test_engines_do_not_share_entries(self):
        a, b = ChiSquare(), ChiSquare()
        a.critical_value(0.1, 2)
        assert len(a.cache) == 1
        assert len(b.cache) == 0

    def test_injected_cache_is_shared(self):
        cache = ChiSquareCache()
        ChiSquare(cache).critical_value(0.1, 2)
        assert (0.1, 2) in ChiSquare(cache).cache

    def test_get_or_compute_calls_once(self):
        cache = ChiSquareCache()
        calls = []

        def compute():
            calls.append(1)
            return 42.0

        assert cache.get_or_compute("k", compute) == 42.0
        assert cache.get_or_compute("k", compute) == 42.0
        assert len(calls) == 1
        cache.clear()
        assert cache.get("k") is None

    def test_concurrent_callers_agree(self, chi_square):
        keys = [(p, df) for p in (0.01, 0.05, 0.2) for df in (1, 2, 5)] * 8
        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(lambda k: (k, chi_square.critical_value(*k)), keys))

        by_key = {}
        for key, value in results:
            by_key.setdefault(key, set()).add(value)
        assert all(len(values) == 1 for values in by_key.values())
        assert len(chi_square.cache) == 9
