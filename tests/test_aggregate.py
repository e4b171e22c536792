"""Tests for percentile and aggregate statistics."""

import math

import pytest

from retirement_mc.aggregate import (
    aggregate,
    confidence_intervals,
    distribution,
    percentile,
    percentile_table,
    risk_analysis,
    summarize,
    typical_scenarios,
)
from retirement_mc.simulation import TrajectoryResult, YearlyState


def _trajectory(capitals, run_id=0, depletion_age=None, returns=None, start_age=60):
    years = tuple(
        YearlyState(year=2026 + i, age=start_age + i, capital=c, investment_return=0.0,
                    income=0.0, expenses=0.0, net_cash_flow=0.0)
        for i, c in enumerate(capitals)
    )
    final = capitals[-1]
    return TrajectoryResult(
        run_id=run_id,
        final_capital=final,
        depletion_age=depletion_age,
        success=final > 0,
        years=years,
        returns=tuple(returns if returns is not None else [0.05] * len(capitals)),
    )


class TestPercentile:
    def test_linear_interpolation(self):
        vals = [1.0, 2.0, 3.0, 4.0]
        assert percentile(vals, 50) == pytest.approx(2.5)
        assert percentile(vals, 25) == pytest.approx(1.75)
        assert percentile(vals, 90) == pytest.approx(3.7)

    def test_endpoints(self):
        vals = [10.0, 20.0, 30.0]
        assert percentile(vals, 0) == 10.0
        assert percentile(vals, 100) == 30.0
        assert percentile(vals, 50) == 20.0

    def test_not_nearest_rank(self):
        vals = [0.0, 100.0]
        assert percentile(vals, 5) == pytest.approx(5.0)
        assert percentile(vals, 97.5) == pytest.approx(97.5)

    def test_single_value(self):
        assert percentile([42.0], 5) == 42.0
        assert percentile([42.0], 95) == 42.0

    def test_empty_rejected(self):
        with pytest.raises(ValueError):
            percentile([], 50)


class TestPercentileTable:
    def test_monotonic(self):
        vals = [float(v * v % 97) for v in range(500)]
        table = percentile_table(vals)
        ordered = list(table.as_dict().values())
        assert ordered == sorted(ordered)

    def test_unsorted_input(self):
        table = percentile_table([5.0, 1.0, 3.0, 2.0, 4.0])
        assert table.p50 == 3.0
        assert table.p25 == 2.0
        assert table.p5 == pytest.approx(1.2)

    def test_as_dict_keys(self):
        table = percentile_table([1.0])
        assert list(table.as_dict()) == [5, 10, 25, 50, 75, 90, 95]


class TestSummarize:
    def setup_method(self):
        self.trajectories = [
            _trajectory([100.0, 0.0], run_id=0, depletion_age=61),
            _trajectory([50.0, 0.0], run_id=1, depletion_age=62),
            _trajectory([100.0, 300.0], run_id=2),
            _trajectory([100.0, 100.0], run_id=3),
        ]

    def test_statistics(self):
        s = summarize(self.trajectories, 4)
        assert s.mean == pytest.approx(100.0)
        assert s.median == pytest.approx(50.0)
        assert s.standard_deviation == pytest.approx(math.sqrt((100**2 * 2 + 200**2 + 0) / 4))
        assert s.min == 0.0
        assert s.max == 300.0

    def test_counts(self):
        s = summarize(self.trajectories, 4)
        assert s.successful_runs == 2
        assert s.failed_runs == 2
        assert s.successful_runs + s.failed_runs == 4

    def test_average_depletion_age(self):
        assert summarize(self.trajectories, 4).average_depletion_age == pytest.approx(61.5)

    def test_no_depletion_reports_zero(self):
        s = summarize(self.trajectories[2:], 2)
        assert s.average_depletion_age == 0
        assert not math.isnan(s.average_depletion_age)


class TestConfidenceIntervals:
    def test_sampled_every_five_years(self):
        trajectories = [_trajectory([float(i)] * 26, run_id=i) for i in range(10)]
        intervals = confidence_intervals(trajectories, 60, 85, 2026)
        assert [ci.age for ci in intervals] == [60, 65, 70, 75, 80, 85]
        assert [ci.year for ci in intervals] == [2026, 2031, 2036, 2041, 2046, 2051]

    def test_bands(self):
        trajectories = [_trajectory([float(i)] * 6, run_id=i) for i in range(101)]
        ci = confidence_intervals(trajectories, 60, 65, 2026)[1]
        assert ci.lower95 == pytest.approx(2.5)
        assert ci.lower50 == pytest.approx(25.0)
        assert ci.median == pytest.approx(50.0)
        assert ci.upper50 == pytest.approx(75.0)
        assert ci.upper95 == pytest.approx(97.5)

    def test_shorter_trajectories_contribute_nothing(self):
        long_run = _trajectory([10.0] * 11, run_id=0)
        short_run = _trajectory([0.0] * 3, run_id=1)
        intervals = confidence_intervals([long_run, short_run], 60, 70, 2026)
        assert intervals[0].median == pytest.approx(5.0)
        # only the long run reaches ages 65 and 70
        assert intervals[1].median == 10.0
        assert intervals[2].lower95 == 10.0

    def test_unreached_ages_omitted(self):
        intervals = confidence_intervals([_trajectory([1.0] * 3)], 60, 70, 2026)
        assert [ci.age for ci in intervals] == [60]

    def test_custom_step(self):
        intervals = confidence_intervals([_trajectory([1.0] * 11)], 60, 70, 2026, step=2)
        assert [ci.age for ci in intervals] == [60, 62, 64, 66, 68, 70]

    def test_band_ordering(self):
        trajectories = [_trajectory([float((i * 37) % 11)] * 6, run_id=i) for i in range(50)]
        for ci in confidence_intervals(trajectories, 60, 65, 2026):
            assert ci.lower95 <= ci.lower50 <= ci.median <= ci.upper50 <= ci.upper95


class TestRiskAnalysis:
    def test_rates(self):
        trajectories = [
            _trajectory([100.0, 0.0], depletion_age=70, returns=[-0.35, 0.1]),
            _trajectory([100.0, 0.0], depletion_age=82, returns=[0.0, 0.0]),
            _trajectory([100.0, 50.0], returns=[-0.29, 0.1]),
            _trajectory([100.0, 120.0], returns=[0.1, 0.1]),
        ]
        risk = risk_analysis(trajectories, life_expectancy=85)
        assert risk.early_failure_rate == pytest.approx(0.25)
        assert risk.crash_exposure_rate == pytest.approx(0.25)
        assert risk.failure_rate == pytest.approx(0.5)
        assert risk.mean_max_drawdown == pytest.approx((1.0 + 1.0 + 0.5 + 0.0) / 4)


class TestTypicalScenarios:
    def test_picks_by_rank(self):
        trajectories = [_trajectory([float(v)], run_id=i) for i, v in enumerate([50, 10, 40, 30, 20])]
        scenarios = typical_scenarios(trajectories)
        # ranked finals: 10, 20, 30, 40, 50 → indices floor(q*4)
        assert scenarios.stress_test.final_capital == 10.0
        assert scenarios.conservative.final_capital == 20.0
        assert scenarios.moderate.final_capital == 30.0
        assert scenarios.optimistic.final_capital == 40.0


class TestDistribution:
    def test_probabilities_sum_to_one(self):
        buckets = distribution([float(v) for v in range(100)])
        assert len(buckets) == 20
        assert sum(p for _, p in buckets) == pytest.approx(1.0)

    def test_maximum_in_last_bucket(self):
        buckets = distribution([0.0, 10.0], buckets=2)
        assert buckets == [(2.5, 0.5), (7.5, 0.5)]

    def test_constant_values(self):
        assert distribution([5.0, 5.0, 5.0]) == [(5.0, 1.0)]


class TestAggregate:
    def test_success_rate(self):
        trajectories = [_trajectory([1.0, 0.0], depletion_age=61), _trajectory([1.0, 2.0])] * 2
        result = aggregate(trajectories, 4, current_age=60, life_expectancy=61, start_year=2026)
        assert result.success_rate == 50.0
        assert 0 <= result.success_rate <= 100
        assert len(result.confidence_intervals) == 1
        assert result.percentiles.p50 == pytest.approx(1.0)

    def test_empty_rejected(self):
        with pytest.raises(ValueError):
            aggregate([], 0, current_age=60, life_expectancy=85, start_year=2026)
