"""Reduction of simulated trajectories into summary statistics."""

import math
from collections.abc import Sequence
from dataclasses import dataclass

from retirement_mc.simulation import TrajectoryResult

CONFIDENCE_AGE_STEP = 5
EARLY_FAILURE_MARGIN = 5      # years before life expectancy
CRASH_RETURN_THRESHOLD = -0.3
DISTRIBUTION_BUCKETS = 20


@dataclass(frozen=True)
class SummaryStatistics:
    mean: float
    median: float
    standard_deviation: float
    min: float
    max: float
    successful_runs: int
    failed_runs: int
    average_depletion_age: float  # 0 when no run was depleted


@dataclass(frozen=True)
class PercentileTable:
    p5: float
    p10: float
    p25: float
    p50: float
    p75: float
    p90: float
    p95: float

    def as_dict(self) -> dict[int, float]:
        return {5: self.p5, 10: self.p10, 25: self.p25, 50: self.p50,
                75: self.p75, 90: self.p90, 95: self.p95}


@dataclass(frozen=True)
class ConfidenceInterval:
    age: int
    year: int
    lower95: float
    lower50: float
    median: float
    upper50: float
    upper95: float


@dataclass(frozen=True)
class RiskAnalysis:
    early_failure_rate: float    # depleted more than EARLY_FAILURE_MARGIN years before the end
    crash_exposure_rate: float   # at least one year below CRASH_RETURN_THRESHOLD
    failure_rate: float
    mean_max_drawdown: float


@dataclass(frozen=True)
class TypicalScenarios:
    conservative: TrajectoryResult
    moderate: TrajectoryResult
    optimistic: TrajectoryResult
    stress_test: TrajectoryResult


@dataclass(frozen=True)
class AggregateResult:
    statistics: SummaryStatistics
    percentiles: PercentileTable
    success_rate: float  # percent
    confidence_intervals: tuple[ConfidenceInterval, ...]
    risk: RiskAnalysis
    scenarios: TypicalScenarios
    distribution: tuple[tuple[float, float], ...]


def percentile(sorted_vals: Sequence[float], p: float) -> float:
    """Linearly interpolated percentile of a pre-sorted sequence.

    index = p/100 * (n-1), blended between the neighbouring order statistics.
    """
    n = len(sorted_vals)
    if n == 0:
        raise ValueError("percentile of an empty sample is undefined")
    index = p / 100 * (n - 1)
    lower = math.floor(index)
    upper = math.ceil(index)
    if lower == upper:
        return sorted_vals[lower]
    weight = index - lower
    return sorted_vals[lower] * (1 - weight) + sorted_vals[upper] * weight


def _mean(values: Sequence[float]) -> float:
    return sum(values) / len(values)


def summarize(trajectories: Sequence[TrajectoryResult], number_of_simulations: int) -> SummaryStatistics:
    finals = sorted(t.final_capital for t in trajectories)
    mean = _mean(finals)
    variance = sum((x - mean) ** 2 for x in finals) / len(finals)
    successful = sum(1 for t in trajectories if t.success)
    depletion_ages = [t.depletion_age for t in trajectories if t.depletion_age is not None]
    return SummaryStatistics(
        mean=mean,
        median=percentile(finals, 50),
        standard_deviation=math.sqrt(variance),
        min=finals[0],
        max=finals[-1],
        successful_runs=successful,
        failed_runs=number_of_simulations - successful,
        average_depletion_age=_mean(depletion_ages) if depletion_ages else 0,
    )


def percentile_table(final_capitals: Sequence[float]) -> PercentileTable:
    s = sorted(final_capitals)
    return PercentileTable(
        p5=percentile(s, 5),
        p10=percentile(s, 10),
        p25=percentile(s, 25),
        p50=percentile(s, 50),
        p75=percentile(s, 75),
        p90=percentile(s, 90),
        p95=percentile(s, 95),
    )


def confidence_intervals(
    trajectories: Sequence[TrajectoryResult],
    current_age: int,
    life_expectancy: int,
    start_year: int,
    step: int = CONFIDENCE_AGE_STEP,
) -> list[ConfidenceInterval]:
    """Cross-sectional capital bands every ``step`` years of age.

    Trajectories shorter than a sampled offset contribute nothing to it;
    ages nobody reached are left out.
    """
    intervals = []
    for age in range(current_age, life_expectancy + 1, step):
        offset = age - current_age
        capitals = sorted(t.years[offset].capital for t in trajectories if offset < len(t.years))
        if not capitals:
            continue
        intervals.append(ConfidenceInterval(
            age=age,
            year=start_year + offset,
            lower95=percentile(capitals, 2.5),
            lower50=percentile(capitals, 25),
            median=percentile(capitals, 50),
            upper50=percentile(capitals, 75),
            upper95=percentile(capitals, 97.5),
        ))
    return intervals


def risk_analysis(trajectories: Sequence[TrajectoryResult], life_expectancy: int) -> RiskAnalysis:
    n = len(trajectories)
    early = sum(
        1 for t in trajectories
        if t.depletion_age is not None and t.depletion_age < life_expectancy - EARLY_FAILURE_MARGIN
    )
    crashed = sum(1 for t in trajectories if any(r < CRASH_RETURN_THRESHOLD for r in t.returns))
    failed = sum(1 for t in trajectories if not t.success)
    return RiskAnalysis(
        early_failure_rate=early / n,
        crash_exposure_rate=crashed / n,
        failure_rate=failed / n,
        mean_max_drawdown=_mean([t.max_drawdown for t in trajectories]),
    )


def typical_scenarios(trajectories: Sequence[TrajectoryResult]) -> TypicalScenarios:
    """Representative runs picked by rank of final capital."""
    ranked = sorted(trajectories, key=lambda t: t.final_capital)

    def at(q: float) -> TrajectoryResult:
        return ranked[math.floor(q * (len(ranked) - 1))]

    return TypicalScenarios(
        conservative=at(0.25),
        moderate=at(0.50),
        optimistic=at(0.75),
        stress_test=at(0.05),
    )


def distribution(
    final_capitals: Sequence[float], buckets: int = DISTRIBUTION_BUCKETS,
) -> list[tuple[float, float]]:
    """Histogram of final capital as (bucket midpoint, probability)."""
    n = len(final_capitals)
    lo, hi = min(final_capitals), max(final_capitals)
    if hi == lo:
        return [(lo, 1.0)]
    width = (hi - lo) / buckets
    counts = [0] * buckets
    for v in final_capitals:
        counts[min(int((v - lo) / width), buckets - 1)] += 1
    return [(lo + (i + 0.5) * width, c / n) for i, c in enumerate(counts)]


def aggregate(
    trajectories: Sequence[TrajectoryResult],
    number_of_simulations: int,
    current_age: int,
    life_expectancy: int,
    start_year: int,
) -> AggregateResult:
    if not trajectories:
        raise ValueError("cannot aggregate an empty set of trajectories")
    finals = [t.final_capital for t in trajectories]
    stats = summarize(trajectories, number_of_simulations)
    return AggregateResult(
        statistics=stats,
        percentiles=percentile_table(finals),
        success_rate=stats.successful_runs / number_of_simulations * 100,
        confidence_intervals=tuple(confidence_intervals(
            trajectories, current_age, life_expectancy, start_year,
        )),
        risk=risk_analysis(trajectories, life_expectancy),
        scenarios=typical_scenarios(trajectories),
        distribution=tuple(distribution(finals)),
    )
